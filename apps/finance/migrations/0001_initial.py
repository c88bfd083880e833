from decimal import Decimal
from django.db import migrations, models
import django.core.validators
import django.utils.timezone
import uuid


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name='AccountBalance',
            fields=[
                ('id', models.PositiveSmallIntegerField(default=1, editable=False, primary_key=True, serialize=False)),
                ('bank_balance', models.DecimalField(decimal_places=2, default=Decimal('0.00'), help_text='May go negative; withdrawals mirror the bank statement', max_digits=14, verbose_name='Bank Balance')),
                ('petty_cash', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=14, verbose_name='Petty Cash')),
                ('last_updated', models.DateTimeField(default=django.utils.timezone.now, verbose_name='Last Updated')),
                ('updated_by_id', models.CharField(blank=True, max_length=50, null=True, verbose_name='Updated By ID')),
            ],
            options={
                'verbose_name': 'Account Balance',
                'verbose_name_plural': 'Account Balance',
            },
        ),
        migrations.CreateModel(
            name='BankTransaction',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('created_at', models.DateTimeField(db_index=True, editable=False, verbose_name='Created At')),
                ('updated_at', models.DateTimeField(db_index=True, editable=False, verbose_name='Updated At')),
                ('created_by_id', models.CharField(blank=True, db_index=True, help_text='ID of user who created this record', max_length=50, null=True, verbose_name='Created By ID')),
                ('updated_by_id', models.CharField(blank=True, db_index=True, help_text='ID of user who last updated this record', max_length=50, null=True, verbose_name='Updated By ID')),
                ('transaction_type', models.CharField(choices=[('deposit', 'Deposit'), ('withdraw', 'Withdraw')], db_index=True, max_length=10, verbose_name='Type')),
                ('date', models.DateField(db_index=True, default=django.utils.timezone.localdate, verbose_name='Date')),
                ('deposit_from', models.CharField(blank=True, max_length=100, verbose_name='Deposit From')),
                ('deposit_from_other', models.CharField(blank=True, max_length=200, verbose_name='Deposit From (Other)')),
                ('withdraw_purpose', models.CharField(blank=True, max_length=100, verbose_name='Withdraw Purpose')),
                ('withdraw_purpose_other', models.CharField(blank=True, max_length=200, verbose_name='Withdraw Purpose (Other)')),
                ('amount', models.DecimalField(decimal_places=2, max_digits=12, validators=[django.core.validators.MinValueValidator(Decimal('0.01'))], verbose_name='Amount')),
                ('notes', models.TextField(blank=True, verbose_name='Notes')),
                ('balance_after', models.DecimalField(decimal_places=2, max_digits=14, verbose_name='Bank Balance After')),
                ('petty_cash_after', models.DecimalField(blank=True, decimal_places=2, help_text='Only recorded when petty cash moved', max_digits=14, null=True, verbose_name='Petty Cash After')),
                ('recorded_by_id', models.CharField(db_index=True, max_length=50, verbose_name='Recorded By')),
            ],
            options={
                'verbose_name': 'Bank Transaction',
                'verbose_name_plural': 'Bank Transactions',
                'ordering': ['-date', '-created_at'],
                'indexes': [
                    models.Index(fields=['transaction_type', 'date'], name='finance_bank_type_date_idx'),
                ],
            },
        ),
        migrations.CreateModel(
            name='Income',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('created_at', models.DateTimeField(db_index=True, editable=False, verbose_name='Created At')),
                ('updated_at', models.DateTimeField(db_index=True, editable=False, verbose_name='Updated At')),
                ('created_by_id', models.CharField(blank=True, db_index=True, help_text='ID of user who created this record', max_length=50, null=True, verbose_name='Created By ID')),
                ('updated_by_id', models.CharField(blank=True, db_index=True, help_text='ID of user who last updated this record', max_length=50, null=True, verbose_name='Updated By ID')),
                ('date', models.DateField(db_index=True, verbose_name='Date')),
                ('source', models.CharField(db_index=True, max_length=100, verbose_name='Source')),
                ('amount', models.DecimalField(decimal_places=2, max_digits=12, validators=[django.core.validators.MinValueValidator(Decimal('0.00'))], verbose_name='Amount')),
                ('ref_type', models.CharField(choices=[('ADMISSION_FEE', 'Admission Fee'), ('DUE_COLLECTION', 'Due Collection'), ('MANUAL', 'Manual')], db_index=True, default='MANUAL', max_length=20, verbose_name='Reference Type')),
                ('ref_id', models.UUIDField(blank=True, null=True, verbose_name='Reference ID')),
                ('added_by_id', models.CharField(max_length=50, verbose_name='Added By')),
                ('note', models.TextField(blank=True, verbose_name='Note')),
            ],
            options={
                'verbose_name': 'Income',
                'verbose_name_plural': 'Income',
                'ordering': ['-date', '-created_at'],
            },
        ),
        migrations.CreateModel(
            name='Expense',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('created_at', models.DateTimeField(db_index=True, editable=False, verbose_name='Created At')),
                ('updated_at', models.DateTimeField(db_index=True, editable=False, verbose_name='Updated At')),
                ('created_by_id', models.CharField(blank=True, db_index=True, help_text='ID of user who created this record', max_length=50, null=True, verbose_name='Created By ID')),
                ('updated_by_id', models.CharField(blank=True, db_index=True, help_text='ID of user who last updated this record', max_length=50, null=True, verbose_name='Updated By ID')),
                ('date', models.DateField(db_index=True, verbose_name='Date')),
                ('purpose', models.CharField(max_length=200, verbose_name='Purpose')),
                ('amount', models.DecimalField(decimal_places=2, max_digits=12, validators=[django.core.validators.MinValueValidator(Decimal('0.00'))], verbose_name='Amount')),
                ('added_by_id', models.CharField(max_length=50, verbose_name='Added By')),
                ('note', models.TextField(blank=True, verbose_name='Note')),
            ],
            options={
                'verbose_name': 'Expense',
                'verbose_name_plural': 'Expenses',
                'ordering': ['-date', '-created_at'],
            },
        ),
        migrations.AddConstraint(
            model_name='income',
            constraint=models.UniqueConstraint(condition=models.Q(('ref_type', 'MANUAL'), _negated=True), fields=('ref_type', 'ref_id'), name='unique_income_per_reference'),
        ),
    ]

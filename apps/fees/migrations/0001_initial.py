from decimal import Decimal
from django.db import migrations, models
import django.core.validators
import django.db.models.deletion
import django.utils.timezone
import uuid


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('admissions', '0001_initial'),
    ]

    operations = [
        migrations.CreateModel(
            name='AdmissionFee',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('created_at', models.DateTimeField(db_index=True, editable=False, verbose_name='Created At')),
                ('updated_at', models.DateTimeField(db_index=True, editable=False, verbose_name='Updated At')),
                ('created_by_id', models.CharField(blank=True, db_index=True, help_text='ID of user who created this record', max_length=50, null=True, verbose_name='Created By ID')),
                ('updated_by_id', models.CharField(blank=True, db_index=True, help_text='ID of user who last updated this record', max_length=50, null=True, verbose_name='Updated By ID')),
                ('course_name', models.CharField(max_length=150, verbose_name='Course Name')),
                ('total_amount', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=12, validators=[django.core.validators.MinValueValidator(Decimal('0.00'))], verbose_name='Total Amount')),
                ('amount', models.DecimalField(decimal_places=2, max_digits=12, validators=[django.core.validators.MinValueValidator(Decimal('0.00'))], verbose_name='Amount Paid')),
                ('due_amount', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=12, verbose_name='Due Amount')),
                ('method', models.CharField(choices=[('BKASH', 'Bkash'), ('NAGAD', 'Nagad'), ('ROCKET', 'Rocket'), ('BANK_TRANSFER', 'Bank Transfer'), ('CASH', 'Cash on Hand')], max_length=20, verbose_name='Payment Method')),
                ('payment_date', models.DateField(db_index=True, verbose_name='Payment Date')),
                ('next_payment_date', models.DateField(blank=True, db_index=True, null=True, verbose_name='Next Payment Date')),
                ('note', models.TextField(blank=True, help_text='Append-only audit trail', verbose_name='Note')),
                ('status', models.CharField(choices=[('PENDING', 'Pending'), ('APPROVED', 'Approved'), ('REJECTED', 'Rejected')], db_index=True, default='PENDING', max_length=10, verbose_name='Status')),
                ('submitted_by_id', models.CharField(db_index=True, max_length=50, verbose_name='Submitted By')),
                ('reviewed_by_id', models.CharField(blank=True, max_length=50, null=True, verbose_name='Reviewed By')),
                ('reviewed_at', models.DateTimeField(blank=True, null=True, verbose_name='Reviewed At')),
                ('course', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='admission_fees', to='admissions.course', verbose_name='Course')),
                ('lead', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='admission_fees', to='admissions.lead', verbose_name='Lead')),
            ],
            options={
                'verbose_name': 'Admission Fee',
                'verbose_name_plural': 'Admission Fees',
                'ordering': ['-created_at'],
                'indexes': [
                    models.Index(fields=['lead', 'status'], name='fees_adm_lead_status_idx'),
                    models.Index(fields=['status', 'next_payment_date'], name='fees_adm_status_npd_idx'),
                ],
            },
        ),
        migrations.CreateModel(
            name='DueCollection',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('created_at', models.DateTimeField(db_index=True, editable=False, verbose_name='Created At')),
                ('updated_at', models.DateTimeField(db_index=True, editable=False, verbose_name='Updated At')),
                ('created_by_id', models.CharField(blank=True, db_index=True, help_text='ID of user who created this record', max_length=50, null=True, verbose_name='Created By ID')),
                ('updated_by_id', models.CharField(blank=True, db_index=True, help_text='ID of user who last updated this record', max_length=50, null=True, verbose_name='Updated By ID')),
                ('coordinator_id', models.CharField(db_index=True, max_length=50, verbose_name='Coordinator')),
                ('amount', models.DecimalField(decimal_places=2, max_digits=12, validators=[django.core.validators.MinValueValidator(Decimal('0.01'))], verbose_name='Amount')),
                ('payment_method', models.CharField(choices=[('CASH', 'Cash'), ('BANK_TRANSFER', 'Bank Transfer'), ('BKASH', 'Mobile Banking (bKash)'), ('NAGAD', 'Mobile Banking (Nagad)'), ('ROCKET', 'Mobile Banking (Rocket)'), ('CHEQUE', 'Cheque'), ('OTHER', 'Other')], default='CASH', max_length=20, verbose_name='Payment Method')),
                ('payment_date', models.DateField(verbose_name='Payment Date')),
                ('next_payment_date', models.DateField(blank=True, null=True, verbose_name='Next Payment Date')),
                ('note', models.TextField(blank=True, verbose_name='Note')),
                ('status', models.CharField(choices=[('PENDING', 'Pending'), ('APPROVED', 'Approved'), ('REJECTED', 'Rejected')], db_index=True, default='PENDING', max_length=10, verbose_name='Status')),
                ('reviewed_by_id', models.CharField(blank=True, max_length=50, null=True, verbose_name='Reviewed By')),
                ('reviewed_at', models.DateTimeField(blank=True, null=True, verbose_name='Reviewed At')),
                ('review_note', models.TextField(blank=True, verbose_name='Review Note')),
                ('submitted_at', models.DateTimeField(default=django.utils.timezone.now, verbose_name='Submitted At')),
                ('admission_fee', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='due_collections', to='fees.admissionfee', verbose_name='Admission Fee')),
                ('lead', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='due_collections', to='admissions.lead', verbose_name='Lead')),
            ],
            options={
                'verbose_name': 'Due Collection',
                'verbose_name_plural': 'Due Collections',
                'ordering': ['-submitted_at'],
                'indexes': [
                    models.Index(fields=['status', 'submitted_at'], name='fees_due_status_sub_idx'),
                    models.Index(fields=['coordinator_id', 'status'], name='fees_due_coord_status_idx'),
                ],
            },
        ),
        migrations.CreateModel(
            name='DueFeesFollowUp',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('created_at', models.DateTimeField(db_index=True, editable=False, verbose_name='Created At')),
                ('updated_at', models.DateTimeField(db_index=True, editable=False, verbose_name='Updated At')),
                ('created_by_id', models.CharField(blank=True, db_index=True, help_text='ID of user who created this record', max_length=50, null=True, verbose_name='Created By ID')),
                ('updated_by_id', models.CharField(blank=True, db_index=True, help_text='ID of user who last updated this record', max_length=50, null=True, verbose_name='Updated By ID')),
                ('coordinator_id', models.CharField(db_index=True, max_length=50, verbose_name='Coordinator')),
                ('follow_up_type', models.CharField(choices=[('CALL', 'Call'), ('SMS', 'SMS'), ('EMAIL', 'Email'), ('VISIT', 'Visit'), ('WHATSAPP', 'WhatsApp'), ('OTHER', 'Other')], max_length=10, verbose_name='Follow-up Type')),
                ('note', models.TextField(verbose_name='Note')),
                ('previous_next_payment_date', models.DateField(blank=True, null=True, verbose_name='Previous Next Payment Date')),
                ('updated_next_payment_date', models.DateField(blank=True, null=True, verbose_name='Updated Next Payment Date')),
                ('amount_promised', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=12, verbose_name='Amount Promised')),
                ('contacted_at', models.DateTimeField(default=django.utils.timezone.now, verbose_name='Contacted At')),
                ('admission_fee', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='follow_ups', to='fees.admissionfee', verbose_name='Admission Fee')),
                ('lead', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='due_follow_ups', to='admissions.lead', verbose_name='Lead')),
            ],
            options={
                'verbose_name': 'Due Fees Follow-up',
                'verbose_name_plural': 'Due Fees Follow-ups',
                'ordering': ['-contacted_at'],
                'indexes': [
                    models.Index(fields=['coordinator_id', 'contacted_at'], name='fees_fu_coord_contact_idx'),
                ],
            },
        ),
    ]

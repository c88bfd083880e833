from decimal import Decimal
from django.db import migrations, models
import django.core.validators
import django.db.models.deletion
import django.utils.timezone
import uuid


class Migration(migrations.Migration):

    initial = True

    dependencies = [
    ]

    operations = [
        migrations.CreateModel(
            name='Course',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('created_at', models.DateTimeField(db_index=True, editable=False, verbose_name='Created At')),
                ('updated_at', models.DateTimeField(db_index=True, editable=False, verbose_name='Updated At')),
                ('created_by_id', models.CharField(blank=True, db_index=True, help_text='ID of user who created this record', max_length=50, null=True, verbose_name='Created By ID')),
                ('updated_by_id', models.CharField(blank=True, db_index=True, help_text='ID of user who last updated this record', max_length=50, null=True, verbose_name='Updated By ID')),
                ('name', models.CharField(max_length=150, unique=True, verbose_name='Course Name')),
                ('code', models.CharField(blank=True, max_length=20, verbose_name='Course Code')),
                ('fee', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=12, validators=[django.core.validators.MinValueValidator(Decimal('0.00'))], verbose_name='Course Fee')),
                ('is_active', models.BooleanField(default=True, verbose_name='Active')),
            ],
            options={
                'verbose_name': 'Course',
                'verbose_name_plural': 'Courses',
                'ordering': ['name'],
            },
        ),
        migrations.CreateModel(
            name='Batch',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('created_at', models.DateTimeField(db_index=True, editable=False, verbose_name='Created At')),
                ('updated_at', models.DateTimeField(db_index=True, editable=False, verbose_name='Updated At')),
                ('created_by_id', models.CharField(blank=True, db_index=True, help_text='ID of user who created this record', max_length=50, null=True, verbose_name='Created By ID')),
                ('updated_by_id', models.CharField(blank=True, db_index=True, help_text='ID of user who last updated this record', max_length=50, null=True, verbose_name='Updated By ID')),
                ('name', models.CharField(max_length=100, verbose_name='Batch Name')),
                ('start_date', models.DateField(blank=True, null=True, verbose_name='Start Date')),
                ('is_active', models.BooleanField(default=True, verbose_name='Active')),
                ('course', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='batches', to='admissions.course')),
            ],
            options={
                'verbose_name': 'Batch',
                'verbose_name_plural': 'Batches',
                'ordering': ['course__name', 'name'],
            },
        ),
        migrations.CreateModel(
            name='SequenceCounter',
            fields=[
                ('key', models.CharField(max_length=60, primary_key=True, serialize=False, verbose_name='Key')),
                ('value', models.PositiveIntegerField(default=0, verbose_name='Value')),
                ('updated_at', models.DateTimeField(auto_now=True, verbose_name='Updated At')),
            ],
            options={
                'verbose_name': 'Sequence Counter',
                'verbose_name_plural': 'Sequence Counters',
            },
        ),
        migrations.CreateModel(
            name='Lead',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('created_at', models.DateTimeField(db_index=True, editable=False, verbose_name='Created At')),
                ('updated_at', models.DateTimeField(db_index=True, editable=False, verbose_name='Updated At')),
                ('created_by_id', models.CharField(blank=True, db_index=True, help_text='ID of user who created this record', max_length=50, null=True, verbose_name='Created By ID')),
                ('updated_by_id', models.CharField(blank=True, db_index=True, help_text='ID of user who last updated this record', max_length=50, null=True, verbose_name='Updated By ID')),
                ('lead_id', models.CharField(editable=False, help_text='Human readable identifier, e.g. LEAD-2025-PCC-00042', max_length=40, unique=True, verbose_name='Lead ID')),
                ('entry_date', models.DateField(default=django.utils.timezone.localdate, verbose_name='Entry Date')),
                ('name', models.CharField(max_length=150, verbose_name='Name')),
                ('phone', models.CharField(blank=True, db_index=True, max_length=30, verbose_name='Phone')),
                ('email', models.EmailField(blank=True, db_index=True, max_length=254, verbose_name='Email')),
                ('interested_course', models.CharField(blank=True, max_length=150, verbose_name='Interested Course')),
                ('source', models.CharField(choices=[('META', 'Meta Lead'), ('LINKEDIN', 'LinkedIn Lead'), ('MANUAL', 'Manually Generated Lead'), ('OTHERS', 'Others')], default='OTHERS', max_length=20, verbose_name='Source')),
                ('priority', models.CharField(choices=[('LOW', 'Low'), ('MEDIUM', 'Medium'), ('HIGH', 'High')], default='MEDIUM', max_length=10, verbose_name='Priority')),
                ('status', models.CharField(choices=[('ASSIGNED', 'Assigned'), ('COUNSELING', 'Counseling'), ('IN_FOLLOW_UP', 'In Follow Up'), ('ADMITTED', 'Admitted'), ('NOT_ADMITTED', 'Not Admitted')], db_index=True, default='ASSIGNED', max_length=20, verbose_name='Status')),
                ('assigned_to_id', models.CharField(blank=True, db_index=True, help_text='User id of the admission officer owning this lead', max_length=50, null=True, verbose_name='Assigned To')),
                ('assigned_by_id', models.CharField(blank=True, max_length=50, null=True, verbose_name='Assigned By')),
                ('assigned_at', models.DateTimeField(blank=True, null=True, verbose_name='Assigned At')),
                ('counseling_at', models.DateTimeField(blank=True, null=True, verbose_name='Counseling At')),
                ('admitted_at', models.DateTimeField(blank=True, null=True, verbose_name='Admitted At')),
                ('next_follow_up_date', models.DateField(blank=True, null=True, verbose_name='Next Follow-up Date')),
                ('notes', models.TextField(blank=True, verbose_name='Notes')),
                ('custom_fields', models.JSONField(blank=True, default=dict, verbose_name='Custom Fields')),
                ('admitted_to_batch', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='admitted_leads', to='admissions.batch')),
                ('admitted_to_course', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='admitted_leads', to='admissions.course')),
            ],
            options={
                'verbose_name': 'Lead',
                'verbose_name_plural': 'Leads',
                'ordering': ['-created_at'],
                'indexes': [
                    models.Index(fields=['status', 'assigned_to_id'], name='admissions_status_assign_idx'),
                    models.Index(fields=['next_follow_up_date'], name='admissions_next_fu_idx'),
                ],
            },
        ),
        migrations.CreateModel(
            name='LeadFollowUp',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('created_at', models.DateTimeField(db_index=True, editable=False, verbose_name='Created At')),
                ('updated_at', models.DateTimeField(db_index=True, editable=False, verbose_name='Updated At')),
                ('created_by_id', models.CharField(blank=True, db_index=True, help_text='ID of user who created this record', max_length=50, null=True, verbose_name='Created By ID')),
                ('updated_by_id', models.CharField(blank=True, db_index=True, help_text='ID of user who last updated this record', max_length=50, null=True, verbose_name='Updated By ID')),
                ('note', models.TextField(verbose_name='Note')),
                ('actor_id', models.CharField(blank=True, max_length=50, verbose_name='Noted By')),
                ('actor_name', models.CharField(blank=True, max_length=150, verbose_name='Noted By Name')),
                ('noted_at', models.DateTimeField(default=django.utils.timezone.now, verbose_name='Noted At')),
                ('lead', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='follow_ups', to='admissions.lead')),
            ],
            options={
                'verbose_name': 'Lead Follow-up',
                'verbose_name_plural': 'Lead Follow-ups',
                'ordering': ['noted_at', 'created_at'],
            },
        ),
        migrations.CreateModel(
            name='BatchMembership',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('created_at', models.DateTimeField(db_index=True, editable=False, verbose_name='Created At')),
                ('updated_at', models.DateTimeField(db_index=True, editable=False, verbose_name='Updated At')),
                ('created_by_id', models.CharField(blank=True, db_index=True, help_text='ID of user who created this record', max_length=50, null=True, verbose_name='Created By ID')),
                ('updated_by_id', models.CharField(blank=True, db_index=True, help_text='ID of user who last updated this record', max_length=50, null=True, verbose_name='Updated By ID')),
                ('admitted_at', models.DateTimeField(default=django.utils.timezone.now, verbose_name='Admitted At')),
                ('batch', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='memberships', to='admissions.batch')),
                ('lead', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='batch_memberships', to='admissions.lead')),
            ],
            options={
                'verbose_name': 'Batch Membership',
                'verbose_name_plural': 'Batch Memberships',
                'ordering': ['batch', 'admitted_at'],
            },
        ),
        migrations.AddConstraint(
            model_name='batch',
            constraint=models.UniqueConstraint(fields=('course', 'name'), name='unique_batch_name_per_course'),
        ),
        migrations.AddConstraint(
            model_name='batchmembership',
            constraint=models.UniqueConstraint(fields=('batch', 'lead'), name='unique_lead_per_batch'),
        ),
    ]

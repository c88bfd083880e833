from django.db import migrations, models
import django.utils.timezone
import uuid


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name='ActivityLog',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('timestamp', models.DateTimeField(db_index=True, default=django.utils.timezone.now, verbose_name='Timestamp')),
                ('user_id', models.CharField(blank=True, db_index=True, max_length=50, verbose_name='User ID')),
                ('user_name', models.CharField(blank=True, max_length=150, verbose_name='User Name')),
                ('user_role', models.CharField(blank=True, max_length=30, verbose_name='User Role')),
                ('action', models.CharField(choices=[('CREATE', 'Create'), ('UPDATE', 'Update'), ('DELETE', 'Delete'), ('APPROVE', 'Approve'), ('REJECT', 'Reject'), ('CANCEL', 'Cancel'), ('TRANSITION', 'Status Transition'), ('UNDO', 'Undo')], db_index=True, max_length=15, verbose_name='Action')),
                ('resource_type', models.CharField(db_index=True, max_length=50, verbose_name='Resource Type')),
                ('resource_id', models.CharField(blank=True, max_length=50, verbose_name='Resource ID')),
                ('resource_name', models.CharField(blank=True, max_length=255, verbose_name='Resource Name')),
                ('description', models.TextField(blank=True, verbose_name='Description')),
                ('ip_address', models.GenericIPAddressField(blank=True, null=True, verbose_name='IP Address')),
                ('endpoint', models.CharField(blank=True, max_length=255, verbose_name='Endpoint')),
                ('method', models.CharField(blank=True, max_length=10, verbose_name='Method')),
            ],
            options={
                'verbose_name': 'Activity Log',
                'verbose_name_plural': 'Activity Logs',
                'ordering': ['-timestamp'],
                'indexes': [
                    models.Index(fields=['user_id', 'timestamp'], name='utils_activ_user_id_3f1a2b_idx'),
                    models.Index(fields=['action', 'timestamp'], name='utils_activ_action_8c4d5e_idx'),
                    models.Index(fields=['resource_type', 'timestamp'], name='utils_activ_resourc_6b7e9f_idx'),
                ],
            },
        ),
    ]

# Initial schema: provinces, profiles and the audit log

from django.conf import settings
from django.db import migrations, models
import django.db.models.deletion
import django.utils.timezone
import uuid

import apps.core.dominican


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='Province',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, help_text='Unique identifier (UUID)', primary_key=True, serialize=False, verbose_name='ID')),
                ('created_at', models.DateTimeField(default=django.utils.timezone.now, editable=False, help_text='Timestamp when record was created', verbose_name='Created At')),
                ('updated_at', models.DateTimeField(auto_now=True, help_text='Timestamp when record was last updated', verbose_name='Updated At')),
                ('name', models.CharField(max_length=100, verbose_name='Name')),
                ('code', models.CharField(help_text='ISO 3166-2:DO numeric code', max_length=2, unique=True, verbose_name='Code')),
                ('slug', models.SlugField(max_length=100, unique=True, verbose_name='Slug')),
                ('latitude', models.DecimalField(blank=True, decimal_places=6, max_digits=9, null=True, verbose_name='Latitude')),
                ('longitude', models.DecimalField(blank=True, decimal_places=6, max_digits=9, null=True, verbose_name='Longitude')),
            ],
            options={
                'verbose_name': 'Province',
                'verbose_name_plural': 'Provinces',
                'db_table': 'provinces',
                'ordering': ['name'],
            },
        ),
        migrations.CreateModel(
            name='Profile',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, help_text='Unique identifier (UUID)', primary_key=True, serialize=False, verbose_name='ID')),
                ('created_at', models.DateTimeField(default=django.utils.timezone.now, editable=False, help_text='Timestamp when record was created', verbose_name='Created At')),
                ('updated_at', models.DateTimeField(auto_now=True, help_text='Timestamp when record was last updated', verbose_name='Updated At')),
                ('role', models.CharField(choices=[('user', 'User'), ('author', 'Author'), ('moderator', 'Moderator'), ('editor', 'Editor'), ('admin', 'Administrator')], db_index=True, default='user', help_text='User role determining permissions', max_length=20, verbose_name='Role')),
                ('phone', models.CharField(blank=True, help_text='Dominican phone number (809/829/849)', max_length=20, validators=[apps.core.dominican.validate_dominican_phone], verbose_name='Phone')),
                ('preferences', models.JSONField(blank=True, default=dict, help_text='Notification and display preferences', verbose_name='Preferences')),
                ('last_active_at', models.DateTimeField(blank=True, help_text='When user was last active', null=True, verbose_name='Last Active')),
                ('province', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='profiles', to='core.province', verbose_name='Province')),
                ('user', models.OneToOneField(help_text='The associated Django user account', on_delete=django.db.models.deletion.CASCADE, related_name='profile', to=settings.AUTH_USER_MODEL, verbose_name='User')),
            ],
            options={
                'verbose_name': 'Profile',
                'verbose_name_plural': 'Profiles',
                'db_table': 'profiles',
            },
        ),
        migrations.CreateModel(
            name='AuditLog',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, help_text='Unique identifier (UUID)', primary_key=True, serialize=False, verbose_name='ID')),
                ('created_at', models.DateTimeField(default=django.utils.timezone.now, editable=False, help_text='Timestamp when record was created', verbose_name='Created At')),
                ('updated_at', models.DateTimeField(auto_now=True, help_text='Timestamp when record was last updated', verbose_name='Updated At')),
                ('action', models.CharField(choices=[('create', 'Create'), ('update', 'Update'), ('delete', 'Delete'), ('login', 'Login'), ('logout', 'Logout'), ('submit', 'Submit'), ('approve', 'Approve'), ('reject', 'Reject'), ('request_changes', 'Request Changes'), ('publish', 'Publish'), ('restore', 'Restore'), ('moderate', 'Moderate'), ('expire', 'Expire')], db_index=True, max_length=30, verbose_name='Action')),
                ('entity_type', models.CharField(db_index=True, max_length=50, verbose_name='Entity Type')),
                ('entity_id', models.CharField(blank=True, db_index=True, max_length=64, verbose_name='Entity ID')),
                ('changes', models.JSONField(blank=True, default=dict, help_text='Field-level before/after values', verbose_name='Changes')),
                ('ip_address', models.GenericIPAddressField(blank=True, null=True, verbose_name='IP Address')),
                ('user_agent', models.TextField(blank=True, verbose_name='User Agent')),
                ('details', models.TextField(blank=True, verbose_name='Details')),
                ('success', models.BooleanField(default=True, verbose_name='Success')),
                ('actor', models.ForeignKey(blank=True, help_text='User who performed the action (empty for system jobs)', null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='audit_logs', to=settings.AUTH_USER_MODEL, verbose_name='Actor')),
            ],
            options={
                'verbose_name': 'Audit Log',
                'verbose_name_plural': 'Audit Logs',
                'db_table': 'audit_logs',
                'ordering': ['-created_at'],
                'indexes': [
                    models.Index(fields=['entity_type', 'entity_id'], name='audit_logs_entity_idx'),
                    models.Index(fields=['created_at', 'action'], name='audit_logs_created_action_idx'),
                ],
            },
        ),
    ]

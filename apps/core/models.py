"""
Core models for the SafraReport project.
Base classes, user profiles, provinces and the audit trail.
"""

import uuid
from datetime import timedelta

from django.conf import settings
from django.db import models
from django.db.models.signals import post_save
from django.dispatch import receiver
from django.utils import timezone

from apps.core.dominican import validate_dominican_phone


class BaseModel(models.Model):
    """
    Abstract base model with common fields for all SafraReport models.
    Provides UUID primary key and timestamp tracking.
    """
    id = models.UUIDField(
        primary_key=True,
        default=uuid.uuid4,
        editable=False,
        verbose_name='ID',
        help_text='Unique identifier (UUID)'
    )

    created_at = models.DateTimeField(
        default=timezone.now,
        editable=False,
        verbose_name='Created At',
        help_text='Timestamp when record was created'
    )

    updated_at = models.DateTimeField(
        auto_now=True,
        verbose_name='Updated At',
        help_text='Timestamp when record was last updated'
    )

    class Meta:
        abstract = True
        ordering = ['-created_at']

    def __str__(self):
        return f"{self.__class__.__name__} ({self.id})"


class Province(BaseModel):
    """One of the 32 first-level divisions of the Dominican Republic."""

    name = models.CharField(
        max_length=100,
        verbose_name='Name'
    )

    code = models.CharField(
        max_length=2,
        unique=True,
        verbose_name='Code',
        help_text='ISO 3166-2:DO numeric code'
    )

    slug = models.SlugField(
        max_length=100,
        unique=True,
        verbose_name='Slug'
    )

    latitude = models.DecimalField(
        max_digits=9,
        decimal_places=6,
        null=True,
        blank=True,
        verbose_name='Latitude'
    )

    longitude = models.DecimalField(
        max_digits=9,
        decimal_places=6,
        null=True,
        blank=True,
        verbose_name='Longitude'
    )

    class Meta:
        db_table = 'provinces'
        verbose_name = 'Province'
        verbose_name_plural = 'Provinces'
        ordering = ['name']

    def __str__(self):
        return self.name


class Profile(BaseModel):
    """
    Extended profile for every account, readers and newsroom staff alike.
    Linked 1:1 with Django User model.
    """

    ROLE_CHOICES = [
        ('user', 'User'),
        ('author', 'Author'),
        ('moderator', 'Moderator'),
        ('editor', 'Editor'),
        ('admin', 'Administrator'),
    ]

    STAFF_ROLES = ('author', 'moderator', 'editor', 'admin')

    user = models.OneToOneField(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='profile',
        verbose_name='User',
        help_text='The associated Django user account'
    )

    role = models.CharField(
        max_length=20,
        choices=ROLE_CHOICES,
        default='user',
        db_index=True,
        verbose_name='Role',
        help_text='User role determining permissions'
    )

    phone = models.CharField(
        max_length=20,
        blank=True,
        validators=[validate_dominican_phone],
        verbose_name='Phone',
        help_text='Dominican phone number (809/829/849)'
    )

    province = models.ForeignKey(
        Province,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='profiles',
        verbose_name='Province'
    )

    preferences = models.JSONField(
        default=dict,
        blank=True,
        verbose_name='Preferences',
        help_text='Notification and display preferences'
    )

    last_active_at = models.DateTimeField(
        null=True,
        blank=True,
        verbose_name='Last Active',
        help_text='When user was last active'
    )

    class Meta:
        db_table = 'profiles'
        verbose_name = 'Profile'
        verbose_name_plural = 'Profiles'

    def __str__(self):
        return f"{self.user.username} ({self.role})"

    @property
    def is_admin(self):
        """Check if user has admin role."""
        return self.role == 'admin' or self.user.is_superuser

    @property
    def is_staff_member(self):
        """Check if user belongs to the newsroom or moderation team."""
        return self.role in self.STAFF_ROLES or self.user.is_superuser


@receiver(post_save, sender=settings.AUTH_USER_MODEL)
def create_profile(sender, instance, created, **kwargs):
    """Auto-create Profile when a new User is created."""
    if created:
        Profile.objects.get_or_create(
            user=instance,
            defaults={'role': 'admin' if instance.is_superuser else 'user'},
        )


class AuditLog(BaseModel):
    """
    Append-only record of privileged actions.

    Written by apps.core.audit.record_audit.
    """

    ACTION_CHOICES = [
        ('create', 'Create'),
        ('update', 'Update'),
        ('delete', 'Delete'),
        ('login', 'Login'),
        ('logout', 'Logout'),
        ('submit', 'Submit'),
        ('approve', 'Approve'),
        ('reject', 'Reject'),
        ('request_changes', 'Request Changes'),
        ('publish', 'Publish'),
        ('restore', 'Restore'),
        ('moderate', 'Moderate'),
        ('expire', 'Expire'),
    ]

    actor = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='audit_logs',
        verbose_name='Actor',
        help_text='User who performed the action (empty for system jobs)'
    )

    action = models.CharField(
        max_length=30,
        choices=ACTION_CHOICES,
        db_index=True,
        verbose_name='Action'
    )

    entity_type = models.CharField(
        max_length=50,
        db_index=True,
        verbose_name='Entity Type'
    )

    entity_id = models.CharField(
        max_length=64,
        blank=True,
        db_index=True,
        verbose_name='Entity ID'
    )

    changes = models.JSONField(
        default=dict,
        blank=True,
        verbose_name='Changes',
        help_text='Field-level before/after values'
    )

    ip_address = models.GenericIPAddressField(
        null=True,
        blank=True,
        verbose_name='IP Address'
    )

    user_agent = models.TextField(
        blank=True,
        verbose_name='User Agent'
    )

    details = models.TextField(
        blank=True,
        verbose_name='Details'
    )

    success = models.BooleanField(
        default=True,
        verbose_name='Success'
    )

    class Meta:
        db_table = 'audit_logs'
        verbose_name = 'Audit Log'
        verbose_name_plural = 'Audit Logs'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['entity_type', 'entity_id'], name='audit_logs_entity_idx'),
            models.Index(fields=['created_at', 'action'], name='audit_logs_created_action_idx'),
        ]

    def __str__(self):
        who = self.actor.username if self.actor else 'system'
        return f"{who} {self.action} {self.entity_type}:{self.entity_id}"

    @classmethod
    def get_summary(cls, days=7):
        """Action counts over the last ``days`` days."""
        from django.db.models import Count

        cutoff = timezone.now() - timedelta(days=days)
        rows = cls.objects.filter(created_at__gte=cutoff).values('action').annotate(
            count=Count('id'),
            failures=Count('id', filter=models.Q(success=False)),
        ).order_by('-count')

        return {
            'days': days,
            'total': sum(row['count'] for row in rows),
            'by_action': list(rows),
        }

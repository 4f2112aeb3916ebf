"""
Classified ad models for the SafraReport project.
"""

from django.conf import settings
from django.db import models
from django.utils import timezone

from apps.core.dominican import format_dop, unique_slug, validate_dominican_phone
from apps.core.models import BaseModel


class ClassifiedCategory(BaseModel):
    """Classifieds section (Vehículos, Inmuebles, Empleos ...)."""

    name = models.CharField(
        max_length=100,
        verbose_name='Name'
    )

    slug = models.SlugField(
        max_length=100,
        unique=True,
        verbose_name='Slug'
    )

    icon = models.CharField(
        max_length=50,
        blank=True,
        verbose_name='Icon'
    )

    description = models.TextField(
        blank=True,
        verbose_name='Description'
    )

    class Meta:
        db_table = 'classified_categories'
        ordering = ['name']
        verbose_name = 'Classified Category'
        verbose_name_plural = 'Classified Categories'

    def __str__(self):
        return self.name

    def save(self, *args, **kwargs):
        if not self.slug:
            self.slug = unique_slug(ClassifiedCategory, self.name, exclude_pk=self.pk, max_length=100)
        super().save(*args, **kwargs)


class Classified(BaseModel):
    """
    A user-submitted classified ad.

    Listed publicly only while ``approved`` and not past ``expires_at``.
    ``status`` is only changed through ClassifiedStateMachine.
    """

    class Status(models.TextChoices):
        PENDING = 'pending', 'Pending'
        APPROVED = 'approved', 'Approved'
        REJECTED = 'rejected', 'Rejected'
        EXPIRED = 'expired', 'Expired'

    class Condition(models.TextChoices):
        NEW = 'new', 'New'
        USED = 'used', 'Used'
        REFURBISHED = 'refurbished', 'Refurbished'

    title = models.CharField(
        max_length=200,
        verbose_name='Title'
    )

    slug = models.SlugField(
        max_length=200,
        unique=True,
        verbose_name='Slug'
    )

    description = models.TextField(
        verbose_name='Description'
    )

    # Pricing
    price = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        null=True,
        blank=True,
        verbose_name='Price'
    )

    currency = models.CharField(
        max_length=3,
        default='DOP',
        verbose_name='Currency'
    )

    negotiable = models.BooleanField(
        default=False,
        verbose_name='Negotiable'
    )

    # Classification
    category = models.ForeignKey(
        ClassifiedCategory,
        on_delete=models.PROTECT,
        related_name='classifieds',
        verbose_name='Category'
    )

    province = models.ForeignKey(
        'core.Province',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='classifieds',
        verbose_name='Province'
    )

    # Contact
    contact_name = models.CharField(
        max_length=100,
        verbose_name='Contact Name'
    )

    contact_phone = models.CharField(
        max_length=20,
        validators=[validate_dominican_phone],
        verbose_name='Contact Phone'
    )

    contact_whatsapp = models.CharField(
        max_length=20,
        blank=True,
        validators=[validate_dominican_phone],
        verbose_name='WhatsApp'
    )

    contact_email = models.EmailField(
        blank=True,
        verbose_name='Contact Email'
    )

    # Item
    condition = models.CharField(
        max_length=20,
        choices=Condition.choices,
        blank=True,
        verbose_name='Condition'
    )

    delivery_available = models.BooleanField(
        default=False,
        verbose_name='Delivery Available'
    )

    images = models.JSONField(
        default=list,
        blank=True,
        verbose_name='Images'
    )

    # Moderation
    status = models.CharField(
        max_length=20,
        choices=Status.choices,
        default=Status.PENDING,
        db_index=True,
        verbose_name='Status'
    )

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='classifieds',
        verbose_name='Owner'
    )

    expires_at = models.DateTimeField(
        null=True,
        blank=True,
        db_index=True,
        verbose_name='Expires At'
    )

    moderated_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='moderated_classifieds',
        verbose_name='Moderated By'
    )

    moderated_at = models.DateTimeField(
        null=True,
        blank=True,
        verbose_name='Moderated At'
    )

    rejection_reason = models.TextField(
        blank=True,
        verbose_name='Rejection Reason'
    )

    metadata = models.JSONField(
        default=dict,
        blank=True,
        verbose_name='Metadata'
    )

    class Meta:
        db_table = 'classifieds'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['status', 'expires_at'], name='classifieds_status_expires_idx'),
        ]
        verbose_name = 'Classified'
        verbose_name_plural = 'Classifieds'

    def __str__(self):
        return self.title

    def save(self, *args, **kwargs):
        if not self.slug:
            self.slug = unique_slug(Classified, self.title, exclude_pk=self.pk)
        super().save(*args, **kwargs)

    @property
    def price_display(self):
        if self.price is None:
            return 'A convenir'
        return format_dop(self.price)

    @property
    def is_active(self):
        return (
            self.status == self.Status.APPROVED
            and (self.expires_at is None or self.expires_at > timezone.now())
        )

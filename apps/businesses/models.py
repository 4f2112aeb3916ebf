"""
Business directory models for the SafraReport project.
Businesses, their categories and user reviews (reseñas).
"""

from django.conf import settings
from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models

from apps.core.dominican import unique_slug, validate_dominican_phone
from apps.core.models import BaseModel


class BusinessCategory(BaseModel):
    """Directory section (Restaurantes, Hoteles, Salud ...)."""

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
        db_table = 'business_categories'
        ordering = ['name']
        verbose_name = 'Business Category'
        verbose_name_plural = 'Business Categories'

    def __str__(self):
        return self.name

    def save(self, *args, **kwargs):
        if not self.slug:
            self.slug = unique_slug(BusinessCategory, self.name, exclude_pk=self.pk, max_length=100)
        super().save(*args, **kwargs)


class Business(BaseModel):
    """
    A listed business.

    ``rating`` and ``review_count`` are aggregates of approved reviews,
    recomputed by ReviewModerationService.
    """

    name = models.CharField(
        max_length=200,
        verbose_name='Name'
    )

    slug = models.SlugField(
        max_length=200,
        unique=True,
        verbose_name='Slug'
    )

    description = models.TextField(
        blank=True,
        verbose_name='Description'
    )

    category = models.ForeignKey(
        BusinessCategory,
        on_delete=models.PROTECT,
        related_name='businesses',
        verbose_name='Category'
    )

    province = models.ForeignKey(
        'core.Province',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='businesses',
        verbose_name='Province'
    )

    # Contact
    address = models.CharField(max_length=300, blank=True, verbose_name='Address')
    phone = models.CharField(
        max_length=20,
        blank=True,
        validators=[validate_dominican_phone],
        verbose_name='Phone'
    )
    whatsapp = models.CharField(
        max_length=20,
        blank=True,
        validators=[validate_dominican_phone],
        verbose_name='WhatsApp'
    )
    email = models.EmailField(blank=True, verbose_name='Email')
    website = models.URLField(blank=True, verbose_name='Website')
    facebook = models.URLField(blank=True, verbose_name='Facebook')
    instagram = models.CharField(max_length=100, blank=True, verbose_name='Instagram')

    images = models.JSONField(
        default=list,
        blank=True,
        verbose_name='Images'
    )

    # Aggregates
    rating = models.DecimalField(
        max_digits=3,
        decimal_places=2,
        default=0,
        verbose_name='Rating',
        help_text='Mean of approved reviews'
    )

    review_count = models.PositiveIntegerField(
        default=0,
        verbose_name='Review Count'
    )

    price_range = models.PositiveSmallIntegerField(
        null=True,
        blank=True,
        validators=[MinValueValidator(1), MaxValueValidator(4)],
        verbose_name='Price Range',
        help_text='1 ($) to 4 ($$$$)'
    )

    hours = models.JSONField(
        default=dict,
        blank=True,
        verbose_name='Opening Hours'
    )

    # Flags
    verified = models.BooleanField(default=False, verbose_name='Verified')
    featured = models.BooleanField(default=False, verbose_name='Featured')
    is_active = models.BooleanField(default=True, db_index=True, verbose_name='Active')

    class Meta:
        db_table = 'businesses'
        ordering = ['-featured', '-rating', 'name']
        verbose_name = 'Business'
        verbose_name_plural = 'Businesses'

    def __str__(self):
        return self.name

    def save(self, *args, **kwargs):
        if not self.slug:
            self.slug = unique_slug(Business, self.name, exclude_pk=self.pk)
        super().save(*args, **kwargs)


class Review(BaseModel):
    """
    A user's review of a business.

    Starts ``pending``; only ``approved`` reviews are public and count
    toward the business rating.
    """

    class Status(models.TextChoices):
        PENDING = 'pending', 'Pending'
        APPROVED = 'approved', 'Approved'
        REJECTED = 'rejected', 'Rejected'

    business = models.ForeignKey(
        Business,
        on_delete=models.CASCADE,
        related_name='reviews',
        verbose_name='Business'
    )

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='business_reviews',
        verbose_name='User'
    )

    user_name = models.CharField(
        max_length=100,
        verbose_name='Reviewer Name'
    )

    user_email = models.EmailField(
        blank=True,
        verbose_name='Reviewer Email'
    )

    rating = models.PositiveSmallIntegerField(
        validators=[MinValueValidator(1), MaxValueValidator(5)],
        verbose_name='Rating'
    )

    title = models.CharField(
        max_length=200,
        blank=True,
        verbose_name='Title'
    )

    comment = models.TextField(
        blank=True,
        verbose_name='Comment'
    )

    status = models.CharField(
        max_length=20,
        choices=Status.choices,
        default=Status.PENDING,
        db_index=True,
        verbose_name='Status'
    )

    helpful_count = models.PositiveIntegerField(
        default=0,
        verbose_name='Helpful Count'
    )

    reported = models.BooleanField(
        default=False,
        db_index=True,
        verbose_name='Reported'
    )

    moderated_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='moderated_reviews',
        verbose_name='Moderated By'
    )

    moderated_at = models.DateTimeField(
        null=True,
        blank=True,
        verbose_name='Moderated At'
    )

    metadata = models.JSONField(
        default=dict,
        blank=True,
        verbose_name='Metadata'
    )

    class Meta:
        db_table = 'reviews'
        ordering = ['-created_at']
        constraints = [
            models.UniqueConstraint(
                fields=['business', 'user'],
                condition=models.Q(user__isnull=False),
                name='unique_review_per_user',
            ),
            models.CheckConstraint(
                condition=models.Q(rating__gte=1) & models.Q(rating__lte=5),
                name='review_rating_range',
            ),
        ]
        verbose_name = 'Review'
        verbose_name_plural = 'Reviews'

    def __str__(self):
        return f"{self.user_name} on {self.business}: {self.rating}"

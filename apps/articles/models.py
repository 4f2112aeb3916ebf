"""
Article models for the SafraReport project.
News articles, categories and the editorial workflow records
(reviews, version history, comments).
"""

from django.conf import settings
from django.core.validators import MaxLengthValidator, MinLengthValidator
from django.db import models
from django.utils import timezone

from apps.core.dominican import unique_slug
from apps.core.models import BaseModel


class Category(BaseModel):
    """News section (Nacionales, Deportes, Economía ...)."""

    name = models.CharField(
        max_length=100,
        verbose_name='Name'
    )

    slug = models.SlugField(
        max_length=100,
        unique=True,
        verbose_name='Slug'
    )

    description = models.TextField(
        blank=True,
        verbose_name='Description'
    )

    icon = models.CharField(
        max_length=50,
        blank=True,
        verbose_name='Icon',
        help_text='Icon identifier used by the frontend'
    )

    color = models.CharField(
        max_length=7,
        blank=True,
        verbose_name='Color',
        help_text='Hex color, e.g. #00ff00'
    )

    class Meta:
        db_table = 'categories'
        ordering = ['name']
        verbose_name = 'Category'
        verbose_name_plural = 'Categories'

    def __str__(self):
        return self.name

    def save(self, *args, **kwargs):
        if not self.slug:
            self.slug = unique_slug(Category, self.name, exclude_pk=self.pk, max_length=100)
        super().save(*args, **kwargs)


class Article(BaseModel):
    """
    A news article moving through the editorial workflow.

    ``status`` is only changed through EditorialStateMachine.
    """

    class Status(models.TextChoices):
        DRAFT = 'draft', 'Draft'
        PENDING_REVIEW = 'pending_review', 'Pending Review'
        APPROVED = 'approved', 'Approved'
        NEEDS_CHANGES = 'needs_changes', 'Needs Changes'
        REJECTED = 'rejected', 'Rejected'
        PUBLISHED = 'published', 'Published'
        ARCHIVED = 'archived', 'Archived'

    # Content
    title = models.CharField(
        max_length=300,
        verbose_name='Title'
    )

    slug = models.SlugField(
        max_length=300,
        unique=True,
        verbose_name='Slug',
        help_text='Generated from the title when left empty'
    )

    excerpt = models.TextField(
        blank=True,
        verbose_name='Excerpt',
        help_text='Summary shown in listings'
    )

    content = models.TextField(
        blank=True,
        verbose_name='Content'
    )

    featured_image = models.URLField(
        max_length=1000,
        blank=True,
        verbose_name='Featured Image'
    )

    video_url = models.URLField(
        max_length=1000,
        blank=True,
        verbose_name='Video URL'
    )

    images = models.JSONField(
        default=list,
        blank=True,
        verbose_name='Images',
        help_text='Additional image URLs'
    )

    # Flags
    is_breaking = models.BooleanField(
        default=False,
        db_index=True,
        verbose_name='Breaking News'
    )

    is_featured = models.BooleanField(
        default=False,
        db_index=True,
        verbose_name='Featured'
    )

    published = models.BooleanField(
        default=False,
        db_index=True,
        verbose_name='Published',
        help_text='Visible on the public site'
    )

    published_at = models.DateTimeField(
        null=True,
        blank=True,
        db_index=True,
        verbose_name='Published At'
    )

    # Relations
    author = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='articles',
        verbose_name='Author'
    )

    category = models.ForeignKey(
        Category,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='articles',
        verbose_name='Category'
    )

    province = models.ForeignKey(
        'core.Province',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='articles',
        verbose_name='Province'
    )

    # Editorial workflow
    status = models.CharField(
        max_length=20,
        choices=Status.choices,
        default=Status.DRAFT,
        db_index=True,
        verbose_name='Status'
    )

    scheduled_for = models.DateTimeField(
        null=True,
        blank=True,
        verbose_name='Scheduled For',
        help_text='Publish automatically at this time once approved'
    )

    submitted_at = models.DateTimeField(
        null=True,
        blank=True,
        verbose_name='Submitted At'
    )

    approved_at = models.DateTimeField(
        null=True,
        blank=True,
        verbose_name='Approved At'
    )

    approved_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='approved_articles',
        verbose_name='Approved By'
    )

    # Engagement counters
    likes = models.PositiveIntegerField(default=0, verbose_name='Likes')
    comments_count = models.PositiveIntegerField(default=0, verbose_name='Comments')
    views = models.PositiveIntegerField(default=0, verbose_name='Views')

    metadata = models.JSONField(
        default=dict,
        blank=True,
        verbose_name='Metadata',
        help_text='Workflow state history and other bookkeeping'
    )

    class Meta:
        db_table = 'articles'
        ordering = ['-published_at', '-created_at']
        indexes = [
            models.Index(fields=['status', 'submitted_at'], name='articles_status_submitted_idx'),
            models.Index(fields=['published', 'published_at'], name='articles_published_idx'),
            models.Index(fields=['status', 'scheduled_for'], name='articles_status_scheduled_idx'),
        ]
        verbose_name = 'Article'
        verbose_name_plural = 'Articles'

    def __str__(self):
        return self.title[:80]

    def save(self, *args, **kwargs):
        if not self.slug:
            self.slug = unique_slug(Article, self.title, exclude_pk=self.pk, max_length=300)
        super().save(*args, **kwargs)

    @property
    def is_public(self):
        return self.published and self.status == self.Status.PUBLISHED

    @property
    def author_name(self):
        if not self.author:
            return ''
        return self.author.get_full_name() or self.author.username


class ArticleReview(BaseModel):
    """An editor's decision on a submitted article."""

    class Decision(models.TextChoices):
        APPROVE = 'approve', 'Approve'
        REJECT = 'reject', 'Reject'
        NEEDS_CHANGES = 'needs_changes', 'Needs Changes'

    article = models.ForeignKey(
        Article,
        on_delete=models.CASCADE,
        related_name='reviews',
        verbose_name='Article'
    )

    reviewer = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        related_name='article_reviews',
        verbose_name='Reviewer'
    )

    decision = models.CharField(
        max_length=20,
        choices=Decision.choices,
        verbose_name='Decision'
    )

    comments = models.TextField(
        blank=True,
        verbose_name='Comments'
    )

    reviewed_at = models.DateTimeField(
        default=timezone.now,
        db_index=True,
        verbose_name='Reviewed At'
    )

    class Meta:
        db_table = 'article_reviews'
        ordering = ['-reviewed_at']
        verbose_name = 'Article Review'
        verbose_name_plural = 'Article Reviews'

    def __str__(self):
        return f"{self.article_id} {self.decision}"


class ArticleVersion(BaseModel):
    """Snapshot of an article's title, excerpt and content."""

    article = models.ForeignKey(
        Article,
        on_delete=models.CASCADE,
        related_name='versions',
        verbose_name='Article'
    )

    version = models.PositiveIntegerField(
        verbose_name='Version',
        help_text='1-based, gapless per article at creation time'
    )

    title = models.CharField(
        max_length=300,
        verbose_name='Title'
    )

    excerpt = models.TextField(
        blank=True,
        verbose_name='Excerpt'
    )

    content = models.TextField(
        blank=True,
        verbose_name='Content'
    )

    changed_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='article_versions',
        verbose_name='Changed By'
    )

    changes_summary = models.CharField(
        max_length=500,
        blank=True,
        verbose_name='Changes Summary'
    )

    class Meta:
        db_table = 'article_versions'
        ordering = ['-version']
        constraints = [
            models.UniqueConstraint(
                fields=['article', 'version'],
                name='unique_article_version',
            ),
        ]
        verbose_name = 'Article Version'
        verbose_name_plural = 'Article Versions'

    def __str__(self):
        return f"{self.article_id} v{self.version}"

    @property
    def author_name(self):
        if not self.changed_by_id:
            return 'Sistema'
        return self.changed_by.get_full_name() or self.changed_by.username


class EditorialComment(BaseModel):
    """Internal note left on an article by the newsroom."""

    article = models.ForeignKey(
        Article,
        on_delete=models.CASCADE,
        related_name='editorial_comments',
        verbose_name='Article'
    )

    author = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='editorial_comments',
        verbose_name='Author'
    )

    text = models.TextField(
        validators=[MinLengthValidator(1), MaxLengthValidator(1000)],
        verbose_name='Text'
    )

    resolved = models.BooleanField(
        default=False,
        db_index=True,
        verbose_name='Resolved'
    )

    class Meta:
        db_table = 'editorial_comments'
        ordering = ['-created_at']
        verbose_name = 'Editorial Comment'
        verbose_name_plural = 'Editorial Comments'

    def __str__(self):
        return f"{self.author} on {self.article_id}: {self.text[:40]}"

# Initial schema: categories, articles and the editorial workflow records

from django.conf import settings
import django.core.validators
from django.db import migrations, models
import django.db.models.deletion
import django.utils.timezone
import uuid


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
        ('core', '0001_initial'),
    ]

    operations = [
        migrations.CreateModel(
            name='Category',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, help_text='Unique identifier (UUID)', primary_key=True, serialize=False, verbose_name='ID')),
                ('created_at', models.DateTimeField(default=django.utils.timezone.now, editable=False, help_text='Timestamp when record was created', verbose_name='Created At')),
                ('updated_at', models.DateTimeField(auto_now=True, help_text='Timestamp when record was last updated', verbose_name='Updated At')),
                ('name', models.CharField(max_length=100, verbose_name='Name')),
                ('slug', models.SlugField(max_length=100, unique=True, verbose_name='Slug')),
                ('description', models.TextField(blank=True, verbose_name='Description')),
                ('icon', models.CharField(blank=True, help_text='Icon identifier used by the frontend', max_length=50, verbose_name='Icon')),
                ('color', models.CharField(blank=True, help_text='Hex color, e.g. #00ff00', max_length=7, verbose_name='Color')),
            ],
            options={
                'verbose_name': 'Category',
                'verbose_name_plural': 'Categories',
                'db_table': 'categories',
                'ordering': ['name'],
            },
        ),
        migrations.CreateModel(
            name='Article',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, help_text='Unique identifier (UUID)', primary_key=True, serialize=False, verbose_name='ID')),
                ('created_at', models.DateTimeField(default=django.utils.timezone.now, editable=False, help_text='Timestamp when record was created', verbose_name='Created At')),
                ('updated_at', models.DateTimeField(auto_now=True, help_text='Timestamp when record was last updated', verbose_name='Updated At')),
                ('title', models.CharField(max_length=300, verbose_name='Title')),
                ('slug', models.SlugField(help_text='Generated from the title when left empty', max_length=300, unique=True, verbose_name='Slug')),
                ('excerpt', models.TextField(blank=True, help_text='Summary shown in listings', verbose_name='Excerpt')),
                ('content', models.TextField(blank=True, verbose_name='Content')),
                ('featured_image', models.URLField(blank=True, max_length=1000, verbose_name='Featured Image')),
                ('video_url', models.URLField(blank=True, max_length=1000, verbose_name='Video URL')),
                ('images', models.JSONField(blank=True, default=list, help_text='Additional image URLs', verbose_name='Images')),
                ('is_breaking', models.BooleanField(db_index=True, default=False, verbose_name='Breaking News')),
                ('is_featured', models.BooleanField(db_index=True, default=False, verbose_name='Featured')),
                ('published', models.BooleanField(db_index=True, default=False, help_text='Visible on the public site', verbose_name='Published')),
                ('published_at', models.DateTimeField(blank=True, db_index=True, null=True, verbose_name='Published At')),
                ('status', models.CharField(choices=[('draft', 'Draft'), ('pending_review', 'Pending Review'), ('approved', 'Approved'), ('needs_changes', 'Needs Changes'), ('rejected', 'Rejected'), ('published', 'Published'), ('archived', 'Archived')], db_index=True, default='draft', max_length=20, verbose_name='Status')),
                ('scheduled_for', models.DateTimeField(blank=True, help_text='Publish automatically at this time once approved', null=True, verbose_name='Scheduled For')),
                ('submitted_at', models.DateTimeField(blank=True, null=True, verbose_name='Submitted At')),
                ('approved_at', models.DateTimeField(blank=True, null=True, verbose_name='Approved At')),
                ('likes', models.PositiveIntegerField(default=0, verbose_name='Likes')),
                ('comments_count', models.PositiveIntegerField(default=0, verbose_name='Comments')),
                ('views', models.PositiveIntegerField(default=0, verbose_name='Views')),
                ('metadata', models.JSONField(blank=True, default=dict, help_text='Workflow state history and other bookkeeping', verbose_name='Metadata')),
                ('approved_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='approved_articles', to=settings.AUTH_USER_MODEL, verbose_name='Approved By')),
                ('author', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='articles', to=settings.AUTH_USER_MODEL, verbose_name='Author')),
                ('category', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='articles', to='articles.category', verbose_name='Category')),
                ('province', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='articles', to='core.province', verbose_name='Province')),
            ],
            options={
                'verbose_name': 'Article',
                'verbose_name_plural': 'Articles',
                'db_table': 'articles',
                'ordering': ['-published_at', '-created_at'],
                'indexes': [
                    models.Index(fields=['status', 'submitted_at'], name='articles_status_submitted_idx'),
                    models.Index(fields=['published', 'published_at'], name='articles_published_idx'),
                    models.Index(fields=['status', 'scheduled_for'], name='articles_status_scheduled_idx'),
                ],
            },
        ),
        migrations.CreateModel(
            name='ArticleReview',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, help_text='Unique identifier (UUID)', primary_key=True, serialize=False, verbose_name='ID')),
                ('created_at', models.DateTimeField(default=django.utils.timezone.now, editable=False, help_text='Timestamp when record was created', verbose_name='Created At')),
                ('updated_at', models.DateTimeField(auto_now=True, help_text='Timestamp when record was last updated', verbose_name='Updated At')),
                ('decision', models.CharField(choices=[('approve', 'Approve'), ('reject', 'Reject'), ('needs_changes', 'Needs Changes')], max_length=20, verbose_name='Decision')),
                ('comments', models.TextField(blank=True, verbose_name='Comments')),
                ('reviewed_at', models.DateTimeField(db_index=True, default=django.utils.timezone.now, verbose_name='Reviewed At')),
                ('article', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='reviews', to='articles.article', verbose_name='Article')),
                ('reviewer', models.ForeignKey(null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='article_reviews', to=settings.AUTH_USER_MODEL, verbose_name='Reviewer')),
            ],
            options={
                'verbose_name': 'Article Review',
                'verbose_name_plural': 'Article Reviews',
                'db_table': 'article_reviews',
                'ordering': ['-reviewed_at'],
            },
        ),
        migrations.CreateModel(
            name='ArticleVersion',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, help_text='Unique identifier (UUID)', primary_key=True, serialize=False, verbose_name='ID')),
                ('created_at', models.DateTimeField(default=django.utils.timezone.now, editable=False, help_text='Timestamp when record was created', verbose_name='Created At')),
                ('updated_at', models.DateTimeField(auto_now=True, help_text='Timestamp when record was last updated', verbose_name='Updated At')),
                ('version', models.PositiveIntegerField(help_text='1-based, gapless per article at creation time', verbose_name='Version')),
                ('title', models.CharField(max_length=300, verbose_name='Title')),
                ('excerpt', models.TextField(blank=True, verbose_name='Excerpt')),
                ('content', models.TextField(blank=True, verbose_name='Content')),
                ('changes_summary', models.CharField(blank=True, max_length=500, verbose_name='Changes Summary')),
                ('article', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='versions', to='articles.article', verbose_name='Article')),
                ('changed_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='article_versions', to=settings.AUTH_USER_MODEL, verbose_name='Changed By')),
            ],
            options={
                'verbose_name': 'Article Version',
                'verbose_name_plural': 'Article Versions',
                'db_table': 'article_versions',
                'ordering': ['-version'],
                'constraints': [
                    models.UniqueConstraint(fields=('article', 'version'), name='unique_article_version'),
                ],
            },
        ),
        migrations.CreateModel(
            name='EditorialComment',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, help_text='Unique identifier (UUID)', primary_key=True, serialize=False, verbose_name='ID')),
                ('created_at', models.DateTimeField(default=django.utils.timezone.now, editable=False, help_text='Timestamp when record was created', verbose_name='Created At')),
                ('updated_at', models.DateTimeField(auto_now=True, help_text='Timestamp when record was last updated', verbose_name='Updated At')),
                ('text', models.TextField(validators=[django.core.validators.MinLengthValidator(1), django.core.validators.MaxLengthValidator(1000)], verbose_name='Text')),
                ('resolved', models.BooleanField(db_index=True, default=False, verbose_name='Resolved')),
                ('article', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='editorial_comments', to='articles.article', verbose_name='Article')),
                ('author', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='editorial_comments', to=settings.AUTH_USER_MODEL, verbose_name='Author')),
            ],
            options={
                'verbose_name': 'Editorial Comment',
                'verbose_name_plural': 'Editorial Comments',
                'db_table': 'editorial_comments',
                'ordering': ['-created_at'],
            },
        ),
    ]

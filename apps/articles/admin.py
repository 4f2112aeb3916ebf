"""
Admin interface for articles and the editorial workflow.
"""

from django.contrib import admin, messages
from django.utils.html import format_html

from apps.core.exceptions import SafraException
from .models import Article, ArticleReview, ArticleVersion, Category, EditorialComment
from .services import VersionControl
from .state_machine import EditorialState, EditorialStateMachine

STATUS_COLORS = {
    'draft': 'gray',
    'pending_review': 'orange',
    'approved': 'teal',
    'needs_changes': 'purple',
    'rejected': 'red',
    'published': 'green',
    'archived': 'black',
}

VERSIONED_FIELDS = ('title', 'excerpt', 'content')


@admin.register(Category)
class CategoryAdmin(admin.ModelAdmin):
    list_display = ['name', 'slug', 'color_badge']
    search_fields = ['name']
    prepopulated_fields = {'slug': ('name',)}

    def color_badge(self, obj):
        if not obj.color:
            return '-'
        return format_html(
            '<span style="background-color: {}; padding: 2px 10px; border-radius: 3px;">&nbsp;</span> {}',
            obj.color,
            obj.color
        )
    color_badge.short_description = 'Color'


class ArticleReviewInline(admin.TabularInline):
    model = ArticleReview
    extra = 0
    fields = ['decision', 'reviewer', 'comments', 'reviewed_at']
    readonly_fields = fields
    can_delete = False


class EditorialCommentInline(admin.TabularInline):
    model = EditorialComment
    extra = 0
    fields = ['author', 'text', 'resolved', 'created_at']
    readonly_fields = ['author', 'created_at']


@admin.register(Article)
class ArticleAdmin(admin.ModelAdmin):
    """
    Admin interface for Article model.

    Status changes go through the workflow actions; editing the title,
    excerpt or content stores a new version.
    """

    list_display = [
        'title_short',
        'author',
        'category',
        'province',
        'status_badge',
        'is_breaking',
        'is_featured',
        'published_at',
        'views',
    ]

    list_filter = [
        'status',
        'published',
        'is_breaking',
        'is_featured',
        'category',
        'province',
        ('published_at', admin.DateFieldListFilter),
    ]

    search_fields = ['title', 'excerpt', 'content', 'author__username']

    readonly_fields = [
        'id',
        'status',
        'published',
        'published_at',
        'submitted_at',
        'approved_at',
        'approved_by',
        'likes',
        'comments_count',
        'views',
        'created_at',
        'updated_at',
    ]

    raw_id_fields = ['author']

    date_hierarchy = 'created_at'

    fieldsets = (
        ('Content', {
            'fields': (
                'title',
                'slug',
                'excerpt',
                'content',
                'featured_image',
                'video_url',
                'images',
            )
        }),
        ('Classification', {
            'fields': (
                'author',
                'category',
                'province',
                'is_breaking',
                'is_featured',
            )
        }),
        ('Workflow', {
            'fields': (
                'status',
                'scheduled_for',
                'submitted_at',
                'approved_at',
                'approved_by',
                'published',
                'published_at',
            )
        }),
        ('Engagement', {
            'fields': (
                'likes',
                'comments_count',
                'views',
            ),
            'classes': ('collapse',),
        }),
        ('Metadata', {
            'fields': (
                'metadata',
            ),
            'classes': ('collapse',),
        }),
        ('System Fields', {
            'fields': (
                'id',
                'created_at',
                'updated_at',
            ),
            'classes': ('collapse',),
        }),
    )

    inlines = [ArticleReviewInline, EditorialCommentInline]

    ordering = ['-created_at']

    def title_short(self, obj):
        """Display shortened title."""
        max_length = 60
        if len(obj.title) > max_length:
            return obj.title[:max_length] + '...'
        return obj.title
    title_short.short_description = 'Title'
    title_short.admin_order_field = 'title'

    def status_badge(self, obj):
        return format_html(
            '<span style="background-color: {}; color: white; padding: 3px 6px; '
            'border-radius: 3px; font-size: 11px; font-weight: bold;">{}</span>',
            STATUS_COLORS.get(obj.status, 'gray'),
            obj.get_status_display().upper()
        )
    status_badge.short_description = 'Status'
    status_badge.admin_order_field = 'status'

    def save_model(self, request, obj, form, change):
        changed = not change or any(field in form.changed_data for field in VERSIONED_FIELDS)
        if not change and not obj.author_id:
            obj.author = request.user
        super().save_model(request, obj, form, change)

        if changed:
            VersionControl().save_version(
                obj.pk,
                request.user,
                title=obj.title,
                excerpt=obj.excerpt,
                content=obj.content,
                origin='admin',
            )

    # Actions
    actions = [
        'submit_for_review',
        'publish_selected',
        'archive_selected',
        'return_to_draft',
    ]

    def _transition(self, request, queryset, target, label):
        moved = 0
        for article in queryset:
            try:
                EditorialStateMachine(article).transition_to(target, actor=request.user, reason='admin')
                moved += 1
            except SafraException as e:
                self.message_user(request, f'"{article.title}": {e.message}', level=messages.WARNING)
        self.message_user(request, f'{moved} article(s) {label}.')

    def submit_for_review(self, request, queryset):
        self._transition(request, queryset, EditorialState.PENDING_REVIEW, 'submitted for review')
    submit_for_review.short_description = 'Submit for review'

    def publish_selected(self, request, queryset):
        self._transition(request, queryset, EditorialState.PUBLISHED, 'published')
    publish_selected.short_description = 'Publish approved articles'

    def archive_selected(self, request, queryset):
        self._transition(request, queryset, EditorialState.ARCHIVED, 'archived')
    archive_selected.short_description = 'Archive published articles'

    def return_to_draft(self, request, queryset):
        self._transition(request, queryset, EditorialState.DRAFT, 'returned to draft')
    return_to_draft.short_description = 'Return to draft'

    def get_queryset(self, request):
        """Optimize queryset with select_related."""
        qs = super().get_queryset(request)
        return qs.select_related('author', 'category', 'province')


@admin.register(ArticleVersion)
class ArticleVersionAdmin(admin.ModelAdmin):
    list_display = ['article', 'version', 'changed_by', 'changes_summary', 'created_at']
    search_fields = ['article__title', 'changes_summary']
    readonly_fields = [
        'article', 'version', 'title', 'excerpt', 'content',
        'changed_by', 'changes_summary', 'created_at',
    ]
    raw_id_fields = ['article']


@admin.register(EditorialComment)
class EditorialCommentAdmin(admin.ModelAdmin):
    list_display = ['article', 'author', 'text_short', 'resolved', 'created_at']
    list_filter = ['resolved']
    search_fields = ['text', 'article__title']
    raw_id_fields = ['article']

    def text_short(self, obj):
        return obj.text[:80]
    text_short.short_description = 'Text'

"""
Admin interface for the business directory.
"""

from django.contrib import admin, messages
from django.utils.html import format_html

from apps.core.exceptions import SafraException
from .models import Business, BusinessCategory, Review
from .services import ReviewModerationService


@admin.register(BusinessCategory)
class BusinessCategoryAdmin(admin.ModelAdmin):
    list_display = ['name', 'slug', 'icon']
    search_fields = ['name']
    prepopulated_fields = {'slug': ('name',)}


class ReviewInline(admin.TabularInline):
    model = Review
    extra = 0
    fields = ['user_name', 'rating', 'status', 'reported', 'created_at']
    readonly_fields = fields
    can_delete = False


@admin.register(Business)
class BusinessAdmin(admin.ModelAdmin):
    list_display = ['name', 'category', 'province', 'rating_badge', 'review_count', 'verified', 'featured', 'is_active']
    list_filter = ['verified', 'featured', 'is_active', 'category', 'province']
    search_fields = ['name', 'description', 'address']
    readonly_fields = ['id', 'rating', 'review_count', 'created_at', 'updated_at']
    prepopulated_fields = {'slug': ('name',)}
    inlines = [ReviewInline]

    def rating_badge(self, obj):
        """Display rating with color coding."""
        if not obj.review_count:
            return format_html('<span style="color: gray;">{}</span>', 'N/A')
        if obj.rating >= 4:
            color = 'green'
        elif obj.rating >= 3:
            color = 'orange'
        else:
            color = 'red'
        return format_html(
            '<span style="color: {}; font-weight: bold;">{} ★</span>',
            color,
            obj.rating
        )
    rating_badge.short_description = 'Rating'
    rating_badge.admin_order_field = 'rating'


@admin.register(Review)
class ReviewAdmin(admin.ModelAdmin):
    list_display = ['business', 'user_name', 'rating', 'status', 'reported', 'helpful_count', 'created_at']
    list_filter = ['status', 'reported', 'rating']
    search_fields = ['business__name', 'user_name', 'title', 'comment']
    readonly_fields = ['id', 'status', 'helpful_count', 'moderated_by', 'moderated_at', 'metadata', 'created_at']
    raw_id_fields = ['business', 'user']

    actions = ['approve_selected', 'reject_selected']

    def _moderate(self, request, queryset, decide, label):
        service = ReviewModerationService()
        done = 0
        for review in queryset:
            try:
                decide(service, review)
                done += 1
            except SafraException as e:
                self.message_user(request, f'{review}: {e.message}', level=messages.WARNING)
        self.message_user(request, f'{done} review(s) {label}.')

    def approve_selected(self, request, queryset):
        self._moderate(request, queryset, lambda s, r: s.approve(r.pk, request.user), 'approved')
    approve_selected.short_description = 'Approve selected reviews'

    def reject_selected(self, request, queryset):
        self._moderate(request, queryset, lambda s, r: s.reject(r.pk, request.user), 'rejected')
    reject_selected.short_description = 'Reject selected reviews'

"""
Admin interface for classifieds.
"""

from django.contrib import admin, messages
from django.utils.html import format_html

from apps.core.exceptions import SafraException
from .models import Classified, ClassifiedCategory
from .services import ClassifiedModerationService

STATUS_COLORS = {
    'pending': 'orange',
    'approved': 'green',
    'rejected': 'red',
    'expired': 'gray',
}


@admin.register(ClassifiedCategory)
class ClassifiedCategoryAdmin(admin.ModelAdmin):
    list_display = ['name', 'slug', 'icon']
    search_fields = ['name']
    prepopulated_fields = {'slug': ('name',)}


@admin.register(Classified)
class ClassifiedAdmin(admin.ModelAdmin):
    list_display = [
        'title',
        'category',
        'province',
        'price_display',
        'status_badge',
        'expires_at',
        'created_at',
    ]

    list_filter = ['status', 'category', 'province', 'condition']

    search_fields = ['title', 'description', 'contact_name', 'contact_phone']

    readonly_fields = [
        'id',
        'status',
        'moderated_by',
        'moderated_at',
        'rejection_reason',
        'metadata',
        'created_at',
        'updated_at',
    ]

    raw_id_fields = ['user']

    ordering = ['-created_at']

    def status_badge(self, obj):
        return format_html(
            '<span style="background-color: {}; color: white; padding: 3px 6px; '
            'border-radius: 3px; font-size: 11px; font-weight: bold;">{}</span>',
            STATUS_COLORS.get(obj.status, 'gray'),
            obj.get_status_display().upper()
        )
    status_badge.short_description = 'Status'
    status_badge.admin_order_field = 'status'

    def price_display(self, obj):
        return obj.price_display
    price_display.short_description = 'Price'
    price_display.admin_order_field = 'price'

    actions = ['approve_selected', 'reject_selected']

    def _moderate(self, request, queryset, decide, label):
        service = ClassifiedModerationService()
        done = 0
        for classified in queryset:
            try:
                decide(service, classified)
                done += 1
            except SafraException as e:
                self.message_user(request, f'"{classified.title}": {e.message}', level=messages.WARNING)
        self.message_user(request, f'{done} classified(s) {label}.')

    def approve_selected(self, request, queryset):
        self._moderate(request, queryset, lambda s, c: s.approve(c.pk, request.user), 'approved')
    approve_selected.short_description = 'Approve selected classifieds'

    def reject_selected(self, request, queryset):
        self._moderate(request, queryset, lambda s, c: s.reject(c.pk, request.user), 'rejected')
    reject_selected.short_description = 'Reject selected classifieds'

    def get_queryset(self, request):
        return super().get_queryset(request).select_related('category', 'province')

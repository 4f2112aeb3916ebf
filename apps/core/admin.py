"""
Admin interface for profiles, provinces and the audit log.
"""

from django.contrib import admin
from django.utils.html import format_html

from .models import AuditLog, Profile, Province


@admin.register(Province)
class ProvinceAdmin(admin.ModelAdmin):
    list_display = ['code', 'name', 'slug']
    search_fields = ['name', 'code']
    ordering = ['code']


@admin.register(Profile)
class ProfileAdmin(admin.ModelAdmin):
    list_display = ['user', 'role', 'phone', 'province', 'last_active_at']
    list_filter = ['role', 'province']
    search_fields = ['user__username', 'user__email', 'phone']
    raw_id_fields = ['user']
    readonly_fields = ['last_active_at', 'created_at', 'updated_at']


@admin.register(AuditLog)
class AuditLogAdmin(admin.ModelAdmin):
    """Read-only view of the audit trail."""

    list_display = ['created_at', 'actor', 'action', 'entity_type', 'entity_id', 'success_badge', 'ip_address']
    list_filter = ['action', 'entity_type', 'success']
    search_fields = ['entity_id', 'actor__username', 'details']
    date_hierarchy = 'created_at'

    def success_badge(self, obj):
        if obj.success:
            return format_html('<span style="color: green;">{}</span>', '✓')
        return format_html('<span style="color: red; font-weight: bold;">{}</span>', '✗')
    success_badge.short_description = 'OK'
    success_badge.admin_order_field = 'success'

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False

# utils/admin.py

from django.contrib import admin
from .models import ActivityLog


@admin.register(ActivityLog)
class ActivityLogAdmin(admin.ModelAdmin):
    list_display = [
        'timestamp', 'action', 'resource_type', 'resource_name',
        'user_name', 'user_role', 'ip_address'
    ]
    list_filter = ['action', 'resource_type', 'user_role', 'timestamp']
    search_fields = ['resource_name', 'resource_id', 'user_name', 'description']
    readonly_fields = [
        'id', 'timestamp', 'user_id', 'user_name', 'user_role', 'action',
        'resource_type', 'resource_id', 'resource_name', 'description',
        'ip_address', 'endpoint', 'method'
    ]

    fieldsets = (
        ('What Changed', {
            'fields': ('action', 'resource_type', 'resource_id', 'resource_name', 'description')
        }),
        ('Who Changed It', {
            'fields': ('user_id', 'user_name', 'user_role')
        }),
        ('When & Where', {
            'fields': ('timestamp', 'ip_address', 'endpoint', 'method')
        }),
    )

    def has_add_permission(self, request):
        # Activity logs are written by the services only
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return request.user.is_superuser

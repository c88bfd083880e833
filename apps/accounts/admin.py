# accounts/admin.py

from django.contrib import admin
from django.contrib.auth.models import User
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin
from .models import UserProfile
import logging

logger = logging.getLogger(__name__)


# =============================================================================
# INLINE ADMINS
# =============================================================================

class UserProfileInline(admin.StackedInline):
    """Inline admin for UserProfile"""
    model = UserProfile
    can_delete = False
    verbose_name_plural = 'Profile Information'
    fields = ('role', 'employee_id', 'mobile', 'department')


# =============================================================================
# CUSTOM USER ADMIN
# =============================================================================

class CustomUserAdmin(BaseUserAdmin):
    """User admin with the staff profile inline"""

    inlines = (UserProfileInline,)

    list_display = (
        'username', 'email', 'get_full_name_display', 'get_role',
        'is_active', 'is_staff',
    )
    list_filter = ('is_active', 'is_staff', 'profile__role')
    search_fields = ('username', 'email', 'first_name', 'last_name', 'profile__employee_id')
    ordering = ('-date_joined',)

    def get_full_name_display(self, obj):
        full_name = obj.get_full_name()
        return full_name if full_name else '-'
    get_full_name_display.short_description = 'Full Name'

    def get_role(self, obj):
        try:
            return obj.profile.get_role_display()
        except UserProfile.DoesNotExist:
            return '-'
    get_role.short_description = 'Role'
    get_role.admin_order_field = 'profile__role'


admin.site.unregister(User)
admin.site.register(User, CustomUserAdmin)


@admin.register(UserProfile)
class UserProfileAdmin(admin.ModelAdmin):
    list_display = ('user', 'role', 'employee_id', 'department', 'created_at')
    list_filter = ('role',)
    search_fields = ('user__username', 'user__first_name', 'user__last_name', 'employee_id')
    readonly_fields = ('created_at', 'updated_at', 'created_by_id', 'updated_by_id')

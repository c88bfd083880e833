# admissions/admin.py

from django.contrib import admin
from .models import Batch, BatchMembership, Course, Lead, LeadFollowUp, SequenceCounter


class BatchInline(admin.TabularInline):
    model = Batch
    extra = 0
    fields = ['name', 'start_date', 'is_active']


@admin.register(Course)
class CourseAdmin(admin.ModelAdmin):
    list_display = ['name', 'code', 'fee', 'is_active']
    list_filter = ['is_active']
    search_fields = ['name', 'code']
    inlines = [BatchInline]


@admin.register(Batch)
class BatchAdmin(admin.ModelAdmin):
    list_display = ['name', 'course', 'start_date', 'is_active']
    list_filter = ['is_active', 'course']
    search_fields = ['name', 'course__name']


class LeadFollowUpInline(admin.TabularInline):
    model = LeadFollowUp
    extra = 0
    fields = ['noted_at', 'actor_name', 'note']
    readonly_fields = ['noted_at', 'actor_name', 'note']
    can_delete = False


@admin.register(Lead)
class LeadAdmin(admin.ModelAdmin):
    list_display = [
        'lead_id', 'name', 'phone', 'interested_course', 'source',
        'status', 'assigned_to_id', 'entry_date'
    ]
    list_filter = ['status', 'source', 'priority', 'entry_date']
    search_fields = ['lead_id', 'name', 'phone', 'email']
    readonly_fields = [
        'lead_id', 'status', 'assigned_at', 'counseling_at', 'admitted_at',
        'created_at', 'updated_at', 'created_by_id', 'updated_by_id'
    ]
    inlines = [LeadFollowUpInline]

    fieldsets = (
        ('Lead', {
            'fields': ('lead_id', 'entry_date', 'name', 'phone', 'email', 'interested_course', 'source', 'priority')
        }),
        ('Pipeline', {
            'fields': ('status', 'assigned_to_id', 'assigned_by_id', 'admitted_to_course', 'admitted_to_batch',
                       'next_follow_up_date', 'notes', 'custom_fields')
        }),
        ('Timeline', {
            'fields': ('assigned_at', 'counseling_at', 'admitted_at'),
            'classes': ('collapse',)
        }),
        ('Audit', {
            'fields': ('created_at', 'updated_at', 'created_by_id', 'updated_by_id'),
            'classes': ('collapse',)
        }),
    )

    def has_delete_permission(self, request, obj=None):
        return request.user.is_superuser


@admin.register(BatchMembership)
class BatchMembershipAdmin(admin.ModelAdmin):
    list_display = ['lead', 'batch', 'admitted_at']
    list_filter = ['batch__course']
    search_fields = ['lead__lead_id', 'lead__name']


@admin.register(SequenceCounter)
class SequenceCounterAdmin(admin.ModelAdmin):
    list_display = ['key', 'value', 'updated_at']
    search_fields = ['key']
    readonly_fields = ['key', 'value', 'updated_at']

    def has_add_permission(self, request):
        # Counters are created by the lead id generator
        return False

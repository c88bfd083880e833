# fees/admin.py

from django.contrib import admin
from .models import AdmissionFee, DueCollection, DueFeesFollowUp


class DueCollectionInline(admin.TabularInline):
    model = DueCollection
    extra = 0
    fields = ['amount', 'payment_method', 'payment_date', 'status', 'reviewed_at']
    readonly_fields = fields
    can_delete = False


@admin.register(AdmissionFee)
class AdmissionFeeAdmin(admin.ModelAdmin):
    list_display = [
        'lead', 'course_name', 'total_amount', 'amount', 'due_amount',
        'method', 'payment_date', 'next_payment_date', 'status'
    ]
    list_filter = ['status', 'method', 'payment_date']
    search_fields = ['lead__lead_id', 'lead__name', 'course_name']
    readonly_fields = [
        'amount', 'due_amount', 'status', 'submitted_by_id', 'reviewed_by_id',
        'reviewed_at', 'note', 'created_at', 'updated_at'
    ]
    inlines = [DueCollectionInline]

    def has_delete_permission(self, request, obj=None):
        # Fees are rejected or cancelled, never deleted
        return False


@admin.register(DueCollection)
class DueCollectionAdmin(admin.ModelAdmin):
    list_display = ['lead', 'amount', 'payment_method', 'payment_date', 'coordinator_id', 'status', 'submitted_at']
    list_filter = ['status', 'payment_method', 'submitted_at']
    search_fields = ['lead__lead_id', 'lead__name']
    readonly_fields = ['status', 'reviewed_by_id', 'reviewed_at', 'review_note', 'submitted_at']


@admin.register(DueFeesFollowUp)
class DueFeesFollowUpAdmin(admin.ModelAdmin):
    list_display = ['lead', 'follow_up_type', 'coordinator_id', 'amount_promised', 'contacted_at']
    list_filter = ['follow_up_type', 'contacted_at']
    search_fields = ['lead__lead_id', 'lead__name', 'note']

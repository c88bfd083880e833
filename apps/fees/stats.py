# fees/stats.py

"""
Statistics for the coordinator's dues dashboard.
"""

from django.utils import timezone
from django.db.models import Count, Sum, Q, DecimalField, Value
from django.db.models.functions import Coalesce
from datetime import timedelta
from decimal import Decimal
import logging

from fees.models import AdmissionFee, DueFeesFollowUp

logger = logging.getLogger(__name__)

NOTIFICATION_WINDOW_DAYS = 3
DUE_THIS_WEEK_DAYS = 7


def fees_with_dues():
    """Approved fees that still have something outstanding."""
    return (
        AdmissionFee.objects.select_related('lead')
        .filter(status=AdmissionFee.STATUS_APPROVED, due_amount__gt=0)
    )


# =============================================================================
# STUDENTS WITH DUES
# =============================================================================

def get_students_with_dues():
    return fees_with_dues().order_by('-created_at')


# =============================================================================
# PAYMENT NOTIFICATIONS
# =============================================================================

def get_payment_notifications(today=None):
    """
    Fees whose next payment date is overdue or within the next three days.

    Returns:
        list: dicts of {'fee', 'is_overdue', 'days_until'}, soonest first
    """
    today = today or timezone.localdate()
    horizon = today + timedelta(days=NOTIFICATION_WINDOW_DAYS)

    fees = fees_with_dues().filter(next_payment_date__lte=horizon).order_by('next_payment_date')

    return [
        {
            'fee': fee,
            'is_overdue': fee.next_payment_date < today,
            'days_until': (fee.next_payment_date - today).days,
        }
        for fee in fees
    ]


# =============================================================================
# DASHBOARD STATISTICS
# =============================================================================

def get_dashboard_stats(actor=None, today=None):
    """
    Returns:
        dict: totals for the coordinator dashboard
    """
    today = today or timezone.localdate()
    week_end = today + timedelta(days=DUE_THIS_WEEK_DAYS)

    aggregates = fees_with_dues().aggregate(
        total_with_dues=Count('id'),
        overdue=Count('id', filter=Q(next_payment_date__lt=today)),
        due_this_week=Count(
            'id', filter=Q(next_payment_date__gte=today, next_payment_date__lte=week_end)
        ),
        total_due_amount=Coalesce(
            Sum('due_amount'), Value(Decimal('0.00')), output_field=DecimalField()
        ),
    )

    my_follow_ups_today = 0
    if actor is not None:
        my_follow_ups_today = DueFeesFollowUp.objects.filter(
            coordinator_id=actor.id,
            contacted_at__date=today,
        ).count()

    return {
        'total_with_dues': aggregates['total_with_dues'],
        'overdue': aggregates['overdue'],
        'due_this_week': aggregates['due_this_week'],
        'total_due_amount': aggregates['total_due_amount'],
        'my_follow_ups_today': my_follow_ups_today,
    }

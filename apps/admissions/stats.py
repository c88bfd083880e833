# admissions/stats.py

"""
Admission pipeline reports and follow-up reminders.
"""

from django.contrib.auth.models import User
from django.db.models import Count, Q
from django.utils import timezone
from datetime import timedelta
import logging

from accounts.models import Role
from admissions.models import Lead

logger = logging.getLogger(__name__)

FOLLOW_UP_WINDOW_DAYS = 3

OPEN_STATUSES = (Lead.STATUS_ASSIGNED, Lead.STATUS_COUNSELING, Lead.STATUS_IN_FOLLOW_UP)

STATUS_KEYS = {
    Lead.STATUS_ASSIGNED: 'assigned',
    Lead.STATUS_COUNSELING: 'counseling',
    Lead.STATUS_IN_FOLLOW_UP: 'in_follow_up',
    Lead.STATUS_ADMITTED: 'admitted',
    Lead.STATUS_NOT_ADMITTED: 'not_admitted',
}


def conversion_rate(admitted, total):
    """Admitted share of leads as a percentage rounded to 2 places."""
    if not total:
        return 0.0
    return round(admitted * 100.0 / total, 2)


def _status_counts(queryset):
    aggregates = {
        key: Count('id', filter=Q(status=code)) for code, key in STATUS_KEYS.items()
    }
    stats = queryset.aggregate(total_leads=Count('id'), **aggregates)
    stats['conversion_rate'] = conversion_rate(stats['admitted'], stats['total_leads'])
    return stats


def get_pipeline_report(date_from=None, date_to=None, user_id=None):
    """
    Per admission officer lead counts by status with conversion rate.

    Args:
        date_from, date_to (date): Filter on lead creation date
        user_id (str): Restrict to one officer

    Returns:
        dict: {'overall': {...}, 'officers': [{'user': {...}, 'stats': {...}}]}
    """
    leads = Lead.objects.all()
    if date_from:
        leads = leads.filter(created_at__date__gte=date_from)
    if date_to:
        leads = leads.filter(created_at__date__lte=date_to)

    officers = User.objects.filter(profile__role=Role.ADMISSION, is_active=True).order_by('username')
    if user_id:
        officers = officers.filter(pk=user_id)

    reports = []
    for officer in officers:
        reports.append({
            'user': {
                'id': str(officer.pk),
                'name': officer.get_full_name() or officer.username,
                'email': officer.email,
            },
            'stats': _status_counts(leads.filter(assigned_to_id=str(officer.pk))),
        })

    officer_ids = [str(officer.pk) for officer in officers]
    return {
        'overall': _status_counts(leads.filter(assigned_to_id__in=officer_ids)),
        'officers': reports,
    }


# =============================================================================
# FOLLOW-UP NOTIFICATIONS
# =============================================================================

def get_follow_up_notifications(actor, today=None):
    """
    Open leads whose next follow-up date needs attention.

    Admission officers see their own leads due within the next three days
    (overdue included); Admin/SuperAdmin see only overdue leads.

    Returns:
        list: dicts of {'lead', 'is_overdue', 'days_until'}, soonest first
    """
    today = today or timezone.localdate()

    leads = Lead.objects.filter(status__in=OPEN_STATUSES, next_follow_up_date__isnull=False)
    if actor.role == Role.ADMISSION:
        leads = leads.filter(
            assigned_to_id=actor.id,
            next_follow_up_date__lte=today + timedelta(days=FOLLOW_UP_WINDOW_DAYS),
        )
    else:
        leads = leads.filter(next_follow_up_date__lt=today)

    return [
        {
            'lead': lead,
            'is_overdue': lead.next_follow_up_date < today,
            'days_until': (lead.next_follow_up_date - today).days,
        }
        for lead in leads.order_by('next_follow_up_date')
    ]

# utils/audit.py

import logging
from django.db import transaction

from utils.context import get_request_context

audit_logger = logging.getLogger("activity_audit")
logger = logging.getLogger(__name__)


def log_activity(actor, action, resource_type, resource=None, description=''):
    """
    Record a successful state change in the activity log.

    Args:
        actor (Actor): Authenticated actor performing the action.
        action (str): One of ActivityLog.ACTION_CHOICES (e.g. APPROVE).
        resource_type (str): Kind of resource touched (e.g. 'AdmissionFee').
        resource (Model instance, optional): Object affected.
        description (str, optional): Human readable summary.

    Failures are logged and swallowed; the activity log must never
    undo or block the business operation that triggered it. The insert
    runs in its own savepoint so a database error here leaves the
    caller's transaction usable.
    """
    try:
        from utils.models import ActivityLog

        context = get_request_context() or {}

        resource_id = ''
        resource_name = ''
        if resource is not None:
            resource_id = str(getattr(resource, 'pk', '') or '')
            resource_name = str(resource)[:255]

        with transaction.atomic():
            ActivityLog.objects.create(
                user_id=str(actor.id) if actor else '',
                user_name=actor.name if actor else '',
                user_role=actor.role if actor else '',
                action=action,
                resource_type=resource_type,
                resource_id=resource_id,
                resource_name=resource_name,
                description=description,
                ip_address=context.get('ip_address'),
                endpoint=context.get('request_path', '')[:255],
                method=context.get('method', ''),
            )

        audit_logger.info(
            f"{actor.name if actor else 'system'} {action} {resource_type} "
            f"{resource_id}: {description}"
        )

    except Exception as e:
        logger.error(f"Error in activity logging: {e}", exc_info=True)

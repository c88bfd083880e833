# utils/models.py

"""
Base models for the back-office system with audit trail fields.

Key Features:
- UUID primary keys
- created_at / updated_at maintained in save()
- User tracking from the thread-local request context
- Activity log sink for successful state changes
"""

from django.db import models
from django.utils import timezone
import uuid
import logging

logger = logging.getLogger(__name__)


# =============================================================================
# BASE MODEL
# =============================================================================

class BaseModel(models.Model):
    """
    Base model with audit trail capabilities.

    Features:
    - Automatic user tracking (who created/updated)
    - Timestamps maintained on every save
    - Thread-local context integration

    User references are stored as plain strings rather than foreign keys
    so ledger rows survive the removal of a staff account.
    """

    # Core identification
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    # Timestamp fields
    created_at = models.DateTimeField("Created At", db_index=True, editable=False)
    updated_at = models.DateTimeField("Updated At", db_index=True, editable=False)

    # User tracking - CharField to avoid FK constraints on the user table
    created_by_id = models.CharField(
        "Created By ID",
        max_length=50,
        null=True,
        blank=True,
        db_index=True,
        help_text="ID of user who created this record"
    )
    updated_by_id = models.CharField(
        "Updated By ID",
        max_length=50,
        null=True,
        blank=True,
        db_index=True,
        help_text="ID of user who last updated this record"
    )

    class Meta:
        abstract = True

    def save(self, *args, **kwargs):
        """
        Override save to:
        1. Set timestamps
        2. Populate audit trail fields from the request context
        """
        from utils.context import get_request_context

        is_new = self._state.adding
        now = timezone.now()

        if is_new:
            # Respect a manually provided created_at (imports, fixtures)
            if not self.created_at:
                self.created_at = now
            self.updated_at = now
        else:
            self.updated_at = now

        update_fields = kwargs.get('update_fields')
        if update_fields is not None:
            kwargs['update_fields'] = set(update_fields) | {'updated_at', 'updated_by_id'}

        context = get_request_context()
        user = context.get('user') if context else None

        if user is not None:
            if is_new and not self.created_by_id:
                self.created_by_id = str(user.pk)
            self.updated_by_id = str(user.pk)
        elif is_new:
            logger.debug(
                f"No request context available when creating {self.__class__.__name__}. "
                f"Audit fields will not be populated."
            )

        return super().save(*args, **kwargs)


# =============================================================================
# ACTIVITY LOG
# =============================================================================

class ActivityLog(models.Model):
    """
    Append-only record of who did what.

    Written by utils.audit.log_activity() after a successful state change;
    never consulted by business logic.
    """

    ACTION_CHOICES = [
        ('CREATE', 'Create'),
        ('UPDATE', 'Update'),
        ('DELETE', 'Delete'),
        ('APPROVE', 'Approve'),
        ('REJECT', 'Reject'),
        ('CANCEL', 'Cancel'),
        ('TRANSITION', 'Status Transition'),
        ('UNDO', 'Undo'),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    timestamp = models.DateTimeField("Timestamp", default=timezone.now, db_index=True)

    # Who
    user_id = models.CharField("User ID", max_length=50, blank=True, db_index=True)
    user_name = models.CharField("User Name", max_length=150, blank=True)
    user_role = models.CharField("User Role", max_length=30, blank=True)

    # What
    action = models.CharField("Action", max_length=15, choices=ACTION_CHOICES, db_index=True)
    resource_type = models.CharField("Resource Type", max_length=50, db_index=True)
    resource_id = models.CharField("Resource ID", max_length=50, blank=True)
    resource_name = models.CharField("Resource Name", max_length=255, blank=True)
    description = models.TextField("Description", blank=True)

    # Where
    ip_address = models.GenericIPAddressField("IP Address", null=True, blank=True)
    endpoint = models.CharField("Endpoint", max_length=255, blank=True)
    method = models.CharField("Method", max_length=10, blank=True)

    class Meta:
        verbose_name = "Activity Log"
        verbose_name_plural = "Activity Logs"
        ordering = ['-timestamp']
        indexes = [
            models.Index(fields=['user_id', 'timestamp'], name='utils_activ_user_id_3f1a2b_idx'),
            models.Index(fields=['action', 'timestamp'], name='utils_activ_action_8c4d5e_idx'),
            models.Index(fields=['resource_type', 'timestamp'], name='utils_activ_resourc_6b7e9f_idx'),
        ]

    def __str__(self):
        return f"{self.timestamp:%Y-%m-%d %H:%M} {self.user_name} {self.action} {self.resource_type}"

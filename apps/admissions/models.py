# admissions/models.py

from django.db import models
from django.core.exceptions import ValidationError
from django.core.validators import MinValueValidator
from django.utils import timezone
from decimal import Decimal
import logging

from utils.models import BaseModel

logger = logging.getLogger(__name__)


# =============================================================================
# COURSE CATALOGUE
# =============================================================================

class Course(BaseModel):
    """A course leads can be interested in and admitted to."""

    name = models.CharField("Course Name", max_length=150, unique=True)
    code = models.CharField("Course Code", max_length=20, blank=True)
    fee = models.DecimalField(
        "Course Fee",
        max_digits=12,
        decimal_places=2,
        default=Decimal('0.00'),
        validators=[MinValueValidator(Decimal('0.00'))]
    )
    is_active = models.BooleanField("Active", default=True)

    class Meta:
        verbose_name = "Course"
        verbose_name_plural = "Courses"
        ordering = ['name']

    def __str__(self):
        return self.name


class Batch(BaseModel):
    """An intake of a course; admitted leads join its roster."""

    course = models.ForeignKey(
        Course,
        on_delete=models.PROTECT,
        related_name='batches'
    )
    name = models.CharField("Batch Name", max_length=100)
    start_date = models.DateField("Start Date", null=True, blank=True)
    is_active = models.BooleanField("Active", default=True)

    class Meta:
        verbose_name = "Batch"
        verbose_name_plural = "Batches"
        ordering = ['course__name', 'name']
        constraints = [
            models.UniqueConstraint(fields=['course', 'name'], name='unique_batch_name_per_course'),
        ]

    def __str__(self):
        return f"{self.course.name} - {self.name}"


class BatchMembership(BaseModel):
    """Batch roster entry for an admitted lead."""

    batch = models.ForeignKey(
        Batch,
        on_delete=models.CASCADE,
        related_name='memberships'
    )
    lead = models.ForeignKey(
        'Lead',
        on_delete=models.CASCADE,
        related_name='batch_memberships'
    )
    admitted_at = models.DateTimeField("Admitted At", default=timezone.now)

    class Meta:
        verbose_name = "Batch Membership"
        verbose_name_plural = "Batch Memberships"
        ordering = ['batch', 'admitted_at']
        constraints = [
            models.UniqueConstraint(fields=['batch', 'lead'], name='unique_lead_per_batch'),
        ]

    def __str__(self):
        return f"{self.lead} in {self.batch}"


# =============================================================================
# LEAD MODEL
# =============================================================================

class Lead(BaseModel):
    """
    A prospective student moving through the admission pipeline.

    Status graph:
        ASSIGNED -> COUNSELING
        COUNSELING -> ADMITTED | IN_FOLLOW_UP | NOT_ADMITTED
        IN_FOLLOW_UP -> ADMITTED | NOT_ADMITTED
    ADMITTED and NOT_ADMITTED are terminal (only undo-admission leaves ADMITTED).
    """

    STATUS_ASSIGNED = 'ASSIGNED'
    STATUS_COUNSELING = 'COUNSELING'
    STATUS_IN_FOLLOW_UP = 'IN_FOLLOW_UP'
    STATUS_ADMITTED = 'ADMITTED'
    STATUS_NOT_ADMITTED = 'NOT_ADMITTED'

    STATUS_CHOICES = [
        (STATUS_ASSIGNED, 'Assigned'),
        (STATUS_COUNSELING, 'Counseling'),
        (STATUS_IN_FOLLOW_UP, 'In Follow Up'),
        (STATUS_ADMITTED, 'Admitted'),
        (STATUS_NOT_ADMITTED, 'Not Admitted'),
    ]

    ALLOWED_TRANSITIONS = {
        STATUS_ASSIGNED: {STATUS_COUNSELING},
        STATUS_COUNSELING: {STATUS_ADMITTED, STATUS_IN_FOLLOW_UP, STATUS_NOT_ADMITTED},
        STATUS_IN_FOLLOW_UP: {STATUS_ADMITTED, STATUS_NOT_ADMITTED},
        STATUS_ADMITTED: set(),
        STATUS_NOT_ADMITTED: set(),
    }

    SOURCE_CHOICES = [
        ('META', 'Meta Lead'),
        ('LINKEDIN', 'LinkedIn Lead'),
        ('MANUAL', 'Manually Generated Lead'),
        ('OTHERS', 'Others'),
    ]

    PRIORITY_CHOICES = [
        ('LOW', 'Low'),
        ('MEDIUM', 'Medium'),
        ('HIGH', 'High'),
    ]

    # -------------------------------------------------------------------------
    # IDENTITY & CONTACT
    # -------------------------------------------------------------------------

    lead_id = models.CharField(
        "Lead ID",
        max_length=40,
        unique=True,
        editable=False,
        help_text="Human readable identifier, e.g. LEAD-2025-PCC-00042"
    )
    entry_date = models.DateField("Entry Date", default=timezone.localdate)
    name = models.CharField("Name", max_length=150)
    phone = models.CharField("Phone", max_length=30, blank=True, db_index=True)
    email = models.EmailField("Email", blank=True, db_index=True)
    interested_course = models.CharField("Interested Course", max_length=150, blank=True)
    source = models.CharField(
        "Source",
        max_length=20,
        choices=SOURCE_CHOICES,
        default='OTHERS'
    )
    priority = models.CharField(
        "Priority",
        max_length=10,
        choices=PRIORITY_CHOICES,
        default='MEDIUM'
    )

    # -------------------------------------------------------------------------
    # PIPELINE
    # -------------------------------------------------------------------------

    status = models.CharField(
        "Status",
        max_length=20,
        choices=STATUS_CHOICES,
        default=STATUS_ASSIGNED,
        db_index=True
    )
    assigned_to_id = models.CharField(
        "Assigned To",
        max_length=50,
        null=True,
        blank=True,
        db_index=True,
        help_text="User id of the admission officer owning this lead"
    )
    assigned_by_id = models.CharField("Assigned By", max_length=50, null=True, blank=True)
    admitted_to_course = models.ForeignKey(
        Course,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='admitted_leads'
    )
    admitted_to_batch = models.ForeignKey(
        Batch,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='admitted_leads'
    )

    # -------------------------------------------------------------------------
    # TIMELINE
    # -------------------------------------------------------------------------

    assigned_at = models.DateTimeField("Assigned At", null=True, blank=True)
    counseling_at = models.DateTimeField("Counseling At", null=True, blank=True)
    admitted_at = models.DateTimeField("Admitted At", null=True, blank=True)
    next_follow_up_date = models.DateField("Next Follow-up Date", null=True, blank=True)

    notes = models.TextField("Notes", blank=True)
    custom_fields = models.JSONField("Custom Fields", default=dict, blank=True)

    class Meta:
        verbose_name = "Lead"
        verbose_name_plural = "Leads"
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['status', 'assigned_to_id'], name='admissions_status_assign_idx'),
            models.Index(fields=['next_follow_up_date'], name='admissions_next_fu_idx'),
        ]

    def __str__(self):
        return f"{self.lead_id} - {self.name}"

    def clean(self):
        super().clean()
        if self.status == self.STATUS_ADMITTED and not self.admitted_at:
            raise ValidationError({'admitted_at': 'Admitted leads must record the admission time.'})

    def can_transition_to(self, target):
        return target in self.ALLOWED_TRANSITIONS.get(self.status, set())

    @property
    def is_admitted(self):
        return self.status == self.STATUS_ADMITTED


class LeadFollowUp(BaseModel):
    """Append-only follow-up log entry for a lead."""

    lead = models.ForeignKey(
        Lead,
        on_delete=models.CASCADE,
        related_name='follow_ups'
    )
    note = models.TextField("Note")
    actor_id = models.CharField("Noted By", max_length=50, blank=True)
    actor_name = models.CharField("Noted By Name", max_length=150, blank=True)
    noted_at = models.DateTimeField("Noted At", default=timezone.now)

    class Meta:
        verbose_name = "Lead Follow-up"
        verbose_name_plural = "Lead Follow-ups"
        ordering = ['noted_at', 'created_at']

    def __str__(self):
        return f"{self.lead.lead_id} @ {self.noted_at:%Y-%m-%d %H:%M}"


# =============================================================================
# SEQUENCE COUNTER
# =============================================================================

class SequenceCounter(models.Model):
    """
    Per (year, category) counter behind generated lead ids.

    Only ever incremented with an F() update; see admissions.utils.
    """

    key = models.CharField("Key", max_length=60, primary_key=True)
    value = models.PositiveIntegerField("Value", default=0)
    updated_at = models.DateTimeField("Updated At", auto_now=True)

    class Meta:
        verbose_name = "Sequence Counter"
        verbose_name_plural = "Sequence Counters"

    def __str__(self):
        return f"{self.key} = {self.value}"

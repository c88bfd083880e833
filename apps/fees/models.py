# fees/models.py

from django.db import models
from django.core.validators import MinValueValidator
from django.utils import timezone
from decimal import Decimal
import logging

from utils.models import BaseModel
from admissions.models import Course, Lead

logger = logging.getLogger(__name__)

REVIEW_STATUS_CHOICES = [
    ('PENDING', 'Pending'),
    ('APPROVED', 'Approved'),
    ('REJECTED', 'Rejected'),
]


# =============================================================================
# ADMISSION FEE
# =============================================================================

class AdmissionFee(BaseModel):
    """
    Admission fee posted by an admission officer against a lead.

    ``amount`` is the cumulative amount paid (initial payment plus approved
    due collections) and ``due_amount`` is what remains. For approved fees
    due_amount == total_amount - amount at all times.
    """

    STATUS_PENDING = 'PENDING'
    STATUS_APPROVED = 'APPROVED'
    STATUS_REJECTED = 'REJECTED'
    STATUS_CHOICES = REVIEW_STATUS_CHOICES

    METHOD_CHOICES = [
        ('BKASH', 'Bkash'),
        ('NAGAD', 'Nagad'),
        ('ROCKET', 'Rocket'),
        ('BANK_TRANSFER', 'Bank Transfer'),
        ('CASH', 'Cash on Hand'),
    ]

    # -------------------------------------------------------------------------
    # RELATIONSHIPS
    # -------------------------------------------------------------------------

    lead = models.ForeignKey(
        Lead,
        verbose_name="Lead",
        on_delete=models.PROTECT,
        related_name='admission_fees'
    )
    course = models.ForeignKey(
        Course,
        verbose_name="Course",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='admission_fees'
    )
    course_name = models.CharField("Course Name", max_length=150)

    # -------------------------------------------------------------------------
    # AMOUNTS
    # -------------------------------------------------------------------------

    total_amount = models.DecimalField(
        "Total Amount",
        max_digits=12,
        decimal_places=2,
        default=Decimal('0.00'),
        validators=[MinValueValidator(Decimal('0.00'))]
    )
    amount = models.DecimalField(
        "Amount Paid",
        max_digits=12,
        decimal_places=2,
        validators=[MinValueValidator(Decimal('0.00'))]
    )
    due_amount = models.DecimalField(
        "Due Amount",
        max_digits=12,
        decimal_places=2,
        default=Decimal('0.00')
    )

    # -------------------------------------------------------------------------
    # PAYMENT DETAILS
    # -------------------------------------------------------------------------

    method = models.CharField("Payment Method", max_length=20, choices=METHOD_CHOICES)
    payment_date = models.DateField("Payment Date", db_index=True)
    next_payment_date = models.DateField("Next Payment Date", null=True, blank=True, db_index=True)
    note = models.TextField("Note", blank=True, help_text="Append-only audit trail")

    # -------------------------------------------------------------------------
    # REVIEW
    # -------------------------------------------------------------------------

    status = models.CharField(
        "Status",
        max_length=10,
        choices=STATUS_CHOICES,
        default=STATUS_PENDING,
        db_index=True
    )
    submitted_by_id = models.CharField("Submitted By", max_length=50, db_index=True)
    reviewed_by_id = models.CharField("Reviewed By", max_length=50, null=True, blank=True)
    reviewed_at = models.DateTimeField("Reviewed At", null=True, blank=True)

    class Meta:
        verbose_name = "Admission Fee"
        verbose_name_plural = "Admission Fees"
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['lead', 'status'], name='fees_adm_lead_status_idx'),
            models.Index(fields=['status', 'next_payment_date'], name='fees_adm_status_npd_idx'),
        ]

    def __str__(self):
        return f"{self.lead.lead_id} - {self.course_name} ({self.get_status_display()})"

    def append_note(self, text):
        """Add a line to the audit trail without overwriting earlier notes."""
        self.note = f"{self.note}\n\n{text}" if self.note else text

    def expected_due(self):
        return self.total_amount - self.amount


# =============================================================================
# DUE COLLECTION
# =============================================================================

class DueCollection(BaseModel):
    """
    A coordinator-submitted payment against an approved fee's due amount.

    Has no effect on the fee until an accountant approves it. Immutable
    once reviewed.
    """

    STATUS_PENDING = 'PENDING'
    STATUS_APPROVED = 'APPROVED'
    STATUS_REJECTED = 'REJECTED'
    STATUS_CHOICES = REVIEW_STATUS_CHOICES

    PAYMENT_METHOD_CHOICES = [
        ('CASH', 'Cash'),
        ('BANK_TRANSFER', 'Bank Transfer'),
        ('BKASH', 'Mobile Banking (bKash)'),
        ('NAGAD', 'Mobile Banking (Nagad)'),
        ('ROCKET', 'Mobile Banking (Rocket)'),
        ('CHEQUE', 'Cheque'),
        ('OTHER', 'Other'),
    ]

    admission_fee = models.ForeignKey(
        AdmissionFee,
        verbose_name="Admission Fee",
        on_delete=models.PROTECT,
        related_name='due_collections'
    )
    lead = models.ForeignKey(
        Lead,
        verbose_name="Lead",
        on_delete=models.PROTECT,
        related_name='due_collections'
    )
    coordinator_id = models.CharField("Coordinator", max_length=50, db_index=True)

    amount = models.DecimalField(
        "Amount",
        max_digits=12,
        decimal_places=2,
        validators=[MinValueValidator(Decimal('0.01'))]
    )
    payment_method = models.CharField(
        "Payment Method",
        max_length=20,
        choices=PAYMENT_METHOD_CHOICES,
        default='CASH'
    )
    payment_date = models.DateField("Payment Date")
    next_payment_date = models.DateField("Next Payment Date", null=True, blank=True)
    note = models.TextField("Note", blank=True)

    status = models.CharField(
        "Status",
        max_length=10,
        choices=STATUS_CHOICES,
        default=STATUS_PENDING,
        db_index=True
    )
    reviewed_by_id = models.CharField("Reviewed By", max_length=50, null=True, blank=True)
    reviewed_at = models.DateTimeField("Reviewed At", null=True, blank=True)
    review_note = models.TextField("Review Note", blank=True)
    submitted_at = models.DateTimeField("Submitted At", default=timezone.now)

    class Meta:
        verbose_name = "Due Collection"
        verbose_name_plural = "Due Collections"
        ordering = ['-submitted_at']
        indexes = [
            models.Index(fields=['status', 'submitted_at'], name='fees_due_status_sub_idx'),
            models.Index(fields=['coordinator_id', 'status'], name='fees_due_coord_status_idx'),
        ]

    def __str__(self):
        return f"Due collection {self.amount} for {self.lead.lead_id} ({self.get_status_display()})"

    @property
    def is_reviewed(self):
        return self.status != self.STATUS_PENDING


# =============================================================================
# DUE FEES FOLLOW-UP
# =============================================================================

class DueFeesFollowUp(BaseModel):
    """Coordinator contact log for a fee with outstanding dues."""

    FOLLOW_UP_TYPE_CHOICES = [
        ('CALL', 'Call'),
        ('SMS', 'SMS'),
        ('EMAIL', 'Email'),
        ('VISIT', 'Visit'),
        ('WHATSAPP', 'WhatsApp'),
        ('OTHER', 'Other'),
    ]

    admission_fee = models.ForeignKey(
        AdmissionFee,
        verbose_name="Admission Fee",
        on_delete=models.CASCADE,
        related_name='follow_ups'
    )
    lead = models.ForeignKey(
        Lead,
        verbose_name="Lead",
        on_delete=models.CASCADE,
        related_name='due_follow_ups'
    )
    coordinator_id = models.CharField("Coordinator", max_length=50, db_index=True)
    follow_up_type = models.CharField("Follow-up Type", max_length=10, choices=FOLLOW_UP_TYPE_CHOICES)
    note = models.TextField("Note")
    previous_next_payment_date = models.DateField("Previous Next Payment Date", null=True, blank=True)
    updated_next_payment_date = models.DateField("Updated Next Payment Date", null=True, blank=True)
    amount_promised = models.DecimalField(
        "Amount Promised",
        max_digits=12,
        decimal_places=2,
        default=Decimal('0.00')
    )
    contacted_at = models.DateTimeField("Contacted At", default=timezone.now)

    class Meta:
        verbose_name = "Due Fees Follow-up"
        verbose_name_plural = "Due Fees Follow-ups"
        ordering = ['-contacted_at']
        indexes = [
            models.Index(fields=['coordinator_id', 'contacted_at'], name='fees_fu_coord_contact_idx'),
        ]

    def __str__(self):
        return f"{self.get_follow_up_type_display()} with {self.lead.lead_id} on {self.contacted_at:%Y-%m-%d}"

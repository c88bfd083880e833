# fees/services.py

"""
Admission Fee Operations

AdmissionFeeService: fee submission by admission officers and the
accountant's approve / reject / cancel decisions. Approval recognises
income exactly once per fee.

DueCollectionService: coordinator-submitted payments against a fee's
due amount and their accountant review, plus the coordinator's contact
log for students with dues.
"""

from decimal import Decimal
from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import transaction
from django.utils import timezone
import logging

from accounts.models import Role
from admissions.models import Course, Lead
from admissions.services import LeadService
from fees.models import AdmissionFee, DueCollection, DueFeesFollowUp
from finance.models import Income
from finance.services import IncomeExpenseService, to_amount
from utils.audit import log_activity
from utils.exceptions import Forbidden, InvalidState, InvalidStatus, NotFound, ValidationFailed

logger = logging.getLogger(__name__)


def currency_symbol():
    return getattr(settings, 'LEDGER', {}).get('CURRENCY_SYMBOL', '৳')


def _get_for_update(model, pk, label):
    try:
        return model.objects.select_for_update().get(pk=pk)
    except (model.DoesNotExist, ValueError, ValidationError):
        raise NotFound(f'{label} not found')


# =============================================================================
# ADMISSION FEE SERVICE
# =============================================================================

class AdmissionFeeService:
    """
    Fee lifecycle: PENDING -> APPROVED | REJECTED, APPROVED -> REJECTED via cancel.
    """

    @staticmethod
    @transaction.atomic
    def create_fee(actor, data):
        """
        Submit an admission fee for a lead assigned to the actor.

        Args:
            actor: Admission officer
            data (dict): lead, course (optional), course_name, total_amount,
                amount, method, payment_date, next_payment_date, note

        Returns:
            AdmissionFee (PENDING)

        Raises:
            NotFound: Unknown lead
            Forbidden: Lead assigned to someone else
            InvalidState: Lead already admitted
            ValidationFailed: Amounts inconsistent or fields missing
        """
        try:
            lead = Lead.objects.get(pk=data.get('lead'))
        except (Lead.DoesNotExist, ValueError, ValidationError):
            raise NotFound('Lead not found')

        if lead.assigned_to_id != actor.id:
            raise Forbidden('Cannot submit fee for unassigned lead')

        if lead.is_admitted:
            raise InvalidState('Lead is already admitted. Use due collection for additional payments.')

        course = None
        if data.get('course'):
            course = Course.objects.filter(pk=data['course']).first()
            if course is None:
                raise ValidationFailed('Course not found', code='INVALID_COURSE')

        course_name = (data.get('course_name') or (course.name if course else '')).strip()
        if not course_name:
            raise ValidationFailed('Course name is required')
        if not data.get('method') or not data.get('payment_date'):
            raise ValidationFailed('Missing required fields')

        amount = to_amount(data.get('amount'))
        total_amount = to_amount(data.get('total_amount', amount), field='total_amount')
        if amount < 0:
            raise ValidationFailed('Amount cannot be negative')
        if total_amount < amount:
            raise ValidationFailed('Total amount cannot be less than the amount paid')

        fee = AdmissionFee.objects.create(
            lead=lead,
            course=course,
            course_name=course_name,
            total_amount=total_amount,
            amount=amount,
            due_amount=total_amount - amount,
            method=data['method'],
            payment_date=data['payment_date'],
            next_payment_date=data.get('next_payment_date'),
            note=(data.get('note') or '').strip(),
            status=AdmissionFee.STATUS_PENDING,
            submitted_by_id=actor.id,
        )

        logger.info(f"Admission fee {amount}/{total_amount} submitted for {lead.lead_id} by {actor.name}")
        log_activity(actor, 'CREATE', 'AdmissionFee', fee, f"Submitted fee {amount} of {total_amount} for {lead.lead_id}")
        return fee

    @staticmethod
    @transaction.atomic
    def approve_fee(actor, fee_pk):
        """
        Approve a fee and recognise its income once.

        Re-approving an approved fee changes nothing and never duplicates
        the income row.

        Raises:
            InvalidStatus: Fee was rejected
        """
        fee = _get_for_update(AdmissionFee, fee_pk, 'Fee')

        if fee.status == AdmissionFee.STATUS_REJECTED:
            raise InvalidStatus('Rejected fees cannot be approved')

        first_approval = fee.status == AdmissionFee.STATUS_PENDING
        fee.status = AdmissionFee.STATUS_APPROVED
        fee.due_amount = fee.expected_due()
        if first_approval:
            fee.reviewed_by_id = actor.id
            fee.reviewed_at = timezone.now()
        fee.save()

        income, created = IncomeExpenseService.record_system_income(
            ref_type=Income.REF_ADMISSION_FEE,
            ref_id=fee.pk,
            amount=fee.amount,
            date=fee.payment_date,
            source=Income.SOURCE_ADMISSION_FEE,
            added_by_id=actor.id,
            note=f"{fee.lead.lead_id} {fee.course_name}".strip(),
        )

        if first_approval:
            logger.info(f"Fee {fee.pk} for {fee.lead.lead_id} approved by {actor.name}")
            log_activity(actor, 'APPROVE', 'AdmissionFee', fee, f"Approved fee {fee.amount} for {fee.lead.lead_id}")
        elif created:
            logger.warning(f"Fee {fee.pk} was approved without income; income {income.pk} posted on re-approval")

        return fee

    @staticmethod
    @transaction.atomic
    def reject_fee(actor, fee_pk, reason=''):
        """
        Reject a pending fee. Approved fees must be cancelled instead.

        Raises:
            InvalidStatus: Fee is APPROVED
        """
        fee = _get_for_update(AdmissionFee, fee_pk, 'Fee')

        if fee.status == AdmissionFee.STATUS_REJECTED:
            return fee
        if fee.status == AdmissionFee.STATUS_APPROVED:
            raise InvalidStatus('Approved fees must be cancelled, not rejected')

        fee.status = AdmissionFee.STATUS_REJECTED
        fee.reviewed_by_id = actor.id
        fee.reviewed_at = timezone.now()
        if reason and reason.strip():
            fee.append_note(f"[REJECTED by {actor.name}] {reason.strip()}")
        fee.save()

        logger.info(f"Fee {fee.pk} for {fee.lead.lead_id} rejected by {actor.name}")
        log_activity(actor, 'REJECT', 'AdmissionFee', fee, f"Rejected fee {fee.amount} for {fee.lead.lead_id}")
        return fee

    @staticmethod
    @transaction.atomic
    def cancel_fee(actor, fee_pk, reason):
        """
        Cancel an approved fee, moving it to REJECTED.

        The income recognised at approval is kept; a compensating entry
        has to be posted by the accountant.

        Raises:
            ValidationFailed: Empty reason
            InvalidStatus: Fee is not APPROVED
        """
        reason = (reason or '').strip()
        if not reason:
            raise ValidationFailed('Cancellation reason is required')

        fee = _get_for_update(AdmissionFee, fee_pk, 'Fee')
        if fee.status != AdmissionFee.STATUS_APPROVED:
            raise InvalidStatus('Can only cancel approved fees')

        stamp = timezone.localtime().strftime('%d/%m/%Y %H:%M')
        fee.append_note(f"[CANCELLED by {actor.name} on {stamp}]\nReason: {reason}")
        fee.status = AdmissionFee.STATUS_REJECTED
        fee.save()

        retained = Income.objects.filter(ref_type=Income.REF_ADMISSION_FEE, ref_id=fee.pk).first()
        if retained is not None:
            logger.warning(
                f"Fee {fee.pk} for {fee.lead.lead_id} cancelled; income {retained.pk} "
                f"({retained.amount}) retained and needs a compensating entry"
            )

        log_activity(
            actor, 'CANCEL', 'AdmissionFee', fee,
            f"Cancelled approved fee ({fee.total_amount}). Reason: {reason}"
        )
        return fee

    @staticmethod
    def reject_for_undo_admission(actor, lead, reason=''):
        """
        Reject every non-rejected fee of a lead whose admission is undone.
        Must run inside the caller's transaction.

        Returns:
            list: The fees that were rejected
        """
        fees = list(
            AdmissionFee.objects.select_for_update()
            .filter(lead=lead)
            .exclude(status=AdmissionFee.STATUS_REJECTED)
        )
        stamp = timezone.localtime().strftime('%d/%m/%Y %H:%M')
        for fee in fees:
            note = f"[REJECTED on undo admission by {actor.name} on {stamp}]"
            if reason and reason.strip():
                note += f"\nReason: {reason.strip()}"
            fee.append_note(note)
            fee.status = AdmissionFee.STATUS_REJECTED
            fee.save()
        return fees

    @staticmethod
    def list_fees(actor, status=None, lead=None):
        queryset = AdmissionFee.objects.select_related('lead', 'course')
        if actor.role == Role.ADMISSION:
            queryset = queryset.filter(submitted_by_id=actor.id)
        if status:
            queryset = queryset.filter(status=status.upper())
        if lead:
            queryset = queryset.filter(lead_id=lead)
        return queryset.order_by('-created_at')

    @staticmethod
    def get_fee_status_for_lead(actor, lead_pk):
        """
        Admission officers may only ask about leads assigned to them.

        Returns:
            dict: {'has_approved_fee': bool, 'fee': latest approved AdmissionFee or None}
        """
        lead = LeadService.get_lead(lead_pk)
        LeadService.check_lead_access(actor, lead)

        fee = (
            AdmissionFee.objects.select_related('lead')
            .filter(lead=lead, status=AdmissionFee.STATUS_APPROVED)
            .order_by('-created_at')
            .first()
        )
        return {'has_approved_fee': fee is not None, 'fee': fee}


# =============================================================================
# DUE COLLECTION SERVICE
# =============================================================================

class DueCollectionService:
    """
    Due collections and the coordinator's follow-up log.
    """

    @staticmethod
    @transaction.atomic
    def submit(actor, data):
        """
        Record a pending due collection; the fee is untouched until approval.

        Args:
            data (dict): admission_fee, amount, payment_method, payment_date,
                next_payment_date, note

        Raises:
            ValidationFailed: amount <= 0
            ValidationFailed (INVALID_AMOUNT): amount above the current due
            InvalidState: Fee is not APPROVED
        """
        fee = _get_for_update(AdmissionFee, data.get('admission_fee'), 'Admission fee')

        amount = to_amount(data.get('amount'))
        if amount <= 0:
            raise ValidationFailed('Invalid payment data')
        if fee.status != AdmissionFee.STATUS_APPROVED:
            raise InvalidState('Dues can only be collected against approved fees')
        if amount > fee.due_amount:
            raise ValidationFailed('Cannot collect more than due amount', code='INVALID_AMOUNT')

        note = (data.get('note') or '').strip()
        collection = DueCollection.objects.create(
            admission_fee=fee,
            lead=fee.lead,
            coordinator_id=actor.id,
            amount=amount,
            payment_method=data.get('payment_method') or 'CASH',
            payment_date=data.get('payment_date') or timezone.localdate(),
            next_payment_date=data.get('next_payment_date'),
            note=note,
            status=DueCollection.STATUS_PENDING,
        )

        tracking_note = f"Submitted due collection of {currency_symbol()}{amount} (Pending Approval)"
        if note:
            tracking_note += f" - {note}"
        DueFeesFollowUp.objects.create(
            admission_fee=fee,
            lead=fee.lead,
            coordinator_id=actor.id,
            follow_up_type='OTHER',
            note=tracking_note,
            previous_next_payment_date=fee.next_payment_date,
            updated_next_payment_date=collection.next_payment_date,
            amount_promised=amount,
        )

        logger.info(f"Due collection {amount} submitted for {fee.lead.lead_id} by {actor.name}")
        log_activity(actor, 'CREATE', 'DueCollection', collection, f"Submitted due collection {amount} for {fee.lead.lead_id}")
        return collection

    @staticmethod
    @transaction.atomic
    def approve(actor, collection_pk, review_note=''):
        """
        Apply a pending collection to its fee and recognise the income.

        Both rows are locked. The fee must still be APPROVED and the
        collection must not exceed the fee's current due.

        Raises:
            InvalidStatus: Collection already reviewed
            InvalidState: Fee no longer approved or due exceeded
        """
        collection = _get_for_update(DueCollection, collection_pk, 'Due collection')
        if collection.is_reviewed:
            raise InvalidStatus('Can only approve pending collections')

        fee = _get_for_update(AdmissionFee, collection.admission_fee_id, 'Admission fee')
        if fee.status != AdmissionFee.STATUS_APPROVED:
            raise InvalidState('The admission fee is no longer approved')
        if collection.amount > fee.due_amount:
            raise InvalidState(
                f"Collection of {collection.amount} exceeds the current due of {fee.due_amount}"
            )

        fee.amount += collection.amount
        fee.due_amount = fee.expected_due()
        if collection.next_payment_date:
            fee.next_payment_date = collection.next_payment_date

        line = (
            f"Due collected: {currency_symbol()}{collection.amount} "
            f"on {collection.payment_date:%d/%m/%Y}"
        )
        if collection.note:
            line += f" - {collection.note}"
        fee.note = f"{fee.note}\n{line}" if fee.note else line
        fee.save()

        IncomeExpenseService.record_system_income(
            ref_type=Income.REF_DUE_COLLECTION,
            ref_id=collection.pk,
            amount=collection.amount,
            date=collection.payment_date,
            source=Income.SOURCE_DUE_COLLECTION,
            added_by_id=actor.id,
            note=f"{fee.lead.lead_id} - Due payment collected by coordinator",
        )

        collection.status = DueCollection.STATUS_APPROVED
        collection.reviewed_by_id = actor.id
        collection.reviewed_at = timezone.now()
        collection.review_note = (review_note or '').strip()
        collection.save()

        logger.info(
            f"Due collection {collection.pk} ({collection.amount}) approved by {actor.name}; "
            f"{fee.lead.lead_id} now owes {fee.due_amount}"
        )
        log_activity(actor, 'APPROVE', 'DueCollection', collection, f"Approved due collection {collection.amount} for {fee.lead.lead_id}")
        return collection

    @staticmethod
    @transaction.atomic
    def reject(actor, collection_pk, review_note=''):
        collection = _get_for_update(DueCollection, collection_pk, 'Due collection')
        if collection.is_reviewed:
            raise InvalidStatus('Can only reject pending collections')

        collection.status = DueCollection.STATUS_REJECTED
        collection.reviewed_by_id = actor.id
        collection.reviewed_at = timezone.now()
        collection.review_note = (review_note or '').strip()
        collection.save()

        logger.info(f"Due collection {collection.pk} rejected by {actor.name}")
        log_activity(actor, 'REJECT', 'DueCollection', collection, f"Rejected due collection {collection.amount}")
        return collection

    @staticmethod
    def list_collections(status=None, coordinator_id=None):
        queryset = DueCollection.objects.select_related('lead', 'admission_fee')
        if status:
            queryset = queryset.filter(status=status.upper())
        if coordinator_id:
            queryset = queryset.filter(coordinator_id=coordinator_id)
        return queryset.order_by('-submitted_at')

    # -------------------------------------------------------------------------
    # COORDINATOR FOLLOW-UPS
    # -------------------------------------------------------------------------

    @staticmethod
    @transaction.atomic
    def add_follow_up(actor, data):
        """
        Log a contact with a student who owes dues; optionally move the
        fee's next payment date.

        Args:
            data (dict): admission_fee, follow_up_type, note,
                amount_promised, updated_next_payment_date
        """
        fee = _get_for_update(AdmissionFee, data.get('admission_fee'), 'Admission fee')

        note = (data.get('note') or '').strip()
        if not data.get('follow_up_type') or not note:
            raise ValidationFailed('Missing required fields')

        new_date = data.get('updated_next_payment_date')
        follow_up = DueFeesFollowUp.objects.create(
            admission_fee=fee,
            lead=fee.lead,
            coordinator_id=actor.id,
            follow_up_type=data['follow_up_type'],
            note=note,
            previous_next_payment_date=fee.next_payment_date,
            updated_next_payment_date=new_date,
            amount_promised=to_amount(data.get('amount_promised') or Decimal('0')),
        )

        if new_date:
            fee.next_payment_date = new_date
            fee.save(update_fields=['next_payment_date'])

        log_activity(actor, 'CREATE', 'DueFeesFollowUp', follow_up, f"Follow-up with {fee.lead.lead_id}: {note[:100]}")
        return follow_up

    @staticmethod
    @transaction.atomic
    def update_payment_date(actor, fee_pk, next_payment_date):
        if not next_payment_date:
            raise ValidationFailed('next_payment_date is required')

        fee = _get_for_update(AdmissionFee, fee_pk, 'Admission fee')
        previous = fee.next_payment_date
        fee.next_payment_date = next_payment_date
        fee.save(update_fields=['next_payment_date'])

        logger.info(f"Next payment date for {fee.lead.lead_id} moved {previous} -> {next_payment_date} by {actor.name}")
        log_activity(actor, 'UPDATE', 'AdmissionFee', fee, f"Next payment date moved to {next_payment_date}")
        return fee

    @staticmethod
    def get_fee_history(fee_pk):
        """Fee with its coordinator follow-ups, newest first."""
        try:
            fee = AdmissionFee.objects.select_related('lead').get(pk=fee_pk)
        except (AdmissionFee.DoesNotExist, ValueError, ValidationError):
            raise NotFound('Admission fee not found')
        return fee, list(fee.follow_ups.order_by('-contacted_at'))

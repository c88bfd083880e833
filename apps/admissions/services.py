# admissions/services.py

"""
Lead Operations

LeadService handles intake: creation (single and bulk), duplicate
detection, assignment to admission officers and read access.

LeadPipelineService moves leads through the admission status graph and
owns the undo-admission compensation.
"""

from datetime import timedelta
from django.conf import settings
from django.contrib.auth.models import User
from django.core.exceptions import ValidationError
from django.db import transaction
from django.db.models import Q
from django.utils import timezone
import logging

from accounts.models import Role
from admissions.models import Course, Batch, BatchMembership, Lead, LeadFollowUp
from admissions.utils import generate_lead_id, normalize_source, normalize_status
from utils.audit import log_activity
from utils.exceptions import (
    BadTransition, Conflict, Forbidden, InvalidState, InvalidStatus,
    NotFound, ServiceError, ValidationFailed,
)

logger = logging.getLogger(__name__)


def leads_setting(name, default):
    return getattr(settings, 'LEADS', {}).get(name, default)


# =============================================================================
# LEAD SERVICE - INTAKE, ASSIGNMENT, READ ACCESS
# =============================================================================

class LeadService:
    """
    Lead intake and assignment.
    """

    STANDARD_IMPORT_COLUMNS = ('Name', 'Phone', 'Email', 'InterestedCourse', 'Source')

    @staticmethod
    def resolve_course(course_name):
        """
        Find a course by case-insensitive name.

        Raises:
            ValidationFailed (INVALID_COURSE): If no such course exists
        """
        course = Course.objects.filter(name__iexact=course_name.strip()).first()
        if course is None:
            raise ValidationFailed(f'Course "{course_name}" does not exist', code='INVALID_COURSE')
        return course

    @staticmethod
    def find_duplicate(phone=None, email=None):
        """Return a lead created within the dedupe window sharing phone or email."""
        match = Q()
        if phone:
            match |= Q(phone=phone)
        if email:
            match |= Q(email=email.lower())
        if not match:
            return None

        window = leads_setting('DUPLICATE_WINDOW_DAYS', 180)
        since = timezone.now() - timedelta(days=window)
        return Lead.objects.filter(match, created_at__gte=since).first()

    @staticmethod
    @transaction.atomic
    def create_lead(actor, data):
        """
        Create a lead in ASSIGNED status with a generated lead id.

        Args:
            actor: Actor creating the lead
            data (dict): name, phone, email, interested_course, source,
                priority, notes, custom_fields

        Returns:
            Lead instance

        Raises:
            ValidationFailed: Missing name or unknown course
            Conflict: Same phone/email seen within the dedupe window
        """
        name = (data.get('name') or '').strip()
        if not name:
            raise ValidationFailed('Name required')

        phone = (data.get('phone') or '').strip()
        email = (data.get('email') or '').strip().lower()
        course_name = (data.get('interested_course') or '').strip()

        if course_name:
            course_name = LeadService.resolve_course(course_name).name

        duplicate = LeadService.find_duplicate(phone=phone, email=email)
        if duplicate is not None:
            raise Conflict(f'Duplicate phone/email in recent leads ({duplicate.lead_id})')

        lead = Lead.objects.create(
            lead_id=generate_lead_id(course_name or None),
            name=name,
            phone=phone,
            email=email,
            interested_course=course_name,
            source=normalize_source(data.get('source')),
            priority=data.get('priority') or 'MEDIUM',
            notes=data.get('notes') or '',
            status=Lead.STATUS_ASSIGNED,
            assigned_by_id=actor.id,
            custom_fields=data.get('custom_fields') or {},
        )

        logger.info(f"Created lead {lead.lead_id} ({lead.name}) by {actor.name}")
        log_activity(actor, 'CREATE', 'Lead', lead, f"Created lead: {lead.name} ({lead.lead_id})")

        return lead

    @staticmethod
    def bulk_import(actor, rows):
        """
        Create leads from imported rows; each row succeeds or fails alone.

        Args:
            actor: Actor performing the import
            rows: Iterable of (row_number, {header: value}) from
                admissions.importers

        Returns:
            dict: {'created': int, 'skipped': int, 'errors': [first N messages]}
        """
        rows = list(rows)
        created = 0
        skipped = 0
        errors = []

        for row_number, row in rows:
            custom_fields = {
                header: value for header, value in row.items()
                if header not in LeadService.STANDARD_IMPORT_COLUMNS and value
            }
            data = {
                'name': row.get('Name', ''),
                'phone': row.get('Phone', ''),
                'email': row.get('Email', ''),
                'interested_course': row.get('InterestedCourse', ''),
                'source': row.get('Source') or 'Others',
                'custom_fields': custom_fields,
            }
            try:
                LeadService.create_lead(actor, data)
                created += 1
            except ServiceError as e:
                skipped += 1
                errors.append(f"Row {row_number}: {e.message}")

        logger.info(f"Bulk import by {actor.name}: {created} created, {skipped} skipped")
        return {
            'created': created,
            'skipped': skipped,
            'errors': errors[:leads_setting('BULK_ERROR_LIMIT', 10)],
        }

    @staticmethod
    def get_assignee(assignee_id):
        """
        Raises:
            ValidationFailed (INVALID_ASSIGNEE): Not an active admission officer
        """
        try:
            pk = int(assignee_id)
        except (TypeError, ValueError):
            pk = None
        user = None
        if pk is not None:
            user = User.objects.filter(
                pk=pk, is_active=True, profile__role=Role.ADMISSION
            ).first()
        if user is None:
            raise ValidationFailed('Assignee must be Admission member', code='INVALID_ASSIGNEE')
        return user

    @staticmethod
    @transaction.atomic
    def assign_lead(actor, lead_pk, assignee_id):
        """
        Hand a lead to an admission officer.

        Assignment never changes the lead's status.
        """
        assignee = LeadService.get_assignee(assignee_id)
        lead = LeadService.get_lead(lead_pk, for_update=True)

        lead.assigned_to_id = str(assignee.pk)
        lead.assigned_at = timezone.now()
        lead.save(update_fields=['assigned_to_id', 'assigned_at'])

        assignee_name = assignee.get_full_name() or assignee.username
        logger.info(f"Lead {lead.lead_id} assigned to {assignee_name} by {actor.name}")
        log_activity(actor, 'UPDATE', 'Lead', lead, f"Assigned {lead.lead_id} to {assignee_name}")
        return lead

    @staticmethod
    @transaction.atomic
    def bulk_assign(actor, lead_pks, assignee_id):
        """
        Assign many leads to one admission officer.

        Returns:
            int: Number of leads assigned
        """
        if not lead_pks:
            raise ValidationFailed('leadIds array required')
        assignee = LeadService.get_assignee(assignee_id)

        count = Lead.objects.filter(pk__in=lead_pks).update(
            assigned_to_id=str(assignee.pk),
            assigned_at=timezone.now(),
            updated_at=timezone.now(),
            updated_by_id=actor.id,
        )

        assignee_name = assignee.get_full_name() or assignee.username
        logger.info(f"{count} leads assigned to {assignee_name} by {actor.name}")
        log_activity(actor, 'UPDATE', 'Lead', None, f"Bulk assigned {count} leads to {assignee_name}")
        return count

    @staticmethod
    def get_lead(lead_pk, for_update=False):
        queryset = Lead.objects.select_for_update() if for_update else Lead.objects.all()
        try:
            return queryset.get(pk=lead_pk)
        except (Lead.DoesNotExist, ValueError, ValidationError):
            raise NotFound('Lead not found')

    @staticmethod
    def check_lead_access(actor, lead):
        """Admission officers may only touch leads assigned to them."""
        if actor.role == Role.ADMISSION and lead.assigned_to_id != actor.id:
            raise Forbidden('Cannot access a lead assigned to someone else')

    @staticmethod
    def list_leads(actor, status=None, assigned_to=None, search=None):
        queryset = Lead.objects.select_related('admitted_to_course', 'admitted_to_batch')

        if actor.role == Role.ADMISSION:
            queryset = queryset.filter(assigned_to_id=actor.id)
        elif assigned_to:
            queryset = queryset.filter(assigned_to_id=assigned_to)

        if status:
            code = normalize_status(status)
            if code is None:
                raise InvalidStatus(f"Unknown status '{status}'")
            queryset = queryset.filter(status=code)

        if search:
            queryset = queryset.filter(
                Q(name__icontains=search) | Q(lead_id__icontains=search) |
                Q(phone__icontains=search) | Q(email__icontains=search)
            )

        return queryset.order_by('-created_at')

    @staticmethod
    def get_history(actor, lead_pk):
        """Lead with its ordered follow-up log."""
        lead = LeadService.get_lead(lead_pk)
        LeadService.check_lead_access(actor, lead)
        return lead, list(lead.follow_ups.all())


# =============================================================================
# LEAD PIPELINE SERVICE - STATUS TRANSITIONS
# =============================================================================

class LeadPipelineService:
    """
    Status transitions and the undo-admission compensation.
    """

    @staticmethod
    def add_follow_up(lead, actor, note):
        return LeadFollowUp.objects.create(
            lead=lead,
            note=note,
            actor_id=actor.id,
            actor_name=actor.name,
        )

    @staticmethod
    def check_transition_rights(actor, lead):
        if actor.is_elevated:
            return
        if actor.role == Role.ADMISSION:
            if lead.assigned_to_id != actor.id:
                raise Forbidden('Cannot update unassigned lead')
            return
        raise Forbidden('Not allowed')

    @staticmethod
    @transaction.atomic
    def transition(actor, lead_pk, status, notes='', next_follow_up_date=None,
                   course_id=None, batch_id=None):
        """
        Move a lead along the status graph.

        Args:
            actor: Actor performing the transition
            lead_pk: Lead primary key
            status (str): Target status code or label
            notes (str): Follow-up note / not-admitted reason
            next_follow_up_date (date, optional): For IN_FOLLOW_UP
            course_id, batch_id (optional): For ADMITTED

        Returns:
            Updated Lead instance

        Raises:
            InvalidStatus: Unknown target status
            BadTransition: Target not reachable from the current status
            Forbidden: Admission officer acting on someone else's lead
        """
        target = normalize_status(status)
        if target is None:
            raise InvalidStatus('Invalid target status')

        lead = LeadService.get_lead(lead_pk, for_update=True)
        LeadPipelineService.check_transition_rights(actor, lead)

        notes = (notes or '').strip()
        source = lead.status
        follow_up_again = (
            source == Lead.STATUS_IN_FOLLOW_UP
            and target == Lead.STATUS_IN_FOLLOW_UP
            and bool(notes)
        )
        if not lead.can_transition_to(target) and not follow_up_again:
            raise BadTransition(
                f"Cannot move {lead.get_status_display()} -> {dict(Lead.STATUS_CHOICES)[target]}"
            )

        now = timezone.now()

        if target == Lead.STATUS_COUNSELING:
            lead.counseling_at = now

        elif target == Lead.STATUS_IN_FOLLOW_UP:
            if notes:
                LeadPipelineService.add_follow_up(lead, actor, notes)
            if next_follow_up_date:
                lead.next_follow_up_date = next_follow_up_date

        elif target == Lead.STATUS_ADMITTED:
            LeadPipelineService._admit(lead, now, course_id, batch_id)

        elif target == Lead.STATUS_NOT_ADMITTED:
            if notes:
                LeadPipelineService.add_follow_up(lead, actor, f"Not Admitted: {notes}")

        lead.status = target
        lead.save()

        logger.info(f"Lead {lead.lead_id}: {source} -> {target} by {actor.name}")
        log_activity(
            actor, 'TRANSITION', 'Lead', lead,
            f"{lead.lead_id} moved from {source} to {target}"
        )
        return lead

    @staticmethod
    def _admit(lead, now, course_id=None, batch_id=None):
        if not lead.admitted_at:
            lead.admitted_at = now

        course = None
        if course_id:
            course = Course.objects.filter(pk=course_id).first()
            if course is None:
                raise ValidationFailed('Course not found', code='INVALID_COURSE')

        batch = None
        if batch_id:
            batch = Batch.objects.select_related('course').filter(pk=batch_id).first()
            if batch is None:
                raise ValidationFailed('Batch not found', code='INVALID_BATCH')
            if course is not None and batch.course_id != course.pk:
                raise ValidationFailed('Batch does not belong to the selected course', code='INVALID_BATCH')
            course = course or batch.course

        if course is not None:
            lead.admitted_to_course = course
            lead.interested_course = course.name

        if batch is not None:
            lead.admitted_to_batch = batch
            BatchMembership.objects.get_or_create(
                batch=batch, lead=lead, defaults={'admitted_at': now}
            )

    @staticmethod
    @transaction.atomic
    def undo_admission(actor, lead_pk, reason=''):
        """
        Reverse an admission as one unit of work.

        1. Remove the lead from its batch roster
        2. Reject every non-rejected admission fee of the lead
        3. Reset the lead to IN_FOLLOW_UP and clear admission fields

        Income already recognised for the fees is left in place; the
        accountant must post a compensating entry.

        Raises:
            Forbidden: Actor is not Admin/SuperAdmin
            InvalidState: Lead is not ADMITTED
        """
        from fees.services import AdmissionFeeService

        if not actor.is_elevated:
            raise Forbidden('Admin/SuperAdmin only')

        lead = LeadService.get_lead(lead_pk, for_update=True)
        if not lead.is_admitted:
            raise InvalidState('Only admitted leads can have their admission undone')

        removed, _ = BatchMembership.objects.filter(lead=lead).delete()

        rejected_fees = AdmissionFeeService.reject_for_undo_admission(actor, lead, reason)

        batch_name = str(lead.admitted_to_batch) if lead.admitted_to_batch else None
        lead.status = Lead.STATUS_IN_FOLLOW_UP
        lead.admitted_at = None
        lead.admitted_to_course = None
        lead.admitted_to_batch = None
        lead.save()

        note = f"Admission undone by {actor.name}"
        if batch_name:
            note += f" (removed from {batch_name})"
        if reason:
            note += f". Reason: {reason.strip()}"
        LeadPipelineService.add_follow_up(lead, actor, note)

        if rejected_fees:
            logger.warning(
                f"Undo admission of {lead.lead_id}: {len(rejected_fees)} fee(s) rejected; "
                f"income already recorded for approved fees is retained"
            )
        logger.info(f"Admission undone for lead {lead.lead_id} by {actor.name} ({removed} roster rows removed)")
        log_activity(actor, 'UNDO', 'Lead', lead, f"Undid admission of {lead.lead_id}")

        return lead

"""
Lead intake and the admission pipeline: transition legality, ownership,
bulk import and the full admit / undo-admission scenario.
"""

from datetime import date, timedelta
from decimal import Decimal

import pytest
from django.utils import timezone

from admissions.importers import read_csv_rows
from admissions.models import BatchMembership, Lead, LeadFollowUp
from admissions.services import LeadPipelineService, LeadService
from admissions.stats import get_follow_up_notifications, get_pipeline_report
from fees.models import AdmissionFee
from fees.services import AdmissionFeeService
from finance.models import Income
from utils.exceptions import (
    BadTransition, Conflict, Forbidden, InvalidState, InvalidStatus,
    ValidationFailed,
)
from utils.models import ActivityLog

pytestmark = pytest.mark.django_db

STATUSES = [code for code, _ in Lead.STATUS_CHOICES]
LEGAL = {
    ('ASSIGNED', 'COUNSELING'),
    ('COUNSELING', 'ADMITTED'),
    ('COUNSELING', 'IN_FOLLOW_UP'),
    ('COUNSELING', 'NOT_ADMITTED'),
    ('IN_FOLLOW_UP', 'ADMITTED'),
    ('IN_FOLLOW_UP', 'NOT_ADMITTED'),
}


# =============================================================================
# TRANSITION LEGALITY
# =============================================================================

@pytest.mark.parametrize('source', STATUSES)
@pytest.mark.parametrize('target', STATUSES)
def test_transition_legality(source, target, make_lead, admin):
    lead = make_lead(status=source)

    if (source, target) in LEGAL:
        updated = LeadPipelineService.transition(admin, lead.pk, target)
        assert updated.status == target
    else:
        with pytest.raises(BadTransition):
            LeadPipelineService.transition(admin, lead.pk, target)
        lead.refresh_from_db()
        assert lead.status == source


def test_follow_up_can_be_repeated_with_a_note(make_lead, admission):
    lead = make_lead(status=Lead.STATUS_IN_FOLLOW_UP, assigned_to=admission)

    with pytest.raises(BadTransition):
        LeadPipelineService.transition(admission, lead.pk, 'IN_FOLLOW_UP')

    updated = LeadPipelineService.transition(
        admission, lead.pk, 'IN_FOLLOW_UP',
        notes='Called again, asked for installment plan',
        next_follow_up_date=date(2025, 4, 10),
    )
    assert updated.status == Lead.STATUS_IN_FOLLOW_UP
    assert updated.next_follow_up_date == date(2025, 4, 10)
    assert updated.follow_ups.count() == 1


def test_unknown_target_status(make_lead, admin):
    lead = make_lead()
    with pytest.raises(InvalidStatus):
        LeadPipelineService.transition(admin, lead.pk, 'ENROLLED')


def test_status_labels_are_accepted(make_lead, admin):
    lead = make_lead(status=Lead.STATUS_COUNSELING)
    updated = LeadPipelineService.transition(admin, lead.pk, 'In Follow Up')
    assert updated.status == Lead.STATUS_IN_FOLLOW_UP


def test_officer_cannot_move_someone_elses_lead(make_lead, admission, other_admission):
    lead = make_lead(assigned_to=other_admission)
    with pytest.raises(Forbidden):
        LeadPipelineService.transition(admission, lead.pk, 'COUNSELING')


def test_counseling_records_timestamp(make_lead, admission):
    lead = make_lead(assigned_to=admission)
    updated = LeadPipelineService.transition(admission, lead.pk, 'COUNSELING')
    assert updated.counseling_at is not None


def test_not_admitted_reason_is_logged(make_lead, admission):
    lead = make_lead(status=Lead.STATUS_COUNSELING, assigned_to=admission)
    LeadPipelineService.transition(admission, lead.pk, 'NOT_ADMITTED', notes='Joined a competitor')
    assert lead.follow_ups.get().note == 'Not Admitted: Joined a competitor'


def test_batch_must_belong_to_course(make_lead, admin, course, batch):
    from admissions.models import Batch, Course

    other_course = Course.objects.create(name='Graphic Design')
    other_batch = Batch.objects.create(course=other_course, name='GD-1')
    lead = make_lead(status=Lead.STATUS_COUNSELING)

    with pytest.raises(ValidationFailed) as exc:
        LeadPipelineService.transition(admin, lead.pk, 'ADMITTED', course_id=course.pk, batch_id=other_batch.pk)
    assert exc.value.code == 'INVALID_BATCH'


# =============================================================================
# INTAKE
# =============================================================================

class TestLeadIntake:

    def test_create_lead_generates_id(self, marketing, course):
        lead = LeadService.create_lead(marketing, {
            'name': 'Rahim Uddin',
            'phone': '+8801711000001',
            'email': 'Rahim@Example.com',
            'interested_course': 'professional cloud computing',
            'source': 'Meta Lead',
        })

        assert lead.lead_id.startswith('LEAD-')
        assert '-PRO-' in lead.lead_id
        assert lead.status == Lead.STATUS_ASSIGNED
        assert lead.interested_course == 'Professional Cloud Computing'
        assert lead.email == 'rahim@example.com'
        assert lead.source == 'META'
        assert ActivityLog.objects.filter(action='CREATE', resource_type='Lead').count() == 1

    def test_duplicate_phone_is_rejected(self, marketing):
        LeadService.create_lead(marketing, {'name': 'A', 'phone': '+8801711000002'})
        with pytest.raises(Conflict):
            LeadService.create_lead(marketing, {'name': 'B', 'phone': '+8801711000002'})

    def test_unknown_course_is_rejected(self, marketing):
        with pytest.raises(ValidationFailed) as exc:
            LeadService.create_lead(marketing, {'name': 'A', 'interested_course': 'Underwater Welding'})
        assert exc.value.code == 'INVALID_COURSE'

    def test_bulk_import_skips_bad_rows(self, marketing, course):
        text = (
            'Name,Phone,Email,InterestedCourse,Source,City\n'
            'Karim,+8801711000010,karim@example.com,Professional Cloud Computing,LinkedIn Lead,Dhaka\n'
            ',+8801711000011,,,,\n'
            'Salma,+8801711000010,,,,Sylhet\n'
            'Nadia,+8801711000012,,Underwater Welding,,\n'
            'Tania,+8801711000013,,,Newspaper,Khulna\n'
        )
        result = LeadService.bulk_import(marketing, read_csv_rows(text))

        assert result['created'] == 2
        assert result['skipped'] == 3
        assert result['errors'][0].startswith('Row 3:')
        karim = Lead.objects.get(name='Karim')
        assert karim.custom_fields == {'City': 'Dhaka'}
        assert Lead.objects.get(name='Tania').source == 'OTHERS'

    def test_bulk_import_requires_headers(self):
        with pytest.raises(ValidationFailed) as exc:
            list(read_csv_rows('Name,Phone\nA,1\n'))
        assert exc.value.code == 'HEADER_MISSING'

    def test_assignment_keeps_status(self, make_lead, marketing, admission_user):
        lead = make_lead(status=Lead.STATUS_COUNSELING)
        updated = LeadService.assign_lead(marketing, lead.pk, admission_user.pk)
        assert updated.assigned_to_id == str(admission_user.pk)
        assert updated.status == Lead.STATUS_COUNSELING
        assert updated.assigned_at is not None

    def test_assignee_must_be_admission_officer(self, make_lead, marketing, accountant_user):
        lead = make_lead()
        with pytest.raises(ValidationFailed) as exc:
            LeadService.assign_lead(marketing, lead.pk, accountant_user.pk)
        assert exc.value.code == 'INVALID_ASSIGNEE'

    def test_bulk_assign(self, make_lead, marketing, admission_user):
        leads = [make_lead() for _ in range(3)]
        count = LeadService.bulk_assign(marketing, [str(l.pk) for l in leads], str(admission_user.pk))
        assert count == 3
        assert Lead.objects.filter(assigned_to_id=str(admission_user.pk)).count() == 3

    def test_officer_sees_only_own_leads(self, make_lead, admission, other_admission, marketing):
        mine = make_lead(assigned_to=admission)
        make_lead(assigned_to=other_admission)

        assert list(LeadService.list_leads(admission)) == [mine]
        assert LeadService.list_leads(marketing).count() == 2


# =============================================================================
# FULL SCENARIO
# =============================================================================

def test_admission_and_undo_scenario(marketing, admission, admission_user, accountant, admin, course, batch):
    lead = LeadService.create_lead(marketing, {
        'name': 'Farhana Akter',
        'phone': '+8801711000099',
        'interested_course': course.name,
    })
    LeadService.assign_lead(marketing, lead.pk, admission_user.pk)

    LeadPipelineService.transition(admission, lead.pk, 'COUNSELING')
    LeadPipelineService.transition(
        admission, lead.pk, 'IN_FOLLOW_UP', notes='Will pay after Eid', next_follow_up_date=date(2025, 4, 20)
    )

    fee = AdmissionFeeService.create_fee(admission, {
        'lead': lead.pk,
        'course': course.pk,
        'total_amount': Decimal('25000'),
        'amount': Decimal('10000'),
        'method': 'BKASH',
        'payment_date': date(2025, 4, 21),
    })
    AdmissionFeeService.approve_fee(accountant, fee.pk)

    lead = LeadPipelineService.transition(admission, lead.pk, 'ADMITTED', course_id=course.pk, batch_id=batch.pk)
    assert lead.admitted_at is not None
    assert lead.admitted_to_batch == batch
    assert BatchMembership.objects.filter(lead=lead, batch=batch).exists()

    with pytest.raises(Forbidden):
        LeadPipelineService.undo_admission(admission, lead.pk, reason='Mistake')

    lead = LeadPipelineService.undo_admission(admin, lead.pk, reason='Paid by mistake')

    assert lead.status == Lead.STATUS_IN_FOLLOW_UP
    assert lead.admitted_at is None
    assert lead.admitted_to_course is None
    assert lead.admitted_to_batch is None
    assert not BatchMembership.objects.filter(lead=lead).exists()

    fee.refresh_from_db()
    assert fee.status == AdmissionFee.STATUS_REJECTED
    assert 'REJECTED on undo admission' in fee.note
    # Recognised income stays; the accountant posts the compensating entry
    assert Income.objects.filter(ref_type=Income.REF_ADMISSION_FEE, ref_id=fee.pk).count() == 1

    last_note = LeadFollowUp.objects.filter(lead=lead).last().note
    assert last_note.startswith('Admission undone by')
    assert 'Paid by mistake' in last_note

    with pytest.raises(InvalidState):
        LeadPipelineService.undo_admission(admin, lead.pk)


def test_pipeline_report(make_lead, admission, admission_user, other_admission):
    make_lead(status=Lead.STATUS_ADMITTED, assigned_to=admission)
    make_lead(status=Lead.STATUS_COUNSELING, assigned_to=admission)
    make_lead(status=Lead.STATUS_ASSIGNED, assigned_to=other_admission)

    report = get_pipeline_report()

    assert report['overall']['total_leads'] == 3
    assert report['overall']['admitted'] == 1
    officer = next(o for o in report['officers'] if o['user']['id'] == str(admission_user.pk))
    assert officer['stats']['total_leads'] == 2
    assert officer['stats']['conversion_rate'] == 50.0


class TestFollowUpNotifications:
    TODAY = date(2025, 6, 10)

    @pytest.fixture
    def leads(self, make_lead, admission, other_admission):
        def due_in(days, **extra):
            return make_lead(next_follow_up_date=self.TODAY + timedelta(days=days), **extra)

        return {
            'overdue': due_in(-2, status=Lead.STATUS_IN_FOLLOW_UP, assigned_to=admission),
            'today': due_in(0, status=Lead.STATUS_COUNSELING, assigned_to=admission),
            'soon': due_in(3, assigned_to=admission),
            'later': due_in(4, status=Lead.STATUS_IN_FOLLOW_UP, assigned_to=admission),
            'closed': due_in(-5, status=Lead.STATUS_NOT_ADMITTED, assigned_to=admission),
            'colleague': due_in(-1, status=Lead.STATUS_IN_FOLLOW_UP, assigned_to=other_admission),
        }

    def test_officer_sees_own_leads_due_within_three_days(self, leads, admission):
        notifications = get_follow_up_notifications(admission, today=self.TODAY)

        assert [n['lead'] for n in notifications] == [leads['overdue'], leads['today'], leads['soon']]
        assert [(n['is_overdue'], n['days_until']) for n in notifications] == [
            (True, -2), (False, 0), (False, 3),
        ]

    def test_admin_sees_only_overdue_leads(self, leads, admin):
        notifications = get_follow_up_notifications(admin, today=self.TODAY)

        assert [n['lead'] for n in notifications] == [leads['overdue'], leads['colleague']]
        assert all(n['is_overdue'] for n in notifications)

    def test_endpoint(self, api, admission_user, marketing_user, make_lead, admission):
        lead = make_lead(assigned_to=admission, next_follow_up_date=timezone.localdate() - timedelta(days=1))

        response = api.login(admission_user).get('/api/leads/follow-up-notifications/')
        assert response.status_code == 200
        [item] = response.json()['notifications']
        assert item['lead_id'] == lead.lead_id
        assert item['is_overdue'] is True

        assert api.login(marketing_user).get('/api/leads/follow-up-notifications/').status_code == 403

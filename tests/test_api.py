"""
JSON API boundary: authentication, capability checks, error bodies and a
few end-to-end flows through the views.
"""

import io
import uuid
from decimal import Decimal

import pytest
from django.contrib.auth.models import User
from django.core.files.uploadedfile import SimpleUploadedFile
from openpyxl import Workbook

from admissions.models import Lead
from fees.models import AdmissionFee
from finance.models import AccountBalance
from utils.models import ActivityLog

pytestmark = pytest.mark.django_db


# =============================================================================
# AUTHENTICATION & CAPABILITIES
# =============================================================================

def test_anonymous_request_is_rejected(api):
    response = api.get('/api/leads/')
    assert response.status_code == 401
    assert response.json() == {'code': 'UNAUTHENTICATED', 'message': 'Authentication required'}


def test_user_without_profile_is_forbidden(api):
    user = User.objects.create_user(username='outsider', password='x')
    response = api.login(user).get('/api/leads/')
    assert response.status_code == 403
    assert response.json()['code'] == 'FORBIDDEN'


@pytest.mark.parametrize('path', ['/api/leads/report/', '/api/bank/balances/', '/api/due-collections/'])
def test_role_without_capability_is_forbidden(api, admission_user, path):
    response = api.login(admission_user).get(path)
    assert response.status_code == 403
    assert response.json()['code'] == 'FORBIDDEN'


def test_method_not_allowed(api, marketing_user):
    response = api.login(marketing_user).delete('/api/leads/')
    assert response.status_code == 405


def test_register_read_vs_write(api, it_admin_user):
    api.login(it_admin_user)
    assert api.get('/api/income/').status_code == 200
    response = api.post('/api/income/', {'date': '2025-01-01', 'source': 'Workshop', 'amount': '100'})
    assert response.status_code == 403


# =============================================================================
# LEADS
# =============================================================================

def test_create_and_list_leads(api, marketing_user, course):
    api.login(marketing_user)
    response = api.post('/api/leads/', {
        'name': 'Jamal Hossain',
        'phone': '+8801811000001',
        'interested_course': course.name,
        'custom_fields': {'campaign': 'spring'},
    })
    assert response.status_code == 201
    lead = response.json()['lead']
    assert lead['lead_id'].startswith('LEAD-')
    assert lead['status'] == 'ASSIGNED'
    assert lead['custom_fields'] == {'campaign': 'spring'}

    duplicate = api.post('/api/leads/', {'name': 'Jamal again', 'phone': '+8801811000001'})
    assert duplicate.status_code == 409
    assert duplicate.json()['code'] == 'DUPLICATE'

    listing = api.get('/api/leads/', {'search': 'Jamal'}).json()
    assert listing['count'] == 1


def test_create_lead_requires_name(api, marketing_user):
    response = api.login(marketing_user).post('/api/leads/', {'phone': '+8801811000002'})
    assert response.status_code == 400
    assert response.json()['code'] == 'VALIDATION_ERROR'


def test_malformed_json_body(api, marketing_user):
    api.login(marketing_user)
    response = api.client.post('/api/leads/', data='{not json', content_type='application/json')
    assert response.status_code == 400
    assert response.json()['message'] == 'Request body is not valid JSON'


def test_bulk_import_csv_upload(api, marketing_user):
    upload = SimpleUploadedFile(
        'leads.csv',
        b'Name,Phone,Email,InterestedCourse,Source\nAsha,+8801911000001,,,Meta Lead\nBina,+8801911000002,,,\n',
        content_type='text/csv',
    )
    api.login(marketing_user)
    response = api.client.post('/api/leads/bulk/', {'file': upload})

    assert response.status_code == 200
    assert response.json()['created'] == 2
    assert Lead.objects.filter(source='META').count() == 1


def test_bulk_import_xlsx_upload(api, marketing_user):
    workbook = Workbook()
    sheet = workbook.active
    sheet.append(['Name', 'Phone', 'Email', 'InterestedCourse', 'Source', 'District'])
    sheet.append(['Rupa', '+8801911000003', 'rupa@example.com', None, 'LinkedIn Lead', 'Rajshahi'])
    sheet.append(['Sumon', 8801911000004, None, None, None, None])
    buffer = io.BytesIO()
    workbook.save(buffer)

    upload = SimpleUploadedFile('leads.xlsx', buffer.getvalue())
    api.login(marketing_user)
    response = api.client.post('/api/leads/bulk/', {'file': upload})

    assert response.status_code == 200
    body = response.json()
    assert body['created'] == 2
    assert Lead.objects.get(name='Rupa').custom_fields == {'District': 'Rajshahi'}
    assert Lead.objects.get(name='Sumon').phone == '8801911000004'


def test_bulk_import_without_rows(api, marketing_user):
    response = api.login(marketing_user).post('/api/leads/bulk/', {
        'csv': 'Name,Phone,Email,InterestedCourse,Source\n',
    })
    assert response.status_code == 400
    assert response.json()['code'] == 'NO_ROWS'


def test_status_endpoint_errors(api, admission_user, make_lead, admission):
    api.login(admission_user)

    missing = api.patch(f'/api/leads/{uuid.uuid4()}/status/', {'status': 'COUNSELING'})
    assert missing.status_code == 404
    assert missing.json()['code'] == 'NOT_FOUND'

    lead = make_lead(assigned_to=admission)
    invalid = api.patch(f'/api/leads/{lead.pk}/status/', {'status': 'GRADUATED'})
    assert invalid.status_code == 400
    assert invalid.json()['code'] == 'INVALID_STATUS'

    skipped = api.patch(f'/api/leads/{lead.pk}/status/', {'status': 'ADMITTED'})
    assert skipped.status_code == 400
    assert skipped.json()['code'] == 'BAD_TRANSITION'

    ok = api.patch(f'/api/leads/{lead.pk}/status/', {'status': 'COUNSELING'})
    assert ok.status_code == 200
    assert ok.json()['lead']['status'] == 'COUNSELING'


def test_assign_and_history(api, marketing_user, admission_user, make_lead):
    lead = make_lead()
    response = api.login(marketing_user).post(
        f'/api/leads/{lead.pk}/assign/', {'assigned_to': str(admission_user.pk)}
    )
    assert response.status_code == 200
    assert response.json()['lead']['assigned_to'] == str(admission_user.pk)

    history = api.login(admission_user).get(f'/api/leads/{lead.pk}/history/')
    assert history.status_code == 200
    assert history.json()['lead']['follow_ups'] == []


# =============================================================================
# FEES & LEDGER FLOWS
# =============================================================================

def test_fee_submission_and_approval(api, admission_user, accountant_user, make_lead, admission):
    lead = make_lead(assigned_to=admission)

    created = api.login(admission_user).post('/api/fees/', {
        'lead': str(lead.pk),
        'course_name': 'Professional Cloud Computing',
        'total_amount': '25000.00',
        'amount': '10000.00',
        'method': 'NAGAD',
        'payment_date': '2025-03-01',
    })
    assert created.status_code == 201
    fee_id = created.json()['fee']['id']
    assert created.json()['fee']['due_amount'] == '15000.00'

    forbidden = api.patch(f'/api/fees/{fee_id}/approve/')
    assert forbidden.status_code == 403

    approved = api.login(accountant_user).patch(f'/api/fees/{fee_id}/approve/')
    assert approved.status_code == 200
    assert approved.json()['fee']['status'] == 'APPROVED'

    status = api.get(f'/api/fees/status/{lead.pk}/').json()
    assert status['has_approved_fee'] is True

    cancel_without_reason = api.patch(f'/api/fees/{fee_id}/cancel/', {})
    assert cancel_without_reason.status_code == 400

    assert ActivityLog.objects.filter(action='APPROVE', resource_type='AdmissionFee').count() == 1
    assert AdmissionFee.objects.get(pk=fee_id).reviewed_by_id == str(accountant_user.pk)


def test_bank_deposit_and_withdraw(api, accountant_user, manager_user):
    api.login(accountant_user)

    deposit = api.post('/api/bank/deposit/', {'deposit_from': 'Admission Fees', 'amount': '500.50'})
    assert deposit.status_code == 201
    assert Decimal(deposit.json()['balance']['bank_balance']) == Decimal('500.50')

    shortfall = api.post('/api/bank/deposit/', {'deposit_from': 'Petty Cash', 'amount': '1'})
    assert shortfall.status_code == 400
    assert shortfall.json()['code'] == 'INSUFFICIENT_FUNDS'

    withdraw = api.post('/api/bank/withdraw/', {'withdraw_purpose': 'Petty Cash', 'amount': '100'})
    assert withdraw.status_code == 201

    balances = api.get('/api/bank/balances/').json()['balance']
    assert Decimal(balances['petty_cash']) == Decimal('100')

    balance = AccountBalance.get_instance()
    assert balance.bank_balance == Decimal('400.50')
    assert balance.petty_cash == Decimal('100.00')

    transactions = api.get('/api/bank/transactions/').json()['transactions']
    assert len(transactions) == 2

    # Only elevated roles may delete or reconcile
    assert api.delete(f"/api/bank/transactions/{transactions[0]['id']}/").status_code == 403
    api.login(manager_user)
    assert api.delete(f"/api/bank/transactions/{transactions[0]['id']}/").status_code == 200
    report = api.get('/api/bank/reconcile/').json()
    assert Decimal(report['bank_difference']) != 0


def test_accounting_summary_endpoint(api, accountant_user):
    api.login(accountant_user)
    api.post('/api/expenses/', {'date': '2025-05-01', 'purpose': 'Internet', 'amount': '1500'})

    summary = api.get('/api/accounting/summary/', {'date_from': '2025-01-01', 'date_to': '2025-12-31'})
    assert summary.status_code == 200
    assert Decimal(summary.json()['total_expense']) == Decimal('1500')

    bad_range = api.get('/api/accounting/summary/', {'date_from': '2025-12-31', 'date_to': '2025-01-01'})
    assert bad_range.status_code == 400


def test_list_pagination(api, marketing_user, make_lead):
    for _ in range(3):
        make_lead()
    api.login(marketing_user)

    first = api.get('/api/leads/', {'page_size': 2}).json()
    assert (first['count'], first['num_pages'], len(first['leads'])) == (3, 2, 2)

    # Out-of-range pages clamp to the last page
    last = api.get('/api/leads/', {'page_size': 2, 'page': 9}).json()
    assert last['page'] == 2
    assert len(last['leads']) == 1

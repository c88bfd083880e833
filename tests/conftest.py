"""
Shared pytest fixtures for the back-office tests.

- Staff users, one per role, each with a UserProfile
- Actor helpers mirroring what capability_required puts on the request
- A course with a batch, and lead/fee builders
- A logged-in JSON client
"""

import json
from datetime import date
from decimal import Decimal

import pytest
from django.contrib.auth.models import User
from django.test import Client

from accounts.models import Role, UserProfile
from accounts.permissions import actor_from_user
from admissions.models import Batch, Course, Lead
from fees.models import AdmissionFee


# =============================================================================
# USERS & ACTORS
# =============================================================================

@pytest.fixture
def make_user(db):
    def _make_user(username, role, **extra):
        user = User.objects.create_user(
            username=username,
            password='pass12345',
            first_name=extra.pop('first_name', username.title()),
            **extra
        )
        UserProfile.objects.create(user=user, role=role)
        return user
    return _make_user


@pytest.fixture
def marketing_user(make_user):
    return make_user('marketer', Role.DIGITAL_MARKETING)


@pytest.fixture
def admission_user(make_user):
    return make_user('officer', Role.ADMISSION)


@pytest.fixture
def other_admission_user(make_user):
    return make_user('officer2', Role.ADMISSION)


@pytest.fixture
def accountant_user(make_user):
    return make_user('accountant', Role.ACCOUNTANT)


@pytest.fixture
def coordinator_user(make_user):
    return make_user('coordinator', Role.COORDINATOR)


@pytest.fixture
def manager_user(make_user):
    return make_user('manager', Role.ADMIN)


@pytest.fixture
def it_admin_user(make_user):
    return make_user('itadmin', Role.IT_ADMIN)


@pytest.fixture
def marketing(marketing_user):
    return actor_from_user(marketing_user)


@pytest.fixture
def admission(admission_user):
    return actor_from_user(admission_user)


@pytest.fixture
def other_admission(other_admission_user):
    return actor_from_user(other_admission_user)


@pytest.fixture
def accountant(accountant_user):
    return actor_from_user(accountant_user)


@pytest.fixture
def coordinator(coordinator_user):
    return actor_from_user(coordinator_user)


@pytest.fixture
def admin(manager_user):
    return actor_from_user(manager_user)


# =============================================================================
# CATALOGUE, LEADS & FEES
# =============================================================================

@pytest.fixture
def course(db):
    return Course.objects.create(name='Professional Cloud Computing', code='PCC', fee=Decimal('25000.00'))


@pytest.fixture
def batch(course):
    return Batch.objects.create(course=course, name='Batch 07', start_date=date(2025, 2, 1))


@pytest.fixture
def make_lead(db):
    counter = {'n': 0}

    def _make_lead(status=Lead.STATUS_ASSIGNED, assigned_to=None, **extra):
        counter['n'] += 1
        n = counter['n']
        return Lead.objects.create(
            lead_id=extra.pop('lead_id', f'LEAD-2025-TST-{n:05d}'),
            name=extra.pop('name', f'Student {n}'),
            phone=extra.pop('phone', f'+8801700{n:06d}'),
            status=status,
            assigned_to_id=assigned_to.id if assigned_to is not None else None,
            **extra
        )
    return _make_lead


@pytest.fixture
def make_fee(db):
    def _make_fee(lead, total_amount='25000.00', amount='10000.00', status=AdmissionFee.STATUS_PENDING,
                  submitted_by=None, **extra):
        total_amount = Decimal(total_amount)
        amount = Decimal(amount)
        return AdmissionFee.objects.create(
            lead=lead,
            course_name=extra.pop('course_name', 'Professional Cloud Computing'),
            total_amount=total_amount,
            amount=amount,
            due_amount=total_amount - amount,
            method=extra.pop('method', 'CASH'),
            payment_date=extra.pop('payment_date', date(2025, 3, 1)),
            status=status,
            submitted_by_id=submitted_by.id if submitted_by is not None else '0',
            **extra
        )
    return _make_fee


# =============================================================================
# HTTP CLIENT
# =============================================================================

class JsonClient:
    """Thin wrapper sending JSON bodies through django.test.Client."""

    def __init__(self, client):
        self.client = client

    def login(self, user):
        self.client.force_login(user)
        return self

    def _send(self, method, path, data=None):
        body = json.dumps(data, default=str) if data is not None else ''
        return getattr(self.client, method)(path, data=body, content_type='application/json')

    def get(self, path, params=None):
        return self.client.get(path, params or {})

    def post(self, path, data=None):
        return self._send('post', path, data)

    def patch(self, path, data=None):
        return self._send('patch', path, data)

    def put(self, path, data=None):
        return self._send('put', path, data)

    def delete(self, path):
        return self.client.delete(path)


@pytest.fixture
def api(db):
    return JsonClient(Client())

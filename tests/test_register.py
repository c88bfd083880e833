"""
Income / expense register and the accounting summary.
"""

from datetime import date
from decimal import Decimal

import pytest

from fees.services import AdmissionFeeService, DueCollectionService
from finance.models import Expense, Income
from finance.services import IncomeExpenseService
from finance.stats import get_accounting_summary
from utils.exceptions import InvalidState, NotFound, ValidationFailed

pytestmark = pytest.mark.django_db


def test_manual_income_crud(accountant):
    income = IncomeExpenseService.create_income(accountant, {
        'date': date(2025, 2, 1), 'source': 'Workshop', 'amount': Decimal('3000'), 'note': 'Weekend',
    })
    assert income.ref_type == Income.REF_MANUAL
    assert not income.is_system_generated

    income = IncomeExpenseService.update_income(accountant, income.pk, {
        'date': date(2025, 2, 2), 'source': 'Workshop', 'amount': Decimal('3500'),
    })
    assert income.amount == Decimal('3500.00')

    IncomeExpenseService.delete_income(accountant, income.pk)
    assert not Income.objects.exists()


def test_system_income_is_read_only(make_lead, make_fee, accountant):
    fee = make_fee(make_lead())
    AdmissionFeeService.approve_fee(accountant, fee.pk)
    income = Income.objects.get()

    with pytest.raises(InvalidState):
        IncomeExpenseService.update_income(accountant, income.pk, {
            'date': date(2025, 1, 1), 'source': 'Edited', 'amount': Decimal('1'),
        })
    with pytest.raises(InvalidState):
        IncomeExpenseService.delete_income(accountant, income.pk)


def test_system_income_is_recorded_once(accountant):
    ref = '0b9f5a7e-1111-4222-8333-444455556666'
    first, created = IncomeExpenseService.record_system_income(
        Income.REF_ADMISSION_FEE, ref, Decimal('10'), date(2025, 1, 1), Income.SOURCE_ADMISSION_FEE, accountant.id
    )
    second, created_again = IncomeExpenseService.record_system_income(
        Income.REF_ADMISSION_FEE, ref, Decimal('10'), date(2025, 1, 1), Income.SOURCE_ADMISSION_FEE, accountant.id
    )
    assert created and not created_again
    assert first.pk == second.pk


def test_expense_crud(accountant):
    expense = IncomeExpenseService.create_expense(accountant, {
        'date': date(2025, 2, 1), 'purpose': 'Office rent', 'amount': Decimal('20000'),
    })
    expense = IncomeExpenseService.update_expense(accountant, expense.pk, {
        'date': date(2025, 2, 1), 'purpose': 'Office rent (Feb)', 'amount': Decimal('21000'),
    })
    assert expense.purpose == 'Office rent (Feb)'

    with pytest.raises(ValidationFailed):
        IncomeExpenseService.create_expense(accountant, {
            'date': date(2025, 2, 1), 'purpose': 'Refund', 'amount': Decimal('-1'),
        })

    IncomeExpenseService.delete_expense(accountant, expense.pk)
    assert not Expense.objects.exists()
    with pytest.raises(NotFound):
        IncomeExpenseService.get_expense(expense.pk)


def test_accounting_summary(make_lead, make_fee, accountant, coordinator):
    fee = make_fee(make_lead(), total_amount='25000.00', amount='10000.00', payment_date=date(2025, 3, 1))
    AdmissionFeeService.approve_fee(accountant, fee.pk)
    collection = DueCollectionService.submit(coordinator, {
        'admission_fee': fee.pk, 'amount': Decimal('5000'), 'payment_date': date(2025, 3, 15),
    })
    DueCollectionService.approve(accountant, collection.pk)

    IncomeExpenseService.create_income(accountant, {
        'date': date(2025, 3, 15), 'source': 'Workshop', 'amount': Decimal('2000'),
    })
    IncomeExpenseService.create_expense(accountant, {
        'date': date(2025, 3, 20), 'purpose': 'Rent', 'amount': Decimal('8000'),
    })
    # Outside the range
    IncomeExpenseService.create_expense(accountant, {
        'date': date(2024, 12, 31), 'purpose': 'Rent', 'amount': Decimal('8000'),
    })

    summary = get_accounting_summary(date(2025, 1, 1), date(2025, 12, 31))

    assert summary['total_income'] == Decimal('17000.00')
    assert summary['total_expense'] == Decimal('8000.00')
    assert summary['profit'] == Decimal('9000.00')
    assert summary['admission_fee_income'] == Decimal('10000.00')
    assert summary['due_collection_income'] == Decimal('5000.00')
    assert summary['other_income'] == Decimal('2000.00')
    assert summary['present_dues'] == Decimal('10000.00')
    assert summary['income_series'] == {
        '2025-03-01': Decimal('10000.00'),
        '2025-03-15': Decimal('7000.00'),
    }
    assert summary['expense_series'] == {'2025-03-20': Decimal('8000.00')}

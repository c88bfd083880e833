"""
Bank ledger: deposits, withdrawals, petty cash movement, deletion and
reconciliation.
"""

from datetime import date
from decimal import Decimal

import pytest
from django.core.exceptions import ValidationError
from django.core.management import CommandError, call_command

from finance.models import AccountBalance, BankTransaction
from finance.services import BankLedgerService
from finance.stats import reconcile_bank_ledger
from utils.exceptions import InsufficientFunds, NotFound, ValidationFailed

pytestmark = pytest.mark.django_db


def balances():
    balance = AccountBalance.get_instance()
    return balance.bank_balance, balance.petty_cash


def test_deposit_increases_bank_balance(accountant):
    record, balance = BankLedgerService.deposit(accountant, 'Admission Fees', Decimal('50000'), date=date(2025, 3, 1))

    assert balance.bank_balance == Decimal('50000.00')
    assert balance.petty_cash == Decimal('0.00')
    assert record.balance_after == Decimal('50000.00')
    assert record.petty_cash_after is None
    assert record.recorded_by_id == accountant.id


def test_petty_cash_deposit_requires_funds(accountant):
    BankLedgerService.deposit(accountant, 'Admission Fees', Decimal('1000'))

    with pytest.raises(InsufficientFunds):
        BankLedgerService.deposit(accountant, 'Petty Cash', Decimal('200'))

    assert balances() == (Decimal('1000.00'), Decimal('0.00'))
    assert BankTransaction.objects.count() == 1


def test_petty_cash_round_trip(accountant):
    # Withdrawals may overdraw the bank; petty cash is topped up by the same amount
    _, balance = BankLedgerService.withdraw(accountant, 'Petty Cash', Decimal('1000'))
    assert (balance.bank_balance, balance.petty_cash) == (Decimal('-1000.00'), Decimal('1000.00'))

    record, balance = BankLedgerService.deposit(accountant, 'Petty Cash', Decimal('400'))
    assert (balance.bank_balance, balance.petty_cash) == (Decimal('-600.00'), Decimal('600.00'))
    assert record.petty_cash_after == Decimal('600.00')


def test_other_counterparty_needs_detail(accountant):
    with pytest.raises(ValidationFailed):
        BankLedgerService.deposit(accountant, 'Others', Decimal('10'))
    with pytest.raises(ValidationFailed):
        BankLedgerService.withdraw(accountant, 'Others', Decimal('10'))

    record, _ = BankLedgerService.withdraw(accountant, 'Others', Decimal('10'), withdraw_purpose_other='Courier')
    assert record.counterparty == 'Courier'


@pytest.mark.parametrize('amount', [Decimal('0'), Decimal('-5'), 'abc'])
def test_amount_must_be_positive_number(accountant, amount):
    with pytest.raises(ValidationFailed):
        BankLedgerService.deposit(accountant, 'Admission Fees', amount)
    assert not BankTransaction.objects.exists()


def test_transactions_are_immutable(accountant):
    record, _ = BankLedgerService.deposit(accountant, 'Admission Fees', Decimal('100'))
    record.amount = Decimal('1')
    with pytest.raises(ValidationError):
        record.save()


def test_list_transactions_filters(accountant):
    BankLedgerService.deposit(accountant, 'Admission Fees', Decimal('100'), date=date(2025, 1, 10))
    BankLedgerService.withdraw(accountant, 'Rent', Decimal('50'), date=date(2025, 2, 10))

    withdrawals = list(BankLedgerService.list_transactions(transaction_type='withdraw'))
    assert [r.withdraw_purpose for r in withdrawals] == ['Rent']
    assert len(BankLedgerService.list_transactions(date_from=date(2025, 2, 1))) == 1
    assert len(BankLedgerService.list_transactions(limit=1)) == 1


def test_deleting_transaction_does_not_reverse_balance(accountant, admin):
    record, _ = BankLedgerService.deposit(accountant, 'Admission Fees', Decimal('700'))
    assert reconcile_bank_ledger()['balanced']

    BankLedgerService.delete_transaction(admin, record.pk)

    assert balances() == (Decimal('700.00'), Decimal('0.00'))
    assert not BankTransaction.objects.exists()

    result = reconcile_bank_ledger()
    assert not result['balanced']
    assert result['bank_difference'] == Decimal('700.00')

    with pytest.raises(NotFound):
        BankLedgerService.delete_transaction(admin, record.pk)


def test_balance_singleton_cannot_be_deleted():
    balance = AccountBalance.get_instance()
    with pytest.raises(ValidationError):
        balance.delete()
    assert AccountBalance.objects.count() == 1


def test_reconcile_command(accountant, admin):
    record, _ = BankLedgerService.deposit(accountant, 'Admission Fees', Decimal('100'))
    call_command('reconcile_bank_ledger', '--fail-on-mismatch')

    BankLedgerService.delete_transaction(admin, record.pk)
    with pytest.raises(CommandError):
        call_command('reconcile_bank_ledger', '--fail-on-mismatch')

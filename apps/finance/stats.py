# finance/stats.py

"""
Accounting summary and bank ledger reconciliation.
"""

from django.conf import settings
from django.utils import timezone
from django.db.models import Sum, DecimalField, Value
from django.db.models.functions import Coalesce
from datetime import date
from decimal import Decimal
import logging

from finance.models import AccountBalance, BankTransaction, Income, Expense

logger = logging.getLogger(__name__)

ZERO = Decimal('0.00')


def _total(queryset, field='amount'):
    return queryset.aggregate(
        total=Coalesce(Sum(field), Value(ZERO), output_field=DecimalField())
    )['total']


def _daily_series(queryset):
    """{'YYYY-MM-DD': total} for each calendar day with rows."""
    rows = (
        queryset.values('date')
        .annotate(total=Sum('amount'))
        .order_by('date')
    )
    return {row['date'].isoformat(): row['total'] for row in rows}


# =============================================================================
# ACCOUNTING SUMMARY
# =============================================================================

def get_accounting_summary(date_from=None, date_to=None):
    """
    Income/expense totals, income by source, present dues and daily series.

    Args:
        date_from (date): Defaults to 1 January of the current year
        date_to (date): Defaults to today

    Returns:
        dict: Summary figures (Decimals)
    """
    from fees.models import AdmissionFee

    today = timezone.localdate()
    date_from = date_from or date(today.year, 1, 1)
    date_to = date_to or today

    income = Income.objects.filter(date__gte=date_from, date__lte=date_to)
    expenses = Expense.objects.filter(date__gte=date_from, date__lte=date_to)

    total_income = _total(income)
    total_expense = _total(expenses)
    admission_fee_income = _total(income.filter(source=Income.SOURCE_ADMISSION_FEE))
    due_collection_income = _total(income.filter(source=Income.SOURCE_DUE_COLLECTION))

    # Outstanding on approved fees; due_amount already nets approved collections
    present_dues = _total(
        AdmissionFee.objects.filter(status=AdmissionFee.STATUS_APPROVED), field='due_amount'
    )

    return {
        'date_from': date_from,
        'date_to': date_to,
        'total_income': total_income,
        'total_expense': total_expense,
        'profit': total_income - total_expense,
        'admission_fee_income': admission_fee_income,
        'due_collection_income': due_collection_income,
        'other_income': total_income - admission_fee_income - due_collection_income,
        'present_dues': present_dues,
        'income_series': _daily_series(income),
        'expense_series': _daily_series(expenses),
    }


# =============================================================================
# BANK LEDGER RECONCILIATION
# =============================================================================

def reconcile_bank_ledger():
    """
    Replay every bank transaction from zero in recording order and compare
    with the live balance. A mismatch means transactions were deleted or
    the singleton was edited outside BankLedgerService.

    Returns:
        dict: replayed vs live balances, differences and a balanced flag
    """
    petty_cash_label = getattr(settings, 'LEDGER', {}).get('PETTY_CASH_LABEL', 'Petty Cash')

    bank = ZERO
    petty_cash = ZERO
    count = 0
    for record in BankTransaction.objects.order_by('created_at').iterator():
        count += 1
        if record.transaction_type == BankTransaction.TYPE_DEPOSIT:
            bank += record.amount
            if record.deposit_from == petty_cash_label:
                petty_cash -= record.amount
        else:
            bank -= record.amount
            if record.withdraw_purpose == petty_cash_label:
                petty_cash += record.amount

    live = AccountBalance.get_instance()
    result = {
        'transactions': count,
        'replayed_bank_balance': bank,
        'live_bank_balance': live.bank_balance,
        'bank_difference': live.bank_balance - bank,
        'replayed_petty_cash': petty_cash,
        'live_petty_cash': live.petty_cash,
        'petty_cash_difference': live.petty_cash - petty_cash,
    }
    result['balanced'] = result['bank_difference'] == 0 and result['petty_cash_difference'] == 0

    if not result['balanced']:
        logger.warning(
            f"Bank ledger out of balance: bank differs by {result['bank_difference']}, "
            f"petty cash by {result['petty_cash_difference']}"
        )
    return result

# finance/views.py

import logging

from django.http import JsonResponse
from django.views.decorators.http import require_http_methods

from accounts.permissions import capability_required
from finance.forms import (
    DateRangeForm, DepositForm, ExpenseForm, IncomeFilterForm, IncomeForm,
    TransactionFilterForm, WithdrawForm,
)
from finance.services import BankLedgerService, IncomeExpenseService
from finance.stats import get_accounting_summary, reconcile_bank_ledger
from utils.api import api_view, parse_json_body, validate_form
from utils.utils import paginated_payload

logger = logging.getLogger(__name__)


# =============================================================================
# SERIALIZATION
# =============================================================================

def serialize_balance(balance):
    return {
        'bank_balance': balance.bank_balance,
        'petty_cash': balance.petty_cash,
        'last_updated': balance.last_updated,
        'updated_by': balance.updated_by_id,
    }


def serialize_transaction(record):
    return {
        'id': record.pk,
        'transaction_type': record.transaction_type,
        'date': record.date,
        'deposit_from': record.deposit_from,
        'deposit_from_other': record.deposit_from_other,
        'withdraw_purpose': record.withdraw_purpose,
        'withdraw_purpose_other': record.withdraw_purpose_other,
        'amount': record.amount,
        'notes': record.notes,
        'balance_after': record.balance_after,
        'petty_cash_after': record.petty_cash_after,
        'recorded_by': record.recorded_by_id,
        'created_at': record.created_at,
    }


def serialize_income(income):
    return {
        'id': income.pk,
        'date': income.date,
        'source': income.source,
        'amount': income.amount,
        'ref_type': income.ref_type,
        'ref_id': income.ref_id,
        'is_system_generated': income.is_system_generated,
        'added_by': income.added_by_id,
        'note': income.note,
        'created_at': income.created_at,
    }


def serialize_expense(expense):
    return {
        'id': expense.pk,
        'date': expense.date,
        'purpose': expense.purpose,
        'amount': expense.amount,
        'added_by': expense.added_by_id,
        'note': expense.note,
        'created_at': expense.created_at,
    }


# =============================================================================
# BANK LEDGER
# =============================================================================

@require_http_methods(["GET"])
@api_view
@capability_required('bank.operate')
def bank_balances(request):
    return JsonResponse({'balance': serialize_balance(BankLedgerService.get_balances())})


@require_http_methods(["GET"])
@api_view
@capability_required('bank.operate')
def bank_transactions(request):
    filters = validate_form(TransactionFilterForm(request.GET))
    records = BankLedgerService.list_transactions(
        date_from=filters.get('date_from'),
        date_to=filters.get('date_to'),
        transaction_type=filters.get('transaction_type'),
        limit=filters.get('limit'),
    )
    return JsonResponse({'transactions': [serialize_transaction(r) for r in records]})


@require_http_methods(["DELETE"])
@api_view
@capability_required('bank.delete')
def bank_transaction_delete(request, pk):
    BankLedgerService.delete_transaction(request.actor, pk)
    return JsonResponse({'message': 'Transaction deleted. Balances were not adjusted.'})


@require_http_methods(["POST"])
@api_view
@capability_required('bank.operate')
def bank_deposit(request):
    data = validate_form(DepositForm(parse_json_body(request)))
    record, balance = BankLedgerService.deposit(
        request.actor,
        deposit_from=data['deposit_from'],
        amount=data['amount'],
        date=data.get('date'),
        deposit_from_other=data.get('deposit_from_other'),
        notes=data.get('notes'),
    )
    return JsonResponse({
        'transaction': serialize_transaction(record),
        'balance': serialize_balance(balance),
    }, status=201)


@require_http_methods(["POST"])
@api_view
@capability_required('bank.operate')
def bank_withdraw(request):
    data = validate_form(WithdrawForm(parse_json_body(request)))
    record, balance = BankLedgerService.withdraw(
        request.actor,
        withdraw_purpose=data['withdraw_purpose'],
        amount=data['amount'],
        date=data.get('date'),
        withdraw_purpose_other=data.get('withdraw_purpose_other'),
        notes=data.get('notes'),
    )
    return JsonResponse({
        'transaction': serialize_transaction(record),
        'balance': serialize_balance(balance),
    }, status=201)


@require_http_methods(["GET"])
@api_view
@capability_required('bank.delete')
def bank_reconcile(request):
    return JsonResponse(reconcile_bank_ledger())


# =============================================================================
# INCOME
# =============================================================================

@require_http_methods(["GET", "POST"])
def income_collection(request):
    if request.method == 'POST':
        return income_create(request)
    return income_list(request)


@api_view
@capability_required('register.read')
def income_list(request):
    filters = validate_form(IncomeFilterForm(request.GET))
    queryset = IncomeExpenseService.list_income(
        date_from=filters.get('date_from'),
        date_to=filters.get('date_to'),
        source=filters.get('source'),
    )
    return JsonResponse(paginated_payload(request, queryset, 'income', serialize_income))


@api_view
@capability_required('register.write')
def income_create(request):
    data = validate_form(IncomeForm(parse_json_body(request)))
    income = IncomeExpenseService.create_income(request.actor, data)
    return JsonResponse({'income': serialize_income(income)}, status=201)


@require_http_methods(["PUT", "DELETE"])
@api_view
@capability_required('register.write')
def income_detail(request, pk):
    if request.method == 'DELETE':
        IncomeExpenseService.delete_income(request.actor, pk)
        return JsonResponse({'message': 'Income deleted'})

    data = validate_form(IncomeForm(parse_json_body(request)))
    income = IncomeExpenseService.update_income(request.actor, pk, data)
    return JsonResponse({'income': serialize_income(income)})


# =============================================================================
# EXPENSES
# =============================================================================

@require_http_methods(["GET", "POST"])
def expense_collection(request):
    if request.method == 'POST':
        return expense_create(request)
    return expense_list(request)


@api_view
@capability_required('register.read')
def expense_list(request):
    filters = validate_form(DateRangeForm(request.GET))
    queryset = IncomeExpenseService.list_expenses(
        date_from=filters.get('date_from'),
        date_to=filters.get('date_to'),
    )
    return JsonResponse(paginated_payload(request, queryset, 'expenses', serialize_expense))


@api_view
@capability_required('register.write')
def expense_create(request):
    data = validate_form(ExpenseForm(parse_json_body(request)))
    expense = IncomeExpenseService.create_expense(request.actor, data)
    return JsonResponse({'expense': serialize_expense(expense)}, status=201)


@require_http_methods(["PUT", "DELETE"])
@api_view
@capability_required('register.write')
def expense_detail(request, pk):
    if request.method == 'DELETE':
        IncomeExpenseService.delete_expense(request.actor, pk)
        return JsonResponse({'message': 'Expense deleted'})

    data = validate_form(ExpenseForm(parse_json_body(request)))
    expense = IncomeExpenseService.update_expense(request.actor, pk, data)
    return JsonResponse({'expense': serialize_expense(expense)})


# =============================================================================
# ACCOUNTING SUMMARY
# =============================================================================

@require_http_methods(["GET"])
@api_view
@capability_required('register.read')
def accounting_summary(request):
    filters = validate_form(DateRangeForm(request.GET))
    return JsonResponse(get_accounting_summary(
        date_from=filters.get('date_from'),
        date_to=filters.get('date_to'),
    ))

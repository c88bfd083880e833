# finance/services.py

"""
Core Finance Operations

BankLedgerService is the only writer of the AccountBalance singleton;
every deposit and withdrawal locks the singleton row, mutates it and
appends a BankTransaction audit row in one transaction.

IncomeExpenseService keeps the income/expense register: system income
posted by fee and due collection approvals, plus manual entries made
by accountants.
"""

from decimal import Decimal, InvalidOperation
from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import IntegrityError, transaction
from django.utils import timezone
import logging

from finance.models import AccountBalance, BankTransaction, Income, Expense
from utils.audit import log_activity
from utils.exceptions import InsufficientFunds, InvalidState, NotFound, ValidationFailed

logger = logging.getLogger(__name__)


def ledger_setting(name, default):
    return getattr(settings, 'LEDGER', {}).get(name, default)


def to_amount(value, field='amount'):
    """Coerce input to a 2-place Decimal, raising ValidationFailed on garbage."""
    if isinstance(value, float):
        value = str(value)
    try:
        amount = Decimal(value)
    except (InvalidOperation, TypeError, ValueError):
        raise ValidationFailed(f"{field} must be a number")
    if not amount.is_finite():
        raise ValidationFailed(f"{field} must be a number")
    return amount.quantize(Decimal('0.01'))


# =============================================================================
# BANK LEDGER SERVICE
# =============================================================================

class BankLedgerService:
    """
    Deposits, withdrawals and the bank transaction audit trail.
    """

    @staticmethod
    def get_balances():
        return AccountBalance.get_instance()

    @staticmethod
    def list_transactions(date_from=None, date_to=None, transaction_type=None, limit=None):
        """Newest first, capped at LEDGER['TRANSACTION_HISTORY_LIMIT']."""
        queryset = BankTransaction.objects.all()
        if date_from:
            queryset = queryset.filter(date__gte=date_from)
        if date_to:
            queryset = queryset.filter(date__lte=date_to)
        if transaction_type in (BankTransaction.TYPE_DEPOSIT, BankTransaction.TYPE_WITHDRAW):
            queryset = queryset.filter(transaction_type=transaction_type)

        limit = limit or ledger_setting('TRANSACTION_HISTORY_LIMIT', 100)
        return queryset.order_by('-date', '-created_at')[:limit]

    @staticmethod
    @transaction.atomic
    def deposit(actor, deposit_from, amount, date=None, deposit_from_other='', notes=''):
        """
        Deposit into the bank.

        A "Petty Cash" deposit moves money out of petty cash and requires
        enough petty cash to cover it; nothing is written otherwise.

        Returns:
            tuple: (BankTransaction, AccountBalance)

        Raises:
            ValidationFailed: Non-positive amount, missing source
            InsufficientFunds: Petty cash lower than the amount
        """
        petty_cash_label = ledger_setting('PETTY_CASH_LABEL', 'Petty Cash')
        other_label = ledger_setting('OTHER_LABEL', 'Others')

        amount = to_amount(amount)
        deposit_from = (deposit_from or '').strip()
        deposit_from_other = (deposit_from_other or '').strip()

        if amount <= 0:
            raise ValidationFailed('Amount must be greater than zero')
        if not deposit_from:
            raise ValidationFailed('Deposit source is required')
        if deposit_from == other_label and not deposit_from_other:
            raise ValidationFailed('Please specify other deposit source')

        balance = AccountBalance.get_locked()

        petty_cash_moved = deposit_from == petty_cash_label
        if petty_cash_moved:
            if balance.petty_cash < amount:
                raise InsufficientFunds(f"Insufficient petty cash. Available: {balance.petty_cash}")
            balance.petty_cash -= amount

        balance.bank_balance += amount
        balance.last_updated = timezone.now()
        balance.updated_by_id = actor.id
        balance.save()

        record = BankTransaction.objects.create(
            transaction_type=BankTransaction.TYPE_DEPOSIT,
            date=date or timezone.localdate(),
            deposit_from=deposit_from,
            deposit_from_other=deposit_from_other if deposit_from == other_label else '',
            amount=amount,
            notes=notes or '',
            balance_after=balance.bank_balance,
            petty_cash_after=balance.petty_cash if petty_cash_moved else None,
            recorded_by_id=actor.id,
        )

        logger.info(
            f"Deposit {amount} from {record.counterparty} by {actor.name}; "
            f"bank balance now {balance.bank_balance}"
        )
        log_activity(actor, 'CREATE', 'BankTransaction', record, f"Deposited {amount} from {record.counterparty}")

        return record, balance

    @staticmethod
    @transaction.atomic
    def withdraw(actor, withdraw_purpose, amount, date=None, withdraw_purpose_other='', notes=''):
        """
        Withdraw from the bank.

        There is no overdraft guard; a "Petty Cash" withdrawal tops up
        petty cash by the same amount.

        Returns:
            tuple: (BankTransaction, AccountBalance)
        """
        petty_cash_label = ledger_setting('PETTY_CASH_LABEL', 'Petty Cash')
        other_label = ledger_setting('OTHER_LABEL', 'Others')

        amount = to_amount(amount)
        withdraw_purpose = (withdraw_purpose or '').strip()
        withdraw_purpose_other = (withdraw_purpose_other or '').strip()

        if amount <= 0:
            raise ValidationFailed('Amount must be greater than zero')
        if not withdraw_purpose:
            raise ValidationFailed('Withdrawal purpose is required')
        if withdraw_purpose == other_label and not withdraw_purpose_other:
            raise ValidationFailed('Please specify other withdrawal purpose')

        balance = AccountBalance.get_locked()

        balance.bank_balance -= amount
        petty_cash_moved = withdraw_purpose == petty_cash_label
        if petty_cash_moved:
            balance.petty_cash += amount
        balance.last_updated = timezone.now()
        balance.updated_by_id = actor.id
        balance.save()

        if balance.bank_balance < 0:
            logger.warning(f"Bank balance is negative ({balance.bank_balance}) after withdrawal by {actor.name}")

        record = BankTransaction.objects.create(
            transaction_type=BankTransaction.TYPE_WITHDRAW,
            date=date or timezone.localdate(),
            withdraw_purpose=withdraw_purpose,
            withdraw_purpose_other=withdraw_purpose_other if withdraw_purpose == other_label else '',
            amount=amount,
            notes=notes or '',
            balance_after=balance.bank_balance,
            petty_cash_after=balance.petty_cash if petty_cash_moved else None,
            recorded_by_id=actor.id,
        )

        logger.info(
            f"Withdrawal {amount} for {record.counterparty} by {actor.name}; "
            f"bank balance now {balance.bank_balance}"
        )
        log_activity(actor, 'CREATE', 'BankTransaction', record, f"Withdrew {amount} for {record.counterparty}")

        return record, balance

    @staticmethod
    @transaction.atomic
    def delete_transaction(actor, transaction_pk):
        """
        Remove an audit row. Balances are NOT adjusted; the operator must
        post a compensating deposit or withdrawal.
        """
        try:
            record = BankTransaction.objects.get(pk=transaction_pk)
        except (BankTransaction.DoesNotExist, ValueError, ValidationError):
            raise NotFound('Transaction not found')

        description = (
            f"Deleted {record.transaction_type} of {record.amount} dated {record.date} "
            f"(balances unchanged)"
        )
        record.delete()

        logger.warning(f"{actor.name} deleted bank transaction {transaction_pk}; balances were not adjusted")
        log_activity(actor, 'DELETE', 'BankTransaction', None, description)


# =============================================================================
# INCOME / EXPENSE SERVICE
# =============================================================================

class IncomeExpenseService:
    """
    Income and expense register.
    """

    @staticmethod
    @transaction.atomic
    def record_system_income(ref_type, ref_id, amount, date, source, added_by_id, note=''):
        """
        Post income for a fee or due collection at most once.

        Returns:
            tuple: (Income, created)
        """
        existing = Income.objects.filter(ref_type=ref_type, ref_id=ref_id).first()
        if existing is not None:
            return existing, False

        try:
            with transaction.atomic():
                income = Income.objects.create(
                    date=date,
                    source=source,
                    amount=amount,
                    ref_type=ref_type,
                    ref_id=ref_id,
                    added_by_id=added_by_id,
                    note=note,
                )
        except IntegrityError:
            # Concurrent approval already posted it
            return Income.objects.get(ref_type=ref_type, ref_id=ref_id), False

        logger.info(f"Recorded {source} income {amount} for {ref_type} {ref_id}")
        return income, True

    # -------------------------------------------------------------------------
    # INCOME
    # -------------------------------------------------------------------------

    @staticmethod
    def list_income(date_from=None, date_to=None, source=None):
        queryset = Income.objects.all()
        if date_from:
            queryset = queryset.filter(date__gte=date_from)
        if date_to:
            queryset = queryset.filter(date__lte=date_to)
        if source:
            queryset = queryset.filter(source__iexact=source)
        return queryset.order_by('-date', '-created_at')

    @staticmethod
    def get_income(income_pk, for_update=False):
        queryset = Income.objects.select_for_update() if for_update else Income.objects.all()
        try:
            return queryset.get(pk=income_pk)
        except (Income.DoesNotExist, ValueError, ValidationError):
            raise NotFound('Income not found')

    @staticmethod
    @transaction.atomic
    def create_income(actor, data):
        """data: date, source, amount, note"""
        amount = to_amount(data.get('amount'))
        if amount < 0:
            raise ValidationFailed('Amount cannot be negative')

        income = Income.objects.create(
            date=data['date'],
            source=data['source'],
            amount=amount,
            ref_type=Income.REF_MANUAL,
            added_by_id=actor.id,
            note=data.get('note') or '',
        )

        logger.info(f"Manual income {amount} from {income.source} added by {actor.name}")
        log_activity(actor, 'CREATE', 'Income', income, f"Added income: {amount} from {income.source}")
        return income

    @staticmethod
    @transaction.atomic
    def update_income(actor, income_pk, data):
        """
        Raises:
            InvalidState: The row was posted by a fee or due collection approval
        """
        income = IncomeExpenseService.get_income(income_pk, for_update=True)
        if income.is_system_generated:
            raise InvalidState('System generated income cannot be edited')

        amount = to_amount(data.get('amount'))
        if amount < 0:
            raise ValidationFailed('Amount cannot be negative')

        income.date = data['date']
        income.source = data['source']
        income.amount = amount
        income.note = data.get('note') or ''
        income.save()

        log_activity(actor, 'UPDATE', 'Income', income, f"Updated income: {amount} from {income.source}")
        return income

    @staticmethod
    @transaction.atomic
    def delete_income(actor, income_pk):
        income = IncomeExpenseService.get_income(income_pk, for_update=True)
        if income.is_system_generated:
            raise InvalidState('System generated income cannot be deleted')

        description = f"Deleted income record: {income.source} - Amount: {income.amount}"
        income.delete()

        logger.info(f"{actor.name} deleted manual income {income_pk}")
        log_activity(actor, 'DELETE', 'Income', None, description)

    # -------------------------------------------------------------------------
    # EXPENSES
    # -------------------------------------------------------------------------

    @staticmethod
    def list_expenses(date_from=None, date_to=None):
        queryset = Expense.objects.all()
        if date_from:
            queryset = queryset.filter(date__gte=date_from)
        if date_to:
            queryset = queryset.filter(date__lte=date_to)
        return queryset.order_by('-date', '-created_at')

    @staticmethod
    def get_expense(expense_pk, for_update=False):
        queryset = Expense.objects.select_for_update() if for_update else Expense.objects.all()
        try:
            return queryset.get(pk=expense_pk)
        except (Expense.DoesNotExist, ValueError, ValidationError):
            raise NotFound('Expense not found')

    @staticmethod
    @transaction.atomic
    def create_expense(actor, data):
        """data: date, purpose, amount, note"""
        amount = to_amount(data.get('amount'))
        if amount < 0:
            raise ValidationFailed('Amount cannot be negative')

        expense = Expense.objects.create(
            date=data['date'],
            purpose=data['purpose'],
            amount=amount,
            added_by_id=actor.id,
            note=data.get('note') or '',
        )

        logger.info(f"Expense {amount} for {expense.purpose} added by {actor.name}")
        log_activity(actor, 'CREATE', 'Expense', expense, f"Added expense: {amount} for {expense.purpose}")
        return expense

    @staticmethod
    @transaction.atomic
    def update_expense(actor, expense_pk, data):
        expense = IncomeExpenseService.get_expense(expense_pk, for_update=True)

        amount = to_amount(data.get('amount'))
        if amount < 0:
            raise ValidationFailed('Amount cannot be negative')

        expense.date = data['date']
        expense.purpose = data['purpose']
        expense.amount = amount
        expense.note = data.get('note') or ''
        expense.save()

        log_activity(actor, 'UPDATE', 'Expense', expense, f"Updated expense: {amount} for {expense.purpose}")
        return expense

    @staticmethod
    @transaction.atomic
    def delete_expense(actor, expense_pk):
        expense = IncomeExpenseService.get_expense(expense_pk, for_update=True)

        description = f"Deleted expense record: {expense.purpose} - Amount: {expense.amount}"
        expense.delete()

        logger.info(f"{actor.name} deleted expense {expense_pk}")
        log_activity(actor, 'DELETE', 'Expense', None, description)

# finance/admin.py

from django.contrib import admin
from .models import AccountBalance, BankTransaction, Expense, Income


@admin.register(AccountBalance)
class AccountBalanceAdmin(admin.ModelAdmin):
    list_display = ['bank_balance', 'petty_cash', 'last_updated', 'updated_by_id']
    readonly_fields = ['bank_balance', 'petty_cash', 'last_updated', 'updated_by_id']

    def has_add_permission(self, request):
        return not AccountBalance.objects.exists()

    def has_delete_permission(self, request, obj=None):
        return False


@admin.register(BankTransaction)
class BankTransactionAdmin(admin.ModelAdmin):
    list_display = ['date', 'transaction_type', 'amount', 'counterparty', 'balance_after', 'recorded_by_id']
    list_filter = ['transaction_type', 'date']
    search_fields = ['deposit_from', 'deposit_from_other', 'withdraw_purpose', 'withdraw_purpose_other', 'notes']

    def has_add_permission(self, request):
        # Posted through the bank ledger API so balances move with them
        return False

    def has_change_permission(self, request, obj=None):
        return False


@admin.register(Income)
class IncomeAdmin(admin.ModelAdmin):
    list_display = ['date', 'source', 'amount', 'ref_type', 'added_by_id']
    list_filter = ['ref_type', 'source', 'date']
    search_fields = ['source', 'note']
    readonly_fields = ['ref_type', 'ref_id']


@admin.register(Expense)
class ExpenseAdmin(admin.ModelAdmin):
    list_display = ['date', 'purpose', 'amount', 'added_by_id']
    list_filter = ['date']
    search_fields = ['purpose', 'note']

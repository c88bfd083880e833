# finance/urls.py

from django.urls import path
from . import views

urlpatterns = [
    # Bank ledger
    path('bank/balances/', views.bank_balances, name='bank_balances'),
    path('bank/transactions/', views.bank_transactions, name='bank_transactions'),
    path('bank/transactions/<uuid:pk>/', views.bank_transaction_delete, name='bank_transaction_delete'),
    path('bank/deposit/', views.bank_deposit, name='bank_deposit'),
    path('bank/withdraw/', views.bank_withdraw, name='bank_withdraw'),
    path('bank/reconcile/', views.bank_reconcile, name='bank_reconcile'),

    # Income / expense register
    path('income/', views.income_collection, name='income_collection'),
    path('income/<uuid:pk>/', views.income_detail, name='income_detail'),
    path('expenses/', views.expense_collection, name='expense_collection'),
    path('expenses/<uuid:pk>/', views.expense_detail, name='expense_detail'),

    # Reports
    path('accounting/summary/', views.accounting_summary, name='accounting_summary'),
]

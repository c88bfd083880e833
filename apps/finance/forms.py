# finance/forms.py

from django import forms
from django.core.exceptions import ValidationError
from decimal import Decimal

from finance.models import BankTransaction


class DepositForm(forms.Form):
    deposit_from = forms.CharField(max_length=100, error_messages={'required': 'Deposit source is required'})
    deposit_from_other = forms.CharField(max_length=200, required=False)
    amount = forms.DecimalField(max_digits=12, decimal_places=2)
    date = forms.DateField(required=False)
    notes = forms.CharField(required=False)

    def clean_amount(self):
        amount = self.cleaned_data.get('amount')
        if amount is not None and amount <= 0:
            raise ValidationError('Amount must be greater than zero')
        return amount


class WithdrawForm(forms.Form):
    withdraw_purpose = forms.CharField(max_length=100, error_messages={'required': 'Withdrawal purpose is required'})
    withdraw_purpose_other = forms.CharField(max_length=200, required=False)
    amount = forms.DecimalField(max_digits=12, decimal_places=2)
    date = forms.DateField(required=False)
    notes = forms.CharField(required=False)

    def clean_amount(self):
        amount = self.cleaned_data.get('amount')
        if amount is not None and amount <= 0:
            raise ValidationError('Amount must be greater than zero')
        return amount


class DateRangeForm(forms.Form):
    date_from = forms.DateField(required=False)
    date_to = forms.DateField(required=False)

    def clean(self):
        cleaned_data = super().clean()
        date_from = cleaned_data.get('date_from')
        date_to = cleaned_data.get('date_to')

        if date_from and date_to and date_from > date_to:
            raise ValidationError('date_from cannot be after date_to')

        return cleaned_data


class TransactionFilterForm(DateRangeForm):
    transaction_type = forms.ChoiceField(choices=BankTransaction.TRANSACTION_TYPE_CHOICES, required=False)
    limit = forms.IntegerField(required=False, min_value=1, max_value=1000)


class IncomeFilterForm(DateRangeForm):
    source = forms.CharField(max_length=100, required=False)


class IncomeForm(forms.Form):
    date = forms.DateField()
    source = forms.CharField(max_length=100)
    amount = forms.DecimalField(max_digits=12, decimal_places=2, min_value=Decimal('0'))
    note = forms.CharField(required=False)


class ExpenseForm(forms.Form):
    date = forms.DateField()
    purpose = forms.CharField(max_length=200)
    amount = forms.DecimalField(max_digits=12, decimal_places=2, min_value=Decimal('0'))
    note = forms.CharField(required=False)

# fees/forms.py

"""
Fee Management Forms

Input validation for admission fees, due collections and coordinator
follow-ups.
"""

from django import forms
from django.core.exceptions import ValidationError
from decimal import Decimal
import logging

from fees.models import AdmissionFee, DueCollection, DueFeesFollowUp

logger = logging.getLogger(__name__)


# =============================================================================
# ADMISSION FEE FORMS
# =============================================================================

class AdmissionFeeForm(forms.Form):
    """Fee submission by an admission officer"""

    lead = forms.UUIDField()
    course = forms.UUIDField(required=False)
    course_name = forms.CharField(max_length=150, required=False)
    total_amount = forms.DecimalField(max_digits=12, decimal_places=2)
    amount = forms.DecimalField(max_digits=12, decimal_places=2)
    method = forms.ChoiceField(choices=AdmissionFee.METHOD_CHOICES)
    payment_date = forms.DateField()
    next_payment_date = forms.DateField(required=False)
    note = forms.CharField(required=False)

    def clean(self):
        cleaned_data = super().clean()
        amount = cleaned_data.get('amount')
        total_amount = cleaned_data.get('total_amount')

        if amount is not None and amount < 0:
            raise ValidationError('Amount cannot be negative.')
        if amount is not None and total_amount is not None and total_amount < amount:
            raise ValidationError('Total amount cannot be less than the amount paid.')
        if not cleaned_data.get('course') and not cleaned_data.get('course_name'):
            raise ValidationError('Course name is required.')

        return cleaned_data


class FeeReviewForm(forms.Form):
    reason = forms.CharField(required=False)


class FeeCancelForm(forms.Form):
    reason = forms.CharField(error_messages={'required': 'Cancellation reason is required'})


class FeeFilterForm(forms.Form):
    status = forms.ChoiceField(choices=AdmissionFee.STATUS_CHOICES, required=False)
    lead = forms.UUIDField(required=False)


# =============================================================================
# DUE COLLECTION FORMS
# =============================================================================

class DueCollectionForm(forms.Form):
    admission_fee = forms.UUIDField()
    amount = forms.DecimalField(max_digits=12, decimal_places=2)
    payment_method = forms.ChoiceField(choices=DueCollection.PAYMENT_METHOD_CHOICES, required=False)
    payment_date = forms.DateField(required=False)
    next_payment_date = forms.DateField(required=False)
    note = forms.CharField(required=False)

    def clean_amount(self):
        amount = self.cleaned_data.get('amount')

        if amount is not None and amount <= 0:
            raise ValidationError('Amount must be greater than zero.')

        return amount


class DueReviewForm(forms.Form):
    review_note = forms.CharField(required=False)


class DueFilterForm(forms.Form):
    status = forms.ChoiceField(choices=DueCollection.STATUS_CHOICES, required=False)


# =============================================================================
# COORDINATOR FORMS
# =============================================================================

class DueFollowUpForm(forms.Form):
    admission_fee = forms.UUIDField()
    follow_up_type = forms.ChoiceField(choices=DueFeesFollowUp.FOLLOW_UP_TYPE_CHOICES)
    note = forms.CharField()
    amount_promised = forms.DecimalField(max_digits=12, decimal_places=2, required=False, min_value=Decimal('0'))
    updated_next_payment_date = forms.DateField(required=False)


class PaymentDateForm(forms.Form):
    next_payment_date = forms.DateField(error_messages={'required': 'next_payment_date is required'})

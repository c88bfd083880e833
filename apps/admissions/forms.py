# admissions/forms.py

"""
Input validation for the admissions JSON API.
"""

from django import forms
from django.core.exceptions import ValidationError
import logging

from admissions.models import Lead

logger = logging.getLogger(__name__)


# =============================================================================
# LEAD INTAKE FORMS
# =============================================================================

class LeadCreateForm(forms.Form):
    name = forms.CharField(max_length=150, error_messages={'required': 'Name required'})
    phone = forms.CharField(max_length=30, required=False)
    email = forms.EmailField(required=False)
    interested_course = forms.CharField(max_length=150, required=False)
    source = forms.CharField(max_length=50, required=False)
    priority = forms.ChoiceField(choices=Lead.PRIORITY_CHOICES, required=False)
    notes = forms.CharField(required=False)
    custom_fields = forms.JSONField(required=False)

    def clean_custom_fields(self):
        value = self.cleaned_data.get('custom_fields')
        if value in (None, ''):
            return {}
        if not isinstance(value, dict):
            raise ValidationError('custom_fields must be an object')
        return value


class LeadBulkImportForm(forms.Form):
    """CSV text in ``csv`` or an .xlsx/.csv upload in ``file``."""

    csv = forms.CharField(required=False, strip=False)
    file = forms.FileField(required=False)

    def clean(self):
        cleaned_data = super().clean()
        if not cleaned_data.get('csv') and not cleaned_data.get('file'):
            raise ValidationError('csv string or file upload required')
        return cleaned_data


class LeadAssignForm(forms.Form):
    assigned_to = forms.CharField(max_length=50)


class LeadBulkAssignForm(forms.Form):
    lead_ids = forms.JSONField()
    assigned_to = forms.CharField(max_length=50)

    def clean_lead_ids(self):
        value = self.cleaned_data.get('lead_ids')
        if not isinstance(value, list) or not value:
            raise ValidationError('lead_ids array required')
        return [str(v) for v in value]


class LeadFilterForm(forms.Form):
    status = forms.CharField(required=False)
    assigned_to = forms.CharField(required=False)
    search = forms.CharField(required=False)


# =============================================================================
# PIPELINE FORMS
# =============================================================================

class LeadStatusForm(forms.Form):
    status = forms.CharField(max_length=30)
    notes = forms.CharField(required=False)
    next_follow_up_date = forms.DateField(required=False)
    course = forms.UUIDField(required=False)
    batch = forms.UUIDField(required=False)


class UndoAdmissionForm(forms.Form):
    reason = forms.CharField(required=False)


class PipelineReportForm(forms.Form):
    date_from = forms.DateField(required=False)
    date_to = forms.DateField(required=False)
    user_id = forms.IntegerField(required=False, min_value=1)

    def clean(self):
        cleaned_data = super().clean()
        date_from = cleaned_data.get('date_from')
        date_to = cleaned_data.get('date_to')
        if date_from and date_to and date_from > date_to:
            raise ValidationError('date_from must be on or before date_to')
        return cleaned_data

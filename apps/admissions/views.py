# admissions/views.py

import logging

from django.http import JsonResponse
from django.views.decorators.http import require_http_methods

from accounts.permissions import capability_required
from admissions.forms import (
    LeadAssignForm, LeadBulkAssignForm, LeadBulkImportForm, LeadCreateForm,
    LeadFilterForm, LeadStatusForm, PipelineReportForm, UndoAdmissionForm,
)
from admissions.importers import read_csv_rows, read_xlsx_rows
from admissions.services import LeadPipelineService, LeadService
from admissions.stats import get_follow_up_notifications, get_pipeline_report
from utils.api import api_view, parse_json_body, validate_form
from utils.exceptions import ValidationFailed
from utils.utils import paginated_payload

logger = logging.getLogger(__name__)


# =============================================================================
# SERIALIZATION
# =============================================================================

def serialize_follow_up(follow_up):
    return {
        'id': follow_up.pk,
        'note': follow_up.note,
        'by': follow_up.actor_id,
        'by_name': follow_up.actor_name,
        'at': follow_up.noted_at,
    }


def serialize_lead(lead, follow_ups=None):
    data = {
        'id': lead.pk,
        'lead_id': lead.lead_id,
        'entry_date': lead.entry_date,
        'name': lead.name,
        'phone': lead.phone,
        'email': lead.email,
        'interested_course': lead.interested_course,
        'source': lead.source,
        'priority': lead.priority,
        'status': lead.status,
        'assigned_to': lead.assigned_to_id,
        'assigned_by': lead.assigned_by_id,
        'admitted_to_course': lead.admitted_to_course_id,
        'admitted_to_batch': lead.admitted_to_batch_id,
        'assigned_at': lead.assigned_at,
        'counseling_at': lead.counseling_at,
        'admitted_at': lead.admitted_at,
        'next_follow_up_date': lead.next_follow_up_date,
        'notes': lead.notes,
        'custom_fields': lead.custom_fields,
        'created_at': lead.created_at,
    }
    if follow_ups is not None:
        data['follow_ups'] = [serialize_follow_up(f) for f in follow_ups]
    return data


# =============================================================================
# LEAD INTAKE
# =============================================================================

@require_http_methods(["GET", "POST"])
def lead_collection(request):
    if request.method == 'POST':
        return lead_create(request)
    return lead_list(request)


@api_view
@capability_required('lead.list')
def lead_list(request):
    filters = validate_form(LeadFilterForm(request.GET))
    queryset = LeadService.list_leads(
        request.actor,
        status=filters.get('status'),
        assigned_to=filters.get('assigned_to'),
        search=filters.get('search'),
    )
    return JsonResponse(paginated_payload(request, queryset, 'leads', serialize_lead))


@api_view
@capability_required('lead.create')
def lead_create(request):
    data = validate_form(LeadCreateForm(parse_json_body(request)))
    lead = LeadService.create_lead(request.actor, data)
    return JsonResponse({'lead': serialize_lead(lead)}, status=201)


@require_http_methods(["POST"])
@api_view
@capability_required('lead.bulk_import')
def lead_bulk_import(request):
    form = LeadBulkImportForm(parse_json_body(request), request.FILES)
    data = validate_form(form)

    upload = data.get('file')
    if upload is not None and upload.name.lower().endswith('.xlsx'):
        rows = read_xlsx_rows(upload)
    elif upload is not None:
        try:
            text = upload.read().decode('utf-8-sig')
        except UnicodeDecodeError:
            raise ValidationFailed('Upload must be a UTF-8 CSV or an .xlsx workbook')
        rows = read_csv_rows(text)
    else:
        rows = read_csv_rows(data['csv'])

    result = LeadService.bulk_import(request.actor, rows)
    return JsonResponse({'ok': True, **result})


@require_http_methods(["POST", "PATCH"])
@api_view
@capability_required('lead.assign')
def lead_assign(request, pk):
    data = validate_form(LeadAssignForm(parse_json_body(request)))
    lead = LeadService.assign_lead(request.actor, pk, data['assigned_to'])
    return JsonResponse({'lead': serialize_lead(lead)})


@require_http_methods(["POST"])
@api_view
@capability_required('lead.assign')
def lead_bulk_assign(request):
    data = validate_form(LeadBulkAssignForm(parse_json_body(request)))
    count = LeadService.bulk_assign(request.actor, data['lead_ids'], data['assigned_to'])
    return JsonResponse({'ok': True, 'assigned': count})


@require_http_methods(["GET"])
@api_view
@capability_required('lead.history')
def lead_history(request, pk):
    lead, follow_ups = LeadService.get_history(request.actor, pk)
    return JsonResponse({'lead': serialize_lead(lead, follow_ups)})


# =============================================================================
# PIPELINE
# =============================================================================

@require_http_methods(["PATCH"])
@api_view
@capability_required('lead.transition')
def lead_status(request, pk):
    data = validate_form(LeadStatusForm(parse_json_body(request)))
    lead = LeadPipelineService.transition(
        request.actor,
        pk,
        data['status'],
        notes=data.get('notes'),
        next_follow_up_date=data.get('next_follow_up_date'),
        course_id=data.get('course'),
        batch_id=data.get('batch'),
    )
    return JsonResponse({'lead': serialize_lead(lead, lead.follow_ups.all())})


@require_http_methods(["POST"])
@api_view
@capability_required('lead.undo_admission')
def lead_undo_admission(request, pk):
    data = validate_form(UndoAdmissionForm(parse_json_body(request)))
    lead = LeadPipelineService.undo_admission(request.actor, pk, reason=data.get('reason'))
    return JsonResponse({'lead': serialize_lead(lead, lead.follow_ups.all())})


@require_http_methods(["GET"])
@api_view
@capability_required('lead.report')
def lead_report(request):
    filters = validate_form(PipelineReportForm(request.GET))
    report = get_pipeline_report(
        date_from=filters.get('date_from'),
        date_to=filters.get('date_to'),
        user_id=filters.get('user_id'),
    )
    return JsonResponse(report)


@require_http_methods(["GET"])
@api_view
@capability_required('lead.notifications')
def lead_follow_up_notifications(request):
    notifications = []
    for item in get_follow_up_notifications(request.actor):
        data = serialize_lead(item['lead'])
        data['is_overdue'] = item['is_overdue']
        data['days_until'] = item['days_until']
        notifications.append(data)
    return JsonResponse({'notifications': notifications})

# fees/views.py

import logging

from django.http import JsonResponse
from django.views.decorators.http import require_http_methods

from accounts.permissions import capability_required
from fees.forms import (
    AdmissionFeeForm, DueCollectionForm, DueFilterForm, DueFollowUpForm,
    DueReviewForm, FeeCancelForm, FeeFilterForm, FeeReviewForm, PaymentDateForm,
)
from fees.services import AdmissionFeeService, DueCollectionService
from fees.stats import get_dashboard_stats, get_payment_notifications, get_students_with_dues
from utils.api import api_view, parse_json_body, validate_form
from utils.utils import paginated_payload

logger = logging.getLogger(__name__)


# =============================================================================
# SERIALIZATION
# =============================================================================

def serialize_lead_summary(lead):
    return {
        'id': lead.pk,
        'lead_id': lead.lead_id,
        'name': lead.name,
        'phone': lead.phone,
        'email': lead.email,
        'status': lead.status,
    }


def serialize_fee(fee):
    return {
        'id': fee.pk,
        'lead': serialize_lead_summary(fee.lead),
        'course': fee.course_id,
        'course_name': fee.course_name,
        'total_amount': fee.total_amount,
        'amount': fee.amount,
        'due_amount': fee.due_amount,
        'method': fee.method,
        'payment_date': fee.payment_date,
        'next_payment_date': fee.next_payment_date,
        'note': fee.note,
        'status': fee.status,
        'submitted_by': fee.submitted_by_id,
        'reviewed_by': fee.reviewed_by_id,
        'reviewed_at': fee.reviewed_at,
        'created_at': fee.created_at,
    }


def serialize_collection(collection):
    return {
        'id': collection.pk,
        'admission_fee': collection.admission_fee_id,
        'lead': serialize_lead_summary(collection.lead),
        'coordinator': collection.coordinator_id,
        'amount': collection.amount,
        'payment_method': collection.payment_method,
        'payment_date': collection.payment_date,
        'next_payment_date': collection.next_payment_date,
        'note': collection.note,
        'status': collection.status,
        'reviewed_by': collection.reviewed_by_id,
        'reviewed_at': collection.reviewed_at,
        'review_note': collection.review_note,
        'submitted_at': collection.submitted_at,
    }


def serialize_follow_up(follow_up):
    return {
        'id': follow_up.pk,
        'admission_fee': follow_up.admission_fee_id,
        'lead': follow_up.lead_id,
        'coordinator': follow_up.coordinator_id,
        'follow_up_type': follow_up.follow_up_type,
        'note': follow_up.note,
        'previous_next_payment_date': follow_up.previous_next_payment_date,
        'updated_next_payment_date': follow_up.updated_next_payment_date,
        'amount_promised': follow_up.amount_promised,
        'contacted_at': follow_up.contacted_at,
    }


# =============================================================================
# ADMISSION FEES
# =============================================================================

@require_http_methods(["GET", "POST"])
def fee_collection(request):
    if request.method == 'POST':
        return fee_create(request)
    return fee_list(request)


@api_view
@capability_required('fee.list')
def fee_list(request):
    filters = validate_form(FeeFilterForm(request.GET))
    queryset = AdmissionFeeService.list_fees(
        request.actor, status=filters.get('status'), lead=filters.get('lead')
    )
    return JsonResponse(paginated_payload(request, queryset, 'fees', serialize_fee))


@api_view
@capability_required('fee.create')
def fee_create(request):
    data = validate_form(AdmissionFeeForm(parse_json_body(request)))
    fee = AdmissionFeeService.create_fee(request.actor, data)
    return JsonResponse({'fee': serialize_fee(fee)}, status=201)


@require_http_methods(["GET"])
@api_view
@capability_required('fee.list')
def fee_status_for_lead(request, lead_pk):
    status = AdmissionFeeService.get_fee_status_for_lead(request.actor, lead_pk)
    fee = status['fee']
    return JsonResponse({
        'has_approved_fee': status['has_approved_fee'],
        'fee': serialize_fee(fee) if fee else None,
    })


@require_http_methods(["PATCH"])
@api_view
@capability_required('fee.review')
def fee_approve(request, pk):
    fee = AdmissionFeeService.approve_fee(request.actor, pk)
    return JsonResponse({'fee': serialize_fee(fee)})


@require_http_methods(["PATCH"])
@api_view
@capability_required('fee.review')
def fee_reject(request, pk):
    data = validate_form(FeeReviewForm(parse_json_body(request)))
    fee = AdmissionFeeService.reject_fee(request.actor, pk, reason=data.get('reason'))
    return JsonResponse({'fee': serialize_fee(fee)})


@require_http_methods(["PATCH"])
@api_view
@capability_required('fee.review')
def fee_cancel(request, pk):
    data = validate_form(FeeCancelForm(parse_json_body(request)))
    fee = AdmissionFeeService.cancel_fee(request.actor, pk, data['reason'])
    return JsonResponse({'fee': serialize_fee(fee)})


# =============================================================================
# DUE COLLECTIONS
# =============================================================================

@require_http_methods(["GET", "POST"])
def due_collection_collection(request):
    if request.method == 'POST':
        return due_collection_submit(request)
    return due_collection_list(request)


@api_view
@capability_required('due.list')
def due_collection_list(request):
    filters = validate_form(DueFilterForm(request.GET))
    queryset = DueCollectionService.list_collections(status=filters.get('status'))
    return JsonResponse(paginated_payload(request, queryset, 'due_collections', serialize_collection))


@api_view
@capability_required('due.submit')
def due_collection_submit(request):
    data = validate_form(DueCollectionForm(parse_json_body(request)))
    collection = DueCollectionService.submit(request.actor, data)
    return JsonResponse({'due_collection': serialize_collection(collection)}, status=201)


@require_http_methods(["PATCH"])
@api_view
@capability_required('due.review')
def due_collection_approve(request, pk):
    data = validate_form(DueReviewForm(parse_json_body(request)))
    collection = DueCollectionService.approve(request.actor, pk, review_note=data.get('review_note'))
    return JsonResponse({'due_collection': serialize_collection(collection), 'message': 'Due collection approved'})


@require_http_methods(["PATCH"])
@api_view
@capability_required('due.review')
def due_collection_reject(request, pk):
    data = validate_form(DueReviewForm(parse_json_body(request)))
    collection = DueCollectionService.reject(request.actor, pk, review_note=data.get('review_note'))
    return JsonResponse({'due_collection': serialize_collection(collection), 'message': 'Due collection rejected'})


# =============================================================================
# COORDINATOR
# =============================================================================

@require_http_methods(["GET"])
@api_view
@capability_required('due.monitor')
def coordinator_dues(request):
    return JsonResponse({'students': [serialize_fee(fee) for fee in get_students_with_dues()]})


@require_http_methods(["GET"])
@api_view
@capability_required('due.monitor')
def coordinator_notifications(request):
    notifications = []
    for item in get_payment_notifications():
        data = serialize_fee(item['fee'])
        data['is_overdue'] = item['is_overdue']
        data['days_until'] = item['days_until']
        notifications.append(data)
    return JsonResponse({'notifications': notifications})


@require_http_methods(["GET"])
@api_view
@capability_required('due.monitor')
def coordinator_stats(request):
    return JsonResponse(get_dashboard_stats(actor=request.actor))


@require_http_methods(["GET"])
@api_view
@capability_required('due.monitor')
def coordinator_fee_history(request, pk):
    fee, follow_ups = DueCollectionService.get_fee_history(pk)
    return JsonResponse({
        'admission_fee': serialize_fee(fee),
        'follow_ups': [serialize_follow_up(f) for f in follow_ups],
    })


@require_http_methods(["POST"])
@api_view
@capability_required('due.follow_up')
def coordinator_add_follow_up(request):
    data = validate_form(DueFollowUpForm(parse_json_body(request)))
    follow_up = DueCollectionService.add_follow_up(request.actor, data)
    return JsonResponse({'follow_up': serialize_follow_up(follow_up)}, status=201)


@require_http_methods(["PATCH"])
@api_view
@capability_required('due.follow_up')
def coordinator_update_payment_date(request, pk):
    data = validate_form(PaymentDateForm(parse_json_body(request)))
    fee = DueCollectionService.update_payment_date(request.actor, pk, data['next_payment_date'])
    return JsonResponse({'admission_fee': serialize_fee(fee)})

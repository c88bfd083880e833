# utils/api.py

"""
JSON boundary for the function-based API views.

``api_view`` authenticates the caller and turns service failures into
``{"code": ..., "message": ...}`` responses; views only deal with the
happy path.
"""

import json
import logging
from functools import wraps

from django.core.exceptions import ObjectDoesNotExist, ValidationError
from django.http import JsonResponse

from utils.exceptions import ServiceError, ValidationFailed

logger = logging.getLogger(__name__)


def error_response(code, message, status):
    return JsonResponse({'code': code, 'message': message}, status=status)


def form_error_message(form):
    """Flatten a bound form's errors into one readable sentence."""
    parts = []
    for field, errors in form.errors.items():
        label = 'Request' if field == '__all__' else field
        parts.append(f"{label}: {' '.join(str(e) for e in errors)}")
    return '; '.join(parts) or 'Invalid input'


def validate_form(form):
    """Return cleaned_data or raise ValidationFailed with the form errors."""
    if not form.is_valid():
        raise ValidationFailed(form_error_message(form))
    return form.cleaned_data


def parse_json_body(request):
    """
    Decode a JSON object request body.

    Multipart/form-encoded POSTs fall back to request.POST so file
    uploads can carry ordinary fields too.
    """
    content_type = request.META.get('CONTENT_TYPE', '')
    if content_type.startswith('multipart/') or content_type.startswith('application/x-www-form-urlencoded'):
        return request.POST.dict()

    if not request.body:
        return {}
    try:
        data = json.loads(request.body)
    except (ValueError, UnicodeDecodeError):
        raise ValidationFailed('Request body is not valid JSON')
    if not isinstance(data, dict):
        raise ValidationFailed('Request body must be a JSON object')
    return data


def api_view(view_func):
    """
    Wrap a JSON view:

    - 401 UNAUTHENTICATED when there is no logged-in user
    - ServiceError -> its own code/status
    - django ValidationError -> 400 VALIDATION_ERROR
    - ObjectDoesNotExist -> 404 NOT_FOUND
    - anything else -> logged, 500 SERVER_ERROR
    """
    @wraps(view_func)
    def wrapper(request, *args, **kwargs):
        user = getattr(request, 'user', None)
        if user is None or not user.is_authenticated:
            return error_response('UNAUTHENTICATED', 'Authentication required', 401)

        try:
            return view_func(request, *args, **kwargs)
        except ServiceError as e:
            return JsonResponse(e.as_dict(), status=e.status)
        except ValidationError as e:
            message = '; '.join(e.messages) if hasattr(e, 'messages') else str(e)
            return error_response('VALIDATION_ERROR', message, 400)
        except ObjectDoesNotExist as e:
            return error_response('NOT_FOUND', str(e) or 'Not found', 404)
        except Exception as e:
            logger.error(f"Unhandled error in {view_func.__name__}: {e}", exc_info=True)
            return error_response('SERVER_ERROR', 'An unexpected error occurred', 500)

    return wrapper

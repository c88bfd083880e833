# utils/context.py

"""
Thread-local request context for audit logging.

This module provides thread-local storage for request information
that needs to be accessible throughout the request lifecycle,
particularly for populating audit fields on BaseModel.save().
"""

from threading import local
import logging

logger = logging.getLogger(__name__)

# Thread-local storage
_thread_locals = local()


def set_request_context(user=None, ip_address=None, user_agent=None,
                        request_path=None, method=None, request=None):
    """
    Set the current request context for this thread.

    This should be called by middleware at the start of each request.

    Args:
        user: The authenticated user (or None)
        ip_address: Client IP address
        user_agent: Browser user agent string
        request_path: The request path/URL
        method: HTTP method
        request: The full request object (alternative to individual params)
    """
    if request is not None:
        user = getattr(request, 'user', None)
        ip_address = get_client_ip(request)
        user_agent = request.META.get('HTTP_USER_AGENT', '')
        request_path = getattr(request, 'path', '')
        method = getattr(request, 'method', '')

    _thread_locals.request_context = {
        'user': user if user is not None and user.is_authenticated else None,
        'ip_address': ip_address,
        'user_agent': user_agent or '',
        'request_path': request_path or '',
        'method': method or '',
    }

    logger.debug(f"Set request context: user={user}, ip={ip_address}")


def get_request_context():
    """
    Get the current request context for this thread.

    Returns:
        dict: Request context containing user, ip_address, request_path, etc.
              Returns None if no context is set.
    """
    return getattr(_thread_locals, 'request_context', None)


def clear_request_context():
    """Clear the request context for this thread."""
    if hasattr(_thread_locals, 'request_context'):
        delattr(_thread_locals, 'request_context')
        logger.debug("Cleared request context")


def get_client_ip(request):
    """
    Extract the client's real IP address from the request.

    Handles X-Forwarded-For header for proxied requests.
    """
    x_forwarded_for = request.META.get('HTTP_X_FORWARDED_FOR')
    if x_forwarded_for:
        # X-Forwarded-For can contain multiple IPs, take the first one
        return x_forwarded_for.split(',')[0].strip()
    return request.META.get('REMOTE_ADDR')


class RequestContext:
    """
    Context manager for temporarily setting request context.

    For code running outside a request (shell sessions, tests) whose
    records should still carry an actor in their audit fields.

    Example:
        with RequestContext(user=admin_user):
            Expense.objects.create(...)
    """

    def __init__(self, user=None, ip_address=None, request_path=None):
        self.context = {
            'user': user,
            'ip_address': ip_address,
            'user_agent': '',
            'request_path': request_path or '',
            'method': '',
        }
        self.previous_context = None

    def __enter__(self):
        self.previous_context = get_request_context()
        _thread_locals.request_context = self.context
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if self.previous_context:
            _thread_locals.request_context = self.previous_context
        else:
            clear_request_context()

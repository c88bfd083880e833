# utils/exceptions.py

"""
Service-layer error taxonomy.

Services raise these; utils.api.api_view turns them into
``{"code": ..., "message": ...}`` JSON bodies with the matching status.
"""


class ServiceError(Exception):
    """Base class for expected business failures."""

    code = 'SERVER_ERROR'
    status = 500

    def __init__(self, message, code=None):
        super().__init__(message)
        self.message = message
        if code:
            self.code = code

    def as_dict(self):
        return {'code': self.code, 'message': self.message}


class ValidationFailed(ServiceError):
    code = 'VALIDATION_ERROR'
    status = 400


class NotAuthenticated(ServiceError):
    code = 'UNAUTHENTICATED'
    status = 401


class Forbidden(ServiceError):
    code = 'FORBIDDEN'
    status = 403


class NotFound(ServiceError):
    code = 'NOT_FOUND'
    status = 404


class BadTransition(ServiceError):
    code = 'BAD_TRANSITION'
    status = 400


class InvalidStatus(ServiceError):
    code = 'INVALID_STATUS'
    status = 400


class InvalidState(ServiceError):
    code = 'INVALID_STATE'
    status = 400


class InsufficientFunds(ServiceError):
    code = 'INSUFFICIENT_FUNDS'
    status = 400


class Conflict(ServiceError):
    code = 'DUPLICATE'
    status = 409

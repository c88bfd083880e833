# accounts/permissions.py

"""
Role based capability checks.

Every API operation is named in CAPABILITIES together with the roles
allowed to perform it. Views declare the operation with
``@capability_required``; ownership rules (e.g. an admission officer
touching only leads assigned to them) are checked by the services.
"""

import logging
from dataclasses import dataclass
from functools import wraps

from accounts.models import Role, UserProfile
from utils.exceptions import Forbidden, NotAuthenticated

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Actor:
    id: str
    name: str
    role: str

    @property
    def is_elevated(self):
        return is_elevated(self.role)


ELEVATED_ROLES = frozenset({Role.SUPER_ADMIN, Role.ADMIN})

CAPABILITIES = {
    # Leads
    'lead.create': frozenset({Role.DIGITAL_MARKETING}),
    'lead.bulk_import': frozenset({Role.DIGITAL_MARKETING}),
    'lead.list': frozenset({
        Role.DIGITAL_MARKETING, Role.ADMISSION, Role.COORDINATOR,
        Role.ADMIN, Role.SUPER_ADMIN,
    }),
    'lead.assign': frozenset({Role.DIGITAL_MARKETING}),
    'lead.history': frozenset({
        Role.DIGITAL_MARKETING, Role.ADMISSION, Role.ADMIN, Role.SUPER_ADMIN,
    }),
    'lead.transition': frozenset({Role.ADMISSION, Role.ADMIN, Role.SUPER_ADMIN}),
    'lead.undo_admission': ELEVATED_ROLES,
    'lead.report': ELEVATED_ROLES,
    'lead.notifications': frozenset({Role.ADMISSION, Role.ADMIN, Role.SUPER_ADMIN}),

    # Admission fees
    'fee.create': frozenset({Role.ADMISSION}),
    'fee.list': frozenset({
        Role.ADMISSION, Role.ACCOUNTANT, Role.COORDINATOR,
        Role.ADMIN, Role.SUPER_ADMIN,
    }),
    'fee.review': frozenset({Role.ACCOUNTANT}),

    # Due collections
    'due.submit': frozenset({Role.COORDINATOR}),
    'due.list': frozenset({Role.ACCOUNTANT, Role.ADMIN, Role.SUPER_ADMIN}),
    'due.review': frozenset({Role.ACCOUNTANT}),
    'due.monitor': frozenset({Role.COORDINATOR, Role.ADMIN, Role.SUPER_ADMIN}),
    'due.follow_up': frozenset({Role.COORDINATOR}),

    # Bank ledger
    'bank.operate': frozenset({Role.ACCOUNTANT, Role.ADMIN, Role.SUPER_ADMIN}),
    'bank.delete': ELEVATED_ROLES,

    # Income / expense register
    'register.read': frozenset({
        Role.ACCOUNTANT, Role.ADMIN, Role.SUPER_ADMIN, Role.IT_ADMIN,
    }),
    'register.write': frozenset({Role.ACCOUNTANT}),
}


def is_elevated(role):
    return role in ELEVATED_ROLES


def actor_from_user(user):
    """Build an Actor from an authenticated user and its profile."""
    if user is None or not user.is_authenticated:
        raise NotAuthenticated('Authentication required')
    try:
        profile = user.profile
    except UserProfile.DoesNotExist:
        raise Forbidden('User has no staff profile')
    return Actor(
        id=str(user.pk),
        name=user.get_full_name() or user.username,
        role=profile.role,
    )


def actor_from_request(request):
    return actor_from_user(getattr(request, 'user', None))


def has_capability(role, operation):
    try:
        return role in CAPABILITIES[operation]
    except KeyError:
        raise ValueError(f"Unknown operation '{operation}'")


def check_capability(actor, operation):
    if not has_capability(actor.role, operation):
        logger.warning(f"{actor.name} ({actor.role}) denied '{operation}'")
        raise Forbidden(f"Role {actor.role} may not perform {operation}")


def capability_required(operation):
    """
    View decorator: resolve the actor, check the capability table and
    expose the actor as ``request.actor``. Use inside ``api_view``.
    """
    if operation not in CAPABILITIES:
        raise ValueError(f"Unknown operation '{operation}'")

    def decorator(view_func):
        @wraps(view_func)
        def wrapper(request, *args, **kwargs):
            actor = actor_from_request(request)
            check_capability(actor, operation)
            request.actor = actor
            return view_func(request, *args, **kwargs)
        return wrapper
    return decorator

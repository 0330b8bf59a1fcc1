"""
Role capability registry for callers of the booking core.

The controller itself is role-agnostic. Surrounding code resolves the
caller's role through the identity provider and checks a capability here
before calling ``query_bookings`` or ``submit_booking``.
"""

import logging
from enum import Enum
from typing import Iterable

logger = logging.getLogger(__name__)


class Capability(str, Enum):
    VIEW_AVAILABILITY = "view_availability"
    SUBMIT_BOOKING = "submit_booking"
    CANCEL_BOOKING = "cancel_booking"
    REVIEW_BOOKINGS = "review_bookings"


class PermissionDenied(Exception):
    """Raised when a role lacks a required capability."""

    def __init__(self, role: str, capability: Capability) -> None:
        super().__init__(f"Role '{role}' lacks capability '{capability.value}'")
        self.role = role
        self.capability = capability


_ROLE_REGISTRY: dict[str, frozenset[Capability]] = {}


def register_role(name: str, capabilities: Iterable[Capability]) -> None:
    """Register (or replace) the capability set of a role."""
    _ROLE_REGISTRY[name] = frozenset(capabilities)
    logger.debug("Role registered: %s", name)


def get_registered_roles() -> list[str]:
    return list(_ROLE_REGISTRY.keys())


def has_capability(role: str, capability: Capability) -> bool:
    return capability in _ROLE_REGISTRY.get(role, frozenset())


def require_capability(role: str, capability: Capability) -> None:
    """
    Raises:
        PermissionDenied: If ``role`` is unknown or lacks ``capability``.
    """
    if not has_capability(role, capability):
        logger.info("Denied %s to role %s", capability.value, role)
        raise PermissionDenied(role, capability)


def _auto_register() -> None:
    """Register the built-in roles. Called once at import time."""
    register_role("student", [
        Capability.VIEW_AVAILABILITY,
        Capability.SUBMIT_BOOKING,
        Capability.CANCEL_BOOKING,
    ])
    register_role("teacher", [
        Capability.VIEW_AVAILABILITY,
        Capability.REVIEW_BOOKINGS,
    ])
    register_role("admin", list(Capability))


_auto_register()

"""
Booking status lifecycle as an explicit transition table.

Bookings are created ``confirmed`` and may be cancelled exactly once.
``cancelled`` is terminal: no transition leaves it.

Usage:
    next_status = apply_transition(BookingStatus.CONFIRMED, BookingTrigger.CANCEL)
    assert next_status == BookingStatus.CANCELLED
"""

import logging
from dataclasses import dataclass
from enum import Enum

from lessonbook.schemas.booking_schema import BookingStatus

logger = logging.getLogger(__name__)


class BookingTrigger(str, Enum):
    """Events that change a booking's status."""
    CANCEL = "cancel"


@dataclass(frozen=True)
class BookingTransition:
    """A single valid status transition."""
    from_status: BookingStatus
    to_status: BookingStatus
    trigger: BookingTrigger


class InvalidTransitionError(Exception):
    """Raised when a trigger is not valid from the booking's current status."""

    def __init__(self, status: BookingStatus, trigger: BookingTrigger) -> None:
        valid = [t.value for t in valid_triggers(status)]
        super().__init__(
            f"No valid transition from '{status.value}' with trigger "
            f"'{trigger.value}'. Valid triggers: {valid}"
        )
        self.status = status
        self.trigger = trigger


TRANSITIONS: list[BookingTransition] = [
    BookingTransition(BookingStatus.CONFIRMED, BookingStatus.CANCELLED, BookingTrigger.CANCEL),
]


def valid_triggers(status: BookingStatus) -> list[BookingTrigger]:
    """Return all triggers valid from ``status``."""
    return [t.trigger for t in TRANSITIONS if t.from_status == status]


def apply_transition(status: BookingStatus, trigger: BookingTrigger) -> BookingStatus:
    """
    Resolve the status a trigger leads to.

    Raises:
        InvalidTransitionError: If no transition exists from ``status``.
    """
    for t in TRANSITIONS:
        if t.from_status == status and t.trigger == trigger:
            logger.debug(
                "Booking transition: %s -> %s (trigger: %s)",
                status.value, t.to_status.value, trigger.value,
            )
            return t.to_status
    raise InvalidTransitionError(status, trigger)


def is_terminal(status: BookingStatus) -> bool:
    return not valid_triggers(status)

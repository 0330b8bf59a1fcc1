"""
Typed failures raised by the booking core.

Each failure carries a stable, locale-independent ``kind`` that callers
branch on and map to their own user-facing messages. Only
``StoreUnavailable`` is retryable.
"""

from typing import Any


class BookingError(Exception):
    """Base class for every failure surfaced by the booking core."""

    kind: str = "booking_error"
    retryable: bool = False

    def __init__(self, message: str, **context: Any) -> None:
        super().__init__(message)
        self.context = context

    def to_dict(self) -> dict[str, Any]:
        return {"kind": self.kind, "message": str(self), "retryable": self.retryable, **self.context}


class InstructorMismatch(BookingError):
    """The slot belongs to a different instructor than the one requested."""

    kind = "instructor_mismatch"


class SlotInPast(BookingError):
    kind = "slot_in_past"


class SlotNotInTemplate(BookingError):
    """The slot boundaries are not a slot of the instructor's working hours."""

    kind = "slot_not_in_template"


class SlotNoLongerAvailable(BookingError):
    """Lost the race: a confirmed booking already overlaps the slot."""

    kind = "slot_no_longer_available"


class AlreadyCancelled(BookingError):
    kind = "already_cancelled"


class BookingNotFound(BookingError):
    kind = "booking_not_found"


class InstructorNotFound(BookingError):
    kind = "instructor_not_found"


class CancellationWindowClosed(BookingError):
    """Cancellation requested inside the late window while late cancellation is disabled."""

    kind = "cancellation_window_closed"


class StoreUnavailable(BookingError):
    """Persistence failed or timed out. Safe to retry the whole request."""

    kind = "store_unavailable"
    retryable = True


class InvalidCriteria(BookingError):
    kind = "invalid_criteria"


class InvalidClassType(BookingError):
    """The requested class type is not one the school offers."""

    kind = "invalid_class_type"

"""
Collaborator contracts for the booking core.

The core never owns persistence or reference data. It talks to a
``BookingStore`` and an ``InstructorDirectory`` through these protocols;
the in-memory implementations live beside them and real backends
(SQL, HTTP API) implement the same methods.
"""

from contextlib import AbstractContextManager
from datetime import date, time
from typing import Optional, Protocol, Sequence

from lessonbook.schemas.booking_schema import (
    Booking,
    BookingFilterCriteria,
    BookingSort,
    BookingStatus,
)
from lessonbook.schemas.instructor_schema import Instructor


class StoreError(Exception):
    """Base class for store-level failures."""


class StoreUnavailableError(StoreError):
    """The store could not be reached or a lock wait timed out."""


class SlotConflictError(StoreError):
    """A confirmed booking already holds (instructor, date, start_time)."""


class BookingMissingError(StoreError):
    """No booking with the given id exists."""


class StatusConflictError(StoreError):
    """Compare-and-set failed: the booking's status was not the expected one."""

    def __init__(self, booking_id: str, expected: BookingStatus, actual: BookingStatus) -> None:
        super().__init__(
            f"Booking {booking_id} is {actual.value}, expected {expected.value}"
        )
        self.booking_id = booking_id
        self.expected = expected
        self.actual = actual


class BookingStore(Protocol):
    def locked(self, instructor_id: str, day: date) -> AbstractContextManager[None]:
        """Serialize read-check-write sequences for one (instructor, date) key."""
        ...

    def find_confirmed_bookings(self, instructor_id: str, day: date) -> list[Booking]:
        ...

    def insert_booking(self, booking: Booking) -> Booking:
        """Persist a booking. Raises SlotConflictError on a confirmed duplicate."""
        ...

    def update_booking_status(
        self,
        booking_id: str,
        expected: BookingStatus,
        new_status: BookingStatus,
        **changes: object,
    ) -> Booking:
        ...

    def get_booking(self, booking_id: str) -> Optional[Booking]:
        ...

    def query_all(
        self,
        criteria: BookingFilterCriteria,
        sort: BookingSort,
        offset: int,
        limit: int,
    ) -> tuple[list[Booking], int]:
        ...


class InstructorDirectory(Protocol):
    def get_instructor(self, instructor_id: str) -> Optional[Instructor]:
        ...

    def get_working_hours(self, instructor_id: str, weekday: int) -> list[tuple[time, time]]:
        ...

    def list_instructors(self) -> Sequence[Instructor]:
        ...

"""
In-memory booking store and instructor directory.

Used by the CLI, tests and any single-process deployment. A real backend
would enforce the same guarantees with a transaction and a partial unique
index on (instructor_id, date, start_time) WHERE status = 'confirmed'.
"""

import threading
import weakref
from contextlib import contextmanager
from datetime import date, time
from typing import Iterable, Iterator, Optional

from lessonbook.config import settings
from lessonbook.logging_context import get_request_logger
from lessonbook.schemas.booking_schema import (
    Booking,
    BookingFilterCriteria,
    BookingSort,
    BookingStatus,
)
from lessonbook.schemas.instructor_schema import Instructor
from lessonbook.store.base import (
    BookingMissingError,
    SlotConflictError,
    StatusConflictError,
    StoreUnavailableError,
)

logger = get_request_logger(__name__)


class InMemoryBookingStore:
    """Thread-safe booking store keyed by booking id.

    ``locked()`` hands out one lock per (instructor, date) so admissions
    for different keys never wait on each other. Every lock wait is
    bounded by ``timeout_seconds``.
    """

    def __init__(self, timeout_seconds: Optional[float] = None) -> None:
        self.timeout_seconds = timeout_seconds or settings.store.timeout_seconds
        self._bookings: dict[str, Booking] = {}
        self._records_lock = threading.Lock()
        self._registry_lock = threading.Lock()
        # Entries vanish once no thread holds or waits on the lock.
        self._key_locks: "weakref.WeakValueDictionary[tuple[str, date], threading.Lock]" = (
            weakref.WeakValueDictionary()
        )

    def _key_lock(self, instructor_id: str, day: date) -> threading.Lock:
        with self._registry_lock:
            lock = self._key_locks.get((instructor_id, day))
            if lock is None:
                lock = threading.Lock()
                self._key_locks[(instructor_id, day)] = lock
            return lock

    @contextmanager
    def _acquire(self, lock: threading.Lock, what: str) -> Iterator[None]:
        if not lock.acquire(timeout=self.timeout_seconds):
            logger.warning("Timed out after %.2fs waiting for %s", self.timeout_seconds, what)
            raise StoreUnavailableError(
                f"Timed out after {self.timeout_seconds:.2f}s waiting for {what}"
            )
        try:
            yield
        finally:
            lock.release()

    @contextmanager
    def locked(self, instructor_id: str, day: date) -> Iterator[None]:
        with self._acquire(self._key_lock(instructor_id, day), f"{instructor_id}@{day}"):
            yield

    def find_confirmed_bookings(self, instructor_id: str, day: date) -> list[Booking]:
        with self._acquire(self._records_lock, "booking records"):
            return sorted(
                (
                    b for b in self._bookings.values()
                    if b.instructor_id == instructor_id
                    and b.date == day
                    and b.status == BookingStatus.CONFIRMED
                ),
                key=lambda b: b.start_time,
            )

    def insert_booking(self, booking: Booking) -> Booking:
        with self._acquire(self._records_lock, "booking records"):
            if booking.id in self._bookings:
                raise SlotConflictError(f"Booking id {booking.id} already exists")
            if booking.status == BookingStatus.CONFIRMED:
                for existing in self._bookings.values():
                    if (
                        existing.status == BookingStatus.CONFIRMED
                        and existing.instructor_id == booking.instructor_id
                        and existing.date == booking.date
                        and existing.start_time == booking.start_time
                    ):
                        raise SlotConflictError(
                            f"{booking.instructor_id} already has confirmed booking "
                            f"{existing.id} on {booking.date} at {booking.start_time:%H:%M}"
                        )
            self._bookings[booking.id] = booking
        logger.debug("Stored booking %s", booking.id)
        return booking

    def update_booking_status(
        self,
        booking_id: str,
        expected: BookingStatus,
        new_status: BookingStatus,
        **changes: object,
    ) -> Booking:
        with self._acquire(self._records_lock, "booking records"):
            current = self._bookings.get(booking_id)
            if current is None:
                raise BookingMissingError(f"Booking {booking_id} not found")
            if current.status != expected:
                raise StatusConflictError(booking_id, expected, current.status)
            updated = current.model_copy(update={**changes, "status": new_status})
            self._bookings[booking_id] = updated
        logger.debug("Booking %s status %s -> %s", booking_id, expected.value, new_status.value)
        return updated

    def get_booking(self, booking_id: str) -> Optional[Booking]:
        with self._acquire(self._records_lock, "booking records"):
            return self._bookings.get(booking_id)

    def query_all(
        self,
        criteria: BookingFilterCriteria,
        sort: BookingSort,
        offset: int,
        limit: int,
    ) -> tuple[list[Booking], int]:
        with self._acquire(self._records_lock, "booking records"):
            snapshot = list(self._bookings.values())
        matched = [b for b in snapshot if criteria.matches(b)]
        matched.sort(key=sort.key, reverse=sort.descending)
        return matched[offset:offset + limit], len(matched)

    def __len__(self) -> int:
        return len(self._bookings)

    def reset(self) -> None:
        """Clear all bookings. Used by test fixtures for isolation."""
        with self._acquire(self._records_lock, "booking records"):
            self._bookings.clear()


class InMemoryInstructorDirectory:
    """Instructor reference data held in memory."""

    def __init__(self, instructors: Iterable[Instructor] = ()) -> None:
        self._instructors: dict[str, Instructor] = {i.id: i for i in instructors}

    def add(self, instructor: Instructor) -> None:
        self._instructors[instructor.id] = instructor
        logger.info("Instructor registered: %s (%s)", instructor.name, instructor.id)

    def get_instructor(self, instructor_id: str) -> Optional[Instructor]:
        return self._instructors.get(instructor_id)

    def get_working_hours(self, instructor_id: str, weekday: int) -> list[tuple[time, time]]:
        instructor = self._instructors.get(instructor_id)
        if instructor is None:
            return []
        return [(w.start_time, w.end_time) for w in instructor.windows_for(weekday)]

    def list_instructors(self) -> list[Instructor]:
        return sorted(self._instructors.values(), key=lambda i: i.name)

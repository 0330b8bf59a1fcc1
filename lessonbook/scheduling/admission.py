"""
Booking admission, cancellation and review queries.

``BookingController`` is the only component that writes. Every admission
re-reads the confirmed bookings for (instructor, date) inside the store's
per-key lock before inserting, so two students racing for one slot get
exactly one winner no matter what availability snapshot they saw.

Usage:
    controller = BookingController(store, directory)
    slots = controller.view_day("INS-001", date(2025, 3, 18))
    booking = controller.submit_booking(slots[0], instructor, "practical", student)
    controller.cancel_booking(booking.id)
"""

import uuid
from datetime import date, datetime, timedelta, timezone
from typing import Any, Callable, Mapping, Optional, Union

from pydantic import ValidationError

from lessonbook.config import AppConfig, settings
from lessonbook.logging_context import get_request_logger
from lessonbook.schemas.booking_schema import (
    Booking,
    BookingFilterCriteria,
    BookingPage,
    BookingSort,
    BookingStatus,
    BookingWithInstructor,
    ClassType,
    TimeSlot,
)
from lessonbook.schemas.instructor_schema import Instructor, Student
from lessonbook.scheduling.availability import AvailabilityReport, resolve_availability_report
from lessonbook.scheduling.errors import (
    AlreadyCancelled,
    BookingNotFound,
    CancellationWindowClosed,
    InstructorMismatch,
    InstructorNotFound,
    InvalidClassType,
    InvalidCriteria,
    SlotInPast,
    SlotNoLongerAvailable,
    SlotNotInTemplate,
    StoreUnavailable,
)
from lessonbook.scheduling.lifecycle import BookingTrigger, InvalidTransitionError, apply_transition
from lessonbook.scheduling.slot_generator import find_template_slot
from lessonbook.store.base import (
    BookingMissingError,
    BookingStore,
    InstructorDirectory,
    SlotConflictError,
    StatusConflictError,
    StoreError,
)
from lessonbook.utils import intervals_overlap, parse_iso_date

logger = get_request_logger(__name__)

CriteriaInput = Union[BookingFilterCriteria, Mapping[str, Any], None]


def new_booking_id() -> str:
    return f"BK-{uuid.uuid4().hex[:8].upper()}"


def build_criteria(criteria: CriteriaInput) -> BookingFilterCriteria:
    """Coerce raw filter input into criteria, rejecting malformed values."""
    if criteria is None:
        return BookingFilterCriteria()
    if isinstance(criteria, BookingFilterCriteria):
        return criteria
    try:
        raw = dict(criteria)
    except (TypeError, ValueError) as exc:
        raise InvalidCriteria(
            f"Booking filter must be a mapping, got {type(criteria).__name__}",
            fields=["criteria"],
        ) from exc
    try:
        return BookingFilterCriteria.model_validate(raw)
    except ValidationError as exc:
        fields = sorted({str(err["loc"][0]) for err in exc.errors() if err["loc"]})
        raise InvalidCriteria(
            f"Invalid booking filter: {', '.join(fields) or 'criteria'}",
            fields=fields,
        ) from exc


class BookingController:
    """Validates and commits bookings against live store state."""

    def __init__(
        self,
        store: BookingStore,
        directory: InstructorDirectory,
        clock: Optional[Callable[[], datetime]] = None,
        config: Optional[AppConfig] = None,
    ) -> None:
        self._store = store
        self._directory = directory
        self._clock = clock or datetime.now
        self._config = config or settings

    def _now(self) -> datetime:
        return self._clock()

    def _get_instructor(self, instructor_id: str) -> Instructor:
        instructor = self._directory.get_instructor(instructor_id)
        if instructor is None:
            raise InstructorNotFound(
                f"Instructor {instructor_id} not found", instructor_id=instructor_id
            )
        return instructor

    # --- Availability ---

    def day_report(self, instructor_id: str, day: Union[date, str]) -> AvailabilityReport:
        """Resolve one instructor's day against the store's confirmed bookings."""
        try:
            day = parse_iso_date(day)
        except ValueError as exc:
            raise InvalidCriteria(f"Invalid date: {day!r}", fields=["date"]) from exc
        instructor = self._get_instructor(instructor_id)
        try:
            confirmed = self._store.find_confirmed_bookings(instructor.id, day)
        except StoreError as exc:
            raise StoreUnavailable(str(exc)) from exc
        return resolve_availability_report(
            instructor,
            day,
            confirmed,
            now=self._now(),
            horizon_days=self._config.schedule.booking_horizon_days,
            slot_minutes=self._config.schedule.slot_minutes,
        )

    def view_day(self, instructor_id: str, day: Union[date, str]) -> list[TimeSlot]:
        return self.day_report(instructor_id, day).slots

    # --- Admission ---

    def submit_booking(
        self,
        slot: TimeSlot,
        instructor: Instructor,
        class_type: Union[ClassType, str],
        student: Student,
    ) -> Booking:
        """
        Admit a booking for ``student`` on ``slot``.

        Checks, in order: the slot belongs to ``instructor``, the slot has
        not started, the slot is part of the instructor's template, and no
        confirmed booking overlaps it at commit time.

        Returns:
            The persisted booking with status ``confirmed``.

        Raises:
            InvalidClassType, InstructorMismatch, SlotInPast, SlotNotInTemplate,
            SlotNoLongerAvailable, StoreUnavailable.
        """
        try:
            class_type = ClassType(class_type)
        except ValueError as exc:
            logger.info("Rejected booking: unknown class type %r", class_type)
            raise InvalidClassType(
                f"Unknown class type {class_type!r}",
                class_type=str(class_type),
                allowed=[c.value for c in ClassType],
            ) from exc

        if slot.instructor_id != instructor.id:
            logger.info(
                "Rejected booking: slot belongs to %s, requested %s",
                slot.instructor_id, instructor.id,
            )
            raise InstructorMismatch(
                f"Slot belongs to instructor {slot.instructor_id}, not {instructor.id}",
                slot_instructor_id=slot.instructor_id,
                instructor_id=instructor.id,
            )

        now = self._now()
        if slot.starts_at <= now:
            logger.info("Rejected booking: slot %s %s already started", slot.date, slot.label)
            raise SlotInPast(
                f"Slot {slot.date} {slot.label} has already started",
                date=slot.date.isoformat(),
                start_time=f"{slot.start_time:%H:%M}",
            )

        if find_template_slot(instructor, slot, self._config.schedule.slot_minutes) is None:
            logger.info(
                "Rejected booking: %s %s is not a slot of %s", slot.date, slot.label, instructor.id
            )
            raise SlotNotInTemplate(
                f"{slot.label} on {slot.date} is not a working slot of {instructor.name}",
                date=slot.date.isoformat(),
                start_time=f"{slot.start_time:%H:%M}",
            )

        booking = Booking(
            id=new_booking_id(),
            student_name=student.name,
            student_legal_id=student.legal_id,
            instructor_id=instructor.id,
            class_type=class_type,
            date=slot.date,
            start_time=slot.start_time,
            end_time=slot.end_time,
            status=BookingStatus.CONFIRMED,
            created_at=datetime.now(timezone.utc),
        )

        try:
            with self._store.locked(instructor.id, slot.date):
                existing = self._store.find_confirmed_bookings(instructor.id, slot.date)
                clash = next(
                    (
                        b for b in existing
                        if intervals_overlap(b.start_time, b.end_time, slot.start_time, slot.end_time)
                    ),
                    None,
                )
                if clash is not None:
                    logger.info(
                        "Rejected booking: %s %s taken by %s", slot.date, slot.label, clash.id
                    )
                    raise SlotNoLongerAvailable(
                        f"Slot {slot.date} {slot.label} is no longer available",
                        conflicting_booking_id=clash.id,
                    )
                self._store.insert_booking(booking)
        except SlotConflictError as exc:
            logger.info("Rejected booking: store reported conflict on %s %s", slot.date, slot.label)
            raise SlotNoLongerAvailable(
                f"Slot {slot.date} {slot.label} is no longer available"
            ) from exc
        except StoreError as exc:
            logger.warning("Store unavailable during admission: %s", exc)
            raise StoreUnavailable(str(exc)) from exc

        logger.info(
            "Booking admitted: %s for %s with %s on %s at %s",
            booking.id, student.name, instructor.id, booking.date, slot.label,
        )
        return booking

    # --- Cancellation ---

    def is_late_cancellation(self, booking: Booking) -> bool:
        """True if ``booking`` starts within the configured cancellation window."""
        limit = timedelta(hours=self._config.cancellation.hours_limit)
        return booking.starts_at - self._now() < limit

    def cancel_booking(self, booking_id: str) -> Booking:
        """
        Cancel a confirmed booking exactly once.

        Raises:
            BookingNotFound, AlreadyCancelled, CancellationWindowClosed,
            StoreUnavailable.
        """
        try:
            booking = self._store.get_booking(booking_id)
        except StoreError as exc:
            raise StoreUnavailable(str(exc)) from exc
        if booking is None:
            raise BookingNotFound(f"Booking {booking_id} not found", booking_id=booking_id)

        try:
            new_status = apply_transition(booking.status, BookingTrigger.CANCEL)
        except InvalidTransitionError as exc:
            raise AlreadyCancelled(
                f"Booking {booking_id} is already cancelled", booking_id=booking_id
            ) from exc

        late = self.is_late_cancellation(booking)
        if late and not self._config.cancellation.allow_after_limit:
            logger.info("Rejected cancellation of %s: inside late window", booking_id)
            raise CancellationWindowClosed(
                f"Booking {booking_id} can no longer be cancelled; it starts in less than "
                f"{self._config.cancellation.hours_limit} hours",
                booking_id=booking_id,
            )

        try:
            updated = self._store.update_booking_status(
                booking_id,
                BookingStatus.CONFIRMED,
                new_status,
                cancelled_at=datetime.now(timezone.utc),
                late_cancellation=late,
            )
        except StatusConflictError as exc:
            raise AlreadyCancelled(
                f"Booking {booking_id} is already cancelled", booking_id=booking_id
            ) from exc
        except BookingMissingError as exc:
            raise BookingNotFound(f"Booking {booking_id} not found", booking_id=booking_id) from exc
        except StoreError as exc:
            logger.warning("Store unavailable during cancellation: %s", exc)
            raise StoreUnavailable(str(exc)) from exc

        logger.info("Booking cancelled: %s%s", booking_id, " (late)" if late else "")
        return updated

    # --- Review ---

    def query_bookings(
        self,
        criteria: CriteriaInput = None,
        sort: Optional[BookingSort] = None,
        page: int = 1,
        page_size: Optional[int] = None,
    ) -> BookingPage:
        """
        Filter, sort and paginate bookings for review.

        Filters are combined with AND. Pages are 1-indexed; a page past the
        end is empty. ``total`` is the post-filter match count.
        """
        filters = build_criteria(criteria)
        sort = sort or BookingSort()
        if page_size is None:
            page_size = self._config.review.default_page_size
        if page < 1:
            raise InvalidCriteria(f"page must be >= 1, got {page}", fields=["page"])
        if page_size < 1:
            raise InvalidCriteria(f"page_size must be >= 1, got {page_size}", fields=["page_size"])
        if page_size > self._config.review.max_page_size:
            logger.debug("Clamping page_size %d to %d", page_size, self._config.review.max_page_size)
            page_size = self._config.review.max_page_size

        try:
            items, total = self._store.query_all(
                filters, sort, offset=(page - 1) * page_size, limit=page_size
            )
        except StoreError as exc:
            raise StoreUnavailable(str(exc)) from exc

        rows = [
            BookingWithInstructor(
                booking=b, instructor=self._directory.get_instructor(b.instructor_id)
            )
            for b in items
        ]
        return BookingPage(items=rows, total=total, page=page, page_size=page_size)

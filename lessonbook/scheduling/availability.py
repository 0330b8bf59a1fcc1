"""
Availability resolution: merge generated slots with confirmed bookings.

A slot is ``booked`` only when a confirmed booking sits exactly on its
boundaries. Bookings that straddle slot boundaries are a template/booking
misconfiguration and are reported as consistency warnings instead of being
merged into a status. Resolution is read-only and idempotent.
"""

import logging
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from typing import Iterable, Optional

from lessonbook.config import settings
from lessonbook.schemas.booking_schema import Booking, BookingStatus, SlotStatus, TimeSlot
from lessonbook.schemas.instructor_schema import Instructor
from lessonbook.scheduling.slot_generator import generate_slots
from lessonbook.utils import intervals_overlap

logger = logging.getLogger(__name__)


@dataclass
class ConsistencyWarning:
    """A confirmed booking that could not be mapped onto exactly one slot."""

    booking_id: str
    reason: str  # "partial_overlap" | "duplicate_booking" | "outside_template"
    message: str


@dataclass
class AvailabilityReport:
    """Resolved slots for one instructor/date plus any consistency warnings."""

    instructor_id: str
    date: date
    slots: list[TimeSlot] = field(default_factory=list)
    warnings: list[ConsistencyWarning] = field(default_factory=list)
    booked_ids: dict[str, str] = field(default_factory=dict)  # slot label -> booking id

    def summary(self) -> dict[str, int]:
        return summarize(self.slots)


def summarize(slots: Iterable[TimeSlot]) -> dict[str, int]:
    """Count slots per status."""
    counts = {status.value: 0 for status in SlotStatus}
    for slot in slots:
        counts[slot.status.value] += 1
    return counts


def _relevant_bookings(
    instructor: Instructor, day: date, bookings: Iterable[Booking]
) -> list[Booking]:
    relevant = []
    for booking in bookings:
        if booking.status != BookingStatus.CONFIRMED:
            logger.debug("Ignoring %s booking %s", booking.status.value, booking.id)
            continue
        if booking.instructor_id != instructor.id or booking.date != day:
            logger.debug(
                "Ignoring booking %s for %s on %s", booking.id, booking.instructor_id, booking.date
            )
            continue
        relevant.append(booking)
    return sorted(relevant, key=lambda b: (b.start_time, b.created_at, b.id))


def _is_bookable(slot: TimeSlot, now: datetime, horizon_days: int) -> bool:
    if slot.starts_at <= now:
        return False
    return slot.date <= now.date() + timedelta(days=horizon_days)


def resolve_availability_report(
    instructor: Instructor,
    day: date,
    confirmed_bookings: Iterable[Booking],
    now: Optional[datetime] = None,
    horizon_days: Optional[int] = None,
    slot_minutes: Optional[int] = None,
) -> AvailabilityReport:
    """
    Resolve slot statuses and collect consistency warnings.

    Args:
        instructor: Instructor whose template defines the slots.
        day: Calendar date to resolve.
        confirmed_bookings: Bookings for (instructor, day). Others are ignored.
        now: Evaluation time (naive, school-local). Defaults to ``datetime.now()``.
        horizon_days: How many days ahead slots are bookable.
            Defaults to ``settings.schedule.booking_horizon_days``.
        slot_minutes: Default slot width passed to the generator.

    Returns:
        AvailabilityReport with slots in template order.
    """
    now = now or datetime.now()
    if horizon_days is None:
        horizon_days = settings.schedule.booking_horizon_days

    report = AvailabilityReport(instructor_id=instructor.id, date=day)
    candidates = generate_slots(instructor, day, slot_minutes)
    bookings = _relevant_bookings(instructor, day, confirmed_bookings)

    claimed: dict[int, Booking] = {}
    for booking in bookings:
        exact = [
            i for i, slot in enumerate(candidates) if booking.matches_slot(slot)
        ]
        if exact:
            index = exact[0]
            if index in claimed:
                report.warnings.append(ConsistencyWarning(
                    booking_id=booking.id,
                    reason="duplicate_booking",
                    message=(
                        f"Booking {booking.id} duplicates {claimed[index].id} "
                        f"on slot {candidates[index].label}"
                    ),
                ))
            else:
                claimed[index] = booking
            continue

        overlapping = [
            slot.label for slot in candidates
            if intervals_overlap(slot.start_time, slot.end_time, booking.start_time, booking.end_time)
        ]
        if overlapping:
            reason = "partial_overlap"
            message = (
                f"Booking {booking.id} {booking.start_time:%H:%M}-{booking.end_time:%H:%M} "
                f"straddles slot(s) {', '.join(overlapping)}"
            )
        else:
            reason = "outside_template"
            message = (
                f"Booking {booking.id} {booking.start_time:%H:%M}-{booking.end_time:%H:%M} "
                f"falls outside the working hours of {instructor.id}"
            )
        report.warnings.append(ConsistencyWarning(booking_id=booking.id, reason=reason, message=message))

    for warning in report.warnings:
        logger.warning("Availability consistency: %s", warning.message)

    for index, slot in enumerate(candidates):
        if index in claimed:
            status = SlotStatus.BOOKED
            report.booked_ids[slot.label] = claimed[index].id
        elif _is_bookable(slot, now, horizon_days):
            status = SlotStatus.AVAILABLE
        else:
            status = SlotStatus.UNAVAILABLE
        report.slots.append(slot.model_copy(update={"status": status}))

    return report


def resolve_availability(
    instructor: Instructor,
    day: date,
    confirmed_bookings: Iterable[Booking],
    now: Optional[datetime] = None,
    horizon_days: Optional[int] = None,
    slot_minutes: Optional[int] = None,
) -> list[TimeSlot]:
    """Return the instructor's slots for ``day`` with their final status."""
    return resolve_availability_report(
        instructor, day, confirmed_bookings, now, horizon_days, slot_minutes
    ).slots

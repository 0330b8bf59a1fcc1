"""Shared test fixtures and helpers."""

import itertools
from dataclasses import replace
from datetime import date, datetime, time, timezone
from typing import Optional

import pytest

from lessonbook.config import CancellationConfig, StoreConfig, settings
from lessonbook.schemas.booking_schema import Booking, BookingStatus, ClassType, TimeSlot
from lessonbook.schemas.instructor_schema import Instructor, Student, WorkingWindow
from lessonbook.scheduling.admission import BookingController
from lessonbook.store.memory import InMemoryBookingStore, InMemoryInstructorDirectory

# Monday 2025-03-17, 09:00 school time
NOW = datetime(2025, 3, 17, 9, 0)
TODAY = date(2025, 3, 17)
TOMORROW = date(2025, 3, 18)
SUNDAY = date(2025, 3, 23)

_ids = itertools.count(1)


def make_instructor(
    instructor_id: str = "INS-001",
    name: str = "Carlos Gómez",
    start: time = time(7, 0),
    end: time = time(12, 0),
    weekdays: tuple[int, ...] = (0, 1, 2, 3, 4),
    slot_minutes: Optional[int] = None,
) -> Instructor:
    """Helper to create an instructor working one window on the given weekdays."""
    window = WorkingWindow(start_time=start, end_time=end, slot_minutes=slot_minutes)
    return Instructor(
        id=instructor_id,
        name=name,
        working_hours={weekday: (window,) for weekday in weekdays},
    )


def make_slot(
    instructor_id: str = "INS-001",
    day: date = TOMORROW,
    start: time = time(8, 0),
    end: time = time(9, 0),
) -> TimeSlot:
    return TimeSlot(instructor_id=instructor_id, date=day, start_time=start, end_time=end)


def make_booking(
    instructor_id: str = "INS-001",
    day: date = TOMORROW,
    start: time = time(8, 0),
    end: Optional[time] = None,
    student_name: str = "Ana Ruiz",
    legal_id: str = "111",
    status: BookingStatus = BookingStatus.CONFIRMED,
    class_type: ClassType = ClassType.PRACTICAL,
    booking_id: Optional[str] = None,
    created_at: Optional[datetime] = None,
) -> Booking:
    """Helper to create a Booking with sensible defaults."""
    if end is None:
        end = time(start.hour + 1, start.minute)
    return Booking(
        id=booking_id or f"BK-TEST{next(_ids):04d}",
        student_name=student_name,
        student_legal_id=legal_id,
        instructor_id=instructor_id,
        class_type=class_type,
        date=day,
        start_time=start,
        end_time=end,
        status=status,
        created_at=created_at or datetime(2025, 3, 1, 12, 0, tzinfo=timezone.utc),
    )


@pytest.fixture
def instructor() -> Instructor:
    return make_instructor()


@pytest.fixture
def other_instructor() -> Instructor:
    return make_instructor("INS-002", "Laura Méndez", time(14, 0), time(16, 0))


@pytest.fixture
def student() -> Student:
    return Student(name="Ana Ruiz", legal_id="111")


@pytest.fixture
def directory(instructor, other_instructor) -> InMemoryInstructorDirectory:
    return InMemoryInstructorDirectory([instructor, other_instructor])


@pytest.fixture
def store() -> InMemoryBookingStore:
    return InMemoryBookingStore(timeout_seconds=2.0)


@pytest.fixture
def fast_timeout_store() -> InMemoryBookingStore:
    return InMemoryBookingStore(timeout_seconds=0.05)


@pytest.fixture
def controller(store, directory) -> BookingController:
    return BookingController(store, directory, clock=lambda: NOW, config=settings)


@pytest.fixture
def strict_cancellation_config():
    return replace(
        settings,
        cancellation=CancellationConfig(hours_limit=4, allow_after_limit=False),
        store=StoreConfig(timeout_seconds=2.0),
    )

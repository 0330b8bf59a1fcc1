"""Booking, slot and review query data models."""

import datetime as dt
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from lessonbook.schemas.instructor_schema import Instructor
from lessonbook.utils import normalize_legal_id


class SlotStatus(str, Enum):
    """Display status of a candidate slot."""

    AVAILABLE = "available"
    UNAVAILABLE = "unavailable"
    BOOKED = "booked"


class ClassType(str, Enum):
    THEORETICAL = "theoretical"
    PRACTICAL = "practical"


class BookingStatus(str, Enum):
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"


class TimeSlot(BaseModel):
    """A candidate reservation unit. Recomputed on every view, never stored."""

    model_config = ConfigDict(frozen=True)

    instructor_id: str
    date: dt.date
    start_time: dt.time
    end_time: dt.time
    status: SlotStatus = SlotStatus.AVAILABLE

    @property
    def starts_at(self) -> dt.datetime:
        return dt.datetime.combine(self.date, self.start_time)

    @property
    def label(self) -> str:
        return f"{self.start_time:%H:%M}-{self.end_time:%H:%M}"


class Booking(BaseModel):
    """A committed reservation as held by the booking store."""

    model_config = ConfigDict(frozen=True)

    id: str
    student_name: str
    student_legal_id: str
    instructor_id: str
    class_type: ClassType
    date: dt.date
    start_time: dt.time
    end_time: dt.time
    status: BookingStatus = BookingStatus.CONFIRMED
    created_at: dt.datetime
    cancelled_at: Optional[dt.datetime] = None
    late_cancellation: bool = False

    @property
    def starts_at(self) -> dt.datetime:
        return dt.datetime.combine(self.date, self.start_time)

    def matches_slot(self, slot: TimeSlot) -> bool:
        """True if this booking sits exactly on the slot's boundaries."""
        return (
            self.instructor_id == slot.instructor_id
            and self.date == slot.date
            and self.start_time == slot.start_time
            and self.end_time == slot.end_time
        )


class BookingWithInstructor(BaseModel):
    """Review row: a booking joined with its instructor reference data."""

    booking: Booking
    instructor: Optional[Instructor] = None

    @property
    def instructor_name(self) -> str:
        return self.instructor.name if self.instructor else "Unknown instructor"


def _legal_id_matches(needle: str, legal_id: str) -> bool:
    if needle.lower() in legal_id.lower():
        return True
    normalized = normalize_legal_id(needle)
    return bool(normalized) and normalized in normalize_legal_id(legal_id)


class BookingFilterCriteria(BaseModel):
    """Conjunctive filter for the booking review. Blank values mean "any"."""

    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    student_name: Optional[str] = None
    legal_id: Optional[str] = None
    instructor_id: Optional[str] = None
    date: Optional[dt.date] = None

    @field_validator("student_name", "legal_id", "instructor_id", mode="before")
    @classmethod
    def _blank_to_none(cls, value: object) -> object:
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @field_validator("date", mode="before")
    @classmethod
    def _parse_date(cls, value: object) -> object:
        if isinstance(value, str):
            if not value.strip():
                return None
            return dt.datetime.strptime(value.strip(), "%Y-%m-%d").date()
        return value

    def matches(self, booking: Booking) -> bool:
        if self.student_name and self.student_name.lower() not in booking.student_name.lower():
            return False
        if self.legal_id and not _legal_id_matches(self.legal_id, booking.student_legal_id):
            return False
        if self.instructor_id and booking.instructor_id != self.instructor_id:
            return False
        if self.date and booking.date != self.date:
            return False
        return True


class SortField(str, Enum):
    DATE = "date"
    CREATED_AT = "created_at"
    STUDENT_NAME = "student_name"
    INSTRUCTOR_ID = "instructor_id"


class BookingSort(BaseModel):
    """Sort order for review results. ``date`` sorts by (date, start_time)."""

    model_config = ConfigDict(frozen=True)

    field: SortField = SortField.DATE
    descending: bool = True

    def key(self, booking: Booking) -> tuple:
        if self.field == SortField.CREATED_AT:
            return (booking.created_at, booking.id)
        if self.field == SortField.STUDENT_NAME:
            return (booking.student_name.lower(), booking.date, booking.start_time)
        if self.field == SortField.INSTRUCTOR_ID:
            return (booking.instructor_id, booking.date, booking.start_time)
        return (booking.date, booking.start_time, booking.instructor_id)


class BookingPage(BaseModel):
    """One page of review results plus the total post-filter match count."""

    items: list[BookingWithInstructor] = Field(default_factory=list)
    total: int = 0
    page: int = 1
    page_size: int = 10

    @property
    def total_pages(self) -> int:
        return (self.total + self.page_size - 1) // self.page_size

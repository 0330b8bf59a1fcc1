"""Instructor reference data and student identity models."""

import datetime as dt
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

WEEKDAY_NAMES = ("monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday")


class WorkingWindow(BaseModel):
    """One working-hours window [start_time, end_time) split into fixed-width slots.

    ``slot_minutes`` of None means "use the configured default width".
    """

    model_config = ConfigDict(frozen=True)

    start_time: dt.time
    end_time: dt.time
    slot_minutes: Optional[int] = Field(default=None, ge=5, le=480)
    active: bool = True

    @model_validator(mode="after")
    def _check_bounds(self) -> "WorkingWindow":
        if self.end_time <= self.start_time:
            raise ValueError(
                f"window end {self.end_time:%H:%M} must be after start {self.start_time:%H:%M}"
            )
        return self


class Instructor(BaseModel):
    """Instructor record from administrative reference data."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    working_hours: dict[int, tuple[WorkingWindow, ...]] = Field(default_factory=dict)

    @field_validator("working_hours")
    @classmethod
    def _check_weekdays(
        cls, value: dict[int, tuple[WorkingWindow, ...]]
    ) -> dict[int, tuple[WorkingWindow, ...]]:
        for weekday in value:
            if not 0 <= weekday <= 6:
                raise ValueError(f"weekday must be 0 (Monday) to 6 (Sunday), got {weekday}")
        return {
            weekday: tuple(sorted(windows, key=lambda w: w.start_time))
            for weekday, windows in value.items()
        }

    def windows_for(self, weekday: int) -> tuple[WorkingWindow, ...]:
        """Active windows for a weekday, ordered by start time."""
        return tuple(w for w in self.working_hours.get(weekday, ()) if w.active)


class Student(BaseModel):
    """Authenticated student identity supplied by the session provider."""

    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    name: str = Field(min_length=1)
    legal_id: str = Field(min_length=1)

"""
Slot generation from an instructor's weekly working-hours template.

Each active window for the requested weekday is cut into fixed-width
slots. The output depends only on the template, the date and the default
slot width, so it is safe to recompute on every view.
"""

import logging
from datetime import date
from typing import Optional

from lessonbook.config import settings
from lessonbook.schemas.booking_schema import SlotStatus, TimeSlot
from lessonbook.schemas.instructor_schema import WEEKDAY_NAMES, Instructor, WorkingWindow
from lessonbook.utils import add_minutes, intervals_overlap

logger = logging.getLogger(__name__)


class TemplateConfigurationError(ValueError):
    """Raised when an instructor's windows for one weekday overlap."""


def _split_window(
    instructor_id: str, day: date, window: WorkingWindow, default_minutes: int
) -> list[TimeSlot]:
    width = window.slot_minutes or default_minutes
    slots: list[TimeSlot] = []
    start = window.start_time
    while True:
        try:
            end = add_minutes(start, width)
        except ValueError:
            break
        if end > window.end_time or end <= start:
            break
        slots.append(
            TimeSlot(
                instructor_id=instructor_id,
                date=day,
                start_time=start,
                end_time=end,
                status=SlotStatus.AVAILABLE,
            )
        )
        start = end
    if start != window.end_time:
        logger.debug(
            "Window %s-%s for %s leaves %s-%s unused at %d min width",
            window.start_time, window.end_time, instructor_id, start, window.end_time, width,
        )
    return slots


def generate_slots(
    instructor: Instructor, day: date, slot_minutes: Optional[int] = None
) -> list[TimeSlot]:
    """
    Build the ordered candidate slots for one instructor on one date.

    Args:
        instructor: Instructor whose template is used.
        day: Calendar date; its weekday selects the windows.
        slot_minutes: Width for windows that don't set their own.
            Defaults to ``settings.schedule.slot_minutes``.

    Returns:
        Slots ordered by start time, all with status ``available``. An
        empty list means the instructor does not work that weekday.

    Raises:
        TemplateConfigurationError: If two active windows overlap.
    """
    default_minutes = slot_minutes or settings.schedule.slot_minutes
    windows = instructor.windows_for(day.weekday())
    if not windows:
        return []

    for earlier, later in zip(windows, windows[1:]):
        if intervals_overlap(earlier.start_time, earlier.end_time, later.start_time, later.end_time):
            raise TemplateConfigurationError(
                f"Instructor {instructor.id} has overlapping windows on "
                f"{WEEKDAY_NAMES[day.weekday()]}: "
                f"{earlier.start_time:%H:%M}-{earlier.end_time:%H:%M} and "
                f"{later.start_time:%H:%M}-{later.end_time:%H:%M}"
            )

    slots: list[TimeSlot] = []
    for window in windows:
        slots.extend(_split_window(instructor.id, day, window, default_minutes))
    return slots


def find_template_slot(
    instructor: Instructor, slot: TimeSlot, slot_minutes: Optional[int] = None
) -> Optional[TimeSlot]:
    """Return the generated slot with the same boundaries as ``slot``, if any."""
    for candidate in generate_slots(instructor, slot.date, slot_minutes):
        if candidate.start_time == slot.start_time and candidate.end_time == slot.end_time:
            return candidate
    return None

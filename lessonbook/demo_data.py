"""
Seed instructors for the CLI and local experiments.

In production these records come from the school's administrative
reference data (instructor schedules maintained by an admin).
"""

from datetime import time

from lessonbook.schemas.instructor_schema import Instructor, WorkingWindow
from lessonbook.store.memory import InMemoryInstructorDirectory

_WEEKDAY_MORNING = WorkingWindow(start_time=time(7, 0), end_time=time(12, 0))
_WEEKDAY_AFTERNOON = WorkingWindow(start_time=time(14, 0), end_time=time(18, 0))
_SATURDAY = WorkingWindow(start_time=time(8, 0), end_time=time(12, 0))

DEMO_INSTRUCTORS: list[Instructor] = [
    Instructor(
        id="INS-001",
        name="Carlos Gómez",
        working_hours={
            weekday: (_WEEKDAY_MORNING, _WEEKDAY_AFTERNOON) for weekday in range(5)
        } | {5: (_SATURDAY,)},
    ),
    Instructor(
        id="INS-002",
        name="Laura Méndez",
        working_hours={
            0: (_WEEKDAY_AFTERNOON,),
            2: (_WEEKDAY_AFTERNOON,),
            4: (_WEEKDAY_AFTERNOON,),
        },
    ),
    Instructor(
        id="INS-003",
        name="Andrés Rojas",
        working_hours={
            weekday: (WorkingWindow(start_time=time(6, 0), end_time=time(10, 0), slot_minutes=120),)
            for weekday in range(1, 6)
        },
    ),
]


def build_directory() -> InMemoryInstructorDirectory:
    """Return a directory pre-loaded with the demo instructors."""
    return InMemoryInstructorDirectory(DEMO_INSTRUCTORS)

from lessonbook.store.base import (
    BookingMissingError,
    BookingStore,
    InstructorDirectory,
    SlotConflictError,
    StatusConflictError,
    StoreError,
    StoreUnavailableError,
)
from lessonbook.store.memory import InMemoryBookingStore, InMemoryInstructorDirectory

__all__ = [
    "BookingStore",
    "InstructorDirectory",
    "InMemoryBookingStore",
    "InMemoryInstructorDirectory",
    "StoreError",
    "StoreUnavailableError",
    "SlotConflictError",
    "StatusConflictError",
    "BookingMissingError",
]

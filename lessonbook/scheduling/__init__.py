from lessonbook.scheduling.admission import BookingController, build_criteria
from lessonbook.scheduling.availability import (
    AvailabilityReport,
    ConsistencyWarning,
    resolve_availability,
    resolve_availability_report,
    summarize,
)
from lessonbook.scheduling.slot_generator import TemplateConfigurationError, generate_slots

__all__ = [
    "BookingController",
    "build_criteria",
    "AvailabilityReport",
    "ConsistencyWarning",
    "resolve_availability",
    "resolve_availability_report",
    "summarize",
    "generate_slots",
    "TemplateConfigurationError",
]

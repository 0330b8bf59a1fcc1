"""Tests for slot generation from working-hours templates."""

from datetime import date, time

import pytest

from lessonbook.schemas.booking_schema import SlotStatus
from lessonbook.schemas.instructor_schema import Instructor, WorkingWindow
from lessonbook.scheduling.slot_generator import (
    TemplateConfigurationError,
    find_template_slot,
    generate_slots,
)
from tests.conftest import SUNDAY, TOMORROW, make_instructor, make_slot


class TestTemplateCoverage:
    def test_morning_window_yields_five_hourly_slots(self, instructor):
        slots = generate_slots(instructor, TOMORROW, slot_minutes=60)
        assert [(s.start_time, s.end_time) for s in slots] == [
            (time(7), time(8)),
            (time(8), time(9)),
            (time(9), time(10)),
            (time(10), time(11)),
            (time(11), time(12)),
        ]

    def test_slots_are_contiguous(self, instructor):
        slots = generate_slots(instructor, TOMORROW, slot_minutes=60)
        for earlier, later in zip(slots, slots[1:]):
            assert earlier.end_time == later.start_time

    def test_all_slots_start_available(self, instructor):
        slots = generate_slots(instructor, TOMORROW, slot_minutes=60)
        assert all(s.status == SlotStatus.AVAILABLE for s in slots)
        assert all(s.instructor_id == "INS-001" and s.date == TOMORROW for s in slots)

    def test_window_slot_width_overrides_default(self):
        instructor = make_instructor(start=time(6), end=time(10), slot_minutes=120)
        slots = generate_slots(instructor, TOMORROW, slot_minutes=60)
        assert [s.label for s in slots] == ["06:00-08:00", "08:00-10:00"]

    def test_partial_trailing_slot_is_dropped(self):
        instructor = make_instructor(start=time(7), end=time(9, 30))
        slots = generate_slots(instructor, TOMORROW, slot_minutes=60)
        assert [s.label for s in slots] == ["07:00-08:00", "08:00-09:00"]

    def test_multiple_windows_in_order(self):
        morning = WorkingWindow(start_time=time(7), end_time=time(9))
        afternoon = WorkingWindow(start_time=time(14), end_time=time(16))
        instructor = Instructor(id="INS-009", name="Test", working_hours={1: (afternoon, morning)})
        slots = generate_slots(instructor, TOMORROW, slot_minutes=60)
        assert [s.label for s in slots] == [
            "07:00-08:00", "08:00-09:00", "14:00-15:00", "15:00-16:00",
        ]


class TestEdgeCases:
    def test_day_off_yields_empty_list(self, instructor):
        assert generate_slots(instructor, SUNDAY) == []

    def test_inactive_window_is_skipped(self):
        window = WorkingWindow(start_time=time(7), end_time=time(9), active=False)
        instructor = Instructor(id="INS-009", name="Test", working_hours={1: (window,)})
        assert generate_slots(instructor, TOMORROW) == []

    def test_past_dates_still_produce_slots(self, instructor):
        assert len(generate_slots(instructor, date(2020, 3, 16), 60)) == 5

    def test_deterministic(self, instructor):
        assert generate_slots(instructor, TOMORROW, 60) == generate_slots(instructor, TOMORROW, 60)

    def test_overlapping_windows_rejected(self):
        a = WorkingWindow(start_time=time(7), end_time=time(10))
        b = WorkingWindow(start_time=time(9), end_time=time(12))
        instructor = Instructor(id="INS-009", name="Test", working_hours={1: (a, b)})
        with pytest.raises(TemplateConfigurationError, match="overlapping windows on tuesday"):
            generate_slots(instructor, TOMORROW)

    def test_window_end_before_start_rejected(self):
        with pytest.raises(ValueError, match="must be after start"):
            WorkingWindow(start_time=time(12), end_time=time(7))

    def test_invalid_weekday_rejected(self):
        window = WorkingWindow(start_time=time(7), end_time=time(8))
        with pytest.raises(ValueError, match="weekday"):
            Instructor(id="INS-009", name="Test", working_hours={7: (window,)})


class TestFindTemplateSlot:
    def test_finds_matching_slot(self, instructor):
        found = find_template_slot(instructor, make_slot(), slot_minutes=60)
        assert found is not None
        assert found.label == "08:00-09:00"

    def test_misaligned_slot_not_found(self, instructor):
        slot = make_slot(start=time(8, 30), end=time(9, 30))
        assert find_template_slot(instructor, slot, slot_minutes=60) is None

    def test_day_off_not_found(self, instructor):
        assert find_template_slot(instructor, make_slot(day=SUNDAY), slot_minutes=60) is None

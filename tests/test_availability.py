"""Tests for merging generated slots with confirmed bookings."""

import logging
from datetime import date, time

from lessonbook.schemas.booking_schema import BookingStatus, SlotStatus
from lessonbook.scheduling.availability import (
    resolve_availability,
    resolve_availability_report,
    summarize,
)
from tests.conftest import NOW, SUNDAY, TODAY, TOMORROW, make_booking


def _statuses(slots):
    return {s.label: s.status for s in slots}


class TestBookedSlots:
    def test_exact_match_marks_booked(self, instructor):
        booking = make_booking(start=time(8))
        slots = resolve_availability(instructor, TOMORROW, [booking], now=NOW, horizon_days=30)
        statuses = _statuses(slots)
        assert statuses["08:00-09:00"] == SlotStatus.BOOKED
        assert statuses["07:00-08:00"] == SlotStatus.AVAILABLE

    def test_booked_count_matches_confirmed_bookings(self, instructor):
        bookings = [make_booking(start=time(h)) for h in (7, 9, 11)]
        report = resolve_availability_report(
            instructor, TOMORROW, bookings, now=NOW, horizon_days=30
        )
        booked = [s for s in report.slots if s.status == SlotStatus.BOOKED]
        assert len(booked) == 3
        assert sorted(report.booked_ids.values()) == sorted(b.id for b in bookings)
        assert report.warnings == []

    def test_cancelled_booking_does_not_mark_slot(self, instructor):
        booking = make_booking(start=time(8), status=BookingStatus.CANCELLED)
        slots = resolve_availability(instructor, TOMORROW, [booking], now=NOW, horizon_days=30)
        assert _statuses(slots)["08:00-09:00"] == SlotStatus.AVAILABLE

    def test_other_instructor_and_date_ignored(self, instructor):
        bookings = [
            make_booking(instructor_id="INS-002", start=time(8)),
            make_booking(day=date(2025, 3, 19), start=time(9)),
        ]
        slots = resolve_availability(instructor, TOMORROW, bookings, now=NOW, horizon_days=30)
        assert SlotStatus.BOOKED not in _statuses(slots).values()

    def test_booked_wins_over_past(self, instructor):
        booking = make_booking(day=TODAY, start=time(7))
        slots = resolve_availability(instructor, TODAY, [booking], now=NOW, horizon_days=30)
        assert _statuses(slots)["07:00-08:00"] == SlotStatus.BOOKED


class TestUnavailableSlots:
    def test_past_slots_unavailable(self, instructor):
        statuses = _statuses(resolve_availability(instructor, TODAY, [], now=NOW, horizon_days=30))
        assert statuses["07:00-08:00"] == SlotStatus.UNAVAILABLE
        assert statuses["08:00-09:00"] == SlotStatus.UNAVAILABLE
        assert statuses["09:00-10:00"] == SlotStatus.UNAVAILABLE  # starts exactly now
        assert statuses["10:00-11:00"] == SlotStatus.AVAILABLE

    def test_beyond_horizon_unavailable(self, instructor):
        slots = resolve_availability(instructor, date(2025, 4, 21), [], now=NOW, horizon_days=30)
        assert len(slots) == 5
        assert all(s.status == SlotStatus.UNAVAILABLE for s in slots)

    def test_horizon_boundary_is_inclusive(self, instructor):
        slots = resolve_availability(instructor, date(2025, 4, 16), [], now=NOW, horizon_days=30)
        assert all(s.status == SlotStatus.AVAILABLE for s in slots)

    def test_day_off_is_empty(self, instructor):
        assert resolve_availability(instructor, SUNDAY, [], now=NOW, horizon_days=30) == []


class TestConsistencyWarnings:
    def test_partial_overlap_is_warned_not_booked(self, instructor, caplog):
        booking = make_booking(start=time(7, 30), end=time(8, 15))
        with caplog.at_level(logging.WARNING):
            report = resolve_availability_report(
                instructor, TOMORROW, [booking], now=NOW, horizon_days=30
            )
        assert SlotStatus.BOOKED not in _statuses(report.slots).values()
        assert len(report.warnings) == 1
        assert report.warnings[0].reason == "partial_overlap"
        assert report.warnings[0].booking_id == booking.id
        assert "07:00-08:00, 08:00-09:00" in report.warnings[0].message
        assert "Availability consistency" in caplog.text

    def test_booking_outside_template_warned(self, instructor):
        booking = make_booking(start=time(15))
        report = resolve_availability_report(
            instructor, TOMORROW, [booking], now=NOW, horizon_days=30
        )
        assert report.warnings[0].reason == "outside_template"

    def test_duplicate_booking_marks_one_slot(self, instructor):
        first = make_booking(start=time(8))
        second = make_booking(start=time(8), student_name="Ana Paz", legal_id="222")
        report = resolve_availability_report(
            instructor, TOMORROW, [first, second], now=NOW, horizon_days=30
        )
        booked = [s for s in report.slots if s.status == SlotStatus.BOOKED]
        assert len(booked) == 1
        assert report.booked_ids["08:00-09:00"] == first.id
        assert report.warnings[0].reason == "duplicate_booking"


class TestResolutionProperties:
    def test_idempotent(self, instructor):
        bookings = [make_booking(start=time(10))]
        first = resolve_availability(instructor, TOMORROW, bookings, now=NOW, horizon_days=30)
        second = resolve_availability(instructor, TOMORROW, bookings, now=NOW, horizon_days=30)
        assert first == second

    def test_input_bookings_untouched(self, instructor):
        bookings = [make_booking(start=time(10))]
        before = [b.model_copy() for b in bookings]
        resolve_availability(instructor, TOMORROW, bookings, now=NOW, horizon_days=30)
        assert bookings == before

    def test_summarize_counts_each_status(self, instructor):
        slots = resolve_availability(
            instructor, TODAY, [make_booking(day=TODAY, start=time(11))], now=NOW, horizon_days=30
        )
        assert summarize(slots) == {"available": 1, "unavailable": 3, "booked": 1}

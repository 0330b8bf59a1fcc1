"""
Console entry point for the booking core.

Runs against the in-memory store seeded with the demo instructors, so
nothing persists between invocations. ``demo`` walks through a full
booking cycle: view a day, two students racing for one slot, a
cancellation and an admin review page.

Usage:
    python main.py instructors
    python main.py slots --instructor INS-001 --date 2025-03-18
    python main.py demo --date 2025-03-18
"""

import argparse
import logging
import sys
from concurrent.futures import ThreadPoolExecutor
from datetime import date, timedelta

from lessonbook.access import Capability, PermissionDenied, require_capability
from lessonbook.config import settings
from lessonbook.demo_data import build_directory
from lessonbook.logging_context import request_scope
from lessonbook.schemas.booking_schema import SlotStatus, TimeSlot
from lessonbook.schemas.instructor_schema import Student
from lessonbook.scheduling.admission import BookingController
from lessonbook.scheduling.availability import summarize
from lessonbook.scheduling.errors import BookingError
from lessonbook.store.memory import InMemoryBookingStore
from lessonbook.utils import parse_iso_date

logger = logging.getLogger(__name__)

GREEN = "\033[92m"
RED = "\033[91m"
YELLOW = "\033[93m"
DIM = "\033[2m"
RESET = "\033[0m"

_STATUS_COLORS = {
    SlotStatus.AVAILABLE: GREEN,
    SlotStatus.UNAVAILABLE: RED,
    SlotStatus.BOOKED: YELLOW,
}


def _print_slots(slots: list[TimeSlot]) -> None:
    if not slots:
        print(f"{DIM}  Instructor does not work this day.{RESET}")
        return
    for slot in slots:
        color = _STATUS_COLORS[slot.status]
        print(f"  {slot.label}  {color}{slot.status.value}{RESET}")
    counts = summarize(slots)
    print(f"{DIM}  {counts['available']} available, {counts['booked']} booked, "
          f"{counts['unavailable']} unavailable{RESET}")


def _print_header() -> None:
    print(f"{DIM}{settings.school_name}, times in {settings.schedule.timezone}{RESET}")


def _build_controller() -> BookingController:
    return BookingController(InMemoryBookingStore(), build_directory())


def cmd_instructors(args: argparse.Namespace) -> int:
    for instructor in build_directory().list_instructors():
        print(f"{instructor.id}  {instructor.name}")
    return 0


def cmd_slots(args: argparse.Namespace) -> int:
    controller = _build_controller()
    slots = controller.view_day(args.instructor, args.date)
    _print_header()
    print(f"{args.instructor} on {args.date}:")
    _print_slots(slots)
    return 0


def cmd_demo(args: argparse.Namespace) -> int:
    directory = build_directory()
    controller = BookingController(InMemoryBookingStore(), directory)
    instructor = directory.get_instructor(args.instructor)
    if instructor is None:
        logger.error("Unknown instructor: %s", args.instructor)
        return 1

    _print_header()
    print(f"Day view for {instructor.name} on {args.date}:")
    slots = controller.view_day(instructor.id, args.date)
    _print_slots(slots)
    open_slots = [s for s in slots if s.status == SlotStatus.AVAILABLE]
    if not open_slots:
        print("No open slots to book. Try another date.")
        return 0
    target = open_slots[0]

    students = [Student(name="Ana Ruiz", legal_id="111"), Student(name="Ana Paz", legal_id="222")]

    def attempt(student: Student) -> str:
        with request_scope() as request_id:
            try:
                booking = controller.submit_booking(target, instructor, "practical", student)
            except BookingError as exc:
                return f"{RED}{student.name}: {exc.kind}{RESET} {DIM}({request_id}){RESET}"
        return f"{GREEN}{student.name}: booked {booking.id}{RESET} {DIM}({request_id}){RESET}"

    print(f"\nTwo students submit {target.label} at the same time:")
    with ThreadPoolExecutor(max_workers=len(students)) as pool:
        for line in pool.map(attempt, students):
            print(f"  {line}")

    print("\nDay view after admission:")
    _print_slots(controller.view_day(instructor.id, args.date))

    try:
        require_capability(args.role, Capability.REVIEW_BOOKINGS)
    except PermissionDenied as exc:
        print(f"\n{RED}{exc}{RESET}")
        return 0

    page = controller.query_bookings({"student_name": "ana"})
    print(f"\nReview ({page.total} match(es), page {page.page}/{max(page.total_pages, 1)}):")
    for row in page.items:
        b = row.booking
        print(f"  {b.id}  {b.student_name} ({b.student_legal_id})  {row.instructor_name}  "
              f"{b.date} {b.start_time:%H:%M}  {b.status.value}")

    for row in page.items:
        cancelled = controller.cancel_booking(row.booking.id)
        late = " (late)" if cancelled.late_cancellation else ""
        print(f"\nCancelled {cancelled.id}{late}.")
        try:
            controller.cancel_booking(cancelled.id)
        except BookingError as exc:
            print(f"  Second cancel refused: {exc.kind}")
    return 0


def main() -> None:
    parser = argparse.ArgumentParser(
        description="Inspect availability and run booking scenarios for driving lessons."
    )
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging output.")
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("instructors", help="List demo instructors.").set_defaults(func=cmd_instructors)

    default_day = (date.today() + timedelta(days=1)).isoformat()

    slots_parser = sub.add_parser("slots", help="Show one instructor's day.")
    slots_parser.add_argument("--instructor", required=True, help="Instructor id, e.g. INS-001.")
    slots_parser.add_argument("--date", type=parse_iso_date, default=default_day,
                              help="Date as YYYY-MM-DD (default: tomorrow).")
    slots_parser.set_defaults(func=cmd_slots)

    demo_parser = sub.add_parser("demo", help="Run a scripted booking race and review.")
    demo_parser.add_argument("--instructor", default="INS-001", help="Instructor id.")
    demo_parser.add_argument("--date", type=parse_iso_date, default=default_day,
                             help="Date as YYYY-MM-DD (default: tomorrow).")
    demo_parser.add_argument("--role", default="admin", help="Caller role for the review step.")
    demo_parser.set_defaults(func=cmd_demo)

    args = parser.parse_args()
    if args.verbose:
        logging.getLogger().setLevel(logging.DEBUG)

    logger.info("Running '%s' for %s", args.command, settings.school_name)
    try:
        sys.exit(args.func(args))
    except BookingError as exc:
        logger.error("%s: %s", exc.kind, exc)
        sys.exit(1)


if __name__ == "__main__":
    main()

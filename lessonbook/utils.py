"""Shared utilities used across the booking core."""

import re
from datetime import date, datetime, time, timedelta
from typing import Union


def normalize_legal_id(value: str) -> str:
    """Strip separators from a legal ID, keeping letters and digits.

    Examples:
        >>> normalize_legal_id("1.020.345-6")
        '10203456'
        >>> normalize_legal_id(" cc 111 ")
        'CC111'
    """
    return re.sub(r"[^0-9A-Za-z]", "", value).upper()


def parse_iso_date(value: Union[str, date]) -> date:
    """Parse a ``YYYY-MM-DD`` string, passing ``date`` objects through."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return datetime.strptime(value.strip(), "%Y-%m-%d").date()


def add_minutes(value: time, minutes: int) -> time:
    """Add minutes to a wall-clock time. Raises ValueError past midnight."""
    shifted = datetime.combine(date.min, value) + timedelta(minutes=minutes)
    if shifted.date() != date.min:
        raise ValueError(f"{value.strftime('%H:%M')} + {minutes} min crosses midnight")
    return shifted.time()


def intervals_overlap(start_a: time, end_a: time, start_b: time, end_b: time) -> bool:
    """True if the half-open intervals [start_a, end_a) and [start_b, end_b) share an instant."""
    return start_a < end_b and start_b < end_a

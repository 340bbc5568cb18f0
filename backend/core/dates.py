"""Calendar helpers for purchase dates and first-year proration."""

from __future__ import annotations

import re
from datetime import date, datetime
from typing import Optional, Union

from dateutil import parser as date_parser

ISO_DATE_PATTERN = re.compile(r"^(\d{4})-(\d{2})-(\d{2})$")
SLASH_DATE_PATTERN = re.compile(r"^(\d{2})/(\d{2})/(\d{4})$")

DateLike = Union[str, date, datetime, None]


def _build_date(year: int, month: int, day: int) -> Optional[date]:
    """Return the date only if (year, month, day) round-trips exactly."""
    try:
        built = date(year, month, day)
    except ValueError:
        return None
    if (built.year, built.month, built.day) != (year, month, day):
        return None
    return built


def normalize_date(value: Optional[str]) -> str:
    """
    Normalize a user-entered date to ``YYYY-MM-DD``.

    Accepts ISO dates, ``DD/MM/YYYY`` and anything dateutil can parse.
    Returns an empty string for missing or invalid input; never raises.
    """
    if not value:
        return ""

    text = value.strip()
    if not text:
        return ""

    iso_match = ISO_DATE_PATTERN.match(text)
    if iso_match:
        year, month, day = (int(part) for part in iso_match.groups())
        parsed = _build_date(year, month, day)
        return parsed.isoformat() if parsed else ""

    if "/" in text:
        slash_match = SLASH_DATE_PATTERN.match(text)
        if not slash_match:
            return ""
        day, month, year = (int(part) for part in slash_match.groups())
        parsed = _build_date(year, month, day)
        return parsed.isoformat() if parsed else ""

    try:
        parsed_dt = date_parser.parse(text)
    except (ValueError, OverflowError):
        return ""
    return parsed_dt.date().isoformat()


def parse_normalized_date(value: DateLike) -> Optional[date]:
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value

    match = ISO_DATE_PATTERN.match(normalize_date(value))
    if not match:
        return None
    year, month, day = (int(part) for part in match.groups())
    return _build_date(year, month, day)


def format_date_for_input(value: DateLike) -> str:
    """Render a date as ``DD/MM/YYYY``; empty string when it cannot be read."""
    parsed = parse_normalized_date(value)
    if parsed is None:
        return ""
    return f"{parsed.day:02d}/{parsed.month:02d}/{parsed.year:04d}"


def _calendar_day(reference: Union[date, datetime, None]) -> date:
    # time-of-day is irrelevant for every comparison here
    if reference is None:
        return date.today()
    if isinstance(reference, datetime):
        return reference.date()
    return reference


def is_in_future(purchase_date: DateLike, reference_date: Union[date, datetime, None] = None) -> bool:
    """True when the purchase date falls strictly after the reference day."""
    purchase = parse_normalized_date(purchase_date)
    if purchase is None:
        return False
    return purchase > _calendar_day(reference_date)


def months_remaining_in_year(
    purchase_date: DateLike,
    reference_date: Union[date, datetime, None] = None,
) -> int:
    """
    Whole months left between the reference day and 31 December of its year.

    Returns 0 for a purchase date still in the future. The result seeds the
    first-year contribution factor of the projection.
    """
    today = _calendar_day(reference_date)

    if is_in_future(purchase_date, today):
        return 0

    year_end = date(today.year, 12, 31)
    if year_end <= today:
        return 0

    months = (year_end.year - today.year) * 12 + (year_end.month - today.month)
    if year_end.day < today.day:
        months -= 1

    return max(months, 0)

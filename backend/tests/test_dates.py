from __future__ import annotations

from datetime import date, datetime

import pytest

from backend.core.dates import (
    format_date_for_input,
    is_in_future,
    months_remaining_in_year,
    normalize_date,
)

REFERENCE = date(2024, 5, 15)


def test_months_remaining_after_an_earlier_purchase():
    assert months_remaining_in_year("2024-01-20", REFERENCE) == 7


def test_months_remaining_is_zero_for_future_purchase():
    assert months_remaining_in_year("2024-11-05", REFERENCE) == 0


def test_months_remaining_in_leap_year():
    assert months_remaining_in_year("2024-02-01", date(2024, 2, 29)) == 10


def test_months_remaining_at_year_end():
    assert months_remaining_in_year("2024-01-01", date(2024, 12, 31)) == 0
    assert months_remaining_in_year("2024-01-01", date(2024, 12, 1)) == 0


def test_months_remaining_without_purchase_date():
    # no purchase date means "funded today"
    assert months_remaining_in_year("", REFERENCE) == 7


def test_months_remaining_ignores_time_of_day():
    assert months_remaining_in_year("2024-05-15", datetime(2024, 5, 15, 23, 59)) == 7


def test_is_in_future_after_reference():
    assert is_in_future("2024-06-01", REFERENCE) is True


def test_is_in_future_false_for_past_or_same_day():
    assert is_in_future("2024-04-30", REFERENCE) is False
    assert is_in_future("2024-05-15", REFERENCE) is False
    assert is_in_future("2024-05-15", datetime(2024, 5, 15, 0, 1)) is False


def test_is_in_future_false_for_unreadable_dates():
    assert is_in_future("", REFERENCE) is False
    assert is_in_future("31/02/2025", REFERENCE) is False


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("2024-03-05", "2024-03-05"),
        ("  2024-03-05 ", "2024-03-05"),
        ("05/03/2024", "2024-03-05"),
        ("29/02/2024", "2024-02-29"),
        ("March 5, 2024", "2024-03-05"),
        ("5 Mar 2024", "2024-03-05"),
    ],
)
def test_normalize_date_accepts_supported_shapes(raw, expected):
    assert normalize_date(raw) == expected


@pytest.mark.parametrize(
    "raw",
    [
        None,
        "",
        "   ",
        "2024-02-30",
        "2024-13-01",
        "30/02/2024",
        "29/02/2023",
        "5/3/2024",
        "2024/03/05",
        "banana",
    ],
)
def test_normalize_date_rejects_invalid_input(raw):
    assert normalize_date(raw) == ""


def test_format_date_for_input():
    assert format_date_for_input("2024-03-05") == "05/03/2024"
    assert format_date_for_input(date(2030, 12, 31)) == "31/12/2030"
    assert format_date_for_input("") == ""

"""Map projected years to the calendar date a withdrawal becomes available."""

from __future__ import annotations

import math
from datetime import date
from typing import List, Optional, Sequence, Tuple

from pydantic import BaseModel

from backend.core.dates import format_date_for_input
from backend.models import WithdrawalDate, YearlyBreakdown


class WithdrawalScheduleEntry(BaseModel):
    year: float
    allowedWithdrawal: float
    date: WithdrawalDate


class WithdrawalSchedule(BaseModel):
    entries: List[WithdrawalScheduleEntry]
    remaining: int


def withdrawal_date(year_value: float, current_year: Optional[int] = None) -> WithdrawalDate:
    """Payouts land on 31 December, never earlier than the current calendar year."""
    if current_year is None:
        current_year = date.today().year
    payout_year = max(current_year - 1 + math.ceil(year_value), current_year)
    iso = f"{payout_year:04d}-12-31"
    return WithdrawalDate(
        iso=iso,
        label=format_date_for_input(iso) or f"31/12/{payout_year}",
    )


def annotate_table(
    table: Sequence[YearlyBreakdown],
    current_year: Optional[int] = None,
) -> List[Tuple[YearlyBreakdown, WithdrawalDate]]:
    return [(row, withdrawal_date(row.year, current_year)) for row in table]


def withdrawal_schedule(
    table: Sequence[YearlyBreakdown],
    years: float,
    current_year: Optional[int] = None,
    limit: Optional[int] = None,
) -> WithdrawalSchedule:
    """
    Summarise the first ``limit`` payouts (defaults to one per projected year)
    and count how many rows were left out.
    """
    if limit is None:
        limit = max(math.ceil(years), 1) if math.isfinite(years) else 1
    limit = min(limit, len(table))

    entries = [
        WithdrawalScheduleEntry(
            year=row.year,
            allowedWithdrawal=row.allowedWithdrawal,
            date=withdrawal_date(row.year, current_year),
        )
        for row in table[:limit]
    ]
    return WithdrawalSchedule(entries=entries, remaining=len(table) - limit)

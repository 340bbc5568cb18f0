from __future__ import annotations

import math
from typing import List, Optional

from backend.models import (
    CompoundSettings,
    FireMetrics,
    ProjectionContext,
    ProjectionPoint,
    ProjectionResult,
    ProjectionTotals,
    YearlyBreakdown,
)

FIRE_MULTIPLIER = 25  # reciprocal of the 4% withdrawal rule
SAFE_WITHDRAWAL_RATE = 0.04
MIN_GROWTH_FACTOR = 0.0001
DEFAULT_CONTRIBUTION_MONTHS = 12


def _clamp_positive(value: float, fallback: float) -> float:
    return value if math.isfinite(value) and value > 0 else fallback


def get_net_annual_rate(expected_return_pct: float, expenses_pct: float) -> float:
    """Annual return after fees, with the fee drag applied multiplicatively."""
    gross_return = expected_return_pct / 100
    expense_drag = expenses_pct / 100
    return (1 + gross_return) * (1 - expense_drag) - 1


def _real_value(nominal: float, inflation: float, years: float) -> float:
    """Discount a nominal balance by ``years`` of inflation; never raises."""
    try:
        factor = inflation ** years
    except OverflowError:
        return 0.0
    if factor == 0:
        return nominal * math.inf if nominal else 0.0
    return nominal / factor


def first_year_contribution_factor(remaining_months: Optional[float]) -> float:
    if remaining_months is None or not math.isfinite(remaining_months):
        remaining_months = DEFAULT_CONTRIBUTION_MONTHS
    return min(max(remaining_months, 0), 12) / 12


def build_projection(
    settings: CompoundSettings,
    context: Optional[ProjectionContext] = None,
) -> ProjectionResult:
    """
    Step the balance through every compounding period and record one row per year.

    Order of operations (per period):
      1) Grow the balance by the periodic net rate.
      2) Add the period's contribution (prorated during the first year).
      3) On a year boundary, discount for inflation and record chart/table rows.

    Balances in the chart, the table and the totals are in today's money;
    contributions stay nominal.
    """
    compounding = max(_clamp_positive(settings.compoundingFrequency, 1), 1)
    years = _clamp_positive(settings.years, 1)
    if not math.isfinite(years * compounding):
        years = 1

    contribution_per_period = settings.contribution * (settings.contributionFrequency / compounding)
    remaining_months = context.remainingContributionMonths if context else DEFAULT_CONTRIBUTION_MONTHS
    first_year_factor = first_year_contribution_factor(remaining_months)

    net_annual_rate = get_net_annual_rate(
        settings.annualReturn,
        settings.fundExpenseRatio + settings.platformFee,
    )
    growth_factor = max(1 + net_annual_rate, MIN_GROWTH_FACTOR)
    periodic_rate = growth_factor ** (1 / compounding) - 1

    total_periods = math.ceil(years * compounding)
    # deflation beyond -100% would leave no real base to discount by
    inflation = max(1 + settings.inflationRate / 100, MIN_GROWTH_FACTOR)

    fire_number = settings.annualExpenses * FIRE_MULTIPLIER
    fire_year: Optional[float] = None
    if fire_number > 0 and settings.principal >= fire_number:
        fire_year = 0

    chart_points: List[ProjectionPoint] = [ProjectionPoint(year=0, balance=settings.principal)]
    table: List[YearlyBreakdown] = []

    balance = settings.principal
    total_contributions = settings.principal
    previous_growth = 0.0

    for period in range(1, total_periods + 1):
        balance *= 1 + periodic_rate

        contribution_factor = first_year_factor if period <= compounding else 1
        adjusted_contribution = contribution_per_period * contribution_factor
        if adjusted_contribution > 0:
            balance += adjusted_contribution
            total_contributions += adjusted_contribution

        is_year_boundary = period % compounding == 0 or period == total_periods
        if not is_year_boundary:
            continue

        # rounded label; a fractional final year shows as e.g. 2.5
        year = round(period / compounding, 2)
        real_balance = _real_value(balance, inflation, year)

        if fire_number > 0 and fire_year is None and real_balance >= fire_number:
            fire_year = year

        growth = max(real_balance - total_contributions, 0)
        annual_interest = growth - previous_growth
        previous_growth = growth

        chart_points.append(ProjectionPoint(year=year, balance=real_balance))
        table.append(
            YearlyBreakdown(
                year=year,
                endingBalance=real_balance,
                contributions=total_contributions,
                growth=growth,
                annualInterest=annual_interest,
                allowedWithdrawal=real_balance * SAFE_WITHDRAWAL_RATE,
            )
        )

    real_ending_balance = _real_value(balance, inflation, years)

    return ProjectionResult(
        chartPoints=chart_points,
        table=table,
        totals=ProjectionTotals(
            contributions=total_contributions,
            growth=max(real_ending_balance - total_contributions, 0),
            endingBalance=real_ending_balance,
        ),
        fireMetrics=FireMetrics(
            fireNumber=fire_number,
            fireYear=fire_year,
            yearsToFire=fire_year,
        ),
    )


__all__ = [
    "FIRE_MULTIPLIER",
    "SAFE_WITHDRAWAL_RATE",
    "get_net_annual_rate",
    "first_year_contribution_factor",
    "build_projection",
]

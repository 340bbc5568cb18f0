from __future__ import annotations

from math import isclose

from backend.core.projection import build_projection
from backend.models import CompoundSettings


def test_projection_zeroes_produces_zero_rows():
    """
    Sanity check: with zero starting balance, zero contributions, and no growth, all outputs stay at zero.
    """
    settings = CompoundSettings(
        principal=0.0,
        contribution=0.0,
        annualReturn=0.0,
        compoundingFrequency=1,
        years=2,
    )

    result = build_projection(settings)

    assert result.table, "projection should return at least one row"
    #just check all are zeros, don't need to go line by line
    for row in result.table:
        assert isclose(row.endingBalance, 0.0, abs_tol=0.0)
        assert isclose(row.contributions, 0.0, abs_tol=0.0)
        assert isclose(row.growth, 0.0, abs_tol=0.0)
        assert isclose(row.annualInterest, 0.0, abs_tol=0.0)
        assert isclose(row.allowedWithdrawal, 0.0, abs_tol=0.0)

    assert result.totals.endingBalance == 0.0
    assert result.fireMetrics.fireNumber == 0.0
    assert result.fireMetrics.fireYear is None

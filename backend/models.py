from __future__ import annotations

from typing import List, Literal, Optional, get_args

from pydantic import BaseModel, ConfigDict, Field, field_validator

from backend.core.dates import normalize_date

ContributionFrequency = Literal[1, 4, 12, 26, 52]
CompoundingFrequency = Literal[1, 2, 4, 12, 52, 365]

MAX_YEARS = 100
MAX_COMPOUNDING_FREQUENCY = max(get_args(CompoundingFrequency))

# chart rows key balances by scenario id next to this axis key
CHART_AXIS_KEY = "year"


class CompoundSettings(BaseModel):
    """Inputs for one projection run.

    Numeric fields are unconstrained: the calculator clamps what it
    cannot use instead of rejecting it. Range checks live in SettingsPatch
    and in the API request schemas.
    """

    model_config = ConfigDict(extra="forbid")

    principal: float = 0.0
    contribution: float = 0.0
    contributionFrequency: float = 12
    annualReturn: float = 0.0
    compoundingFrequency: float = 12
    years: float = 1
    fundExpenseRatio: float = 0.0
    platformFee: float = 0.0
    inflationRate: float = 0.0
    annualExpenses: float = 0.0

    # carried for display; only purchaseDate feeds first-year proration
    targetBalance: float = 0.0
    shareCount: float = 0.0
    purchasePrice: float = 0.0
    purchaseDate: str = ""


class Scenario(BaseModel):
    model_config = ConfigDict(extra="forbid")

    id: str
    name: str
    color: str
    settings: CompoundSettings

    @field_validator("id")
    @classmethod
    def id_is_not_the_chart_axis(cls, value: str) -> str:
        if value == CHART_AXIS_KEY:
            raise ValueError(f"{CHART_AXIS_KEY!r} is reserved and cannot be a scenario id")
        return value


class ProjectionContext(BaseModel):
    remainingContributionMonths: float = 12


class ProjectionPoint(BaseModel):
    year: float
    balance: float


class YearlyBreakdown(BaseModel):
    year: float
    endingBalance: float
    contributions: float
    growth: float
    annualInterest: float
    allowedWithdrawal: float


class ProjectionTotals(BaseModel):
    contributions: float
    growth: float
    endingBalance: float


class FireMetrics(BaseModel):
    fireNumber: float
    fireYear: Optional[float] = None
    # always equal to fireYear; kept for clients that read this name
    yearsToFire: Optional[float] = None


class ProjectionResult(BaseModel):
    chartPoints: List[ProjectionPoint]
    table: List[YearlyBreakdown]
    totals: ProjectionTotals
    fireMetrics: FireMetrics


class WithdrawalDate(BaseModel):
    iso: str
    label: str


class SettingsPatch(BaseModel):
    """Partial update of CompoundSettings, validated field by field."""

    model_config = ConfigDict(extra="forbid")

    principal: Optional[float] = Field(default=None, ge=0)
    contribution: Optional[float] = Field(default=None, ge=0)
    contributionFrequency: Optional[ContributionFrequency] = None
    annualReturn: Optional[float] = None
    compoundingFrequency: Optional[CompoundingFrequency] = None
    years: Optional[float] = Field(default=None, gt=0, le=MAX_YEARS)
    fundExpenseRatio: Optional[float] = Field(default=None, ge=0, le=100)
    platformFee: Optional[float] = Field(default=None, ge=0, le=100)
    inflationRate: Optional[float] = Field(default=None, ge=0, le=100)
    annualExpenses: Optional[float] = Field(default=None, ge=0)
    targetBalance: Optional[float] = Field(default=None, ge=0)
    shareCount: Optional[float] = Field(default=None, ge=0)
    purchasePrice: Optional[float] = Field(default=None, ge=0)
    purchaseDate: Optional[str] = None

    @field_validator("purchaseDate")
    @classmethod
    def normalize_purchase_date(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        if value.strip() == "":
            return ""
        normalized = normalize_date(value)
        if not normalized:
            raise ValueError(f"unrecognised date: {value!r}")
        return normalized

    def apply(self, settings: CompoundSettings) -> CompoundSettings:
        """Return a copy of ``settings`` with every provided field replaced."""
        changes = self.model_dump(exclude_unset=True)
        return CompoundSettings.model_validate({**settings.model_dump(), **changes})

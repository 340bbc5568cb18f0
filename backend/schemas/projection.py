"""Request and response envelopes for the projection API."""

from datetime import date
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from backend.core.export import TableLabels
from backend.core.formatting import FormatConfig
from backend.core.scenarios import ScenarioAnalysis
from backend.core.withdrawals import WithdrawalSchedule
from backend.models import (
    MAX_COMPOUNDING_FREQUENCY,
    MAX_YEARS,
    CompoundSettings,
    ProjectionResult,
    Scenario,
    SettingsPatch,
    WithdrawalDate,
    YearlyBreakdown,
)


def check_horizon(settings: CompoundSettings) -> CompoundSettings:
    """Reject horizons that would step through an unbounded number of periods."""
    if settings.years > MAX_YEARS:
        raise ValueError(f"years must be at most {MAX_YEARS}")
    if settings.compoundingFrequency > MAX_COMPOUNDING_FREQUENCY:
        raise ValueError(f"compoundingFrequency must be at most {MAX_COMPOUNDING_FREQUENCY}")
    return settings


class ProjectionRequest(BaseModel):
    """Single-scenario projection inputs."""

    model_config = ConfigDict(extra="forbid")

    settings: CompoundSettings
    remainingContributionMonths: Optional[float] = Field(
        None,
        description="Overrides the months derived from settings.purchaseDate.",
    )
    currentYear: Optional[int] = Field(None, ge=1, le=9999)

    bounded_settings = field_validator("settings")(check_horizon)


class ProjectionResponse(BaseModel):
    remainingContributionMonths: float
    projection: ProjectionResult
    withdrawals: List[WithdrawalDate]
    schedule: WithdrawalSchedule


class CompareRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    scenarios: List[Scenario] = Field(..., min_length=1)
    referenceDate: Optional[date] = None

    @field_validator("scenarios")
    @classmethod
    def bounded_scenarios(cls, scenarios: List[Scenario]) -> List[Scenario]:
        for scenario in scenarios:
            check_horizon(scenario.settings)
        return scenarios


class CompareResponse(BaseModel):
    analyses: List[ScenarioAnalysis]
    chart: List[Dict[str, float]]


class DateRequest(BaseModel):
    value: str = ""
    referenceDate: Optional[date] = None


class DateResponse(BaseModel):
    date: str
    label: str
    inFuture: bool
    remainingContributionMonths: int


class ScenarioListPayload(BaseModel):
    model_config = ConfigDict(extra="forbid")

    scenarios: List[Scenario] = Field(..., min_length=1)


class NewScenarioRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    name: Optional[str] = Field(None, min_length=1)


class ScenarioUpdateRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    name: Optional[str] = Field(None, min_length=1)
    settings: Optional[SettingsPatch] = None


class ExportRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    table: List[YearlyBreakdown]
    format: FormatConfig = FormatConfig()
    labels: TableLabels = TableLabels()
    currentYear: Optional[int] = Field(None, ge=1, le=9999)
    fileName: Optional[str] = None

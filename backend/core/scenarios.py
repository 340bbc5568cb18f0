from __future__ import annotations

import logging
import uuid
from datetime import date, datetime
from typing import Dict, Iterable, List, Optional, Set, Union

from pydantic import BaseModel

from backend.core.dates import months_remaining_in_year
from backend.core.projection import build_projection
from backend.models import (
    CHART_AXIS_KEY,
    CompoundSettings,
    ProjectionContext,
    ProjectionResult,
    Scenario,
    SettingsPatch,
)

logger = logging.getLogger(__name__)

COLOR_PALETTE = [
    "#10b981",
    "#6366f1",
    "#f97316",
    "#f43f5e",
    "#14b8a6",
    "#8b5cf6",
    "#facc15",
    "#0ea5e9",
]

DEFAULT_SETTINGS = CompoundSettings(
    principal=10000,
    contribution=500,
    contributionFrequency=12,
    annualReturn=7,
    compoundingFrequency=12,
    years=20,
    fundExpenseRatio=0.07,
    platformFee=0.2,
    inflationRate=2,
    annualExpenses=24000,
)

DEFAULT_SCENARIOS = [
    Scenario(id="baseline", name="Baseline", color=COLOR_PALETTE[0], settings=DEFAULT_SETTINGS),
    Scenario(
        id="aggressive",
        name="Aggressive saver",
        color=COLOR_PALETTE[1],
        settings=DEFAULT_SETTINGS.model_copy(update={"contribution": 1000.0, "annualReturn": 8.0}),
    ),
]


class ScenarioNotFoundError(LookupError):
    def __init__(self, scenario_id: str):
        super().__init__(f"unknown scenario {scenario_id!r}")
        self.scenario_id = scenario_id


class LastScenarioError(ValueError):
    def __init__(self):
        super().__init__("at least one scenario must remain")


class ScenarioAnalysis(BaseModel):
    scenario: Scenario
    remainingContributionMonths: int
    projection: ProjectionResult


ChartRow = Dict[str, float]


# -----------------------------
# Projection across scenarios
# -----------------------------


def analyze_scenarios(
    scenarios: Iterable[Scenario],
    reference_date: Union[date, datetime, None] = None,
) -> List[ScenarioAnalysis]:
    """Project every scenario, prorating its first year from its purchase date."""
    analyses: List[ScenarioAnalysis] = []
    for scenario in scenarios:
        months = months_remaining_in_year(scenario.settings.purchaseDate, reference_date)
        projection = build_projection(
            scenario.settings,
            ProjectionContext(remainingContributionMonths=months),
        )
        analyses.append(
            ScenarioAnalysis(
                scenario=scenario,
                remainingContributionMonths=months,
                projection=projection,
            )
        )
    return analyses


def merge_for_chart(analyses: Iterable[ScenarioAnalysis]) -> List[ChartRow]:
    """
    Line up every scenario's chart points on one year axis.

    A scenario without a point at some year simply has no key in that row;
    charts should bridge the gap rather than read it as zero.
    """
    by_year: Dict[float, Dict[str, float]] = {}
    for analysis in analyses:
        for point in analysis.projection.chartPoints:
            by_year.setdefault(point.year, {})[analysis.scenario.id] = point.balance

    return [{CHART_AXIS_KEY: year, **balances} for year, balances in sorted(by_year.items())]


# -----------------------------
# Scenario list editing
# -----------------------------


def clone_scenario(scenario: Scenario) -> Scenario:
    return scenario.model_copy(deep=True)


def default_scenarios() -> List[Scenario]:
    return [clone_scenario(scenario) for scenario in DEFAULT_SCENARIOS]


def ensure_scenarios(scenarios: List[Scenario]) -> List[Scenario]:
    if not scenarios:
        return default_scenarios()
    return [clone_scenario(scenario) for scenario in scenarios]


def create_scenario_id() -> str:
    return str(uuid.uuid4())


def next_color(used_colors: Set[str]) -> str:
    for color in COLOR_PALETTE:
        if color not in used_colors:
            used_colors.add(color)
            return color

    # golden-angle hue spacing once the palette runs out
    hue = round(((len(used_colors) + 1) * 137.508) % 360)
    generated = f"hsl({hue} 70% 50%)"
    used_colors.add(generated)
    return generated


def _index_of(scenarios: List[Scenario], scenario_id: str) -> int:
    for index, scenario in enumerate(scenarios):
        if scenario.id == scenario_id:
            return index
    raise ScenarioNotFoundError(scenario_id)


def add_scenario(scenarios: List[Scenario], name: Optional[str] = None) -> List[Scenario]:
    used = {scenario.color for scenario in scenarios}
    created = Scenario(
        id=create_scenario_id(),
        name=name or f"Scenario {len(scenarios) + 1}",
        color=next_color(used),
        settings=DEFAULT_SETTINGS.model_copy(),
    )
    logger.info("Added scenario %s", created.id)
    return [*scenarios, created]


def duplicate_scenario(scenarios: List[Scenario], scenario_id: str) -> List[Scenario]:
    source = scenarios[_index_of(scenarios, scenario_id)]
    used = {scenario.color for scenario in scenarios}
    copy = Scenario(
        id=create_scenario_id(),
        name=f"{source.name} (copy)",
        color=next_color(used),
        settings=source.settings.model_copy(),
    )
    logger.info("Duplicated scenario %s as %s", scenario_id, copy.id)
    return [*scenarios, copy]


def rename_scenario(scenarios: List[Scenario], scenario_id: str, name: str) -> List[Scenario]:
    index = _index_of(scenarios, scenario_id)
    updated = list(scenarios)
    updated[index] = scenarios[index].model_copy(update={"name": name})
    return updated


def update_scenario_settings(
    scenarios: List[Scenario],
    scenario_id: str,
    patch: SettingsPatch,
) -> List[Scenario]:
    index = _index_of(scenarios, scenario_id)
    updated = list(scenarios)
    updated[index] = scenarios[index].model_copy(
        update={"settings": patch.apply(scenarios[index].settings)}
    )
    return updated


def delete_scenario(scenarios: List[Scenario], scenario_id: str) -> List[Scenario]:
    index = _index_of(scenarios, scenario_id)
    if len(scenarios) <= 1:
        raise LastScenarioError()
    logger.info("Deleted scenario %s", scenario_id)
    return scenarios[:index] + scenarios[index + 1 :]

from __future__ import annotations

from datetime import date

import pytest
from pydantic import ValidationError

from backend.core.scenarios import (
    COLOR_PALETTE,
    LastScenarioError,
    ScenarioNotFoundError,
    add_scenario,
    analyze_scenarios,
    default_scenarios,
    delete_scenario,
    duplicate_scenario,
    ensure_scenarios,
    merge_for_chart,
    next_color,
    rename_scenario,
    update_scenario_settings,
)
from backend.models import CompoundSettings, Scenario, SettingsPatch


def make_scenario(scenario_id: str, **settings) -> Scenario:
    return Scenario(
        id=scenario_id,
        name=scenario_id.title(),
        color="#000000",
        settings=CompoundSettings(**settings),
    )


def test_merge_keeps_only_scenarios_with_a_point_that_year():
    annual = make_scenario("annual", principal=1000, annualReturn=5, compoundingFrequency=1, years=1.5)
    semi = make_scenario("semi", principal=1000, annualReturn=5, compoundingFrequency=2, years=1.5)

    chart = merge_for_chart(analyze_scenarios([annual, semi], date(2024, 1, 1)))

    assert [row["year"] for row in chart] == [0, 1.0, 1.5, 2.0]
    assert set(chart[0]) == {"year", "annual", "semi"}
    assert set(chart[1]) == {"year", "annual", "semi"}
    assert set(chart[2]) == {"year", "semi"}
    assert set(chart[3]) == {"year", "annual"}


def test_merge_preserves_balances():
    scenario = make_scenario("only", principal=2500, annualReturn=4, years=3)

    analyses = analyze_scenarios([scenario])
    chart = merge_for_chart(analyses)

    expected = [point.balance for point in analyses[0].projection.chartPoints]
    assert [row["only"] for row in chart] == expected


def test_analyze_uses_purchase_date_for_first_year():
    reference = date(2024, 5, 15)
    past = make_scenario("past", contribution=100, purchaseDate="2024-01-20")
    future = make_scenario("future", contribution=100, purchaseDate="2024-11-05")

    past_analysis, future_analysis = analyze_scenarios([past, future], reference)

    assert past_analysis.remainingContributionMonths == 7
    assert future_analysis.remainingContributionMonths == 0
    # no first-year contributions when the account is not funded yet
    assert future_analysis.projection.table[0].contributions == 0


def test_default_scenarios_are_independent_copies():
    first = default_scenarios()
    second = default_scenarios()

    first[0].settings.principal = 1

    assert second[0].settings.principal != 1
    assert ensure_scenarios([])[0].id == second[0].id


def test_add_scenario_picks_an_unused_color():
    scenarios = default_scenarios()

    updated = add_scenario(scenarios)

    assert len(updated) == len(scenarios) + 1
    assert updated[-1].color == COLOR_PALETTE[2]
    assert updated[-1].name == "Scenario 3"
    assert len(scenarios) == 2


def test_next_color_generates_hues_after_palette():
    used = set(COLOR_PALETTE)

    assert next_color(used) == "hsl(158 70% 50%)"
    assert "hsl(158 70% 50%)" in used


def test_duplicate_copies_settings():
    scenarios = default_scenarios()
    source = scenarios[1]

    updated = duplicate_scenario(scenarios, source.id)

    copy = updated[-1]
    assert copy.name == f"{source.name} (copy)"
    assert copy.id != source.id
    assert copy.settings == source.settings


def test_rename_and_update_settings():
    scenarios = default_scenarios()
    target = scenarios[0].id

    renamed = rename_scenario(scenarios, target, "Renamed")
    patched = update_scenario_settings(renamed, target, SettingsPatch(principal=5, compoundingFrequency=365))

    assert patched[0].name == "Renamed"
    assert patched[0].settings.principal == 5
    assert patched[0].settings.compoundingFrequency == 365
    assert patched[0].settings.contribution == scenarios[0].settings.contribution
    assert scenarios[0].settings.principal != 5


def test_delete_refuses_last_scenario():
    scenarios = default_scenarios()

    remaining = delete_scenario(scenarios, scenarios[0].id)

    assert [s.id for s in remaining] == [scenarios[1].id]
    with pytest.raises(LastScenarioError):
        delete_scenario(remaining, remaining[0].id)


def test_unknown_scenario_id():
    with pytest.raises(ScenarioNotFoundError):
        rename_scenario(default_scenarios(), "missing", "x")


def test_settings_patch_normalizes_dates():
    assert SettingsPatch(purchaseDate="05/03/2024").purchaseDate == "2024-03-05"
    assert SettingsPatch(purchaseDate=" ").purchaseDate == ""


@pytest.mark.parametrize(
    "payload",
    [
        {"contributionFrequency": 3},
        {"compoundingFrequency": 6},
        {"principal": -1},
        {"years": 0},
        {"purchaseDate": "31/02/2024"},
        {"unknownField": 1},
        {"principal": "lots"},
    ],
)
def test_settings_patch_rejects_invalid_fields(payload):
    with pytest.raises(ValidationError):
        SettingsPatch.model_validate(payload)


def test_chart_axis_key_is_not_a_scenario_id():
    with pytest.raises(ValidationError):
        make_scenario("year")


def test_merge_rows_keep_the_year_axis():
    analyses = analyze_scenarios([make_scenario("years", years=2), make_scenario("b", years=2)])

    chart = merge_for_chart(analyses)

    assert [row["year"] for row in chart] == [0, 1.0, 2.0]

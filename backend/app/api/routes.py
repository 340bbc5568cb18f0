"""HTTP routes for the Flask API."""

import logging
from datetime import date
from http import HTTPStatus
from typing import Any, Dict, List

from flask import Blueprint, Response, current_app, jsonify, request
from pydantic import ValidationError

from backend import __version__
from backend.core.dates import (
    format_date_for_input,
    is_in_future,
    months_remaining_in_year,
    normalize_date,
)
from backend.core.export import (
    CSV_MIMETYPE,
    XLSX_MIMETYPE,
    build_table_matrix,
    export_csv,
    export_xlsx,
    resolve_file_name,
)
from backend.core.projection import build_projection
from backend.core.scenarios import (
    LastScenarioError,
    ScenarioNotFoundError,
    add_scenario,
    analyze_scenarios,
    default_scenarios,
    delete_scenario,
    duplicate_scenario,
    merge_for_chart,
    rename_scenario,
    update_scenario_settings,
)
from backend.core.settings_store import SettingsStore
from backend.core.withdrawals import withdrawal_date, withdrawal_schedule
from backend.models import ProjectionContext, Scenario
from backend.schemas.ping import PingResponse
from backend.schemas.projection import (
    CompareRequest,
    CompareResponse,
    DateRequest,
    DateResponse,
    ExportRequest,
    NewScenarioRequest,
    ProjectionRequest,
    ProjectionResponse,
    ScenarioListPayload,
    ScenarioUpdateRequest,
)

logger = logging.getLogger(__name__)

api_bp = Blueprint("api", __name__)


def _payload() -> Dict[str, Any]:
    return request.get_json(force=True, silent=False) or {}


def _store() -> SettingsStore:
    return current_app.extensions["settings_store"]


@api_bp.errorhandler(ValidationError)
def _handle_validation_error(exc: ValidationError):
    """Convert Pydantic validation errors into JSON responses."""
    return jsonify({"detail": exc.errors(include_url=False, include_context=False)}), HTTPStatus.BAD_REQUEST


@api_bp.errorhandler(ScenarioNotFoundError)
def _handle_missing_scenario(exc: ScenarioNotFoundError):
    return jsonify({"detail": str(exc)}), HTTPStatus.NOT_FOUND


@api_bp.errorhandler(LastScenarioError)
def _handle_last_scenario(exc: LastScenarioError):
    return jsonify({"detail": str(exc)}), HTTPStatus.CONFLICT


@api_bp.get("/ping")
def ping() -> Any:
    """Health-check endpoint."""
    response = PingResponse(message="pong", version=__version__)
    return jsonify(response.model_dump())


# -----------------------------
# Projections
# -----------------------------


@api_bp.post("/projection")
def projection() -> Any:
    """Project one settings record and attach a payout date to every table row."""
    payload = ProjectionRequest.model_validate(_payload())
    settings = payload.settings

    months = payload.remainingContributionMonths
    if months is None:
        months = months_remaining_in_year(settings.purchaseDate)

    result = build_projection(settings, ProjectionContext(remainingContributionMonths=months))
    response = ProjectionResponse(
        remainingContributionMonths=months,
        projection=result,
        withdrawals=[withdrawal_date(row.year, payload.currentYear) for row in result.table],
        schedule=withdrawal_schedule(result.table, settings.years, payload.currentYear),
    )
    return jsonify(response.model_dump())


@api_bp.post("/projection/compare")
def compare() -> Any:
    """Project several scenarios and merge them onto one chart timeline."""
    payload = CompareRequest.model_validate(_payload())
    analyses = analyze_scenarios(payload.scenarios, payload.referenceDate)
    response = CompareResponse(analyses=analyses, chart=merge_for_chart(analyses))
    return jsonify(response.model_dump())


@api_bp.post("/dates/normalize")
def normalize() -> Any:
    payload = DateRequest.model_validate(_payload())
    reference = payload.referenceDate or date.today()
    normalized = normalize_date(payload.value)
    response = DateResponse(
        date=normalized,
        label=format_date_for_input(normalized),
        inFuture=is_in_future(normalized, reference),
        remainingContributionMonths=months_remaining_in_year(normalized, reference),
    )
    return jsonify(response.model_dump())


# -----------------------------
# Persisted scenarios
# -----------------------------


@api_bp.get("/settings")
def read_settings() -> Any:
    return jsonify(_store().read().model_dump())


@api_bp.put("/settings")
def replace_settings() -> Any:
    payload = ScenarioListPayload.model_validate(_payload())
    saved = _store().save_scenarios(payload.scenarios)
    return jsonify(saved.model_dump())


@api_bp.post("/settings/reset")
def reset_settings() -> Any:
    saved = _store().save_scenarios(default_scenarios())
    logger.info("Scenarios reset to defaults")
    return jsonify(saved.model_dump())


@api_bp.post("/scenarios")
def create_scenario() -> Any:
    payload = NewScenarioRequest.model_validate(_payload())
    saved = _store().update(lambda scenarios: add_scenario(scenarios, payload.name))
    return jsonify(saved.model_dump()), HTTPStatus.CREATED


@api_bp.post("/scenarios/<scenario_id>/duplicate")
def copy_scenario(scenario_id: str) -> Any:
    saved = _store().update(lambda scenarios: duplicate_scenario(scenarios, scenario_id))
    return jsonify(saved.model_dump()), HTTPStatus.CREATED


@api_bp.patch("/scenarios/<scenario_id>")
def update_scenario(scenario_id: str) -> Any:
    payload = ScenarioUpdateRequest.model_validate(_payload())

    def change(scenarios: List[Scenario]) -> List[Scenario]:
        if payload.name is not None:
            scenarios = rename_scenario(scenarios, scenario_id, payload.name)
        if payload.settings is not None:
            scenarios = update_scenario_settings(scenarios, scenario_id, payload.settings)
        return scenarios

    saved = _store().update(change)
    return jsonify(saved.model_dump())


@api_bp.delete("/scenarios/<scenario_id>")
def remove_scenario(scenario_id: str) -> Any:
    saved = _store().update(lambda scenarios: delete_scenario(scenarios, scenario_id))
    return jsonify(saved.model_dump())


# -----------------------------
# Exports
# -----------------------------


def _export(extension: str, mimetype: str) -> Response:
    payload = ExportRequest.model_validate(_payload())
    if not payload.table:
        return Response(status=HTTPStatus.NO_CONTENT)

    matrix = build_table_matrix(
        payload.table,
        payload.format,
        labels=payload.labels,
        current_year=payload.currentYear,
    )
    body = export_csv(matrix) if extension == "csv" else export_xlsx(matrix)
    filename = resolve_file_name(payload.fileName, extension)
    return Response(
        body,
        mimetype=mimetype,
        headers={"Content-Disposition": f"attachment; filename={filename}"},
    )


@api_bp.post("/export/csv")
def export_table_csv() -> Response:
    return _export("csv", CSV_MIMETYPE)


@api_bp.post("/export/xlsx")
def export_table_xlsx() -> Response:
    return _export("xlsx", XLSX_MIMETYPE)

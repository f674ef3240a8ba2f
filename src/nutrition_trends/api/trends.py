"""Trend endpoints with simple token auth."""

from __future__ import annotations

from typing import TYPE_CHECKING
from uuid import UUID  # noqa: TC003
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from fastapi import APIRouter, Depends, Header, HTTPException, Query, Request, status

from nutrition_trends.api.schemas import (
    ChartResponse,
    EntryModel,
    WeightLogRequest,
    WeightUpdateRequest,
)
from nutrition_trends.domain.ranges import RangeToken, UnknownRangeTokenError
from nutrition_trends.domain.series import InvalidValueError, SortOrder
from nutrition_trends.domain.stats import NutritionMetric, NutritionTargets
from nutrition_trends.domain.trends import GoalDirection
from nutrition_trends.services.weights import WeightUnit

if TYPE_CHECKING:
    from nutrition_trends.containers import AppContainer

router = APIRouter(prefix="/users/{user_id}", tags=["trends"])

UNPROCESSABLE = 422


def _get_api_token(request: Request) -> str:
    container: AppContainer = request.app.state.container
    return container.settings.api_token


async def require_token(
    x_api_token: str | None = Header(default=None),
    api_token: str = Depends(_get_api_token),
) -> None:
    """Ensure requests include a valid API token."""
    if not x_api_token or x_api_token != api_token:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED)


def _unprocessable(exc: Exception) -> HTTPException:
    return HTTPException(status_code=UNPROCESSABLE, detail=str(exc))


def _resolve_timezone(timezone: str | None, default: str) -> str:
    name = timezone or default
    try:
        ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError) as exc:
        raise _unprocessable(exc) from exc
    return name


def _parse_options(
    range_: str, goal: str | None = None, unit: str | None = None
) -> tuple[RangeToken, GoalDirection, WeightUnit]:
    try:
        return (
            RangeToken.parse(range_),
            GoalDirection.from_goal(goal),
            WeightUnit(unit or WeightUnit.KG.value),
        )
    except (UnknownRangeTokenError, ValueError) as exc:
        raise _unprocessable(exc) from exc


@router.get("/weights", dependencies=[Depends(require_token)])
async def list_weights(
    user_id: UUID, request: Request, order: str = "desc", unit: str = "kg"
) -> dict[str, object]:
    """Return weight history, newest first by default."""
    container: AppContainer = request.app.state.container
    try:
        sort_order = SortOrder(order)
        weight_unit = WeightUnit(unit)
    except ValueError as exc:
        raise _unprocessable(exc) from exc
    entries = container.weight_service.history(user_id, sort_order)
    return {
        "entries": [
            EntryModel.from_entry(entry, weight_unit.factor) for entry in entries
        ]
    }


@router.post(
    "/weights",
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_token)],
)
async def log_weight(
    user_id: UUID, payload: WeightLogRequest, request: Request, unit: str = "kg"
) -> EntryModel:
    """Record a weight reading for a day."""
    container: AppContainer = request.app.state.container
    try:
        entry = container.weight_service.log_weight(
            user_id, payload.day, payload.value, WeightUnit(unit)
        )
    except (InvalidValueError, ValueError) as exc:
        raise _unprocessable(exc) from exc
    return EntryModel.from_entry(entry)


@router.patch("/weights/{entry_id}", dependencies=[Depends(require_token)])
async def update_weight(
    user_id: UUID,
    entry_id: str,
    payload: WeightUpdateRequest,
    request: Request,
    unit: str = "kg",
) -> EntryModel:
    """Replace the value of an existing weight entry."""
    container: AppContainer = request.app.state.container
    try:
        entry = container.weight_service.update_weight(
            user_id, entry_id, payload.value, WeightUnit(unit)
        )
    except (InvalidValueError, ValueError) as exc:
        raise _unprocessable(exc) from exc
    if entry is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND)
    return EntryModel.from_entry(entry)


@router.delete(
    "/weights/{entry_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    dependencies=[Depends(require_token)],
)
async def delete_weight(user_id: UUID, entry_id: str, request: Request) -> None:
    """Delete a weight entry by id."""
    container: AppContainer = request.app.state.container
    if not container.weight_service.delete_weight(user_id, entry_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND)


@router.get("/weights/chart", dependencies=[Depends(require_token)])
async def weight_chart(  # noqa: PLR0913
    user_id: UUID,
    request: Request,
    range_: str = Query(default="1Y", alias="range"),
    goal: str | None = None,
    unit: str = "kg",
    timezone: str | None = None,
    width: float | None = None,
    height: float | None = None,
) -> ChartResponse:
    """Return the weight chart and trend insight for a window."""
    container: AppContainer = request.app.state.container
    range_token, goal_direction, weight_unit = _parse_options(range_, goal, unit)
    timezone_name = _resolve_timezone(timezone, container.settings.default_timezone)
    service = container.weight_service
    snapshot = service.chart(
        user_id,
        range_token,
        geometry=container.settings.chart_geometry(width, height),
        timezone_name=timezone_name,
    )
    insight = service.insight(
        user_id,
        range_token,
        goal_direction,
        unit=weight_unit,
        timezone_name=timezone_name,
    )
    return ChartResponse.from_snapshot(snapshot, insight)


@router.get("/nutrition/chart", dependencies=[Depends(require_token)])
async def nutrition_chart(  # noqa: PLR0913
    user_id: UUID,
    request: Request,
    metric: str = "calories",
    range_: str = Query(default="1W", alias="range"),
    goal: str | None = None,
    timezone: str | None = None,
    width: float | None = None,
    height: float | None = None,
) -> ChartResponse:
    """Return a nutrition metric chart and trend insight for a window."""
    container: AppContainer = request.app.state.container
    range_token, goal_direction, _ = _parse_options(range_, goal)
    try:
        nutrition_metric = NutritionMetric(metric)
    except ValueError as exc:
        raise _unprocessable(exc) from exc
    timezone_name = _resolve_timezone(timezone, container.settings.default_timezone)
    snapshot, insight = container.nutrition_service.view(
        user_id,
        nutrition_metric,
        range_token,
        timezone_name,
        goal_direction,
        geometry=container.settings.chart_geometry(width, height),
    )
    return ChartResponse.from_snapshot(snapshot, insight)


@router.get("/nutrition/summary", dependencies=[Depends(require_token)])
async def nutrition_summary(  # noqa: PLR0913
    user_id: UUID,
    request: Request,
    range_: str = Query(default="1W", alias="range"),
    timezone: str | None = None,
    target_calories: float | None = None,
    target_protein_g: float | None = None,
    target_fat_g: float | None = None,
    target_carbs_g: float | None = None,
) -> dict[str, object]:
    """Return average daily macros for a window, compared to any targets."""
    container: AppContainer = request.app.state.container
    range_token, _, _ = _parse_options(range_)
    timezone_name = _resolve_timezone(timezone, container.settings.default_timezone)
    targets = NutritionTargets(
        calories=target_calories,
        protein_g=target_protein_g,
        fat_g=target_fat_g,
        carbs_g=target_carbs_g,
    )
    summary = container.nutrition_service.summary(
        user_id, range_token, timezone_name, targets=targets
    )
    return {
        "range": range_token.token,
        "days": len(summary.daily),
        "avg_calories": round(summary.avg_calories, 1),
        "avg_protein_g": round(summary.avg_protein_g, 1),
        "avg_fat_g": round(summary.avg_fat_g, 1),
        "avg_carbs_g": round(summary.avg_carbs_g, 1),
        "targets": {
            metric.value: summary.targets.target_for(metric)
            for metric in NutritionMetric
        },
        "differences": {
            metric.value: round(gap, 1)
            for metric, gap in summary.differences().items()
        },
    }

"""Day-bucketed nutrition trends built from meal logs."""

from dataclasses import dataclass, field
from datetime import UTC, date, datetime, time, timedelta
from typing import Protocol
from uuid import UUID
from zoneinfo import ZoneInfo

from nutrition_trends.domain.chart import ChartGeometry, ChartSnapshot
from nutrition_trends.domain.ranges import RangeToken
from nutrition_trends.domain.series import SeriesEntry, to_calendar_day
from nutrition_trends.domain.stats import (
    DailyTotals,
    MealLogRow,
    NutritionMetric,
    NutritionTargets,
)
from nutrition_trends.domain.trends import GoalDirection, TrendClassification
from nutrition_trends.services.cache import ExpiringCache
from nutrition_trends.services.engine import TrendEngine
from nutrition_trends.services.ranges import local_now
from nutrition_trends.services.trends import TrendClassifier

# Widest selectable window; also the extent of the empty-range fallback.
HISTORY_WINDOW = list(RangeToken)[-1]


class StatsRepository(Protocol):
    """Persistence interface for meal log statistics."""

    def list_meal_logs(
        self, user_id: UUID, start: datetime, end: datetime
    ) -> list[MealLogRow]:
        """Return meal logs within a time range."""


@dataclass
class PeriodSummary:
    """Aggregated totals for a window, with optional daily targets."""

    daily: list[DailyTotals]
    avg_calories: float
    avg_protein_g: float
    avg_fat_g: float
    avg_carbs_g: float
    targets: NutritionTargets = field(default_factory=NutritionTargets)

    def average(self, metric: NutritionMetric) -> float:
        return getattr(self, f"avg_{metric.value}")

    def differences(self) -> dict[NutritionMetric, float]:
        """Return average minus target for every metric with a target."""
        gaps = {}
        for metric in NutritionMetric:
            target = self.targets.target_for(metric)
            if target is not None:
                gaps[metric] = self.average(metric) - target
        return gaps


@dataclass
class NutritionTrendService:
    """Service for charting and classifying daily nutrition totals.

    Engines are kept per user, metric and time zone so same-day
    classifications are served from their cache while the underlying
    totals are unchanged.
    """

    repository: StatsRepository
    volatility_threshold: float = 0.25
    stability_threshold: float = 50.0
    empty_range_fallback: bool = True
    engine_ttl_seconds: int = 900
    max_cached_engines: int = 1024
    _engines: ExpiringCache = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._engines = ExpiringCache(
            ttl_seconds=self.engine_ttl_seconds, max_entries=self.max_cached_engines
        )

    def daily_totals(
        self, user_id: UUID, timezone_name: str, now: datetime | None = None
    ) -> list[DailyTotals]:
        """Return per-day totals for days with meals, oldest first."""
        tz = ZoneInfo(timezone_name)
        today = to_calendar_day(local_now(timezone_name, now))
        start = datetime.combine(today - HISTORY_WINDOW.delta, time.min, tzinfo=tz)
        end = datetime.combine(today + timedelta(days=1), time.min, tzinfo=tz)
        logs = self.repository.list_meal_logs(
            user_id, start.astimezone(UTC), end.astimezone(UTC)
        )
        return aggregate_days(logs, tz)

    def engine(
        self,
        user_id: UUID,
        metric: NutritionMetric,
        timezone_name: str,
        now: datetime | None = None,
    ) -> TrendEngine:
        """Return the engine for one metric's daily series, refreshed from logs."""
        entries = [
            to_series_entry(totals, metric)
            for totals in self.daily_totals(user_id, timezone_name, now)
        ]
        key = (user_id, metric, timezone_name)
        engine = self._engines.get(key)
        if isinstance(engine, TrendEngine):
            engine.replace_entries(entries)
            return engine
        engine = TrendEngine.from_entries(
            entries,
            classifier=TrendClassifier(
                volatility_threshold=self.volatility_threshold,
                stability_threshold=self._stability_threshold(metric),
                subject=metric.subject,
                unit_label=metric.unit_label,
            ),
            empty_range_fallback=self.empty_range_fallback,
        )
        self._engines.set(key, engine)
        return engine

    def view(  # noqa: PLR0913
        self,
        user_id: UUID,
        metric: NutritionMetric,
        range_token: RangeToken,
        timezone_name: str,
        goal_direction: GoalDirection = GoalDirection.NEUTRAL,
        now: datetime | None = None,
        geometry: ChartGeometry | None = None,
    ) -> tuple[ChartSnapshot, TrendClassification | None]:
        """Return the chart and the classification from a single log query."""
        current = local_now(timezone_name, now)
        engine = self.engine(user_id, metric, timezone_name, current)
        snapshot = engine.chart(range_token, current, geometry)
        return snapshot, engine.classify(range_token, current, goal_direction)

    def chart(  # noqa: PLR0913
        self,
        user_id: UUID,
        metric: NutritionMetric,
        range_token: RangeToken,
        timezone_name: str,
        now: datetime | None = None,
        geometry: ChartGeometry | None = None,
    ) -> ChartSnapshot:
        """Return the chart encoding for one metric and window."""
        current = local_now(timezone_name, now)
        engine = self.engine(user_id, metric, timezone_name, current)
        return engine.chart(range_token, current, geometry)

    def insight(  # noqa: PLR0913
        self,
        user_id: UUID,
        metric: NutritionMetric,
        range_token: RangeToken,
        timezone_name: str,
        goal_direction: GoalDirection = GoalDirection.NEUTRAL,
        now: datetime | None = None,
    ) -> TrendClassification | None:
        """Return the trend classification, or None for too little data."""
        current = local_now(timezone_name, now)
        engine = self.engine(user_id, metric, timezone_name, current)
        return engine.classify(range_token, current, goal_direction)

    def summary(  # noqa: PLR0913
        self,
        user_id: UUID,
        range_token: RangeToken,
        timezone_name: str,
        now: datetime | None = None,
        targets: NutritionTargets | None = None,
    ) -> PeriodSummary:
        """Return window averages over days that have meals."""
        current = local_now(timezone_name, now)
        daily = self.daily_totals(user_id, timezone_name, current)
        cutoff = to_calendar_day(current) - range_token.delta
        window = [totals for totals in daily if totals.day >= cutoff]
        if not window and self.empty_range_fallback:
            window = daily
        return summarize(window, targets)

    def clear(self) -> None:
        """Drop every cached engine."""
        self._engines.clear()

    def _stability_threshold(self, metric: NutritionMetric) -> float:
        # Gram metrics move on a much smaller scale than calories.
        if metric is NutritionMetric.CALORIES:
            return self.stability_threshold
        return self.stability_threshold / 10


def aggregate_days(logs: list[MealLogRow], tz: ZoneInfo) -> list[DailyTotals]:
    """Sum meal logs into local calendar days."""
    totals: dict[date, DailyTotals] = {}
    for log in logs:
        day = to_calendar_day(log.logged_at, tz)
        current = totals.get(day) or DailyTotals(
            day=day, calories=0, protein_g=0, fat_g=0, carbs_g=0
        )
        last_logged_at = current.last_logged_at
        if last_logged_at is None or log.logged_at > last_logged_at:
            last_logged_at = log.logged_at
        totals[day] = DailyTotals(
            day=day,
            calories=current.calories + log.total_calories,
            protein_g=current.protein_g + log.total_protein_g,
            fat_g=current.fat_g + log.total_fat_g,
            carbs_g=current.carbs_g + log.total_carbs_g,
            meal_count=current.meal_count + 1,
            last_logged_at=last_logged_at,
        )
    return [totals[day] for day in sorted(totals)]


def to_series_entry(totals: DailyTotals, metric: NutritionMetric) -> SeriesEntry:
    """Convert a day's totals to a series entry for ``metric``."""
    updated_at = totals.last_logged_at or datetime.combine(
        totals.day, time.min, tzinfo=UTC
    )
    return SeriesEntry(
        id=f"{metric.value}:{totals.day.isoformat()}",
        day=totals.day,
        value=metric.read(totals),
        updated_at=updated_at,
    )


def summarize(
    daily: list[DailyTotals], targets: NutritionTargets | None = None
) -> PeriodSummary:
    """Average totals across the given days."""
    total_days = max(len(daily), 1)
    return PeriodSummary(
        daily=daily,
        avg_calories=sum(entry.calories for entry in daily) / total_days,
        avg_protein_g=sum(entry.protein_g for entry in daily) / total_days,
        avg_fat_g=sum(entry.fat_g for entry in daily) / total_days,
        avg_carbs_g=sum(entry.carbs_g for entry in daily) / total_days,
        targets=targets or NutritionTargets(),
    )

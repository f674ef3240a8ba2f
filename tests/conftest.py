"""Shared test fixtures."""

from dataclasses import dataclass, field
from datetime import UTC, date, datetime, timedelta
from uuid import UUID

import pytest

from nutrition_trends.config import Settings
from nutrition_trends.containers import AppContainer
from nutrition_trends.domain.series import SeriesEntry
from nutrition_trends.domain.stats import MealLogRow
from nutrition_trends.services.nutrition_trends import (
    NutritionTrendService,
    StatsRepository,
)
from nutrition_trends.services.weights import WeightLogRepository, WeightLogService

NOW = datetime(2026, 3, 15, 18, 30, tzinfo=UTC)
TODAY = NOW.date()


def make_entry(
    offset_days: int,
    value: float,
    updated_at: datetime | None = None,
    entry_id: str | None = None,
    today: date = TODAY,
) -> SeriesEntry:
    """Return an entry ``offset_days`` relative to ``today`` (negative is past)."""
    day = today + timedelta(days=offset_days)
    return SeriesEntry(
        id=entry_id or f"entry-{day.isoformat()}",
        day=day,
        value=value,
        updated_at=updated_at or datetime.combine(day, datetime.min.time(), UTC),
    )


def make_series(values: list[float], today: date = TODAY) -> list[SeriesEntry]:
    """Return consecutive daily entries ending on ``today``."""
    start = -(len(values) - 1)
    return [
        make_entry(start + index, value, today=today)
        for index, value in enumerate(values)
    ]


@dataclass
class InMemoryWeightLogRepository(WeightLogRepository):
    """In-memory weight repository for tests."""

    rows: dict[UUID, list[SeriesEntry]] = field(default_factory=dict)
    loads: int = 0
    writes: int = 0

    def load(self, user_id: UUID) -> list[SeriesEntry]:
        self.loads += 1
        return list(self.rows.get(user_id, []))

    def upsert(self, user_id: UUID, entry: SeriesEntry) -> None:
        self.writes += 1
        kept = [row for row in self.rows.get(user_id, []) if row.id != entry.id]
        self.rows[user_id] = [*kept, entry]

    def delete(self, user_id: UUID, entry_id: str) -> None:
        self.writes += 1
        self.rows[user_id] = [
            row for row in self.rows.get(user_id, []) if row.id != entry_id
        ]


@dataclass
class FailingWeightLogRepository(InMemoryWeightLogRepository):
    """Weight repository whose writes always fail."""

    def upsert(self, user_id: UUID, entry: SeriesEntry) -> None:
        self.writes += 1
        raise RuntimeError("storage unavailable")

    def delete(self, user_id: UUID, entry_id: str) -> None:
        self.writes += 1
        raise RuntimeError("storage unavailable")


@dataclass
class InMemoryStatsRepository(StatsRepository):
    """In-memory stats repository for tests."""

    logs: list[MealLogRow] = field(default_factory=list)
    queries: int = 0

    def list_meal_logs(self, user_id: UUID, start, end) -> list[MealLogRow]:
        self.queries += 1
        return [log for log in self.logs if start <= log.logged_at < end]


def make_meal(
    logged_at: datetime,
    calories: float,
    protein_g: float = 0.0,
    fat_g: float = 0.0,
    carbs_g: float = 0.0,
) -> MealLogRow:
    return MealLogRow(
        logged_at=logged_at,
        total_calories=calories,
        total_protein_g=protein_g,
        total_fat_g=fat_g,
        total_carbs_g=carbs_g,
    )


@pytest.fixture
def settings() -> Settings:
    return Settings(
        supabase_url="https://example.supabase.co",
        supabase_service_key="header.payload.signature",
        api_token="api-token",
    )


@pytest.fixture
def weight_repository() -> InMemoryWeightLogRepository:
    return InMemoryWeightLogRepository()


@pytest.fixture
def stats_repository() -> InMemoryStatsRepository:
    return InMemoryStatsRepository()


@pytest.fixture
def container(
    settings: Settings,
    weight_repository: InMemoryWeightLogRepository,
    stats_repository: InMemoryStatsRepository,
) -> AppContainer:
    weight_service = WeightLogService(
        repository=weight_repository,
        volatility_threshold=settings.weight_volatility_threshold,
        stability_threshold=settings.weight_stability_threshold,
        empty_range_fallback=settings.empty_range_fallback,
        engine_ttl_seconds=settings.engine_ttl_seconds,
        max_cached_users=settings.max_cached_engines,
    )
    nutrition_service = NutritionTrendService(
        repository=stats_repository,
        volatility_threshold=settings.nutrition_volatility_threshold,
        stability_threshold=settings.nutrition_stability_threshold,
        empty_range_fallback=settings.empty_range_fallback,
        engine_ttl_seconds=settings.engine_ttl_seconds,
        max_cached_engines=settings.max_cached_engines,
    )

    def close_resources() -> None:
        return None

    return AppContainer(
        settings=settings,
        weight_service=weight_service,
        nutrition_service=nutrition_service,
        close_resources=close_resources,
    )

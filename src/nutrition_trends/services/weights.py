"""Weight log service backed by per-user trend engines."""

import logging
import math
from dataclasses import dataclass, field
from datetime import UTC, date, datetime, timedelta
from enum import Enum
from typing import Protocol
from uuid import UUID, uuid4

from nutrition_trends.domain.chart import ChartGeometry, ChartSnapshot
from nutrition_trends.domain.ranges import RangeToken
from nutrition_trends.domain.series import InvalidValueError, SeriesEntry, SortOrder
from nutrition_trends.domain.trends import GoalDirection, TrendClassification
from nutrition_trends.services.cache import ExpiringCache
from nutrition_trends.services.engine import TrendEngine
from nutrition_trends.services.ranges import local_now
from nutrition_trends.services.trends import TrendClassifier

_logger = logging.getLogger(__name__)

POUNDS_PER_KG = 2.20462


class WeightUnit(Enum):
    """Display units for weights stored in kilograms."""

    KG = "kg"
    LBS = "lbs"

    @property
    def factor(self) -> float:
        return POUNDS_PER_KG if self is WeightUnit.LBS else 1.0

    def to_kg(self, value: float) -> float:
        return value / self.factor

    def from_kg(self, value_kg: float) -> float:
        return value_kg * self.factor


class WeightLogRepository(Protocol):
    """Persistence interface for weight entries.

    Writes touch a single entry; other rows may be written concurrently by
    other instances.
    """

    def load(self, user_id: UUID) -> list[SeriesEntry]:
        """Return all live entries for a user, in any order."""

    def upsert(self, user_id: UUID, entry: SeriesEntry) -> None:
        """Insert or replace one entry by id."""

    def delete(self, user_id: UUID, entry_id: str) -> None:
        """Remove one entry by id."""


def validate_measurement(value: float) -> float:
    """Reject NaN, infinite and non-positive measurements."""
    if not isinstance(value, int | float) or isinstance(value, bool):
        raise InvalidValueError(f"Measurement must be a number, got {value!r}")
    if math.isnan(value) or math.isinf(value) or value <= 0:
        raise InvalidValueError(f"Measurement must be a positive number, got {value}")
    return float(value)


@dataclass
class WeightLogService:
    """Service for logging weights and reading their trends.

    Loaded engines are kept for ``engine_ttl_seconds`` and at most
    ``max_cached_users`` users, then reloaded from the repository.
    """

    repository: WeightLogRepository
    volatility_threshold: float = 0.025
    stability_threshold: float = 0.5
    empty_range_fallback: bool = True
    engine_ttl_seconds: int = 900
    max_cached_users: int = 1024
    _engines: ExpiringCache = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._engines = ExpiringCache(
            ttl_seconds=self.engine_ttl_seconds, max_entries=self.max_cached_users
        )

    def engine(self, user_id: UUID) -> TrendEngine:
        """Return the user's engine, loading it when absent or expired."""
        engine = self._engines.get(user_id)
        if isinstance(engine, TrendEngine):
            return engine
        entries = self.repository.load(user_id)
        engine = TrendEngine.from_entries(
            entries,
            classifier=self._classifier(WeightUnit.KG),
            empty_range_fallback=self.empty_range_fallback,
        )
        self._engines.set(user_id, engine)
        _logger.info(
            "Loaded weight entries: user_id=%s stored=%s kept=%s",
            user_id,
            len(entries),
            len(engine.store),
        )
        return engine

    def log_weight(
        self,
        user_id: UUID,
        day: date,
        value: float,
        unit: WeightUnit = WeightUnit.KG,
    ) -> SeriesEntry:
        """Record a weight for ``day``, replacing any earlier reading that day."""
        value_kg = unit.to_kg(validate_measurement(value))
        engine = self.engine(user_id)
        existing = engine.store.get(day)
        entry = SeriesEntry(
            id=existing.id if existing else str(uuid4()),
            day=day,
            value=value_kg,
            updated_at=_write_stamp(existing),
        )
        engine.upsert(entry)
        self._save(user_id, entry)
        return entry

    def update_weight(
        self,
        user_id: UUID,
        entry_id: str,
        value: float,
        unit: WeightUnit = WeightUnit.KG,
    ) -> SeriesEntry | None:
        """Replace the value of an existing entry; None if it is unknown."""
        value_kg = unit.to_kg(validate_measurement(value))
        engine = self.engine(user_id)
        current = engine.store.find(entry_id)
        if current is None:
            return None
        updated = SeriesEntry(
            id=current.id,
            day=current.day,
            value=value_kg,
            updated_at=_write_stamp(current),
        )
        engine.upsert(updated)
        self._save(user_id, updated)
        return updated

    def delete_weight(self, user_id: UUID, entry_id: str) -> bool:
        """Delete an entry by id."""
        engine = self.engine(user_id)
        if not engine.delete(entry_id):
            return False
        try:
            self.repository.delete(user_id, entry_id)
        except Exception:
            _logger.exception(
                "Failed to delete weight entry",
                extra={"user_id": user_id, "entry_id": entry_id},
            )
        return True

    def history(
        self, user_id: UUID, order: SortOrder = SortOrder.DESC
    ) -> list[SeriesEntry]:
        """Return all entries, newest first by default."""
        return self.engine(user_id).entries(order)

    def chart(
        self,
        user_id: UUID,
        range_token: RangeToken,
        now: datetime | None = None,
        geometry: ChartGeometry | None = None,
        timezone_name: str = "UTC",
    ) -> ChartSnapshot:
        """Return the chart encoding for a window ending on the user's today."""
        return self.engine(user_id).chart(
            range_token, local_now(timezone_name, now), geometry
        )

    def insight(  # noqa: PLR0913
        self,
        user_id: UUID,
        range_token: RangeToken,
        goal_direction: GoalDirection,
        now: datetime | None = None,
        unit: WeightUnit = WeightUnit.KG,
        timezone_name: str = "UTC",
    ) -> TrendClassification | None:
        """Return the trend classification, or None for too little data."""
        engine = self.engine(user_id)
        if engine.classifier.unit_label != unit.value:
            engine.classifier = self._classifier(unit)
            engine.cache.clear()
        return engine.classify(
            range_token, local_now(timezone_name, now), goal_direction
        )

    def forget(self, user_id: UUID) -> None:
        """Drop the in-memory state so the next access reloads from storage."""
        self._engines.pop(user_id)

    def clear(self) -> None:
        """Drop the in-memory state of every user."""
        self._engines.clear()

    def _classifier(self, unit: WeightUnit) -> TrendClassifier:
        return TrendClassifier(
            volatility_threshold=self.volatility_threshold,
            stability_threshold=self.stability_threshold,
            subject="weight",
            unit_label=unit.value,
            display_factor=unit.factor,
        )

    def _save(self, user_id: UUID, entry: SeriesEntry) -> None:
        # In-memory state stays authoritative; failed writes are not retried.
        try:
            self.repository.upsert(user_id, entry)
        except Exception:
            _logger.exception(
                "Failed to save weight entry",
                extra={"user_id": user_id, "entry_id": entry.id},
            )


def _now() -> datetime:
    return datetime.now(tz=UTC)


def _write_stamp(existing: SeriesEntry | None) -> datetime:
    """Return a timestamp newer than ``existing`` so a user edit always wins."""
    now = _now()
    if existing is not None and existing.updated_at >= now:
        return existing.updated_at + timedelta(microseconds=1)
    return now

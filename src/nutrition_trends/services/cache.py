"""Caches for trend classifications and loaded engines."""

from collections import OrderedDict
from collections.abc import Callable, Hashable
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import Protocol

from nutrition_trends.domain.ranges import RangeToken
from nutrition_trends.domain.series import CalendarDay
from nutrition_trends.domain.trends import GoalDirection, TrendClassification


@dataclass(frozen=True)
class TrendCacheKey:
    """Identifies one windowed series state."""

    range_token: RangeToken
    last_entry_day: CalendarDay
    goal_direction: GoalDirection


class Cache(Protocol):
    """Cache interface for day-scoped classifications."""

    def get(self, key: TrendCacheKey, today: CalendarDay) -> TrendClassification | None:
        """Return a value computed on ``today`` for ``key``."""

    def set(
        self, key: TrendCacheKey, value: TrendClassification, today: CalendarDay
    ) -> None:
        """Store a value computed on ``today``."""


@dataclass
class _CacheEntry:
    value: TrendClassification
    computed_on: CalendarDay


@dataclass
class TrendCache(Cache):
    """In-memory cache that serves a value only on the day it was computed."""

    _entries: dict[TrendCacheKey, _CacheEntry]

    def __init__(self) -> None:
        self._entries = {}

    def __len__(self) -> int:
        return len(self._entries)

    def get(self, key: TrendCacheKey, today: CalendarDay) -> TrendClassification | None:
        """Return a cached value if it was computed today."""
        entry = self._entries.get(key)
        if entry is None:
            return None
        if entry.computed_on != today:
            self._entries.pop(key, None)
            return None
        return entry.value

    def set(
        self, key: TrendCacheKey, value: TrendClassification, today: CalendarDay
    ) -> None:
        """Store a value stamped with the day it was computed."""
        self._entries[key] = _CacheEntry(value=value, computed_on=today)

    def invalidate(self, range_token: RangeToken) -> None:
        """Drop every value computed for ``range_token``."""
        for key in [key for key in self._entries if key.range_token is range_token]:
            del self._entries[key]

    def clear(self) -> None:
        """Drop every cached value."""
        self._entries.clear()


@dataclass
class _ExpiringEntry:
    value: object
    expires_at: datetime


class ExpiringCache:
    """In-memory cache with a TTL and a bound on the number of entries.

    Reads refresh recency but not expiry. When full, the least recently used
    entry is evicted.
    """

    def __init__(
        self,
        ttl_seconds: int,
        max_entries: int,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self.ttl_seconds = ttl_seconds
        self.max_entries = max_entries
        self._clock = clock or _utcnow
        self._entries: OrderedDict[Hashable, _ExpiringEntry] = OrderedDict()

    def __len__(self) -> int:
        return len(self._entries)

    def get(self, key: Hashable) -> object | None:
        """Return a cached value if it hasn't expired."""
        entry = self._entries.get(key)
        if entry is None:
            return None
        if self._clock() >= entry.expires_at:
            self._entries.pop(key, None)
            return None
        self._entries.move_to_end(key)
        return entry.value

    def set(self, key: Hashable, value: object) -> None:
        """Store a value for ``ttl_seconds``, evicting the stalest if full."""
        expires_at = self._clock() + timedelta(seconds=self.ttl_seconds)
        self._entries[key] = _ExpiringEntry(value=value, expires_at=expires_at)
        self._entries.move_to_end(key)
        while len(self._entries) > self.max_entries:
            self._entries.popitem(last=False)

    def pop(self, key: Hashable) -> None:
        self._entries.pop(key, None)

    def clear(self) -> None:
        self._entries.clear()


def _utcnow() -> datetime:
    return datetime.now(tz=UTC)

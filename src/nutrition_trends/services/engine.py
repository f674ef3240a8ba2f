"""Trend engine composing storage, windowing, encoding and classification."""

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import date, datetime

from nutrition_trends.domain.chart import ChartGeometry, ChartSnapshot
from nutrition_trends.domain.ranges import RangeToken
from nutrition_trends.domain.series import (
    SeriesEntry,
    SeriesPoint,
    SortOrder,
    to_calendar_day,
)
from nutrition_trends.domain.trends import GoalDirection, TrendClassification
from nutrition_trends.services import axis, curves
from nutrition_trends.services.cache import TrendCache, TrendCacheKey
from nutrition_trends.services.ranges import filter_entries
from nutrition_trends.services.scrub import ScrubResolver
from nutrition_trends.services.series_store import DatedSeriesStore
from nutrition_trends.services.trends import MIN_POINTS, TrendClassifier

_logger = logging.getLogger(__name__)


@dataclass
class TrendEngine:
    """Single series state with its classification memo and scrub state.

    When ``empty_range_fallback`` is set, an empty window falls back to the
    full series and the resulting chart is flagged ``fell_back``.
    """

    store: DatedSeriesStore = field(default_factory=DatedSeriesStore)
    classifier: TrendClassifier = field(default_factory=TrendClassifier)
    cache: TrendCache = field(default_factory=TrendCache)
    scrubber: ScrubResolver = field(default_factory=ScrubResolver)
    empty_range_fallback: bool = True
    _points: list[SeriesPoint] = field(default_factory=list, repr=False)

    @classmethod
    def from_entries(cls, batch: Iterable[SeriesEntry], **kwargs) -> "TrendEngine":
        """Build an engine from an unordered, possibly duplicated batch."""
        return cls(store=DatedSeriesStore.from_entries(batch), **kwargs)

    def upsert(self, entry: SeriesEntry) -> bool:
        """Insert or replace an entry; clears cached classifications on change."""
        changed = self.store.upsert(entry)
        if changed:
            self.cache.clear()
        return changed

    def delete(self, entry_id: str) -> bool:
        """Delete an entry by id; clears cached classifications on change."""
        changed = self.store.delete(entry_id)
        if changed:
            self.cache.clear()
        return changed

    def discard(self, entry: SeriesEntry) -> bool:
        """Legacy removal by entry equality."""
        changed = self.store.discard(entry)
        if changed:
            self.cache.clear()
        return changed

    def replace_entries(self, batch: Iterable[SeriesEntry]) -> bool:
        """Swap in a freshly loaded batch; keeps the cache if nothing changed."""
        store = DatedSeriesStore.from_entries(batch)
        if store.list_entries() == self.store.list_entries():
            return False
        self.store = store
        self.cache.clear()
        return True

    def entries(self, order: SortOrder = SortOrder.ASC) -> list[SeriesEntry]:
        return self.store.list_entries(order)

    def window(
        self, range_token: RangeToken, now: date | datetime
    ) -> tuple[list[SeriesEntry], bool]:
        """Return the windowed entries and whether the fallback was used."""
        all_entries = self.store.list_entries(SortOrder.ASC)
        selected = filter_entries(all_entries, range_token, now)
        if not selected and all_entries and self.empty_range_fallback:
            return all_entries, True
        return selected, False

    def chart(
        self,
        range_token: RangeToken,
        now: date | datetime,
        geometry: ChartGeometry | None = None,
    ) -> ChartSnapshot:
        """Encode the window as axis, projected points and a curve."""
        resolved_geometry = geometry or ChartGeometry()
        selected, fell_back = self.window(range_token, now)
        scale = axis.scale([entry.value for entry in selected])
        points = curves.project_points(selected, scale, resolved_geometry)
        self._points = points
        self.scrubber.clear()
        return ChartSnapshot(
            range_token=range_token,
            entries=selected,
            axis=scale,
            points=points,
            curve=curves.build(points),
            date_label=format_date_label(selected),
            fell_back=fell_back,
        )

    def classify(
        self,
        range_token: RangeToken,
        now: date | datetime,
        goal_direction: GoalDirection = GoalDirection.NEUTRAL,
    ) -> TrendClassification | None:
        """Return the cached or freshly computed classification.

        Returns None when the window holds fewer than two entries.
        """
        selected, _ = self.window(range_token, now)
        if len(selected) < MIN_POINTS:
            return None

        today = to_calendar_day(now)
        key = TrendCacheKey(
            range_token=range_token,
            last_entry_day=selected[-1].day,
            goal_direction=goal_direction,
        )
        cached = self.cache.get(key, today)
        if cached is not None:
            return cached

        result = self.classifier.classify(selected, goal_direction)
        self.cache.set(key, result, today)
        _logger.debug(
            "Trend classified: range=%s points=%s category=%s",
            range_token.token,
            len(selected),
            result.category.value,
        )
        return result

    def scrub(self, pointer_x: float) -> SeriesPoint | None:
        """Resolve the pointer against the last chart's points."""
        index = self.scrubber.resolve(self._points, pointer_x)
        if index is None:
            return None
        return self._points[index]

    def release(self) -> None:
        """End the active scrub."""
        self.scrubber.clear()


def format_date_label(entries: list[SeriesEntry]) -> str:
    """Return ``"d MMM yyyy - d MMM yyyy"`` for the window, or ``""``."""
    if not entries:
        return ""
    start = entries[0].day
    end = entries[-1].day
    return f"{_format_day(start)} - {_format_day(end)}"


def _format_day(day: date) -> str:
    return f"{day.day} {day.strftime('%b %Y')}"

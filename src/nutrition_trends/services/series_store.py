"""Day-bucketed store for dated measurements."""

from collections.abc import Iterable

from nutrition_trends.domain.series import CalendarDay, SeriesEntry, SortOrder


class DatedSeriesStore:
    """Holds at most one entry per calendar day.

    Conflicts on the same day are resolved last-writer-wins by ``updated_at``,
    never by call order. Values are not validated here; callers reject
    invalid measurements before they reach the store.
    """

    def __init__(self) -> None:
        self._entries: dict[CalendarDay, SeriesEntry] = {}

    @classmethod
    def from_entries(cls, batch: Iterable[SeriesEntry]) -> "DatedSeriesStore":
        """Build a store from an unordered batch that may repeat days."""
        grouped: dict[CalendarDay, list[SeriesEntry]] = {}
        for entry in batch:
            grouped.setdefault(entry.day, []).append(entry)

        store = cls()
        for day in sorted(grouped):
            winner = grouped[day][0]
            for candidate in grouped[day][1:]:
                if candidate.updated_at > winner.updated_at:
                    winner = candidate
            store._entries[day] = winner
        return store

    def __len__(self) -> int:
        return len(self._entries)

    def upsert(self, entry: SeriesEntry) -> bool:
        """Insert or replace the entry for ``entry.day``.

        Returns True when the store changed. An existing entry is replaced
        only by a strictly newer ``updated_at``.
        """
        existing = self._entries.get(entry.day)
        if existing is not None and entry.updated_at <= existing.updated_at:
            return False
        self._entries[entry.day] = entry
        return True

    def delete(self, entry_id: str) -> bool:
        """Remove the entry with ``entry_id``."""
        for day, entry in self._entries.items():
            if entry.id == entry_id:
                del self._entries[day]
                return True
        return False

    def discard(self, entry: SeriesEntry) -> bool:
        """Remove a stored entry equal to ``entry``.

        Compatibility path for callers that still hold entry objects instead
        of ids; prefer ``delete``.
        """
        stored = self._entries.get(entry.day)
        if stored is None or stored != entry:
            return False
        del self._entries[entry.day]
        return True

    def get(self, day: CalendarDay) -> SeriesEntry | None:
        """Return the entry stored for ``day``."""
        return self._entries.get(day)

    def find(self, entry_id: str) -> SeriesEntry | None:
        """Return the entry with ``entry_id``."""
        for entry in self._entries.values():
            if entry.id == entry_id:
                return entry
        return None

    def last_day(self) -> CalendarDay | None:
        """Return the most recent day in the store."""
        if not self._entries:
            return None
        return max(self._entries)

    def list_entries(self, order: SortOrder = SortOrder.ASC) -> list[SeriesEntry]:
        """Return a sorted copy of the entries."""
        return sorted(
            self._entries.values(),
            key=lambda entry: entry.day,
            reverse=order is SortOrder.DESC,
        )

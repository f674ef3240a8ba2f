"""Lookback window filtering."""

from collections.abc import Iterable
from datetime import UTC, date, datetime
from zoneinfo import ZoneInfo

from nutrition_trends.domain.ranges import RangeToken
from nutrition_trends.domain.series import CalendarDay, SeriesEntry, to_calendar_day


def cutoff_day(range_token: RangeToken, now: date | datetime) -> CalendarDay:
    """Return the first day included in the window ending at ``now``."""
    return to_calendar_day(now) - range_token.delta


def filter_entries(
    entries: Iterable[SeriesEntry], range_token: RangeToken, now: date | datetime
) -> list[SeriesEntry]:
    """Return entries on or after the cutoff day, ascending by day.

    Comparison is by calendar day, so the time of day on ``now`` never
    excludes a same-day entry.
    """
    cutoff = cutoff_day(range_token, now)
    selected = [entry for entry in entries if entry.day >= cutoff]
    return sorted(selected, key=lambda entry: entry.day)


def local_now(timezone_name: str, now: datetime | None = None) -> datetime:
    """Return ``now`` (default: the current time) in the user's time zone.

    Windows are cut at the user's calendar day, not the UTC one.
    """
    return (now or datetime.now(tz=UTC)).astimezone(ZoneInfo(timezone_name))

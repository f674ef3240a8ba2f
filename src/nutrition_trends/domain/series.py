"""Domain models for dated measurement series."""

from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum
from zoneinfo import ZoneInfo

CalendarDay = date


class TrendEngineError(Exception):
    """Base error for the trend engine."""


class InvalidValueError(TrendEngineError, ValueError):
    """Raised when a measurement is NaN, infinite or not positive."""


class InsufficientDataError(TrendEngineError):
    """Raised when a series is too short to classify."""


class SortOrder(Enum):
    """Derived orderings of a series."""

    ASC = "asc"
    DESC = "desc"


@dataclass(frozen=True)
class SeriesEntry:
    """One daily measurement (a weight reading or a day's macro total)."""

    id: str
    day: CalendarDay
    value: float
    updated_at: datetime


@dataclass(frozen=True)
class SeriesPoint:
    """Pixel-space projection of an entry."""

    x: float
    y: float
    entry: SeriesEntry
    index: int


def to_calendar_day(value: date | datetime, tz: ZoneInfo | None = None) -> CalendarDay:
    """Truncate a date or datetime to day granularity.

    Aware datetimes are converted to ``tz`` first when one is given.
    """
    if isinstance(value, datetime):
        if tz is not None and value.tzinfo is not None:
            value = value.astimezone(tz)
        return value.date()
    return value

"""Lookback window selectors."""

from dataclasses import dataclass
from enum import Enum

from dateutil.relativedelta import relativedelta


class UnknownRangeTokenError(ValueError):
    """Raised when a range token string is not recognised."""


@dataclass(frozen=True)
class LookbackWindow:
    """Declarative lookback window definition."""

    token: str
    delta: relativedelta


class RangeToken(Enum):
    """Ordered set of lookback windows, shortest first."""

    ONE_WEEK = LookbackWindow("1W", relativedelta(days=7))
    ONE_MONTH = LookbackWindow("1M", relativedelta(months=1))
    THREE_MONTHS = LookbackWindow("3M", relativedelta(months=3))
    SIX_MONTHS = LookbackWindow("6M", relativedelta(months=6))
    ONE_YEAR = LookbackWindow("1Y", relativedelta(years=1))
    TWO_YEARS = LookbackWindow("2Y", relativedelta(years=2))

    @property
    def token(self) -> str:
        """Return the short token string, e.g. ``"3M"``."""
        return self.value.token

    @property
    def delta(self) -> relativedelta:
        """Return the calendar-aware lookback duration."""
        return self.value.delta

    @classmethod
    def parse(cls, raw: str) -> "RangeToken":
        """Return the range token matching ``raw`` (case-insensitive)."""
        cleaned = raw.strip().upper()
        for member in cls:
            if member.token == cleaned:
                return member
        raise UnknownRangeTokenError(f"Unknown range token: {raw!r}")


def range_tokens() -> list[str]:
    """Return token strings in selector order."""
    return [member.token for member in RangeToken]

"""Domain models for trend classification."""

from dataclasses import dataclass
from enum import Enum


class TrendCategory(Enum):
    """Trend categories in classification priority order."""

    VOLATILE = "volatile"
    STABLE = "stable"
    ADVERSE = "adverse"
    ON_TRACK = "on-track"
    MINIMAL_CHANGE = "minimal-change"


class GoalDirection(Enum):
    """Direction the user wants the series to move."""

    INCREASE = "increase"
    DECREASE = "decrease"
    NEUTRAL = "neutral"

    @classmethod
    def from_goal(cls, goal: str | None) -> "GoalDirection":
        """Map a stated goal (lose/maintain/gain) to a direction."""
        mapping = {
            "gain": cls.INCREASE,
            "lose": cls.DECREASE,
            "maintain": cls.NEUTRAL,
        }
        if goal is None:
            return cls.NEUTRAL
        cleaned = goal.strip().lower()
        if cleaned in mapping:
            return mapping[cleaned]
        return cls(cleaned)


@dataclass(frozen=True)
class TrendStatistics:
    """Summary statistics of a windowed series."""

    first: float
    last: float
    delta: float
    mean: float
    variance: float
    stddev: float
    coefficient_of_variation: float
    span_days: int
    weekly_change: float


@dataclass(frozen=True)
class TrendClassification:
    """Trend category with the absolute change and a display narrative."""

    category: TrendCategory
    delta_abs: float
    narrative: str
    statistics: TrendStatistics

"""Trend statistics and classification."""

import math
from collections.abc import Sequence
from dataclasses import dataclass

from nutrition_trends.domain.series import InsufficientDataError, SeriesEntry
from nutrition_trends.domain.trends import (
    GoalDirection,
    TrendCategory,
    TrendClassification,
    TrendStatistics,
)

MIN_POINTS = 2
DAYS_PER_WEEK = 7


def compute_statistics(series: Sequence[SeriesEntry]) -> TrendStatistics:
    """Compute delta, population variance and related figures."""
    if len(series) < MIN_POINTS:
        raise InsufficientDataError(
            f"At least {MIN_POINTS} points are required, got {len(series)}"
        )
    values = [entry.value for entry in series]
    first = values[0]
    last = values[-1]
    delta = last - first
    mean = sum(values) / len(values)
    variance = sum((value - mean) ** 2 for value in values) / len(values)
    stddev = math.sqrt(variance)
    cv = stddev / mean if mean else 0.0
    span_days = (series[-1].day - series[0].day).days
    weekly_change = delta / span_days * DAYS_PER_WEEK if span_days > 0 else 0.0
    return TrendStatistics(
        first=first,
        last=last,
        delta=delta,
        mean=mean,
        variance=variance,
        stddev=stddev,
        coefficient_of_variation=cv,
        span_days=span_days,
        weekly_change=weekly_change,
    )


@dataclass
class TrendClassifier:
    """Classifies a windowed series relative to a goal direction."""

    volatility_threshold: float = 0.025
    stability_threshold: float = 0.5
    subject: str = "weight"
    unit_label: str = "kg"
    display_factor: float = 1.0

    def classify(
        self, series: Sequence[SeriesEntry], goal_direction: GoalDirection
    ) -> TrendClassification:
        """Return the trend category for an ascending series of 2+ points."""
        stats = compute_statistics(series)
        category = self.categorize(stats, goal_direction)
        delta_abs = abs(stats.delta)
        return TrendClassification(
            category=category,
            delta_abs=delta_abs,
            narrative=narrate(
                category,
                delta=stats.delta,
                subject=self.subject,
                unit_label=self.unit_label,
                display_factor=self.display_factor,
            ),
            statistics=stats,
        )

    def categorize(
        self, stats: TrendStatistics, goal_direction: GoalDirection
    ) -> TrendCategory:
        """Apply the classification rules; the first match wins."""
        if stats.coefficient_of_variation > self.volatility_threshold:
            return TrendCategory.VOLATILE
        if abs(stats.delta) < self.stability_threshold:
            return TrendCategory.STABLE
        if goal_direction is GoalDirection.NEUTRAL or stats.delta == 0:
            return TrendCategory.MINIMAL_CHANGE
        rising = stats.delta > 0
        wants_rise = goal_direction is GoalDirection.INCREASE
        if rising != wants_rise:
            return TrendCategory.ADVERSE
        return TrendCategory.ON_TRACK


def narrate(
    category: TrendCategory,
    *,
    delta: float,
    subject: str = "weight",
    unit_label: str = "kg",
    display_factor: float = 1.0,
) -> str:
    """Return insight banner text for a category."""
    amount = f"{abs(delta) * display_factor:.1f} {unit_label}"
    direction = "up" if delta > 0 else "down"
    if category is TrendCategory.VOLATILE:
        return (
            f"Your {subject} is fluctuating. Consider tracking hydration and "
            "sleep patterns to identify patterns."
        )
    if category is TrendCategory.STABLE:
        return (
            f"Your {subject} has been stable. Great consistency! Keep "
            "maintaining your current routine."
        )
    if category is TrendCategory.ON_TRACK:
        return (
            f"Your {subject} is {direction} {amount} over this period. "
            "Keep up the great progress!"
        )
    if category is TrendCategory.ADVERSE:
        return (
            f"Your {subject} is {direction} {amount} over this period, "
            "away from your goal."
        )
    return (
        f"Your {subject} shows minimal change. Small fluctuations are normal "
        "and expected."
    )

"""Axis domain and tick computation."""

import math
from collections.abc import Sequence
from dataclasses import replace

from nutrition_trends.domain.chart import AxisScale

PLACEHOLDER_AXIS = AxisScale(min=0, max=5, range=5, ticks=[0, 1, 2, 3, 4, 5])
MIN_PADDING = 1.0
PADDING_RATIO = 0.1


def scale(values: Sequence[float], target_tick_count: int = 5) -> AxisScale:
    """Compute a padded whole-number domain and integer-step ticks.

    An empty value set yields a fixed ``0..5`` placeholder so an empty grid
    can still be drawn.
    """
    if not values:
        return replace(PLACEHOLDER_AXIS, ticks=list(PLACEHOLDER_AXIS.ticks))

    raw_min = min(values)
    raw_max = max(values)
    padding = max((raw_max - raw_min) * PADDING_RATIO, MIN_PADDING)
    axis_min = math.floor(raw_min - padding)
    axis_max = math.ceil(raw_max + padding)
    if axis_min == axis_max:
        axis_min -= 1
        axis_max += 1
    span = max(axis_max - axis_min, 1)

    step = max(1, round(span / max(target_tick_count, 1)))
    ticks: list[float] = list(range(axis_min, axis_max + 1, step))
    if ticks[-1] != axis_max:
        ticks.append(axis_max)

    return AxisScale(min=axis_min, max=axis_max, range=span, ticks=ticks)

"""Smooth curve construction in pixel space."""

import math
from collections.abc import Sequence
from typing import Protocol

from nutrition_trends.domain.chart import (
    AxisScale,
    ChartGeometry,
    CubicTo,
    CurvePath,
    LineTo,
    MoveTo,
    PathCommand,
)
from nutrition_trends.domain.series import SeriesEntry, SeriesPoint

# Extra length contributed by curve bulges over the straight polyline.
LENGTH_OVERHEAD = 1.5


class Point(Protocol):
    """Anything with pixel coordinates."""

    x: float
    y: float


def project_points(
    entries: Sequence[SeriesEntry], axis: AxisScale, geometry: ChartGeometry
) -> list[SeriesPoint]:
    """Project ascending entries onto the graph's inner area."""
    last_index = max(len(entries) - 1, 1)
    points = []
    for index, entry in enumerate(entries):
        x = geometry.padding + (index / last_index) * geometry.inner_width
        normalized = (entry.value - axis.min) / axis.range
        y = (
            geometry.padding
            + geometry.inner_height
            - normalized * geometry.inner_height
        )
        points.append(SeriesPoint(x=x, y=y, entry=entry, index=index))
    return points


def build(points: Sequence[Point]) -> CurvePath:
    """Build a path through ``points``.

    Three or more points produce a cubic Bezier chain approximating a
    Catmull-Rom spline: each segment's control points come from its
    neighbours, clamped at the ends, so the curve passes through every point.
    """
    if not points:
        return CurvePath()

    first = points[0]
    commands: list[PathCommand] = [MoveTo(first.x, first.y)]
    if len(points) == 1:
        return CurvePath(commands=commands, length_estimate=0.0)

    if len(points) == 2:
        second = points[1]
        commands.append(LineTo(second.x, second.y))
        return CurvePath(commands=commands, length_estimate=_length_estimate(points))

    last = len(points) - 1
    for i in range(last):
        current = points[i]
        after_current = points[i + 1]
        prev = points[i - 1] if i > 0 else current
        after = points[i + 2] if i < last - 1 else after_current

        commands.append(
            CubicTo(
                c1x=current.x + (after_current.x - prev.x) / 6,
                c1y=current.y + (after_current.y - prev.y) / 6,
                c2x=after_current.x - (after.x - current.x) / 6,
                c2y=after_current.y - (after.y - current.y) / 6,
                x=after_current.x,
                y=after_current.y,
            )
        )
    return CurvePath(commands=commands, length_estimate=_length_estimate(points))


def _length_estimate(points: Sequence[Point]) -> float:
    total = 0.0
    for start, end in zip(points, points[1:], strict=False):
        total += math.hypot(end.x - start.x, end.y - start.y)
    return total * LENGTH_OVERHEAD

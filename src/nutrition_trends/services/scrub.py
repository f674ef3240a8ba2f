"""Pointer-driven nearest-point lookup."""

from collections.abc import Sequence

from nutrition_trends.services.curves import Point


class ScrubResolver:
    """Tracks the point nearest to the pointer while a scrub gesture is active."""

    def __init__(self) -> None:
        self.active_index: int | None = None

    def resolve(self, points: Sequence[Point], pointer_x: float) -> int | None:
        """Return the index of the point closest to ``pointer_x`` by x.

        Equal distances keep the lower index.
        """
        if not points:
            self.active_index = None
            return None

        closest_index = 0
        min_diff = abs(pointer_x - points[0].x)
        for index in range(1, len(points)):
            diff = abs(pointer_x - points[index].x)
            if diff < min_diff:
                min_diff = diff
                closest_index = index
        self.active_index = closest_index
        return closest_index

    def clear(self) -> None:
        """End the scrub; called on pointer release or gesture cancel."""
        self.active_index = None

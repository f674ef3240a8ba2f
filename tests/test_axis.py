"""Tests for axis scaling."""

from nutrition_trends.services.axis import PLACEHOLDER_AXIS, scale


def test_all_equal_values_expand_to_non_zero_range() -> None:
    axis = scale([5, 5, 5])

    assert axis.min == 4
    assert axis.max == 6
    assert axis.range == 2
    assert axis.ticks == [4, 5, 6]


def test_empty_values_use_placeholder_domain() -> None:
    axis = scale([])

    assert axis == PLACEHOLDER_AXIS
    assert axis.ticks == [0, 1, 2, 3, 4, 5]


def test_fractional_values_get_whole_number_ticks() -> None:
    axis = scale([70.3, 75.8])

    assert (axis.min, axis.max) == (69, 77)
    assert axis.ticks == [69, 71, 73, 75, 77]
    assert all(float(tick).is_integer() for tick in axis.ticks)


def test_max_is_appended_when_step_undershoots() -> None:
    axis = scale([60, 73])

    assert (axis.min, axis.max, axis.range) == (58, 75, 17)
    assert axis.ticks == [58, 61, 64, 67, 70, 73, 75]


def test_domain_always_covers_values() -> None:
    values = [81.2, 79.9, 80.4, 78.1]
    axis = scale(values)

    assert axis.min < min(values)
    assert axis.max > max(values)
    assert axis.ticks[0] == axis.min
    assert axis.ticks[-1] == axis.max


def test_empty_axes_do_not_share_ticks() -> None:
    first = scale([])
    first.ticks.append(99)

    assert scale([]).ticks == [0, 1, 2, 3, 4, 5]
    assert PLACEHOLDER_AXIS.ticks == [0, 1, 2, 3, 4, 5]

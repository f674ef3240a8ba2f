"""Tests for nutrition trend service."""

from datetime import UTC, date, datetime, timedelta
from uuid import uuid4
from zoneinfo import ZoneInfo

import pytest

from nutrition_trends.domain.ranges import RangeToken
from nutrition_trends.domain.stats import (
    DailyTotals,
    NutritionMetric,
    NutritionTargets,
)
from nutrition_trends.domain.trends import GoalDirection, TrendCategory
from nutrition_trends.services.nutrition_trends import (
    NutritionTrendService,
    aggregate_days,
    summarize,
    to_series_entry,
)
from nutrition_trends.services.trends import TrendClassifier
from tests.conftest import NOW, InMemoryStatsRepository, make_meal


def _meals_on(days_ago: int, *meals: tuple[float, float]) -> list:
    logged_day = NOW - timedelta(days=days_ago)
    return [
        make_meal(logged_day.replace(hour=8 + index), calories, protein_g=protein)
        for index, (calories, protein) in enumerate(meals)
    ]


def test_aggregate_days_buckets_by_local_day() -> None:
    tz = ZoneInfo("America/New_York")
    logs = [
        make_meal(datetime(2026, 3, 15, 2, 0, tzinfo=UTC), 500, protein_g=20),
        make_meal(datetime(2026, 3, 15, 16, 0, tzinfo=UTC), 700, protein_g=30),
        make_meal(datetime(2026, 3, 15, 22, 0, tzinfo=UTC), 300, protein_g=10),
    ]

    daily = aggregate_days(logs, tz)

    assert [totals.day for totals in daily] == [date(2026, 3, 14), date(2026, 3, 15)]
    assert daily[1].calories == 1000
    assert daily[1].protein_g == 40
    assert daily[1].meal_count == 2
    assert daily[1].last_logged_at == datetime(2026, 3, 15, 22, 0, tzinfo=UTC)


def test_daily_totals_cover_the_whole_local_day() -> None:
    repository = InMemoryStatsRepository(
        logs=[
            make_meal(datetime(2026, 3, 16, 3, 0, tzinfo=UTC), 400),
            make_meal(datetime(2026, 3, 16, 5, 0, tzinfo=UTC), 900),
        ]
    )
    service = NutritionTrendService(repository=repository)

    daily = service.daily_totals(uuid4(), "America/New_York", NOW)

    assert [(totals.day, totals.calories) for totals in daily] == [
        (date(2026, 3, 15), 400)
    ]


def test_to_series_entry_uses_metric_value() -> None:
    totals = DailyTotals(
        day=date(2026, 3, 1), calories=2100, protein_g=120, fat_g=70, carbs_g=210
    )

    entry = to_series_entry(totals, NutritionMetric.PROTEIN)

    assert entry.id == "protein_g:2026-03-01"
    assert entry.value == 120
    assert entry.updated_at == datetime(2026, 3, 1, tzinfo=UTC)


def test_calorie_chart_and_insight() -> None:
    repository = InMemoryStatsRepository(
        logs=[
            *_meals_on(2, (1200, 60), (800, 40)),
            *_meals_on(1, (1800, 90)),
            *_meals_on(0, (1600, 80)),
        ]
    )
    service = NutritionTrendService(repository=repository)
    user_id = uuid4()

    snapshot = service.chart(
        user_id, NutritionMetric.CALORIES, RangeToken.ONE_WEEK, "UTC", NOW
    )
    result = service.insight(
        user_id,
        NutritionMetric.CALORIES,
        RangeToken.ONE_WEEK,
        "UTC",
        GoalDirection.DECREASE,
        NOW,
    )

    assert [entry.value for entry in snapshot.entries] == [2000, 1800, 1600]
    assert len(snapshot.points) == 3
    assert result is not None
    assert result.category is TrendCategory.ON_TRACK
    assert result.narrative == (
        "Your calorie intake is down 400.0 kcal over this period. "
        "Keep up the great progress!"
    )


def test_gram_metrics_use_smaller_stability_threshold() -> None:
    repository = InMemoryStatsRepository(
        logs=[
            *_meals_on(2, (2000, 100)),
            *_meals_on(1, (2000, 102)),
            *_meals_on(0, (2000, 103)),
        ]
    )
    service = NutritionTrendService(repository=repository)

    result = service.insight(
        uuid4(),
        NutritionMetric.PROTEIN,
        RangeToken.ONE_WEEK,
        "UTC",
        GoalDirection.INCREASE,
        NOW,
    )

    assert result is not None
    assert result.category is TrendCategory.STABLE
    assert "protein intake" in result.narrative


def test_insight_without_enough_days_is_none() -> None:
    repository = InMemoryStatsRepository(logs=_meals_on(0, (1500, 60)))
    service = NutritionTrendService(repository=repository)

    assert (
        service.insight(
            uuid4(), NutritionMetric.CALORIES, RangeToken.ONE_WEEK, "UTC", now=NOW
        )
        is None
    )


def test_summary_averages_days_in_window() -> None:
    repository = InMemoryStatsRepository(
        logs=[
            *_meals_on(40, (3000, 150)),
            *_meals_on(1, (1800, 90)),
            *_meals_on(0, (1600, 70)),
        ]
    )
    service = NutritionTrendService(repository=repository)

    summary = service.summary(uuid4(), RangeToken.ONE_WEEK, "UTC", NOW)

    assert len(summary.daily) == 2
    assert summary.avg_calories == pytest.approx(1700)
    assert summary.avg_protein_g == pytest.approx(80)


def test_summary_falls_back_when_window_is_empty() -> None:
    repository = InMemoryStatsRepository(logs=_meals_on(40, (3000, 150)))
    user_id = uuid4()

    with_fallback = NutritionTrendService(repository=repository).summary(
        user_id, RangeToken.ONE_WEEK, "UTC", NOW
    )
    without_fallback = NutritionTrendService(
        repository=repository, empty_range_fallback=False
    ).summary(user_id, RangeToken.ONE_WEEK, "UTC", NOW)

    assert with_fallback.avg_calories == 3000
    assert without_fallback.daily == []
    assert without_fallback.avg_calories == 0


def test_summarize_empty_days() -> None:
    summary = summarize([])

    assert summary.avg_calories == 0
    assert summary.avg_carbs_g == 0


def _three_days() -> list:
    return [
        *_meals_on(2, (2000, 100)),
        *_meals_on(1, (1800, 90)),
        *_meals_on(0, (1600, 80)),
    ]


def test_same_day_insight_is_classified_once(monkeypatch: pytest.MonkeyPatch) -> None:
    calls = []
    original = TrendClassifier.classify

    def counting(self, entries, goal_direction):
        calls.append(goal_direction)
        return original(self, entries, goal_direction)

    monkeypatch.setattr(TrendClassifier, "classify", counting)
    service = NutritionTrendService(repository=InMemoryStatsRepository(_three_days()))
    user_id = uuid4()

    results = [
        service.insight(
            user_id,
            NutritionMetric.CALORIES,
            RangeToken.ONE_WEEK,
            "UTC",
            GoalDirection.DECREASE,
            NOW + timedelta(minutes=minutes),
        )
        for minutes in (0, 5, 10)
    ]

    assert len(calls) == 1
    assert results[0] is results[1] is results[2]


def test_view_queries_logs_once() -> None:
    repository = InMemoryStatsRepository(_three_days())
    service = NutritionTrendService(repository=repository)

    snapshot, result = service.view(
        uuid4(),
        NutritionMetric.CALORIES,
        RangeToken.ONE_WEEK,
        "UTC",
        GoalDirection.DECREASE,
        NOW,
    )

    assert repository.queries == 1
    assert len(snapshot.points) == 3
    assert result is not None
    assert result.category is TrendCategory.ON_TRACK


def test_new_meal_refreshes_cached_engine() -> None:
    repository = InMemoryStatsRepository(_three_days())
    service = NutritionTrendService(repository=repository)
    user_id = uuid4()
    before = service.insight(
        user_id, NutritionMetric.CALORIES, RangeToken.ONE_WEEK, "UTC", now=NOW
    )

    repository.logs.append(make_meal(NOW.replace(hour=20), 900))
    after = service.insight(
        user_id, NutritionMetric.CALORIES, RangeToken.ONE_WEEK, "UTC", now=NOW
    )

    assert before is not None
    assert after is not None
    assert before.delta_abs == pytest.approx(400)
    assert after.delta_abs == pytest.approx(500)


def test_summary_reports_targets_and_differences() -> None:
    service = NutritionTrendService(repository=InMemoryStatsRepository(_three_days()))
    targets = NutritionTargets(calories=2000, protein_g=100, fat_g=0)

    summary = service.summary(uuid4(), RangeToken.ONE_WEEK, "UTC", NOW, targets)

    assert summary.targets is targets
    assert summary.differences() == {
        NutritionMetric.CALORIES: pytest.approx(-200),
        NutritionMetric.PROTEIN: pytest.approx(-10),
    }


def test_summary_without_targets_has_no_differences() -> None:
    summary = summarize(
        [
            DailyTotals(
                day=date(2026, 3, 1),
                calories=2100,
                protein_g=120,
                fat_g=70,
                carbs_g=210,
            )
        ]
    )

    assert summary.targets == NutritionTargets()
    assert summary.differences() == {}

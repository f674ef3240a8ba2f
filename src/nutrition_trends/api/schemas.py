"""Pydantic models for the trends API."""

from datetime import date, datetime

from pydantic import BaseModel, Field

from nutrition_trends.domain.chart import ChartSnapshot
from nutrition_trends.domain.series import SeriesEntry
from nutrition_trends.domain.trends import TrendClassification


class WeightLogRequest(BaseModel):
    """Weight reading submitted by a client."""

    day: date
    value: float


class WeightUpdateRequest(BaseModel):
    """New value for an existing weight entry."""

    value: float


class EntryModel(BaseModel):
    """Serialized series entry."""

    id: str
    day: date
    value: float
    updated_at: datetime

    @classmethod
    def from_entry(cls, entry: SeriesEntry, factor: float = 1.0) -> "EntryModel":
        return cls(
            id=entry.id,
            day=entry.day,
            value=round(entry.value * factor, 2),
            updated_at=entry.updated_at,
        )


class AxisModel(BaseModel):
    min: float
    max: float
    range: float
    ticks: list[float]


class PointModel(BaseModel):
    x: float
    y: float
    index: int
    entry_id: str
    day: date
    value: float


class InsightModel(BaseModel):
    """Trend banner payload; ``status`` reports insufficient data."""

    status: str
    category: str | None = None
    delta_abs: float | None = None
    narrative: str | None = None
    weekly_change: float | None = None

    @classmethod
    def from_classification(
        cls, result: TrendClassification | None
    ) -> "InsightModel":
        if result is None:
            return cls(status="insufficient_data")
        return cls(
            status="ok",
            category=result.category.value,
            delta_abs=round(result.delta_abs, 2),
            narrative=result.narrative,
            weekly_change=round(result.statistics.weekly_change, 2),
        )


class ChartResponse(BaseModel):
    """Chart payload consumed by the rendering client."""

    range: str
    path: str
    length_estimate: float
    axis: AxisModel
    points: list[PointModel] = Field(default_factory=list)
    date_label: str
    fell_back: bool
    insight: InsightModel

    @classmethod
    def from_snapshot(
        cls,
        snapshot: ChartSnapshot,
        insight: TrendClassification | None,
    ) -> "ChartResponse":
        return cls(
            range=snapshot.range_token.token,
            path=snapshot.curve.to_svg(),
            length_estimate=snapshot.curve.length_estimate,
            axis=AxisModel(
                min=snapshot.axis.min,
                max=snapshot.axis.max,
                range=snapshot.axis.range,
                ticks=snapshot.axis.ticks,
            ),
            points=[
                PointModel(
                    x=point.x,
                    y=point.y,
                    index=point.index,
                    entry_id=point.entry.id,
                    day=point.entry.day,
                    value=point.entry.value,
                )
                for point in snapshot.points
            ],
            date_label=snapshot.date_label,
            fell_back=snapshot.fell_back,
            insight=InsightModel.from_classification(insight),
        )

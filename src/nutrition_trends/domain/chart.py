"""Domain models for chart encoding."""

from dataclasses import dataclass, field

from nutrition_trends.domain.ranges import RangeToken
from nutrition_trends.domain.series import SeriesEntry, SeriesPoint


@dataclass(frozen=True)
class ChartGeometry:
    """Graph dimensions supplied by the rendering layer."""

    width: float = 300
    height: float = 260
    padding: float = 40

    @property
    def inner_width(self) -> float:
        return self.width - self.padding * 2

    @property
    def inner_height(self) -> float:
        return self.height - self.padding * 2


@dataclass(frozen=True)
class AxisScale:
    """Padded numeric domain with whole-number ticks."""

    min: float
    max: float
    range: float
    ticks: list[float]


@dataclass(frozen=True)
class MoveTo:
    x: float
    y: float

    def to_svg(self) -> str:
        return f"M {self.x} {self.y}"


@dataclass(frozen=True)
class LineTo:
    x: float
    y: float

    def to_svg(self) -> str:
        return f"L {self.x} {self.y}"


@dataclass(frozen=True)
class CubicTo:
    c1x: float
    c1y: float
    c2x: float
    c2y: float
    x: float
    y: float

    def to_svg(self) -> str:
        return f"C {self.c1x} {self.c1y}, {self.c2x} {self.c2y}, {self.x} {self.y}"


PathCommand = MoveTo | LineTo | CubicTo


@dataclass(frozen=True)
class CurvePath:
    """Path commands plus a rough length used to size reveal animations."""

    commands: list[PathCommand] = field(default_factory=list)
    length_estimate: float = 0.0

    def to_svg(self) -> str:
        """Render the commands as an SVG path ``d`` attribute."""
        return " ".join(command.to_svg() for command in self.commands)


@dataclass(frozen=True)
class ChartSnapshot:
    """Everything a renderer needs to draw one windowed series."""

    range_token: RangeToken
    entries: list[SeriesEntry]
    axis: AxisScale
    points: list[SeriesPoint]
    curve: CurvePath
    date_label: str
    fell_back: bool = False

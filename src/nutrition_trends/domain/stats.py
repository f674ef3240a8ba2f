"""Domain models for nutrition statistics."""

from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum


@dataclass(frozen=True)
class MealLogRow:
    """Summary data for a logged meal."""

    logged_at: datetime
    total_calories: float
    total_protein_g: float
    total_fat_g: float
    total_carbs_g: float


@dataclass(frozen=True)
class DailyTotals:
    """Daily total macros."""

    day: date
    calories: float
    protein_g: float
    fat_g: float
    carbs_g: float
    meal_count: int = 0
    last_logged_at: datetime | None = None


class NutritionMetric(Enum):
    """Day-bucketed nutrition series that can be charted."""

    CALORIES = "calories"
    PROTEIN = "protein_g"
    FAT = "fat_g"
    CARBS = "carbs_g"

    @property
    def unit_label(self) -> str:
        return "kcal" if self is NutritionMetric.CALORIES else "g"

    @property
    def subject(self) -> str:
        return {
            NutritionMetric.CALORIES: "calorie intake",
            NutritionMetric.PROTEIN: "protein intake",
            NutritionMetric.FAT: "fat intake",
            NutritionMetric.CARBS: "carb intake",
        }[self]

    def read(self, totals: DailyTotals) -> float:
        """Return this metric's value from a day's totals."""
        return float(getattr(totals, self.value))


@dataclass(frozen=True)
class NutritionTargets:
    """Daily intake targets; unset or non-positive targets count as absent."""

    calories: float | None = None
    protein_g: float | None = None
    fat_g: float | None = None
    carbs_g: float | None = None

    def target_for(self, metric: NutritionMetric) -> float | None:
        value = getattr(self, metric.value)
        if value is None or value <= 0:
            return None
        return float(value)

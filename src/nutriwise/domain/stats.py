"""Domain models for daily statistics."""

from dataclasses import dataclass
from datetime import date


@dataclass(frozen=True)
class DailyTotals:
    """Unrounded nutrition and exercise totals for one local day."""

    day: date
    calories: float
    protein: float
    carbs: float
    fat: float
    burned: float


@dataclass(frozen=True)
class TrendPoint:
    """Food calories for one day of the trend window."""

    day: date
    label: str
    calories: float

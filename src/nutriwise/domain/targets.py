"""Domain models for calorie and macro targets."""

from dataclasses import dataclass


@dataclass(frozen=True)
class MacroTargets:
    """Daily macro targets in whole grams."""

    protein: int
    carbs: int
    fat: int


@dataclass(frozen=True)
class TargetResult:
    """Calorie target, macro targets and an optional advice message."""

    calorie_target: int
    macro_targets: MacroTargets
    advice_message: str

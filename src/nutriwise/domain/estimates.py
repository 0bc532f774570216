"""Typed results of the remote estimator and their normalization."""

from pydantic import BaseModel, Field

from nutriwise.domain.logs import FoodItem
from nutriwise.domain.numbers import to_number
from nutriwise.errors import MalformedResponseError


class FoodAnalysis(BaseModel):
    """Items detected in a meal description or photo."""

    items: list[FoodItem] = Field(default_factory=list)
    clarification: str | None = None


class Refinement(BaseModel):
    """Items updated after a user instruction, plus the assistant reply."""

    items: list[FoodItem] = Field(default_factory=list)
    message: str = ""


class ExerciseEstimate(BaseModel):
    """Calories burned by an exercise session."""

    calories: float = Field(default=0.0, ge=0.0)
    note: str = ""


def parse_food_analysis(raw: object) -> FoodAnalysis:
    """Normalize an analyzeImageOrText response."""
    data = _require_object(raw)
    items = _parse_items(data.get("items"))
    question = data.get("clarificationQuestion")
    clarification = (
        question
        if data.get("clarificationNeeded") and isinstance(question, str) and question
        else None
    )
    return FoodAnalysis(items=items, clarification=clarification)


def parse_refinement(raw: object) -> Refinement:
    """Normalize a refineAnalyzedLogs response."""
    data = _require_object(raw)
    message = data.get("assistantResponse")
    return Refinement(
        items=_parse_items(data.get("updatedItems")),
        message=message if isinstance(message, str) else "",
    )


def parse_exercise_estimate(raw: object) -> ExerciseEstimate:
    """Normalize an estimateExerciseCalories response."""
    data = _require_object(raw)
    note = data.get("note")
    return ExerciseEstimate(
        calories=max(to_number(data.get("calories")), 0.0),
        note=note if isinstance(note, str) else "",
    )


def parse_text(raw: object) -> str:
    """Extract the text field of advice, feedback and chat responses."""
    data = _require_object(raw)
    text = data.get("text")
    if not isinstance(text, str):
        raise MalformedResponseError("Estimator response is missing text")
    return text


def _require_object(raw: object) -> dict[str, object]:
    if not isinstance(raw, dict):
        raise MalformedResponseError("Estimator response is not a JSON object")
    return raw


def _parse_items(raw_items: object) -> list[FoodItem]:
    if raw_items is None:
        return []
    if not isinstance(raw_items, list):
        raise MalformedResponseError("Estimator items are not a list")
    return [FoodItem.from_estimate(item) for item in raw_items if isinstance(item, dict)]

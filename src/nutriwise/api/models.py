"""Pydantic models for API request bodies."""

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from nutriwise.domain.logs import FoodItem, Intensity


class _Body(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class FoodEntryRequest(_Body):
    """New food entry."""

    items: list[FoodItem]
    image: str | None = None


class ExerciseEntryRequest(_Body):
    """New exercise entry; zero calories asks the estimator."""

    name: str = Field(min_length=1)
    duration_minutes: int = Field(gt=0)
    calories_burned: float = 0.0
    intensity: Intensity = "medium"


class NoteEntryRequest(_Body):
    """New note entry."""

    note_content: str


class QuantityRequest(_Body):
    """New quantity for a food item."""

    quantity: float = Field(gt=0)


class AnalysisRequest(_Body):
    """Meal description and optional base64 photo to analyze."""

    text_input: str = ""
    image_base64: str | None = None


class RefineRequest(_Body):
    """Instruction to apply to analyzed items."""

    items: list[FoodItem]
    instruction: str = Field(min_length=1)


class ExerciseEstimateRequest(_Body):
    """Exercise to estimate calories for."""

    name: str = Field(min_length=1)
    duration_minutes: int = Field(gt=0)
    intensity: Intensity = "medium"


class ChatRequest(_Body):
    """User chat message."""

    text: str = Field(min_length=1)

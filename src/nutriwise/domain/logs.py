"""Log entry models: food, exercise and note entries."""

from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, field_validator
from pydantic.alias_generators import to_camel

from nutriwise.domain.numbers import round_half_up, round_int, to_number

Confidence = Literal["high", "medium", "low"]
Intensity = Literal["low", "medium", "high"]

_CONFIDENCE_LEVELS = {"high", "medium", "low"}
_INTENSITY_LEVELS = {"low", "medium", "high"}

_MODEL_CONFIG = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class FoodItem(BaseModel):
    """Single food item with current and per-unit macros."""

    model_config = _MODEL_CONFIG

    name: str = "item"
    quantity: float = 1.0
    unit: str = "serving"
    calories: float = 0.0
    protein: float = 0.0
    carbs: float = 0.0
    fat: float = 0.0
    base_calories: float = 0.0
    base_protein: float = 0.0
    base_carbs: float = 0.0
    base_fat: float = 0.0
    confidence: Confidence = "medium"
    notes: str | None = None

    @field_validator(
        "calories",
        "protein",
        "carbs",
        "fat",
        "base_calories",
        "base_protein",
        "base_carbs",
        "base_fat",
        mode="before",
    )
    @classmethod
    def _coerce_macro(cls, value: object) -> float:
        return max(to_number(value), 0.0)

    @field_validator("quantity", mode="before")
    @classmethod
    def _coerce_quantity(cls, value: object) -> float:
        quantity = to_number(value)
        return quantity if quantity > 0 else 1.0

    @field_validator("confidence", mode="before")
    @classmethod
    def _coerce_confidence(cls, value: object) -> str:
        return value if value in _CONFIDENCE_LEVELS else "medium"

    @field_validator("name", mode="before")
    @classmethod
    def _coerce_name(cls, value: object) -> str:
        return value if isinstance(value, str) and value.strip() else "item"

    @field_validator("unit", mode="before")
    @classmethod
    def _coerce_unit(cls, value: object) -> str:
        return value if isinstance(value, str) and value.strip() else "serving"

    @classmethod
    def from_estimate(cls, raw: dict[str, object]) -> "FoodItem":
        """Build an item from an estimator item, deriving per-unit values."""
        quantity = to_number(raw.get("quantityAmount"))
        if quantity <= 0:
            quantity = 1.0
        calories = max(to_number(raw.get("calories")), 0.0)
        protein = max(to_number(raw.get("protein")), 0.0)
        carbs = max(to_number(raw.get("carbs")), 0.0)
        fat = max(to_number(raw.get("fat")), 0.0)
        notes = raw.get("notes")
        return cls(
            name=str(raw.get("name") or "item"),
            quantity=quantity,
            unit=str(raw.get("quantityUnit") or "serving"),
            calories=calories,
            protein=protein,
            carbs=carbs,
            fat=fat,
            base_calories=calories / quantity,
            base_protein=protein / quantity,
            base_carbs=carbs / quantity,
            base_fat=fat / quantity,
            confidence=raw.get("confidence"),
            notes=notes if isinstance(notes, str) and notes else None,
        )

    def with_quantity(self, quantity: float) -> "FoodItem":
        """Return a copy rescaled from the per-unit values."""
        return self.model_copy(
            update={
                "quantity": quantity,
                "calories": float(round_int(self.base_calories * quantity)),
                "protein": round_half_up(self.base_protein * quantity, 1),
                "carbs": round_half_up(self.base_carbs * quantity, 1),
                "fat": round_half_up(self.base_fat * quantity, 1),
            }
        )


class ExerciseItem(BaseModel):
    """Exercise session details."""

    model_config = _MODEL_CONFIG

    name: str
    duration_minutes: int = Field(gt=0)
    calories_burned: float = 0.0
    intensity: Intensity = "medium"

    @field_validator("calories_burned", mode="before")
    @classmethod
    def _coerce_calories(cls, value: object) -> float:
        return max(to_number(value), 0.0)

    @field_validator("intensity", mode="before")
    @classmethod
    def _coerce_intensity(cls, value: object) -> str:
        return value if value in _INTENSITY_LEVELS else "medium"


class _EntryBase(BaseModel):
    model_config = _MODEL_CONFIG

    id: str
    timestamp: int


class FoodEntry(_EntryBase):
    """Meal log entry."""

    type: Literal["food"] = "food"
    items: list[FoodItem] = Field(default_factory=list)
    image: str | None = None


class ExerciseEntry(_EntryBase):
    """Exercise log entry."""

    type: Literal["exercise"] = "exercise"
    exercise: ExerciseItem


class NoteEntry(_EntryBase):
    """Free-form note entry."""

    type: Literal["note"] = "note"
    note_content: str = ""


LogEntry = Annotated[
    FoodEntry | ExerciseEntry | NoteEntry, Field(discriminator="type")
]

LOG_ENTRY_ADAPTER: TypeAdapter[LogEntry] = TypeAdapter(LogEntry)
LOG_LIST_ADAPTER: TypeAdapter[list[LogEntry]] = TypeAdapter(list[LogEntry])


def dump_entry(entry: LogEntry) -> dict[str, object]:
    """Return the JSON-ready camelCase representation of an entry."""
    return entry.model_dump(mode="json", by_alias=True, exclude_none=True)


def dump_entries(entries: list[LogEntry]) -> list[dict[str, object]]:
    """Return JSON-ready representations of entries."""
    return [dump_entry(entry) for entry in entries]


def strip_image(entry: LogEntry) -> LogEntry:
    """Drop the attached image payload, if any."""
    if isinstance(entry, FoodEntry) and entry.image is not None:
        return entry.model_copy(update={"image": None})
    return entry

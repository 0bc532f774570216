"""User profile model."""

from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class Gender(StrEnum):
    """Gender used for the BMR offset."""

    MALE = "male"
    FEMALE = "female"
    OTHER = "other"


class ActivityLevel(StrEnum):
    """Self-reported activity level."""

    SEDENTARY = "sedentary"
    LIGHT = "light"
    MODERATE = "moderate"
    ACTIVE = "active"
    ATHLETE = "athlete"


class Goal(StrEnum):
    """Body composition goal."""

    LOSE_FAT = "lose_fat"
    MAINTAIN = "maintain"
    GAIN_MUSCLE = "gain_muscle"


class Profile(BaseModel):
    """Physiological and goal attributes of the user."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        allow_inf_nan=False,
    )

    name: str = "User"
    age: int = Field(default=30, gt=0)
    height_cm: float = Field(default=175, ge=0)
    weight_kg: float = Field(default=70, ge=0)
    gender: Gender = Gender.MALE
    activity_level: ActivityLevel = ActivityLevel.MODERATE
    goal: Goal = Goal.MAINTAIN
    dietary_preferences: str = "none"

    def to_payload(self) -> dict[str, object]:
        """Return the JSON-ready camelCase representation."""
        return self.model_dump(mode="json", by_alias=True)

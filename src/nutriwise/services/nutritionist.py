"""Estimator backend: dispatches `{action, payload}` requests to an LLM."""

import base64
import binascii
import json
import logging
from dataclasses import dataclass
from typing import Protocol

_logger = logging.getLogger(__name__)

SYSTEM_INSTRUCTIONS = (
    "You are a specialized nutritionist AI. Your estimates should be "
    "evidence-based. If an image is blurry or ambiguous, mark confidence as low."
)

FOOD_ITEM_SCHEMA: dict[str, object] = {
    "type": "object",
    "properties": {
        "name": {"type": "string"},
        "quantityAmount": {"type": "number"},
        "quantityUnit": {"type": "string"},
        "calories": {"type": "number"},
        "protein": {"type": "number"},
        "carbs": {"type": "number"},
        "fat": {"type": "number"},
        "confidence": {"type": "string", "enum": ["high", "medium", "low"]},
        "notes": {"anyOf": [{"type": "string"}, {"type": "null"}]},
    },
    "required": [
        "name",
        "quantityAmount",
        "quantityUnit",
        "calories",
        "protein",
        "carbs",
        "fat",
        "confidence",
        "notes",
    ],
    "additionalProperties": False,
}

ANALYSIS_SCHEMA: dict[str, object] = {
    "type": "object",
    "properties": {
        "items": {"type": "array", "items": FOOD_ITEM_SCHEMA},
        "clarificationNeeded": {"type": "boolean"},
        "clarificationQuestion": {"anyOf": [{"type": "string"}, {"type": "null"}]},
    },
    "required": ["items", "clarificationNeeded", "clarificationQuestion"],
    "additionalProperties": False,
}

REFINEMENT_SCHEMA: dict[str, object] = {
    "type": "object",
    "properties": {
        "updatedItems": {"type": "array", "items": FOOD_ITEM_SCHEMA},
        "assistantResponse": {"type": "string"},
    },
    "required": ["updatedItems", "assistantResponse"],
    "additionalProperties": False,
}

EXERCISE_SCHEMA: dict[str, object] = {
    "type": "object",
    "properties": {
        "calories": {"type": "number"},
        "note": {"type": "string"},
    },
    "required": ["calories", "note"],
    "additionalProperties": False,
}

ACTIONS = (
    "analyzeImageOrText",
    "refineAnalyzedLogs",
    "estimateExerciseCalories",
    "getPersonalizedAdvice",
    "getInstantFeedback",
    "chatWithNutritionist",
)


class InvalidRequestError(ValueError):
    """Request body or action is not acceptable."""


class ConfigurationError(RuntimeError):
    """Backend is missing required configuration."""


class NutritionistClient(Protocol):
    """Interface for the LLM behind the estimator."""

    async def generate_json(  # noqa: PLR0913
        self,
        *,
        model: str,
        reasoning_effort: str | None,
        store: bool,
        instructions: str | None,
        prompt: str,
        image_data_url: str | None,
        schema_name: str,
        schema: dict[str, object],
    ) -> dict[str, object]:
        """Return structured output matching the schema."""

    async def generate_text(  # noqa: PLR0913
        self,
        *,
        model: str,
        reasoning_effort: str | None,
        store: bool,
        instructions: str | None,
        messages: list[dict[str, str]],
    ) -> str:
        """Return a free-text reply to the conversation."""


@dataclass
class NutritionistService:
    """Builds prompts per action and validates the request payloads."""

    client: NutritionistClient | None
    model: str
    reasoning_effort: str | None
    store: bool

    async def handle(self, action: object, payload: object) -> dict[str, object]:
        """Run an estimator action and return its JSON response body."""
        if not action or not isinstance(action, str):
            raise InvalidRequestError("Missing action in request body")
        if action not in ACTIONS:
            raise InvalidRequestError("Invalid action")
        if self.client is None:
            raise ConfigurationError(
                "Server Configuration Error: API key is missing."
            )
        if not isinstance(payload, dict):
            raise InvalidRequestError("Missing payload in request body")
        _logger.info("Processing action: %s", action)
        if action == "analyzeImageOrText":
            return await self._analyze(payload)
        if action == "refineAnalyzedLogs":
            return await self._refine(payload)
        if action == "estimateExerciseCalories":
            return await self._estimate_exercise(payload)
        if action == "getPersonalizedAdvice":
            return await self._advice(payload)
        if action == "getInstantFeedback":
            return await self._feedback(payload)
        return await self._chat(payload)

    async def _analyze(self, payload: dict[str, object]) -> dict[str, object]:
        text = payload.get("textInput") or "No description provided."
        image = payload.get("imageBase64")
        image_data_url = _to_data_url(_decode_image(image)) if image else None
        prompt = (
            "Analyze the provided food input (image or text). "
            "Estimate the nutritional content for each distinct item. "
            "Prioritize scientific accuracy and standard nutritional databases.\n"
            "Break down quantity into a number and a unit. "
            'Example: "2 eggs" -> quantityAmount: 2, quantityUnit: "large eggs". '
            'Example: "150g Chicken" -> quantityAmount: 150, quantityUnit: "g".\n'
            f"User Description: {text}"
        )
        return await self._json(
            prompt, "food_analysis", ANALYSIS_SCHEMA, image_data_url=image_data_url
        )

    async def _refine(self, payload: dict[str, object]) -> dict[str, object]:
        prompt = (
            f"Current Food List: {json.dumps(payload.get('currentItems') or [])}\n"
            f'User Instruction: "{payload.get("userInstruction") or ""}"\n\n'
            "Update the food list based on the user's instruction.\n"
            "- If the user corrects a quantity, update the amount and recalculate "
            "calories and macros from standard data.\n"
            "- If the user adds an item, estimate its nutrition.\n"
            "- If the user asks a question, answer it in assistantResponse and "
            "keep the items unchanged.\n"
            "- If the user removes an item, remove it.\n"
            "Return the full updated list of items."
        )
        return await self._json(prompt, "food_refinement", REFINEMENT_SCHEMA)

    async def _estimate_exercise(self, payload: dict[str, object]) -> dict[str, object]:
        profile = _as_dict(payload.get("profile"))
        name = payload.get("name") or ""
        prompt = (
            "Estimate the calories burned for this activity.\n"
            f'Activity Name: "{name}"\n'
            f"Duration: {payload.get('duration')} minutes\n"
            f"Intensity: {payload.get('intensity')}\n"
            f"{_physiology(profile)}\n"
            f'If "{name}" is not a recognized exercise, treat it as sedentary, '
            "give a low estimate and explain in note. "
            "Calculate calories from MET values adjusted for the user's stats."
        )
        return await self._json(prompt, "exercise_estimate", EXERCISE_SCHEMA)

    async def _advice(self, payload: dict[str, object]) -> dict[str, object]:
        profile = _as_dict(payload.get("profile"))
        logs = payload.get("logs")
        recent = logs[:20] if isinstance(logs, list) else []
        prompt = (
            "Analyze these user logs and profile to find trends and offer body "
            "recomposition advice.\n"
            f"Profile: {json.dumps(profile)}\n"
            f"Recent Logs: {json.dumps(recent)}\n"
            "Consider age, gender-related physiological factors and weight. "
            "Provide a very concise summary (max 2 short sentences)."
        )
        text = await self._text(None, [{"role": "user", "content": prompt}])
        return {"text": text or "No advice available."}

    async def _feedback(self, payload: dict[str, object]) -> dict[str, object]:
        profile = _as_dict(payload.get("profile"))
        prompt = (
            "The user just logged this entry.\n"
            f"Entry: {json.dumps(payload.get('entry') or {})}\n"
            f"Goal: {profile.get('goal', 'maintain')}\n"
            "Reply with one short, encouraging and specific sentence."
        )
        text = await self._text(None, [{"role": "user", "content": prompt}])
        return {"text": text or "Entry saved successfully!"}

    async def _chat(self, payload: dict[str, object]) -> dict[str, object]:
        context = _as_dict(payload.get("context"))
        instructions = (
            "You are a supportive, evidence-based nutritionist assistant.\n"
            f"Profile: {json.dumps(context.get('profile') or {})}\n"
            f"Recent Logs (History): {json.dumps(context.get('logs') or [])}\n"
            "Answer questions about nutrition, exercise, and the user's data. "
            "Be encouraging but scientifically rigorous. Keep responses concise. "
            "Consider age, gender, and hormonal factors."
        )
        messages = _history_messages(payload.get("history"))
        message = payload.get("message")
        if isinstance(message, str) and message and (
            not messages or messages[-1] != {"role": "user", "content": message}
        ):
            messages.append({"role": "user", "content": message})
        return {"text": await self._text(instructions, messages)}

    async def _json(
        self,
        prompt: str,
        schema_name: str,
        schema: dict[str, object],
        image_data_url: str | None = None,
    ) -> dict[str, object]:
        return await self.client.generate_json(
            model=self.model,
            reasoning_effort=self.reasoning_effort,
            store=self.store,
            instructions=SYSTEM_INSTRUCTIONS,
            prompt=prompt,
            image_data_url=image_data_url,
            schema_name=schema_name,
            schema=schema,
        )

    async def _text(
        self, instructions: str | None, messages: list[dict[str, str]]
    ) -> str:
        return await self.client.generate_text(
            model=self.model,
            reasoning_effort=self.reasoning_effort,
            store=self.store,
            instructions=instructions,
            messages=messages,
        )


def _as_dict(value: object) -> dict[str, object]:
    return value if isinstance(value, dict) else {}


def _physiology(profile: dict[str, object]) -> str:
    return (
        "User Physiology: "
        f"Age {profile.get('age')}, Gender {profile.get('gender')}, "
        f"Weight {profile.get('weightKg')}kg, Height {profile.get('heightCm')}cm"
    )


def _history_messages(history: object) -> list[dict[str, str]]:
    """Convert `{role, parts: [{text}]}` turns into LLM chat messages."""
    messages: list[dict[str, str]] = []
    if not isinstance(history, list):
        return messages
    for turn in history:
        if not isinstance(turn, dict):
            continue
        parts = turn.get("parts")
        text = "".join(
            str(part.get("text", ""))
            for part in parts or []
            if isinstance(part, dict)
        )
        if not text:
            continue
        role = "assistant" if turn.get("role") == "model" else "user"
        messages.append({"role": role, "content": text})
    return messages


def _decode_image(value: object) -> bytes:
    if not isinstance(value, str):
        raise InvalidRequestError("imageBase64 must be a base64 string")
    try:
        return base64.b64decode(value, validate=True)
    except binascii.Error as exc:
        raise InvalidRequestError("imageBase64 is not valid base64") from exc


def _to_data_url(image_bytes: bytes) -> str:
    """Convert bytes to a base64 data URL for image input."""
    mime_type = _detect_mime_type(image_bytes)
    encoded = base64.b64encode(image_bytes).decode("utf-8")
    return f"data:{mime_type};base64,{encoded}"


def _detect_mime_type(image_bytes: bytes) -> str:
    """Infer a basic image MIME type from file signatures."""
    if image_bytes.startswith(b"\xff\xd8\xff"):
        return "image/jpeg"
    if image_bytes.startswith(b"\x89PNG\r\n\x1a\n"):
        return "image/png"
    if image_bytes[:4] == b"RIFF" and image_bytes[8:12] == b"WEBP":
        return "image/webp"
    return "image/jpeg"

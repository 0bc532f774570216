"""Client-side access to the remote nutrition estimator."""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import Protocol

from nutriwise.domain.chat import ChatMessage
from nutriwise.domain.estimates import (
    ExerciseEstimate,
    FoodAnalysis,
    Refinement,
    parse_exercise_estimate,
    parse_food_analysis,
    parse_refinement,
    parse_text,
)
from nutriwise.domain.logs import FoodItem, LogEntry, dump_entries, dump_entry, strip_image
from nutriwise.domain.numbers import round_int
from nutriwise.domain.profile import Profile
from nutriwise.errors import EstimatorError
from nutriwise.services.retry import RetryPolicy

CONTEXT_LOG_LIMIT = 20

ANALYZE_ATTEMPTS = 3
REFINE_ATTEMPTS = 2
EXERCISE_ATTEMPTS = 2
ADVICE_ATTEMPTS = 1
FEEDBACK_ATTEMPTS = 1
CHAT_ATTEMPTS = 2

ADVICE_FALLBACK = "Could not generate advice right now. Please try again later."
OFFLINE_EXERCISE_NOTE = "Offline estimate (API unavailable)."

_OFFLINE_METS = {"low": 4, "medium": 8, "high": 12}
_DEFAULT_MET = 6

_logger = logging.getLogger(__name__)


class EstimatorClient(Protocol):
    """Transport for `{action, payload}` estimator requests."""

    async def call(self, action: str, payload: dict[str, object]) -> object:
        """Send an action and return the decoded JSON response."""


@dataclass
class EstimatorService:
    """Calls the estimator with per-action retry budgets and fallbacks."""

    client: EstimatorClient
    retry_policy: RetryPolicy = field(default_factory=RetryPolicy)
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep

    async def analyze(self, text: str, image_base64: str | None = None) -> FoodAnalysis:
        """Estimate food items from a description and optional photo."""
        raw = await self._call(
            "analyzeImageOrText",
            {"textInput": text, "imageBase64": image_base64},
            ANALYZE_ATTEMPTS,
        )
        return parse_food_analysis(raw)

    async def refine(self, items: list[FoodItem], instruction: str) -> Refinement:
        """Apply a user instruction to analyzed items; keeps items on failure."""
        try:
            raw = await self._call(
                "refineAnalyzedLogs",
                {
                    "currentItems": [
                        item.model_dump(mode="json", by_alias=True) for item in items
                    ],
                    "userInstruction": instruction,
                },
                REFINE_ATTEMPTS,
            )
            return parse_refinement(raw)
        except EstimatorError as exc:
            return Refinement(items=items, message=f"Error: {exc}")

    async def estimate_exercise(
        self, name: str, duration_minutes: int, intensity: str, profile: Profile
    ) -> ExerciseEstimate:
        """Estimate calories burned, falling back to a local MET estimate."""
        try:
            raw = await self._call(
                "estimateExerciseCalories",
                {
                    "name": name,
                    "duration": duration_minutes,
                    "intensity": intensity,
                    "profile": profile.to_payload(),
                },
                EXERCISE_ATTEMPTS,
            )
            return parse_exercise_estimate(raw)
        except EstimatorError:
            _logger.warning("Using offline exercise estimate for %s", name)
            return ExerciseEstimate(
                calories=offline_exercise_calories(
                    duration_minutes, intensity, profile.weight_kg
                ),
                note=OFFLINE_EXERCISE_NOTE,
            )

    async def advice(self, logs: list[LogEntry], profile: Profile) -> str:
        """Return short personalized advice or a generic fallback."""
        try:
            raw = await self._call(
                "getPersonalizedAdvice",
                {"logs": context_logs(logs), "profile": profile.to_payload()},
                ADVICE_ATTEMPTS,
            )
            return parse_text(raw)
        except EstimatorError:
            return ADVICE_FALLBACK

    async def instant_feedback(self, entry: LogEntry, profile: Profile) -> str:
        """Return one-line feedback on a saved entry; raises on failure."""
        raw = await self._call(
            "getInstantFeedback",
            {"entry": dump_entry(strip_image(entry)), "profile": profile.to_payload()},
            FEEDBACK_ATTEMPTS,
        )
        return parse_text(raw)

    async def chat(
        self,
        history: list[ChatMessage],
        message: str,
        profile: Profile,
        logs: list[LogEntry],
    ) -> str:
        """Return the nutritionist reply or an inline error message."""
        try:
            raw = await self._call(
                "chatWithNutritionist",
                {
                    "history": [
                        {"role": msg.role, "parts": [{"text": msg.text}]}
                        for msg in history
                    ],
                    "message": message,
                    "context": {
                        "profile": profile.to_payload(),
                        "logs": context_logs(logs),
                    },
                },
                CHAT_ATTEMPTS,
            )
            return parse_text(raw)
        except EstimatorError as exc:
            return f"Error connecting to assistant: {exc}"

    async def _call(
        self, action: str, payload: dict[str, object], attempts: int
    ) -> object:
        policy = self.retry_policy.with_attempts(attempts)
        return await policy.run(
            lambda: self.client.call(action, payload), action=action, sleep=self.sleep
        )


def context_logs(logs: list[LogEntry]) -> list[dict[str, object]]:
    """Return the most recent entries without images, ready to send."""
    return dump_entries([strip_image(entry) for entry in logs[:CONTEXT_LOG_LIMIT]])


def offline_exercise_calories(
    duration_minutes: int, intensity: str, weight_kg: float
) -> float:
    """Estimate calories burned from a MET value for the intensity."""
    met = _OFFLINE_METS.get(intensity, _DEFAULT_MET)
    return float(round_int(met * 3.5 * weight_kg / 200 * duration_minutes))

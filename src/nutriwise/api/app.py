"""FastAPI application factory."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import date

from fastapi import Body, FastAPI, HTTPException, Request, status
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from nutriwise.api.estimator import router as estimator_router
from nutriwise.api.models import (
    AnalysisRequest,
    ChatRequest,
    ExerciseEntryRequest,
    ExerciseEstimateRequest,
    FoodEntryRequest,
    NoteEntryRequest,
    QuantityRequest,
    RefineRequest,
)
from nutriwise.app_logging import configure_logging
from nutriwise.containers import AppContainer
from nutriwise.domain.logs import (
    LOG_ENTRY_ADAPTER,
    ExerciseItem,
    FoodItem,
    LogEntry,
    dump_entry,
)
from nutriwise.domain.stats import DailyTotals
from nutriwise.domain.targets import TargetResult
from nutriwise.errors import BackupImportError, EntryNotFoundError, EstimatorError
from nutriwise.services.dashboard import Dashboard

SAVED_MESSAGE = "Entry saved successfully!"
COPIED_MESSAGE = "Copied to today's log!"


def create_app(container: AppContainer) -> FastAPI:  # noqa: PLR0915
    """Create a FastAPI app configured with dependencies."""
    configure_logging(container.settings.log_level)
    logger = logging.getLogger(__name__)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        yield
        await app.state.container.close_resources()

    app = FastAPI(lifespan=lifespan)
    app.state.container = container

    app.include_router(estimator_router)

    @app.exception_handler(EntryNotFoundError)
    async def entry_not_found(_: Request, exc: EntryNotFoundError) -> JSONResponse:
        return JSONResponse(
            {"error": f"Entry not found: {exc}"},
            status_code=status.HTTP_404_NOT_FOUND,
        )

    @app.exception_handler(BackupImportError)
    async def invalid_backup(_: Request, exc: BackupImportError) -> JSONResponse:
        return JSONResponse(
            {"error": str(exc)}, status_code=status.HTTP_400_BAD_REQUEST
        )

    async def saved(entry: LogEntry) -> dict[str, object]:
        try:
            feedback = await container.estimator_service.instant_feedback(
                entry, container.session.profile
            )
        except EstimatorError:
            logger.warning("Feedback skipped for entry %s", entry.id)
            feedback = SAVED_MESSAGE
        return {"entry": dump_entry(entry), "feedback": feedback}

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    @app.get("/profile")
    async def get_profile() -> dict[str, object]:
        """Return the profile."""
        return container.profile_service.get_profile().to_payload()

    @app.put("/profile")
    async def update_profile(
        changes: dict[str, object] = Body(...),  # noqa: B008
    ) -> dict[str, object]:
        """Apply a partial profile edit."""
        try:
            profile = container.profile_service.update_profile(changes)
        except ValidationError as exc:
            raise HTTPException(
                status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
                detail=exc.errors(include_url=False, include_context=False),
            ) from exc
        return profile.to_payload()

    @app.post("/profile/reset")
    async def reset_profile() -> dict[str, object]:
        """Restore the default profile."""
        return container.profile_service.reset_profile().to_payload()

    @app.get("/logs")
    async def history() -> dict[str, object]:
        """Return entries grouped by local day, newest first."""
        return {
            "days": [
                {"date": day.isoformat(), "entries": [dump_entry(e) for e in entries]}
                for day, entries in container.stats_service.get_history()
            ]
        }

    @app.post("/logs/food")
    async def add_food(body: FoodEntryRequest) -> dict[str, object]:
        """Save a meal."""
        return await saved(container.log_service.add_food(body.items, body.image))

    @app.post("/logs/exercise")
    async def add_exercise(body: ExerciseEntryRequest) -> dict[str, object]:
        """Save an exercise session."""
        entry = await container.log_service.add_exercise(
            ExerciseItem.model_validate(body.model_dump())
        )
        return await saved(entry)

    @app.post("/logs/note")
    async def add_note(body: NoteEntryRequest) -> dict[str, object]:
        """Save a note."""
        return await saved(container.log_service.add_note(body.note_content))

    @app.put("/logs/{entry_id}")
    async def update_entry(
        entry_id: str,
        body: dict[str, object] = Body(...),  # noqa: B008
    ) -> dict[str, object]:
        """Replace an entry's content, keeping id and timestamp."""
        existing = container.log_service.get_entry(entry_id)
        try:
            entry = LOG_ENTRY_ADAPTER.validate_python(
                {**body, "id": existing.id, "timestamp": existing.timestamp}
            )
        except ValidationError as exc:
            raise HTTPException(
                status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
                detail=exc.errors(include_url=False, include_context=False),
            ) from exc
        return await saved(await container.log_service.update_entry(entry_id, entry))

    @app.delete("/logs/{entry_id}")
    async def delete_entry(entry_id: str) -> dict[str, str]:
        """Delete an entry."""
        container.log_service.delete_entry(entry_id)
        return {"status": "ok"}

    @app.post("/logs/{entry_id}/copy")
    async def copy_entry(entry_id: str) -> dict[str, object]:
        """Copy an entry into today's log."""
        entry = container.log_service.copy_entry(entry_id)
        return {"entry": dump_entry(entry), "feedback": COPIED_MESSAGE}

    @app.patch("/logs/{entry_id}/items/{index}")
    async def set_item_quantity(
        entry_id: str, index: int, body: QuantityRequest
    ) -> dict[str, object]:
        """Rescale one food item to a new quantity."""
        entry = container.log_service.set_item_quantity(entry_id, index, body.quantity)
        return {"entry": dump_entry(entry)}

    @app.post("/analysis")
    async def analyze(body: AnalysisRequest) -> dict[str, object]:
        """Estimate food items from a description and optional photo."""
        try:
            analysis = await container.estimator_service.analyze(
                body.text_input, body.image_base64
            )
        except EstimatorError as exc:
            raise HTTPException(
                status_code=status.HTTP_502_BAD_GATEWAY,
                detail=f"Analysis failed: {exc}",
            ) from exc
        return {
            "items": [_item_payload(item) for item in analysis.items],
            "clarification": analysis.clarification,
        }

    @app.post("/analysis/refine")
    async def refine(body: RefineRequest) -> dict[str, object]:
        """Apply an instruction to analyzed items."""
        result = await container.estimator_service.refine(body.items, body.instruction)
        return {
            "items": [_item_payload(item) for item in result.items],
            "message": result.message,
        }

    @app.post("/exercise/estimate")
    async def estimate_exercise(body: ExerciseEstimateRequest) -> dict[str, object]:
        """Estimate calories burned for an exercise."""
        estimate = await container.estimator_service.estimate_exercise(
            body.name, body.duration_minutes, body.intensity, container.session.profile
        )
        return {"calories": estimate.calories, "note": estimate.note}

    @app.get("/dashboard")
    async def dashboard(day: date | None = None) -> dict[str, object]:
        """Return totals, targets and trend for today (or a given day)."""
        return _dashboard_payload(container.dashboard_service.get_dashboard(day))

    @app.post("/advice")
    async def advice() -> dict[str, str]:
        """Return personalized advice from recent logs."""
        text = await container.estimator_service.advice(
            container.session.logs, container.session.profile
        )
        return {"text": text}

    @app.get("/chat")
    async def chat_history() -> dict[str, object]:
        """Return the chat transcript."""
        return {
            "messages": [
                message.model_dump(mode="json")
                for message in container.chat_service.list_messages()
            ]
        }

    @app.post("/chat")
    async def send_chat(body: ChatRequest) -> dict[str, object]:
        """Send a message to the nutritionist."""
        reply = await container.chat_service.send_message(body.text)
        return {"reply": reply.model_dump(mode="json")}

    @app.delete("/chat")
    async def clear_chat() -> dict[str, str]:
        """Clear the chat transcript."""
        container.chat_service.clear()
        return {"status": "ok"}

    @app.get("/backup")
    async def export_backup() -> dict[str, object]:
        """Export profile, logs and chat history."""
        return container.backup_service.export_document()

    @app.post("/backup")
    async def import_backup(request: Request) -> dict[str, str]:
        """Restore a backup document."""
        container.backup_service.import_document(await request.body())
        return {"status": "ok"}

    return app


def _item_payload(item: FoodItem) -> dict[str, object]:
    return item.model_dump(mode="json", by_alias=True, exclude_none=True)


def _totals_payload(totals: DailyTotals) -> dict[str, object]:
    return {
        "date": totals.day.isoformat(),
        "calories": totals.calories,
        "protein": totals.protein,
        "carbs": totals.carbs,
        "fat": totals.fat,
        "burned": totals.burned,
    }


def _targets_payload(targets: TargetResult) -> dict[str, object]:
    return {
        "calorieTarget": targets.calorie_target,
        "macroTargets": {
            "protein": targets.macro_targets.protein,
            "carbs": targets.macro_targets.carbs,
            "fat": targets.macro_targets.fat,
        },
        "adviceMessage": targets.advice_message,
    }


def _dashboard_payload(dashboard: Dashboard) -> dict[str, object]:
    return {
        "totals": _totals_payload(dashboard.totals),
        "trainingLoad": dashboard.training_load,
        "targets": _targets_payload(dashboard.targets),
        "remainingCalories": dashboard.remaining_calories,
        "trend": [
            {"date": point.day.isoformat(), "label": point.label, "calories": point.calories}
            for point in dashboard.trend
        ],
        "entries": [dump_entry(entry) for entry in dashboard.entries],
    }

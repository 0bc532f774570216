"""Log store operations: create, edit, delete, copy and rescale entries."""

import logging
from dataclasses import dataclass

from nutriwise.domain.logs import (
    ExerciseEntry,
    ExerciseItem,
    FoodEntry,
    FoodItem,
    LogEntry,
    NoteEntry,
)
from nutriwise.errors import EntryNotFoundError
from nutriwise.services.estimator import EstimatorService
from nutriwise.services.session import TrackerSession

_logger = logging.getLogger(__name__)


@dataclass
class LogService:
    """Service that mutates the log store and persists every change."""

    session: TrackerSession
    estimator_service: EstimatorService

    def list_entries(self) -> list[LogEntry]:
        """Return all entries, newest first."""
        return list(self.session.logs)

    def get_entry(self, entry_id: str) -> LogEntry:
        """Return an entry by id."""
        for entry in self.session.logs:
            if entry.id == entry_id:
                return entry
        raise EntryNotFoundError(entry_id)

    def add_food(self, items: list[FoodItem], image: str | None = None) -> FoodEntry:
        """Create a food entry."""
        entry = FoodEntry(**self._new_identity(), items=items, image=image or None)
        self._prepend(entry)
        return entry

    async def add_exercise(self, exercise: ExerciseItem) -> ExerciseEntry:
        """Create an exercise entry, estimating calories when none are given."""
        exercise = await self._with_estimated_calories(exercise)
        entry = ExerciseEntry(**self._new_identity(), exercise=exercise)
        self._prepend(entry)
        return entry

    def add_note(self, content: str) -> NoteEntry:
        """Create a note entry."""
        entry = NoteEntry(**self._new_identity(), note_content=content)
        self._prepend(entry)
        return entry

    async def update_entry(self, entry_id: str, entry: LogEntry) -> LogEntry:
        """Replace an entry's content, keeping its id and timestamp."""
        existing = self.get_entry(entry_id)
        if isinstance(entry, ExerciseEntry):
            exercise = await self._with_estimated_calories(entry.exercise)
            entry = entry.model_copy(update={"exercise": exercise})
            # The entry may have been deleted while the estimate was pending.
            existing = self.get_entry(entry_id)
        updated = entry.model_copy(
            update={"id": existing.id, "timestamp": existing.timestamp}
        )
        self.session.set_logs(
            [updated if item.id == entry_id else item for item in self.session.logs]
        )
        _logger.info("Updated %s entry %s", updated.type, entry_id)
        return updated

    def delete_entry(self, entry_id: str) -> None:
        """Remove an entry."""
        self.get_entry(entry_id)
        self.session.set_logs(
            [entry for entry in self.session.logs if entry.id != entry_id]
        )
        _logger.info("Deleted entry %s", entry_id)

    def copy_entry(self, entry_id: str) -> LogEntry:
        """Duplicate an entry into the current time."""
        source = self.get_entry(entry_id)
        entry = source.model_copy(update=self._new_identity(), deep=True)
        self._prepend(entry)
        return entry

    def set_item_quantity(
        self, entry_id: str, index: int, quantity: float
    ) -> FoodEntry:
        """Rescale one item of a food entry from its per-unit values."""
        entry = self.get_entry(entry_id)
        if not isinstance(entry, FoodEntry) or not 0 <= index < len(entry.items):
            raise EntryNotFoundError(f"{entry_id}/items/{index}")
        items = list(entry.items)
        items[index] = items[index].with_quantity(quantity)
        updated = entry.model_copy(update={"items": items})
        self.session.set_logs(
            [updated if item.id == entry_id else item for item in self.session.logs]
        )
        return updated

    async def _with_estimated_calories(self, exercise: ExerciseItem) -> ExerciseItem:
        if exercise.calories_burned > 0:
            return exercise
        estimate = await self.estimator_service.estimate_exercise(
            exercise.name,
            exercise.duration_minutes,
            exercise.intensity,
            self.session.profile,
        )
        return exercise.model_copy(update={"calories_burned": estimate.calories})

    def _new_identity(self) -> dict[str, object]:
        timestamp = self.session.clock()
        used = {entry.id for entry in self.session.logs}
        candidate = timestamp
        while str(candidate) in used:
            candidate += 1
        return {"id": str(candidate), "timestamp": timestamp}

    def _prepend(self, entry: LogEntry) -> None:
        self.session.set_logs([entry, *self.session.logs])
        _logger.info("Saved %s entry %s", entry.type, entry.id)

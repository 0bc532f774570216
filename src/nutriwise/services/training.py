"""Training-load detection for a day's exercise."""

from collections.abc import Iterable

from nutriwise.domain.logs import ExerciseEntry, ExerciseItem, LogEntry

# Substring heuristic; names like "light weight stretching" also match.
STRENGTH_KEYWORDS = ("weight", "strength", "lift")


def is_high_load(exercise: ExerciseItem) -> bool:
    """Return True for high intensity or strength-oriented exercise."""
    if exercise.intensity == "high":
        return True
    name = exercise.name.lower()
    return any(keyword in name for keyword in STRENGTH_KEYWORDS)


def detect_training_load(entries: Iterable[LogEntry]) -> bool:
    """Return True when any exercise entry signals high training load."""
    return any(
        is_high_load(entry.exercise)
        for entry in entries
        if isinstance(entry, ExerciseEntry)
    )

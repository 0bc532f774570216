"""Session-scoped tracker state with load-on-start and save-on-mutation."""

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Protocol, TypeVar

from pydantic import ValidationError

from nutriwise.domain.chat import CHAT_LIST_ADAPTER, ChatMessage, welcome_transcript
from nutriwise.domain.logs import LOG_LIST_ADAPTER, LogEntry
from nutriwise.domain.profile import Profile

LOGS_BLOB = "nutriwise_logs"
PROFILE_BLOB = "nutriwise_profile"
CHAT_BLOB = "nutriwise_chat"

_logger = logging.getLogger(__name__)

T = TypeVar("T")


class StateRepository(Protocol):
    """Storage for named JSON blobs."""

    def load_blob(self, name: str) -> str | None:
        """Return the stored JSON text for a blob, if present."""

    def save_blob(self, name: str, payload: str) -> None:
        """Replace the stored JSON text for a blob."""


def current_millis() -> int:
    """Return the current time in epoch milliseconds."""
    return int(datetime.now(tz=UTC).timestamp() * 1000)


@dataclass
class TrackerSession:
    """Profile, log store and chat transcript owned by one application."""

    repository: StateRepository
    profile: Profile = field(default_factory=Profile)
    logs: list[LogEntry] = field(default_factory=list)
    chat_history: list[ChatMessage] = field(default_factory=list)
    clock: Callable[[], int] = current_millis

    @classmethod
    def load(
        cls, repository: StateRepository, clock: Callable[[], int] = current_millis
    ) -> "TrackerSession":
        """Load all blobs, falling back to defaults for missing or corrupt ones."""
        profile = _load(repository, PROFILE_BLOB, Profile.model_validate_json)
        logs = _load(repository, LOGS_BLOB, LOG_LIST_ADAPTER.validate_json)
        chat_history = _load(repository, CHAT_BLOB, CHAT_LIST_ADAPTER.validate_json)
        return cls(
            repository=repository,
            profile=profile if profile is not None else Profile(),
            logs=logs if logs is not None else [],
            chat_history=(
                chat_history if chat_history is not None else welcome_transcript(clock())
            ),
            clock=clock,
        )

    def set_logs(self, logs: list[LogEntry]) -> None:
        """Replace the log store and persist it."""
        self.logs = logs
        self.repository.save_blob(
            LOGS_BLOB,
            LOG_LIST_ADAPTER.dump_json(logs, by_alias=True, exclude_none=True).decode(),
        )

    def set_profile(self, profile: Profile) -> None:
        """Replace the profile and persist it."""
        self.profile = profile
        self.repository.save_blob(
            PROFILE_BLOB, profile.model_dump_json(by_alias=True)
        )

    def set_chat_history(self, messages: list[ChatMessage]) -> None:
        """Replace the chat transcript and persist it."""
        self.chat_history = messages
        self.repository.save_blob(
            CHAT_BLOB, CHAT_LIST_ADAPTER.dump_json(messages).decode()
        )


def _load(
    repository: StateRepository, name: str, parse: Callable[[str], T]
) -> T | None:
    raw = repository.load_blob(name)
    if raw is None:
        return None
    try:
        return parse(raw)
    except (ValidationError, OverflowError):
        _logger.warning("Stored %s is corrupt, using defaults", name)
        return None

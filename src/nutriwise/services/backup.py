"""Backup export and restore."""

import json
import logging
from dataclasses import dataclass

from pydantic import ValidationError

from nutriwise.domain.chat import CHAT_LIST_ADAPTER
from nutriwise.domain.logs import LOG_LIST_ADAPTER, dump_entries
from nutriwise.domain.profile import Profile
from nutriwise.errors import BackupImportError
from nutriwise.services.session import TrackerSession

_logger = logging.getLogger(__name__)


@dataclass
class BackupService:
    """Exports the session to one document and restores it."""

    session: TrackerSession

    def export_document(self) -> dict[str, object]:
        """Return `{profile, logs, chatHistory}`."""
        return {
            "profile": self.session.profile.to_payload(),
            "logs": dump_entries(self.session.logs),
            "chatHistory": [
                message.model_dump(mode="json") for message in self.session.chat_history
            ],
        }

    def import_document(self, document: object) -> None:
        """Apply the fields present in a backup; state is untouched on error."""
        if isinstance(document, str | bytes):
            try:
                document = json.loads(document)
            except ValueError as exc:
                raise BackupImportError("Invalid backup file.") from exc
        if not isinstance(document, dict):
            raise BackupImportError("Invalid backup file.")
        raw_profile = document.get("profile")
        raw_logs = document.get("logs")
        raw_chat = document.get("chatHistory")
        if raw_profile is None and raw_logs is None:
            raise BackupImportError("Backup has no profile or logs.")

        profile = logs = chat = None
        try:
            if raw_profile is not None:
                profile = Profile.model_validate(raw_profile)
            if raw_logs is not None:
                logs = LOG_LIST_ADAPTER.validate_python(raw_logs)
            if raw_chat is not None:
                chat = CHAT_LIST_ADAPTER.validate_python(raw_chat)
        except (ValidationError, OverflowError) as exc:
            raise BackupImportError("Invalid backup file.") from exc

        if profile is not None:
            self.session.set_profile(profile)
        if logs is not None:
            self.session.set_logs(logs)
        if chat is not None:
            self.session.set_chat_history(chat)
        _logger.info(
            "Restored backup (profile=%s, logs=%s, chat=%s)",
            profile is not None,
            len(logs) if logs is not None else "-",
            len(chat) if chat is not None else "-",
        )

"""Nutritionist chat transcript."""

from dataclasses import dataclass

from nutriwise.domain.chat import ChatMessage
from nutriwise.services.estimator import EstimatorService
from nutriwise.services.session import TrackerSession


@dataclass
class ChatService:
    """Appends user and assistant messages to the persisted transcript."""

    session: TrackerSession
    estimator_service: EstimatorService

    def list_messages(self) -> list[ChatMessage]:
        """Return the transcript, oldest first."""
        return list(self.session.chat_history)

    async def send_message(self, text: str) -> ChatMessage:
        """Record a user message, ask the nutritionist and record the reply."""
        sent_at = self.session.clock()
        user_message = ChatMessage(
            id=str(sent_at), role="user", text=text, timestamp=sent_at
        )
        history = [*self.session.chat_history, user_message]
        self.session.set_chat_history(history)

        reply_text = await self.estimator_service.chat(
            history, text, self.session.profile, self.session.logs
        )
        replied_at = self.session.clock()
        reply = ChatMessage(
            id=str(max(replied_at, sent_at + 1)),
            role="model",
            text=reply_text,
            timestamp=replied_at,
        )
        self.session.set_chat_history([*self.session.chat_history, reply])
        return reply

    def clear(self) -> None:
        """Remove every message."""
        self.session.set_chat_history([])

"""Chat transcript models."""

from typing import Literal

from pydantic import BaseModel, TypeAdapter

WELCOME_TEXT = (
    "Hi! I can help you analyze your nutrition logs, suggest meals, "
    "or answer health questions. What can I do for you?"
)


class ChatMessage(BaseModel):
    """Single message in the nutritionist chat."""

    id: str
    role: Literal["user", "model"]
    text: str
    timestamp: int


CHAT_LIST_ADAPTER: TypeAdapter[list[ChatMessage]] = TypeAdapter(list[ChatMessage])


def welcome_transcript(timestamp: int) -> list[ChatMessage]:
    """Return the default single-message transcript."""
    return [ChatMessage(id="0", role="model", text=WELCOME_TEXT, timestamp=timestamp)]

from typing import Literal

from pydantic import BaseModel, Field


class IncomingMessage(BaseModel):
    """A single inbound chat message, discarded once it has been handled."""

    chat_id: int = Field(..., description="Telegram chat the message came from.")
    text: str | None = Field(
        default=None, description="Message text, absent for media-only messages."
    )

    @property
    def has_text(self) -> bool:
        return bool(self.text)


class ChatMessage(BaseModel):
    """Represents a single turn sent to the completion endpoint."""

    role: Literal["system", "user", "assistant"] = Field(
        ..., description="Role of the speaker for this message."
    )
    content: str = Field(..., description="Message text.")


class CompletionRequest(BaseModel):
    """Outbound payload for the chat-completion endpoint."""

    model: str
    messages: list[ChatMessage]
    temperature: float
    max_tokens: int


class ChoiceMessage(BaseModel):
    content: str


class Choice(BaseModel):
    message: ChoiceMessage


class CompletionResponse(BaseModel):
    """The part of a chat-completion response the bot reads."""

    choices: list[Choice]

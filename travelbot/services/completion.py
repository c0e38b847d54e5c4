from __future__ import annotations

import logging
from typing import List, Optional

import httpx
from langchain_core.messages import (
    BaseMessage,
    HumanMessage,
    SystemMessage,
    convert_to_openai_messages,
)
from pydantic import ValidationError

from travelbot.config import Settings
from travelbot.schemas import ChatMessage, CompletionRequest, CompletionResponse

logger = logging.getLogger(__name__)

SERVICE_ERROR_REPLY = "❌ Error al contactar al servicio de IA."


class CompletionError(RuntimeError):
    """Raised when the completion service cannot produce a usable reply."""


class MalformedCompletionError(CompletionError):
    """The completion service answered 2xx with a body the bot cannot read."""


class CompletionClient:
    """Thin wrapper around an OpenAI-compatible chat-completion endpoint."""

    SYSTEM_PROMPT = (
        "Eres 'TravelBot', un guía turístico experto, amigable y entusiasta. "
        "Tu objetivo es dar recomendaciones de viaje, describir atracciones, sugerir itinerarios "
        "y responder preguntas sobre cultura, comida y geografía de forma concisa y útil. "
        "Usa emojis para hacer la conversación más amigable (ej: 🗺️, ✈️, 🍽️, 🏛️)."
    )
    MODEL = "llama-3.3-70b-versatile"
    TEMPERATURE = 0.7
    MAX_TOKENS = 1024

    def __init__(
        self,
        api_key: str,
        api_url: str,
        *,
        timeout: float = 10.0,
        http_client: Optional[httpx.Client] = None,
    ) -> None:
        self._api_url = api_url
        self._headers = {
            "Authorization": f"Bearer {api_key}",
            "Content-Type": "application/json",
        }
        self._owns_client = http_client is None
        self._client = http_client or httpx.Client(timeout=timeout)
        self._system_message = SystemMessage(content=self.SYSTEM_PROMPT)

    @classmethod
    def from_settings(cls, settings: Settings) -> "CompletionClient":
        return cls(
            settings.require_groq_api_key(),
            settings.groq_api_url,
            timeout=settings.http_timeout_seconds,
        )

    def build_request(self, user_text: str) -> CompletionRequest:
        """Return the payload for one exchange: persona first, user text second."""
        conversation: List[BaseMessage] = [
            self._system_message,
            HumanMessage(content=user_text),
        ]
        return CompletionRequest(
            model=self.MODEL,
            messages=[
                ChatMessage.model_validate(item)
                for item in convert_to_openai_messages(conversation)
            ],
            temperature=self.TEMPERATURE,
            max_tokens=self.MAX_TOKENS,
        )

    def complete(self, user_text: str) -> str:
        """Send ``user_text`` to the completion endpoint and return the reply.

        Transport failures, non-2xx statuses and empty bodies all collapse
        into :data:`SERVICE_ERROR_REPLY`; the cause is only logged. A 2xx
        body that does not carry ``choices[0].message.content`` raises
        :class:`MalformedCompletionError`.
        """
        payload = self.build_request(user_text)
        try:
            response = self._client.post(
                self._api_url,
                json=payload.model_dump(),
                headers=self._headers,
            )
        except httpx.HTTPError as exc:
            logger.error("Completion request to %s failed: %s", self._api_url, exc)
            return SERVICE_ERROR_REPLY

        if not response.is_success or not response.content:
            logger.error("Completion API error: %s", response.status_code)
            return SERVICE_ERROR_REPLY

        try:
            parsed = CompletionResponse.model_validate_json(response.content)
        except ValidationError as exc:
            raise MalformedCompletionError(
                f"Unexpected completion response shape: {exc.error_count()} error(s)"
            ) from exc
        if not parsed.choices:
            raise MalformedCompletionError("Completion response has no choices")
        return parsed.choices[0].message.content

    def close(self) -> None:
        if self._owns_client:
            self._client.close()

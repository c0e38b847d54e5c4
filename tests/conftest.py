"""Shared fakes for the relay tests."""

from __future__ import annotations

import json
from types import SimpleNamespace
from typing import Callable, List, Optional

import httpx
import pytest
from telebot.apihelper import ApiHTTPException

from travelbot.services.completion import CompletionClient


class FakeBot:
    """Records Telegram calls instead of sending them."""

    def __init__(self, events: Optional[list] = None) -> None:
        self.events = events if events is not None else []
        self.send_error: Optional[Exception] = None
        self.action_error: Optional[Exception] = None

    def send_message(self, chat_id, text):
        if self.send_error is not None:
            raise self.send_error
        self.events.append(("text", chat_id, text))

    def send_chat_action(self, chat_id, action):
        if self.action_error is not None:
            raise self.action_error
        self.events.append(("action", chat_id, action))


class InlineDispatcher:
    """Runs jobs on the calling thread, or refuses them all."""

    def __init__(self, accept: bool = True) -> None:
        self.accept = accept
        self.submitted: List[tuple] = []

    def submit(self, fn, *args) -> bool:
        if not self.accept:
            return False
        self.submitted.append(args)
        fn(*args)
        return True


@pytest.fixture
def events() -> list:
    return []


@pytest.fixture
def fake_bot(events) -> FakeBot:
    return FakeBot(events)


@pytest.fixture
def inline_dispatcher() -> InlineDispatcher:
    return InlineDispatcher()


@pytest.fixture
def refusing_dispatcher() -> InlineDispatcher:
    return InlineDispatcher(accept=False)


@pytest.fixture
def completion_body() -> Callable[[str], dict]:
    def build(content: str) -> dict:
        return {"choices": [{"message": {"role": "assistant", "content": content}}]}

    return build


@pytest.fixture
def make_client() -> Callable[[Callable[[httpx.Request], httpx.Response]], CompletionClient]:
    """Factory for completion clients backed by an in-process transport."""

    def build(handler: Callable[[httpx.Request], httpx.Response]) -> CompletionClient:
        http_client = httpx.Client(transport=httpx.MockTransport(handler))
        return CompletionClient(
            "test-key", "https://llm.test/v1/chat/completions", http_client=http_client
        )

    return build


@pytest.fixture
def user_text_of() -> Callable[[httpx.Request], str]:
    def extract(request: httpx.Request) -> str:
        return json.loads(request.content)["messages"][1]["content"]

    return extract


@pytest.fixture
def gateway_error() -> Callable[[str], ApiHTTPException]:
    """Telegram answering with a non-JSON 502 page."""

    def build(method: str) -> ApiHTTPException:
        response = SimpleNamespace(
            status_code=502,
            reason="Bad Gateway",
            text="<html><body>502 Bad Gateway</body></html>",
        )
        return ApiHTTPException(method, response)

    return build

"""Shared fixtures and stubs for all tests."""

from __future__ import annotations

import json
from typing import Any, Callable, Sequence, Union

import httpx
import pytest

from ollama_datagen.client import OllamaClient
from ollama_datagen.types.chat import ChatResult, Message, PromptSettings


class RecordingSleep:
    """Stands in for asyncio.sleep and remembers every requested delay."""

    def __init__(self) -> None:
        self.delays: list[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)


class StubClient:
    """Inference client that replays scripted replies or exceptions in order."""

    def __init__(self, replies: Sequence[Union[str, Exception]]) -> None:
        self.replies = list(replies)
        self.calls: list[tuple[list[Message], PromptSettings]] = []
        self.closed = False

    async def send(
        self, messages: Sequence[Message], settings: PromptSettings
    ) -> ChatResult:
        self.calls.append((list(messages), settings))
        if not self.replies:
            raise AssertionError("StubClient ran out of scripted replies")
        reply = self.replies.pop(0)
        if isinstance(reply, Exception):
            raise reply
        return ChatResult(content=reply)

    async def aclose(self) -> None:
        self.closed = True

    def prompt(self, index: int = -1) -> str:
        messages, settings = self.calls[index]
        return settings.format_raw_prompt(messages)


def ollama_client(
    handler: Callable[[httpx.Request], httpx.Response], model: str = "mistral:7b"
) -> OllamaClient:
    transport = httpx.MockTransport(handler)
    http = httpx.AsyncClient(transport=transport, base_url="http://ollama.test")
    return OllamaClient.from_client(model, http)


def envelope(text: str, done: bool = True) -> httpx.Response:
    return httpx.Response(200, json={"done": done, "response": text})


def request_body(request: httpx.Request) -> dict[str, Any]:
    return json.loads(request.content)


@pytest.fixture
def sleep() -> RecordingSleep:
    return RecordingSleep()

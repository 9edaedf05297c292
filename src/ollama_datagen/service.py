"""
The interaction service: the only LLM interface entity generators use.
"""

from __future__ import annotations

import asyncio
import logging
from functools import partial
from typing import Awaitable, Callable, Optional, Sequence, TypeVar

from ollama_datagen.client import InferenceClient
from ollama_datagen.formatters import ModelFamily
from ollama_datagen.parsing import parse_first_json_value
from ollama_datagen.retry import DEFAULT_BACKOFF_INCREMENT, run_with_retries
from ollama_datagen.tools import ToolRegistry
from ollama_datagen.types.chat import Conversation, Message, PromptSettings, ResponseFormat
from ollama_datagen.types.tool import Tool

__all__ = ["InteractionService", "CREATIVE_TEMPERATURE", "PARSE_BACKOFF_INCREMENT"]

R = TypeVar("R")

CREATIVE_TEMPERATURE = 0.9
# Malformed JSON is re-requested quickly; transport failures back off slowly
PARSE_BACKOFF_INCREMENT = 1.0


class InteractionService:
    """
    Formats, sends, retries and parses completions for one model family.

    The family is fixed at construction and selects both the prompt
    template and the stop sequences.
    """

    def __init__(
        self,
        client: InferenceClient,
        family: ModelFamily,
        *,
        logger: Optional[logging.Logger] = None,
        name: Optional[str] = None,
        sleep: Callable[[float], Awaitable[object]] = asyncio.sleep,
    ) -> None:
        self.client = client
        self.family = ModelFamily(family)
        self.formatter = self.family.formatter
        self.logger = logger or logging.getLogger(__name__)
        self.name = name if name is not None else self.__class__.__name__
        self._sleep = sleep
        self.settings = PromptSettings(
            temperature=CREATIVE_TEMPERATURE,
            response_format=ResponseFormat.TEXT,
            stop_sequences=self.family.text_stop_sequences,
            format_raw_prompt=self.formatter.format,
        )

    async def get_chat_completion(self, prompt: str) -> str:
        """Free-text completion of a single user prompt."""
        messages: Conversation = [Message.user(prompt)]

        response = await self._retry(lambda: self.client.send(messages, self.settings))
        return response.content

    async def get_and_parse_json_completion(
        self,
        prompt: str,
        result_type: type[R],
        max_tokens: Optional[int] = None,
        tools: Optional[Sequence[Tool]] = None,
    ) -> R:
        """
        JSON completion of a single user prompt, parsed into ``result_type``.

        Tools are only described to the model; nothing here executes them.

        Raises:
            UnsupportedTypeError: immediately, for a tool parameter type that
                cannot be described.
            TransportError, ParseError: once every retry is exhausted.
        """
        registry = ToolRegistry(tools) if tools is not None else None
        descriptors = registry.descriptors if registry else None
        self._log(
            f"JSON completion as {getattr(result_type, '__name__', result_type)}"
            f" ({len(registry) if registry else 0} tool(s), max_tokens={max_tokens})",
            logging.DEBUG,
        )

        settings = self.settings.copy(
            max_tokens=max_tokens,
            response_format=ResponseFormat.JSON,
            stop_sequences=self.family.json_stop_sequences,
            format_raw_prompt=partial(
                self.formatter.format_with_tools,
                tools=descriptors,
                auto_invoke=registry is not None,
            ),
        )
        messages: Conversation = [Message.user(prompt)]

        async def request_and_parse() -> R:
            response = await self._retry(lambda: self.client.send(messages, settings))
            return parse_first_json_value(response.content, result_type)

        return await self._retry(request_and_parse, PARSE_BACKOFF_INCREMENT)

    def _retry(self, operation, backoff_increment: float = DEFAULT_BACKOFF_INCREMENT):
        return run_with_retries(
            operation, backoff_increment, sleep=self._sleep, logger=self.logger
        )

    def _log(self, message: str, level: int = logging.INFO) -> None:
        self.logger.log(level, f"[{self.name}] {message}")

    # --- lifecycle ---------------------------------------------------------
    async def aclose(self) -> None:
        await self.client.aclose()

    async def __aenter__(self) -> "InteractionService":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()

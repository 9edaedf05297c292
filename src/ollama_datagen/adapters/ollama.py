"""Ollama adapter for pure request/response transformations."""

from __future__ import annotations

import json
from typing import Any, Sequence

from ollama_datagen.errors import TransportError
from ollama_datagen.types.chat import ChatResult, Message, PromptSettings

__all__ = ["OllamaRequestAdapter", "MODEL_UNAVAILABLE_MESSAGE"]

MODEL_UNAVAILABLE_MESSAGE = (
    "ERROR: The configured model isn't available. Perhaps it's still downloading."
)

# Keeps the server-side prompt cache from churning on float noise
_TEMPERATURE_DIGITS = 4


class OllamaRequestAdapter:
    """Adapter between chat types and the raw ``/api/generate`` wire format."""

    def to_provider(
        self, messages: Sequence[Message], settings: PromptSettings, model: str
    ) -> dict[str, Any]:
        """Build the JSON request body. Absent values are omitted, not null."""
        if settings.format_raw_prompt is None:
            raise ValueError("PromptSettings.format_raw_prompt must be set")

        options: dict[str, Any] = {
            "temperature": round(settings.temperature, _TEMPERATURE_DIGITS),
        }
        if settings.max_tokens is not None:
            options["numPredict"] = settings.max_tokens
        options["topP"] = settings.top_p

        body: dict[str, Any] = {
            "model": settings.model_id or model,
            "prompt": settings.format_raw_prompt(messages),
        }
        if settings.is_json:
            body["format"] = "json"
        body["options"] = options
        body["raw"] = settings.raw
        body["stream"] = settings.stream
        body["stop"] = list(settings.stop_sequences)
        return body

    def from_provider(self, raw: Any) -> ChatResult:
        """Decode the ``{done, response}`` envelope."""
        if not isinstance(raw, dict) or not isinstance(raw.get("response"), str):
            raise TransportError(f"Malformed response envelope: {str(raw)[:200]!r}")
        return ChatResult(content=raw["response"], done=bool(raw.get("done", True)))

    def unavailable_result(self, settings: PromptSettings) -> ChatResult:
        """Sentinel reply for a model the server does not have loaded.

        In JSON mode the sentinel is encoded as a JSON string literal so
        downstream parsing still succeeds.
        """
        content = (
            json.dumps(MODEL_UNAVAILABLE_MESSAGE)
            if settings.is_json
            else MODEL_UNAVAILABLE_MESSAGE
        )
        return ChatResult(content=content)

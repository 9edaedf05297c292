"""
Inference client for a local Ollama server's raw completion endpoint.
"""

from __future__ import annotations

import logging
from typing import Optional, Protocol, Self, Sequence

import httpx

from ollama_datagen.adapters import OllamaRequestAdapter
from ollama_datagen.errors import TransportError, classify_transport_error
from ollama_datagen.types.chat import ChatResult, Message, PromptSettings

__all__ = ["InferenceClient", "OllamaClient", "DEFAULT_TIMEOUT", "GENERATE_PATH"]

GENERATE_PATH = "/api/generate"
# Local models can take minutes on a cold start
DEFAULT_TIMEOUT = 300.0


class InferenceClient(Protocol):
    """Anything that turns a conversation plus settings into one reply."""

    async def send(
        self, messages: Sequence[Message], settings: PromptSettings
    ) -> ChatResult:
        ...

    async def aclose(self) -> None:
        ...


class OllamaClient:
    """
    Async client for ``POST /api/generate`` in raw, non-streaming mode.

    Use ``OllamaClient.from_client`` when you already have an
    ``httpx.AsyncClient`` pointed at the server.
    """

    def __init__(
        self,
        model: str,
        *,
        base_url: str = "http://localhost:11434",
        timeout: float = DEFAULT_TIMEOUT,
        logger: Optional[logging.Logger] = None,
        name: Optional[str] = None,
    ) -> None:
        self.model = model
        self.logger = logger or logging.getLogger(__name__)
        self.name = name if name is not None else self.__class__.__name__
        self.base_url = base_url
        self._client = httpx.AsyncClient(base_url=base_url, timeout=timeout)
        self._adapter = OllamaRequestAdapter()

    @classmethod
    def from_client(
        cls,
        model: str,
        client: httpx.AsyncClient,
        *,
        logger: Optional[logging.Logger] = None,
        name: Optional[str] = None,
    ) -> Self:
        """
        Build an ``OllamaClient`` around an already-configured ``httpx.AsyncClient``.
        """
        if not isinstance(client, httpx.AsyncClient):
            raise TypeError(
                f"OllamaClient.from_client expects httpx.AsyncClient; got {type(client).__name__}"
            )

        self = cls.__new__(cls)  # bypass __init__
        self.model = model
        self.logger = logger or logging.getLogger(__name__)
        self.name = name if name is not None else cls.__name__
        self.base_url = str(client.base_url)
        self._client = client
        self._adapter = OllamaRequestAdapter()
        return self

    async def send(
        self, messages: Sequence[Message], settings: PromptSettings
    ) -> ChatResult:
        """
        Send one raw completion request and return the assistant reply.

        A 404 means the model is not available on the server; that is
        reported as a sentinel reply instead of an exception.

        Raises:
            TransportError: connection problems, timeouts, any other non-2xx
                status, or an undecodable envelope.
        """
        body = self._adapter.to_provider(messages, settings, self.model)

        self._log(
            f"Sending request to model {body['model']} "
            f"(format: {body.get('format', 'text')}, stream: {body['stream']})",
            logging.DEBUG,
        )

        try:
            response = await self._client.post(GENERATE_PATH, json=body)
            if response.status_code == httpx.codes.NOT_FOUND:
                self._log(
                    f"Model {body['model']} is not available on {self.base_url}",
                    logging.WARNING,
                )
                return self._adapter.unavailable_result(settings)
            response.raise_for_status()
            envelope = response.json()
        except httpx.HTTPError as exc:
            raise classify_transport_error(exc, self.logger) from exc
        except ValueError as exc:
            raise TransportError(f"Response envelope is not JSON: {exc}", exc) from exc

        return self._adapter.from_provider(envelope)

    def _log(self, message: str, level: int = logging.INFO) -> None:
        self.logger.log(level, f"[{self.name}] {message}")

    # --- lifecycle ---------------------------------------------------------
    async def aclose(self) -> None:
        """
        Close the underlying HTTP client. Safe to call multiple times.
        """
        await self._client.aclose()

    async def __aenter__(self) -> "OllamaClient":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()

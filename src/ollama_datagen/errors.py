"""
Error taxonomy for the LLM interaction core.

Transport failures are translated into a single `TransportError` with a
friendly message while the original httpx exception stays reachable for
full tracebacks.
"""

from __future__ import annotations

import logging
from typing import Optional

import httpx

__all__: tuple[str, ...] = (
    "DataGenError",
    "TransportError",
    "ParseError",
    "UnsupportedTypeError",
    "classify_transport_error",
)


class DataGenError(RuntimeError):
    """Package-level exception.

    Attributes:
        original_exc: The underlying exception, if any.
    """

    original_exc: Optional[BaseException]

    def __init__(
        self, message: str, original_exc: Optional[BaseException] = None
    ) -> None:
        super().__init__(message)
        self.original_exc = original_exc
        if original_exc is not None:
            self.__cause__ = original_exc


class TransportError(DataGenError):
    """The inference server could not be reached or answered badly."""


class ParseError(DataGenError, ValueError):
    """The response text does not start with a valid value of the target type."""


class UnsupportedTypeError(DataGenError, TypeError):
    """A tool parameter uses a type that cannot be described to the model."""


def classify_transport_error(
    exc: Exception,
    logger: Optional[logging.Logger] = None,
) -> TransportError:
    """Wrap an httpx exception in TransportError with a concise message."""
    log = logger or logging.getLogger("ollama_datagen.errors")

    if isinstance(exc, httpx.TimeoutException):
        msg = "Timed out waiting for the inference server"
    elif isinstance(exc, httpx.ConnectError):
        msg = "Connection problem – unable to reach the inference server"
    elif isinstance(exc, httpx.HTTPStatusError):
        msg = f"Server returned HTTP {exc.response.status_code}"
    else:
        msg = exc.__class__.__name__

    log.warning("Wrapping transport exception", extra={"exc": exc})
    return TransportError(f"{msg}: {exc}", exc)

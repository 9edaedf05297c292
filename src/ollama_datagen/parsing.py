"""
Reading structured values out of model replies.

With JSON format requested and tools described, the server sometimes
replies with two or more JSON objects concatenated together (duplicates
or slight variations). Only the first complete value is used; anything
after it is ignored. Truncated output is not repaired.
"""

from __future__ import annotations

import json
import logging
from functools import lru_cache
from typing import Any, TypeVar

from pydantic import TypeAdapter, ValidationError

from ollama_datagen.errors import ParseError

__all__ = ["read_first_json_value", "parse_first_json_value"]

R = TypeVar("R")


def _reject_constant(name: str) -> Any:
    raise ValueError(f"{name} is not valid JSON")


# NaN and Infinity are accepted by the json module but are not JSON
_decoder = json.JSONDecoder(parse_constant=_reject_constant)
_logger = logging.getLogger(__name__)


@lru_cache(maxsize=128)
def _adapter_for(result_type: Any) -> TypeAdapter:
    return TypeAdapter(result_type)


def read_first_json_value(raw_text: str) -> Any:
    """Decode the JSON value at the start of ``raw_text``.

    Leading whitespace is skipped; trailing content is ignored.

    Raises:
        ParseError: if no complete value starts the text.
    """
    start = len(raw_text) - len(raw_text.lstrip())
    try:
        value, end = _decoder.raw_decode(raw_text, start)
    except ValueError as exc:
        _logger.warning("Error deserializing JSON")
        raise ParseError(f"No complete JSON value at start of response: {exc}", exc) from exc

    if raw_text[end:].strip():
        _logger.debug("Ignoring %d trailing characters after JSON value", len(raw_text) - end)
    return value


def parse_first_json_value(raw_text: str, result_type: type[R]) -> R:
    """Read the first JSON value and validate it as ``result_type``.

    ``result_type`` may be anything pydantic can validate: models,
    dataclasses, builtins and generic containers.
    """
    value = read_first_json_value(raw_text)
    try:
        return _adapter_for(result_type).validate_python(value)
    except ValidationError as exc:
        _logger.warning("Response JSON does not match %s", getattr(result_type, "__name__", result_type))
        raise ParseError(f"Response does not match the expected shape: {exc}", exc) from exc

"""Registry of declared tools and their prompt descriptors."""

from __future__ import annotations

import logging
from typing import Any, Iterable, Optional, Union, get_args, get_origin
from types import UnionType

from ollama_datagen.errors import UnsupportedTypeError
from ollama_datagen.types.tool import (
    FunctionDescriptor,
    FunctionParameters,
    ParameterDescriptor,
    Tool,
    ToolDescriptor,
    ToolParameter,
)

__all__ = ["ToolRegistry", "to_parameter_type", "create_descriptor"]

_logger = logging.getLogger(__name__)

_JSON_TYPE_NAMES = frozenset({"string", "number"})


def _unwrap_optional(tp: Any) -> Any:
    if get_origin(tp) in (Union, UnionType):
        args = [a for a in get_args(tp) if a is not type(None)]
        if len(args) == 1:
            return args[0]
    return tp


def to_parameter_type(tp: Any) -> str:
    """Map a declared parameter type onto its JSON type name.

    Raises:
        UnsupportedTypeError: for anything other than strings and numbers.
    """
    if isinstance(tp, str):
        if tp in _JSON_TYPE_NAMES:
            return tp
        raise UnsupportedTypeError(f"Unsupported parameter type {tp!r}")

    tp = _unwrap_optional(tp)
    # bool is an int subclass but is not a number here
    if tp is bool:
        raise UnsupportedTypeError(f"Unsupported parameter type {tp!r}")
    if tp in (int, float):
        return "number"
    if tp is str:
        return "string"
    raise UnsupportedTypeError(f"Unsupported parameter type {tp!r}")


def _parameter_descriptor(param: ToolParameter) -> ParameterDescriptor:
    return ParameterDescriptor(
        type=to_parameter_type(param.type),
        description=param.description,
        enum=tuple(param.enum) if param.enum is not None else None,
    )


def create_descriptor(tool: Tool) -> ToolDescriptor:
    """Build the prompt descriptor for a single tool."""
    return ToolDescriptor(
        function=FunctionDescriptor(
            name=tool.name,
            description=tool.description,
            parameters=FunctionParameters(
                properties={p.name: _parameter_descriptor(p) for p in tool.parameters},
                required=tuple(p.name for p in tool.parameters if p.required),
            ),
        )
    )


class ToolRegistry:
    """Named capabilities available to a single completion.

    Descriptors are built eagerly so an unsupported parameter type fails
    before any request is sent.
    """

    def __init__(self, tools: Iterable[Tool] = ()) -> None:
        self._tools: dict[str, Tool] = {}
        self._descriptors: list[ToolDescriptor] = []
        for tool in tools:
            self.add(tool)

    def add(self, tool: Tool) -> None:
        if tool.name in self._tools:
            raise ValueError(f"Duplicate tool name: {tool.name}")
        descriptor = create_descriptor(tool)
        self._tools[tool.name] = tool
        self._descriptors.append(descriptor)
        _logger.debug("Registered tool %s", tool.name)

    def get(self, name: str) -> Optional[Tool]:
        return self._tools.get(name)

    @property
    def descriptors(self) -> list[ToolDescriptor]:
        return list(self._descriptors)

    def __len__(self) -> int:
        return len(self._tools)

    def __contains__(self, name: object) -> bool:
        return name in self._tools

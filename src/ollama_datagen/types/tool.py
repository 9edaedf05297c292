"""
Declarative tool capabilities and the descriptors serialized into prompts.

A ``Tool`` is what callers hand to the interaction service. A
``ToolDescriptor`` is the JSON-ready shape the bracket-instruction model
family expects inside its ``[AVAILABLE_TOOLS]`` block::

    {
      "type": "function",
      "function": {
        "name": "get_current_weather",
        "description": "Get the current weather",
        "parameters": {
          "type": "object",
          "properties": {
            "location": {"type": "string", "description": "The city name"},
            "format": {"type": "string", "enum": ["celsius", "fahrenheit"]}
          },
          "required": ["location", "format"]
        }
      }
    }
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional

__all__ = [
    "ToolParameter",
    "Tool",
    "ParameterDescriptor",
    "FunctionParameters",
    "FunctionDescriptor",
    "ToolDescriptor",
]


@dataclass(frozen=True, slots=True)
class ToolParameter:
    """One typed parameter of a tool.

    ``type`` is a Python type (``str``, ``int``, ``float``) or a JSON type
    name (``"string"``, ``"number"``). Anything else is rejected when the
    descriptor is built.
    """

    name: str
    type: Any
    description: Optional[str] = None
    required: bool = True
    enum: Optional[tuple[str, ...]] = None


@dataclass(frozen=True, slots=True)
class Tool:
    """A named capability the model may be told about."""

    name: str
    description: str
    parameters: tuple[ToolParameter, ...] = ()


@dataclass(frozen=True, slots=True)
class ParameterDescriptor:
    type: str
    description: Optional[str] = None
    enum: Optional[tuple[str, ...]] = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"type": self.type}
        if self.description is not None:
            data["description"] = self.description
        if self.enum is not None:
            data["enum"] = list(self.enum)
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ParameterDescriptor":
        enum = data.get("enum")
        return cls(
            type=data["type"],
            description=data.get("description"),
            enum=tuple(enum) if enum is not None else None,
        )


@dataclass(frozen=True, slots=True)
class FunctionParameters:
    properties: dict[str, ParameterDescriptor]
    required: tuple[str, ...] = ()
    type: str = "object"

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.type,
            "properties": {
                name: prop.to_dict() for name, prop in self.properties.items()
            },
            "required": list(self.required),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "FunctionParameters":
        return cls(
            type=data.get("type", "object"),
            properties={
                name: ParameterDescriptor.from_dict(prop)
                for name, prop in (data.get("properties") or {}).items()
            },
            required=tuple(data.get("required") or ()),
        )


@dataclass(frozen=True, slots=True)
class FunctionDescriptor:
    name: str
    description: Optional[str]
    parameters: FunctionParameters

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"name": self.name}
        if self.description is not None:
            data["description"] = self.description
        data["parameters"] = self.parameters.to_dict()
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "FunctionDescriptor":
        return cls(
            name=data["name"],
            description=data.get("description"),
            parameters=FunctionParameters.from_dict(data.get("parameters") or {}),
        )


@dataclass(frozen=True, slots=True)
class ToolDescriptor:
    """JSON-serializable description of a callable capability."""

    function: FunctionDescriptor
    type: str = "function"

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.type, "function": self.function.to_dict()}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ToolDescriptor":
        return cls(
            type=data.get("type", "function"),
            function=FunctionDescriptor.from_dict(data["function"]),
        )

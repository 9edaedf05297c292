"""Chat types shared by formatters, the inference client and the service."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import StrEnum
from typing import Callable, Optional, Sequence


class Role(StrEnum):
    SYSTEM = "system"
    USER = "user"
    ASSISTANT = "assistant"
    TOOL = "tool"


class ResponseFormat(StrEnum):
    JSON = "json"
    TEXT = "text"


@dataclass(frozen=True, slots=True)
class Message:
    """A single role-tagged turn in a conversation."""

    role: Role
    content: str

    @classmethod
    def system(cls, content: str) -> "Message":
        return cls(Role.SYSTEM, content)

    @classmethod
    def user(cls, content: str) -> "Message":
        return cls(Role.USER, content)

    @classmethod
    def assistant(cls, content: str) -> "Message":
        return cls(Role.ASSISTANT, content)

    @classmethod
    def tool(cls, content: str) -> "Message":
        return cls(Role.TOOL, content)


# Ordered, caller-determined. Formatters never reorder it.
Conversation = list[Message]

RawPromptFormatter = Callable[[Sequence[Message]], str]


@dataclass(frozen=True)
class PromptSettings:
    """Per-call generation settings.

    Built fresh for each completion and never mutated afterwards; use
    ``copy`` to derive a variant.
    """

    model_id: Optional[str] = None
    response_format: ResponseFormat = ResponseFormat.TEXT
    temperature: float = 0.5
    top_p: float = 1.0
    max_tokens: Optional[int] = None
    stream: bool = False
    raw: bool = True
    stop_sequences: tuple[str, ...] = field(default_factory=tuple)
    format_raw_prompt: Optional[RawPromptFormatter] = None

    @property
    def is_json(self) -> bool:
        return self.response_format == ResponseFormat.JSON

    def copy(self, **kwargs) -> "PromptSettings":
        """Create a copy of these settings with optional overrides."""
        return replace(self, **kwargs)


@dataclass(frozen=True, slots=True)
class ChatResult:
    """Normalized assistant reply returned by the inference client."""

    content: str
    role: Role = Role.ASSISTANT
    done: bool = True

    def __str__(self) -> str:
        return self.content

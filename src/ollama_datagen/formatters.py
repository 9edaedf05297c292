"""
Raw prompt formatting for the supported model families.

The inference server is called in raw mode, so the prompt text must
already follow the model's own chat template. Whitespace around every
marker is significant: it changes how the model tokenizes instruction
boundaries. Do not add or remove spaces or line breaks.
"""

from __future__ import annotations

import json
import logging
from enum import StrEnum
from typing import Optional, Protocol, Sequence

from ollama_datagen.types.chat import Message, Role
from ollama_datagen.types.tool import ToolDescriptor

__all__ = [
    "PromptFormatter",
    "BracketInstructionFormatter",
    "HeaderTaggedFormatter",
    "ModelFamily",
    "serialize_tools",
]

_logger = logging.getLogger(__name__)

_INSTRUCTION_ROLES = (Role.SYSTEM, Role.USER)


class PromptFormatter(Protocol):
    """Maps a conversation onto one model family's raw prompt template."""

    def format(self, messages: Sequence[Message]) -> str:
        """Format without any tool block."""
        ...

    def format_with_tools(
        self,
        messages: Sequence[Message],
        tools: Optional[Sequence[ToolDescriptor]] = None,
        auto_invoke: bool = True,
    ) -> str:
        """Format, describing ``tools`` to the model where the family supports it."""
        ...


def serialize_tools(tools: Sequence[ToolDescriptor]) -> str:
    """Compact JSON array of tool descriptors, camelCase keys, no nulls."""
    return json.dumps([t.to_dict() for t in tools], separators=(",", ":"))


def _index_of_last_instruction(messages: Sequence[Message]) -> int:
    for i in range(len(messages) - 1, -1, -1):
        if messages[i].role in _INSTRUCTION_ROLES:
            return i
    return -1


class BracketInstructionFormatter:
    """``[INST] ... [/INST]`` template (Mistral style)."""

    def format(self, messages: Sequence[Message]) -> str:
        return self.format_with_tools(messages, None, auto_invoke=False)

    def format_with_tools(
        self,
        messages: Sequence[Message],
        tools: Optional[Sequence[ToolDescriptor]] = None,
        auto_invoke: bool = True,
    ) -> str:
        parts: list[str] = []
        # The tool block only works right before the final instruction
        tools_at = _index_of_last_instruction(messages) if auto_invoke and tools else -1

        for index, message in enumerate(messages):
            if index == tools_at:
                parts.append("[AVAILABLE_TOOLS] ")
                parts.append(serialize_tools(tools))
                parts.append(" [/AVAILABLE_TOOLS]")

            if message.role in _INSTRUCTION_ROLES:
                parts.append("[INST] ")
                parts.append(message.content)
                parts.append(" [/INST]")
            elif message.role == Role.TOOL:
                parts.append("[TOOL_CALLS] ")
                parts.append(message.content)
                parts.append(" [/TOOL_CALLS]\n\n")
            else:
                if not message.content or not message.content.strip():
                    continue
                parts.append(message.content)
                # No matching <s>; the server adds the BOS token itself.
                parts.append("</s> ")

        return "".join(parts)


class HeaderTaggedFormatter:
    """``<|start_header_id|>`` template (Llama 3.1 style).

    Tool descriptors are not rendered for this family yet.
    """

    _ROLE_HEADERS = {
        Role.SYSTEM: "system",
        Role.USER: "user",
        Role.ASSISTANT: "assistant",
        Role.TOOL: "ipython",
    }

    def format(self, messages: Sequence[Message]) -> str:
        parts: list[str] = []
        for message in messages:
            header = self._ROLE_HEADERS[message.role]
            parts.append(
                f"<|begin_of_text|><|start_header_id|>{header}<|end_header_id|>"
                f" {message.content} <|eot_id|>"
            )
        return "".join(parts)

    def format_with_tools(
        self,
        messages: Sequence[Message],
        tools: Optional[Sequence[ToolDescriptor]] = None,
        auto_invoke: bool = True,
    ) -> str:
        if tools:
            _logger.debug(
                "Ignoring %d tool descriptor(s): not supported for header-tagged prompts",
                len(tools),
            )
        return self.format(messages)


class ModelFamily(StrEnum):
    """Prompt template family, chosen once per service."""

    BRACKET_INSTRUCTION = "mistral"
    HEADER_TAGGED = "llama3.1"

    @property
    def formatter(self) -> PromptFormatter:
        return _FORMATTERS[self]

    @property
    def text_stop_sequences(self) -> tuple[str, ...]:
        # END_OF_CONTENT stops the model before chatty sign-offs
        if self is ModelFamily.HEADER_TAGGED:
            return ("END_OF_CONTENT", "<|eot_id|>")
        return ("END_OF_CONTENT",)

    @property
    def json_stop_sequences(self) -> tuple[str, ...]:
        if self is ModelFamily.HEADER_TAGGED:
            return ("<|eot_id|>",)
        return ("[/TOOL_CALLS]",)

    @classmethod
    def from_model_name(cls, model: str) -> "ModelFamily":
        """Guess the family from an Ollama model tag such as ``llama3.1:8b``."""
        if model.lower().startswith("llama"):
            return cls.HEADER_TAGGED
        return cls.BRACKET_INSTRUCTION


_FORMATTERS: dict[ModelFamily, PromptFormatter] = {
    ModelFamily.BRACKET_INSTRUCTION: BracketInstructionFormatter(),
    ModelFamily.HEADER_TAGGED: HeaderTaggedFormatter(),
}

"""Tests for the raw prompt templates of each model family."""

import json

import pytest

from ollama_datagen.formatters import (
    BracketInstructionFormatter,
    HeaderTaggedFormatter,
    ModelFamily,
    serialize_tools,
)
from ollama_datagen.tools import ToolRegistry
from ollama_datagen.types import Message, Tool, ToolParameter

WEATHER = Tool(
    name="get_weather",
    description="Get the current weather",
    parameters=(
        ToolParameter("city", str, "Name of the city"),
        ToolParameter("unit", str, enum=("celsius", "fahrenheit"), required=False),
    ),
)


@pytest.fixture
def descriptors():
    return ToolRegistry([WEATHER]).descriptors


class TestBracketInstructionFormatter:
    """Test the [INST] template."""

    @pytest.fixture
    def formatter(self):
        return BracketInstructionFormatter()

    def test_single_user_message(self, formatter):
        """A lone user message is wrapped in instruction markers."""
        assert formatter.format([Message.user("Hello")]) == "[INST] Hello [/INST]"

    def test_every_role(self, formatter):
        """System, assistant and tool turns use their own markers, in order."""
        messages = [
            Message.system("Be brief"),
            Message.user("Hi"),
            Message.assistant("Hello!"),
            Message.tool('{"temp": 20}'),
            Message.user("Thanks"),
        ]

        assert formatter.format(messages) == (
            "[INST] Be brief [/INST]"
            "[INST] Hi [/INST]"
            "Hello!</s> "
            '[TOOL_CALLS] {"temp": 20} [/TOOL_CALLS]\n\n'
            "[INST] Thanks [/INST]"
        )

    def test_blank_assistant_message_is_skipped(self, formatter):
        """Assistant turns without content leave no trace."""
        messages = [Message.user("Hi"), Message.assistant("  "), Message.user("Again")]

        assert formatter.format(messages) == "[INST] Hi [/INST][INST] Again [/INST]"

    def test_no_tool_block_without_descriptors(self, formatter):
        """No descriptors means no [AVAILABLE_TOOLS] block."""
        messages = [Message.system("s"), Message.user("u")]

        assert "[AVAILABLE_TOOLS]" not in formatter.format(messages)
        assert "[AVAILABLE_TOOLS]" not in formatter.format_with_tools(messages, None)
        assert "[AVAILABLE_TOOLS]" not in formatter.format_with_tools(messages, [])

    def test_tool_block_precedes_last_instruction(self, formatter, descriptors):
        """The tool block sits directly before the final system/user message."""
        messages = [
            Message.user("first"),
            Message.assistant("answer"),
            Message.user("second"),
            Message.tool("result"),
        ]

        prompt = formatter.format_with_tools(messages, descriptors)

        block = f"[AVAILABLE_TOOLS] {serialize_tools(descriptors)} [/AVAILABLE_TOOLS]"
        assert prompt == (
            "[INST] first [/INST]"
            "answer</s> "
            f"{block}[INST] second [/INST]"
            "[TOOL_CALLS] result [/TOOL_CALLS]\n\n"
        )
        assert prompt.count("[AVAILABLE_TOOLS]") == 1

    def test_tool_block_before_trailing_system_message(self, formatter, descriptors):
        """A system message counts as an instruction when it comes last."""
        messages = [Message.user("u"), Message.system("s")]

        prompt = formatter.format_with_tools(messages, descriptors)

        assert prompt.startswith("[INST] u [/INST][AVAILABLE_TOOLS] ")
        assert prompt.endswith(" [/AVAILABLE_TOOLS][INST] s [/INST]")

    def test_no_instruction_message_means_no_tool_block(self, formatter, descriptors):
        """Descriptors are dropped when nothing can carry them."""
        messages = [Message.assistant("a"), Message.tool("t")]

        prompt = formatter.format_with_tools(messages, descriptors)

        assert "[AVAILABLE_TOOLS]" not in prompt

    def test_tool_block_requires_auto_invoke(self, formatter, descriptors):
        """Callers can opt out of describing tools."""
        prompt = formatter.format_with_tools(
            [Message.user("u")], descriptors, auto_invoke=False
        )

        assert prompt == "[INST] u [/INST]"


class TestHeaderTaggedFormatter:
    """Test the header-tagged template."""

    @pytest.fixture
    def formatter(self):
        return HeaderTaggedFormatter()

    def test_messages_are_header_tagged(self, formatter):
        """Each message gets its own header segment."""
        messages = [Message.system("Be brief"), Message.user("Hi")]

        assert formatter.format(messages) == (
            "<|begin_of_text|><|start_header_id|>system<|end_header_id|> Be brief <|eot_id|>"
            "<|begin_of_text|><|start_header_id|>user<|end_header_id|> Hi <|eot_id|>"
        )

    def test_tool_role_uses_ipython_header(self, formatter):
        """Tool output is presented under the ipython header."""
        prompt = formatter.format([Message.tool("42")])

        assert prompt == "<|begin_of_text|><|start_header_id|>ipython<|end_header_id|> 42 <|eot_id|>"

    def test_tools_are_not_rendered(self, formatter, descriptors):
        """Tool descriptors do not change the prompt for this family."""
        messages = [Message.user("Hi")]

        assert formatter.format_with_tools(messages, descriptors) == formatter.format(messages)


class TestSerializeTools:
    """Test the JSON embedded in the tool block."""

    def test_camel_case_and_no_nulls(self, descriptors):
        """Optional fields are omitted instead of written as null."""
        data = json.loads(serialize_tools(descriptors))

        assert data == [
            {
                "type": "function",
                "function": {
                    "name": "get_weather",
                    "description": "Get the current weather",
                    "parameters": {
                        "type": "object",
                        "properties": {
                            "city": {"type": "string", "description": "Name of the city"},
                            "unit": {"type": "string", "enum": ["celsius", "fahrenheit"]},
                        },
                        "required": ["city"],
                    },
                },
            }
        ]
        assert "null" not in serialize_tools(descriptors)


class TestModelFamily:
    """Test model family selection."""

    @pytest.mark.parametrize(
        "model, family",
        [
            ("mistral:7b", ModelFamily.BRACKET_INSTRUCTION),
            ("llama3.1", ModelFamily.HEADER_TAGGED),
            ("Llama3.1:70b", ModelFamily.HEADER_TAGGED),
            ("phi3", ModelFamily.BRACKET_INSTRUCTION),
        ],
    )
    def test_from_model_name(self, model, family):
        assert ModelFamily.from_model_name(model) is family

    def test_formatter_strategy(self):
        assert isinstance(ModelFamily.BRACKET_INSTRUCTION.formatter, BracketInstructionFormatter)
        assert isinstance(ModelFamily.HEADER_TAGGED.formatter, HeaderTaggedFormatter)

    def test_stop_sequences(self):
        assert ModelFamily.BRACKET_INSTRUCTION.text_stop_sequences == ("END_OF_CONTENT",)
        assert ModelFamily.BRACKET_INSTRUCTION.json_stop_sequences == ("[/TOOL_CALLS]",)
        assert ModelFamily.HEADER_TAGGED.json_stop_sequences == ("<|eot_id|>",)

"""Tests for the interaction service composition."""

import asyncio

import httpx
import pytest
from pydantic import BaseModel

from conftest import StubClient, envelope, ollama_client
from ollama_datagen.adapters import MODEL_UNAVAILABLE_MESSAGE
from ollama_datagen.errors import ParseError, TransportError, UnsupportedTypeError
from ollama_datagen.formatters import ModelFamily
from ollama_datagen.service import CREATIVE_TEMPERATURE, InteractionService
from ollama_datagen.types import ResponseFormat, Role, Tool, ToolParameter


class Categories(BaseModel):
    categories: list[str]


def run(coro):
    return asyncio.run(coro)


def service_for(client, sleep, family=ModelFamily.BRACKET_INSTRUCTION):
    return InteractionService(client, family, sleep=sleep)


class TestGetChatCompletion:
    """Test free-text completions."""

    def test_returns_raw_content(self, sleep):
        client = StubClient(["Once upon a time"])

        text = run(service_for(client, sleep).get_chat_completion("Tell a story"))

        assert text == "Once upon a time"
        messages, settings = client.calls[0]
        assert [m.role for m in messages] == [Role.USER]
        assert settings.response_format == ResponseFormat.TEXT
        assert settings.stop_sequences == ("END_OF_CONTENT",)
        assert settings.temperature == CREATIVE_TEMPERATURE
        assert client.prompt() == "[INST] Tell a story [/INST]"

    def test_header_tagged_family(self, sleep):
        client = StubClient(["ok"])

        run(service_for(client, sleep, ModelFamily.HEADER_TAGGED).get_chat_completion("Hi"))

        assert client.prompt().startswith("<|begin_of_text|><|start_header_id|>user")
        assert "<|eot_id|>" in client.calls[0][1].stop_sequences

    def test_transport_failures_back_off_slowly(self, sleep):
        client = StubClient([TransportError("down"), TransportError("down"), "ok"])

        assert run(service_for(client, sleep).get_chat_completion("Hi")) == "ok"
        assert sleep.delays == [5, 20]


class TestGetAndParseJsonCompletion:
    """Test JSON completions with two retry layers."""

    def test_parses_first_value(self, sleep):
        client = StubClient(['{"categories": ["Tents"]}{"categories": ["Boots"]}'])

        result = run(
            service_for(client, sleep).get_and_parse_json_completion(
                "List categories", Categories, max_tokens=140
            )
        )

        assert result == Categories(categories=["Tents"])
        settings = client.calls[0][1]
        assert settings.response_format == ResponseFormat.JSON
        assert settings.max_tokens == 140
        assert settings.stop_sequences == ("[/TOOL_CALLS]",)
        assert client.prompt() == "[INST] List categories [/INST]"

    def test_json_settings_derive_from_text_settings(self, sleep):
        """JSON calls override format and stops without touching the shared settings."""
        client = StubClient(['{"categories": []}'])
        service = service_for(client, sleep)

        run(service.get_and_parse_json_completion("List", Categories, max_tokens=70))

        settings = client.calls[0][1]
        assert settings.temperature == service.settings.temperature == CREATIVE_TEMPERATURE
        assert settings.max_tokens == 70
        assert service.settings.response_format == ResponseFormat.TEXT
        assert service.settings.max_tokens is None
        assert service.settings.stop_sequences == ("END_OF_CONTENT",)

    def test_parse_failure_reissues_request_quickly(self, sleep):
        """Malformed JSON re-sends the whole request with the short backoff."""
        client = StubClient(['{"categories": ["Ten', '{"categories": ["Tents"]}'])

        result = run(
            service_for(client, sleep).get_and_parse_json_completion("List", Categories)
        )

        assert result.categories == ["Tents"]
        assert len(client.calls) == 2
        assert sleep.delays == [5]

    def test_parse_failures_exhaust_outer_retries(self, sleep):
        client = StubClient(["nope"] * 5)

        with pytest.raises(ParseError):
            run(service_for(client, sleep).get_and_parse_json_completion("List", Categories))

        assert len(client.calls) == 5
        assert sleep.delays == [5, 6, 7, 8]

    def test_transport_failure_uses_inner_backoff(self, sleep):
        client = StubClient([TransportError("down"), '{"categories": []}'])

        result = run(
            service_for(client, sleep).get_and_parse_json_completion("List", Categories)
        )

        assert result.categories == []
        assert sleep.delays == [5]

    def test_persistent_transport_failure_surfaces(self, sleep):
        """Each outer attempt runs the inner retries to exhaustion."""
        client = StubClient([TransportError("down")] * 25)

        with pytest.raises(TransportError):
            run(service_for(client, sleep).get_and_parse_json_completion("List", Categories))

        assert len(client.calls) == 25
        inner = [5, 20, 35, 50]
        assert sleep.delays == (
            inner + [5] + inner + [6] + inner + [7] + inner + [8] + inner
        )

    def test_tools_are_described_before_the_prompt(self, sleep):
        client = StubClient(['{"categories": []}'])
        tools = [
            Tool(
                "get_weather_for_city",
                "Searches for weather information for a given city.",
                (ToolParameter("city", str, "Name of the city"),),
            )
        ]

        run(
            service_for(client, sleep).get_and_parse_json_completion(
                "Weather?", Categories, tools=tools
            )
        )

        prompt = client.prompt()
        assert prompt.startswith('[AVAILABLE_TOOLS] [{"type":"function"')
        assert prompt.endswith(" [/AVAILABLE_TOOLS][INST] Weather? [/INST]")

    def test_header_tagged_family_ignores_tools(self, sleep):
        client = StubClient(['{"categories": []}'])
        tools = [Tool("ping", "Ping", (ToolParameter("host", str),))]

        run(
            service_for(client, sleep, ModelFamily.HEADER_TAGGED).get_and_parse_json_completion(
                "Hi", Categories, tools=tools
            )
        )

        assert "AVAILABLE_TOOLS" not in client.prompt()
        assert client.calls[0][1].stop_sequences == ("<|eot_id|>",)

    def test_unsupported_tool_type_fails_before_sending(self, sleep):
        client = StubClient([])
        tools = [Tool("toggle", "Toggle", (ToolParameter("on", bool),))]

        with pytest.raises(UnsupportedTypeError):
            run(
                service_for(client, sleep).get_and_parse_json_completion(
                    "Hi", Categories, tools=tools
                )
            )

        assert client.calls == []
        assert sleep.delays == []

    def test_unavailable_model_parses_as_sentinel_string(self, sleep):
        """A 404 degrades to the JSON-encoded sentinel, which parses as a string."""
        client = ollama_client(lambda request: httpx.Response(404))
        service = service_for(client, sleep)

        async def go():
            async with service:
                return await service.get_and_parse_json_completion("Hi", str)

        assert run(go()) == MODEL_UNAVAILABLE_MESSAGE
        assert sleep.delays == []

    def test_end_to_end_over_http(self, sleep):
        client = ollama_client(lambda request: envelope('{"categories": ["Tents"]}\n{"categories"'))
        service = service_for(client, sleep)

        async def go():
            async with service:
                return await service.get_and_parse_json_completion("Hi", Categories)

        assert run(go()).categories == ["Tents"]

    def test_service_closes_client(self, sleep):
        client = StubClient([])

        async def go():
            async with service_for(client, sleep):
                pass

        run(go())
        assert client.closed

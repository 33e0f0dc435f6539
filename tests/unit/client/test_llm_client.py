"""Tests for LlmClient against mocked Anthropic and OpenAI-compatible backends."""

import json
import logging
from typing import Any

import httpx
import pytest
import structlog
from pytest_httpx import HTTPXMock

from llmbridge.client import ChatOptions, ClientConfig, LlmClient
from llmbridge.config.settings import BridgeSettings
from llmbridge.core.errors import (
    ApiError,
    ConversionError,
    LlmError,
    ParseResponseError,
    RequestFailedError,
    ResponseConversionError,
)
from llmbridge.llms.anthropic.models import (
    Message,
    TextBlock,
    ToolResultBlock,
    ToolUseBlock,
)
from llmbridge.llms.common.models import (
    AdaptiveThinking,
    EffortLevel,
    EnabledThinking,
    Provider,
    ToolDefinition,
)
from llmbridge.llms.openai.models import ChatMessage, ChatRequest


ANTHROPIC_URL = "https://api.anthropic.com/v1/messages"
OPENROUTER_URL = "https://openrouter.ai/api/v1/chat/completions"

WEATHER_TOOL = ToolDefinition(
    name="get_weather",
    description="Current weather for a city",
    input_schema={"type": "object", "properties": {"city": {"type": "string"}}},
)


def _anthropic_response(**overrides: Any) -> dict[str, Any]:
    body: dict[str, Any] = {
        "id": "msg_01",
        "type": "message",
        "role": "assistant",
        "model": "claude-sonnet-4-5",
        "content": [{"type": "text", "text": "Hello!"}],
        "stop_reason": "end_turn",
        "stop_sequence": None,
        "usage": {"input_tokens": 10, "output_tokens": 3},
    }
    body.update(overrides)
    return body


def _openai_response(message: dict[str, Any], finish_reason: str = "stop") -> dict[str, Any]:
    return {
        "id": "gen-01",
        "object": "chat.completion",
        "created": 1_700_000_000,
        "model": "anthropic/claude-sonnet-4-5",
        "choices": [{"index": 0, "message": message, "finish_reason": finish_reason}],
        "usage": {"prompt_tokens": 20, "completion_tokens": 5, "total_tokens": 25},
    }


def _sent_json(httpx_mock: HTTPXMock) -> tuple[httpx.Request, dict[str, Any]]:
    request = httpx_mock.get_request()
    assert request is not None
    return request, json.loads(request.content)


class TestAnthropicBackend:
    async def test_chat_posts_messages_request(
        self, httpx_mock: HTTPXMock, anthropic_config: ClientConfig
    ) -> None:
        httpx_mock.add_response(url=ANTHROPIC_URL, method="POST", json=_anthropic_response())

        async with LlmClient(anthropic_config) as client:
            resp = await client.chat(
                [Message.user_text("Hi")],
                ChatOptions(system="Be brief.", temperature=0.3),
            )

        assert resp.text() == "Hello!"
        assert resp.stop_reason == "end_turn"
        assert resp.usage is not None
        assert resp.usage.total_tokens == 13

        request, body = _sent_json(httpx_mock)
        assert request.headers["x-api-key"] == "sk-ant-test"
        assert request.headers["anthropic-version"] == "2023-06-01"
        assert "authorization" not in request.headers
        assert body == {
            "model": "claude-sonnet-4-5",
            "max_tokens": 16384,
            "system": "Be brief.",
            "messages": [{"role": "user", "content": [{"type": "text", "text": "Hi"}]}],
            "temperature": 0.3,
        }

    async def test_adaptive_thinking_request_fields(self, httpx_mock: HTTPXMock) -> None:
        httpx_mock.add_response(url=ANTHROPIC_URL, json=_anthropic_response())
        config = ClientConfig.anthropic("sk-ant", "claude-opus-4-6")

        async with LlmClient(config) as client:
            await client.chat(
                [Message.user_text("Think")],
                ChatOptions(thinking=AdaptiveThinking(effort=EffortLevel.LOW)),
            )

        _, body = _sent_json(httpx_mock)
        assert body["thinking"] == {"type": "adaptive"}
        assert body["output_config"] == {"effort": "low"}

    async def test_budget_thinking_and_tools(
        self, httpx_mock: HTTPXMock, anthropic_config: ClientConfig
    ) -> None:
        httpx_mock.add_response(
            url=ANTHROPIC_URL,
            json=_anthropic_response(
                content=[
                    {"type": "thinking", "thinking": "need weather", "signature": "sig"},
                    {
                        "type": "tool_use",
                        "id": "toolu_1",
                        "name": "get_weather",
                        "input": {"city": "Paris"},
                    },
                ],
                stop_reason="tool_use",
            ),
        )

        async with LlmClient(anthropic_config) as client:
            resp = await client.chat(
                [Message.user_text("Weather in Paris?")],
                ChatOptions(
                    tools=[WEATHER_TOOL],
                    thinking=EnabledThinking(budget_tokens=4000),
                ),
            )

        assert resp.has_tool_use()
        assert resp.thinking_text() == "need weather"
        assert resp.tool_uses()[0].input == {"city": "Paris"}

        _, body = _sent_json(httpx_mock)
        assert body["thinking"] == {"type": "enabled", "budget_tokens": 4000}
        assert "output_config" not in body
        assert body["tools"] == [WEATHER_TOOL.model_dump()]

    async def test_complete_sends_single_user_message(
        self, httpx_mock: HTTPXMock, anthropic_config: ClientConfig
    ) -> None:
        httpx_mock.add_response(url=ANTHROPIC_URL, json=_anthropic_response())

        async with LlmClient(anthropic_config) as client:
            resp = await client.complete(None, "Say hello")

        assert resp.text() == "Hello!"
        _, body = _sent_json(httpx_mock)
        assert "system" not in body
        assert body["messages"] == [
            {"role": "user", "content": [{"type": "text", "text": "Say hello"}]}
        ]

    async def test_base_url_override(
        self, httpx_mock: HTTPXMock, anthropic_config: ClientConfig
    ) -> None:
        httpx_mock.add_response(
            url="https://gateway.internal/v1/messages", json=_anthropic_response()
        )
        config = anthropic_config.with_base_url("https://gateway.internal/")

        async with LlmClient(config) as client:
            resp = await client.complete("sys", "hi")

        assert resp.id == "msg_01"


class TestOpenAICompatibleBackend:
    async def test_chat_converts_request_and_response(
        self, httpx_mock: HTTPXMock, openai_config: ClientConfig
    ) -> None:
        httpx_mock.add_response(
            url=OPENROUTER_URL,
            method="POST",
            json=_openai_response(
                {
                    "role": "assistant",
                    "content": "Checking.",
                    "tool_calls": [
                        {
                            "id": "call_9",
                            "type": "function",
                            "function": {
                                "name": "get_weather",
                                "arguments": '{"city":"Oslo"}',
                            },
                        }
                    ],
                },
                finish_reason="tool_calls",
            ),
        )

        history = [
            Message.user_text("Weather in Paris?"),
            Message.assistant(
                [ToolUseBlock(id="call_1", name="get_weather", input={"city": "Paris"})]
            ),
            Message.tool_results([ToolResultBlock(tool_use_id="call_1", content="12C")]),
            Message.user_text("And Oslo?"),
        ]

        async with LlmClient(openai_config) as client:
            resp = await client.chat(
                history, ChatOptions(system="You are a weather bot.", tools=[WEATHER_TOOL])
            )

        assert resp.content == [
            TextBlock(text="Checking."),
            ToolUseBlock(id="call_9", name="get_weather", input={"city": "Oslo"}),
        ]
        assert resp.stop_reason == "tool_use"
        assert resp.usage is not None
        assert (resp.usage.input_tokens, resp.usage.output_tokens) == (20, 5)

        request, body = _sent_json(httpx_mock)
        assert request.headers["authorization"] == "Bearer sk-or-test"
        assert "x-api-key" not in request.headers
        assert body["model"] == "anthropic/claude-sonnet-4-5"
        assert body["max_tokens"] == 16384
        assert body["messages"] == [
            {"role": "system", "content": "You are a weather bot."},
            {"role": "user", "content": "Weather in Paris?"},
            {
                "role": "assistant",
                "tool_calls": [
                    {
                        "id": "call_1",
                        "type": "function",
                        "function": {
                            "name": "get_weather",
                            "arguments": '{"city":"Paris"}',
                        },
                    }
                ],
            },
            {"role": "tool", "content": "12C", "tool_call_id": "call_1"},
            {"role": "user", "content": "And Oslo?"},
        ]
        assert body["tools"] == [
            {
                "type": "function",
                "function": {
                    "name": "get_weather",
                    "description": "Current weather for a city",
                    "parameters": WEATHER_TOOL.input_schema,
                },
            }
        ]
        assert "temperature" not in body

    async def test_thinking_is_not_sent_to_flat_backends(
        self, httpx_mock: HTTPXMock, openai_config: ClientConfig
    ) -> None:
        httpx_mock.add_response(url=OPENROUTER_URL, json=_openai_response({"content": "ok"}))

        async with LlmClient(openai_config) as client:
            await client.chat(
                [Message.user_text("hi")],
                ChatOptions(thinking=AdaptiveThinking()),
            )

        _, body = _sent_json(httpx_mock)
        assert "thinking" not in body
        assert "output_config" not in body

    async def test_zero_choices_raises_llm_error(
        self, httpx_mock: HTTPXMock, openai_config: ClientConfig
    ) -> None:
        httpx_mock.add_response(url=OPENROUTER_URL, json={"id": "gen-empty", "choices": []})

        async with LlmClient(openai_config) as client:
            with pytest.raises(LlmError) as exc_info:
                await client.complete(None, "hi")

        assert isinstance(exc_info.value, ResponseConversionError)
        assert isinstance(exc_info.value.__cause__, ConversionError)

    async def test_chat_openai_raw_skips_conversion(
        self, httpx_mock: HTTPXMock, openai_config: ClientConfig
    ) -> None:
        httpx_mock.add_response(
            url=OPENROUTER_URL, json=_openai_response({"content": "raw"}, "length")
        )
        request = ChatRequest(
            model="openai/gpt-4o",
            messages=[ChatMessage.user("hi")],
            temperature=0.0,
        )

        async with LlmClient(openai_config) as client:
            resp = await client.chat_openai_raw(request)

        assert resp.text() == "raw"
        assert resp.choices[0].finish_reason == "length"
        _, body = _sent_json(httpx_mock)
        assert body == {
            "model": "openai/gpt-4o",
            "messages": [{"role": "user", "content": "hi"}],
            "temperature": 0.0,
        }


class TestErrors:
    async def test_non_success_status_raises_api_error(
        self, httpx_mock: HTTPXMock, anthropic_config: ClientConfig
    ) -> None:
        httpx_mock.add_response(
            url=ANTHROPIC_URL,
            status_code=429,
            text='{"type":"error","error":{"type":"rate_limit_error"}}',
        )

        async with LlmClient(anthropic_config) as client:
            with pytest.raises(ApiError) as exc_info:
                await client.complete(None, "hi")

        assert exc_info.value.status == 429
        assert "rate_limit_error" in exc_info.value.body
        assert str(exc_info.value).startswith("API error (429): ")

    async def test_transport_failure_raises_request_failed(
        self, httpx_mock: HTTPXMock, openai_config: ClientConfig
    ) -> None:
        httpx_mock.add_exception(httpx.ConnectError("connection refused"), url=OPENROUTER_URL)

        async with LlmClient(openai_config) as client:
            with pytest.raises(RequestFailedError) as exc_info:
                await client.complete(None, "hi")

        assert isinstance(exc_info.value.__cause__, httpx.ConnectError)
        assert exc_info.value.url == OPENROUTER_URL

    async def test_undecodable_body_raises_parse_error(
        self, httpx_mock: HTTPXMock, anthropic_config: ClientConfig
    ) -> None:
        httpx_mock.add_response(url=ANTHROPIC_URL, text="<html>bad gateway</html>")

        async with LlmClient(anthropic_config) as client:
            with pytest.raises(ParseResponseError):
                await client.complete(None, "hi")

    async def test_wrong_shape_raises_parse_error(
        self, httpx_mock: HTTPXMock, anthropic_config: ClientConfig
    ) -> None:
        httpx_mock.add_response(url=ANTHROPIC_URL, json={"content": "not a list"})

        async with LlmClient(anthropic_config) as client:
            with pytest.raises(ParseResponseError):
                await client.complete(None, "hi")


class TestLifecycle:
    async def test_owned_http_client_closed_on_exit(
        self, anthropic_config: ClientConfig
    ) -> None:
        client = LlmClient(anthropic_config)
        async with client:
            assert not client.http.is_closed
        assert client.http.is_closed

    async def test_injected_http_client_left_open(
        self, anthropic_config: ClientConfig
    ) -> None:
        async with httpx.AsyncClient() as http:
            client = LlmClient(anthropic_config, http_client=http)
            await client.aclose()
            assert not http.is_closed

    @pytest.mark.usefixtures("restore_logging")
    async def test_from_settings_applies_logging_section(
        self, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("LLMBRIDGE__PROVIDER", "openai")
        monkeypatch.setenv("LLMBRIDGE__API_KEY", "sk-env")
        monkeypatch.setenv("LLMBRIDGE__LOGGING__LEVEL", "DEBUG")
        structlog.reset_defaults()

        async with LlmClient.from_settings() as client:
            assert client.config.provider is Provider.OPENAI
            assert client.config.base_url == "https://api.openai.com"
            assert client.config.api_key.get_secret_value() == "sk-env"

        assert structlog.is_configured()
        assert logging.getLogger("llmbridge").level == logging.DEBUG

    @pytest.mark.usefixtures("restore_logging")
    async def test_from_settings_keeps_host_logging(self) -> None:
        structlog.configure()
        bridge_logger = logging.getLogger("llmbridge")
        bridge_logger.setLevel(logging.WARNING)
        settings = BridgeSettings(_env_file=None, logging={"level": "DEBUG"})

        async with LlmClient.from_settings(settings):
            pass

        assert bridge_logger.level == logging.WARNING

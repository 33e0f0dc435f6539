"""Async chat client speaking either wire format.

Callers always send and receive the structured format. When the backend is
OpenAI-compatible, messages and tools are converted on the way out and the
response is converted back before it is returned. There are no retries:
transport failures surface immediately.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from types import TracebackType
from typing import TYPE_CHECKING, Any, TypeVar

import httpx
import structlog
from pydantic import BaseModel, ValidationError

from llmbridge.client.config import ClientConfig
from llmbridge.core.errors import (
    ApiError,
    ClientSetupError,
    ConversionError,
    ParseResponseError,
    RequestFailedError,
    ResponseConversionError,
)
from llmbridge.core.logging import get_logger, setup_logging
from llmbridge.llms.adapters.anthropic_to_openai import (
    messages_to_openai,
    tools_to_openai,
)
from llmbridge.llms.adapters.openai_to_anthropic import response_to_anthropic
from llmbridge.llms.adapters.thinking import build_thinking_params
from llmbridge.llms.anthropic.models import Message, MessagesRequest, MessagesResponse
from llmbridge.llms.common.models import Provider, ThinkingConfig, ToolDefinition
from llmbridge.llms.openai.models import ChatRequest, ChatResponse


if TYPE_CHECKING:
    from llmbridge.config.settings import BridgeSettings


logger = get_logger(__name__)

ANTHROPIC_VERSION = "2023-06-01"

ResponseModel = TypeVar("ResponseModel", bound=BaseModel)


@dataclass
class ChatOptions:
    """Per-request options for :meth:`LlmClient.chat`."""

    system: str | None = None
    tools: Sequence[ToolDefinition] | None = None
    thinking: ThinkingConfig | None = None
    temperature: float | None = None


class LlmClient:
    """Chat client for Anthropic and OpenAI-compatible backends."""

    def __init__(
        self,
        config: ClientConfig,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            config: Backend configuration
            http_client: Optional pre-built httpx client; when omitted one is
                created with the configured timeout and owned by this client
        """
        self.config = config
        self._owns_http = http_client is None
        if http_client is None:
            try:
                http_client = httpx.AsyncClient(timeout=config.timeout)
            except Exception as e:
                raise ClientSetupError(f"HTTP client error: {e}", cause=e) from e
        self.http = http_client

    @classmethod
    def from_settings(cls, settings: BridgeSettings | None = None) -> LlmClient:
        """Build a client from environment-backed settings.

        The settings' logging section is applied unless structlog has
        already been configured by the host application.
        """
        from llmbridge.config.settings import get_settings

        if settings is None:
            settings = get_settings()

        if not structlog.is_configured():
            setup_logging(
                json_logs=settings.logging.json_logs,
                log_level=settings.logging.level,
            )

        return cls(ClientConfig.from_settings(settings))

    async def __aenter__(self) -> LlmClient:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Close the underlying HTTP client if this instance created it."""
        if self._owns_http:
            await self.http.aclose()

    async def chat(
        self,
        messages: Sequence[Message],
        options: ChatOptions | None = None,
    ) -> MessagesResponse:
        """Send a chat request in the structured format.

        The request is converted when the backend is OpenAI-compatible; the
        response is always returned in the structured format.
        """
        options = options or ChatOptions()
        logger.info(
            "llm_request_started",
            provider=str(self.config.provider),
            model=self.config.model,
            messages=len(messages),
            category="http",
        )

        if self.config.provider is Provider.OPENAI:
            resp = await self._chat_openai_compat(messages, options)
        else:
            resp = await self._chat_anthropic(messages, options)

        logger.info(
            "llm_request_completed",
            stop_reason=resp.stop_reason,
            content_blocks=len(resp.content),
            category="http",
        )
        return resp

    async def complete(
        self,
        system: str | None,
        user: str,
        thinking: ThinkingConfig | None = None,
    ) -> MessagesResponse:
        """Send a single user message and return the full response."""
        return await self.chat(
            [Message.user_text(user)],
            ChatOptions(system=system, thinking=thinking),
        )

    async def chat_openai_raw(self, request: ChatRequest) -> ChatResponse:
        """Send an OpenAI-format request without any format conversion."""
        return await self._post(
            f"{self.config.base_url}/v1/chat/completions",
            self._openai_headers(),
            request.model_dump(mode="json"),
            ChatResponse,
        )

    def _anthropic_headers(self) -> dict[str, str]:
        return {
            "x-api-key": self.config.api_key.get_secret_value(),
            "anthropic-version": ANTHROPIC_VERSION,
            "content-type": "application/json",
        }

    def _openai_headers(self) -> dict[str, str]:
        return {
            "authorization": f"Bearer {self.config.api_key.get_secret_value()}",
            "content-type": "application/json",
        }

    async def _chat_anthropic(
        self, messages: Sequence[Message], options: ChatOptions
    ) -> MessagesResponse:
        thinking, output_config = build_thinking_params(options.thinking)
        request = MessagesRequest(
            model=self.config.model,
            max_tokens=self.config.max_tokens,
            system=options.system,
            messages=list(messages),
            tools=list(options.tools) if options.tools is not None else None,
            thinking=thinking,
            output_config=output_config,
            temperature=options.temperature,
        )
        return await self._post(
            f"{self.config.base_url}/v1/messages",
            self._anthropic_headers(),
            request.model_dump(mode="json"),
            MessagesResponse,
        )

    async def _chat_openai_compat(
        self, messages: Sequence[Message], options: ChatOptions
    ) -> MessagesResponse:
        request = ChatRequest(
            model=self.config.model,
            max_tokens=self.config.max_tokens,
            messages=messages_to_openai(options.system, messages),
            temperature=options.temperature,
            tools=(
                tools_to_openai(options.tools) if options.tools is not None else None
            ),
        )
        openai_resp = await self.chat_openai_raw(request)
        try:
            return response_to_anthropic(openai_resp)
        except ConversionError as e:
            logger.error(
                "llm_response_conversion_failed",
                error=str(e),
                response_id=openai_resp.id,
                category="conversion",
            )
            raise ResponseConversionError(
                f"Failed to convert response: {e}", cause=e
            ) from e

    async def _post(
        self,
        url: str,
        headers: dict[str, str],
        body: dict[str, Any],
        response_model: type[ResponseModel],
    ) -> ResponseModel:
        logger.debug("llm_http_post", url=url, model=body.get("model"), category="http")

        try:
            response = await self.http.post(url, headers=headers, json=body)
        except httpx.HTTPError as e:
            logger.error("llm_request_failed", url=url, error=str(e), category="http")
            raise RequestFailedError(f"Request failed: {e}", url=url, cause=e) from e

        if not response.is_success:
            logger.error(
                "llm_api_error",
                status_code=response.status_code,
                body=response.text[:500],
                category="http",
            )
            raise ApiError(response.status_code, response.text)

        try:
            return response_model.model_validate_json(response.content)
        except ValidationError as e:
            logger.error("llm_response_parse_failed", error=str(e), category="http")
            raise ParseResponseError(f"Failed to parse response: {e}", cause=e) from e


__all__ = ["ANTHROPIC_VERSION", "ChatOptions", "LlmClient"]

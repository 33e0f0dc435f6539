"""Client configuration."""

from __future__ import annotations

from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict, Field, SecretStr

from llmbridge.llms.common.models import Provider


if TYPE_CHECKING:
    from llmbridge.config.settings import BridgeSettings


ANTHROPIC_TIMEOUT_SECONDS = 180.0
OPENAI_TIMEOUT_SECONDS = 60.0
DEFAULT_MAX_TOKENS = 16384


class ClientConfig(BaseModel):
    """Connection and model settings for one backend."""

    model_config = ConfigDict(frozen=True)

    provider: Provider = Field(description="Wire protocol spoken by the backend")
    base_url: str = Field(description="Backend base URL, without the /v1 suffix")
    api_key: SecretStr = Field(description="API key sent to the backend")
    timeout: float = Field(gt=0, description="Request timeout in seconds")
    model: str = Field(description="Model identifier")
    max_tokens: int = Field(
        default=DEFAULT_MAX_TOKENS, ge=1, description="Output token cap"
    )

    @classmethod
    def anthropic(cls, api_key: str, model: str) -> ClientConfig:
        """Config for the Anthropic API."""
        return cls(
            provider=Provider.ANTHROPIC,
            base_url=Provider.ANTHROPIC.default_base_url,
            api_key=SecretStr(api_key),
            timeout=ANTHROPIC_TIMEOUT_SECONDS,
            model=model,
        )

    @classmethod
    def openai_compatible(cls, base_url: str, api_key: str, model: str) -> ClientConfig:
        """Config for an OpenAI-compatible API (OpenRouter, OpenAI, Ollama, ...)."""
        return cls(
            provider=Provider.OPENAI,
            base_url=base_url.rstrip("/"),
            api_key=SecretStr(api_key),
            timeout=OPENAI_TIMEOUT_SECONDS,
            model=model,
        )

    @classmethod
    def from_settings(cls, settings: BridgeSettings) -> ClientConfig:
        """Build a config from environment-backed settings."""
        default_timeout = (
            ANTHROPIC_TIMEOUT_SECONDS
            if settings.provider is Provider.ANTHROPIC
            else OPENAI_TIMEOUT_SECONDS
        )
        return cls(
            provider=settings.provider,
            base_url=settings.resolved_base_url,
            api_key=settings.api_key,
            timeout=settings.timeout or default_timeout,
            model=settings.model,
            max_tokens=settings.max_tokens,
        )

    def with_timeout(self, timeout: float) -> ClientConfig:
        return self.model_copy(update={"timeout": timeout})

    def with_max_tokens(self, max_tokens: int) -> ClientConfig:
        return self.model_copy(update={"max_tokens": max_tokens})

    def with_base_url(self, base_url: str) -> ClientConfig:
        return self.model_copy(update={"base_url": base_url.rstrip("/")})

from functools import lru_cache
from typing import Literal

from pydantic import BaseModel, Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from llmbridge.llms.common.models import Provider


__all__ = ["BridgeSettings", "ConfigurationError", "LoggingSettings", "get_settings"]


class ConfigurationError(Exception):
    """Raised when configuration loading or validation fails."""

    pass


class LoggingSettings(BaseModel):
    """Logging configuration."""

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO", description="Log level for llmbridge loggers"
    )
    json_logs: bool = Field(
        default=False, description="Render logs as JSON instead of console output"
    )

    @field_validator("level", mode="before")
    @classmethod
    def _upper_level(cls, v: object) -> object:
        return v.upper() if isinstance(v, str) else v


class BridgeSettings(BaseSettings):
    """
    Configuration for the llmbridge client.

    Values are read from environment variables prefixed with ``LLMBRIDGE__``
    and from a ``.env`` file. Nested sections use ``__`` as delimiter, e.g.
    ``LLMBRIDGE__LOGGING__LEVEL=DEBUG``.
    """

    model_config = SettingsConfigDict(
        env_prefix="LLMBRIDGE__",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        env_nested_delimiter="__",
    )

    provider: Provider = Field(
        default=Provider.ANTHROPIC,
        description="Wire protocol spoken by the backend",
    )
    base_url: str | None = Field(
        default=None,
        description="Backend base URL; defaults to the provider's public endpoint",
    )
    api_key: SecretStr = Field(
        default=SecretStr(""),
        description="API key sent to the backend",
    )
    model: str = Field(default="claude-sonnet-4-6", description="Model identifier")
    max_tokens: int = Field(default=16384, ge=1, description="Output token cap")
    timeout: float | None = Field(
        default=None,
        gt=0,
        description="Request timeout in seconds; defaults depend on the provider",
    )
    logging: LoggingSettings = Field(
        default_factory=LoggingSettings,
        description="Logging configuration",
    )

    @field_validator("provider", mode="before")
    @classmethod
    def _parse_provider(cls, v: object) -> object:
        if isinstance(v, str):
            try:
                return Provider.parse(v)
            except ValueError as e:
                raise ConfigurationError(str(e)) from e
        return v

    @property
    def resolved_base_url(self) -> str:
        """Base URL with the provider default applied."""
        return (self.base_url or self.provider.default_base_url).rstrip("/")


@lru_cache
def get_settings() -> BridgeSettings:
    """Return process-wide settings loaded from the environment."""
    return BridgeSettings()

"""Configuration module for llmbridge."""

from .settings import BridgeSettings, ConfigurationError, LoggingSettings, get_settings


__all__ = [
    "BridgeSettings",
    "ConfigurationError",
    "LoggingSettings",
    "get_settings",
]

"""Provider-agnostic models and constants."""

from .models import (
    AdaptiveThinking,
    EffortLevel,
    EnabledThinking,
    Provider,
    ResponseFormat,
    StopReason,
    StopReasonKind,
    ThinkingConfig,
    ToolDefinition,
    Usage,
)


__all__ = [
    "AdaptiveThinking",
    "EffortLevel",
    "EnabledThinking",
    "Provider",
    "ResponseFormat",
    "StopReason",
    "StopReasonKind",
    "ThinkingConfig",
    "ToolDefinition",
    "Usage",
]

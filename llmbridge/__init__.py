"""Bridge between the Anthropic Messages and OpenAI chat completions formats."""

from llmbridge.client import ChatOptions, ClientConfig, LlmClient
from llmbridge.core.errors import (
    ApiError,
    BridgeError,
    ClientSetupError,
    ConversionError,
    LlmError,
    ParseResponseError,
    RequestFailedError,
    ResponseConversionError,
)
from llmbridge.llms.common.models import (
    AdaptiveThinking,
    EffortLevel,
    EnabledThinking,
    Provider,
    StopReason,
    StopReasonKind,
    ThinkingConfig,
    ToolDefinition,
    Usage,
)


__version__ = "0.1.0"

__all__ = [
    "AdaptiveThinking",
    "ApiError",
    "BridgeError",
    "ChatOptions",
    "ClientConfig",
    "ClientSetupError",
    "ConversionError",
    "EffortLevel",
    "EnabledThinking",
    "LlmClient",
    "LlmError",
    "ParseResponseError",
    "Provider",
    "RequestFailedError",
    "ResponseConversionError",
    "StopReason",
    "StopReasonKind",
    "ThinkingConfig",
    "ToolDefinition",
    "Usage",
    "__version__",
]

"""Format converters between the structured and flat chat wire formats."""

from .anthropic_to_openai import (
    anthropic_response_to_openai,
    messages_to_openai,
    tools_to_openai,
)
from .cache_control import count_cache_control_blocks, ensure_cache_control
from .openai_to_anthropic import (
    inbound_request_to_anthropic,
    openai_tool_to_anthropic,
    parse_data_url,
    response_to_anthropic,
)
from .thinking import (
    build_thinking_for_model,
    build_thinking_params,
    parse_model_suffix,
    resolve_model_thinking,
    supports_adaptive_thinking,
    thinking_request_fields,
)
from .tool_names import (
    add_mcp_prefix,
    strip_mcp_prefix,
    transform_request_tool_names,
    transform_response_tool_names,
)


__all__ = [
    "add_mcp_prefix",
    "anthropic_response_to_openai",
    "build_thinking_for_model",
    "build_thinking_params",
    "count_cache_control_blocks",
    "ensure_cache_control",
    "inbound_request_to_anthropic",
    "messages_to_openai",
    "openai_tool_to_anthropic",
    "parse_data_url",
    "parse_model_suffix",
    "resolve_model_thinking",
    "response_to_anthropic",
    "strip_mcp_prefix",
    "supports_adaptive_thinking",
    "thinking_request_fields",
    "tools_to_openai",
    "transform_request_tool_names",
    "transform_response_tool_names",
]

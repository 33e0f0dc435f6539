"""Flat (OpenAI chat) -> structured (Anthropic) conversion.

Two entry points:

- ``response_to_anthropic`` normalizes a chat completion returned by an
  OpenAI-compatible backend, so callers always see the structured format
- ``inbound_request_to_anthropic`` decodes a chat request received by a proxy
  into a structured-format request body
"""

from __future__ import annotations

import copy
import json
from typing import Any

from llmbridge.core.errors import ConversionError
from llmbridge.core.logging import get_logger
from llmbridge.llms.adapters.thinking import (
    resolve_model_thinking,
    thinking_request_fields,
)
from llmbridge.llms.anthropic.models import (
    ContentBlock,
    MessagesResponse,
    TextBlock,
    ToolUseBlock,
)
from llmbridge.llms.common.constants import (
    DEFAULT_TOOL_INPUT_SCHEMA,
    THINKING_MAX_TOKENS_HEADROOM,
)
from llmbridge.llms.common.models import EnabledThinking, StopReason, Usage
from llmbridge.llms.openai.models import (
    ChatResponse,
    InboundChatRequest,
    InboundContentPart,
    InboundImageUrlPart,
    InboundMessage,
    InboundTextPart,
)


logger = get_logger(__name__)


def decode_tool_arguments(arguments: str, *, tool_name: str | None = None) -> Any:
    """Parse JSON-encoded tool arguments, falling back to ``{}``."""
    try:
        return json.loads(arguments)
    except (json.JSONDecodeError, TypeError) as e:
        logger.warning(
            "tool_arguments_parse_failed",
            tool_name=tool_name,
            arguments=arguments[:200] if isinstance(arguments, str) else None,
            error=str(e),
            category="conversion",
        )
        return {}


def response_to_anthropic(resp: ChatResponse) -> MessagesResponse:
    """Convert a chat completion into a structured-format response.

    Only the first choice is considered.

    Raises:
        ConversionError: If the response has no choices at all
    """
    if not resp.choices:
        raise ConversionError("OpenAI response had no choices", data=resp.id)

    choice = resp.choices[0]
    content: list[ContentBlock] = []

    if choice.message.content:
        content.append(TextBlock(text=choice.message.content))

    for tool_call in choice.message.tool_calls or []:
        content.append(
            ToolUseBlock(
                id=tool_call.id,
                name=tool_call.function.name,
                input=decode_tool_arguments(
                    tool_call.function.arguments, tool_name=tool_call.function.name
                ),
            )
        )

    stop_reason = StopReason.from_openai(choice.finish_reason or "stop")

    usage = None
    if resp.usage is not None:
        usage = Usage(
            input_tokens=resp.usage.prompt_tokens,
            output_tokens=resp.usage.completion_tokens,
            cache_creation_input_tokens=resp.usage.cache_creation_input_tokens,
            cache_read_input_tokens=resp.usage.cache_read_input_tokens,
        )

    return MessagesResponse(
        id=resp.id,
        model=resp.model,
        content=content,
        stop_reason=stop_reason.to_anthropic(),
        usage=usage,
    )


def openai_tool_to_anthropic(tool: dict[str, Any]) -> dict[str, Any]:
    """Convert an OpenAI tool declaration to the Anthropic shape.

    OpenAI: ``{"type": "function", "function": {"name", "description", "parameters"}}``
    Anthropic: ``{"name", "description", "input_schema"}``

    Values without a ``function`` key are assumed to be in Anthropic format
    already and are returned unchanged.
    """
    function = tool.get("function") if isinstance(tool, dict) else None
    if function is None:
        return tool
    if not isinstance(function, dict):
        function = {}

    return {
        "name": function.get("name", "unknown"),
        "description": function.get("description", ""),
        "input_schema": copy.deepcopy(
            function.get("parameters", DEFAULT_TOOL_INPUT_SCHEMA)
        ),
    }


def parse_data_url(url: str) -> tuple[str, str] | None:
    """Split ``data:<media_type>;base64,<data>`` into ``(media_type, data)``."""
    if not url.startswith("data:"):
        return None
    header, sep, data = url[len("data:") :].partition(",")
    if not sep or not header.endswith(";base64"):
        return None
    return header[: -len(";base64")], data


def _image_block(url: str) -> dict[str, Any] | None:
    parsed = parse_data_url(url)
    if parsed is None:
        logger.debug(
            "image_url_dropped",
            reason="not_a_data_url" if not url.startswith("data:") else "malformed",
            category="conversion",
        )
        return None
    media_type, data = parsed
    return {
        "type": "image",
        "source": {"type": "base64", "media_type": media_type, "data": data},
    }


def _parts_to_blocks(parts: list[InboundContentPart]) -> list[dict[str, Any]]:
    blocks: list[dict[str, Any]] = []
    for part in parts:
        if isinstance(part, InboundTextPart):
            blocks.append({"type": "text", "text": part.text})
        elif isinstance(part, InboundImageUrlPart):
            image = _image_block(part.image_url.url)
            if image is not None:
                blocks.append(image)
    return blocks


def _joined_text(content: str | list[InboundContentPart] | None) -> str:
    if isinstance(content, str):
        return content
    if content is None:
        return ""
    return "".join(part.text for part in content if isinstance(part, InboundTextPart))


def _assistant_blocks(msg: InboundMessage) -> list[dict[str, Any]]:
    blocks: list[dict[str, Any]] = []
    if isinstance(msg.content, str):
        if msg.content:
            blocks.append({"type": "text", "text": msg.content})
    elif msg.content is not None:
        blocks.extend(_parts_to_blocks(msg.content))

    for tool_call in msg.tool_calls or []:
        blocks.append(
            {
                "type": "tool_use",
                "id": tool_call.id,
                "name": tool_call.function.name,
                "input": decode_tool_arguments(
                    tool_call.function.arguments, tool_name=tool_call.function.name
                ),
            }
        )
    return blocks


def _user_blocks(msg: InboundMessage) -> list[dict[str, Any]]:
    if msg.content is None:
        return [{"type": "text", "text": ""}]
    if isinstance(msg.content, str):
        return [{"type": "text", "text": msg.content}]
    return _parts_to_blocks(msg.content)


def inbound_request_to_anthropic(req: InboundChatRequest) -> dict[str, Any]:
    """Convert an inbound chat request into a structured-format request body.

    - ``system`` messages move to the top-level ``system`` field
    - ``tool`` messages become user turns holding one ``tool_result`` block
    - assistant ``tool_calls`` become ``tool_use`` blocks
    - every other role becomes a user turn with text and image blocks
    - turns that end up without content blocks are dropped
    - a ``reasoning_effort`` or a model effort suffix becomes ``thinking``
    """
    system_parts: list[dict[str, Any]] = []
    messages: list[dict[str, Any]] = []
    dropped = 0

    for msg in req.messages:
        if msg.role == "system":
            text = _joined_text(msg.content)
            if text:
                system_parts.append({"type": "text", "text": text})
            continue

        if msg.role == "tool":
            messages.append(
                {
                    "role": "user",
                    "content": [
                        {
                            "type": "tool_result",
                            "tool_use_id": msg.tool_call_id or "",
                            "content": _joined_text(msg.content),
                        }
                    ],
                }
            )
            continue

        if msg.role == "assistant":
            role = "assistant"
            blocks = _assistant_blocks(msg)
        else:
            role = "user"
            blocks = _user_blocks(msg)

        if blocks:
            messages.append({"role": role, "content": blocks})
        else:
            dropped += 1

    body: dict[str, Any] = {"messages": messages}

    thinking_fields: dict[str, Any] = {}
    if req.model is not None:
        model, thinking = resolve_model_thinking(req.model, req.reasoning_effort)
        body["model"] = model
        thinking_fields = thinking_request_fields(thinking)
        if isinstance(thinking, EnabledThinking) and req.max_tokens is not None:
            if req.max_tokens <= thinking.budget_tokens:
                body["max_tokens"] = (
                    thinking.budget_tokens + THINKING_MAX_TOKENS_HEADROOM
                )
    if req.max_tokens is not None and "max_tokens" not in body:
        body["max_tokens"] = req.max_tokens
    if req.temperature is not None:
        body["temperature"] = req.temperature
    if req.top_p is not None:
        body["top_p"] = req.top_p
    if system_parts:
        body["system"] = system_parts
    if req.tools is not None:
        body["tools"] = [openai_tool_to_anthropic(tool) for tool in req.tools]
    body.update(thinking_fields)

    logger.debug(
        "inbound_request_converted",
        model=body.get("model"),
        messages=len(messages),
        dropped_messages=dropped,
        system_blocks=len(system_parts),
        tools=len(body.get("tools", [])),
        thinking=body.get("thinking", {}).get("type"),
        category="conversion",
    )
    return body


__all__ = [
    "decode_tool_arguments",
    "inbound_request_to_anthropic",
    "openai_tool_to_anthropic",
    "parse_data_url",
    "response_to_anthropic",
]

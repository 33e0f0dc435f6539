"""Structured (Anthropic) -> flat (OpenAI chat) conversion.

- system prompt becomes a leading ``role: "system"`` message
- assistant text joins into ``content``, tool uses into ``tool_calls``
- user messages carrying tool results expand into one ``role: "tool"``
  message per result
- thinking blocks have no flat counterpart and are dropped
"""

from __future__ import annotations

import json
import time
from collections.abc import Callable, Sequence
from typing import Any, assert_never

from llmbridge.core.logging import get_logger
from llmbridge.llms.anthropic.models import (
    Message,
    MessagesResponse,
    TextBlock,
    ThinkingBlock,
    ToolResultBlock,
    ToolUseBlock,
)
from llmbridge.llms.common.models import ToolDefinition
from llmbridge.llms.openai.models import (
    ChatMessage,
    ChatResponse,
    Choice,
    FunctionCall,
    ResponseMessage,
    ResponseToolCall,
    ResponseToolCallFunction,
    ResponseUsage,
    Tool,
    ToolCall,
    ToolFunction,
)


logger = get_logger(__name__)

CHAT_COMPLETION_OBJECT = "chat.completion"


def encode_tool_arguments(tool_input: Any) -> str:
    """Serialize tool input as compact JSON, ``"{}"`` if it cannot be encoded."""
    try:
        return json.dumps(
            tool_input, separators=(",", ":"), ensure_ascii=False, allow_nan=False
        )
    except (TypeError, ValueError) as e:
        logger.warning(
            "tool_arguments_encode_failed",
            error=str(e),
            input_type=type(tool_input).__name__,
            category="conversion",
        )
        return "{}"


def _assistant_to_openai(message: Message) -> ChatMessage:
    text_parts: list[str] = []
    tool_calls: list[ToolCall] = []

    for block in message.content:
        if isinstance(block, TextBlock):
            text_parts.append(block.text)
        elif isinstance(block, ToolUseBlock):
            tool_calls.append(
                ToolCall(
                    id=block.id,
                    function=FunctionCall(
                        name=block.name,
                        arguments=encode_tool_arguments(block.input),
                    ),
                )
            )
        elif isinstance(block, ThinkingBlock | ToolResultBlock):
            continue
        else:
            assert_never(block)

    return ChatMessage(
        role="assistant",
        content="\n".join(text_parts) if text_parts else None,
        tool_calls=tool_calls or None,
    )


def _user_to_openai(message: Message) -> list[ChatMessage]:
    tool_results = [
        block for block in message.content if isinstance(block, ToolResultBlock)
    ]
    if tool_results:
        # Tool results are never merged with surrounding user text
        return [
            ChatMessage.tool_result(block.tool_use_id, block.content)
            for block in tool_results
        ]

    text_parts: list[str] = []
    for block in message.content:
        if isinstance(block, TextBlock):
            text_parts.append(block.text)
        elif isinstance(block, ThinkingBlock | ToolUseBlock | ToolResultBlock):
            continue
        else:
            assert_never(block)
    return [ChatMessage.user("\n".join(text_parts))]


def messages_to_openai(
    system: str | None, messages: Sequence[Message]
) -> list[ChatMessage]:
    """Convert structured messages plus an optional system prompt to flat messages."""
    out: list[ChatMessage] = []

    if system is not None:
        out.append(ChatMessage.system(system))

    for message in messages:
        if message.role == "assistant":
            out.append(_assistant_to_openai(message))
        elif message.role == "user":
            out.extend(_user_to_openai(message))
        else:
            assert_never(message.role)

    logger.debug(
        "messages_converted_to_openai",
        input_messages=len(messages),
        output_messages=len(out),
        has_system=system is not None,
        category="conversion",
    )
    return out


def tools_to_openai(tools: Sequence[ToolDefinition]) -> list[Tool]:
    """Wrap provider-agnostic tool definitions in OpenAI function envelopes."""
    return [
        Tool(
            function=ToolFunction(
                name=tool.name,
                description=tool.description,
                parameters=tool.input_schema,
            )
        )
        for tool in tools
    ]


def anthropic_response_to_openai(
    resp: MessagesResponse, *, clock: Callable[[], float] = time.time
) -> ChatResponse:
    """Convert a structured response into a chat completion envelope.

    Used on the proxy path. ``clock`` supplies the ``created`` timestamp so
    callers needing deterministic output can pin it.
    """
    text_parts: list[str] = []
    reasoning_parts: list[str] = []
    tool_calls: list[ResponseToolCall] = []

    for block in resp.content:
        if isinstance(block, TextBlock):
            text_parts.append(block.text)
        elif isinstance(block, ThinkingBlock):
            reasoning_parts.append(block.thinking)
        elif isinstance(block, ToolUseBlock):
            tool_calls.append(
                ResponseToolCall(
                    id=block.id,
                    type="function",
                    function=ResponseToolCallFunction(
                        name=block.name,
                        arguments=encode_tool_arguments(block.input),
                    ),
                )
            )
        elif isinstance(block, ToolResultBlock):
            continue
        else:
            assert_never(block)

    usage = None
    if resp.usage is not None:
        usage = ResponseUsage(
            prompt_tokens=resp.usage.input_tokens,
            completion_tokens=resp.usage.output_tokens,
            total_tokens=resp.usage.total_tokens,
            cache_creation_input_tokens=resp.usage.cache_creation_input_tokens,
            cache_read_input_tokens=resp.usage.cache_read_input_tokens,
        )

    return ChatResponse(
        id=resp.id,
        object=CHAT_COMPLETION_OBJECT,
        created=int(clock()),
        model=resp.model,
        choices=[
            Choice(
                index=0,
                message=ResponseMessage(
                    role="assistant",
                    content="".join(text_parts) if text_parts else None,
                    reasoning_content=(
                        "".join(reasoning_parts) if reasoning_parts else None
                    ),
                    tool_calls=tool_calls or None,
                ),
                finish_reason=resp.stop().to_openai(),
            )
        ],
        usage=usage,
    )


__all__ = [
    "CHAT_COMPLETION_OBJECT",
    "anthropic_response_to_openai",
    "encode_tool_arguments",
    "messages_to_openai",
    "tools_to_openai",
]

"""
Pydantic V2 models for the OpenAI chat completions wire format.

This module contains data structures for:
- outbound /v1/chat/completions requests and their responses
- permissive inbound requests, used when llmbridge itself receives the
  flat chat format and has to forward it in the structured format
"""

from typing import Annotated, Any, ClassVar, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from llmbridge.core.logging import get_logger
from llmbridge.llms.common.models import ResponseFormat, WireModel


logger = get_logger(__name__)


# ==============================================================================
# Chat Completions requests (/v1/chat/completions)
# ==============================================================================


class FunctionCall(WireModel):
    name: str
    arguments: str = Field(..., description="JSON-encoded function arguments.")


class ToolCall(WireModel):
    id: str
    type: Literal["function"] = "function"
    function: FunctionCall


class ChatMessage(WireModel):
    """
    A message within a chat conversation.
    """

    omit_if_none: ClassVar[tuple[str, ...]] = ("content", "tool_calls", "tool_call_id")

    role: Literal["system", "user", "assistant", "tool"]
    content: str | None = None
    tool_calls: list[ToolCall] | None = None
    tool_call_id: str | None = None  # For tool role messages

    @classmethod
    def system(cls, content: str) -> "ChatMessage":
        return cls(role="system", content=content)

    @classmethod
    def user(cls, content: str) -> "ChatMessage":
        return cls(role="user", content=content)

    @classmethod
    def assistant_text(cls, content: str) -> "ChatMessage":
        return cls(role="assistant", content=content)

    @classmethod
    def tool_result(cls, tool_call_id: str, content: str) -> "ChatMessage":
        return cls(role="tool", content=content, tool_call_id=tool_call_id)


class ToolFunction(WireModel):
    """
    The definition of a function that the model can call.
    """

    name: str = Field(..., description="The name of the function to be called.")
    description: str = Field(..., description="What the function does.")
    parameters: dict[str, Any] = Field(
        ...,
        description="The parameters the function accepts, as a JSON Schema object.",
    )


class Tool(WireModel):
    """
    A tool the model may call.
    """

    type: Literal["function"] = "function"
    function: ToolFunction


class ChatRequest(WireModel):
    """
    Request body for creating a chat completion.
    """

    omit_if_none: ClassVar[tuple[str, ...]] = (
        "max_tokens",
        "temperature",
        "tools",
        "response_format",
    )

    model: str
    max_tokens: int | None = None
    messages: list[ChatMessage]
    temperature: float | None = None
    tools: list[Tool] | None = None
    response_format: ResponseFormat | None = None


# ==============================================================================
# Chat Completions responses
# ==============================================================================


class ResponseToolCallFunction(WireModel):
    name: str
    arguments: str = ""


class ResponseToolCall(WireModel):
    omit_if_none: ClassVar[tuple[str, ...]] = ("type",)

    id: str
    type: str | None = None
    function: ResponseToolCallFunction


class ResponseMessage(WireModel):
    omit_if_none: ClassVar[tuple[str, ...]] = (
        "role",
        "reasoning_content",
        "tool_calls",
    )

    role: str | None = None
    content: str | None = None
    reasoning_content: str | None = None
    tool_calls: list[ResponseToolCall] | None = None


class Choice(WireModel):
    omit_if_none: ClassVar[tuple[str, ...]] = ("index",)

    index: int | None = None
    message: ResponseMessage
    finish_reason: str | None = None


class ResponseUsage(WireModel):
    omit_if_none: ClassVar[tuple[str, ...]] = (
        "cache_creation_input_tokens",
        "cache_read_input_tokens",
    )

    prompt_tokens: int = 0
    completion_tokens: int = 0
    total_tokens: int = 0
    cache_creation_input_tokens: int | None = None
    cache_read_input_tokens: int | None = None


class ChatResponse(WireModel):
    omit_if_none: ClassVar[tuple[str, ...]] = (
        "id",
        "object",
        "created",
        "model",
        "usage",
    )

    id: str | None = None
    object: str | None = None
    created: int | None = None
    model: str | None = None
    choices: list[Choice]
    usage: ResponseUsage | None = None

    def text(self) -> str | None:
        """Text content of the first choice."""
        if not self.choices:
            return None
        return self.choices[0].message.content

    def text_or_raise(self) -> str:
        text = self.text()
        if text is None:
            raise ValueError("No response content (empty choices)")
        return text


# ==============================================================================
# Inbound requests (proxy receive side)
# ==============================================================================


class ImageUrlData(BaseModel):
    model_config = ConfigDict(extra="ignore")

    url: str


class InboundTextPart(BaseModel):
    model_config = ConfigDict(extra="ignore")

    type: Literal["text"] = "text"
    text: str = ""


class InboundImageUrlPart(BaseModel):
    model_config = ConfigDict(extra="ignore")

    type: Literal["image_url"] = "image_url"
    image_url: ImageUrlData


InboundContentPart = Annotated[
    InboundTextPart | InboundImageUrlPart, Field(discriminator="type")
]

_KNOWN_PART_TYPES = frozenset({"text", "image_url"})


class InboundFunction(BaseModel):
    model_config = ConfigDict(extra="ignore")

    name: str
    arguments: str = ""


class InboundToolCall(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: str
    function: InboundFunction


class InboundMessage(BaseModel):
    """A chat message as sent by an arbitrary OpenAI-compatible caller."""

    model_config = ConfigDict(extra="ignore")

    role: str
    content: str | list[InboundContentPart] | None = None
    tool_calls: list[InboundToolCall] | None = None
    tool_call_id: str | None = None

    @field_validator("content", mode="before")
    @classmethod
    def _drop_unknown_parts(cls, value: Any) -> Any:
        if not isinstance(value, list):
            return value
        kept = []
        for part in value:
            if isinstance(part, dict) and part.get("type") in _KNOWN_PART_TYPES:
                kept.append(part)
            elif isinstance(part, BaseModel):
                kept.append(part)
            else:
                logger.debug(
                    "inbound_content_part_dropped",
                    part_type=part.get("type") if isinstance(part, dict) else None,
                    category="conversion",
                )
        return kept


class InboundChatRequest(BaseModel):
    """Inbound chat request with lenient decoding of optional fields."""

    model_config = ConfigDict(extra="ignore")

    model: str | None = None
    messages: list[InboundMessage] = Field(default_factory=list)
    max_tokens: int | None = None
    temperature: float | None = None
    stream: bool | None = None
    top_p: float | None = None
    tools: list[dict[str, Any]] | None = None
    reasoning_effort: str | None = None


__all__ = [
    "ChatMessage",
    "ChatRequest",
    "ChatResponse",
    "Choice",
    "FunctionCall",
    "ImageUrlData",
    "InboundChatRequest",
    "InboundContentPart",
    "InboundFunction",
    "InboundImageUrlPart",
    "InboundMessage",
    "InboundTextPart",
    "InboundToolCall",
    "ResponseMessage",
    "ResponseToolCall",
    "ResponseToolCallFunction",
    "ResponseUsage",
    "Tool",
    "ToolCall",
    "ToolFunction",
]

from typing import Annotated, Any, ClassVar, Literal

from pydantic import Field, model_validator

from llmbridge.llms.common.models import StopReason, ToolDefinition, Usage, WireModel


# ===================================================================
# Content Blocks
# ===================================================================


class TextBlock(WireModel):
    """A block of text content."""

    type: Literal["text"] = Field("text", alias="type")
    text: str


class ThinkingBlock(WireModel):
    """Block representing the model's thinking process."""

    omit_if_none: ClassVar[tuple[str, ...]] = ("signature",)

    type: Literal["thinking"] = Field("thinking", alias="type")
    thinking: str
    signature: str | None = None


class ToolUseBlock(WireModel):
    """Block for a tool use."""

    type: Literal["tool_use"] = Field("tool_use", alias="type")
    id: str
    name: str
    input: Any = Field(default_factory=dict)


class ToolResultBlock(WireModel):
    """Block for the result of a tool use."""

    omit_if_none: ClassVar[tuple[str, ...]] = ("is_error",)

    type: Literal["tool_result"] = Field("tool_result", alias="type")
    tool_use_id: str
    content: str
    is_error: bool | None = None


ContentBlock = Annotated[
    TextBlock | ThinkingBlock | ToolUseBlock | ToolResultBlock,
    Field(discriminator="type"),
]


class Message(WireModel):
    """A message in the conversation."""

    role: Literal["user", "assistant"]
    content: list[ContentBlock]

    @model_validator(mode="after")
    def _tool_results_only_from_user(self) -> "Message":
        if self.role != "user" and any(
            isinstance(block, ToolResultBlock) for block in self.content
        ):
            raise ValueError("tool_result blocks are only allowed in user messages")
        return self

    @classmethod
    def user(cls, content: list[ContentBlock]) -> "Message":
        return cls(role="user", content=content)

    @classmethod
    def assistant(cls, content: list[ContentBlock]) -> "Message":
        return cls(role="assistant", content=content)

    @classmethod
    def user_text(cls, text: str) -> "Message":
        return cls.user([TextBlock(text=text)])

    @classmethod
    def tool_results(cls, results: list[ContentBlock]) -> "Message":
        return cls.user(results)


# ===================================================================
# Thinking parameters
# ===================================================================


class AdaptiveThinkingParam(WireModel):
    """``{"type": "adaptive"}``: the model decides when and how much to think."""

    type: Literal["adaptive"] = Field("adaptive", alias="type")


class EnabledThinkingParam(WireModel):
    """``{"type": "enabled", "budget_tokens": N}``: manual extended thinking."""

    type: Literal["enabled"] = Field("enabled", alias="type")
    budget_tokens: int


ThinkingParam = Annotated[
    AdaptiveThinkingParam | EnabledThinkingParam, Field(discriminator="type")
]


class OutputConfig(WireModel):
    """Effort override for adaptive thinking."""

    effort: str


# ===================================================================
# Messages API (/v1/messages)
# ===================================================================


class MessagesRequest(WireModel):
    """Request model for creating a new message."""

    omit_if_none: ClassVar[tuple[str, ...]] = (
        "system",
        "tools",
        "thinking",
        "output_config",
        "temperature",
    )

    model: str
    max_tokens: int
    system: str | None = None
    messages: list[Message]
    tools: list[ToolDefinition] | None = None
    thinking: ThinkingParam | None = None
    output_config: OutputConfig | None = None
    temperature: float | None = None


class MessagesResponse(WireModel):
    """Response model for a created message."""

    omit_if_none: ClassVar[tuple[str, ...]] = ("id", "model", "usage")

    id: str | None = None
    model: str | None = None
    content: list[ContentBlock] = Field(default_factory=list)
    stop_reason: str
    usage: Usage | None = None

    def text(self) -> str:
        """Concatenate all text blocks."""
        return "".join(
            block.text for block in self.content if isinstance(block, TextBlock)
        )

    def thinking_text(self) -> str | None:
        """Concatenate all thinking blocks, or ``None`` if there are none."""
        parts = [
            block.thinking
            for block in self.content
            if isinstance(block, ThinkingBlock)
        ]
        return "".join(parts) if parts else None

    def stop(self) -> StopReason:
        return StopReason.from_anthropic(self.stop_reason)

    def has_tool_use(self) -> bool:
        return self.stop().is_tool_use()

    def tool_uses(self) -> list[ToolUseBlock]:
        return [block for block in self.content if isinstance(block, ToolUseBlock)]


__all__ = [
    "AdaptiveThinkingParam",
    "ContentBlock",
    "EnabledThinkingParam",
    "Message",
    "MessagesRequest",
    "MessagesResponse",
    "OutputConfig",
    "TextBlock",
    "ThinkingBlock",
    "ThinkingParam",
    "ToolResultBlock",
    "ToolUseBlock",
]

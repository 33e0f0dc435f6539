"""Provider-agnostic models shared by both wire formats."""

from dataclasses import dataclass
from enum import Enum
from typing import Annotated, Any, ClassVar, Literal

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    SerializerFunctionWrapHandler,
    model_serializer,
)

from llmbridge.llms.common.constants import (
    ANTHROPIC_STOP_REASONS,
    OPENAI_FINISH_REASONS,
)


class WireModel(BaseModel):
    """Base for wire payloads whose optional fields are omitted when unset.

    Subclasses list those fields in ``omit_if_none``; every other field is
    always serialized, so an explicit ``null`` stays possible where the wire
    format expects one.
    """

    omit_if_none: ClassVar[tuple[str, ...]] = ()

    @model_serializer(mode="wrap")
    def _drop_unset_optionals(
        self, handler: SerializerFunctionWrapHandler
    ) -> dict[str, Any]:
        data: dict[str, Any] = handler(self)
        for key in self.omit_if_none:
            if key in data and data[key] is None:
                del data[key]
        return data


class Provider(str, Enum):
    """Wire protocol spoken by a backend."""

    ANTHROPIC = "anthropic"
    OPENAI = "openai"

    @property
    def default_base_url(self) -> str:
        if self is Provider.ANTHROPIC:
            return "https://api.anthropic.com"
        return "https://api.openai.com"

    @classmethod
    def parse(cls, value: str) -> "Provider":
        try:
            return cls(value.strip().lower())
        except ValueError:
            raise ValueError(f"unknown provider: {value}") from None

    def __str__(self) -> str:
        return self.value


class EffortLevel(str, Enum):
    """Reasoning depth hint for adaptive thinking, ordered from most to least."""

    MAX = "max"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"

    @classmethod
    def parse(cls, value: str) -> "EffortLevel":
        """Parse an effort name, accepting the ``med`` and ``minimal`` aliases."""
        aliases = {"med": cls.MEDIUM, "minimal": cls.LOW}
        if value in aliases:
            return aliases[value]
        try:
            return cls(value)
        except ValueError:
            raise ValueError(f"unknown effort level: {value}") from None

    def __str__(self) -> str:
        return self.value


class AdaptiveThinking(BaseModel):
    """Adaptive thinking: the model decides how much to think."""

    model_config = ConfigDict(frozen=True)

    type: Literal["adaptive"] = "adaptive"
    effort: EffortLevel = EffortLevel.HIGH


class EnabledThinking(BaseModel):
    """Manual extended thinking with an explicit token budget."""

    model_config = ConfigDict(frozen=True)

    type: Literal["enabled"] = "enabled"
    budget_tokens: int = Field(..., ge=0)


ThinkingConfig = Annotated[
    AdaptiveThinking | EnabledThinking, Field(discriminator="type")
]


class ToolDefinition(BaseModel):
    """Tool declaration shared by both wire formats."""

    model_config = ConfigDict(frozen=True)

    name: str
    description: str
    input_schema: dict[str, Any]


class Usage(WireModel):
    """Token usage statistics."""

    omit_if_none: ClassVar[tuple[str, ...]] = (
        "cache_creation_input_tokens",
        "cache_read_input_tokens",
    )

    input_tokens: int = 0
    output_tokens: int = 0
    cache_creation_input_tokens: int | None = None
    cache_read_input_tokens: int | None = None

    @property
    def total_tokens(self) -> int:
        return self.input_tokens + self.output_tokens


class ResponseFormat(BaseModel):
    """Response format selector (JSON mode)."""

    type: str

    @classmethod
    def json_object(cls) -> "ResponseFormat":
        return cls(type="json_object")


class StopReasonKind(str, Enum):
    END_TURN = "end_turn"
    TOOL_USE = "tool_use"
    MAX_TOKENS = "max_tokens"
    OTHER = "other"


@dataclass(frozen=True)
class StopReason:
    """Terminal state of a generation, normalized across providers.

    Known values map onto a three-way classification; anything else is kept
    verbatim as ``OTHER`` and rendered unchanged in both directions.
    """

    kind: StopReasonKind
    raw: str | None = None

    @classmethod
    def other(cls, value: str) -> "StopReason":
        return cls(StopReasonKind.OTHER, value)

    @classmethod
    def from_anthropic(cls, value: str) -> "StopReason":
        for kind, wire in ANTHROPIC_STOP_REASONS.items():
            if wire == value:
                return cls(StopReasonKind(kind))
        return cls.other(value)

    @classmethod
    def from_openai(cls, value: str) -> "StopReason":
        for kind, wire in OPENAI_FINISH_REASONS.items():
            if wire == value:
                return cls(StopReasonKind(kind))
        return cls.other(value)

    def to_anthropic(self) -> str:
        if self.kind is StopReasonKind.OTHER:
            return self.raw or ""
        return ANTHROPIC_STOP_REASONS[self.kind.value]

    def to_openai(self) -> str:
        if self.kind is StopReasonKind.OTHER:
            return self.raw or ""
        return OPENAI_FINISH_REASONS[self.kind.value]

    def is_tool_use(self) -> bool:
        return self.kind is StopReasonKind.TOOL_USE

    def __str__(self) -> str:
        return self.to_anthropic()


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
    "WireModel",
]

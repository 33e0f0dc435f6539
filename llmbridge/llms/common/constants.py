"""Fixed tables shared by the format converters."""

# Normalized stop reason -> wire value, per format
ANTHROPIC_STOP_REASONS: dict[str, str] = {
    "end_turn": "end_turn",
    "tool_use": "tool_use",
    "max_tokens": "max_tokens",
}

OPENAI_FINISH_REASONS: dict[str, str] = {
    "end_turn": "stop",
    "tool_use": "tool_calls",
    "max_tokens": "length",
}

# Anthropic accepts at most this many cache_control annotations per request
MAX_CACHE_CONTROL_BLOCKS = 4

EPHEMERAL_CACHE_CONTROL: dict[str, str] = {"type": "ephemeral"}

MCP_TOOL_PREFIX = "mcp_"

DEFAULT_TOOL_INPUT_SCHEMA: dict[str, object] = {"type": "object", "properties": {}}

# Adaptive thinking is limited to these model families
ADAPTIVE_THINKING_MODELS = ("opus-4-6", "sonnet-4-6")

MODEL_SUFFIX_EFFORTS = frozenset(
    {
        "none",
        "off",
        "disabled",
        "low",
        "minimal",
        "medium",
        "med",
        "high",
        "xhigh",
        "max",
        "auto",
    }
)

DISABLED_EFFORTS = frozenset({"none", "off", "disabled"})

# Fixed budgets for models that only support manual extended thinking
THINKING_BUDGETS: dict[str, int] = {
    "low": 1024,
    "minimal": 1024,
    "medium": 8192,
    "med": 8192,
    "high": 32000,
    "xhigh": 64000,
    "max": 64000,
    "auto": 16000,
}

DEFAULT_THINKING_BUDGET = 8192

# Upper bounds (inclusive) of the numeric effort buckets for adaptive models
LOW_EFFORT_MAX_TOKENS = 2048
MEDIUM_EFFORT_MAX_TOKENS = 16384
HIGH_EFFORT_MAX_TOKENS = 49152

# Headroom added to max_tokens when a thinking budget would not fit
THINKING_MAX_TOKENS_HEADROOM = 64

U32_MAX = 2**32 - 1

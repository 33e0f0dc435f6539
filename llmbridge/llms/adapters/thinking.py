"""Resolve extended-thinking parameters from effort hints and model names.

Two request shapes exist on the structured format:

- adaptive models (Opus 4.6, Sonnet 4.6) take ``{"type": "adaptive"}`` plus an
  optional ``output_config.effort`` override
- every other model takes ``{"type": "enabled", "budget_tokens": N}``

Callers usually pass effort as free text, either explicitly or as a model
suffix such as ``claude-sonnet-4-5(high)``.
"""

from __future__ import annotations

from typing import Any

from llmbridge.core.logging import get_logger
from llmbridge.llms.anthropic.models import (
    AdaptiveThinkingParam,
    EnabledThinkingParam,
    OutputConfig,
    ThinkingParam,
)
from llmbridge.llms.common.constants import (
    ADAPTIVE_THINKING_MODELS,
    DEFAULT_THINKING_BUDGET,
    DISABLED_EFFORTS,
    HIGH_EFFORT_MAX_TOKENS,
    LOW_EFFORT_MAX_TOKENS,
    MEDIUM_EFFORT_MAX_TOKENS,
    MODEL_SUFFIX_EFFORTS,
    THINKING_BUDGETS,
    U32_MAX,
)
from llmbridge.llms.common.models import (
    AdaptiveThinking,
    EffortLevel,
    EnabledThinking,
    ThinkingConfig,
)


logger = get_logger(__name__)

_ADAPTIVE_EFFORTS: dict[str, EffortLevel] = {
    "low": EffortLevel.LOW,
    "minimal": EffortLevel.LOW,
    "medium": EffortLevel.MEDIUM,
    "med": EffortLevel.MEDIUM,
    "auto": EffortLevel.MEDIUM,
    "high": EffortLevel.HIGH,
    "xhigh": EffortLevel.MAX,
    "max": EffortLevel.MAX,
}


def _parse_u32(value: str) -> int | None:
    """Parse an unsigned 32-bit integer: ASCII digits with an optional leading ``+``."""
    digits = value[1:] if value.startswith("+") else value
    if not digits or not digits.isascii() or not digits.isdigit():
        return None
    number = int(digits)
    return number if number <= U32_MAX else None


def build_thinking_params(
    config: ThinkingConfig | None,
) -> tuple[ThinkingParam | None, OutputConfig | None]:
    """Build the ``thinking`` and ``output_config`` request fields.

    High is the implicit default for adaptive thinking, so it omits
    ``output_config``. Budget-based thinking never carries one.
    """
    if config is None:
        return None, None
    if isinstance(config, AdaptiveThinking):
        output_config = (
            None
            if config.effort is EffortLevel.HIGH
            else OutputConfig(effort=config.effort.value)
        )
        return AdaptiveThinkingParam(), output_config
    if isinstance(config, EnabledThinking):
        return EnabledThinkingParam(budget_tokens=config.budget_tokens), None
    raise TypeError(f"unsupported thinking config: {type(config).__name__}")


def thinking_request_fields(config: ThinkingConfig | None) -> dict[str, Any]:
    """Render a thinking config as JSON fields for a raw request body."""
    thinking, output_config = build_thinking_params(config)
    fields: dict[str, Any] = {}
    if thinking is not None:
        fields["thinking"] = thinking.model_dump()
    if output_config is not None:
        fields["output_config"] = output_config.model_dump()
    return fields


def parse_model_suffix(model: str) -> tuple[str, str | None]:
    """Split ``"claude-sonnet-4-5(medium)"`` into ``("claude-sonnet-4-5", "medium")``.

    The suffix must be a known effort name (case-insensitive) or an unsigned
    integer. Anything else leaves the model untouched.
    """
    open_paren = model.rfind("(")
    if open_paren == -1 or not model.endswith(")"):
        return model, None

    base_model = model[:open_paren]
    suffix = model[open_paren + 1 : -1]

    if suffix.lower() in MODEL_SUFFIX_EFFORTS or _parse_u32(suffix) is not None:
        return base_model, suffix
    return model, None


def supports_adaptive_thinking(model: str) -> bool:
    """Check whether a model accepts adaptive thinking."""
    lower = model.lower()
    return any(
        family in lower or lower.startswith(f"claude-{family}")
        for family in ADAPTIVE_THINKING_MODELS
    )


def _adaptive_effort(effort: str, effort_lower: str) -> EffortLevel | None:
    level = _ADAPTIVE_EFFORTS.get(effort_lower)
    if level is not None:
        return level

    tokens = _parse_u32(effort)
    if tokens is None:
        return EffortLevel.HIGH
    if tokens == 0:
        return None
    if tokens <= LOW_EFFORT_MAX_TOKENS:
        return EffortLevel.LOW
    if tokens <= MEDIUM_EFFORT_MAX_TOKENS:
        return EffortLevel.MEDIUM
    if tokens <= HIGH_EFFORT_MAX_TOKENS:
        return EffortLevel.HIGH
    return EffortLevel.MAX


def build_thinking_for_model(model: str, effort: str) -> ThinkingConfig | None:
    """Build a thinking config from a model name and a free-text effort.

    Returns ``None`` when thinking is disabled (``none``/``off``/``disabled``,
    or ``0`` on adaptive models).
    """
    effort_lower = effort.lower()
    if effort_lower in DISABLED_EFFORTS:
        return None

    if supports_adaptive_thinking(model):
        level = _adaptive_effort(effort, effort_lower)
        if level is None:
            return None
        return AdaptiveThinking(effort=level)

    budget = THINKING_BUDGETS.get(effort_lower)
    if budget is None:
        budget = _parse_u32(effort)
    if budget is None:
        logger.debug(
            "thinking_effort_unrecognized",
            model=model,
            effort=effort,
            fallback_budget=DEFAULT_THINKING_BUDGET,
            category="thinking",
        )
        budget = DEFAULT_THINKING_BUDGET
    return EnabledThinking(budget_tokens=budget)


def resolve_model_thinking(
    model: str, effort: str | None = None
) -> tuple[str, ThinkingConfig | None]:
    """Strip an effort suffix from ``model`` and resolve its thinking config.

    A valid suffix wins over ``effort``. Without either, thinking stays off.
    """
    base_model, suffix = parse_model_suffix(model)
    chosen = suffix if suffix is not None else effort
    if chosen is None or not chosen.strip():
        return base_model, None

    config = build_thinking_for_model(base_model, chosen.strip())
    logger.debug(
        "thinking_resolved",
        model=base_model,
        effort=chosen,
        from_suffix=suffix is not None,
        thinking=config.type if config is not None else None,
        category="thinking",
    )
    return base_model, config


__all__ = [
    "build_thinking_for_model",
    "build_thinking_params",
    "parse_model_suffix",
    "resolve_model_thinking",
    "supports_adaptive_thinking",
    "thinking_request_fields",
]

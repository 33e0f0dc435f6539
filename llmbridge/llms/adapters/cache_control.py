"""Prompt-caching breakpoint placement for structured-format request bodies.

Anthropic caches prefixes in the order tools -> system -> messages and accepts
at most four ``cache_control`` annotations per request. Breakpoints already
present in the body count against that budget; the remaining ones are spent in
priority order:

1. the last tool definition
2. the last system block (a string system prompt is turned into a block list)
3. the second-to-last user turn, so multi-turn conversations reuse the prefix

A zone that already carries an annotation anywhere is left alone.
"""

from __future__ import annotations

import copy
from typing import Any

from llmbridge.core.logging import get_logger
from llmbridge.llms.common.constants import (
    EPHEMERAL_CACHE_CONTROL,
    MAX_CACHE_CONTROL_BLOCKS,
)


logger = get_logger(__name__)


def _has_cache_control(item: Any) -> bool:
    return isinstance(item, dict) and "cache_control" in item


def _mark(item: dict[str, Any]) -> None:
    item["cache_control"] = dict(EPHEMERAL_CACHE_CONTROL)


def _cached_text_block(text: str) -> list[dict[str, Any]]:
    return [
        {
            "type": "text",
            "text": text,
            "cache_control": dict(EPHEMERAL_CACHE_CONTROL),
        }
    ]


def count_cache_control_blocks(body: dict[str, Any]) -> int:
    """Count annotations across tools, system blocks and message content blocks."""
    count = 0

    system = body.get("system")
    if isinstance(system, list):
        count += sum(1 for block in system if _has_cache_control(block))

    tools = body.get("tools")
    if isinstance(tools, list):
        count += sum(1 for tool in tools if _has_cache_control(tool))

    messages = body.get("messages")
    if isinstance(messages, list):
        for message in messages:
            content = message.get("content") if isinstance(message, dict) else None
            if isinstance(content, list):
                count += sum(1 for block in content if _has_cache_control(block))

    return count


def _inject_tools(body: dict[str, Any]) -> int:
    tools = body.get("tools")
    if not isinstance(tools, list) or not tools:
        return 0
    if any(_has_cache_control(tool) for tool in tools):
        return 0
    if not isinstance(tools[-1], dict):
        return 0
    _mark(tools[-1])
    return 1


def _inject_system(body: dict[str, Any]) -> int:
    system = body.get("system")
    if isinstance(system, str):
        body["system"] = _cached_text_block(system)
        return 1
    if not isinstance(system, list) or not system:
        return 0
    if any(_has_cache_control(block) for block in system):
        return 0
    if not isinstance(system[-1], dict):
        return 0
    _mark(system[-1])
    return 1


def _inject_messages(body: dict[str, Any]) -> int:
    messages = body.get("messages")
    if not isinstance(messages, list):
        return 0

    for message in messages:
        content = message.get("content") if isinstance(message, dict) else None
        if isinstance(content, list) and any(
            _has_cache_control(block) for block in content
        ):
            return 0

    user_turns = [
        message
        for message in messages
        if isinstance(message, dict) and message.get("role") == "user"
    ]
    if len(user_turns) < 2:
        return 0

    target = user_turns[-2]
    content = target.get("content")
    if isinstance(content, str):
        target["content"] = _cached_text_block(content)
        return 1
    if isinstance(content, list) and content and isinstance(content[-1], dict):
        _mark(content[-1])
        return 1
    return 0


def ensure_cache_control(body: dict[str, Any]) -> dict[str, Any]:
    """Return a copy of ``body`` with cache breakpoints added within budget.

    Never raises; missing or oddly shaped zones are skipped. Applying it twice
    gives the same result as applying it once.
    """
    result = copy.deepcopy(body)
    existing = count_cache_control_blocks(result)
    if existing >= MAX_CACHE_CONTROL_BLOCKS:
        return result

    remaining = MAX_CACHE_CONTROL_BLOCKS - existing
    injected = 0

    for inject in (_inject_tools, _inject_system, _inject_messages):
        if remaining <= 0:
            break
        added = inject(result)
        remaining -= added
        injected += added

    logger.debug(
        "cache_control_injected",
        existing=existing,
        injected=injected,
        remaining=remaining,
        category="cache",
    )
    return result


__all__ = ["count_cache_control_blocks", "ensure_cache_control"]

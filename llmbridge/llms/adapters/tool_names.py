"""Namespace tool names crossing the OAuth tool boundary.

Tools exposed through an OAuth-mediated surface carry an ``mcp_`` prefix so
they never collide with built-in tool names. Requests get the prefix added,
responses get it stripped. Both directions are idempotent.
"""

from __future__ import annotations

import copy
from collections.abc import Callable
from typing import Any

from llmbridge.llms.common.constants import MCP_TOOL_PREFIX


def add_mcp_prefix(name: str) -> str:
    """Add the ``mcp_`` prefix unless it is already there."""
    if name.startswith(MCP_TOOL_PREFIX):
        return name
    return f"{MCP_TOOL_PREFIX}{name}"


def strip_mcp_prefix(name: str) -> str:
    """Remove the ``mcp_`` prefix if present."""
    return name.removeprefix(MCP_TOOL_PREFIX)


def _rename_tool_use_blocks(content: Any, rename: Callable[[str], str]) -> None:
    if not isinstance(content, list):
        return
    for block in content:
        if (
            isinstance(block, dict)
            and block.get("type") == "tool_use"
            and isinstance(block.get("name"), str)
        ):
            block["name"] = rename(block["name"])


def transform_request_tool_names(body: Any) -> Any:
    """Return a copy of a request body with tool names prefixed.

    Renames custom tool definitions (built-ins carry a non-empty ``type`` and
    are skipped), a ``tool_choice`` of type ``tool``, and every ``tool_use``
    block in the message history.
    """
    if not isinstance(body, dict):
        return body
    body = copy.deepcopy(body)

    tools = body.get("tools")
    if isinstance(tools, list):
        for tool in tools:
            if not isinstance(tool, dict):
                continue
            tool_type = tool.get("type")
            if isinstance(tool_type, str) and tool_type:
                continue
            if isinstance(tool.get("name"), str):
                tool["name"] = add_mcp_prefix(tool["name"])

    tool_choice = body.get("tool_choice")
    if isinstance(tool_choice, dict) and tool_choice.get("type") == "tool":
        name = tool_choice.get("name")
        if isinstance(name, str) and name:
            tool_choice["name"] = add_mcp_prefix(name)

    messages = body.get("messages")
    if isinstance(messages, list):
        for message in messages:
            if isinstance(message, dict):
                _rename_tool_use_blocks(message.get("content"), add_mcp_prefix)

    return body


def transform_response_tool_names(body: Any) -> Any:
    """Return a copy of a response body with ``tool_use`` names unprefixed."""
    if not isinstance(body, dict):
        return body
    body = copy.deepcopy(body)
    _rename_tool_use_blocks(body.get("content"), strip_mcp_prefix)
    return body


__all__ = [
    "add_mcp_prefix",
    "strip_mcp_prefix",
    "transform_request_tool_names",
    "transform_response_tool_names",
]

"""Shared test fixtures and configuration for llmbridge tests.

Fixtures build real components; only the HTTP backends are mocked, through
pytest-httpx.
"""

import logging
import os
from collections.abc import Generator

import pytest
import structlog

from llmbridge.client import ClientConfig
from llmbridge.config.settings import get_settings


FIXED_TIMESTAMP = 1_700_000_000


@pytest.fixture
def fixed_clock() -> float:
    """Pinned wall clock for deterministic ``created`` timestamps."""
    return FIXED_TIMESTAMP + 0.75


@pytest.fixture
def anthropic_config() -> ClientConfig:
    return ClientConfig.anthropic("sk-ant-test", "claude-sonnet-4-5")


@pytest.fixture
def openai_config() -> ClientConfig:
    return ClientConfig.openai_compatible(
        "https://openrouter.ai/api/", "sk-or-test", "anthropic/claude-sonnet-4-5"
    )


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch: pytest.MonkeyPatch) -> Generator[None, None, None]:
    """Isolate tests from LLMBRIDGE__* variables and the settings cache."""
    for key in list(os.environ):
        if key.upper().startswith("LLMBRIDGE__"):
            monkeypatch.delenv(key, raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def restore_logging() -> Generator[None, None, None]:
    """Undo global logging changes made by ``setup_logging``."""
    root = logging.getLogger()
    bridge = logging.getLogger("llmbridge")
    handlers = root.handlers[:]
    level = root.level
    bridge_level = bridge.level
    yield
    root.handlers = handlers
    root.setLevel(level)
    bridge.setLevel(bridge_level)
    structlog.reset_defaults()

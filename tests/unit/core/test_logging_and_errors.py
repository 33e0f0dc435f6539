import logging

import httpx
import pytest

from llmbridge.core.errors import (
    ApiError,
    BridgeError,
    ConversionError,
    LlmError,
    ParseResponseError,
    RequestFailedError,
    ResponseConversionError,
)
from llmbridge.core.logging import get_logger, setup_logging


@pytest.mark.usefixtures("restore_logging")
def test_setup_logging_debug_levels() -> None:
    setup_logging(json_logs=False, log_level="DEBUG")
    assert logging.getLogger("llmbridge").level == logging.DEBUG
    assert logging.getLogger("httpx").level == logging.INFO
    assert logging.getLogger("httpcore").level == logging.WARNING


@pytest.mark.usefixtures("restore_logging")
def test_setup_logging_quiets_http_libraries() -> None:
    setup_logging(json_logs=True, log_level="warning")
    assert logging.getLogger("llmbridge").level == logging.WARNING
    assert logging.getLogger("httpx").level == logging.WARNING
    assert len(logging.getLogger().handlers) == 1


@pytest.mark.usefixtures("restore_logging")
def test_setup_logging_emits_json(capsys: pytest.CaptureFixture[str]) -> None:
    setup_logging(json_logs=True, log_level="INFO")
    get_logger("llmbridge.test").info("bridge_ready", provider="anthropic")
    out = capsys.readouterr().out
    assert '"event": "bridge_ready"' in out
    assert '"provider": "anthropic"' in out


def test_api_error_message() -> None:
    err = ApiError(429, '{"error": "rate limited"}')
    assert str(err) == 'API error (429): {"error": "rate limited"}'
    assert err.status == 429
    assert isinstance(err, LlmError)
    assert isinstance(err, BridgeError)


def test_request_failed_error_chains_cause() -> None:
    cause = httpx.ConnectError("connection refused")
    err = RequestFailedError("Request failed", url="https://x", cause=cause)
    assert err.cause is cause
    assert err.__cause__ is cause
    assert err.url == "https://x"


def test_conversion_error_is_value_error() -> None:
    err = ConversionError("bad payload", data={"choices": []})
    assert isinstance(err, ValueError)
    assert err.data == {"choices": []}
    assert not isinstance(err, LlmError)


def test_parse_error_hierarchy() -> None:
    assert issubclass(ParseResponseError, LlmError)


def test_response_conversion_error_chains_conversion_error() -> None:
    cause = ConversionError("OpenAI response had no choices", data="gen-1")
    err = ResponseConversionError(f"Failed to convert response: {cause}", cause=cause)
    assert isinstance(err, LlmError)
    assert not isinstance(err, ValueError)
    assert err.__cause__ is cause

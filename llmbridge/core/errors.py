"""Core error types for llmbridge."""

from typing import Any


class BridgeError(Exception):
    """Base exception for all llmbridge errors."""

    def __init__(self, message: str, cause: Exception | None = None):
        """Initialize with a message and optional cause.

        Args:
            message: The error message
            cause: The underlying exception that caused this error
        """
        super().__init__(message)
        self.cause = cause
        if cause:
            self.__cause__ = cause


class ConversionError(BridgeError, ValueError):
    """Raised when a payload cannot be converted between wire formats.

    Only structurally impossible input ends up here (for example a chat
    completion without any choice). Malformed fragments inside an otherwise
    valid payload are degraded locally by the converters instead.
    """

    def __init__(self, message: str, data: Any = None, cause: Exception | None = None):
        """Initialize with a message, optional data, and cause.

        Args:
            message: The error message
            data: The data that failed to convert
            cause: The underlying exception
        """
        super().__init__(message, cause)
        self.data = data


class LlmError(BridgeError):
    """Base exception for errors raised by the HTTP client."""


class ClientSetupError(LlmError):
    """Raised when the underlying HTTP client cannot be constructed."""


class RequestFailedError(LlmError):
    """Raised when the request never produced an HTTP response."""

    def __init__(
        self, message: str, url: str | None = None, cause: Exception | None = None
    ):
        super().__init__(message, cause)
        self.url = url


class ApiError(LlmError):
    """Raised when the provider answers with a non-success status code."""

    def __init__(self, status: int, body: str):
        """Initialize with the HTTP status code and raw response body.

        Args:
            status: HTTP status code returned by the provider
            body: Raw response body, kept verbatim for diagnostics
        """
        super().__init__(f"API error ({status}): {body}")
        self.status = status
        self.body = body


class ParseResponseError(LlmError):
    """Raised when a success response body cannot be decoded."""


class ResponseConversionError(LlmError):
    """Raised when a backend response cannot be converted to the structured format."""


__all__ = [
    "ApiError",
    "BridgeError",
    "ClientSetupError",
    "ConversionError",
    "LlmError",
    "ParseResponseError",
    "RequestFailedError",
    "ResponseConversionError",
]

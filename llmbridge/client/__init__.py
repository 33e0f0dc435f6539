"""HTTP client that always speaks the structured format to its callers."""

from .chat import ChatOptions, LlmClient
from .config import ClientConfig


__all__ = ["ChatOptions", "ClientConfig", "LlmClient"]

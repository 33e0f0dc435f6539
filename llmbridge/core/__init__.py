"""Core infrastructure shared by llmbridge modules."""

from .errors import BridgeError, ConversionError, LlmError
from .logging import get_logger, setup_logging


__all__ = [
    "BridgeError",
    "ConversionError",
    "LlmError",
    "get_logger",
    "setup_logging",
]

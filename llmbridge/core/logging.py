import logging
import sys

import structlog
from structlog.stdlib import BoundLogger


def configure_structlog(json_logs: bool = False) -> None:
    """Configure structlog processors shared by every llmbridge logger."""
    timestamper = structlog.processors.TimeStamper(fmt="iso")

    processors = [
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        timestamper,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        # Hand the event dict to ProcessorFormatter so it is rendered once
        structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
    ]

    structlog.configure(
        processors=processors,  # type: ignore[arg-type]
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )


def setup_logging(json_logs: bool = False, log_level: str = "INFO") -> BoundLogger:
    """
    Setup logging for llmbridge and the HTTP libraries it drives.
    Returns a structlog logger instance.
    """
    level = getattr(logging, log_level.upper(), logging.INFO)

    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    configure_structlog(json_logs=json_logs)

    handler = logging.StreamHandler(sys.stdout)
    renderer = (
        structlog.processors.JSONRenderer()
        if json_logs
        else structlog.dev.ConsoleRenderer()
    )
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            processor=renderer,
            foreign_pre_chain=[
                structlog.stdlib.add_log_level,
                structlog.stdlib.add_logger_name,
                structlog.processors.TimeStamper(fmt="iso"),
            ],
        )
    )
    root_logger.handlers = [handler]

    bridge_logger = logging.getLogger("llmbridge")
    bridge_logger.handlers = []
    bridge_logger.propagate = True
    bridge_logger.setLevel(level)

    # httpx is chatty: INFO only when the app itself runs at DEBUG
    httpx_logger = logging.getLogger("httpx")
    if log_level.upper() == "DEBUG":
        httpx_logger.setLevel(logging.INFO)
    else:
        httpx_logger.setLevel(logging.WARNING)

    noisy_log_level = logging.WARNING if level <= logging.WARNING else level
    for noisy_logger_name in ["httpcore", "httpcore.http11", "httpcore.connection"]:
        noisy_logger = logging.getLogger(noisy_logger_name)
        noisy_logger.handlers = []
        noisy_logger.propagate = True
        noisy_logger.setLevel(noisy_log_level)

    return structlog.get_logger()  # type: ignore[no-any-return]


def get_logger(name: str | None = None) -> BoundLogger:
    """Get a structlog logger instance."""
    return structlog.get_logger(name)  # type: ignore[no-any-return]

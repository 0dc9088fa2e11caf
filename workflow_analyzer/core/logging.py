"""
Structured logging setup using structlog.

Console output in development, one JSON object per line elsewhere. Context
bound through ``LogContext`` (request ids) is merged into every event.
"""

import logging
import sys
from typing import Any, Optional

import structlog
from structlog.types import Processor

from workflow_analyzer.core.config import settings

# Libraries whose INFO output drowns our own events
NOISY_LOGGERS = ("uvicorn", "uvicorn.error", "uvicorn.access", "httpx", "httpcore")


def add_app_context(
    logger: logging.Logger, method_name: str, event_dict: dict[str, Any]
) -> dict[str, Any]:
    """Add application name and environment to every entry."""
    event_dict["app"] = settings.app_name
    event_dict["env"] = settings.app_env
    return event_dict


def setup_logging(level: Optional[str] = None, json_output: Optional[bool] = None) -> None:
    """
    Route structlog and stdlib logging through one stdout handler.

    Args:
        level: Log level name, defaults to ``settings.log_level``
        json_output: Force the JSON renderer; by default only outside development
    """
    log_level = getattr(logging, (level or settings.log_level).upper(), logging.INFO)
    if json_output is None:
        json_output = not settings.is_development

    shared_processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.stdlib.ExtraAdder(),
        add_app_context,
    ]

    renderer: Processor = (
        structlog.processors.JSONRenderer()
        if json_output
        else structlog.dev.ConsoleRenderer(colors=True)
    )

    structlog.configure(
        processors=[*shared_processors, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=shared_processors,
            processors=[structlog.stdlib.ProcessorFormatter.remove_processors_meta, renderer],
        )
    )

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(log_level)

    for logger_name in NOISY_LOGGERS:
        logging.getLogger(logger_name).setLevel(logging.WARNING)

    logging.getLogger("workflow_analyzer").setLevel(log_level)


def get_logger(name: Optional[str] = None) -> structlog.stdlib.BoundLogger:
    """Get a structured logger, usually ``get_logger(__name__)``."""
    return structlog.get_logger(name)


class LogContext:
    """
    Bind key/value pairs to every log event inside a ``with`` block.

    Values bound by an enclosing block are restored on exit.
    """

    def __init__(self, **kwargs: Any) -> None:
        self.context = kwargs
        self._bound: Any = None

    def __enter__(self) -> "LogContext":
        self._bound = structlog.contextvars.bound_contextvars(**self.context)
        self._bound.__enter__()
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self._bound.__exit__(exc_type, exc_val, exc_tb)
        self._bound = None

"""Structured logging configuration using structlog.

Retry, circuit and rate-limit events are emitted as key/value pairs. In
production they render as JSON lines for log aggregators; in development as
colored console output.
"""

import logging
import sys
from typing import Optional

import structlog
from structlog.types import EventDict, WrappedLogger

from resilience_layer.config import Settings
from resilience_layer.errors.exceptions import OperationError, ResilienceRejection

DEFAULT_APP_NAME = "resilience-layer"


def app_context(app_name: str = DEFAULT_APP_NAME) -> structlog.types.Processor:
    """Build a processor tagging every event with the application name."""

    def add_app_context(
        logger: WrappedLogger, method_name: str, event_dict: EventDict
    ) -> EventDict:
        event_dict.setdefault("app", app_name)
        return event_dict

    return add_app_context


def summarize_failures(
    logger: WrappedLogger, method_name: str, event_dict: EventDict
) -> EventDict:
    """Replace exception objects passed as values with a compact, serializable summary."""
    for key, value in list(event_dict.items()):
        if key == "exc_info" or not isinstance(value, BaseException):
            continue
        summary = {"type": type(value).__name__, "message": str(value)}
        if isinstance(value, OperationError):
            summary.update(code=value.code, status=value.status, retry_after=value.retry_after)
        elif isinstance(value, ResilienceRejection):
            summary.update(code=value.code, retry_after=value.retry_after)
        event_dict[key] = summary
    return event_dict


def configure_logging(
    log_level: str = "INFO",
    environment: str = "development",
    app_name: Optional[str] = None,
) -> None:
    """Configure structlog and route stdlib logging through it.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        environment: "production" selects the JSON renderer, anything else the console renderer
        app_name: Value of the "app" key added to every event
    """
    level = getattr(logging, log_level.upper(), logging.INFO)
    is_production = environment.lower() == "production"

    shared_processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        app_context(app_name or DEFAULT_APP_NAME),
        summarize_failures,
    ]

    if is_production:
        shared_processors.append(structlog.processors.format_exc_info)
        renderer: structlog.types.Processor = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty())

    structlog.configure(
        processors=shared_processors + [structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(processor=renderer, foreign_pre_chain=shared_processors)
    )
    handler.setLevel(level)

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(level)

    # httpx logs every request at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)

    structlog.get_logger(__name__).info(
        "Logging configured",
        log_level=log_level,
        environment=environment,
        renderer="json" if is_production else "console",
    )


def configure_from_settings(settings: Settings) -> None:
    """Configure logging from a Settings instance."""
    configure_logging(
        log_level=settings.LOG_LEVEL,
        environment=settings.ENVIRONMENT,
        app_name=settings.APP_NAME,
    )

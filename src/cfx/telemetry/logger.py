"""Structured logging configuration using structlog.

This module configures structlog for the ``cfx`` logger hierarchy with:
- Console output on stderr, pretty-printed or JSON
- Optional rotating JSONL file output
- UTC timestamps
- Component and event tracking

Only the ``cfx`` logger gets handlers, and loggers are built with
``structlog.wrap_logger`` so the process-wide structlog configuration and the
host application's root logger are left alone.
"""

import logging
import logging.handlers
import pathlib
import sys
from datetime import datetime, timezone
from typing import Any

import structlog

PACKAGE_LOGGER = "cfx"

_configured = False


def _get_log_level() -> str:
    """Get log level from configuration.

    Returns:
        Log level string (DEBUG, INFO, WARNING, ERROR, CRITICAL).
    """
    # Bootstrap from environment to avoid circular imports during startup.
    from cfx.config.bootstrap import get_bootstrap_log_level  # noqa: PLC0415

    return get_bootstrap_log_level()


def _get_log_format() -> str:
    from cfx.config.bootstrap import get_bootstrap_log_format  # noqa: PLC0415

    return get_bootstrap_log_format()


def _get_log_dir() -> pathlib.Path | None:
    """Get log directory path, or None when file logging is disabled."""
    from pydantic import ValidationError  # noqa: PLC0415

    from cfx.config.settings import get_settings  # noqa: PLC0415

    try:
        return get_settings().log_dir
    except ValidationError:
        # Invalid CFX_* settings disable file logging
        return None


def _add_timestamp(
    logger: logging.Logger, method_name: str, event_dict: dict[str, Any]
) -> dict[str, Any]:
    """Add UTC timestamp to log event.

    Args:
        logger: The logger instance.
        method_name: The log method name (info, error, etc.).
        event_dict: The event dictionary.

    Returns:
        Event dictionary with timestamp added.
    """
    event_dict["timestamp"] = datetime.now(timezone.utc).isoformat()
    return event_dict


def _add_component(
    logger: logging.Logger, method_name: str, event_dict: dict[str, Any]
) -> dict[str, Any]:
    """Add component name to a stdlib log event."""
    if logger is None or not hasattr(logger, "name"):
        event_dict["component"] = "unknown"
        return event_dict

    event_dict["component"] = logger.name.split(".")[-1]
    return event_dict


def _add_component_from_event_dict(
    logger: Any, method_name: str, event_dict: dict[str, Any]
) -> dict[str, Any]:
    """Add component name to log event from event_dict logger name.

    Runs after ``add_logger_name``, e.g. ``cfx.config.loader`` -> ``loader``.
    """
    logger_name = event_dict.get("logger", "")
    event_dict["component"] = logger_name.split(".")[-1] if logger_name else "unknown"
    return event_dict


def _formatter(renderer: Any) -> structlog.stdlib.ProcessorFormatter:
    return structlog.stdlib.ProcessorFormatter(
        processor=renderer,
        foreign_pre_chain=[
            structlog.stdlib.add_log_level,
            structlog.stdlib.add_logger_name,
            _add_timestamp,  # type: ignore[list-item]
            _add_component,  # type: ignore[list-item]
        ],
    )


def _configure_file_handler(log_dir: pathlib.Path) -> logging.handlers.RotatingFileHandler:
    """Configure rotating file handler for JSON logs.

    Args:
        log_dir: Directory for log files.

    Returns:
        Configured RotatingFileHandler.
    """
    log_dir.mkdir(parents=True, exist_ok=True)

    handler = logging.handlers.RotatingFileHandler(
        filename=str(log_dir / "cfx.jsonl"),
        maxBytes=10 * 1024 * 1024,  # 10 MB
        backupCount=3,
        encoding="utf-8",
    )
    handler.setFormatter(_formatter(structlog.processors.JSONRenderer()))
    return handler


def _configure_console_handler(log_format: str) -> logging.StreamHandler[Any]:
    """Configure console handler, pretty-printed or JSON.

    Returns:
        Configured StreamHandler.
    """
    handler = logging.StreamHandler(sys.stderr)
    if log_format == "json":
        renderer: Any = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())
    handler.setFormatter(_formatter(renderer))
    return handler


_PROCESSORS: list[Any] = [
    structlog.stdlib.filter_by_level,
    structlog.stdlib.add_logger_name,
    structlog.stdlib.add_log_level,
    structlog.stdlib.PositionalArgumentsFormatter(),
    _add_component_from_event_dict,
    structlog.processors.TimeStamper(fmt="iso", utc=True),
    structlog.processors.StackInfoRenderer(),
    structlog.processors.format_exc_info,
    structlog.processors.UnicodeDecoder(),
    structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
]


def configure_logging() -> None:
    """Attach console and file handlers to the ``cfx`` logger.

    Safe to call more than once; handlers on the ``cfx`` logger are replaced.
    ``structlog.configure`` is never called.
    """
    global _configured

    log_level = _get_log_level()
    log_format = _get_log_format()
    log_dir = _get_log_dir()

    package_logger = logging.getLogger(PACKAGE_LOGGER)
    package_logger.setLevel(logging.DEBUG)
    package_logger.handlers.clear()
    package_logger.propagate = False

    configured_level = getattr(logging, log_level, logging.WARNING)

    console_handler = _configure_console_handler(log_format)
    console_handler.setLevel(configured_level)
    package_logger.addHandler(console_handler)

    # File handler captures INFO+ regardless of the console level
    if log_dir is not None:
        file_handler = _configure_file_handler(log_dir)
        file_handler.setLevel(min(logging.INFO, configured_level))
        package_logger.addHandler(file_handler)

    _configured = True


def get_logger(name: str) -> Any:  # Returns structlog.stdlib.BoundLogger
    """Get a structured logger instance.

    Args:
        name: Logger name (typically __name__ of the calling module).

    Returns:
        structlog logger bound to the stdlib logger ``name``.

    Example:
        >>> from cfx.telemetry import get_logger
        >>> log = get_logger(__name__)
        >>> log.info("config_loaded", environment="staging")
    """
    if not _configured:
        configure_logging()

    return structlog.wrap_logger(
        logging.getLogger(name),
        processors=_PROCESSORS,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        cache_logger_on_first_use=True,
    )

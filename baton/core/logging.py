"""Structured logging built on Loguru.

This module configures the single Loguru logger used throughout Baton. It
provides a readable console format for development and a JSON format for
log collectors, and routes the standard library's logging (uvicorn in
particular) through the same sinks.

Formatter types:
- **console**: Human-readable with inline context (development)
- **json**: One JSON object per line (collectors, cloud runtimes)
"""

from __future__ import annotations

import json
import logging
import sys
from typing import Any, Final, Protocol, cast

from loguru import logger

from baton.core.constants import REDACTED


class _LoggingState:
    """Simple state holder to track if logging has been configured."""

    def __init__(self) -> None:
        self.configured = False


_state = _LoggingState()


class LogConfigProtocol(Protocol):
    """Protocol for log configuration objects."""

    @property
    def log_level(self) -> str:
        """Logging level."""
        ...

    @property
    def log_formatter_type(self) -> str | None:
        """Log formatter type."""
        ...

    @property
    def sensitive_fields(self) -> list[str]:
        """Field names to redact."""
        ...


class SettingsProtocol(Protocol):
    """Protocol for settings objects that setup_logging can accept."""

    @property
    def debug(self) -> bool:
        """Debug mode flag."""
        ...

    @property
    def log_config(self) -> LogConfigProtocol:
        """Log configuration."""
        ...


DEFAULT_LOG_FORMAT: Final[str] = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> | "
    "{message}"
)
CORRELATION_ID_DISPLAY_LENGTH: Final[int] = 8
MAX_FIELD_VALUE_LENGTH: Final[int] = 100

# Fields shown first, in this order, by the console formatter
PRIORITY_FIELDS: Final[tuple[str, ...]] = (
    "correlation_id",
    "request_id",
    "method",
    "path",
    "status_code",
    "duration_ms",
)

_sensitive_fields: set[str] = set()


def _escape(value: object) -> str:
    return str(value).replace("{", "{{").replace("}", "}}")


def _format_priority_field(field: str, value: object) -> str:
    """Format a priority field for display.

    Args:
        field: The field name.
        value: The field value.

    Returns:
        str: Formatted value.
    """
    if field == "correlation_id" and len(str(value)) > CORRELATION_ID_DISPLAY_LENGTH:
        value = str(value)[:CORRELATION_ID_DISPLAY_LENGTH]
    elif field == "duration_ms":
        value = f"{value}ms"
    return _escape(value)


def _format_extra_field(key: str, value: object) -> str:
    """Format an extra field for display, redacting sensitive values.

    Args:
        key: The field name.
        value: The field value.

    Returns:
        str: Formatted ``key=value`` pair.
    """
    str_value = str(value)
    if key.lower() in _sensitive_fields:
        str_value = REDACTED
    elif len(str_value) > MAX_FIELD_VALUE_LENGTH:
        str_value = str_value[: MAX_FIELD_VALUE_LENGTH - 3] + "..."
    return f"{_escape(key)}={_escape(str_value)}"


def format_console_with_context(record: dict[str, Any]) -> str:
    """Format log record for console with all context fields visible.

    Args:
        record: Loguru record to format.

    Returns:
        str: Format string for Loguru with the context already inlined.
    """
    try:
        timestamp = record["time"].strftime("%Y-%m-%d %H:%M:%S.%f")[:-3]
        parts = [
            f"<green>{timestamp}</green>",
            f"<level>{record['level'].name: <8}</level>",
            f"<cyan>{record['name']}:{record['function']}:{record['line']}</cyan>",
        ]

        extra = record.get("extra", {})
        context_parts = [
            f"<yellow>{_format_priority_field(field, extra[field])}</yellow>"
            for field in PRIORITY_FIELDS
            if extra.get(field) is not None
        ]
        context_parts.extend(
            f"<dim>{_format_extra_field(key, value)}</dim>"
            for key, value in extra.items()
            if key not in PRIORITY_FIELDS
            and not key.startswith("_")
            and value is not None
        )
        if context_parts:
            parts.append(" ".join(f"[{part}]" for part in context_parts))

        parts.append(_escape(record.get("message", "")))
        if record.get("exception"):
            parts.append("\n{exception}")
        return " | ".join(parts) + "\n"
    except (AttributeError, TypeError, ValueError, KeyError) as e:
        logger.trace(f"Failed to format log record: {e}")
        return DEFAULT_LOG_FORMAT + "\n"


def serialize_for_json(record: dict[str, Any]) -> str:
    """Format log record as a single JSON line.

    Args:
        record: Loguru record to format.

    Returns:
        str: JSON-formatted log entry with newline.
    """
    log_entry: dict[str, Any] = {
        "timestamp": record["time"].isoformat(),
        "level": record["level"].name,
        "message": record["message"],
        "logger": record["name"],
        "function": record["function"],
        "line": record["line"],
    }

    for key, value in record.get("extra", {}).items():
        if key.startswith("_"):
            continue
        log_entry[key] = REDACTED if key.lower() in _sensitive_fields else value

    if exc := record.get("exception"):
        log_entry["exception"] = {
            "type": exc.type.__name__ if exc.type else None,
            "value": str(exc.value) if exc.value else None,
        }

    return json.dumps(log_entry, default=str) + "\n"


class InterceptHandler(logging.Handler):
    """Intercept standard logging and redirect to Loguru."""

    def emit(self, record: logging.LogRecord) -> None:
        """Forward log record to Loguru.

        Args:
            record: Standard library LogRecord to forward.
        """
        try:
            level: str | int = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        # Find the caller outside of the logging module
        frame, depth = sys._getframe(1), 1
        while frame and frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back  # type: ignore[assignment]
            depth += 1

        logger.opt(depth=depth, exception=record.exc_info).log(
            level, record.getMessage()
        )


def setup_logging(settings: SettingsProtocol) -> None:
    """Configure Loguru with the formatter chosen in the settings.

    Args:
        settings: Application settings containing log configuration.

    Note:
        This function only configures logging once per process.
    """
    if _state.configured:
        return

    logger.remove()

    _sensitive_fields.clear()
    _sensitive_fields.update(f.lower() for f in settings.log_config.sensitive_fields)

    formatter_type = settings.log_config.log_formatter_type or "console"

    if formatter_type == "json":

        def structured_sink(message: object) -> None:
            """Sink that writes one JSON document per record."""
            sys.stdout.write(serialize_for_json(message.record))  # type: ignore[attr-defined]
            sys.stdout.flush()

        logger.add(
            structured_sink,
            level=settings.log_config.log_level,
            enqueue=True,
            diagnose=False,
            backtrace=False,
        )
    else:
        logger.add(
            sys.stdout,
            format=cast("Any", format_console_with_context),
            level=settings.log_config.log_level,
            enqueue=True,
            colorize=True,
            diagnose=settings.debug,
            backtrace=settings.debug,
        )

    # Route uvicorn and any other stdlib logger through Loguru
    logging.basicConfig(handlers=[InterceptHandler()], level=0, force=True)
    for logger_name in ("uvicorn", "uvicorn.error", "uvicorn.access"):
        stdlib_logger = logging.getLogger(logger_name)
        stdlib_logger.handlers = [InterceptHandler()]
        stdlib_logger.propagate = False

    logger.info(
        "Logging configured with {} formatter",
        formatter_type,
        log_level=settings.log_config.log_level,
    )

    _state.configured = True

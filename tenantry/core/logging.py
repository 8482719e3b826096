"""Loguru setup.

Two output formats, picked by ``log_config.log_formatter_type``:

* ``console``: coloured lines for a terminal, context fields inline.
* ``json``: one object per line for a log collector.

Middleware attach request fields (correlation ID, request ID, tenant) with
``logger.contextualize``; domain code logs through :func:`get_tenant_logger`.
Standard library loggers, uvicorn's included, are forwarded to Loguru by
:class:`InterceptHandler`. Either format masks secret-looking fields.
"""

from __future__ import annotations

import inspect
import json
import logging
import sys
from typing import TYPE_CHECKING, Any, Final, cast

from loguru import logger

from tenantry.core.constants import REDACTED
from tenantry.core.error_context import is_sensitive_field

if TYPE_CHECKING:
    from loguru import Logger, Message

    from tenantry.core.config import Settings


class _LoggingState:
    def __init__(self) -> None:
        self.configured = False


# Sinks are installed once per process, however many apps get created
_state = _LoggingState()

FALLBACK_FORMAT: Final = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | <level>{level: <8}</level> | "
    "<cyan>{name}:{function}:{line}</cyan> | {message}"
)
SHORT_ID_LENGTH: Final = 8
MAX_VALUE_LENGTH: Final = 100

# Leading fields of a console line, in display order
PRIORITY_FIELDS: Final = (
    "correlation_id",
    "tenant",
    "request_id",
    "method",
    "path",
    "status_code",
    "duration_ms",
)
UVICORN_LOGGERS: Final = ("uvicorn", "uvicorn.error", "uvicorn.access")


def _escape(value: object) -> str:
    # Loguru would read braces in the returned format as placeholders
    return str(value).replace("{", "{{").replace("}", "}}")


def _show_priority(field: str, value: object) -> str:
    text = str(value)
    match field:
        case "correlation_id":
            return _escape(text[:SHORT_ID_LENGTH])
        case "duration_ms":
            return _escape(f"{text}ms")
        case "status_code" if text.startswith("2"):
            return f"<green>{_escape(text)}</green>"
        case "status_code" if text.startswith(("4", "5")):
            return f"<red>{_escape(text)}</red>"
    return _escape(text)


def _show_extra(key: str, value: object) -> str:
    text = REDACTED if is_sensitive_field(key) else str(value)
    if len(text) > MAX_VALUE_LENGTH:
        text = text[: MAX_VALUE_LENGTH - 3] + "..."
    return f"{_escape(key)}={_escape(text)}"


def format_console_with_context(record: dict[str, Any]) -> str:
    """Loguru format string for one console line.

    Priority fields come first in fixed order, followed by any other bound
    field as ``key=value``. Private (underscored) and ``None`` fields are
    skipped.
    """
    try:
        extra = record.get("extra", {})
        fields = [
            f"[<yellow>{_show_priority(name, extra[name])}</yellow>]"
            for name in PRIORITY_FIELDS
            if extra.get(name) is not None
        ]
        fields += [
            f"[<dim>{_show_extra(key, value)}</dim>]"
            for key, value in extra.items()
            if key not in PRIORITY_FIELDS
            and not key.startswith("_")
            and value is not None
        ]
        timestamp = record["time"].strftime("%Y-%m-%d %H:%M:%S.%f")[:-3]
        origin = f"{record['name']}:{record['function']}:{record['line']}"
        columns = [
            f"<green>{timestamp}</green>",
            f"<level>{record['level'].name: <8}</level>",
            f"<cyan>{origin}</cyan>",
            *([" ".join(fields)] if fields else []),
            _escape(record.get("message", "")),
        ]
    except (AttributeError, TypeError, ValueError, KeyError):
        return FALLBACK_FORMAT + "\n"

    line = " | ".join(columns)
    if record.get("exception"):
        line += "\n{exception}"
    return line + "\n"


def serialize_for_json(record: dict[str, Any]) -> str:
    """Render a record as one JSON line.

    Bound fields are copied to the top level, secrets masked. An exception
    is reduced to its type and message; the traceback stays out of the
    line.
    """
    entry: dict[str, Any] = {
        "timestamp": record["time"].isoformat(),
        "level": record["level"].name,
        "message": record["message"],
        "logger": record["name"],
        "function": record["function"],
        "line": record["line"],
    }
    entry.update(
        (key, REDACTED if is_sensitive_field(key) else value)
        for key, value in record.get("extra", {}).items()
        if not key.startswith("_")
    )
    if exc := record.get("exception"):
        entry["exception"] = {
            "type": exc.type.__name__ if exc.type else None,
            "value": str(exc.value) if exc.value else None,
        }
    return json.dumps(entry, default=str) + "\n"


def _json_sink(message: Message) -> None:
    sys.stdout.write(serialize_for_json(cast("Any", message.record)))
    sys.stdout.flush()


class InterceptHandler(logging.Handler):
    """Re-emits standard library records through Loguru."""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            level: str | int = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        # Report the caller of the stdlib logger, not the logging module
        frame, depth = inspect.currentframe(), 0
        while frame and (depth == 0 or frame.f_code.co_filename == logging.__file__):
            frame = frame.f_back
            depth += 1

        logger.opt(depth=depth, exception=record.exc_info).log(
            level, record.getMessage()
        )


def setup_logging(settings: Settings) -> None:
    """Replace Loguru's default sink and capture stdlib logging.

    Only the first call in a process has any effect.
    """
    if _state.configured:
        return

    config = settings.log_config
    formatter = config.log_formatter_type or "console"
    logger.remove()
    if formatter == "json":
        logger.add(
            _json_sink,
            level=config.log_level,
            enqueue=True,
            diagnose=False,
            backtrace=False,
        )
    else:
        logger.add(
            sys.stdout,
            format=cast("Any", format_console_with_context),
            level=config.log_level,
            enqueue=True,
            colorize=True,
            diagnose=settings.debug,
            backtrace=settings.debug,
        )

    logging.basicConfig(handlers=[InterceptHandler()], level=0, force=True)
    for name in UVICORN_LOGGERS:
        std_logger = logging.getLogger(name)
        std_logger.handlers = [InterceptHandler()]
        std_logger.propagate = False

    logger.info("Logging to stdout as {}", formatter, log_level=config.log_level)
    _state.configured = True


def get_tenant_logger(domain: str) -> Logger:
    """Logger whose records carry ``tenant=domain``."""
    return logger.bind(tenant=domain)

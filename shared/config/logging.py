"""
Structured logging for the listing engine and the admin client.

Log calls take their context as keyword arguments:

    logger.info("Full collection fetched", entity="pedidos", pages=3)

The context travels on the record as `extra_data`. Production renders one
JSON object per line; development renders a coloured single line. Records
that carry an `entity` show it next to the logger name so the three admin
screens can be told apart in a shared stream.
"""

import json
import logging
import sys
from collections.abc import Mapping
from datetime import datetime, timezone
from typing import Any

from shared.config.settings import settings


def _context(record: logging.LogRecord) -> dict[str, Any]:
    return dict(getattr(record, "extra_data", None) or {})


class StructuredFormatter(logging.Formatter):
    """
    JSON formatter for production.

    `entity` is promoted to a top-level key; the rest of the context goes
    under `data`.
    """

    def format(self, record: logging.LogRecord) -> str:
        context = _context(record)
        log_data: dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        entity = context.pop("entity", None)
        if entity is not None:
            log_data["entity"] = entity
        if context:
            log_data["data"] = context
        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)
        if settings.debug:
            log_data["source"] = f"{record.filename}:{record.lineno}:{record.funcName}"

        return json.dumps(log_data, default=str, ensure_ascii=False)


class DevelopmentFormatter(logging.Formatter):
    """Coloured one-line formatter for the terminal."""

    COLORS = {
        "DEBUG": "\033[36m",
        "INFO": "\033[32m",
        "WARNING": "\033[33m",
        "ERROR": "\033[31m",
        "CRITICAL": "\033[35m",
    }
    RESET = "\033[0m"

    def format(self, record: logging.LogRecord) -> str:
        context = _context(record)
        color = self.COLORS.get(record.levelname, self.RESET)
        timestamp = datetime.fromtimestamp(record.created).strftime("%H:%M:%S")

        origin = record.name
        entity = context.pop("entity", None)
        if entity is not None:
            origin = f"{origin}[{entity}]"

        line = f"{color}[{timestamp}] {record.levelname:8}{self.RESET} {origin}: {record.getMessage()}"
        if context:
            line += " (" + ", ".join(f"{k}={v}" for k, v in context.items()) + ")"
        if record.exc_info:
            line += "\n" + self.formatException(record.exc_info)
        return line


class StructuredLogger(logging.Logger):
    """
    Logger whose level methods accept arbitrary keyword context.

    Only the standard keywords (exc_info, stack_info, stacklevel, extra)
    keep their usual meaning; everything else becomes `extra_data`.
    """

    def _log(
        self,
        level: int,
        msg: object,
        args: Any,
        exc_info: Any = None,
        extra: Mapping[str, object] | None = None,
        stack_info: bool = False,
        stacklevel: int = 1,
        **context: Any,
    ) -> None:
        merged = dict(extra or {})
        merged["extra_data"] = context or None
        super()._log(
            level,
            msg,
            args,
            exc_info=exc_info,
            extra=merged,
            stack_info=stack_info,
            stacklevel=stacklevel + 1,
        )


logging.setLoggerClass(StructuredLogger)


class BoundLogger(logging.LoggerAdapter):
    """
    Logger with fixed context added to every call.

    Usage:
        log = bind_logger(__name__, entity="productos")
        log.debug("Collection cache hit", fingerprint={})
    """

    def process(self, msg: Any, kwargs: Any) -> tuple[Any, Any]:
        return msg, {**self.extra, **kwargs}


def get_logger(name: str) -> StructuredLogger:
    """
    Get a logger that accepts keyword context.

    Usage:
        from shared.config.logging import get_logger
        logger = get_logger(__name__)

        logger.warning("Statistics load failed", entity="pedidos")
        logger.error("Mutation rejected", entity="usuarios", exc_info=True)
    """
    return logging.getLogger(name)  # type: ignore[return-value]


def bind_logger(name: str, **context: Any) -> BoundLogger:
    return BoundLogger(get_logger(name), context)


def setup_logging(debug: bool | None = None) -> None:
    """
    Install a single stderr handler on the root logger.

    Call once at startup; the CLI does it before building an engine.
    """
    if debug is None:
        debug = settings.debug
    level = logging.DEBUG if debug else logging.INFO

    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)
    if settings.environment == "production":
        handler.setFormatter(StructuredFormatter())
    else:
        handler.setFormatter(DevelopmentFormatter())

    root = logging.getLogger()
    root.setLevel(level)
    root.handlers.clear()
    root.addHandler(handler)

    # httpx logs every request at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)

"""Structured logging utilities."""

from __future__ import annotations

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any

ROOT_LOGGER = "ipam_firewall_sync"


class StructuredFormatter(logging.Formatter):
    """Formatter that appends context fields as key=value pairs."""

    def format(self, record: logging.LogRecord) -> str:
        extra = ""
        fields = getattr(record, "extra_fields", None)
        if fields:
            extra = " " + " ".join(f"{k}={v}" for k, v in fields.items() if v is not None)

        message = super().format(record)
        return f"{message}{extra}"


def configure_logging(
    level: str = "INFO",
    format_string: str | None = None,
    structured: bool = True,
    log_file: str | Path | None = None,
    max_bytes: int = 50 * 1024 * 1024,
    backup_count: int = 30,
) -> None:
    """Configure logging for ipam-firewall-sync.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        format_string: Custom format string
        structured: Append context fields to every record
        log_file: Optional path of a rotating log file
        max_bytes: Maximum log file size before rotation
        backup_count: Number of rotated files to keep
    """
    if format_string is None:
        format_string = "%(asctime)s %(levelname)s %(name)s: %(message)s"

    formatter: logging.Formatter
    if structured:
        formatter = StructuredFormatter(format_string)
    else:
        formatter = logging.Formatter(format_string)

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(formatter)
    handlers: list[logging.Handler] = [handler]

    if log_file:
        path = Path(log_file)
        path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(
            path,
            maxBytes=max_bytes,
            backupCount=backup_count,
            encoding="utf-8",
        )
        file_handler.setFormatter(formatter)
        handlers.append(file_handler)

    logger = logging.getLogger(ROOT_LOGGER)
    logger.setLevel(getattr(logging, level.upper()))
    logger.handlers = handlers
    logger.propagate = False


def get_logger(name: str) -> logging.Logger:
    """Get a logger for an ipam-firewall-sync module.

    Args:
        name: Module name (will be prefixed with ipam_firewall_sync)

    Returns:
        Configured logger
    """
    if not name.startswith(ROOT_LOGGER):
        name = f"{ROOT_LOGGER}.{name}"
    return logging.getLogger(name)


class LoggerAdapter(logging.LoggerAdapter):
    """Logger adapter that adds context fields to log messages."""

    def process(
        self, msg: str, kwargs: dict[str, Any]
    ) -> tuple[str, dict[str, Any]]:
        extra = kwargs.get("extra", {})
        fields = dict(self.extra or {})
        fields.update(extra.get("extra_fields", {}))
        extra["extra_fields"] = fields
        kwargs["extra"] = extra
        return msg, kwargs

    def bind(self, **context: Any) -> "LoggerAdapter":
        """Return a new adapter with additional context fields."""
        merged = dict(self.extra or {})
        merged.update(context)
        return LoggerAdapter(self.logger, merged)


def get_logger_with_context(name: str, **context: Any) -> LoggerAdapter:
    """Get a logger with additional context fields.

    Args:
        name: Module name
        **context: Context fields to include in all log messages

    Returns:
        LoggerAdapter with context
    """
    logger = get_logger(name)
    return LoggerAdapter(logger, context)

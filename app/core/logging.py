"""Structured key=value logging for the Compliance RAG Engine."""

import logging
import sys
from typing import Any

# Record attributes rendered ahead of free-form context fields
_CONTEXT_ATTRS = ("run_id",)


def _format_value(value: Any) -> str:
    text = str(value)
    if " " in text or "=" in text:
        return '"' + text.replace('"', '\\"') + '"'
    return text


class StructuredFormatter(logging.Formatter):
    """Key=value log formatter.

    Messages carry the discovery ``run_id`` when one is bound, followed by any
    context fields passed through :func:`log_with_context`.
    """

    def format(self, record: logging.LogRecord) -> str:
        log_data: dict[str, Any] = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "module": record.module,
            "function": record.funcName,
            "message": record.getMessage(),
        }

        for attr in _CONTEXT_ATTRS:
            if hasattr(record, attr):
                log_data[attr] = getattr(record, attr)

        if hasattr(record, "extra_data"):
            log_data.update(record.extra_data)

        if record.exc_info:
            log_data["exc"] = self.formatException(record.exc_info).splitlines()[-1]

        return " ".join(f"{k}={_format_value(v)}" for k, v in log_data.items())


def _level_for_env() -> int:
    try:
        from app.core.config import get_settings

        env = get_settings().COMPLIANCE_ENV
    except Exception:
        # Settings unavailable during early import
        return logging.INFO
    return logging.DEBUG if env == "dev" else logging.INFO


def get_logger(name: str) -> logging.Logger:
    """
    Get a configured logger instance.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Logger writing structured lines to stdout
    """
    logger = logging.getLogger(name)

    if not logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(StructuredFormatter())
        logger.addHandler(handler)
        logger.setLevel(_level_for_env())

    return logger


def log_with_context(logger: logging.Logger, level: int, msg: str, /, **kwargs: Any) -> None:
    """
    Log with additional context fields.

    Args:
        logger: Logger instance
        level: Log level (logging.INFO, etc.)
        msg: Log message
        **kwargs: Context fields; ``run_id`` is promoted to a record attribute
    """
    extra: dict[str, Any] = {}
    for attr in _CONTEXT_ATTRS:
        if attr in kwargs:
            extra[attr] = kwargs.pop(attr)
    extra["extra_data"] = kwargs

    logger.log(level, msg, extra=extra)

r"""Structured logging utilities for machine-readable log output.

This module provides an opt-in JSON formatter for the package loggers,
and a context variable holding the tags of the request being executed.
``HttpWebRequest`` sets the tags of its options for the duration of an
exchange, so every record emitted while the exchange runs (including the
records of the transport task) carries them.

Example:
    Enable structured logging for webrequest:

    ```python
    import logging
    from webrequest.utils.structured_logging import StructuredFormatter

    handler = logging.StreamHandler()
    handler.setFormatter(StructuredFormatter())

    logger = logging.getLogger("webrequest")
    logger.addHandler(handler)
    logger.setLevel(logging.DEBUG)
    ```
"""

from __future__ import annotations

__all__ = [
    "StructuredFormatter",
    "clear_request_tags",
    "get_request_tags",
    "log_structured",
    "reset_request_tags",
    "set_request_tags",
]

import contextvars
import json
import logging
import time
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from collections.abc import Iterable

_request_tags: contextvars.ContextVar[tuple[str, ...]] = contextvars.ContextVar(
    "request_tags", default=()
)

# Attributes every LogRecord carries, everything else came through ``extra``
_RECORD_ATTRIBUTES = frozenset(vars(logging.makeLogRecord({}))) | {"message", "asctime"}


def get_request_tags() -> tuple[str, ...]:
    """Get the tags of the request running in the current context.

    Example:
        ```pycon
        >>> from webrequest.utils.structured_logging import (
        ...     clear_request_tags,
        ...     get_request_tags,
        ...     set_request_tags,
        ... )
        >>> token = set_request_tags(["users", "sync"])
        >>> get_request_tags()
        ('users', 'sync')
        >>> clear_request_tags()
        >>> get_request_tags()
        ()

        ```
    """
    return _request_tags.get()


def set_request_tags(tags: Iterable[str]) -> contextvars.Token[tuple[str, ...]]:
    """Set the request tags for the current context.

    Args:
        tags: The tags of the request.

    Returns:
        A token that restores the previous tags when passed to
        ``reset_request_tags``.
    """
    return _request_tags.set(tuple(tags))


def reset_request_tags(token: contextvars.Token[tuple[str, ...]]) -> None:
    """Restore the tags that were set before ``token`` was created."""
    _request_tags.reset(token)


def clear_request_tags() -> None:
    """Clear the request tags for the current context."""
    _request_tags.set(())


class StructuredFormatter(logging.Formatter):
    """JSON formatter for structured logging.

    Each record is rendered as one JSON object with the fields
    ``timestamp`` (ISO 8601, UTC), ``level``, ``logger``, ``message``,
    ``module``, ``function`` and ``line``, plus ``request_tags`` when an
    exchange with tags is running, ``exception`` when the record carries
    exception information, and any field passed through ``extra``.
    Values that are not JSON serializable are rendered with ``str``.
    """

    def format(self, record: logging.LogRecord) -> str:
        log_data: dict[str, Any] = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }
        request_tags = get_request_tags()
        if request_tags:
            log_data["request_tags"] = list(request_tags)
        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)
        log_data.update(
            {key: value for key, value in vars(record).items() if key not in _RECORD_ATTRIBUTES}
        )
        return json.dumps(log_data, default=str)

    def formatTime(self, record: logging.LogRecord, datefmt: str | None = None) -> str:  # noqa: N802
        return (
            time.strftime("%Y-%m-%dT%H:%M:%S", time.gmtime(record.created))
            + f".{int(record.msecs):03d}Z"
        )


def log_structured(logger: logging.Logger, level: int, message: str, **extra: Any) -> None:
    """Log a message with structured fields.

    The fields are attached to the record through ``extra`` and appear as
    top-level keys in the output of ``StructuredFormatter``.

    Args:
        logger: Logger to use.
        level: Log level (e.g., logging.DEBUG).
        message: Log message.
        **extra: Structured fields to include in the record.
    """
    logger.log(level, message, extra=extra)

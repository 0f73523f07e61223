r"""Validation utilities for request options.

This module provides validation functions for the request options to
ensure they meet the required constraints before a request is opened.
"""

from __future__ import annotations

__all__ = ["validate_method", "validate_timeout", "validate_url"]

import re

# RFC 9110 token characters
_METHOD_PATTERN = re.compile(r"^[!#$%&'*+\-.^_`|~0-9A-Za-z]+$")


def validate_timeout(timeout: float) -> None:
    """Validate the timeout of an exchange.

    Args:
        timeout: Maximum seconds the whole exchange may take.
            Must be >= 0. A value of 0 means no timeout.

    Raises:
        ValueError: If timeout is negative or not a number.

    Example:
        ```pycon
        >>> from webrequest.utils.validation import validate_timeout
        >>> validate_timeout(0)
        >>> validate_timeout(2.5)
        >>> validate_timeout(-1)  # doctest: +SKIP
        Traceback (most recent call last):
        ...
        ValueError: timeout must be >= 0, got -1

        ```
    """
    if isinstance(timeout, bool) or not isinstance(timeout, (int, float)):
        msg = f"timeout must be a number, got {timeout!r}"
        raise ValueError(msg)
    if timeout < 0:
        msg = f"timeout must be >= 0, got {timeout}"
        raise ValueError(msg)


def validate_method(method: str) -> None:
    """Validate an HTTP method name.

    Args:
        method: The HTTP method (e.g. "GET", "POST"). Must be a non-empty
            token.

    Raises:
        ValueError: If method is empty or contains invalid characters.

    Example:
        ```pycon
        >>> from webrequest.utils.validation import validate_method
        >>> validate_method("GET")
        >>> validate_method("PROPFIND")

        ```
    """
    if not isinstance(method, str) or not _METHOD_PATTERN.fullmatch(method):
        msg = f"method must be a non-empty HTTP token, got {method!r}"
        raise ValueError(msg)


def validate_url(url: str) -> None:
    """Validate that the request URL is a string.

    Raises:
        ValueError: If url is not a string.
    """
    if not isinstance(url, str):
        msg = f"url must be a string, got {type(url).__name__}"
        raise ValueError(msg)

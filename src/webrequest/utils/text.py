r"""Conversion between raw bytes, scalar values and text."""

from __future__ import annotations

__all__ = ["DEFAULT_CHARSET", "from_bytes", "get_charset", "to_text"]

import codecs
import logging
from typing import Any

logger: logging.Logger = logging.getLogger(__name__)

DEFAULT_CHARSET = "utf-8"


def get_charset(content_type: str | None) -> str | None:
    """Extract the ``charset`` parameter of a content type.

    Example:
        ```pycon
        >>> from webrequest.utils.text import get_charset
        >>> get_charset("text/html; charset=ISO-8859-1")
        'ISO-8859-1'
        >>> get_charset("application/json") is None
        True

        ```
    """
    if not content_type:
        return None
    for parameter in content_type.split(";")[1:]:
        name, _, value = parameter.partition("=")
        if name.strip().lower() == "charset":
            return value.strip().strip("\"'") or None
    return None


def from_bytes(data: bytes | None, charset: str | None = None) -> str:
    """Decode bytes into text.

    Unknown charsets fall back to UTF-8 and undecodable bytes are replaced,
    so decoding a response never fails.

    Args:
        data: The bytes to decode. ``None`` is treated as empty.
        charset: The charset to decode with. Default is UTF-8.

    Returns:
        The decoded text.
    """
    if not data:
        return ""
    encoding = DEFAULT_CHARSET
    if charset:
        try:
            encoding = codecs.lookup(charset).name
        except LookupError:
            logger.debug(f"Unknown charset {charset!r}, decoding as {DEFAULT_CHARSET}")
    return bytes(data).decode(encoding, errors="replace")


def to_text(value: Any) -> str:
    """Render a scalar value the way it is written in a URL or form.

    Booleans are rendered in lower case (``true``/``false``), any other
    value with ``str``.

    Example:
        ```pycon
        >>> from webrequest.utils.text import to_text
        >>> to_text(True)
        'true'
        >>> to_text(2.5)
        '2.5'
        >>> to_text("cats")
        'cats'

        ```
    """
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)

r"""Header handling utilities.

This module provides the conversion of a raw response header block into
a mapping, and the key case normalisation applied to request headers.
"""

from __future__ import annotations

__all__ = ["modify_key_case", "parse_response_headers"]

import re
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from collections.abc import Mapping

_LINE_BREAK_PATTERN = re.compile(r"[\r\n]+")


def parse_response_headers(raw_headers: str) -> dict[str, str | list[str]]:
    r"""Parse a newline-delimited ``Name: value`` header block.

    Header names keep the case they were received with. The first
    occurrence of a name stores its value as a string; a second occurrence
    turns it into a list of values in arrival order, and further
    occurrences are appended to that list. Lines without a colon are
    ignored.

    Args:
        raw_headers: The raw header block, one header per line.

    Returns:
        The mapping from header name to value(s).

    Example:
        ```pycon
        >>> from webrequest.utils.headers import parse_response_headers
        >>> parse_response_headers(
        ...     "Content-Type: text/plain\r\nSet-Cookie: a=1\r\nSet-Cookie: b=2\r\n"
        ... )
        {'Content-Type': 'text/plain', 'Set-Cookie': ['a=1', 'b=2']}

        ```
    """
    headers: dict[str, str | list[str]] = {}
    for line in _LINE_BREAK_PATTERN.split(raw_headers.strip()):
        name, colon, value = line.partition(":")
        if not colon:
            continue
        value = value.strip()
        previous_value = headers.get(name)
        if previous_value is None:
            headers[name] = value
        elif isinstance(previous_value, list):
            previous_value.append(value)
        else:
            headers[name] = [previous_value, value]
    return headers


def modify_key_case(
    mapping: Mapping[str, Any] | None, is_upper_case: bool = False
) -> dict[str, Any]:
    """Return a copy of ``mapping`` with re-cased keys.

    When two keys only differ by case, the last one wins.

    Args:
        mapping: The mapping to copy. ``None`` is treated as empty.
        is_upper_case: If ``True`` keys are upper-cased, otherwise they are
            lower-cased.

    Returns:
        A new dictionary with re-cased keys.

    Example:
        ```pycon
        >>> from webrequest.utils.headers import modify_key_case
        >>> modify_key_case({"Content-Type": "text/plain", "X-Api-Key": "k"})
        {'content-type': 'text/plain', 'x-api-key': 'k'}

        ```
    """
    if not mapping:
        return {}
    if is_upper_case:
        return {key.upper(): value for key, value in mapping.items()}
    return {key.lower(): value for key, value in mapping.items()}

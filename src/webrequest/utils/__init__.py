r"""Utility functions for preparing requests and processing responses.

This package provides the data bag accessors, the response header
parser, progress percentage calculation, text decoding, options
validation and opt-in structured logging.
"""

from __future__ import annotations

__all__ = [
    "FormData",
    "calculate_percentage",
    "clone",
    "find_form_data_array_entry_keys",
    "from_bytes",
    "get_charset",
    "get_keys",
    "get_value",
    "modify_key_case",
    "parse_response_headers",
    "set_value",
    "to_text",
    "validate_method",
    "validate_timeout",
]

from webrequest.utils.data import (
    FormData,
    clone,
    find_form_data_array_entry_keys,
    get_keys,
    get_value,
    set_value,
)
from webrequest.utils.headers import modify_key_case, parse_response_headers
from webrequest.utils.math import calculate_percentage
from webrequest.utils.text import from_bytes, get_charset, to_text
from webrequest.utils.validation import validate_method, validate_timeout

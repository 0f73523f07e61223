r"""Declarative binding of a data bag to the parts of a request.

This package turns a path template and declared parameter lists into a
path, a query string, headers, a JSON body or a multipart form payload.
"""

from __future__ import annotations

__all__ = [
    "PATH_PARAMETER_PATTERN",
    "ParameterInfo",
    "build_request_options",
    "extract_array_type_parameter_name",
    "extract_parameter_info",
    "extract_path_parameters",
    "prepare_form_data",
    "prepare_request_body",
    "prepare_request_headers",
    "sanitize_path",
    "set_path_parameters",
    "set_query_parameters",
]

from webrequest.binding.binder import (
    build_request_options,
    prepare_form_data,
    prepare_request_body,
    prepare_request_headers,
    set_path_parameters,
    set_query_parameters,
)
from webrequest.binding.parameters import (
    PATH_PARAMETER_PATTERN,
    ParameterInfo,
    extract_array_type_parameter_name,
    extract_parameter_info,
    extract_path_parameters,
    sanitize_path,
)

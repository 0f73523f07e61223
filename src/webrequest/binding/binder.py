r"""Binding of declared parameters to a data bag.

Every function looks the declared parameters up in a data bag (a
``dict`` or a ``FormData``) and raises ``ParameterBindingError`` when a
mandatory one is missing, before any request is sent. A value is missing
when it is absent or ``None``. Path and query values are also missing
when they are empty strings, since they cannot be represented in a URL.
Path and query values are rendered with ``to_text``, so booleans appear
as ``true`` and ``false``.

Example:
    ```pycon
    >>> from webrequest.binding import set_path_parameters, set_query_parameters
    >>> data = {"id": 7, "q": "cats & dogs"}
    >>> path = set_path_parameters("/users/{id}/posts/{postId?}", data)
    >>> path
    '/users/7/posts'
    >>> set_query_parameters(path, ["q", "page?"], data)
    '/users/7/posts?q=cats%20%26%20dogs'

    ```
"""

from __future__ import annotations

__all__ = [
    "build_request_options",
    "prepare_form_data",
    "prepare_request_body",
    "prepare_request_headers",
    "set_path_parameters",
    "set_query_parameters",
]

import logging
from typing import TYPE_CHECKING, Any
from urllib.parse import quote

from webrequest.binding.parameters import (
    extract_parameter_info,
    extract_path_parameters,
    sanitize_path,
)
from webrequest.config import DEFAULT_METHOD
from webrequest.exceptions import ParameterBindingError, ParameterLocation
from webrequest.options import HttpRequestOptions
from webrequest.utils.data import (
    FormData,
    find_form_data_array_entry_keys,
    get_keys,
    get_value,
)
from webrequest.utils.text import to_text

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

    from webrequest.binding.parameters import ParameterInfo
    from webrequest.utils.data import RequestData

logger: logging.Logger = logging.getLogger(__name__)

# Characters encodeURIComponent leaves as they are, besides ``_.-~``
_QUERY_SAFE_CHARACTERS = "!*'()"


def set_path_parameters(path: str, data: RequestData | None = None) -> str:
    r"""Substitute the tokens of a path template.

    A missing optional parameter is replaced with an empty string. The
    result is sanitized with ``sanitize_path``.

    Args:
        path: The path template, e.g. ``"/users/{id}/posts/{postId?}"``.
        data: The data bag holding the parameter values.

    Returns:
        The path with every token substituted.

    Raises:
        ParameterBindingError: If a mandatory path parameter is missing.
    """
    parameters = extract_path_parameters(path)
    if not parameters:
        return path
    for parameter in parameters:
        info = extract_parameter_info(parameter)
        value = get_value(info.name, data)
        if _is_missing(value) and info.is_mandatory:
            raise _binding_error(info, ParameterLocation.PATH, "Mandatory path parameter")
        path = path.replace(info.token, "" if _is_missing(value) else to_text(value), 1)
    return sanitize_path(path)


def set_query_parameters(
    path: str, parameters: Iterable[str] | None, data: RequestData | None = None
) -> str:
    r"""Append the declared query parameters to a path.

    Values are rendered with ``to_text`` (``True`` becomes ``true``), then
    percent-encoded like ``encodeURIComponent``. A missing optional
    parameter is skipped.

    Args:
        path: The path to append the query parameters to. It may already
            hold a query string.
        parameters: The declared query parameters.
        data: The data bag holding the parameter values.

    Returns:
        The path with the query parameters appended.

    Raises:
        ParameterBindingError: If a mandatory query parameter is missing.
    """
    has_query = "?" in path
    for parameter in parameters or ():
        info = extract_parameter_info(parameter)
        value = get_value(info.name, data)
        if _is_missing(value):
            if info.is_mandatory:
                raise _binding_error(info, ParameterLocation.QUERY, "Mandatory query parameter")
            continue
        path += "&" if has_query else "?"
        path += f"{info.name}={quote(to_text(value), safe=_QUERY_SAFE_CHARACTERS)}"
        has_query = True
    return path


def prepare_request_headers(
    parameters: Iterable[str] | None, data: RequestData | None = None
) -> dict[str, str]:
    r"""Collect the declared headers from a data bag.

    Only ``str`` values satisfy a header, any other value is treated as
    missing. Header names are lower-cased.

    Raises:
        ParameterBindingError: If a mandatory header is missing.

    Example:
        ```pycon
        >>> from webrequest.binding import prepare_request_headers
        >>> prepare_request_headers(["X-Api-Key", "X-Trace?"], {"X-Api-Key": "secret"})
        {'x-api-key': 'secret'}

        ```
    """
    headers: dict[str, str] = {}
    for parameter in parameters or ():
        info = extract_parameter_info(parameter)
        value = get_value(info.name, data)
        if not isinstance(value, str):
            if info.is_mandatory:
                raise _binding_error(info, ParameterLocation.HEADER, "Mandatory header")
            continue
        headers[info.name.lower()] = value
    return headers


def prepare_request_body(
    parameters: Sequence[str] | None, data: RequestData | None = None
) -> dict[str, Any] | None:
    r"""Collect the declared body parameters from a data bag.

    Args:
        parameters: The declared body parameters.
        data: The data bag holding the parameter values.

    Returns:
        The body, or ``None`` if no parameter is declared.

    Raises:
        ParameterBindingError: If a mandatory body parameter is missing.
    """
    if not parameters:
        return None
    body: dict[str, Any] = {}
    for parameter in parameters:
        info = extract_parameter_info(parameter)
        value = get_value(info.name, data)
        if value is None:
            if info.is_mandatory:
                raise _binding_error(info, ParameterLocation.BODY, "Mandatory body parameter")
            continue
        body[info.name] = value
    return body


def prepare_form_data(
    fields: Sequence[str] | None, data: RequestData | None = None
) -> FormData | None:
    r"""Collect the declared form fields from a data bag.

    A scalar field holding several values in the data bag is appended
    once per value. An array field ``name[]`` is bound from the keys of
    the data bag that start with ``name[`` (e.g. ``tags[0]``, ``tags[1]``),
    each appended under its original key. Array fields are appended after
    the scalar fields.

    Args:
        fields: The declared form fields.
        data: The data bag holding the field values.

    Returns:
        The form data, or ``None`` if no field is declared.

    Raises:
        ParameterBindingError: If a mandatory field is missing, or no key
            matches a mandatory array field.

    Example:
        ```pycon
        >>> from webrequest.binding import prepare_form_data
        >>> from webrequest.utils import FormData
        >>> data = FormData([("title", "post"), ("tags[0]", "a"), ("tags[1]", "b")])
        >>> prepare_form_data(["tags[]", "title"], data)
        FormData([('title', 'post'), ('tags[0]', 'a'), ('tags[1]', 'b')])

        ```
    """
    if not fields:
        return None
    form_data = FormData()
    array_fields: list[ParameterInfo] = []
    for field in fields:
        info = extract_parameter_info(field)
        if info.is_array:
            array_fields.append(info)
            continue
        value = get_value(info.name, data, single=False)
        if value is None:
            if info.is_mandatory:
                raise _binding_error(info, ParameterLocation.FORM, "Mandatory field")
            continue
        _append_values(form_data, info.name, value)

    keys = get_keys(data)
    for info in array_fields:
        entry_keys = find_form_data_array_entry_keys(info.name, keys)
        if not entry_keys and info.is_mandatory:
            raise _binding_error(info, ParameterLocation.FORM, "Mandatory field")
        for key in entry_keys:
            _append_values(form_data, key, get_value(key, data, single=False))
    return form_data


def build_request_options(
    path: str,
    data: RequestData | None = None,
    *,
    base_url: str = "",
    method: str = DEFAULT_METHOD,
    query_parameters: Sequence[str] | None = None,
    header_parameters: Sequence[str] | None = None,
    body_parameters: Sequence[str] | None = None,
    form_fields: Sequence[str] | None = None,
    **options: Any,
) -> HttpRequestOptions:
    r"""Bind a data bag to a path template and declared parameters.

    Args:
        path: The path template, e.g. ``"/users/{id}"``.
        data: The data bag holding the parameter values.
        base_url: Prefix of the bound path.
        method: The HTTP method.
        query_parameters: The declared query parameters.
        header_parameters: The declared headers. They are merged over the
            ``headers`` passed in ``options``.
        body_parameters: The declared body parameters.
        form_fields: The declared form fields. When declared, the form data
            is the body and ``body_parameters`` are ignored.
        **options: Additional ``HttpRequestOptions`` fields.

    Returns:
        The request options.

    Raises:
        ParameterBindingError: If a mandatory parameter is missing.

    Example:
        ```pycon
        >>> from webrequest.binding import build_request_options
        >>> options = build_request_options(
        ...     "/users/{id}",
        ...     {"id": 7, "name": "Ada", "X-Api-Key": "secret"},
        ...     base_url="https://api.example.com",
        ...     method="PUT",
        ...     header_parameters=["X-Api-Key"],
        ...     body_parameters=["name"],
        ... )
        >>> options.url
        'https://api.example.com/users/7'
        >>> options.body
        {'name': 'Ada'}

        ```
    """
    bound_path = set_path_parameters(path, data)
    bound_path = set_query_parameters(bound_path, query_parameters, data)
    headers = {**(options.pop("headers", None) or {})}
    headers.update(prepare_request_headers(header_parameters, data))
    body = prepare_form_data(form_fields, data)
    if body is None:
        body = prepare_request_body(body_parameters, data)
    if body is None:
        body = options.pop("body", None)
    else:
        options.pop("body", None)
    logger.debug(f"Bound {path!r} to {method} {base_url}{bound_path}")
    return HttpRequestOptions(
        url=f"{base_url}{bound_path}",
        method=method,
        headers=headers or None,
        body=body,
        **options,
    )


def _is_missing(value: Any) -> bool:
    return value is None or value == ""


def _append_values(form_data: FormData, name: str, value: Any) -> None:
    if isinstance(value, list):
        for element in value:
            form_data.append(name, element)
    else:
        form_data.append(name, value)


def _binding_error(
    info: ParameterInfo, location: ParameterLocation, description: str
) -> ParameterBindingError:
    return ParameterBindingError(
        info.name, location, f"{description} '{info.name}' not provided."
    )

r"""Exceptions raised by the webrequest package.

Transport-level failures (network errors, timeouts, aborts) are never
raised: they are reported through the ``status`` field of the returned
``HttpResponse``. The exceptions defined here cover the cases that are
discoverable before any I/O happens: a malformed request built by the
parameter binder, a second use of a single-shot request, or an environment
where no transport can be created.
"""

from __future__ import annotations

__all__ = [
    "HttpError",
    "ParameterBindingError",
    "ParameterLocation",
    "RequestAlreadySentError",
    "UnsupportedEnvironmentError",
]

import traceback
from enum import Enum
from typing import TYPE_CHECKING, Any

from webrequest.config import BINDING_ERROR_STATUS
from webrequest.response import HttpResponse

if TYPE_CHECKING:
    from typing import Self


class ParameterLocation(str, Enum):
    """Part of the request a bound parameter belongs to."""

    PATH = "PATH"
    QUERY = "QUERY"
    HEADER = "HEADER"
    BODY = "BODY"
    FORM = "FORM"


class HttpError(Exception):
    r"""Error carrying an HTTP status and optional structured data.

    Args:
        status: The HTTP status describing the error (e.g. 400).
        message: A human-readable description of the error.
        data: Optional structured details about the error.

    Example:
        ```pycon
        >>> from webrequest.exceptions import HttpError
        >>> error = HttpError(404, "Resource not found", data={"id": 7})
        >>> response = error.to_response()
        >>> response.status
        404
        >>> response.json_data
        {'id': 7}

        ```
    """

    def __init__(self, status: int, message: str, data: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.status = status
        self.message = message
        self.data = data

    def to_response(self, include_stack_trace: bool = False) -> HttpResponse:
        """Project the error into the ``HttpResponse`` shape.

        Args:
            include_stack_trace: If ``True`` and the error has been raised,
                the formatted traceback is added to the response data under
                the ``stack_trace`` key.

        Returns:
            A response whose status and message are the error's.
        """
        json_data = dict(self.data) if self.data is not None else None
        if include_stack_trace and self.__traceback__ is not None:
            if json_data is None:
                json_data = {}
            json_data["stack_trace"] = "".join(traceback.format_exception(self))
        return HttpResponse(status=self.status, message=self.message, json_data=json_data)

    @classmethod
    def from_error(cls, error: BaseException, status: int = 500) -> Self:
        """Convert any exception into an ``HttpError``.

        An ``HttpError`` is returned unchanged. Any other exception is
        wrapped, keeping its traceback and chaining it as the cause.

        Args:
            error: The exception to convert.
            status: The status used when ``error`` is not already an
                ``HttpError``.

        Returns:
            The converted error.
        """
        if isinstance(error, cls):
            return error
        http_error = cls(status, str(error))
        http_error.__cause__ = error
        return http_error.with_traceback(error.__traceback__)


class ParameterBindingError(HttpError):
    r"""Raised when a declared parameter cannot be bound from the data.

    The error is raised synchronously while the request is being prepared,
    so no network call is ever attempted for a malformed request.

    Args:
        parameter: The name of the offending parameter.
        location: The part of the request the parameter belongs to.
        message: A human-readable description naming the parameter.

    Example:
        ```pycon
        >>> from webrequest.exceptions import ParameterBindingError, ParameterLocation
        >>> error = ParameterBindingError(
        ...     "id", ParameterLocation.PATH, "Mandatory path parameter 'id' not provided."
        ... )
        >>> error.status
        400
        >>> error.data["location"] == "PATH"
        True

        ```
    """

    def __init__(self, parameter: str, location: ParameterLocation, message: str) -> None:
        super().__init__(
            BINDING_ERROR_STATUS, message, data={"parameter": parameter, "location": location}
        )
        self.parameter = parameter
        self.location = location


class UnsupportedEnvironmentError(RuntimeError):
    """Raised when no usable transport can be instantiated."""


class RequestAlreadySentError(RuntimeError):
    """Raised when a single-shot request is sent a second time."""

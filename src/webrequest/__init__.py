r"""webrequest - HTTP requests reporting their lifecycle as events.

This package sends one HTTP request at a time and reports every step of
the exchange (upload and download progress, state changes, success or
failure) to event listeners. Built on top of the httpx library, it never
raises on transport failures: every exchange completes with exactly one
``HttpResponse`` whose status encodes the outcome.

Key Features:
    - Upload and download progress events with computed percentages
    - Request states mirroring the browser ``XMLHttpRequest`` ready states
    - Synthesized statuses for unsupported environments (-1), network
      errors (-2), timeouts (-3) and aborts (-4)
    - Automatic JSON request and response body handling
    - Declarative binding of a data bag to path, query, headers, body and
      multipart form data
    - Pluggable transport primitive

Example:
    ```pycon
    >>> import asyncio
    >>> from webrequest import HttpClient, HttpEvent
    >>> from webrequest.binding import build_request_options
    >>> client = HttpClient()
    >>> client.event_manager.add_event_listener(
    ...     HttpEvent.UPLOAD_PROGRESS_CHANGE,
    ...     lambda arguments: print(f"{arguments.progress:.0f}%"),
    ... )
    >>> options = build_request_options(
    ...     "/users/{id}",
    ...     {"id": 7, "name": "Ada"},
    ...     base_url="https://api.example.com",
    ...     method="PUT",
    ...     body_parameters=["name"],
    ... )
    >>> response = asyncio.run(client.send_request_async(options))  # doctest: +SKIP

    ```
"""

from __future__ import annotations

__all__ = [
    "EventManager",
    "HttpClient",
    "HttpError",
    "HttpEvent",
    "HttpEventArguments",
    "HttpRequestOptions",
    "HttpRequestState",
    "HttpResponse",
    "HttpWebRequest",
    "ParameterBindingError",
    "ParameterLocation",
    "RequestAlreadySentError",
    "UnsupportedEnvironmentError",
    "__version__",
    "is_supported",
    "request_async",
]

from importlib.metadata import PackageNotFoundError, version

from webrequest.client import HttpClient, is_supported, request_async
from webrequest.events import EventManager, HttpEvent, HttpEventArguments, HttpRequestState
from webrequest.exceptions import (
    HttpError,
    ParameterBindingError,
    ParameterLocation,
    RequestAlreadySentError,
    UnsupportedEnvironmentError,
)
from webrequest.options import HttpRequestOptions
from webrequest.response import HttpResponse
from webrequest.web_request import HttpWebRequest

try:
    __version__ = version(__name__)
except PackageNotFoundError:  # pragma: no cover
    # Package is not installed, fallback if needed
    __version__ = "0.0.0"

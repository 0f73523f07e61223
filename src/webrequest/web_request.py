r"""Request lifecycle engine executing one HTTP exchange.

``HttpWebRequest`` drives a single exchange over a transport primitive,
tracks the upload and download progress, maps the transport ready states
to ``HttpRequestState`` and fires the lifecycle events through an
``EventManager``. The exchange always completes with exactly one
``HttpResponse``: transport failures are reported through negative status
codes instead of being raised.

Example:
    ```pycon
    >>> import asyncio
    >>> from webrequest import HttpEvent, HttpWebRequest
    >>> request = HttpWebRequest("https://api.example.com/data")
    >>> request.event_manager.add_event_listener(
    ...     HttpEvent.DOWNLOAD_PROGRESS_CHANGE,
    ...     lambda arguments: print(f"{arguments.progress:.0f}%"),
    ... )
    >>> response = asyncio.run(request.send_async())  # doctest: +SKIP
    >>> response.status  # doctest: +SKIP
    200

    ```
"""

from __future__ import annotations

__all__ = ["ExchangeState", "HttpWebRequest", "ProgressState"]

import asyncio
import json
import logging
from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Any

import httpx

from webrequest.config import (
    CONTENT_TYPE_HEADER,
    JSON_CONTENT_TYPE,
    MESSAGE_ABORTED,
    MESSAGE_ERROR,
    MESSAGE_TIMEOUT,
    RESPONSE_TYPE,
    STATUS_ABORTED,
    STATUS_ERROR,
    STATUS_TIMEOUT,
)
from webrequest.events import EventManager, HttpEvent, HttpEventArguments, HttpRequestState
from webrequest.exceptions import RequestAlreadySentError, UnsupportedEnvironmentError
from webrequest.options import HttpRequestOptions
from webrequest.response import HttpResponse
from webrequest.transport import HttpxTransport, ReadyState, SignalType
from webrequest.utils.data import FormData
from webrequest.utils.headers import modify_key_case, parse_response_headers
from webrequest.utils.math import calculate_percentage
from webrequest.utils.structured_logging import (
    log_structured,
    reset_request_tags,
    set_request_tags,
)
from webrequest.utils.text import from_bytes, get_charset

if TYPE_CHECKING:
    from collections.abc import Callable

    from webrequest.transport import Transport, TransportSignal

logger: logging.Logger = logging.getLogger(__name__)

_UPLOAD_EVENTS: dict[SignalType, HttpEvent] = {
    SignalType.LOAD_START: HttpEvent.UPLOAD_START,
    SignalType.LOAD_END: HttpEvent.UPLOAD_COMPLETE,
    SignalType.LOAD: HttpEvent.UPLOAD_SUCCESS,
    SignalType.PROGRESS: HttpEvent.UPLOAD_PROGRESS_CHANGE,
    SignalType.TIMEOUT: HttpEvent.UPLOAD_TIMEOUT,
    SignalType.ABORT: HttpEvent.UPLOAD_ABORT,
    SignalType.ERROR: HttpEvent.UPLOAD_ERROR,
}

_DOWNLOAD_EVENTS: dict[SignalType, HttpEvent] = {
    SignalType.LOAD_START: HttpEvent.DOWNLOAD_START,
    SignalType.LOAD_END: HttpEvent.DOWNLOAD_COMPLETE,
    SignalType.LOAD: HttpEvent.DOWNLOAD_SUCCESS,
    SignalType.PROGRESS: HttpEvent.DOWNLOAD_PROGRESS_CHANGE,
    SignalType.TIMEOUT: HttpEvent.DOWNLOAD_TIMEOUT,
    SignalType.ABORT: HttpEvent.DOWNLOAD_ABORT,
    SignalType.ERROR: HttpEvent.DOWNLOAD_ERROR,
    SignalType.READY_STATE_CHANGE: HttpEvent.STATE_CHANGE,
}


class ExchangeState(str, Enum):
    """Progression of the single exchange an ``HttpWebRequest`` executes."""

    NOT_STARTED = "NOT_STARTED"
    IN_FLIGHT = "IN_FLIGHT"
    SETTLED = "SETTLED"


@dataclass
class ProgressState:
    """Progress of one side (upload or download) of an exchange.

    Attributes:
        is_computable: Whether the total length is known.
        bytes_transferred: Bytes transferred so far.
        content_length: The total length in bytes, 0 when unknown.
        percentage: The progress percentage in [0, 100].
    """

    is_computable: bool = False
    bytes_transferred: int = 0
    content_length: int = 0
    percentage: float = 0.0

    def update(self, signal: TransportSignal) -> None:
        """Update the progress from a transport signal.

        The counters only move on a computable ``progress`` signal.
        """
        self.is_computable = signal.length_computable
        if signal.type == SignalType.PROGRESS and signal.length_computable:
            self.bytes_transferred = signal.loaded
            self.content_length = signal.total
            self.percentage = calculate_percentage(signal.loaded, signal.total)


class HttpWebRequest:
    r"""Single-shot HTTP request reporting its lifecycle as events.

    Args:
        options: A URL or the request options.
        event_manager: The manager the lifecycle events are fired through.
            Several requests may share one manager. If ``None``, a new
            manager is created.
        transport_factory: Callable returning the transport primitive to
            use. If ``None``, an ``HttpxTransport`` with its own client is
            used.

    Raises:
        UnsupportedEnvironmentError: If the transport cannot be created.
        TypeError: If the body has to be serialized as JSON but is not JSON
            serializable.

    Example:
        ```pycon
        >>> import asyncio
        >>> from webrequest import HttpRequestOptions, HttpWebRequest
        >>> request = HttpWebRequest(
        ...     HttpRequestOptions(
        ...         url="https://api.example.com/data",
        ...         method="POST",
        ...         headers={"X-Api-Key": "secret"},
        ...         body={"key": "value"},
        ...         timeout=10.0,
        ...     )
        ... )
        >>> response = asyncio.run(request.send_async())  # doctest: +SKIP

        ```
    """

    def __init__(
        self,
        options: str | HttpRequestOptions,
        *,
        event_manager: EventManager | None = None,
        transport_factory: Callable[[], Transport] | None = None,
    ) -> None:
        self._options = HttpRequestOptions.from_value(options)
        self._event_manager = event_manager if event_manager is not None else EventManager()
        self._transport = _create_transport(transport_factory or HttpxTransport)

        self._request_headers: dict[str, str] = modify_key_case(self._options.headers)
        self._request_body = self._options.body
        if self._options.automatic_json_request_body_parsing and _shall_convert_to_json(
            self._request_body
        ):
            content_type = self._request_headers.get(CONTENT_TYPE_HEADER, "")
            if "JSON" not in content_type.upper():
                self._request_headers[CONTENT_TYPE_HEADER] = JSON_CONTENT_TYPE
            self._request_body = json.dumps(self._request_body)

        self._upload = ProgressState()
        self._download = ProgressState()
        self._state = int(ReadyState.UNSENT)
        self._state_name = HttpRequestState.UNSENT
        self._exchange_state = ExchangeState.NOT_STARTED
        self._future: asyncio.Future[HttpResponse] | None = None

        self._content_parsed = False
        self._text_data: str | None = None
        self._json_data: Any = None
        self._response_headers: dict[str, str | list[str]] | None = None

        for signal_type in _UPLOAD_EVENTS:
            self._transport.upload.add_event_listener(signal_type, self._handle_upload_signal)
        for signal_type in _DOWNLOAD_EVENTS:
            if signal_type != SignalType.READY_STATE_CHANGE:
                self._transport.add_event_listener(signal_type, self._handle_download_signal)

    @property
    def options(self) -> HttpRequestOptions:
        return self._options

    @property
    def event_manager(self) -> EventManager:
        return self._event_manager

    @property
    def exchange_state(self) -> ExchangeState:
        return self._exchange_state

    @property
    def state(self) -> int:
        """The numeric request state (0 to 4)."""
        return self._state

    @property
    def state_name(self) -> HttpRequestState:
        return self._state_name

    @property
    def is_upload_progress_computable(self) -> bool:
        return self._upload.is_computable

    @property
    def bytes_uploaded(self) -> int:
        return self._upload.bytes_transferred

    @property
    def upload_content_length(self) -> int:
        return self._upload.content_length

    @property
    def upload_progress_percentage(self) -> float:
        return self._upload.percentage

    @property
    def is_download_progress_computable(self) -> bool:
        return self._download.is_computable

    @property
    def bytes_downloaded(self) -> int:
        return self._download.bytes_transferred

    @property
    def download_content_length(self) -> int:
        return self._download.content_length

    @property
    def download_progress_percentage(self) -> float:
        return self._download.percentage

    @property
    def response_headers(self) -> dict[str, str | list[str]] | None:
        """The parsed response headers, or ``None`` before they are
        received."""
        return self._parse_response_headers()

    async def send_async(self) -> HttpResponse:
        """Execute the exchange.

        Returns:
            The response. Transport failures are reported through the
            status: -2 for a network error, -3 for a timeout and -4 for an
            abort.

        Raises:
            RequestAlreadySentError: If the request was already sent.
            asyncio.CancelledError: If the awaiting task is cancelled. The
                exchange is aborted first.
        """
        if self._exchange_state != ExchangeState.NOT_STARTED:
            msg = f"The request to {self._options.url} has already been sent"
            raise RequestAlreadySentError(msg)
        self._exchange_state = ExchangeState.IN_FLIGHT
        self._future = asyncio.get_running_loop().create_future()

        options = self._options
        transport = self._transport
        token = set_request_tags(options.request_tags)
        try:
            transport.add_event_listener(
                SignalType.READY_STATE_CHANGE, self._handle_ready_state_change
            )
            transport.open(options.method, options.url)
            transport.timeout = options.timeout
            transport.response_type = RESPONSE_TYPE
            transport.with_credentials = options.allow_credentials_on_cross_site_requests
            for name, value in self._request_headers.items():
                transport.set_request_header(name, value)

            transport.add_event_listener(SignalType.ABORT, self._handle_abort)
            transport.add_event_listener(SignalType.TIMEOUT, self._handle_timeout)
            transport.add_event_listener(SignalType.ERROR, self._handle_error)

            log_structured(
                logger,
                logging.DEBUG,
                f"Sending {options.method} request to {options.url}",
                method=options.method,
                url=options.url,
            )
            transport.send(self._request_body)
            try:
                response = await self._future
            except asyncio.CancelledError:
                self.abort()
                self._exchange_state = ExchangeState.SETTLED
                raise
        finally:
            reset_request_tags(token)

        log_structured(
            logger,
            logging.DEBUG,
            f"{options.method} request to {options.url} completed with status {response.status}",
            method=options.method,
            url=options.url,
            status=response.status,
        )
        return response

    def abort(self) -> None:
        """Abort the exchange.

        A pending ``send_async`` completes with status -4. Aborting a
        request that is not in flight has no effect.
        """
        self._transport.abort()

    def _settle(self, response: HttpResponse) -> None:
        if self._exchange_state == ExchangeState.SETTLED:
            return
        self._exchange_state = ExchangeState.SETTLED
        if self._future is not None and not self._future.done():
            self._future.set_result(response)

    def _handle_abort(self, signal: TransportSignal) -> None:
        self._settle(HttpResponse.failure(STATUS_ABORTED, MESSAGE_ABORTED, self._options))

    def _handle_timeout(self, signal: TransportSignal) -> None:
        self._settle(HttpResponse.failure(STATUS_TIMEOUT, MESSAGE_TIMEOUT, self._options))

    def _handle_error(self, signal: TransportSignal) -> None:
        self._settle(HttpResponse.failure(STATUS_ERROR, MESSAGE_ERROR, self._options))

    def _handle_ready_state_change(self, signal: TransportSignal) -> None:
        response = self._create_response() if self._parse_content() else None
        self._handle_download_signal(signal, response)
        # A zero status means the exchange failed, the failure signal settles it
        if response is not None and self._transport.status != 0:
            self._settle(response)

    def _handle_upload_signal(self, signal: TransportSignal) -> None:
        self._upload.update(signal)
        self._event_manager.fire_event_listeners(
            HttpEventArguments(
                type=_UPLOAD_EVENTS[signal.type],
                is_progress_computable=self._upload.is_computable,
                content_length=self._upload.content_length,
                progress=self._upload.percentage,
                state=self._state,
                state_name=self._state_name,
                http_request_options=self._options,
                bytes_uploaded=self._upload.bytes_transferred,
            )
        )

    def _handle_download_signal(
        self, signal: TransportSignal, response: HttpResponse | None = None
    ) -> None:
        if signal.type == SignalType.READY_STATE_CHANGE:
            self._state = int(self._transport.ready_state)
            self._state_name = HttpRequestState.from_ready_state(self._state)
        else:
            self._download.update(signal)
        self._event_manager.fire_event_listeners(
            HttpEventArguments(
                type=_DOWNLOAD_EVENTS[signal.type],
                is_progress_computable=self._download.is_computable,
                content_length=self._download.content_length,
                progress=self._download.percentage,
                state=self._state,
                state_name=self._state_name,
                http_request_options=self._options,
                bytes_downloaded=self._download.bytes_transferred,
                http_response=response,
            )
        )

    def _create_response(self) -> HttpResponse:
        return HttpResponse(
            status=self._transport.status,
            headers=self._parse_response_headers(),
            raw_data=self._transport.response,
            text_data=self._text_data,
            json_data=self._json_data,
            request_options=self._options,
        )

    def _parse_content(self) -> bool:
        """Decode the textual and JSON response contents.

        Returns:
            ``True`` once the transport is done, otherwise ``False``.
        """
        if self._transport.ready_state != ReadyState.DONE:
            return False
        if self._content_parsed:
            return True
        self._content_parsed = True

        content_type = self._transport.get_response_header(CONTENT_TYPE_HEADER) or ""
        is_json_content = "JSON" in content_type.upper()
        if not is_json_content and "TEXT" not in content_type.upper():
            return True
        self._text_data = from_bytes(self._transport.response, get_charset(content_type))
        if is_json_content and self._options.automatic_json_response_body_parsing:
            # An empty body has nothing to parse, e.g. a 204 response
            if self._text_data.strip():
                try:
                    self._json_data = json.loads(self._text_data)
                except ValueError as exc:
                    logger.warning(
                        f"Response from {self._options.url} declares {content_type!r} "
                        f"but is not valid JSON: {exc}"
                    )
        return True

    def _parse_response_headers(self) -> dict[str, str | list[str]] | None:
        if self._response_headers is not None:
            return self._response_headers
        if self._transport.ready_state < ReadyState.HEADERS_RECEIVED:
            return None
        self._response_headers = parse_response_headers(
            self._transport.get_all_response_headers()
        )
        return self._response_headers


def _create_transport(transport_factory: Callable[[], Transport]) -> Transport:
    try:
        return transport_factory()
    except Exception as exc:
        logger.exception("Could not create the transport primitive")
        msg = f"HttpWebRequest is not supported by this environment: {exc}"
        raise UnsupportedEnvironmentError(msg) from exc


def _shall_convert_to_json(body: Any) -> bool:
    """Whether ``body`` is a structured value sent as JSON.

    Pre-encoded payloads (form data, URL encoded parameters, bytes, text,
    files and streams) are sent as they are.
    """
    if isinstance(body, (FormData, httpx.QueryParams)):
        return False
    return isinstance(body, (Mapping, list, tuple))

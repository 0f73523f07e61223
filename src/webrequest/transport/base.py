r"""Transport primitive contract.

A transport performs the I/O of one HTTP exchange and reports its
lifecycle through signals, the way a browser ``XMLHttpRequest`` does:

- the transport itself dispatches ``loadstart``, ``progress``, ``load``,
  ``timeout``, ``abort``, ``error``, ``loadend`` and ``readystatechange``
  for the response side;
- its ``upload`` target dispatches the same signals, except
  ``readystatechange``, for the request body.

``Transport`` is the abstract contract ``HttpWebRequest`` relies on.
``BaseTransport`` implements the state bookkeeping and the signal
sequencing so concrete transports only implement ``_start`` and
``_cancel``.
"""

from __future__ import annotations

__all__ = [
    "BaseTransport",
    "ReadyState",
    "SignalListener",
    "SignalTarget",
    "SignalType",
    "Transport",
    "TransportSignal",
]

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum, IntEnum
from typing import TYPE_CHECKING, Any, TypeAlias

from webrequest.config import DEFAULT_METHOD, DEFAULT_TIMEOUT, RESPONSE_TYPE

if TYPE_CHECKING:
    from collections.abc import Callable

logger: logging.Logger = logging.getLogger(__name__)


class ReadyState(IntEnum):
    """Numeric ready states of a transport."""

    UNSENT = 0
    OPENED = 1
    HEADERS_RECEIVED = 2
    LOADING = 3
    DONE = 4


class SignalType(str, Enum):
    """Signals dispatched by a transport and its upload target."""

    LOAD_START = "loadstart"
    LOAD_END = "loadend"
    LOAD = "load"
    PROGRESS = "progress"
    TIMEOUT = "timeout"
    ABORT = "abort"
    ERROR = "error"
    READY_STATE_CHANGE = "readystatechange"


@dataclass(frozen=True)
class TransportSignal:
    """A signal dispatched by a transport.

    Attributes:
        type: The signal type.
        length_computable: Whether ``total`` is known.
        loaded: Bytes transferred so far.
        total: Total bytes to transfer, 0 when unknown.
    """

    type: SignalType
    length_computable: bool = False
    loaded: int = 0
    total: int = 0


SignalListener: TypeAlias = "Callable[[TransportSignal], object]"


class SignalTarget:
    """Registry of signal listeners, dispatched synchronously in order."""

    def __init__(self) -> None:
        self._signal_listeners: dict[SignalType, list[SignalListener]] = {}

    def add_event_listener(self, signal_type: SignalType | str, listener: SignalListener) -> None:
        listeners = self._signal_listeners.setdefault(SignalType(signal_type), [])
        if listener not in listeners:
            listeners.append(listener)

    def remove_event_listener(
        self, signal_type: SignalType | str, listener: SignalListener
    ) -> None:
        listeners = self._signal_listeners.get(SignalType(signal_type), [])
        if listener in listeners:
            listeners.remove(listener)

    def dispatch(self, signal: TransportSignal) -> None:
        for listener in list(self._signal_listeners.get(signal.type, ())):
            listener(signal)


class Transport(SignalTarget, ABC):
    """Abstract transport primitive.

    Attributes:
        upload: The target dispatching the request body signals.
        timeout: Maximum seconds the exchange may take, 0 for no timeout.
        response_type: The representation of the response, always "bytes".
        with_credentials: Whether credentials are sent on cross-site
            requests.
    """

    def __init__(self) -> None:
        super().__init__()
        self.upload = SignalTarget()
        self.timeout: float = DEFAULT_TIMEOUT
        self.response_type: str = RESPONSE_TYPE
        self.with_credentials: bool = False

    @property
    @abstractmethod
    def ready_state(self) -> ReadyState:
        """The current ready state."""

    @property
    @abstractmethod
    def status(self) -> int:
        """The response status, 0 until headers are received or on failure."""

    @property
    @abstractmethod
    def response(self) -> bytes:
        """The raw response body received so far."""

    @abstractmethod
    def open(self, method: str, url: str) -> None:
        """Initialize a request for ``method`` and ``url``."""

    @abstractmethod
    def set_request_header(self, name: str, value: str) -> None:
        """Add a header to the opened request."""

    @abstractmethod
    def send(self, body: Any = None) -> None:
        """Start the exchange. Completion is reported through signals."""

    @abstractmethod
    def abort(self) -> None:
        """Cancel the exchange."""

    @abstractmethod
    def get_all_response_headers(self) -> str:
        """Return the response headers as one ``Name: value`` per line."""

    @abstractmethod
    def get_response_header(self, name: str) -> str | None:
        """Return the value(s) of a response header, joined with ", "."""


class BaseTransport(Transport):
    r"""Transport implementing the ready state machine and signal order.

    Subclasses implement ``_start`` to begin the I/O and ``_cancel`` to
    stop it, and report progress through the ``_receive_*`` and
    ``_upload_*`` helpers and ``_fail``. The helpers dispatch the signals
    in the order a browser would:

    - success: upload ``progress``/``load``/``loadend``, then
      ``readystatechange`` (2), ``readystatechange`` (3) and ``progress``
      per chunk, ``readystatechange`` (4), ``load``, ``loadend``;
    - failure: ``readystatechange`` (4) with status 0, the pending upload
      side's failure signal and ``loadend``, then the failure signal
      (``timeout``, ``abort`` or ``error``) and ``loadend``.
    """

    def __init__(self) -> None:
        super().__init__()
        self._ready_state = ReadyState.UNSENT
        self._status = 0
        self._response = bytearray()
        self._response_headers: list[tuple[str, str]] = []
        self._method = DEFAULT_METHOD
        self._url = ""
        self._request_headers: list[tuple[str, str]] = []
        self._send_flag = False
        self._upload_complete = True

    @property
    def ready_state(self) -> ReadyState:
        return self._ready_state

    @property
    def status(self) -> int:
        return self._status

    @property
    def response(self) -> bytes:
        return bytes(self._response)

    def open(self, method: str, url: str) -> None:
        self._cancel()
        self._method = method.upper()
        self._url = url
        self._request_headers = []
        self._send_flag = False
        self._upload_complete = True
        self._reset_response()
        self._set_ready_state(ReadyState.OPENED)

    def set_request_header(self, name: str, value: str) -> None:
        self._ensure_sendable()
        self._request_headers.append((name, value))

    def send(self, body: Any = None) -> None:
        self._ensure_sendable()
        if self._method in ("GET", "HEAD"):
            body = None
        self._send_flag = True
        self._upload_complete = body is None
        logger.debug(f"Sending {self._method} request to {self._url}")
        self.dispatch(TransportSignal(SignalType.LOAD_START))
        if not self._upload_complete:
            self.upload.dispatch(TransportSignal(SignalType.LOAD_START))
        self._start(body)

    def abort(self) -> None:
        self._cancel()
        in_flight = (self._ready_state == ReadyState.OPENED and self._send_flag) or (
            self._ready_state in (ReadyState.HEADERS_RECEIVED, ReadyState.LOADING)
        )
        if in_flight:
            logger.debug(f"{self._method} request to {self._url} aborted")
            self._fail(SignalType.ABORT)

    def get_all_response_headers(self) -> str:
        if self._ready_state < ReadyState.HEADERS_RECEIVED:
            return ""
        return "".join(f"{name}: {value}\r\n" for name, value in self._response_headers)

    def get_response_header(self, name: str) -> str | None:
        if self._ready_state < ReadyState.HEADERS_RECEIVED:
            return None
        values = [value for key, value in self._response_headers if key.lower() == name.lower()]
        return ", ".join(values) if values else None

    @abstractmethod
    def _start(self, body: Any) -> None:
        """Begin the I/O for the opened request."""

    @abstractmethod
    def _cancel(self) -> None:
        """Stop any I/O in progress. Must be safe to call at any time."""

    def _ensure_sendable(self) -> None:
        if self._ready_state != ReadyState.OPENED or self._send_flag:
            msg = f"The transport must be opened and not sent, state is {self._ready_state.name}"
            raise RuntimeError(msg)

    def _reset_response(self) -> None:
        self._status = 0
        self._response = bytearray()
        self._response_headers = []

    def _set_ready_state(self, ready_state: ReadyState) -> None:
        self._ready_state = ready_state
        self.dispatch(TransportSignal(SignalType.READY_STATE_CHANGE))

    def _upload_progress(self, loaded: int, total: int | None) -> None:
        if not self._send_flag:
            return
        self.upload.dispatch(_progress_signal(SignalType.PROGRESS, loaded, total))

    def _upload_end(self, loaded: int, total: int | None) -> None:
        if not self._send_flag or self._upload_complete:
            return
        self._upload_complete = True
        self.upload.dispatch(_progress_signal(SignalType.PROGRESS, loaded, total))
        self.upload.dispatch(_progress_signal(SignalType.LOAD, loaded, total))
        self.upload.dispatch(_progress_signal(SignalType.LOAD_END, loaded, total))

    def _receive_headers(self, status: int, headers: list[tuple[str, str]]) -> None:
        if not self._send_flag:
            return
        self._status = status
        self._response_headers = list(headers)
        self._set_ready_state(ReadyState.HEADERS_RECEIVED)

    def _receive_chunk(self, chunk: bytes, loaded: int, total: int | None) -> None:
        if not self._send_flag:
            return
        self._response.extend(chunk)
        if self._ready_state == ReadyState.HEADERS_RECEIVED:
            self._set_ready_state(ReadyState.LOADING)
        self.dispatch(_progress_signal(SignalType.PROGRESS, loaded, total))

    def _receive_end(self, loaded: int, total: int | None) -> None:
        if not self._send_flag:
            return
        self._send_flag = False
        self._set_ready_state(ReadyState.DONE)
        self.dispatch(_progress_signal(SignalType.LOAD, loaded, total))
        self.dispatch(_progress_signal(SignalType.LOAD_END, loaded, total))

    def _fail(self, signal_type: SignalType) -> None:
        if not self._send_flag:
            return
        self._send_flag = False
        self._reset_response()
        self._set_ready_state(ReadyState.DONE)
        if not self._upload_complete:
            self._upload_complete = True
            self.upload.dispatch(TransportSignal(signal_type))
            self.upload.dispatch(TransportSignal(SignalType.LOAD_END))
        self.dispatch(TransportSignal(signal_type))
        self.dispatch(TransportSignal(SignalType.LOAD_END))


def _progress_signal(signal_type: SignalType, loaded: int, total: int | None) -> TransportSignal:
    return TransportSignal(
        signal_type, length_computable=total is not None, loaded=loaded, total=total or 0
    )

r"""Lifecycle events fired during an HTTP exchange.

This module provides the event types and request states reported by
``HttpWebRequest``, the structure passed to listeners, and the
``EventManager`` that registers and fires listeners.

The event manager is handed to a request by reference: every request
built with the same manager fires into the same listeners.

Example:
    ```pycon
    >>> from webrequest.events import EventManager, HttpEvent
    >>> manager = EventManager()
    >>> def show_progress(arguments):
    ...     print(f"{arguments.progress:.0f}%")
    ...
    >>> manager.add_event_listener(HttpEvent.DOWNLOAD_PROGRESS_CHANGE, show_progress)
    >>> manager.has_event_listeners(HttpEvent.DOWNLOAD_PROGRESS_CHANGE)
    True

    ```
"""

from __future__ import annotations

__all__ = [
    "EventListener",
    "EventManager",
    "HttpEvent",
    "HttpEventArguments",
    "HttpRequestState",
]

import logging
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, TypeAlias

if TYPE_CHECKING:
    from collections.abc import Callable

    from webrequest.options import HttpRequestOptions
    from webrequest.response import HttpResponse

logger: logging.Logger = logging.getLogger(__name__)


class HttpEvent(str, Enum):
    """Events fired by ``HttpWebRequest``.

    Attributes:
        UPLOAD_START: Uploading the request body has started.
        UPLOAD_COMPLETE: Uploading has finished, successfully or not.
        UPLOAD_SUCCESS: Uploading has finished successfully.
        UPLOAD_PROGRESS_CHANGE: Upload progress has changed.
        UPLOAD_ABORT: Uploading was aborted.
        UPLOAD_TIMEOUT: Uploading timed out.
        UPLOAD_ERROR: Uploading failed.
        DOWNLOAD_START: Downloading the response has started.
        DOWNLOAD_COMPLETE: Downloading has finished, successfully or not.
        DOWNLOAD_SUCCESS: Downloading has finished successfully.
        DOWNLOAD_PROGRESS_CHANGE: Download progress has changed.
        DOWNLOAD_ABORT: Downloading was aborted.
        DOWNLOAD_TIMEOUT: Downloading timed out.
        DOWNLOAD_ERROR: Downloading failed.
        STATE_CHANGE: The request state has changed.
    """

    UPLOAD_START = "UPLOAD_START"
    UPLOAD_COMPLETE = "UPLOAD_COMPLETE"
    UPLOAD_SUCCESS = "UPLOAD_SUCCESS"
    UPLOAD_PROGRESS_CHANGE = "UPLOAD_PROGRESS_CHANGE"
    UPLOAD_ABORT = "UPLOAD_ABORT"
    UPLOAD_TIMEOUT = "UPLOAD_TIMEOUT"
    UPLOAD_ERROR = "UPLOAD_ERROR"
    DOWNLOAD_START = "DOWNLOAD_START"
    DOWNLOAD_COMPLETE = "DOWNLOAD_COMPLETE"
    DOWNLOAD_SUCCESS = "DOWNLOAD_SUCCESS"
    DOWNLOAD_PROGRESS_CHANGE = "DOWNLOAD_PROGRESS_CHANGE"
    DOWNLOAD_ABORT = "DOWNLOAD_ABORT"
    DOWNLOAD_TIMEOUT = "DOWNLOAD_TIMEOUT"
    DOWNLOAD_ERROR = "DOWNLOAD_ERROR"
    STATE_CHANGE = "STATE_CHANGE"


class HttpRequestState(str, Enum):
    """Semantic request states, in the order of the ready states 0 to 4."""

    UNSENT = "UNSENT"
    OPENED = "OPENED"
    HEADERS_RECEIVED = "HEADERS_RECEIVED"
    LOADING = "LOADING"
    DONE = "DONE"

    @classmethod
    def from_ready_state(cls, ready_state: int) -> HttpRequestState:
        """Map a numeric ready state to its semantic state.

        Raises:
            ValueError: If ``ready_state`` is not in the range [0, 4].

        Example:
            ```pycon
            >>> from webrequest.events import HttpRequestState
            >>> HttpRequestState.from_ready_state(2)
            <HttpRequestState.HEADERS_RECEIVED: 'HEADERS_RECEIVED'>

            ```
        """
        states = list(cls)
        if not 0 <= ready_state < len(states):
            msg = f"ready_state must be in [0, {len(states) - 1}], got {ready_state}"
            raise ValueError(msg)
        return states[ready_state]


@dataclass
class HttpEventArguments:
    """Information passed to event listeners.

    Upload events set ``bytes_uploaded``, download and state events set
    ``bytes_downloaded``. The progress fields describe the side (upload or
    download) the event belongs to.

    Attributes:
        type: The event being fired.
        is_progress_computable: Whether the total length is known.
        content_length: The total length in bytes, 0 when unknown.
        progress: The progress percentage in [0, 100].
        state: The numeric request state (0 to 4).
        state_name: The semantic request state.
        http_request_options: The options of the request.
        bytes_uploaded: Bytes of the request body sent so far.
        bytes_downloaded: Bytes of the response body received so far.
        http_response: The response, on the state change to DONE.
    """

    type: HttpEvent
    is_progress_computable: bool
    content_length: int
    progress: float
    state: int
    state_name: HttpRequestState
    http_request_options: HttpRequestOptions
    bytes_uploaded: int | None = None
    bytes_downloaded: int | None = None
    http_response: HttpResponse | None = None


EventListener: TypeAlias = "Callable[[HttpEventArguments], object]"


class EventManager:
    r"""Registry of event listeners.

    Listeners are called synchronously, in registration order, when an
    event of their type is fired. A listener that raises is logged with
    its traceback and the remaining listeners still run, so a faulty
    listener never interrupts an exchange.
    """

    def __init__(self) -> None:
        self._listeners: dict[HttpEvent, list[EventListener]] = {}

    def add_event_listener(self, event_type: HttpEvent, listener: EventListener) -> None:
        """Register ``listener`` for ``event_type``.

        Registering the same listener twice for the same event is a no-op.
        """
        listeners = self._listeners.setdefault(HttpEvent(event_type), [])
        if listener not in listeners:
            listeners.append(listener)

    def remove_event_listener(self, event_type: HttpEvent, listener: EventListener) -> bool:
        """Unregister ``listener`` from ``event_type``.

        Returns:
            ``True`` if the listener was registered, otherwise ``False``.
        """
        listeners = self._listeners.get(HttpEvent(event_type), [])
        if listener not in listeners:
            return False
        listeners.remove(listener)
        return True

    def remove_event_listeners(self, event_type: HttpEvent | None = None) -> None:
        """Unregister all listeners of ``event_type``, or of every event."""
        if event_type is None:
            self._listeners.clear()
        else:
            self._listeners.pop(HttpEvent(event_type), None)

    def has_event_listeners(self, event_type: HttpEvent) -> bool:
        return bool(self._listeners.get(HttpEvent(event_type)))

    def copy_event_listeners(self, source: EventManager) -> None:
        """Register every listener of ``source`` on this manager."""
        for event_type, listeners in source._listeners.items():
            for listener in listeners:
                self.add_event_listener(event_type, listener)

    def fire_event_listeners(self, arguments: HttpEventArguments) -> None:
        """Call the listeners registered for ``arguments.type``.

        Args:
            arguments: The event information passed to each listener.
        """
        for listener in list(self._listeners.get(arguments.type, ())):
            try:
                listener(arguments)
            except Exception:
                logger.exception(f"Event listener {listener!r} failed on {arguments.type.value}")

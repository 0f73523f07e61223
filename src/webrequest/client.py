r"""Client creating one ``HttpWebRequest`` per call.

The client checks once per process whether a transport primitive can be
created, and answers every later call without network I/O when it
cannot.
"""

from __future__ import annotations

__all__ = ["HttpClient", "is_supported", "request_async", "reset_supported_cache"]

import logging
import threading
from typing import TYPE_CHECKING

from webrequest.config import MESSAGE_NOT_SUPPORTED, STATUS_NOT_SUPPORTED
from webrequest.events import EventManager
from webrequest.exceptions import UnsupportedEnvironmentError
from webrequest.options import HttpRequestOptions
from webrequest.response import HttpResponse
from webrequest.web_request import HttpWebRequest

if TYPE_CHECKING:
    from collections.abc import Callable

    from webrequest.transport import Transport

logger: logging.Logger = logging.getLogger(__name__)


class _SupportedFlag:
    """Process-wide, lazily initialized and write-once boolean."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._value: bool | None = None

    def get(self) -> bool | None:
        return self._value

    def set_once(self, value: bool) -> bool:
        """Store ``value`` unless a value is already stored.

        Returns:
            The stored value.
        """
        with self._lock:
            if self._value is None:
                self._value = value
            return self._value

    def reset(self) -> None:
        with self._lock:
            self._value = None


_supported = _SupportedFlag()


def is_supported(transport_factory: Callable[[], Transport] | None = None) -> bool:
    r"""Check whether HTTP requests can be sent in this environment.

    The first call checks by creating an ``HttpWebRequest``. The result is
    cached for the lifetime of the process, and shared with
    ``HttpClient``.

    Args:
        transport_factory: The transport factory to check with. It is
            only used if the result is not cached yet.

    Returns:
        ``True`` if a transport primitive can be created.

    Example:
        ```pycon
        >>> from webrequest import is_supported
        >>> is_supported()
        True

        ```
    """
    cached = _supported.get()
    if cached is not None:
        return cached
    try:
        HttpWebRequest("", transport_factory=transport_factory)
    except UnsupportedEnvironmentError:
        return _supported.set_once(False)
    return _supported.set_once(True)


def reset_supported_cache() -> None:
    """Forget the cached result of ``is_supported``.

    Intended for tests.
    """
    _supported.reset()


class HttpClient:
    r"""Client sending each request through a new ``HttpWebRequest``.

    Args:
        event_manager: The manager the lifecycle events of every request
            are fired through. If ``None``, a new manager is created.
        transport_factory: Callable returning the transport primitive of
            each request. If ``None``, ``HttpxTransport`` is used.

    Example:
        ```pycon
        >>> import asyncio
        >>> from webrequest import HttpClient, HttpEvent
        >>> client = HttpClient()
        >>> client.event_manager.add_event_listener(
        ...     HttpEvent.STATE_CHANGE, lambda arguments: print(arguments.state_name)
        ... )
        >>> response = asyncio.run(
        ...     client.send_request_async("https://api.example.com/data")
        ... )  # doctest: +SKIP

        ```
    """

    def __init__(
        self,
        *,
        event_manager: EventManager | None = None,
        transport_factory: Callable[[], Transport] | None = None,
    ) -> None:
        self._event_manager = event_manager if event_manager is not None else EventManager()
        self._transport_factory = transport_factory

    @property
    def event_manager(self) -> EventManager:
        return self._event_manager

    def is_supported(self) -> bool:
        """Check whether this client can send requests."""
        return is_supported(self._transport_factory)

    async def send_request_async(self, options: str | HttpRequestOptions) -> HttpResponse:
        """Send a request.

        Args:
            options: A URL or the request options.

        Returns:
            The response. Its status is -1 if the environment cannot send
            HTTP requests.
        """
        options = HttpRequestOptions.from_value(options)
        if _supported.get() is False:
            return self._not_supported(options)
        try:
            request = HttpWebRequest(
                options,
                event_manager=self._event_manager,
                transport_factory=self._transport_factory,
            )
        except UnsupportedEnvironmentError:
            _supported.set_once(False)
            return self._not_supported(options)
        _supported.set_once(True)
        return await request.send_async()

    def _not_supported(self, options: HttpRequestOptions) -> HttpResponse:
        logger.warning(f"Cannot send the request to {options.url}: {MESSAGE_NOT_SUPPORTED}")
        return HttpResponse.failure(STATUS_NOT_SUPPORTED, MESSAGE_NOT_SUPPORTED, options)


async def request_async(
    options: str | HttpRequestOptions,
    *,
    event_manager: EventManager | None = None,
    transport_factory: Callable[[], Transport] | None = None,
) -> HttpResponse:
    r"""Send one request with a new ``HttpClient``.

    Args:
        options: A URL or the request options.
        event_manager: The manager the lifecycle events are fired through.
        transport_factory: Callable returning the transport primitive.

    Returns:
        The response.

    Example:
        ```pycon
        >>> import asyncio
        >>> from webrequest import request_async
        >>> response = asyncio.run(
        ...     request_async("https://api.example.com/data")
        ... )  # doctest: +SKIP

        ```
    """
    client = HttpClient(event_manager=event_manager, transport_factory=transport_factory)
    return await client.send_request_async(options)

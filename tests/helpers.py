r"""Shared test helpers for exchange tests.

This module contains a scripted transport that completes an exchange
from explicit calls, and an event recorder, so the lifecycle of
``HttpWebRequest`` can be tested without network I/O.
"""

from __future__ import annotations

__all__ = [
    "EventRecorder",
    "FakeTransport",
    "create_mock_client",
]

import asyncio
from typing import TYPE_CHECKING, Any

import httpx

from webrequest.events import EventManager, HttpEvent, HttpEventArguments
from webrequest.transport import BaseTransport

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence

    from webrequest.transport import SignalType


class FakeTransport(BaseTransport):
    """Transport driven by explicit calls instead of network I/O.

    Args:
        script: Optional callable run on the event loop right after
            ``send``, receiving the transport. It usually calls
            ``respond`` or ``fail``.
    """

    def __init__(self, script: Callable[[FakeTransport], None] | None = None) -> None:
        super().__init__()
        self.script = script
        self.sent_body: Any = None
        self.started = False
        self.cancel_count = 0

    @property
    def method(self) -> str:
        return self._method

    @property
    def url(self) -> str:
        return self._url

    @property
    def request_headers(self) -> list[tuple[str, str]]:
        return list(self._request_headers)

    def _start(self, body: Any) -> None:
        self.started = True
        self.sent_body = body
        if self.script is not None:
            asyncio.get_running_loop().call_soon(self.script, self)

    def _cancel(self) -> None:
        self.cancel_count += 1

    def upload_body(self, total: int, chunk_size: int | None = None) -> None:
        """Report the request body as sent in ``chunk_size`` slices."""
        loaded = 0
        while loaded < total:
            loaded = min(total, loaded + (chunk_size or total))
            self._upload_progress(loaded, total)
        self._upload_end(total, total)

    def respond(
        self,
        status: int = 200,
        headers: Sequence[tuple[str, str]] = (),
        body: bytes = b"",
        chunk_size: int | None = None,
        content_length: bool = True,
    ) -> None:
        """Complete the exchange with a response."""
        if not self._upload_complete:
            self._upload_end(0, None)
        total = len(body) if content_length else None
        self._receive_headers(status, list(headers))
        size = chunk_size or max(len(body), 1)
        loaded = 0
        for offset in range(0, len(body), size):
            chunk = body[offset : offset + size]
            loaded += len(chunk)
            self._receive_chunk(chunk, loaded, total)
        self._receive_end(loaded, total)

    def fail(self, signal_type: SignalType) -> None:
        """Terminate the exchange with a failure signal."""
        self._fail(signal_type)


class EventRecorder:
    """Record every event fired through an ``EventManager``."""

    def __init__(self, event_manager: EventManager | None = None) -> None:
        self.event_manager = event_manager if event_manager is not None else EventManager()
        self.events: list[HttpEventArguments] = []
        for event_type in HttpEvent:
            self.event_manager.add_event_listener(event_type, self.events.append)

    @property
    def types(self) -> list[HttpEvent]:
        return [arguments.type for arguments in self.events]

    def of_type(self, event_type: HttpEvent) -> list[HttpEventArguments]:
        return [arguments for arguments in self.events if arguments.type == event_type]


def create_mock_client(handler: Callable[[httpx.Request], Any]) -> httpx.AsyncClient:
    """Create an ``httpx.AsyncClient`` answering requests with ``handler``."""
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))

r"""Transport performing the exchange with ``httpx.AsyncClient``.

The exchange runs in one ``asyncio.Task`` started by ``send``. The
request body is streamed in slices so upload progress can be reported,
and the response body is read with ``aiter_bytes`` so download progress
can be reported. The configured timeout bounds the whole exchange.
"""

from __future__ import annotations

__all__ = ["HttpxTransport"]

import asyncio
import logging
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

import httpx

from webrequest.config import (
    CONTENT_TYPE_HEADER,
    FORM_URLENCODED_CONTENT_TYPE,
    TEXT_CONTENT_TYPE,
    UPLOAD_CHUNK_SIZE,
)
from webrequest.transport.base import BaseTransport, SignalType
from webrequest.utils.data import FormData
from webrequest.utils.text import to_text

if TYPE_CHECKING:
    from collections.abc import AsyncIterator, Callable

logger: logging.Logger = logging.getLogger(__name__)


class HttpxTransport(BaseTransport):
    r"""Transport backed by ``httpx.AsyncClient``.

    Args:
        client: Optional client to send the request with. Its base URL,
            default headers, cookies and timeouts apply. If ``None``, a
            client is created for the exchange and closed when it ends.
        chunk_size: Size in bytes of the slices the request body is
            streamed in. Must be > 0.

    Raises:
        ValueError: If chunk_size is not positive.

    Note:
        ``with_credentials`` has no effect: outside a browser there is no
        cross-site boundary, and cookies held by ``client`` are always sent.

    Example:
        ```pycon
        >>> import asyncio
        >>> import httpx
        >>> from webrequest import HttpWebRequest
        >>> from webrequest.transport import HttpxTransport
        >>> async def main():  # doctest: +SKIP
        ...     async with httpx.AsyncClient(base_url="https://api.example.com") as client:
        ...         request = HttpWebRequest(
        ...             "/data", transport_factory=lambda: HttpxTransport(client)
        ...         )
        ...         return await request.send_async()
        ...
        >>> asyncio.run(main())  # doctest: +SKIP

        ```
    """

    def __init__(
        self, client: httpx.AsyncClient | None = None, *, chunk_size: int = UPLOAD_CHUNK_SIZE
    ) -> None:
        super().__init__()
        if chunk_size <= 0:
            msg = f"chunk_size must be > 0, got {chunk_size}"
            raise ValueError(msg)
        self._client = client
        self._chunk_size = chunk_size
        self._task: asyncio.Task[None] | None = None
        self._tasks: set[asyncio.Task[None]] = set()

    def _start(self, body: Any) -> None:
        owns_client = self._client is None
        client = httpx.AsyncClient() if owns_client else self._client
        try:
            request = client.build_request(
                self._method,
                self._url,
                headers=self._build_headers(body),
                timeout=None if owns_client else httpx.USE_CLIENT_DEFAULT,
                **_encode_body(body),
            )
        except httpx.InvalidURL as exc:
            logger.debug(f"Invalid URL {self._url!r}: {exc}")
            self._fail(SignalType.ERROR)
            return
        except Exception:
            logger.exception(f"Could not build the {self._method} request to {self._url}")
            self._fail(SignalType.ERROR)
            return
        if body is not None:
            request.stream = _UploadProgressStream(
                request.stream,
                total=_content_length(request.headers),
                chunk_size=self._chunk_size,
                on_progress=self._upload_progress,
                on_complete=self._upload_end,
            )
        self._task = asyncio.get_running_loop().create_task(
            self._run(client, request, owns_client)
        )
        # Cancelled tasks still close the response and client before ending
        self._tasks.add(self._task)
        self._task.add_done_callback(self._tasks.discard)

    def _cancel(self) -> None:
        if self._task is not None and not self._task.done():
            self._task.cancel()
        self._task = None

    def _build_headers(self, body: Any) -> list[tuple[str, str]]:
        headers = list(self._request_headers)
        if any(name.lower() == CONTENT_TYPE_HEADER for name, _ in headers):
            return headers
        if isinstance(body, httpx.QueryParams):
            headers.append((CONTENT_TYPE_HEADER, FORM_URLENCODED_CONTENT_TYPE))
        elif isinstance(body, (str, int, float)):
            headers.append((CONTENT_TYPE_HEADER, TEXT_CONTENT_TYPE))
        return headers

    async def _run(
        self, client: httpx.AsyncClient, request: httpx.Request, owns_client: bool
    ) -> None:
        try:
            async with asyncio.timeout(self.timeout or None):
                await self._exchange(client, request)
        except (TimeoutError, httpx.TimeoutException):
            logger.debug(f"{request.method} request to {request.url} timed out")
            self._fail(SignalType.TIMEOUT)
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            logger.debug(
                f"{request.method} request to {request.url} encountered "
                f"{type(exc).__name__}: {exc}"
            )
            self._fail(SignalType.ERROR)
        except Exception:
            logger.exception(f"{request.method} request to {request.url} failed unexpectedly")
            self._fail(SignalType.ERROR)
        finally:
            if owns_client:
                await client.aclose()

    async def _exchange(self, client: httpx.AsyncClient, request: httpx.Request) -> None:
        response = await client.send(request, stream=True)
        try:
            # The body may not have been streamed through, e.g. by a mocked transport
            upload_total = _content_length(request.headers)
            self._upload_end(upload_total or 0, upload_total)
            self._receive_headers(
                response.status_code,
                [
                    (name.decode("latin-1"), value.decode("latin-1"))
                    for name, value in response.headers.raw
                ],
            )
            total = _content_length(response.headers)
            async for chunk in response.aiter_bytes():
                self._receive_chunk(chunk, response.num_bytes_downloaded, total)
            self._receive_end(response.num_bytes_downloaded, total)
        finally:
            await response.aclose()


class _UploadProgressStream(httpx.AsyncByteStream):
    """Request stream reporting how many bytes have been handed over."""

    def __init__(
        self,
        stream: httpx.SyncByteStream | httpx.AsyncByteStream,
        *,
        total: int | None,
        chunk_size: int,
        on_progress: Callable[[int, int | None], None],
        on_complete: Callable[[int, int | None], None],
    ) -> None:
        self._stream = stream
        self._total = total
        self._chunk_size = chunk_size
        self._on_progress = on_progress
        self._on_complete = on_complete

    async def __aiter__(self) -> AsyncIterator[bytes]:
        loaded = 0
        async for chunk in self._iter_source():
            for offset in range(0, len(chunk), self._chunk_size):
                part = chunk[offset : offset + self._chunk_size]
                yield part
                loaded += len(part)
                self._on_progress(loaded, self._total)
        self._on_complete(loaded, self._total)

    async def _iter_source(self) -> AsyncIterator[bytes]:
        if isinstance(self._stream, httpx.AsyncByteStream):
            async for chunk in self._stream:
                yield chunk
        else:
            for chunk in self._stream:
                yield chunk

    async def aclose(self) -> None:
        if isinstance(self._stream, httpx.AsyncByteStream):
            await self._stream.aclose()


def _encode_body(body: Any) -> dict[str, Any]:
    """Translate a request body into ``httpx.AsyncClient.build_request``
    keyword arguments."""
    if body is None:
        return {}
    if isinstance(body, FormData):
        return {"files": body.to_multipart()} if len(body) else {}
    if isinstance(body, httpx.QueryParams):
        return {"content": str(body).encode("ascii")}
    if isinstance(body, Mapping):
        return {"data": body}
    if isinstance(body, (str, int, float)):
        return {"content": to_text(body).encode("utf-8")}
    if isinstance(body, (bytearray, memoryview)):
        return {"content": bytes(body)}
    return {"content": body}


def _content_length(headers: httpx.Headers) -> int | None:
    value = headers.get("content-length")
    if value is None:
        return None
    try:
        return int(value)
    except ValueError:
        return None

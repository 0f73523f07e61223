from __future__ import annotations

import asyncio
import json
import logging
from io import StringIO

import httpx
import pytest
from coola.equality import objects_are_equal

from tests.helpers import EventRecorder, FakeTransport, create_mock_client
from webrequest.events import EventManager, HttpEvent, HttpRequestState
from webrequest.exceptions import RequestAlreadySentError, UnsupportedEnvironmentError
from webrequest.options import HttpRequestOptions
from webrequest.response import HttpResponse
from webrequest.transport import HttpxTransport, SignalType
from webrequest.utils import FormData
from webrequest.utils.structured_logging import StructuredFormatter
from webrequest.web_request import ExchangeState, HttpWebRequest, ProgressState

JSON_HEADERS = [("Content-Type", "application/json; charset=utf-8")]


def create_request(
    options: str | HttpRequestOptions = "https://example.com/data",
    transport: FakeTransport | None = None,
    recorder: EventRecorder | None = None,
) -> HttpWebRequest:
    transport = transport or FakeTransport()
    return HttpWebRequest(
        options,
        event_manager=recorder.event_manager if recorder is not None else None,
        transport_factory=lambda: transport,
    )


##############################################
#     Tests for HttpWebRequest construction  #
##############################################


def test_http_web_request_normalizes_url() -> None:
    """Test that a bare URL is normalized into options."""
    request = create_request("https://example.com/data")
    assert request.options == HttpRequestOptions(url="https://example.com/data")
    assert request.state == 0
    assert request.state_name == HttpRequestState.UNSENT
    assert request.exchange_state == ExchangeState.NOT_STARTED
    assert request.response_headers is None


def test_http_web_request_creates_event_manager() -> None:
    assert isinstance(create_request().event_manager, EventManager)


def test_http_web_request_uses_httpx_transport_by_default() -> None:
    request = HttpWebRequest("https://example.com/data")
    assert isinstance(request._transport, HttpxTransport)


def test_http_web_request_unsupported_environment() -> None:
    """Test that a transport factory failure is reported as an
    unsupported environment."""

    def factory() -> FakeTransport:
        msg = "no transport"
        raise OSError(msg)

    with pytest.raises(UnsupportedEnvironmentError, match=r"not supported") as exc:
        HttpWebRequest("https://example.com", transport_factory=factory)
    assert isinstance(exc.value.__cause__, OSError)


@pytest.mark.asyncio
async def test_http_web_request_serializes_json_body(fake_transport: FakeTransport) -> None:
    """Test that a structured body is sent as JSON with lower-cased
    headers."""
    request = create_request(
        HttpRequestOptions(
            url="https://example.com/items",
            method="POST",
            headers={"X-Api-Key": "secret"},
            body={"name": "Ada", "tags": ["a"]},
        ),
        transport=fake_transport,
    )
    fake_transport.script = lambda transport: transport.respond(201)
    await request.send_async()
    assert json.loads(fake_transport.sent_body) == {"name": "Ada", "tags": ["a"]}
    assert fake_transport.request_headers == [
        ("x-api-key", "secret"),
        ("content-type", "application/json"),
    ]


@pytest.mark.asyncio
async def test_http_web_request_keeps_json_content_type(fake_transport: FakeTransport) -> None:
    """Test that a content type mentioning JSON is kept."""
    request = create_request(
        HttpRequestOptions(
            url="https://example.com/items",
            method="POST",
            headers={"Content-Type": "application/merge-patch+json"},
            body=[1, 2],
        ),
        transport=fake_transport,
    )
    fake_transport.script = lambda transport: transport.respond(204)
    await request.send_async()
    assert fake_transport.sent_body == "[1, 2]"
    assert fake_transport.request_headers == [("content-type", "application/merge-patch+json")]


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "body", [b"raw", "text", FormData([("a", "1")]), httpx.QueryParams({"a": "1"})]
)
async def test_http_web_request_sends_encoded_body_unchanged(
    fake_transport: FakeTransport, body: object
) -> None:
    """Test that pre-encoded bodies are not serialized as JSON."""
    request = create_request(
        HttpRequestOptions(url="https://example.com/items", method="POST", body=body),
        transport=fake_transport,
    )
    fake_transport.script = lambda transport: transport.respond(200)
    await request.send_async()
    assert fake_transport.sent_body is body
    assert fake_transport.request_headers == []


@pytest.mark.asyncio
async def test_http_web_request_json_request_parsing_disabled(
    fake_transport: FakeTransport,
) -> None:
    body = {"name": "Ada"}
    request = create_request(
        HttpRequestOptions(
            url="https://example.com/items",
            method="POST",
            body=body,
            automatic_json_request_body_parsing=False,
        ),
        transport=fake_transport,
    )
    fake_transport.script = lambda transport: transport.respond(200)
    await request.send_async()
    assert fake_transport.sent_body is body


def test_http_web_request_unserializable_body() -> None:
    with pytest.raises(TypeError):
        create_request(HttpRequestOptions(url="", method="POST", body={"value": object()}))


####################################
#     Tests for send_async         #
####################################


@pytest.mark.asyncio
async def test_send_async_success_json(
    fake_transport: FakeTransport, recorder: EventRecorder
) -> None:
    """Test that a successful JSON response populates every data
    field."""
    options = HttpRequestOptions(url="https://example.com/data", timeout=5.0)
    request = create_request(options, transport=fake_transport, recorder=recorder)
    fake_transport.script = lambda transport: transport.respond(
        200, [*JSON_HEADERS, ("Set-Cookie", "a=1"), ("Set-Cookie", "b=2")], b'{"id": 7}'
    )
    response = await request.send_async()
    assert objects_are_equal(
        response,
        HttpResponse(
            status=200,
            headers={
                "Content-Type": "application/json; charset=utf-8",
                "Set-Cookie": ["a=1", "b=2"],
            },
            raw_data=b'{"id": 7}',
            text_data='{"id": 7}',
            json_data={"id": 7},
            request_options=options,
        ),
    )
    assert fake_transport.method == "GET"
    assert fake_transport.url == "https://example.com/data"
    assert fake_transport.timeout == 5.0
    assert fake_transport.response_type == "bytes"
    assert not fake_transport.with_credentials
    assert request.exchange_state == ExchangeState.SETTLED
    assert request.state == 4
    assert request.state_name == HttpRequestState.DONE


@pytest.mark.asyncio
async def test_send_async_text_response(fake_transport: FakeTransport) -> None:
    """Test that a textual response is decoded with its charset."""
    request = create_request(transport=fake_transport)
    fake_transport.script = lambda transport: transport.respond(
        200, [("content-type", "text/html; charset=ISO-8859-1")], "héllo".encode("latin-1")
    )
    response = await request.send_async()
    assert response.text_data == "héllo"
    assert response.json_data is None


@pytest.mark.asyncio
async def test_send_async_binary_response(fake_transport: FakeTransport) -> None:
    """Test that a non-textual response only populates the raw data."""
    request = create_request(transport=fake_transport)
    fake_transport.script = lambda transport: transport.respond(
        200, [("Content-Type", "image/png")], b"\x89PNG"
    )
    response = await request.send_async()
    assert response.raw_data == b"\x89PNG"
    assert response.text_data is None
    assert response.json_data is None


@pytest.mark.asyncio
async def test_send_async_json_response_parsing_disabled(fake_transport: FakeTransport) -> None:
    request = create_request(
        HttpRequestOptions(url="https://example.com", automatic_json_response_body_parsing=False),
        transport=fake_transport,
    )
    fake_transport.script = lambda transport: transport.respond(200, JSON_HEADERS, b"[1]")
    response = await request.send_async()
    assert response.text_data == "[1]"
    assert response.json_data is None


@pytest.mark.asyncio
async def test_send_async_invalid_json_response(
    fake_transport: FakeTransport, caplog: pytest.LogCaptureFixture
) -> None:
    """Test that an invalid JSON body is logged and leaves json_data
    unset."""
    request = create_request(transport=fake_transport)
    fake_transport.script = lambda transport: transport.respond(200, JSON_HEADERS, b"{oops")
    with caplog.at_level(logging.WARNING):
        response = await request.send_async()
    assert response.status == 200
    assert response.text_data == "{oops"
    assert response.json_data is None
    assert "is not valid JSON" in caplog.text


@pytest.mark.asyncio
async def test_send_async_empty_json_response(fake_transport: FakeTransport) -> None:
    request = create_request(transport=fake_transport)
    fake_transport.script = lambda transport: transport.respond(204, JSON_HEADERS, b"")
    response = await request.send_async()
    assert response.status == 204
    assert response.text_data == ""
    assert response.json_data is None


@pytest.mark.asyncio
async def test_send_async_http_error_status(fake_transport: FakeTransport) -> None:
    """Test that an HTTP error status is a regular response."""
    request = create_request(transport=fake_transport)
    fake_transport.script = lambda transport: transport.respond(
        404, JSON_HEADERS, b'{"error": "not found"}'
    )
    response = await request.send_async()
    assert response.status == 404
    assert response.json_data == {"error": "not found"}


@pytest.mark.asyncio
@pytest.mark.parametrize(
    ("signal_type", "status", "message"),
    [
        (SignalType.ABORT, -4, "Your request has been aborted."),
        (SignalType.TIMEOUT, -3, "Your request has timed out."),
        (SignalType.ERROR, -2, "An error occurred while sending the request."),
    ],
)
async def test_send_async_failures(
    fake_transport: FakeTransport, signal_type: SignalType, status: int, message: str
) -> None:
    """Test that each transport failure resolves with its synthesized
    status."""
    options = HttpRequestOptions(url="https://example.com/data")
    request = create_request(options, transport=fake_transport)
    fake_transport.script = lambda transport: transport.fail(signal_type)
    response = await request.send_async()
    assert response == HttpResponse(status=status, message=message, request_options=options)
    assert request.exchange_state == ExchangeState.SETTLED


@pytest.mark.asyncio
async def test_send_async_error_after_headers(fake_transport: FakeTransport) -> None:
    """Test that a failure after the headers is still reported as an
    error."""
    request = create_request(transport=fake_transport)

    def script(transport: FakeTransport) -> None:
        transport._receive_headers(200, JSON_HEADERS)
        transport._receive_chunk(b'{"id"', 5, 9)
        transport.fail(SignalType.ERROR)

    fake_transport.script = script
    response = await request.send_async()
    assert response.status == -2


@pytest.mark.asyncio
async def test_abort(fake_transport: FakeTransport, recorder: EventRecorder) -> None:
    """Test that abort resolves the pending exchange with status -4."""
    request = create_request(transport=fake_transport, recorder=recorder)
    task = asyncio.create_task(request.send_async())
    await asyncio.sleep(0)
    assert request.exchange_state == ExchangeState.IN_FLIGHT
    request.abort()
    response = await task
    assert response.status == -4
    assert recorder.types == [
        HttpEvent.STATE_CHANGE,
        HttpEvent.DOWNLOAD_START,
        HttpEvent.STATE_CHANGE,
        HttpEvent.DOWNLOAD_ABORT,
        HttpEvent.DOWNLOAD_COMPLETE,
    ]
    assert fake_transport.cancel_count >= 1


def test_abort_before_send() -> None:
    """Test that aborting a request that was never sent has no effect."""
    request = create_request()
    request.abort()
    assert request.exchange_state == ExchangeState.NOT_STARTED


@pytest.mark.asyncio
async def test_abort_after_settled(fake_transport: FakeTransport) -> None:
    """Test that aborting a settled request keeps the first response."""
    request = create_request(transport=fake_transport)
    fake_transport.script = lambda transport: transport.respond(200)
    response = await request.send_async()
    request.abort()
    assert response.status == 200
    assert request.exchange_state == ExchangeState.SETTLED


@pytest.mark.asyncio
async def test_abort_from_listener(fake_transport: FakeTransport, recorder: EventRecorder) -> None:
    """Test that a listener can abort the exchange while it runs."""
    request = create_request(transport=fake_transport, recorder=recorder)
    recorder.event_manager.add_event_listener(
        HttpEvent.DOWNLOAD_PROGRESS_CHANGE, lambda arguments: request.abort()
    )
    fake_transport.script = lambda transport: transport.respond(
        200, JSON_HEADERS, b"[1, 2, 3]", chunk_size=2
    )
    response = await request.send_async()
    assert response.status == -4
    assert len(recorder.of_type(HttpEvent.DOWNLOAD_PROGRESS_CHANGE)) == 1
    assert not recorder.of_type(HttpEvent.DOWNLOAD_SUCCESS)


@pytest.mark.asyncio
async def test_send_async_cancelled(fake_transport: FakeTransport) -> None:
    """Test that cancelling the awaiting task aborts the exchange."""
    request = create_request(transport=fake_transport)
    task = asyncio.create_task(request.send_async())
    await asyncio.sleep(0)
    task.cancel()
    with pytest.raises(asyncio.CancelledError):
        await task
    assert fake_transport.status == 0
    assert request.state == 4
    assert request.exchange_state == ExchangeState.SETTLED


@pytest.mark.asyncio
async def test_send_async_twice(fake_transport: FakeTransport) -> None:
    """Test that a request cannot be sent twice."""
    request = create_request(transport=fake_transport)
    fake_transport.script = lambda transport: transport.respond(200)
    await request.send_async()
    with pytest.raises(RequestAlreadySentError, match=r"has already been sent"):
        await request.send_async()


@pytest.mark.asyncio
async def test_send_async_twice_while_in_flight(fake_transport: FakeTransport) -> None:
    request = create_request(transport=fake_transport)
    task = asyncio.create_task(request.send_async())
    await asyncio.sleep(0)
    with pytest.raises(RequestAlreadySentError):
        await request.send_async()
    fake_transport.respond(200)
    assert (await task).status == 200


@pytest.mark.asyncio
async def test_send_async_listener_failure_does_not_stop_exchange(
    fake_transport: FakeTransport, caplog: pytest.LogCaptureFixture
) -> None:
    """Test that a failing listener is logged and the exchange
    completes."""
    event_manager = EventManager()
    event_manager.add_event_listener(
        HttpEvent.STATE_CHANGE, lambda arguments: 1 / 0  # noqa: ARG005
    )
    request = HttpWebRequest(
        "https://example.com",
        event_manager=event_manager,
        transport_factory=lambda: fake_transport,
    )
    fake_transport.script = lambda transport: transport.respond(200)
    with caplog.at_level(logging.ERROR):
        response = await request.send_async()
    assert response.status == 200
    assert "ZeroDivisionError" in caplog.text


############################################
#     Tests for events and progress        #
############################################


@pytest.mark.asyncio
async def test_send_async_download_events(
    fake_transport: FakeTransport, recorder: EventRecorder
) -> None:
    """Test the events fired by a successful download."""
    request = create_request(transport=fake_transport, recorder=recorder)
    fake_transport.script = lambda transport: transport.respond(
        200, JSON_HEADERS, b"[1, 2, 3]", chunk_size=4
    )
    await request.send_async()
    assert recorder.types == [
        HttpEvent.STATE_CHANGE,
        HttpEvent.DOWNLOAD_START,
        HttpEvent.STATE_CHANGE,
        HttpEvent.STATE_CHANGE,
        HttpEvent.DOWNLOAD_PROGRESS_CHANGE,
        HttpEvent.DOWNLOAD_PROGRESS_CHANGE,
        HttpEvent.DOWNLOAD_PROGRESS_CHANGE,
        HttpEvent.STATE_CHANGE,
        HttpEvent.DOWNLOAD_SUCCESS,
        HttpEvent.DOWNLOAD_COMPLETE,
    ]
    state_changes = recorder.of_type(HttpEvent.STATE_CHANGE)
    assert [arguments.state for arguments in state_changes] == [1, 2, 3, 4]
    assert [arguments.state_name for arguments in state_changes] == [
        HttpRequestState.OPENED,
        HttpRequestState.HEADERS_RECEIVED,
        HttpRequestState.LOADING,
        HttpRequestState.DONE,
    ]
    assert [arguments.http_response is None for arguments in state_changes] == [
        True,
        True,
        True,
        False,
    ]
    assert state_changes[-1].http_response.json_data == [1, 2, 3]
    progress = recorder.of_type(HttpEvent.DOWNLOAD_PROGRESS_CHANGE)
    assert [arguments.bytes_downloaded for arguments in progress] == [4, 8, 9]
    assert [arguments.content_length for arguments in progress] == [9, 9, 9]
    assert progress[-1].progress == pytest.approx(100.0)
    assert all(arguments.is_progress_computable for arguments in progress)
    assert all(arguments.http_request_options is request.options for arguments in progress)


@pytest.mark.asyncio
async def test_send_async_download_progress_properties(fake_transport: FakeTransport) -> None:
    request = create_request(transport=fake_transport)
    fake_transport.script = lambda transport: transport.respond(200, [], b"abcd", chunk_size=1)
    await request.send_async()
    assert request.is_download_progress_computable
    assert request.bytes_downloaded == 4
    assert request.download_content_length == 4
    assert request.download_progress_percentage == pytest.approx(100.0)


@pytest.mark.asyncio
async def test_send_async_download_progress_not_computable(
    fake_transport: FakeTransport, recorder: EventRecorder
) -> None:
    """Test that progress without a known length is not computed."""
    request = create_request(transport=fake_transport, recorder=recorder)
    fake_transport.script = lambda transport: transport.respond(
        200, [], b"abcd", chunk_size=2, content_length=False
    )
    await request.send_async()
    progress = recorder.of_type(HttpEvent.DOWNLOAD_PROGRESS_CHANGE)
    assert [arguments.is_progress_computable for arguments in progress] == [False, False]
    assert [arguments.progress for arguments in progress] == [0.0, 0.0]
    assert request.bytes_downloaded == 0


@pytest.mark.asyncio
async def test_send_async_upload_events(
    fake_transport: FakeTransport, recorder: EventRecorder
) -> None:
    """Test the events fired while uploading a body."""
    request = create_request(
        HttpRequestOptions(url="https://example.com/items", method="PUT", body=b"x" * 10),
        transport=fake_transport,
        recorder=recorder,
    )

    def script(transport: FakeTransport) -> None:
        transport.upload_body(10, chunk_size=5)
        transport.respond(200)

    fake_transport.script = script
    await request.send_async()
    upload_types = [event for event in recorder.types if event.name.startswith("UPLOAD")]
    assert upload_types == [
        HttpEvent.UPLOAD_START,
        HttpEvent.UPLOAD_PROGRESS_CHANGE,
        HttpEvent.UPLOAD_PROGRESS_CHANGE,
        HttpEvent.UPLOAD_PROGRESS_CHANGE,
        HttpEvent.UPLOAD_SUCCESS,
        HttpEvent.UPLOAD_COMPLETE,
    ]
    progress = recorder.of_type(HttpEvent.UPLOAD_PROGRESS_CHANGE)
    assert [arguments.bytes_uploaded for arguments in progress] == [5, 10, 10]
    assert [arguments.progress for arguments in progress] == [50.0, 100.0, 100.0]
    assert all(arguments.bytes_downloaded is None for arguments in progress)
    assert request.is_upload_progress_computable
    assert request.bytes_uploaded == 10
    assert request.upload_content_length == 10
    assert request.upload_progress_percentage == pytest.approx(100.0)


@pytest.mark.asyncio
async def test_send_async_upload_abort_events(
    fake_transport: FakeTransport, recorder: EventRecorder
) -> None:
    """Test that aborting during the upload fires the upload abort
    events."""
    request = create_request(
        HttpRequestOptions(url="https://example.com/items", method="POST", body=b"x" * 10),
        transport=fake_transport,
        recorder=recorder,
    )

    def script(transport: FakeTransport) -> None:
        transport._upload_progress(5, 10)
        request.abort()

    fake_transport.script = script
    response = await request.send_async()
    assert response.status == -4
    assert recorder.of_type(HttpEvent.UPLOAD_ABORT)
    assert recorder.of_type(HttpEvent.UPLOAD_COMPLETE)
    assert not recorder.of_type(HttpEvent.UPLOAD_SUCCESS)
    assert request.bytes_uploaded == 5
    assert not request.is_upload_progress_computable


@pytest.mark.asyncio
async def test_send_async_shared_event_manager() -> None:
    """Test that requests sharing an event manager fire into the same
    listeners."""
    recorder = EventRecorder()
    for _ in range(2):
        transport = FakeTransport(lambda transport: transport.respond(200))
        await create_request(transport=transport, recorder=recorder).send_async()
    assert recorder.types.count(HttpEvent.DOWNLOAD_SUCCESS) == 2


@pytest.mark.asyncio
async def test_response_headers_memoized(fake_transport: FakeTransport) -> None:
    request = create_request(transport=fake_transport)
    fake_transport.script = lambda transport: transport.respond(200, [("X-Id", "1")])
    response = await request.send_async()
    assert request.response_headers == {"X-Id": "1"}
    assert request.response_headers is response.headers


@pytest.mark.asyncio
async def test_send_async_logs_request_tags(fake_transport: FakeTransport) -> None:
    """Test that the records emitted during the exchange carry the
    request tags."""
    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(StructuredFormatter())
    logger = logging.getLogger("webrequest")
    level = logger.level
    logger.addHandler(handler)
    logger.setLevel(logging.DEBUG)
    try:
        request = create_request(
            HttpRequestOptions(url="https://example.com/data", request_tags=("users",)),
            transport=fake_transport,
        )
        fake_transport.script = lambda transport: transport.respond(200)
        await request.send_async()
    finally:
        logger.removeHandler(handler)
        logger.setLevel(level)

    records = [json.loads(line) for line in stream.getvalue().strip().split("\n")]
    sending = next(record for record in records if record["message"].startswith("Sending GET"))
    assert sending["request_tags"] == ["users"]
    assert sending["url"] == "https://example.com/data"
    completed = next(record for record in records if "completed" in record["message"])
    assert completed["status"] == 200


####################################
#     Tests for ProgressState      #
####################################


def test_progress_state_defaults() -> None:
    assert ProgressState() == ProgressState(
        is_computable=False, bytes_transferred=0, content_length=0, percentage=0.0
    )


############################################################
#     End-to-end tests through a mocked httpx transport    #
############################################################


@pytest.mark.asyncio
async def test_httpx_exchange_success_json(recorder: EventRecorder) -> None:
    """Test a successful JSON exchange through httpx."""
    requests = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return httpx.Response(200, json={"id": 7, "name": "Ada"})

    async with create_mock_client(handler) as client:
        request = HttpWebRequest(
            HttpRequestOptions(
                url="https://example.com/users", method="POST", body={"name": "Ada"}
            ),
            event_manager=recorder.event_manager,
            transport_factory=lambda: HttpxTransport(client),
        )
        response = await request.send_async()

    assert response.status == 200
    assert response.json_data == {"id": 7, "name": "Ada"}
    assert json.loads(response.text_data) == {"id": 7, "name": "Ada"}
    assert json.loads(response.raw_data) == {"id": 7, "name": "Ada"}
    assert {name.lower() for name in response.headers} >= {"content-type", "content-length"}
    assert requests[0].headers["content-type"] == "application/json"
    assert json.loads(requests[0].content) == {"name": "Ada"}
    assert recorder.of_type(HttpEvent.UPLOAD_SUCCESS)
    assert recorder.of_type(HttpEvent.DOWNLOAD_SUCCESS)
    assert recorder.of_type(HttpEvent.UPLOAD_PROGRESS_CHANGE)[-1].progress == pytest.approx(100.0)


@pytest.mark.asyncio
async def test_httpx_exchange_network_error() -> None:
    """Test that a network error resolves with status -2."""

    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("Connection refused", request=request)

    async with create_mock_client(handler) as client:
        request = HttpWebRequest(
            "https://example.com", transport_factory=lambda: HttpxTransport(client)
        )
        response = await request.send_async()

    assert response.status == -2
    assert response.message == "An error occurred while sending the request."


@pytest.mark.asyncio
async def test_httpx_exchange_number_body() -> None:
    """Test that a number body is sent as text."""
    requests = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return httpx.Response(200)

    async with create_mock_client(handler) as client:
        request = HttpWebRequest(
            HttpRequestOptions(url="https://example.com/count", method="POST", body=5),
            transport_factory=lambda: HttpxTransport(client),
        )
        response = await request.send_async()

    assert response.status == 200
    assert requests[0].content == b"5"


@pytest.mark.asyncio
async def test_httpx_exchange_unsupported_body() -> None:
    """Test that a body httpx cannot encode resolves with status -2
    instead of raising."""
    async with create_mock_client(lambda request: httpx.Response(200)) as client:
        request = HttpWebRequest(
            HttpRequestOptions(url="https://example.com/items", method="POST", body=object()),
            transport_factory=lambda: HttpxTransport(client),
        )
        response = await request.send_async()

    assert response.status == -2
    assert response.message == "An error occurred while sending the request."
    assert request.exchange_state == ExchangeState.SETTLED


@pytest.mark.asyncio
async def test_httpx_exchange_timeout() -> None:
    """Test that exceeding the timeout resolves with status -3."""

    async def handler(request: httpx.Request) -> httpx.Response:
        await asyncio.sleep(10)
        return httpx.Response(200)

    async with create_mock_client(handler) as client:
        request = HttpWebRequest(
            HttpRequestOptions(url="https://example.com", timeout=0.01),
            transport_factory=lambda: HttpxTransport(client),
        )
        response = await request.send_async()

    assert response.status == -3


@pytest.mark.asyncio
async def test_httpx_exchange_abort() -> None:
    """Test that aborting an exchange in flight resolves with status
    -4."""
    started = asyncio.Event()

    async def handler(request: httpx.Request) -> httpx.Response:
        started.set()
        await asyncio.sleep(10)
        return httpx.Response(200)

    async with create_mock_client(handler) as client:
        request = HttpWebRequest(
            "https://example.com", transport_factory=lambda: HttpxTransport(client)
        )
        task = asyncio.create_task(request.send_async())
        await asyncio.wait_for(started.wait(), timeout=5.0)
        request.abort()
        response = await asyncio.wait_for(task, timeout=5.0)

    assert response.status == -4

import asyncio
import json

import httpx
import pytest

from config.schema import CallbackSettings
from core.callback import RequestsController, calculate_backoff
from core.errors import DeliveryCancelledError, FatalDeliveryError, MaxRetriesError

ENDPOINT = "http://listener.test/hook"
PAYLOAD = json.dumps({"id": "f1", "file_contents": []}).encode()

FAST = CallbackSettings(base_delay_ms=1, max_delay_ms=5)


class Recorder:
    """MockTransport handler replaying a scripted list of outcomes."""

    def __init__(self, *outcomes):
        self.outcomes = list(outcomes)
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        outcome = self.outcomes.pop(0) if len(self.outcomes) > 1 else self.outcomes[0]
        if isinstance(outcome, Exception):
            raise outcome
        return httpx.Response(outcome)


def _controller(handler, settings=FAST) -> RequestsController:
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return RequestsController(client, settings)


@pytest.mark.parametrize(
    "attempt, expected",
    [(0, 0.1), (1, 0.2), (2, 0.4), (5, 3.2), (6, 5.0), (20, 5.0)],
)
def test_calculate_backoff(attempt, expected):
    assert calculate_backoff(attempt, 0.1, 5.0) == pytest.approx(expected)


@pytest.mark.asyncio
async def test_success_posts_raw_json_once():
    handler = Recorder(200)

    await _controller(handler).send_request_with_retry(ENDPOINT, PAYLOAD)

    assert len(handler.requests) == 1
    request = handler.requests[0]
    assert request.method == "POST"
    assert str(request.url) == ENDPOINT
    assert request.headers["content-type"] == "application/json"
    assert request.content == PAYLOAD


@pytest.mark.asyncio
@pytest.mark.parametrize("status", [201, 204, 301, 400, 404, 499])
async def test_non_5xx_status_ends_delivery(status):
    handler = Recorder(status)

    await _controller(handler).send_request_with_retry(ENDPOINT, PAYLOAD)

    assert len(handler.requests) == 1


@pytest.mark.asyncio
async def test_server_error_then_success_retries_once():
    handler = Recorder(503, 200)

    await _controller(handler).send_request_with_retry(ENDPOINT, PAYLOAD)

    assert len(handler.requests) == 2


@pytest.mark.asyncio
async def test_three_server_errors_exhaust_retries():
    handler = Recorder(500)

    with pytest.raises(MaxRetriesError, match=f"max retries reached for endpoint {ENDPOINT}"):
        await _controller(handler).send_request_with_retry(ENDPOINT, PAYLOAD)

    assert len(handler.requests) == 3


@pytest.mark.asyncio
async def test_transport_errors_are_retried():
    handler = Recorder(httpx.ConnectError("refused"), httpx.ReadTimeout("slow"), 200)

    await _controller(handler).send_request_with_retry(ENDPOINT, PAYLOAD)

    assert len(handler.requests) == 3


@pytest.mark.asyncio
async def test_network_failure_every_time_exhausts_retries():
    handler = Recorder(httpx.ConnectError("refused"))

    with pytest.raises(MaxRetriesError):
        await _controller(handler).send_request_with_retry(ENDPOINT, PAYLOAD)

    assert len(handler.requests) == 3


@pytest.mark.asyncio
async def test_unsupported_protocol_is_fatal_without_retry():
    handler = Recorder(httpx.UnsupportedProtocol("no scheme"))

    with pytest.raises(FatalDeliveryError) as exc_info:
        await _controller(handler).send_request_with_retry(ENDPOINT, PAYLOAD)

    assert exc_info.value.endpoint == ENDPOINT
    assert len(handler.requests) == 1


@pytest.mark.asyncio
async def test_max_attempts_is_configurable():
    handler = Recorder(502)

    with pytest.raises(MaxRetriesError):
        await _controller(handler, CallbackSettings(max_attempts=5, base_delay_ms=1)).send_request_with_retry(
            ENDPOINT, PAYLOAD
        )

    assert len(handler.requests) == 5


@pytest.mark.asyncio
async def test_stop_during_backoff_cancels_without_another_attempt():
    handler = Recorder(500)
    slow = CallbackSettings(base_delay_ms=5000, max_delay_ms=5000)
    stop = asyncio.Event()
    asyncio.get_running_loop().call_later(0.05, stop.set)

    with pytest.raises(DeliveryCancelledError):
        await asyncio.wait_for(_controller(handler, slow).send_request_with_retry(ENDPOINT, PAYLOAD, stop), 2)

    assert len(handler.requests) == 1


@pytest.mark.asyncio
async def test_stop_already_set_makes_no_attempt():
    handler = Recorder(200)
    stop = asyncio.Event()
    stop.set()

    with pytest.raises(DeliveryCancelledError):
        await _controller(handler).send_request_with_retry(ENDPOINT, PAYLOAD, stop)

    assert handler.requests == []


@pytest.mark.asyncio
async def test_no_wait_after_final_attempt(monkeypatch):
    waits: list[float] = []

    async def fake_wait(stop, timeout):
        waits.append(timeout)
        return False

    monkeypatch.setattr("core.callback.requests_controller._wait_for_stop", fake_wait)
    handler = Recorder(500)

    with pytest.raises(MaxRetriesError):
        await _controller(handler, CallbackSettings()).send_request_with_retry(ENDPOINT, PAYLOAD)

    assert waits == pytest.approx([0.1, 0.2])


@pytest.mark.asyncio
async def test_two_server_errors_then_success_waits_100_then_200ms(monkeypatch):
    waits: list[float] = []

    async def fake_wait(stop, timeout):
        waits.append(timeout)
        return False

    monkeypatch.setattr("core.callback.requests_controller._wait_for_stop", fake_wait)
    handler = Recorder(500, 500, 200)

    await _controller(handler, CallbackSettings()).send_request_with_retry(ENDPOINT, PAYLOAD)

    assert len(handler.requests) == 3
    assert waits == pytest.approx([0.1, 0.2])


@pytest.mark.asyncio
async def test_slow_response_body_is_cut_off_at_request_timeout():
    async def trickle(reader: asyncio.StreamReader, writer: asyncio.StreamWriter) -> None:
        await reader.readuntil(b"\r\n\r\n")
        writer.write(b"HTTP/1.1 200 OK\r\nContent-Type: text/plain\r\nContent-Length: 10\r\n\r\n")
        try:
            for _ in range(10):
                if writer.is_closing():
                    break
                writer.write(b"x")
                await writer.drain()
                await asyncio.sleep(0.15)
        except ConnectionError:
            pass
        finally:
            writer.close()

    server = await asyncio.start_server(trickle, "127.0.0.1", 0)
    port = server.sockets[0].getsockname()[1]
    settings = CallbackSettings(request_timeout_sec=0.3, max_attempts=1)
    loop = asyncio.get_running_loop()

    async with httpx.AsyncClient() as client:
        controller = RequestsController(client, settings)
        started = loop.time()
        with pytest.raises(MaxRetriesError):
            await controller.send_request_with_retry(f"http://127.0.0.1:{port}/hook", PAYLOAD)
        elapsed = loop.time() - started

    server.close()
    await server.wait_closed()
    assert elapsed < 1.0

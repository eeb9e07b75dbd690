from __future__ import annotations

import asyncio
import logging

import httpx
import pytest

from chail.config import ConfigError, TlsPolicy
from chail.loadgen.client import execute_request, tls_verify
from chail.metrics import NO_RESPONSE
from helpers import mock_client, spec, status_handler


class BrokenStream(httpx.AsyncByteStream):
    async def __aiter__(self):
        raise httpx.ReadError("connection reset by peer")
        yield b""  # pragma: no cover


class RecordingObserver:
    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self.responses: list[tuple[int, bytes]] = []

    def on_request(self, request: httpx.Request) -> None:
        self.requests.append(request)

    def on_response(self, response: httpx.Response, body: bytes) -> None:
        self.responses.append((response.status_code, body))


def _execute(handler, request_spec=None, observer=None):
    async def scenario():
        async with mock_client(handler) as client:
            if observer is None:
                return await execute_request(client, request_spec or spec())
            return await execute_request(client, request_spec or spec(), observer)

    return asyncio.run(scenario())


def test_successful_exchange_records_both_timings() -> None:
    sample = _execute(status_handler(200, delay_sec=0.01))
    assert sample.response_code == 200
    assert sample.successful
    assert sample.time_to_first_byte is not None
    assert sample.time_total is not None
    assert sample.time_total >= sample.time_to_first_byte > 0.005


def test_client_error_is_observed_but_unsuccessful() -> None:
    sample = _execute(status_handler(400))
    assert sample.response_code == 400
    assert not sample.successful
    assert sample.time_total is not None


def test_method_headers_and_body_are_sent() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(201)

    request_spec = spec(
        method="POST",
        headers=(("Content-Type", "application/json"), ("X-Trace", "a"), ("X-Trace", "b")),
        body=b'{"key1":"value1"}',
    )
    sample = _execute(handler, request_spec)
    assert sample.successful
    request = seen[0]
    assert request.method == "POST"
    assert request.headers["Content-Type"] == "application/json"
    assert request.headers.get_list("X-Trace") == ["a", "b"]
    assert request.content == b'{"key1":"value1"}'


def test_connect_error_becomes_sentinel(caplog: pytest.LogCaptureFixture) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    with caplog.at_level(logging.WARNING, logger="chail.loadgen.client"):
        sample = _execute(handler)
    assert sample.response_code == NO_RESPONSE
    assert sample.time_to_first_byte is None
    assert sample.time_total is None
    assert not sample.successful
    assert "failed" in caplog.text


def test_timeout_becomes_sentinel(caplog: pytest.LogCaptureFixture) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("timed out", request=request)

    with caplog.at_level(logging.WARNING, logger="chail.loadgen.client"):
        sample = _execute(handler)
    assert sample.response_code == NO_RESPONSE
    assert not sample.successful
    assert "timeout fetching" in caplog.text


def test_body_read_failure_keeps_status_and_first_byte() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, stream=BrokenStream())

    sample = _execute(handler)
    assert sample.response_code == 200
    assert sample.time_to_first_byte is not None
    assert sample.time_total is None
    assert not sample.successful


def test_observer_sees_request_and_response() -> None:
    observer = RecordingObserver()
    sample = _execute(status_handler(200), observer=observer)
    assert sample.successful
    assert [r.url for r in observer.requests] == [httpx.URL(spec().url)]
    assert observer.responses == [(200, b"ok")]


def test_observer_does_not_change_the_sample() -> None:
    with_observer = _execute(status_handler(503), observer=RecordingObserver())
    without_observer = _execute(status_handler(503))
    assert with_observer.response_code == without_observer.response_code == 503
    assert with_observer.successful is without_observer.successful is False


def test_tls_verify_policies() -> None:
    assert tls_verify(TlsPolicy()) is True
    assert tls_verify(TlsPolicy(insecure=True)) is False
    with pytest.raises(ConfigError):
        tls_verify(TlsPolicy(ca_cert="not a certificate"))

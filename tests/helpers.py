from __future__ import annotations

import asyncio
from typing import Awaitable, Callable

import httpx

from chail.config import RequestSpec, SweepConfig
from chail.loadgen.client import build_client
from chail.metrics import ProbeResult

Handler = Callable[[httpx.Request], httpx.Response | Awaitable[httpx.Response]]

TARGET = "http://probe.test/items"


def status_handler(status: int, delay_sec: float = 0.0) -> Handler:
    async def handler(request: httpx.Request) -> httpx.Response:
        if delay_sec:
            await asyncio.sleep(delay_sec)
        return httpx.Response(status, text="ok")

    return handler


def mock_client(handler: Handler, max_clients: int = 10) -> httpx.AsyncClient:
    config = SweepConfig(max_clients=max_clients)
    return build_client(config, transport=httpx.MockTransport(handler))


def spec(url: str = TARGET, **kwargs) -> RequestSpec:
    return RequestSpec(url=url, **kwargs)


def probe_result(client_count: int, avg_time_total: float, error_rate: float = 0.0) -> ProbeResult:
    return ProbeResult(
        client_count=client_count,
        requests=client_count,
        avg_time_to_first_byte=avg_time_total / 2,
        avg_time_total=avg_time_total,
        error_rate=error_rate,
        response_codes={200: client_count},
        p50_time_total=avg_time_total,
        p95_time_total=avg_time_total,
        p99_time_total=avg_time_total,
    )

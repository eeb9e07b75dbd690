from __future__ import annotations

import asyncio

import httpx

from chail.config import RequestSpec
from chail.loadgen.client import execute_request
from chail.loadgen.observer import NULL_OBSERVER, RequestObserver
from chail.metrics import ProbeResult, RequestSample, drain_samples

SampleQueue = asyncio.Queue[RequestSample | None]


def _check_size(clients: int, repeats: int) -> None:
    if clients < 1 or repeats < 1:
        msg = f"Pool needs at least one client and one repeat, got {clients}x{repeats}"
        raise ValueError(msg)


async def run_pool(
    client: httpx.AsyncClient,
    spec: RequestSpec,
    clients: int,
    repeats: int,
    queue: SampleQueue,
    observer: RequestObserver = NULL_OBSERVER,
) -> None:
    """Run ``clients`` concurrent workers of ``repeats`` sequential requests each.

    Every sample is put on ``queue`` as soon as it exists. ``None`` is put
    last, once all workers have returned.
    """
    _check_size(clients, repeats)

    async def worker() -> None:
        for _ in range(repeats):
            sample = await execute_request(client, spec, observer)
            queue.put_nowait(sample)

    tasks = [asyncio.create_task(worker()) for _ in range(clients)]
    try:
        await asyncio.gather(*tasks)
    finally:
        queue.put_nowait(None)


async def probe_level(
    client: httpx.AsyncClient,
    spec: RequestSpec,
    clients: int,
    repeats: int,
    observer: RequestObserver = NULL_OBSERVER,
) -> ProbeResult:
    _check_size(clients, repeats)
    queue: SampleQueue = asyncio.Queue()
    _, result = await asyncio.gather(
        run_pool(client, spec, clients, repeats, queue, observer),
        drain_samples(queue, clients, repeats),
    )
    return result

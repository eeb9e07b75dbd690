from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Iterable

import httpx

from chail.analysis import DECADE_DISTANCE, GradientReading, SweepHistory, classify_gradient
from chail.config import RequestSpec, SweepConfig
from chail.loadgen.client import build_client
from chail.loadgen.observer import NULL_OBSERVER, RequestObserver
from chail.loadgen.pool import probe_level
from chail.metrics import ProbeResult

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class LevelReport:
    url: str
    result: ProbeResult
    step: GradientReading | None
    decade: GradientReading | None


LevelCallback = Callable[[LevelReport], None]
TargetCallback = Callable[[str], None]


async def run_targets(
    config: SweepConfig,
    specs: Iterable[RequestSpec],
    on_target: TargetCallback | None = None,
    on_level: LevelCallback | None = None,
    observer: RequestObserver = NULL_OBSERVER,
    transport: httpx.AsyncBaseTransport | None = None,
) -> dict[str, SweepHistory]:
    config.validate()
    histories: dict[str, SweepHistory] = {}
    async with build_client(config, transport=transport) as client:
        for spec in specs:
            if on_target:
                on_target(spec.url)
            histories[spec.url] = await run_sweep(client, spec, config, on_level, observer)
    return histories


async def run_sweep(
    client: httpx.AsyncClient,
    spec: RequestSpec,
    config: SweepConfig,
    on_level: LevelCallback | None = None,
    observer: RequestObserver = NULL_OBSERVER,
) -> SweepHistory:
    config.validate()
    logger.info("sweeping %s %s with %s", spec.method, spec.url, dict(config.to_metadata()))
    history = SweepHistory(spec.url)
    for level in range(1, config.max_clients + 1):
        result = await probe_level(client, spec, level, config.repeats, observer)
        history.append(result)
        report = LevelReport(
            url=spec.url,
            result=result,
            step=classify_gradient(result, history.get(level - 1), config.accepted_gradient),
            decade=_decade_reading(history, result, config.accepted_gradient),
        )
        if on_level:
            on_level(report)
    logger.info("sweep of %s finished after %d levels", spec.url, len(history))
    return history


def _decade_reading(
    history: SweepHistory,
    result: ProbeResult,
    accepted_gradient: float,
) -> GradientReading | None:
    if len(history) <= DECADE_DISTANCE:
        return None
    return classify_gradient(
        result,
        history.get(result.client_count - DECADE_DISTANCE),
        accepted_gradient,
        scale=DECADE_DISTANCE,
    )

from __future__ import annotations

import asyncio
from collections import Counter
from dataclasses import dataclass, field

import numpy as np

from chail.metrics.models import ProbeResult, RequestSample


@dataclass(slots=True)
class SampleAggregator:
    """Reduces the samples of one pool run.

    Timings are only collected for successful samples, so averages and
    percentiles are ``nan`` when a level produced no successful request.
    """

    ttfb: list[float] = field(default_factory=list)
    totals: list[float] = field(default_factory=list)
    failures: int = 0
    response_codes: Counter[int] = field(default_factory=Counter)

    @property
    def count(self) -> int:
        return len(self.totals) + self.failures

    def add(self, sample: RequestSample) -> None:
        self.response_codes[sample.response_code] += 1
        if not sample.successful:
            self.failures += 1
            return
        self.ttfb.append(sample.time_to_first_byte or 0.0)
        self.totals.append(sample.time_total)

    def result(self, client_count: int) -> ProbeResult:
        total = self.count
        if self.totals:
            avg_ttfb = float(np.mean(self.ttfb))
            avg_total = float(np.mean(self.totals))
            p50, p95, p99 = (float(v) for v in np.percentile(self.totals, [50, 95, 99]))
        else:
            avg_ttfb = avg_total = p50 = p95 = p99 = float("nan")
        return ProbeResult(
            client_count=client_count,
            requests=total,
            avg_time_to_first_byte=avg_ttfb,
            avg_time_total=avg_total,
            error_rate=self.failures / total if total else 0.0,
            response_codes=dict(sorted(self.response_codes.items())),
            p50_time_total=p50,
            p95_time_total=p95,
            p99_time_total=p99,
        )


async def drain_samples(
    queue: asyncio.Queue[RequestSample | None],
    clients: int,
    repeats: int,
) -> ProbeResult:
    aggregator = SampleAggregator()
    while True:
        sample = await queue.get()
        if sample is None:
            break
        aggregator.add(sample)
    expected = clients * repeats
    if aggregator.count != expected:
        msg = f"Pool run with {clients} clients delivered {aggregator.count} samples, expected {expected}"
        raise RuntimeError(msg)
    return aggregator.result(clients)

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterator

import pandas as pd

from chail.metrics import ProbeResult


@dataclass(slots=True)
class SweepHistory:
    """Results of one sweep, addressed by client count (``history[1]`` is the first level)."""

    url: str
    _results: list[ProbeResult] = field(default_factory=list)

    def append(self, result: ProbeResult) -> None:
        expected = len(self._results) + 1
        if result.client_count != expected:
            msg = f"Expected result for {expected} clients, got {result.client_count}"
            raise ValueError(msg)
        self._results.append(result)

    def get(self, client_count: int) -> ProbeResult | None:
        if 1 <= client_count <= len(self._results):
            return self._results[client_count - 1]
        return None

    def __getitem__(self, client_count: int) -> ProbeResult:
        result = self.get(client_count)
        if result is None:
            raise IndexError(client_count)
        return result

    def __len__(self) -> int:
        return len(self._results)

    def __iter__(self) -> Iterator[ProbeResult]:
        return iter(self._results)

    def to_frame(self) -> pd.DataFrame:
        rows = [
            {
                "clients": r.client_count,
                "avg_ttfb_ms": r.avg_time_to_first_byte * 1000.0,
                "avg_total_ms": r.avg_time_total * 1000.0,
                "p95_total_ms": r.p95_time_total * 1000.0,
                "error_rate": r.error_rate,
                "requests": r.requests,
            }
            for r in self._results
        ]
        return pd.DataFrame(
            rows,
            columns=["clients", "avg_ttfb_ms", "avg_total_ms", "p95_total_ms", "error_rate", "requests"],
        )

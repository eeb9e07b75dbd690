from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping

NO_RESPONSE = 0


@dataclass(frozen=True, slots=True)
class RequestSample:
    response_code: int
    time_to_first_byte: float | None = None
    time_total: float | None = None

    @property
    def successful(self) -> bool:
        # an unread body counts as a failure whatever the status said
        return self.time_total is not None and 200 <= self.response_code < 300

    @classmethod
    def unanswered(cls) -> RequestSample:
        return cls(response_code=NO_RESPONSE)


@dataclass(frozen=True, slots=True)
class ProbeResult:
    client_count: int
    requests: int
    avg_time_to_first_byte: float
    avg_time_total: float
    error_rate: float
    response_codes: Mapping[int, int]
    p50_time_total: float
    p95_time_total: float
    p99_time_total: float

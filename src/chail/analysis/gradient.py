from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum

from chail.metrics import ProbeResult

DECADE_DISTANCE = 10


class Severity(str, Enum):
    CRITICAL = "critical"
    SEVERE = "severe"
    MODERATE = "moderate"
    IMPROVING = "improving"
    NORMAL = "normal"


@dataclass(frozen=True, slots=True)
class GradientReading:
    ratio: float
    distance: int
    threshold: float
    severity: Severity


def classify_gradient(
    current: ProbeResult,
    previous: ProbeResult | None,
    accepted_gradient: float,
    scale: int = 1,
) -> GradientReading | None:
    """Compare average total latency of ``current`` against ``previous``.

    ``accepted_gradient`` is the latency ratio expected for one step of
    concurrency; comparisons over a longer distance pass a matching ``scale``.
    Returns ``None`` when there is nothing meaningful to compare against.
    """
    if previous is None:
        return None
    if previous.avg_time_total == 0 or math.isnan(previous.avg_time_total):
        return None
    if math.isnan(current.avg_time_total):
        return None
    ratio = current.avg_time_total / previous.avg_time_total
    threshold = accepted_gradient * scale
    return GradientReading(
        ratio=ratio,
        distance=current.client_count - previous.client_count,
        threshold=threshold,
        severity=severity_for(ratio, threshold),
    )


def severity_for(ratio: float, threshold: float) -> Severity:
    if ratio > 2.0 * threshold:
        return Severity.CRITICAL
    if ratio > 1.6 * threshold:
        return Severity.SEVERE
    if ratio > 1.2 * threshold:
        return Severity.MODERATE
    if ratio < 0.8 * threshold:
        return Severity.IMPROVING
    return Severity.NORMAL

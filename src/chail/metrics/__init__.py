from __future__ import annotations

from chail.metrics.aggregator import SampleAggregator, drain_samples
from chail.metrics.models import NO_RESPONSE, ProbeResult, RequestSample

__all__ = ["NO_RESPONSE", "ProbeResult", "RequestSample", "SampleAggregator", "drain_samples"]

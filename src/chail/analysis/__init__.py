from __future__ import annotations

from chail.analysis.gradient import DECADE_DISTANCE, GradientReading, Severity, classify_gradient
from chail.analysis.history import SweepHistory
from chail.analysis.signals import error_onset, latency_knee

__all__ = [
    "DECADE_DISTANCE",
    "GradientReading",
    "Severity",
    "SweepHistory",
    "classify_gradient",
    "error_onset",
    "latency_knee",
]

from __future__ import annotations

import pandas as pd


def error_onset(levels: pd.DataFrame) -> int | None:
    if levels.empty:
        return None
    failing = levels[levels["error_rate"] > 0]
    if failing.empty:
        return None
    return int(failing["clients"].iloc[0])


def latency_knee(levels: pd.DataFrame, accepted_gradient: float) -> int | None:
    """First client count whose step-to-step latency ratio reaches the severe band."""
    if len(levels) < 2:
        return None
    ratio = levels["avg_total_ms"] / levels["avg_total_ms"].shift(1)
    steep = ratio > 1.6 * accepted_gradient
    knees = levels.loc[steep.fillna(False), "clients"]
    if knees.empty:
        return None
    return int(knees.iloc[0])

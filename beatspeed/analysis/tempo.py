"""Lag-correlation tempo estimation."""

import numpy as np

from beatspeed.analysis.models import BpmEstimate, WindowDescriptor, WindowPlan


def correlate(base: np.ndarray, search: np.ndarray) -> np.ndarray:
    """Sliding dot product of *base* against *search*.

    ``score[t] = sum(base[i] * search[t + i])`` for ``t`` in
    ``[0, len(search) - len(base))``. There is no windowing function and
    no energy normalization, so louder passages weigh more.
    """
    span = len(search) - len(base)
    if span <= 0:
        return np.zeros(0, dtype=np.float64)
    # "valid" mode yields span + 1 scores; drop the last search sample to keep span
    return np.correlate(search[:len(base) + span - 1], base, mode="valid")


def best_lag(scores: np.ndarray) -> int:
    """Offset of the highest score; ties resolve to the smallest offset."""
    if len(scores) == 0:
        raise ValueError("Cannot pick a lag from an empty correlation")
    t = int(np.argmax(scores))
    if not np.isfinite(scores[t]):
        raise FloatingPointError(f"Non-finite correlation score at offset {t}")
    return t


def estimate_window(
    samples: np.ndarray,
    window: WindowDescriptor,
    plan: WindowPlan,
    sample_rate: int,
    time_interval_ms: int,
) -> BpmEstimate:
    """Estimate the tempo of one window."""
    base = samples[window.base.start:window.base.stop]
    search = samples[window.search.start:window.search.stop]

    t = best_lag(correlate(base, search))
    lag = plan.lag_min + t
    return BpmEstimate(
        time_ms=window.index * time_interval_ms,
        bpm=60.0 * sample_rate / lag,
    )

"""Partition a mono buffer into overlapping analysis windows.

A lag is a beat period measured in samples, so the fastest tempo
(``max_bpm``) gives the shortest lag and the slowest (``min_bpm``) the
longest:

    lag_min = 60 * sample_rate // max_bpm
    lag_max = 60 * sample_rate // min_bpm

Window ``i`` covers ``base = [i*stride, i*stride + window_size)`` and is
compared against ``search = [i*stride + lag_min, i*stride + window_size + lag_max)``.
All ranges are half-open. Products are formed before the integer
division.
"""

from __future__ import annotations

from collections.abc import Iterator

from beatspeed.analysis.models import Configuration, WindowDescriptor, WindowPlan
from beatspeed.errors import ConfigurationError


def plan_windows(n_samples: int, sample_rate: int, config: Configuration) -> WindowPlan:
    """Compute window geometry for a buffer of *n_samples* at *sample_rate*.

    A buffer too short for a single window yields ``count == 0``, which is
    a valid empty plan. Settings that collapse a size to zero samples at
    this sample rate raise :class:`ConfigurationError`.
    """
    window_size = sample_rate * config.analysis_interval_ms // 1000
    stride = sample_rate * config.time_interval_ms // 1000
    lag_min = int(60 * sample_rate // config.max_bpm)
    lag_max = int(60 * sample_rate // config.min_bpm)

    if window_size <= 0:
        raise ConfigurationError(
            f"analysis_interval_ms={config.analysis_interval_ms} is shorter than one sample at {sample_rate} Hz"
        )
    if stride <= 0:
        raise ConfigurationError(
            f"time_interval_ms={config.time_interval_ms} is shorter than one sample at {sample_rate} Hz"
        )
    if lag_min <= 0:
        raise ConfigurationError(
            f"max_bpm={config.max_bpm} exceeds one beat per sample at {sample_rate} Hz"
        )
    if lag_max <= lag_min:
        raise ConfigurationError(
            f"BPM range {config.min_bpm}-{config.max_bpm} contains no whole-sample lag at {sample_rate} Hz"
        )

    count = max(0, (n_samples - window_size - lag_max) // stride)
    return WindowPlan(
        window_size=window_size,
        stride=stride,
        lag_min=lag_min,
        lag_max=lag_max,
        count=count,
    )


def window_at(plan: WindowPlan, index: int) -> WindowDescriptor:
    """Descriptor of window *index*."""
    start = index * plan.stride
    base = range(start, start + plan.window_size)
    search = range(start + plan.lag_min, start + plan.window_size + plan.lag_max)
    assert len(search) == len(base) + plan.span
    return WindowDescriptor(index=index, base=base, search=search)


def iter_windows(plan: WindowPlan, n_samples: int) -> Iterator[WindowDescriptor]:
    """Yield the descriptors of *plan* in index order."""
    for index in range(plan.count):
        window = window_at(plan, index)
        assert window.search.stop <= n_samples, (
            f"window {index} ends at {window.search.stop}, buffer has {n_samples} samples"
        )
        yield window

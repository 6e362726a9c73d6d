"""Tests for window partitioning."""

import pytest

from beatspeed.analysis.windows import iter_windows, plan_windows, window_at
from beatspeed.errors import ConfigurationError
from tests.conftest import make_config


def test_plan_default_geometry():
    config = make_config("unused.wav")
    plan = plan_windows(10000, 1000, config)

    assert plan.window_size == 3000
    assert plan.stride == 1000
    assert plan.lag_min == 375  # 160 BPM
    assert plan.lag_max == 750  # 80 BPM
    assert plan.span == 375
    assert plan.count == (10000 - 3000 - 750) // 1000


def test_window_ranges_are_half_open():
    plan = plan_windows(10000, 1000, make_config("unused.wav"))
    window = window_at(plan, 2)

    assert window.base == range(2000, 5000)
    assert window.search == range(2375, 5750)
    assert len(window.search) - len(window.base) == plan.span


@pytest.mark.parametrize("sr", [1000, 8000, 22050, 44100, 48000])
@pytest.mark.parametrize("time_ms,analysis_ms", [(250, 1000), (1000, 1000), (1000, 3000), (700, 5300)])
@pytest.mark.parametrize("min_bpm,max_bpm", [(80, 160), (40, 300), (90.5, 181.5)])
@pytest.mark.parametrize("seconds", [1, 5, 17.3])
def test_window_count_and_bounds_sweep(sr, time_ms, analysis_ms, min_bpm, max_bpm, seconds):
    n = int(sr * seconds)
    config = make_config(
        "unused.wav",
        time_interval_ms=time_ms,
        analysis_interval_ms=analysis_ms,
        min_bpm=min_bpm,
        max_bpm=max_bpm,
    )
    plan = plan_windows(n, sr, config)

    window_size = sr * analysis_ms // 1000
    stride = sr * time_ms // 1000
    lag_max = int(60 * sr // min_bpm)
    assert plan.count == max(0, (n - window_size - lag_max) // stride)

    windows = list(iter_windows(plan, n))
    assert [w.index for w in windows] == list(range(plan.count))
    for w in windows:
        assert w.base.start == w.index * stride
        assert len(w.base) == window_size
        assert len(w.search) == window_size + plan.span
        assert w.search.start == w.base.start + plan.lag_min
        assert 0 <= w.base.start and w.search.stop <= n


def test_short_buffer_yields_no_windows():
    config = make_config("unused.wav")
    plan = plan_windows(3000 + 750 - 1, 1000, config)

    assert plan.count == 0
    assert list(iter_windows(plan, 3749)) == []


def test_empty_buffer_yields_no_windows():
    plan = plan_windows(0, 44100, make_config("unused.wav"))
    assert plan.count == 0


def test_exactly_one_stride_past_minimum_gives_one_window():
    config = make_config("unused.wav")
    plan = plan_windows(3000 + 750 + 1000, 1000, config)
    assert plan.count == 1


@pytest.mark.parametrize("sr,overrides", [
    (500, {"time_interval_ms": 1, "analysis_interval_ms": 3000}),  # stride 0
    (10, {"time_interval_ms": 50, "analysis_interval_ms": 50}),  # window 0
    (10, {"min_bpm": 101, "max_bpm": 102}),  # both lags round to 5 samples
    (10, {"min_bpm": 80, "max_bpm": 700}),  # shortest lag below one sample
])
def test_degenerate_geometry_rejected(sr, overrides):
    with pytest.raises(ConfigurationError):
        plan_windows(100000, sr, make_config("unused.wav", **overrides))

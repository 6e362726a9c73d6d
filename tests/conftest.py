"""Shared test fixtures for tempo engine tests."""

import numpy as np
import pytest
import soundfile as sf

from beatspeed.analysis.models import Configuration


def generate_pulse_train(
    bpm: float,
    duration_seconds: float = 10.0,
    sr: int = 1000,
    amplitude: float = 1.0,
) -> np.ndarray:
    """Single-sample impulses, one per beat, starting at sample 0."""
    n_samples = int(duration_seconds * sr)
    audio = np.zeros(n_samples, dtype=np.float32)
    period = 60.0 * sr / bpm
    positions = np.round(np.arange(0, n_samples, period)).astype(int)
    audio[positions[positions < n_samples]] = amplitude
    return audio


def generate_click_track(
    bpm: float,
    duration_seconds: float = 10.0,
    sr: int = 22050,
) -> np.ndarray:
    """Generate a synthetic click track (short decaying sine bursts).

    Returns mono audio at the given sample rate.
    """
    n_samples = int(duration_seconds * sr)
    audio = np.zeros(n_samples, dtype=np.float32)

    beat_interval = 60.0 / bpm  # seconds per beat
    click_duration = 0.02  # 20ms click
    click_samples = int(click_duration * sr)

    t_click = np.arange(click_samples) / sr
    click = np.sin(2 * np.pi * 1000 * t_click) * np.exp(-t_click * 100)

    time = 0.0
    while time < duration_seconds:
        sample_pos = int(round(time * sr))
        end = min(sample_pos + click_samples, n_samples)
        length = end - sample_pos
        if length > 0:
            audio[sample_pos:end] += click[:length]
        time += beat_interval

    return audio


def write_wav(path, audio: np.ndarray, sr: int) -> str:
    """Write float audio losslessly so tests see exactly the generated samples."""
    sf.write(str(path), audio, sr, subtype="FLOAT")
    return str(path)


def make_config(file_path, **overrides) -> Configuration:
    values = {
        "time_interval_ms": 1000,
        "analysis_interval_ms": 3000,
        "min_bpm": 80,
        "max_bpm": 160,
        "verbose": 0,
    }
    values.update(overrides)
    return Configuration(file_path=str(file_path), **values)


@pytest.fixture
def pulse_wav(tmp_path):
    """10 s pulse train at 120 BPM, 1000 Hz."""
    return write_wav(tmp_path / "pulse.wav", generate_pulse_train(bpm=120), 1000)


@pytest.fixture
def short_wav(tmp_path):
    """2 s of audio, shorter than one window plus the longest lag."""
    return write_wav(tmp_path / "short.wav", generate_pulse_train(bpm=120, duration_seconds=2), 1000)

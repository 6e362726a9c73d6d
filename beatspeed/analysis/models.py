"""Core data models for tempo analysis."""

from dataclasses import dataclass, field

import numpy as np

from beatspeed.config import settings


@dataclass(frozen=True)
class Configuration:
    """Parameters of one analysis run."""
    file_path: str
    time_interval_ms: int = field(default_factory=lambda: settings.time_interval_ms)
    analysis_interval_ms: int = field(default_factory=lambda: settings.analysis_interval_ms)
    min_bpm: float = field(default_factory=lambda: settings.min_bpm)
    max_bpm: float = field(default_factory=lambda: settings.max_bpm)
    verbose: int = field(default_factory=lambda: settings.verbose)  # 0 - none, 1 - full


@dataclass(frozen=True)
class PcmBuffer:
    """Mono samples shared read-only by every downstream stage."""
    samples: np.ndarray
    sample_rate: int

    def __len__(self) -> int:
        return len(self.samples)

    @property
    def duration(self) -> float:
        """Length in seconds."""
        return len(self.samples) / self.sample_rate if self.sample_rate else 0.0


@dataclass(frozen=True)
class WindowPlan:
    """Sample-domain geometry shared by all windows of a run."""
    window_size: int
    stride: int
    lag_min: int  # shortest beat period (max_bpm)
    lag_max: int  # longest beat period (min_bpm)
    count: int

    @property
    def span(self) -> int:
        """Number of candidate lags per window."""
        return self.lag_max - self.lag_min


@dataclass(frozen=True)
class WindowDescriptor:
    """One analysis window as two half-open index ranges into the buffer."""
    index: int
    base: range
    search: range


@dataclass(frozen=True, order=True)
class BpmEstimate:
    """Tempo of one window, keyed by its start time."""
    time_ms: int
    bpm: float

    @property
    def time(self) -> float:
        """Start time in seconds."""
        return self.time_ms / 1000.0


@dataclass(frozen=True)
class Start:
    """Emitted once, before any step."""
    total: int


@dataclass(frozen=True)
class Step:
    """Emitted once per completed window."""
    estimate: BpmEstimate


@dataclass(frozen=True)
class End:
    """Terminal event of a successful run."""


Event = Start | Step | End

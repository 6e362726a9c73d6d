"""Analysis orchestrator: decode, downmix, partition, correlate, stream."""

import logging
import numbers
import os
import threading
from concurrent.futures import ThreadPoolExecutor, as_completed

from beatspeed.analysis.events import CollectingSink, EventSink, ProgressSink, TeeSink
from beatspeed.analysis.models import BpmEstimate, Configuration, End, PcmBuffer, Start, Step
from beatspeed.analysis.tempo import estimate_window
from beatspeed.analysis.windows import iter_windows, plan_windows
from beatspeed.audio.loader import decode
from beatspeed.audio.preprocessing import load_pcm
from beatspeed.config import settings
from beatspeed.errors import ConfigurationError, EngineError, InputError

logger = logging.getLogger(__name__)


def validate_configuration(config: Configuration) -> None:
    """Reject invalid settings and unreadable input before any work starts."""
    for name in ("time_interval_ms", "analysis_interval_ms"):
        value = getattr(config, name)
        if isinstance(value, bool) or not isinstance(value, numbers.Integral):
            raise ConfigurationError(f"{name} must be a whole number of milliseconds, got {value!r}")
    if config.time_interval_ms <= 0:
        raise ConfigurationError(f"time_interval_ms must be positive, got {config.time_interval_ms}")
    if config.analysis_interval_ms < config.time_interval_ms:
        raise ConfigurationError(
            f"analysis_interval_ms ({config.analysis_interval_ms}) must be >= "
            f"time_interval_ms ({config.time_interval_ms})"
        )
    if not 0 < config.min_bpm < config.max_bpm:
        raise ConfigurationError(
            f"BPM bounds must satisfy 0 < min_bpm < max_bpm, got {config.min_bpm}-{config.max_bpm}"
        )
    if config.verbose not in (0, 1):
        raise ConfigurationError(f"verbose must be 0 or 1, got {config.verbose!r}")

    if not os.path.exists(config.file_path):
        raise InputError(f"File '{config.file_path}' doesn't exist")
    if not os.path.isfile(config.file_path):
        raise InputError(f"'{config.file_path}' is not a regular file")
    if not os.access(config.file_path, os.R_OK):
        raise InputError(f"File '{config.file_path}' is not readable")


class AnalysisEngine:
    """Runs the tempo pipeline and streams per-window estimates to a sink."""

    def __init__(self, max_workers: int | None = None):
        self.max_workers = max_workers or settings.max_workers or os.cpu_count() or 1

    def load(self, config: Configuration) -> PcmBuffer:
        """Decode and downmix the configured file."""
        logger.info("Loading music...")
        pcm = load_pcm(decode(config.file_path))
        logger.info(
            f"File path: '{config.file_path}', duration: {pcm.duration:.1f}s, "
            f"sample rate: {pcm.sample_rate}Hz, samples: {len(pcm)}"
        )
        return pcm

    def run(self, config: Configuration, sink: EventSink) -> None:
        """Execute one full run, blocking until every window is done.

        Emits ``Start``/``Step``/``End`` to *sink*. Any failure propagates
        as an :class:`EngineError` and no ``End`` is emitted.
        """
        if config.verbose == 1:
            sink = TeeSink(sink, ProgressSink())
        try:
            validate_configuration(config)
            pcm = self.load(config)
            self.run_pcm(pcm, config, sink)
        except EngineError as exc:
            sink.fail(exc)
            raise
        except Exception as exc:
            error = EngineError(f"Analysis failed: {exc!r}")
            error.__cause__ = exc
            sink.fail(error)
            raise error from exc

    def run_pcm(self, pcm: PcmBuffer, config: Configuration, sink: EventSink) -> None:
        """Schedule every window of *pcm* on the worker pool."""
        plan = plan_windows(len(pcm), pcm.sample_rate, config)
        logger.info(
            f"Parsed to {plan.count} windows (size={plan.window_size}, stride={plan.stride}, "
            f"lags={plan.lag_min}-{plan.lag_max})"
        )

        sink.handle(Start(plan.count))
        if plan.count:
            logger.info(f"Analyzing music on {self.max_workers} workers...")
            with ThreadPoolExecutor(max_workers=self.max_workers) as pool:
                futures = [
                    pool.submit(
                        estimate_window,
                        pcm.samples,
                        window,
                        plan,
                        pcm.sample_rate,
                        config.time_interval_ms,
                    )
                    for window in iter_windows(plan, len(pcm))
                ]
                try:
                    for future in as_completed(futures):
                        sink.handle(Step(future.result()))
                except Exception as exc:
                    pool.shutdown(wait=False, cancel_futures=True)
                    raise EngineError(f"Tempo estimation failed: {exc}") from exc
        sink.handle(End())
        logger.info("Analysis finished")


def analyse(config: Configuration) -> list[BpmEstimate]:
    """Analyse a file and return its estimates sorted by time."""
    sink = CollectingSink()
    AnalysisEngine().run(config, sink)
    return sink.chronological()


def analyse_streaming(config: Configuration, sink: EventSink) -> threading.Thread:
    """Start a background run that reports to *sink* and return immediately.

    Configuration and input errors are raised here, before the thread
    starts. Later failures reach the sink through ``sink.fail``.
    """
    validate_configuration(config)
    engine = AnalysisEngine()

    def _worker():
        try:
            engine.run(config, sink)
        except Exception:
            logger.exception(f"Background analysis of '{config.file_path}' failed")

    thread = threading.Thread(target=_worker, name="beatspeed-analysis", daemon=True)
    thread.start()
    return thread

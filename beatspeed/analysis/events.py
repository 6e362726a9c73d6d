"""Event sinks for streamed analysis results.

A run emits exactly one ``Start(total)``, one ``Step`` per window in
completion order (not index order), and a terminal ``End``. A run that
fails calls ``sink.fail(error)`` instead of emitting ``End``.
"""

from __future__ import annotations

import queue
import threading
from abc import ABC, abstractmethod
from collections.abc import Callable, Iterator
from dataclasses import dataclass

from tqdm import tqdm

from beatspeed.analysis.models import BpmEstimate, End, Event, Start, Step
from beatspeed.errors import StreamAborted


class EventSink(ABC):
    """Consumer side of the Start/Step/End protocol."""

    @abstractmethod
    def handle(self, event: Event) -> None:
        """Receive one event."""

    def fail(self, error: BaseException) -> None:
        """Called instead of ``End`` when the run aborts."""


class CallbackSink(EventSink):
    """Forward every event to a plain callable."""

    def __init__(self, callback: Callable[[Event], None], on_error: Callable[[BaseException], None] | None = None):
        self._callback = callback
        self._on_error = on_error

    def handle(self, event: Event) -> None:
        self._callback(event)

    def fail(self, error: BaseException) -> None:
        if self._on_error is not None:
            self._on_error(error)


class CollectingSink(EventSink):
    """Accumulate estimates in memory."""

    def __init__(self) -> None:
        self.total: int | None = None
        self.estimates: list[BpmEstimate] = []
        self.finished = False
        self.error: BaseException | None = None

    def handle(self, event: Event) -> None:
        if isinstance(event, Start):
            self.total = event.total
        elif isinstance(event, Step):
            self.estimates.append(event.estimate)
        elif isinstance(event, End):
            self.finished = True

    def fail(self, error: BaseException) -> None:
        self.error = error

    def chronological(self) -> list[BpmEstimate]:
        """Estimates in chronological order."""
        return sorted(self.estimates, key=lambda e: e.time_ms)


class ProgressSink(EventSink):
    """Render run progress as a ``tqdm`` bar."""

    def __init__(self, desc: str = "Analyzing", **tqdm_kwargs) -> None:
        self._desc = desc
        self._tqdm_kwargs = tqdm_kwargs
        self._bar: tqdm | None = None

    def handle(self, event: Event) -> None:
        if isinstance(event, Start):
            self._bar = tqdm(total=event.total, desc=self._desc, unit="win", **self._tqdm_kwargs)
        elif isinstance(event, Step):
            if self._bar is not None:
                self._bar.update(1)
        elif isinstance(event, End):
            self._close()

    def fail(self, error: BaseException) -> None:
        self._close()

    @property
    def count(self) -> int:
        """Steps seen so far."""
        return self._bar.n if self._bar is not None else 0

    def _close(self) -> None:
        if self._bar is not None:
            self._bar.close()


class TeeSink(EventSink):
    """Deliver each event to several independent sinks."""

    def __init__(self, *sinks: EventSink) -> None:
        self.sinks = sinks

    def handle(self, event: Event) -> None:
        for sink in self.sinks:
            sink.handle(event)

    def fail(self, error: BaseException) -> None:
        for sink in self.sinks:
            sink.fail(error)


@dataclass(frozen=True)
class _Closed:
    """Queue sentinel for an aborted run."""
    error: BaseException | None


class EventStream(EventSink):
    """Thread-safe channel between producer threads and one consumer.

    Any thread may call :meth:`handle`. The consumer iterates the stream
    and receives events up to and including ``End``. If the producer
    closes the stream without ``End`` (see :meth:`fail`), iteration raises
    :class:`StreamAborted`, so a clean finish is never confused with a
    crashed run.

    Parameters
    ----------
    maxsize:
        Queue capacity. ``0`` means unbounded; otherwise ``handle`` blocks
        while the queue is full.
    """

    def __init__(self, maxsize: int = 0) -> None:
        self._queue: queue.Queue = queue.Queue(maxsize=maxsize)
        self._done = threading.Event()

    def handle(self, event: Event) -> None:
        self._queue.put(event)

    def fail(self, error: BaseException) -> None:
        self._queue.put(_Closed(error))

    def close(self) -> None:
        """Close the stream from the producer side without an ``End``."""
        self._queue.put(_Closed(None))

    def get(self, timeout: float | None = None) -> Event:
        """Receive the next event, raising ``StreamAborted`` on abnormal close."""
        if self._done.is_set():
            raise StreamAborted("Stream already consumed past its last event")
        item = self._queue.get(timeout=timeout)
        if isinstance(item, _Closed):
            self._done.set()
            raise StreamAborted("Stream closed before End") from item.error
        if isinstance(item, End):
            self._done.set()
        return item

    def __iter__(self) -> Iterator[Event]:
        while not self._done.is_set():
            yield self.get()

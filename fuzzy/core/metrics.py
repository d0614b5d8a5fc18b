"""Run metrics: single-writer counter store plus a periodic reporter."""

import asyncio
import threading
import time
from dataclasses import dataclass, replace
from typing import Callable, Optional


@dataclass(frozen=True)
class Metrics:
    start_time: float            # time.monotonic() at engine start
    total_requests: int = 0
    successful_requests: int = 0
    failed_requests: int = 0

    def elapsed_seconds(self, now: Optional[float] = None) -> float:
        now = time.monotonic() if now is None else now
        return max(0.0, now - self.start_time)

    def throughput(self, now: Optional[float] = None) -> float:
        elapsed = self.elapsed_seconds(now)
        if elapsed == 0:
            return 0.0
        return self.total_requests / elapsed


class MetricsStore:
    """
    Holds the live counters. Only the aggregator calls ``record_*``; anyone
    may call ``snapshot``. Each record updates all affected counters inside
    one critical section, so a snapshot never shows ``total_requests``
    ahead of ``successful_requests + failed_requests``.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self._clock = clock
        self._lock = threading.Lock()
        self._metrics = Metrics(start_time=clock())

    @property
    def clock(self) -> Callable[[], float]:
        return self._clock

    def record_success(self) -> None:
        with self._lock:
            m = self._metrics
            self._metrics = replace(
                m,
                total_requests=m.total_requests + 1,
                successful_requests=m.successful_requests + 1,
            )

    def record_failure(self) -> None:
        with self._lock:
            m = self._metrics
            self._metrics = replace(
                m,
                total_requests=m.total_requests + 1,
                failed_requests=m.failed_requests + 1,
            )

    def snapshot(self) -> Metrics:
        with self._lock:
            return self._metrics


class MetricsReporter:
    """
    Emits a snapshot every ``interval`` seconds until ``finished`` is set,
    then emits one final snapshot.
    """

    def __init__(self, store: MetricsStore, logger=None, interval: float = 5.0):
        if interval <= 0:
            raise ValueError("report interval must be > 0")
        self.store = store
        self.logger = logger
        self.interval = interval
        self.emitted = 0

    def emit(self) -> Metrics:
        snap = self.store.snapshot()
        self.emitted += 1
        if self.logger:
            self.logger.metrics(snap, now=self.store.clock())
        return snap

    async def run(self, finished: asyncio.Event) -> Metrics:
        while not finished.is_set():
            self.emit()
            try:
                await asyncio.wait_for(finished.wait(), timeout=self.interval)
            except asyncio.TimeoutError:
                continue
        return self.emit()

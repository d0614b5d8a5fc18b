"""Result aggregator: sole consumer of the result channel."""

from typing import IO, Optional

from fuzzy.core.channel import ResultChannel
from fuzzy.core.errors import SinkError
from fuzzy.core.metrics import MetricsStore
from fuzzy.core.models import FuzzFailure, FuzzingResult, FuzzSuccess


class FailureSink:
    """Plain-text failure log, one record per line. Truncated on open."""

    def __init__(self, path: str, fh: IO[str]):
        self.path = path
        self._fh = fh
        self.written = 0

    @classmethod
    def open(cls, path: str) -> "FailureSink":
        try:
            fh = open(path, "w", encoding="utf-8")
        except OSError as exc:
            raise SinkError(f"cannot open output file {path!r}: {exc}") from exc
        return cls(path, fh)

    def write(self, record: str) -> None:
        try:
            self._fh.write(record + "\n")
            self._fh.flush()
        except (OSError, ValueError) as exc:
            raise SinkError(f"cannot write to output file {self.path!r}: {exc}") from exc
        self.written += 1

    def close(self) -> None:
        if not self._fh.closed:
            self._fh.close()

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()


class ResultAggregator:
    def __init__(self, channel: ResultChannel, metrics: MetricsStore,
                 sink: Optional[FailureSink] = None, logger=None):
        self.channel = channel
        self.metrics = metrics
        self.sink = sink
        self.logger = logger

    def handle(self, result: FuzzingResult) -> None:
        if isinstance(result, FuzzSuccess):
            self.metrics.record_success()
        elif isinstance(result, FuzzFailure):
            self.metrics.record_failure()
            if self.logger and self.logger.verbose >= 2:
                self.logger.failure(result)
            if self.sink is not None:
                self.sink.write(result.to_record())
        else:
            raise TypeError(f"unexpected result type: {type(result).__name__}")

    async def process_results(self) -> None:
        """Consume until the channel is closed and drained."""
        async for result in self.channel:
            self.handle(result)

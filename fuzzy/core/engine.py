import asyncio
from typing import Iterator, Optional, Set

import httpx

from fuzzy.core.aggregator import FailureSink, ResultAggregator
from fuzzy.core.channel import ResultChannel
from fuzzy.core.config import FuzzerConfig
from fuzzy.core.errors import HeaderResolutionError, InvalidTemplateError
from fuzzy.core.expander import expand, resolve_headers
from fuzzy.core.metrics import Metrics, MetricsReporter, MetricsStore
from fuzzy.core.models import (
    FailureDetail, FuzzDictionary, FuzzedUrl, FuzzFailure, FuzzingResult,
    FuzzInput, FuzzSuccess, HttpMethod, Target,
)


class Fuzzer:
    """
    Expands every target and issues the resulting GET requests, never more
    than ``concurrency`` at a time across all targets.

    A permit is taken before a request task is created. It is not released
    when the response arrives: it also covers handing the outcome to the
    channel, and is given back only after that send. A full channel
    therefore stalls issuance instead of piling up finished requests.

    Any error raised while issuing one request becomes a failure outcome
    for that request; it never cancels sibling requests or other targets.
    """

    def __init__(self, client: httpx.AsyncClient, channel: ResultChannel,
                 concurrency: int = 10, logger=None,
                 response_snippet_length: int = 256):
        if concurrency < 1:
            raise ValueError("concurrency must be >= 1")
        self.client = client
        self.channel = channel
        self.concurrency = concurrency
        self.logger = logger
        self.response_snippet_length = response_snippet_length
        self.semaphore = asyncio.Semaphore(concurrency)

        self.issued = 0
        self.skipped = 0
        self.in_flight = 0
        self.peak_in_flight = 0

    # ---------- expansion ----------
    def generate_fuzzed_urls(self, fuzz_input: FuzzInput, target: Target,
                             dictionary: FuzzDictionary) -> Optional[Iterator[FuzzedUrl]]:
        try:
            return expand(target, fuzz_input, dictionary)
        except InvalidTemplateError as exc:
            if self.logger:
                self.logger.error(f"Skipping {target.method.value} {target.endpoint}: {exc}")
            return None

    # ---------- requests ----------
    async def make_request(self, fuzzed: FuzzedUrl, headers) -> httpx.Response:
        self.in_flight += 1
        self.peak_in_flight = max(self.peak_in_flight, self.in_flight)
        try:
            if self.logger and self.logger.verbose >= 2:
                self.logger.debug(f"→ GET {fuzzed.url}")
            return await self.client.get(fuzzed.url, headers=headers)
        finally:
            self.in_flight -= 1

    def to_result(self, fuzzed: FuzzedUrl, target: Target,
                  response: Optional[httpx.Response] = None,
                  error: Optional[Exception] = None) -> FuzzingResult:
        if error is not None:
            return FuzzFailure(fuzzed, FailureDetail(
                network_error=f"{type(error).__name__}: {error}"))
        if response.status_code != target.expected_status:
            snippet = (response.text or "")[:self.response_snippet_length]
            return FuzzFailure(fuzzed, FailureDetail(
                status_code=response.status_code, response=snippet))
        return FuzzSuccess(fuzzed)

    async def _dispatch(self, fuzzed: FuzzedUrl, target: Target) -> None:
        try:
            headers = resolve_headers(target, fuzzed)
        except HeaderResolutionError as exc:
            self.skipped += 1
            if self.logger:
                self.logger.error(f"Not sending [{fuzzed.id}] {fuzzed.url}: {exc}")
            return

        self.issued += 1
        try:
            response = await self.make_request(fuzzed, headers)
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            result = self.to_result(fuzzed, target, error=exc)
        except Exception as exc:
            if self.logger:
                self.logger.error(f"Request [{fuzzed.id}] {fuzzed.url} failed: {exc!r}")
            result = self.to_result(fuzzed, target, error=exc)
        else:
            result = self.to_result(fuzzed, target, response=response)
        await self.channel.send(result)

    def _request_done(self, pending: Set[asyncio.Task], task: asyncio.Task) -> None:
        pending.discard(task)
        self.semaphore.release()

    # ---------- orchestration ----------
    async def fuzz_target(self, fuzz_input: FuzzInput, target: Target,
                          dictionary: FuzzDictionary) -> None:
        fuzzed_urls = self.generate_fuzzed_urls(fuzz_input, target, dictionary)
        if fuzzed_urls is None:
            return

        if target.method != HttpMethod.GET:
            count = sum(1 for _ in fuzzed_urls)
            self.skipped += count
            if self.logger:
                self.logger.warn(
                    f"{target.method.value} {target.endpoint}: method not supported, "
                    f"{count} expanded requests not sent")
            return

        pending: Set[asyncio.Task] = set()
        try:
            for fuzzed in fuzzed_urls:
                await self.semaphore.acquire()
                task = asyncio.create_task(self._dispatch(fuzzed, target))
                pending.add(task)
                task.add_done_callback(lambda t: self._request_done(pending, t))
            while pending:
                await asyncio.gather(*pending)
        except BaseException:
            for task in pending:
                task.cancel()
            await asyncio.gather(*pending, return_exceptions=True)
            raise

    async def fuzz(self, fuzz_input: FuzzInput, dictionary: FuzzDictionary) -> None:
        """Returns once every target task and every request task has finished."""
        tasks = [asyncio.create_task(self.fuzz_target(fuzz_input, target, dictionary))
                 for target in fuzz_input.paths]
        try:
            await asyncio.gather(*tasks)
        except BaseException:
            for task in tasks:
                task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
            raise


async def _cancel(task: Optional[asyncio.Task]) -> None:
    if task is None or task.done():
        return
    task.cancel()
    await asyncio.gather(task, return_exceptions=True)


async def run(fuzz_input: FuzzInput, dictionary: FuzzDictionary,
              config: Optional[FuzzerConfig] = None, logger=None,
              transport: Optional[httpx.AsyncBaseTransport] = None) -> Metrics:
    """
    Full fuzz-and-aggregate cycle. ``config.concurrency`` is the request
    limit and ``config.output_path`` the failure sink (None to discard
    failure records). Returns the final metrics once everything is done.
    """
    config = config or FuzzerConfig()
    sink = FailureSink.open(config.output_path) if config.output_path else None

    store = MetricsStore()
    channel = ResultChannel(config.channel_size)
    finished = asyncio.Event()
    reporter = MetricsReporter(store, logger, config.report_interval)

    client_kwargs = config.client_kwargs(transport)

    fuzz_task = aggregator_task = None
    try:
        async with httpx.AsyncClient(**client_kwargs) as client:
            fuzzer = Fuzzer(client, channel, config.concurrency, logger,
                            config.response_snippet_length)
            aggregator = ResultAggregator(channel, store, sink, logger)

            reporter_task = asyncio.create_task(reporter.run(finished))
            try:
                aggregator_task = asyncio.create_task(aggregator.process_results())
                fuzz_task = asyncio.create_task(fuzzer.fuzz(fuzz_input, dictionary))
                if logger:
                    logger.info(f"Fuzzing {len(fuzz_input.paths)} endpoints with "
                                f"{len(dictionary)} dictionary values")

                done, _ = await asyncio.wait(
                    {fuzz_task, aggregator_task},
                    return_when=asyncio.FIRST_COMPLETED)
                if aggregator_task in done:
                    # the aggregator only stops early when it fails
                    await _cancel(fuzz_task)
                    aggregator_task.result()
                fuzz_task.result()

                await channel.close()
                await aggregator_task
                if logger:
                    logger.ok(f"Fuzzing finished: {fuzzer.issued} requests sent, "
                              f"{fuzzer.skipped} not sent")
            finally:
                await _cancel(fuzz_task)
                await _cancel(aggregator_task)
                finished.set()
                await reporter_task
    finally:
        if sink is not None:
            sink.close()

    return store.snapshot()

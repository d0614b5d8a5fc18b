from dataclasses import dataclass
from typing import Optional

import httpx


@dataclass
class FuzzerConfig:
    """All tunables for a single fuzzing run."""

    concurrency: int = 10
    channel_size: int = 32
    output_path: Optional[str] = "output.txt"
    timeout: float = 10.0
    report_interval: float = 5.0
    response_snippet_length: int = 256
    # HTTP client
    proxy: Optional[str] = None
    verify: bool = False
    follow_redirects: bool = True

    def __post_init__(self) -> None:
        if self.concurrency < 1:
            raise ValueError(f"concurrency must be >= 1, got {self.concurrency}")
        if self.channel_size < 1:
            raise ValueError(f"channel_size must be >= 1, got {self.channel_size}")
        if self.timeout <= 0:
            raise ValueError(f"timeout must be > 0, got {self.timeout}")
        if self.report_interval <= 0:
            raise ValueError(f"report_interval must be > 0, got {self.report_interval}")
        if self.response_snippet_length < 0:
            raise ValueError("response_snippet_length must be >= 0")

    def transport(self) -> httpx.AsyncHTTPTransport:
        """Connection pool for the run. Failed requests are never retried."""
        return httpx.AsyncHTTPTransport(
            verify=self.verify,
            proxy=self.proxy,
            limits=httpx.Limits(max_connections=self.concurrency),
            retries=0,
        )

    def client_kwargs(self, transport: Optional[httpx.AsyncBaseTransport] = None) -> dict:
        """Keyword arguments for httpx.AsyncClient; ``transport`` replaces the default pool."""
        return {
            "transport": transport if transport is not None else self.transport(),
            "follow_redirects": self.follow_redirects,
            "timeout": httpx.Timeout(self.timeout),
        }

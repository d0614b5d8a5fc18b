"""Error taxonomy.

Per-request problems never raise past the dispatcher: network errors and
unexpected statuses become outcomes, configuration errors are logged and
scoped to one target or one request. Only InputError and SinkError end a run.
"""


class FuzzyError(Exception):
    """Base class for every error raised by the fuzzer."""


class InputError(FuzzyError, ValueError):
    """Input or dictionary file is malformed."""

    def __init__(self, message: str, source: str | None = None):
        self.source = source
        if source:
            message = f"{source}: {message}"
        super().__init__(message)


class InvalidTemplateError(FuzzyError, ValueError):
    """Host, base path and endpoint do not join into a valid URL."""

    def __init__(self, endpoint: str, url: str, reason: str):
        self.endpoint = endpoint
        self.url = url
        self.reason = reason
        super().__init__(f"invalid url for endpoint {endpoint!r} ({url!r}): {reason}")


class HeaderResolutionError(FuzzyError, ValueError):
    """A request header has no usable value."""

    def __init__(self, header: str, reason: str):
        self.header = header
        self.reason = reason
        super().__init__(f"header {header!r}: {reason}")


class SinkError(FuzzyError):
    """Failure output file could not be opened or written."""


class ChannelClosedError(FuzzyError):
    """Send attempted on a closed result channel."""

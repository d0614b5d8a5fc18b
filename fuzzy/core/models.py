"""Shared data models for the fuzzer."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Tuple, Union


class HttpMethod(str, Enum):
    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    PATCH = "PATCH"
    DELETE = "DELETE"
    HEAD = "HEAD"
    OPTIONS = "OPTIONS"


@dataclass(frozen=True)
class ExpectedHeader:
    name: str
    value: str


@dataclass(frozen=True)
class QueryParameter:
    name: str
    fuzz: bool = False
    value: Optional[str] = None


@dataclass(frozen=True)
class HeaderParameter:
    name: str
    fuzz: bool = False
    value: Optional[str] = None


@dataclass(frozen=True)
class Target:
    """One endpoint under test. Shared read-only by every task that expands it."""
    endpoint: str
    method: HttpMethod
    expected_status: int
    expected_headers: Tuple[ExpectedHeader, ...] = ()   # informational
    expected_body: str = ""                             # informational
    query_parameters: Tuple[QueryParameter, ...] = ()
    headers: Tuple[HeaderParameter, ...] = ()
    body: str = ""


@dataclass(frozen=True)
class FuzzInput:
    host: str
    base_path: str
    paths: Tuple[Target, ...] = ()


@dataclass(frozen=True)
class DictionaryEntry:
    id: str
    description: str
    values: Tuple[str, ...]


@dataclass(frozen=True)
class FuzzDictionary:
    entries: Tuple[DictionaryEntry, ...] = ()

    def __len__(self):
        return sum(len(e.values) for e in self.entries)

    def merge(self, other: "FuzzDictionary") -> "FuzzDictionary":
        return FuzzDictionary(self.entries + other.entries)


@dataclass(frozen=True)
class FuzzedUrl:
    """A fully resolved request target, traceable back to its dictionary entry."""
    url: str
    description: str
    id: str
    value: Optional[str] = None


@dataclass(frozen=True)
class FailureDetail:
    """Either a network error (no response) or an unexpected status."""
    status_code: Optional[int] = None
    response: Optional[str] = None
    network_error: Optional[str] = None

    @property
    def is_network_error(self) -> bool:
        return self.network_error is not None


@dataclass(frozen=True)
class FuzzSuccess:
    target: FuzzedUrl


@dataclass(frozen=True)
class FuzzFailure:
    target: FuzzedUrl
    detail: FailureDetail = field(default_factory=FailureDetail)

    def to_record(self) -> str:
        """One-line failure record for the output file."""
        d = self.detail
        response = repr(d.response) if d.response is not None else None
        network_error = repr(d.network_error) if d.network_error is not None else None
        return (f"id: {self.target.id}, url: {self.target.url}, "
                f"status_code: {d.status_code}, response: {response}, "
                f"network_error: {network_error}")


FuzzingResult = Union[FuzzSuccess, FuzzFailure]

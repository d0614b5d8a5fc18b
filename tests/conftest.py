"""Shared fixtures for fuzzer tests."""

import httpx
import pytest

from fuzzy.core.config import FuzzerConfig
from fuzzy.core.models import (
    DictionaryEntry, FuzzDictionary, FuzzInput, HttpMethod, QueryParameter, Target,
)


def make_target(endpoint="/test", method=HttpMethod.GET, expected_status=200, **kwargs) -> Target:
    return Target(endpoint=endpoint, method=method, expected_status=expected_status, **kwargs)


def fuzz_query_target(**kwargs) -> Target:
    return make_target(query_parameters=(QueryParameter("q", fuzz=True),), **kwargs)


def make_input(*targets, host="http://example.com", base_path="/api") -> FuzzInput:
    return FuzzInput(host=host, base_path=base_path, paths=tuple(targets))


def make_dictionary(*entries) -> FuzzDictionary:
    return FuzzDictionary(tuple(
        DictionaryEntry(id=i, description=d, values=tuple(v)) for i, d, v in entries))


def status_transport(status: int = 200, text: str = "") -> httpx.MockTransport:
    return httpx.MockTransport(lambda request: httpx.Response(status, text=text))


@pytest.fixture
def dictionary() -> FuzzDictionary:
    return make_dictionary(("1", "d", ["a", "b"]))


@pytest.fixture
def output_file(tmp_path):
    return tmp_path / "output.txt"


@pytest.fixture
def config(output_file) -> FuzzerConfig:
    return FuzzerConfig(output_path=str(output_file), report_interval=60.0)

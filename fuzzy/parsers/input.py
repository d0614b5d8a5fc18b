"""Input file parsing: YAML description of the endpoints to fuzz.

    host: "http://example.com"
    base_path: "/api/v1"
    paths:
      - endpoint: "/users"
        method: GET
        expected_status: 200
        query_parameters:
          - name: q
            fuzz: true
        headers:
          - name: Accept
            value: application/json
            fuzz: false
"""

from typing import Any, Dict, List

import yaml

from fuzzy.core.errors import InputError
from fuzzy.core.models import (
    ExpectedHeader, FuzzInput, HeaderParameter, HttpMethod, QueryParameter, Target,
)


def _require(data: Dict, key: str, where: str, source: str | None):
    if key not in data or data[key] is None:
        raise InputError(f"{where}: missing required field '{key}'", source)
    return data[key]


def _list(data: Dict, key: str, where: str, source: str | None) -> List:
    value = data.get(key) or []
    if not isinstance(value, list):
        raise InputError(f"{where}: '{key}' must be a list", source)
    return value


def _str(value: Any) -> str:
    return "" if value is None else str(value)


def _parameter(cls, raw: Any, where: str, source: str | None):
    if not isinstance(raw, dict):
        raise InputError(f"{where}: parameter must be a mapping", source)
    name = _str(_require(raw, "name", where, source))
    value = raw.get("value")
    return cls(name=name, fuzz=bool(raw.get("fuzz", False)),
               value=None if value is None else str(value))


def parse_target(raw: Any, where: str = "path", source: str | None = None) -> Target:
    if not isinstance(raw, dict):
        raise InputError(f"{where}: must be a mapping", source)

    endpoint = _str(_require(raw, "endpoint", where, source))
    method_raw = _str(_require(raw, "method", where, source)).upper()
    try:
        method = HttpMethod(method_raw)
    except ValueError:
        raise InputError(f"{where}: unknown method {method_raw!r}", source) from None

    status_raw = _require(raw, "expected_status", where, source)
    try:
        expected_status = int(status_raw)
    except (TypeError, ValueError):
        raise InputError(f"{where}: expected_status must be an integer", source) from None
    if not 100 <= expected_status <= 599:
        raise InputError(f"{where}: expected_status {expected_status} out of range", source)

    expected_headers = []
    for h in _list(raw, "expected_headers", where, source):
        if not isinstance(h, dict):
            raise InputError(f"{where}: expected header must be a mapping", source)
        expected_headers.append(ExpectedHeader(
            name=_str(_require(h, "name", where, source)), value=_str(h.get("value"))))

    return Target(
        endpoint=endpoint,
        method=method,
        expected_status=expected_status,
        expected_headers=tuple(expected_headers),
        expected_body=_str(raw.get("expected_body")),
        query_parameters=tuple(
            _parameter(QueryParameter, p, f"{where}.query_parameters", source)
            for p in _list(raw, "query_parameters", where, source)),
        headers=tuple(
            _parameter(HeaderParameter, p, f"{where}.headers", source)
            for p in _list(raw, "headers", where, source)),
        body=_str(raw.get("body")),
    )


def parse_input(data: Any, source: str | None = None) -> FuzzInput:
    if not isinstance(data, dict):
        raise InputError("input must be a mapping", source)
    host = _str(_require(data, "host", "input", source))
    base_path = _str(data.get("base_path"))
    paths = tuple(
        parse_target(raw, f"paths[{i}]", source)
        for i, raw in enumerate(_list(data, "paths", "input", source)))
    return FuzzInput(host=host, base_path=base_path, paths=paths)


def load_input(filename: str) -> FuzzInput:
    try:
        with open(filename, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except OSError as exc:
        raise InputError(f"cannot read input file: {exc}", filename) from exc
    except yaml.YAMLError as exc:
        raise InputError(f"invalid YAML: {exc}", filename) from exc
    return parse_input(data, filename)

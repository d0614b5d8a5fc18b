import json
from pathlib import Path

import pytest

from fuzzy.core.errors import InputError
from fuzzy.core.models import HeaderParameter, HttpMethod, QueryParameter
from fuzzy.parsers.dictionary import (
    dictionary_files, load_dictionaries, load_dictionary_file, parse_dictionary,
)
from fuzzy.parsers.input import load_input, parse_input, parse_target

INPUT_YAML = """
host: "http://example.com"
base_path: "/api/v1"
paths:
  - endpoint: "/test"
    method: GET
    expected_status: 200
    expected_headers:
      - name: "Content-Type"
        value: "application/json"
    expected_body: ""
    query_parameters:
      - name: "q"
        fuzz: true
      - name: "limit"
        fuzz: false
        value: 10
    headers:
      - name: "Accept"
        value: "application/json"
        fuzz: false
    body: ""
"""

DICTIONARY_YAML = """
data:
  - id: "1"
    description: "first"
    values: ["a", "b"]
"""


class TestParseInput:
    def test_full_file(self, tmp_path):
        f = tmp_path / "input.yml"
        f.write_text(INPUT_YAML)
        fuzz_input = load_input(str(f))

        assert fuzz_input.host == "http://example.com"
        assert fuzz_input.base_path == "/api/v1"
        [target] = fuzz_input.paths
        assert target.endpoint == "/test"
        assert target.method == HttpMethod.GET
        assert target.expected_status == 200
        assert target.expected_headers[0].name == "Content-Type"
        assert target.query_parameters == (
            QueryParameter("q", fuzz=True),
            QueryParameter("limit", fuzz=False, value="10"),
        )
        assert target.headers == (HeaderParameter("Accept", value="application/json"),)

    def test_optional_fields_default(self):
        target = parse_target({"endpoint": "/x", "method": "post", "expected_status": "201"})
        assert target.method == HttpMethod.POST
        assert target.expected_status == 201
        assert target.query_parameters == ()
        assert target.headers == ()
        assert target.body == ""

    def test_no_paths(self):
        fuzz_input = parse_input({"host": "http://example.com", "base_path": "/", "paths": []})
        assert fuzz_input.paths == ()

    @pytest.mark.parametrize("raw, message", [
        ({"method": "GET", "expected_status": 200}, "endpoint"),
        ({"endpoint": "/x", "expected_status": 200}, "method"),
        ({"endpoint": "/x", "method": "TRACE", "expected_status": 200}, "unknown method"),
        ({"endpoint": "/x", "method": "GET"}, "expected_status"),
        ({"endpoint": "/x", "method": "GET", "expected_status": "ok"}, "integer"),
        ({"endpoint": "/x", "method": "GET", "expected_status": 999}, "out of range"),
        ({"endpoint": "/x", "method": "GET", "expected_status": 200,
          "query_parameters": "q"}, "must be a list"),
        ({"endpoint": "/x", "method": "GET", "expected_status": 200,
          "headers": [{"fuzz": True}]}, "name"),
    ])
    def test_invalid_target(self, raw, message):
        with pytest.raises(InputError, match=message):
            parse_target(raw)

    def test_missing_host(self):
        with pytest.raises(InputError, match="host"):
            parse_input({"paths": []})

    def test_not_a_mapping(self):
        with pytest.raises(InputError):
            parse_input(["a", "b"])

    def test_error_names_the_file(self, tmp_path):
        f = tmp_path / "bad.yml"
        f.write_text("host: [unclosed")
        with pytest.raises(InputError) as exc:
            load_input(str(f))
        assert exc.value.source == str(f)

    def test_missing_file(self, tmp_path):
        with pytest.raises(InputError):
            load_input(str(tmp_path / "nope.yml"))


class TestDictionary:
    def test_parse(self):
        d = parse_dictionary({"data": [{"id": 7, "description": "n", "values": [1, "x", None]}]})
        [entry] = d.entries
        assert entry.id == "7"
        assert entry.values == ("1", "x", "")
        assert len(d) == 3

    @pytest.mark.parametrize("data", [
        None,
        {"data": "nope"},
        {"data": [{"description": "no id", "values": ["a"]}]},
        {"data": [{"id": "1", "values": []}]},
        {"data": [{"id": "1"}]},
    ])
    def test_invalid(self, data):
        with pytest.raises(InputError):
            parse_dictionary(data)

    def test_json_file(self, tmp_path):
        f = tmp_path / "dict.json"
        f.write_text(json.dumps({"data": [{"id": "j", "description": "", "values": ["v"]}]}))
        assert load_dictionary_file(str(f)).entries[0].id == "j"

    def test_directory_merge_is_sorted(self, tmp_path):
        (tmp_path / "b.yml").write_text(
            'data: [{id: "b", description: "", values: ["2"]}]')
        (tmp_path / "a.yaml").write_text(
            'data: [{id: "a", description: "", values: ["1"]}]')
        (tmp_path / "notes.txt").write_text("ignored")

        assert [p.rsplit("/", 1)[-1] for p in dictionary_files(str(tmp_path))] == \
            ["a.yaml", "b.yml"]
        merged = load_dictionaries([str(tmp_path)])
        assert [e.id for e in merged.entries] == ["a", "b"]

    def test_files_and_directories_combined(self, tmp_path):
        single = tmp_path / "single.yml"
        single.write_text(DICTIONARY_YAML)
        folder = tmp_path / "more"
        folder.mkdir()
        (folder / "x.yml").write_text('data: [{id: "x", description: "", values: ["9"]}]')

        merged = load_dictionaries([str(single), str(folder)])
        assert [e.id for e in merged.entries] == ["1", "x"]
        assert len(merged) == 3

    def test_missing_location(self, tmp_path):
        with pytest.raises(InputError):
            load_dictionaries([str(tmp_path / "nope")])

    def test_empty_directory(self, tmp_path):
        with pytest.raises(InputError, match="no dictionary entries"):
            load_dictionaries([str(tmp_path)])

    def test_bundled_dictionaries_load(self):
        merged = load_dictionaries([str(Path(__file__).parent.parent / "dictionary")])
        assert len(merged.entries) > 0

import json

import pytest

from app.services.fhir.ndjson import NdjsonParseError, iter_ndjson_lines, parse_ndjson


def test_parse_ndjson_skips_blank_lines() -> None:
    text = '{"id": "1"}\n\n   \n{"id": "2"}\r\n'

    assert parse_ndjson(text) == [{"id": "1"}, {"id": "2"}]


def test_parse_ndjson_empty_payload() -> None:
    assert parse_ndjson("") == []


def test_parse_ndjson_invalid_line_raises() -> None:
    with pytest.raises(NdjsonParseError) as e:
        parse_ndjson('{"id": "1"}\n{not json}\n')

    assert "line 2" in str(e.value)


def test_parse_ndjson_non_object_raises() -> None:
    with pytest.raises(NdjsonParseError):
        parse_ndjson('[1, 2, 3]\n')


def test_iter_ndjson_lines_writes_one_object_per_line() -> None:
    lines = list(iter_ndjson_lines([{"id": "1"}, {"id": "2", "x": [1]}]))

    assert len(lines) == 2
    assert all(line.endswith("\n") and line.count("\n") == 1 for line in lines)
    assert json.loads(lines[1]) == {"id": "2", "x": [1]}

import json
from typing import Any, Dict, Iterable, Iterator, List


class NdjsonParseError(ValueError):
    pass


def parse_ndjson(text: str) -> List[Dict[str, Any]]:
    """
    Splits newline-delimited JSON into one object per non-blank line.
    """
    resources: List[Dict[str, Any]] = []
    for line_number, line in enumerate(text.splitlines(), start=1):
        if not line.strip():
            continue
        try:
            data = json.loads(line)
        except json.JSONDecodeError as e:
            raise NdjsonParseError(f"Invalid JSON on line {line_number}: {e}") from e

        if not isinstance(data, dict):
            raise NdjsonParseError(f"Line {line_number} is not a JSON object")
        resources.append(data)

    return resources


def iter_ndjson_lines(resources: Iterable[Dict[str, Any]]) -> Iterator[str]:
    for resource in resources:
        yield json.dumps(resource, separators=(",", ":")) + "\n"

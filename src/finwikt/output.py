"""
output.py — JSON serialization of extraction results.

Models become plain dicts with the dataclass field names as keys. The
content of a section is tagged with its kind so that consumers can tell an
empty section from one whose items are all filtered out:

    {"heading": "Noun", "content": {"kind": "definitions", "definitions": [...]}, ...}

JSON is written with orjson, one result per line for JSONL files.
"""

import dataclasses
import logging
from enum import Enum
from pathlib import Path
from typing import Any, Iterable

import orjson

from finwikt.models import (
    Definitions,
    Empty,
    InflectionBlock,
    Items,
    PageResult,
)


logger = logging.getLogger(__name__)


def _content_to_dict(content) -> dict:
    if isinstance(content, Definitions):
        return {"kind": "definitions", "definitions": [to_dict(d) for d in content.definitions]}
    if isinstance(content, Items):
        units = []
        for unit in content.units:
            unit_dict = to_dict(unit)
            unit_dict["kind"] = "table" if isinstance(unit, InflectionBlock) else "item"
            units.append(unit_dict)
        return {"kind": "items", "units": units}
    if isinstance(content, Empty):
        return {"kind": "empty"}
    raise TypeError(f"not a content value: {content!r}")


def to_dict(obj: Any) -> Any:
    """Convert a model object (or a tuple/list of them) into JSON-ready values."""
    if isinstance(obj, (Definitions, Items, Empty)):
        return _content_to_dict(obj)
    if isinstance(obj, Enum):
        return obj.value
    if isinstance(obj, (list, tuple)):
        return [to_dict(o) for o in obj]
    if dataclasses.is_dataclass(obj) and not isinstance(obj, type):
        return {f.name: to_dict(getattr(obj, f.name)) for f in dataclasses.fields(obj)}
    return obj


def dumps(result: PageResult, *, indent: bool = False, sort_keys: bool = False) -> bytes:
    """Serialize one result to JSON bytes."""
    option = 0
    if indent:
        option |= orjson.OPT_INDENT_2
    if sort_keys:
        option |= orjson.OPT_SORT_KEYS
    return orjson.dumps(to_dict(result), option=option)


def write_jsonl(results: Iterable[PageResult], path: Path) -> int:
    """Write results to a JSONL file, one per line. Returns the line count."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    count = 0
    with open(path, "wb") as f:
        for result in results:
            f.write(dumps(result) + b"\n")
            count += 1
    logger.info(f"Wrote {count:,} results to {path}")
    return count

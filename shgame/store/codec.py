# shgame/store/codec.py
from __future__ import annotations

import json
from enum import Enum
from typing import Any, List, Union


class FieldType(str, Enum):
    INT = "int"
    BOOL = "bool"
    STRING = "string"
    CSV = "csv"  # comma-separated ids
    JSON = "json"


def parse_csv(raw: str) -> List[Union[int, str]]:
    """Split a comma list; integer-looking items come back as ints."""
    if raw == "":
        return []
    out: List[Union[int, str]] = []
    for item in raw.split(","):
        if item.lstrip("-").isdigit():
            out.append(int(item))
        else:
            out.append(item)
    return out


def encode(ftype: FieldType, value: Any) -> str:
    if ftype == FieldType.CSV:
        return ",".join(str(v) for v in (value or []))
    if ftype in (FieldType.INT, FieldType.BOOL, FieldType.JSON):
        return json.dumps(value)
    return "" if value is None else str(value)


def decode(ftype: FieldType, raw: str) -> Any:
    if ftype == FieldType.CSV:
        return parse_csv(raw)
    if ftype in (FieldType.INT, FieldType.BOOL, FieldType.JSON):
        return json.loads(raw)
    return raw

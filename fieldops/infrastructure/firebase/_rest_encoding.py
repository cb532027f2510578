"""Python values <-> Firestore REST typed values.

Only the types fieldops documents hold are supported: None, bool, int,
float, str, bytes, datetime, str-valued Enums (stored by value), lists and
string-keyed dicts. Naive datetimes are taken as UTC.
"""

import base64
import re
from collections.abc import Callable
from datetime import UTC, datetime
from enum import Enum
from typing import Any

# Firestore timestamps carry up to nanoseconds; datetime keeps microseconds.
_FRACTION_RE = re.compile(r"\.(\d{6})\d+")


def _timestamp(v: datetime) -> str:
    v = v.replace(tzinfo=UTC) if v.tzinfo is None else v.astimezone(UTC)
    return v.strftime("%Y-%m-%dT%H:%M:%S.%fZ")


def encode_value(v: Any) -> dict:
    # bool before int: bool is an int subclass.
    if v is None:
        return {"nullValue": None}
    if isinstance(v, Enum):
        return encode_value(v.value)
    if isinstance(v, bool):
        return {"booleanValue": v}
    if isinstance(v, int):
        return {"integerValue": str(v)}
    if isinstance(v, float):
        return {"doubleValue": v}
    if isinstance(v, str):
        return {"stringValue": v}
    if isinstance(v, datetime):
        return {"timestampValue": _timestamp(v)}
    if isinstance(v, bytes):
        return {"bytesValue": base64.standard_b64encode(v).decode("ascii")}
    if isinstance(v, (list, tuple)):
        return {"arrayValue": {"values": [encode_value(x) for x in v]}}
    if isinstance(v, dict):
        return {"mapValue": {"fields": {str(k): encode_value(x) for k, x in v.items()}}}
    raise TypeError(f"Unsupported Firestore value type: {type(v)}")


def encode_document(data: dict[str, Any]) -> dict:
    """Build a REST Document body: ``{"fields": {...}}``."""
    return {"fields": {k: encode_value(v) for k, v in data.items()}}


def _parse_timestamp(raw: str) -> datetime:
    return datetime.fromisoformat(_FRACTION_RE.sub(r".\1", raw).replace("Z", "+00:00"))


_DECODERS: dict[str, Callable[[Any], Any]] = {
    "nullValue": lambda _: None,
    "booleanValue": bool,
    "integerValue": int,
    "doubleValue": float,
    "stringValue": str,
    "timestampValue": _parse_timestamp,
    "bytesValue": base64.standard_b64decode,
    "arrayValue": lambda a: [decode_value(x) for x in (a or {}).get("values") or []],
    "mapValue": lambda m: decode_document((m or {}).get("fields")),
}


def decode_value(obj: dict) -> Any:
    """Decode one typed value; unknown kinds (geo points, references) decode to None."""
    for kind, value in obj.items():
        decoder = _DECODERS.get(kind)
        if decoder is not None:
            return decoder(value)
    return None


def decode_document(fields: dict | None) -> dict:
    """Decode a Document's ``fields`` map (not the whole Document)."""
    return {k: decode_value(v) for k, v in (fields or {}).items()}

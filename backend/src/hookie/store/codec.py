"""JSON codec for documents stored in SQL JSON columns.

JSON has no temporal, decimal, UUID or binary types. Such values are written
as single-key tagged objects and decoded back on read, so a snapshot compares
equal to itself after a round trip through the store:

    datetime(2024, 1, 2, 3, 4)  <->  {"$date": "2024-01-02T03:04:00"}
"""

from __future__ import annotations

import base64
import json
import uuid
from datetime import date, datetime, time
from decimal import Decimal
from typing import Any

_DECODERS = {
    "$date": datetime.fromisoformat,
    "$dateOnly": date.fromisoformat,
    "$time": time.fromisoformat,
    "$decimal": Decimal,
    "$uuid": uuid.UUID,
    "$binary": base64.b64decode,
}


def encode_value(value: Any) -> Any:
    """Convert a document value into JSON-safe form."""
    if isinstance(value, dict):
        return {str(k): encode_value(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [encode_value(v) for v in value]
    if isinstance(value, datetime):
        return {"$date": value.isoformat()}
    if isinstance(value, date):
        return {"$dateOnly": value.isoformat()}
    if isinstance(value, time):
        return {"$time": value.isoformat()}
    if isinstance(value, Decimal):
        return {"$decimal": str(value)}
    if isinstance(value, uuid.UUID):
        return {"$uuid": str(value)}
    if isinstance(value, (bytes, bytearray)):
        return {"$binary": base64.b64encode(bytes(value)).decode("ascii")}
    return value


def decode_value(value: Any) -> Any:
    """Reverse ``encode_value``."""
    if isinstance(value, dict):
        if len(value) == 1:
            (tag, raw), = value.items()
            decoder = _DECODERS.get(tag)
            if decoder is not None and isinstance(raw, str):
                return decoder(raw)
        return {k: decode_value(v) for k, v in value.items()}
    if isinstance(value, list):
        return [decode_value(v) for v in value]
    return value


def dumps(value: Any) -> str:
    return json.dumps(encode_value(value))


def loads(text: str) -> Any:
    return decode_value(json.loads(text))

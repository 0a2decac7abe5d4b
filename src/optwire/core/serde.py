"""
Wire JSON text for projected payloads.

`json_dumps_wire` is the body a JSON transport sends: compact, keys in declaration order,
non-ASCII kept as-is. Two projections of the same record dump to byte-identical text.
Responses are parsed by the transport and handed to `OptionsRecord.from_payload`.
"""

from __future__ import annotations

import json

from .typing import Payload

__all__ = [
    "json_dumps_wire",
]


def json_dumps_wire(payload: Payload) -> str:
    """
    Serialize a payload to compact JSON, preserving key order.

    Raises:
        ValueError: If the payload holds a non-finite float.
    """
    return json.dumps(payload, separators=(",", ":"), ensure_ascii=False, allow_nan=False)

"""
Idempotency keys for projected payloads.

A transport that retries a partial update must resend the same key with the same body.
`idempotency_key` derives that key from what the payload says, not from how its keys
happen to be ordered, and scopes it by a namespace (the record class name when called from
`project_with_advisories`) so two request kinds with equal bodies never share a key.

Notes:
    - Payload text is hashed with sorted keys at every depth; wire dumps for sending keep
      declaration order and live in `optwire.core.serde`.
    - Non-finite floats cannot occur in a projected payload; they are rejected here too.
"""

from __future__ import annotations

import hashlib
import json
from collections.abc import Mapping
from typing import Any

__all__ = [
    "idempotency_key",
]

_NAMESPACE_SEPARATOR = b"\x00"


def _sorted_text(payload: Mapping[str, Any]) -> bytes:
    return json.dumps(
        dict(payload), sort_keys=True, separators=(",", ":"), ensure_ascii=False, allow_nan=False
    ).encode("utf-8")


def idempotency_key(payload: Mapping[str, Any], *, namespace: str = "") -> str:
    """
    Derive a stable SHA-256 key for a projected payload.

    Args:
        payload (Mapping[str, Any]): Output of `optwire.core.projection.project`.
        namespace (str): Request kind the payload belongs to.

    Returns:
        str: 64-character hex digest.

    Examples:
        >>> idempotency_key({"a": "1", "b": "2"}) == idempotency_key({"b": "2", "a": "1"})
        True
        >>> idempotency_key({}, namespace="Create") == idempotency_key({}, namespace="Update")
        False
    """
    digest = hashlib.sha256(namespace.encode("utf-8"))
    digest.update(_NAMESPACE_SEPARATOR)
    digest.update(_sorted_text(payload))
    return digest.hexdigest()

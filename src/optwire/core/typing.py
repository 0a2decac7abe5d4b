"""
Lightweight typing aliases used across kinds, records, and the projection engine.

This module contains no runtime logic and is zero-IO.

Examples:
    >>> from optwire.core.typing import Payload, WireName
    >>> def single(name: WireName, value: int) -> Payload:
    ...     return {name: value}
    >>> single(WireName("quantity"), 2)
    {'quantity': 2}
"""

from __future__ import annotations

from typing import Any, NewType, Union

__all__ = [
    "WireName",
    "EncodedValue",
    "Payload",
    "JsonDict",
]

WireName = NewType("WireName", str)

# Leaves the transport must serialize faithfully: str, number, bool, null, mapping, list.
EncodedValue = Union[str, int, float, bool, None, dict[str, Any], list[Any]]

# Ordered wire-name -> encoded value mapping produced by a projection.
Payload = dict[str, EncodedValue]

JsonDict = dict[str, Any]

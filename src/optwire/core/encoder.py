"""
Polymorphic value encoder: kind-directed encoding to wire values and structural decoding back.

Responsibilities
- Encode a stored field value according to its declared kind (`encode_value`).
- Encode union fields by dispatching on the populated branch, never on branch order
  (`encode_either`).
- Decode raw wire values structurally, without coercing one branch into another
  (`decode_value`, `decode_either`).
- Convert timestamps to and from integer epoch seconds.

Timestamp policy
- Encoding truncates sub-second precision toward zero and drops the timezone.
- Decoding attaches UTC. A datetime in another zone decodes to the same instant in UTC,
  so `decode(encode(dt)) == dt` holds as instants but `tzinfo` differs; this lossy transform
  is declared by `optwire.core.constants.TIMESTAMP_IS_LOSSY`.

Notes
- Nested records encode through `optwire.core.projection.project_fields`, so nested
  exclusivity and constraint checks run as part of the parent's projection.
- Decoding a nested mapping rebuilds the record through its typed setters.

Examples
>>> from datetime import datetime, timezone
>>> encode_timestamp(datetime(2024, 1, 1, tzinfo=timezone.utc))
1704067200
>>> decode_timestamp(1704067200)
datetime.datetime(2024, 1, 1, 0, 0, tzinfo=datetime.timezone.utc)
"""

from __future__ import annotations

from collections.abc import Mapping
from datetime import datetime, timedelta
from decimal import Decimal
from enum import Enum
from typing import Any

from .constants import DECODE_TIMEZONE, EPOCH
from .errors import InvalidFieldCombination, InvalidFieldType, UnrecognizedUnionVariant
from .grammar import CLEAR, sentinel_value
from .kinds import (
    ClearableNestedObject,
    Either,
    ListOf,
    MapOf,
    NestedObject,
    Scalar,
    Sentinel,
    Timestamp,
    ValueKind,
    Variant,
)
from .typing import EncodedValue

__all__ = [
    "Variant",
    "encode_value",
    "encode_either",
    "decode_value",
    "decode_either",
    "encode_timestamp",
    "decode_timestamp",
]


def encode_timestamp(value: datetime) -> int:
    """
    Convert an aware datetime to integer seconds since the Unix epoch.

    Args:
        value (datetime): Timezone-aware moment.

    Returns:
        int: Whole seconds since 1970-01-01T00:00:00Z, truncated toward zero.

    Raises:
        InvalidFieldType: If value is naive.
    """
    if value.tzinfo is None or value.utcoffset() is None:
        raise InvalidFieldType("cannot encode a naive datetime")
    delta = value - EPOCH
    seconds = delta.days * 86400 + delta.seconds
    if seconds < 0 and delta.microseconds:
        seconds += 1
    return seconds


def decode_timestamp(raw: Any) -> datetime:
    """
    Convert integer epoch seconds to a UTC datetime.

    Raises:
        InvalidFieldType: If raw is not an int (bool and float are rejected), or lies outside
            the range a datetime can represent.
    """
    if not isinstance(raw, int) or isinstance(raw, bool):
        raise InvalidFieldType(f"expected integer epoch seconds, got {type(raw).__name__}")
    try:
        moment = EPOCH + timedelta(seconds=raw)
    except (OverflowError, ValueError) as exc:
        raise InvalidFieldType(f"epoch seconds {raw} out of datetime range") from exc
    return moment.astimezone(DECODE_TIMEZONE)


def _encode_scalar(kind: Scalar, value: Any) -> EncodedValue:
    value = kind.validate(value)
    if isinstance(value, Decimal):
        if value == value.to_integral_value():
            return int(value)
        return float(value)
    return value


def encode_either(kind: Either, branches: Mapping[int, Any]) -> EncodedValue:
    """
    Encode a union field from its populated branches.

    Args:
        kind (Either): Declared union kind.
        branches (Mapping[int, Any]): Branch index -> stored value for every populated branch.

    Returns:
        EncodedValue: Wire value of the single populated branch.

    Raises:
        InvalidFieldCombination: If zero or several branches are populated.
    """
    if len(branches) != 1:
        populated = ", ".join(kind.branches[i].describe() for i in sorted(branches))
        raise InvalidFieldCombination(
            f"exactly one branch of {kind.describe()} must be set (populated: {populated or 'none'})"
        )
    ((index, value),) = branches.items()
    return encode_value(kind.branches[index], value)


def encode_value(kind: ValueKind, value: Any) -> EncodedValue:
    """
    Encode a stored field value according to its declared kind.

    Args:
        kind (ValueKind): Declared kind.
        value (Any): Value as stored by the typed setters. For Either, a Variant or a
            mapping of branch index -> value.

    Returns:
        EncodedValue: str, int, float, bool, None, dict, or list.

    Raises:
        UnencodableValue: If a scalar violates its declared constraints.
        InvalidFieldCombination: If a union has zero or several populated branches, or a
            nested record violates its own combination rules.
    """
    if isinstance(kind, Scalar):
        return _encode_scalar(kind, value)
    if isinstance(kind, Timestamp):
        return encode_timestamp(value)
    if isinstance(kind, Sentinel):
        return sentinel_value(value)
    if isinstance(kind, NestedObject):
        from .projection import project_fields

        return project_fields(value)
    if isinstance(kind, ListOf):
        return [encode_value(kind.item, v) for v in value]
    if isinstance(kind, MapOf):
        return dict(value)
    if isinstance(kind, Either):
        if isinstance(value, Variant):
            return encode_either(kind, {value.branch: value.value})
        return encode_either(kind, value)
    raise InvalidFieldType(f"unknown value kind {kind!r}")


def _decode_scalar(kind: Scalar, raw: Any) -> Any:
    if kind.py_type is Decimal:
        if isinstance(raw, (int, float)) and not isinstance(raw, bool):
            return Decimal(str(raw))
        if isinstance(raw, str):
            try:
                return Decimal(raw)
            except ArithmeticError as exc:
                raise InvalidFieldType(f"{raw!r} is not a decimal number") from exc
        raise InvalidFieldType(f"expected decimal number, got {type(raw).__name__}")
    return kind.accept(raw)


def decode_either(kind: Either, raw: Any) -> Variant:
    """
    Decode a raw wire value into the single union branch it structurally matches.

    Returns:
        Variant: Branch index and decoded value.

    Raises:
        UnrecognizedUnionVariant: If raw matches no branch, or matches several.
    """
    matches: list[Variant] = []
    for i, branch in enumerate(kind.branches):
        try:
            matches.append(Variant(i, decode_value(branch, raw)))
        except (InvalidFieldType, UnrecognizedUnionVariant):
            continue
    if not matches:
        raise UnrecognizedUnionVariant(f"{raw!r} matches no branch of {kind.describe()}")
    if len(matches) > 1:
        raise UnrecognizedUnionVariant(f"{raw!r} is ambiguous for {kind.describe()}")
    return matches[0]


def decode_value(kind: ValueKind, raw: Any) -> Any:
    """
    Decode a raw wire value into the Python value a typed setter would store.

    Raises:
        InvalidFieldType: If raw does not have the wire shape of the kind.
        UnrecognizedUnionVariant: For Either kinds whose raw value matches no branch.
    """
    if isinstance(kind, Scalar):
        return _decode_scalar(kind, raw)
    if isinstance(kind, Timestamp):
        return decode_timestamp(raw)
    if isinstance(kind, Sentinel):
        if isinstance(raw, Enum):
            raise InvalidFieldType("expected a wire token, got an enum member")
        return kind.accept(raw)
    if isinstance(kind, ClearableNestedObject) and not isinstance(raw, Mapping):
        if raw == kind.clear_value and type(raw) is type(kind.clear_value):
            return CLEAR
    if isinstance(kind, NestedObject):
        if not isinstance(raw, Mapping):
            raise InvalidFieldType(f"expected mapping for {kind.describe()}, got {type(raw).__name__}")
        return kind.record_cls.from_payload(raw)
    if isinstance(kind, ListOf):
        if not isinstance(raw, list):
            raise InvalidFieldType(f"expected list, got {type(raw).__name__}")
        return tuple(decode_value(kind.item, v) for v in raw)
    if isinstance(kind, MapOf):
        return kind.accept(raw)
    if isinstance(kind, Either):
        return decode_either(kind, raw)
    raise InvalidFieldType(f"unknown value kind {kind!r}")

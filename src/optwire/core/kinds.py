"""
Frozen value-kind descriptors for record fields.

Each field declaration carries exactly one kind. Kinds are resolved once, when the record
class is created, and are consulted by the typed setters (`accept`) and by the encoder
(`optwire.core.encoder`). The set of kinds is closed:

| Kind                            | Python value accepted by setters     | Wire value
|---------------------------------|--------------------------------------|-------------------------------
| Scalar(bool | int | str)        | exact type (bool is never an int)    | same
| Scalar(Decimal, ge, le, places) | Decimal, int or float (-> Decimal)   | int when integral, else float
| Timestamp()                     | timezone-aware datetime              | int seconds since epoch
| Sentinel(EnumCls)               | enum member or its literal token     | literal token
| NestedObject(RecordCls)         | RecordCls instance                   | nested mapping
| ClearableNestedObject(...)      | RecordCls instance or CLEAR          | nested mapping or clear value
| ListOf(kind)                    | list or tuple of accepted items      | list
| MapOf()                         | mapping of str -> str                | mapping
| Either(kind, kind, ...)         | value accepted by exactly one branch | the branch's wire value

Notes:
    - Numeric constraints on Scalar are checked at encode time through a pydantic
      TypeAdapter built when the kind is constructed, so records may hold out-of-range
      numbers while they are being assembled.
    - Either never guesses: a value accepted by two branches is rejected as ambiguous and
      must be placed with `OptionsRecord.set_branch`.
"""

from __future__ import annotations

import math
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Annotated, Any, Union

from pydantic import Field, TypeAdapter, ValidationError

from .constants import DEFAULT_CLEAR_VALUE
from .errors import DeclarationError, InvalidFieldType, UnencodableValue
from .grammar import sentinel_from_value

__all__ = [
    "Variant",
    "Scalar",
    "Timestamp",
    "Sentinel",
    "NestedObject",
    "ClearableNestedObject",
    "ListOf",
    "MapOf",
    "Either",
    "ValueKind",
    "KIND_TYPES",
]

_SCALAR_TYPES: tuple[type, ...] = (bool, int, str, Decimal)


@dataclass(frozen=True)
class Variant:
    """
    Tagged value of an Either kind.

    Attributes:
        branch (int): Index of the populated branch in `Either.branches`.
        value (Any): Value in the branch's own Python representation.
    """

    branch: int
    value: Any


@dataclass(frozen=True)
class Scalar:
    """
    Primitive value, optionally bounded.

    Attributes:
        py_type (type): One of bool, int, str, Decimal.
        ge (int | Decimal | None): Inclusive lower bound (numeric types only).
        le (int | Decimal | None): Inclusive upper bound (numeric types only).
        decimal_places (int | None): Maximum decimal places (Decimal only).

    Raises:
        DeclarationError: On an unsupported type or constraints that do not apply to it.

    Examples:
        >>> from decimal import Decimal
        >>> pct = Scalar(Decimal, ge=0, le=100, decimal_places=2)
        >>> pct.accept(12.5)
        Decimal('12.5')
    """

    py_type: type
    ge: int | Decimal | None = None
    le: int | Decimal | None = None
    decimal_places: int | None = None
    _adapter: TypeAdapter[Any] | None = field(default=None, init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        if self.py_type not in _SCALAR_TYPES:
            raise DeclarationError(
                f"Scalar type must be one of bool, int, str, Decimal (got {self.py_type!r})"
            )
        constraints: dict[str, Any] = {
            k: v
            for k, v in (("ge", self.ge), ("le", self.le), ("decimal_places", self.decimal_places))
            if v is not None
        }
        if not constraints:
            return
        if self.py_type not in (int, Decimal):
            raise DeclarationError("numeric constraints apply only to int and Decimal scalars")
        if self.decimal_places is not None and self.py_type is not Decimal:
            raise DeclarationError("decimal_places applies only to Decimal scalars")
        adapter = TypeAdapter(Annotated[self.py_type, Field(**constraints)])
        object.__setattr__(self, "_adapter", adapter)

    def describe(self) -> str:
        return self.py_type.__name__

    def accept(self, value: Any) -> Any:
        if self.py_type is bool:
            if isinstance(value, bool):
                return value
        elif self.py_type is int:
            if isinstance(value, int) and not isinstance(value, bool):
                return value
        elif self.py_type is str:
            if isinstance(value, str):
                return value
        else:
            if isinstance(value, Decimal):
                return value
            if isinstance(value, int) and not isinstance(value, bool):
                return Decimal(value)
            if isinstance(value, float):
                return Decimal(str(value))
        raise InvalidFieldType(f"expected {self.describe()}, got {type(value).__name__}")

    def validate(self, value: Any) -> Any:
        """Check declared constraints on a stored value; raises UnencodableValue."""
        if isinstance(value, Decimal) and not value.is_finite():
            raise UnencodableValue(f"{value!r} is not a finite number")
        if isinstance(value, float) and not math.isfinite(value):
            raise UnencodableValue(f"{value!r} is not a finite number")
        if self._adapter is None:
            return value
        try:
            return self._adapter.validate_python(value)
        except ValidationError as exc:
            messages = "; ".join(err["msg"] for err in exc.errors())
            raise UnencodableValue(f"{value} violates constraints: {messages}") from exc


@dataclass(frozen=True)
class Timestamp:
    """Calendar moment; setters require a timezone-aware datetime."""

    def describe(self) -> str:
        return "timestamp"

    def accept(self, value: Any) -> datetime:
        if not isinstance(value, datetime):
            raise InvalidFieldType(f"expected timezone-aware datetime, got {type(value).__name__}")
        if value.tzinfo is None or value.utcoffset() is None:
            raise InvalidFieldType("expected timezone-aware datetime, got naive datetime")
        return value


@dataclass(frozen=True)
class Sentinel:
    """
    Closed set of symbolic string tokens backed by an Enum.

    Attributes:
        enum_cls (type[Enum]): Enum whose member values are the wire tokens.
    """

    enum_cls: type[Enum]

    def __post_init__(self) -> None:
        if not (isinstance(self.enum_cls, type) and issubclass(self.enum_cls, Enum)):
            raise DeclarationError(f"Sentinel requires an Enum class (got {self.enum_cls!r})")
        if not all(isinstance(m.value, str) for m in self.enum_cls):
            raise DeclarationError(f"{self.enum_cls.__name__} values must be string tokens")

    def describe(self) -> str:
        return self.enum_cls.__name__

    def accept(self, value: Any) -> Enum:
        if isinstance(value, self.enum_cls):
            return value
        if isinstance(value, str):
            try:
                return sentinel_from_value(self.enum_cls, value)
            except ValueError as exc:
                raise InvalidFieldType(str(exc)) from exc
        raise InvalidFieldType(f"expected {self.describe()}, got {type(value).__name__}")


@dataclass(frozen=True)
class NestedObject:
    """
    Nested options record, projected recursively.

    Attributes:
        record_cls (type): OptionsRecord subclass of the nested value.
    """

    record_cls: type

    def describe(self) -> str:
        return self.record_cls.__name__

    def accept(self, value: Any) -> Any:
        if isinstance(value, self.record_cls):
            return value
        raise InvalidFieldType(f"expected {self.describe()}, got {type(value).__name__}")


@dataclass(frozen=True)
class ClearableNestedObject(NestedObject):
    """
    Nested options record that may also be explicitly removed.

    Attributes:
        clear_value (str | None): Payload sent to remove the remote value (default "").

    Notes:
        Omission leaves the remote value unchanged; removal must actively overwrite it, so
        an explicit clear is always emitted.
    """

    clear_value: str | None = DEFAULT_CLEAR_VALUE


@dataclass(frozen=True)
class ListOf:
    """Ordered list of values of one kind."""

    item: ValueKind

    def __post_init__(self) -> None:
        if not isinstance(self.item, KIND_TYPES):
            raise DeclarationError(f"ListOf item must be a value kind (got {self.item!r})")

    def describe(self) -> str:
        return f"list[{self.item.describe()}]"

    def accept(self, value: Any) -> tuple[Any, ...]:
        if not isinstance(value, (list, tuple)):
            raise InvalidFieldType(f"expected {self.describe()}, got {type(value).__name__}")
        items = []
        for i, v in enumerate(value):
            try:
                items.append(self.item.accept(v))
            except InvalidFieldType as exc:
                raise InvalidFieldType(f"item {i}: {exc}") from exc
        return tuple(items)


@dataclass(frozen=True)
class MapOf:
    """Flat string -> string mapping (no nesting)."""

    def describe(self) -> str:
        return "map[str, str]"

    def accept(self, value: Any) -> dict[str, str]:
        if not isinstance(value, Mapping):
            raise InvalidFieldType(f"expected {self.describe()}, got {type(value).__name__}")
        for k, v in value.items():
            if not isinstance(k, str) or not isinstance(v, str):
                raise InvalidFieldType(f"map entries must be str -> str (got {k!r}: {v!r})")
        return dict(value)


@dataclass(frozen=True, init=False)
class Either:
    """
    Closed union of otherwise unrelated kinds.

    Attributes:
        branches (tuple): Two or more non-Either kinds.

    Examples:
        >>> from enum import Enum
        >>> class TrialEnd(Enum):
        ...     NOW = "now"
        >>> kind = Either(Timestamp(), Sentinel(TrialEnd))
        >>> kind.accept("now")
        Variant(branch=1, value=<TrialEnd.NOW: 'now'>)
    """

    branches: tuple[Any, ...]

    def __init__(self, *branches: Any) -> None:
        if len(branches) < 2:
            raise DeclarationError("Either requires at least two branches")
        for b in branches:
            if isinstance(b, Either) or not isinstance(b, KIND_TYPES):
                raise DeclarationError(f"Either branches must be non-union value kinds (got {b!r})")
        object.__setattr__(self, "branches", tuple(branches))

    def describe(self) -> str:
        return " | ".join(b.describe() for b in self.branches)

    def accept_branch(self, branch: int, value: Any) -> Variant:
        if not 0 <= branch < len(self.branches):
            raise InvalidFieldType(f"branch {branch} out of range for {self.describe()}")
        return Variant(branch, self.branches[branch].accept(value))

    def accept(self, value: Any) -> Variant:
        if isinstance(value, Variant):
            return self.accept_branch(value.branch, value.value)
        matches: list[Variant] = []
        for i, b in enumerate(self.branches):
            try:
                matches.append(Variant(i, b.accept(value)))
            except InvalidFieldType:
                continue
        if not matches:
            raise InvalidFieldType(f"expected {self.describe()}, got {type(value).__name__}")
        if len(matches) > 1:
            raise InvalidFieldType(
                f"{value!r} matches several branches of {self.describe()}; use set_branch"
            )
        return matches[0]


ValueKind = Union[
    Scalar, Timestamp, Sentinel, NestedObject, ClearableNestedObject, ListOf, MapOf, Either
]

KIND_TYPES: tuple[type, ...] = (Scalar, Timestamp, Sentinel, NestedObject, ListOf, MapOf, Either)

"""
Field declarations and the OptionsRecord base class with its typed setter surface.

Responsibilities
- Define FieldSpec, the frozen pydantic model describing one declared field
  (wire name, kind, deprecation overlay, clearing protocol).
- Define OptionsRecord, whose subclasses declare fields with `option(...)`. The declaration
  table is resolved once per class, in declaration order, when the class is created.
- Track per-instance presence (UNSET / VALUE / CLEAR) explicitly, so "unset" and
  "explicitly cleared" remain distinguishable.
- Reject shape mismatches at the setter (InvalidFieldType); constraint checks wait for
  projection.

Setter surface
- `rec.coupon = "X"` / `rec.set("coupon", "X")`  -> VALUE
- `rec.coupon = None` / `del rec.coupon` / `rec.unset("coupon")`  -> UNSET
- `rec.billing_thresholds = CLEAR` / `rec.clear("billing_thresholds")`  -> CLEAR
- `rec.set_branch("trial_end", 1, "now")`  -> populate one union branch without
  touching the others

Examples
>>> from optwire.core.kinds import Scalar
>>> class TransferData(OptionsRecord):
...     destination = option(Scalar(str))
...     amount_percent = option(Scalar(int, ge=0, le=100))
>>> td = TransferData(destination="acct_1")
>>> td.to_payload()
{'destination': 'acct_1'}
>>> td.presence("amount_percent")
<Presence.UNSET: 'unset'>
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import TYPE_CHECKING, Any, ClassVar

from pydantic import BaseModel, ConfigDict, ValidationError, field_validator, model_validator

from .constants import DEFAULT_CLEAR_VALUE
from .encoder import decode_value
from .errors import DeclarationError, InvalidFieldType
from .grammar import CLEAR, Presence, assert_lower_snake
from .kinds import KIND_TYPES, ClearableNestedObject, Either, NestedObject, Variant

if TYPE_CHECKING:
    from optwire.config import ProjectionSettings

    from .typing import Payload

__all__ = [
    "FieldSpec",
    "OptionField",
    "OptionsRecord",
    "option",
]

_DEFAULT: Any = object()


class FieldSpec(BaseModel):
    """
    Declaration of one optional field on a record.

    Attributes:
        name (str): Python attribute name (lower_snake).
        wire_name (str): Key emitted in the payload (lower_snake).
        kind (ValueKind): Declared value kind.
        deprecated (bool): Legacy field kept for wire compatibility.
        successor (str | None): Attribute name of the replacing field.
        tolerates_successor (bool): Whether the remote API accepts this legacy field and its
            successor in the same payload.
        clearable (bool): Whether explicit clear is allowed.
        clear_value (str | int | None): Payload emitted on explicit clear.
        doc (str): Human-readable description.

    Raises:
        DeclarationError (wrapped by pydantic.ValidationError): On invalid names or
            inconsistent deprecation/clearing metadata.
    """

    model_config = ConfigDict(extra="forbid", frozen=True, arbitrary_types_allowed=True)

    name: str
    wire_name: str
    kind: Any
    deprecated: bool = False
    successor: str | None = None
    tolerates_successor: bool = True
    clearable: bool = False
    clear_value: str | int | None = DEFAULT_CLEAR_VALUE
    doc: str = ""

    @field_validator("name", "wire_name")
    @classmethod
    def _check_lower_snake(cls, v: str) -> str:
        assert_lower_snake(v, "field name")
        return v

    @field_validator("kind")
    @classmethod
    def _check_kind(cls, v: Any) -> Any:
        if not isinstance(v, KIND_TYPES):
            raise DeclarationError(f"kind must be a value kind (got {v!r})")
        if isinstance(v, NestedObject) and not (
            isinstance(v.record_cls, type) and issubclass(v.record_cls, OptionsRecord)
        ):
            raise DeclarationError(f"nested kind requires an OptionsRecord subclass (got {v.record_cls!r})")
        return v

    @model_validator(mode="after")
    def _check_overlay(self) -> FieldSpec:
        if self.successor is not None and not self.deprecated:
            raise DeclarationError(f"{self.name}: successor requires deprecated=True")
        if self.successor == self.name:
            raise DeclarationError(f"{self.name}: a field cannot succeed itself")
        if isinstance(self.kind, ClearableNestedObject):
            if not self.clearable:
                raise DeclarationError(f"{self.name}: clearable nested objects must be clearable")
            if self.clear_value != self.kind.clear_value:
                raise DeclarationError(f"{self.name}: clear_value must match the kind's clear value")
        return self


class OptionField:
    """Descriptor binding a FieldSpec to an attribute of an OptionsRecord subclass."""

    def __init__(
        self,
        kind: Any,
        *,
        wire_name: str | None = None,
        deprecated: bool = False,
        successor: str | None = None,
        tolerates_successor: bool = True,
        clearable: bool = False,
        clear_value: Any = _DEFAULT,
        doc: str = "",
    ) -> None:
        self._kind = kind
        self._wire_name = wire_name
        self._deprecated = deprecated
        self._successor = successor
        self._tolerates_successor = tolerates_successor
        self._clearable = clearable
        self._clear_value = clear_value
        self.__doc__ = doc
        self.spec: FieldSpec | None = None

    def bind(self, owner: type, name: str) -> FieldSpec:
        clearable = self._clearable
        clear_value = self._clear_value
        if isinstance(self._kind, ClearableNestedObject):
            clearable = True
            if clear_value is _DEFAULT:
                clear_value = self._kind.clear_value
        if clear_value is _DEFAULT:
            clear_value = DEFAULT_CLEAR_VALUE
        try:
            self.spec = FieldSpec(
                name=name,
                wire_name=self._wire_name or name,
                kind=self._kind,
                deprecated=self._deprecated,
                successor=self._successor,
                tolerates_successor=self._tolerates_successor,
                clearable=clearable,
                clear_value=clear_value,
                doc=self.__doc__ or "",
            )
        except ValidationError as exc:
            raise DeclarationError(f"{owner.__name__}.{name}: {exc}") from exc
        return self.spec

    def _bound_name(self) -> str:
        if self.spec is None:
            raise DeclarationError(
                "option() is not bound; declare it in the body of an OptionsRecord subclass"
            )
        return self.spec.name

    def __get__(self, instance: OptionsRecord | None, owner: type) -> Any:
        if instance is None:
            return self
        return instance.get(self._bound_name())

    def __set__(self, instance: OptionsRecord, value: Any) -> None:
        instance.set(self._bound_name(), value)

    def __delete__(self, instance: OptionsRecord) -> None:
        instance.unset(self._bound_name())


def option(
    kind: Any,
    *,
    wire_name: str | None = None,
    deprecated: bool = False,
    successor: str | None = None,
    tolerates_successor: bool = True,
    clearable: bool = False,
    clear_value: Any = _DEFAULT,
    doc: str = "",
) -> Any:
    """
    Declare an optional field in an OptionsRecord class body.

    Args:
        kind (ValueKind): Declared value kind.
        wire_name (str | None): Payload key; defaults to the attribute name.
        deprecated (bool): Mark as a legacy field (advisory on projection).
        successor (str | None): Attribute name of the replacing field.
        tolerates_successor (bool): Allow this field and its successor in one payload.
        clearable (bool): Allow explicit clear (implied by ClearableNestedObject).
        clear_value (str | int | None): Payload for explicit clear (default "").
        doc (str): Description.

    Returns:
        OptionField: Descriptor resolved when the record class is created.
    """
    return OptionField(
        kind,
        wire_name=wire_name,
        deprecated=deprecated,
        successor=successor,
        tolerates_successor=tolerates_successor,
        clearable=clearable,
        clear_value=clear_value,
        doc=doc,
    )


class OptionsRecord:
    """
    Base class for request-options records.

    Subclasses declare fields with `option(...)`. Pass `abstract=True` in the class
    statement for shared bases that cannot be sent on their own; successor and exclusivity
    references are resolved on concrete subclasses.

    Attributes:
        exclusive_groups (tuple[tuple[str, ...], ...]): Attribute-name groups of which at
            most one member may be set to a value. Groups accumulate across subclasses.

    Raises:
        DeclarationError: At class creation, on duplicate wire names, redeclared fields,
            dangling successor references, or unknown exclusive-group members.
    """

    exclusive_groups: ClassVar[tuple[tuple[str, ...], ...]] = ()

    _declarations: ClassVar[tuple[FieldSpec, ...]] = ()
    _by_name: ClassVar[dict[str, FieldSpec]] = {}
    _by_wire: ClassVar[dict[str, FieldSpec]] = {}
    _exclusive: ClassVar[tuple[tuple[str, ...], ...]] = ()
    _abstract: ClassVar[bool] = True

    def __init_subclass__(cls, *, abstract: bool = False, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        cls._abstract = abstract

        specs: list[FieldSpec] = []
        groups: list[tuple[str, ...]] = []
        for base in cls.__bases__:
            if issubclass(base, OptionsRecord):
                specs.extend(s for s in base._declarations if s not in specs)
                groups.extend(g for g in base._exclusive if g not in groups)

        inherited = {s.name for s in specs}
        for name, attr in list(cls.__dict__.items()):
            if not isinstance(attr, OptionField):
                continue
            if name in inherited:
                raise DeclarationError(f"{cls.__name__}.{name} redeclares an inherited field")
            specs.append(attr.bind(cls, name))

        by_wire: dict[str, FieldSpec] = {}
        for spec in specs:
            if spec.wire_name in by_wire:
                raise DeclarationError(
                    f"{cls.__name__}: wire name {spec.wire_name!r} declared by both "
                    f"{by_wire[spec.wire_name].name!r} and {spec.name!r}"
                )
            by_wire[spec.wire_name] = spec

        for group in cls.__dict__.get("exclusive_groups", ()):
            group = tuple(group)
            if len(group) < 2:
                raise DeclarationError(f"{cls.__name__}: exclusive group {group!r} needs two members")
            if group not in groups:
                groups.append(group)

        cls._declarations = tuple(specs)
        cls._by_name = {s.name: s for s in specs}
        cls._by_wire = by_wire
        cls._exclusive = tuple(groups)

        if not abstract:
            cls._check_references()

    @classmethod
    def _check_references(cls) -> None:
        for spec in cls._declarations:
            if spec.successor is not None and spec.successor not in cls._by_name:
                raise DeclarationError(
                    f"{cls.__name__}.{spec.name}: successor {spec.successor!r} is not declared"
                )
        for group in cls._exclusive:
            for member in group:
                if member not in cls._by_name:
                    raise DeclarationError(
                        f"{cls.__name__}: exclusive group member {member!r} is not declared"
                    )

    def __init__(self, **values: Any) -> None:
        if type(self)._abstract:
            raise TypeError(f"{type(self).__name__} is abstract; use a concrete options record")
        object.__setattr__(self, "_state", {})
        for name, value in values.items():
            self.set(name, value)

    # -- declaration table -------------------------------------------------

    @classmethod
    def declared_fields(cls) -> tuple[FieldSpec, ...]:
        """Field declarations in projection order (inherited first)."""
        return cls._declarations

    @classmethod
    def field_spec(cls, name: str) -> FieldSpec:
        try:
            return cls._by_name[name]
        except KeyError:
            raise InvalidFieldType(f"{cls.__name__} has no field {name!r}") from None

    @classmethod
    def exclusive(cls) -> tuple[tuple[str, ...], ...]:
        return cls._exclusive

    # -- typed setters -----------------------------------------------------

    def set(self, name: str, value: Any) -> None:
        """
        Set a field. None unsets it; CLEAR requests explicit removal.

        Raises:
            InvalidFieldType: If the field is unknown or value does not fit its kind.
        """
        spec = self.field_spec(name)
        if value is None:
            self.unset(name)
            return
        if value is CLEAR:
            self.clear(name)
            return
        try:
            accepted = spec.kind.accept(value)
        except InvalidFieldType as exc:
            raise InvalidFieldType(f"{type(self).__name__}.{name}: {exc}") from exc
        if isinstance(spec.kind, Either):
            self._state[name] = (Presence.VALUE, {accepted.branch: accepted.value})
        else:
            self._state[name] = (Presence.VALUE, accepted)

    def set_branch(self, name: str, branch: int, value: Any) -> None:
        """
        Populate one branch of a union field, leaving any other populated branch in place.

        Projection fails with InvalidFieldCombination while more than one branch is set.
        """
        spec = self.field_spec(name)
        if not isinstance(spec.kind, Either):
            raise InvalidFieldType(f"{type(self).__name__}.{name} is not a union field")
        try:
            variant = spec.kind.accept_branch(branch, value)
        except InvalidFieldType as exc:
            raise InvalidFieldType(f"{type(self).__name__}.{name}: {exc}") from exc
        presence, current = self._state.get(name, (Presence.UNSET, None))
        branches = dict(current) if presence is Presence.VALUE else {}
        branches[variant.branch] = variant.value
        self._state[name] = (Presence.VALUE, branches)

    def unset(self, name: str) -> None:
        self.field_spec(name)
        self._state.pop(name, None)

    def clear(self, name: str) -> None:
        """
        Request explicit removal of the remote value for a clearable field.

        Raises:
            InvalidFieldType: If the field does not support explicit clear.
        """
        spec = self.field_spec(name)
        if not spec.clearable:
            raise InvalidFieldType(f"{type(self).__name__}.{name} does not support explicit clear")
        self._state[name] = (Presence.CLEAR, None)

    # -- accessors ---------------------------------------------------------

    def presence(self, name: str) -> Presence:
        self.field_spec(name)
        return self._state.get(name, (Presence.UNSET, None))[0]

    def is_set(self, name: str) -> bool:
        return self.presence(name) is Presence.VALUE

    def state_of(self, name: str) -> tuple[Presence, Any]:
        """Presence tag and stored value; union fields store a branch-index mapping."""
        self.field_spec(name)
        return self._state.get(name, (Presence.UNSET, None))

    def get(self, name: str) -> Any:
        """
        Current value of a field, or None when unset or cleared.

        For union fields, returns the populated branch's value (the lowest branch index when
        several are populated). Lists come back as tuples and maps as copies.
        """
        presence, value = self.state_of(name)
        if presence is not Presence.VALUE:
            return None
        if isinstance(self.field_spec(name).kind, Either):
            return value[min(value)]
        if isinstance(value, dict):
            return dict(value)
        return value

    def __setattr__(self, name: str, value: Any) -> None:
        if name.startswith("_"):
            object.__setattr__(self, name, value)
            return
        self.set(name, value)

    def __delattr__(self, name: str) -> None:
        if name.startswith("_"):
            object.__delattr__(self, name)
            return
        self.unset(name)

    # -- projection / decoding ---------------------------------------------

    def to_payload(self, *, settings: ProjectionSettings | None = None) -> Payload:
        """Project this record into an ordered wire payload (see optwire.core.projection.project)."""
        from .projection import _project

        return _project(self, settings)

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> OptionsRecord:
        """
        Rebuild a record from a wire mapping through the typed setters.

        Raw values equal to a clearable field's clear value decode to CLEAR.

        Raises:
            InvalidFieldType: On unknown wire keys or values of the wrong shape.
            UnrecognizedUnionVariant: When a union value matches no branch.
        """
        record = cls()
        for key, raw in payload.items():
            spec = cls._by_wire.get(key)
            if spec is None:
                raise InvalidFieldType(f"{cls.__name__} has no wire field {key!r}")
            if spec.clearable and raw == spec.clear_value and type(raw) is type(spec.clear_value):
                record.clear(spec.name)
                continue
            decoded = decode_value(spec.kind, raw)
            if isinstance(decoded, Variant):
                record.set_branch(spec.name, decoded.branch, decoded.value)
            else:
                record.set(spec.name, decoded)
        return record

    # -- dunder ------------------------------------------------------------

    def __eq__(self, other: object) -> bool:
        if type(other) is not type(self):
            return NotImplemented
        return self._state == other._state  # type: ignore[attr-defined]

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        parts = []
        for spec in self._declarations:
            presence, value = self._state.get(spec.name, (Presence.UNSET, None))
            if presence is Presence.CLEAR:
                parts.append(f"{spec.name}=<clear>")
            elif presence is Presence.VALUE:
                parts.append(f"{spec.name}={self.get(spec.name)!r}")
        return f"{type(self).__name__}({', '.join(parts)})"

"""
Field projection engine: reduce a typed options record to its explicitly-set fields.

Contract
- `project(record) -> dict[wire_name, EncodedValue]`, ordered by field declaration
  (inherited fields first).
- UNSET fields never produce a key. CLEAR fields produce their configured clear value.
  VALUE fields are encoded by `optwire.core.encoder.encode_value`.
- Empty lists and maps are emitted only when explicitly set to an empty value.
- Validation happens before any key is returned; a failing record yields no payload.

Combination rules (InvalidFieldCombination)
- A union field with more than one populated branch.
- Two or more members of a declared exclusive group set to a value.
- A deprecated field and its successor both set when the field declares
  `tolerates_successor=False`.

Advisories
- Every deprecated field set to a value yields an Advisory. When the successor is also set
  both keys are still emitted; the advisory recommends migrating. Advisories are surfaced
  according to `ProjectionSettings.advisory_mode` and are never errors.

Examples
>>> from optwire.core.fields import OptionsRecord, option
>>> from optwire.core.kinds import Scalar
>>> class Opts(OptionsRecord):
...     plan = option(Scalar(str), deprecated=True, successor="price")
...     price = option(Scalar(str))
>>> project_with_advisories(Opts(price="p_1")).payload
{'price': 'p_1'}
>>> project_with_advisories(Opts(plan="gold", price="p_1")).advisories[0].successor_set
True
"""

from __future__ import annotations

import logging
import warnings
from collections.abc import Iterator
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from optwire.config import ProjectionSettings

from .encoder import encode_value
from .errors import DeprecatedFieldAdvisory, InvalidFieldCombination, UnencodableValue
from .grammar import Presence
from .hashing import idempotency_key
from .kinds import Either, ListOf, NestedObject, ValueKind, Variant
from .typing import Payload

if TYPE_CHECKING:
    from .fields import OptionsRecord

__all__ = [
    "Advisory",
    "Projection",
    "project",
    "project_with_advisories",
    "project_fields",
    "collect_advisories",
    "check_combinations",
]

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Advisory:
    """
    Non-fatal migration hint for a deprecated field present in a payload.

    Attributes:
        record (str): Dotted path of the record holding the field (e.g. "SubscriptionUpdateOptions").
        field (str): Attribute name of the deprecated field.
        wire_name (str): Payload key of the deprecated field.
        successor (str | None): Attribute name of the replacing field.
        successor_set (bool): Whether the successor is also set on the same record.
    """

    record: str
    field: str
    wire_name: str
    successor: str | None
    successor_set: bool

    @property
    def message(self) -> str:
        where = f"{self.record}.{self.field}"
        if self.successor is None:
            return f"{where} is deprecated"
        if self.successor_set:
            return (
                f"{where} is deprecated and was sent together with {self.successor!r}; "
                f"both keys are emitted, migrate to {self.successor!r} only"
            )
        return f"{where} is deprecated; use {self.successor!r} instead"


@dataclass(frozen=True)
class Projection:
    """
    Payload plus the advisories raised while producing it.

    Attributes:
        payload (Payload): Ordered wire payload.
        advisories (tuple[Advisory, ...]): Deprecated fields present in the payload.
        idempotency_key (str): Content key scoped by the record class, for transports that
            retry the same request.
    """

    payload: Payload
    advisories: tuple[Advisory, ...]
    idempotency_key: str


def check_combinations(record: OptionsRecord) -> None:
    """
    Enforce the record's own combination rules (nested records are checked when encoded).

    Raises:
        InvalidFieldCombination: See module docstring.
    """
    cls_name = type(record).__name__
    for spec in record.declared_fields():
        presence, value = record.state_of(spec.name)
        if presence is not Presence.VALUE:
            continue
        if isinstance(spec.kind, Either) and len(value) > 1:
            raise InvalidFieldCombination(
                f"{cls_name}.{spec.name}: more than one branch of {spec.kind.describe()} is set"
            )
        if (
            spec.deprecated
            and spec.successor is not None
            and not spec.tolerates_successor
            and record.is_set(spec.successor)
        ):
            raise InvalidFieldCombination(
                f"{cls_name}.{spec.name} cannot be sent together with {spec.successor!r}"
            )
    for group in record.exclusive():
        populated = [name for name in group if record.is_set(name)]
        if len(populated) > 1:
            raise InvalidFieldCombination(
                f"{cls_name}: fields {', '.join(populated)} are mutually exclusive"
            )


def project_fields(record: OptionsRecord) -> Payload:
    """
    Project a record without surfacing advisories.

    Returns:
        Payload: Ordered wire-name -> encoded value mapping.

    Raises:
        InvalidFieldCombination: On forbidden combinations, here or in nested records.
        UnencodableValue: When a scalar violates its declared constraints.
    """
    check_combinations(record)
    payload: Payload = {}
    for spec in record.declared_fields():
        presence, value = record.state_of(spec.name)
        if presence is Presence.UNSET:
            continue
        if presence is Presence.CLEAR:
            payload[spec.wire_name] = spec.clear_value
            continue
        try:
            payload[spec.wire_name] = encode_value(spec.kind, value)
        except UnencodableValue as exc:
            raise UnencodableValue(f"{type(record).__name__}.{spec.name}: {exc}") from exc
    return payload


def _records_in(kind: ValueKind, value: Any, path: str) -> Iterator[tuple[str, OptionsRecord]]:
    if isinstance(kind, NestedObject):
        yield path, value
    elif isinstance(kind, ListOf):
        for i, item in enumerate(value):
            yield from _records_in(kind.item, item, f"{path}[{i}]")
    elif isinstance(kind, Either):
        branches = {value.branch: value.value} if isinstance(value, Variant) else value
        for index in sorted(branches):
            yield from _records_in(kind.branches[index], branches[index], path)


def _nested_records(record: OptionsRecord, path: str) -> Iterator[tuple[str, OptionsRecord]]:
    for spec in record.declared_fields():
        presence, value = record.state_of(spec.name)
        if presence is Presence.VALUE:
            yield from _records_in(spec.kind, value, f"{path}.{spec.name}")


def collect_advisories(record: OptionsRecord, *, path: str | None = None) -> tuple[Advisory, ...]:
    """
    List deprecated fields set to a value on the record and its nested records.

    Returns:
        tuple[Advisory, ...]: In declaration order, parents before children.
    """
    path = path or type(record).__name__
    found: list[Advisory] = []
    for spec in record.declared_fields():
        if not spec.deprecated or not record.is_set(spec.name):
            continue
        found.append(
            Advisory(
                record=path,
                field=spec.name,
                wire_name=spec.wire_name,
                successor=spec.successor,
                successor_set=spec.successor is not None and record.is_set(spec.successor),
            )
        )
    for child_path, child in _nested_records(record, path):
        found.extend(collect_advisories(child, path=child_path))
    return tuple(found)


def project_with_advisories(record: OptionsRecord) -> Projection:
    """Project a record and return its advisories as data instead of emitting them."""
    payload = project_fields(record)
    return Projection(
        payload=payload,
        advisories=collect_advisories(record),
        idempotency_key=idempotency_key(payload, namespace=type(record).__name__),
    )


# Frames between warnings.warn and the caller of project() or OptionsRecord.to_payload():
# _surface -> _project -> entry point -> caller.
_ADVISORY_STACKLEVEL = 4


def _surface(advisories: tuple[Advisory, ...], settings: ProjectionSettings) -> None:
    if settings.advisory_mode == "ignore":
        return
    for advisory in advisories:
        if settings.advisory_mode == "log":
            logger.warning(advisory.message)
        else:
            warnings.warn(advisory.message, DeprecatedFieldAdvisory, stacklevel=_ADVISORY_STACKLEVEL)


def project(record: OptionsRecord, *, settings: ProjectionSettings | None = None) -> Payload:
    """
    Project a record into its ordered wire payload and surface deprecation advisories.

    Args:
        record (OptionsRecord): Populated options record.
        settings (ProjectionSettings | None): Advisory and logging behaviour; defaults to
            `ProjectionSettings()`. No environment or file lookup happens here.

    Returns:
        Payload: Ordered wire-name -> encoded value mapping.

    Raises:
        InvalidFieldCombination: On forbidden field combinations.
        UnencodableValue: When a scalar violates its declared constraints.
    """
    return _project(record, settings)


def _project(record: OptionsRecord, settings: ProjectionSettings | None) -> Payload:
    settings = settings or ProjectionSettings()
    result = project_with_advisories(record)
    _surface(result.advisories, settings)
    if settings.log_payload_keys:
        logger.debug("%s -> %s", type(record).__name__, list(result.payload))
    return result.payload

"""
optwire — Sparse request-options payloads for partial-update APIs.

## Responsibilities
- Declare request records whose fields are independently optional, possibly polymorphic,
  possibly deprecated, and possibly explicitly clearable.
- Project a populated record into an ordered wire mapping holding only the fields that were
  set, ready for a transport to serialize and send.

## Public API
- OptionsRecord, option — declare records and fields.
- Kinds — Scalar, Timestamp, Sentinel, NestedObject, ClearableNestedObject, ListOf, MapOf, Either.
- CLEAR, Presence — presence tags.
- project, project_with_advisories — projection engine.
- ProjectionSettings — advisory/logging configuration.

## Import DAG discipline
- optwire.core depends on stdlib, pydantic and optwire.config (settings only); optwire.config
  adds python-dotenv.
- Transport, signing and retries live outside this package.
"""

from __future__ import annotations

from .config import ProjectionSettings
from .core.errors import (
    DeclarationError,
    DeprecatedFieldAdvisory,
    InvalidFieldCombination,
    InvalidFieldType,
    OptionsError,
    UnencodableValue,
    UnrecognizedUnionVariant,
)
from .core.fields import OptionsRecord, option
from .core.grammar import CLEAR, Presence
from .core.kinds import (
    ClearableNestedObject,
    Either,
    ListOf,
    MapOf,
    NestedObject,
    Scalar,
    Sentinel,
    Timestamp,
    Variant,
)
from .core.projection import project, project_with_advisories

__all__ = [
    "CLEAR",
    "ClearableNestedObject",
    "DeclarationError",
    "DeprecatedFieldAdvisory",
    "Either",
    "InvalidFieldCombination",
    "InvalidFieldType",
    "ListOf",
    "MapOf",
    "NestedObject",
    "OptionsError",
    "OptionsRecord",
    "Presence",
    "ProjectionSettings",
    "Scalar",
    "Sentinel",
    "Timestamp",
    "UnencodableValue",
    "UnrecognizedUnionVariant",
    "Variant",
    "option",
    "project",
    "project_with_advisories",
]

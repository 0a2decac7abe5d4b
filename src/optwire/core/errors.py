"""
Core exception types raised by record declarations, typed setters, projection, and decoding.

Provides typed exceptions for options-model failures:
- InvalidFieldType for setter-time shape mismatches (wrong value for the declared kind).
- InvalidFieldCombination for encode-time conflicts (two union branches, exclusive fields,
  or a legacy field alongside a successor the API does not tolerate).
- UnencodableValue for encode-time constraint violations (ranges, decimal places).
- UnrecognizedUnionVariant for decode-time values that match no declared branch.
- DeclarationError for invalid record declarations, raised at class-creation time.
- ConfigError for invalid explicit settings.

Advisories are not errors: DeprecatedFieldAdvisory is a warning category surfaced through
`warnings.warn` (or logging) when a deprecated field is projected.

Notes:
    - This module uses only the Python standard library and has no side effects.
    - Setter-time errors are raised at the point of misuse; encode-time errors abort the
      whole projection so no partial payload is produced.

Examples:
    Catch a setter-time mismatch.

    >>> from optwire.core.errors import InvalidFieldType
    >>> def set_flag(v: object) -> bool:
    ...     if not isinstance(v, bool):
    ...         raise InvalidFieldType("expected bool")
    ...     return v
    >>> try:
    ...     set_flag("yes")
    ... except TypeError as e:
    ...     msg = str(e)
    >>> "bool" in msg
    True
"""

from __future__ import annotations

__all__ = [
    "OptionsError",
    "InvalidFieldType",
    "InvalidFieldCombination",
    "UnencodableValue",
    "UnrecognizedUnionVariant",
    "DeclarationError",
    "ConfigError",
    "DeprecatedFieldAdvisory",
]


class OptionsError(Exception):
    """
    Base class for options-model errors.

    Notes:
        Use this as a catch-all for failures raised by optwire, distinct from transport errors.
    """


class InvalidFieldType(OptionsError, TypeError):
    """Setter-time failure: the value does not have the shape of the field's declared kind."""


class InvalidFieldCombination(OptionsError, ValueError):
    """
    Encode-time failure: fields populated together in a way the record forbids.

    Examples:
        - Both branches of an Either field populated via set_branch.
        - Two members of a declared exclusive group set to a value.
        - A deprecated field and its successor set when the field does not tolerate both.
    """


class UnencodableValue(OptionsError, ValueError):
    """Encode-time failure: a value violates its declared numeric or format constraints."""


class UnrecognizedUnionVariant(OptionsError, ValueError):
    """Decode-time failure: a raw wire value matches none (or more than one) of the union branches."""


class DeclarationError(OptionsError, ValueError):
    """Invalid record declaration (duplicate wire names, dangling successor, bad wire name)."""


class ConfigError(OptionsError, ValueError):
    """Invalid explicit projection settings."""


class DeprecatedFieldAdvisory(FutureWarning):
    """Advisory emitted when a deprecated field is projected; never raised as an error."""

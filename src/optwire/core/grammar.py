"""
Presence tags, wire-name grammar, and sentinel enum helpers.

Design principles
-----------------
1) One naming standard:
   - Record classes: PascalCase
   - Field attribute names and wire names: lower_snake
   - Sentinel enum member names: UPPER_SNAKE; serialized values are the literal wire tokens

2) Presence is explicit:
   - A field is UNSET (omitted from the payload), VALUE (encoded), or CLEAR (emitted with the
     field's configured clear value). Python's None is not a presence state; assigning None
     to a field unsets it.

Downstream usage
----------------
- `optwire.core.fields` validates wire names with `assert_lower_snake` when a record class
  is created and stores per-field state tagged with `Presence`.
- `optwire.core.kinds.Sentinel` parses tokens with `sentinel_from_value`.
- Tests use `ensure_all_enum_values_lower_snake` to guard sentinel enums.

Examples
--------
>>> from enum import Enum
>>> from optwire.core.grammar import Presence, sentinel_from_value, is_lower_snake
>>> class Interval(Enum):
...     DAY = "day"
...     WEEK = "week"
>>> sentinel_from_value(Interval, "week") is Interval.WEEK
True
>>> is_lower_snake("cancel_at_period_end")
True
>>> Presence.CLEAR.value
'clear'
"""

from __future__ import annotations

import re
from collections.abc import Iterable
from enum import Enum
from typing import Final, TypeVar

from .errors import DeclarationError

__all__ = [
    "Presence",
    "CLEAR",
    "is_lower_snake",
    "assert_lower_snake",
    "sentinel_value",
    "sentinel_from_value",
    "ensure_all_enum_values_lower_snake",
]

E = TypeVar("E", bound=Enum)


class Presence(Enum):
    """
    Presence state of one field on a record instance.

    Notes:
        UNSET   -> no key in the projected payload.
        VALUE   -> key emitted with the encoded value.
        CLEAR   -> key emitted with the field's clear value (e.g. "" for removable objects).
    """

    UNSET = "unset"
    VALUE = "value"
    CLEAR = "clear"


# Assign to a clearable field to request explicit removal on the remote side.
CLEAR: Final = Presence.CLEAR


_LOWER_SNAKE_RE: Final[re.Pattern[str]] = re.compile(r"^[a-z0-9]+(?:_[a-z0-9]+)*$")


def is_lower_snake(value: str) -> bool:
    """
    Check whether a string is lower_snake.

    Args:
      value (str): Candidate string to validate.

    Returns:
      bool: True if value matches lower_snake (e.g., "trial_end"), False otherwise.

    Examples:
      >>> is_lower_snake("trial_end")
      True
      >>> is_lower_snake("TrialEnd")
      False
    """
    return bool(_LOWER_SNAKE_RE.match(value or ""))


def assert_lower_snake(value: str, what: str = "value") -> None:
    """
    Validate that a string is lower_snake.

    Args:
      value (str): Candidate string to validate.
      what (str): Human-friendly label used in the error message.

    Raises:
      DeclarationError: If value is not lower_snake.
    """
    if not is_lower_snake(value):
        raise DeclarationError(f"{what} must be lower_snake (got: {value!r})")


def sentinel_value(member: Enum) -> str:
    """Get the literal wire token for a sentinel enum member."""
    return str(member.value)


def sentinel_from_value(enum_cls: type[E], token: str) -> E:
    """
    Parse a wire token into a member of a closed sentinel enum.

    Args:
      enum_cls (type[Enum]): Sentinel enum class.
      token (str): Literal token as sent on the wire.

    Returns:
      Enum: The matching member.

    Raises:
      ValueError: If token is not one of the enum's values. Matching is exact; tokens are
        never case-folded.
    """
    for member in enum_cls:
        if member.value == token:
            return member
    allowed = ", ".join(repr(m.value) for m in enum_cls)
    raise ValueError(f"{token!r} is not a {enum_cls.__name__} token (expected one of {allowed})")


def ensure_all_enum_values_lower_snake(enums: Iterable[type[Enum]]) -> None:
    """
    Assert that every member value of the given enums is a lower_snake string.

    Raises:
      DeclarationError: On the first offending member.
    """
    for enum_cls in enums:
        for member in enum_cls:
            if not isinstance(member.value, str):
                raise DeclarationError(
                    f"{enum_cls.__name__}.{member.name} value must be a string token"
                )
            assert_lower_snake(member.value, f"{enum_cls.__name__}.{member.name}")

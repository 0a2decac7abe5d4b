"""
Wire-level defaults shared by the encoder, records, and settings.

Notes:
    - Timestamps are encoded as integer seconds since EPOCH and decoded into DECODE_TIMEZONE.
      The caller's timezone does not survive a round trip (TIMESTAMP_IS_LOSSY).
    - DEFAULT_CLEAR_VALUE is the payload most remote APIs accept as "remove this value".
      Fields that clear differently declare their own clear_value.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Final

__all__ = [
    "EPOCH",
    "DECODE_TIMEZONE",
    "TIMESTAMP_IS_LOSSY",
    "DEFAULT_CLEAR_VALUE",
    "ENV_PREFIX",
    "CONFIG_FILENAME",
]

DECODE_TIMEZONE: Final = timezone.utc

EPOCH: Final[datetime] = datetime(1970, 1, 1, tzinfo=timezone.utc)

# Encoding drops the timezone and sub-second precision; decoding always attaches UTC.
TIMESTAMP_IS_LOSSY: Final[bool] = True

DEFAULT_CLEAR_VALUE: Final[str] = ""

ENV_PREFIX: Final[str] = "OPTWIRE_"

CONFIG_FILENAME: Final[str] = "optwire.toml"

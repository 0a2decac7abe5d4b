"""
Core package for optwire contracts (kinds, field declarations, projection, encoding, errors).

## Contracts (single source of truth)
- Grammar — presence tags, the CLEAR marker, wire-name and sentinel helpers.
- Kinds — closed set of value kinds (Scalar, Timestamp, Sentinel, NestedObject,
  ClearableNestedObject, ListOf, MapOf, Either).
- Fields — FieldSpec declarations and the OptionsRecord base with typed setters.
- Encoder — kind-directed encoding, union dispatch, structural decoding, epoch timestamps.
- Projection — sparse payload projection, combination rules, deprecation advisories.
- Hashing/Serde — idempotency keys and order-preserving wire JSON.

## Notes
- Zero-IO policy: stdlib + pydantic (plus ProjectionSettings from optwire.config); no
  file/network IO in this package.
- Synchronous and stateless: projections share nothing across calls; a record must not be
  mutated while it is being projected.
- Naming policy: wire names and field attribute names are lower_snake.

## Examples
```python
from datetime import datetime, timezone
from optwire.core.fields import OptionsRecord, option
from optwire.core.kinds import Scalar, Timestamp

class PauseOptions(OptionsRecord):
    resumes_at = option(Timestamp())
    reason = option(Scalar(str))

PauseOptions(resumes_at=datetime(2024, 1, 1, tzinfo=timezone.utc)).to_payload()
# {'resumes_at': 1704067200}
```
"""

import json

import pytest

from optwire.core.fields import OptionsRecord, option
from optwire.core.hashing import idempotency_key
from optwire.core.kinds import MapOf, Scalar
from optwire.core.projection import project_with_advisories
from optwire.core.serde import json_dumps_wire


class Create(OptionsRecord):
    name = option(Scalar(str))
    labels = option(MapOf())


class Update(OptionsRecord):
    name = option(Scalar(str))
    labels = option(MapOf())


def test_key_ignores_key_order_at_every_depth() -> None:
    a = {"trial_end": 1704067200, "metadata": {"b": "2", "a": "1"}}
    b = {"metadata": {"a": "1", "b": "2"}, "trial_end": 1704067200}
    assert idempotency_key(a) == idempotency_key(b)
    assert idempotency_key(a) != idempotency_key({"trial_end": "now"})
    assert len(idempotency_key(a)) == 64


def test_key_is_scoped_by_namespace() -> None:
    assert idempotency_key({"name": "n"}, namespace="Create") != idempotency_key(
        {"name": "n"}, namespace="Update"
    )


def test_projection_carries_record_scoped_key() -> None:
    first = project_with_advisories(Create(name="n", labels={"b": "2", "a": "1"}))
    again = project_with_advisories(Create(labels={"a": "1", "b": "2"}, name="n"))
    other_kind = project_with_advisories(Update(name="n", labels={"b": "2", "a": "1"}))
    assert first.idempotency_key == again.idempotency_key
    assert first.idempotency_key == idempotency_key(first.payload, namespace="Create")
    assert first.idempotency_key != other_kind.idempotency_key


def test_wire_dump_keeps_declaration_order() -> None:
    payload = {"z": 1, "a": [True, None], "m": {"k": "v"}, "emoji": "🙂"}
    assert json_dumps_wire(payload) == '{"z":1,"a":[true,null],"m":{"k":"v"},"emoji":"🙂"}'
    assert json.loads(json_dumps_wire(payload)) == payload


@pytest.mark.parametrize("dump", [json_dumps_wire, idempotency_key])
def test_non_finite_numbers_are_rejected(dump) -> None:
    with pytest.raises(ValueError):
        dump({"pct": float("nan")})

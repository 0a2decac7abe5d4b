from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum

import pytest

from optwire.core.errors import InvalidFieldCombination, UnencodableValue
from optwire.core.fields import OptionsRecord, option
from optwire.core.kinds import (
    ClearableNestedObject,
    Either,
    ListOf,
    MapOf,
    NestedObject,
    Scalar,
    Sentinel,
    Timestamp,
)
from optwire.core.projection import project, project_fields, project_with_advisories
from optwire.core.serde import json_dumps_wire


class When(Enum):
    NOW = "now"


class Limits(OptionsRecord):
    hard = option(Scalar(int, ge=0))
    soft = option(Scalar(int, ge=0))


class Request(OptionsRecord):
    exclusive_groups = (("starts_at", "starts_from_template"),)

    name = option(Scalar(str))
    pct = option(Scalar(Decimal, ge=0, le=100, decimal_places=2))
    tags = option(ListOf(Scalar(str)), clearable=True)
    labels = option(MapOf())
    note = option(Scalar(str), clearable=True, clear_value=None)
    starts_at = option(Either(Timestamp(), Sentinel(When)))
    starts_from_template = option(Scalar(bool))
    limits = option(ClearableNestedObject(Limits))
    owner = option(NestedObject(Limits), wire_name="owner_limits")


class Strict(OptionsRecord):
    seats = option(Scalar(int), deprecated=True, successor="quantity", tolerates_successor=False)
    quantity = option(Scalar(int))


MOMENT = datetime(2024, 1, 1, tzinfo=timezone.utc)


def test_empty_record_projects_to_empty_payload() -> None:
    assert project(Request()) == {}


@pytest.mark.parametrize("kept", ["name", "pct", "tags", "labels", "starts_from_template"])
def test_unset_fields_are_never_emitted(kept: str) -> None:
    values = {
        "name": "n",
        "pct": 1,
        "tags": ["t"],
        "labels": {"k": "v"},
        "starts_from_template": False,
    }
    payload = project(Request(**{kept: values[kept]}))
    assert list(payload) == [kept]


def test_output_follows_declaration_order_not_assignment_order() -> None:
    r = Request()
    r.owner = Limits(hard=1)
    r.starts_at = "now"
    r.labels = {"a": "b"}
    r.name = "n"
    assert list(project(r)) == ["name", "labels", "starts_at", "owner_limits"]


def test_clear_emits_the_per_field_clear_value() -> None:
    r = Request()
    r.clear("tags")
    r.clear("note")
    r.clear("limits")
    assert project(r) == {"tags": "", "note": None, "limits": ""}


def test_clear_differs_from_unset() -> None:
    cleared = Request()
    cleared.clear("limits")
    assert "limits" in project(cleared)
    assert "limits" not in project(Request())
    assert project(cleared) != project(Request())


def test_empty_collections_are_emitted_only_when_set() -> None:
    r = Request(tags=[], labels={})
    assert project(r) == {"tags": [], "labels": {}}


def test_union_branch_selects_representation() -> None:
    assert project(Request(starts_at=MOMENT)) == {"starts_at": 1704067200}
    assert project(Request(starts_at=When.NOW)) == {"starts_at": "now"}


@pytest.mark.parametrize("order", [(0, 1), (1, 0)])
def test_two_union_branches_fail_regardless_of_order(order: tuple[int, int]) -> None:
    values = {0: MOMENT, 1: "now"}
    r = Request(name="n")
    for branch in order:
        r.set_branch("starts_at", branch, values[branch])
    with pytest.raises(InvalidFieldCombination, match="more than one branch"):
        project(r)


def test_exclusive_group_violation() -> None:
    r = Request(starts_at="now", starts_from_template=True)
    with pytest.raises(InvalidFieldCombination, match="mutually exclusive"):
        project(r)
    r.starts_from_template = None
    assert project(r) == {"starts_at": "now"}


def test_successor_not_tolerated() -> None:
    with pytest.raises(InvalidFieldCombination, match="together with 'quantity'"):
        project(Strict(seats=1, quantity=2), settings=None)


@pytest.mark.parametrize("pct", [150, -1, Decimal("12.345")])
def test_constraint_violations_abort_projection(pct: object) -> None:
    r = Request(name="n", pct=pct)
    with pytest.raises(UnencodableValue, match=r"Request\.pct"):
        project(r)


def test_nested_records_are_projected_and_validated() -> None:
    r = Request(limits=Limits(hard=10), owner=Limits(soft=1, hard=2))
    assert project(r) == {"limits": {"hard": 10}, "owner_limits": {"hard": 2, "soft": 1}}
    r.limits = Limits(hard=-1)
    with pytest.raises(UnencodableValue, match=r"Limits\.hard"):
        project(r)


def test_projection_is_deterministic_and_non_mutating() -> None:
    r = Request(name="n", pct=12.5, tags=["a", "b"], labels={"z": "1", "a": "2"}, starts_at=MOMENT)
    snapshot = Request(name="n", pct=12.5, tags=["a", "b"], labels={"z": "1", "a": "2"}, starts_at=MOMENT)
    first = json_dumps_wire(project(r))
    second = json_dumps_wire(project(r))
    assert first == second
    assert first == (
        '{"name":"n","pct":12.5,"tags":["a","b"],"labels":{"z":"1","a":"2"},"starts_at":1704067200}'
    )
    assert project_with_advisories(r).idempotency_key == project_with_advisories(r).idempotency_key
    assert r == snapshot


def test_project_fields_matches_project() -> None:
    r = Request(name="n", limits=Limits(hard=1))
    assert project_fields(r) == project(r)

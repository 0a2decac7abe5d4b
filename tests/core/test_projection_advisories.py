import logging
import warnings

import pytest

from optwire.config import ProjectionSettings
from optwire.core.errors import DeprecatedFieldAdvisory
from optwire.core.fields import OptionsRecord, option
from optwire.core.kinds import Either, ListOf, NestedObject, Scalar
from optwire.core.projection import (
    collect_advisories,
    project,
    project_with_advisories,
)


class Line(OptionsRecord):
    sku = option(Scalar(str), deprecated=True, successor="price")
    price = option(Scalar(str))


class Order(OptionsRecord):
    plan = option(Scalar(str), deprecated=True, successor="lines")
    legacy_note = option(Scalar(str), deprecated=True)
    lines = option(ListOf(NestedObject(Line)))


def test_legacy_and_successor_are_both_emitted_with_an_advisory() -> None:
    order = Order(plan="gold", lines=[Line(price="p_1")])
    with pytest.warns(DeprecatedFieldAdvisory, match="Order.plan"):
        payload = project(order)
    assert payload == {"plan": "gold", "lines": [{"price": "p_1"}]}


def test_advisory_data_without_warnings() -> None:
    order = Order(plan="gold", lines=[Line(price="p_1")])
    with warnings.catch_warnings():
        warnings.simplefilter("error")
        result = project_with_advisories(order)
    assert result.payload == {"plan": "gold", "lines": [{"price": "p_1"}]}
    (advisory,) = result.advisories
    assert advisory.field == "plan"
    assert advisory.successor == "lines"
    assert advisory.successor_set
    assert "both keys are emitted" in advisory.message


def test_deprecated_field_alone_points_to_successor() -> None:
    (advisory,) = collect_advisories(Order(plan="gold"))
    assert not advisory.successor_set
    assert advisory.message == "Order.plan is deprecated; use 'lines' instead"


def test_deprecated_field_without_successor() -> None:
    (advisory,) = collect_advisories(Order(legacy_note="x"))
    assert advisory.successor is None
    assert advisory.message == "Order.legacy_note is deprecated"


def test_no_advisories_for_current_fields() -> None:
    assert collect_advisories(Order(lines=[Line(price="p")])) == ()
    with warnings.catch_warnings():
        warnings.simplefilter("error")
        project(Order(lines=[Line(price="p")]))


def test_nested_advisories_carry_their_path() -> None:
    order = Order(lines=[Line(price="p"), Line(sku="s", price="p")])
    (advisory,) = collect_advisories(order)
    assert advisory.record == "Order.lines[1]"
    assert advisory.field == "sku"
    assert advisory.successor_set


def test_ignore_mode_is_silent() -> None:
    with warnings.catch_warnings():
        warnings.simplefilter("error")
        payload = project(Order(plan="gold"), settings=ProjectionSettings(advisory_mode="ignore"))
    assert payload == {"plan": "gold"}


def test_log_mode_logs_instead_of_warning(caplog: pytest.LogCaptureFixture) -> None:
    settings = ProjectionSettings(advisory_mode="log")
    with caplog.at_level(logging.WARNING, logger="optwire.core.projection"):
        with warnings.catch_warnings():
            warnings.simplefilter("error")
            project(Order(plan="gold"), settings=settings)
    assert any("Order.plan is deprecated" in r.getMessage() for r in caplog.records)


def test_payload_keys_logged_at_debug(caplog: pytest.LogCaptureFixture) -> None:
    settings = ProjectionSettings(advisory_mode="ignore", log_payload_keys=True)
    with caplog.at_level(logging.DEBUG, logger="optwire.core.projection"):
        project(Order(lines=[]), settings=settings)
    assert any("Order -> ['lines']" in r.getMessage() for r in caplog.records)


def test_to_payload_uses_the_same_engine() -> None:
    order = Order(plan="gold")
    with pytest.warns(DeprecatedFieldAdvisory):
        assert order.to_payload() == {"plan": "gold"}
    assert order.to_payload(settings=ProjectionSettings(advisory_mode="ignore")) == {"plan": "gold"}


class Choice(OptionsRecord):
    pick = option(Either(NestedObject(Line), Scalar(str)))
    picks = option(ListOf(Either(NestedObject(Line), Scalar(str))))


def test_records_inside_union_branches_are_advised() -> None:
    choice = Choice(pick=Line(sku="s", price="p"), picks=["plain", Line(sku="t")])
    result = project_with_advisories(choice)
    assert result.payload == {
        "pick": {"sku": "s", "price": "p"},
        "picks": ["plain", {"sku": "t"}],
    }
    assert [(a.record, a.field, a.successor_set) for a in result.advisories] == [
        ("Choice.pick", "sku", True),
        ("Choice.picks[1]", "sku", False),
    ]


def test_plain_union_branch_has_no_advisory() -> None:
    assert collect_advisories(Choice(pick="plain")) == ()


@pytest.mark.parametrize("entry", ["project", "to_payload"])
def test_advisory_warning_points_at_the_caller(entry: str) -> None:
    order = Order(plan="gold")
    with pytest.warns(DeprecatedFieldAdvisory) as caught:
        if entry == "project":
            project(order)
        else:
            order.to_payload()
    assert caught[0].filename == __file__

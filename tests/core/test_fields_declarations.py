import pytest

from optwire.core.errors import DeclarationError
from optwire.core.fields import OptionsRecord, option
from optwire.core.kinds import ClearableNestedObject, NestedObject, Scalar
from optwire.models.subscriptions import (
    SubscriptionBillingThresholdsOptions,
    SubscriptionCreateOptions,
    SubscriptionSharedOptions,
    SubscriptionUpdateOptions,
)


def test_duplicate_wire_names_fail_at_class_creation() -> None:
    with pytest.raises(DeclarationError, match="wire name 'x'"):

        class Dup(OptionsRecord):
            a = option(Scalar(str), wire_name="x")
            b = option(Scalar(str), wire_name="x")


def test_wire_names_must_be_lower_snake() -> None:
    with pytest.raises(DeclarationError, match="lower_snake"):

        class Camel(OptionsRecord):
            trial_end = option(Scalar(str), wire_name="TrialEnd")


def test_kind_must_be_a_value_kind() -> None:
    with pytest.raises(DeclarationError, match="value kind"):

        class Raw(OptionsRecord):
            name = option(str)


def test_nested_kind_requires_options_record() -> None:
    with pytest.raises(DeclarationError, match="OptionsRecord"):

        class Loose(OptionsRecord):
            child = option(NestedObject(dict))


def test_successor_requires_deprecated_flag() -> None:
    with pytest.raises(DeclarationError, match="deprecated=True"):

        class Odd(OptionsRecord):
            plan = option(Scalar(str), successor="price")
            price = option(Scalar(str))


def test_dangling_successor_fails_on_concrete_records() -> None:
    with pytest.raises(DeclarationError, match="successor 'items'"):

        class Legacy(OptionsRecord):
            plan = option(Scalar(str), deprecated=True, successor="items")


def test_abstract_records_defer_references_to_subclasses() -> None:
    class Base(OptionsRecord, abstract=True):
        plan = option(Scalar(str), deprecated=True, successor="items")

    class Concrete(Base):
        items = option(Scalar(str))

    assert [s.name for s in Concrete.declared_fields()] == ["plan", "items"]
    with pytest.raises(TypeError, match="abstract"):
        Base()
    with pytest.raises(DeclarationError, match="not declared"):

        class Incomplete(Base):
            price = option(Scalar(str))


def test_exclusive_groups_are_validated_and_inherited() -> None:
    with pytest.raises(DeclarationError, match="exclusive group member 'missing'"):

        class BadGroup(OptionsRecord):
            exclusive_groups = (("a", "missing"),)
            a = option(Scalar(str))

    with pytest.raises(DeclarationError, match="two members"):

        class Lonely(OptionsRecord):
            exclusive_groups = (("a",),)
            a = option(Scalar(str))

    assert ("trial_end", "trial_from_plan") in SubscriptionUpdateOptions.exclusive()


def test_redeclaring_inherited_field_fails() -> None:
    with pytest.raises(DeclarationError, match="redeclares"):

        class Override(SubscriptionUpdateOptions):
            coupon = option(Scalar(str))


def test_declaration_order_is_inherited_first() -> None:
    names = [s.name for s in SubscriptionUpdateOptions.declared_fields()]
    shared = [s.name for s in SubscriptionSharedOptions.declared_fields()]
    assert names[: len(shared)] == shared
    assert names[0] == "application_fee_percent"
    assert names[-1] == "items"
    assert names.index("plan") < names.index("items")
    assert names.index("tax_percent") > names.index("default_tax_rates")


def test_clearable_nested_fields_take_the_kind_clear_value() -> None:
    spec = SubscriptionCreateOptions.field_spec("billing_thresholds")
    assert spec.clearable
    assert spec.clear_value == ""
    assert spec.kind == ClearableNestedObject(SubscriptionBillingThresholdsOptions)


def test_clearable_nested_clear_value_must_match_kind() -> None:
    with pytest.raises(DeclarationError, match="clear value"):

        class Mismatch(OptionsRecord):
            thresholds = option(
                ClearableNestedObject(SubscriptionBillingThresholdsOptions), clear_value=None
            )


def test_legacy_overlay_metadata() -> None:
    plan = SubscriptionUpdateOptions.field_spec("plan")
    tax = SubscriptionUpdateOptions.field_spec("tax_percent")
    assert plan.deprecated and plan.successor == "items" and plan.tolerates_successor
    assert tax.deprecated and tax.successor == "default_tax_rates"
    assert not SubscriptionUpdateOptions.field_spec("items").deprecated

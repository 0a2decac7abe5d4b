"""
Subscription request-options records.

Declares the shared subscription options and the create/update records built on them, plus
the nested configuration records they carry. Field order follows the remote API's
documented parameter order; successor fields (`items`) come last because they are declared
on the concrete records.

Legacy overlay
--------------
| Legacy field   | Successor           | Both in one payload
|----------------|---------------------|--------------------
| plan           | items               | tolerated (advisory)
| quantity       | items               | tolerated (advisory)
| tax_percent    | default_tax_rates   | tolerated (advisory)

Clearing protocol
-----------------
- billing_thresholds, pending_invoice_item_interval: "" removes the nested object.
- default_tax_rates, coupon: "" removes the previous value.

Examples
--------
>>> from datetime import datetime, timezone
>>> from optwire.models.subscriptions import SubscriptionUpdateOptions
>>> opts = SubscriptionUpdateOptions(
...     cancel_at_period_end=True,
...     trial_end=datetime(2024, 1, 1, tzinfo=timezone.utc),
... )
>>> opts.to_payload()
{'cancel_at_period_end': True, 'trial_end': 1704067200}
"""

from __future__ import annotations

from decimal import Decimal
from enum import Enum

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

__all__ = [
    # Sentinels
    "SubscriptionTrialEnd",
    "SubscriptionBillingCycleAnchor",
    "CollectionMethod",
    "PaymentBehavior",
    "Interval",
    "SENTINEL_ENUMS",
    # Nested records
    "SubscriptionBillingThresholdsOptions",
    "SubscriptionItemBillingThresholdsOptions",
    "SubscriptionPendingInvoiceItemIntervalOptions",
    "SubscriptionTransferDataOptions",
    "SubscriptionItemOptions",
    "SubscriptionItemUpdateOptions",
    # Requests
    "SubscriptionSharedOptions",
    "SubscriptionCreateOptions",
    "SubscriptionUpdateOptions",
]

# ============================================================================
# Sentinels
# ============================================================================


class SubscriptionTrialEnd(Enum):
    """Symbolic trial end; NOW ends the customer's trial immediately."""

    NOW = "now"


class SubscriptionBillingCycleAnchor(Enum):
    NOW = "now"
    UNCHANGED = "unchanged"


class CollectionMethod(Enum):
    """
    CHARGE_AUTOMATICALLY attempts payment with the customer's default source;
    SEND_INVOICE emails invoices with payment instructions.
    """

    CHARGE_AUTOMATICALLY = "charge_automatically"
    SEND_INVOICE = "send_invoice"


class PaymentBehavior(Enum):
    """
    ALLOW_INCOMPLETE creates the subscription with status=incomplete when the first invoice
    cannot be paid; ERROR_IF_INCOMPLETE rejects the request instead.
    """

    ALLOW_INCOMPLETE = "allow_incomplete"
    ERROR_IF_INCOMPLETE = "error_if_incomplete"


class Interval(Enum):
    DAY = "day"
    WEEK = "week"
    MONTH = "month"
    YEAR = "year"


SENTINEL_ENUMS: tuple[type[Enum], ...] = (
    SubscriptionTrialEnd,
    SubscriptionBillingCycleAnchor,
    CollectionMethod,
    PaymentBehavior,
    Interval,
)

# ============================================================================
# Nested records
# ============================================================================


class SubscriptionBillingThresholdsOptions(OptionsRecord):
    amount_gte = option(
        Scalar(int, ge=0),
        doc="Monetary threshold that triggers the subscription to advance to a new billing period.",
    )
    reset_billing_cycle_anchor = option(
        Scalar(bool),
        doc="Whether the billing cycle anchor resets when a threshold is reached.",
    )


class SubscriptionItemBillingThresholdsOptions(OptionsRecord):
    usage_gte = option(Scalar(int, ge=0), doc="Usage threshold that triggers an invoice.")


class SubscriptionPendingInvoiceItemIntervalOptions(OptionsRecord):
    interval = option(Sentinel(Interval))
    interval_count = option(Scalar(int, ge=1))


class SubscriptionTransferDataOptions(OptionsRecord):
    destination = option(Scalar(str), doc="ID of the account receiving the transfer.")
    amount_percent = option(Scalar(Decimal, ge=0, le=100, decimal_places=2))


class SubscriptionItemOptions(OptionsRecord):
    """One line of a subscription; successor of the legacy top-level plan/quantity pair."""

    plan = option(Scalar(str))
    quantity = option(Scalar(int, ge=0))
    billing_thresholds = option(ClearableNestedObject(SubscriptionItemBillingThresholdsOptions))
    metadata = option(MapOf())
    tax_rates = option(ListOf(Scalar(str)), clearable=True)


class SubscriptionItemUpdateOptions(SubscriptionItemOptions):
    """Item line on an update; `id` targets an existing item."""

    id = option(Scalar(str))
    deleted = option(Scalar(bool))
    clear_usage = option(Scalar(bool))


# ============================================================================
# Requests
# ============================================================================


class SubscriptionSharedOptions(OptionsRecord, abstract=True):
    """
    Options shared by subscription create and update requests.

    Notes:
        - trial_end is a union: a timezone-aware datetime (encoded as epoch seconds) or
          SubscriptionTrialEnd.NOW (encoded as "now").
        - trial_end and trial_from_plan are mutually exclusive.
        - plan, quantity and tax_percent are legacy fields; they still serialize, and an
          advisory is surfaced when they are projected.
    """

    exclusive_groups = (("trial_end", "trial_from_plan"),)

    application_fee_percent = option(
        Scalar(Decimal, ge=0, le=100, decimal_places=2),
        doc="Percentage of the invoice subtotal transferred to the application owner.",
    )
    billing_thresholds = option(ClearableNestedObject(SubscriptionBillingThresholdsOptions))
    cancel_at = option(Timestamp(), doc="Moment at which the subscription should cancel.")
    cancel_at_period_end = option(Scalar(bool))
    collection_method = option(Sentinel(CollectionMethod))
    coupon = option(Scalar(str), clearable=True)
    days_until_due = option(Scalar(int, ge=0))
    default_payment_method = option(Scalar(str))
    default_source = option(Scalar(str))
    default_tax_rates = option(ListOf(Scalar(str)), clearable=True)
    metadata = option(MapOf())
    pending_invoice_item_interval = option(
        ClearableNestedObject(SubscriptionPendingInvoiceItemIntervalOptions)
    )
    off_session = option(Scalar(bool))
    payment_behavior = option(Sentinel(PaymentBehavior))
    prorate = option(Scalar(bool))
    tax_percent = option(
        Scalar(Decimal, ge=0, le=100, decimal_places=4),
        deprecated=True,
        successor="default_tax_rates",
    )
    trial_end = option(Either(Timestamp(), Sentinel(SubscriptionTrialEnd)))
    trial_from_plan = option(Scalar(bool))
    plan = option(Scalar(str), deprecated=True, successor="items")
    quantity = option(Scalar(int, ge=0), deprecated=True, successor="items")
    transfer_data = option(NestedObject(SubscriptionTransferDataOptions))


class SubscriptionCreateOptions(SubscriptionSharedOptions):
    customer = option(Scalar(str))
    billing_cycle_anchor = option(Timestamp())
    trial_period_days = option(Scalar(int, ge=0))
    items = option(ListOf(NestedObject(SubscriptionItemOptions)))


class SubscriptionUpdateOptions(SubscriptionSharedOptions):
    billing_cycle_anchor = option(Sentinel(SubscriptionBillingCycleAnchor))
    proration_date = option(Timestamp())
    items = option(ListOf(NestedObject(SubscriptionItemUpdateOptions)))

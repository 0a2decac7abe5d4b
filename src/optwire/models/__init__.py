"""
optwire.models — Concrete request-options records.

## Public API
- SubscriptionCreateOptions / SubscriptionUpdateOptions — subscription requests built on
  SubscriptionSharedOptions (abstract).
- Nested records: billing thresholds, pending invoice item interval, transfer data, items.
- Sentinel enums: SubscriptionTrialEnd, SubscriptionBillingCycleAnchor, CollectionMethod,
  PaymentBehavior, Interval.

## Import DAG discipline
- Depends only on optwire.core.
"""

from __future__ import annotations

from .subscriptions import (
    CollectionMethod,
    Interval,
    PaymentBehavior,
    SubscriptionBillingCycleAnchor,
    SubscriptionBillingThresholdsOptions,
    SubscriptionCreateOptions,
    SubscriptionItemBillingThresholdsOptions,
    SubscriptionItemOptions,
    SubscriptionItemUpdateOptions,
    SubscriptionPendingInvoiceItemIntervalOptions,
    SubscriptionSharedOptions,
    SubscriptionTransferDataOptions,
    SubscriptionTrialEnd,
    SubscriptionUpdateOptions,
)

__all__ = [
    "CollectionMethod",
    "Interval",
    "PaymentBehavior",
    "SubscriptionBillingCycleAnchor",
    "SubscriptionBillingThresholdsOptions",
    "SubscriptionCreateOptions",
    "SubscriptionItemBillingThresholdsOptions",
    "SubscriptionItemOptions",
    "SubscriptionItemUpdateOptions",
    "SubscriptionPendingInvoiceItemIntervalOptions",
    "SubscriptionSharedOptions",
    "SubscriptionTransferDataOptions",
    "SubscriptionTrialEnd",
    "SubscriptionUpdateOptions",
]

"""Subscription signal interface.

The engine never talks to a billing SDK directly.  It consumes a
:class:`SubscriptionSignal`: a synchronous "is this entitlement active"
check against the signal's latest known customer state, plus async purchase
and restore attempts that report a :class:`~pyexcuse.models.PurchaseOutcome`.
"""

from __future__ import annotations

import logging
from typing import Any, Protocol

from pyexcuse.models.results import PurchaseOutcome

_logger = logging.getLogger(__name__)

PURCHASES_UNAVAILABLE = "In-app purchases are not available on this platform"


class SubscriptionSignal(Protocol):
    """Structural interface for the subscription/purchase collaborator."""

    def has_active_entitlement(self, entitlement_id: str) -> bool:
        ...

    async def attempt_purchase(self, package_ref: Any) -> PurchaseOutcome:
        ...

    async def restore_purchases(self) -> PurchaseOutcome:
        ...


class OfflineSubscription:
    """Signal used when no store is reachable.

    Never reports an active entitlement and answers every purchase or
    restore attempt with a failure.  Entitlement can still be granted
    locally through the engine's purchase flag or testing override.
    """

    def has_active_entitlement(self, entitlement_id: str) -> bool:
        return False

    async def attempt_purchase(self, package_ref: Any) -> PurchaseOutcome:
        _logger.debug("Purchase of %r requested without a store", package_ref)
        return PurchaseOutcome.failed(PURCHASES_UNAVAILABLE)

    async def restore_purchases(self) -> PurchaseOutcome:
        _logger.debug("Restore requested without a store")
        return PurchaseOutcome.failed(PURCHASES_UNAVAILABLE)

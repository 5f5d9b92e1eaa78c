"""Effective entitlement resolution."""

from __future__ import annotations

import logging

from pyexcuse._constants import StorageKey
from pyexcuse.state.codec import encode_flag
from pyexcuse.state.writer import PersistenceWriter
from pyexcuse.subscription import SubscriptionSignal

_logger = logging.getLogger(__name__)


class EntitlementResolver:
    """Combine the local purchase flag, the testing override and the
    subscription signal into one entitlement boolean.

    The local purchase flag is a one-way latch: :meth:`mark_purchased` or
    an active external signal sets it, and only :meth:`reset` clears it.
    The testing override is independent and never implies a purchase.
    """

    def __init__(
        self,
        signal: SubscriptionSignal,
        writer: PersistenceWriter,
        *,
        entitlement_id: str,
    ) -> None:
        self._signal = signal
        self._writer = writer
        self._entitlement_id = entitlement_id
        self._purchased = False
        self._testing_override = False

    @property
    def has_real_purchase(self) -> bool:
        return self._purchased

    @property
    def testing_override(self) -> bool:
        return self._testing_override

    def external_active(self) -> bool:
        return self._signal.has_active_entitlement(self._entitlement_id)

    def is_entitled(self) -> bool:
        return self._purchased or self._testing_override or self.external_active()

    def mark_purchased(self) -> bool:
        """Latch the local purchase flag.  Returns ``True`` if it changed."""
        if self._purchased:
            return False
        self._purchased = True
        self._writer.set(StorageKey.PURCHASED, encode_flag(True))
        _logger.debug("Local purchase recorded")
        return True

    def set_testing_override(self, enabled: bool) -> None:
        self._testing_override = enabled
        self._writer.set(StorageKey.DEV_FORCE_PURCHASED, encode_flag(enabled))
        _logger.debug("Testing override set to %s", enabled)

    def on_external_signal_changed(self, active: bool) -> bool:
        """Absorb an active external entitlement into the local flag.

        Inactive signals are ignored.  Returns ``True`` if the flag was
        latched by this call.
        """
        if not active or self._purchased:
            return False
        _logger.debug("External entitlement %r observed active; latching purchase", self._entitlement_id)
        return self.mark_purchased()

    def hydrate(self, *, purchased: bool, testing_override: bool) -> None:
        self._purchased = purchased
        self._testing_override = testing_override

    def reset(self) -> None:
        self._purchased = False
        self._testing_override = False

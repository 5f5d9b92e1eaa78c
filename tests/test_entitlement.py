from __future__ import annotations

from typing import Any

import pytest

from pyexcuse._constants import StorageKey
from pyexcuse.models.results import PurchaseOutcome
from pyexcuse.state.budget import TapBudget
from pyexcuse.state.entitlement import EntitlementResolver
from pyexcuse.state.writer import PersistenceWriter
from pyexcuse.storage import MemoryStorage


class _Signal:
    def __init__(self, active: bool = False) -> None:
        self.active = active
        self.queried: list[str] = []

    def has_active_entitlement(self, entitlement_id: str) -> bool:
        self.queried.append(entitlement_id)
        return self.active

    async def attempt_purchase(self, package_ref: Any) -> PurchaseOutcome:  # pragma: no cover
        return PurchaseOutcome.succeeded()

    async def restore_purchases(self) -> PurchaseOutcome:  # pragma: no cover
        return PurchaseOutcome.succeeded()


def _resolver(signal: _Signal, storage: MemoryStorage) -> tuple[EntitlementResolver, PersistenceWriter]:
    writer = PersistenceWriter(storage)
    return EntitlementResolver(signal, writer, entitlement_id="premium"), writer


@pytest.mark.asyncio
async def test_defaults_to_unentitled() -> None:
    signal = _Signal()
    resolver, _writer = _resolver(signal, MemoryStorage())

    assert resolver.is_entitled() is False
    assert resolver.has_real_purchase is False
    assert resolver.testing_override is False
    assert signal.queried == ["premium"]


@pytest.mark.asyncio
async def test_mark_purchased_is_idempotent_and_persisted() -> None:
    storage = MemoryStorage()
    resolver, writer = _resolver(_Signal(), storage)

    assert resolver.mark_purchased() is True
    assert resolver.mark_purchased() is False
    await writer.flush()

    assert resolver.is_entitled()
    assert storage.snapshot() == {StorageKey.PURCHASED: "true"}


@pytest.mark.asyncio
async def test_testing_override_does_not_imply_purchase() -> None:
    storage = MemoryStorage()
    resolver, writer = _resolver(_Signal(), storage)

    resolver.set_testing_override(True)
    await writer.flush()
    assert resolver.is_entitled()
    assert resolver.has_real_purchase is False
    assert storage.snapshot() == {StorageKey.DEV_FORCE_PURCHASED: "true"}

    resolver.set_testing_override(False)
    await writer.flush()
    assert resolver.is_entitled() is False
    assert storage.snapshot() == {StorageKey.DEV_FORCE_PURCHASED: "false"}


@pytest.mark.asyncio
async def test_active_external_signal_is_latched() -> None:
    storage = MemoryStorage()
    signal = _Signal(active=True)
    resolver, writer = _resolver(signal, storage)

    assert resolver.is_entitled()
    assert resolver.on_external_signal_changed(True) is True
    await writer.flush()
    assert storage.snapshot() == {StorageKey.PURCHASED: "true"}

    # Subscription lapses: the absorbed purchase keeps the user entitled.
    signal.active = False
    assert resolver.on_external_signal_changed(False) is False
    assert resolver.is_entitled()
    assert resolver.has_real_purchase


@pytest.mark.asyncio
async def test_inactive_signal_never_writes() -> None:
    storage = MemoryStorage()
    resolver, writer = _resolver(_Signal(), storage)

    assert resolver.on_external_signal_changed(False) is False
    await writer.flush()

    assert storage.snapshot() == {}


@pytest.mark.asyncio
async def test_only_reset_clears_purchase() -> None:
    resolver, writer = _resolver(_Signal(), MemoryStorage())
    resolver.mark_purchased()
    resolver.set_testing_override(False)
    resolver.on_external_signal_changed(False)
    await writer.flush()
    assert resolver.is_entitled()

    resolver.reset()
    assert resolver.is_entitled() is False
    assert resolver.has_real_purchase is False


@pytest.mark.asyncio
async def test_tap_budget_counts_down_and_persists() -> None:
    storage = MemoryStorage()
    writer = PersistenceWriter(storage)
    budget = TapBudget(3, writer)

    for expected in (1, 2, 3):
        assert budget.can_consume(entitled=False)
        assert budget.consume() == expected

    await writer.flush()
    assert budget.can_consume(entitled=False) is False
    assert budget.can_consume(entitled=True) is True
    assert budget.remaining() == 0
    assert storage.snapshot() == {StorageKey.TAP_COUNT: "3"}


def test_tap_budget_remaining_never_negative() -> None:
    budget = TapBudget(3, PersistenceWriter(MemoryStorage()))
    budget.hydrate(7)

    assert budget.count == 7
    assert budget.remaining() == 0

    budget.hydrate(-2)
    assert budget.count == 0
    assert budget.remaining() == 3

    budget.reset()
    assert budget.count == 0

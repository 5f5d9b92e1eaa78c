"""Entitlement and quote-rotation engine."""

from __future__ import annotations

import asyncio
import logging
import random
from collections.abc import Callable
from datetime import date
from typing import Any, TypeVar

from pyexcuse._constants import ALL_STORAGE_KEYS, StorageKey
from pyexcuse.config import EngineConfig
from pyexcuse.exceptions import ExcuseNotReadyError, ExcuseSnapshotError
from pyexcuse.models.lucky_day import LuckyDay
from pyexcuse.models.results import PurchaseOutcome, TapResult
from pyexcuse.models.status import EngineStatus
from pyexcuse.quotes import FREE_POOL, GOLD_QUOTE, PREMIUM_POOL, QuotePool
from pyexcuse.state import codec
from pyexcuse.state.budget import TapBudget
from pyexcuse.state.entitlement import EntitlementResolver
from pyexcuse.state.lucky_day import LuckyDayRegistry
from pyexcuse.state.sampler import QuotePoolSampler
from pyexcuse.state.seen import SeenQuoteRegistry
from pyexcuse.state.writer import PersistenceWriter
from pyexcuse.storage import PersistenceGateway
from pyexcuse.subscription import OfflineSubscription, SubscriptionSignal

_logger = logging.getLogger(__name__)

T = TypeVar("T")


def _decode(key: StorageKey, raw: str | None, decoder: Callable[[str], T], default: T) -> T:
    """Decode one persisted value, falling back to *default* on bad data."""
    if raw is None:
        return default
    try:
        return decoder(raw)
    except ExcuseSnapshotError as exc:
        _logger.warning("Discarding persisted %s: %s", key, exc)
        return default


class ExcuseEngine:
    """Decides, for every tap, which quote to reveal and whether it is free.

    All decisions are made synchronously against in-memory state.  Every
    mutation is persisted by a background task that the operation does
    not wait for, so the durable snapshot can trail the in-memory state
    by one write per key.

    Usage::

        async with ExcuseEngine(JsonFileStorage("state.json")) as engine:
            result = engine.tap()
            if result.needs_purchase:
                outcome = await engine.purchase(package)

    Parameters
    ----------
    storage : PersistenceGateway
        Durable key-value store.
    subscription : SubscriptionSignal or None
        Subscription collaborator.  Defaults to :class:`OfflineSubscription`.
    config : EngineConfig or None
        Engine configuration.  Defaults to ``EngineConfig()``.
    rng : random.Random or None
        Random source for quote draws.  Defaults to one seeded with
        ``config.rng_seed``.
    free_pool, premium_pool : QuotePool
        Quote pools for unentitled and entitled draws.
    gold_quote : str
        Quote revealed on the lucky day.
    """

    def __init__(
        self,
        storage: PersistenceGateway,
        subscription: SubscriptionSignal | None = None,
        *,
        config: EngineConfig | None = None,
        rng: random.Random | None = None,
        free_pool: QuotePool = FREE_POOL,
        premium_pool: QuotePool = PREMIUM_POOL,
        gold_quote: str = GOLD_QUOTE,
    ) -> None:
        self._config = config or EngineConfig()
        self._storage = storage
        self._signal: SubscriptionSignal = subscription or OfflineSubscription()
        self._writer = PersistenceWriter(storage)
        self._entitlement = EntitlementResolver(
            self._signal,
            self._writer,
            entitlement_id=self._config.entitlement_id,
        )
        self._budget = TapBudget(self._config.free_tap_limit, self._writer)
        self._seen = SeenQuoteRegistry(self._writer)
        self._lucky_days = LuckyDayRegistry(self._writer)
        self._sampler = QuotePoolSampler(
            free_pool,
            premium_pool,
            gold_quote,
            seen=self._seen,
            writer=self._writer,
            rng=rng or random.Random(self._config.rng_seed),
        )
        self._current_quote: str | None = None
        self._loaded = False
        self._loading: asyncio.Future[None] | None = None

    # ------------------------------------------------------------------
    # Context manager lifecycle
    # ------------------------------------------------------------------

    async def __aenter__(self) -> ExcuseEngine:
        await self.load()
        return self

    async def __aexit__(self, *exc: Any) -> None:
        await self.flush()

    # ------------------------------------------------------------------
    # Startup
    # ------------------------------------------------------------------

    async def load(self) -> None:
        """Read the persisted snapshot and hydrate every entity.

        Unreadable or malformed keys fall back to their defaults; loading
        never fails because of stored data.  Concurrent callers share one
        load, and calling it again afterwards is a no-op.
        """
        if self._loaded:
            return
        if self._loading is None:
            self._loading = asyncio.ensure_future(self._load())
        loading = self._loading
        try:
            await asyncio.shield(loading)
        except BaseException:
            if self._loading is loading and loading.done():
                self._loading = None
            raise

    async def _load(self) -> None:
        self._writer.bind(asyncio.get_running_loop())

        results = await asyncio.gather(
            *(self._storage.get(key) for key in ALL_STORAGE_KEYS),
            return_exceptions=True,
        )
        raw: dict[StorageKey, str | None] = {}
        for key, result in zip(ALL_STORAGE_KEYS, results, strict=True):
            if isinstance(result, Exception):
                _logger.warning("Could not read %s; using default", key, exc_info=result)
                raw[key] = None
            elif isinstance(result, BaseException):
                raise result
            else:
                raw[key] = result

        self._hydrate(raw)
        self._loaded = True
        _logger.debug(
            "Loaded state purchased=%s testing_override=%s tap_count=%d seen=%d",
            self._entitlement.has_real_purchase,
            self._entitlement.testing_override,
            self._budget.count,
            self._seen.count_seen(),
        )
        self.sync_subscription()

    def _hydrate(self, raw: dict[StorageKey, str | None]) -> None:
        free_size = len(self._sampler.free_pool)
        premium_size = len(self._sampler.premium_pool)

        self._entitlement.hydrate(
            purchased=codec.decode_flag(raw[StorageKey.PURCHASED]),
            testing_override=codec.decode_flag(raw[StorageKey.DEV_FORCE_PURCHASED]),
        )
        self._budget.hydrate(
            _decode(
                StorageKey.TAP_COUNT,
                raw[StorageKey.TAP_COUNT],
                lambda value: codec.decode_count(StorageKey.TAP_COUNT, value),
                0,
            )
        )
        self._sampler.hydrate(
            free=_decode(
                StorageKey.USED_POOL_A_INDICES,
                raw[StorageKey.USED_POOL_A_INDICES],
                lambda value: codec.decode_indices(StorageKey.USED_POOL_A_INDICES, value, free_size),
                frozenset(),
            ),
            premium=_decode(
                StorageKey.USED_POOL_B_INDICES,
                raw[StorageKey.USED_POOL_B_INDICES],
                lambda value: codec.decode_indices(StorageKey.USED_POOL_B_INDICES, value, premium_size),
                frozenset(),
            ),
        )
        self._lucky_days.hydrate(
            _decode(
                StorageKey.LUCKY_DAY,
                raw[StorageKey.LUCKY_DAY],
                lambda value: codec.decode_lucky_day(StorageKey.LUCKY_DAY, value),
                None,
            )
        )
        self._seen.hydrate(
            _decode(
                StorageKey.ALL_TIME_SEEN_QUOTES,
                raw[StorageKey.ALL_TIME_SEEN_QUOTES],
                lambda value: codec.decode_quotes(StorageKey.ALL_TIME_SEEN_QUOTES, value),
                [],
            )
        )

    def _require_loaded(self) -> None:
        if not self._loaded:
            raise ExcuseNotReadyError(
                "Engine not loaded. Use 'await engine.load()' or 'async with ExcuseEngine(...) as engine:'"
            )

    async def flush(self) -> None:
        """Wait for every persistence write still in flight."""
        await self._writer.flush()

    # ------------------------------------------------------------------
    # Taps
    # ------------------------------------------------------------------

    def tap(self, is_gold_day: bool = False) -> TapResult:
        """Reveal the next quote, or report that a purchase is needed.

        Gold taps always succeed and never consume a free tap or a pool
        slot.  Other taps draw from the premium pool when entitled and
        from the free pool otherwise, consuming one free tap while
        unentitled.  Once the free taps are used up an unentitled tap
        changes nothing and returns ``needs_purchase=True``.
        """
        self._require_loaded()

        if is_gold_day:
            quote = self._sampler.draw_gold()
            self._current_quote = quote
            return TapResult.revealed(quote, is_gold=True)

        entitled = self._entitlement.is_entitled()
        if not self._budget.can_consume(entitled):
            _logger.debug("Free taps used up (%d/%d); purchase required", self._budget.count, self._budget.limit)
            return TapResult.paywalled()

        quote = self._sampler.draw(entitled)
        if not entitled:
            self._budget.consume()
        self._current_quote = quote
        return TapResult.revealed(quote)

    def tap_day(self, month: int, day: int) -> TapResult:
        """Tap a calendar day; the lucky day yields the gold quote."""
        return self.tap(self.is_lucky_day(month, day))

    def tap_date(self, value: date) -> TapResult:
        """Tap the calendar entry for *value*; the lucky day yields the gold quote."""
        return self.tap(self._lucky_days.is_lucky_on(value))

    def clear_current_quote(self) -> None:
        self._current_quote = None

    # ------------------------------------------------------------------
    # Entitlement
    # ------------------------------------------------------------------

    def mark_purchased(self) -> None:
        """Unlock locally without going through the subscription signal."""
        self._require_loaded()
        self._entitlement.mark_purchased()

    async def purchase(self, package_ref: Any = None) -> PurchaseOutcome:
        """Attempt a purchase through the subscription signal.

        A successful purchase latches the local purchase flag.  A
        cancellation or failure leaves state untouched; exceptions raised
        by the signal are reported as a failed outcome.
        """
        self._require_loaded()
        try:
            outcome = await self._signal.attempt_purchase(package_ref)
        except Exception as exc:
            _logger.warning("Purchase attempt raised", exc_info=True)
            outcome = PurchaseOutcome.from_error(str(exc) or None)

        if outcome.success:
            self._entitlement.mark_purchased()
            _logger.debug("Purchase succeeded; premium unlocked")
        elif outcome.user_cancelled:
            _logger.debug("Purchase cancelled by user")
        else:
            _logger.warning("Purchase failed: %s", outcome.error)
        return outcome

    async def restore_purchases(self) -> PurchaseOutcome:
        """Ask the signal to restore purchases, then absorb any entitlement."""
        self._require_loaded()
        try:
            outcome = await self._signal.restore_purchases()
        except Exception as exc:
            _logger.warning("Restore attempt raised", exc_info=True)
            outcome = PurchaseOutcome.failed(str(exc) or "Restore failed")

        if outcome.success:
            self.sync_subscription()
        return outcome

    def sync_subscription(self) -> bool:
        """Poll the signal and absorb an active entitlement.

        Returns whether the external entitlement is currently active.
        """
        self._require_loaded()
        active = self._entitlement.external_active()
        self._entitlement.on_external_signal_changed(active)
        return active

    def on_subscription_changed(self, active: bool) -> None:
        """Handle a pushed change of the external entitlement."""
        self._require_loaded()
        self._entitlement.on_external_signal_changed(active)

    def set_paid_for_testing(self, paid: bool) -> None:
        self._require_loaded()
        self._entitlement.set_testing_override(paid)

    async def reset_for_testing(self) -> None:
        """Restore every entity to its defaults and delete all persisted keys."""
        self._require_loaded()
        _logger.debug("Resetting all state")
        self._entitlement.reset()
        self._budget.reset()
        self._sampler.reset()
        self._seen.reset()
        self._lucky_days.reset()
        self._current_quote = None
        for key in ALL_STORAGE_KEYS:
            self._writer.remove(key)
        await self._writer.flush()

    # ------------------------------------------------------------------
    # Lucky day
    # ------------------------------------------------------------------

    def set_lucky_day(self, month: int, day: int, year: int | None = None) -> LuckyDay:
        """Choose the lucky day.  *year* defaults to the current year."""
        self._require_loaded()
        return self._lucky_days.set(month, day, year if year is not None else date.today().year)

    def clear_lucky_day(self) -> None:
        self._require_loaded()
        self._lucky_days.clear()

    def is_lucky_day(self, month: int, day: int) -> bool:
        return self._lucky_days.is_lucky_day(month, day)

    # ------------------------------------------------------------------
    # Read-only views
    # ------------------------------------------------------------------

    @property
    def config(self) -> EngineConfig:
        return self._config

    @property
    def is_loading(self) -> bool:
        return not self._loaded

    @property
    def is_entitled(self) -> bool:
        return self._entitlement.is_entitled()

    @property
    def has_real_purchase(self) -> bool:
        return self._entitlement.has_real_purchase

    @property
    def testing_override(self) -> bool:
        return self._entitlement.testing_override

    @property
    def tap_count(self) -> int:
        return self._budget.count

    @property
    def remaining_free_taps(self) -> int:
        return self._budget.remaining()

    @property
    def can_get_free_quote(self) -> bool:
        return self._free_quote_available(self.is_entitled)

    def _free_quote_available(self, entitled: bool) -> bool:
        return not entitled and self._budget.count < self._budget.limit

    @property
    def lucky_day(self) -> LuckyDay | None:
        return self._lucky_days.current

    @property
    def seen_count(self) -> int:
        return self._seen.count_seen()

    @property
    def seen_display_count(self) -> int:
        return self._seen.display_count(self._config.seen_display_cap)

    @property
    def current_quote(self) -> str | None:
        return self._current_quote

    def status(self) -> EngineStatus:
        entitled = self.is_entitled
        return EngineStatus(
            is_loading=self.is_loading,
            is_entitled=entitled,
            has_real_purchase=self.has_real_purchase,
            testing_override=self.testing_override,
            tap_count=self.tap_count,
            remaining_free_taps=self.remaining_free_taps,
            can_get_free_quote=self._free_quote_available(entitled),
            lucky_day=self.lucky_day,
            seen_count=self.seen_count,
            seen_display_count=self.seen_display_count,
            current_quote=self.current_quote,
        )

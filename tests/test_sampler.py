from __future__ import annotations

import random
from collections.abc import Sequence
from typing import Any

import pytest

from pyexcuse._constants import StorageKey
from pyexcuse.quotes import QuotePool
from pyexcuse.state.codec import decode_indices
from pyexcuse.state.sampler import ConsumptionState, QuotePoolSampler, draw
from pyexcuse.state.seen import SeenQuoteRegistry
from pyexcuse.state.writer import PersistenceWriter
from pyexcuse.storage import MemoryStorage

_POOL = QuotePool(name="free", quotes=("q0", "q1", "q2", "q3", "q4"))
_PREMIUM = QuotePool(name="premium", quotes=("p0", "p1", "p2"))
_GOLD = "gold"


class _LastChoiceRandom(random.Random):
    """Deterministic stand-in: always picks the last candidate / a fixed index."""

    def __init__(self, fixed_index: int) -> None:
        super().__init__(0)
        self._fixed_index = fixed_index

    def choice(self, seq: Sequence[Any]) -> Any:
        return seq[-1]

    def randrange(self, *_args: Any, **_kwargs: Any) -> int:
        return self._fixed_index


def test_draw_grows_consumption_by_one_until_exhausted() -> None:
    rng = random.Random(1234)
    state = ConsumptionState()
    drawn: list[int] = []

    for expected_size in range(1, len(_POOL) + 1):
        result = draw(_POOL, state, rng)
        assert not result.reset
        assert result.index not in state
        assert len(result.state) == expected_size
        assert result.quote == _POOL[result.index]
        drawn.append(result.index)
        state = result.state

    assert sorted(drawn) == list(range(len(_POOL)))


def test_draw_after_exhaustion_resets_to_single_index() -> None:
    state = ConsumptionState(indices=frozenset(range(len(_POOL))))

    result = draw(_POOL, state, random.Random(99))

    assert result.reset
    assert result.state.indices == frozenset({result.index})
    assert 0 <= result.index < len(_POOL)


def test_reset_can_repeat_the_last_drawn_quote() -> None:
    rng = _LastChoiceRandom(fixed_index=0)
    state = ConsumptionState()
    last = None
    for _ in range(len(_POOL)):
        result = draw(_POOL, state, rng)
        state = result.state
        last = result.index

    assert last == 0
    repeated = draw(_POOL, state, rng)
    assert repeated.reset
    assert repeated.index == last


def test_consumption_state_is_immutable() -> None:
    state = ConsumptionState(indices=frozenset({1}))
    grown = state.with_index(2)

    assert state.indices == frozenset({1})
    assert grown.indices == frozenset({1, 2})


def _sampler(storage: MemoryStorage, rng: random.Random | None = None) -> tuple[QuotePoolSampler, SeenQuoteRegistry, PersistenceWriter]:
    writer = PersistenceWriter(storage)
    seen = SeenQuoteRegistry(writer)
    sampler = QuotePoolSampler(
        _POOL,
        _PREMIUM,
        _GOLD,
        seen=seen,
        writer=writer,
        rng=rng or random.Random(5),
    )
    return sampler, seen, writer


@pytest.mark.asyncio
async def test_sampler_draws_from_pool_matching_entitlement() -> None:
    storage = MemoryStorage()
    sampler, seen, writer = _sampler(storage)

    free_quote = sampler.draw(entitled=False)
    premium_quote = sampler.draw(entitled=True)
    await writer.flush()

    assert free_quote in _POOL.quotes
    assert premium_quote in _PREMIUM.quotes
    assert len(sampler.consumed(entitled=False)) == 1
    assert len(sampler.consumed(entitled=True)) == 1
    assert seen.quotes == (free_quote, premium_quote)

    stored = storage.snapshot()
    assert decode_indices("a", stored[StorageKey.USED_POOL_A_INDICES], len(_POOL)) == sampler.consumed(False).indices
    assert decode_indices("b", stored[StorageKey.USED_POOL_B_INDICES], len(_PREMIUM)) == sampler.consumed(True).indices


@pytest.mark.asyncio
async def test_gold_draw_touches_only_seen_registry() -> None:
    storage = MemoryStorage()
    sampler, seen, writer = _sampler(storage)

    assert sampler.draw_gold() == _GOLD
    await writer.flush()

    assert len(sampler.consumed(entitled=False)) == 0
    assert len(sampler.consumed(entitled=True)) == 0
    assert _GOLD in seen
    assert set(storage.snapshot()) == {StorageKey.ALL_TIME_SEEN_QUOTES}


@pytest.mark.asyncio
async def test_sampler_wraps_around_and_persists_reset_state() -> None:
    storage = MemoryStorage()
    sampler, _seen, writer = _sampler(storage)

    for _ in range(len(_PREMIUM)):
        sampler.draw(entitled=True)
    assert len(sampler.consumed(entitled=True)) == len(_PREMIUM)

    sampler.draw(entitled=True)
    await writer.flush()

    assert len(sampler.consumed(entitled=True)) == 1
    stored = decode_indices("b", storage.snapshot()[StorageKey.USED_POOL_B_INDICES], len(_PREMIUM))
    assert stored == sampler.consumed(entitled=True).indices


@pytest.mark.asyncio
async def test_sampler_hydrate_and_reset() -> None:
    sampler, _seen, _writer = _sampler(MemoryStorage())

    sampler.hydrate(free=frozenset({0, 1}), premium=frozenset({2}))
    assert sampler.consumed(entitled=False).indices == frozenset({0, 1})
    assert sampler.consumed(entitled=True).indices == frozenset({2})

    sampler.reset()
    assert len(sampler.consumed(entitled=False)) == 0
    assert len(sampler.consumed(entitled=True)) == 0


def test_quote_pool_rejects_empty_pool() -> None:
    with pytest.raises(ValueError):
        QuotePool(name="empty", quotes=())

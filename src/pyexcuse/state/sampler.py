"""Shuffle-bag quote sampling.

:func:`draw` is the pure algorithm: pick uniformly among the indices not
yet consumed and, once the pool is exhausted, start over from the full
pool.  Starting over may pick the quote that was just shown; that repeat
is allowed.

:class:`QuotePoolSampler` owns the consumption state of the free and
premium pools and wires each draw to the seen registry and the writer.
"""

from __future__ import annotations

import dataclasses
import logging
import random

from pyexcuse._constants import StorageKey
from pyexcuse.models._base import ExcuseBaseModel
from pyexcuse.quotes import QuotePool
from pyexcuse.state.codec import encode_indices
from pyexcuse.state.seen import SeenQuoteRegistry
from pyexcuse.state.writer import PersistenceWriter

_logger = logging.getLogger(__name__)


class ConsumptionState(ExcuseBaseModel):
    """Indices of one pool already drawn since the last reset."""

    indices: frozenset[int] = frozenset()

    def __len__(self) -> int:
        return len(self.indices)

    def __contains__(self, index: object) -> bool:
        return index in self.indices

    def with_index(self, index: int) -> ConsumptionState:
        return ConsumptionState(indices=self.indices | {index})


@dataclasses.dataclass(frozen=True, slots=True)
class Draw:
    quote: str
    index: int
    state: ConsumptionState
    reset: bool = False


def draw(pool: QuotePool, state: ConsumptionState, rng: random.Random) -> Draw:
    """Draw one quote from *pool* given what *state* has already consumed."""
    available = [i for i in pool.indices if i not in state]
    if available:
        index = rng.choice(available)
        return Draw(quote=pool[index], index=index, state=state.with_index(index))

    index = rng.randrange(len(pool))
    return Draw(quote=pool[index], index=index, state=ConsumptionState(indices=frozenset({index})), reset=True)


@dataclasses.dataclass
class _PoolSlot:
    pool: QuotePool
    key: StorageKey
    state: ConsumptionState = dataclasses.field(default_factory=ConsumptionState)


class QuotePoolSampler:
    """Draws quotes for the engine.

    Parameters
    ----------
    free_pool, premium_pool : QuotePool
        Pools used while unentitled and entitled respectively.
    gold_quote : str
        Quote revealed on the lucky day.  It belongs to neither pool.
    seen : SeenQuoteRegistry
        Registry every revealed quote is recorded in.
    writer : PersistenceWriter
        Receives the updated consumption state after each pool draw.
    rng : random.Random
        Random source.
    """

    def __init__(
        self,
        free_pool: QuotePool,
        premium_pool: QuotePool,
        gold_quote: str,
        *,
        seen: SeenQuoteRegistry,
        writer: PersistenceWriter,
        rng: random.Random,
    ) -> None:
        self._free = _PoolSlot(free_pool, StorageKey.USED_POOL_A_INDICES)
        self._premium = _PoolSlot(premium_pool, StorageKey.USED_POOL_B_INDICES)
        self._gold_quote = gold_quote
        self._seen = seen
        self._writer = writer
        self._rng = rng

    def _slot(self, entitled: bool) -> _PoolSlot:
        return self._premium if entitled else self._free

    @property
    def free_pool(self) -> QuotePool:
        return self._free.pool

    @property
    def premium_pool(self) -> QuotePool:
        return self._premium.pool

    @property
    def gold_quote(self) -> str:
        return self._gold_quote

    def consumed(self, entitled: bool) -> ConsumptionState:
        return self._slot(entitled).state

    def draw(self, entitled: bool) -> str:
        slot = self._slot(entitled)
        result = draw(slot.pool, slot.state, self._rng)
        if result.reset:
            _logger.debug("Pool %s exhausted; starting over", slot.pool.name)
        slot.state = result.state
        self._seen.record(result.quote)
        self._writer.set(slot.key, encode_indices(result.state.indices))
        return result.quote

    def draw_gold(self) -> str:
        self._seen.record(self._gold_quote)
        return self._gold_quote

    def hydrate(self, *, free: frozenset[int], premium: frozenset[int]) -> None:
        self._free.state = ConsumptionState(indices=free)
        self._premium.state = ConsumptionState(indices=premium)

    def reset(self) -> None:
        self._free.state = ConsumptionState()
        self._premium.state = ConsumptionState()

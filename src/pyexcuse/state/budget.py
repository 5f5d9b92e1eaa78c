"""Free tap accounting."""

from __future__ import annotations

from pyexcuse._constants import StorageKey
from pyexcuse.state.codec import encode_count
from pyexcuse.state.writer import PersistenceWriter


class TapBudget:
    """Counter of free, non-gold taps consumed while unentitled."""

    def __init__(self, limit: int, writer: PersistenceWriter) -> None:
        self._limit = limit
        self._writer = writer
        self._count = 0

    @property
    def limit(self) -> int:
        return self._limit

    @property
    def count(self) -> int:
        return self._count

    def can_consume(self, entitled: bool) -> bool:
        return entitled or self._count < self._limit

    def consume(self) -> int:
        self._count += 1
        self._writer.set(StorageKey.TAP_COUNT, encode_count(self._count))
        return self._count

    def remaining(self) -> int:
        return max(0, self._limit - self._count)

    def hydrate(self, count: int) -> None:
        self._count = max(0, count)

    def reset(self) -> None:
        self._count = 0

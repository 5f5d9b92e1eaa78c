"""All-time seen quote tracking."""

from __future__ import annotations

from collections.abc import Iterable

from pyexcuse._constants import StorageKey
from pyexcuse.state.codec import encode_quotes
from pyexcuse.state.writer import PersistenceWriter


class SeenQuoteRegistry:
    """Distinct quotes ever revealed, in first-seen order."""

    def __init__(self, writer: PersistenceWriter) -> None:
        self._writer = writer
        self._quotes: list[str] = []
        self._index: set[str] = set()

    @property
    def quotes(self) -> tuple[str, ...]:
        return tuple(self._quotes)

    def __contains__(self, quote: object) -> bool:
        return quote in self._index

    def record(self, quote: str) -> bool:
        """Add *quote* if unseen.  Persists only when something was added."""
        if quote in self._index:
            return False
        self._index.add(quote)
        self._quotes.append(quote)
        self._writer.set(StorageKey.ALL_TIME_SEEN_QUOTES, encode_quotes(self._quotes))
        return True

    def count_seen(self) -> int:
        return len(self._quotes)

    def display_count(self, cap: int) -> int:
        return min(cap, max(0, self.count_seen()))

    def hydrate(self, quotes: Iterable[str]) -> None:
        self._quotes = []
        self._index = set()
        for quote in quotes:
            if quote not in self._index:
                self._index.add(quote)
                self._quotes.append(quote)

    def reset(self) -> None:
        self._quotes = []
        self._index = set()

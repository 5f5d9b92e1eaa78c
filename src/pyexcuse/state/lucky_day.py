"""Lucky day storage and matching."""

from __future__ import annotations

import logging
from datetime import date

from pyexcuse._constants import StorageKey
from pyexcuse.models.lucky_day import LuckyDay
from pyexcuse.state.codec import encode_lucky_day
from pyexcuse.state.writer import PersistenceWriter

_logger = logging.getLogger(__name__)


class LuckyDayRegistry:
    """Holds at most one lucky day.

    Matching compares month and day only, so a lucky day recurs on the
    same date every year.
    """

    def __init__(self, writer: PersistenceWriter) -> None:
        self._writer = writer
        self._lucky_day: LuckyDay | None = None

    @property
    def current(self) -> LuckyDay | None:
        return self._lucky_day

    def set(self, month: int, day: int, year: int) -> LuckyDay:
        """Replace the stored lucky day.

        Raises :class:`pydantic.ValidationError` (a ``ValueError``) for an
        impossible date; the previous lucky day is then kept.
        """
        lucky_day = LuckyDay(month=month, day=day, year=year)
        self._lucky_day = lucky_day
        self._writer.set(StorageKey.LUCKY_DAY, encode_lucky_day(lucky_day))
        _logger.debug("Lucky day set to %s", lucky_day)
        return lucky_day

    def clear(self) -> None:
        self._lucky_day = None
        self._writer.remove(StorageKey.LUCKY_DAY)

    def is_lucky_day(self, month: int, day: int) -> bool:
        if self._lucky_day is None:
            return False
        return self._lucky_day.matches(month, day)

    def is_lucky_on(self, value: date) -> bool:
        return self.is_lucky_day(value.month, value.day)

    def hydrate(self, lucky_day: LuckyDay | None) -> None:
        self._lucky_day = lucky_day

    def reset(self) -> None:
        self._lucky_day = None

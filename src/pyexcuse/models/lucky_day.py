"""Lucky day calendar coordinate."""

from __future__ import annotations

from datetime import date

from pydantic import Field, model_validator

from pyexcuse._constants import max_day_of_month
from pyexcuse.models._base import ExcuseBaseModel


class LuckyDay(ExcuseBaseModel):
    """A user-chosen ``(month, day, year)`` coordinate.

    Months are 1-12.  Day validity is checked against a leap year so
    29 February is always accepted; the year is kept for display only
    and plays no part in matching.
    """

    month: int = Field(ge=1, le=12)
    day: int = Field(ge=1, le=31)
    year: int = Field(ge=1)

    @model_validator(mode="after")
    def _check_day_in_month(self) -> LuckyDay:
        limit = max_day_of_month(self.month)
        if self.day > limit:
            raise ValueError(f"day must be between 1 and {limit} for month {self.month}, got {self.day}")
        return self

    @classmethod
    def from_date(cls, value: date) -> LuckyDay:
        return cls(month=value.month, day=value.day, year=value.year)

    def matches(self, month: int, day: int) -> bool:
        """Return ``True`` when *month*/*day* fall on this lucky day in any year."""
        return self.month == month and self.day == day

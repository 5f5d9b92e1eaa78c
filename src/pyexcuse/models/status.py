"""Read-only engine status view."""

from __future__ import annotations

from pyexcuse.models._base import ExcuseBaseModel
from pyexcuse.models.lucky_day import LuckyDay


class EngineStatus(ExcuseBaseModel):
    """Point-in-time snapshot of everything a UI needs to render."""

    is_loading: bool
    is_entitled: bool
    has_real_purchase: bool
    testing_override: bool
    tap_count: int
    remaining_free_taps: int
    can_get_free_quote: bool
    lucky_day: LuckyDay | None = None
    seen_count: int = 0
    seen_display_count: int = 0
    current_quote: str | None = None

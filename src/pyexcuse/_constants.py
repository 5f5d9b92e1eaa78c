"""Internal constants shared across the library."""

import enum

FREE_TAP_LIMIT = 3
SEEN_DISPLAY_CAP = 364
DEFAULT_ENTITLEMENT_ID = "premium"
REVENUECAT_BASE_URL = "https://api.revenuecat.com/v1"
USER_AGENT = "pyexcuse"

# Version tag written into every persisted JSON envelope.
SNAPSHOT_SCHEMA_VERSION = 1


class StorageKey(enum.StrEnum):
    """Keys of the persisted snapshot.

    Values are the literal strings written to the key-value store and must
    stay stable across releases.
    """

    PURCHASED = "purchased"
    DEV_FORCE_PURCHASED = "dev_force_purchased"
    TAP_COUNT = "tap_count"
    USED_POOL_A_INDICES = "used_pool_a_indices"
    USED_POOL_B_INDICES = "used_pool_b_indices"
    LUCKY_DAY = "lucky_day"
    ALL_TIME_SEEN_QUOTES = "all_time_seen_quotes"


ALL_STORAGE_KEYS: tuple[StorageKey, ...] = tuple(StorageKey)

# ------------------------------------------------------------------
# Calendar limits for lucky days (leap year so 29 February is allowed)
# ------------------------------------------------------------------

_DAYS_IN_MONTH: dict[int, int] = {
    1: 31,
    2: 29,
    3: 31,
    4: 30,
    5: 31,
    6: 30,
    7: 31,
    8: 31,
    9: 30,
    10: 31,
    11: 30,
    12: 31,
}


def max_day_of_month(month: int) -> int:
    """Return the largest valid day number for *month* (1-12).

    Raises :class:`ValueError` if *month* is outside 1-12.
    """
    try:
        return _DAYS_IN_MONTH[month]
    except KeyError:
        raise ValueError(f"month must be between 1 and 12, got {month}") from None

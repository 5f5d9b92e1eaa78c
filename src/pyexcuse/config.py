"""Engine configuration for pyexcuse."""

from __future__ import annotations

import dataclasses
import os
from typing import Any

from pyexcuse._constants import DEFAULT_ENTITLEMENT_ID, FREE_TAP_LIMIT, REVENUECAT_BASE_URL, SEEN_DISPLAY_CAP
from pyexcuse.exceptions import ExcuseConfigError


def _env_int(name: str, value: str) -> int:
    try:
        return int(value.strip())
    except ValueError as exc:
        raise ExcuseConfigError(f"{name} must be an integer, got {value!r}") from exc


@dataclasses.dataclass(frozen=True)
class EngineConfig:
    """Engine configuration.

    Parameters
    ----------
    free_tap_limit : int
        Number of free, non-gold reveals allowed before entitlement is
        required.
    entitlement_id : str
        Identifier of the subscription entitlement that unlocks the
        premium pool.
    seen_display_cap : int
        Upper bound applied when displaying the all-time seen count.
    rng_seed : int or None
        Seed for the quote sampler's random source.  ``None`` draws from
        system entropy.
    storage_path : str or None
        Path of the JSON document used by :class:`~pyexcuse.storage.JsonFileStorage`
        in the bundled CLI.
    revenuecat_api_key : str or None
        RevenueCat API key for :class:`~pyexcuse.revenuecat.RevenueCatSubscription`.
    revenuecat_app_user_id : str or None
        RevenueCat app user id whose entitlements are queried.
    revenuecat_base_url : str
        RevenueCat REST API base URL.
    """

    free_tap_limit: int = FREE_TAP_LIMIT
    entitlement_id: str = DEFAULT_ENTITLEMENT_ID
    seen_display_cap: int = SEEN_DISPLAY_CAP
    rng_seed: int | None = None
    storage_path: str | None = None
    revenuecat_api_key: str | None = None
    revenuecat_app_user_id: str | None = None
    revenuecat_base_url: str = REVENUECAT_BASE_URL

    def __post_init__(self) -> None:
        if self.free_tap_limit < 0:
            raise ExcuseConfigError(f"free_tap_limit must be >= 0, got {self.free_tap_limit}")
        if self.seen_display_cap < 0:
            raise ExcuseConfigError(f"seen_display_cap must be >= 0, got {self.seen_display_cap}")
        if not self.entitlement_id.strip():
            raise ExcuseConfigError("entitlement_id must be non-empty")

    @classmethod
    def from_env(cls, **overrides: Any) -> EngineConfig:
        """Create configuration from ``EXCUSE_*`` environment variables.

        Explicit keyword arguments override environment values.

        Parameters
        ----------
        **overrides
            Explicit field values that take precedence over env vars.

        Returns
        -------
        EngineConfig
            Populated configuration.
        """
        env = os.environ

        _ENV_STR_MAP = {
            "EXCUSE_ENTITLEMENT_ID": "entitlement_id",
            "EXCUSE_STORAGE_PATH": "storage_path",
            "EXCUSE_REVENUECAT_API_KEY": "revenuecat_api_key",
            "EXCUSE_REVENUECAT_APP_USER_ID": "revenuecat_app_user_id",
            "EXCUSE_REVENUECAT_BASE_URL": "revenuecat_base_url",
        }
        _ENV_INT_MAP = {
            "EXCUSE_FREE_TAP_LIMIT": "free_tap_limit",
            "EXCUSE_SEEN_DISPLAY_CAP": "seen_display_cap",
            "EXCUSE_RNG_SEED": "rng_seed",
        }

        config_kwargs: dict[str, Any] = {}
        for env_key, field_name in _ENV_STR_MAP.items():
            val = env.get(env_key)
            if val is not None and field_name not in overrides:
                config_kwargs[field_name] = val
        for env_key, field_name in _ENV_INT_MAP.items():
            val = env.get(env_key)
            if val is not None and field_name not in overrides:
                config_kwargs[field_name] = _env_int(env_key, val)

        config_kwargs.update(overrides)

        return cls(**config_kwargs)

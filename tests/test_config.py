from __future__ import annotations

import pytest

from pyexcuse.config import EngineConfig
from pyexcuse.exceptions import ExcuseConfigError


def test_defaults() -> None:
    config = EngineConfig()

    assert config.free_tap_limit == 3
    assert config.entitlement_id == "premium"
    assert config.seen_display_cap == 364
    assert config.rng_seed is None
    assert config.revenuecat_base_url == "https://api.revenuecat.com/v1"


def test_from_env_reads_excuse_variables(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("EXCUSE_FREE_TAP_LIMIT", " 5 ")
    monkeypatch.setenv("EXCUSE_RNG_SEED", "99")
    monkeypatch.setenv("EXCUSE_ENTITLEMENT_ID", "gold")
    monkeypatch.setenv("EXCUSE_STORAGE_PATH", "/tmp/state.json")

    config = EngineConfig.from_env()

    assert config.free_tap_limit == 5
    assert config.rng_seed == 99
    assert config.entitlement_id == "gold"
    assert config.storage_path == "/tmp/state.json"


def test_overrides_win_over_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("EXCUSE_FREE_TAP_LIMIT", "not-a-number")
    monkeypatch.setenv("EXCUSE_ENTITLEMENT_ID", "gold")

    config = EngineConfig.from_env(free_tap_limit=1, entitlement_id="vip")

    assert config.free_tap_limit == 1
    assert config.entitlement_id == "vip"


def test_bad_integer_env_raises(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("EXCUSE_SEEN_DISPLAY_CAP", "lots")

    with pytest.raises(ExcuseConfigError, match="EXCUSE_SEEN_DISPLAY_CAP"):
        EngineConfig.from_env()


@pytest.mark.parametrize(
    "kwargs",
    [
        {"free_tap_limit": -1},
        {"seen_display_cap": -5},
        {"entitlement_id": "  "},
    ],
)
def test_invalid_values_rejected(kwargs: dict[str, object]) -> None:
    with pytest.raises(ExcuseConfigError):
        EngineConfig(**kwargs)  # type: ignore[arg-type]

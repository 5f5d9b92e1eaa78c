from __future__ import annotations

from datetime import UTC, datetime

import pytest
from pydantic import ValidationError

from pyexcuse.models.customer import CustomerInfo
from pyexcuse.models.lucky_day import LuckyDay
from pyexcuse.models.results import PurchaseOutcome, PurchaseStatus, TapResult
from pyexcuse.subscription import PURCHASES_UNAVAILABLE, OfflineSubscription


def test_tap_result_constructors() -> None:
    assert TapResult.revealed("q") == TapResult(success=True, needs_purchase=False, quote="q", is_gold=False)
    assert TapResult.revealed("g", is_gold=True).is_gold
    paywalled = TapResult.paywalled()
    assert paywalled.needs_purchase and not paywalled.success and paywalled.quote is None


def test_tap_result_is_frozen() -> None:
    result = TapResult.revealed("q")
    with pytest.raises(ValidationError):
        result.quote = "other"  # type: ignore[misc]


@pytest.mark.parametrize(
    ("kwargs", "expected"),
    [
        ({"code": "1"}, PurchaseStatus.CANCELLED),
        ({"code": 1}, PurchaseStatus.CANCELLED),
        ({"user_cancelled": True}, PurchaseStatus.CANCELLED),
        ({"code": "2"}, PurchaseStatus.FAILED),
        ({}, PurchaseStatus.FAILED),
    ],
)
def test_from_error_classifies_cancellation(kwargs: dict[str, object], expected: PurchaseStatus) -> None:
    outcome = PurchaseOutcome.from_error("store said no", **kwargs)  # type: ignore[arg-type]

    assert outcome.status == expected
    assert outcome.should_notify is (expected == PurchaseStatus.FAILED)


def test_failed_without_message_uses_generic_error() -> None:
    assert PurchaseOutcome.failed().error == "Purchase failed"
    assert PurchaseOutcome.from_error(None).error == "Purchase failed"
    assert PurchaseOutcome.succeeded().success


def test_lucky_day_validation() -> None:
    assert LuckyDay(month=2, day=29, year=2023).matches(2, 29)
    assert LuckyDay.from_date(datetime(2024, 12, 25).date()) == LuckyDay(month=12, day=25, year=2024)

    with pytest.raises(ValidationError):
        LuckyDay(month=13, day=1, year=2024)
    with pytest.raises(ValidationError):
        LuckyDay(month=6, day=31, year=2024)
    with pytest.raises(ValidationError):
        LuckyDay(month=1, day=0, year=2024)


def test_customer_info_active_entitlements() -> None:
    now = datetime(2026, 1, 1, tzinfo=UTC)
    info = CustomerInfo.from_response(
        {
            "request_date": "2026-01-01T00:00:00Z",
            "subscriber": {
                "original_app_user_id": "user-1",
                "entitlements": {
                    "premium": {"expires_date": "2026-02-01T00:00:00Z", "product_identifier": "monthly"},
                    "lifetime": {"expires_date": None},
                    "old": {"expires_date": "2025-06-01T00:00:00"},
                },
            },
        }
    )

    assert info.active_entitlements(now) == frozenset({"premium", "lifetime"})
    assert info.entitlements["old"].expires_date.tzinfo is not None  # type: ignore[union-attr]


def test_customer_info_requires_subscriber() -> None:
    with pytest.raises(ValueError):
        CustomerInfo.from_response({"value": []})


@pytest.mark.asyncio
async def test_offline_subscription_never_unlocks() -> None:
    signal = OfflineSubscription()

    assert signal.has_active_entitlement("premium") is False
    purchase = await signal.attempt_purchase("monthly")
    restore = await signal.restore_purchases()

    assert purchase.status == PurchaseStatus.FAILED
    assert purchase.error == PURCHASES_UNAVAILABLE
    assert restore.should_notify

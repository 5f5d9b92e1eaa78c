"""Subscriber state returned by the RevenueCat REST API.

Only the parts the engine needs are modelled.  Unknown keys are ignored
because the backend adds fields freely.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class EntitlementInfo(BaseModel):
    """One entry of ``subscriber.entitlements``."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    expires_date: datetime | None = None
    purchase_date: datetime | None = None
    product_identifier: str | None = None

    @field_validator("expires_date", "purchase_date")
    @classmethod
    def _ensure_tz_aware(cls, value: datetime | None) -> datetime | None:
        if value is not None and value.tzinfo is None:
            return value.replace(tzinfo=UTC)
        return value

    def is_active(self, now: datetime) -> bool:
        """Lifetime entitlements have no expiry and are always active."""
        return self.expires_date is None or self.expires_date > now


class CustomerInfo(BaseModel):
    """The ``subscriber`` object of ``GET /subscribers/{app_user_id}``."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    original_app_user_id: str | None = None
    entitlements: dict[str, EntitlementInfo] = Field(default_factory=dict)

    @classmethod
    def from_response(cls, body: dict[str, Any]) -> CustomerInfo:
        subscriber = body.get("subscriber")
        if not isinstance(subscriber, dict):
            raise ValueError("response has no 'subscriber' object")
        return cls.model_validate(subscriber)

    def active_entitlements(self, now: datetime) -> frozenset[str]:
        return frozenset(name for name, info in self.entitlements.items() if info.is_active(now))

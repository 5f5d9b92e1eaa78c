"""Operation results returned to callers.

:class:`TapResult` is the synchronous answer to a calendar tap.
:class:`PurchaseOutcome` is the structured answer to a purchase or
restore attempt and separates a user cancellation (stay silent) from a
genuine failure (show a message).
"""

from __future__ import annotations

import enum

from pyexcuse.models._base import ExcuseBaseModel

# Purchase SDK error code meaning "purchase cancelled by the user".
_USER_CANCELLED_CODES = frozenset({"1"})


class TapResult(ExcuseBaseModel):
    """Result of a single tap on the engine."""

    success: bool
    needs_purchase: bool
    quote: str | None = None
    is_gold: bool = False

    @classmethod
    def revealed(cls, quote: str, *, is_gold: bool = False) -> TapResult:
        return cls(success=True, needs_purchase=False, quote=quote, is_gold=is_gold)

    @classmethod
    def paywalled(cls) -> TapResult:
        return cls(success=False, needs_purchase=True, quote=None, is_gold=False)


class PurchaseStatus(enum.StrEnum):
    """Terminal state of a purchase or restore attempt."""

    SUCCESS = "success"
    CANCELLED = "cancelled"
    FAILED = "failed"


class PurchaseOutcome(ExcuseBaseModel):
    """Result of a purchase or restore attempt."""

    status: PurchaseStatus
    error: str | None = None

    @property
    def success(self) -> bool:
        return self.status == PurchaseStatus.SUCCESS

    @property
    def user_cancelled(self) -> bool:
        return self.status == PurchaseStatus.CANCELLED

    @property
    def should_notify(self) -> bool:
        """Whether the caller should show a failure message to the user."""
        return self.status == PurchaseStatus.FAILED

    @classmethod
    def succeeded(cls) -> PurchaseOutcome:
        return cls(status=PurchaseStatus.SUCCESS)

    @classmethod
    def failed(cls, error: str | None = None) -> PurchaseOutcome:
        return cls(status=PurchaseStatus.FAILED, error=error or "Purchase failed")

    @classmethod
    def from_error(
        cls,
        message: str | None,
        *,
        code: str | int | None = None,
        user_cancelled: bool = False,
    ) -> PurchaseOutcome:
        """Classify a purchase SDK error.

        :class:`~pyexcuse.subscription.SubscriptionSignal` adapters over a
        store SDK should build their failure outcomes with this so that
        cancellations stay silent.  The SDK flags cancellations either
        through an explicit ``user_cancelled`` flag or with error code
        ``"1"``.  The engine also uses it for exceptions raised by a
        signal.
        """
        cancelled = user_cancelled or (code is not None and str(code) in _USER_CANCELLED_CODES)
        if cancelled:
            return cls(status=PurchaseStatus.CANCELLED, error=message or None)
        return cls.failed(message)

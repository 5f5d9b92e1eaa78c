"""Value objects exchanged with pyexcuse callers."""

from pyexcuse.models._base import ExcuseBaseModel
from pyexcuse.models.customer import CustomerInfo, EntitlementInfo
from pyexcuse.models.lucky_day import LuckyDay
from pyexcuse.models.results import PurchaseOutcome, PurchaseStatus, TapResult
from pyexcuse.models.snapshot import SnapshotEnvelope
from pyexcuse.models.status import EngineStatus

__all__ = [
    "CustomerInfo",
    "EngineStatus",
    "EntitlementInfo",
    "ExcuseBaseModel",
    "LuckyDay",
    "PurchaseOutcome",
    "PurchaseStatus",
    "SnapshotEnvelope",
    "TapResult",
]

"""pyexcuse - Entitlement and quote-rotation engine for a daily excuse app."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("pyexcuse")
except PackageNotFoundError:
    __version__ = "0+local"
from pyexcuse.config import EngineConfig
from pyexcuse.engine import ExcuseEngine
from pyexcuse.exceptions import (
    ExcuseConfigError,
    ExcuseError,
    ExcuseNotReadyError,
    ExcuseSnapshotError,
    ExcuseStorageError,
    ExcuseTransportError,
)
from pyexcuse.models import (
    CustomerInfo,
    EngineStatus,
    EntitlementInfo,
    LuckyDay,
    PurchaseOutcome,
    PurchaseStatus,
    TapResult,
)
from pyexcuse.quotes import FREE_POOL, GOLD_QUOTE, PREMIUM_POOL, QuotePool
from pyexcuse.revenuecat import RevenueCatSubscription
from pyexcuse.storage import JsonFileStorage, MemoryStorage, PersistenceGateway
from pyexcuse.subscription import OfflineSubscription, SubscriptionSignal

__all__ = [
    "__version__",
    "CustomerInfo",
    "EngineConfig",
    "EngineStatus",
    "EntitlementInfo",
    "ExcuseConfigError",
    "ExcuseEngine",
    "ExcuseError",
    "ExcuseNotReadyError",
    "ExcuseSnapshotError",
    "ExcuseStorageError",
    "ExcuseTransportError",
    "FREE_POOL",
    "GOLD_QUOTE",
    "JsonFileStorage",
    "LuckyDay",
    "MemoryStorage",
    "OfflineSubscription",
    "PREMIUM_POOL",
    "PersistenceGateway",
    "PurchaseOutcome",
    "PurchaseStatus",
    "QuotePool",
    "RevenueCatSubscription",
    "SubscriptionSignal",
    "TapResult",
]

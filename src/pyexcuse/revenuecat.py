"""RevenueCat-backed subscription signal."""

from __future__ import annotations

import json
import logging
from collections.abc import Callable
from datetime import UTC, datetime
from typing import Any
from urllib.parse import quote

import aiohttp
from pydantic import ValidationError

from pyexcuse._constants import USER_AGENT
from pyexcuse.config import EngineConfig
from pyexcuse.exceptions import ExcuseConfigError, ExcuseTransportError
from pyexcuse.models.customer import CustomerInfo
from pyexcuse.models.results import PurchaseOutcome
from pyexcuse.subscription import PURCHASES_UNAVAILABLE

_logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(UTC)


class RevenueCatSubscription:
    """Subscription signal reading entitlements from the RevenueCat REST API.

    Purchases happen on-device through the store SDK, so
    :meth:`attempt_purchase` always reports that purchasing is not
    available here.  Once the store confirms a purchase, call
    :meth:`restore_purchases` (or :meth:`refresh`) to pick up the new
    entitlement.

    Usage::

        async with RevenueCatSubscription(config) as signal:
            await signal.refresh()
            engine = ExcuseEngine(storage, signal, config=config)
    """

    def __init__(
        self,
        config: EngineConfig,
        *,
        session: aiohttp.ClientSession | None = None,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        if not config.revenuecat_api_key:
            raise ExcuseConfigError("revenuecat_api_key is required for RevenueCatSubscription")
        if not config.revenuecat_app_user_id:
            raise ExcuseConfigError("revenuecat_app_user_id is required for RevenueCatSubscription")
        self._config = config
        self._external_session = session is not None
        self._http_session = session
        self._clock = clock
        self._customer_info: CustomerInfo | None = None

    # ------------------------------------------------------------------
    # Context manager lifecycle
    # ------------------------------------------------------------------

    async def __aenter__(self) -> RevenueCatSubscription:
        if self._http_session is None:
            self._http_session = aiohttp.ClientSession()
        return self

    async def __aexit__(self, *exc: Any) -> None:
        if not self._external_session and self._http_session is not None:
            await self._http_session.close()
            self._http_session = None

    @property
    def customer_info(self) -> CustomerInfo | None:
        return self._customer_info

    # ------------------------------------------------------------------
    # Transport
    # ------------------------------------------------------------------

    def _require_session(self) -> aiohttp.ClientSession:
        if self._http_session is None:
            raise ExcuseTransportError(
                "HTTP session not initialized. Use 'async with RevenueCatSubscription(...) as signal:'"
            )
        return self._http_session

    async def _get_json(self, endpoint: str) -> dict[str, Any]:
        http = self._require_session()
        url = f"{self._config.revenuecat_base_url.rstrip('/')}{endpoint}"
        headers = {
            "accept": "application/json",
            "authorization": f"Bearer {self._config.revenuecat_api_key}",
            "user-agent": USER_AGENT,
        }

        _logger.debug("GET %s", url)

        try:
            async with http.get(url, headers=headers) as resp:
                text = await resp.text()
                if resp.status != 200:
                    raise ExcuseTransportError(
                        f"HTTP {resp.status} from {endpoint}: {text[:200]}",
                        status_code=resp.status,
                        endpoint=endpoint,
                    )
        except ExcuseTransportError:
            raise
        except aiohttp.ClientError as exc:
            raise ExcuseTransportError(
                f"Request to {endpoint} failed: {exc}",
                endpoint=endpoint,
            ) from exc

        try:
            body = json.loads(text)
        except json.JSONDecodeError as exc:
            raise ExcuseTransportError(
                f"Invalid JSON from {endpoint}: {text[:200]}",
                endpoint=endpoint,
            ) from exc

        if not isinstance(body, dict):
            raise ExcuseTransportError(f"Unexpected response shape from {endpoint}", endpoint=endpoint)
        return body

    # ------------------------------------------------------------------
    # SubscriptionSignal
    # ------------------------------------------------------------------

    async def refresh(self) -> CustomerInfo:
        """Fetch the subscriber's current entitlements and cache them."""
        app_user_id = self._config.revenuecat_app_user_id or ""
        endpoint = f"/subscribers/{quote(app_user_id, safe='')}"
        body = await self._get_json(endpoint)
        try:
            info = CustomerInfo.from_response(body)
        except (ValueError, ValidationError) as exc:
            raise ExcuseTransportError(f"Malformed subscriber payload from {endpoint}: {exc}", endpoint=endpoint) from exc

        self._customer_info = info
        _logger.debug(
            "Customer info refreshed: entitlements=%s",
            sorted(info.active_entitlements(self._clock())),
        )
        return info

    def has_active_entitlement(self, entitlement_id: str) -> bool:
        if self._customer_info is None:
            return False
        entitlement = self._customer_info.entitlements.get(entitlement_id)
        if entitlement is None:
            return False
        return entitlement.is_active(self._clock())

    async def attempt_purchase(self, package_ref: Any) -> PurchaseOutcome:
        _logger.debug("Purchase of %r must go through the on-device store", package_ref)
        return PurchaseOutcome.failed(PURCHASES_UNAVAILABLE)

    async def restore_purchases(self) -> PurchaseOutcome:
        try:
            await self.refresh()
        except ExcuseTransportError as exc:
            _logger.warning("Restore failed: %s", exc)
            return PurchaseOutcome.failed(str(exc) or "Restore failed")
        return PurchaseOutcome.succeeded()

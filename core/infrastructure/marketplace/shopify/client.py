"""
Shopify Admin API client.

Creates one paid order at one store: find or create the customer, create a
draft order, then complete it. Errors are classified for the retry policy:

- 4xx (except 429)                      -> PermanentRemoteError
- 429, 5xx, timeouts, connection errors -> TransientRemoteError
"""
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional
import asyncio
import json
import logging

import aiohttp

from core.domain.exceptions import PermanentRemoteError, TransientRemoteError
from core.domain.value_objects import BuyerContact, ShippingAddress, ShippingLine
from core.settings.modules.shopify_settings import ShopifySettings


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RemoteLineItem:
    product_ref: str
    variant_ref: Optional[str]
    quantity: int
    title: str = ""
    price: Optional[str] = None


@dataclass(frozen=True)
class RemoteOrderRequest:
    """Payload of one order-creation call."""

    items: List[RemoteLineItem]
    buyer: BuyerContact
    note: str = ""
    shipping_address: Optional[ShippingAddress] = None
    shipping_line: Optional[ShippingLine] = None
    tags: str = ""


@dataclass(frozen=True)
class RemoteOrder:
    """What the store answered on success."""

    remote_order_id: str
    remote_order_number: str
    raw: Dict[str, Any] = field(default_factory=dict, compare=False, repr=False)


def extract_variant_id(variant_ref: Optional[str]) -> Optional[str]:
    """`gid://shopify/ProductVariant/123` -> `123`."""
    if not variant_ref:
        return None
    return variant_ref.rstrip("/").split("/")[-1]


class ShopifyOrderClient:
    """
    Remote order-creation API of Shopify stores.

    One instance serves every store; the domain and admin token are passed
    per call so credentials are never cached here.
    """

    def __init__(
        self,
        settings: Optional[ShopifySettings] = None,
        timeout_seconds: float = 15.0,
        session: Optional[aiohttp.ClientSession] = None,
    ):
        """
        Initialize client.

        Args:
            settings: Shopify settings (API version, defaults)
            timeout_seconds: Bound for each HTTP call
            session: Optional shared aiohttp session (owned by the caller)
        """
        self.settings = settings or ShopifySettings()
        self.timeout = aiohttp.ClientTimeout(total=timeout_seconds)
        self._session = session

    def _url(self, domain: str, path: str) -> str:
        return f"{self.settings.scheme}://{domain}/admin/api/{self.settings.api_version}/{path}"

    async def create_order(self, domain: str, admin_token: str, request: RemoteOrderRequest) -> RemoteOrder:
        """
        Create a paid order at `domain`.

        Returns:
            RemoteOrder with the order's GraphQL id and `#number`

        Raises:
            PermanentRemoteError: Store rejected the order (4xx)
            TransientRemoteError: Network failure, timeout, rate limit or 5xx
        """
        if self._session is not None:
            return await self._create_order(self._session, domain, admin_token, request)

        async with aiohttp.ClientSession(timeout=self.timeout) as session:
            return await self._create_order(session, domain, admin_token, request)

    async def _create_order(
        self,
        session: aiohttp.ClientSession,
        domain: str,
        admin_token: str,
        request: RemoteOrderRequest,
    ) -> RemoteOrder:
        headers = {
            "Content-Type": "application/json",
            "X-Shopify-Access-Token": admin_token,
        }

        customer_id = await self._find_or_create_customer(session, domain, headers, request)

        draft = await self._request(
            session, "POST", self._url(domain, "draft_orders.json"), headers,
            json=self._draft_order_payload(request, customer_id),
        )
        draft_order_id = draft["draft_order"]["id"]

        completed = await self._request(
            session, "PUT", self._url(domain, f"draft_orders/{draft_order_id}/complete.json"), headers,
            json={"payment_pending": False},
        )

        # complete.json answers with draft_order.order on recent API versions
        draft_payload = completed.get("draft_order") or {}
        order = draft_payload.get("order") or completed.get("order") or {}
        remote_order_id = order.get("admin_graphql_api_id") or str(order.get("id") or draft_payload.get("order_id") or "")
        if not remote_order_id:
            raise TransientRemoteError(f"Draft order {draft_order_id} completed without an order id")

        order_number = order.get("order_number") or order.get("name") or "N/A"
        logger.info(f"Order created in {domain}: #{order_number}")
        return RemoteOrder(
            remote_order_id=remote_order_id,
            remote_order_number=f"#{str(order_number).lstrip('#')}",
            raw=completed,
        )

    async def _find_or_create_customer(
        self,
        session: aiohttp.ClientSession,
        domain: str,
        headers: Dict[str, str],
        request: RemoteOrderRequest,
    ) -> Optional[int]:
        """Best effort: the order is still created without a customer."""
        buyer = request.buyer
        if not buyer.email:
            return None

        try:
            found = await self._request(
                session, "GET", self._url(domain, "customers/search.json"), headers,
                params={"query": f"email:{buyer.email}"},
            )
            customers = found.get("customers") or []
            if customers:
                return customers[0]["id"]

            customer: Dict[str, Any] = {
                "email": buyer.email,
                "first_name": buyer.first_name,
                "last_name": buyer.last_name,
                "phone": buyer.phone,
            }
            if request.shipping_address:
                customer["addresses"] = [self._address_payload(request.shipping_address)]

            created = await self._request(
                session, "POST", self._url(domain, "customers.json"), headers,
                json={"customer": customer},
            )
            return created["customer"]["id"]
        except PermanentRemoteError as e:
            logger.warning(f"Customer lookup failed in {domain}, continuing without customer: {e.message}")
            return None

    def _address_payload(self, address: ShippingAddress) -> Dict[str, Any]:
        return {
            "address1": address.street,
            "city": address.city,
            "province": address.region,
            "zip": address.zip_code,
            "country": self.settings.default_country,
            "country_code": self.settings.default_country_code,
        }

    def _draft_order_payload(self, request: RemoteOrderRequest, customer_id: Optional[int]) -> Dict[str, Any]:
        draft: Dict[str, Any] = {
            "line_items": [
                {
                    "variant_id": extract_variant_id(item.variant_ref),
                    "title": item.title,
                    "quantity": item.quantity,
                    "price": item.price,
                }
                for item in request.items
            ],
            "note": request.note,
            "tags": request.tags or self.settings.order_tags,
            "financial_status": "paid",
            "email": request.buyer.email,
        }
        if request.shipping_address:
            draft["shipping_address"] = self._address_payload(request.shipping_address)
        if request.shipping_line:
            draft["shipping_line"] = {
                "title": request.shipping_line.title,
                "price": str(request.shipping_line.price),
                "code": request.shipping_line.code,
            }
        if customer_id:
            draft["customer"] = {"id": customer_id}
        return {"draft_order": draft}

    async def _request(
        self,
        session: aiohttp.ClientSession,
        method: str,
        url: str,
        headers: Dict[str, str],
        **kwargs: Any,
    ) -> Dict[str, Any]:
        try:
            async with session.request(method, url, headers=headers, timeout=self.timeout, **kwargs) as response:
                text = await response.text()
                if response.status == 429 or response.status >= 500:
                    raise TransientRemoteError(text or response.reason or "", status=response.status)
                if response.status >= 400:
                    raise PermanentRemoteError(text or response.reason or "", status=response.status)
                return json.loads(text) if text else {}
        except asyncio.TimeoutError as e:
            raise TransientRemoteError(f"Timeout calling {url}") from e
        except aiohttp.ClientError as e:
            raise TransientRemoteError(f"{type(e).__name__}: {e}") from e

"""ShopifyOrderClient against a local aiohttp app mimicking the Admin REST API."""

import asyncio
from decimal import Decimal

import pytest
import pytest_asyncio
from aiohttp import web
from aiohttp.test_utils import TestServer

from core.domain.exceptions import PermanentRemoteError, TransientRemoteError
from core.domain.value_objects import BuyerContact, ShippingAddress, ShippingLine
from core.infrastructure.marketplace.shopify.client import (
    RemoteLineItem,
    RemoteOrderRequest,
    ShopifyOrderClient,
    extract_variant_id,
)
from core.settings import ShopifySettings


API = "/admin/api/2024-01"


class FakeShop:
    """Records requests; `failures` maps a route name to (status, body)."""

    def __init__(self):
        self.customers = []
        self.failures = {}
        self.requests = []
        self.delay = 0.0

    def app(self) -> web.Application:
        app = web.Application()
        app.router.add_get(f"{API}/customers/search.json", self.search_customers)
        app.router.add_post(f"{API}/customers.json", self.create_customer)
        app.router.add_post(f"{API}/draft_orders.json", self.create_draft)
        app.router.add_put(f"{API}/draft_orders/{{draft_id}}/complete.json", self.complete_draft)
        return app

    async def _record(self, name, request):
        body = await request.json() if request.can_read_body else None
        self.requests.append((name, request.headers.get("X-Shopify-Access-Token"), body))
        if self.delay:
            await asyncio.sleep(self.delay)
        if name in self.failures:
            status, text = self.failures[name]
            return web.Response(status=status, text=text)
        return None

    async def search_customers(self, request):
        failure = await self._record("search", request)
        return failure or web.json_response({"customers": self.customers})

    async def create_customer(self, request):
        failure = await self._record("customer", request)
        return failure or web.json_response({"customer": {"id": 77}}, status=201)

    async def create_draft(self, request):
        failure = await self._record("draft", request)
        return failure or web.json_response({"draft_order": {"id": 555}}, status=201)

    async def complete_draft(self, request):
        failure = await self._record("complete", request)
        return failure or web.json_response(
            {
                "draft_order": {
                    "id": int(request.match_info["draft_id"]),
                    "order": {"id": 9001, "admin_graphql_api_id": "gid://shopify/Order/9001", "order_number": 1042},
                }
            }
        )

    def bodies(self, name):
        return [body for route, _, body in self.requests if route == name]


@pytest_asyncio.fixture
async def shop():
    fake = FakeShop()
    server = TestServer(fake.app())
    await server.start_server()
    fake.domain = f"{server.host}:{server.port}"
    yield fake
    await server.close()


@pytest.fixture
def client() -> ShopifyOrderClient:
    return ShopifyOrderClient(settings=ShopifySettings(scheme="http"), timeout_seconds=0.5)


def _request(**overrides) -> RemoteOrderRequest:
    values = dict(
        items=[
            RemoteLineItem(
                product_ref="gid://shopify/Product/1",
                variant_ref="gid://shopify/ProductVariant/100",
                quantity=2,
                title="Polera",
                price="1000",
            )
        ],
        buyer=BuyerContact(email="ana@example.com", name="Ana Pérez"),
        note="Orden de Grumo - Transacción #8",
        shipping_address=ShippingAddress(street="Av. Siempre Viva 742", city="Santiago", region="RM"),
        shipping_line=ShippingLine(title="Despacho", price=Decimal("3990"), code="STD"),
    )
    values.update(overrides)
    return RemoteOrderRequest(**values)


@pytest.mark.asyncio
async def test_create_order_success(shop, client):
    order = await client.create_order(shop.domain, "shpat_test", _request())

    assert order.remote_order_id == "gid://shopify/Order/9001"
    assert order.remote_order_number == "#1042"
    assert [route for route, _, _ in shop.requests] == ["search", "customer", "draft", "complete"]
    assert {token for _, token, _ in shop.requests} == {"shpat_test"}

    draft = shop.bodies("draft")[0]["draft_order"]
    assert draft["line_items"] == [{"variant_id": "100", "title": "Polera", "quantity": 2, "price": "1000"}]
    assert draft["customer"] == {"id": 77}
    assert draft["financial_status"] == "paid"
    assert draft["tags"] == "grumo, marketplace"
    assert draft["shipping_line"] == {"title": "Despacho", "price": "3990", "code": "STD"}
    assert draft["shipping_address"]["country_code"] == "CL"
    assert shop.bodies("complete") == [{"payment_pending": False}]


@pytest.mark.asyncio
async def test_existing_customer_is_reused(shop, client):
    shop.customers = [{"id": 12}]

    await client.create_order(shop.domain, "shpat_test", _request(tags="vip"))

    assert "customer" not in [route for route, _, _ in shop.requests]
    draft = shop.bodies("draft")[0]["draft_order"]
    assert draft["customer"] == {"id": 12}
    assert draft["tags"] == "vip"


@pytest.mark.asyncio
async def test_customer_failure_is_best_effort(shop, client):
    shop.failures["customer"] = (422, '{"errors":{"phone":["is invalid"]}}')

    order = await client.create_order(shop.domain, "shpat_test", _request())

    assert order.remote_order_number == "#1042"
    assert "customer" not in shop.bodies("draft")[0]["draft_order"]


@pytest.mark.asyncio
async def test_rejected_order_is_permanent(shop, client):
    body = '{"errors":{"line_items":["Variant is out of stock"]}}'
    shop.failures["draft"] = (422, body)

    with pytest.raises(PermanentRemoteError) as exc_info:
        await client.create_order(shop.domain, "shpat_test", _request())

    assert exc_info.value.status == 422
    assert exc_info.value.message == body
    assert shop.bodies("complete") == []


@pytest.mark.asyncio
@pytest.mark.parametrize("status", [429, 503])
async def test_rate_limit_and_server_errors_are_transient(shop, client, status):
    shop.failures["complete"] = (status, "try later")

    with pytest.raises(TransientRemoteError) as exc_info:
        await client.create_order(shop.domain, "shpat_test", _request())

    assert exc_info.value.status == status


@pytest.mark.asyncio
async def test_timeout_is_transient(shop):
    shop.delay = 1.0
    client = ShopifyOrderClient(settings=ShopifySettings(scheme="http"), timeout_seconds=0.1)

    with pytest.raises(TransientRemoteError):
        await client.create_order(shop.domain, "shpat_test", _request(buyer=BuyerContact(email="")))


@pytest.mark.asyncio
async def test_unreachable_store_is_transient(client):
    with pytest.raises(TransientRemoteError):
        await client.create_order("127.0.0.1:1", "shpat_test", _request())


@pytest.mark.parametrize(
    "ref,expected",
    [
        ("gid://shopify/ProductVariant/123", "123"),
        ("123", "123"),
        ("gid://shopify/ProductVariant/123/", "123"),
        (None, None),
        ("", None),
    ],
)
def test_extract_variant_id(ref, expected):
    assert extract_variant_id(ref) == expected

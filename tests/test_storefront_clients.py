import json

import httpx
import pytest

from src.integrations.clients.real_http.storefront_cart import StorefrontCartClient
from src.integrations.clients.real_http.storefront_catalog import StorefrontCatalogClient
from src.integrations.clients.real_http.storefront_graphql import StorefrontGraphQLClient
from src.integrations.policy.catalog_service import CatalogService
from src.integrations.policy.response_wrappers import IntegrationResponseError

from factories import product_node, variant_node

API_URL = "https://shop.example.com/api/2024-10/graphql.json"


class RecordingHandler:
    """httpx MockTransport handler that replays queued JSON bodies and records requests."""

    def __init__(self, *responses):
        self.responses = list(responses)
        self.requests = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        body = self.responses.pop(0)
        if isinstance(body, httpx.Response):
            return body
        return httpx.Response(200, json=body)

    def payload(self, index=0):
        return json.loads(self.requests[index].content)


def _graphql(handler, token="secret"):
    return StorefrontGraphQLClient(api_url=API_URL, access_token=token, transport=httpx.MockTransport(handler))


@pytest.mark.asyncio
async def test_collection_by_handle_query_and_headers():
    handler = RecordingHandler(
        {"data": {"collection": {"products": {"nodes": [product_node("P1", variant_node("V1", stock=2))]}}}}
    )
    client = StorefrontCatalogClient(_graphql(handler), variants_first=10)

    products = await client.fetch_collection_products(" summer ", 5)

    assert [p.id for p in products] == ["P1"]
    sent = handler.payload()
    assert "collection(handle: $handle)" in sent["query"]
    assert sent["variables"] == {"handle": "summer", "first": 5, "variantsFirst": 10}
    assert handler.requests[0].headers["X-Shopify-Storefront-Access-Token"] == "secret"


@pytest.mark.asyncio
async def test_collection_gid_is_looked_up_by_id():
    handler = RecordingHandler({"data": {"collection": {"products": {"nodes": []}}}})
    client = StorefrontCatalogClient(_graphql(handler))

    assert await client.fetch_collection_products("gid://shopify/Collection/9", 5) == []
    sent = handler.payload()
    assert "collection(id: $id)" in sent["query"]
    assert sent["variables"]["id"] == "gid://shopify/Collection/9"


@pytest.mark.asyncio
async def test_unknown_collection_returns_none():
    handler = RecordingHandler({"data": {"collection": None}})

    assert await StorefrontCatalogClient(_graphql(handler)).fetch_collection_products("nope", 5) is None


@pytest.mark.asyncio
async def test_graphql_errors_propagate_from_catalog_client():
    handler = RecordingHandler({"errors": [{"message": "Access denied"}]})

    with pytest.raises(IntegrationResponseError):
        await StorefrontCatalogClient(_graphql(handler)).fetch_products(5)


@pytest.mark.asyncio
async def test_service_falls_back_when_storefront_collection_call_fails():
    handler = RecordingHandler(
        httpx.Response(500, json={"message": "boom"}),
        {"data": {"products": {"nodes": [product_node("G1", variant_node("GV1"))]}}},
    )
    service = CatalogService(StorefrontCatalogClient(_graphql(handler)), products_first=5)

    products = await service.fetch_candidate_products("summer")

    assert [p.id for p in products] == ["G1"]
    assert "products(first: $first)" in handler.payload(1)["query"]


@pytest.mark.asyncio
async def test_missing_api_url_is_a_configuration_error(monkeypatch):
    monkeypatch.delenv("STOREFRONT_API_URL", raising=False)
    graphql = StorefrontGraphQLClient(api_url="", access_token="")

    with pytest.raises(ValueError):
        await graphql.execute("{ shop { name } }")


@pytest.mark.asyncio
async def test_cart_add_line_sends_single_quantity():
    handler = RecordingHandler({"data": {"cartLinesAdd": {"cart": {"id": "C1", "totalQuantity": 3}, "userErrors": []}}})
    cart = StorefrontCartClient(_graphql(handler), cart_id="gid://shopify/Cart/C1")

    result = await cart.add_line("V1")

    assert result.ok is True
    sent = handler.payload()
    assert "cartLinesAdd" in sent["query"]
    assert sent["variables"] == {
        "cartId": "gid://shopify/Cart/C1",
        "lines": [{"merchandiseId": "V1", "quantity": 1}],
    }


@pytest.mark.asyncio
async def test_cart_add_line_reports_user_errors():
    handler = RecordingHandler(
        {"data": {"cartLinesAdd": {"cart": None, "userErrors": [{"field": ["lines"], "message": "Sold out"}]}}}
    )

    result = await StorefrontCartClient(_graphql(handler), cart_id="C1").add_line("V1")

    assert result.ok is False
    assert result.message == "Sold out"


@pytest.mark.asyncio
async def test_cart_add_line_never_raises_on_transport_errors():
    def failing(request):
        raise httpx.ConnectError("unreachable", request=request)

    graphql = StorefrontGraphQLClient(api_url=API_URL, transport=httpx.MockTransport(failing))

    result = await StorefrontCartClient(graphql, cart_id="C1").add_line("V1")

    assert result.ok is False
    assert "unreachable" in result.message


@pytest.mark.asyncio
async def test_cart_add_line_rejects_other_quantities_without_calling_api():
    handler = RecordingHandler()

    result = await StorefrontCartClient(_graphql(handler), cart_id="C1").add_line("V1", quantity=2)

    assert result.ok is False
    assert handler.requests == []

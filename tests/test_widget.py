import asyncio

import pytest

from src.integrations.clients.mocks.cart import MockCartClient
from src.integrations.clients.mocks.local_catalog import LocalCatalogClient
from src.integrations.contracts.interfaces import AddLineResult, CartClient, CartLine
from src.integrations.policy.catalog_service import CatalogService
from src.offers.policy import OfferPolicy
from src.utils.config_loader import WidgetConfig
from src.widget import UpsellWidget, WidgetPhase

from factories import product_node, variant_node


class FakeClock:
    def __init__(self, now=100.0):
        self.now = now

    def __call__(self):
        return self.now


class GatedCart(CartClient):
    """Cart whose add_line calls block until released, so concurrency can be observed."""

    def __init__(self):
        self.gates = {}
        self.calls = []

    async def add_line(self, variant_id, quantity=1):
        self.calls.append(variant_id)
        gate = self.gates.setdefault(variant_id, asyncio.Event())
        await gate.wait()
        return AddLineResult(ok=True, variant_id=variant_id)

    def release(self, variant_id):
        self.gates.setdefault(variant_id, asyncio.Event()).set()


def _widget(sample_catalog, cart=None, clock=None, **policy):
    catalog = CatalogService(LocalCatalogClient(catalog=sample_catalog))
    return UpsellWidget(
        catalog,
        cart or MockCartClient(),
        policy=OfferPolicy(**policy),
        config=WidgetConfig(error_timeout_seconds=3),
        clock=clock or FakeClock(),
    )


@pytest.mark.asyncio
async def test_load_moves_to_ready_and_seeds_selections(sample_catalog):
    widget = _widget(sample_catalog)
    assert widget.state.phase == WidgetPhase.LOADING

    await widget.load("summer")

    assert widget.state.phase == WidgetPhase.READY
    assert widget.state.selections == {"P1": "V1", "P2": "V2a"}


@pytest.mark.asyncio
async def test_load_with_nothing_to_show_is_empty():
    widget = _widget({"collections": {}, "products": []})

    await widget.load("summer")

    assert widget.state.phase == WidgetPhase.EMPTY
    assert widget.render([]) is None


@pytest.mark.asyncio
async def test_refetch_resets_user_selection(sample_catalog):
    widget = _widget(sample_catalog)
    await widget.load("summer")
    assert widget.select_variant("P2", "V2b")

    await widget.load("summer")

    assert widget.state.selections["P2"] == "V2a"


@pytest.mark.asyncio
async def test_select_variant_rejects_unknown_ids(sample_catalog):
    widget = _widget(sample_catalog)
    await widget.load("summer")

    assert widget.select_variant("P2", "nope") is False
    assert widget.select_variant("P9", "V1") is False
    assert widget.state.selections["P2"] == "V2a"


@pytest.mark.asyncio
async def test_offers_follow_selection_and_cart(sample_catalog):
    widget = _widget(sample_catalog)
    await widget.load("summer")
    widget.select_variant("P2", "V2b")

    offers = widget.offers([CartLine("V1")])

    assert [(o.product.id, o.variant.id) for o in offers] == [("P2", "V2b")]


@pytest.mark.asyncio
async def test_add_to_cart_adds_selected_variant_once(sample_catalog):
    cart = MockCartClient()
    widget = _widget(sample_catalog, cart=cart)
    await widget.load("summer")
    widget.toggle_options("P2")
    widget.select_variant("P2", "V2b")

    result = await widget.add_to_cart("P2")

    assert result.ok is True
    assert [line.merchandise_id for line in cart.lines] == ["V2b"]
    assert "P2" not in widget.state.expanded
    assert widget.state.is_adding("P2") is False
    assert widget.error is None


@pytest.mark.asyncio
async def test_add_to_cart_for_unknown_product_does_nothing(sample_catalog):
    cart = MockCartClient()
    widget = _widget(sample_catalog, cart=cart)
    await widget.load("summer")

    assert await widget.add_to_cart("unknown") is None
    assert cart.lines == []


@pytest.mark.asyncio
async def test_failed_add_shows_banner_that_expires(sample_catalog):
    clock = FakeClock()
    widget = _widget(sample_catalog, cart=MockCartClient(failing_variants={"V1"}), clock=clock)
    await widget.load("summer")

    result = await widget.add_to_cart("P1")

    assert result.ok is False
    assert widget.error is not None
    assert widget.render([])["error"] == {
        "status": "critical",
        "message": "There was an issue adding this product. Please try again.",
    }

    clock.now += 2.9
    assert widget.error is not None
    clock.now += 0.2
    assert widget.error is None
    assert widget.render([])["error"] is None


@pytest.mark.asyncio
async def test_adds_on_different_products_run_independently(sample_catalog):
    cart = GatedCart()
    widget = _widget(sample_catalog, cart=cart)
    await widget.load("summer")

    first = asyncio.ensure_future(widget.add_to_cart("P1"))
    second = asyncio.ensure_future(widget.add_to_cart("P2"))
    await asyncio.sleep(0)

    assert widget.state.is_adding("P1") and widget.state.is_adding("P2")
    assert await widget.add_to_cart("P1") is None  # same product already in flight

    cart.release("V2a")
    assert (await second).ok is True
    assert widget.state.is_adding("P1") is True
    assert widget.state.is_adding("P2") is False

    cart.release("V1")
    assert (await first).ok is True
    assert cart.calls == ["V1", "V2a"]


@pytest.mark.asyncio
async def test_render_only_widget_refuses_to_add(sample_catalog):
    widget = UpsellWidget(CatalogService(LocalCatalogClient(catalog=sample_catalog)))
    await widget.load("summer")

    with pytest.raises(RuntimeError):
        await widget.add_to_cart("P1")


def test_render_while_loading_shows_skeleton(sample_catalog):
    widget = _widget(sample_catalog)

    view = widget.render([])

    assert view["loading"] is True
    assert view["skeleton_rows"] == 3
    assert view["heading"] == "You might also like"


@pytest.mark.asyncio
async def test_render_items(sample_catalog):
    widget = _widget(sample_catalog)
    await widget.load("summer")

    view = widget.render([])
    single, multi = view["items"]

    assert single["button"] == "Add"
    assert single["image_url"] == "https://img/p1.png"
    assert single["price"] == {"amount": "10.00", "currency_code": "USD"}
    assert single["options"] == []

    assert multi["button"] == "Options"
    assert multi["show_selector"] is False
    assert multi["image_url"] == WidgetConfig().placeholder_image_url
    assert multi["options"] == [{"value": "V2a", "label": "Small"}, {"value": "V2b", "label": "Large"}]

    widget.toggle_options("P2")
    multi = widget.render([])["items"][1]
    assert multi["button"] == "Add"
    assert multi["show_selector"] is True


@pytest.mark.asyncio
async def test_render_labels_default_variant_title(sample_catalog):
    sample_catalog["collections"]["summer"]["products"][1]["variants"]["nodes"][0]["title"] = "Default Title"
    widget = _widget(sample_catalog)
    await widget.load("summer")

    options = widget.render([])["items"][1]["options"]

    assert options[0]["label"] == "Default"


@pytest.mark.asyncio
async def test_render_is_none_when_everything_is_in_cart(sample_catalog):
    widget = _widget(sample_catalog)
    await widget.load("summer")

    assert widget.render([CartLine("V1"), CartLine("V2a"), CartLine("V2b")]) is None


def _single_product_catalog(*variant_nodes):
    return {"collections": {}, "products": [product_node("P1", *variant_nodes)]}


@pytest.mark.asyncio
async def test_add_uses_offered_variant_when_initial_pick_is_in_cart():
    cart = MockCartClient()
    widget = _widget(_single_product_catalog(variant_node("V1"), variant_node("V2")), cart=cart)
    await widget.load()
    in_cart = [CartLine("V1")]

    shown = widget.offers(in_cart)[0].variant.id
    result = await widget.add_to_cart("P1", in_cart)

    assert shown == "V2"
    assert result.variant_id == "V2"
    assert [line.merchandise_id for line in cart.lines] == ["V2"]


@pytest.mark.asyncio
async def test_add_uses_offered_variant_when_initial_pick_is_out_of_stock():
    cart = MockCartClient()
    widget = _widget(_single_product_catalog(variant_node("V1", stock=0), variant_node("V2", stock=4)), cart=cart)
    await widget.load()
    assert widget.state.selections["P1"] == "V1"

    shown = widget.offers([])[0].variant.id
    await widget.add_to_cart("P1")

    assert shown == "V2"
    assert [line.merchandise_id for line in cart.lines] == ["V2"]


@pytest.mark.asyncio
async def test_add_skips_product_no_longer_offered():
    cart = MockCartClient()
    widget = _widget(_single_product_catalog(variant_node("V1")), cart=cart)
    await widget.load()

    assert await widget.add_to_cart("P1", [CartLine("V1")]) is None
    assert cart.lines == []
    assert widget.state.is_adding("P1") is False


@pytest.mark.asyncio
async def test_add_ignores_display_cap_for_listed_product():
    catalog = {
        "collections": {},
        "products": [product_node(f"P{i}", variant_node(f"V{i}")) for i in range(4)],
    }
    cart = MockCartClient()
    widget = _widget(catalog, cart=cart, limit=1)
    await widget.load()

    await widget.add_to_cart("P3")

    assert [line.merchandise_id for line in cart.lines] == ["V3"]


@pytest.mark.asyncio
async def test_select_variant_rejects_variant_already_in_cart(sample_catalog):
    widget = _widget(sample_catalog)
    await widget.load("summer")

    assert widget.select_variant("P2", "V2b", [CartLine("V2b")]) is False
    assert widget.state.selections["P2"] == "V2a"
    assert widget.select_variant("P2", "V2b", [CartLine("V1")]) is True


@pytest.mark.asyncio
async def test_select_variant_rejects_out_of_stock_variant():
    widget = _widget(_single_product_catalog(variant_node("V1"), variant_node("V2", stock=0)))
    await widget.load()

    assert widget.select_variant("P1", "V2") is False
    assert widget.state.selections["P1"] == "V1"

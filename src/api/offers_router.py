from typing import Any, Callable, Dict, List, Optional

from fastapi import APIRouter, HTTPException, Query
from pydantic import BaseModel, Field

from src.error_handler import ErrorHandler
from src.integrations.contracts.cart import cart_lines_from_ids
from src.integrations.contracts.interfaces import CartClient, Offer
from src.integrations.policy.catalog_service import CatalogService
from src.offers.selector import select_offers
from src.utils.config_loader import UpsellConfig, resolve_collection_ref
from src.widget.controller import UpsellWidget

router = APIRouter()

# Will be set by main.py after import
catalog_service: CatalogService = None
cart_client_factory: Callable[[Optional[str]], CartClient] = None
config: UpsellConfig = None

error_handler = ErrorHandler()


class AddLineRequest(BaseModel):
    variant_id: str = Field(..., description="Merchandise (variant) id to add")
    quantity: int = Field(default=1, description="Always 1 per add action")
    cart_id: Optional[str] = Field(default=None, description="Storefront cart id; required with real integrations")


def _parse_selections(raw: List[str]) -> Dict[str, str]:
    """`product_id=variant_id` pairs; malformed entries are ignored."""
    selections: Dict[str, str] = {}
    for item in raw or []:
        product_id, sep, variant_id = item.partition("=")
        if sep and product_id.strip() and variant_id.strip():
            selections[product_id.strip()] = variant_id.strip()
    return selections


def _serialize_offer(offer: Offer) -> Dict[str, Any]:
    return {
        "product_id": offer.product.id,
        "title": offer.product.title,
        "image_url": offer.product.image_url,
        "variant": {
            "id": offer.variant.id,
            "title": offer.variant.title,
            "price": str(offer.variant.price_amount),
            "currency_code": offer.variant.currency_code,
            "quantity_available": offer.variant.quantity_available,
        },
    }


@router.get("/offers", tags=["Offers"])
async def get_offers(
    cart: List[str] = Query(default=[], description="Merchandise ids already in the cart"),
    collection: Optional[str] = Query(default=None, description="Collection handle or gid (metafield value)"),
    selected: List[str] = Query(default=[], description="product_id=variant_id selections"),
):
    try:
        products = await catalog_service.fetch_candidate_products(resolve_collection_ref(collection, config))
        offers = select_offers(
            cart_lines_from_ids(cart),
            products,
            _parse_selections(selected),
            config.offers.to_policy(),
        )
    except Exception as exc:
        return error_handler.handle_exception(exc, context={"collection": collection})
    return {"offers": [_serialize_offer(o) for o in offers], "count": len(offers)}


@router.get("/widget", tags=["Offers"])
async def get_widget(
    cart: List[str] = Query(default=[]),
    collection: Optional[str] = Query(default=None),
):
    """View model of the upsell block for one page load; `widget` is null when nothing is offered."""
    try:
        widget = UpsellWidget(
            catalog_service,
            None,
            policy=config.offers.to_policy(),
            config=config.widget,
        )
        await widget.load(resolve_collection_ref(collection, config))
        view = widget.render(cart_lines_from_ids(cart))
    except Exception as exc:
        payload = error_handler.handle_exception(exc, context={"collection": collection})
        return {"widget": None, "fallback": True, "metadata": payload["metadata"]}
    return {"widget": view, "selections": widget.state.selections}


@router.post("/cart/lines", tags=["Cart"])
async def add_cart_line(body: AddLineRequest):
    if body.quantity != 1:
        raise HTTPException(status_code=400, detail="quantity must be 1")
    try:
        client = cart_client_factory(body.cart_id)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc))

    result = await client.add_line(body.variant_id, quantity=1)
    return {
        "ok": result.ok,
        "variant_id": result.variant_id,
        "message": result.message,
        "errors": result.errors,
    }

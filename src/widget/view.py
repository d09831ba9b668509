"""
JSON view model for the upsell block.

Layout is up to the client; this module only decides what is shown:
skeleton rows while loading, nothing when there are no offers, otherwise one
item per offer plus the error banner when one is active.
"""

from typing import Any, Dict, List, Optional, Sequence

from src.integrations.contracts.interfaces import CartLine, Offer, Variant
from src.offers.policy import OfferPolicy
from src.offers.selector import available_variants
from src.utils.config_loader import WidgetConfig

from .state import ErrorBanner, WidgetPhase, WidgetState

DEFAULT_VARIANT_TITLE = "Default Title"


def render_widget(
    state: WidgetState,
    offers: Sequence[Offer],
    cart_lines: Sequence[CartLine],
    policy: OfferPolicy,
    config: WidgetConfig,
    error: Optional[ErrorBanner] = None,
) -> Optional[Dict[str, Any]]:
    if state.phase == WidgetPhase.LOADING:
        return {
            "heading": config.heading,
            "loading": True,
            "skeleton_rows": config.skeleton_rows,
            "items": [],
            "error": None,
        }

    if not offers:
        return None

    cart_ids = frozenset(line.merchandise_id for line in cart_lines)
    return {
        "heading": config.heading,
        "loading": False,
        "skeleton_rows": 0,
        "items": [_render_item(state, offer, cart_ids, policy, config) for offer in offers],
        "error": {"status": "critical", "message": error.message} if error else None,
    }


def _render_item(state, offer: Offer, cart_ids, policy: OfferPolicy, config: WidgetConfig) -> Dict[str, Any]:
    product = offer.product
    choices = available_variants(product, cart_ids, policy)
    has_multiple = len(choices) > 1
    expanded = product.id in state.expanded

    if has_multiple and not expanded:
        button = "Options"
    else:
        button = "Add"

    return {
        "product_id": product.id,
        "title": product.title,
        "image_url": product.image_url or config.placeholder_image_url,
        "variant_id": offer.variant.id,
        "price": {"amount": str(offer.variant.price_amount), "currency_code": offer.variant.currency_code},
        "button": button,
        "loading": state.is_adding(product.id),
        "show_selector": has_multiple and expanded,
        "options": _variant_options(choices) if has_multiple else [],
    }


def _variant_options(variants: List[Variant]) -> List[Dict[str, str]]:
    return [
        {"value": v.id, "label": "Default" if v.title == DEFAULT_VARIANT_TITLE else v.title}
        for v in variants
    ]

"""
Upsell block controller.

Drives the state machine
    LOADING -> READY | EMPTY
    READY -> adding(product) -> READY, or error banner -> READY after a timeout
on top of the catalog service and a cart client.
"""

import logging
import time
from dataclasses import replace
from typing import Any, Callable, Dict, Iterable, List, Optional

from src.integrations.contracts.interfaces import AddLineResult, CartClient, CartLine, Offer
from src.integrations.policy.catalog_service import CatalogService
from src.offers.policy import OfferPolicy
from src.offers.selector import available_variants, select_offers
from src.utils.config_loader import WidgetConfig

from .state import ErrorBanner, WidgetState
from .view import render_widget

logger = logging.getLogger(__name__)


class UpsellWidget:
    def __init__(
        self,
        catalog: CatalogService,
        cart: Optional[CartClient] = None,
        policy: Optional[OfferPolicy] = None,
        config: Optional[WidgetConfig] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.catalog = catalog
        self.cart = cart
        self.policy = policy or OfferPolicy()
        self.config = config or WidgetConfig()
        self.clock = clock
        self.state = WidgetState()

    async def load(self, collection_ref: Optional[str] = None) -> WidgetState:
        """Fetch candidate products and reset selections."""
        products = await self.catalog.fetch_candidate_products(collection_ref)
        self.state.reset_products(products)
        logger.info("Upsell block loaded %d candidate products (phase=%s)", len(products), self.state.phase.value)
        return self.state

    def offers(self, cart_lines: Iterable[CartLine]) -> List[Offer]:
        return select_offers(cart_lines, self.state.products, self.state.selections, self.policy)

    def select_variant(self, product_id: str, variant_id: str, cart_lines: Iterable[CartLine] = ()) -> bool:
        """Record the shopper's pick; only variants that could be offered right now are accepted."""
        product = self.state.product(product_id)
        if product is None:
            return False
        cart_ids = frozenset(line.merchandise_id for line in cart_lines)
        if not any(v.id == variant_id for v in available_variants(product, cart_ids, self.policy)):
            return False
        self.state.selections[product_id] = variant_id
        return True

    def toggle_options(self, product_id: str) -> bool:
        """Show or hide the variant selector; returns the new visibility."""
        if product_id in self.state.expanded:
            self.state.expanded.discard(product_id)
            return False
        self.state.expanded.add(product_id)
        return True

    def offer_for(self, product_id: str, cart_lines: Iterable[CartLine]) -> Optional[Offer]:
        """The offer currently shown for a product, ignoring the display cap."""
        product = self.state.product(product_id)
        if product is None:
            return None
        offers = select_offers(cart_lines, [product], self.state.selections, replace(self.policy, limit=None))
        return offers[0] if offers else None

    async def add_to_cart(self, product_id: str, cart_lines: Iterable[CartLine] = ()) -> Optional[AddLineResult]:
        """
        Add the variant shown for a product as one new cart line.

        Returns None when the product is no longer offered for this cart or an
        add for it is already in flight. A failed add shows the error banner;
        it is never retried.
        """
        if self.cart is None:
            raise RuntimeError("UpsellWidget has no cart client; it was built for rendering only")
        offer = self.offer_for(product_id, cart_lines)
        if offer is None:
            return None
        variant_id = offer.variant.id
        if not self.state.start_add(product_id, variant_id):
            logger.debug("Add already in flight for %s", product_id)
            return None

        # Adding from the open selector closes it.
        self.state.expanded.discard(product_id)
        try:
            result = await self.cart.add_line(variant_id, quantity=1)
        finally:
            self.state.finish_add(product_id)

        if not result.ok:
            logger.error("Adding %s to cart failed: %s", variant_id, result.message)
            self.state.show_error(self.config.error_message, self.clock(), self.config.error_timeout_seconds)
        return result

    @property
    def error(self) -> Optional[ErrorBanner]:
        return self.state.visible_error(self.clock())

    def render(self, cart_lines: Iterable[CartLine]) -> Optional[Dict[str, Any]]:
        cart_lines = list(cart_lines)
        return render_widget(
            self.state,
            self.offers(cart_lines),
            cart_lines,
            self.policy,
            self.config,
            error=self.error,
        )

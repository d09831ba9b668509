"""
Storefront Cart HTTP Client.

Adds a single line (quantity 1) to a storefront cart with the cartLinesAdd
mutation. Every failure is reported through AddLineResult so the caller can
show a transient banner instead of crashing.
"""

from __future__ import annotations

import logging

import httpx

from src.integrations.contracts.cart import CartLineChange, validate_line_change
from src.integrations.contracts.interfaces import AddLineResult, CartClient
from src.integrations.policy.response_wrappers import normalize_cart_lines_add_response

from .storefront_graphql import StorefrontGraphQLClient

logger = logging.getLogger(__name__)

CART_LINES_ADD_MUTATION = """
mutation ($cartId: ID!, $lines: [CartLineInput!]!) {
  cartLinesAdd(cartId: $cartId, lines: $lines) {
    cart {
      id
      totalQuantity
    }
    userErrors {
      field
      message
    }
  }
}
"""


class StorefrontCartClient(CartClient):
    def __init__(self, graphql: StorefrontGraphQLClient, cart_id: str) -> None:
        self.graphql = graphql
        self.cart_id = cart_id

    async def add_line(self, variant_id: str, quantity: int = 1) -> AddLineResult:
        change = CartLineChange(merchandise_id=variant_id, quantity=quantity)
        problems = validate_line_change(change)
        if problems:
            return AddLineResult(ok=False, variant_id=variant_id, message="; ".join(problems))

        variables = {
            "cartId": self.cart_id,
            "lines": [{"merchandiseId": change.merchandise_id, "quantity": change.quantity}],
        }
        try:
            raw = await self.graphql.execute(CART_LINES_ADD_MUTATION, variables)
            result = normalize_cart_lines_add_response(raw, variant_id=variant_id)
        except (httpx.HTTPError, ValueError) as exc:
            logger.error("cartLinesAdd failed for %s: %s", variant_id, exc)
            return AddLineResult(ok=False, variant_id=variant_id, message=str(exc))

        if not result.ok:
            logger.warning("cartLinesAdd rejected %s: %s", variant_id, result.message)
        return result

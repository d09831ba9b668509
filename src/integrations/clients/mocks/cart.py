"""
Cart MOCK client.

Keeps the cart in memory and accepts or rejects additions according to the
constructor settings. Does NOT make any network calls.
"""

import logging
import random
from typing import List, Optional, Set

from src.integrations.contracts.cart import CartLineChange, validate_line_change
from src.integrations.contracts.interfaces import AddLineResult, CartClient, CartLine

logger = logging.getLogger(__name__)


class MockCartClient(CartClient):
    """
    Mock cart.

    Parameters
    ----------
    success_rate : float
        Probability (0-1) that an addition succeeds. Default 1.0.
    failing_variants : set of str
        Variant ids that are always rejected, regardless of success_rate.
    """

    def __init__(self, success_rate: float = 1.0, failing_variants: Optional[Set[str]] = None):
        self._success_rate = success_rate
        self._failing = set(failing_variants or ())
        self._lines: List[CartLine] = []
        logger.info("[CART MOCK] Client initialised (success_rate=%.0f%%)", success_rate * 100)

    @property
    def lines(self) -> List[CartLine]:
        return list(self._lines)

    def _should_succeed(self, variant_id: str) -> bool:
        if variant_id in self._failing:
            return False
        return random.random() < self._success_rate

    async def add_line(self, variant_id: str, quantity: int = 1) -> AddLineResult:
        change = CartLineChange(merchandise_id=variant_id, quantity=quantity)
        problems = validate_line_change(change)
        if problems:
            return AddLineResult(ok=False, variant_id=variant_id, message="; ".join(problems))

        if not self._should_succeed(variant_id):
            logger.info("[CART MOCK] Rejected %s", variant_id)
            return AddLineResult(ok=False, variant_id=variant_id, message="The merchandise could not be added.")

        self._lines.append(CartLine(merchandise_id=variant_id))
        logger.info("[CART MOCK] Added %s (cart now has %d lines)", variant_id, len(self._lines))
        return AddLineResult(ok=True, variant_id=variant_id)

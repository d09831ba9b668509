"""
Upsell block state.

One WidgetState per page load. Per-product records replace ad-hoc flag maps so
that an add in flight on one product never blocks another.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Set

from src.integrations.contracts.interfaces import Product
from src.offers.selector import initial_selections


class WidgetPhase(str, Enum):
    LOADING = "LOADING"
    READY = "READY"
    EMPTY = "EMPTY"


@dataclass
class AddState:
    product_id: str
    variant_id: Optional[str] = None
    adding: bool = False


@dataclass
class ErrorBanner:
    message: str
    expires_at: float


@dataclass
class WidgetState:
    phase: WidgetPhase = WidgetPhase.LOADING
    products: List[Product] = field(default_factory=list)
    selections: Dict[str, str] = field(default_factory=dict)
    adds: Dict[str, AddState] = field(default_factory=dict)
    expanded: Set[str] = field(default_factory=set)
    error: Optional[ErrorBanner] = None

    def reset_products(self, products: List[Product]) -> None:
        """Replace the fetched products; selections start over from the new list."""
        self.products = list(products)
        self.selections = initial_selections(self.products)
        self.adds = {}
        self.expanded = set()
        self.phase = WidgetPhase.READY if self.products else WidgetPhase.EMPTY

    def product(self, product_id: str) -> Optional[Product]:
        return next((p for p in self.products if p.id == product_id), None)

    # --- Adds ---------------------------------------------------------------

    def is_adding(self, product_id: str) -> bool:
        record = self.adds.get(product_id)
        return bool(record and record.adding)

    def start_add(self, product_id: str, variant_id: str) -> bool:
        """Mark an add as in flight. False if this product already has one."""
        if self.is_adding(product_id):
            return False
        self.adds[product_id] = AddState(product_id=product_id, variant_id=variant_id, adding=True)
        return True

    def finish_add(self, product_id: str) -> None:
        record = self.adds.get(product_id)
        if record:
            record.adding = False

    # --- Error banner -------------------------------------------------------

    def show_error(self, message: str, now: float, timeout_seconds: float) -> None:
        self.error = ErrorBanner(message=message, expires_at=now + timeout_seconds)

    def visible_error(self, now: float) -> Optional[ErrorBanner]:
        if self.error is not None and now >= self.error.expires_at:
            self.error = None
        return self.error

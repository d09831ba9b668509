from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Dict, List, Optional, Tuple


# ---------------------------------------------------------------------------
# Shared data models
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Variant:
    id: str
    title: str
    price_amount: Decimal
    available_for_sale: bool
    quantity_available: Optional[int] = None      # None: stock not tracked / unknown
    currency_code: Optional[str] = None


@dataclass(frozen=True)
class Product:
    id: str
    title: str
    variants: Tuple[Variant, ...] = ()
    image_url: Optional[str] = None

    def variant(self, variant_id: str) -> Optional[Variant]:
        for v in self.variants:
            if v.id == variant_id:
                return v
        return None


@dataclass(frozen=True)
class CartLine:
    merchandise_id: str


@dataclass(frozen=True)
class Offer:
    product: Product
    variant: Variant


@dataclass
class AddLineResult:
    ok: bool
    variant_id: str
    message: Optional[str] = None
    errors: List[Dict[str, str]] = field(default_factory=list)


# ---------------------------------------------------------------------------
# Abstract client interfaces
# ---------------------------------------------------------------------------

class CatalogClient(ABC):
    """Every catalog source (storefront GraphQL or local fixture) implements this."""

    @abstractmethod
    async def fetch_collection_products(self, collection_ref: str, first: int) -> Optional[List[Product]]:
        """Products of a collection looked up by handle or gid; None if the collection does not exist."""

    @abstractmethod
    async def fetch_products(self, first: int) -> List[Product]:
        """Generic product listing used as the fallback source."""


class CartClient(ABC):
    """Appends merchandise to the shopper's cart."""

    @abstractmethod
    async def add_line(self, variant_id: str, quantity: int = 1) -> AddLineResult:
        """Add one cart line. Must report failures through AddLineResult rather than raise."""

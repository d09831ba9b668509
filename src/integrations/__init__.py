"""
Integrations layer.
This package contains all code used to communicate with the commerce platform:
- Catalog reads (collection products, generic product listing)
- Cart mutations (adding a line item)

Key rule:
- Offer selection and the upsell block MUST NOT call external APIs directly.
- They go through integration clients (under src/integrations/clients).
- We use MOCK clients during development and swap to REAL_HTTP clients when a
  storefront endpoint is configured.

Switching implementations:
- The selection of mock vs real clients happens in ONE place (src/api/main.py).
"""

from .contracts.interfaces import (
    AddLineResult,
    CartClient,
    CartLine,
    CatalogClient,
    Offer,
    Product,
    Variant,
)
from .contracts.catalog import CollectionRef, parse_collection_ref
from .contracts.cart import CartLineChange, cart_lines_from_ids, validate_line_change

__all__ = [
    # interfaces
    "AddLineResult", "CartClient", "CartLine", "CatalogClient",
    "Offer", "Product", "Variant",
    # catalog
    "CollectionRef", "parse_collection_ref",
    # cart
    "CartLineChange", "cart_lines_from_ids", "validate_line_change",
]

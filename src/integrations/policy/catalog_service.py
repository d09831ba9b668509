"""
Catalog Service.

Fetches the candidate upsell products for a checkout. Fails soft: the
configured collection is tried first; when it is missing, empty or the lookup
errors, the generic product listing is used instead; when that also fails the
result is an empty list. Nothing raised by a catalog client escapes.
"""

from __future__ import annotations

import logging
from typing import List, Optional

from src.integrations.contracts.catalog import parse_collection_ref
from src.integrations.contracts.interfaces import CatalogClient, Product

logger = logging.getLogger(__name__)


class CatalogService:
    def __init__(self, client: CatalogClient, products_first: int = 5):
        self.client = client
        self.products_first = products_first

    async def fetch_candidate_products(self, collection_ref: Optional[str] = None) -> List[Product]:
        ref = parse_collection_ref(collection_ref)
        if ref is not None:
            try:
                products = await self.client.fetch_collection_products(ref.value, self.products_first)
                if products:
                    return products
                logger.info("Collection %s returned no products; using generic listing", ref.value)
            except Exception as e:
                logger.warning("Collection lookup for %s failed: %s; using generic listing", ref.value, e)

        try:
            return await self.client.fetch_products(self.products_first)
        except Exception as e:
            logger.error("Fallback product listing failed: %s", e, exc_info=True)
            return []

"""
Storefront Catalog HTTP Client.

Purpose:
- Reads candidate upsell products from the storefront GraphQL API
- Normalizes product nodes into the Product / Variant contract shape

Usage:
- Wired in src/api/main.py when STOREFRONT_API_URL is configured
- Called by CatalogService through the CatalogClient interface

Failure handling is NOT done here: errors propagate so that CatalogService can
decide when to fall back to the generic listing.
"""

from __future__ import annotations

import logging
from typing import List, Optional

from src.integrations.contracts.catalog import parse_collection_ref
from src.integrations.contracts.interfaces import CatalogClient, Product
from src.integrations.policy.response_wrappers import normalize_product_nodes, unwrap_graphql

from .storefront_graphql import StorefrontGraphQLClient

logger = logging.getLogger(__name__)

PRODUCT_FIELDS = """
    id
    title
    images(first: 1) {
      nodes {
        url
      }
    }
    variants(first: $variantsFirst) {
      nodes {
        id
        title
        price {
          amount
          currencyCode
        }
        availableForSale
        quantityAvailable
      }
    }
"""

COLLECTION_BY_HANDLE_QUERY = (
    "query ($handle: String!, $first: Int!, $variantsFirst: Int!) {\n"
    "  collection(handle: $handle) {\n"
    "    products(first: $first) {\n"
    "      nodes {" + PRODUCT_FIELDS + "}\n"
    "    }\n"
    "  }\n"
    "}"
)

COLLECTION_BY_ID_QUERY = (
    "query ($id: ID!, $first: Int!, $variantsFirst: Int!) {\n"
    "  collection(id: $id) {\n"
    "    products(first: $first) {\n"
    "      nodes {" + PRODUCT_FIELDS + "}\n"
    "    }\n"
    "  }\n"
    "}"
)

PRODUCTS_QUERY = (
    "query ($first: Int!, $variantsFirst: Int!) {\n"
    "  products(first: $first) {\n"
    "    nodes {" + PRODUCT_FIELDS + "}\n"
    "  }\n"
    "}"
)


class StorefrontCatalogClient(CatalogClient):
    def __init__(self, graphql: StorefrontGraphQLClient, variants_first: int = 10) -> None:
        self.graphql = graphql
        self.variants_first = variants_first

    async def fetch_collection_products(self, collection_ref: str, first: int) -> Optional[List[Product]]:
        ref = parse_collection_ref(collection_ref)
        if ref is None:
            raise ValueError("collection_ref must not be blank")

        query = COLLECTION_BY_ID_QUERY if ref.by_id else COLLECTION_BY_HANDLE_QUERY
        variables = {ref.lookup_field: ref.value, "first": first, "variantsFirst": self.variants_first}
        data = unwrap_graphql(await self.graphql.execute(query, variables))

        collection = data.get("collection")
        if not collection:
            logger.info("Collection %s=%s not found", ref.lookup_field, ref.value)
            return None
        return normalize_product_nodes(((collection.get("products") or {}).get("nodes")))

    async def fetch_products(self, first: int) -> List[Product]:
        variables = {"first": first, "variantsFirst": self.variants_first}
        data = unwrap_graphql(await self.graphql.execute(PRODUCTS_QUERY, variables))
        return normalize_product_nodes(((data.get("products") or {}).get("nodes")))

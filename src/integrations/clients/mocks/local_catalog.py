"""
Local Catalog Client (Mock/Local).

Purpose:
- Acts as a development-time catalog source when the storefront API is not available.
- Loads product nodes from a local JSON file shaped like the storefront GraphQL
  response, so the same normalization path is exercised as in production.

File layout:
    {
      "collections": {"<handle>": {"id": "gid://...", "products": [<product node>, ...]}},
      "products": [<product node>, ...]
    }
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from src.integrations.contracts.catalog import parse_collection_ref
from src.integrations.contracts.interfaces import CatalogClient, Product
from src.integrations.policy.response_wrappers import normalize_product_nodes

logger = logging.getLogger(__name__)

DEFAULT_CATALOG_PATH = Path(__file__).parent.parent.parent.parent.parent / "data" / "catalog" / "local_catalog.json"


class LocalCatalogClient(CatalogClient):
    def __init__(self, catalog: Optional[Dict[str, Any]] = None, path: Optional[Union[str, Path]] = None):
        if catalog is None:
            catalog = self._load(Path(path) if path else DEFAULT_CATALOG_PATH)
        self._catalog = catalog
        logger.info(
            "[LOCAL CATALOG] Loaded %d collections, %d listing products",
            len(self._catalog.get("collections") or {}),
            len(self._catalog.get("products") or []),
        )

    @staticmethod
    def _load(path: Path) -> Dict[str, Any]:
        if not path.exists():
            raise FileNotFoundError(f"Local catalog file not found: {path}")
        with open(path, "r", encoding="utf-8") as f:
            return json.load(f) or {}

    async def fetch_collection_products(self, collection_ref: str, first: int) -> Optional[List[Product]]:
        ref = parse_collection_ref(collection_ref)
        if ref is None:
            raise ValueError("collection_ref must not be blank")

        collections = self._catalog.get("collections") or {}
        found = None
        if ref.by_id:
            found = next((c for c in collections.values() if c.get("id") == ref.value), None)
        else:
            found = collections.get(ref.value)

        if found is None:
            logger.info("[LOCAL CATALOG] Collection %s=%s not found", ref.lookup_field, ref.value)
            return None
        return normalize_product_nodes((found.get("products") or [])[:first])

    async def fetch_products(self, first: int) -> List[Product]:
        return normalize_product_nodes((self._catalog.get("products") or [])[:first])

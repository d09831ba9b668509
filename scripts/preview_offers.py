#!/usr/bin/env python3
"""
Preview the upsell offers for a cart:
- load config/upsell_config.yml
- fetch candidate products (collection, falling back to the generic listing)
- apply the cart and selection policy
- print the resulting offers

Uses the storefront API when STOREFRONT_API_URL is set, the local catalog otherwise.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import os
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from dotenv import load_dotenv

load_dotenv()

from src.integrations.clients.mocks.local_catalog import LocalCatalogClient
from src.integrations.clients.real_http.storefront_catalog import StorefrontCatalogClient
from src.integrations.clients.real_http.storefront_graphql import StorefrontGraphQLClient
from src.integrations.contracts.cart import cart_lines_from_ids
from src.integrations.policy.catalog_service import CatalogService
from src.offers.selector import select_offers
from src.utils.config_loader import load_upsell_config, resolve_collection_ref


def setup_logging(verbose: bool = False) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(level=level, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s")


def build_catalog_client(cfg, local_path):
    api_url = os.getenv("STOREFRONT_API_URL") or cfg.storefront.api_url
    if api_url:
        graphql = StorefrontGraphQLClient(
            api_url=api_url,
            access_token=cfg.access_token(),
            token_header=cfg.storefront.token_header,
            timeout_seconds=cfg.storefront.timeout_seconds,
        )
        return StorefrontCatalogClient(graphql, variants_first=cfg.catalog.variants_first)
    return LocalCatalogClient(path=local_path)


async def preview(args) -> int:
    cfg = load_upsell_config(Path(args.config) if args.config else None)
    if args.limit is not None:
        cfg.offers.limit = args.limit

    service = CatalogService(build_catalog_client(cfg, args.local_catalog), products_first=cfg.catalog.products_first)
    products = await service.fetch_candidate_products(resolve_collection_ref(args.collection, cfg))
    offers = select_offers(cart_lines_from_ids(args.cart), products, policy=cfg.offers.to_policy())

    print(f"\n### {cfg.widget.heading} ({len(offers)} of {len(products)} candidates)\n")
    if not offers:
        print("(nothing to offer)")
        return 0
    for offer in offers:
        v = offer.variant
        stock = "untracked" if v.quantity_available is None else v.quantity_available
        print(f"- {offer.product.title}: {v.title} [{v.id}] {v.price_amount} {v.currency_code or ''} (stock: {stock})")
    return 0


def main() -> int:
    parser = argparse.ArgumentParser(description="Preview checkout upsell offers")
    parser.add_argument("--collection", help="Collection handle or gid (as stored in the metafield)")
    parser.add_argument("--cart", nargs="*", default=[], help="Merchandise ids already in the cart")
    parser.add_argument("--limit", type=int, default=None, help="Override the offer cap")
    parser.add_argument("--config", help="Path to upsell_config.yml")
    parser.add_argument("--local-catalog", help="Local catalog JSON used when no storefront is configured")
    parser.add_argument("-v", "--verbose", action="store_true")
    args = parser.parse_args()

    setup_logging(args.verbose)
    return asyncio.run(preview(args))


if __name__ == "__main__":
    sys.exit(main())

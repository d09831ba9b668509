"""
FastAPI application - Main entry point
"""

from dotenv import load_dotenv

load_dotenv()

import logging
import os
from datetime import datetime
from pathlib import Path
from typing import Optional

from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware

import src.api.offers_router as offers_module
from src.api.dependencies import api_key_protection
from src.api.offers_router import router as offers_router
from src.integrations.clients.mocks.cart import MockCartClient
from src.integrations.clients.mocks.local_catalog import LocalCatalogClient
from src.integrations.clients.real_http.storefront_cart import StorefrontCartClient
from src.integrations.clients.real_http.storefront_catalog import StorefrontCatalogClient
from src.integrations.clients.real_http.storefront_graphql import StorefrontGraphQLClient
from src.integrations.contracts.interfaces import CartClient
from src.integrations.policy.catalog_service import CatalogService
from src.utils.config_loader import UpsellConfig, load_upsell_config

# Setup logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

PROJECT_ROOT = Path(__file__).parent.parent.parent

# Initialize FastAPI app
app = FastAPI(
    title="Checkout Upsell API",
    description="'You might also like' offers for the checkout page",
    version="1.0.0",
    dependencies=[Depends(api_key_protection)],  # protect everything by default
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Configure appropriately for production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# ============================================================================
# DEPENDENCY INJECTION
# ============================================================================

upsell_config = load_upsell_config()


def _should_use_real_integrations() -> bool:
    mode = os.getenv("INTEGRATIONS_MODE", "").strip().lower()
    if mode in {"real", "live"}:
        return True
    if mode in {"mock", "test"}:
        return False
    return bool(os.getenv("STOREFRONT_API_URL") or upsell_config.storefront.api_url)


def _build_graphql_client(cfg: UpsellConfig) -> StorefrontGraphQLClient:
    return StorefrontGraphQLClient(
        api_url=os.getenv("STOREFRONT_API_URL") or cfg.storefront.api_url,
        access_token=cfg.access_token(),
        token_header=cfg.storefront.token_header,
        timeout_seconds=cfg.storefront.timeout_seconds,
    )


def _local_catalog_path(cfg: UpsellConfig) -> Optional[Path]:
    if not cfg.catalog.local_catalog_path:
        return None
    path = Path(cfg.catalog.local_catalog_path)
    return path if path.is_absolute() else PROJECT_ROOT / path


if _should_use_real_integrations():
    graphql_client = _build_graphql_client(upsell_config)
    catalog_client = StorefrontCatalogClient(graphql_client, variants_first=upsell_config.catalog.variants_first)

    def _cart_client_factory(cart_id: Optional[str]) -> CartClient:
        if not cart_id:
            raise ValueError("cart_id is required when using the storefront cart.")
        return StorefrontCartClient(graphql_client, cart_id=cart_id)

    logger.info("Using storefront integrations at %s", graphql_client.api_url)
else:
    catalog_client = LocalCatalogClient(path=_local_catalog_path(upsell_config))
    mock_cart = MockCartClient()

    def _cart_client_factory(cart_id: Optional[str]) -> CartClient:
        return mock_cart

    logger.info("Using mock integrations (local catalog, in-memory cart)")

catalog_service = CatalogService(catalog_client, products_first=upsell_config.catalog.products_first)

offers_module.catalog_service = catalog_service
offers_module.cart_client_factory = _cart_client_factory
offers_module.config = upsell_config

app.include_router(offers_router, prefix="/api/v1")


# ============================================================================
# ENDPOINTS
# ============================================================================
@app.get("/", tags=["Health"])
async def root():
    """Health check endpoint."""
    return {"service": "Checkout Upsell API", "status": "healthy", "version": "1.0.0", "timestamp": datetime.now().isoformat()}


@app.get("/health", tags=["Health"])
async def health_check():
    return {
        "status": "healthy",
        "integrations": "real" if _should_use_real_integrations() else "mock",
        "metafield": upsell_config.metafield_identifier,
        "timestamp": datetime.now().isoformat(),
    }

"""
Configuration loader for the checkout upsell service
"""

import logging
import os
from pathlib import Path
from typing import Literal, Optional

import yaml
from pydantic import BaseModel, Field, ValidationError

from src.offers.policy import OfferPolicy

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path(__file__).parent.parent.parent / "config" / "upsell_config.yml"


class StorefrontConfig(BaseModel):
    """Storefront GraphQL endpoint settings"""

    api_url: str = ""
    access_token_env: str = "STOREFRONT_ACCESS_TOKEN"
    token_header: str = "X-Shopify-Storefront-Access-Token"
    timeout_seconds: float = Field(default=10.0, gt=0.0, le=120.0)


class CatalogConfig(BaseModel):
    """Where candidate products come from"""

    default_collection: str = ""
    metafield_namespace: str = "custom"
    metafield_key: str = "upsell_product_checkout"
    products_first: int = Field(default=5, ge=1, le=250)
    variants_first: int = Field(default=10, ge=1, le=250)
    local_catalog_path: Optional[str] = None


class OffersConfig(BaseModel):
    """Offer selection policy"""

    cart_exclusion: Literal["variant", "product"] = "variant"
    stock_aware: bool = True
    variant_mode: Literal["multi", "single_only"] = "multi"
    limit: Optional[int] = Field(default=3, ge=0)

    def to_policy(self) -> OfferPolicy:
        return OfferPolicy(
            cart_exclusion=self.cart_exclusion,
            stock_aware=self.stock_aware,
            variant_mode=self.variant_mode,
            limit=self.limit,
        )


class WidgetConfig(BaseModel):
    """Upsell block presentation settings"""

    heading: str = "You might also like"
    error_message: str = "There was an issue adding this product. Please try again."
    error_timeout_seconds: float = Field(default=3.0, ge=0.0)
    skeleton_rows: int = Field(default=3, ge=0, le=10)
    placeholder_image_url: str = (
        "https://cdn.shopify.com/s/files/1/0533/2089/files/placeholder-images-image_medium.png"
    )


class UpsellConfig(BaseModel):
    """Complete upsell configuration"""

    storefront: StorefrontConfig = Field(default_factory=StorefrontConfig)
    catalog: CatalogConfig = Field(default_factory=CatalogConfig)
    offers: OffersConfig = Field(default_factory=OffersConfig)
    widget: WidgetConfig = Field(default_factory=WidgetConfig)

    @property
    def metafield_identifier(self) -> str:
        return f"{self.catalog.metafield_namespace}.{self.catalog.metafield_key}"

    def access_token(self) -> str:
        return os.getenv(self.storefront.access_token_env, "")


def load_upsell_config(config_path: Optional[Path] = None) -> UpsellConfig:
    """
    Load and validate upsell configuration from YAML file

    Args:
        config_path: Path to config file. Defaults to config/upsell_config.yml

    Returns:
        Validated UpsellConfig object

    Raises:
        FileNotFoundError: If config file doesn't exist
        ValidationError: If config doesn't match schema
    """
    if config_path is None:
        config_path = Path(os.getenv("UPSELL_CONFIG_PATH", "")) if os.getenv("UPSELL_CONFIG_PATH") else DEFAULT_CONFIG_PATH

    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(config_path, "r", encoding="utf-8") as f:
        config_data = yaml.safe_load(f) or {}

    try:
        config = UpsellConfig(**config_data)
        logger.info("Successfully loaded upsell config from %s", config_path)
        return config
    except ValidationError as e:
        logger.error("Upsell config validation failed: %s", e)
        raise


def resolve_collection_ref(metafield_value: Optional[str], config: UpsellConfig) -> Optional[str]:
    """
    Pick the collection to read offers from.

    The merchant's metafield wins; otherwise the configured default collection.
    Returns None when both are blank, which sends the catalog straight to the
    generic listing.
    """
    if metafield_value is not None and str(metafield_value).strip():
        return str(metafield_value).strip()
    default = (config.catalog.default_collection or "").strip()
    return default or None

from __future__ import annotations

import logging
from decimal import Decimal
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, ValidationError

from src.integrations.contracts.interfaces import AddLineResult, Product, Variant

logger = logging.getLogger(__name__)


class IntegrationResponseError(ValueError):
    def __init__(self, message: str, *, payload: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message)
        self.payload = payload or {}


class PriceModel(BaseModel):
    amount: Decimal
    currencyCode: Optional[str] = None


class VariantNodeModel(BaseModel):
    id: str
    title: str = ""
    price: PriceModel
    availableForSale: bool = False
    quantityAvailable: Optional[int] = None


class ImageNodeModel(BaseModel):
    url: str


class ProductNodeModel(BaseModel):
    id: str
    title: str = ""
    image_urls: List[str] = Field(default_factory=list)
    variants: List[Dict[str, Any]] = Field(default_factory=list)


def unwrap_graphql(raw: Dict[str, Any]) -> Dict[str, Any]:
    """Return the `data` member of a GraphQL response, raising on top-level errors."""
    if not isinstance(raw, dict):
        raise IntegrationResponseError(f"GraphQL response must be an object, got {type(raw).__name__}.")
    errors = raw.get("errors")
    if errors:
        messages = "; ".join(str(e.get("message", e)) if isinstance(e, dict) else str(e) for e in errors)
        raise IntegrationResponseError(f"GraphQL errors: {messages}", payload=raw)
    data = raw.get("data")
    if not isinstance(data, dict):
        raise IntegrationResponseError("GraphQL response has no data.", payload=raw)
    return data


def normalize_product_nodes(nodes: Any) -> List[Product]:
    """Convert a list of GraphQL product nodes, skipping nodes that fail validation."""
    if not isinstance(nodes, list):
        return []

    products: List[Product] = []
    for node in nodes:
        try:
            products.append(normalize_product_node(node))
        except IntegrationResponseError as exc:
            logger.warning("Skipping malformed product node: %s", exc)
    return products


def normalize_product_node(raw: Any) -> Product:
    if not isinstance(raw, dict):
        raise IntegrationResponseError(f"Product node must be an object, got {type(raw).__name__}.")

    model = _build_model(
        ProductNodeModel,
        {
            "id": _first_non_empty(raw, "id"),
            "title": raw.get("title") or "",
            "image_urls": [img.url for img in _image_nodes(raw)],
            "variants": _connection_nodes(raw.get("variants")),
        },
        raw,
    )

    variants: List[Variant] = []
    for node in model.variants:
        try:
            variants.append(normalize_variant_node(node))
        except IntegrationResponseError as exc:
            logger.warning("Skipping malformed variant on product %s: %s", model.id, exc)

    return Product(
        id=model.id,
        title=model.title,
        variants=tuple(variants),
        image_url=model.image_urls[0] if model.image_urls else None,
    )


def normalize_variant_node(raw: Any) -> Variant:
    if not isinstance(raw, dict):
        raise IntegrationResponseError(f"Variant node must be an object, got {type(raw).__name__}.")
    model = _build_model(VariantNodeModel, raw, raw)
    return Variant(
        id=model.id,
        title=model.title,
        price_amount=model.price.amount,
        available_for_sale=model.availableForSale,
        quantity_available=model.quantityAvailable,
        currency_code=model.price.currencyCode,
    )


def normalize_cart_lines_add_response(raw: Dict[str, Any], *, variant_id: str) -> AddLineResult:
    """Map a cartLinesAdd payload onto AddLineResult; userErrors become a failed result."""
    data = unwrap_graphql(raw)
    payload = data.get("cartLinesAdd")
    if not isinstance(payload, dict):
        raise IntegrationResponseError("Missing cartLinesAdd payload.", payload=raw)

    user_errors = [e for e in payload.get("userErrors") or [] if isinstance(e, dict)]
    if user_errors:
        return AddLineResult(
            ok=False,
            variant_id=variant_id,
            message=str(user_errors[0].get("message") or "Cart rejected the line."),
            errors=[_user_error(e) for e in user_errors],
        )
    if not payload.get("cart"):
        return AddLineResult(ok=False, variant_id=variant_id, message="Cart was not returned.")
    return AddLineResult(ok=True, variant_id=variant_id)


def _user_error(raw: Dict[str, Any]) -> Dict[str, str]:
    field = raw.get("field") or []
    if isinstance(field, (list, tuple)):
        field = ".".join(str(part) for part in field if part is not None)
    return {"field": str(field), "message": str(raw.get("message") or "")}


def _connection_nodes(connection: Any) -> List[Any]:
    if isinstance(connection, dict) and isinstance(connection.get("nodes"), list):
        return connection["nodes"]
    return []


def _image_nodes(raw: Dict[str, Any]) -> List[ImageNodeModel]:
    images: List[ImageNodeModel] = []
    for node in _connection_nodes(raw.get("images")):
        if isinstance(node, dict) and node.get("url"):
            images.append(ImageNodeModel(url=str(node["url"])))
    return images


def _first_non_empty(data: Dict[str, Any], *keys: str, default: Any = None) -> Any:
    for key in keys:
        value = data.get(key)
        if value is None:
            continue
        if isinstance(value, str) and not value.strip():
            continue
        return value
    if default is not None:
        return default
    raise IntegrationResponseError(f"Missing required field. Checked keys: {', '.join(keys)}", payload=data)


def _build_model(model_type, payload: Dict[str, Any], raw: Dict[str, Any]):
    try:
        return model_type(**payload)
    except ValidationError as exc:
        raise IntegrationResponseError(f"Response validation failed: {exc}", payload=raw) from exc

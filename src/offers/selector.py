"""
Offer selector.

Turns (cart lines, fetched products, optional variant selections) into the
ordered list of offers the upsell block shows, each paired with the variant
that an "Add" press would put in the cart.
"""

from typing import Any, Dict, FrozenSet, Iterable, List, Mapping, Optional, Sequence

from src.integrations.contracts.interfaces import CartLine, Offer, Product, Variant

from .policy import OfferPolicy

_DEFAULT_POLICY = OfferPolicy()


def select_offers(
    cart_lines: Iterable[CartLine],
    products: Iterable[Product],
    selections: Optional[Mapping[str, str]] = None,
    policy: Optional[OfferPolicy] = None,
) -> List[Offer]:
    policy = policy or _DEFAULT_POLICY
    selections = selections or {}
    cart_ids = _cart_ids(cart_lines)

    offers: List[Offer] = []
    for product in products or ():
        if policy.limit is not None and len(offers) >= policy.limit:
            break
        if not isinstance(product, Product):
            continue

        variants = _variants_of(product)
        if policy.variant_mode == "single_only" and len(variants) != 1:
            continue
        if policy.cart_exclusion == "product" and any(v.id in cart_ids for v in variants):
            continue

        available = available_variants(product, cart_ids, policy)
        if not available:
            continue

        offers.append(Offer(product=product, variant=_choose(available, selections.get(product.id))))
    return offers


def available_variants(product: Product, cart_ids: FrozenSet[str], policy: Optional[OfferPolicy] = None) -> List[Variant]:
    """Variants of a product that can still be added, in catalog order."""
    policy = policy or _DEFAULT_POLICY
    return [v for v in _variants_of(product) if _is_available(v, cart_ids, policy)]


def initial_selections(products: Iterable[Product]) -> Dict[str, str]:
    """Seed selection state with the first variant available for sale per product."""
    selected: Dict[str, str] = {}
    for product in products or ():
        if not isinstance(product, Product):
            continue
        for v in _variants_of(product):
            if v.available_for_sale:
                selected[product.id] = v.id
                break
    return selected


def _is_available(variant: Variant, cart_ids: FrozenSet[str], policy: OfferPolicy) -> bool:
    if not variant.available_for_sale:
        return False
    if variant.id in cart_ids:
        return False
    if policy.stock_aware and variant.quantity_available is not None and variant.quantity_available <= 0:
        return False
    return True


def _choose(available: Sequence[Variant], selected_id: Optional[str]) -> Variant:
    if selected_id:
        for v in available:
            if v.id == selected_id:
                return v
    return available[0]


def _variants_of(product: Any) -> List[Variant]:
    # Anything that is not a proper variant sequence counts as no variants.
    variants = getattr(product, "variants", None)
    if not variants or isinstance(variants, (str, bytes, Mapping)):
        return []
    return [v for v in variants if isinstance(v, Variant)]


def _cart_ids(cart_lines: Iterable[CartLine]) -> FrozenSet[str]:
    return frozenset(
        line.merchandise_id for line in cart_lines or () if getattr(line, "merchandise_id", None)
    )

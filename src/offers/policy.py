from dataclasses import dataclass
from typing import Literal, Optional

CartExclusion = Literal["variant", "product"]
VariantMode = Literal["multi", "single_only"]

DEFAULT_OFFER_LIMIT = 3


@dataclass(frozen=True)
class OfferPolicy:
    """Flags that distinguish the different upsell block behaviours.

    cart_exclusion: "variant" hides only the variants already in the cart,
        "product" hides a product as soon as any of its variants is in the cart.
    stock_aware: skip variants whose tracked quantity is zero or negative.
    variant_mode: "single_only" offers only products with exactly one variant.
    limit: maximum number of offers emitted, None for no cap.
    """
    cart_exclusion: CartExclusion = "variant"
    stock_aware: bool = True
    variant_mode: VariantMode = "multi"
    limit: Optional[int] = DEFAULT_OFFER_LIMIT

    def __post_init__(self):
        if self.cart_exclusion not in ("variant", "product"):
            raise ValueError(f"Unsupported cart_exclusion '{self.cart_exclusion}'")
        if self.variant_mode not in ("multi", "single_only"):
            raise ValueError(f"Unsupported variant_mode '{self.variant_mode}'")
        if self.limit is not None and self.limit < 0:
            raise ValueError("limit must be >= 0")

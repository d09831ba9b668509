"""
Offer selection.

Decides which fetched products are shown as upsell offers and which variant
each one defaults to. Pure functions only: no I/O, no shared state.
"""

from .policy import OfferPolicy
from .selector import available_variants, initial_selections, select_offers

__all__ = ["OfferPolicy", "available_variants", "initial_selections", "select_offers"]

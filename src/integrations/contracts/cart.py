from dataclasses import dataclass
from typing import Iterable, List

from .interfaces import CartLine

"""
Cart contract: the single change this service makes to a cart and
validation helpers for it.
"""


@dataclass(frozen=True)
class CartLineChange:
    """Mirror of the platform's addCartLine change."""
    merchandise_id: str
    quantity: int = 1
    type: str = "addCartLine"


def validate_line_change(change: CartLineChange) -> List[str]:
    """
    Return a list of validation errors.
    Empty list means the change is valid.
    """
    errors: List[str] = []

    if not change.merchandise_id or not change.merchandise_id.strip():
        errors.append("merchandise_id is required")
    if change.quantity != 1:
        errors.append("quantity must be 1 per add action")
    if change.type != "addCartLine":
        errors.append(f"unsupported change type '{change.type}'")

    return errors


def cart_lines_from_ids(merchandise_ids: Iterable[str]) -> List[CartLine]:
    """Build CartLine records from raw merchandise ids, skipping blanks."""
    return [CartLine(merchandise_id=m.strip()) for m in merchandise_ids if m and m.strip()]

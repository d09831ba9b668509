"""
Catalog contract: how a merchant-configured collection is referenced.
"""

from dataclasses import dataclass
from typing import Optional

GID_PREFIX = "gid://"


@dataclass(frozen=True)
class CollectionRef:
    """A collection looked up either by its global id or by its handle."""
    value: str
    by_id: bool

    @property
    def lookup_field(self) -> str:
        return "id" if self.by_id else "handle"


def parse_collection_ref(raw: Optional[str]) -> Optional[CollectionRef]:
    """Return None for a missing or blank ref."""
    if raw is None:
        return None
    value = str(raw).strip()
    if not value:
        return None
    return CollectionRef(value=value, by_id=value.startswith(GID_PREFIX))

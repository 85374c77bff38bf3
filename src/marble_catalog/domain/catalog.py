"""Domain models for the piece catalog."""

from dataclasses import dataclass
from datetime import datetime

PIECE_CATEGORIES = ("track", "support", "connector", "special")


@dataclass(frozen=True)
class Brand:
    """A marble-run manufacturer."""

    id: str
    name: str
    slug: str
    is_active: bool = True
    description: str | None = None
    website_url: str | None = None
    country: str | None = None


@dataclass(frozen=True)
class CatalogPiece:
    """A defined piece type in the reference inventory."""

    id: str
    brand_id: str
    name: str
    slug: str
    category: str
    description: str | None
    is_active: bool
    created_at: datetime | None
    brand: Brand | None = None


@dataclass(frozen=True)
class CatalogQuery:
    """Filters and ordering for a catalog search."""

    search: str | None = None
    brand_id: str | None = None
    category: str | None = None
    sort_field: str = "created_at"
    descending: bool = True

"""Catalog browsing services."""

from dataclasses import dataclass
from typing import Protocol

from marble_catalog.domain.catalog import (
    PIECE_CATEGORIES,
    Brand,
    CatalogPiece,
    CatalogQuery,
)
from marble_catalog.domain.errors import ValidationFailed

SORT_FIELDS = {"name", "category", "created_at", "brand"}


class CatalogRepository(Protocol):
    """Read interface for catalog pieces and brands."""

    def list_active_pieces(self) -> list[CatalogPiece]:
        """Return every active piece with its brand."""

    def search_pieces(self, query: CatalogQuery) -> list[CatalogPiece]:
        """Return active pieces matching the query filters and order."""

    def list_brands(self) -> list[Brand]:
        """Return active brands ordered by name."""


@dataclass
class CatalogService:
    """Application service for catalog browsing."""

    repository: CatalogRepository

    def list_brands(self) -> list[Brand]:
        """Return active brands."""
        return self.repository.list_brands()

    def search_pieces(self, query: CatalogQuery) -> list[CatalogPiece]:
        """Search active pieces, validating filters first."""
        if query.sort_field not in SORT_FIELDS:
            raise ValidationFailed(f"Unsupported sort field: {query.sort_field}")
        if query.category and query.category not in PIECE_CATEGORIES:
            raise ValidationFailed(f"Unknown category: {query.category}")
        search = query.search.strip() if query.search else None
        if search and any(char in search for char in ",()"):
            raise ValidationFailed("Search text must not contain , ( or )")
        if query.sort_field == "brand":
            # Brand names live on the joined row, so order after fetching.
            pieces = self.repository.search_pieces(
                CatalogQuery(
                    search=search,
                    brand_id=query.brand_id,
                    category=query.category,
                    sort_field="name",
                    descending=False,
                )
            )
            return sorted(
                pieces,
                key=lambda piece: (piece.brand.name if piece.brand else "").lower(),
                reverse=query.descending,
            )
        return self.repository.search_pieces(
            CatalogQuery(
                search=search,
                brand_id=query.brand_id,
                category=query.category,
                sort_field=query.sort_field,
                descending=query.descending,
            )
        )


def categories(pieces: list[CatalogPiece]) -> list[str]:
    """Return the distinct categories present in a result set."""
    return sorted({piece.category for piece in pieces})

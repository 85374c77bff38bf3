"""Supabase implementation for the piece catalog."""

from dataclasses import dataclass

from supabase import Client

from marble_catalog.adapters.supabase_rows import execute_query, parse_datetime
from marble_catalog.domain.catalog import Brand, CatalogPiece, CatalogQuery
from marble_catalog.services.catalog import CatalogRepository

_PIECE_COLUMNS = "*, brand:brands (*)"


@dataclass
class SupabaseCatalogRepository(CatalogRepository):
    """Reads active piece types and brands."""

    client: Client

    def list_active_pieces(self) -> list[CatalogPiece]:
        """Return every active piece with its brand."""
        response = execute_query(
            self.client.table("piece_types")
            .select(_PIECE_COLUMNS)
            .eq("is_active", True),
            "list catalog pieces",
        )
        return [_parse_piece(row) for row in response.data or []]

    def search_pieces(self, query: CatalogQuery) -> list[CatalogPiece]:
        """Return active pieces filtered and ordered by the query."""
        request = (
            self.client.table("piece_types")
            .select(_PIECE_COLUMNS)
            .eq("is_active", True)
        )
        if query.search:
            pattern = f"%{query.search}%"
            request = request.or_(
                f"name.ilike.{pattern},description.ilike.{pattern}"
            )
        if query.brand_id:
            request = request.eq("brand_id", query.brand_id)
        if query.category:
            request = request.eq("category", query.category)
        response = execute_query(
            request.order(query.sort_field, desc=query.descending),
            "search catalog pieces",
        )
        return [_parse_piece(row) for row in response.data or []]

    def list_brands(self) -> list[Brand]:
        """Return active brands ordered by name."""
        response = execute_query(
            self.client.table("brands")
            .select("*")
            .eq("is_active", True)
            .order("name"),
            "list brands",
        )
        return [_parse_brand(row) for row in response.data or []]


def _parse_brand(row: dict[str, object]) -> Brand:
    return Brand(
        id=str(row["id"]),
        name=str(row.get("name", "")),
        slug=str(row.get("slug", "")),
        is_active=bool(row.get("is_active", True)),
        description=row.get("description"),
        website_url=row.get("website_url"),
        country=row.get("country"),
    )


def _parse_piece(row: dict[str, object]) -> CatalogPiece:
    """Parse a piece row with an optional embedded brand."""
    brand_row = row.get("brand")
    return CatalogPiece(
        id=str(row["id"]),
        brand_id=str(row.get("brand_id", "")),
        name=str(row.get("name", "")),
        slug=str(row.get("slug", "")),
        category=str(row.get("category", "")),
        description=row.get("description"),
        is_active=bool(row.get("is_active", True)),
        created_at=parse_datetime(row.get("created_at")),
        brand=_parse_brand(brand_row) if isinstance(brand_row, dict) else None,
    )

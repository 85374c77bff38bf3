"""Catalog browsing and collection listing endpoints."""

from uuid import UUID

from fastapi import APIRouter, Depends

from marble_catalog.api.deps import current_owner, get_container
from marble_catalog.api.models import (
    BrandResponse,
    CatalogPieceResponse,
    CatalogSearchResponse,
    HoldingResponse,
)
from marble_catalog.containers import AppContainer
from marble_catalog.domain.catalog import CatalogQuery
from marble_catalog.services.catalog import categories

router = APIRouter(tags=["catalog"])


@router.get("/catalog/brands")
async def list_brands(
    container: AppContainer = Depends(get_container),
) -> list[BrandResponse]:
    """Return active brands."""
    return [
        BrandResponse.from_domain(brand)
        for brand in container.catalog_service.list_brands()
    ]


@router.get("/catalog/pieces")
async def search_pieces(  # noqa: PLR0913
    search: str | None = None,
    brand_id: str | None = None,
    category: str | None = None,
    sort: str = "created_at",
    direction: str = "desc",
    container: AppContainer = Depends(get_container),
) -> CatalogSearchResponse:
    """Search active catalog pieces."""
    pieces = container.catalog_service.search_pieces(
        CatalogQuery(
            search=search,
            brand_id=brand_id,
            category=category,
            sort_field=sort,
            descending=direction.lower() != "asc",
        )
    )
    return CatalogSearchResponse(
        pieces=[CatalogPieceResponse.from_domain(piece) for piece in pieces],
        categories=categories(pieces),
        total_count=len(pieces),
    )


@router.get("/collection")
async def list_collection(
    owner: UUID | None = Depends(current_owner),
    container: AppContainer = Depends(get_container),
) -> list[HoldingResponse]:
    """Return the caller's collection holdings."""
    return [
        HoldingResponse.from_domain(holding)
        for holding in container.collection_service.list_holdings(owner)
    ]

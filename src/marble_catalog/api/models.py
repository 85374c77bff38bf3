"""Pydantic request and response models for the HTTP API."""

from datetime import date, datetime
from uuid import UUID

from pydantic import BaseModel, Field

from marble_catalog.domain.catalog import Brand, CatalogPiece
from marble_catalog.domain.collection import CollectionUpdateResult, HoldingRecord
from marble_catalog.domain.recognition import DetectedPiece
from marble_catalog.domain.scans import PhotoResult, ScanSession, SessionStats


class StartSessionRequest(BaseModel):
    """Payload for starting a scan session."""

    session_name: str = Field(min_length=1, max_length=200)


class AddToCollectionRequest(BaseModel):
    """Payload for reconciling detections into the collection.

    When ``pieces`` is omitted every accepted detection in the session is used.
    """

    pieces: list[DetectedPiece] | None = None
    force_add: bool = False


class PhotoResultResponse(BaseModel):
    """Photo analysis result payload."""

    id: UUID
    session_id: UUID
    photo_url: str
    status: str
    detected_pieces: list[DetectedPiece]
    total_pieces_detected: int
    processing_time_ms: int
    confidence_threshold: float
    error_message: str | None
    created_at: datetime

    @classmethod
    def from_domain(cls, result: PhotoResult) -> "PhotoResultResponse":
        return cls(
            id=result.id,
            session_id=result.session_id,
            photo_url=result.photo_url,
            status=result.status.value,
            detected_pieces=result.detected_pieces,
            total_pieces_detected=result.total_pieces_detected,
            processing_time_ms=result.processing_time_ms,
            confidence_threshold=result.confidence_threshold,
            error_message=result.error_message,
            created_at=result.created_at,
        )


class ScanSessionResponse(BaseModel):
    """Scan session payload."""

    id: UUID
    user_id: UUID
    session_name: str
    status: str
    auto_add_threshold: float
    total_pieces_detected: int
    photos: list[PhotoResultResponse]
    created_at: datetime
    completed_at: datetime | None

    @classmethod
    def from_domain(cls, session: ScanSession) -> "ScanSessionResponse":
        return cls(
            id=session.id,
            user_id=session.user_id,
            session_name=session.session_name,
            status=session.status.value,
            auto_add_threshold=session.auto_add_threshold,
            total_pieces_detected=session.total_pieces_detected,
            photos=[PhotoResultResponse.from_domain(photo) for photo in session.photos],
            created_at=session.created_at,
            completed_at=session.completed_at,
        )


class SessionStatsResponse(BaseModel):
    """Aggregated statistics for a session."""

    total_photos: int
    total_pieces_detected: int
    high_confidence_pieces: int
    average_confidence: float
    brand_distribution: dict[str, int]
    processing_time_ms: int

    @classmethod
    def from_domain(cls, stats: SessionStats) -> "SessionStatsResponse":
        return cls(
            total_photos=stats.total_photos,
            total_pieces_detected=stats.total_pieces_detected,
            high_confidence_pieces=stats.high_confidence_pieces,
            average_confidence=stats.average_confidence,
            brand_distribution=stats.brand_distribution,
            processing_time_ms=stats.processing_time_ms,
        )


class CollectionUpdateResponse(BaseModel):
    """Result of adding detections to the collection."""

    pieces_added: int
    pieces_updated: int
    new_pieces_discovered: int
    confidence_score: float
    manual_review_required: list[DetectedPiece]

    @classmethod
    def from_domain(cls, result: CollectionUpdateResult) -> "CollectionUpdateResponse":
        return cls(
            pieces_added=result.pieces_added,
            pieces_updated=result.pieces_updated,
            new_pieces_discovered=result.new_pieces_discovered,
            confidence_score=result.confidence_score,
            manual_review_required=result.manual_review_required,
        )


class HoldingResponse(BaseModel):
    """A holding in the caller's collection."""

    id: UUID
    piece_type_id: str
    quantity: int
    condition: str
    acquisition_date: date | None
    notes: str | None
    is_wishlist: bool
    updated_at: datetime | None

    @classmethod
    def from_domain(cls, holding: HoldingRecord) -> "HoldingResponse":
        return cls(
            id=holding.id,
            piece_type_id=holding.piece_type_id,
            quantity=holding.quantity,
            condition=holding.condition,
            acquisition_date=holding.acquisition_date,
            notes=holding.notes,
            is_wishlist=holding.is_wishlist,
            updated_at=holding.updated_at,
        )


class BrandResponse(BaseModel):
    """Brand payload."""

    id: str
    name: str
    slug: str
    description: str | None = None
    website_url: str | None = None
    country: str | None = None

    @classmethod
    def from_domain(cls, brand: Brand) -> "BrandResponse":
        return cls(
            id=brand.id,
            name=brand.name,
            slug=brand.slug,
            description=brand.description,
            website_url=brand.website_url,
            country=brand.country,
        )


class CatalogPieceResponse(BaseModel):
    """Catalog piece payload."""

    id: str
    brand_id: str
    name: str
    slug: str
    category: str
    description: str | None
    created_at: datetime | None
    brand: BrandResponse | None

    @classmethod
    def from_domain(cls, piece: CatalogPiece) -> "CatalogPieceResponse":
        return cls(
            id=piece.id,
            brand_id=piece.brand_id,
            name=piece.name,
            slug=piece.slug,
            category=piece.category,
            description=piece.description,
            created_at=piece.created_at,
            brand=BrandResponse.from_domain(piece.brand) if piece.brand else None,
        )


class CatalogSearchResponse(BaseModel):
    """Catalog search results with facets."""

    pieces: list[CatalogPieceResponse]
    categories: list[str]
    total_count: int

"""Domain models for user collections."""

from dataclasses import dataclass, field
from datetime import date, datetime
from uuid import UUID

from marble_catalog.domain.recognition import DetectedPiece


@dataclass(frozen=True)
class HoldingRecord:
    """A user's recorded possession of a catalog piece."""

    id: UUID
    user_id: UUID
    piece_type_id: str
    quantity: int
    condition: str
    acquisition_date: date | None
    notes: str | None
    is_wishlist: bool
    updated_at: datetime | None


@dataclass(frozen=True)
class CollectionUpdateResult:
    """Outcome of reconciling detections against a collection."""

    pieces_added: int = 0
    pieces_updated: int = 0
    new_pieces_discovered: int = 0
    confidence_score: float = 0.0
    manual_review_required: list[DetectedPiece] = field(default_factory=list)

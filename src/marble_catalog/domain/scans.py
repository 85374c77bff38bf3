"""Domain models for AI scanning sessions."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from uuid import UUID

from marble_catalog.domain.recognition import DetectedPiece


class ScanStatus(str, Enum):
    """Lifecycle of a scanning session."""

    ACTIVE = "active"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class PhotoStatus(str, Enum):
    """Lifecycle of a single photo analysis."""

    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"


@dataclass(frozen=True)
class PhotoResult:
    """Outcome of analyzing one uploaded photo."""

    id: UUID
    session_id: UUID
    photo_url: str
    status: PhotoStatus
    detected_pieces: list[DetectedPiece]
    total_pieces_detected: int
    processing_time_ms: int
    confidence_threshold: float
    created_at: datetime
    error_message: str | None = None


@dataclass(frozen=True)
class ScanSession:
    """A named scanning session and the photos analyzed in it."""

    id: UUID
    user_id: UUID
    session_name: str
    auto_add_threshold: float
    status: ScanStatus
    created_at: datetime
    photos: list[PhotoResult] = field(default_factory=list)
    total_pieces_detected: int = 0
    completed_at: datetime | None = None

    @property
    def is_terminal(self) -> bool:
        return self.status is not ScanStatus.ACTIVE


@dataclass(frozen=True)
class SessionStats:
    """Aggregates over every photo in a session."""

    total_photos: int
    total_pieces_detected: int
    high_confidence_pieces: int
    average_confidence: float
    brand_distribution: dict[str, int]
    processing_time_ms: int

"""Row conversion helpers shared by the Supabase adapters."""

from datetime import UTC, date, datetime
from typing import Any
from uuid import UUID

from marble_catalog.domain.errors import PersistenceFailed
from marble_catalog.domain.recognition import DetectedPiece
from marble_catalog.domain.scans import PhotoResult, PhotoStatus


def parse_datetime(raw: object) -> datetime | None:
    """Parse an ISO timestamp column, tolerating nulls."""
    if isinstance(raw, str) and raw:
        return datetime.fromisoformat(raw)
    return None


def parse_date(raw: object) -> date | None:
    """Parse an ISO date column, tolerating nulls."""
    if isinstance(raw, str) and raw:
        return date.fromisoformat(raw[:10])
    return None


def photo_to_row(result: PhotoResult) -> dict[str, object]:
    """Serialize a photo result for a JSON column or its own row."""
    return {
        "id": str(result.id),
        "session_id": str(result.session_id),
        "photo_url": result.photo_url,
        "status": result.status.value,
        "detected_pieces": [
            piece.model_dump(mode="json") for piece in result.detected_pieces
        ],
        "total_pieces_detected": result.total_pieces_detected,
        "processing_time_ms": result.processing_time_ms,
        "confidence_threshold": result.confidence_threshold,
        "error_message": result.error_message,
        "created_at": result.created_at.isoformat(),
    }


def parse_photo(row: dict[str, object]) -> PhotoResult:
    """Parse a stored photo result."""
    return PhotoResult(
        id=UUID(str(row["id"])),
        session_id=UUID(str(row["session_id"])),
        photo_url=str(row.get("photo_url") or ""),
        status=PhotoStatus(row.get("status", PhotoStatus.COMPLETED.value)),
        detected_pieces=[
            DetectedPiece.model_validate(piece)
            for piece in row.get("detected_pieces") or []
        ],
        total_pieces_detected=int(row.get("total_pieces_detected", 0)),
        processing_time_ms=int(row.get("processing_time_ms", 0)),
        confidence_threshold=float(row.get("confidence_threshold", 0.0)),
        created_at=parse_datetime(row.get("created_at"))
        or datetime.min.replace(tzinfo=UTC),
        error_message=row.get("error_message"),
    )


def execute_query(request: Any, action: str) -> Any:
    """Run a PostgREST request, surfacing client errors as ``PersistenceFailed``."""
    try:
        return request.execute()
    except Exception as exc:
        raise PersistenceFailed(f"Failed to {action}: {exc}") from exc

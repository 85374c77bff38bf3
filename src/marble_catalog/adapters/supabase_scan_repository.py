"""Supabase-backed scan session repository."""

from dataclasses import dataclass
from datetime import UTC, datetime
from uuid import UUID

from supabase import Client

from marble_catalog.adapters.supabase_rows import (
    execute_query,
    parse_datetime,
    parse_photo,
    photo_to_row,
)
from marble_catalog.domain.errors import PersistenceFailed
from marble_catalog.domain.scans import ScanSession, ScanStatus
from marble_catalog.services.scans import ScanSessionRepository

_COLUMNS = (
    "id, user_id, session_name, status, auto_add_threshold, "
    "total_pieces_detected, photos, created_at, completed_at"
)


@dataclass
class SupabaseScanSessionRepository(ScanSessionRepository):
    """Supabase implementation for AI collection sessions."""

    client: Client

    def create_session(
        self, user_id: UUID, session_name: str, auto_add_threshold: float
    ) -> ScanSession:
        """Create a session row and return it."""
        response = execute_query(
            self.client.table("ai_collection_sessions")
            .insert(
                {
                    "user_id": str(user_id),
                    "session_name": session_name,
                    "status": ScanStatus.ACTIVE.value,
                    "auto_add_threshold": auto_add_threshold,
                    "total_pieces_detected": 0,
                    "photos": [],
                }
            ),
            "create scan session",
        )
        if not response.data:
            raise PersistenceFailed("Failed to create scan session")
        return _parse_session(response.data[0])

    def get_session(self, session_id: UUID) -> ScanSession | None:
        """Return a session by id, if present."""
        response = execute_query(
            self.client.table("ai_collection_sessions")
            .select(_COLUMNS)
            .eq("id", str(session_id))
            .limit(1),
            "load scan session",
        )
        if not response.data:
            return None
        return _parse_session(response.data[0])

    def update_session(self, session: ScanSession) -> None:
        """Write back the mutable parts of a session."""
        response = execute_query(
            self.client.table("ai_collection_sessions")
            .update(
                {
                    "status": session.status.value,
                    "photos": [photo_to_row(photo) for photo in session.photos],
                    "total_pieces_detected": session.total_pieces_detected,
                    "completed_at": session.completed_at.isoformat()
                    if session.completed_at
                    else None,
                    "updated_at": datetime.now(tz=UTC).isoformat(),
                }
            )
            .eq("id", str(session.id)),
            "update scan session",
        )
        if not response.data:
            raise PersistenceFailed(f"Failed to update scan session {session.id}")

    def list_recent_sessions(self, limit: int) -> list[ScanSession]:
        """Return the most recently created sessions."""
        response = execute_query(
            self.client.table("ai_collection_sessions")
            .select(_COLUMNS)
            .order("created_at", desc=True)
            .limit(limit),
            "list scan sessions",
        )
        return [_parse_session(row) for row in response.data or []]


def _parse_session(row: dict[str, object]) -> ScanSession:
    """Parse a session row into a domain model."""
    return ScanSession(
        id=UUID(str(row["id"])),
        user_id=UUID(str(row["user_id"])),
        session_name=str(row.get("session_name", "")),
        auto_add_threshold=float(row.get("auto_add_threshold", 0.8)),
        status=ScanStatus(row.get("status", ScanStatus.ACTIVE.value)),
        created_at=parse_datetime(row.get("created_at")) or datetime.now(tz=UTC),
        photos=[parse_photo(photo) for photo in row.get("photos") or []],
        total_pieces_detected=int(row.get("total_pieces_detected", 0)),
        completed_at=parse_datetime(row.get("completed_at")),
    )

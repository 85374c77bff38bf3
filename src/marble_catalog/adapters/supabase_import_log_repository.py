"""Supabase implementation for import history and unknown pieces."""

from dataclasses import dataclass
from uuid import UUID

from supabase import Client

from marble_catalog.adapters.supabase_rows import execute_query
from marble_catalog.domain.recognition import DetectedPiece
from marble_catalog.services.collection import ImportLogRepository


@dataclass
class SupabaseImportLogRepository(ImportLogRepository):
    """Writes ``collection_import_history`` and ``unknown_pieces`` rows."""

    client: Client

    def record_import(  # noqa: PLR0913
        self,
        user_id: UUID,
        session_id: UUID | None,
        import_type: str,
        pieces_added: int,
        pieces_updated: int,
        confidence_score: float,
    ) -> None:
        """Append an import history row."""
        execute_query(
            self.client.table("collection_import_history").insert(
                {
                    "user_id": str(user_id),
                    "session_id": str(session_id) if session_id else None,
                    "import_type": import_type,
                    "pieces_added": pieces_added,
                    "pieces_updated": pieces_updated,
                    "confidence_score": confidence_score,
                }
            ),
            "record import history",
        )

    def record_unknown_piece(
        self, user_id: UUID, session_id: UUID | None, piece: DetectedPiece
    ) -> None:
        """Queue a detection that matched no catalog piece."""
        execute_query(
            self.client.table("unknown_pieces").insert(
                {
                    "user_id": str(user_id),
                    "session_id": str(session_id) if session_id else None,
                    "predicted_name": piece.predicted_name,
                    "predicted_brand": piece.predicted_brand,
                    "predicted_category": piece.predicted_category,
                    "confidence": piece.confidence,
                    "bounding_box": piece.bounding_box.model_dump(),
                    "user_confirmed": False,
                    "votes_count": 0,
                }
            ),
            "queue unknown piece",
        )

    def list_unknown_pieces(self, limit: int) -> list[dict[str, object]]:
        """Return the newest unconfirmed unknown pieces."""
        response = execute_query(
            self.client.table("unknown_pieces")
            .select(
                "id, user_id, session_id, predicted_name, predicted_brand, "
                "predicted_category, confidence, votes_count, created_at"
            )
            .eq("user_confirmed", False)
            .order("created_at", desc=True)
            .limit(limit),
            "list unknown pieces",
        )
        return response.data or []

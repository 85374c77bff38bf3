"""Supabase-backed photo analysis result repository."""

from dataclasses import dataclass

from supabase import Client

from marble_catalog.adapters.supabase_rows import execute_query, photo_to_row
from marble_catalog.domain.errors import PersistenceFailed
from marble_catalog.domain.scans import PhotoResult
from marble_catalog.services.recognition import PhotoResultRepository


@dataclass
class SupabasePhotoResultRepository(PhotoResultRepository):
    """Stores each analysis result for later retrieval and review."""

    client: Client

    def create_result(self, result: PhotoResult) -> None:
        """Insert an analysis result row."""
        response = execute_query(
            self.client.table("photo_analysis_results")
            .insert(photo_to_row(result)),
            "save analysis result",
        )
        if not response.data:
            raise PersistenceFailed(f"Failed to save analysis result {result.id}")

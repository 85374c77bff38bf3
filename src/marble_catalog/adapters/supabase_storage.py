"""Supabase Storage adapter for uploaded photos."""

from dataclasses import dataclass

from supabase import Client

from marble_catalog.domain.errors import UploadFailed
from marble_catalog.services.recognition import PhotoStorage


@dataclass
class SupabasePhotoStorage(PhotoStorage):
    """Uploads photos to a Supabase Storage bucket."""

    client: Client
    bucket: str = "collection-photos"

    def upload(self, path: str, content: bytes, content_type: str) -> str:
        """Upload bytes and return the public URL."""
        bucket = self.client.storage.from_(self.bucket)
        try:
            bucket.upload(
                path,
                content,
                file_options={
                    "content-type": content_type,
                    "cache-control": "3600",
                    "upsert": "false",
                },
            )
        except Exception as exc:
            raise UploadFailed(f"Failed to upload photo: {exc}") from exc
        return bucket.get_public_url(path)

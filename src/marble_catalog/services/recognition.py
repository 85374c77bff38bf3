"""Photo recognition pipeline: upload, match against the catalog, filter."""

import json
import logging
import re
import time
from dataclasses import dataclass
from datetime import UTC, datetime
from pathlib import PurePosixPath
from typing import Protocol
from uuid import NAMESPACE_URL, UUID, uuid4, uuid5

from pydantic import ValidationError

from marble_catalog.domain.catalog import CatalogPiece
from marble_catalog.domain.errors import RecognitionFailed, ValidationFailed
from marble_catalog.domain.recognition import DetectedPiece, RecognitionExtract
from marble_catalog.domain.scans import PhotoResult, PhotoStatus, ScanSession
from marble_catalog.services.catalog import CatalogRepository

CATALOG_EXCERPT_SIZE = 50

_NULLABLE_STRING = {"anyOf": [{"type": "string"}, {"type": "null"}]}

RECOGNITION_SCHEMA: dict[str, object] = {
    "type": "object",
    "properties": {
        "pieces": {
            "type": "array",
            "items": {
                "type": "object",
                "properties": {
                    "id": {"type": "string"},
                    "piece_type_id": _NULLABLE_STRING,
                    "brand_id": _NULLABLE_STRING,
                    "confidence": {"type": "number", "minimum": 0.0, "maximum": 1.0},
                    "bounding_box": {
                        "type": "object",
                        "properties": {
                            "x": {"type": "number"},
                            "y": {"type": "number"},
                            "width": {"type": "number"},
                            "height": {"type": "number"},
                        },
                        "required": ["x", "y", "width", "height"],
                        "additionalProperties": False,
                    },
                    "predicted_name": {"type": "string"},
                    "predicted_brand": {"type": "string"},
                    "predicted_category": {"type": "string"},
                },
                "required": [
                    "id",
                    "piece_type_id",
                    "brand_id",
                    "confidence",
                    "bounding_box",
                    "predicted_name",
                    "predicted_brand",
                    "predicted_category",
                ],
                "additionalProperties": False,
            },
        }
    },
    "required": ["pieces"],
    "additionalProperties": False,
}

logger = logging.getLogger(__name__)


class PhotoStorage(Protocol):
    """Durable object storage for uploaded photos."""

    def upload(self, path: str, content: bytes, content_type: str) -> str:
        """Store bytes under a key and return a public URL."""


class PhotoResultRepository(Protocol):
    """Persistence interface for photo analysis results."""

    def create_result(self, result: PhotoResult) -> None:
        """Persist an analysis result row."""


class RecognitionClient(Protocol):
    """Interface for the external recognition model."""

    async def detect(  # noqa: PLR0913
        self,
        *,
        model: str,
        max_output_tokens: int,
        image_url: str,
        schema: dict[str, object],
        prompt: str,
    ) -> object:
        """Return raw detections, either a list or an object with ``pieces``."""


@dataclass
class MockRecognitionClient(RecognitionClient):
    """Canned detections used when no model credentials are configured."""

    async def detect(  # noqa: PLR0913
        self,
        *,
        model: str,
        max_output_tokens: int,
        image_url: str,
        schema: dict[str, object],
        prompt: str,
    ) -> object:
        """Return the same two GraviTrax detections for a given image URL."""
        return {
            "pieces": [
                {
                    "id": str(uuid5(NAMESPACE_URL, f"{image_url}#0")),
                    "piece_type_id": None,
                    "brand_id": None,
                    "confidence": 0.92,
                    "bounding_box": {"x": 10, "y": 15, "width": 25, "height": 30},
                    "predicted_name": "Curved Track",
                    "predicted_brand": "GraviTrax",
                    "predicted_category": "track",
                },
                {
                    "id": str(uuid5(NAMESPACE_URL, f"{image_url}#1")),
                    "piece_type_id": None,
                    "brand_id": None,
                    "confidence": 0.87,
                    "bounding_box": {"x": 45, "y": 20, "width": 20, "height": 25},
                    "predicted_name": "Tower Support",
                    "predicted_brand": "GraviTrax",
                    "predicted_category": "support",
                },
            ]
        }


@dataclass
class RecognitionService:
    """Runs one photo through storage, the catalog and the recognition model."""

    storage: PhotoStorage
    catalog_repository: CatalogRepository
    result_repository: PhotoResultRepository
    client: RecognitionClient
    model: str
    max_output_tokens: int = 2000
    max_upload_bytes: int = 5 * 1024 * 1024

    async def analyze_photo(
        self,
        session: ScanSession,
        filename: str,
        content: bytes,
        confidence_threshold: float | None = None,
    ) -> PhotoResult:
        """Analyze a photo and return its result.

        Invalid input raises ``ValidationFailed`` before anything is uploaded.
        Past that point every failure is folded into a ``failed`` result so the
        caller always receives a ``PhotoResult``.
        """
        threshold = (
            session.auto_add_threshold
            if confidence_threshold is None
            else confidence_threshold
        )
        if not 0.0 <= threshold <= 1.0:
            raise ValidationFailed("Confidence threshold must be between 0 and 1")
        content_type = self._validate_image(content)

        started = time.perf_counter()
        try:
            photo_url = self.storage.upload(
                _storage_path(session.id, filename), content, content_type
            )
            catalog = self.catalog_repository.list_active_pieces()
            detections = await self._detect(photo_url, catalog)
            accepted = [piece for piece in detections if piece.confidence >= threshold]
            result = PhotoResult(
                id=uuid4(),
                session_id=session.id,
                photo_url=photo_url,
                status=PhotoStatus.COMPLETED,
                detected_pieces=accepted,
                total_pieces_detected=len(detections),
                processing_time_ms=_elapsed_ms(started),
                confidence_threshold=threshold,
                created_at=datetime.now(tz=UTC),
            )
        except Exception as exc:
            logger.exception("Photo analysis failed for session %s", session.id)
            result = PhotoResult(
                id=uuid4(),
                session_id=session.id,
                photo_url="",
                status=PhotoStatus.FAILED,
                detected_pieces=[],
                total_pieces_detected=0,
                processing_time_ms=_elapsed_ms(started),
                confidence_threshold=threshold,
                created_at=datetime.now(tz=UTC),
                error_message=str(exc) or type(exc).__name__,
            )

        self._save(result)
        return result

    async def _detect(
        self, image_url: str, catalog: list[CatalogPiece]
    ) -> list[DetectedPiece]:
        raw = await self.client.detect(
            model=self.model,
            max_output_tokens=self.max_output_tokens,
            image_url=image_url,
            schema=RECOGNITION_SCHEMA,
            prompt=build_prompt(catalog),
        )
        if isinstance(raw, list):
            raw = {"pieces": raw}
        try:
            return RecognitionExtract.model_validate(raw).pieces
        except ValidationError as exc:
            raise RecognitionFailed("Recognition response did not match schema") from exc

    def _save(self, result: PhotoResult) -> None:
        try:
            self.result_repository.create_result(result)
        except Exception:
            logger.exception("Failed to save analysis result %s", result.id)

    def _validate_image(self, content: bytes) -> str:
        if not content:
            raise ValidationFailed("Uploaded file is empty")
        if len(content) > self.max_upload_bytes:
            limit_mb = self.max_upload_bytes // (1024 * 1024)
            raise ValidationFailed(f"File size must be less than {limit_mb}MB")
        content_type = detect_image_type(content)
        if content_type is None:
            raise ValidationFailed("Only JPEG, PNG, and WebP images are allowed")
        return content_type


def build_prompt(catalog: list[CatalogPiece]) -> str:
    """Build the recognition prompt with a catalog excerpt for matching."""
    reference = [
        {
            "id": piece.id,
            "name": piece.name,
            "brand": piece.brand.name if piece.brand else None,
            "brand_id": piece.brand_id,
            "category": piece.category,
            "description": piece.description,
        }
        for piece in catalog[:CATALOG_EXCERPT_SIZE]
    ]
    return (
        "You are an expert at identifying marble run pieces. "
        "Identify every marble run piece visible in the image.\n"
        "For each piece give its name and brand (matched to the catalog when "
        "possible, using the catalog id as piece_type_id and brand_id), the "
        "category (track, support, connector, special), a confidence score "
        "from 0 to 1 and a bounding box as percentages of the image.\n"
        "Use null ids for pieces that are not in the catalog. "
        "Focus on accuracy over completeness.\n"
        f"Catalog reference:\n{json.dumps(reference, indent=2)}"
    )


def detect_image_type(content: bytes) -> str | None:
    """Infer a supported image MIME type from file signatures."""
    if content.startswith(b"\xff\xd8\xff"):
        return "image/jpeg"
    if content.startswith(b"\x89PNG\r\n\x1a\n"):
        return "image/png"
    if content[:4] == b"RIFF" and content[8:12] == b"WEBP":
        return "image/webp"
    return None


def _storage_path(session_id: UUID, filename: str) -> str:
    """Build a session-scoped storage key."""
    name = PurePosixPath(filename.replace("\\", "/")).name or "photo"
    safe_name = re.sub(r"[^A-Za-z0-9._-]", "_", name)
    return f"{session_id}/{int(time.time() * 1000)}-{safe_name}"


def _elapsed_ms(started: float) -> int:
    return int((time.perf_counter() - started) * 1000)

"""Reconcile recognized pieces into a user's collection."""

import logging
from dataclasses import dataclass
from datetime import UTC, date, datetime
from typing import Protocol
from uuid import UUID

from marble_catalog.domain.collection import CollectionUpdateResult, HoldingRecord
from marble_catalog.domain.errors import AuthRequired, ValidationFailed
from marble_catalog.domain.recognition import DetectedPiece

AI_SCAN_IMPORT = "ai_scan"
DEFAULT_CONDITION = "good"

logger = logging.getLogger(__name__)


class HoldingRepository(Protocol):
    """Persistence interface for user collection holdings."""

    def find_holding(self, user_id: UUID, piece_type_id: str) -> HoldingRecord | None:
        """Return the owner's non-wishlist holding for a piece type."""

    def increment_quantity(
        self, holding: HoldingRecord, updated_at: datetime
    ) -> HoldingRecord:
        """Add one to a holding, failing if its quantity changed since read."""

    def create_holding(  # noqa: PLR0913
        self,
        user_id: UUID,
        piece_type_id: str,
        quantity: int,
        condition: str,
        acquisition_date: date,
        notes: str | None,
    ) -> HoldingRecord:
        """Create a holding row and return it."""

    def list_holdings(self, user_id: UUID) -> list[HoldingRecord]:
        """Return the owner's holdings."""


class ImportLogRepository(Protocol):
    """Persistence interface for import history and unknown pieces."""

    def record_import(  # noqa: PLR0913
        self,
        user_id: UUID,
        session_id: UUID | None,
        import_type: str,
        pieces_added: int,
        pieces_updated: int,
        confidence_score: float,
    ) -> None:
        """Append a collection import history row."""

    def record_unknown_piece(
        self, user_id: UUID, session_id: UUID | None, piece: DetectedPiece
    ) -> None:
        """Queue a detection with no catalog match for review."""

    def list_unknown_pieces(self, limit: int) -> list[dict[str, object]]:
        """Return recently queued unknown pieces."""


@dataclass
class CollectionService:
    """Applies accepted detections to holdings and routes the rest to review."""

    holding_repository: HoldingRepository
    import_log_repository: ImportLogRepository

    def add_to_collection(  # noqa: PLR0913
        self,
        user_id: UUID | None,
        pieces: list[DetectedPiece],
        confidence_threshold: float,
        force_add: bool = False,
        session_id: UUID | None = None,
    ) -> CollectionUpdateResult:
        """Add or increment holdings for accepted pieces.

        A piece is accepted when ``force_add`` is set or its confidence meets
        the threshold; the rest go to manual review untouched. Accepted pieces
        without a catalog id are counted as new discoveries and still go to
        manual review. Store errors skip the piece and the loop carries on.
        """
        if user_id is None:
            raise AuthRequired()
        if not 0.0 <= confidence_threshold <= 1.0:
            raise ValidationFailed("Confidence threshold must be between 0 and 1")
        if not pieces:
            return CollectionUpdateResult()

        added = 0
        updated = 0
        discovered = 0
        manual_review: list[DetectedPiece] = []

        for piece in pieces:
            if not (force_add or piece.confidence >= confidence_threshold):
                manual_review.append(piece)
                continue

            if not piece.piece_type_id:
                discovered += 1
                manual_review.append(piece)
                self._queue_unknown(user_id, session_id, piece)
                continue

            try:
                existing = self.holding_repository.find_holding(
                    user_id, piece.piece_type_id
                )
                if existing is not None:
                    self.holding_repository.increment_quantity(
                        existing, updated_at=datetime.now(tz=UTC)
                    )
                    updated += 1
                else:
                    self.holding_repository.create_holding(
                        user_id=user_id,
                        piece_type_id=piece.piece_type_id,
                        quantity=1,
                        condition=DEFAULT_CONDITION,
                        acquisition_date=datetime.now(tz=UTC).date(),
                        notes=_detection_note(piece),
                    )
                    added += 1
            except Exception:
                logger.exception(
                    "Failed to apply detection %s for piece type %s",
                    piece.id,
                    piece.piece_type_id,
                )

        result = CollectionUpdateResult(
            pieces_added=added,
            pieces_updated=updated,
            new_pieces_discovered=discovered,
            confidence_score=sum(piece.confidence for piece in pieces) / len(pieces),
            manual_review_required=manual_review,
        )
        self._log_import(user_id, session_id, result)
        return result

    def list_holdings(self, user_id: UUID | None) -> list[HoldingRecord]:
        """Return the caller's holdings."""
        if user_id is None:
            raise AuthRequired()
        return self.holding_repository.list_holdings(user_id)

    def list_unknown_pieces(self, limit: int = 50) -> list[dict[str, object]]:
        """Return unknown pieces awaiting review."""
        return self.import_log_repository.list_unknown_pieces(limit)

    def _queue_unknown(
        self, user_id: UUID, session_id: UUID | None, piece: DetectedPiece
    ) -> None:
        try:
            self.import_log_repository.record_unknown_piece(user_id, session_id, piece)
        except Exception:
            logger.exception("Failed to queue unknown piece %s", piece.id)

    def _log_import(
        self, user_id: UUID, session_id: UUID | None, result: CollectionUpdateResult
    ) -> None:
        try:
            self.import_log_repository.record_import(
                user_id=user_id,
                session_id=session_id,
                import_type=AI_SCAN_IMPORT,
                pieces_added=result.pieces_added,
                pieces_updated=result.pieces_updated,
                confidence_score=result.confidence_score,
            )
        except Exception:
            logger.exception("Failed to record import history for user %s", user_id)


def _detection_note(piece: DetectedPiece) -> str:
    return f"Added via AI detection ({round(piece.confidence * 100)}% confidence)"

"""Scanning session lifecycle."""

import logging
from collections import Counter
from dataclasses import dataclass, replace
from datetime import UTC, datetime
from typing import Protocol
from uuid import UUID

from marble_catalog.domain.errors import (
    AuthRequired,
    SessionNotActive,
    SessionNotFound,
    ValidationFailed,
)
from marble_catalog.domain.recognition import DetectedPiece
from marble_catalog.domain.scans import (
    PhotoResult,
    ScanSession,
    ScanStatus,
    SessionStats,
)

DEFAULT_AUTO_ADD_THRESHOLD = 0.8
HIGH_CONFIDENCE = 0.8

logger = logging.getLogger(__name__)


class ScanSessionRepository(Protocol):
    """Persistence interface for scanning sessions."""

    def create_session(
        self, user_id: UUID, session_name: str, auto_add_threshold: float
    ) -> ScanSession:
        """Create a new active session and return it."""

    def get_session(self, session_id: UUID) -> ScanSession | None:
        """Return a session by id, if present."""

    def update_session(self, session: ScanSession) -> None:
        """Write back photos, totals, status and completion time."""

    def list_recent_sessions(self, limit: int) -> list[ScanSession]:
        """Return the most recently created sessions."""


@dataclass
class ScanSessionService:
    """Creates, advances and summarizes scanning sessions."""

    repository: ScanSessionRepository
    default_threshold: float = DEFAULT_AUTO_ADD_THRESHOLD

    def start_session(self, user_id: UUID | None, session_name: str) -> ScanSession:
        """Create an active session for the authenticated owner."""
        if user_id is None:
            raise AuthRequired()
        name = session_name.strip()
        if not name:
            raise ValidationFailed("Session name must not be empty")
        session = self.repository.create_session(
            user_id=user_id,
            session_name=name,
            auto_add_threshold=self.default_threshold,
        )
        logger.info("Started scan session %s for user %s", session.id, user_id)
        return session

    def get_session(self, session_id: UUID, user_id: UUID | None) -> ScanSession:
        """Return a session owned by the caller."""
        if user_id is None:
            raise AuthRequired()
        session = self.repository.get_session(session_id)
        if session is None or session.user_id != user_id:
            raise SessionNotFound(f"Scan session {session_id} not found")
        return session

    def record_photo(self, session: ScanSession, result: PhotoResult) -> ScanSession:
        """Append a photo result and bump the running detection total."""
        if session.is_terminal:
            raise SessionNotActive(f"Scan session {session.id} is {session.status.value}")
        updated = replace(
            session,
            photos=[*session.photos, result],
            total_pieces_detected=session.total_pieces_detected
            + result.total_pieces_detected,
        )
        try:
            self.repository.update_session(updated)
        except Exception:
            logger.exception("Failed to store photo result on session %s", session.id)
        return updated

    def complete_session(self, session: ScanSession) -> ScanSession:
        """Mark the session completed; terminal sessions are left as they are."""
        return self._finish(session, ScanStatus.COMPLETED)

    def cancel_session(self, session: ScanSession) -> ScanSession:
        """Mark the session cancelled; terminal sessions are left as they are."""
        return self._finish(session, ScanStatus.CANCELLED)

    def list_recent_sessions(self, limit: int = 20) -> list[ScanSession]:
        """Return recent sessions across all users."""
        return self.repository.list_recent_sessions(limit)

    def _finish(self, session: ScanSession, status: ScanStatus) -> ScanSession:
        if session.is_terminal:
            return session
        finished = replace(session, status=status, completed_at=datetime.now(tz=UTC))
        self.repository.update_session(finished)
        logger.info("Scan session %s is now %s", session.id, status.value)
        return finished


def all_detected_pieces(session: ScanSession) -> list[DetectedPiece]:
    """Return accepted detections across every photo in the session."""
    return [piece for photo in session.photos for piece in photo.detected_pieces]


def session_stats(session: ScanSession) -> SessionStats:
    """Summarize detections, confidence and timing for a session."""
    pieces = all_detected_pieces(session)
    average = (
        sum(piece.confidence for piece in pieces) / len(pieces) if pieces else 0.0
    )
    return SessionStats(
        total_photos=len(session.photos),
        total_pieces_detected=len(pieces),
        high_confidence_pieces=sum(
            1 for piece in pieces if piece.confidence >= HIGH_CONFIDENCE
        ),
        average_confidence=average,
        brand_distribution=dict(Counter(piece.predicted_brand for piece in pieces)),
        processing_time_ms=sum(photo.processing_time_ms for photo in session.photos),
    )

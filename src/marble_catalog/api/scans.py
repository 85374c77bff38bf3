"""Scan session endpoints: start, upload photos, reconcile, finish."""

from uuid import UUID

from fastapi import APIRouter, Depends, File, Form, UploadFile, status

from marble_catalog.api.deps import current_owner, get_container
from marble_catalog.api.models import (
    AddToCollectionRequest,
    CollectionUpdateResponse,
    PhotoResultResponse,
    ScanSessionResponse,
    SessionStatsResponse,
    StartSessionRequest,
)
from marble_catalog.containers import AppContainer
from marble_catalog.domain.errors import SessionNotActive
from marble_catalog.services.scans import all_detected_pieces, session_stats

router = APIRouter(prefix="/scan-sessions", tags=["scan-sessions"])


@router.post("", status_code=status.HTTP_201_CREATED)
async def start_session(
    payload: StartSessionRequest,
    owner: UUID | None = Depends(current_owner),
    container: AppContainer = Depends(get_container),
) -> ScanSessionResponse:
    """Start a new scanning session for the caller."""
    session = container.scan_session_service.start_session(owner, payload.session_name)
    return ScanSessionResponse.from_domain(session)


@router.get("/{session_id}")
async def get_session(
    session_id: UUID,
    owner: UUID | None = Depends(current_owner),
    container: AppContainer = Depends(get_container),
) -> ScanSessionResponse:
    """Return one of the caller's sessions."""
    session = container.scan_session_service.get_session(session_id, owner)
    return ScanSessionResponse.from_domain(session)


@router.post("/{session_id}/photos")
async def analyze_photo(
    session_id: UUID,
    file: UploadFile = File(...),
    confidence_threshold: float | None = Form(default=None),
    owner: UUID | None = Depends(current_owner),
    container: AppContainer = Depends(get_container),
) -> PhotoResultResponse:
    """Upload a photo, run recognition and attach the result to the session."""
    service = container.scan_session_service
    session = service.get_session(session_id, owner)
    if session.is_terminal:
        raise SessionNotActive(f"Scan session {session.id} is {session.status.value}")
    content = await file.read()
    result = await container.recognition_service.analyze_photo(
        session,
        filename=file.filename or "photo",
        content=content,
        confidence_threshold=confidence_threshold,
    )
    service.record_photo(session, result)
    return PhotoResultResponse.from_domain(result)


@router.post("/{session_id}/collection")
async def add_to_collection(
    session_id: UUID,
    payload: AddToCollectionRequest,
    owner: UUID | None = Depends(current_owner),
    container: AppContainer = Depends(get_container),
) -> CollectionUpdateResponse:
    """Add detected pieces to the caller's collection."""
    session = container.scan_session_service.get_session(session_id, owner)
    pieces = (
        payload.pieces if payload.pieces is not None else all_detected_pieces(session)
    )
    result = container.collection_service.add_to_collection(
        owner,
        pieces,
        confidence_threshold=session.auto_add_threshold,
        force_add=payload.force_add,
        session_id=session.id,
    )
    return CollectionUpdateResponse.from_domain(result)


@router.get("/{session_id}/stats")
async def get_session_stats(
    session_id: UUID,
    owner: UUID | None = Depends(current_owner),
    container: AppContainer = Depends(get_container),
) -> SessionStatsResponse:
    """Return detection statistics for a session."""
    session = container.scan_session_service.get_session(session_id, owner)
    return SessionStatsResponse.from_domain(session_stats(session))


@router.post("/{session_id}/complete")
async def complete_session(
    session_id: UUID,
    owner: UUID | None = Depends(current_owner),
    container: AppContainer = Depends(get_container),
) -> ScanSessionResponse:
    """Mark a session completed."""
    service = container.scan_session_service
    session = service.complete_session(service.get_session(session_id, owner))
    return ScanSessionResponse.from_domain(session)


@router.post("/{session_id}/cancel")
async def cancel_session(
    session_id: UUID,
    owner: UUID | None = Depends(current_owner),
    container: AppContainer = Depends(get_container),
) -> ScanSessionResponse:
    """Cancel a session."""
    service = container.scan_session_service
    session = service.cancel_session(service.get_session(session_id, owner))
    return ScanSessionResponse.from_domain(session)

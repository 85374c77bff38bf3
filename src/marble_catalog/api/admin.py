"""Admin API endpoints with simple token auth."""

from fastapi import APIRouter, Depends, Header, HTTPException, Query, status

from marble_catalog.api.deps import get_container
from marble_catalog.api.models import ScanSessionResponse
from marble_catalog.containers import AppContainer

MAX_LISTING_LIMIT = 200

router = APIRouter(prefix="/admin", tags=["admin"])


def _get_admin_token(container: AppContainer = Depends(get_container)) -> str:
    return container.settings.admin_token


async def require_admin(
    x_admin_token: str | None = Header(default=None),
    admin_token: str = Depends(_get_admin_token),
) -> None:
    """Ensure requests include a valid admin token."""
    if not x_admin_token or x_admin_token != admin_token:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED)


@router.get("/health", dependencies=[Depends(require_admin)])
async def admin_health() -> dict[str, str]:
    """Admin health check endpoint."""
    return {"status": "ok"}


@router.get("/sessions", dependencies=[Depends(require_admin)])
async def list_sessions(
    limit: int = Query(default=20, ge=1, le=MAX_LISTING_LIMIT),
    container: AppContainer = Depends(get_container),
) -> dict[str, list[ScanSessionResponse]]:
    """Return recent scan sessions across users."""
    sessions = container.scan_session_service.list_recent_sessions(limit)
    return {"sessions": [ScanSessionResponse.from_domain(s) for s in sessions]}


@router.get("/unknown-pieces", dependencies=[Depends(require_admin)])
async def list_unknown_pieces(
    limit: int = Query(default=50, ge=1, le=MAX_LISTING_LIMIT),
    container: AppContainer = Depends(get_container),
) -> dict[str, object]:
    """Return detections queued for catalog review."""
    return {"unknown_pieces": container.collection_service.list_unknown_pieces(limit)}

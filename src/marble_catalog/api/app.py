"""FastAPI application factory."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import UTC, datetime

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from marble_catalog.api.admin import router as admin_router
from marble_catalog.api.catalog import router as catalog_router
from marble_catalog.api.middleware import install_middleware
from marble_catalog.api.scans import router as scans_router
from marble_catalog.app_logging import configure_logging
from marble_catalog.containers import AppContainer
from marble_catalog.domain.errors import MarbleCatalogError

ERROR_STATUS = {
    "AUTH_REQUIRED": 401,
    "VALIDATION_FAILED": 400,
    "SESSION_NOT_FOUND": 404,
    "SESSION_NOT_ACTIVE": 409,
    "UPLOAD_FAILED": 502,
    "RECOGNITION_FAILED": 502,
    "PERSISTENCE_FAILED": 500,
}


def error_body(message: str, code: str) -> dict[str, object]:
    """Build the JSON error envelope."""
    return {
        "success": False,
        "error": {
            "message": message,
            "code": code,
            "timestamp": datetime.now(tz=UTC).isoformat(),
        },
    }


def create_app(container: AppContainer) -> FastAPI:
    """Create a FastAPI app configured with dependencies."""
    configure_logging(container.settings.log_level)
    logger = logging.getLogger(__name__)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        yield
        await app.state.container.close_resources()

    app = FastAPI(lifespan=lifespan)
    app.state.container = container

    install_middleware(app, container.settings, container.rate_limiter)
    app.include_router(scans_router)
    app.include_router(catalog_router)
    app.include_router(admin_router)

    @app.exception_handler(MarbleCatalogError)
    async def handle_domain_error(
        request: Request, exc: MarbleCatalogError
    ) -> JSONResponse:
        status_code = ERROR_STATUS.get(exc.code, 500)
        if status_code >= 500:
            logger.error("%s %s failed: %s", request.method, request.url.path, exc)
        return JSONResponse(
            status_code=status_code,
            content=error_body(str(exc) or exc.code, exc.code),
        )

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    return app

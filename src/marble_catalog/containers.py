"""Dependency container wiring for the application."""

import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from supabase import create_client

from marble_catalog.adapters.openai_recognition_client import OpenAIRecognitionClient
from marble_catalog.adapters.supabase_auth_client import SupabaseAuthClient
from marble_catalog.adapters.supabase_catalog_repository import (
    SupabaseCatalogRepository,
)
from marble_catalog.adapters.supabase_holding_repository import (
    SupabaseHoldingRepository,
)
from marble_catalog.adapters.supabase_import_log_repository import (
    SupabaseImportLogRepository,
)
from marble_catalog.adapters.supabase_photo_result_repository import (
    SupabasePhotoResultRepository,
)
from marble_catalog.adapters.supabase_scan_repository import (
    SupabaseScanSessionRepository,
)
from marble_catalog.adapters.supabase_storage import SupabasePhotoStorage
from marble_catalog.config import Settings
from marble_catalog.services.auth import AuthService
from marble_catalog.services.catalog import CatalogService
from marble_catalog.services.collection import CollectionService
from marble_catalog.services.rate_limit import InMemoryRateLimiter, RateLimiter
from marble_catalog.services.recognition import (
    MockRecognitionClient,
    RecognitionClient,
    RecognitionService,
)
from marble_catalog.services.scans import ScanSessionService

logger = logging.getLogger(__name__)


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    auth_service: AuthService
    scan_session_service: ScanSessionService
    recognition_service: RecognitionService
    collection_service: CollectionService
    catalog_service: CatalogService
    rate_limiter: RateLimiter
    close_resources: Callable[[], Awaitable[None]]


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    supabase_client = create_client(
        resolved_settings.supabase_url, resolved_settings.supabase_service_key
    )
    catalog_repository = SupabaseCatalogRepository(supabase_client)

    openai_client: OpenAIRecognitionClient | None = None
    recognition_client: RecognitionClient
    if resolved_settings.openai_api_key:
        openai_client = OpenAIRecognitionClient.create(resolved_settings.openai_api_key)
        recognition_client = openai_client
    else:
        logger.warning("OPENAI_API_KEY is not set; using mock piece recognition")
        recognition_client = MockRecognitionClient()

    recognition_service = RecognitionService(
        storage=SupabasePhotoStorage(
            supabase_client, bucket=resolved_settings.storage_bucket
        ),
        catalog_repository=catalog_repository,
        result_repository=SupabasePhotoResultRepository(supabase_client),
        client=recognition_client,
        model=resolved_settings.openai_model,
        max_output_tokens=resolved_settings.openai_max_output_tokens,
        max_upload_bytes=resolved_settings.max_upload_bytes,
    )
    scan_session_service = ScanSessionService(
        repository=SupabaseScanSessionRepository(supabase_client),
        default_threshold=resolved_settings.auto_add_threshold,
    )
    collection_service = CollectionService(
        holding_repository=SupabaseHoldingRepository(supabase_client),
        import_log_repository=SupabaseImportLogRepository(supabase_client),
    )

    async def close_resources() -> None:
        if openai_client is not None:
            await openai_client.close()

    return AppContainer(
        settings=resolved_settings,
        auth_service=AuthService(SupabaseAuthClient(supabase_client)),
        scan_session_service=scan_session_service,
        recognition_service=recognition_service,
        collection_service=collection_service,
        catalog_service=CatalogService(catalog_repository),
        rate_limiter=InMemoryRateLimiter(
            window_seconds=resolved_settings.rate_limit_window_seconds,
            max_keys=resolved_settings.rate_limit_max_keys,
        ),
        close_resources=close_resources,
    )

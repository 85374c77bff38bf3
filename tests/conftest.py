"""Shared test fixtures."""

from dataclasses import dataclass, field, replace
from datetime import UTC, date, datetime
from uuid import UUID, uuid4

import pytest

from marble_catalog.config import Settings
from marble_catalog.containers import AppContainer
from marble_catalog.domain.catalog import Brand, CatalogPiece, CatalogQuery
from marble_catalog.domain.collection import HoldingRecord
from marble_catalog.domain.errors import PersistenceFailed, UploadFailed
from marble_catalog.domain.recognition import BoundingBox, DetectedPiece
from marble_catalog.domain.scans import PhotoResult, ScanSession, ScanStatus
from marble_catalog.services.auth import AuthClient, AuthService
from marble_catalog.services.catalog import CatalogRepository, CatalogService
from marble_catalog.services.collection import (
    CollectionService,
    HoldingRepository,
    ImportLogRepository,
)
from marble_catalog.services.rate_limit import InMemoryRateLimiter
from marble_catalog.services.recognition import (
    PhotoResultRepository,
    PhotoStorage,
    RecognitionClient,
    RecognitionService,
)
from marble_catalog.services.scans import ScanSessionRepository, ScanSessionService

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 32
JPEG_BYTES = b"\xff\xd8\xff\xe0" + b"\x00" * 32

GRAVITRAX = Brand(id="brand-gravitrax", name="GraviTrax", slug="gravitrax")
HUBELINO = Brand(id="brand-hubelino", name="Hubelino", slug="hubelino")


def make_piece(  # noqa: PLR0913
    confidence: float,
    piece_type_id: str | None = None,
    name: str = "Curved Track",
    brand: str = "GraviTrax",
    category: str = "track",
    brand_id: str | None = None,
) -> DetectedPiece:
    """Build a detection for tests."""
    return DetectedPiece(
        id=str(uuid4()),
        piece_type_id=piece_type_id,
        brand_id=brand_id,
        confidence=confidence,
        bounding_box=BoundingBox(x=10, y=10, width=20, height=20),
        predicted_name=name,
        predicted_brand=brand,
        predicted_category=category,
    )


def make_catalog_piece(
    piece_id: str,
    name: str,
    category: str = "track",
    brand: Brand = GRAVITRAX,
    created_at: datetime | None = None,
) -> CatalogPiece:
    """Build a catalog piece for tests."""
    return CatalogPiece(
        id=piece_id,
        brand_id=brand.id,
        name=name,
        slug=name.lower().replace(" ", "-"),
        category=category,
        description=f"{name} by {brand.name}",
        is_active=True,
        created_at=created_at or datetime(2024, 1, 1, tzinfo=UTC),
        brand=brand,
    )


@dataclass
class InMemoryScanSessionRepository(ScanSessionRepository):
    """In-memory scan session repository for tests."""

    sessions: dict[UUID, ScanSession] = field(default_factory=dict)
    updates: list[ScanSession] = field(default_factory=list)
    create_error: Exception | None = None
    update_error: Exception | None = None

    def create_session(
        self, user_id: UUID, session_name: str, auto_add_threshold: float
    ) -> ScanSession:
        if self.create_error:
            raise self.create_error
        session = ScanSession(
            id=uuid4(),
            user_id=user_id,
            session_name=session_name,
            auto_add_threshold=auto_add_threshold,
            status=ScanStatus.ACTIVE,
            created_at=datetime.now(tz=UTC),
        )
        self.sessions[session.id] = session
        return session

    def get_session(self, session_id: UUID) -> ScanSession | None:
        return self.sessions.get(session_id)

    def update_session(self, session: ScanSession) -> None:
        if self.update_error:
            raise self.update_error
        self.sessions[session.id] = session
        self.updates.append(session)

    def list_recent_sessions(self, limit: int) -> list[ScanSession]:
        ordered = sorted(
            self.sessions.values(), key=lambda s: s.created_at, reverse=True
        )
        return ordered[:limit]


@dataclass
class InMemoryPhotoResultRepository(PhotoResultRepository):
    """In-memory photo result repository for tests."""

    results: list[PhotoResult] = field(default_factory=list)
    fail: bool = False

    def create_result(self, result: PhotoResult) -> None:
        if self.fail:
            raise PersistenceFailed("insert rejected")
        self.results.append(result)


@dataclass
class FakePhotoStorage(PhotoStorage):
    """Fake storage that records uploads and can be told to fail."""

    uploads: list[tuple[str, bytes, str]] = field(default_factory=list)
    fail: bool = False

    def upload(self, path: str, content: bytes, content_type: str) -> str:
        if self.fail:
            raise UploadFailed("Failed to upload photo: bucket not found")
        self.uploads.append((path, content, content_type))
        return f"https://example.supabase.co/storage/v1/object/public/{path}"


@dataclass
class FakeRecognitionClient(RecognitionClient):
    """Fake recognition client returning a fixed payload."""

    payload: object = field(
        default_factory=lambda: {
            "pieces": [
                {
                    "id": "det-1",
                    "piece_type_id": "piece-curve",
                    "brand_id": "brand-gravitrax",
                    "confidence": 0.95,
                    "bounding_box": {"x": 5, "y": 5, "width": 30, "height": 30},
                    "predicted_name": "Curve",
                    "predicted_brand": "GraviTrax",
                    "predicted_category": "track",
                },
                {
                    "id": "det-2",
                    "piece_type_id": None,
                    "brand_id": None,
                    "confidence": 0.55,
                    "bounding_box": {"x": 50, "y": 40, "width": 10, "height": 15},
                    "predicted_name": "Odd Funnel",
                    "predicted_brand": "Unknown",
                    "predicted_category": "special",
                },
            ]
        }
    )
    calls: list[dict[str, object]] = field(default_factory=list)

    async def detect(  # noqa: PLR0913
        self,
        *,
        model: str,
        max_output_tokens: int,
        image_url: str,
        schema: dict[str, object],
        prompt: str,
    ) -> object:
        self.calls.append({"model": model, "image_url": image_url, "prompt": prompt})
        return self.payload


@dataclass
class InMemoryCatalogRepository(CatalogRepository):
    """In-memory catalog repository for tests."""

    pieces: list[CatalogPiece] = field(default_factory=list)
    brands: list[Brand] = field(default_factory=lambda: [GRAVITRAX, HUBELINO])
    queries: list[CatalogQuery] = field(default_factory=list)

    def list_active_pieces(self) -> list[CatalogPiece]:
        return [piece for piece in self.pieces if piece.is_active]

    def search_pieces(self, query: CatalogQuery) -> list[CatalogPiece]:
        self.queries.append(query)
        results = self.list_active_pieces()
        if query.search:
            needle = query.search.lower()
            results = [
                piece
                for piece in results
                if needle in piece.name.lower()
                or needle in (piece.description or "").lower()
            ]
        if query.brand_id:
            results = [piece for piece in results if piece.brand_id == query.brand_id]
        if query.category:
            results = [piece for piece in results if piece.category == query.category]
        return sorted(
            results,
            key=lambda piece: getattr(piece, query.sort_field),
            reverse=query.descending,
        )

    def list_brands(self) -> list[Brand]:
        return sorted(self.brands, key=lambda brand: brand.name)


@dataclass
class InMemoryHoldingRepository(HoldingRepository):
    """In-memory holding repository for tests."""

    holdings: dict[UUID, HoldingRecord] = field(default_factory=dict)
    failing_piece_types: set[str] = field(default_factory=set)
    writes: int = 0

    def add(self, user_id: UUID, piece_type_id: str, quantity: int) -> HoldingRecord:
        holding = HoldingRecord(
            id=uuid4(),
            user_id=user_id,
            piece_type_id=piece_type_id,
            quantity=quantity,
            condition="good",
            acquisition_date=date(2024, 1, 1),
            notes=None,
            is_wishlist=False,
            updated_at=None,
        )
        self.holdings[holding.id] = holding
        return holding

    def quantity(self, user_id: UUID, piece_type_id: str) -> int:
        holding = self.find_holding(user_id, piece_type_id)
        return holding.quantity if holding else 0

    def find_holding(self, user_id: UUID, piece_type_id: str) -> HoldingRecord | None:
        if piece_type_id in self.failing_piece_types:
            raise PersistenceFailed("lookup failed")
        for holding in self.holdings.values():
            if (
                holding.user_id == user_id
                and holding.piece_type_id == piece_type_id
                and not holding.is_wishlist
            ):
                return holding
        return None

    def increment_quantity(
        self, holding: HoldingRecord, updated_at: datetime
    ) -> HoldingRecord:
        current = self.holdings[holding.id]
        if current.quantity != holding.quantity:
            raise PersistenceFailed("changed concurrently")
        updated = replace(current, quantity=current.quantity + 1, updated_at=updated_at)
        self.holdings[holding.id] = updated
        self.writes += 1
        return updated

    def create_holding(  # noqa: PLR0913
        self,
        user_id: UUID,
        piece_type_id: str,
        quantity: int,
        condition: str,
        acquisition_date: date,
        notes: str | None,
    ) -> HoldingRecord:
        holding = HoldingRecord(
            id=uuid4(),
            user_id=user_id,
            piece_type_id=piece_type_id,
            quantity=quantity,
            condition=condition,
            acquisition_date=acquisition_date,
            notes=notes,
            is_wishlist=False,
            updated_at=datetime.now(tz=UTC),
        )
        self.holdings[holding.id] = holding
        self.writes += 1
        return holding

    def list_holdings(self, user_id: UUID) -> list[HoldingRecord]:
        return [h for h in self.holdings.values() if h.user_id == user_id]


@dataclass
class InMemoryImportLogRepository(ImportLogRepository):
    """In-memory import log repository for tests."""

    imports: list[dict[str, object]] = field(default_factory=list)
    unknown: list[dict[str, object]] = field(default_factory=list)

    def record_import(  # noqa: PLR0913
        self,
        user_id: UUID,
        session_id: UUID | None,
        import_type: str,
        pieces_added: int,
        pieces_updated: int,
        confidence_score: float,
    ) -> None:
        self.imports.append(
            {
                "user_id": user_id,
                "session_id": session_id,
                "import_type": import_type,
                "pieces_added": pieces_added,
                "pieces_updated": pieces_updated,
                "confidence_score": confidence_score,
            }
        )

    def record_unknown_piece(
        self, user_id: UUID, session_id: UUID | None, piece: DetectedPiece
    ) -> None:
        self.unknown.append(
            {
                "user_id": str(user_id),
                "session_id": str(session_id) if session_id else None,
                "predicted_name": piece.predicted_name,
                "confidence": piece.confidence,
            }
        )

    def list_unknown_pieces(self, limit: int) -> list[dict[str, object]]:
        return self.unknown[:limit]


@dataclass
class FakeAuthClient(AuthClient):
    """Fake auth client mapping tokens to user ids."""

    tokens: dict[str, UUID] = field(default_factory=dict)

    def get_user_id(self, access_token: str) -> UUID | None:
        return self.tokens.get(access_token)


@pytest.fixture
def settings() -> Settings:
    return Settings(
        supabase_url="https://example.supabase.co",
        supabase_service_key=(
            "eyJhbGciOiJIUzI1NiIsInR5cCI6IkpXVCJ9."
            "eyJyb2xlIjoic2VydmljZV9yb2xlIn0."
            "c2lnbmF0dXJl"
        ),
        admin_token="admin-token",
        openai_api_key=None,
        environment="test",
    )


@pytest.fixture
def owner_id() -> UUID:
    return uuid4()


@pytest.fixture
def catalog_repository() -> InMemoryCatalogRepository:
    return InMemoryCatalogRepository(
        pieces=[
            make_catalog_piece("piece-curve", "Curve", "track"),
            make_catalog_piece("piece-tower", "Tower Support", "support", HUBELINO),
            make_catalog_piece("piece-launcher", "Launcher", "special"),
        ]
    )


@pytest.fixture
def container(
    settings: Settings,
    owner_id: UUID,
    catalog_repository: InMemoryCatalogRepository,
) -> AppContainer:
    recognition_service = RecognitionService(
        storage=FakePhotoStorage(),
        catalog_repository=catalog_repository,
        result_repository=InMemoryPhotoResultRepository(),
        client=FakeRecognitionClient(),
        model=settings.openai_model,
        max_upload_bytes=settings.max_upload_bytes,
    )

    async def close_resources() -> None:
        return None

    return AppContainer(
        settings=settings,
        auth_service=AuthService(FakeAuthClient(tokens={"user-token": owner_id})),
        scan_session_service=ScanSessionService(InMemoryScanSessionRepository()),
        recognition_service=recognition_service,
        collection_service=CollectionService(
            holding_repository=InMemoryHoldingRepository(),
            import_log_repository=InMemoryImportLogRepository(),
        ),
        catalog_service=CatalogService(catalog_repository),
        rate_limiter=InMemoryRateLimiter(window_seconds=settings.rate_limit_window_seconds),
        close_resources=close_resources,
    )

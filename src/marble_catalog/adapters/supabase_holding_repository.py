"""Supabase-backed repository for user collection holdings."""

from dataclasses import dataclass
from datetime import UTC, date, datetime
from uuid import UUID

from supabase import Client

from marble_catalog.adapters.supabase_rows import (
    execute_query,
    parse_date,
    parse_datetime,
)
from marble_catalog.domain.collection import HoldingRecord
from marble_catalog.domain.errors import PersistenceFailed
from marble_catalog.services.collection import HoldingRepository


@dataclass
class SupabaseHoldingRepository(HoldingRepository):
    """Reads and writes rows in ``user_collections``."""

    client: Client

    def find_holding(self, user_id: UUID, piece_type_id: str) -> HoldingRecord | None:
        """Return the owner's non-wishlist holding for a piece type."""
        response = execute_query(
            self.client.table("user_collections")
            .select("*")
            .eq("user_id", str(user_id))
            .eq("piece_type_id", piece_type_id)
            .eq("is_wishlist", False)
            .limit(1),
            "look up holding",
        )
        if not response.data:
            return None
        return _parse_holding(response.data[0])

    def increment_quantity(
        self, holding: HoldingRecord, updated_at: datetime
    ) -> HoldingRecord:
        """Add one to a holding if nobody changed its quantity since it was read."""
        response = execute_query(
            self.client.table("user_collections")
            .update(
                {
                    "quantity": holding.quantity + 1,
                    "updated_at": updated_at.isoformat(),
                }
            )
            .eq("id", str(holding.id))
            .eq("quantity", holding.quantity),
            "increment holding",
        )
        if not response.data:
            raise PersistenceFailed(
                f"Holding {holding.id} changed concurrently; increment skipped"
            )
        return _parse_holding(response.data[0])

    def create_holding(  # noqa: PLR0913
        self,
        user_id: UUID,
        piece_type_id: str,
        quantity: int,
        condition: str,
        acquisition_date: date,
        notes: str | None,
    ) -> HoldingRecord:
        """Insert a holding row and return it."""
        now = datetime.now(tz=UTC).isoformat()
        response = execute_query(
            self.client.table("user_collections")
            .insert(
                {
                    "user_id": str(user_id),
                    "piece_type_id": piece_type_id,
                    "quantity": quantity,
                    "condition": condition,
                    "acquisition_date": acquisition_date.isoformat(),
                    "notes": notes,
                    "is_wishlist": False,
                    "created_at": now,
                    "updated_at": now,
                }
            ),
            "create holding",
        )
        if not response.data:
            raise PersistenceFailed("Failed to create collection holding")
        return _parse_holding(response.data[0])

    def list_holdings(self, user_id: UUID) -> list[HoldingRecord]:
        """Return the owner's holdings, most recently updated first."""
        response = execute_query(
            self.client.table("user_collections")
            .select("*")
            .eq("user_id", str(user_id))
            .order("updated_at", desc=True),
            "list holdings",
        )
        return [_parse_holding(row) for row in response.data or []]


def _parse_holding(row: dict[str, object]) -> HoldingRecord:
    """Parse a collection row into a domain model."""
    return HoldingRecord(
        id=UUID(str(row["id"])),
        user_id=UUID(str(row["user_id"])),
        piece_type_id=str(row["piece_type_id"]),
        quantity=int(row.get("quantity", 0)),
        condition=str(row.get("condition", "good")),
        acquisition_date=parse_date(row.get("acquisition_date")),
        notes=row.get("notes"),
        is_wishlist=bool(row.get("is_wishlist", False)),
        updated_at=parse_datetime(row.get("updated_at")),
    )

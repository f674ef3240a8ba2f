"""Supabase repository for weight entries."""

from dataclasses import dataclass
from datetime import UTC, date, datetime
from uuid import UUID

from supabase import Client

from nutrition_trends.domain.series import SeriesEntry
from nutrition_trends.services.weights import WeightLogRepository


@dataclass
class SupabaseWeightLogRepository(WeightLogRepository):
    """Supabase implementation for weight entry persistence.

    Rows live in ``weight_entries`` (``logged_date``, ``weight_kg``) and are
    soft-deleted through ``deleted_at``.
    """

    client: Client

    def load(self, user_id: UUID) -> list[SeriesEntry]:
        """Return all live weight rows for a user."""
        response = (
            self.client.table("weight_entries")
            .select("id, logged_date, weight_kg, updated_at")
            .eq("user_id", str(user_id))
            .is_("deleted_at", "null")
            .execute()
        )
        return [_parse_row(row) for row in response.data or []]

    def upsert(self, user_id: UUID, entry: SeriesEntry) -> None:
        """Insert or replace one row by id."""
        payload = {
            "id": entry.id,
            "user_id": str(user_id),
            "logged_date": entry.day.isoformat(),
            "weight_kg": entry.value,
            "updated_at": entry.updated_at.isoformat(),
            "deleted_at": None,
        }
        result = (
            self.client.table("weight_entries")
            .upsert(payload, on_conflict="id")
            .execute()
        )
        if not result.data:
            raise RuntimeError("Failed to save weight entry")

    def delete(self, user_id: UUID, entry_id: str) -> None:
        """Soft-delete one row by id."""
        result = (
            self.client.table("weight_entries")
            .update({"deleted_at": datetime.now(tz=UTC).isoformat()})
            .eq("user_id", str(user_id))
            .eq("id", entry_id)
            .execute()
        )
        if not result.data:
            raise RuntimeError("Failed to delete weight entry")


def _parse_row(row: dict[str, object]) -> SeriesEntry:
    updated_at_raw = row.get("updated_at")
    updated_at = (
        datetime.fromisoformat(updated_at_raw)
        if isinstance(updated_at_raw, str) and updated_at_raw
        else datetime.min
    )
    if updated_at.tzinfo is None:
        updated_at = updated_at.replace(tzinfo=UTC)
    return SeriesEntry(
        id=str(row["id"]),
        day=date.fromisoformat(str(row["logged_date"])[:10]),
        value=float(row.get("weight_kg") or 0.0),
        updated_at=updated_at,
    )

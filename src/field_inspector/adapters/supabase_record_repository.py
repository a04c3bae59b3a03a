"""Supabase repository for inspection records."""

from dataclasses import dataclass
from datetime import datetime

from supabase import Client

from field_inspector.domain.records import (
    InspectionDraft,
    InspectionRecord,
    RecordFilters,
    RecordPage,
    RecordUpdate,
)
from field_inspector.services.records import RecordRepository


@dataclass
class SupabaseRecordRepository(RecordRepository):
    """Supabase implementation for inspection records."""

    client: Client
    table: str = "inspection_records"

    def create_record(self, draft: InspectionDraft) -> InspectionRecord:
        """Insert a record row and return it."""
        response = (
            self.client.table(self.table)
            .insert(
                {
                    "user_id": str(draft.user_id),
                    "location": draft.location,
                    "notes": draft.notes,
                    "photo_url": draft.photo_url,
                    "transcription": draft.transcription,
                    "coordinates": draft.coordinates,
                    "created_at": draft.created_at.isoformat(),
                }
            )
            .execute()
        )
        if not response.data:
            raise RuntimeError("Failed to create inspection record")
        return _parse_record(response.data[0])

    def list_records(
        self, user_id: str | int, offset: int, limit: int, filters: RecordFilters
    ) -> RecordPage:
        """Return a page of records with the exact total count."""
        query = (
            self.client.table(self.table)
            .select("*", count="exact")
            .eq("user_id", str(user_id))
            .order("created_at", desc=True)
        )
        if filters.location:
            query = query.ilike("location", f"%{filters.location}%")
        if filters.date_from:
            query = query.gte("created_at", filters.date_from.isoformat())
        if filters.date_to:
            query = query.lte("created_at", filters.date_to.isoformat())
        response = query.range(offset, offset + limit - 1).execute()
        records = [_parse_record(row) for row in response.data or []]
        total = response.count if response.count is not None else len(records)
        return RecordPage(records=records, total=total)

    def get_record(
        self, record_id: str | int, user_id: str | int
    ) -> InspectionRecord | None:
        """Return an owned record by id."""
        response = (
            self.client.table(self.table)
            .select("*")
            .eq("id", str(record_id))
            .eq("user_id", str(user_id))
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return _parse_record(response.data[0])

    def update_record(
        self,
        record_id: str | int,
        user_id: str | int,
        changes: RecordUpdate,
        updated_at: datetime,
    ) -> InspectionRecord | None:
        """Update location and notes of an owned record."""
        payload: dict[str, object] = {"updated_at": updated_at.isoformat()}
        if changes.location is not None:
            payload["location"] = changes.location
        if changes.notes is not None:
            payload["notes"] = changes.notes
        response = (
            self.client.table(self.table)
            .update(payload)
            .eq("id", str(record_id))
            .eq("user_id", str(user_id))
            .execute()
        )
        if not response.data:
            return None
        return _parse_record(response.data[0])

    def delete_record(self, record_id: str | int, user_id: str | int) -> bool:
        """Delete an owned record row."""
        response = (
            self.client.table(self.table)
            .delete()
            .eq("id", str(record_id))
            .eq("user_id", str(user_id))
            .execute()
        )
        return bool(response.data)

    def count_records(self, user_id: str | int, since: datetime | None) -> int:
        """Count the user's records."""
        query = (
            self.client.table(self.table)
            .select("id", count="exact", head=True)
            .eq("user_id", str(user_id))
        )
        if since is not None:
            query = query.gte("created_at", since.isoformat())
        return query.execute().count or 0

    def list_locations(self, user_id: str | int) -> list[str]:
        """Return the non-null record locations for the user."""
        response = (
            self.client.table(self.table)
            .select("location")
            .eq("user_id", str(user_id))
            .not_.is_("location", "null")
            .execute()
        )
        return [
            str(row["location"]) for row in response.data or [] if row.get("location")
        ]


def _parse_record(row: dict[str, object]) -> InspectionRecord:
    updated_at = row.get("updated_at")
    return InspectionRecord(
        id=row["id"],
        user_id=row["user_id"],
        location=row.get("location"),
        notes=row.get("notes"),
        photo_url=row.get("photo_url"),
        transcription=row.get("transcription"),
        coordinates=row.get("coordinates"),
        created_at=datetime.fromisoformat(str(row["created_at"])),
        updated_at=datetime.fromisoformat(str(updated_at)) if updated_at else None,
    )

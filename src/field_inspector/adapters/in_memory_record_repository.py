"""In-process record store used when the database is absent or failing."""

import threading
from dataclasses import dataclass, field, replace
from datetime import datetime

from field_inspector.domain.records import (
    InspectionDraft,
    InspectionRecord,
    RecordFilters,
    RecordPage,
    RecordUpdate,
)
from field_inspector.services.records import RecordRepository


@dataclass
class InMemoryRecordRepository(RecordRepository):
    """Record store backed by a process-local map keyed by integer id."""

    _records: dict[int, InspectionRecord] = field(default_factory=dict)
    _next_id: int = 1
    _lock: threading.Lock = field(default_factory=threading.Lock)

    def create_record(self, draft: InspectionDraft) -> InspectionRecord:
        """Store a draft under the next integer id."""
        with self._lock:
            record = InspectionRecord(
                id=self._next_id,
                user_id=draft.user_id,
                location=draft.location,
                notes=draft.notes,
                photo_url=draft.photo_url,
                transcription=draft.transcription,
                coordinates=draft.coordinates,
                created_at=draft.created_at,
                updated_at=None,
            )
            self._records[record.id] = record
            self._next_id += 1
        return record

    def list_records(
        self, user_id: str | int, offset: int, limit: int, filters: RecordFilters
    ) -> RecordPage:
        """Filter, sort and paginate the user's records client-side."""
        matches = [
            record
            for record in self._owned(user_id)
            if _matches(record, filters)
        ]
        matches.sort(key=lambda record: (record.created_at, record.id), reverse=True)
        return RecordPage(records=matches[offset : offset + limit], total=len(matches))

    def get_record(
        self, record_id: str | int, user_id: str | int
    ) -> InspectionRecord | None:
        record = self._records.get(_parse_id(record_id))
        if record is None or str(record.user_id) != str(user_id):
            return None
        return record

    def update_record(
        self,
        record_id: str | int,
        user_id: str | int,
        changes: RecordUpdate,
        updated_at: datetime,
    ) -> InspectionRecord | None:
        with self._lock:
            current = self.get_record(record_id, user_id)
            if current is None:
                return None
            location = changes.location
            notes = changes.notes
            updated = replace(
                current,
                location=location if location is not None else current.location,
                notes=notes if notes is not None else current.notes,
                updated_at=updated_at,
            )
            self._records[updated.id] = updated
        return updated

    def delete_record(self, record_id: str | int, user_id: str | int) -> bool:
        with self._lock:
            current = self.get_record(record_id, user_id)
            if current is None:
                return False
            del self._records[current.id]
        return True

    def count_records(self, user_id: str | int, since: datetime | None) -> int:
        return sum(
            1
            for record in self._owned(user_id)
            if since is None or record.created_at >= since
        )

    def list_locations(self, user_id: str | int) -> list[str]:
        return [
            record.location
            for record in self._owned(user_id)
            if record.location is not None
        ]

    def close(self) -> None:
        with self._lock:
            self._records.clear()

    def _owned(self, user_id: str | int) -> list[InspectionRecord]:
        return [
            record
            for record in list(self._records.values())
            if str(record.user_id) == str(user_id)
        ]


def _parse_id(record_id: str | int) -> int | None:
    try:
        parsed = int(record_id)
    except (TypeError, ValueError):
        return None
    return parsed if str(parsed) == str(record_id) else None


def _matches(record: InspectionRecord, filters: RecordFilters) -> bool:
    if filters.location:
        haystack = (record.location or "").lower()
        if filters.location.lower() not in haystack:
            return False
    if filters.date_from and record.created_at < filters.date_from:
        return False
    if filters.date_to and record.created_at > filters.date_to:
        return False
    return True

"""Inspection record persistence with an in-process fallback."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Protocol

from field_inspector.domain.errors import MalformedInputError, RecordNotFoundError
from field_inspector.domain.records import (
    InspectionDraft,
    InspectionRecord,
    RecordFilters,
    RecordPage,
    RecordUpdate,
    StoredRecord,
)
from field_inspector.services.photos import PhotoUploadService, is_simulated_url

logger = logging.getLogger(__name__)


class RecordRepository(Protocol):
    """Persistence interface for inspection records."""

    def create_record(self, draft: InspectionDraft) -> InspectionRecord:
        """Insert a record and return it with its id."""

    def list_records(
        self, user_id: str | int, offset: int, limit: int, filters: RecordFilters
    ) -> RecordPage:
        """Return a page of the user's records, newest first."""

    def get_record(
        self, record_id: str | int, user_id: str | int
    ) -> InspectionRecord | None:
        """Return a record owned by the user, if present."""

    def update_record(
        self,
        record_id: str | int,
        user_id: str | int,
        changes: RecordUpdate,
        updated_at: datetime,
    ) -> InspectionRecord | None:
        """Apply changes to an owned record and return it."""

    def delete_record(self, record_id: str | int, user_id: str | int) -> bool:
        """Delete an owned record; return whether one was removed."""

    def count_records(self, user_id: str | int, since: datetime | None) -> int:
        """Count the user's records, optionally created at or after a time."""

    def list_locations(self, user_id: str | int) -> list[str]:
        """Return the non-null locations of the user's records."""


@dataclass
class RecordService:
    """Routes record operations to the external store or the fallback.

    A record lives in whichever store accepted it at creation; it is never
    copied between stores afterwards.
    """

    fallback: RecordRepository
    photos: PhotoUploadService
    primary: RecordRepository | None = None

    @property
    def external(self) -> bool:
        return self.primary is not None

    def create(self, draft: InspectionDraft) -> StoredRecord:
        """Persist a draft, falling back to the in-process store on failure."""
        if self.primary is not None:
            try:
                record = self.primary.create_record(draft)
                return StoredRecord(record=record, external=True)
            except Exception:
                logger.exception(
                    "Record insert failed, storing in memory",
                    extra={"user_id": draft.user_id},
                )
        return StoredRecord(record=self.fallback.create_record(draft), external=False)

    def list(
        self,
        user_id: str | int,
        page: int = 1,
        page_size: int = 50,
        filters: RecordFilters | None = None,
    ) -> RecordPage:
        """Return one page of the user's records, newest first."""
        if page < 1 or page_size < 1:
            raise MalformedInputError("page and limit must be positive integers")
        offset = (page - 1) * page_size
        resolved = filters or RecordFilters()
        for repository in self._repositories():
            try:
                return repository.list_records(user_id, offset, page_size, resolved)
            except Exception:
                logger.exception("Record listing failed", extra={"user_id": user_id})
        return RecordPage(records=[], total=0)

    def get(self, record_id: str | int, user_id: str | int) -> InspectionRecord:
        """Return an owned record or raise RecordNotFoundError."""
        _, record = self._locate(record_id, user_id)
        return record

    def update(
        self, record_id: str | int, user_id: str | int, changes: RecordUpdate
    ) -> InspectionRecord:
        """Update location and notes, refreshing updated_at."""
        repository, _ = self._locate(record_id, user_id)
        updated = repository.update_record(
            record_id, user_id, changes, datetime.now(tz=UTC)
        )
        if updated is None:
            raise RecordNotFoundError(record_id)
        return updated

    def delete(self, record_id: str | int, user_id: str | int) -> None:
        """Delete an owned record after a best-effort photo removal."""
        repository, record = self._locate(record_id, user_id)
        if record.photo_url and not is_simulated_url(record.photo_url):
            self.photos.delete(record.photo_url, user_id)
        if not repository.delete_record(record_id, user_id):
            raise RecordNotFoundError(record_id)

    def count(self, user_id: str | int, since: datetime | None = None) -> int:
        for repository in self._repositories():
            try:
                return repository.count_records(user_id, since)
            except Exception:
                logger.exception("Record count failed", extra={"user_id": user_id})
        return 0

    def locations(self, user_id: str | int) -> list[str]:
        for repository in self._repositories():
            try:
                return repository.list_locations(user_id)
            except Exception:
                logger.exception("Location listing failed", extra={"user_id": user_id})
        return []

    def _repositories(self) -> list[RecordRepository]:
        if self.primary is None:
            return [self.fallback]
        return [self.primary, self.fallback]

    def _locate(
        self, record_id: str | int, user_id: str | int
    ) -> tuple[RecordRepository, InspectionRecord]:
        for repository in self._repositories():
            try:
                record = repository.get_record(record_id, user_id)
            except Exception:
                logger.exception("Record lookup failed", extra={"record_id": record_id})
                continue
            if record is not None:
                return repository, record
        raise RecordNotFoundError(record_id)

"""Per-user record statistics."""

from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime

from field_inspector.domain.records import RecordStats
from field_inspector.services.records import RecordService


def _utcnow() -> datetime:
    return datetime.now(tz=UTC)


@dataclass
class StatsService:
    """Service for summarizing a user's inspection records."""

    records: RecordService
    clock: Callable[[], datetime] = field(default=_utcnow)

    def summary(self, user_id: str | int) -> RecordStats:
        """Return total, today's (UTC) and unique-location counts."""
        start_of_day = self.clock().replace(hour=0, minute=0, second=0, microsecond=0)
        return RecordStats(
            total_records=self.records.count(user_id),
            today_records=self.records.count(user_id, since=start_of_day),
            unique_locations=len(set(self.records.locations(user_id))),
        )

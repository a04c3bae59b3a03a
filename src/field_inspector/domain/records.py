"""Domain models for inspection records."""

from dataclasses import dataclass, field
from datetime import datetime

# Coordinates are stored as submitted: any JSON value.
CoordinatesValue = dict[str, object] | list[object] | str | int | float | bool | None


@dataclass(frozen=True)
class InspectionDraft:
    """Record contents assembled before persistence."""

    user_id: str | int
    location: str | None
    notes: str | None
    photo_url: str | None
    transcription: str | None
    coordinates: CoordinatesValue
    created_at: datetime


@dataclass(frozen=True)
class InspectionRecord:
    """Persisted inspection record."""

    id: str | int
    user_id: str | int
    location: str | None
    notes: str | None
    photo_url: str | None
    transcription: str | None
    coordinates: CoordinatesValue
    created_at: datetime
    updated_at: datetime | None = None

    def to_dict(self) -> dict[str, object]:
        """Return a JSON-friendly representation."""
        return {
            "id": self.id,
            "user_id": self.user_id,
            "location": self.location,
            "notes": self.notes,
            "photo_url": self.photo_url,
            "transcription": self.transcription,
            "coordinates": self.coordinates,
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }


@dataclass(frozen=True)
class RecordFilters:
    """Optional list filters."""

    location: str | None = None
    date_from: datetime | None = None
    date_to: datetime | None = None


@dataclass(frozen=True)
class RecordUpdate:
    """Mutable fields of a record."""

    location: str | None
    notes: str | None


@dataclass(frozen=True)
class RecordPage:
    """One page of records plus the total match count."""

    records: list[InspectionRecord]
    total: int


@dataclass(frozen=True)
class StoredRecord:
    """Record returned by create, tagged with the store that accepted it."""

    record: InspectionRecord
    external: bool


@dataclass(frozen=True)
class RecordStats:
    """Per-user record counters."""

    total_records: int
    today_records: int
    unique_locations: int


@dataclass(frozen=True)
class UploadedAsset:
    """Binary part received with a submission."""

    content: bytes
    filename: str
    content_type: str


@dataclass(frozen=True)
class InspectionSubmission:
    """Inbound request fields for record creation."""

    location: str | None = None
    notes: str | None = None
    coordinates: object = None
    transcription: str | None = None
    photo: UploadedAsset | None = None
    audio: UploadedAsset | None = None


@dataclass(frozen=True)
class FeatureSummary:
    """Which backend served each concern for one ingestion."""

    real_transcription: bool
    external_storage: bool
    photo_uploaded: bool

    def to_dict(self) -> dict[str, bool]:
        return {
            "realTranscription": self.real_transcription,
            "externalStorage": self.external_storage,
            "photoUploaded": self.photo_uploaded,
        }


@dataclass(frozen=True)
class IngestionResult:
    """Stored record plus its feature summary."""

    record: InspectionRecord
    features: FeatureSummary
    states: list[str] = field(default_factory=list)

"""Shared test fixtures."""

import random
from dataclasses import dataclass, field
from datetime import datetime

import pytest

from field_inspector.adapters.in_memory_credential_store import InMemoryCredentialStore
from field_inspector.adapters.in_memory_record_repository import (
    InMemoryRecordRepository,
)
from field_inspector.config import Settings
from field_inspector.containers import AppContainer
from field_inspector.domain.errors import InvalidTokenError, StorageConflictError
from field_inspector.domain.models import AuthResult, SessionToken, UserRecord
from field_inspector.domain.records import (
    InspectionDraft,
    InspectionRecord,
    RecordFilters,
    RecordPage,
    RecordUpdate,
)
from field_inspector.services.auth import AuthService, CredentialStore
from field_inspector.services.ingestion import IngestionPipeline
from field_inspector.services.photos import ObjectStorageClient, PhotoUploadService
from field_inspector.services.records import RecordRepository, RecordService
from field_inspector.services.stats import StatsService
from field_inspector.services.transcription import (
    TranscriptionClient,
    TranscriptionService,
)

PUBLIC_PREFIX = "https://cdn.test/storage/v1/object/public/field-inspector/"


@dataclass
class FakeObjectStorage(ObjectStorageClient):
    """Object storage double that records calls."""

    objects: dict[str, bytes] = field(default_factory=dict)
    puts: list[tuple[str, bool]] = field(default_factory=list)
    removed: list[str] = field(default_factory=list)
    conflict_keys: set[str] = field(default_factory=set)
    put_error: Exception | None = None
    remove_error: Exception | None = None

    def put_object(
        self, key: str, data: bytes, content_type: str, *, upsert: bool
    ) -> None:
        self.puts.append((key, upsert))
        if self.put_error is not None:
            raise self.put_error
        if key in self.conflict_keys or (key in self.objects and not upsert):
            raise StorageConflictError(f"{key} already exists")
        self.objects[key] = data

    def public_url(self, key: str) -> str:
        return f"{PUBLIC_PREFIX}{key}"

    def key_for_url(self, url: str) -> str | None:
        if not url.startswith(PUBLIC_PREFIX):
            return None
        return url[len(PUBLIC_PREFIX) :]

    def remove_object(self, key: str) -> None:
        self.removed.append(key)
        if self.remove_error is not None:
            raise self.remove_error
        self.objects.pop(key, None)


@dataclass
class FakeTranscriptionClient(TranscriptionClient):
    """Transcription double returning fixed text or raising."""

    text: str = "Muro norte con fisura de dos metros."
    error: Exception | None = None
    calls: list[dict[str, object]] = field(default_factory=list)

    async def transcribe(
        self, *, audio: bytes, filename: str, mime_type: str, language: str
    ) -> str:
        self.calls.append(
            {
                "audio": audio,
                "filename": filename,
                "mime_type": mime_type,
                "language": language,
            }
        )
        if self.error is not None:
            raise self.error
        return self.text


@dataclass
class FailingRecordRepository(RecordRepository):
    """Record repository whose every call fails like an unreachable database."""

    calls: int = 0

    def _fail(self) -> None:
        self.calls += 1
        raise ConnectionError("database unreachable")

    def create_record(self, draft: InspectionDraft) -> InspectionRecord:
        self._fail()

    def list_records(
        self, user_id: str | int, offset: int, limit: int, filters: RecordFilters
    ) -> RecordPage:
        self._fail()

    def get_record(
        self, record_id: str | int, user_id: str | int
    ) -> InspectionRecord | None:
        self._fail()

    def update_record(
        self,
        record_id: str | int,
        user_id: str | int,
        changes: RecordUpdate,
        updated_at: datetime,
    ) -> InspectionRecord | None:
        self._fail()

    def delete_record(self, record_id: str | int, user_id: str | int) -> bool:
        self._fail()

    def count_records(self, user_id: str | int, since: datetime | None) -> int:
        self._fail()

    def list_locations(self, user_id: str | int) -> list[str]:
        self._fail()


@dataclass
class FakeExternalCredentialStore(CredentialStore):
    """External identity double issuing opaque JWT-like tokens."""

    users: dict[str, UserRecord] = field(default_factory=dict)
    verified: list[str] = field(default_factory=list)

    def register(
        self, email: str, password: str, display_name: str | None
    ) -> AuthResult:
        user = UserRecord(
            id=f"uuid-{len(self.users) + 1}",
            email=email,
            display_name=display_name,
            created_at=datetime(2024, 1, 1),
        )
        token = f"eyJ.{user.id}"
        self.users[token] = user
        return AuthResult(user=user, session=SessionToken(token=token, user_id=user.id))

    def login(self, email: str, password: str) -> AuthResult:
        raise NotImplementedError

    def verify(self, token: str) -> UserRecord:
        self.verified.append(token)
        if token not in self.users:
            raise InvalidTokenError()
        return self.users[token]


@pytest.fixture
def settings() -> Settings:
    return Settings(
        supabase_url=None,
        supabase_key=None,
        openai_api_key=None,
        environment="test",
    )


@pytest.fixture
def object_storage() -> FakeObjectStorage:
    return FakeObjectStorage()


@pytest.fixture
def transcription_client() -> FakeTranscriptionClient:
    return FakeTranscriptionClient()


@pytest.fixture
def photo_service(object_storage: FakeObjectStorage) -> PhotoUploadService:
    return PhotoUploadService(storage=object_storage)


@pytest.fixture
def transcription_service(
    transcription_client: FakeTranscriptionClient,
) -> TranscriptionService:
    return TranscriptionService(client=transcription_client, rng=random.Random(7))


@pytest.fixture
def record_service(photo_service: PhotoUploadService) -> RecordService:
    return RecordService(fallback=InMemoryRecordRepository(), photos=photo_service)


@pytest.fixture
def container(
    settings: Settings,
    photo_service: PhotoUploadService,
    transcription_service: TranscriptionService,
    record_service: RecordService,
) -> AppContainer:
    ingestion_pipeline = IngestionPipeline(
        photos=photo_service,
        transcription=transcription_service,
        records=record_service,
    )

    async def close_resources() -> None:
        return None

    return AppContainer(
        settings=settings,
        auth_service=AuthService(local_store=InMemoryCredentialStore()),
        photo_service=photo_service,
        transcription_service=transcription_service,
        record_service=record_service,
        ingestion_pipeline=ingestion_pipeline,
        stats_service=StatsService(record_service),
        close_resources=close_resources,
    )

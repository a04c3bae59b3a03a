"""Dependency container wiring for the application."""

import logging
import random
from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from supabase import create_client

from field_inspector.adapters.in_memory_credential_store import InMemoryCredentialStore
from field_inspector.adapters.in_memory_record_repository import (
    InMemoryRecordRepository,
)
from field_inspector.adapters.openai_transcription_client import (
    OpenAITranscriptionClient,
)
from field_inspector.adapters.supabase_credential_store import (
    SupabaseCredentialStore,
)
from field_inspector.adapters.supabase_object_storage import SupabaseObjectStorage
from field_inspector.adapters.supabase_record_repository import (
    SupabaseRecordRepository,
)
from field_inspector.config import Settings
from field_inspector.services.auth import AuthService
from field_inspector.services.ingestion import IngestionPipeline
from field_inspector.services.photos import PhotoUploadService
from field_inspector.services.records import RecordService
from field_inspector.services.stats import StatsService
from field_inspector.services.transcription import TranscriptionService

logger = logging.getLogger(__name__)


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    auth_service: AuthService
    photo_service: PhotoUploadService
    transcription_service: TranscriptionService
    record_service: RecordService
    ingestion_pipeline: IngestionPipeline
    stats_service: StatsService
    close_resources: Callable[[], Awaitable[None]]


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container.

    Each concern is bound to its external backend when configured and to the
    in-process fallback otherwise; the choice is made once here.
    """
    resolved_settings = settings or Settings()
    local_credentials = InMemoryCredentialStore()
    local_records = InMemoryRecordRepository()

    external_credentials = None
    object_storage = None
    record_repository = None
    if resolved_settings.supabase_enabled:
        supabase_client = create_client(
            resolved_settings.supabase_url, resolved_settings.supabase_key
        )
        external_credentials = SupabaseCredentialStore(supabase_client)
        object_storage = SupabaseObjectStorage(
            supabase_client, bucket=resolved_settings.storage_bucket
        )
        record_repository = SupabaseRecordRepository(
            supabase_client, table=resolved_settings.records_table
        )
    else:
        logger.warning("Supabase not configured, using in-memory auth and storage")

    transcription_client = None
    if resolved_settings.transcription_enabled:
        transcription_client = OpenAITranscriptionClient.create(
            resolved_settings.openai_api_key,
            model=resolved_settings.transcription_model,
        )
    else:
        logger.warning("OpenAI not configured, using fallback transcriptions")

    auth_service = AuthService(
        local_store=local_credentials, external_store=external_credentials
    )
    photo_service = PhotoUploadService(
        storage=object_storage,
        simulated_base_url=resolved_settings.simulated_upload_base_url,
    )
    transcription_service = TranscriptionService(
        client=transcription_client,
        language=resolved_settings.transcription_language,
        rng=random.Random(),
    )
    record_service = RecordService(
        fallback=local_records, photos=photo_service, primary=record_repository
    )
    ingestion_pipeline = IngestionPipeline(
        photos=photo_service,
        transcription=transcription_service,
        records=record_service,
    )
    stats_service = StatsService(record_service)

    async def close_resources() -> None:
        if transcription_client is not None:
            await transcription_client.close()
        local_credentials.close()
        local_records.close()

    return AppContainer(
        settings=resolved_settings,
        auth_service=auth_service,
        photo_service=photo_service,
        transcription_service=transcription_service,
        record_service=record_service,
        ingestion_pipeline=ingestion_pipeline,
        stats_service=stats_service,
        close_resources=close_resources,
    )

"""Pipeline that turns one submission into one persisted inspection record."""

import json
import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import StrEnum

from pydantic import ValidationError

from field_inspector.domain.coordinates import Coordinates
from field_inspector.domain.errors import MalformedInputError, SubmissionRejectedError
from field_inspector.domain.media import Transcription
from field_inspector.domain.records import (
    CoordinatesValue,
    FeatureSummary,
    IngestionResult,
    InspectionDraft,
    InspectionSubmission,
)
from field_inspector.services.photos import PhotoUploadService
from field_inspector.services.records import RecordService
from field_inspector.services.transcription import TranscriptionService

logger = logging.getLogger(__name__)


class PipelineState(StrEnum):
    RECEIVED = "RECEIVED"
    OWNER_BOUND = "OWNER_BOUND"
    PHOTO_RESOLVED = "PHOTO_RESOLVED"
    TRANSCRIPTION_RESOLVED = "TRANSCRIPTION_RESOLVED"
    PERSISTED = "PERSISTED"
    RESPONDED = "RESPONDED"
    REJECTED = "REJECTED"


def _utcnow() -> datetime:
    return datetime.now(tz=UTC)


@dataclass
class IngestionPipeline:
    """Runs photo upload, transcription and persistence in order.

    Only input problems (missing owner, unparseable coordinates) stop the
    run, and they are detected before any backend is called. Backend
    failures are absorbed by each service's fallback. Photo and
    transcription are both resolved before the record is created.
    """

    photos: PhotoUploadService
    transcription: TranscriptionService
    records: RecordService
    clock: Callable[[], datetime] = field(default=_utcnow)

    async def ingest(
        self, owner_id: str | int | None, submission: InspectionSubmission
    ) -> IngestionResult:
        """Create a record owned by ``owner_id`` from a submission."""
        states = [PipelineState.RECEIVED]
        if owner_id is None or owner_id == "":
            raise _reject(states, "An authenticated owner is required")
        try:
            coordinates = parse_coordinates(submission.coordinates)
        except MalformedInputError as exc:
            raise _reject(states, exc.message) from exc
        states.append(PipelineState.OWNER_BOUND)

        photo_url: str | None = None
        photo_uploaded = False
        if submission.photo is not None:
            upload = self.photos.upload(
                submission.photo.content,
                owner_id,
                submission.photo.filename,
                submission.photo.content_type,
            )
            photo_url = upload.url
            photo_uploaded = upload.stored
        states.append(PipelineState.PHOTO_RESOLVED)

        transcription = await self._resolve_transcription(submission)
        states.append(PipelineState.TRANSCRIPTION_RESOLVED)

        stored = self.records.create(
            InspectionDraft(
                user_id=owner_id,
                location=submission.location or None,
                notes=submission.notes or None,
                photo_url=photo_url,
                transcription=transcription.text,
                coordinates=coordinates,
                created_at=self.clock(),
            )
        )
        states.append(PipelineState.PERSISTED)

        features = FeatureSummary(
            real_transcription=transcription.real,
            external_storage=stored.external,
            photo_uploaded=photo_uploaded,
        )
        states.append(PipelineState.RESPONDED)
        logger.info(
            "Inspection record created",
            extra={"record_id": stored.record.id, "features": features.to_dict()},
        )
        return IngestionResult(record=stored.record, features=features, states=states)

    async def _resolve_transcription(
        self, submission: InspectionSubmission
    ) -> Transcription:
        if submission.audio is not None:
            return await self.transcription.transcribe(
                submission.audio.content,
                submission.audio.content_type,
                submission.audio.filename,
            )
        if submission.transcription:
            return Transcription(text=submission.transcription, real=False)
        # No audio and no manual text: records still carry narrative text.
        return self.transcription.fallback()


def _reject(states: list[PipelineState], reason: str) -> SubmissionRejectedError:
    states.append(PipelineState.REJECTED)
    logger.warning("Inspection submission rejected", extra={"reason": reason})
    return SubmissionRejectedError(reason, tuple(states))


def parse_coordinates(raw: object) -> CoordinatesValue:
    """Parse submitted coordinates.

    Strings are read as JSON text and only unparseable text is rejected. Any
    parsed value is kept as-is, except that a ``{lat, lng}`` object within
    range is normalized to floats. Blank text and JSON ``null`` become None.
    """
    if raw is None or (isinstance(raw, str) and not raw.strip()):
        return None
    if isinstance(raw, str):
        try:
            value = json.loads(raw)
        except json.JSONDecodeError as exc:
            raise MalformedInputError("coordinates must be valid JSON") from exc
    else:
        value = raw
    if isinstance(value, dict) and "lat" in value and "lng" in value:
        try:
            return Coordinates.model_validate(value).model_dump()
        except ValidationError:
            logger.info("Coordinates stored without lat/lng normalization")
    return value

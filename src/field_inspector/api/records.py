"""Inspection record endpoints."""

from __future__ import annotations

from datetime import UTC, date, datetime, time, timedelta
from typing import TYPE_CHECKING

from fastapi import APIRouter, Depends, Query, Request
from starlette.datastructures import UploadFile

from field_inspector.api.auth import require_user
from field_inspector.api.schemas import RecordUpdateRequest  # noqa: TC001
from field_inspector.domain.errors import MalformedInputError, PayloadTooLargeError
from field_inspector.domain.models import UserRecord
from field_inspector.domain.records import (
    InspectionSubmission,
    RecordFilters,
    RecordUpdate,
    UploadedAsset,
)

if TYPE_CHECKING:
    from field_inspector.containers import AppContainer

router = APIRouter(prefix="/api", tags=["records"])

_TEXT_FIELDS = ("location", "notes", "transcription")


@router.post("/records")
async def create_record(
    request: Request, user: UserRecord = Depends(require_user)
) -> dict[str, object]:
    """Create a record from a multipart or JSON submission."""
    container: AppContainer = request.app.state.container
    submission = await _read_submission(request, container.settings.max_upload_bytes)
    result = await container.ingestion_pipeline.ingest(user.id, submission)
    return {
        "success": True,
        "message": "Record created",
        "record": result.record.to_dict(),
        "features": result.features.to_dict(),
    }


@router.get("/records")
async def list_records(  # noqa: PLR0913
    request: Request,
    user: UserRecord = Depends(require_user),
    page: int = 1,
    limit: int = 50,
    location: str | None = None,
    date_from: str | None = Query(default=None, alias="dateFrom"),
    date_to: str | None = Query(default=None, alias="dateTo"),
) -> dict[str, object]:
    """Return the caller's records, newest first."""
    container: AppContainer = request.app.state.container
    filters = RecordFilters(
        location=location or None,
        date_from=_parse_date(date_from, end_of_day=False),
        date_to=_parse_date(date_to, end_of_day=True),
    )
    result = container.record_service.list(user.id, page, limit, filters)
    return {
        "success": True,
        "records": [record.to_dict() for record in result.records],
        "pagination": {"page": page, "limit": limit, "total": result.total},
    }


@router.get("/records/{record_id}")
async def get_record(
    record_id: str, request: Request, user: UserRecord = Depends(require_user)
) -> dict[str, object]:
    """Return one of the caller's records."""
    container: AppContainer = request.app.state.container
    record = container.record_service.get(record_id, user.id)
    return {"success": True, "record": record.to_dict()}


@router.put("/records/{record_id}")
async def update_record(
    record_id: str,
    body: RecordUpdateRequest,
    request: Request,
    user: UserRecord = Depends(require_user),
) -> dict[str, object]:
    """Update location and notes of one of the caller's records."""
    container: AppContainer = request.app.state.container
    record = container.record_service.update(
        record_id, user.id, RecordUpdate(location=body.location, notes=body.notes)
    )
    return {"success": True, "message": "Record updated", "record": record.to_dict()}


@router.delete("/records/{record_id}")
async def delete_record(
    record_id: str, request: Request, user: UserRecord = Depends(require_user)
) -> dict[str, object]:
    """Delete one of the caller's records and its photo."""
    container: AppContainer = request.app.state.container
    container.record_service.delete(record_id, user.id)
    return {"success": True, "message": "Record deleted"}


@router.get("/stats")
async def record_stats(
    request: Request, user: UserRecord = Depends(require_user)
) -> dict[str, object]:
    """Return record counters for the caller."""
    container: AppContainer = request.app.state.container
    stats = container.stats_service.summary(user.id)
    return {
        "success": True,
        "stats": {
            "totalRecords": stats.total_records,
            "todayRecords": stats.today_records,
            "uniqueLocations": stats.unique_locations,
        },
    }


async def _read_submission(request: Request, max_bytes: int) -> InspectionSubmission:
    """Parse a multipart form or JSON body into a submission."""
    content_type = request.headers.get("content-type", "")
    if content_type.startswith("application/json"):
        try:
            payload = await request.json()
        except ValueError as exc:
            raise MalformedInputError("Request body must be valid JSON") from exc
        if not isinstance(payload, dict):
            raise MalformedInputError("Request body must be a JSON object")
        return InspectionSubmission(
            **{name: _as_text(payload.get(name)) for name in _TEXT_FIELDS},
            coordinates=payload.get("coordinates"),
        )

    form = await request.form()
    return InspectionSubmission(
        **{name: _as_text(form.get(name)) for name in _TEXT_FIELDS},
        coordinates=_as_text(form.get("coordinates")),
        photo=await _read_asset(form.get("photo"), "photo", max_bytes),
        audio=await _read_asset(form.get("audio"), "audio", max_bytes),
    )


async def _read_asset(part: object, name: str, max_bytes: int) -> UploadedAsset | None:
    if not isinstance(part, UploadFile):
        return None
    content = await part.read()
    await part.close()
    if not content:
        return None
    if len(content) > max_bytes:
        raise PayloadTooLargeError(f"{name} exceeds {max_bytes} bytes")
    return UploadedAsset(
        content=content,
        filename=part.filename or name,
        content_type=part.content_type or "application/octet-stream",
    )


def _as_text(value: object) -> str | None:
    if value is None or isinstance(value, UploadFile):
        return None
    return str(value)


def _parse_date(raw: str | None, *, end_of_day: bool) -> datetime | None:
    """Parse an ISO date or datetime filter; bare dates cover the whole day."""
    if not raw:
        return None
    try:
        if len(raw) == 10:
            day = date.fromisoformat(raw)
            parsed = datetime.combine(day, time.min, tzinfo=UTC)
            return parsed + timedelta(days=1, microseconds=-1) if end_of_day else parsed
        parsed = datetime.fromisoformat(raw)
    except ValueError as exc:
        raise MalformedInputError(f"Invalid date filter: {raw}") from exc
    return parsed if parsed.tzinfo else parsed.replace(tzinfo=UTC)

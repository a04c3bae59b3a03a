"""Tests for the record store and its fallback behaviour."""

from dataclasses import replace
from datetime import UTC, datetime, timedelta

import pytest

from field_inspector.adapters.in_memory_record_repository import (
    InMemoryRecordRepository,
)
from field_inspector.domain.errors import MalformedInputError, RecordNotFoundError
from field_inspector.domain.records import InspectionDraft, RecordFilters, RecordUpdate
from field_inspector.services.photos import PhotoUploadService
from field_inspector.services.records import RecordService
from tests.conftest import PUBLIC_PREFIX, FailingRecordRepository, FakeObjectStorage

BASE_TIME = datetime(2024, 5, 1, 12, 0, tzinfo=UTC)


def _draft(user_id: str | int, minutes: int = 0, **overrides: object) -> InspectionDraft:
    draft = InspectionDraft(
        user_id=user_id,
        location="Planta Norte",
        notes="Revisión mensual",
        photo_url=None,
        transcription="Sin novedades.",
        coordinates={"lat": -33.4, "lng": -70.6},
        created_at=BASE_TIME + timedelta(minutes=minutes),
    )
    return replace(draft, **overrides)


def test_create_without_primary_uses_fallback(record_service: RecordService) -> None:
    stored = record_service.create(_draft(1))

    assert stored.external is False
    assert stored.record.id == 1
    assert stored.record.created_at == BASE_TIME


def test_create_falls_back_when_primary_fails(photo_service: PhotoUploadService) -> None:
    primary = FailingRecordRepository()
    fallback = InMemoryRecordRepository()
    service = RecordService(fallback=fallback, photos=photo_service, primary=primary)

    stored = service.create(_draft("u-1"))

    assert stored.external is False
    assert primary.calls == 1
    assert fallback.get_record(stored.record.id, "u-1") == stored.record


def test_create_uses_primary_when_healthy(photo_service: PhotoUploadService) -> None:
    primary = InMemoryRecordRepository()
    fallback = InMemoryRecordRepository()
    service = RecordService(fallback=fallback, photos=photo_service, primary=primary)

    stored = service.create(_draft("u-1"))

    assert stored.external is True
    assert fallback.list_records("u-1", 0, 10, RecordFilters()).total == 0


def test_pagination_newest_first(record_service: RecordService) -> None:
    for minutes in range(5):
        record_service.create(_draft(1, minutes=minutes, notes=f"n{minutes}"))

    first = record_service.list(1, page=1, page_size=2)
    third = record_service.list(1, page=3, page_size=2)

    assert first.total == 5
    assert [record.notes for record in first.records] == ["n4", "n3"]
    assert [record.notes for record in third.records] == ["n0"]


def test_list_rejects_non_positive_paging(record_service: RecordService) -> None:
    with pytest.raises(MalformedInputError):
        record_service.list(1, page=0, page_size=10)


def test_list_filters_in_memory(record_service: RecordService) -> None:
    record_service.create(_draft(1, minutes=0, location="Bodega Sur"))
    record_service.create(_draft(1, minutes=60, location="Planta Norte"))
    record_service.create(_draft(1, minutes=120, location="planta este"))

    by_location = record_service.list(1, filters=RecordFilters(location="PLANTA"))
    by_date = record_service.list(
        1,
        filters=RecordFilters(
            date_from=BASE_TIME + timedelta(minutes=30),
            date_to=BASE_TIME + timedelta(minutes=90),
        ),
    )

    assert [record.location for record in by_location.records] == [
        "planta este",
        "Planta Norte",
    ]
    assert [record.location for record in by_date.records] == ["Planta Norte"]


def test_other_user_sees_nothing(record_service: RecordService) -> None:
    record = record_service.create(_draft(1)).record

    assert record_service.list(2).records == []
    with pytest.raises(RecordNotFoundError):
        record_service.get(record.id, 2)
    with pytest.raises(RecordNotFoundError):
        record_service.update(record.id, 2, RecordUpdate(location="x", notes=None))
    with pytest.raises(RecordNotFoundError):
        record_service.delete(record.id, 2)
    assert record_service.get(record.id, 1).location == "Planta Norte"


def test_get_is_idempotent(record_service: RecordService) -> None:
    record = record_service.create(_draft(1)).record

    first = record_service.get(str(record.id), 1)
    second = record_service.get(str(record.id), 1)

    assert first == second
    assert first.to_dict() == second.to_dict()


def test_get_unknown_id(record_service: RecordService) -> None:
    with pytest.raises(RecordNotFoundError):
        record_service.get("not-a-number", 1)
    with pytest.raises(RecordNotFoundError):
        record_service.get("01", 1)


def test_update_refreshes_updated_at(record_service: RecordService) -> None:
    record = record_service.create(_draft(1)).record

    updated = record_service.update(
        record.id, 1, RecordUpdate(location="Bodega", notes=None)
    )

    assert updated.location == "Bodega"
    assert updated.notes == "Revisión mensual"
    assert updated.updated_at is not None
    assert updated.created_at == record.created_at


def test_delete_with_photo_attempts_one_removal(
    record_service: RecordService, object_storage: FakeObjectStorage
) -> None:
    url = f"{PUBLIC_PREFIX}photos/1/1714564800000-front.jpg"
    record = record_service.create(_draft(1, photo_url=url)).record

    record_service.delete(record.id, 1)

    assert object_storage.removed == ["photos/1/1714564800000-front.jpg"]
    with pytest.raises(RecordNotFoundError):
        record_service.get(record.id, 1)


def test_delete_survives_photo_removal_failure() -> None:
    storage = FakeObjectStorage(remove_error=ConnectionError("offline"))
    service = RecordService(
        fallback=InMemoryRecordRepository(), photos=PhotoUploadService(storage=storage)
    )
    record = service.create(_draft(1, photo_url=f"{PUBLIC_PREFIX}photos/1/a.jpg")).record

    service.delete(record.id, 1)

    assert len(storage.removed) == 1
    assert service.list(1).total == 0


def test_delete_simulated_photo_skips_storage(
    record_service: RecordService, object_storage: FakeObjectStorage
) -> None:
    url = "https://storage.local/simulated-upload/1/a.jpg"
    record = record_service.create(_draft(1, photo_url=url)).record

    record_service.delete(record.id, 1)

    assert object_storage.removed == []


def test_reads_reach_fallback_records_when_primary_fails(
    photo_service: PhotoUploadService,
) -> None:
    service = RecordService(
        fallback=InMemoryRecordRepository(),
        photos=photo_service,
        primary=FailingRecordRepository(),
    )
    record = service.create(_draft("u-1", location="Patio")).record

    assert service.get(record.id, "u-1").location == "Patio"
    assert service.list("u-1").total == 1
    assert service.count("u-1") == 1
    assert service.locations("u-1") == ["Patio"]

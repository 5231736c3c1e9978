"""ImageService 단위 테스트.

store, codec은 테스트 더블로 바꿔 파이프라인의 성공/실패/정리 동작만 검증한다.
목록 조회는 실제 SqlImageStore(in-memory SQLite)로 검증한다.
"""

import os
from datetime import UTC, datetime, timedelta

import pytest
from sqlmodel import Session, select

from core.exceptions import ImageNotFound, ProcessingFailed
from model.image import ImageRecord
from processor.codec import ImageDimensions, PillowImageCodec
from service.image_service import ImageService, remove_files
from service.image_store import SqlImageStore


class FakeCodec:
    """고정 크기를 돌려주며 출력 파일을 만드는 코덱."""

    def __init__(self, dims=(1920, 1080), error: Exception | None = None, write_partial=False):
        self.dims = dims
        self.error = error
        self.write_partial = write_partial
        self.calls = []

    def process_and_optimize(self, input_path, output_path, target_width=None, target_height=None):
        self.calls.append((input_path, output_path, target_width, target_height))
        if self.write_partial or not self.error:
            with open(output_path, "wb") as f:
                f.write(b"processed")
        if self.error:
            raise self.error
        return ImageDimensions(*self.dims)


class InMemoryStore:
    def __init__(self, fail: bool = False):
        self.records: dict[str, ImageRecord] = {}
        self.fail = fail

    def create(self, record):
        if self.fail:
            raise RuntimeError("db down")
        self.records[record.id] = record
        return record

    def get(self, image_id):
        return self.records.get(image_id)

    def find_page(self, offset, limit, title=None):
        return list(self.records.values())[offset : offset + limit]

    def count(self, title=None):
        return len(self.records)


@pytest.fixture()
def tmp_upload(settings):
    os.makedirs(settings.UPLOAD_DIR, exist_ok=True)
    path = os.path.join(settings.UPLOAD_DIR, "abc123.jpg")
    with open(path, "wb") as f:
        f.write(b"original")
    return path, "abc123.jpg"


class TestCreateImage:
    def test_creates_record(self, settings, tmp_upload):
        codec, store = FakeCodec(), InMemoryStore()
        service = ImageService(store, codec, settings)
        tmp_path, tmp_name = tmp_upload

        record = service.create_image("Test Image", 1920, 1080, tmp_path, tmp_name)

        expected_path = os.path.join(settings.PROCESSED_DIR, tmp_name)
        assert codec.calls == [(tmp_path, expected_path, 1920, 1080)]
        assert record.title == "Test Image"
        assert record.path == expected_path
        assert record.url == f"http://testserver/static/{tmp_name}"
        assert store.records[record.id] is record
        assert os.path.exists(expected_path)
        assert not os.path.exists(tmp_path), "임시 파일은 성공 후 삭제된다"

    def test_uses_actual_dimensions_from_codec(self, settings, tmp_upload):
        """요청 2000x1500 → 코덱이 1920x1080을 보고하면 그 값이 저장된다."""
        service = ImageService(InMemoryStore(), FakeCodec(dims=(1920, 1080)), settings)

        record = service.create_image("Test", 2000, 1500, *tmp_upload)

        assert (record.width, record.height) == (1920, 1080)

    def test_codec_failure_cleans_up(self, settings, tmp_upload):
        store = InMemoryStore()
        codec = FakeCodec(error=OSError("cannot identify image"), write_partial=True)
        service = ImageService(store, codec, settings)
        tmp_path, tmp_name = tmp_upload

        with pytest.raises(ProcessingFailed) as exc_info:
            service.create_image("Broken", 100, 100, tmp_path, tmp_name)

        assert isinstance(exc_info.value.cause, OSError)
        assert store.records == {}
        assert not os.path.exists(tmp_path)
        assert not os.path.exists(os.path.join(settings.PROCESSED_DIR, tmp_name))

    def test_store_failure_cleans_up(self, settings, tmp_upload):
        """DB 저장 실패 시 이미 써진 결과 파일도 지운다."""
        service = ImageService(InMemoryStore(fail=True), FakeCodec(), settings)
        tmp_path, tmp_name = tmp_upload

        with pytest.raises(ProcessingFailed) as exc_info:
            service.create_image("Test", 100, 100, tmp_path, tmp_name)

        assert "db down" in str(exc_info.value.cause)
        assert not os.path.exists(os.path.join(settings.PROCESSED_DIR, tmp_name))

    def test_missing_temp_file_is_processing_failure(self, settings):
        service = ImageService(InMemoryStore(), PillowImageCodec(), settings)

        with pytest.raises(ProcessingFailed):
            service.create_image("Ghost", 10, 10, "/nonexistent/ghost.png", "ghost.png")

    def test_committed_record_keeps_file_when_refresh_fails(self, session, settings, tmp_upload):
        """commit 이후 세션 오류가 나도 저장된 레코드의 파일은 지워지지 않는다."""

        class RefreshFailingSession(Session):
            def refresh(self, *args, **kwargs):
                raise RuntimeError("refresh failed")

        with RefreshFailingSession(session.get_bind()) as failing:
            service = ImageService(SqlImageStore(failing), FakeCodec(), settings)
            record = service.create_image("Kept", 100, 100, *tmp_upload)
            path = record.path

        assert os.path.exists(path)
        assert session.exec(select(ImageRecord)).one().title == "Kept"

    def test_remove_files_is_idempotent(self, tmp_path):
        target = tmp_path / "a.jpg"
        target.write_bytes(b"x")

        remove_files(str(target), None, str(tmp_path / "never-created.jpg"))
        remove_files(str(target))

        assert not target.exists()


def _seed(session, titles, start=None):
    """created_at을 1초씩 늘려가며 레코드를 넣는다. 마지막 것이 가장 최신."""
    start = start or datetime(2024, 1, 1, tzinfo=UTC)
    store = SqlImageStore(session)
    for i, title in enumerate(titles):
        store.create(
            ImageRecord(
                title=title,
                path=f"/p/{i}.jpg",
                url=f"http://testserver/static/{i}.jpg",
                width=10,
                height=10,
                created_at=start + timedelta(seconds=i),
            )
        )
    return store


class TestFindAll:
    def test_pagination(self, session, settings):
        store = _seed(session, [f"Image {i}" for i in range(1, 26)])
        service = ImageService(store, FakeCodec(), settings)

        result = service.find_all(page=2, limit=10)

        assert result.count == 25
        assert result.pages == 3
        assert (result.page, result.limit) == (2, 10)
        # 최신순: 25..16이 1페이지, 15..6이 2페이지
        assert [img.title for img in result.images] == [f"Image {i}" for i in range(15, 5, -1)]

    def test_last_page_partial(self, session, settings):
        service = ImageService(_seed(session, [f"I{i}" for i in range(25)]), FakeCodec(), settings)

        result = service.find_all(page=3, limit=10)

        assert len(result.images) == 5

    def test_empty(self, session, settings):
        result = ImageService(SqlImageStore(session), FakeCodec(), settings).find_all()

        assert result.count == 0
        assert result.pages == 0
        assert result.images == []

    def test_title_filter_case_insensitive(self, session, settings):
        store = _seed(session, ["Landscape Photo", "Portrait Photo", "my LANDSCAPE"])
        service = ImageService(store, FakeCodec(), settings)

        result = service.find_all(page=1, limit=10, title="Landscape")

        assert sorted(img.title for img in result.images) == ["Landscape Photo", "my LANDSCAPE"]
        assert result.count == 2

    def test_title_filter_non_ascii(self, session, settings):
        """SQLite에서도 ASCII 밖의 문자까지 대소문자를 무시한다."""
        store = _seed(session, ["ÉCOLE Photo", "Straße Nacht", "Portrait Photo"])
        service = ImageService(store, FakeCodec(), settings)

        assert [img.title for img in service.find_all(title="école").images] == ["ÉCOLE Photo"]
        assert [img.title for img in service.find_all(title="STRASSE").images] == []
        assert [img.title for img in service.find_all(title="STRAẞE").images] == ["Straße Nacht"]

    def test_title_filter_wildcards_are_literal(self, session, settings):
        store = _seed(session, ["100% real", "1000 real"])
        service = ImageService(store, FakeCodec(), settings)

        result = service.find_all(title="0%")

        assert [img.title for img in result.images] == ["100% real"]


class TestFindOne:
    def test_not_found(self, session, settings):
        service = ImageService(SqlImageStore(session), FakeCodec(), settings)

        with pytest.raises(ImageNotFound):
            service.find_one("123e4567-e89b-12d3-a456-426614174000")

    def test_found_after_create(self, session, settings, tmp_upload):
        service = ImageService(SqlImageStore(session), FakeCodec(), settings)
        created = service.create_image("Sunset", 100, 100, *tmp_upload)

        found = service.find_one(created.id)

        assert found.id == created.id
        assert found.title == "Sunset"
        assert found.url == created.url

"""pytest 공용 fixture.

모든 API 테스트는 in-memory SQLite DB와 tmp_path 아래 업로드 디렉토리를 사용하여 격리된다.
- settings: tmp_path를 가리키는 Settings
- session: 테스트마다 새 in-memory DB 세션
- client: get_session을 오버라이드한 TestClient
- make_image_bytes: 메모리에서 테스트 이미지 생성
"""

import io
import sys
from pathlib import Path

import pytest
from fastapi.testclient import TestClient
from PIL import Image
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine

# src/ 디렉토리를 import path에 추가
sys.path.insert(0, str(Path(__file__).resolve().parent.parent / "src"))

from core.config import Settings
from main import create_app
from model.database import get_session
import model.image  # noqa: F401 — 테이블 등록


@pytest.fixture()
def settings(tmp_path):
    return Settings(
        APP_URL="http://testserver/",
        DATABASE_URL=f"sqlite:///{tmp_path / 'unused.db'}",
        UPLOAD_DIR=str(tmp_path / "uploads"),
        PROCESSED_DIR=str(tmp_path / "uploads" / "processed"),
        LOG_LEVEL="DEBUG",
    )


@pytest.fixture()
def session():
    """테스트마다 새 in-memory SQLite DB를 생성한다.

    StaticPool을 사용해야 모든 커넥션이 같은 in-memory DB를 공유한다.
    (기본값은 커넥션마다 별도 DB가 생성되어 테이블이 안 보임)
    """
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    with Session(engine) as s:
        yield s


@pytest.fixture()
def app(settings):
    return create_app(settings)


@pytest.fixture()
def client(app, session):
    """get_session을 테스트용 세션으로 오버라이드한 TestClient."""

    def _override():
        yield session

    app.dependency_overrides[get_session] = _override
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


def _make_image_bytes(
    width: int = 100, height: int = 100, fmt: str = "PNG", color: str = "blue"
) -> bytes:
    mode = "RGBA" if fmt in ("PNG", "WEBP") else "RGB"
    buf = io.BytesIO()
    Image.new(mode, (width, height), color=color).save(buf, format=fmt)
    return buf.getvalue()


@pytest.fixture()
def make_image_bytes():
    return _make_image_bytes


@pytest.fixture()
def upload(client, make_image_bytes):
    """multipart 업로드 헬퍼. 기본값은 200x100 PNG → 80x60 요청."""

    def _upload(
        title: str = "Test Image",
        width: int | str = 80,
        height: int | str = 60,
        filename: str = "test.png",
        content: bytes | None = None,
        content_type: str = "image/png",
    ):
        if content is None:
            content = make_image_bytes(200, 100)
        return client.post(
            "/images",
            files={"file": (filename, io.BytesIO(content), content_type)},
            data={"title": title, "width": str(width), "height": str(height)},
        )

    return _upload

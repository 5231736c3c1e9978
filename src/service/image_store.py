from typing import Protocol

from sqlalchemy import func
from sqlmodel import Session, col, select

import model.database  # noqa: F401 — SQLite lower() 등록
from model.image import ImageRecord


class ImageStore(Protocol):
    def create(self, record: ImageRecord) -> ImageRecord: ...

    def get(self, image_id: str) -> ImageRecord | None: ...

    def find_page(
        self, offset: int, limit: int, title: str | None = None
    ) -> list[ImageRecord]: ...

    def count(self, title: str | None = None) -> int: ...


def _title_filter(title: str | None):
    """대소문자 무시 부분 일치. %, _ 는 와일드카드가 아니라 문자로 취급한다."""
    if not title:
        return None
    return func.lower(ImageRecord.title).contains(title.lower(), autoescape=True)


class SqlImageStore:
    """SQLModel 세션 위의 ImageStore 구현."""

    def __init__(self, session: Session):
        self.session = session

    def create(self, record: ImageRecord) -> ImageRecord:
        self.session.add(record)
        try:
            self.session.commit()
        except Exception:
            self.session.rollback()
            raise
        # commit 이후에는 예외가 나면 안 된다 (refresh 생략)
        return record

    def get(self, image_id: str) -> ImageRecord | None:
        return self.session.get(ImageRecord, image_id)

    def find_page(
        self, offset: int, limit: int, title: str | None = None
    ) -> list[ImageRecord]:
        statement = select(ImageRecord)
        condition = _title_filter(title)
        if condition is not None:
            statement = statement.where(condition)
        statement = (
            statement.order_by(col(ImageRecord.created_at).desc())
            .offset(offset)
            .limit(limit)
        )
        return list(self.session.exec(statement).all())

    def count(self, title: str | None = None) -> int:
        statement = select(func.count()).select_from(ImageRecord)
        condition = _title_filter(title)
        if condition is not None:
            statement = statement.where(condition)
        return self.session.exec(statement).one()

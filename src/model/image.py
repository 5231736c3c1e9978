import uuid
from datetime import UTC, datetime

from sqlmodel import Field, SQLModel


def _utcnow() -> datetime:
    return datetime.now(UTC)


class ImageRecord(SQLModel, table=True):
    __tablename__ = "image"

    id: str = Field(default_factory=lambda: str(uuid.uuid4()), primary_key=True)
    title: str = Field(min_length=1)
    path: str  # 처리된 파일 경로 (생성 후 불변)
    url: str
    width: int = Field(gt=0)
    height: int = Field(gt=0)
    created_at: datetime = Field(default_factory=_utcnow, index=True)
    updated_at: datetime = Field(
        default_factory=_utcnow, sa_column_kwargs={"onupdate": _utcnow}
    )

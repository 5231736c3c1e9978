"""API 응답 스키마.

ImageRecord(테이블)에서 path, 타임스탬프를 뺀 공개용 요약만 내보낸다.
"""

from pydantic import BaseModel

from model.image import ImageRecord


class ImageResponse(BaseModel):
    id: str
    title: str
    url: str
    width: int
    height: int


class ImageListMeta(BaseModel):
    count: int
    page: int
    limit: int
    pages: int


class ImageListResponse(BaseModel):
    data: list[ImageResponse]
    meta: ImageListMeta


def to_image_response(record: ImageRecord) -> ImageResponse:
    return ImageResponse(
        id=record.id,
        title=record.title,
        url=record.url,
        width=record.width,
        height=record.height,
    )

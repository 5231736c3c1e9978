from fastapi import APIRouter, Depends, File, Form, Query, UploadFile, status

from core.config import Settings
from core.dependencies import get_image_service, get_settings
from core.exceptions import ValidationFailed
from model.schemas import (
    ImageListMeta,
    ImageListResponse,
    ImageResponse,
    to_image_response,
)
from service.image_service import ImageService
from service.upload_validator import save_temporary_upload

router = APIRouter(prefix="/images", tags=["images"])


@router.post(
    "",
    status_code=status.HTTP_201_CREATED,
    response_model=ImageResponse,
    responses={
        400: {"description": "요청 값 검증 실패"},
        413: {"description": "파일 크기 초과 (5MB)"},
        415: {"description": "지원하지 않는 형식 (jpeg, png, webp, gif)"},
        500: {"description": "이미지 처리 실패"},
    },
)
def upload_image(
    file: UploadFile = File(..., description="이미지 파일 (jpeg, png, webp, gif, 최대 5MB)"),
    title: str = Form(..., min_length=1, examples=["Beautiful landscape"]),
    width: int = Form(..., gt=0, examples=[1920]),
    height: int = Form(..., gt=0, examples=[1080]),
    settings: Settings = Depends(get_settings),
    service: ImageService = Depends(get_image_service),
):
    if not title.strip():
        raise ValidationFailed("title은 비어 있을 수 없습니다")

    upload = save_temporary_upload(file, settings)
    record = service.create_image(
        title,
        width,
        height,
        upload.path,
        upload.filename,
        upload.original_filename,
    )
    return to_image_response(record)


@router.get("", response_model=ImageListResponse)
def list_images(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    title: str | None = Query(None),
    service: ImageService = Depends(get_image_service),
):
    result = service.find_all(page, limit, title)
    return ImageListResponse(
        data=[to_image_response(record) for record in result.images],
        meta=ImageListMeta(
            count=result.count,
            page=result.page,
            limit=result.limit,
            pages=result.pages,
        ),
    )


@router.get(
    "/{image_id}",
    response_model=ImageResponse,
    responses={404: {"description": "이미지 없음"}},
)
def get_image(
    image_id: str,
    service: ImageService = Depends(get_image_service),
):
    return to_image_response(service.find_one(image_id))

"""업로드 검증 + 임시 파일 저장.

검증은 전송 계층이 알려준 MIME 타입과 크기만 본다 (파일 내용은 읽지 않는다).
검증을 통과한 업로드만 UPLOAD_DIR에 고유 이름으로 옮겨 파이프라인에 넘긴다.
"""

import os
import uuid
from dataclasses import dataclass

from fastapi import UploadFile
from loguru import logger

from core.config import Settings
from core.exceptions import PayloadTooLarge, UnsupportedMediaType
from processor.codec import FORMAT_BY_EXTENSION

CHUNK_SIZE = 1024 * 1024


@dataclass(frozen=True)
class TemporaryUpload:
    path: str
    filename: str  # 서버가 생성한 고유 파일명 (처리 결과 파일명으로 재사용)
    original_filename: str | None
    content_type: str
    size: int


def normalize_mime(content_type: str | None) -> str:
    return (content_type or "").split(";")[0].strip().lower()


def validate_upload(content_type: str | None, size: int | None, settings: Settings) -> None:
    """크기 → MIME 순으로 검사한다. 둘 다 위반이면 크기 에러가 먼저다."""
    if size is not None and size > settings.MAX_FILE_SIZE:
        raise PayloadTooLarge(
            f"파일 크기가 {settings.max_file_size_mb:g}MB 제한을 초과했습니다"
        )

    mime = normalize_mime(content_type)
    if mime not in settings.ALLOWED_MIME_TYPES:
        allowed = ", ".join(settings.ALLOWED_MIME_TYPES)
        raise UnsupportedMediaType(
            f"지원하지 않는 파일 형식입니다: {mime or 'unknown'} (허용: {allowed})"
        )


def generate_filename(
    original_filename: str | None, content_type: str | None, settings: Settings
) -> str:
    """<uuid4 hex><ext>. 확장자가 없거나 이미지 확장자가 아니면 검증된 MIME에서 가져온다."""
    ext = os.path.splitext(original_filename or "")[1].lower()
    if ext not in FORMAT_BY_EXTENSION:
        ext = settings.MIME_EXTENSIONS.get(normalize_mime(content_type), "")
    return f"{uuid.uuid4().hex}{ext}"


def save_temporary_upload(file: UploadFile, settings: Settings) -> TemporaryUpload:
    """검증 후 업로드를 UPLOAD_DIR/<uuid><ext>로 복사한다.

    전송 계층이 크기를 알려주지 않은 경우 복사하면서 상한을 확인하고,
    초과하면 쓰던 파일을 지우고 PayloadTooLarge를 던진다.
    """
    validate_upload(file.content_type, file.size, settings)

    os.makedirs(settings.UPLOAD_DIR, exist_ok=True)
    filename = generate_filename(file.filename, file.content_type, settings)
    path = os.path.join(settings.UPLOAD_DIR, filename)

    written = 0
    file.file.seek(0)
    try:
        with open(path, "wb") as out:
            while chunk := file.file.read(CHUNK_SIZE):
                written += len(chunk)
                if written > settings.MAX_FILE_SIZE:
                    raise PayloadTooLarge(
                        f"파일 크기가 {settings.max_file_size_mb:g}MB 제한을 초과했습니다"
                    )
                out.write(chunk)
    except BaseException:
        if os.path.exists(path):
            os.remove(path)
        raise

    logger.debug(f"Temporary upload saved: {file.filename} -> {path} ({written}B)")

    return TemporaryUpload(
        path=path,
        filename=filename,
        original_filename=file.filename,
        content_type=file.content_type or "",
        size=written,
    )

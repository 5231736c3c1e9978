import math
import os
from dataclasses import dataclass

from loguru import logger

from core.config import Settings
from core.exceptions import ImageNotFound, ProcessingFailed
from model.image import ImageRecord
from processor.codec import ImageCodec
from service.image_store import ImageStore
from utility.timer import timer


@dataclass
class ImagePage:
    images: list[ImageRecord]
    count: int
    page: int
    limit: int
    pages: int


def remove_files(*paths: str | None) -> None:
    """best-effort 삭제. 없는 파일이나 삭제 실패는 무시하고 로그만 남긴다."""
    for path in paths:
        if not path:
            continue
        try:
            if os.path.exists(path):
                os.remove(path)
        except OSError as e:
            logger.warning(f"Cleanup failed for {path}: {e}")


class ImageService:
    """업로드 처리 파이프라인 + 목록/단건 조회.

    store, codec, settings는 호출 측(core.dependencies)에서 주입한다.
    """

    def __init__(self, store: ImageStore, codec: ImageCodec, settings: Settings):
        self.store = store
        self.codec = codec
        self.settings = settings

    def build_url(self, filename: str) -> str:
        return f"{self.settings.APP_URL}{self.settings.STATIC_PREFIX}/{filename}"

    def create_image(
        self,
        title: str,
        target_width: int,
        target_height: int,
        tmp_path: str,
        tmp_filename: str,
        original_filename: str | None = None,
    ) -> ImageRecord:
        """임시 파일을 리사이즈/최적화해 processed 디렉토리에 쓰고 DB에 기록한다.

        흐름:
        1. 처리 결과 경로 = PROCESSED_DIR/<tmp_filename> (업로드 시 생성된 고유 이름 재사용)
        2. codec으로 cover-fit 리사이즈 + 재인코딩 → 실제 크기 반환
        3. 임시 파일 삭제 → url 생성 → DB insert (파일이 디스크에 있는 뒤에만)
        4. 어느 단계든 실패하면 임시/결과 파일을 지우고 ProcessingFailed
        """
        processed_path = os.path.join(self.settings.PROCESSED_DIR, tmp_filename)
        source_name = original_filename or tmp_filename

        logger.info(f"Starting image processing: {source_name}")
        logger.info(
            f"Generated filename: {tmp_filename}, "
            f"Target dimensions: {target_width}x{target_height}"
        )

        try:
            os.makedirs(self.settings.PROCESSED_DIR, exist_ok=True)

            with timer() as t:
                dimensions = self.codec.process_and_optimize(
                    tmp_path, processed_path, target_width, target_height
                )

            remove_files(tmp_path)

            logger.info(
                f"Image processed successfully: {tmp_filename}, "
                f"Final dimensions: {dimensions.width}x{dimensions.height}, "
                f"Processing time: {t.elapsed_ms:.0f}ms"
            )

            record = ImageRecord(
                title=title,
                width=dimensions.width,
                height=dimensions.height,
                path=processed_path,
                url=self.build_url(tmp_filename),
            )
            return self.store.create(record)
        except Exception as e:
            logger.error(f"Failed to process image: {source_name} ({e!r})")
            remove_files(tmp_path, processed_path)
            raise ProcessingFailed(cause=e) from e

    def find_all(self, page: int = 1, limit: int = 10, title: str | None = None) -> ImagePage:
        offset = (page - 1) * limit
        images = self.store.find_page(offset, limit, title)
        count = self.store.count(title)
        return ImagePage(
            images=images,
            count=count,
            page=page,
            limit=limit,
            pages=math.ceil(count / limit),
        )

    def find_one(self, image_id: str) -> ImageRecord:
        record = self.store.get(image_id)
        if not record:
            raise ImageNotFound(f"ID가 {image_id}인 이미지를 찾을 수 없습니다")
        return record

"""
Pillow 기반 이미지 코덱 어댑터.

cover_fit / encode_options는 순수 함수(PIL.Image in → PIL.Image out),
PillowImageCodec은 파일 경로를 받아 리사이즈 + 재인코딩 후 실제 크기를 돌려준다.
"""

import os
from dataclasses import dataclass
from typing import Protocol

from PIL import Image, ImageOps

# 출력 파일 확장자 → Pillow 포맷
FORMAT_BY_EXTENSION = {
    ".jpg": "JPEG",
    ".jpeg": "JPEG",
    ".png": "PNG",
    ".webp": "WEBP",
    ".gif": "GIF",
}


@dataclass(frozen=True)
class ImageDimensions:
    width: int
    height: int


class ImageCodec(Protocol):
    def process_and_optimize(
        self,
        input_path: str,
        output_path: str,
        target_width: int | None = None,
        target_height: int | None = None,
    ) -> ImageDimensions: ...


def cover_fit(image: Image.Image, width: int, height: int) -> Image.Image:
    """타깃 영역을 빈틈없이 덮도록 확대/축소한 뒤 넘치는 부분을 가운데 기준으로 잘라낸다."""
    return ImageOps.fit(
        image, (width, height), method=Image.LANCZOS, centering=(0.5, 0.5)
    )


def prepare_mode(image: Image.Image, image_format: str) -> Image.Image:
    # 팔레트 이미지는 LANCZOS 리샘플링이 안 되므로 먼저 풀어둔다
    if image.mode == "P":
        image = image.convert("RGBA" if "transparency" in image.info else "RGB")
    if image_format == "JPEG" and image.mode not in ("RGB", "L"):
        image = image.convert("RGB")
    return image


def encode_options(
    image_format: str,
    jpeg_quality: int = 85,
    webp_quality: int = 85,
    png_compress_level: int = 9,
) -> dict:
    if image_format == "JPEG":
        return {"quality": jpeg_quality, "progressive": True, "optimize": True}
    if image_format == "PNG":
        return {"compress_level": png_compress_level, "optimize": True}
    if image_format == "WEBP":
        return {"quality": webp_quality, "method": 6}
    if image_format == "GIF":
        return {"optimize": True}
    return {}


def detect_format(output_path: str, fallback: str | None) -> str:
    ext = os.path.splitext(output_path)[1].lower()
    image_format = FORMAT_BY_EXTENSION.get(ext) or fallback
    if not image_format:
        raise ValueError(f"출력 포맷을 결정할 수 없습니다: {output_path}")
    return image_format


class PillowImageCodec:
    """ImageCodec 구현체. 인코딩 품질은 생성 시 Settings에서 받는다."""

    def __init__(
        self,
        jpeg_quality: int = 85,
        webp_quality: int = 85,
        png_compress_level: int = 9,
    ):
        self.jpeg_quality = jpeg_quality
        self.webp_quality = webp_quality
        self.png_compress_level = png_compress_level

    @classmethod
    def from_settings(cls, settings) -> "PillowImageCodec":
        return cls(
            jpeg_quality=settings.JPEG_QUALITY,
            webp_quality=settings.WEBP_QUALITY,
            png_compress_level=settings.PNG_COMPRESS_LEVEL,
        )

    def process_and_optimize(
        self,
        input_path: str,
        output_path: str,
        target_width: int | None = None,
        target_height: int | None = None,
    ) -> ImageDimensions:
        """리사이즈(두 값이 모두 있을 때만) + 포맷별 최적화 인코딩.

        출력 포맷은 output_path 확장자를 따르고, 모르는 확장자면 원본 포맷을 쓴다.
        반환값은 실제로 저장된 이미지의 픽셀 크기다.
        """
        with Image.open(input_path) as src:
            image_format = detect_format(output_path, src.format)
            image = prepare_mode(src, image_format)

            if target_width and target_height:
                image = cover_fit(image, target_width, target_height)

            image = prepare_mode(image, image_format)
            image.save(
                output_path,
                image_format,
                **encode_options(
                    image_format,
                    self.jpeg_quality,
                    self.webp_quality,
                    self.png_compress_level,
                ),
            )
            return ImageDimensions(width=image.width, height=image.height)

    def resize_image(
        self, input_path: str, output_path: str, width: int, height: int
    ) -> None:
        """품질 옵션 없이 cover-fit 리사이즈만 한다."""
        with Image.open(input_path) as src:
            image_format = detect_format(output_path, src.format)
            image = cover_fit(prepare_mode(src, image_format), width, height)
            prepare_mode(image, image_format).save(output_path, image_format)

    def get_image_dimensions(self, file_path: str) -> ImageDimensions:
        with Image.open(file_path) as img:
            return ImageDimensions(width=img.width, height=img.height)

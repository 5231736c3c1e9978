from pydantic import field_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # 앱 설정
    APP_NAME: str = "image-gallery"
    APP_VERSION: str = "0.1.0"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # 서버 설정
    HOST: str = "0.0.0.0"
    PORT: int = 8000

    # DB 설정
    DATABASE_URL: str = "sqlite:///./image_gallery.db"

    # 외부에서 접근 가능한 기준 주소 (이미지 url 생성에 사용)
    APP_URL: str = "http://localhost:8000"

    # 파일 저장 경로
    UPLOAD_DIR: str = "./uploads"
    PROCESSED_DIR: str = "./uploads/processed"

    # 정적 파일 서빙
    STATIC_PREFIX: str = "/static"
    STATIC_MAX_AGE: int = 31536000  # 1년

    # 업로드 제한
    MAX_FILE_SIZE: int = 5 * 1024 * 1024  # 5MB
    ALLOWED_MIME_TYPES: list[str] = [
        "image/jpeg",
        "image/png",
        "image/webp",
        "image/gif",
    ]
    # 원본 파일명에 쓸 만한 확장자가 없을 때 MIME으로 정한다
    MIME_EXTENSIONS: dict[str, str] = {
        "image/jpeg": ".jpg",
        "image/png": ".png",
        "image/webp": ".webp",
        "image/gif": ".gif",
    }

    # CORS
    CORS_ORIGINS: list[str] = ["*"]

    # 인코딩 품질
    JPEG_QUALITY: int = 85
    WEBP_QUALITY: int = 85
    PNG_COMPRESS_LEVEL: int = 9

    @field_validator("APP_URL")
    @classmethod
    def _strip_trailing_slash(cls, value: str) -> str:
        return value.rstrip("/")

    @field_validator("STATIC_PREFIX")
    @classmethod
    def _normalize_prefix(cls, value: str) -> str:
        return "/" + value.strip("/")

    @property
    def max_file_size_mb(self) -> float:
        return self.MAX_FILE_SIZE / (1024 * 1024)

    model_config = {"env_file": ".env", "extra": "ignore", "frozen": True}


settings = Settings()

import uvicorn
from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware

from core.config import Settings, settings as default_settings
from core.error_handlers import app_exception_handler, validation_exception_handler
from core.exceptions import AppException
from core.lifespan import lifespan
from core.middleware import RequestLoggingMiddleware
from core.static_files import ImmutableStaticFiles
from model.database import build_engine
from router.image_router import router as image_router
from utility.logger import setup_logger


def create_app(settings: Settings | None = None) -> FastAPI:
    """설정을 한 번 받아 앱을 조립한다. 테스트는 tmp 경로를 가리키는 Settings를 넘긴다."""
    settings = settings or default_settings
    setup_logger(settings.LOG_LEVEL)

    app = FastAPI(
        title=settings.APP_NAME,
        version=settings.APP_VERSION,
        description="이미지 갤러리 API — 업로드, 리사이즈/최적화, 목록 조회",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.engine = build_engine(settings.DATABASE_URL, echo=settings.DEBUG)

    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["*"],
    )
    app.add_exception_handler(AppException, app_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)

    app.include_router(image_router)

    # 디렉토리는 lifespan에서 만든다
    app.mount(
        settings.STATIC_PREFIX,
        ImmutableStaticFiles(
            directory=settings.PROCESSED_DIR,
            max_age=settings.STATIC_MAX_AGE,
            check_dir=False,
        ),
        name="static",
    )

    @app.get("/health")
    async def health():
        return {
            "status": "ok",
            "app": settings.APP_NAME,
            "version": settings.APP_VERSION,
        }

    return app


app = create_app()


if __name__ == "__main__":
    uvicorn.run(
        "main:app",
        host=default_settings.HOST,
        port=default_settings.PORT,
        reload=default_settings.DEBUG,
        access_log=False,
    )

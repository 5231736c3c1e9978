"""전역 예외 핸들러.

AppException 계열 예외를 잡아 일관된 JSON 응답으로 변환한다.
FastAPI의 RequestValidationError도 같은 형식(400 VALIDATION_FAILED)으로 맞춘다.
main.py에서 app.add_exception_handler()로 등록한다.
"""

from fastapi import Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from loguru import logger

from core.exceptions import AppException, ProcessingFailed, ValidationFailed


async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
    content = {
        "error_code": exc.error_code,
        "message": exc.message,
    }

    if isinstance(exc, ValidationFailed) and exc.details:
        content["details"] = exc.details

    if isinstance(exc, ProcessingFailed):
        cause = exc.cause
        logger.opt(exception=cause).error(
            f"{request.method} {request.url.path} | {exc.error_code} | {cause!r}"
        )
        if cause is not None:
            content["detail"] = str(cause) or type(cause).__name__

    return JSONResponse(status_code=exc.status_code, content=content)


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """쿼리/폼 검증 실패 → 400. (FastAPI 기본값은 422)"""
    error = ValidationFailed(details=jsonable_encoder(exc.errors()))
    return await app_exception_handler(request, error)

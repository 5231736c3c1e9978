import time

from fastapi import Request, Response
from loguru import logger
from starlette.middleware.base import BaseHTTPMiddleware

SLOW_THRESHOLD_MS = 500


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """모든 HTTP 요청을 로깅하는 미들웨어.

    기록 항목: 메서드, 경로(+쿼리), 클라이언트 IP, 상태코드, 처리시간(ms)
    업로드 요청은 Content-Length도 함께 남긴다.
    처리시간이 500ms를 초과하면 WARNING 레벨로 기록.
    응답 헤더 X-Process-Time에 처리시간(ms)을 싣는다.
    """

    async def dispatch(self, request: Request, call_next) -> Response:
        start = time.perf_counter()

        response = await call_next(request)

        elapsed_ms = (time.perf_counter() - start) * 1000
        response.headers["X-Process-Time"] = f"{elapsed_ms:.0f}"

        client_ip = request.client.host if request.client else "unknown"
        target = request.url.path
        if request.url.query:
            target = f"{target}?{request.url.query}"

        line = f"{request.method} {target} | {client_ip} | {response.status_code} | {elapsed_ms:.0f}ms"
        length = request.headers.get("content-length")
        if request.method == "POST" and length and length.isdigit():
            line += f" | {int(length) / 1024:.1f}KB"

        if elapsed_ms > SLOW_THRESHOLD_MS:
            logger.warning(f"{line} (slow)")
        else:
            logger.info(line)

        return response

from fastapi.staticfiles import StaticFiles
from starlette.responses import Response
from starlette.types import Scope


class ImmutableStaticFiles(StaticFiles):
    """처리된 이미지 전용 StaticFiles.

    파일명이 업로드마다 고유하므로 내용이 바뀌지 않는다 → 장기 캐시 + immutable.
    """

    def __init__(self, *, max_age: int = 31536000, **kwargs):
        super().__init__(**kwargs)
        self.cache_control = f"public, max-age={max_age}, immutable"

    async def get_response(self, path: str, scope: Scope) -> Response:
        response = await super().get_response(path, scope)
        if response.status_code in (200, 304):
            response.headers["Cache-Control"] = self.cache_control
        return response

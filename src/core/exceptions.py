"""앱 전역 커스텀 예외 클래스.

AppException을 상속하면 전역 핸들러(error_handlers.py)가 자동으로
{"error_code": "...", "message": "..."} 형식의 JSON 응답을 생성한다.
"""


class AppException(Exception):
    """앱 전역 베이스 예외.

    서브클래스에서 status_code, error_code, message를 클래스 변수로 정의하면
    전역 핸들러가 해당 값을 읽어 HTTP 응답을 생성한다.
    """

    status_code: int = 500
    error_code: str = "INTERNAL_ERROR"
    message: str = "서버 내부 오류가 발생했습니다"

    def __init__(self, message: str | None = None):
        if message:
            self.message = message
        super().__init__(self.message)


# --- 요청 검증 ---


class ValidationFailed(AppException):
    status_code = 400
    error_code = "VALIDATION_FAILED"
    message = "요청 값이 올바르지 않습니다"

    def __init__(self, message: str | None = None, details: list | None = None):
        super().__init__(message)
        self.details = details or []


# --- 업로드 관련 ---


class UnsupportedMediaType(AppException):
    status_code = 415
    error_code = "UNSUPPORTED_MEDIA_TYPE"
    message = "지원하지 않는 이미지 형식입니다"


class PayloadTooLarge(AppException):
    status_code = 413
    error_code = "PAYLOAD_TOO_LARGE"
    message = "파일 크기가 허용 한도를 초과했습니다"


# --- 이미지 관련 ---


class ImageNotFound(AppException):
    status_code = 404
    error_code = "IMAGE_NOT_FOUND"
    message = "이미지를 찾을 수 없습니다"


class ProcessingFailed(AppException):
    """리사이즈/인코딩 또는 DB 저장 실패.

    원인 예외를 cause로 보관하여 핸들러가 로그에 남길 수 있게 한다.
    """

    status_code = 500
    error_code = "PROCESSING_FAILED"
    message = "이미지 처리에 실패했습니다"

    def __init__(self, message: str | None = None, cause: BaseException | None = None):
        super().__init__(message)
        self.cause = cause

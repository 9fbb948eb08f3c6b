"""
커스텀 예외 클래스

애플리케이션 전반에서 사용하는 예외들을 정의합니다.
"""

from typing import Any, Dict, Optional


class AppException(Exception):
    """애플리케이션 기본 예외"""

    def __init__(
        self,
        message: str,
        status_code: int = 500,
        details: Optional[Dict[str, Any]] = None
    ):
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        super().__init__(self.message)

    def __str__(self):
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


class TransportError(AppException):
    """
    HTTP 응답 에러 (non-2xx)

    body에는 디코딩된 에러 바디({code, ...})가 들어간다.
    """

    def __init__(
        self,
        message: str,
        status_code: int,
        body: Optional[Dict[str, Any]] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        self.body = body or {}
        super().__init__(message, status_code=status_code, details=details)


class TransportNetworkError(AppException):
    """
    네트워크 에러

    연결 실패, 타임아웃 등 (재시도 소진 후)
    """

    def __init__(self, message: str = "Network error", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, status_code=0, details=details)


class ValidationException(AppException):
    """검증 실패 예외"""

    def __init__(self, message: str = "Validation failed", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, status_code=400, details=details)


class CurrencyConversionError(AppException):
    """환율 테이블(대체 테이블 포함)을 만들 수 없는 경우"""

    def __init__(self, message: str = "Failed to load exchange rates", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, status_code=500, details=details)

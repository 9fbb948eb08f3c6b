# @FEAT:notification @COMP:service @TYPE:helper
"""
사용자 알림 서비스

렌더링 계층(토스트 UI)은 외부 협력자이므로 Notifier 프로토콜만 정의하고
기본 구현은 로그로 출력합니다.
"""

import logging
from typing import Protocol, runtime_checkable

logger = logging.getLogger(__name__)


class ToastLevel:
    """토스트 레벨"""
    DANGER = "danger"
    WARNING = "warning"
    INFO = "info"
    SUCCESS = "success"


@runtime_checkable
class Notifier(Protocol):
    def show(self, message: str, level: str = ToastLevel.INFO, duration_ms: int = 3000) -> None:
        ...


class LoggingNotifier:
    """로그 기반 Notifier"""

    _LOG_LEVELS = {
        ToastLevel.DANGER: logging.ERROR,
        ToastLevel.WARNING: logging.WARNING,
    }

    def show(self, message: str, level: str = ToastLevel.INFO, duration_ms: int = 3000) -> None:
        logger.log(
            self._LOG_LEVELS.get(level, logging.INFO),
            f"🔔 [{level}] {message} ({duration_ms}ms)"
        )

    def error(self, message: str, duration_ms: int = 3000) -> None:
        self.show(message, ToastLevel.DANGER, duration_ms)

# @FEAT:merchant-status-gate @COMP:service @TYPE:core
"""
머천트 상태 게이트

인증 실패 응답(403)을 PIN_BLOCKED / INACTIVE / GENERIC_403 으로 분류하고
종류별 고정 정책(메시지, 강제 로그아웃, 심각도)을 부여합니다.
이 에러는 재시도하지 않으며 항상 호출자에게 타입 있는 실패로 전달됩니다.
"""

import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, Optional

from merchant_sync.core.exceptions import AppException
from merchant_sync.services.notification_service import Notifier, ToastLevel

logger = logging.getLogger(__name__)


class MerchantStatusErrorKind(str, Enum):
    """머천트 상태 에러 종류"""
    PIN_BLOCKED = "PIN_BLOCKED"
    INACTIVE = "INACTIVE"
    GENERIC_403 = "GENERIC_403"


class Severity(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


@dataclass(frozen=True)
class MerchantStatusPolicy:
    """에러 종류별 처리 정책"""
    kind: MerchantStatusErrorKind
    message: str
    should_logout: bool
    severity: Severity
    toast_level: str


POLICIES: Dict[MerchantStatusErrorKind, MerchantStatusPolicy] = {
    MerchantStatusErrorKind.PIN_BLOCKED: MerchantStatusPolicy(
        kind=MerchantStatusErrorKind.PIN_BLOCKED,
        message="Account blocked due to PIN security violations",
        should_logout=True,
        severity=Severity.HIGH,
        toast_level=ToastLevel.DANGER,
    ),
    MerchantStatusErrorKind.INACTIVE: MerchantStatusPolicy(
        kind=MerchantStatusErrorKind.INACTIVE,
        message="Account is inactive",
        should_logout=True,
        severity=Severity.MEDIUM,
        toast_level=ToastLevel.WARNING,
    ),
    MerchantStatusErrorKind.GENERIC_403: MerchantStatusPolicy(
        kind=MerchantStatusErrorKind.GENERIC_403,
        message="Access denied",
        should_logout=False,
        severity=Severity.LOW,
        toast_level=ToastLevel.DANGER,
    ),
}


def get_policy(kind: MerchantStatusErrorKind) -> MerchantStatusPolicy:
    return POLICIES[kind]


def should_trigger_logout(kind: MerchantStatusErrorKind) -> bool:
    return POLICIES[kind].should_logout


class MerchantStatusError(AppException):
    """머천트 상태 정책 에러"""

    def __init__(
        self,
        kind: MerchantStatusErrorKind,
        profile: Optional[Dict[str, Any]] = None,
        message: Optional[str] = None,
    ):
        self.kind = MerchantStatusErrorKind(kind)
        self.policy = get_policy(self.kind)
        self.profile = profile
        super().__init__(
            message or self.policy.message,
            status_code=403,
            details={
                "code": self.kind.value,
                "should_logout": self.policy.should_logout,
            },
        )

    @property
    def should_logout(self) -> bool:
        return self.policy.should_logout

    @property
    def severity(self) -> Severity:
        return self.policy.severity


# @FEAT:merchant-status-gate @COMP:service @TYPE:core
def classify(http_status: Optional[int], response_body: Any = None) -> Optional[MerchantStatusErrorKind]:
    """HTTP 상태와 응답 바디로 머천트 상태 에러 분류

    Returns:
        403이 아니면 None, 403이면 code 필드에 따라 종류 반환
    """
    if http_status != 403:
        return None

    code = response_body.get("code") if isinstance(response_body, dict) else None

    if code == MerchantStatusErrorKind.PIN_BLOCKED.value:
        return MerchantStatusErrorKind.PIN_BLOCKED
    if code == MerchantStatusErrorKind.INACTIVE.value:
        return MerchantStatusErrorKind.INACTIVE
    return MerchantStatusErrorKind.GENERIC_403


def log_merchant_status_error(error: MerchantStatusError, context: str = "unknown") -> None:
    """머천트 상태 에러 구조화 로그"""
    logger.error(
        "[MerchantStatusError] type=%s severity=%s context=%s message=%s at=%s",
        error.kind.value,
        error.severity.value,
        context,
        error.message,
        datetime.now(timezone.utc).isoformat(),
    )


# @FEAT:merchant-status-gate @COMP:service @TYPE:integration
class MerchantStatusErrorHandler:
    """
    머천트 상태 에러 처리기

    - 정책 메시지를 정책 레벨로 표시 (강제 로그아웃 5초, 그 외 3초)
    - 강제 로그아웃 정책이면 지연 후 logout 호출
    - logout 실패는 알리기만 하고 다시 막지 않는다
    """

    LOGOUT_FAILED_MESSAGE = "Failed to logout. Please try again."

    def __init__(self, notifier: Notifier, logout_delay: float = 1.0):
        self.notifier = notifier
        self.logout_delay = logout_delay

    def handle(
        self,
        error: MerchantStatusError,
        on_logout: Optional[Callable[[], Awaitable[None]]] = None,
    ) -> Optional[asyncio.Task]:
        """에러 표시 및 (필요 시) 로그아웃 예약

        Returns:
            예약된 로그아웃 태스크 (없으면 None)
        """
        policy = error.policy
        duration_ms = 5000 if policy.should_logout else 3000
        self.notifier.show(policy.message, policy.toast_level, duration_ms)
        log_merchant_status_error(error, context="handler")

        if not (policy.should_logout and on_logout):
            return None

        return asyncio.create_task(self._logout_after_delay(on_logout))

    async def _logout_after_delay(self, on_logout: Callable[[], Awaitable[None]]) -> bool:
        # 메시지가 보이도록 잠시 대기
        await asyncio.sleep(self.logout_delay)
        try:
            await on_logout()
            logger.info("🚪 머천트 상태 에러로 로그아웃 완료")
            return True
        except Exception as e:
            logger.error(f"❌ 로그아웃 실패: {e}", exc_info=True)
            self.notifier.show(self.LOGOUT_FAILED_MESSAGE, ToastLevel.DANGER, 3000)
            return False

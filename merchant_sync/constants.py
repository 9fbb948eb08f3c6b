# @FEAT:framework @COMP:config @TYPE:boilerplate
"""
애플리케이션 전역 상수 정의
"""

from enum import Enum


class PaymentStatus(str, Enum):
    """동기화기가 노출하는 결제 상태

    상태 전이:
    PENDING → COMPLETED
    PENDING → FAILED

    COMPLETED, FAILED는 종료 상태이며 어떤 전이도 허용하지 않는다.
    """
    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (PaymentStatus.COMPLETED, PaymentStatus.FAILED)


class RemoteStatus(str, Enum):
    """서버가 내려주는 주문/입금 상태"""
    PENDING = "PENDING"
    PROCESSING = "PROCESSING"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"
    DISCREPANCY = "DISCREPANCY"

    @classmethod
    def to_payment_status(cls, value) -> PaymentStatus:
        """원격 상태를 동기화기 상태로 매핑

        COMPLETED만 성공 종료, FAILED만 실패 종료로 본다.
        나머지(PROCESSING, DISCREPANCY 포함)는 모두 PENDING.
        """
        if value == cls.COMPLETED:
            return PaymentStatus.COMPLETED
        if value == cls.FAILED:
            return PaymentStatus.FAILED
        return PaymentStatus.PENDING


class MerchantStatus(str, Enum):
    """머천트 계정 상태"""
    ACTIVE = "ACTIVE"
    INACTIVE = "INACTIVE"
    PIN_BLOCKED = "PIN_BLOCKED"


class RealtimeEvent:
    """실시간 채널 이벤트 이름"""
    PAYMENT_COMPLETED = "payment_completed"


class CacheKey:
    """영속 캐시 키 네임스페이스

    키 형식은 디스크에 남기 때문에 변경하면 안 된다.
    엔티티 종류별 prefix가 달라 서로 충돌하지 않는다.
    """
    PROFILE = "profile"
    EXCHANGE_RATES_PREFIX = "_exchange_rates"
    EXCHANGE_RATES_TIMESTAMP = "_exchange_rates_timestamp"

    @staticmethod
    def orders(status: str) -> str:
        return f"orders:{status}"

    @staticmethod
    def order(order_id: str) -> str:
        return f"order:{order_id}"

    @staticmethod
    def deposits(status: str) -> str:
        return f"deposits:{status}"

    @staticmethod
    def deposit(deposit_id: str) -> str:
        return f"deposit:{deposit_id}"

    @classmethod
    def exchange_rates(cls, currency: str) -> str:
        return f"{cls.EXCHANGE_RATES_PREFIX}_{currency}"


USD = "USD"

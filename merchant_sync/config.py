"""
애플리케이션 설정 모듈

Pydantic Settings를 사용하여 환경 변수를 타입 안전하게 로드합니다.
"""

from pydantic_settings import BaseSettings
from pydantic import Field, field_validator
import logging

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    """애플리케이션 설정"""

    # Merchant API (HTTP transport)
    API_BASE_URL: str = Field(
        default="http://localhost:54321/",
        description="Merchant API 베이스 URL"
    )
    API_TIMEOUT: float = Field(
        default=30.0,
        ge=1.0,
        le=120.0,
        description="HTTP 요청 타임아웃 (초)"
    )
    API_MAX_RETRIES: int = Field(
        default=2,
        ge=1,
        le=5,
        description="HTTP 최대 시도 횟수 (2 = 재시도 1회)"
    )
    API_RETRY_BASE_DELAY: float = Field(
        default=1.0,
        ge=0.0,
        le=10.0,
        description="재시도 기본 지연 (초, exponential backoff 기준)"
    )

    # Cache Storage
    CACHE_DATABASE_URL: str = Field(
        default="sqlite:///merchant_cache.db",
        description="영속 key/value 스토어 SQLAlchemy URL"
    )
    CACHE_SWEEP_INTERVAL: int = Field(
        default=300,
        ge=10,
        le=86400,
        description="만료 캐시 정리 간격 (초)"
    )

    # Entity TTL (밀리초)
    ORDERS_CACHE_TTL_MS: int = Field(default=5 * 60 * 1000, ge=0, description="주문 목록 TTL")
    ORDER_CACHE_TTL_MS: int = Field(default=30 * 1000, ge=0, description="단일 주문 TTL")
    DEPOSITS_CACHE_TTL_MS: int = Field(default=3 * 60 * 1000, ge=0, description="입금 목록 TTL")
    DEPOSIT_CACHE_TTL_MS: int = Field(default=2 * 60 * 1000, ge=0, description="단일 입금 TTL")
    PROFILE_CACHE_TTL_MS: int = Field(default=10 * 60 * 1000, ge=0, description="머천트 프로필 TTL")

    # Exchange Rates
    EXCHANGE_RATE_API_URL: str = Field(
        default="https://open.er-api.com/v6/latest/{currency}",
        description="환율 조회 URL ({currency} 자리에 원화 통화 코드)"
    )

    # Realtime (Pusher)
    PUSHER_APP_KEY: str = Field(
        default="",
        description="Pusher App Key"
    )
    PUSHER_CLUSTER: str = Field(
        default="mt1",
        description="Pusher Cluster"
    )
    PAYMENT_COMPLETED_EVENT: str = Field(
        default="payment_completed",
        description="결제 완료 실시간 이벤트 이름"
    )

    # Merchant status gate
    LOGOUT_DELAY_SECONDS: float = Field(
        default=1.0,
        ge=0.0,
        le=30.0,
        description="강제 로그아웃 전 메시지 노출 시간 (초)"
    )

    # Application Configuration
    ENV: str = Field(
        default="development",
        description="환경 (development, production, test)"
    )
    DEBUG: bool = Field(
        default=False,
        description="디버그 모드"
    )
    LOG_LEVEL: str = Field(
        default="INFO",
        description="로그 레벨"
    )
    LOG_FILE: str = Field(
        default="",
        description="로그 파일 경로 (빈 값이면 콘솔만 사용)"
    )

    @field_validator("API_BASE_URL", mode="after")
    @classmethod
    def ensure_trailing_slash(cls, v):
        """상대 경로 결합을 위해 베이스 URL 끝에 / 보장"""
        return v if v.endswith("/") else f"{v}/"

    @field_validator("ENV")
    @classmethod
    def validate_env(cls, v):
        """ENV 값 검증"""
        allowed = ["development", "production", "test"]
        if v not in allowed:
            raise ValueError(f"ENV must be one of {allowed}")
        return v

    @field_validator("LOG_LEVEL")
    @classmethod
    def validate_log_level(cls, v):
        """LOG_LEVEL 값 검증"""
        allowed = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in allowed:
            raise ValueError(f"LOG_LEVEL must be one of {allowed}")
        return v.upper()

    class Config:
        """Pydantic 설정"""
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = True


# 전역 설정 인스턴스 (composition root 전용)
settings = Settings()


if __name__ != "__main__":
    logger.debug(f"⚙️ Settings loaded: ENV={settings.ENV}, DEBUG={settings.DEBUG}")

# @FEAT:entity-cache @COMP:service @TYPE:core @DEPS:ttl-cache,merchant-api
"""
엔티티 조회 캐시 (cache-aside)

주문/입금/프로필을 엔티티 종류별 TTL로 캐싱합니다.

조회 흐름:
1. force가 아니면 TTL 캐시 확인 → HIT이면 전송 계층 호출 없이 반환
2. MISS(또는 force)면 전송 계층 호출
3. 결과를 스키마 검증 후 동일 TTL로 저장하고 반환

프로필만 별도 실패 경로를 가진다 (머천트 상태 게이트 참고).
"""

import logging
from typing import Any, Awaitable, Callable, Generic, List, Optional, TypeVar

from pydantic import TypeAdapter, ValidationError

from merchant_sync.constants import CacheKey, MerchantStatus
from merchant_sync.core.exceptions import TransportError, ValidationException
from merchant_sync.schemas import MerchantDeposit, MerchantOrder, MerchantProfile
from merchant_sync.services.merchant_status import (
    MerchantStatusError,
    MerchantStatusErrorKind,
    classify,
    should_trigger_logout,
)
from merchant_sync.storage.ttl_cache import TTLCacheStore

logger = logging.getLogger(__name__)

T = TypeVar("T")


class CachedQuery(Generic[T]):
    """
    단일 엔티티 종류의 cache-aside 조회기

    Args:
        cache: TTL 캐시 스토어
        name: 로그용 이름
        key_builder: 조회 인자 → 캐시 키
        ttl_ms: 캐시 TTL (밀리초)
        fetcher: 조회 인자 → 디코딩된 JSON (전송 계층)
        schema: 결과 타입 (pydantic TypeAdapter로 검증)
    """

    def __init__(
        self,
        cache: TTLCacheStore,
        name: str,
        key_builder: Callable[[Any], str],
        ttl_ms: int,
        fetcher: Callable[[Any], Awaitable[Any]],
        schema: Any,
    ):
        self.cache = cache
        self.name = name
        self.key_builder = key_builder
        self.ttl_ms = ttl_ms
        self.fetcher = fetcher
        self.adapter: TypeAdapter = TypeAdapter(schema)

    def read_cached(self, key: str) -> Optional[T]:
        """캐시 조회 (검증 실패 엔트리는 삭제 후 miss)"""
        data = self.cache.get(key)
        if data is None:
            return None

        try:
            return self.adapter.validate_python(data)
        except ValidationError:
            logger.warning(f"⚠️ 캐시된 {self.name} 형식 오류, 엔트리 삭제: {key}")
            self.cache.delete(key)
            return None

    def store(self, key: str, value: T) -> None:
        self.cache.set(key, self.adapter.dump_python(value, mode="json"), self.ttl_ms)

    def validate(self, raw: Any) -> T:
        try:
            return self.adapter.validate_python(raw)
        except ValidationError as e:
            logger.error(f"❌ {self.name} 응답 검증 실패: {e.error_count()}개 오류")
            raise ValidationException(
                f"Invalid {self.name} payload",
                details={"errors": e.errors(include_url=False)}
            ) from e

    async def fetch(self, arg: Any = None, force: bool = False) -> T:
        """cache-aside 조회

        Args:
            arg: id 또는 status 필터
            force: True면 캐시 읽기를 건너뛰고 결과는 다시 저장

        Raises:
            전송 계층 예외는 그대로 전달
        """
        key = self.key_builder(arg)

        if not force:
            cached = self.read_cached(key)
            if cached is not None:
                return cached

        logger.debug(f"📡 {self.name} 조회: {key} (force={force})")
        value = self.validate(await self.fetcher(arg))
        self.store(key, value)
        return value

    def invalidate(self, arg: Any = None) -> None:
        self.cache.delete(self.key_builder(arg))


# @FEAT:entity-cache @COMP:service @TYPE:core @DEPS:merchant-status-gate
class ProfileQuery(CachedQuery[MerchantProfile]):
    """
    머천트 프로필 조회

    - 응답 status가 PIN_BLOCKED/INACTIVE면 캐시에 쓰기 전에 MerchantStatusError
    - 403 PIN_BLOCKED/INACTIVE 응답도 MerchantStatusError (캐시 fallback 없음)
    - 그 외 401/403은 이전 캐시 프로필이 있으면 그것을 반환
    """

    BLOCKING_STATUSES = {
        MerchantStatus.PIN_BLOCKED.value: MerchantStatusErrorKind.PIN_BLOCKED,
        MerchantStatus.INACTIVE.value: MerchantStatusErrorKind.INACTIVE,
    }

    async def fetch(self, arg: Any = None, force: bool = False) -> MerchantProfile:
        key = self.key_builder(arg)

        if not force:
            cached = self.read_cached(key)
            if cached is not None:
                return cached

        try:
            raw = await self.fetcher(arg)
        except TransportError as e:
            return self._handle_transport_error(key, e)

        status = raw.get("status") if isinstance(raw, dict) else None
        kind = self.BLOCKING_STATUSES.get(status)
        if kind is not None:
            logger.error(f"❌ 머천트 상태 에러 감지: {kind.value}")
            raise MerchantStatusError(kind, profile=raw)

        profile = self.validate(raw)
        self.store(key, profile)
        logger.info("✅ 프로필 조회 및 캐시 완료")
        return profile

    def _handle_transport_error(self, key: str, error: TransportError) -> MerchantProfile:
        kind = classify(error.status_code, error.body)

        if kind is not None and should_trigger_logout(kind):
            logger.error(f"❌ 머천트 상태 에러 감지 (HTTP {error.status_code}): {kind.value}")
            raise MerchantStatusError(kind, profile=error.body.get("profile")) from error

        if error.status_code in (401, 403):
            cached = self.read_cached(key)
            if cached is not None:
                logger.warning(f"⚠️ 인증 오류({error.status_code}), 캐시된 프로필 반환")
                return cached

            if kind is not None:
                raise MerchantStatusError(kind, profile=error.body.get("profile")) from error

        logger.error(f"❌ 프로필 조회 실패: {error}")
        raise error


class EntityQueryCache:
    """
    주문/입금/프로필 조회 캐시

    Args:
        cache: 프로세스 공용 TTL 캐시 스토어
        api: MerchantAPIClient 호환 전송 계층
        ttl: 엔티티별 TTL (밀리초) 오버라이드
    """

    DEFAULT_TTL_MS = {
        "orders": 5 * 60 * 1000,
        "order": 30 * 1000,
        "deposits": 3 * 60 * 1000,
        "deposit": 2 * 60 * 1000,
        "profile": 10 * 60 * 1000,
    }

    def __init__(self, cache: TTLCacheStore, api: Any, ttl: Optional[dict] = None):
        self.cache = cache
        self.api = api
        ttl_ms = {**self.DEFAULT_TTL_MS, **(ttl or {})}

        self.orders: CachedQuery[List[MerchantOrder]] = CachedQuery(
            cache, "orders", CacheKey.orders, ttl_ms["orders"], api.get_orders, List[MerchantOrder]
        )
        self.order: CachedQuery[MerchantOrder] = CachedQuery(
            cache, "order", CacheKey.order, ttl_ms["order"], api.get_order, MerchantOrder
        )
        self.deposits: CachedQuery[List[MerchantDeposit]] = CachedQuery(
            cache, "deposits", CacheKey.deposits, ttl_ms["deposits"], api.get_deposits, List[MerchantDeposit]
        )
        self.deposit: CachedQuery[MerchantDeposit] = CachedQuery(
            cache, "deposit", CacheKey.deposit, ttl_ms["deposit"], api.get_deposit, MerchantDeposit
        )
        self.profile = ProfileQuery(
            cache, "profile", lambda _: CacheKey.PROFILE, ttl_ms["profile"],
            lambda _: api.get_profile(), MerchantProfile
        )

    async def fetch_orders(self, status: str, force: bool = False) -> List[MerchantOrder]:
        return await self.orders.fetch(status, force=force)

    async def fetch_order(self, order_id: str, force: bool = False) -> MerchantOrder:
        return await self.order.fetch(order_id, force=force)

    async def fetch_deposits(self, status: str, force: bool = False) -> List[MerchantDeposit]:
        return await self.deposits.fetch(status, force=force)

    async def fetch_deposit(self, deposit_id: str, force: bool = False) -> MerchantDeposit:
        return await self.deposit.fetch(deposit_id, force=force)

    async def fetch_profile(self, force: bool = False) -> MerchantProfile:
        return await self.profile.fetch(None, force=force)

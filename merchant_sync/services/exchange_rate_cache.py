# @FEAT:exchange-rate @COMP:service @TYPE:core @DEPS:ttl-cache
"""
환율 캐시 서비스

원화 통화별 환율표를 하루 단위로 캐싱하여 USD 환산을 제공합니다.

- USD 원화는 네트워크/캐시 조회 없이 항등 변환
- 신선도는 "로컬 달력 날짜" 기준. 통화별 환율표는 다음 로컬 자정에 만료되고
  공용 조회 시각 키가 없거나 오늘이 아니어도 갱신한다
  (23:59에 받은 환율은 00:00에 만료됨. 24시간 rolling window가 아님)
- 조회 실패 또는 ISO 형식이 아닌 통화 코드(USDC 등)는 {USD: 1, 원화: 1} 대체 테이블로 1:1 변환
"""

import asyncio
import logging
from collections import defaultdict
from datetime import date, datetime, time, timedelta
from typing import Awaitable, Callable, Dict, Optional

from merchant_sync.constants import CacheKey, USD
from merchant_sync.core.exceptions import CurrencyConversionError
from merchant_sync.storage.ttl_cache import TTLCacheStore

logger = logging.getLogger(__name__)

ExchangeRateTable = Dict[str, float]
RateFetcher = Callable[[str], Awaitable[ExchangeRateTable]]


class ExchangeRateCache:
    """
    일 단위 환율 캐시

    Args:
        cache: TTL 캐시 스토어 (환율표는 자정까지, 조회 시각은 만료 없이 저장).
            캐시 시계와 now는 같은 시간대를 가리켜야 한다
        fetch_rates: 환율 조회 협력자 (실패 시 예외)
        now: 현재 로컬 시각 반환 함수 (테스트에서 주입)
    """

    def __init__(
        self,
        cache: TTLCacheStore,
        fetch_rates: RateFetcher,
        now: Optional[Callable[[], datetime]] = None,
    ):
        self.cache = cache
        self.fetch_rates = fetch_rates
        self._now = now or datetime.now
        # 통화별 조회 직렬화 (동시 호출자가 같은 날 두 번 조회하지 않도록)
        self._locks: Dict[str, asyncio.Lock] = defaultdict(asyncio.Lock)

    @staticmethod
    def normalize_currency(source_currency: Optional[str]) -> str:
        """통화 코드 정규화 (None/빈 문자열은 USD)

        Raises:
            CurrencyConversionError: 문자열이 아니거나 공백뿐인 경우
        """
        if source_currency is None or source_currency == "":
            return USD
        if not isinstance(source_currency, str) or not source_currency.strip():
            raise CurrencyConversionError(
                f"Invalid currency code: {source_currency!r}",
                details={"currency": source_currency}
            )
        return source_currency.strip().upper()

    @staticmethod
    def is_fetchable(code: str) -> bool:
        """환율 API가 받는 ISO 4217 형식 여부"""
        return len(code) == 3 and code.isalpha()

    @staticmethod
    def fallback_table(source_currency: str) -> ExchangeRateTable:
        """조회 실패 시 사용하는 1:1 대체 테이블"""
        return {USD: 1.0, source_currency: 1.0}

    def _is_today(self, value: date) -> bool:
        today = self._now().date()
        return (value.year, value.month, value.day) == (today.year, today.month, today.day)

    def _should_update_rates(self) -> bool:
        """마지막 조회 시각이 없거나 오늘이 아니면 갱신 필요"""
        timestamp = self.cache.get(CacheKey.EXCHANGE_RATES_TIMESTAMP)
        if not timestamp:
            return True

        try:
            fetched_at = datetime.fromisoformat(timestamp)
        except (TypeError, ValueError):
            logger.warning(f"⚠️ 환율 조회 시각 형식 오류: {timestamp!r}")
            return True

        return not self._is_today(fetched_at.date())

    def _millis_until_midnight(self) -> int:
        """다음 로컬 자정까지 남은 밀리초 (환율표 TTL)"""
        now = self._now()
        midnight = datetime.combine(now.date() + timedelta(days=1), time.min)
        return max(1, int((midnight - now).total_seconds() * 1000))

    def get_cached_rates(self, source_currency: str) -> Optional[ExchangeRateTable]:
        """오늘자 캐시 환율표 (없거나 오래되었으면 None)"""
        rates = self.cache.get(CacheKey.exchange_rates(source_currency))
        if not isinstance(rates, dict) or not rates:
            return None
        if self._should_update_rates():
            return None
        return rates

    # @FEAT:exchange-rate @COMP:service @TYPE:core
    async def get_rates(self, source_currency: Optional[str]) -> ExchangeRateTable:
        """원화 통화 기준 환율표 조회

        Returns:
            {통화 코드: 배수}
        """
        source = self.normalize_currency(source_currency)
        if source == USD:
            return {USD: 1.0}

        if not self.is_fetchable(source):
            logger.warning(f"⚠️ 조회할 수 없는 통화 코드, 1:1 대체 테이블 사용: {source}")
            return self.fallback_table(source)

        async with self._locks[source]:
            cached = self.get_cached_rates(source)
            if cached is not None:
                logger.debug(f"💱 환율 캐시 HIT: {source}")
                return cached

            try:
                rates = await self.fetch_rates(source)
                if not isinstance(rates, dict) or not rates:
                    raise ValueError("empty exchange rate table")
            except Exception as e:
                logger.warning(f"⚠️ 환율 조회 실패, 1:1 대체 테이블 사용 - {source}: {e}")
                return self.fallback_table(source)

            try:
                self.cache.set(CacheKey.exchange_rates(source), rates, ttl_ms=self._millis_until_midnight())
                self.cache.set(CacheKey.EXCHANGE_RATES_TIMESTAMP, self._now().isoformat())
            except Exception as e:
                # 저장 실패는 다음 호출에서 재조회로 이어질 뿐
                logger.error(f"❌ 환율 캐시 저장 실패 - {source}: {e}")

            logger.info(f"✅ 환율 갱신 완료: {source} ({len(rates)}개 통화)")
            return rates

    # @FEAT:exchange-rate @COMP:service @TYPE:core
    async def convert_to_usd(self, source_currency: Optional[str], amount: float) -> float:
        """금액을 USD로 환산

        USD 배수가 없으면 금액을 그대로 반환한다.
        """
        source = self.normalize_currency(source_currency)
        if source == USD:
            return amount

        rates = await self.get_rates(source)
        usd_rate = rates.get(USD)
        if not usd_rate:
            return amount
        return amount * usd_rate

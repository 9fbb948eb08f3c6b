# @FEAT:exchange-rate @COMP:client @TYPE:integration
"""
환율 조회 클라이언트

원화 통화 기준 최신 환율표({통화: 배수})를 조회합니다.
실패 시 예외를 그대로 던지며, 대체 테이블 생성은 ExchangeRateCache가 담당합니다.
"""

import logging
from typing import Dict, Optional

import httpx

from merchant_sync.core.exceptions import TransportError, TransportNetworkError

logger = logging.getLogger(__name__)


class ExchangeRateProvider:
    """공개 환율 API 클라이언트

    응답 형식: {"result": "success", "rates": {"USD": 1.0, "EUR": 0.92, ...}}
    """

    def __init__(
        self,
        url_template: str,
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.url_template = url_template
        self.client = httpx.AsyncClient(timeout=timeout, transport=transport)

    async def fetch_exchange_rates(self, source_currency: str) -> Dict[str, float]:
        """환율표 조회

        Raises:
            TransportError: non-2xx 응답 또는 rates 누락
            TransportNetworkError: 네트워크 오류
        """
        url = self.url_template.format(currency=source_currency)
        logger.info(f"📡 환율 조회: {source_currency}")

        try:
            response = await self.client.get(url)
        except httpx.RequestError as e:
            raise TransportNetworkError(
                message=f"Exchange rate request failed: {source_currency}",
                details={"url": url, "error": str(e)}
            ) from e

        if response.status_code != 200:
            raise TransportError(
                message=f"Exchange rate API error: {response.status_code}",
                status_code=response.status_code,
                details={"url": url}
            )

        data = response.json()
        rates = data.get("rates") if isinstance(data, dict) else None
        if not isinstance(rates, dict) or not rates:
            raise TransportError(
                message="Exchange rate response has no rates",
                status_code=response.status_code,
                details={"url": url}
            )

        return {str(code): float(value) for code, value in rates.items()}

    async def close(self) -> None:
        await self.client.aclose()

# @FEAT:merchant-api @COMP:client @TYPE:integration
"""
Merchant REST API 클라이언트

조회 API는 응답 envelope(orders, order, deposits, deposit, profile)를 벗겨
디코딩된 JSON dict를 반환합니다 (캐시와 스키마 검증은 EntityQueryCache 책임).
캐시하지 않는 쓰기 API는 응답을 바로 스키마로 검증해 반환합니다.
"""

import logging
from typing import Any, Dict, List, Optional, Type, TypeVar

from pydantic import BaseModel, ValidationError

from merchant_sync.clients.http_client import AsyncHTTPClient
from merchant_sync.core.exceptions import ValidationException
from merchant_sync.schemas import CreateOrderResult, DepositResponse, MerchantProfile, OrderResponse

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=BaseModel)


def _parse(model: Type[M], payload: Any) -> M:
    """쓰기 API 응답 검증"""
    try:
        return model.model_validate(payload)
    except ValidationError as e:
        logger.error(f"❌ {model.__name__} 응답 검증 실패: {e.error_count()}개 오류")
        raise ValidationException(
            f"Invalid {model.__name__} payload",
            details={"errors": e.errors(include_url=False)}
        ) from e


class MerchantAPIClient:
    """Merchant API 엔드포인트 모음"""

    ORDERS_PATH = "functions/v1/orders"
    DEPOSITS_PATH = "functions/v1/deposits"
    MERCHANTS_PATH = "functions/v1/merchants"

    def __init__(self, http: AsyncHTTPClient):
        self.http = http

    # ---- orders ----

    async def get_orders(self, status: str) -> List[Dict[str, Any]]:
        response = await self.http.get(self.ORDERS_PATH, params={"status": status})
        return (response or {}).get("orders") or []

    async def get_order(self, order_id: str) -> Dict[str, Any]:
        response = await self.http.get(f"{self.ORDERS_PATH}/{order_id}")
        return response["order"]

    async def create_order(
        self,
        display_amount: float,
        display_currency: str,
        description: Optional[str] = None,
        redirect_uri: Optional[str] = None,
    ) -> CreateOrderResult:
        """주문 생성 (캐시하지 않음)

        Returns:
            {success, data?, error?, message?} envelope
        """
        payload: Dict[str, Any] = {
            "display_amount": display_amount,
            "display_currency": display_currency,
        }
        if description is not None:
            payload["description"] = description
        if redirect_uri is not None:
            payload["redirect_uri"] = redirect_uri

        logger.info(f"📝 주문 생성 요청: {display_amount} {display_currency}")
        return _parse(CreateOrderResult, await self.http.post(self.ORDERS_PATH, json=payload))

    async def regenerate_payment(self, order_id: str, preferred_token_id: Optional[str] = None) -> OrderResponse:
        """만료된 주문의 결제 링크 재생성"""
        response = await self.http.post(
            f"{self.ORDERS_PATH}/{order_id}/regenerate-payment",
            json={"preferred_token_id": preferred_token_id},
        )
        return _parse(OrderResponse, response)

    # ---- deposits ----

    async def get_deposits(self, status: str) -> List[Dict[str, Any]]:
        response = await self.http.get(self.DEPOSITS_PATH, params={"status": status})
        return (response or {}).get("deposits") or []

    async def get_deposit(self, deposit_id: str) -> Dict[str, Any]:
        response = await self.http.get(f"{self.DEPOSITS_PATH}/{deposit_id}")
        return response["deposit"]

    async def create_deposit(
        self,
        display_amount: float,
        display_currency: str,
        redirect_uri: Optional[str] = None,
    ) -> DepositResponse:
        """입금 생성 (캐시하지 않음)"""
        payload: Dict[str, Any] = {
            "display_amount": display_amount,
            "display_currency": display_currency,
        }
        if redirect_uri is not None:
            payload["redirect_uri"] = redirect_uri

        logger.info(f"📝 입금 생성 요청: {display_amount} {display_currency}")
        return _parse(DepositResponse, await self.http.post(self.DEPOSITS_PATH, json=payload))

    # ---- profile ----

    async def get_profile(self) -> Dict[str, Any]:
        response = await self.http.get(self.MERCHANTS_PATH)
        return response["profile"]

    async def update_profile(self, payload: Dict[str, Any]) -> MerchantProfile:
        response = await self.http.put(self.MERCHANTS_PATH, json=payload)
        return _parse(MerchantProfile, response["profile"])

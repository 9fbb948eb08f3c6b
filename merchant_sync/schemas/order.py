"""
주문 스키마

주문 조회 및 생성 응답 검증
"""

from datetime import datetime
from typing import Any, Dict, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from merchant_sync.constants import RemoteStatus


class MerchantOrder(BaseModel):
    """
    머천트 주문

    서버가 추가 필드를 내려도 무시한다 (callback_payload 등 대용량 필드는 원본 dict 유지).
    """

    model_config = ConfigDict(extra="ignore", use_enum_values=False)

    order_id: str = Field(..., description="주문 ID")
    merchant_id: str = Field(..., description="머천트 ID")
    status: RemoteStatus = Field(..., description="주문 상태")
    payment_id: Optional[str] = Field(None, description="결제 ID")
    display_amount: Optional[float] = Field(None, description="표시 금액")
    display_currency: Optional[str] = Field(None, description="표시 통화")
    required_amount_usd: Optional[float] = Field(None, description="USD 환산 금액")
    required_token: Optional[str] = Field(None, description="요구 토큰")
    description: Optional[str] = Field(None, description="주문 설명")
    number: Optional[Union[str, int]] = Field(None, description="주문 번호")
    payment_url: Optional[str] = Field(None, description="결제 URL")
    qrcode: Optional[str] = Field(None, description="QR 코드 URL")
    source_txn_hash: Optional[str] = Field(None, description="소스 트랜잭션 해시")
    source_chain_name: Optional[str] = Field(None, description="소스 체인")
    callback_payload: Optional[Dict[str, Any]] = Field(None, description="결제 콜백 원본")
    created_at: Optional[str] = Field(None, description="생성 시각")
    updated_at: Optional[str] = Field(None, description="갱신 시각")
    expired_at: Optional[datetime] = Field(None, description="만료 시각")


class OrderResponse(BaseModel):
    """주문 생성/결제 재생성 응답"""

    model_config = ConfigDict(extra="ignore")

    order_id: str
    qrcode: Optional[str] = None
    order_number: Optional[Union[str, int]] = None
    expired_at: Optional[datetime] = None
    payment_detail: Optional[Dict[str, Any]] = Field(None, alias="paymentDetail")


class CreateOrderResult(BaseModel):
    """주문 생성 응답 envelope ({success, data?, error?, message?})"""

    model_config = ConfigDict(extra="ignore")

    success: bool = False
    data: Optional[OrderResponse] = None
    error: Optional[str] = None
    message: Optional[str] = None

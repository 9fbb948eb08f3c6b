"""
입금 스키마
"""

from typing import Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from merchant_sync.constants import RemoteStatus


class MerchantDeposit(BaseModel):
    """
    머천트 입금

    입금도 실시간 이벤트에서는 order_id로 식별된다.
    """

    model_config = ConfigDict(extra="ignore")

    order_id: str = Field(..., description="입금 ID")
    merchant_id: Optional[str] = Field(None, description="머천트 ID")
    status: RemoteStatus = Field(..., description="입금 상태")
    display_amount: Optional[float] = Field(None, description="표시 금액")
    display_currency: Optional[str] = Field(None, description="표시 통화")
    required_amount_usd: Optional[float] = Field(None, description="USD 환산 금액")
    number: Optional[Union[str, int]] = Field(None, description="입금 번호")
    payment_url: Optional[str] = Field(None, description="결제 URL")
    qrcode: Optional[str] = Field(None, description="QR 코드 URL")
    created_at: Optional[str] = Field(None, description="생성 시각")
    updated_at: Optional[str] = Field(None, description="갱신 시각")


class DepositResponse(BaseModel):
    """입금 생성 응답"""

    model_config = ConfigDict(extra="ignore")

    deposit_id: str
    qrcode: Optional[str] = None
    order_number: Optional[Union[str, int]] = None

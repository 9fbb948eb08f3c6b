"""
머천트 프로필 스키마
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from merchant_sync.constants import MerchantStatus


class MerchantProfile(BaseModel):
    """머천트 프로필"""

    model_config = ConfigDict(extra="ignore")

    merchant_id: str = Field(..., description="머천트 ID (실시간 채널 이름)")
    status: MerchantStatus = Field(MerchantStatus.ACTIVE, description="계정 상태")
    email: Optional[str] = None
    display_name: Optional[str] = None
    description: Optional[str] = None
    logo_url: Optional[str] = None
    default_currency: Optional[str] = Field(None, description="기본 통화 (환율 변환 원화)")
    default_language: Optional[str] = Field(None, description="기본 언어 (음성 안내)")
    default_token_id: Optional[str] = None
    wallet_address: Optional[str] = None
    stellar_address: Optional[str] = None
    has_pin: bool = False
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

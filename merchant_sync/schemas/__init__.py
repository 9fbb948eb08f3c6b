"""
Pydantic 스키마 패키지
"""

from merchant_sync.schemas.order import CreateOrderResult, MerchantOrder, OrderResponse
from merchant_sync.schemas.deposit import MerchantDeposit, DepositResponse
from merchant_sync.schemas.merchant import MerchantProfile
from merchant_sync.schemas.events import (
    PaymentCompletedEvent,
    EVENT_MODELS,
    parse_realtime_event,
)

__all__ = [
    "MerchantOrder",
    "OrderResponse",
    "CreateOrderResult",
    "MerchantDeposit",
    "DepositResponse",
    "MerchantProfile",
    "PaymentCompletedEvent",
    "EVENT_MODELS",
    "parse_realtime_event",
]

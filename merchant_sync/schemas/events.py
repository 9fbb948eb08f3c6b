"""
실시간 이벤트 스키마

이벤트 이름별로 닫힌 모델을 사용한다. 등록되지 않은 이벤트 이름이나
검증에 실패한 payload는 호출자에게 전달하지 않는다.
"""

import logging
from types import MappingProxyType
from typing import Any, Mapping, Optional, Type

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from merchant_sync.constants import RealtimeEvent

logger = logging.getLogger(__name__)


class PaymentCompletedEvent(BaseModel):
    """결제 완료 이벤트 (주문/입금 공통)"""

    model_config = ConfigDict(extra="ignore", frozen=True)

    order_id: str = Field(..., min_length=1, description="완료된 주문/입금 ID")
    display_amount: Optional[float] = None
    display_currency: Optional[str] = None
    message: Optional[str] = None
    timestamp: Optional[str] = None


# 내장 이벤트 목록 (읽기 전용). 이벤트 이름을 바꾸려면 채널에 별도 목록을 넘긴다
EVENT_MODELS: Mapping[str, Type[BaseModel]] = MappingProxyType({
    RealtimeEvent.PAYMENT_COMPLETED: PaymentCompletedEvent,
})


def parse_realtime_event(
    event_name: str,
    payload: Any,
    models: Optional[Mapping[str, Type[BaseModel]]] = None,
) -> Optional[BaseModel]:
    """이벤트 payload를 이벤트 이름에 맞는 모델로 변환

    Args:
        models: 이벤트 이름 → 모델 목록 (기본값 EVENT_MODELS)

    Returns:
        검증된 모델. 알 수 없는 이벤트이거나 형식이 맞지 않으면 None
    """
    model = (EVENT_MODELS if models is None else models).get(event_name)
    if model is None:
        logger.warning(f"⚠️ 알 수 없는 실시간 이벤트 무시: {event_name}")
        return None

    try:
        return model.model_validate(payload)
    except ValidationError as e:
        logger.warning(
            f"⚠️ 실시간 이벤트 형식 오류 - event={event_name}, "
            f"errors={e.error_count()}"
        )
        return None


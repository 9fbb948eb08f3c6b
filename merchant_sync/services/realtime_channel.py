# @FEAT:realtime-channel @COMP:service @TYPE:core
"""
실시간 상태 채널

머천트 ID와 같은 이름의 채널을 구독하고 이벤트 이름으로만 역다중화합니다.
엔티티 ID 매칭은 호출자 책임입니다.

실시간 전달은 best-effort이므로 구독/해제 실패는 로그만 남기고 삼킨다.
(폴링 fallback을 막거나 죽이면 안 됨)
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Dict, Mapping, Optional, Protocol, Type

from pydantic import BaseModel

from merchant_sync.schemas.events import EVENT_MODELS, parse_realtime_event

logger = logging.getLogger(__name__)

EventCallback = Callable[[BaseModel], None]


class RealtimeTransport(Protocol):
    """실시간 전송 협력자 (PusherRealtimeClient 호환)"""

    def subscribe_to_channel(self, channel_name: str, event_name: str, handler: Callable[[Any], None]) -> Awaitable[Any]:
        ...

    def unsubscribe_from_channel(self, channel_name: str) -> Awaitable[None]:
        ...


@dataclass
class ChannelSubscription:
    """구독 핸들 (생성한 동기화기 인스턴스가 단독 소유)"""
    channel_name: str
    event_name: str
    handler: EventCallback
    active: bool = field(default=True)


class RealtimeStatusChannel:
    """머천트 채널 구독 세션 관리

    Args:
        transport: 실시간 전송 계층
        event_models: 이벤트 이름 → payload 모델 (기본값은 내장 이벤트 목록)
    """

    def __init__(
        self,
        transport: RealtimeTransport,
        event_models: Optional[Mapping[str, Type[BaseModel]]] = None,
    ):
        self.transport = transport
        self.event_models: Dict[str, Type[BaseModel]] = dict(EVENT_MODELS if event_models is None else event_models)
        self._subscriptions: Dict[str, ChannelSubscription] = {}

    def get_subscription(self, channel_id: str) -> Optional[ChannelSubscription]:
        return self._subscriptions.get(channel_id)

    # @FEAT:realtime-channel @COMP:service @TYPE:core
    async def subscribe(self, channel_id: str, event_name: str, on_event: EventCallback) -> Optional[ChannelSubscription]:
        """채널 구독

        Returns:
            구독 핸들. 전송 계층 실패 시 None (예외를 던지지 않음)
        """
        subscription = ChannelSubscription(channel_name=channel_id, event_name=event_name, handler=on_event)

        def _dispatch(payload: Any) -> None:
            if not subscription.active:
                return
            event = parse_realtime_event(event_name, payload, self.event_models)
            if event is None:
                return
            on_event(event)

        try:
            await self.transport.subscribe_to_channel(channel_id, event_name, _dispatch)
        except Exception as e:
            logger.warning(f"⚠️ 채널 구독 실패 (폴링으로 대체) - channel={channel_id}, event={event_name}: {e}")
            return None

        previous = self._subscriptions.get(channel_id)
        if previous is not None:
            if previous.active:
                logger.warning(
                    f"⚠️ 활성 구독 대체 - channel={channel_id}, "
                    f"이전 구독({previous.event_name})은 폴링으로만 갱신됨"
                )
            previous.active = False
        self._subscriptions[channel_id] = subscription

        logger.info(f"🔌 채널 구독: {channel_id} ({event_name})")
        return subscription

    # @FEAT:realtime-channel @COMP:service @TYPE:core
    async def unsubscribe(self, channel_id: str, subscription: Optional[ChannelSubscription] = None) -> None:
        """채널 구독 해제 (구독이 없으면 no-op, 실패는 로그만)

        Args:
            channel_id: 채널 이름
            subscription: 해제할 구독 핸들. 이미 다른 구독으로 대체되었다면
                그 핸들만 비활성화하고 채널은 유지한다
        """
        current = self._subscriptions.get(channel_id)

        if subscription is not None and subscription is not current:
            subscription.active = False
            logger.debug(f"구독 핸들 비활성화 (채널은 다른 구독이 사용 중): {channel_id}")
            return

        if current is None:
            return

        del self._subscriptions[channel_id]
        current.active = False

        try:
            await self.transport.unsubscribe_from_channel(channel_id)
        except Exception as e:
            logger.warning(f"⚠️ 채널 구독 해제 실패 (무시) - channel={channel_id}: {e}")
            return

        logger.info(f"🔌 채널 구독 해제: {channel_id}")

# @FEAT:status-sync @COMP:service @TYPE:core @DEPS:realtime-channel,entity-cache
"""
결제/입금 상태 동기화기

폴링 결과와 실시간 이벤트를 하나의 상태로 조정하는 엔티티별 상태 머신.

상태 전이:
    PENDING → COMPLETED   (실시간 완료 이벤트 또는 원격 상태 COMPLETED)
    PENDING → FAILED      (원격 상태 FAILED)
    COMPLETED, FAILED는 종료 상태 (먼저 도착한 입력이 이기고 나머지는 no-op)

생명주기:
    mount   → 상태 PENDING 초기화, 새 LifecycleToken 발급, 채널 구독
    unmount → 토큰 무효화, 상태 초기화, 구독 해제 (실패 허용)

비동기 재개 지점(채널 이벤트, 폴링 완료)마다 토큰의 alive를 확인하여
이전 엔티티의 늦은 콜백이 새 엔티티 상태를 바꾸지 못하게 한다.
네트워크 요청 자체를 취소하지는 않고 결과만 버린다.
"""

import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Awaitable, Callable, List, Optional

from merchant_sync.constants import PaymentStatus, RealtimeEvent, RemoteStatus
from merchant_sync.core.exceptions import TransportError
from merchant_sync.schemas.events import PaymentCompletedEvent
from merchant_sync.services.merchant_status import MerchantStatusError, classify
from merchant_sync.services.realtime_channel import ChannelSubscription, RealtimeStatusChannel
from merchant_sync.services.speech_service import Announcer, announce_payment

logger = logging.getLogger(__name__)

EntityFetcher = Callable[[str, bool], Awaitable[Any]]
StatusListener = Callable[[PaymentStatus], None]
MerchantStatusErrorCallback = Callable[[MerchantStatusError], Any]


class LifecycleToken:
    """mount 주기 하나에 대응하는 취소 토큰"""

    __slots__ = ("alive", "in_flight")

    def __init__(self):
        self.alive = True
        self.in_flight = 0

    def cancel(self) -> None:
        self.alive = False


class StatusSynchronizer:
    """
    엔티티 상태 동기화기 (기본 클래스)

    Args:
        channel: 실시간 상태 채널
        fetch_entity: (entity_id, force) → status 속성을 가진 엔티티
        event_name: 완료 이벤트 이름
        on_merchant_status_error: 폴링 중 머천트 상태 에러 전달 대상
    """

    entity_label = "entity"

    def __init__(
        self,
        channel: RealtimeStatusChannel,
        fetch_entity: EntityFetcher,
        event_name: str = RealtimeEvent.PAYMENT_COMPLETED,
        on_merchant_status_error: Optional[MerchantStatusErrorCallback] = None,
    ):
        self.channel = channel
        self.fetch_entity = fetch_entity
        self.event_name = event_name
        self.on_merchant_status_error = on_merchant_status_error

        self.merchant_id: Optional[str] = None
        self.entity_id: Optional[str] = None
        self.last_event: Optional[PaymentCompletedEvent] = None

        self._status = PaymentStatus.PENDING
        self._token: Optional[LifecycleToken] = None
        self._subscription: Optional[ChannelSubscription] = None
        self._listeners: List[StatusListener] = []

    # ---- 상태 조회 ----

    @property
    def status(self) -> PaymentStatus:
        return self._status

    @property
    def is_pending(self) -> bool:
        return self._status == PaymentStatus.PENDING

    @property
    def is_completed(self) -> bool:
        return self._status == PaymentStatus.COMPLETED

    @property
    def is_failed(self) -> bool:
        return self._status == PaymentStatus.FAILED

    @property
    def is_loading(self) -> bool:
        return self._token is not None and self._token.in_flight > 0

    @property
    def is_mounted(self) -> bool:
        return self._token is not None and self._token.alive

    def add_listener(self, listener: StatusListener) -> None:
        self._listeners.append(listener)

    def remove_listener(self, listener: StatusListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    # ---- 생명주기 ----

    # @FEAT:status-sync @COMP:service @TYPE:core
    async def mount(self, merchant_id: Optional[str], entity_id: Optional[str]) -> None:
        """(merchant_id, entity_id) 쌍 감시 시작

        이미 다른 쌍을 감시 중이면 이전 구독을 먼저 해제한다.
        둘 중 하나라도 없으면 상태만 초기화하고 구독하지 않는다.
        """
        if self.is_mounted:
            if (self.merchant_id, self.entity_id) == (merchant_id, entity_id):
                return
            await self.unmount()

        token = LifecycleToken()
        self._token = token
        self.merchant_id = merchant_id
        self.entity_id = entity_id
        self.last_event = None
        self._status = PaymentStatus.PENDING

        if not merchant_id or not entity_id:
            return

        subscription = await self.channel.subscribe(
            merchant_id,
            self.event_name,
            lambda event: self._on_realtime_event(event, token, entity_id),
        )

        if not token.alive:
            # 구독 대기 중 unmount된 경우: 늦게 열린 구독을 바로 닫는다
            if subscription is not None:
                await self.channel.unsubscribe(merchant_id, subscription)
            return

        self._subscription = subscription
        logger.debug(f"👀 {self.entity_label} 상태 감시 시작: {entity_id} (merchant={merchant_id})")

    # @FEAT:status-sync @COMP:service @TYPE:core
    async def unmount(self) -> None:
        """감시 종료 (구독 해제 실패는 허용)"""
        token = self._token
        if token is None or not token.alive:
            return

        token.cancel()
        self._status = PaymentStatus.PENDING

        subscription, self._subscription = self._subscription, None
        if self.merchant_id and subscription is not None:
            await self.channel.unsubscribe(self.merchant_id, subscription)

        logger.debug(f"{self.entity_label} 상태 감시 종료: {self.entity_id}")

    async def rebind(self, merchant_id: Optional[str], entity_id: Optional[str]) -> None:
        """감시 대상 변경 (이전 구독 해제 후 새 쌍으로 mount)"""
        await self.mount(merchant_id, entity_id)

    async def unsubscribe(self) -> None:
        """실시간 구독만 해제 (상태와 폴링은 유지)"""
        subscription, self._subscription = self._subscription, None
        if self.merchant_id and subscription is not None:
            await self.channel.unsubscribe(self.merchant_id, subscription)

    @asynccontextmanager
    async def watch(self, merchant_id: Optional[str], entity_id: Optional[str]) -> AsyncIterator["StatusSynchronizer"]:
        """mount/unmount 범위를 묶는 컨텍스트 매니저"""
        await self.mount(merchant_id, entity_id)
        try:
            yield self
        finally:
            await self.unmount()

    # ---- 입력 ----

    def _on_realtime_event(self, event: PaymentCompletedEvent, token: LifecycleToken, entity_id: str) -> None:
        if not token.alive:
            logger.debug(f"unmount 이후 도착한 이벤트 무시: {event.order_id}")
            return

        if event.order_id != entity_id:
            return

        self.last_event = event
        self._transition(PaymentStatus.COMPLETED, source="realtime")

    # @FEAT:status-sync @COMP:service @TYPE:core
    async def check_status(self, force: bool = False) -> PaymentStatus:
        """폴링으로 상태 확인

        Args:
            force: True면 캐시를 건너뛰고 전송 계층 조회

        Returns:
            확인 후 상태. 실패는 PENDING 유지로만 드러난다
        """
        token = self._token
        entity_id = self.entity_id
        if token is None or not token.alive or not entity_id:
            return self._status

        token.in_flight += 1
        try:
            entity = await self.fetch_entity(entity_id, force)
        except MerchantStatusError as e:
            self._forward_merchant_status_error(e, token)
            return self._status
        except TransportError as e:
            kind = classify(e.status_code, e.body)
            if kind is not None:
                self._forward_merchant_status_error(MerchantStatusError(kind), token)
            else:
                logger.warning(f"⚠️ {self.entity_label} 상태 폴링 실패: {entity_id} ({e})")
            return self._status
        except Exception as e:
            logger.warning(f"⚠️ {self.entity_label} 상태 폴링 실패: {entity_id} ({e})")
            return self._status
        finally:
            token.in_flight -= 1

        if not token.alive:
            logger.debug(f"unmount 이후 도착한 폴링 결과 무시: {entity_id}")
            return self._status

        remote_status = getattr(entity, "status", None)
        self._transition(RemoteStatus.to_payment_status(remote_status), source="poll")
        return self._status

    def _forward_merchant_status_error(self, error: MerchantStatusError, token: LifecycleToken) -> None:
        if not token.alive:
            return
        if self.on_merchant_status_error is None:
            logger.error(f"❌ 머천트 상태 에러 (처리기 없음): {error.kind.value}")
            return
        self.on_merchant_status_error(error)

    def _transition(self, new_status: PaymentStatus, source: str) -> bool:
        """상태 전이 (종료 상태에서는 무시)"""
        if self._status.is_terminal or new_status == PaymentStatus.PENDING:
            return False

        self._status = new_status
        logger.info(f"✅ {self.entity_label} {self.entity_id} → {new_status.value} (via {source})")

        for listener in list(self._listeners):
            try:
                listener(new_status)
            except Exception as e:
                logger.error(f"❌ 상태 리스너 오류: {e}", exc_info=True)
        return True


class PaymentStatusSynchronizer(StatusSynchronizer):
    """주문 결제 상태 동기화기 (완료 음성 안내 포함)"""

    entity_label = "order"

    def __init__(
        self,
        channel: RealtimeStatusChannel,
        fetch_entity: EntityFetcher,
        announcer: Optional[Announcer] = None,
        **kwargs,
    ):
        super().__init__(channel, fetch_entity, **kwargs)
        self.announcer = announcer

    async def announce_completion(
        self,
        amount: float,
        currency: str,
        language: str,
        on_end: Optional[Callable[[], None]] = None,
    ) -> bool:
        """결제 완료 음성 안내 (실패는 상태에 반영하지 않음)"""
        if self.announcer is None:
            return False
        return await announce_payment(self.announcer, amount, currency, language, on_end=on_end)


class DepositStatusSynchronizer(StatusSynchronizer):
    """입금 상태 동기화기"""

    entity_label = "deposit"

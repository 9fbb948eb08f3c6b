"""
Pusher Channels WebSocket 클라이언트

Pusher 프로토콜(protocol=7)로 머천트 채널을 구독하고 이벤트를 전달합니다.
전달 보장은 하지 않으며 재연결 사이에 발생한 이벤트는 유실될 수 있습니다.

@FEAT:realtime-channel @COMP:client @TYPE:websocket-integration
"""

import asyncio
import json
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, Optional

import websockets

logger = logging.getLogger(__name__)

EventHandler = Callable[[Any], None]


@dataclass
class ChannelBinding:
    """채널별 이벤트 바인딩 (채널당 1개)"""
    channel_name: str
    event_name: str
    handler: EventHandler


# @FEAT:realtime-channel @COMP:client @TYPE:websocket-integration
class PusherRealtimeClient:
    """Pusher 실시간 전송 클라이언트

    핵심 기능:
    - 단일 WebSocket 연결 + 수신 태스크
    - 채널 구독/해제 (pusher:subscribe / pusher:unsubscribe)
    - pusher:ping → pusher:pong 응답
    - 연결 끊김 시 재연결 후 기존 채널 재구독
    """

    PROTOCOL_VERSION = 7
    CLIENT_NAME = "merchant-sync-python"

    def __init__(
        self,
        app_key: str,
        cluster: str = "mt1",
        max_reconnect_attempts: int = 5,
        reconnect_delay: float = 2.0,
        connector: Optional[Callable[[str], Awaitable[Any]]] = None,
    ):
        """
        Args:
            app_key: Pusher App Key
            cluster: Pusher Cluster
            max_reconnect_attempts: 연결 끊김 시 재연결 시도 횟수
            reconnect_delay: 재연결 기본 지연 (초)
            connector: WebSocket 연결 함수 (테스트에서 주입)
        """
        self.app_key = app_key
        self.cluster = cluster
        self.max_reconnect_attempts = max_reconnect_attempts
        self.reconnect_delay = reconnect_delay
        self._connector = connector or websockets.connect

        self.ws = None
        self.socket_id: Optional[str] = None
        self._bindings: Dict[str, ChannelBinding] = {}
        self._receive_task: Optional[asyncio.Task] = None
        self._connect_lock = asyncio.Lock()
        self._running = False

    @property
    def url(self) -> str:
        return (
            f"wss://ws-{self.cluster}.pusher.com/app/{self.app_key}"
            f"?protocol={self.PROTOCOL_VERSION}&client={self.CLIENT_NAME}&version=1.0.0"
        )

    @property
    def is_connected(self) -> bool:
        return self.ws is not None and self._running

    async def connect(self) -> None:
        """WebSocket 연결 (이미 연결되어 있으면 no-op)"""
        async with self._connect_lock:
            if self.is_connected:
                return

            logger.debug("[Pusher] Connecting to Pusher...")
            self.ws = await self._connector(self.url)

            # 첫 메시지는 pusher:connection_established
            established = json.loads(await self.ws.recv())
            if established.get("event") != "pusher:connection_established":
                await self.ws.close()
                self.ws = None
                raise ConnectionError(f"Unexpected handshake event: {established.get('event')}")

            self.socket_id = self._decode_data(established.get("data")).get("socket_id")
            self._running = True
            self._receive_task = asyncio.create_task(self._receive_messages())
            logger.info(f"✅ Pusher 연결 완료 - socket_id={self.socket_id}")

    async def disconnect(self) -> None:
        """연결 종료 및 바인딩 제거"""
        self._running = False
        self._bindings.clear()

        if self._receive_task and not self._receive_task.done():
            self._receive_task.cancel()
            try:
                await self._receive_task
            except asyncio.CancelledError:
                logger.debug("[Pusher] 수신 태스크 취소 완료")

        if self.ws is not None:
            await self.ws.close()
            self.ws = None

        logger.info("🔌 Pusher 연결 종료")

    async def subscribe_to_channel(self, channel_name: str, event_name: str, handler: EventHandler) -> ChannelBinding:
        """채널 구독 및 이벤트 바인딩

        같은 채널을 다시 구독하면 기존 바인딩을 대체한다.
        """
        await self.connect()

        binding = ChannelBinding(channel_name=channel_name, event_name=event_name, handler=handler)
        already_subscribed = channel_name in self._bindings
        self._bindings[channel_name] = binding

        if not already_subscribed:
            logger.debug(f"[Pusher] Subscribing to channel: {channel_name}")
            await self._send("pusher:subscribe", {"channel": channel_name})

        return binding

    async def unsubscribe_from_channel(self, channel_name: str) -> None:
        """채널 구독 해제 (구독 중이 아니면 no-op)"""
        if self._bindings.pop(channel_name, None) is None:
            return

        if self.is_connected:
            await self._send("pusher:unsubscribe", {"channel": channel_name})
            logger.debug(f"[Pusher] Unsubscribed from channel: {channel_name}")

    async def _send(self, event: str, data: Dict[str, Any]) -> None:
        await self.ws.send(json.dumps({"event": event, "data": data}))

    @staticmethod
    def _decode_data(data: Any) -> Any:
        """Pusher는 data를 JSON 문자열로 보낸다"""
        if isinstance(data, str):
            try:
                return json.loads(data)
            except json.JSONDecodeError:
                return data
        return data if data is not None else {}

    async def _receive_messages(self) -> None:
        """WebSocket 메시지 수신 루프"""
        try:
            async for message in self.ws:
                if not self._running:
                    break

                try:
                    await self.on_message(json.loads(message))
                except json.JSONDecodeError as e:
                    logger.error(f"❌ JSON 파싱 실패: {e}, 메시지: {str(message)[:200]}...")

        except websockets.exceptions.ConnectionClosed:
            logger.warning("⚠️ Pusher WebSocket 연결 끊김")
            if self._running:
                await self._reconnect()
        except asyncio.CancelledError:
            raise
        except Exception as e:
            logger.error(f"❌ Pusher 수신 오류: {e}", exc_info=True)
            if self._running:
                await self._reconnect()

    async def on_message(self, message: Dict[str, Any]) -> None:
        """수신 메시지 처리"""
        event = message.get("event", "")

        if event == "pusher:ping":
            await self._send("pusher:pong", {})
            return

        if event == "pusher:error":
            logger.error(f"❌ Pusher 오류: {message.get('data')}")
            return

        if event.startswith("pusher"):
            logger.debug(f"[Pusher] 시스템 이벤트: {event} ({message.get('channel')})")
            return

        channel_name = message.get("channel")
        binding = self._bindings.get(channel_name)
        if binding is None or binding.event_name != event:
            return

        data = self._decode_data(message.get("data"))
        logger.debug(f'[Pusher] Event "{event}" matched on channel "{channel_name}"')

        try:
            binding.handler(data)
        except Exception as e:
            logger.error(f"❌ 이벤트 핸들러 오류 - channel={channel_name}, event={event}: {e}", exc_info=True)

    async def _reconnect(self) -> None:
        """재연결 후 기존 채널 재구독"""
        self.ws = None
        self._running = False
        bindings = list(self._bindings.values())

        for attempt in range(self.max_reconnect_attempts):
            delay = self.reconnect_delay * (2 ** attempt)
            logger.info(f"🔄 Pusher 재연결 시도 {attempt + 1}/{self.max_reconnect_attempts} ({delay}s 후)")
            await asyncio.sleep(delay)

            try:
                # connect()는 새 수신 태스크를 만들고 이 태스크는 종료된다
                await self.connect()
                for binding in bindings:
                    if binding.channel_name in self._bindings:
                        await self._send("pusher:subscribe", {"channel": binding.channel_name})
                return
            except Exception as e:
                logger.warning(f"⚠️ Pusher 재연결 실패: {e}")

        logger.error("❌ Pusher 재연결 포기 - 폴링 경로만 동작")

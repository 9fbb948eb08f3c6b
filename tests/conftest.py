"""
pytest 공통 Fixtures

@FEAT:testing @COMP:test @TYPE:config
"""

from typing import Any, Callable, Dict, List, Tuple
from unittest.mock import AsyncMock

import pytest

from merchant_sync.storage.kv_store import InMemoryKeyValueStore
from merchant_sync.storage.ttl_cache import TTLCacheStore


class FakeClock:
    """밀리초 단위로 수동 이동하는 시계"""

    def __init__(self, start_ms: int = 1_700_000_000_000):
        self.now_ms = start_ms

    def __call__(self) -> int:
        return self.now_ms

    def advance(self, ms: int) -> None:
        self.now_ms += ms


class FakeRealtimeTransport:
    """구독 호출을 기록하고 이벤트를 수동으로 흘려보내는 실시간 전송 계층"""

    def __init__(self):
        self.handlers: Dict[str, Tuple[str, Callable[[Any], None]]] = {}
        self.subscribe_calls: List[Tuple[str, str]] = []
        self.unsubscribe_calls: List[str] = []
        self.fail_subscribe = False
        self.fail_unsubscribe = False

    async def subscribe_to_channel(self, channel_name, event_name, handler):
        self.subscribe_calls.append((channel_name, event_name))
        if self.fail_subscribe:
            raise ConnectionError("pusher unavailable")
        self.handlers[channel_name] = (event_name, handler)

    async def unsubscribe_from_channel(self, channel_name):
        self.unsubscribe_calls.append(channel_name)
        if self.fail_unsubscribe:
            raise ConnectionError("pusher unavailable")
        self.handlers.pop(channel_name, None)

    def emit(self, channel_name: str, event_name: str, payload: Any) -> bool:
        """바인딩이 있으면 핸들러 호출 후 True"""
        binding = self.handlers.get(channel_name)
        if binding is None or binding[0] != event_name:
            return False
        binding[1](payload)
        return True


def make_order(order_id: str = "ord_1", status: str = "PENDING", **extra) -> Dict[str, Any]:
    payload = {
        "order_id": order_id,
        "merchant_id": "m_1",
        "status": status,
        "display_amount": 12.5,
        "display_currency": "EUR",
    }
    payload.update(extra)
    return payload


def make_profile(status: str = "ACTIVE", **extra) -> Dict[str, Any]:
    payload = {
        "merchant_id": "m_1",
        "status": status,
        "email": "shop@example.com",
        "display_name": "Corner Shop",
        "default_currency": "EUR",
        "default_language": "en",
        "has_pin": True,
    }
    payload.update(extra)
    return payload


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def kv_store():
    return InMemoryKeyValueStore()


@pytest.fixture
def ttl_cache(kv_store, clock):
    return TTLCacheStore(kv_store, clock=clock)


@pytest.fixture
def realtime_transport():
    return FakeRealtimeTransport()


@pytest.fixture
def merchant_api():
    """MerchantAPIClient 대역 (AsyncMock 메서드)"""
    api = AsyncMock()
    api.get_order = AsyncMock(return_value=make_order())
    api.get_orders = AsyncMock(return_value=[make_order()])
    api.get_deposit = AsyncMock(return_value=make_order("dep_1"))
    api.get_deposits = AsyncMock(return_value=[make_order("dep_1")])
    api.get_profile = AsyncMock(return_value=make_profile())
    return api


@pytest.fixture
def order_factory():
    return make_order


@pytest.fixture
def profile_factory():
    return make_profile

"""
RealtimeStatusChannel 테스트

@FEAT:realtime-channel @COMP:test @TYPE:unit
"""

import logging

import pytest

from merchant_sync.schemas.events import EVENT_MODELS, PaymentCompletedEvent
from merchant_sync.services.realtime_channel import RealtimeStatusChannel


@pytest.fixture
def channel(realtime_transport):
    return RealtimeStatusChannel(realtime_transport)


class TestSubscribe:

    @pytest.mark.asyncio
    async def test_delivers_typed_event(self, channel, realtime_transport):
        received = []
        await channel.subscribe("m_1", "payment_completed", received.append)

        realtime_transport.emit("m_1", "payment_completed", {"order_id": "ord_1", "extra": 1})

        assert received == [PaymentCompletedEvent(order_id="ord_1")]
        assert realtime_transport.subscribe_calls == [("m_1", "payment_completed")]

    @pytest.mark.asyncio
    async def test_malformed_payload_dropped(self, channel, realtime_transport):
        received = []
        await channel.subscribe("m_1", "payment_completed", received.append)

        realtime_transport.emit("m_1", "payment_completed", {"orderId": "ord_1"})
        realtime_transport.emit("m_1", "payment_completed", "not-a-dict")

        assert received == []

    @pytest.mark.asyncio
    async def test_transport_failure_returns_none(self, channel, realtime_transport):
        realtime_transport.fail_subscribe = True

        subscription = await channel.subscribe("m_1", "payment_completed", lambda e: None)

        assert subscription is None
        assert channel.get_subscription("m_1") is None

    @pytest.mark.asyncio
    async def test_resubscribe_deactivates_previous_handle(self, channel, realtime_transport):
        first, second = [], []
        old = await channel.subscribe("m_1", "payment_completed", first.append)
        new = await channel.subscribe("m_1", "payment_completed", second.append)

        realtime_transport.emit("m_1", "payment_completed", {"order_id": "ord_1"})

        assert old.active is False
        assert new.active is True
        assert first == []
        assert len(second) == 1

    @pytest.mark.asyncio
    async def test_replacing_live_subscription_is_logged(self, channel, caplog):
        await channel.subscribe("m_1", "payment_completed", lambda e: None)

        with caplog.at_level(logging.WARNING, logger="merchant_sync.services.realtime_channel"):
            await channel.subscribe("m_1", "payment_completed", lambda e: None)

        assert any("m_1" in r.getMessage() and r.levelno == logging.WARNING for r in caplog.records)

    @pytest.mark.asyncio
    async def test_resubscribe_after_unsubscribe_is_quiet(self, channel, caplog):
        subscription = await channel.subscribe("m_1", "payment_completed", lambda e: None)
        await channel.unsubscribe("m_1", subscription)

        with caplog.at_level(logging.WARNING, logger="merchant_sync.services.realtime_channel"):
            await channel.subscribe("m_1", "payment_completed", lambda e: None)

        assert not [r for r in caplog.records if r.levelno >= logging.WARNING]


class TestUnsubscribe:

    @pytest.mark.asyncio
    async def test_unsubscribe_stops_delivery(self, channel, realtime_transport):
        received = []
        subscription = await channel.subscribe("m_1", "payment_completed", received.append)
        handler = realtime_transport.handlers["m_1"][1]

        await channel.unsubscribe("m_1", subscription)
        handler({"order_id": "ord_1"})

        assert received == []
        assert realtime_transport.unsubscribe_calls == ["m_1"]
        assert channel.get_subscription("m_1") is None

    @pytest.mark.asyncio
    async def test_unsubscribe_without_subscription_is_noop(self, channel, realtime_transport):
        await channel.unsubscribe("m_404")

        assert realtime_transport.unsubscribe_calls == []

    @pytest.mark.asyncio
    async def test_stale_handle_keeps_current_subscription(self, channel, realtime_transport):
        received = []
        old = await channel.subscribe("m_1", "payment_completed", lambda e: None)
        await channel.subscribe("m_1", "payment_completed", received.append)

        await channel.unsubscribe("m_1", old)
        realtime_transport.emit("m_1", "payment_completed", {"order_id": "ord_1"})

        assert realtime_transport.unsubscribe_calls == []
        assert len(received) == 1

    @pytest.mark.asyncio
    async def test_transport_failure_is_swallowed(self, channel, realtime_transport):
        subscription = await channel.subscribe("m_1", "payment_completed", lambda e: None)
        realtime_transport.fail_unsubscribe = True

        await channel.unsubscribe("m_1", subscription)

        assert subscription.active is False
        assert channel.get_subscription("m_1") is None


class TestEventRegistry:
    """채널별 이벤트 모델 목록"""

    @pytest.mark.asyncio
    async def test_custom_event_name(self, realtime_transport):
        channel = RealtimeStatusChannel(realtime_transport, event_models={"deposit_completed": PaymentCompletedEvent})
        received = []
        await channel.subscribe("m_1", "deposit_completed", received.append)

        realtime_transport.emit("m_1", "deposit_completed", {"order_id": "dep_1"})

        assert received == [PaymentCompletedEvent(order_id="dep_1")]
        assert "deposit_completed" not in EVENT_MODELS

    @pytest.mark.asyncio
    async def test_event_missing_from_registry_dropped(self, realtime_transport):
        channel = RealtimeStatusChannel(realtime_transport, event_models={})
        received = []
        await channel.subscribe("m_1", "payment_completed", received.append)

        realtime_transport.emit("m_1", "payment_completed", {"order_id": "ord_1"})

        assert received == []

    def test_builtin_registry_is_read_only(self):
        with pytest.raises(TypeError):
            EVENT_MODELS["other"] = PaymentCompletedEvent

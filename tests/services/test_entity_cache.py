"""
EntityQueryCache 테스트

@FEAT:entity-cache @COMP:test @TYPE:unit
"""

import pytest

from merchant_sync.constants import RemoteStatus
from merchant_sync.core.exceptions import TransportError, ValidationException
from merchant_sync.services.entity_cache import EntityQueryCache
from merchant_sync.services.merchant_status import MerchantStatusError, MerchantStatusErrorKind


@pytest.fixture
def entities(ttl_cache, merchant_api):
    return EntityQueryCache(ttl_cache, merchant_api)


def _forbidden(code=None):
    body = {"code": code} if code else {"error": "forbidden"}
    return TransportError("API error: 403", status_code=403, body=body)


class TestOrderQuery:
    """단일 주문 cache-aside"""

    @pytest.mark.asyncio
    async def test_hit_within_ttl_skips_transport(self, entities, merchant_api, clock):
        first = await entities.fetch_order("ord_1")
        clock.advance(10_000)
        second = await entities.fetch_order("ord_1")

        assert first == second
        assert second.status == RemoteStatus.PENDING
        merchant_api.get_order.assert_awaited_once_with("ord_1")

    @pytest.mark.asyncio
    async def test_refetch_after_ttl(self, entities, merchant_api, clock, order_factory):
        await entities.fetch_order("ord_1")
        clock.advance(31_000)
        merchant_api.get_order.return_value = order_factory(status="COMPLETED")

        order = await entities.fetch_order("ord_1")

        assert order.status == RemoteStatus.COMPLETED
        assert merchant_api.get_order.await_count == 2

    @pytest.mark.asyncio
    async def test_force_bypasses_cache_and_rewrites(self, entities, merchant_api, ttl_cache, order_factory):
        await entities.fetch_order("ord_1")
        merchant_api.get_order.return_value = order_factory(status="FAILED")

        order = await entities.fetch_order("ord_1", force=True)

        assert order.status == RemoteStatus.FAILED
        assert ttl_cache.get("order:ord_1")["status"] == "FAILED"

    @pytest.mark.asyncio
    async def test_transport_error_propagates_and_nothing_cached(self, entities, merchant_api, ttl_cache):
        merchant_api.get_order.side_effect = TransportError("Server error: 502", status_code=502)

        with pytest.raises(TransportError):
            await entities.fetch_order("ord_1")
        assert ttl_cache.get("order:ord_1") is None

    @pytest.mark.asyncio
    async def test_invalid_payload_raises_validation_exception(self, entities, merchant_api, ttl_cache):
        merchant_api.get_order.return_value = {"order_id": "ord_1"}

        with pytest.raises(ValidationException):
            await entities.fetch_order("ord_1")
        assert ttl_cache.get("order:ord_1") is None

    @pytest.mark.asyncio
    async def test_malformed_cached_entry_is_refetched(self, entities, merchant_api, ttl_cache):
        ttl_cache.set("order:ord_1", {"unexpected": True}, ttl_ms=30_000)

        order = await entities.fetch_order("ord_1")

        assert order.order_id == "ord_1"
        merchant_api.get_order.assert_awaited_once()


class TestListQueries:

    @pytest.mark.asyncio
    async def test_orders_cached_per_status(self, entities, merchant_api, ttl_cache):
        await entities.fetch_orders("PENDING")
        await entities.fetch_orders("PENDING")
        await entities.fetch_orders("COMPLETED")

        assert merchant_api.get_orders.await_count == 2
        assert ttl_cache.contains("orders:PENDING")
        assert ttl_cache.contains("orders:COMPLETED")

    @pytest.mark.asyncio
    async def test_deposit_and_order_keys_do_not_collide(self, entities, ttl_cache):
        await entities.fetch_order("x_1")
        await entities.fetch_deposit("x_1")

        assert ttl_cache.contains("order:x_1")
        assert ttl_cache.contains("deposit:x_1")

    @pytest.mark.asyncio
    async def test_ttl_override(self, ttl_cache, merchant_api, clock):
        entities = EntityQueryCache(ttl_cache, merchant_api, ttl={"deposits": 1_000})

        await entities.fetch_deposits("PENDING")
        clock.advance(1_000)
        await entities.fetch_deposits("PENDING")

        assert merchant_api.get_deposits.await_count == 2


class TestProfileQuery:
    """프로필 조회와 머천트 상태 게이트"""

    @pytest.mark.asyncio
    async def test_active_profile_cached(self, entities, merchant_api, ttl_cache):
        profile = await entities.fetch_profile()

        assert profile.merchant_id == "m_1"
        assert ttl_cache.get("profile")["merchant_id"] == "m_1"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("status,kind", [
        ("PIN_BLOCKED", MerchantStatusErrorKind.PIN_BLOCKED),
        ("INACTIVE", MerchantStatusErrorKind.INACTIVE),
    ])
    async def test_blocking_status_raises_before_caching(
        self, entities, merchant_api, ttl_cache, profile_factory, status, kind
    ):
        merchant_api.get_profile.return_value = profile_factory(status=status)

        with pytest.raises(MerchantStatusError) as exc_info:
            await entities.fetch_profile(force=True)

        assert exc_info.value.kind == kind
        assert exc_info.value.should_logout is True
        assert ttl_cache.get("profile") is None

    @pytest.mark.asyncio
    async def test_pin_blocked_403_ignores_cached_profile(self, entities, merchant_api):
        await entities.fetch_profile()
        merchant_api.get_profile.side_effect = _forbidden("PIN_BLOCKED")

        with pytest.raises(MerchantStatusError) as exc_info:
            await entities.fetch_profile(force=True)

        assert exc_info.value.kind == MerchantStatusErrorKind.PIN_BLOCKED

    @pytest.mark.asyncio
    async def test_generic_403_falls_back_to_cached_profile(self, entities, merchant_api):
        cached = await entities.fetch_profile()
        merchant_api.get_profile.side_effect = _forbidden()

        profile = await entities.fetch_profile(force=True)

        assert profile == cached

    @pytest.mark.asyncio
    async def test_generic_403_without_cache_raises(self, entities, merchant_api):
        merchant_api.get_profile.side_effect = _forbidden()

        with pytest.raises(MerchantStatusError) as exc_info:
            await entities.fetch_profile()

        assert exc_info.value.kind == MerchantStatusErrorKind.GENERIC_403
        assert exc_info.value.should_logout is False

    @pytest.mark.asyncio
    async def test_401_without_cache_reraises_transport_error(self, entities, merchant_api):
        merchant_api.get_profile.side_effect = TransportError("API error: 401", status_code=401, body={})

        with pytest.raises(TransportError) as exc_info:
            await entities.fetch_profile()

        assert exc_info.value.status_code == 401

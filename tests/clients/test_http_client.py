"""
AsyncHTTPClient 테스트

httpx.MockTransport로 응답을 흉내냅니다.

@FEAT:merchant-api @COMP:test @TYPE:unit
"""

import httpx
import pytest

from merchant_sync.clients.http_client import AsyncHTTPClient
from merchant_sync.core.exceptions import TransportError, TransportNetworkError


def make_client(handler, **kwargs):
    kwargs.setdefault("base_delay", 0)
    return AsyncHTTPClient(
        base_url="https://api.test/",
        transport=httpx.MockTransport(handler),
        **kwargs,
    )


class TestAsyncHTTPClient:

    @pytest.mark.asyncio
    async def test_success_returns_json(self):
        client = make_client(lambda request: httpx.Response(200, json={"order": {"order_id": "ord_1"}}))

        async with client:
            assert await client.get("functions/v1/orders/ord_1") == {"order": {"order_id": "ord_1"}}

    @pytest.mark.asyncio
    async def test_empty_body_returns_empty_dict(self):
        client = make_client(lambda request: httpx.Response(204))

        assert await client.post("functions/v1/orders", json={}) == {}
        await client.close()

    @pytest.mark.asyncio
    async def test_bearer_token_header(self):
        seen = {}

        def handler(request):
            seen["auth"] = request.headers.get("Authorization")
            return httpx.Response(200, json={})

        client = make_client(handler, token_provider=lambda: "jwt-token")
        await client.get("functions/v1/merchants")
        await client.close()

        assert seen["auth"] == "Bearer jwt-token"

    @pytest.mark.asyncio
    async def test_4xx_not_retried_and_body_decoded(self):
        calls = []

        def handler(request):
            calls.append(request)
            return httpx.Response(403, json={"code": "PIN_BLOCKED"})

        client = make_client(handler, max_retries=3)
        with pytest.raises(TransportError) as exc_info:
            await client.get("functions/v1/merchants")
        await client.close()

        assert len(calls) == 1
        assert exc_info.value.status_code == 403
        assert exc_info.value.body == {"code": "PIN_BLOCKED"}

    @pytest.mark.asyncio
    async def test_non_json_error_body(self):
        client = make_client(lambda request: httpx.Response(404, text="<html>not found</html>"))

        with pytest.raises(TransportError) as exc_info:
            await client.get("missing")
        await client.close()

        assert exc_info.value.body == {"text": "<html>not found</html>"}

    @pytest.mark.asyncio
    async def test_5xx_retried_then_succeeds(self):
        responses = [httpx.Response(502), httpx.Response(200, json={"ok": True})]
        client = make_client(lambda request: responses.pop(0), max_retries=2)

        assert await client.get("functions/v1/orders") == {"ok": True}
        await client.close()

    @pytest.mark.asyncio
    async def test_5xx_exhausted_raises_last_error(self):
        calls = []

        def handler(request):
            calls.append(request)
            return httpx.Response(503, json={"error": "maintenance"})

        client = make_client(handler, max_retries=2)
        with pytest.raises(TransportError) as exc_info:
            await client.get("functions/v1/orders")
        await client.close()

        assert len(calls) == 2
        assert exc_info.value.status_code == 503

    @pytest.mark.asyncio
    async def test_network_error_raises_transport_network_error(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        client = make_client(handler, max_retries=2)
        with pytest.raises(TransportNetworkError):
            await client.get("functions/v1/orders")
        await client.close()

"""
외부 협력자 클라이언트

- http_client: httpx 기반 비동기 HTTP 클라이언트 (재시도 포함)
- merchant_api: Merchant REST API
- rate_provider: 환율 조회
- pusher_client: Pusher 실시간 채널 (websockets)
"""

from merchant_sync.clients.http_client import AsyncHTTPClient
from merchant_sync.clients.merchant_api import MerchantAPIClient
from merchant_sync.clients.rate_provider import ExchangeRateProvider
from merchant_sync.clients.pusher_client import PusherRealtimeClient

__all__ = [
    "AsyncHTTPClient",
    "MerchantAPIClient",
    "ExchangeRateProvider",
    "PusherRealtimeClient",
]

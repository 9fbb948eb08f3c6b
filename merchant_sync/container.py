"""
Composition root

프로세스 전역 서비스 인스턴스를 한 곳에서 생성하고 주입합니다.
지연 초기화 정적 싱글톤 대신 명시적으로 만든 컨테이너를 전달합니다.
"""

import logging
from dataclasses import dataclass, field
from typing import Awaitable, Callable, Optional

from merchant_sync.clients.http_client import AsyncHTTPClient
from merchant_sync.clients.merchant_api import MerchantAPIClient
from merchant_sync.clients.pusher_client import PusherRealtimeClient
from merchant_sync.clients.rate_provider import ExchangeRateProvider
from merchant_sync import config
from merchant_sync.config import Settings
from merchant_sync.core.logging_config import setup_logging
from merchant_sync.db.session import create_session_factory
from merchant_sync.schemas.events import EVENT_MODELS, PaymentCompletedEvent
from merchant_sync.services.background.cache_sweeper import CacheSweeper
from merchant_sync.services.entity_cache import EntityQueryCache
from merchant_sync.services.exchange_rate_cache import ExchangeRateCache
from merchant_sync.services.merchant_status import MerchantStatusErrorHandler
from merchant_sync.services.notification_service import LoggingNotifier, Notifier
from merchant_sync.services.realtime_channel import RealtimeStatusChannel, RealtimeTransport
from merchant_sync.services.speech_service import Announcer, LoggingAnnouncer
from merchant_sync.services.status_synchronizer import (
    DepositStatusSynchronizer,
    PaymentStatusSynchronizer,
)
from merchant_sync.storage.kv_store import KeyValueStore, SQLAlchemyKeyValueStore
from merchant_sync.storage.ttl_cache import TTLCacheStore

logger = logging.getLogger(__name__)


@dataclass
class ServiceContainer:
    """서비스 묶음"""
    settings: Settings
    cache: TTLCacheStore
    api: MerchantAPIClient
    entities: EntityQueryCache
    exchange_rates: ExchangeRateCache
    channel: RealtimeStatusChannel
    status_error_handler: MerchantStatusErrorHandler
    sweeper: CacheSweeper
    announcer: Announcer
    http: Optional[AsyncHTTPClient] = None
    rate_provider: Optional[ExchangeRateProvider] = None
    realtime: Optional[RealtimeTransport] = None
    on_logout: Optional[Callable[[], Awaitable[None]]] = None
    _closed: bool = field(default=False, repr=False)

    def _handle_merchant_status_error(self, error):
        return self.status_error_handler.handle(error, self.on_logout)

    def payment_status(self) -> PaymentStatusSynchronizer:
        """주문 화면 하나당 새 동기화기"""
        return PaymentStatusSynchronizer(
            self.channel,
            self.entities.fetch_order,
            announcer=self.announcer,
            event_name=self.settings.PAYMENT_COMPLETED_EVENT,
            on_merchant_status_error=self._handle_merchant_status_error,
        )

    def deposit_status(self) -> DepositStatusSynchronizer:
        return DepositStatusSynchronizer(
            self.channel,
            self.entities.fetch_deposit,
            event_name=self.settings.PAYMENT_COMPLETED_EVENT,
            on_merchant_status_error=self._handle_merchant_status_error,
        )

    async def aclose(self) -> None:
        """워커 종료 및 전송 계층 정리"""
        if self._closed:
            return
        self._closed = True

        await self.sweeper.stop()
        if self.http is not None:
            await self.http.close()
        if self.rate_provider is not None:
            await self.rate_provider.close()
        if isinstance(self.realtime, PusherRealtimeClient):
            await self.realtime.disconnect()
        logger.info("✅ Service container closed")


def build_container(
    settings: Optional[Settings] = None,
    store: Optional[KeyValueStore] = None,
    api: Optional[MerchantAPIClient] = None,
    realtime: Optional[RealtimeTransport] = None,
    rate_fetcher=None,
    notifier: Optional[Notifier] = None,
    announcer: Optional[Announcer] = None,
    token_provider: Optional[Callable[[], Optional[str]]] = None,
    on_logout: Optional[Callable[[], Awaitable[None]]] = None,
    clock: Optional[Callable[[], int]] = None,
    configure_logging: bool = True,
) -> ServiceContainer:
    """서비스 컨테이너 생성 (프로세스 시작 지점)

    주입하지 않은 협력자는 설정값으로 실제 구현을 만든다.

    Args:
        settings: 설정 (없으면 환경 변수에서 읽은 전역 설정)
        configure_logging: True면 LOG_LEVEL/LOG_FILE/DEBUG로 루트 로거 설정
    """
    settings = settings or config.settings

    if configure_logging:
        setup_logging(
            "DEBUG" if settings.DEBUG else settings.LOG_LEVEL,
            settings.LOG_FILE or None,
        )

    if store is None:
        store = SQLAlchemyKeyValueStore(create_session_factory(settings.CACHE_DATABASE_URL))
    cache = TTLCacheStore(store, clock=clock)

    http = None
    if api is None:
        http = AsyncHTTPClient(
            base_url=settings.API_BASE_URL,
            timeout=settings.API_TIMEOUT,
            max_retries=settings.API_MAX_RETRIES,
            base_delay=settings.API_RETRY_BASE_DELAY,
            token_provider=token_provider,
        )
        api = MerchantAPIClient(http)

    rate_provider = None
    if rate_fetcher is None:
        rate_provider = ExchangeRateProvider(settings.EXCHANGE_RATE_API_URL, timeout=settings.API_TIMEOUT)
        rate_fetcher = rate_provider.fetch_exchange_rates

    if realtime is None:
        realtime = PusherRealtimeClient(settings.PUSHER_APP_KEY, settings.PUSHER_CLUSTER)

    event_models = dict(EVENT_MODELS)
    event_models.setdefault(settings.PAYMENT_COMPLETED_EVENT, PaymentCompletedEvent)

    entities = EntityQueryCache(
        cache,
        api,
        ttl={
            "orders": settings.ORDERS_CACHE_TTL_MS,
            "order": settings.ORDER_CACHE_TTL_MS,
            "deposits": settings.DEPOSITS_CACHE_TTL_MS,
            "deposit": settings.DEPOSIT_CACHE_TTL_MS,
            "profile": settings.PROFILE_CACHE_TTL_MS,
        },
    )

    container = ServiceContainer(
        settings=settings,
        cache=cache,
        api=api,
        entities=entities,
        exchange_rates=ExchangeRateCache(cache, rate_fetcher),
        channel=RealtimeStatusChannel(realtime, event_models=event_models),
        status_error_handler=MerchantStatusErrorHandler(
            notifier or LoggingNotifier(),
            logout_delay=settings.LOGOUT_DELAY_SECONDS,
        ),
        sweeper=CacheSweeper(cache, interval=settings.CACHE_SWEEP_INTERVAL),
        announcer=announcer or LoggingAnnouncer(),
        http=http,
        rate_provider=rate_provider,
        realtime=realtime,
        on_logout=on_logout,
    )

    logger.info(f"✅ Service container built (ENV={settings.ENV})")
    return container

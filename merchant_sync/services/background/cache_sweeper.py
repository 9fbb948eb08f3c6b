"""
Cache Sweeper

주기적으로 TTL 캐시의 만료/손상 엔트리를 정리합니다.
정합성은 get 시점의 lazy 만료가 보장하므로 이 작업은 공간 회수용입니다.

@FEAT:ttl-cache @COMP:job @TYPE:helper
"""

import asyncio
import logging
from typing import Optional

from merchant_sync.storage.ttl_cache import TTLCacheStore

logger = logging.getLogger(__name__)


class CacheSweeper:
    """
    캐시 정리 백그라운드 워커

    Args:
        cache: 정리할 TTL 캐시
        interval: 정리 간격 (초)
    """

    def __init__(self, cache: TTLCacheStore, interval: float = 300):
        self.cache = cache
        self.interval = interval
        self.running = False
        self._task: Optional[asyncio.Task] = None

    async def start(self):
        """워커 시작"""
        if self.running:
            return
        self.running = True
        self._task = asyncio.create_task(self._run())
        logger.info(f"✅ Cache Sweeper started (interval={self.interval}s)")

    async def stop(self):
        """워커 종료"""
        self.running = False
        if self._task:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                logger.debug("Cache Sweeper task cancelled")
            self._task = None
        logger.info("🛑 Cache Sweeper stopped")

    def sweep_once(self) -> int:
        """정리 1회 실행 (실패는 로그만)"""
        try:
            return self.cache.sweep_expired()
        except Exception as e:
            logger.error(f"❌ 캐시 정리 실패: {e}", exc_info=True)
            return 0

    async def _run(self):
        """메인 루프"""
        while self.running:
            self.sweep_once()
            await asyncio.sleep(self.interval)

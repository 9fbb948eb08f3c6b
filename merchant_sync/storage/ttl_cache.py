# @FEAT:ttl-cache @COMP:storage @TYPE:core
"""
TTL 캐시 스토어

영속 key/value 스토어 위에 {data, expiresAt} 봉투(envelope)를 씌워
만료 시각을 관리합니다.

- 만료 판단은 get 시점에 lazy하게 수행 (만료 엔트리는 즉시 삭제)
- 역직렬화 실패 엔트리는 miss로 처리하고 삭제 (self-healing)
- sweep_expired는 주기적 정리용이며 정합성은 get이 보장
"""

import json
import logging
import time
from collections import defaultdict
from typing import Any, Callable, Dict, Optional, Tuple

from merchant_sync.storage.kv_store import KeyValueStore

logger = logging.getLogger(__name__)

_MISSING = object()


def _epoch_millis() -> int:
    return int(time.time() * 1000)


class TTLCacheStore:
    """
    만료 기능이 있는 범용 캐시

    Args:
        store: 하위 key/value 스토어
        clock: 현재 시각(epoch ms)을 반환하는 함수. 테스트에서 주입
    """

    def __init__(self, store: KeyValueStore, clock: Optional[Callable[[], int]] = None):
        self.store = store
        self._clock = clock or _epoch_millis
        self._hit_counts: Dict[str, int] = defaultdict(int)
        self._miss_counts: Dict[str, int] = defaultdict(int)

    def now(self) -> int:
        return self._clock()

    def _decode(self, raw: str) -> Tuple[Any, Optional[int]]:
        """봉투 역직렬화. 형식이 맞지 않으면 ValueError"""
        item = json.loads(raw)
        if not isinstance(item, dict) or "data" not in item:
            raise ValueError("invalid cache envelope")

        expires_at = item.get("expiresAt")
        if expires_at is not None and not isinstance(expires_at, (int, float)):
            raise ValueError("invalid expiresAt")
        return item["data"], expires_at

    def _is_elapsed(self, expires_at: Optional[int], now: int) -> bool:
        return expires_at is not None and now >= expires_at

    # @FEAT:ttl-cache @COMP:storage @TYPE:core
    def get(self, key: str, default: Any = None) -> Any:
        """캐시 조회

        Returns:
            저장된 값. 없거나 만료/손상된 경우 default
        """
        raw = self.store.get_string(key)
        if raw is None:
            self._miss_counts[key] += 1
            return default

        try:
            data, expires_at = self._decode(raw)
        except (ValueError, TypeError) as e:
            logger.warning(f"⚠️ 손상된 캐시 엔트리 삭제: {key} ({e})")
            self.store.delete(key)
            self._miss_counts[key] += 1
            return default

        if self._is_elapsed(expires_at, self.now()):
            logger.debug(f"⏰ 캐시 만료: {key}")
            self.store.delete(key)
            self._miss_counts[key] += 1
            return default

        self._hit_counts[key] += 1
        logger.debug(f"💾 캐시 HIT: {key}")
        return data

    def contains(self, key: str) -> bool:
        """유효한 엔트리 존재 여부 (만료/손상 엔트리는 get과 동일하게 정리)"""
        return self.get(key, _MISSING) is not _MISSING

    # @FEAT:ttl-cache @COMP:storage @TYPE:core
    def set(self, key: str, value: Any, ttl_ms: Optional[int] = None) -> None:
        """캐시 저장

        Args:
            key: 캐시 키
            value: JSON 직렬화 가능한 값
            ttl_ms: 만료까지 밀리초. None 또는 0이면 만료되지 않음
        """
        item: Dict[str, Any] = {"data": value}
        if ttl_ms:
            item["expiresAt"] = self.now() + int(ttl_ms)

        self.store.set(key, json.dumps(item))

    def delete(self, key: str) -> None:
        self.store.delete(key)

    def is_expired(self, key: str) -> bool:
        """엔트리가 없거나, 손상되었거나, 만료되었으면 True (삭제하지 않음)"""
        raw = self.store.get_string(key)
        if raw is None:
            return True

        try:
            _, expires_at = self._decode(raw)
        except (ValueError, TypeError):
            return True

        return self._is_elapsed(expires_at, self.now())

    # @FEAT:ttl-cache @COMP:storage @TYPE:helper
    def sweep_expired(self) -> int:
        """만료 및 손상 엔트리 일괄 삭제

        Returns:
            삭제된 키 수
        """
        now = self.now()
        removed = 0

        for key in self.store.get_all_keys():
            raw = self.store.get_string(key)
            if raw is None:
                continue

            try:
                _, expires_at = self._decode(raw)
            except (ValueError, TypeError):
                self.store.delete(key)
                removed += 1
                continue

            if self._is_elapsed(expires_at, now):
                self.store.delete(key)
                removed += 1

        if removed:
            logger.info(f"🗑️ 만료 캐시 정리: {removed}개 항목 삭제")
        return removed

    def clear_all(self) -> int:
        """모든 키 삭제

        Returns:
            삭제된 키 수
        """
        keys = self.store.get_all_keys()
        for key in keys:
            self.store.delete(key)

        logger.info(f"🗑️ 전체 캐시 클리어: {len(keys)}개 항목 삭제")
        return len(keys)

    def get_stats(self) -> Dict[str, Any]:
        """캐시 통계 정보"""
        total_hits = sum(self._hit_counts.values())
        total_misses = sum(self._miss_counts.values())
        total = total_hits + total_misses
        hit_rate = total_hits / total * 100 if total > 0 else 0

        return {
            "cache_size": len(self.store.get_all_keys()),
            "total_hits": total_hits,
            "total_misses": total_misses,
            "hit_rate": f"{hit_rate:.1f}%",
        }

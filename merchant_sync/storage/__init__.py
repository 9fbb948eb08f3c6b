"""
Storage 패키지

- kv_store: 영속 key/value 스토어 (인메모리, SQLAlchemy)
- ttl_cache: 만료 시각을 가진 캐시 엔트리 래퍼
"""

from merchant_sync.storage.kv_store import (
    KeyValueStore,
    InMemoryKeyValueStore,
    SQLAlchemyKeyValueStore,
)
from merchant_sync.storage.ttl_cache import TTLCacheStore

__all__ = [
    "KeyValueStore",
    "InMemoryKeyValueStore",
    "SQLAlchemyKeyValueStore",
    "TTLCacheStore",
]

# @FEAT:cache-storage @COMP:storage @TYPE:core
"""
Key/Value 스토어

TTL 캐시 아래에 깔리는 문자열 key/value 저장소.
스토어 자체가 접근을 직렬화한다고 가정하며, 다중 키 원자성은 보장하지 않는다.
"""

import logging
import threading
from typing import Dict, List, Optional, Protocol, runtime_checkable

from sqlalchemy import select, delete as sa_delete
from sqlalchemy.orm import sessionmaker

from merchant_sync.models import CacheEntryRecord

logger = logging.getLogger(__name__)


@runtime_checkable
class KeyValueStore(Protocol):
    """영속 스토어 인터페이스"""

    def get_string(self, key: str) -> Optional[str]:
        ...

    def set(self, key: str, value: str) -> None:
        ...

    def delete(self, key: str) -> None:
        ...

    def get_all_keys(self) -> List[str]:
        ...


class InMemoryKeyValueStore:
    """dict 기반 스토어 (테스트 및 휘발성 용도)"""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._data: Dict[str, str] = dict(initial or {})
        self._lock = threading.Lock()

    def get_string(self, key: str) -> Optional[str]:
        with self._lock:
            return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        with self._lock:
            self._data[key] = value

    def delete(self, key: str) -> None:
        with self._lock:
            self._data.pop(key, None)

    def get_all_keys(self) -> List[str]:
        with self._lock:
            return list(self._data.keys())


# @FEAT:cache-storage @COMP:storage @TYPE:integration
class SQLAlchemyKeyValueStore:
    """
    SQLAlchemy 기반 영속 스토어

    cache_entries 테이블 한 개를 사용한다. 프로세스 재시작 후에도 유지되지만
    기기 간 동기화는 하지 않는다.
    """

    def __init__(self, session_factory: sessionmaker):
        self._session_factory = session_factory

    def get_string(self, key: str) -> Optional[str]:
        with self._session_factory() as session:
            record = session.get(CacheEntryRecord, key)
            return record.value if record else None

    def set(self, key: str, value: str) -> None:
        with self._session_factory() as session:
            try:
                record = session.get(CacheEntryRecord, key)
                if record:
                    record.value = value
                else:
                    session.add(CacheEntryRecord(key=key, value=value))
                session.commit()
            except Exception as e:
                session.rollback()
                logger.error(f"❌ 캐시 저장 실패 - key={key}: {e}")
                raise

    def delete(self, key: str) -> None:
        with self._session_factory() as session:
            try:
                session.execute(sa_delete(CacheEntryRecord).where(CacheEntryRecord.key == key))
                session.commit()
            except Exception as e:
                session.rollback()
                logger.error(f"❌ 캐시 삭제 실패 - key={key}: {e}")
                raise

    def get_all_keys(self) -> List[str]:
        with self._session_factory() as session:
            return list(session.scalars(select(CacheEntryRecord.key)).all())

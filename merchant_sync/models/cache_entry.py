"""
CacheEntryRecord 모델

영속 key/value 스토어의 한 행. value는 TTL 캐시가 직렬화한 문자열 그대로 저장된다.
"""

from datetime import datetime

from sqlalchemy import String, Text, DateTime
from sqlalchemy.orm import Mapped, mapped_column

from merchant_sync.db.base import Base


class CacheEntryRecord(Base):
    """캐시 엔트리 모델"""

    __tablename__ = "cache_entries"

    key: Mapped[str] = mapped_column(String(255), primary_key=True, comment="캐시 키")
    value: Mapped[str] = mapped_column(Text, nullable=False, comment="직렬화된 값")
    updated_at: Mapped[datetime] = mapped_column(
        DateTime,
        nullable=False,
        default=datetime.utcnow,
        onupdate=datetime.utcnow,
        comment="마지막 기록 시각"
    )

    def __repr__(self) -> str:
        return f"CacheEntryRecord(key={self.key!r}, size={len(self.value or '')})"

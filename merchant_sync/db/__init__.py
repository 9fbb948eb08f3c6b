"""
Database 모듈

영속 key/value 캐시 스토어가 사용하는 SQLAlchemy 베이스와 세션 팩토리.
"""

from merchant_sync.db.base import Base
from merchant_sync.db.session import create_session_factory

__all__ = ["Base", "create_session_factory"]

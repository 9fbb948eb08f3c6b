"""
SQLAlchemy 모델 패키지
"""

from merchant_sync.models.cache_entry import CacheEntryRecord

__all__ = ["CacheEntryRecord"]

"""
백그라운드 작업
"""

from merchant_sync.services.background.cache_sweeper import CacheSweeper

__all__ = ["CacheSweeper"]

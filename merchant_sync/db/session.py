"""
데이터베이스 세션 관리

캐시 스토어는 동기 연산만 필요하므로 SQLAlchemy 2.0 동기 엔진을 사용합니다.
"""

import logging

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

logger = logging.getLogger(__name__)


def create_session_factory(database_url: str, echo: bool = False) -> sessionmaker:
    """엔진을 만들고 테이블을 생성한 뒤 세션 팩토리를 반환

    Args:
        database_url: SQLAlchemy URL (예: sqlite:///merchant_cache.db)
        echo: SQL 쿼리 로깅 여부
    """
    from merchant_sync.db.base import Base
    from merchant_sync.models import CacheEntryRecord  # noqa: F401  테이블 등록

    engine_kwargs = {"echo": echo, "future": True}
    if database_url.startswith("sqlite") and ":memory:" in database_url:
        # 인메모리 SQLite는 커넥션 간 공유가 필요
        engine_kwargs["connect_args"] = {"check_same_thread": False}
        engine_kwargs["poolclass"] = StaticPool

    engine: Engine = create_engine(database_url, **engine_kwargs)
    Base.metadata.create_all(engine)

    logger.info(f"✅ Cache database ready: {engine.url.render_as_string(hide_password=True)}")

    return sessionmaker(
        bind=engine,
        expire_on_commit=False,
        autoflush=False,
    )

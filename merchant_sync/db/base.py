"""
SQLAlchemy Base 클래스

캐시 DB 모델이 공유하는 DeclarativeBase
"""

from sqlalchemy import MetaData
from sqlalchemy.orm import DeclarativeBase

NAMING_CONVENTION = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "pk": "pk_%(table_name)s",
}


class Base(DeclarativeBase):
    """SQLAlchemy 2.0 스타일 Base 클래스"""

    metadata = MetaData(naming_convention=NAMING_CONVENTION)

# caminho: vending_admin/infrastructure/db/base.py
# Funções:
# - create_async_engine_settings(): configura engine async do SQLAlchemy
# - get_engine()/get_sessionmaker(): instâncias únicas criadas sob demanda
# - get_session(): fornece AsyncSession via FastAPI Depends

from __future__ import annotations

from collections.abc import AsyncGenerator
from functools import lru_cache

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import registry
from sqlalchemy.pool import NullPool

from vending_admin.config import get_settings

mapper_registry = registry()
Base = mapper_registry.generate_base()


def create_async_engine_settings() -> AsyncEngine:
    settings = get_settings()

    if settings.IS_SQLITE:
        # Conexões aiosqlite ficam presas ao loop que as criou
        return create_async_engine(settings.DATABASE_URL, poolclass=NullPool)

    return create_async_engine(
        settings.DATABASE_URL,
        pool_size=settings.DB_POOL_SIZE,
        max_overflow=settings.DB_MAX_OVERFLOW,
        pool_timeout=settings.DB_POOL_TIMEOUT_S,
        pool_pre_ping=True,
        pool_recycle=1800,
        connect_args={'timeout': 60},
    )


@lru_cache(maxsize=1)
def get_engine() -> AsyncEngine:
    return create_async_engine_settings()


@lru_cache(maxsize=1)
def get_sessionmaker() -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(bind=get_engine(), class_=AsyncSession, expire_on_commit=False)


async def get_session() -> AsyncGenerator[AsyncSession, None]:
    session: AsyncSession = get_sessionmaker()()
    try:
        yield session
    except Exception:
        await session.rollback()
        raise
    finally:
        await session.close()

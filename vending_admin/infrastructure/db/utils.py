# caminho: vending_admin/infrastructure/db/utils.py
# Funções:
# - try_flush(), try_commit(): auxiliares para flush/commit com rollback seguro
# - utcnow(): timestamp com timezone usado nos defaults dos modelos
# - UTCDateTime: coluna DateTime que sempre devolve datetimes aware em UTC

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Optional

from sqlalchemy import DateTime
from sqlalchemy.engine import Dialect
from sqlalchemy.exc import DBAPIError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.types import TypeDecorator


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class UTCDateTime(TypeDecorator):
    """DateTime(timezone=True) com o mesmo comportamento no Postgres e no SQLite.

    O SQLite não guarda offset: gravamos o instante em UTC sem tzinfo e
    reanexamos UTC na leitura, para que valores recém-criados e relidos
    sejam iguais e comparações com filtros aware funcionem.
    """

    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value: Optional[datetime], dialect: Dialect) -> Any:
        if value is None:
            return None
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        value = value.astimezone(timezone.utc)
        if dialect.name == 'sqlite':
            return value.replace(tzinfo=None)
        return value

    def process_result_value(self, value: Optional[datetime], dialect: Dialect) -> Optional[datetime]:
        if value is None:
            return None
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)


async def try_flush(session: AsyncSession) -> None:
    try:
        await session.flush()
    except (DBAPIError, SQLAlchemyError):
        await session.rollback()
        raise


async def try_commit(session: AsyncSession) -> None:
    try:
        await session.commit()
    except (DBAPIError, SQLAlchemyError):
        await session.rollback()
        raise

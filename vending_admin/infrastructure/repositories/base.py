# caminho: vending_admin/infrastructure/repositories/base.py
# Funções:
# - ResourceRepository: operações comuns (get, exists, create, update, list_page)
#   para os recursos administrados, com commit e rollback seguros

from __future__ import annotations

import uuid
from typing import Any, Generic, Optional, TypeVar

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from vending_admin.infrastructure.db.query_builder import Page, QueryableResource, build_list_query, fetch_page
from vending_admin.infrastructure.db.utils import try_commit, try_flush
from vending_admin.shared.filters import PageFilters

M = TypeVar('M')


class ResourceRepository(Generic[M]):
    model: type[M]
    resource: QueryableResource
    detail_options: tuple[Any, ...] = ()

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get(self, resource_id: uuid.UUID) -> Optional[M]:
        stmt = select(self.model).where(self.model.id == resource_id)
        if self.detail_options:
            stmt = stmt.options(*self.detail_options)
        result = await self._session.execute(stmt)
        return result.scalars().unique().one_or_none()

    async def find_id_by(self, column: Any, value: Any) -> Optional[uuid.UUID]:
        result = await self._session.execute(select(self.model.id).where(column == value))
        return result.scalar_one_or_none()

    async def create(self, values: dict[str, Any]) -> M:
        model = self.model(**values)
        self._session.add(model)
        await try_flush(self._session)
        await try_commit(self._session)
        return await self.get(model.id)

    async def update(self, model: M, values: dict[str, Any]) -> M:
        for key, value in values.items():
            setattr(model, key, value)
        await try_flush(self._session)
        await try_commit(self._session)
        return await self.get(model.id)

    async def list_page(self, filters: PageFilters) -> Page[M]:
        return await fetch_page(self._session, build_list_query(filters, self.resource))

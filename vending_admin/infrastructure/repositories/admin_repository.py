# caminho: vending_admin/infrastructure/repositories/admin_repository.py
# Funções:
# - AdminRepositoryImpl: implementação SQLAlchemy do protocolo AdminRepository
# - ActivityLogRepositoryImpl: escrita e listagem do log de atividades

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Optional

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from vending_admin.domain.admins.entities import ActivityLogEntry, AdminIdentity
from vending_admin.domain.admins.repositories import ActivityLogRepository, AdminRepository
from vending_admin.infrastructure.db.models import ActivityLogModel, AdminUserModel
from vending_admin.infrastructure.db.query_builder import (
    FilterColumn,
    Page,
    QueryableResource,
    build_list_query,
    fetch_page,
)
from vending_admin.infrastructure.db.utils import try_commit, try_flush
from vending_admin.shared.filters import ActivityFilters

ACTIVITY_RESOURCE = QueryableResource(
    model=ActivityLogModel,
    filters={
        'resource_type': FilterColumn(ActivityLogModel.resource_type),
        'action_type': FilterColumn(ActivityLogModel.action_type),
        'admin_user_id': FilterColumn(ActivityLogModel.admin_user_id),
    },
    order_by=(ActivityLogModel.created_at.desc(), ActivityLogModel.id.asc()),
)


def _parse_uuid(value: str | uuid.UUID | None) -> Optional[uuid.UUID]:
    if value is None or isinstance(value, uuid.UUID):
        return value
    try:
        return uuid.UUID(str(value))
    except ValueError:
        return None


def _to_domain_admin(model: AdminUserModel) -> AdminIdentity:
    return AdminIdentity(
        id=str(model.id),
        email=model.email,
        name=model.name,
        role=model.role,
        is_active=model.is_active,
        password_hash=model.password_hash,
        avatar_url=model.avatar_url,
        oauth_provider=model.oauth_provider,
        oauth_id=model.oauth_id,
        last_login_at=model.last_login_at,
    )


def _to_domain_activity(model: ActivityLogModel) -> ActivityLogEntry:
    return ActivityLogEntry(
        id=str(model.id),
        admin_user_id=str(model.admin_user_id) if model.admin_user_id else None,
        action_type=model.action_type,
        resource_type=model.resource_type,
        resource_id=model.resource_id,
        old_values=model.old_values,
        new_values=model.new_values,
        ip_address=model.ip_address,
        user_agent=model.user_agent,
        created_at=model.created_at,
    )


class AdminRepositoryImpl(AdminRepository):
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def add(self, identity: AdminIdentity) -> AdminIdentity:
        model = AdminUserModel(
            email=identity.email.strip().lower(),
            name=identity.name,
            role=identity.role,
            is_active=identity.is_active,
            password_hash=identity.password_hash,
            avatar_url=identity.avatar_url,
            oauth_provider=identity.oauth_provider,
            oauth_id=identity.oauth_id,
        )
        self._session.add(model)
        await try_flush(self._session)
        await try_commit(self._session)
        return _to_domain_admin(model)

    async def get_by_id(self, admin_id: str) -> Optional[AdminIdentity]:
        parsed = _parse_uuid(admin_id)
        if parsed is None:
            return None
        model = await self._session.get(AdminUserModel, parsed)
        return _to_domain_admin(model) if model else None

    async def get_by_email(self, email: str) -> Optional[AdminIdentity]:
        stmt = select(AdminUserModel).where(func.lower(AdminUserModel.email) == email.strip().lower())
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()
        return _to_domain_admin(model) if model else None

    async def touch_last_login(self, admin_id: str, at: datetime) -> None:
        stmt = (
            update(AdminUserModel)
            .where(AdminUserModel.id == _parse_uuid(admin_id))
            .values(last_login_at=at)
        )
        await self._session.execute(stmt)
        await try_commit(self._session)

    async def bind_oauth_identity(
        self,
        admin_id: str,
        *,
        provider: str,
        subject: str,
        avatar_url: Optional[str],
        at: datetime,
    ) -> AdminIdentity:
        model = await self._session.get(AdminUserModel, _parse_uuid(admin_id))
        if model is None:  # pragma: no cover - consistência garantida pelo serviço
            raise ValueError('Admin not found')
        model.oauth_provider = provider
        model.oauth_id = subject
        if avatar_url and not model.avatar_url:
            model.avatar_url = avatar_url
        model.last_login_at = at
        await try_flush(self._session)
        await try_commit(self._session)
        return _to_domain_admin(model)


class ActivityLogRepositoryImpl(ActivityLogRepository):
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def add(self, entry: ActivityLogEntry) -> ActivityLogEntry:
        model = ActivityLogModel(
            admin_user_id=_parse_uuid(entry.admin_user_id),
            action_type=entry.action_type,
            resource_type=entry.resource_type,
            resource_id=str(entry.resource_id) if entry.resource_id else None,
            old_values=entry.old_values,
            new_values=entry.new_values,
            ip_address=entry.ip_address,
            user_agent=(entry.user_agent or '')[:255] or None,
        )
        self._session.add(model)
        await try_flush(self._session)
        await try_commit(self._session)
        return _to_domain_activity(model)

    async def list_page(self, filters: ActivityFilters) -> Page[ActivityLogEntry]:
        page = await fetch_page(self._session, build_list_query(filters, ACTIVITY_RESOURCE))
        return Page(
            items=[_to_domain_activity(model) for model in page.items],
            total=page.total,
            limit=page.limit,
            offset=page.offset,
        )

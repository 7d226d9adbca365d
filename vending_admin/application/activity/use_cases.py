# caminho: vending_admin/application/activity/use_cases.py
# Funções:
# - ActivityRecorder: grava entradas de auditoria sem nunca derrubar a operação principal
# - ActivityService: listagem paginada com resumo legível

from __future__ import annotations

from typing import Any, Optional

from vending_admin.application.activity.dto import ActivityOutput
from vending_admin.application.common.dto import RequestContext, map_page
from vending_admin.domain.admins.entities import ActivityLogEntry
from vending_admin.domain.admins.enums import describe_activity
from vending_admin.domain.admins.repositories import ActivityLogRepository
from vending_admin.infrastructure.db.query_builder import Page
from vending_admin.infrastructure.repositories.admin_repository import ActivityLogRepositoryImpl
from vending_admin.shared.filters import ActivityFilters
from vending_admin.shared.logging import log_warning


class ActivityRecorder:
    def __init__(self, repository: ActivityLogRepository) -> None:
        self._repository = repository

    async def record(
        self,
        context: RequestContext,
        *,
        action_type: str,
        resource_type: str,
        resource_id: Optional[Any] = None,
        old_values: Optional[dict[str, Any]] = None,
        new_values: Optional[dict[str, Any]] = None,
        admin_id: Optional[str] = None,
    ) -> None:
        """Falhas são registradas em log e descartadas."""
        entry = ActivityLogEntry(
            admin_user_id=admin_id or context.admin_id,
            action_type=action_type,
            resource_type=resource_type,
            resource_id=str(resource_id) if resource_id is not None else None,
            old_values=old_values,
            new_values=new_values,
            ip_address=(context.ip_address or '')[:64] or None,
            user_agent=context.user_agent or None,
        )
        try:
            await self._repository.add(entry)
        except Exception as exc:
            log_warning(
                'ACTIVITY_LOG_WRITE_FAILED',
                {
                    'action_type': action_type,
                    'resource_type': resource_type,
                    'resource_id': entry.resource_id,
                    'error': exc.__class__.__name__,
                },
            )


class ActivityService:
    def __init__(self, repository: ActivityLogRepositoryImpl) -> None:
        self._repository = repository

    async def list_activity(self, filters: ActivityFilters) -> Page[ActivityOutput]:
        page = await self._repository.list_page(filters)
        return map_page(page, _to_output)


def _to_output(entry: ActivityLogEntry) -> ActivityOutput:
    return ActivityOutput(
        id=entry.id or '',
        admin_user_id=entry.admin_user_id,
        action_type=entry.action_type,
        resource_type=entry.resource_type,
        resource_id=entry.resource_id,
        old_values=entry.old_values,
        new_values=entry.new_values,
        ip_address=entry.ip_address,
        user_agent=entry.user_agent,
        created_at=entry.created_at,
        summary=describe_activity(entry.action_type, entry.resource_type, entry.resource_id),
    )

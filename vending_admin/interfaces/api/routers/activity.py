# caminho: vending_admin/interfaces/api/routers/activity.py
# Funções:
# - Consulta do log de atividades administrativas

from __future__ import annotations

from fastapi import APIRouter, Depends, Request

from vending_admin.application.activity.dto import ActivityOutput
from vending_admin.application.activity.use_cases import ActivityService
from vending_admin.application.common.dto import PageEnvelope, page_envelope
from vending_admin.domain.admins.entities import SessionClaims
from vending_admin.domain.admins.roles import Capability
from vending_admin.interfaces.api.dependencies import get_activity_service
from vending_admin.shared.auth_dependencies import require_capability
from vending_admin.shared.filters import ActivityFilters, parse_filters

router = APIRouter(prefix='/admin/activity', tags=['activity'])


@router.get(
    '',
    response_model=PageEnvelope[ActivityOutput],
    summary='Listar atividades',
    description='Filtros: `resourceType`, `actionType`, `adminUserId`, `limit` (1..100, padrão 10), `offset`.',
)
async def list_activity(
    request: Request,
    _: SessionClaims = Depends(require_capability(Capability.ACTIVITY_READ)),
    service: ActivityService = Depends(get_activity_service),
) -> PageEnvelope[ActivityOutput]:
    filters = parse_filters(ActivityFilters, request.query_params)
    return page_envelope(await service.list_activity(filters))

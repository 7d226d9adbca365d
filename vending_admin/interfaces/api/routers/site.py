# caminho: vending_admin/interfaces/api/routers/site.py
# Funções:
# - seo_router: configurações de SEO por página
# - business_router: dados do negócio (linha única)

from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends, Request, status

from vending_admin.application.common.dto import Envelope, MessageEnvelope, PageEnvelope, page_envelope
from vending_admin.application.site.dto import (
    BusinessInfoOutput,
    BusinessInfoUpdateInput,
    SeoSettingsCreateInput,
    SeoSettingsOutput,
    SeoSettingsUpdateInput,
)
from vending_admin.application.site.use_cases import BusinessInfoService, SeoService
from vending_admin.domain.admins.entities import SessionClaims
from vending_admin.domain.admins.roles import Capability
from vending_admin.interfaces.api.dependencies import (
    build_request_context,
    get_business_service,
    get_seo_service,
)
from vending_admin.shared.auth_dependencies import require_capability
from vending_admin.shared.filters import SeoFilters, parse_filters

seo_router = APIRouter(prefix='/admin/seo', tags=['seo'])
business_router = APIRouter(prefix='/admin/business', tags=['business'])


@seo_router.get('', response_model=PageEnvelope[SeoSettingsOutput], summary='Listar configurações de SEO')
async def list_seo_settings(
    request: Request,
    _: SessionClaims = Depends(require_capability(Capability.SEO_READ)),
    service: SeoService = Depends(get_seo_service),
) -> PageEnvelope[SeoSettingsOutput]:
    filters = parse_filters(SeoFilters, request.query_params)
    return page_envelope(await service.list_settings(filters))


@seo_router.post(
    '',
    response_model=MessageEnvelope[SeoSettingsOutput],
    status_code=status.HTTP_201_CREATED,
    summary='Cadastrar SEO de uma página',
    description='`pagePath` obrigatório, iniciado por `/` e único.',
)
async def create_seo_settings(
    payload: SeoSettingsCreateInput,
    request: Request,
    claims: SessionClaims = Depends(require_capability(Capability.SEO_WRITE)),
    service: SeoService = Depends(get_seo_service),
) -> MessageEnvelope[SeoSettingsOutput]:
    created = await service.create_settings(payload, build_request_context(request, claims))
    return MessageEnvelope[SeoSettingsOutput](data=created, message='SEO settings created successfully')


@seo_router.get('/{setting_id}', response_model=Envelope[SeoSettingsOutput], summary='Detalhar SEO')
async def get_seo_settings(
    setting_id: uuid.UUID,
    _: SessionClaims = Depends(require_capability(Capability.SEO_READ)),
    service: SeoService = Depends(get_seo_service),
) -> Envelope[SeoSettingsOutput]:
    return Envelope[SeoSettingsOutput](data=await service.get_settings(setting_id))


@seo_router.patch('/{setting_id}', response_model=MessageEnvelope[SeoSettingsOutput], summary='Atualizar SEO')
async def update_seo_settings(
    setting_id: uuid.UUID,
    payload: SeoSettingsUpdateInput,
    request: Request,
    claims: SessionClaims = Depends(require_capability(Capability.SEO_WRITE)),
    service: SeoService = Depends(get_seo_service),
) -> MessageEnvelope[SeoSettingsOutput]:
    updated = await service.update_settings(setting_id, payload, build_request_context(request, claims))
    return MessageEnvelope[SeoSettingsOutput](data=updated, message='SEO settings updated successfully')


@business_router.get('', response_model=Envelope[BusinessInfoOutput], summary='Dados do negócio')
async def get_business_info(
    _: SessionClaims = Depends(require_capability(Capability.BUSINESS_READ)),
    service: BusinessInfoService = Depends(get_business_service),
) -> Envelope[BusinessInfoOutput]:
    return Envelope[BusinessInfoOutput](data=await service.get_info())


@business_router.patch('', response_model=MessageEnvelope[BusinessInfoOutput], summary='Atualizar dados do negócio')
async def update_business_info(
    payload: BusinessInfoUpdateInput,
    request: Request,
    claims: SessionClaims = Depends(require_capability(Capability.BUSINESS_WRITE)),
    service: BusinessInfoService = Depends(get_business_service),
) -> MessageEnvelope[BusinessInfoOutput]:
    updated = await service.update_info(payload, build_request_context(request, claims))
    return MessageEnvelope[BusinessInfoOutput](data=updated, message='Business information updated successfully')

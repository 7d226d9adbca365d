# caminho: vending_admin/interfaces/api/routers/marketing.py
# Funções:
# - templates_router: templates de e-mail (CRUD e renderização)
# - exit_intent_router: campanhas do popup de saída (CRUD, uma ativa por vez)

from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends, Request, status

from vending_admin.application.common.dto import Envelope, MessageEnvelope, PageEnvelope, page_envelope
from vending_admin.application.marketing.dto import (
    EmailTemplateCreateInput,
    EmailTemplateOutput,
    EmailTemplateUpdateInput,
    ExitIntentCreateInput,
    ExitIntentOutput,
    ExitIntentUpdateInput,
    RenderedTemplate,
    RenderTemplateInput,
)
from vending_admin.application.marketing.use_cases import EmailTemplateService, ExitIntentService
from vending_admin.domain.admins.entities import SessionClaims
from vending_admin.domain.admins.roles import Capability
from vending_admin.interfaces.api.dependencies import (
    build_request_context,
    get_email_template_service,
    get_exit_intent_service,
)
from vending_admin.shared.auth_dependencies import require_capability
from vending_admin.shared.filters import EmailTemplateFilters, ExitIntentFilters, parse_filters

templates_router = APIRouter(prefix='/admin/marketing/email-templates', tags=['marketing'])
exit_intent_router = APIRouter(prefix='/admin/marketing/exit-intent', tags=['marketing'])


# --- Templates de e-mail ---


@templates_router.get('', response_model=PageEnvelope[EmailTemplateOutput], summary='Listar templates de e-mail')
async def list_email_templates(
    request: Request,
    _: SessionClaims = Depends(require_capability(Capability.MARKETING_READ)),
    service: EmailTemplateService = Depends(get_email_template_service),
) -> PageEnvelope[EmailTemplateOutput]:
    filters = parse_filters(EmailTemplateFilters, request.query_params)
    return page_envelope(await service.list_templates(filters))


@templates_router.post(
    '',
    response_model=MessageEnvelope[EmailTemplateOutput],
    status_code=status.HTTP_201_CREATED,
    summary='Cadastrar template de e-mail',
    description='`templateId` único; variáveis aparecem no texto como `[nome]`.',
)
async def create_email_template(
    payload: EmailTemplateCreateInput,
    request: Request,
    claims: SessionClaims = Depends(require_capability(Capability.MARKETING_WRITE)),
    service: EmailTemplateService = Depends(get_email_template_service),
) -> MessageEnvelope[EmailTemplateOutput]:
    created = await service.create_template(payload, build_request_context(request, claims))
    return MessageEnvelope[EmailTemplateOutput](data=created, message='Email template created successfully')


@templates_router.get('/{template_id}', response_model=Envelope[EmailTemplateOutput], summary='Detalhar template')
async def get_email_template(
    template_id: uuid.UUID,
    _: SessionClaims = Depends(require_capability(Capability.MARKETING_READ)),
    service: EmailTemplateService = Depends(get_email_template_service),
) -> Envelope[EmailTemplateOutput]:
    return Envelope[EmailTemplateOutput](data=await service.get_template(template_id))


@templates_router.patch('/{template_id}', response_model=MessageEnvelope[EmailTemplateOutput], summary='Atualizar template')
async def update_email_template(
    template_id: uuid.UUID,
    payload: EmailTemplateUpdateInput,
    request: Request,
    claims: SessionClaims = Depends(require_capability(Capability.MARKETING_WRITE)),
    service: EmailTemplateService = Depends(get_email_template_service),
) -> MessageEnvelope[EmailTemplateOutput]:
    updated = await service.update_template(template_id, payload, build_request_context(request, claims))
    return MessageEnvelope[EmailTemplateOutput](data=updated, message='Email template updated successfully')


@templates_router.delete(
    '/{template_id}',
    response_model=MessageEnvelope[EmailTemplateOutput],
    summary='Remover template',
    description='Exclusão definitiva; templates padrão (`is_default`) não podem ser removidos.',
)
async def delete_email_template(
    template_id: uuid.UUID,
    request: Request,
    claims: SessionClaims = Depends(require_capability(Capability.MARKETING_DELETE)),
    service: EmailTemplateService = Depends(get_email_template_service),
) -> MessageEnvelope[EmailTemplateOutput]:
    removed = await service.delete_template(template_id, build_request_context(request, claims))
    return MessageEnvelope[EmailTemplateOutput](data=removed, message='Email template deleted successfully')


@templates_router.post(
    '/{template_id}/render',
    response_model=Envelope[RenderedTemplate],
    summary='Renderizar template',
    description='Substitui `[nome]` pelos valores informados (com escape de HTML) e incrementa o contador de uso.',
)
async def render_email_template(
    template_id: uuid.UUID,
    payload: RenderTemplateInput,
    _: SessionClaims = Depends(require_capability(Capability.EMAILS_SEND)),
    service: EmailTemplateService = Depends(get_email_template_service),
) -> Envelope[RenderedTemplate]:
    return Envelope[RenderedTemplate](data=await service.render_template(template_id, payload))


# --- Exit intent ---


@exit_intent_router.get('', response_model=PageEnvelope[ExitIntentOutput], summary='Listar campanhas de exit intent')
async def list_exit_intent_campaigns(
    request: Request,
    _: SessionClaims = Depends(require_capability(Capability.MARKETING_READ)),
    service: ExitIntentService = Depends(get_exit_intent_service),
) -> PageEnvelope[ExitIntentOutput]:
    filters = parse_filters(ExitIntentFilters, request.query_params)
    return page_envelope(await service.list_campaigns(filters))


@exit_intent_router.post(
    '',
    response_model=MessageEnvelope[ExitIntentOutput],
    status_code=status.HTTP_201_CREATED,
    summary='Cadastrar campanha',
    description='Com `isActive=true`, as demais campanhas são desativadas na mesma transação.',
)
async def create_exit_intent_campaign(
    payload: ExitIntentCreateInput,
    request: Request,
    claims: SessionClaims = Depends(require_capability(Capability.MARKETING_WRITE)),
    service: ExitIntentService = Depends(get_exit_intent_service),
) -> MessageEnvelope[ExitIntentOutput]:
    created = await service.create_campaign(payload, build_request_context(request, claims))
    return MessageEnvelope[ExitIntentOutput](data=created, message='Exit intent campaign created successfully')


@exit_intent_router.get('/{campaign_id}', response_model=Envelope[ExitIntentOutput], summary='Detalhar campanha')
async def get_exit_intent_campaign(
    campaign_id: uuid.UUID,
    _: SessionClaims = Depends(require_capability(Capability.MARKETING_READ)),
    service: ExitIntentService = Depends(get_exit_intent_service),
) -> Envelope[ExitIntentOutput]:
    return Envelope[ExitIntentOutput](data=await service.get_campaign(campaign_id))


@exit_intent_router.patch('/{campaign_id}', response_model=MessageEnvelope[ExitIntentOutput], summary='Atualizar campanha')
async def update_exit_intent_campaign(
    campaign_id: uuid.UUID,
    payload: ExitIntentUpdateInput,
    request: Request,
    claims: SessionClaims = Depends(require_capability(Capability.MARKETING_WRITE)),
    service: ExitIntentService = Depends(get_exit_intent_service),
) -> MessageEnvelope[ExitIntentOutput]:
    updated = await service.update_campaign(campaign_id, payload, build_request_context(request, claims))
    return MessageEnvelope[ExitIntentOutput](data=updated, message='Exit intent campaign updated successfully')


@exit_intent_router.delete('/{campaign_id}', response_model=MessageEnvelope[ExitIntentOutput], summary='Remover campanha')
async def delete_exit_intent_campaign(
    campaign_id: uuid.UUID,
    request: Request,
    claims: SessionClaims = Depends(require_capability(Capability.MARKETING_DELETE)),
    service: ExitIntentService = Depends(get_exit_intent_service),
) -> MessageEnvelope[ExitIntentOutput]:
    removed = await service.delete_campaign(campaign_id, build_request_context(request, claims))
    return MessageEnvelope[ExitIntentOutput](data=removed, message='Exit intent campaign deleted successfully')

# caminho: vending_admin/interfaces/api/routers/public.py
# Funções:
# - Formulário público de contato
# - Catálogo público de máquinas ativas
# - Templates de e-mail ativos e popup de exit intent do site

from __future__ import annotations

from fastapi import APIRouter, Depends, Request, status

from vending_admin.application.catalog.dto import MachineOutput
from vending_admin.application.catalog.use_cases import MachineService
from vending_admin.application.common.dto import Envelope, PageEnvelope, page_envelope
from vending_admin.application.contacts.dto import ContactSubmissionInput, ContactSubmitResponse
from vending_admin.application.contacts.use_cases import ContactService
from vending_admin.application.marketing.dto import ActiveTemplateOutput, ExitIntentPopupOutput
from vending_admin.application.marketing.use_cases import EmailTemplateService, ExitIntentService
from vending_admin.interfaces.api.dependencies import (
    build_request_context,
    get_contact_service,
    get_email_template_service,
    get_exit_intent_service,
    get_machine_service,
)
from vending_admin.shared.filters import PublicMachineFilters, parse_filters

router = APIRouter(tags=['public'])


@router.post(
    '/contact',
    response_model=ContactSubmitResponse,
    status_code=status.HTTP_201_CREATED,
    summary='Enviar formulário de contato',
    description="""Grava o contato e tenta enviar a confirmação ao cliente e o aviso à equipe.

Falhas de e-mail não impedem o cadastro: o resultado de cada envio vem em `emailStatus`.
""",
)
async def submit_contact(
    payload: ContactSubmissionInput,
    request: Request,
    service: ContactService = Depends(get_contact_service),
) -> ContactSubmitResponse:
    return await service.submit(payload, build_request_context(request))


@router.get('/vending-machines', response_model=PageEnvelope[MachineOutput], summary='Catálogo público')
async def list_public_machines(
    request: Request,
    service: MachineService = Depends(get_machine_service),
) -> PageEnvelope[MachineOutput]:
    filters = parse_filters(PublicMachineFilters, request.query_params)
    return page_envelope(await service.list_public_machines(filters))


@router.get('/vending-machines/{slug}', response_model=Envelope[MachineOutput], summary='Máquina pública por slug')
async def get_public_machine(
    slug: str,
    service: MachineService = Depends(get_machine_service),
) -> Envelope[MachineOutput]:
    return Envelope[MachineOutput](data=await service.get_public_machine(slug))


@router.get(
    '/marketing/email-templates/active',
    response_model=Envelope[dict[str, ActiveTemplateOutput]],
    summary='Templates de e-mail ativos',
    description='Mapa `{templateId: {name, subject, body, variables}}` dos templates ativos.',
)
async def list_active_email_templates(
    service: EmailTemplateService = Depends(get_email_template_service),
) -> Envelope[dict[str, ActiveTemplateOutput]]:
    return Envelope[dict[str, ActiveTemplateOutput]](data=await service.active_templates())


@router.get(
    '/marketing/exit-intent/active',
    response_model=Envelope[ExitIntentPopupOutput],
    summary='Popup de exit intent',
    description='Campanha ativa ou o conteúdo padrão quando nenhuma estiver ativa (`campaign_id` nulo).',
)
async def get_active_exit_intent(
    service: ExitIntentService = Depends(get_exit_intent_service),
) -> Envelope[ExitIntentPopupOutput]:
    return Envelope[ExitIntentPopupOutput](data=await service.active_popup())

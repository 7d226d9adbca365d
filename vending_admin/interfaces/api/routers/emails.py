# caminho: vending_admin/interfaces/api/routers/emails.py
# Funções:
# - Envio avulso de e-mail pelo painel e histórico de envios

from __future__ import annotations

from fastapi import APIRouter, Depends, Request

from vending_admin.application.common.dto import MessageEnvelope, PageEnvelope, page_envelope
from vending_admin.application.emails.dto import EmailLogOutput, EmailSent, SendEmailInput
from vending_admin.application.emails.use_cases import EmailService
from vending_admin.domain.admins.entities import SessionClaims
from vending_admin.domain.admins.roles import Capability
from vending_admin.interfaces.api.dependencies import build_request_context, get_email_service
from vending_admin.shared.auth_dependencies import require_capability
from vending_admin.shared.filters import EmailLogFilters, parse_filters

router = APIRouter(prefix='/admin/emails', tags=['emails'])


@router.post(
    '/send',
    response_model=MessageEnvelope[EmailSent],
    summary='Enviar e-mail',
    description="""Envia pelo SMTP configurado e registra em `email_logs`.

Falha de entrega responde 502; o registro do histórico é feito apenas após envio bem-sucedido.
""",
)
async def send_email(
    payload: SendEmailInput,
    request: Request,
    claims: SessionClaims = Depends(require_capability(Capability.EMAILS_SEND)),
    service: EmailService = Depends(get_email_service),
) -> MessageEnvelope[EmailSent]:
    sent = await service.send(payload, build_request_context(request, claims))
    return MessageEnvelope[EmailSent](data=sent, message='Email sent successfully')


@router.get(
    '/logs',
    response_model=PageEnvelope[EmailLogOutput],
    summary='Histórico de envios',
    description='Filtros: `status`, `contactId`, `limit` (1..100), `offset`.',
)
async def list_email_logs(
    request: Request,
    _: SessionClaims = Depends(require_capability(Capability.EMAILS_READ)),
    service: EmailService = Depends(get_email_service),
) -> PageEnvelope[EmailLogOutput]:
    filters = parse_filters(EmailLogFilters, request.query_params)
    return page_envelope(await service.list_logs(filters))

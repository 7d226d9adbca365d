# caminho: vending_admin/interfaces/api/routers/contacts.py
# Funções:
# - Listagem, detalhe e atualização dos contatos recebidos pelo site

from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends, Request

from vending_admin.application.common.dto import Envelope, MessageEnvelope, PageEnvelope, page_envelope
from vending_admin.application.contacts.dto import ContactOutput, ContactUpdateInput
from vending_admin.application.contacts.use_cases import ContactService
from vending_admin.domain.admins.entities import SessionClaims
from vending_admin.domain.admins.roles import Capability
from vending_admin.interfaces.api.dependencies import build_request_context, get_contact_service
from vending_admin.shared.auth_dependencies import require_capability
from vending_admin.shared.filters import ContactFilters, parse_filters

router = APIRouter(prefix='/admin/contacts', tags=['contacts'])


@router.get(
    '',
    response_model=PageEnvelope[ContactOutput],
    summary='Listar contatos',
    description='Filtros: `status`, `assignedTo`, `search`, `dateFrom`, `dateTo`, `limit` (1..100), `offset`.',
)
async def list_contacts(
    request: Request,
    _: SessionClaims = Depends(require_capability(Capability.CONTACTS_READ)),
    service: ContactService = Depends(get_contact_service),
) -> PageEnvelope[ContactOutput]:
    filters = parse_filters(ContactFilters, request.query_params)
    return page_envelope(await service.list_contacts(filters))


@router.get('/{contact_id}', response_model=Envelope[ContactOutput], summary='Detalhar contato')
async def get_contact(
    contact_id: uuid.UUID,
    _: SessionClaims = Depends(require_capability(Capability.CONTACTS_READ)),
    service: ContactService = Depends(get_contact_service),
) -> Envelope[ContactOutput]:
    return Envelope[ContactOutput](data=await service.get_contact(contact_id))


@router.patch('/{contact_id}', response_model=MessageEnvelope[ContactOutput], summary='Atualizar contato')
async def update_contact(
    contact_id: uuid.UUID,
    payload: ContactUpdateInput,
    request: Request,
    claims: SessionClaims = Depends(require_capability(Capability.CONTACTS_WRITE)),
    service: ContactService = Depends(get_contact_service),
) -> MessageEnvelope[ContactOutput]:
    updated = await service.update_contact(contact_id, payload, build_request_context(request, claims))
    return MessageEnvelope[ContactOutput](data=updated, message='Contact updated successfully')

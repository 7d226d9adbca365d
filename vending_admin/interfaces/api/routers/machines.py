# caminho: vending_admin/interfaces/api/routers/machines.py
# Funções:
# - CRUD de máquinas de venda (exclusão lógica)
# - Upload, remoção e definição da imagem principal

from __future__ import annotations

import uuid
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, Query, Request, UploadFile, status
from pydantic import ValidationError

from vending_admin.application.auth.dto import SuccessResponse
from vending_admin.application.catalog.dto import (
    MachineCreateInput,
    MachineImageOutput,
    MachineImageUpload,
    MachineOutput,
    MachineUpdateInput,
    SetPrimaryImageInput,
)
from vending_admin.application.catalog.use_cases import MachineService
from vending_admin.application.common.dto import Envelope, MessageEnvelope, PageEnvelope, page_envelope
from vending_admin.domain.admins.entities import SessionClaims
from vending_admin.domain.admins.roles import Capability
from vending_admin.interfaces.api.dependencies import build_request_context, get_machine_service
from vending_admin.shared.auth_dependencies import require_capability
from vending_admin.shared.errors import ValidationFailure, pydantic_error_details
from vending_admin.shared.filters import MachineFilters, parse_filters

router = APIRouter(prefix='/admin/machines', tags=['machines'])


@router.get(
    '',
    response_model=PageEnvelope[MachineOutput],
    summary='Listar máquinas',
    description='Filtros: `category`, `active` (true/false), `search`, `limit` (1..100), `offset`.',
)
async def list_machines(
    request: Request,
    _: SessionClaims = Depends(require_capability(Capability.MACHINES_READ)),
    service: MachineService = Depends(get_machine_service),
) -> PageEnvelope[MachineOutput]:
    filters = parse_filters(MachineFilters, request.query_params)
    return page_envelope(await service.list_machines(filters))


@router.post(
    '',
    response_model=MessageEnvelope[MachineOutput],
    status_code=status.HTTP_201_CREATED,
    summary='Cadastrar máquina',
)
async def create_machine(
    payload: MachineCreateInput,
    request: Request,
    claims: SessionClaims = Depends(require_capability(Capability.MACHINES_WRITE)),
    service: MachineService = Depends(get_machine_service),
) -> MessageEnvelope[MachineOutput]:
    created = await service.create_machine(payload, build_request_context(request, claims))
    return MessageEnvelope[MachineOutput](data=created, message='Machine created successfully')


@router.get('/{machine_id}', response_model=Envelope[MachineOutput], summary='Detalhar máquina')
async def get_machine(
    machine_id: uuid.UUID,
    _: SessionClaims = Depends(require_capability(Capability.MACHINES_READ)),
    service: MachineService = Depends(get_machine_service),
) -> Envelope[MachineOutput]:
    return Envelope[MachineOutput](data=await service.get_machine(machine_id))


@router.patch('/{machine_id}', response_model=MessageEnvelope[MachineOutput], summary='Atualizar máquina')
async def update_machine(
    machine_id: uuid.UUID,
    payload: MachineUpdateInput,
    request: Request,
    claims: SessionClaims = Depends(require_capability(Capability.MACHINES_WRITE)),
    service: MachineService = Depends(get_machine_service),
) -> MessageEnvelope[MachineOutput]:
    updated = await service.update_machine(machine_id, payload, build_request_context(request, claims))
    return MessageEnvelope[MachineOutput](data=updated, message='Machine updated successfully')


@router.delete(
    '/{machine_id}',
    response_model=MessageEnvelope[MachineOutput],
    summary='Desativar máquina',
    description='Exclusão lógica: marca `is_active=false`.',
)
async def delete_machine(
    machine_id: uuid.UUID,
    request: Request,
    claims: SessionClaims = Depends(require_capability(Capability.MACHINES_DELETE)),
    service: MachineService = Depends(get_machine_service),
) -> MessageEnvelope[MachineOutput]:
    updated = await service.deactivate_machine(machine_id, build_request_context(request, claims))
    return MessageEnvelope[MachineOutput](data=updated, message='Machine deactivated successfully')


# --- Imagens ---


@router.post(
    '/{machine_id}/images',
    response_model=MessageEnvelope[MachineImageOutput],
    status_code=status.HTTP_201_CREATED,
    summary='Enviar imagem',
    description='Multipart com `image`, `alt_text`, `display_order`, `is_primary` e, opcionalmente, `width`/`height`.',
)
async def upload_image(
    machine_id: uuid.UUID,
    request: Request,
    image: UploadFile = File(...),
    alt_text: Optional[str] = Form(default=None),
    display_order: Optional[str] = Form(default=None),
    is_primary: Optional[str] = Form(default=None),
    width: Optional[str] = Form(default=None),
    height: Optional[str] = Form(default=None),
    claims: SessionClaims = Depends(require_capability(Capability.MACHINES_WRITE)),
    service: MachineService = Depends(get_machine_service),
) -> MessageEnvelope[MachineImageOutput]:
    raw = {
        'alt_text': alt_text,
        'display_order': display_order,
        'is_primary': is_primary,
        'width': width,
        'height': height,
    }
    try:
        fields = MachineImageUpload.model_validate({key: value for key, value in raw.items() if value not in (None, '')})
    except ValidationError as exc:
        raise ValidationFailure(details=pydantic_error_details(exc.errors(include_url=False))) from exc

    content = await image.read()
    created = await service.upload_image(
        machine_id,
        content=content,
        content_type=image.content_type,
        fields=fields,
        context=build_request_context(request, claims),
    )
    return MessageEnvelope[MachineImageOutput](data=created, message='Image uploaded successfully')


@router.delete('/{machine_id}/images', response_model=SuccessResponse, summary='Remover imagem')
async def delete_image(
    machine_id: uuid.UUID,
    request: Request,
    image_id: uuid.UUID = Query(...),
    claims: SessionClaims = Depends(require_capability(Capability.MACHINES_DELETE)),
    service: MachineService = Depends(get_machine_service),
) -> SuccessResponse:
    await service.delete_image(machine_id, image_id, build_request_context(request, claims))
    return SuccessResponse()


@router.patch(
    '/{machine_id}/images/set-primary',
    response_model=MessageEnvelope[MachineImageOutput],
    summary='Definir imagem principal',
    description='Em uma única transação: desmarca a principal atual e marca a escolhida.',
)
async def set_primary_image(
    machine_id: uuid.UUID,
    payload: SetPrimaryImageInput,
    request: Request,
    claims: SessionClaims = Depends(require_capability(Capability.MACHINES_WRITE)),
    service: MachineService = Depends(get_machine_service),
) -> MessageEnvelope[MachineImageOutput]:
    image = await service.set_primary_image(machine_id, payload.image_id, build_request_context(request, claims))
    return MessageEnvelope[MachineImageOutput](data=image, message='Primary image updated successfully')

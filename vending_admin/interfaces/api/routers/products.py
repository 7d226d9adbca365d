# caminho: vending_admin/interfaces/api/routers/products.py
# Funções:
# - CRUD de produtos (exclusão lógica) e atualização em lote de ordem/flags

from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends, Request, status

from vending_admin.application.catalog.dto import (
    ProductBulkUpdateInput,
    ProductCreateInput,
    ProductOutput,
    ProductUpdateInput,
)
from vending_admin.application.catalog.use_cases import ProductService
from vending_admin.application.common.dto import Envelope, MessageEnvelope, PageEnvelope, page_envelope
from vending_admin.domain.admins.entities import SessionClaims
from vending_admin.domain.admins.roles import Capability
from vending_admin.interfaces.api.dependencies import build_request_context, get_product_service
from vending_admin.shared.auth_dependencies import require_capability
from vending_admin.shared.filters import ProductFilters, parse_filters

router = APIRouter(prefix='/admin/products', tags=['products'])


@router.get(
    '',
    response_model=PageEnvelope[ProductOutput],
    summary='Listar produtos',
    description='Filtros: `category`, `active`, `popular`, `healthy`, `search`, `limit` (1..200), `offset`.',
)
async def list_products(
    request: Request,
    _: SessionClaims = Depends(require_capability(Capability.PRODUCTS_READ)),
    service: ProductService = Depends(get_product_service),
) -> PageEnvelope[ProductOutput]:
    filters = parse_filters(ProductFilters, request.query_params)
    return page_envelope(await service.list_products(filters))


@router.post(
    '',
    response_model=MessageEnvelope[ProductOutput],
    status_code=status.HTTP_201_CREATED,
    summary='Cadastrar produto',
)
async def create_product(
    payload: ProductCreateInput,
    request: Request,
    claims: SessionClaims = Depends(require_capability(Capability.PRODUCTS_WRITE)),
    service: ProductService = Depends(get_product_service),
) -> MessageEnvelope[ProductOutput]:
    created = await service.create_product(payload, build_request_context(request, claims))
    return MessageEnvelope[ProductOutput](data=created, message='Product created successfully')


# Declarada antes de '/{product_id}'
@router.patch(
    '/bulk',
    response_model=MessageEnvelope[list[ProductOutput]],
    summary='Atualizar produtos em lote',
    description='Lista de `{id, displayOrder?, isActive?, isPopular?, isHealthy?}`.',
)
async def bulk_update_products(
    payload: ProductBulkUpdateInput,
    request: Request,
    claims: SessionClaims = Depends(require_capability(Capability.PRODUCTS_WRITE)),
    service: ProductService = Depends(get_product_service),
) -> MessageEnvelope[list[ProductOutput]]:
    updated = await service.bulk_update(payload, build_request_context(request, claims))
    return MessageEnvelope[list[ProductOutput]](data=updated, message=f'{len(updated)} products updated successfully')


@router.get('/{product_id}', response_model=Envelope[ProductOutput], summary='Detalhar produto')
async def get_product(
    product_id: uuid.UUID,
    _: SessionClaims = Depends(require_capability(Capability.PRODUCTS_READ)),
    service: ProductService = Depends(get_product_service),
) -> Envelope[ProductOutput]:
    return Envelope[ProductOutput](data=await service.get_product(product_id))


@router.patch('/{product_id}', response_model=MessageEnvelope[ProductOutput], summary='Atualizar produto')
async def update_product(
    product_id: uuid.UUID,
    payload: ProductUpdateInput,
    request: Request,
    claims: SessionClaims = Depends(require_capability(Capability.PRODUCTS_WRITE)),
    service: ProductService = Depends(get_product_service),
) -> MessageEnvelope[ProductOutput]:
    updated = await service.update_product(product_id, payload, build_request_context(request, claims))
    return MessageEnvelope[ProductOutput](data=updated, message='Product updated successfully')


@router.delete('/{product_id}', response_model=MessageEnvelope[ProductOutput], summary='Desativar produto')
async def delete_product(
    product_id: uuid.UUID,
    request: Request,
    claims: SessionClaims = Depends(require_capability(Capability.PRODUCTS_DELETE)),
    service: ProductService = Depends(get_product_service),
) -> MessageEnvelope[ProductOutput]:
    updated = await service.deactivate_product(product_id, build_request_context(request, claims))
    return MessageEnvelope[ProductOutput](data=updated, message='Product deactivated successfully')

# caminho: vending_admin/application/catalog/use_cases.py
# Funções:
# - MachineService: CRUD de máquinas (exclusão lógica), catálogo público,
#   upload/remoção de imagens e troca da imagem principal
# - ProductService: CRUD de produtos (exclusão lógica) e atualização em lote

from __future__ import annotations

import uuid
from dataclasses import dataclass
from typing import Any, Optional

from sqlalchemy.exc import IntegrityError

from vending_admin.application.activity.use_cases import ActivityRecorder
from vending_admin.application.catalog.dto import (
    MachineCreateInput,
    MachineImageOutput,
    MachineImageUpload,
    MachineOutput,
    MachineUpdateInput,
    ProductBulkUpdateInput,
    ProductCreateInput,
    ProductOutput,
    ProductUpdateInput,
)
from vending_admin.application.common.dto import RequestContext, map_page, snapshot
from vending_admin.config.settings import Settings
from vending_admin.infrastructure.db.models import ProductModel, VendingMachineModel
from vending_admin.infrastructure.db.query_builder import Page
from vending_admin.infrastructure.repositories.catalog_repository import (
    MachineImageRepositoryImpl,
    MachineRepositoryImpl,
    PrimaryImageInvariantError,
    ProductRepositoryImpl,
)
from vending_admin.infrastructure.storage.images import ImageStorage
from vending_admin.shared.errors import Conflict, NotFound, ValidationFailure
from vending_admin.shared.filters import MachineFilters, ProductFilters, PublicMachineFilters
from vending_admin.shared.logging import log_info, log_warning

MACHINE_RESOURCE = 'vending_machine'
MACHINE_IMAGE_RESOURCE = 'machine_image'
PRODUCT_RESOURCE = 'product'


@dataclass(slots=True)
class CatalogAdapters:
    machines: MachineRepositoryImpl
    images: MachineImageRepositoryImpl
    products: ProductRepositoryImpl
    activity: ActivityRecorder


class MachineService:
    def __init__(self, adapters: CatalogAdapters, settings: Settings, storage: ImageStorage) -> None:
        self._machines = adapters.machines
        self._images = adapters.images
        self._activity = adapters.activity
        self._settings = settings
        self._storage = storage

    # -- Máquinas -------------------------------------------------------------

    async def list_machines(self, filters: MachineFilters) -> Page[MachineOutput]:
        page = await self._machines.list_page(filters)
        return map_page(page, MachineOutput.model_validate)

    async def list_public_machines(self, filters: PublicMachineFilters) -> Page[MachineOutput]:
        page = await self._machines.list_public_page(filters)
        return map_page(page, MachineOutput.model_validate)

    async def get_machine(self, machine_id: uuid.UUID) -> MachineOutput:
        return MachineOutput.model_validate(await self._require_machine(machine_id))

    async def get_public_machine(self, slug: str) -> MachineOutput:
        model = await self._machines.get_active_by_slug(slug)
        if model is None:
            raise NotFound('Machine not found')
        return MachineOutput.model_validate(model)

    async def create_machine(self, payload: MachineCreateInput, context: RequestContext) -> MachineOutput:
        values = payload.model_dump(mode='json')
        await self._ensure_unique_slug(values['slug'])
        try:
            created = MachineOutput.model_validate(await self._machines.create(values))
        except IntegrityError as exc:
            raise Conflict('A machine with this slug already exists') from exc

        await self._activity.record(
            context,
            action_type='create',
            resource_type=MACHINE_RESOURCE,
            resource_id=created.id,
            new_values=snapshot(created, values),
        )
        log_info('MACHINE_CREATED', {'machine_id': str(created.id), 'slug': created.slug})
        return created

    async def update_machine(
        self,
        machine_id: uuid.UUID,
        payload: MachineUpdateInput,
        context: RequestContext,
    ) -> MachineOutput:
        model = await self._require_machine(machine_id)
        changes = payload.model_dump(mode='json', exclude_unset=True)
        if 'slug' in changes:
            await self._ensure_unique_slug(changes['slug'], exclude_id=machine_id)

        before = MachineOutput.model_validate(model)
        try:
            updated = MachineOutput.model_validate(await self._machines.update(model, changes))
        except IntegrityError as exc:
            raise Conflict('A machine with this slug already exists') from exc

        await self._activity.record(
            context,
            action_type='update',
            resource_type=MACHINE_RESOURCE,
            resource_id=machine_id,
            old_values=snapshot(before, changes),
            new_values=snapshot(updated, changes),
        )
        log_info('MACHINE_UPDATED', {'machine_id': str(machine_id), 'fields': sorted(changes)})
        return updated

    async def deactivate_machine(self, machine_id: uuid.UUID, context: RequestContext) -> MachineOutput:
        """Exclusão lógica: a máquina some do catálogo público, o histórico permanece."""
        model = await self._require_machine(machine_id)
        was_active = model.is_active
        updated = MachineOutput.model_validate(await self._machines.update(model, {'is_active': False}))
        await self._activity.record(
            context,
            action_type='delete',
            resource_type=MACHINE_RESOURCE,
            resource_id=machine_id,
            old_values={'is_active': was_active},
            new_values={'is_active': False},
        )
        log_info('MACHINE_DEACTIVATED', {'machine_id': str(machine_id)})
        return updated

    # -- Imagens --------------------------------------------------------------

    async def upload_image(
        self,
        machine_id: uuid.UUID,
        *,
        content: bytes,
        content_type: Optional[str],
        fields: MachineImageUpload,
        context: RequestContext,
    ) -> MachineImageOutput:
        machine = await self._require_machine(machine_id)
        content_type = (content_type or '').split(';')[0].strip().lower()
        self._validate_image(content, content_type)

        stored = await self._storage.save(folder=machine.slug, content=content, content_type=content_type)
        values: dict[str, Any] = {
            'machine_id': machine_id,
            'image_url': stored.public_url,
            'storage_path': stored.storage_path,
            'alt_text': fields.alt_text,
            'display_order': fields.display_order,
            'width': fields.width,
            'height': fields.height,
            'content_type': content_type,
            'file_size': stored.size,
        }
        try:
            image = await self._images.add_image(values, make_primary=fields.is_primary)
        except Exception:
            await self._discard_file(stored.storage_path)
            raise

        created = MachineImageOutput.model_validate(image)
        await self._activity.record(
            context,
            action_type='create',
            resource_type=MACHINE_IMAGE_RESOURCE,
            resource_id=created.id,
            new_values=snapshot(created, ('machine_id', 'image_url', 'is_primary', 'display_order')),
        )
        log_info('MACHINE_IMAGE_UPLOADED', {'machine_id': str(machine_id), 'image_id': str(created.id)})
        return created

    async def delete_image(self, machine_id: uuid.UUID, image_id: uuid.UUID, context: RequestContext) -> None:
        await self._require_machine(machine_id)
        image = await self._images.get_for_machine(machine_id, image_id)
        if image is None:
            raise NotFound('Image not found')

        removed = MachineImageOutput.model_validate(image)
        await self._images.remove(image)
        if removed.storage_path:
            await self._discard_file(removed.storage_path)

        await self._activity.record(
            context,
            action_type='delete',
            resource_type=MACHINE_IMAGE_RESOURCE,
            resource_id=image_id,
            old_values=snapshot(removed, ('machine_id', 'image_url', 'is_primary')),
        )
        log_info('MACHINE_IMAGE_DELETED', {'machine_id': str(machine_id), 'image_id': str(image_id)})

    async def set_primary_image(
        self,
        machine_id: uuid.UUID,
        image_id: uuid.UUID,
        context: RequestContext,
    ) -> MachineImageOutput:
        machine = await self._require_machine(machine_id)
        if await self._images.get_for_machine(machine_id, image_id) is None:
            raise NotFound('Image not found')
        previous = next((str(image.id) for image in machine.images if image.is_primary), None)

        try:
            image = await self._images.set_primary(machine_id, image_id)
        except (IntegrityError, PrimaryImageInvariantError) as exc:
            raise Conflict('Primary image changed concurrently. Please retry.') from exc

        await self._activity.record(
            context,
            action_type='update',
            resource_type=MACHINE_IMAGE_RESOURCE,
            resource_id=image_id,
            old_values={'primary_image_id': previous},
            new_values={'primary_image_id': str(image_id)},
        )
        log_info('MACHINE_PRIMARY_IMAGE_SET', {'machine_id': str(machine_id), 'image_id': str(image_id)})
        return MachineImageOutput.model_validate(image)

    # -- Auxiliares -----------------------------------------------------------

    def _validate_image(self, content: bytes, content_type: str) -> None:
        details = []
        if content_type not in self._settings.image_allowed_types:
            allowed = ', '.join(self._settings.image_allowed_types)
            details.append({'field': 'image', 'message': f'Unsupported image type. Allowed: {allowed}'})
        if not content:
            details.append({'field': 'image', 'message': 'Image file is empty'})
        elif len(content) > self._settings.IMAGE_MAX_BYTES:
            limit_mb = self._settings.IMAGE_MAX_BYTES // (1024 * 1024)
            details.append({'field': 'image', 'message': f'Image exceeds the {limit_mb}MB limit'})
        if details:
            raise ValidationFailure('Invalid image upload', details=details)

    async def _discard_file(self, storage_path: str) -> None:
        try:
            await self._storage.delete(storage_path)
        except (OSError, ValueError) as exc:
            log_warning('MACHINE_IMAGE_FILE_DELETE_FAILED', {'storage_path': storage_path, 'error': str(exc)})

    async def _ensure_unique_slug(self, slug: str, exclude_id: Optional[uuid.UUID] = None) -> None:
        existing = await self._machines.find_id_by(VendingMachineModel.slug, slug)
        if existing is not None and existing != exclude_id:
            raise Conflict('A machine with this slug already exists')

    async def _require_machine(self, machine_id: uuid.UUID) -> VendingMachineModel:
        model = await self._machines.get(machine_id)
        if model is None:
            raise NotFound('Machine not found')
        return model


class ProductService:
    def __init__(self, adapters: CatalogAdapters) -> None:
        self._products = adapters.products
        self._activity = adapters.activity

    async def list_products(self, filters: ProductFilters) -> Page[ProductOutput]:
        page = await self._products.list_page(filters)
        return map_page(page, ProductOutput.model_validate)

    async def get_product(self, product_id: uuid.UUID) -> ProductOutput:
        return ProductOutput.model_validate(await self._require(product_id))

    async def create_product(self, payload: ProductCreateInput, context: RequestContext) -> ProductOutput:
        values = payload.model_dump(mode='json')
        await self._ensure_unique_slug(values['slug'])
        try:
            created = ProductOutput.model_validate(await self._products.create(values))
        except IntegrityError as exc:
            raise Conflict('A product with this slug already exists') from exc

        await self._activity.record(
            context,
            action_type='create',
            resource_type=PRODUCT_RESOURCE,
            resource_id=created.id,
            new_values=snapshot(created, values),
        )
        log_info('PRODUCT_CREATED', {'product_id': str(created.id), 'slug': created.slug})
        return created

    async def update_product(
        self,
        product_id: uuid.UUID,
        payload: ProductUpdateInput,
        context: RequestContext,
    ) -> ProductOutput:
        model = await self._require(product_id)
        changes = payload.model_dump(mode='json', exclude_unset=True)
        if 'slug' in changes:
            await self._ensure_unique_slug(changes['slug'], exclude_id=product_id)

        before = ProductOutput.model_validate(model)
        try:
            updated = ProductOutput.model_validate(await self._products.update(model, changes))
        except IntegrityError as exc:
            raise Conflict('A product with this slug already exists') from exc

        await self._activity.record(
            context,
            action_type='update',
            resource_type=PRODUCT_RESOURCE,
            resource_id=product_id,
            old_values=snapshot(before, changes),
            new_values=snapshot(updated, changes),
        )
        log_info('PRODUCT_UPDATED', {'product_id': str(product_id), 'fields': sorted(changes)})
        return updated

    async def deactivate_product(self, product_id: uuid.UUID, context: RequestContext) -> ProductOutput:
        model = await self._require(product_id)
        was_active = model.is_active
        updated = ProductOutput.model_validate(await self._products.update(model, {'is_active': False}))
        await self._activity.record(
            context,
            action_type='delete',
            resource_type=PRODUCT_RESOURCE,
            resource_id=product_id,
            old_values={'is_active': was_active},
            new_values={'is_active': False},
        )
        log_info('PRODUCT_DEACTIVATED', {'product_id': str(product_id)})
        return updated

    async def bulk_update(self, payload: ProductBulkUpdateInput, context: RequestContext) -> list[ProductOutput]:
        changes = [
            (item.id, item.model_dump(exclude_unset=True, exclude={'id'}))
            for item in payload.products
        ]
        updated = [ProductOutput.model_validate(model) for model in await self._products.bulk_update(changes)]

        await self._activity.record(
            context,
            action_type='update',
            resource_type=PRODUCT_RESOURCE,
            new_values={'bulk': [{'id': str(product_id), **values} for product_id, values in changes]},
        )
        log_info('PRODUCTS_BULK_UPDATED', {'requested': len(changes), 'updated': len(updated)})
        return updated

    async def _ensure_unique_slug(self, slug: str, exclude_id: Optional[uuid.UUID] = None) -> None:
        existing = await self._products.find_id_by(ProductModel.slug, slug)
        if existing is not None and existing != exclude_id:
            raise Conflict('A product with this slug already exists')

    async def _require(self, product_id: uuid.UUID) -> ProductModel:
        model = await self._products.get(product_id)
        if model is None:
            raise NotFound('Product not found')
        return model

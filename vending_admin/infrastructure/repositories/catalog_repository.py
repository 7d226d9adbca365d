# caminho: vending_admin/infrastructure/repositories/catalog_repository.py
# Funções:
# - MachineRepositoryImpl: máquinas com imagens carregadas (admin e catálogo público)
# - MachineImageRepositoryImpl: imagens, incluindo a troca atômica da imagem principal
# - ProductRepositoryImpl: produtos e atualização em lote

from __future__ import annotations

import uuid
from typing import Any, Optional, Sequence

from sqlalchemy import func, select, update
from sqlalchemy.orm import selectinload

from vending_admin.infrastructure.db.models import MachineImageModel, ProductModel, VendingMachineModel
from vending_admin.infrastructure.db.query_builder import (
    FilterColumn,
    Page,
    QueryableResource,
    as_bool_flag,
    build_list_query,
    fetch_page,
)
from vending_admin.infrastructure.db.utils import try_commit, try_flush
from vending_admin.infrastructure.repositories.base import ResourceRepository
from vending_admin.shared.filters import PublicMachineFilters
from vending_admin.shared.logging import log_error

MACHINE_RESOURCE = QueryableResource(
    model=VendingMachineModel,
    filters={
        'category': FilterColumn(VendingMachineModel.category),
        'active': FilterColumn(VendingMachineModel.is_active, transform=as_bool_flag),
    },
    search_columns=(VendingMachineModel.name, VendingMachineModel.slug),
    order_by=(
        VendingMachineModel.display_order.asc(),
        VendingMachineModel.created_at.desc(),
        VendingMachineModel.id.asc(),
    ),
    options=(selectinload(VendingMachineModel.images),),
)

PUBLIC_MACHINE_RESOURCE = QueryableResource(
    model=VendingMachineModel,
    filters={'category': FilterColumn(VendingMachineModel.category)},
    search_columns=MACHINE_RESOURCE.search_columns,
    order_by=MACHINE_RESOURCE.order_by,
    base_criteria=(VendingMachineModel.is_active.is_(True),),
    options=MACHINE_RESOURCE.options,
)

PRODUCT_RESOURCE = QueryableResource(
    model=ProductModel,
    filters={
        'category': FilterColumn(ProductModel.category),
        'active': FilterColumn(ProductModel.is_active, transform=as_bool_flag),
        'popular': FilterColumn(ProductModel.is_popular, transform=as_bool_flag),
        'healthy': FilterColumn(ProductModel.is_healthy, transform=as_bool_flag),
    },
    search_columns=(ProductModel.name, ProductModel.slug),
    order_by=(ProductModel.display_order.asc(), ProductModel.name.asc(), ProductModel.id.asc()),
)


class PrimaryImageInvariantError(RuntimeError):
    pass


class MachineRepositoryImpl(ResourceRepository[VendingMachineModel]):
    model = VendingMachineModel
    resource = MACHINE_RESOURCE
    detail_options = (selectinload(VendingMachineModel.images),)

    async def get_active_by_slug(self, slug: str) -> Optional[VendingMachineModel]:
        stmt = (
            select(VendingMachineModel)
            .where(VendingMachineModel.slug == slug, VendingMachineModel.is_active.is_(True))
            .options(*self.detail_options)
        )
        result = await self._session.execute(stmt)
        return result.scalars().unique().one_or_none()

    async def list_public_page(self, filters: PublicMachineFilters) -> Page[VendingMachineModel]:
        return await fetch_page(self._session, build_list_query(filters, PUBLIC_MACHINE_RESOURCE))


class MachineImageRepositoryImpl(ResourceRepository[MachineImageModel]):
    model = MachineImageModel

    async def get_for_machine(self, machine_id: uuid.UUID, image_id: uuid.UUID) -> Optional[MachineImageModel]:
        stmt = select(MachineImageModel).where(
            MachineImageModel.id == image_id,
            MachineImageModel.machine_id == machine_id,
        )
        result = await self._session.execute(stmt)
        return result.scalar_one_or_none()

    async def add_image(self, values: dict[str, Any], *, make_primary: bool) -> MachineImageModel:
        """Insere a imagem; quando principal, desmarca as demais na mesma transação."""
        machine_id = values['machine_id']
        model = MachineImageModel(**{**values, 'is_primary': False})
        self._session.add(model)
        try:
            await self._session.flush()
            if make_primary:
                await self._swap_primary(machine_id, model.id)
        except Exception:
            await self._session.rollback()
            raise
        await try_commit(self._session)
        await self._session.refresh(model)
        return model

    async def set_primary(self, machine_id: uuid.UUID, image_id: uuid.UUID) -> MachineImageModel:
        """Desmarca todas e marca a escolhida numa única transação, com verificação final."""
        try:
            await self._swap_primary(machine_id, image_id)
        except Exception:
            await self._session.rollback()
            raise
        await try_commit(self._session)
        image = await self.get_for_machine(machine_id, image_id)
        await self._session.refresh(image)
        return image

    async def remove(self, image: MachineImageModel) -> None:
        await self._session.delete(image)
        await try_flush(self._session)
        await try_commit(self._session)

    async def count_primary(self, machine_id: uuid.UUID) -> int:
        stmt = (
            select(func.count())
            .select_from(MachineImageModel)
            .where(MachineImageModel.machine_id == machine_id, MachineImageModel.is_primary.is_(True))
        )
        return int((await self._session.execute(stmt)).scalar_one())

    async def _swap_primary(self, machine_id: uuid.UUID, image_id: uuid.UUID) -> None:
        await self._session.execute(
            update(MachineImageModel)
            .where(MachineImageModel.machine_id == machine_id, MachineImageModel.is_primary.is_(True))
            .values(is_primary=False)
        )
        await self._session.execute(
            update(MachineImageModel)
            .where(MachineImageModel.id == image_id, MachineImageModel.machine_id == machine_id)
            .values(is_primary=True)
        )
        primaries = await self.count_primary(machine_id)
        if primaries != 1:
            log_error('MACHINE_PRIMARY_IMAGE_INVARIANT', {'machine_id': str(machine_id), 'primaries': primaries})
            raise PrimaryImageInvariantError(f'Expected exactly one primary image, found {primaries}')


class ProductRepositoryImpl(ResourceRepository[ProductModel]):
    model = ProductModel
    resource = PRODUCT_RESOURCE

    async def bulk_update(self, changes: Sequence[tuple[uuid.UUID, dict[str, Any]]]) -> list[ProductModel]:
        """Aplica todas as alterações numa transação; ids inexistentes são ignorados."""
        updated: list[ProductModel] = []
        try:
            for product_id, values in changes:
                model = await self._session.get(ProductModel, product_id)
                if model is None:
                    continue
                for key, value in values.items():
                    setattr(model, key, value)
                updated.append(model)
            await self._session.flush()
        except Exception:
            await self._session.rollback()
            raise
        await try_commit(self._session)
        return updated

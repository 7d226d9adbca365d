# caminho: vending_admin/application/site/use_cases.py
# Funções:
# - SeoService: listagem, criação (pagePath único), consulta e atualização de SEO
# - BusinessInfoService: leitura e atualização da linha única de dados do negócio

from __future__ import annotations

import uuid
from dataclasses import dataclass
from typing import Optional

from sqlalchemy.exc import IntegrityError

from vending_admin.application.activity.use_cases import ActivityRecorder
from vending_admin.application.common.dto import RequestContext, map_page, snapshot
from vending_admin.application.site.dto import (
    BusinessInfoOutput,
    BusinessInfoUpdateInput,
    SeoSettingsCreateInput,
    SeoSettingsOutput,
    SeoSettingsUpdateInput,
)
from vending_admin.config.constants import BUSINESS_INFO_ID
from vending_admin.infrastructure.db.models import BusinessInfoModel, SeoSettingModel
from vending_admin.infrastructure.db.query_builder import Page
from vending_admin.infrastructure.repositories.site_repository import (
    BusinessInfoRepositoryImpl,
    SeoSettingRepositoryImpl,
)
from vending_admin.shared.errors import Conflict, NotFound
from vending_admin.shared.filters import SeoFilters
from vending_admin.shared.logging import log_info

SEO_RESOURCE = 'seo_setting'
BUSINESS_RESOURCE = 'business_info'


@dataclass(slots=True)
class SiteAdapters:
    seo: SeoSettingRepositoryImpl
    business: BusinessInfoRepositoryImpl
    activity: ActivityRecorder


class SeoService:
    def __init__(self, adapters: SiteAdapters) -> None:
        self._seo = adapters.seo
        self._activity = adapters.activity

    async def list_settings(self, filters: SeoFilters) -> Page[SeoSettingsOutput]:
        page = await self._seo.list_page(filters)
        return map_page(page, SeoSettingsOutput.model_validate)

    async def get_settings(self, setting_id: uuid.UUID) -> SeoSettingsOutput:
        return SeoSettingsOutput.model_validate(await self._require(setting_id))

    async def create_settings(self, payload: SeoSettingsCreateInput, context: RequestContext) -> SeoSettingsOutput:
        values = payload.model_dump(mode='json')
        await self._ensure_unique_path(values['page_path'])
        try:
            created = SeoSettingsOutput.model_validate(await self._seo.create(values))
        except IntegrityError as exc:
            raise Conflict('SEO settings for this page already exist') from exc

        await self._activity.record(
            context,
            action_type='create',
            resource_type=SEO_RESOURCE,
            resource_id=created.id,
            new_values=snapshot(created, values),
        )
        log_info('SEO_SETTINGS_CREATED', {'seo_id': str(created.id), 'page_path': created.page_path})
        return created

    async def update_settings(
        self,
        setting_id: uuid.UUID,
        payload: SeoSettingsUpdateInput,
        context: RequestContext,
    ) -> SeoSettingsOutput:
        model = await self._require(setting_id)
        changes = payload.model_dump(mode='json', exclude_unset=True)
        if 'page_path' in changes:
            await self._ensure_unique_path(changes['page_path'], exclude_id=setting_id)

        before = SeoSettingsOutput.model_validate(model)
        try:
            updated = SeoSettingsOutput.model_validate(await self._seo.update(model, changes))
        except IntegrityError as exc:
            raise Conflict('SEO settings for this page already exist') from exc

        await self._activity.record(
            context,
            action_type='update',
            resource_type=SEO_RESOURCE,
            resource_id=setting_id,
            old_values=snapshot(before, changes),
            new_values=snapshot(updated, changes),
        )
        log_info('SEO_SETTINGS_UPDATED', {'seo_id': str(setting_id), 'fields': sorted(changes)})
        return updated

    async def _ensure_unique_path(self, page_path: str, exclude_id: Optional[uuid.UUID] = None) -> None:
        existing = await self._seo.find_id_by(SeoSettingModel.page_path, page_path)
        if existing is not None and existing != exclude_id:
            raise Conflict('SEO settings for this page already exist')

    async def _require(self, setting_id: uuid.UUID) -> SeoSettingModel:
        model = await self._seo.get(setting_id)
        if model is None:
            raise NotFound('SEO settings not found')
        return model


class BusinessInfoService:
    def __init__(self, adapters: SiteAdapters) -> None:
        self._business = adapters.business
        self._activity = adapters.activity

    async def get_info(self) -> BusinessInfoOutput:
        return BusinessInfoOutput.model_validate(await self._require())

    async def update_info(self, payload: BusinessInfoUpdateInput, context: RequestContext) -> BusinessInfoOutput:
        model = await self._require()
        changes = payload.model_dump(mode='json', exclude_unset=True)

        before = BusinessInfoOutput.model_validate(model)
        updated = BusinessInfoOutput.model_validate(await self._business.update(model, changes))

        await self._activity.record(
            context,
            action_type='update',
            resource_type=BUSINESS_RESOURCE,
            resource_id=BUSINESS_INFO_ID,
            old_values=snapshot(before, changes),
            new_values=snapshot(updated, changes),
        )
        log_info('BUSINESS_INFO_UPDATED', {'fields': sorted(changes)})
        return updated

    async def _require(self) -> BusinessInfoModel:
        model = await self._business.get(uuid.UUID(BUSINESS_INFO_ID))
        if model is None:
            raise NotFound('Business information not found')
        return model

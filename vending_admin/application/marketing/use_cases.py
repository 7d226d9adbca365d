# caminho: vending_admin/application/marketing/use_cases.py
# Funções:
# - EmailTemplateService: CRUD de templates (templateId único, padrão não removível),
#   mapa público dos ativos e renderização com contador de uso
# - ExitIntentService: CRUD de campanhas (uma ativa por vez) e popup público
# - render_placeholders(): substitui [chave] pelo valor com escape de HTML

from __future__ import annotations

import html
import uuid
from dataclasses import dataclass
from typing import Optional

from sqlalchemy.exc import IntegrityError

from vending_admin.application.activity.use_cases import ActivityRecorder
from vending_admin.application.common.dto import RequestContext, map_page, snapshot
from vending_admin.application.marketing.dto import (
    ActiveTemplateOutput,
    EmailTemplateCreateInput,
    EmailTemplateOutput,
    EmailTemplateUpdateInput,
    ExitIntentCreateInput,
    ExitIntentOutput,
    ExitIntentPopupOutput,
    ExitIntentUpdateInput,
    RenderedTemplate,
    RenderTemplateInput,
)
from vending_admin.domain.marketing.enums import EXIT_INTENT_FALLBACK
from vending_admin.infrastructure.db.models import EmailTemplateModel, ExitIntentCampaignModel
from vending_admin.infrastructure.db.query_builder import Page
from vending_admin.infrastructure.db.utils import utcnow
from vending_admin.infrastructure.repositories.marketing_repository import (
    EmailTemplateRepositoryImpl,
    ExitIntentRepositoryImpl,
)
from vending_admin.shared.errors import Conflict, NotFound, ValidationFailure
from vending_admin.shared.filters import EmailTemplateFilters, ExitIntentFilters
from vending_admin.shared.logging import log_info, log_warning

EMAIL_TEMPLATE_RESOURCE = 'email_template'
EXIT_INTENT_RESOURCE = 'exit_intent_campaign'

TEMPLATE_SUMMARY_FIELDS = ('template_id', 'name', 'category')
CAMPAIGN_SUMMARY_FIELDS = ('name', 'headline', 'is_active')


@dataclass(slots=True)
class MarketingAdapters:
    templates: EmailTemplateRepositoryImpl
    campaigns: ExitIntentRepositoryImpl
    activity: ActivityRecorder


def render_placeholders(text: str, variables: dict[str, str]) -> str:
    for key, value in variables.items():
        text = text.replace(f'[{key}]', html.escape(value or ''))
    return text


def _creator_id(context: RequestContext) -> Optional[uuid.UUID]:
    return uuid.UUID(context.admin_id) if context.admin_id else None


class EmailTemplateService:
    def __init__(self, adapters: MarketingAdapters) -> None:
        self._templates = adapters.templates
        self._activity = adapters.activity

    async def list_templates(self, filters: EmailTemplateFilters) -> Page[EmailTemplateOutput]:
        page = await self._templates.list_page(filters)
        return map_page(page, EmailTemplateOutput.model_validate)

    async def get_template(self, template_id: uuid.UUID) -> EmailTemplateOutput:
        return EmailTemplateOutput.model_validate(await self._require(template_id))

    async def active_templates(self) -> dict[str, ActiveTemplateOutput]:
        return {model.template_id: ActiveTemplateOutput.model_validate(model) for model in await self._templates.list_active()}

    async def create_template(self, payload: EmailTemplateCreateInput, context: RequestContext) -> EmailTemplateOutput:
        values = payload.model_dump(mode='json')
        await self._ensure_unique_key(values['template_id'])
        try:
            created = EmailTemplateOutput.model_validate(
                await self._templates.create({**values, 'created_by': _creator_id(context)})
            )
        except IntegrityError as exc:
            raise Conflict('A template with this ID already exists') from exc

        await self._activity.record(
            context,
            action_type='create',
            resource_type=EMAIL_TEMPLATE_RESOURCE,
            resource_id=created.id,
            new_values=snapshot(created, TEMPLATE_SUMMARY_FIELDS),
        )
        log_info('EMAIL_TEMPLATE_CREATED', {'template_id': created.template_id, 'category': created.category})
        return created

    async def update_template(
        self,
        template_id: uuid.UUID,
        payload: EmailTemplateUpdateInput,
        context: RequestContext,
    ) -> EmailTemplateOutput:
        model = await self._require(template_id)
        changes = payload.model_dump(mode='json', exclude_unset=True)
        if 'template_id' in changes:
            await self._ensure_unique_key(changes['template_id'], exclude_id=template_id)

        before = EmailTemplateOutput.model_validate(model)
        try:
            updated = EmailTemplateOutput.model_validate(await self._templates.update(model, changes))
        except IntegrityError as exc:
            raise Conflict('A template with this ID already exists') from exc

        await self._activity.record(
            context,
            action_type='update',
            resource_type=EMAIL_TEMPLATE_RESOURCE,
            resource_id=template_id,
            old_values=snapshot(before, changes),
            new_values=snapshot(updated, changes),
        )
        log_info('EMAIL_TEMPLATE_UPDATED', {'template_id': updated.template_id, 'fields': sorted(changes)})
        return updated

    async def delete_template(self, template_id: uuid.UUID, context: RequestContext) -> EmailTemplateOutput:
        model = await self._require(template_id)
        if model.is_default:
            raise ValidationFailure('Cannot delete default template')

        removed = EmailTemplateOutput.model_validate(model)
        await self._templates.remove(model)
        await self._activity.record(
            context,
            action_type='delete',
            resource_type=EMAIL_TEMPLATE_RESOURCE,
            resource_id=template_id,
            old_values=snapshot(removed, TEMPLATE_SUMMARY_FIELDS),
        )
        log_info('EMAIL_TEMPLATE_DELETED', {'template_id': removed.template_id})
        return removed

    async def render_template(self, template_id: uuid.UUID, payload: RenderTemplateInput) -> RenderedTemplate:
        model = await self._require(template_id)
        if not model.is_active:
            raise ValidationFailure('Template is inactive')

        rendered = RenderedTemplate(
            template_id=model.template_id,
            subject=render_placeholders(model.subject, payload.variables),
            body=render_placeholders(model.body, payload.variables),
        )
        try:
            await self._templates.increment_usage(template_id)
        except Exception as exc:
            log_warning('EMAIL_TEMPLATE_USAGE_FAILED', {'template_id': rendered.template_id, 'error': exc.__class__.__name__})
        return rendered

    async def _ensure_unique_key(self, key: str, exclude_id: Optional[uuid.UUID] = None) -> None:
        existing = await self._templates.find_id_by(EmailTemplateModel.template_id, key)
        if existing is not None and existing != exclude_id:
            raise Conflict('A template with this ID already exists')

    async def _require(self, template_id: uuid.UUID) -> EmailTemplateModel:
        model = await self._templates.get(template_id)
        if model is None:
            raise NotFound('Email template not found')
        return model


class ExitIntentService:
    def __init__(self, adapters: MarketingAdapters) -> None:
        self._campaigns = adapters.campaigns
        self._activity = adapters.activity

    async def list_campaigns(self, filters: ExitIntentFilters) -> Page[ExitIntentOutput]:
        page = await self._campaigns.list_page(filters)
        return map_page(page, ExitIntentOutput.model_validate)

    async def get_campaign(self, campaign_id: uuid.UUID) -> ExitIntentOutput:
        return ExitIntentOutput.model_validate(await self._require(campaign_id))

    async def create_campaign(self, payload: ExitIntentCreateInput, context: RequestContext) -> ExitIntentOutput:
        values = payload.model_dump(mode='json')
        try:
            model = await self._campaigns.add_campaign(
                {**values, 'created_by': _creator_id(context)},
                activate=values['is_active'],
            )
        except IntegrityError as exc:
            raise Conflict('Another campaign was activated concurrently. Please retry.') from exc
        created = ExitIntentOutput.model_validate(model)

        await self._activity.record(
            context,
            action_type='create',
            resource_type=EXIT_INTENT_RESOURCE,
            resource_id=created.id,
            new_values=snapshot(created, CAMPAIGN_SUMMARY_FIELDS),
        )
        log_info('EXIT_INTENT_CREATED', {'campaign_id': str(created.id), 'active': created.is_active})
        return created

    async def update_campaign(
        self,
        campaign_id: uuid.UUID,
        payload: ExitIntentUpdateInput,
        context: RequestContext,
    ) -> ExitIntentOutput:
        model = await self._require(campaign_id)
        changes = payload.model_dump(mode='json', exclude_unset=True)

        before = ExitIntentOutput.model_validate(model)
        try:
            saved = await self._campaigns.save_campaign(model, changes, activate=changes.get('is_active') is True)
        except IntegrityError as exc:
            raise Conflict('Another campaign was activated concurrently. Please retry.') from exc
        updated = ExitIntentOutput.model_validate(saved)

        await self._activity.record(
            context,
            action_type='update',
            resource_type=EXIT_INTENT_RESOURCE,
            resource_id=campaign_id,
            old_values=snapshot(before, changes),
            new_values=snapshot(updated, changes),
        )
        log_info('EXIT_INTENT_UPDATED', {'campaign_id': str(campaign_id), 'fields': sorted(changes)})
        return updated

    async def delete_campaign(self, campaign_id: uuid.UUID, context: RequestContext) -> ExitIntentOutput:
        model = await self._require(campaign_id)
        removed = ExitIntentOutput.model_validate(model)
        await self._campaigns.remove(model)
        await self._activity.record(
            context,
            action_type='delete',
            resource_type=EXIT_INTENT_RESOURCE,
            resource_id=campaign_id,
            old_values=snapshot(removed, CAMPAIGN_SUMMARY_FIELDS),
        )
        log_info('EXIT_INTENT_DELETED', {'campaign_id': str(campaign_id)})
        return removed

    async def active_popup(self) -> ExitIntentPopupOutput:
        """Campanha ativa ou, na falta dela, o conteúdo padrão; registra o último uso."""
        model = await self._campaigns.get_active()
        if model is None:
            return ExitIntentPopupOutput.model_validate(EXIT_INTENT_FALLBACK)

        popup = ExitIntentPopupOutput.model_validate(
            {**ExitIntentOutput.model_validate(model).model_dump(), 'campaign_id': model.id}
        )
        try:
            await self._campaigns.touch_last_used(model.id, utcnow())
        except Exception as exc:
            log_warning('EXIT_INTENT_TOUCH_FAILED', {'campaign_id': str(model.id), 'error': exc.__class__.__name__})
        return popup

    async def _require(self, campaign_id: uuid.UUID) -> ExitIntentCampaignModel:
        model = await self._campaigns.get(campaign_id)
        if model is None:
            raise NotFound('Exit intent campaign not found')
        return model

# caminho: vending_admin/infrastructure/repositories/marketing_repository.py
# Funções:
# - EmailTemplateRepositoryImpl: templates de e-mail, mapa dos ativos e contador de uso
# - ExitIntentRepositoryImpl: campanhas do popup de saída, com no máximo uma ativa

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Any, Optional, Sequence

from sqlalchemy import select, update

from vending_admin.infrastructure.db.models import EmailTemplateModel, ExitIntentCampaignModel
from vending_admin.infrastructure.db.query_builder import FilterColumn, QueryableResource, as_bool_flag
from vending_admin.infrastructure.db.utils import try_commit, try_flush
from vending_admin.infrastructure.repositories.base import ResourceRepository

EMAIL_TEMPLATE_RESOURCE = QueryableResource(
    model=EmailTemplateModel,
    filters={
        'category': FilterColumn(EmailTemplateModel.category),
        'active': FilterColumn(EmailTemplateModel.is_active, transform=as_bool_flag),
    },
    search_columns=(EmailTemplateModel.template_id, EmailTemplateModel.name, EmailTemplateModel.subject),
    order_by=(EmailTemplateModel.created_at.desc(), EmailTemplateModel.id.asc()),
)

EXIT_INTENT_RESOURCE = QueryableResource(
    model=ExitIntentCampaignModel,
    filters={'active': FilterColumn(ExitIntentCampaignModel.is_active, transform=as_bool_flag)},
    search_columns=(ExitIntentCampaignModel.name, ExitIntentCampaignModel.headline),
    order_by=(ExitIntentCampaignModel.created_at.desc(), ExitIntentCampaignModel.id.asc()),
)


class EmailTemplateRepositoryImpl(ResourceRepository[EmailTemplateModel]):
    model = EmailTemplateModel
    resource = EMAIL_TEMPLATE_RESOURCE

    async def list_active(self) -> Sequence[EmailTemplateModel]:
        stmt = (
            select(EmailTemplateModel)
            .where(EmailTemplateModel.is_active.is_(True))
            .order_by(EmailTemplateModel.template_id.asc())
        )
        return (await self._session.execute(stmt)).scalars().all()

    async def increment_usage(self, template_id: uuid.UUID) -> None:
        await self._session.execute(
            update(EmailTemplateModel)
            .where(EmailTemplateModel.id == template_id)
            .values(usage_count=EmailTemplateModel.usage_count + 1)
        )
        await try_commit(self._session)

    async def remove(self, template: EmailTemplateModel) -> None:
        await self._session.delete(template)
        await try_flush(self._session)
        await try_commit(self._session)


class ExitIntentRepositoryImpl(ResourceRepository[ExitIntentCampaignModel]):
    model = ExitIntentCampaignModel
    resource = EXIT_INTENT_RESOURCE

    async def get_active(self) -> Optional[ExitIntentCampaignModel]:
        stmt = select(ExitIntentCampaignModel).where(ExitIntentCampaignModel.is_active.is_(True)).limit(1)
        return (await self._session.execute(stmt)).scalar_one_or_none()

    async def add_campaign(self, values: dict[str, Any], *, activate: bool) -> ExitIntentCampaignModel:
        """Insere a campanha; quando ativa, desativa as demais na mesma transação."""
        model = ExitIntentCampaignModel(**{**values, 'is_active': False})
        self._session.add(model)
        try:
            await self._session.flush()
            if activate:
                await self._activate(model.id)
        except Exception:
            await self._session.rollback()
            raise
        await try_commit(self._session)
        await self._session.refresh(model)
        return model

    async def save_campaign(
        self,
        model: ExitIntentCampaignModel,
        values: dict[str, Any],
        *,
        activate: bool,
    ) -> ExitIntentCampaignModel:
        try:
            for key, value in values.items():
                if key == 'is_active' and activate:
                    continue
                setattr(model, key, value)
            await self._session.flush()
            if activate:
                await self._activate(model.id)
        except Exception:
            await self._session.rollback()
            raise
        await try_commit(self._session)
        await self._session.refresh(model)
        return model

    async def touch_last_used(self, campaign_id: uuid.UUID, at: datetime) -> None:
        await self._session.execute(
            update(ExitIntentCampaignModel)
            .where(ExitIntentCampaignModel.id == campaign_id)
            .values(last_used_at=at)
        )
        await try_commit(self._session)

    async def remove(self, campaign: ExitIntentCampaignModel) -> None:
        await self._session.delete(campaign)
        await try_flush(self._session)
        await try_commit(self._session)

    async def _activate(self, campaign_id: uuid.UUID) -> None:
        # Desativar antes de ativar mantém o índice único parcial satisfeito a cada passo
        await self._session.execute(
            update(ExitIntentCampaignModel)
            .where(ExitIntentCampaignModel.is_active.is_(True), ExitIntentCampaignModel.id != campaign_id)
            .values(is_active=False)
        )
        await self._session.execute(
            update(ExitIntentCampaignModel)
            .where(ExitIntentCampaignModel.id == campaign_id)
            .values(is_active=True)
        )

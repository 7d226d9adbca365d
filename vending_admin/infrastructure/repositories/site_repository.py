# caminho: vending_admin/infrastructure/repositories/site_repository.py
# Funções:
# - SeoSettingRepositoryImpl: metadados de SEO por caminho de página
# - BusinessInfoRepositoryImpl: linha única com os dados do negócio
# - EmailLogRepositoryImpl: histórico de e-mails enviados pelo painel

from __future__ import annotations

from vending_admin.infrastructure.db.models import BusinessInfoModel, EmailLogModel, SeoSettingModel
from vending_admin.infrastructure.db.query_builder import FilterColumn, QueryableResource
from vending_admin.infrastructure.repositories.base import ResourceRepository

SEO_RESOURCE = QueryableResource(
    model=SeoSettingModel,
    search_columns=(SeoSettingModel.page_path, SeoSettingModel.title),
    order_by=(SeoSettingModel.page_path.asc(), SeoSettingModel.id.asc()),
)

EMAIL_LOG_RESOURCE = QueryableResource(
    model=EmailLogModel,
    filters={
        'status': FilterColumn(EmailLogModel.status),
        'contact_id': FilterColumn(EmailLogModel.contact_id),
    },
    order_by=(EmailLogModel.sent_at.desc(), EmailLogModel.id.asc()),
)


class SeoSettingRepositoryImpl(ResourceRepository[SeoSettingModel]):
    model = SeoSettingModel
    resource = SEO_RESOURCE


class BusinessInfoRepositoryImpl(ResourceRepository[BusinessInfoModel]):
    model = BusinessInfoModel


class EmailLogRepositoryImpl(ResourceRepository[EmailLogModel]):
    model = EmailLogModel
    resource = EMAIL_LOG_RESOURCE

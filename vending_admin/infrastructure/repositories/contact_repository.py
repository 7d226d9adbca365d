# caminho: vending_admin/infrastructure/repositories/contact_repository.py
# Funções:
# - ContactRepositoryImpl: submissões do formulário de contato (filtros por status,
#   responsável, período e busca textual)

from __future__ import annotations

from vending_admin.infrastructure.db.models import ContactSubmissionModel
from vending_admin.infrastructure.db.query_builder import FilterColumn, QueryableResource
from vending_admin.infrastructure.repositories.base import ResourceRepository

CONTACT_RESOURCE = QueryableResource(
    model=ContactSubmissionModel,
    filters={
        'status': FilterColumn(ContactSubmissionModel.status),
        'assigned_to': FilterColumn(ContactSubmissionModel.assigned_to),
        'date_from': FilterColumn(ContactSubmissionModel.created_at, operator='gte'),
        'date_to': FilterColumn(ContactSubmissionModel.created_at, operator='lte'),
    },
    search_columns=(
        ContactSubmissionModel.first_name,
        ContactSubmissionModel.last_name,
        ContactSubmissionModel.email,
        ContactSubmissionModel.company_name,
    ),
    order_by=(ContactSubmissionModel.created_at.desc(), ContactSubmissionModel.id.asc()),
)


class ContactRepositoryImpl(ResourceRepository[ContactSubmissionModel]):
    model = ContactSubmissionModel
    resource = CONTACT_RESOURCE

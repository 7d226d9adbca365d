# caminho: vending_admin/shared/filters.py
# Funções:
# - PageFilters e derivados: especificações imutáveis de filtro/paginação por recurso
# - parse_filters(): valida a query string e lista todos os campos inválidos

from __future__ import annotations

import uuid
from collections.abc import Mapping
from datetime import datetime
from typing import Any, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from vending_admin.config.constants import (
    ACTIVITY_LIMIT_DEFAULT,
    ACTIVITY_LIMIT_MAX,
    CONTACTS_LIMIT_DEFAULT,
    CONTACTS_LIMIT_MAX,
    EMAIL_LOGS_LIMIT_DEFAULT,
    EMAIL_LOGS_LIMIT_MAX,
    EMAIL_TEMPLATES_LIMIT_DEFAULT,
    EMAIL_TEMPLATES_LIMIT_MAX,
    EXIT_INTENT_LIMIT_DEFAULT,
    EXIT_INTENT_LIMIT_MAX,
    MACHINES_LIMIT_DEFAULT,
    MACHINES_LIMIT_MAX,
    PRODUCTS_LIMIT_DEFAULT,
    PRODUCTS_LIMIT_MAX,
    SEO_LIMIT_DEFAULT,
    SEO_LIMIT_MAX,
)
from vending_admin.domain.admins.enums import ActionType
from vending_admin.domain.catalog.enums import (
    BoolFlag,
    ContactStatus,
    EmailStatus,
    MachineCategory,
    ProductCategory,
)
from vending_admin.domain.marketing.enums import TemplateCategory
from vending_admin.shared.errors import ValidationFailure, pydantic_error_details

SEARCH_LENGTH_MAX = 200


class PageFilters(BaseModel):
    """Base comum: limit/offset com limites validados, nunca ajustados."""

    model_config = ConfigDict(frozen=True, extra='ignore', populate_by_name=True, str_strip_whitespace=True)

    limit: int = Field(default=50, ge=1, le=100)
    offset: int = Field(default=0, ge=0)


class ContactFilters(PageFilters):
    status: Optional[ContactStatus] = None
    assigned_to: Optional[uuid.UUID] = Field(default=None, alias='assignedTo')
    search: Optional[str] = Field(default=None, max_length=SEARCH_LENGTH_MAX)
    date_from: Optional[datetime] = Field(default=None, alias='dateFrom')
    date_to: Optional[datetime] = Field(default=None, alias='dateTo')
    limit: int = Field(default=CONTACTS_LIMIT_DEFAULT, ge=1, le=CONTACTS_LIMIT_MAX)


class MachineFilters(PageFilters):
    category: Optional[MachineCategory] = None
    active: Optional[BoolFlag] = None
    search: Optional[str] = Field(default=None, max_length=SEARCH_LENGTH_MAX)
    limit: int = Field(default=MACHINES_LIMIT_DEFAULT, ge=1, le=MACHINES_LIMIT_MAX)


class PublicMachineFilters(PageFilters):
    category: Optional[MachineCategory] = None
    search: Optional[str] = Field(default=None, max_length=SEARCH_LENGTH_MAX)
    limit: int = Field(default=MACHINES_LIMIT_DEFAULT, ge=1, le=MACHINES_LIMIT_MAX)


class ProductFilters(PageFilters):
    category: Optional[ProductCategory] = None
    active: Optional[BoolFlag] = None
    popular: Optional[BoolFlag] = None
    healthy: Optional[BoolFlag] = None
    search: Optional[str] = Field(default=None, max_length=SEARCH_LENGTH_MAX)
    limit: int = Field(default=PRODUCTS_LIMIT_DEFAULT, ge=1, le=PRODUCTS_LIMIT_MAX)


class SeoFilters(PageFilters):
    search: Optional[str] = Field(default=None, max_length=SEARCH_LENGTH_MAX)
    limit: int = Field(default=SEO_LIMIT_DEFAULT, ge=1, le=SEO_LIMIT_MAX)


class EmailLogFilters(PageFilters):
    status: Optional[EmailStatus] = None
    contact_id: Optional[uuid.UUID] = Field(default=None, alias='contactId')
    limit: int = Field(default=EMAIL_LOGS_LIMIT_DEFAULT, ge=1, le=EMAIL_LOGS_LIMIT_MAX)


class EmailTemplateFilters(PageFilters):
    category: Optional[TemplateCategory] = None
    active: Optional[BoolFlag] = None
    search: Optional[str] = Field(default=None, max_length=SEARCH_LENGTH_MAX)
    limit: int = Field(default=EMAIL_TEMPLATES_LIMIT_DEFAULT, ge=1, le=EMAIL_TEMPLATES_LIMIT_MAX)


class ExitIntentFilters(PageFilters):
    active: Optional[BoolFlag] = None
    search: Optional[str] = Field(default=None, max_length=SEARCH_LENGTH_MAX)
    limit: int = Field(default=EXIT_INTENT_LIMIT_DEFAULT, ge=1, le=EXIT_INTENT_LIMIT_MAX)


class ActivityFilters(PageFilters):
    resource_type: Optional[str] = Field(default=None, alias='resourceType', max_length=64)
    action_type: Optional[ActionType] = Field(default=None, alias='actionType')
    admin_user_id: Optional[uuid.UUID] = Field(default=None, alias='adminUserId')
    limit: int = Field(default=ACTIVITY_LIMIT_DEFAULT, ge=1, le=ACTIVITY_LIMIT_MAX)


F = TypeVar('F', bound=PageFilters)


def parse_filters(model: type[F], raw: Mapping[str, Any]) -> F:
    """Valida os parâmetros reconhecidos; chaves desconhecidas e valores vazios são ignorados."""
    cleaned = {key: value for key, value in raw.items() if value is not None and str(value).strip() != ''}
    try:
        return model.model_validate(cleaned)
    except ValidationError as exc:
        raise ValidationFailure(details=pydantic_error_details(exc.errors(include_url=False))) from exc

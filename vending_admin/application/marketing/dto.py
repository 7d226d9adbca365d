# caminho: vending_admin/application/marketing/dto.py
# Funções:
# - DTOs de templates de e-mail (criação, atualização parcial, mapa público, renderização)
# - DTOs de campanhas de exit intent (criação, atualização parcial, popup público)

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Annotated, Any, Optional

from pydantic import BaseModel, ConfigDict, Field, StringConstraints, field_validator

from vending_admin.config.constants import (
    EXIT_INTENT_LIST_MAX_ITEMS,
    PHONE_PATTERN,
    TEMPLATE_ID_LENGTH_MAX,
    TEMPLATE_ID_PATTERN,
    TEMPLATE_VARIABLES_MAX_ITEMS,
)
from vending_admin.domain.marketing.enums import (
    EXIT_INTENT_CTA_LINK_DEFAULT,
    EXIT_INTENT_CTA_TEXT_DEFAULT,
    EXIT_INTENT_PHONE_NUMBER_DEFAULT,
    EXIT_INTENT_PHONE_TEXT_DEFAULT,
    TemplateCategory,
)

TemplateKey = Annotated[str, StringConstraints(min_length=1, max_length=TEMPLATE_ID_LENGTH_MAX, pattern=TEMPLATE_ID_PATTERN)]
VariableName = Annotated[str, StringConstraints(min_length=1, max_length=64, pattern=r'^[A-Za-z0-9_]+$')]
Benefit = Annotated[str, StringConstraints(min_length=1, max_length=200)]
CampaignPhone = Annotated[str, StringConstraints(pattern=PHONE_PATTERN, max_length=32)]

_INPUT_CONFIG = ConfigDict(extra='forbid', populate_by_name=True, str_strip_whitespace=True)


def _reject_null(value: Any) -> Any:
    if value is None:
        raise ValueError('Field cannot be null')
    return value


# ─────────────────────────────────────────────────────────────────────────────
# Templates de e-mail
# ─────────────────────────────────────────────────────────────────────────────
class EmailTemplateCreateInput(BaseModel):
    model_config = _INPUT_CONFIG

    template_id: TemplateKey = Field(alias='templateId')
    name: str = Field(min_length=1, max_length=200)
    description: Optional[str] = Field(default=None, max_length=1000)
    category: TemplateCategory
    subject: str = Field(min_length=1, max_length=300)
    body: str = Field(min_length=1, max_length=50000)
    variables: list[VariableName] = Field(default_factory=list, max_length=TEMPLATE_VARIABLES_MAX_ITEMS)
    is_active: bool = Field(default=True, alias='isActive')
    is_default: bool = Field(default=False, alias='isDefault')


class EmailTemplateUpdateInput(BaseModel):
    model_config = _INPUT_CONFIG

    template_id: Optional[TemplateKey] = Field(default=None, alias='templateId')
    name: Optional[str] = Field(default=None, min_length=1, max_length=200)
    description: Optional[str] = Field(default=None, max_length=1000)
    category: Optional[TemplateCategory] = None
    subject: Optional[str] = Field(default=None, min_length=1, max_length=300)
    body: Optional[str] = Field(default=None, min_length=1, max_length=50000)
    variables: Optional[list[VariableName]] = Field(default=None, max_length=TEMPLATE_VARIABLES_MAX_ITEMS)
    is_active: Optional[bool] = Field(default=None, alias='isActive')
    is_default: Optional[bool] = Field(default=None, alias='isDefault')

    reject_null_fields = field_validator(
        'template_id',
        'name',
        'category',
        'subject',
        'body',
        'variables',
        'is_active',
        'is_default',
        mode='before',
    )(_reject_null)


class EmailTemplateOutput(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    template_id: str
    name: str
    description: Optional[str]
    category: str
    subject: str
    body: str
    variables: list[str]
    is_active: bool
    is_default: bool
    usage_count: int
    created_by: Optional[uuid.UUID]
    created_at: datetime
    updated_at: datetime


class ActiveTemplateOutput(BaseModel):
    """Entrada do mapa público `{template_id: {...}}`."""

    model_config = ConfigDict(from_attributes=True)

    name: str
    subject: str
    body: str
    variables: list[str]


class RenderTemplateInput(BaseModel):
    model_config = ConfigDict(extra='forbid')

    variables: dict[str, str] = Field(default_factory=dict)


class RenderedTemplate(BaseModel):
    template_id: str
    subject: str
    body: str


# ─────────────────────────────────────────────────────────────────────────────
# Exit intent
# ─────────────────────────────────────────────────────────────────────────────
class ExitIntentStat(BaseModel):
    model_config = _INPUT_CONFIG

    value: str = Field(min_length=1, max_length=50)
    label: str = Field(min_length=1, max_length=50)


class ExitIntentCreateInput(BaseModel):
    model_config = _INPUT_CONFIG

    name: str = Field(min_length=1, max_length=200)
    is_active: bool = Field(default=False, alias='isActive')
    headline: str = Field(min_length=1, max_length=200)
    subheadline: str = Field(min_length=1, max_length=300)
    value_proposition: Optional[str] = Field(default=None, alias='valueProposition', max_length=1000)
    benefits: list[Benefit] = Field(default_factory=list, max_length=EXIT_INTENT_LIST_MAX_ITEMS)
    stats: list[ExitIntentStat] = Field(default_factory=list, max_length=EXIT_INTENT_LIST_MAX_ITEMS)
    special_offer_badge: Optional[str] = Field(default=None, alias='specialOfferBadge', max_length=100)
    primary_cta_text: str = Field(default=EXIT_INTENT_CTA_TEXT_DEFAULT, alias='primaryCtaText', min_length=1, max_length=100)
    primary_cta_link: str = Field(default=EXIT_INTENT_CTA_LINK_DEFAULT, alias='primaryCtaLink', min_length=1, max_length=300)
    phone_button_text: str = Field(default=EXIT_INTENT_PHONE_TEXT_DEFAULT, alias='phoneButtonText', min_length=1, max_length=100)
    phone_number: CampaignPhone = Field(default=EXIT_INTENT_PHONE_NUMBER_DEFAULT, alias='phoneNumber')


class ExitIntentUpdateInput(BaseModel):
    model_config = _INPUT_CONFIG

    name: Optional[str] = Field(default=None, min_length=1, max_length=200)
    is_active: Optional[bool] = Field(default=None, alias='isActive')
    headline: Optional[str] = Field(default=None, min_length=1, max_length=200)
    subheadline: Optional[str] = Field(default=None, min_length=1, max_length=300)
    value_proposition: Optional[str] = Field(default=None, alias='valueProposition', max_length=1000)
    benefits: Optional[list[Benefit]] = Field(default=None, max_length=EXIT_INTENT_LIST_MAX_ITEMS)
    stats: Optional[list[ExitIntentStat]] = Field(default=None, max_length=EXIT_INTENT_LIST_MAX_ITEMS)
    special_offer_badge: Optional[str] = Field(default=None, alias='specialOfferBadge', max_length=100)
    primary_cta_text: Optional[str] = Field(default=None, alias='primaryCtaText', min_length=1, max_length=100)
    primary_cta_link: Optional[str] = Field(default=None, alias='primaryCtaLink', min_length=1, max_length=300)
    phone_button_text: Optional[str] = Field(default=None, alias='phoneButtonText', min_length=1, max_length=100)
    phone_number: Optional[CampaignPhone] = Field(default=None, alias='phoneNumber')

    reject_null_fields = field_validator(
        'name',
        'is_active',
        'headline',
        'subheadline',
        'benefits',
        'stats',
        'primary_cta_text',
        'primary_cta_link',
        'phone_button_text',
        'phone_number',
        mode='before',
    )(_reject_null)


class ExitIntentOutput(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    name: str
    is_active: bool
    headline: str
    subheadline: str
    value_proposition: Optional[str]
    benefits: list[str]
    stats: list[dict[str, Any]]
    special_offer_badge: Optional[str]
    primary_cta_text: str
    primary_cta_link: str
    phone_button_text: str
    phone_number: str
    created_by: Optional[uuid.UUID]
    last_used_at: Optional[datetime]
    created_at: datetime
    updated_at: datetime


class ExitIntentPopupOutput(BaseModel):
    """Conteúdo exibido no site; `campaign_id` nulo indica o conteúdo padrão."""

    model_config = ConfigDict(from_attributes=True)

    campaign_id: Optional[uuid.UUID] = None
    headline: str
    subheadline: str
    value_proposition: Optional[str]
    benefits: list[str]
    stats: list[dict[str, Any]]
    special_offer_badge: Optional[str]
    primary_cta_text: str
    primary_cta_link: str
    phone_button_text: str
    phone_number: str

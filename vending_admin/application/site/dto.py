# caminho: vending_admin/application/site/dto.py
# Funções:
# - DTOs de configurações de SEO por página
# - DTOs dos dados do negócio (linha única)

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Annotated, Any, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, HttpUrl, StringConstraints, field_validator

from vending_admin.config.constants import (
    KEYWORDS_MAX_ITEMS,
    SEO_META_DESCRIPTION_LENGTH_MAX,
    SEO_OG_DESCRIPTION_LENGTH_MAX,
    SEO_TITLE_LENGTH_MAX,
)

PagePath = Annotated[str, StringConstraints(min_length=1, max_length=200, pattern=r'^/')]
BusinessPhone = Annotated[str, StringConstraints(pattern=r'^\+?[\d\s\-\(\)]+$', max_length=32)]
StateCode = Annotated[str, StringConstraints(pattern=r'^[A-Z]{2}$')]
ZipCode = Annotated[str, StringConstraints(pattern=r'^\d{5}(-\d{4})?$')]

_INPUT_CONFIG = ConfigDict(extra='forbid', populate_by_name=True, str_strip_whitespace=True)


# ─────────────────────────────────────────────────────────────────────────────
# SEO
# ─────────────────────────────────────────────────────────────────────────────
class SeoSettingsUpdateInput(BaseModel):
    model_config = _INPUT_CONFIG

    page_path: Optional[PagePath] = Field(default=None, alias='pagePath')
    title: Optional[str] = Field(default=None, max_length=SEO_TITLE_LENGTH_MAX)
    meta_description: Optional[str] = Field(default=None, alias='metaDescription', max_length=SEO_META_DESCRIPTION_LENGTH_MAX)
    og_title: Optional[str] = Field(default=None, alias='ogTitle', max_length=SEO_TITLE_LENGTH_MAX)
    og_description: Optional[str] = Field(default=None, alias='ogDescription', max_length=SEO_OG_DESCRIPTION_LENGTH_MAX)
    og_image: Optional[HttpUrl] = Field(default=None, alias='ogImage')
    keywords: Optional[list[str]] = Field(default=None, max_length=KEYWORDS_MAX_ITEMS)
    structured_data: Optional[dict[str, Any]] = Field(default=None, alias='structuredData')

    @field_validator('page_path', mode='before')
    @classmethod
    def page_path_not_null(cls, value: Any) -> Any:
        if value is None:
            raise ValueError('Page path is required')
        return value


class SeoSettingsCreateInput(SeoSettingsUpdateInput):
    page_path: PagePath = Field(alias='pagePath')


class SeoSettingsOutput(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    page_path: str
    title: Optional[str]
    meta_description: Optional[str]
    og_title: Optional[str]
    og_description: Optional[str]
    og_image: Optional[str]
    keywords: Optional[list[Any]]
    structured_data: Optional[dict[str, Any]]
    created_at: datetime
    updated_at: datetime


# ─────────────────────────────────────────────────────────────────────────────
# Dados do negócio
# ─────────────────────────────────────────────────────────────────────────────
class BusinessHours(BaseModel):
    model_config = ConfigDict(extra='forbid')

    monday: str
    tuesday: str
    wednesday: str
    thursday: str
    friday: str
    saturday: str
    sunday: str


class BusinessInfoUpdateInput(BaseModel):
    model_config = _INPUT_CONFIG

    business_name: Optional[str] = Field(default=None, alias='businessName', min_length=2, max_length=200)
    legal_name: Optional[str] = Field(default=None, alias='legalName', min_length=2, max_length=200)
    slogan: Optional[str] = Field(default=None, max_length=200)
    description: Optional[str] = Field(default=None, min_length=20, max_length=2000)
    short_description: Optional[str] = Field(default=None, alias='shortDescription', max_length=500)
    phone: Optional[BusinessPhone] = None
    email: Optional[EmailStr] = None
    website: Optional[HttpUrl] = None
    street_address: Optional[str] = Field(default=None, alias='streetAddress', min_length=5, max_length=200)
    suite: Optional[str] = Field(default=None, max_length=50)
    city: Optional[str] = Field(default=None, min_length=2, max_length=100)
    state: Optional[StateCode] = None
    zip_code: Optional[ZipCode] = Field(default=None, alias='zipCode')
    country: Optional[str] = Field(default=None, min_length=2, max_length=64)
    latitude: Optional[float] = Field(default=None, ge=-90, le=90)
    longitude: Optional[float] = Field(default=None, ge=-180, le=180)
    business_hours: Optional[BusinessHours] = Field(default=None, alias='businessHours')
    facebook_url: Optional[HttpUrl] = Field(default=None, alias='facebookUrl')
    instagram_url: Optional[HttpUrl] = Field(default=None, alias='instagramUrl')
    linkedin_url: Optional[HttpUrl] = Field(default=None, alias='linkedinUrl')

    @field_validator('business_name', 'country', mode='before')
    @classmethod
    def required_columns_not_null(cls, value: Any) -> Any:
        if value is None:
            raise ValueError('Field cannot be null')
        return value


class BusinessInfoOutput(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    business_name: str
    legal_name: Optional[str]
    slogan: Optional[str]
    description: Optional[str]
    short_description: Optional[str]
    phone: Optional[str]
    email: Optional[str]
    website: Optional[str]
    street_address: Optional[str]
    suite: Optional[str]
    city: Optional[str]
    state: Optional[str]
    zip_code: Optional[str]
    country: str
    latitude: Optional[float]
    longitude: Optional[float]
    business_hours: Optional[dict[str, Any]]
    facebook_url: Optional[str]
    instagram_url: Optional[str]
    linkedin_url: Optional[str]
    updated_at: datetime

# caminho: vending_admin/application/catalog/dto.py
# Funções:
# - DTOs de máquinas (criação completa, atualização parcial, imagens)
# - DTOs de produtos (criação, atualização parcial, atualização em lote)

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Annotated, Any, Optional, Union

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, HttpUrl, StringConstraints, field_validator

from vending_admin.config.constants import (
    KEYWORDS_MAX_ITEMS,
    MACHINE_SLUG_LENGTH_MAX,
    MACHINE_SLUG_LENGTH_MIN,
    PRODUCT_SLUG_LENGTH_MAX,
    PRODUCT_SLUG_LENGTH_MIN,
    SEO_META_DESCRIPTION_LENGTH_MAX,
    SEO_TITLE_LENGTH_MAX,
    SLUG_PATTERN,
)
from vending_admin.domain.catalog.enums import MachineCategory, ProductCategory

MachineSlug = Annotated[
    str,
    StringConstraints(min_length=MACHINE_SLUG_LENGTH_MIN, max_length=MACHINE_SLUG_LENGTH_MAX, pattern=SLUG_PATTERN),
]
ProductSlug = Annotated[
    str,
    StringConstraints(min_length=PRODUCT_SLUG_LENGTH_MIN, max_length=PRODUCT_SLUG_LENGTH_MAX, pattern=SLUG_PATTERN),
]
MachineName = Annotated[str, StringConstraints(min_length=5, max_length=200)]
ShortDescription = Annotated[str, StringConstraints(min_length=20, max_length=300)]
LongDescription = Annotated[str, StringConstraints(min_length=100, max_length=5000)]
SeoTitle = Annotated[str, StringConstraints(max_length=SEO_TITLE_LENGTH_MAX)]
MetaDescription = Annotated[str, StringConstraints(max_length=SEO_META_DESCRIPTION_LENGTH_MAX)]
Keywords = Annotated[list[str], Field(max_length=KEYWORDS_MAX_ITEMS)]

_INPUT_CONFIG = ConfigDict(extra='forbid', populate_by_name=True, str_strip_whitespace=True)


def _reject_null(value: Any) -> Any:
    if value is None:
        raise ValueError('Field cannot be null')
    return value


class DimensionItem(BaseModel):
    model_config = _INPUT_CONFIG

    label: str = Field(min_length=1)
    value: str = Field(min_length=1)


class SpecificationItem(BaseModel):
    model_config = _INPUT_CONFIG

    label: str = Field(min_length=1)
    value: Union[str, list[str]]


class SpecificationGroup(BaseModel):
    model_config = _INPUT_CONFIG

    category: str = Field(min_length=1)
    items: list[SpecificationItem] = Field(min_length=1)


class FeatureItem(BaseModel):
    model_config = _INPUT_CONFIG

    title: str = Field(min_length=1, max_length=100)
    description: str = Field(min_length=1, max_length=500)
    icon: Optional[str] = None


# ─────────────────────────────────────────────────────────────────────────────
# Máquinas
# ─────────────────────────────────────────────────────────────────────────────
class MachineCreateInput(BaseModel):
    model_config = _INPUT_CONFIG

    slug: MachineSlug
    name: MachineName
    category: MachineCategory
    short_description: ShortDescription = Field(alias='shortDescription')
    description: LongDescription
    seo_title: Optional[SeoTitle] = Field(default=None, alias='seoTitle')
    meta_description: Optional[MetaDescription] = Field(default=None, alias='metaDescription')
    dimensions: list[DimensionItem] = Field(min_length=1)
    specifications: list[SpecificationGroup] = Field(min_length=1)
    features: list[FeatureItem] = Field(min_length=1, max_length=20)
    product_options: list[str] = Field(alias='productOptions', min_length=1)
    best_for: list[str] = Field(alias='bestFor', min_length=1)
    highlights: Optional[list[str]] = Field(default=None, max_length=10)
    keywords: Optional[Keywords] = None
    local_keywords: Optional[Keywords] = Field(default=None, alias='localKeywords')
    business_keywords: Optional[Keywords] = Field(default=None, alias='businessKeywords')
    is_active: bool = Field(default=True, alias='isActive')
    display_order: int = Field(default=0, ge=0, alias='displayOrder')


class MachineUpdateInput(BaseModel):
    model_config = _INPUT_CONFIG

    slug: Optional[MachineSlug] = None
    name: Optional[MachineName] = None
    category: Optional[MachineCategory] = None
    short_description: Optional[ShortDescription] = Field(default=None, alias='shortDescription')
    description: Optional[LongDescription] = None
    seo_title: Optional[SeoTitle] = Field(default=None, alias='seoTitle')
    meta_description: Optional[MetaDescription] = Field(default=None, alias='metaDescription')
    dimensions: Optional[list[DimensionItem]] = Field(default=None, min_length=1)
    specifications: Optional[list[SpecificationGroup]] = Field(default=None, min_length=1)
    features: Optional[list[FeatureItem]] = Field(default=None, min_length=1, max_length=20)
    product_options: Optional[list[str]] = Field(default=None, alias='productOptions', min_length=1)
    best_for: Optional[list[str]] = Field(default=None, alias='bestFor', min_length=1)
    highlights: Optional[list[str]] = Field(default=None, max_length=10)
    keywords: Optional[Keywords] = None
    local_keywords: Optional[Keywords] = Field(default=None, alias='localKeywords')
    business_keywords: Optional[Keywords] = Field(default=None, alias='businessKeywords')
    is_active: Optional[bool] = Field(default=None, alias='isActive')
    display_order: Optional[int] = Field(default=None, ge=0, alias='displayOrder')

    reject_null_fields = field_validator(
        'slug',
        'name',
        'category',
        'short_description',
        'description',
        'dimensions',
        'specifications',
        'features',
        'product_options',
        'best_for',
        'is_active',
        'display_order',
        mode='before',
    )(_reject_null)


class MachineImageOutput(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    machine_id: uuid.UUID
    image_url: str
    storage_path: Optional[str]
    alt_text: Optional[str]
    display_order: int
    is_primary: bool
    width: Optional[int]
    height: Optional[int]
    content_type: Optional[str]
    file_size: Optional[int]
    created_at: datetime


class MachineOutput(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    slug: str
    name: str
    category: str
    short_description: str
    description: str
    seo_title: Optional[str]
    meta_description: Optional[str]
    dimensions: list[Any]
    specifications: list[Any]
    features: list[Any]
    product_options: list[Any]
    best_for: list[Any]
    highlights: Optional[list[Any]]
    keywords: Optional[list[Any]]
    local_keywords: Optional[list[Any]]
    business_keywords: Optional[list[Any]]
    is_active: bool
    display_order: int
    created_at: datetime
    updated_at: datetime
    images: list[MachineImageOutput] = Field(default_factory=list)


class MachineImageUpload(BaseModel):
    """Campos de formulário que acompanham o arquivo enviado."""

    model_config = ConfigDict(extra='forbid', str_strip_whitespace=True)

    alt_text: Optional[str] = Field(default=None, max_length=200)
    display_order: int = Field(default=0, ge=0)
    is_primary: bool = False
    width: Optional[int] = Field(default=None, ge=1)
    height: Optional[int] = Field(default=None, ge=1)


class SetPrimaryImageInput(BaseModel):
    model_config = ConfigDict(extra='forbid')

    image_id: uuid.UUID = Field(validation_alias=AliasChoices('image_id', 'imageId'))


# ─────────────────────────────────────────────────────────────────────────────
# Produtos
# ─────────────────────────────────────────────────────────────────────────────
class ProductCreateInput(BaseModel):
    model_config = _INPUT_CONFIG

    slug: ProductSlug
    name: str = Field(min_length=2, max_length=100)
    category: ProductCategory
    image_path: Optional[str] = Field(default=None, alias='imagePath', max_length=500)
    image_url: Optional[HttpUrl] = Field(default=None, alias='imageUrl')
    is_popular: bool = Field(default=False, alias='isPopular')
    is_healthy: bool = Field(default=False, alias='isHealthy')
    details: Optional[str] = Field(default=None, max_length=500)
    is_active: bool = Field(default=True, alias='isActive')
    display_order: int = Field(default=0, ge=0, alias='displayOrder')


class ProductUpdateInput(BaseModel):
    model_config = _INPUT_CONFIG

    slug: Optional[ProductSlug] = None
    name: Optional[str] = Field(default=None, min_length=2, max_length=100)
    category: Optional[ProductCategory] = None
    image_path: Optional[str] = Field(default=None, alias='imagePath', max_length=500)
    image_url: Optional[HttpUrl] = Field(default=None, alias='imageUrl')
    is_popular: Optional[bool] = Field(default=None, alias='isPopular')
    is_healthy: Optional[bool] = Field(default=None, alias='isHealthy')
    details: Optional[str] = Field(default=None, max_length=500)
    is_active: Optional[bool] = Field(default=None, alias='isActive')
    display_order: Optional[int] = Field(default=None, ge=0, alias='displayOrder')

    reject_null_fields = field_validator(
        'slug',
        'name',
        'category',
        'is_popular',
        'is_healthy',
        'is_active',
        'display_order',
        mode='before',
    )(_reject_null)


class ProductBulkItem(BaseModel):
    model_config = _INPUT_CONFIG

    id: uuid.UUID
    display_order: Optional[int] = Field(default=None, ge=0, alias='displayOrder')
    is_active: Optional[bool] = Field(default=None, alias='isActive')
    is_popular: Optional[bool] = Field(default=None, alias='isPopular')
    is_healthy: Optional[bool] = Field(default=None, alias='isHealthy')


class ProductBulkUpdateInput(BaseModel):
    model_config = ConfigDict(extra='forbid')

    products: list[ProductBulkItem] = Field(min_length=1)


class ProductOutput(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    slug: str
    name: str
    category: str
    image_path: Optional[str]
    image_url: Optional[str]
    is_popular: bool
    is_healthy: bool
    details: Optional[str]
    is_active: bool
    display_order: int
    created_at: datetime
    updated_at: datetime

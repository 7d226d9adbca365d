# caminho: vending_admin/infrastructure/db/models.py
# Funções:
# - Declarar modelos SQLAlchemy do back-office (administradores, auditoria,
#   contatos, máquinas e imagens, produtos, SEO, dados do negócio, e-mails,
#   templates de e-mail e campanhas de exit intent)

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Any, Optional

from sqlalchemy import (
    JSON,
    Boolean,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    Uuid,
    func,
    text,
)
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column, relationship

from vending_admin.domain.admins.enums import ADMIN_ROLE_DEFAULT
from vending_admin.domain.marketing.enums import (
    EXIT_INTENT_CTA_LINK_DEFAULT,
    EXIT_INTENT_CTA_TEXT_DEFAULT,
    EXIT_INTENT_PHONE_NUMBER_DEFAULT,
    EXIT_INTENT_PHONE_TEXT_DEFAULT,
)
from vending_admin.infrastructure.db.base import Base
from vending_admin.infrastructure.db.utils import UTCDateTime, utcnow

# JSONB no Postgres, JSON genérico nos demais dialetos
JSONType = JSON().with_variant(JSONB(), 'postgresql')


class AdminUserModel(Base):
    __tablename__ = 'admin_users'

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    email: Mapped[str] = mapped_column(String(254), nullable=False)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    role: Mapped[str] = mapped_column(String(32), nullable=False, default=ADMIN_ROLE_DEFAULT, index=True)
    is_active: Mapped[bool] = mapped_column(Boolean, server_default=text('true'), default=True, nullable=False)
    password_hash: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    avatar_url: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    oauth_provider: Mapped[Optional[str]] = mapped_column(String(32), nullable=True)
    oauth_id: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    last_login_at: Mapped[Optional[datetime]] = mapped_column(UTCDateTime(), nullable=True)

    created_at: Mapped[datetime] = mapped_column(UTCDateTime(), default=utcnow, server_default=func.now(), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(UTCDateTime(), default=utcnow, onupdate=utcnow, server_default=func.now(), nullable=False)

    __table_args__ = (
        Index('ix_admin_users_email_ci', func.lower(email), unique=True),
        Index('ix_admin_users_oauth', 'oauth_provider', 'oauth_id'),
    )


class ActivityLogModel(Base):
    __tablename__ = 'admin_activity_log'

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    admin_user_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        ForeignKey('admin_users.id', ondelete='SET NULL'), nullable=True, index=True
    )
    action_type: Mapped[str] = mapped_column(String(32), nullable=False, index=True)
    resource_type: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    resource_id: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    old_values: Mapped[Optional[dict[str, Any]]] = mapped_column(JSONType, nullable=True)
    new_values: Mapped[Optional[dict[str, Any]]] = mapped_column(JSONType, nullable=True)
    ip_address: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    user_agent: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    created_at: Mapped[datetime] = mapped_column(UTCDateTime(), default=utcnow, server_default=func.now(), nullable=False, index=True)


class ContactSubmissionModel(Base):
    __tablename__ = 'contact_submissions'

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    first_name: Mapped[str] = mapped_column(String(50), nullable=False)
    last_name: Mapped[str] = mapped_column(String(50), nullable=False)
    email: Mapped[str] = mapped_column(String(254), nullable=False, index=True)
    phone: Mapped[str] = mapped_column(String(32), nullable=False)
    company_name: Mapped[str] = mapped_column(String(100), nullable=False)
    message: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    source: Mapped[str] = mapped_column(String(64), nullable=False, default='contact_form')
    status: Mapped[str] = mapped_column(String(32), nullable=False, default='new', index=True)
    assigned_to: Mapped[Optional[uuid.UUID]] = mapped_column(
        ForeignKey('admin_users.id', ondelete='SET NULL'), nullable=True, index=True
    )
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    resolved_at: Mapped[Optional[datetime]] = mapped_column(UTCDateTime(), nullable=True)

    created_at: Mapped[datetime] = mapped_column(UTCDateTime(), default=utcnow, server_default=func.now(), nullable=False, index=True)
    updated_at: Mapped[datetime] = mapped_column(UTCDateTime(), default=utcnow, onupdate=utcnow, server_default=func.now(), nullable=False)


class VendingMachineModel(Base):
    __tablename__ = 'vending_machines'

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    slug: Mapped[str] = mapped_column(String(100), unique=True, nullable=False)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    category: Mapped[str] = mapped_column(String(32), nullable=False, index=True)
    short_description: Mapped[str] = mapped_column(String(300), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    seo_title: Mapped[Optional[str]] = mapped_column(String(60), nullable=True)
    meta_description: Mapped[Optional[str]] = mapped_column(String(160), nullable=True)

    dimensions: Mapped[list[Any]] = mapped_column(JSONType, nullable=False, default=list)
    specifications: Mapped[list[Any]] = mapped_column(JSONType, nullable=False, default=list)
    features: Mapped[list[Any]] = mapped_column(JSONType, nullable=False, default=list)
    product_options: Mapped[list[Any]] = mapped_column(JSONType, nullable=False, default=list)
    best_for: Mapped[list[Any]] = mapped_column(JSONType, nullable=False, default=list)
    highlights: Mapped[Optional[list[Any]]] = mapped_column(JSONType, nullable=True)
    keywords: Mapped[Optional[list[Any]]] = mapped_column(JSONType, nullable=True)
    local_keywords: Mapped[Optional[list[Any]]] = mapped_column(JSONType, nullable=True)
    business_keywords: Mapped[Optional[list[Any]]] = mapped_column(JSONType, nullable=True)

    is_active: Mapped[bool] = mapped_column(Boolean, server_default=text('true'), default=True, nullable=False, index=True)
    display_order: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    created_at: Mapped[datetime] = mapped_column(UTCDateTime(), default=utcnow, server_default=func.now(), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(UTCDateTime(), default=utcnow, onupdate=utcnow, server_default=func.now(), nullable=False)

    images: Mapped[list['MachineImageModel']] = relationship(
        'MachineImageModel',
        back_populates='machine',
        cascade='all,delete-orphan',
        order_by='MachineImageModel.display_order',
    )


class MachineImageModel(Base):
    __tablename__ = 'machine_images'

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    machine_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey('vending_machines.id', ondelete='CASCADE'), nullable=False, index=True
    )
    image_url: Mapped[str] = mapped_column(String(500), nullable=False)
    storage_path: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    alt_text: Mapped[Optional[str]] = mapped_column(String(300), nullable=True)
    display_order: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    is_primary: Mapped[bool] = mapped_column(Boolean, server_default=text('false'), default=False, nullable=False)
    width: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    height: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    content_type: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    file_size: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    created_at: Mapped[datetime] = mapped_column(UTCDateTime(), default=utcnow, server_default=func.now(), nullable=False)

    machine: Mapped['VendingMachineModel'] = relationship('VendingMachineModel', back_populates='images')

    # No máximo uma imagem principal por máquina, garantido pelo próprio banco
    __table_args__ = (
        Index(
            'ux_machine_images_one_primary',
            'machine_id',
            unique=True,
            postgresql_where=text('is_primary'),
            sqlite_where=text('is_primary = 1'),
        ),
    )


class ProductModel(Base):
    __tablename__ = 'products'

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    slug: Mapped[str] = mapped_column(String(100), unique=True, nullable=False)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    category: Mapped[str] = mapped_column(String(32), nullable=False, index=True)
    image_path: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    image_url: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    is_popular: Mapped[bool] = mapped_column(Boolean, server_default=text('false'), default=False, nullable=False)
    is_healthy: Mapped[bool] = mapped_column(Boolean, server_default=text('false'), default=False, nullable=False)
    details: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, server_default=text('true'), default=True, nullable=False, index=True)
    display_order: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    created_at: Mapped[datetime] = mapped_column(UTCDateTime(), default=utcnow, server_default=func.now(), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(UTCDateTime(), default=utcnow, onupdate=utcnow, server_default=func.now(), nullable=False)


class SeoSettingModel(Base):
    __tablename__ = 'seo_settings'

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    page_path: Mapped[str] = mapped_column(String(200), unique=True, nullable=False)
    title: Mapped[Optional[str]] = mapped_column(String(60), nullable=True)
    meta_description: Mapped[Optional[str]] = mapped_column(String(160), nullable=True)
    og_title: Mapped[Optional[str]] = mapped_column(String(60), nullable=True)
    og_description: Mapped[Optional[str]] = mapped_column(String(200), nullable=True)
    og_image: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    keywords: Mapped[Optional[list[Any]]] = mapped_column(JSONType, nullable=True)
    structured_data: Mapped[Optional[dict[str, Any]]] = mapped_column(JSONType, nullable=True)

    created_at: Mapped[datetime] = mapped_column(UTCDateTime(), default=utcnow, server_default=func.now(), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(UTCDateTime(), default=utcnow, onupdate=utcnow, server_default=func.now(), nullable=False)


class BusinessInfoModel(Base):
    __tablename__ = 'business_info'

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True)
    business_name: Mapped[str] = mapped_column(String(200), nullable=False)
    legal_name: Mapped[Optional[str]] = mapped_column(String(200), nullable=True)
    slogan: Mapped[Optional[str]] = mapped_column(String(200), nullable=True)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    short_description: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    phone: Mapped[Optional[str]] = mapped_column(String(32), nullable=True)
    email: Mapped[Optional[str]] = mapped_column(String(254), nullable=True)
    website: Mapped[Optional[str]] = mapped_column(String(300), nullable=True)
    street_address: Mapped[Optional[str]] = mapped_column(String(200), nullable=True)
    suite: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    city: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    state: Mapped[Optional[str]] = mapped_column(String(2), nullable=True)
    zip_code: Mapped[Optional[str]] = mapped_column(String(10), nullable=True)
    country: Mapped[str] = mapped_column(String(64), nullable=False, default='USA')
    latitude: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    longitude: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    business_hours: Mapped[Optional[dict[str, Any]]] = mapped_column(JSONType, nullable=True)
    facebook_url: Mapped[Optional[str]] = mapped_column(String(300), nullable=True)
    instagram_url: Mapped[Optional[str]] = mapped_column(String(300), nullable=True)
    linkedin_url: Mapped[Optional[str]] = mapped_column(String(300), nullable=True)

    updated_at: Mapped[datetime] = mapped_column(UTCDateTime(), default=utcnow, onupdate=utcnow, server_default=func.now(), nullable=False)


class EmailLogModel(Base):
    __tablename__ = 'email_logs'

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    admin_user_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        ForeignKey('admin_users.id', ondelete='SET NULL'), nullable=True, index=True
    )
    recipient_email: Mapped[str] = mapped_column(String(254), nullable=False)
    subject: Mapped[str] = mapped_column(String(300), nullable=False)
    template_used: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    contact_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        ForeignKey('contact_submissions.id', ondelete='SET NULL'), nullable=True, index=True
    )
    message_id: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    status: Mapped[str] = mapped_column(String(16), nullable=False, index=True)
    error_message: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    metadata_: Mapped[Optional[dict[str, Any]]] = mapped_column('metadata', JSONType, nullable=True)
    sent_at: Mapped[datetime] = mapped_column(UTCDateTime(), default=utcnow, server_default=func.now(), nullable=False, index=True)


class EmailTemplateModel(Base):
    __tablename__ = 'email_templates'

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    template_id: Mapped[str] = mapped_column(String(100), unique=True, nullable=False)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    category: Mapped[str] = mapped_column(String(32), nullable=False, index=True)
    subject: Mapped[str] = mapped_column(String(300), nullable=False)
    body: Mapped[str] = mapped_column(Text, nullable=False)
    variables: Mapped[list[Any]] = mapped_column(JSONType, nullable=False, default=list)
    is_active: Mapped[bool] = mapped_column(Boolean, server_default=text('true'), default=True, nullable=False, index=True)
    is_default: Mapped[bool] = mapped_column(Boolean, server_default=text('false'), default=False, nullable=False)
    usage_count: Mapped[int] = mapped_column(Integer, server_default=text('0'), default=0, nullable=False)
    created_by: Mapped[Optional[uuid.UUID]] = mapped_column(
        ForeignKey('admin_users.id', ondelete='SET NULL'), nullable=True
    )

    created_at: Mapped[datetime] = mapped_column(UTCDateTime(), default=utcnow, server_default=func.now(), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(UTCDateTime(), default=utcnow, onupdate=utcnow, server_default=func.now(), nullable=False)


class ExitIntentCampaignModel(Base):
    __tablename__ = 'exit_intent_campaigns'

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, server_default=text('false'), default=False, nullable=False)
    headline: Mapped[str] = mapped_column(String(200), nullable=False)
    subheadline: Mapped[str] = mapped_column(String(300), nullable=False)
    value_proposition: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    benefits: Mapped[list[Any]] = mapped_column(JSONType, nullable=False, default=list)
    stats: Mapped[list[Any]] = mapped_column(JSONType, nullable=False, default=list)
    special_offer_badge: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    primary_cta_text: Mapped[str] = mapped_column(String(100), nullable=False, default=EXIT_INTENT_CTA_TEXT_DEFAULT)
    primary_cta_link: Mapped[str] = mapped_column(String(300), nullable=False, default=EXIT_INTENT_CTA_LINK_DEFAULT)
    phone_button_text: Mapped[str] = mapped_column(String(100), nullable=False, default=EXIT_INTENT_PHONE_TEXT_DEFAULT)
    phone_number: Mapped[str] = mapped_column(String(32), nullable=False, default=EXIT_INTENT_PHONE_NUMBER_DEFAULT)
    created_by: Mapped[Optional[uuid.UUID]] = mapped_column(
        ForeignKey('admin_users.id', ondelete='SET NULL'), nullable=True
    )
    last_used_at: Mapped[Optional[datetime]] = mapped_column(UTCDateTime(), nullable=True)

    created_at: Mapped[datetime] = mapped_column(UTCDateTime(), default=utcnow, server_default=func.now(), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(UTCDateTime(), default=utcnow, onupdate=utcnow, server_default=func.now(), nullable=False)

    # No máximo uma campanha ativa, garantido pelo próprio banco
    __table_args__ = (
        Index(
            'ux_exit_intent_one_active',
            'is_active',
            unique=True,
            postgresql_where=text('is_active'),
            sqlite_where=text('is_active = 1'),
        ),
    )

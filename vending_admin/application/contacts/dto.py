# caminho: vending_admin/application/contacts/dto.py
# Funções:
# - ContactSubmissionInput: formulário público de contato
# - ContactUpdateInput: alteração de status/responsável/notas pelo painel
# - ContactOutput/ContactSubmitResponse: respostas

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Any, Literal, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

from vending_admin.config.constants import (
    CONTACT_COMPANY_LENGTH_MAX,
    CONTACT_MESSAGE_LENGTH_MAX,
    CONTACT_NAME_LENGTH_MAX,
    PHONE_PATTERN,
)
from vending_admin.domain.catalog.enums import ContactStatus

NOTES_LENGTH_MAX = 2000


class ContactSubmissionInput(BaseModel):
    model_config = ConfigDict(extra='ignore', populate_by_name=True, str_strip_whitespace=True)

    first_name: str = Field(alias='firstName', min_length=1, max_length=CONTACT_NAME_LENGTH_MAX)
    last_name: str = Field(alias='lastName', min_length=1, max_length=CONTACT_NAME_LENGTH_MAX)
    email: EmailStr
    phone: str = Field(min_length=7, max_length=32, pattern=PHONE_PATTERN)
    company_name: str = Field(alias='companyName', min_length=1, max_length=CONTACT_COMPANY_LENGTH_MAX)
    message: Optional[str] = Field(default=None, max_length=CONTACT_MESSAGE_LENGTH_MAX)


class ContactUpdateInput(BaseModel):
    model_config = ConfigDict(extra='forbid', populate_by_name=True, str_strip_whitespace=True)

    status: Optional[ContactStatus] = None
    assigned_to: Optional[uuid.UUID] = Field(default=None, alias='assignedTo')
    notes: Optional[str] = Field(default=None, max_length=NOTES_LENGTH_MAX)

    @field_validator('status', mode='before')
    @classmethod
    def status_not_null(cls, value: Any) -> Any:
        if value is None:
            raise ValueError('Invalid contact status')
        return value


class ContactOutput(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    first_name: str
    last_name: str
    email: str
    phone: str
    company_name: str
    message: Optional[str]
    source: str
    status: str
    assigned_to: Optional[uuid.UUID]
    notes: Optional[str]
    resolved_at: Optional[datetime]
    created_at: datetime
    updated_at: datetime


class ContactCreated(BaseModel):
    id: uuid.UUID


class EmailDeliveryStatus(BaseModel):
    customer: Literal['sent', 'failed']
    business: Literal['sent', 'failed']


class ContactSubmitResponse(BaseModel):
    success: bool = True
    message: str
    data: ContactCreated
    email_status: EmailDeliveryStatus = Field(serialization_alias='emailStatus')

# caminho: vending_admin/application/emails/dto.py
# Funções:
# - SendEmailInput: e-mail avulso enviado pelo painel
# - EmailSent/EmailLogOutput: respostas

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Any, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, EmailStr, Field


class SendEmailInput(BaseModel):
    model_config = ConfigDict(extra='forbid', populate_by_name=True)

    to: EmailStr
    subject: str = Field(min_length=1, max_length=300)
    html: str = Field(min_length=1)
    template_used: Optional[str] = Field(default=None, alias='templateUsed', max_length=100)
    contact_id: Optional[uuid.UUID] = Field(default=None, alias='contactId')
    metadata: Optional[dict[str, Any]] = None


class EmailSent(BaseModel):
    message_id: str = Field(serialization_alias='messageId')
    log_id: Optional[uuid.UUID] = Field(default=None, serialization_alias='logId')


class EmailLogOutput(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    admin_user_id: Optional[uuid.UUID]
    recipient_email: str
    subject: str
    template_used: Optional[str]
    contact_id: Optional[uuid.UUID]
    message_id: Optional[str]
    status: str
    error_message: Optional[str]
    metadata: Optional[dict[str, Any]] = Field(default=None, validation_alias=AliasChoices('metadata_', 'metadata'))
    sent_at: datetime

# caminho: vending_admin/application/contacts/use_cases.py
# Funções:
# - ContactService: listagem/consulta/atualização de contatos pelo painel
# - submit(): formulário público; grava primeiro, depois tenta os e-mails
#   (confirmação ao cliente e aviso ao negócio) sem nunca falhar por eles

from __future__ import annotations

import uuid
from dataclasses import dataclass
from typing import Any, Literal, Optional

from jinja2 import TemplateError
from sqlalchemy.exc import IntegrityError

from vending_admin.application.activity.use_cases import ActivityRecorder
from vending_admin.application.common.dto import RequestContext, map_page, snapshot
from vending_admin.application.contacts.dto import (
    ContactCreated,
    ContactOutput,
    ContactSubmissionInput,
    ContactSubmitResponse,
    ContactUpdateInput,
    EmailDeliveryStatus,
)
from vending_admin.domain.catalog.enums import CONTACT_STATUS_DEFAULT, CONTACT_STATUS_RESOLVED
from vending_admin.infrastructure.db.models import ContactSubmissionModel
from vending_admin.infrastructure.db.query_builder import Page
from vending_admin.infrastructure.db.utils import utcnow
from vending_admin.infrastructure.repositories.contact_repository import ContactRepositoryImpl
from vending_admin.shared.email_notifications import EmailDeliveryError, EmailNotifier
from vending_admin.shared.errors import NotFound, ValidationFailure
from vending_admin.shared.filters import ContactFilters
from vending_admin.shared.logging import log_info, log_warning

CONTACT_RESOURCE = 'contact_submission'
CONTACT_SOURCE = 'website_contact_form'

SUBMIT_MESSAGES = {
    (True, True): "Thank you for your inquiry! We've sent a confirmation email and will respond within 24 hours.",
    (False, True): 'Thank you for your inquiry! We will respond within 24 hours.',
}
SUBMIT_MESSAGE_DEFAULT = 'Thank you for your inquiry! We have received your submission and will respond within 24 hours.'


@dataclass(slots=True)
class ContactAdapters:
    contacts: ContactRepositoryImpl
    activity: ActivityRecorder


class ContactService:
    def __init__(self, adapters: ContactAdapters, notifier: Optional[EmailNotifier] = None) -> None:
        self._contacts = adapters.contacts
        self._activity = adapters.activity
        self._notifier = notifier

    async def list_contacts(self, filters: ContactFilters) -> Page[ContactOutput]:
        page = await self._contacts.list_page(filters)
        return map_page(page, ContactOutput.model_validate)

    async def get_contact(self, contact_id: uuid.UUID) -> ContactOutput:
        return ContactOutput.model_validate(await self._require(contact_id))

    async def update_contact(
        self,
        contact_id: uuid.UUID,
        payload: ContactUpdateInput,
        context: RequestContext,
    ) -> ContactOutput:
        model = await self._require(contact_id)
        changes = payload.model_dump(exclude_unset=True)
        if changes.get('status') == CONTACT_STATUS_RESOLVED and model.status != CONTACT_STATUS_RESOLVED:
            changes['resolved_at'] = utcnow()

        before = ContactOutput.model_validate(model)
        try:
            updated = ContactOutput.model_validate(await self._contacts.update(model, changes))
        except IntegrityError as exc:
            # Única FK alterável aqui
            raise ValidationFailure(details=[{'field': 'assignedTo', 'message': 'Invalid admin user ID'}]) from exc

        await self._activity.record(
            context,
            action_type='update',
            resource_type=CONTACT_RESOURCE,
            resource_id=contact_id,
            old_values=snapshot(before, changes),
            new_values=snapshot(updated, changes),
        )
        log_info('CONTACT_UPDATED', {'contact_id': str(contact_id), 'fields': sorted(changes)})
        return updated

    async def submit(self, payload: ContactSubmissionInput, context: RequestContext) -> ContactSubmitResponse:
        values = payload.model_dump()
        values.update(source=CONTACT_SOURCE, status=CONTACT_STATUS_DEFAULT)
        contact = await self._contacts.create(values)
        log_info('CONTACT_SUBMITTED', {'contact_id': str(contact.id), 'ip': context.ip_address})

        mail_context = ContactOutput.model_validate(contact).model_dump(mode='json')
        customer = await self._try_send('confirmation', contact, mail_context)
        business = await self._try_send('notification', contact, mail_context)

        return ContactSubmitResponse(
            message=SUBMIT_MESSAGES.get((customer, business), SUBMIT_MESSAGE_DEFAULT),
            data=ContactCreated(id=contact.id),
            email_status=EmailDeliveryStatus(
                customer='sent' if customer else 'failed',
                business='sent' if business else 'failed',
            ),
        )

    async def _try_send(
        self,
        kind: Literal['confirmation', 'notification'],
        contact: ContactSubmissionModel,
        mail_context: dict[str, Any],
    ) -> bool:
        if self._notifier is None:
            return False
        send = (
            self._notifier.send_contact_confirmation
            if kind == 'confirmation'
            else self._notifier.send_contact_notification
        )
        try:
            message_id = await send(mail_context)
        except (EmailDeliveryError, TemplateError) as exc:
            log_warning('CONTACT_EMAIL_FAILED', {'contact_id': str(contact.id), 'kind': kind, 'error': str(exc)})
            return False
        log_info('CONTACT_EMAIL_SENT', {'contact_id': str(contact.id), 'kind': kind, 'message_id': message_id})
        return True

    async def _require(self, contact_id: uuid.UUID) -> ContactSubmissionModel:
        model = await self._contacts.get(contact_id)
        if model is None:
            raise NotFound('Contact not found')
        return model

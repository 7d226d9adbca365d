# caminho: vending_admin/application/emails/use_cases.py
# Funções:
# - EmailService: envio avulso pelo painel e histórico de envios
#   (falha de entrega vira 502; o registro no histórico e na auditoria não derruba o envio)

from __future__ import annotations

import uuid
from dataclasses import dataclass
from typing import Optional

from vending_admin.application.activity.use_cases import ActivityRecorder
from vending_admin.application.common.dto import RequestContext, map_page
from vending_admin.application.emails.dto import EmailLogOutput, EmailSent, SendEmailInput
from vending_admin.infrastructure.db.query_builder import Page
from vending_admin.infrastructure.repositories.site_repository import EmailLogRepositoryImpl
from vending_admin.shared.email_notifications import EmailDeliveryError, EmailNotifier
from vending_admin.shared.errors import UpstreamFailure
from vending_admin.shared.filters import EmailLogFilters
from vending_admin.shared.logging import log_info, log_warning

EMAIL_RESOURCE = 'email'


@dataclass(slots=True)
class EmailAdapters:
    logs: EmailLogRepositoryImpl
    activity: ActivityRecorder


class EmailService:
    def __init__(self, adapters: EmailAdapters, notifier: EmailNotifier) -> None:
        self._logs = adapters.logs
        self._activity = adapters.activity
        self._notifier = notifier

    async def send(self, payload: SendEmailInput, context: RequestContext) -> EmailSent:
        try:
            message_id = await self._notifier.send_email(
                recipients=[str(payload.to)],
                subject=payload.subject,
                html_body=payload.html,
            )
        except EmailDeliveryError as exc:
            log_warning('EMAIL_SEND_FAILED', {'admin_id': context.admin_id, 'error': str(exc)})
            raise UpstreamFailure('Failed to send email') from exc

        log_id = await self._write_log(payload, message_id, context)
        await self._activity.record(
            context,
            action_type='create',
            resource_type=EMAIL_RESOURCE,
            resource_id=log_id,
            new_values={'to': str(payload.to), 'subject': payload.subject, 'template_used': payload.template_used},
        )
        log_info('ADMIN_EMAIL_SENT', {'admin_id': context.admin_id, 'message_id': message_id})
        return EmailSent(message_id=message_id, log_id=log_id)

    async def list_logs(self, filters: EmailLogFilters) -> Page[EmailLogOutput]:
        page = await self._logs.list_page(filters)
        return map_page(page, EmailLogOutput.model_validate)

    async def _write_log(
        self,
        payload: SendEmailInput,
        message_id: str,
        context: RequestContext,
    ) -> Optional[uuid.UUID]:
        try:
            log = await self._logs.create(
                {
                    'admin_user_id': uuid.UUID(context.admin_id) if context.admin_id else None,
                    'recipient_email': str(payload.to),
                    'subject': payload.subject,
                    'template_used': payload.template_used,
                    'contact_id': payload.contact_id,
                    'message_id': message_id,
                    'status': 'sent',
                    'metadata_': payload.metadata,
                }
            )
        except Exception as exc:
            log_warning('EMAIL_LOG_WRITE_FAILED', {'message_id': message_id, 'error': exc.__class__.__name__})
            return None
        return log.id

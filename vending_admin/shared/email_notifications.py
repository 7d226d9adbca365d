# caminho: vending_admin/shared/email_notifications.py
# Funções:
# - EmailNotifier: envia e-mails via SMTP renderizando templates Jinja2
# - send_email(): envio direto (HTML livre) usado pelo painel administrativo
# - send_contact_confirmation()/send_contact_notification(): avisos do formulário público
# - EmailDeliveryError: falha de entrega ou SMTP não configurado

from __future__ import annotations

import asyncio
import re
import smtplib
import ssl
from email.message import EmailMessage
from email.utils import formataddr, make_msgid
from pathlib import Path
from typing import Any, Optional, Sequence

from jinja2 import Environment, FileSystemLoader, select_autoescape

from vending_admin.config.settings import Settings
from vending_admin.shared.logging import log_info, log_warning

_TAG_RE = re.compile(r'<[^>]+>')


class EmailDeliveryError(Exception):
    pass


def _clean_addresses(raw: str | None) -> list[str]:
    if not raw:
        return []
    return [addr.strip() for addr in raw.split(',') if addr.strip()]


def _resolve_template_dir(settings: Settings) -> Path:
    template_dir = Path(settings.EMAIL_SERVER_TEMPLATE_DIR or '')
    if not template_dir.is_absolute():
        package_root = Path(__file__).resolve().parents[1]
        template_dir = package_root / template_dir
    return template_dir


def _html_to_text(html: str) -> str:
    return re.sub(r'\n{3,}', '\n\n', _TAG_RE.sub('', html)).strip()


class EmailNotifier:
    def __init__(self, settings: Settings) -> None:
        self._settings = settings
        self._env = Environment(
            loader=FileSystemLoader(str(_resolve_template_dir(settings))),
            autoescape=select_autoescape(['html', 'xml']),
        )

    @property
    def missing_configuration(self) -> list[str]:
        return [
            item
            for item, value in {
                'host': self._settings.EMAIL_SERVER_SMTP_HOST,
                'username': self._settings.EMAIL_SERVER_USERNAME,
                'password': self._settings.EMAIL_SERVER_PASSWORD.get_secret_value(),
            }.items()
            if not value
        ]

    async def send_email(
        self,
        *,
        recipients: Sequence[str],
        subject: str,
        html_body: str,
        plain_body: Optional[str] = None,
    ) -> str:
        """Envia a mensagem e devolve o Message-ID; levanta EmailDeliveryError em falha."""
        if not recipients:
            raise EmailDeliveryError('No recipients')

        missing = self.missing_configuration
        if missing:
            log_warning('EMAIL_SKIPPED_SMTP_MISCONFIGURED', {'missing': missing})
            raise EmailDeliveryError('Email service is not configured')

        message = self._compose_message(
            subject=subject,
            recipients=recipients,
            html_body=html_body,
            plain_body=plain_body or _html_to_text(html_body),
        )
        try:
            await asyncio.to_thread(self._deliver, message, recipients)
        except (smtplib.SMTPException, OSError) as exc:
            raise EmailDeliveryError(str(exc)) from exc

        log_info('EMAIL_SENT', {'recipients': len(recipients), 'message_id': message['Message-ID']})
        return str(message['Message-ID'])

    async def send_contact_confirmation(self, contact: dict[str, Any]) -> str:
        html_body = await asyncio.to_thread(
            self._render, self._settings.CONTACT_CONFIRMATION_TEMPLATE_NAME, contact=contact
        )
        return await self.send_email(
            recipients=[contact['email']],
            subject=self._settings.CONTACT_CONFIRMATION_SUBJECT,
            html_body=html_body,
        )

    async def send_contact_notification(self, contact: dict[str, Any]) -> str:
        recipients = _clean_addresses(self._settings.BUSINESS_NOTIFICATION_EMAIL)
        if not recipients:
            raise EmailDeliveryError('Business notification address is not configured')
        html_body = await asyncio.to_thread(
            self._render, self._settings.CONTACT_NOTIFICATION_TEMPLATE_NAME, contact=contact
        )
        subject = f"{self._settings.CONTACT_NOTIFICATION_SUBJECT}: {contact.get('company_name', '')}".rstrip(': ')
        return await self.send_email(recipients=recipients, subject=subject, html_body=html_body)

    def _render(self, template_name: str, **context: Any) -> str:
        template = self._env.get_template(template_name)
        return template.render(business_name=self._settings.EMAIL_FROM_NAME, **context)

    def _compose_message(
        self,
        *,
        subject: str,
        recipients: Sequence[str],
        html_body: str,
        plain_body: str,
    ) -> EmailMessage:
        message = EmailMessage()
        sender_address = (self._settings.EMAIL_FROM_ADDRESS or self._settings.EMAIL_SERVER_USERNAME or '').strip()
        sender_name = (self._settings.EMAIL_FROM_NAME or self._settings.EMAIL_SERVER_NAME or '').strip()

        message['Subject'] = subject
        message['From'] = formataddr((sender_name, sender_address)) if sender_address else sender_name or 'AMP Vending'
        message['To'] = ', '.join(recipients)

        cc_list = _clean_addresses(self._settings.EMAIL_CC_ADDRESSES)
        if cc_list:
            message['Cc'] = ', '.join(cc_list)

        message['Message-ID'] = make_msgid()
        message.set_content(plain_body)
        message.add_alternative(html_body, subtype='html')

        return message

    def _deliver(self, message: EmailMessage, to_recipients: Sequence[str]) -> None:
        cc_list = _clean_addresses(self._settings.EMAIL_CC_ADDRESSES)
        bcc_list = _clean_addresses(self._settings.EMAIL_BCC_ADDRESSES)
        all_recipients = list(dict.fromkeys([*to_recipients, *cc_list, *bcc_list]))

        encryption = (self._settings.EMAIL_SERVER_SMTP_ENCRYPTION or '').upper()
        context = ssl.create_default_context()
        password = self._settings.EMAIL_SERVER_PASSWORD.get_secret_value()

        if encryption in {'SSL', 'SSL/TLS'}:
            with smtplib.SMTP_SSL(self._settings.EMAIL_SERVER_SMTP_HOST, self._settings.EMAIL_SERVER_SMTP_PORT, context=context) as smtp:
                smtp.login(self._settings.EMAIL_SERVER_USERNAME, password)
                smtp.send_message(message, to_addrs=all_recipients)
                return

        with smtplib.SMTP(self._settings.EMAIL_SERVER_SMTP_HOST, self._settings.EMAIL_SERVER_SMTP_PORT) as smtp:
            smtp.ehlo()
            if encryption in {'STARTTLS', 'TLS'}:
                smtp.starttls(context=context)
                smtp.ehlo()
            smtp.login(self._settings.EMAIL_SERVER_USERNAME, password)
            smtp.send_message(message, to_addrs=all_recipients)

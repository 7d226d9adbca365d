import asyncio
import os
import tempfile
import uuid
from pathlib import Path

# Configuração precisa existir antes do primeiro get_settings()
TEST_ROOT = Path(tempfile.mkdtemp(prefix='vending-admin-tests-'))
os.environ.update(
    {
        'DEPLOYMENT_ENVIRONMENT': 'development',
        'LOG_LEVEL': 'DEBUG',
        'SECRET_KEY': 'test-secret-key-0123456789-abcdefghijklmnop',
        'DATABASE_URL': f'sqlite+aiosqlite:///{TEST_ROOT / "vending_admin_test.db"}',
        'REDIS_URL': '',
        'PASSWORD_BCRYPT_ROUNDS': '4',
        'MEDIA_ROOT': str(TEST_ROOT / 'media'),
        'MEDIA_BASE_URL': '/media',
        'GOOGLE_CLIENT_ID': 'test-client-id.apps.googleusercontent.com',
        'GOOGLE_CLIENT_SECRET': 'test-google-secret',
        'GOOGLE_REDIRECT_URI': 'http://testserver/admin/auth/google/callback',
        'ROOT_ADMIN_EMAIL': '',
        'ROOT_ADMIN_NAME': '',
        'ROOT_ADMIN_PASSWORD': '',
        'BUSINESS_NOTIFICATION_EMAIL': 'sales@ampvending.test',
    }
)

import httpx  # noqa: E402
import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from vending_admin.config import get_settings  # noqa: E402
from vending_admin.config.constants import BUSINESS_INFO_ID  # noqa: E402
from vending_admin.domain.admins.entities import SessionClaims  # noqa: E402
from vending_admin.infrastructure.db.base import Base, get_engine, get_sessionmaker  # noqa: E402
from vending_admin.infrastructure.db.models import AdminUserModel, BusinessInfoModel, EmailTemplateModel  # noqa: E402
from vending_admin.infrastructure.security.passwords import PasswordVerifier  # noqa: E402
from vending_admin.interfaces.api.app import create_application  # noqa: E402
from vending_admin.interfaces.api.dependencies import get_email_notifier, get_http_client  # noqa: E402
from vending_admin.shared.auth_dependencies import get_jwt_service  # noqa: E402
from vending_admin.shared.email_notifications import EmailDeliveryError  # noqa: E402

ADMIN_PASSWORD = 'S3cure-Passw0rd!'


# --- Banco ---


async def _reset_schema() -> None:
    async with get_engine().begin() as connection:
        await connection.run_sync(Base.metadata.drop_all)
        await connection.run_sync(Base.metadata.create_all)


async def _add(model):
    async with get_sessionmaker()() as session:
        session.add(model)
        await session.commit()
        return model


def run(coro):
    return asyncio.run(coro)


# --- Dublês das integrações externas ---


class FakeNotifier:
    """Registra os envios; `fail` simula SMTP indisponível."""

    def __init__(self):
        self.fail = False
        self.sent = []

    async def send_email(self, *, recipients, subject, html_body, plain_body=None):
        return self._deliver('direct', list(recipients), subject)

    async def send_contact_confirmation(self, contact):
        return self._deliver('confirmation', [contact['email']], 'confirmation')

    async def send_contact_notification(self, contact):
        return self._deliver('notification', [get_settings().BUSINESS_NOTIFICATION_EMAIL], 'notification')

    def _deliver(self, kind, recipients, subject):
        if self.fail:
            raise EmailDeliveryError('SMTP unavailable')
        message_id = f'<{uuid.uuid4().hex}@ampvending.test>'
        self.sent.append({'kind': kind, 'recipients': recipients, 'subject': subject, 'message_id': message_id})
        return message_id


class FakeGoogle:
    """Respostas dos endpoints token/tokeninfo do Google via httpx.MockTransport."""

    def __init__(self):
        self.token_status = 200
        self.id_token = 'google-id-token'
        self.claims = {}
        self.verified_tokens = []

    def identity(self, email, *, sub='google-sub-1', aud=None, iss='https://accounts.google.com', verified='true'):
        self.claims = {
            'sub': sub,
            'email': email,
            'email_verified': verified,
            'aud': aud or get_settings().GOOGLE_CLIENT_ID,
            'iss': iss,
            'name': 'Google User',
            'picture': 'https://lh3.googleusercontent.com/avatar.png',
        }

    def handler(self, request: httpx.Request) -> httpx.Response:
        settings = get_settings()
        # Comparação exata: a URL do tokeninfo começa com a URL do token
        endpoint = f'{request.url.scheme}://{request.url.host}{request.url.path}'
        if endpoint == settings.GOOGLE_TOKEN_URL:
            if self.token_status != 200:
                return httpx.Response(self.token_status, json={'error': 'invalid_grant'})
            payload = {'access_token': 'google-access-token'}
            if self.id_token:
                payload['id_token'] = self.id_token
            return httpx.Response(200, json=payload)
        if endpoint == settings.GOOGLE_TOKENINFO_URL:
            self.verified_tokens.append(request.url.params.get('id_token'))
            return httpx.Response(200, json=self.claims)
        return httpx.Response(404)


# --- Fixtures ---


@pytest.fixture
def notifier():
    return FakeNotifier()


@pytest.fixture
def google():
    return FakeGoogle()


@pytest.fixture
def app(notifier, google):
    run(_reset_schema())
    application = create_application()

    async def override_http_client():
        async with httpx.AsyncClient(transport=httpx.MockTransport(google.handler)) as http_client:
            yield http_client

    application.dependency_overrides[get_email_notifier] = lambda: notifier
    application.dependency_overrides[get_http_client] = override_http_client
    yield application
    application.dependency_overrides.clear()


@pytest.fixture
def client(app):
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def create_admin():
    def factory(email='admin@ampvending.test', *, name='Admin User', role='admin', password=ADMIN_PASSWORD, **extra):
        password_hash = PasswordVerifier(get_settings().PASSWORD_BCRYPT_ROUNDS).hash(password) if password else None
        model = AdminUserModel(email=email, name=name, role=role, password_hash=password_hash, **extra)
        return run(_add(model))

    return factory


@pytest.fixture
def auth_headers():
    """Bearer token assinado para um papel, sem passar pelo login."""

    def factory(role='admin', *, user_id=None, email='token@ampvending.test'):
        claims = SessionClaims(user_id=user_id or str(uuid.uuid4()), email=email, role=role, name='Token User')
        token = get_jwt_service().create_access_token(claims, 3600)
        return {'Authorization': f'Bearer {token}'}

    return factory


@pytest.fixture
def create_email_template():
    def factory(template_id, *, name=None, category='customer', subject='Hello', body='<p>Hello</p>', **extra):
        model = EmailTemplateModel(
            template_id=template_id,
            name=name or template_id,
            category=category,
            subject=subject,
            body=body,
            **extra,
        )
        return run(_add(model))

    return factory


@pytest.fixture
def business_info():
    model = BusinessInfoModel(id=uuid.UUID(BUSINESS_INFO_ID), business_name='AMP Vending', country='USA')
    return run(_add(model))


def machine_payload(slug='premium-combo-machine', **overrides):
    payload = {
        'slug': slug,
        'name': 'Premium Combo Machine',
        'category': 'refrigerated',
        'shortDescription': 'Refrigerated combo machine for snacks and drinks.',
        'description': 'A refrigerated combo vending machine that holds snacks and cold beverages, '
        'with cashless payments, remote monitoring and an energy efficient cooling system.',
        'dimensions': [{'label': 'Height', 'value': '72 in'}],
        'specifications': [{'category': 'Payment', 'items': [{'label': 'Card reader', 'value': 'Yes'}]}],
        'features': [{'title': 'Cashless', 'description': 'Accepts cards and mobile wallets'}],
        'productOptions': ['Snacks', 'Beverages'],
        'bestFor': ['Offices'],
    }
    payload.update(overrides)
    return payload


def product_payload(slug='classic-chips', **overrides):
    payload = {'slug': slug, 'name': 'Classic Chips', 'category': 'chips'}
    payload.update(overrides)
    return payload


def contact_payload(**overrides):
    payload = {
        'firstName': 'Jane',
        'lastName': 'Doe',
        'email': 'jane.doe@example.com',
        'phone': '(555) 123-4567',
        'companyName': 'Acme Offices',
        'message': 'We would like a machine for our break room.',
    }
    payload.update(overrides)
    return payload

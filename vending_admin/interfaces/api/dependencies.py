# caminho: vending_admin/interfaces/api/dependencies.py
# Funções:
# - build_request_context(): IP/user-agent/claims da requisição para auditoria
# - get_*_service(): instanciam os serviços com adapters concretos
# - get_email_notifier()/get_google_oauth_client()/get_image_storage(): integrações
#   externas, substituíveis via app.dependency_overrides nos testes

from __future__ import annotations

from collections.abc import AsyncGenerator
from functools import lru_cache
from typing import Optional

import httpx
from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from vending_admin.application.activity.use_cases import ActivityRecorder, ActivityService
from vending_admin.application.auth.oauth_bridge import GoogleOAuthBridge
from vending_admin.application.auth.use_cases import AuthAdapters, AuthService
from vending_admin.application.catalog.use_cases import CatalogAdapters, MachineService, ProductService
from vending_admin.application.common.dto import RequestContext
from vending_admin.application.contacts.use_cases import ContactAdapters, ContactService
from vending_admin.application.emails.use_cases import EmailAdapters, EmailService
from vending_admin.application.marketing.use_cases import EmailTemplateService, ExitIntentService, MarketingAdapters
from vending_admin.application.site.use_cases import BusinessInfoService, SeoService, SiteAdapters
from vending_admin.config import get_settings
from vending_admin.domain.admins.entities import SessionClaims
from vending_admin.infrastructure.cache.redis import get_redis_client
from vending_admin.infrastructure.db.base import get_session
from vending_admin.infrastructure.oauth.google import GoogleOAuthClient
from vending_admin.infrastructure.repositories.admin_repository import ActivityLogRepositoryImpl, AdminRepositoryImpl
from vending_admin.infrastructure.repositories.catalog_repository import (
    MachineImageRepositoryImpl,
    MachineRepositoryImpl,
    ProductRepositoryImpl,
)
from vending_admin.infrastructure.repositories.contact_repository import ContactRepositoryImpl
from vending_admin.infrastructure.repositories.marketing_repository import EmailTemplateRepositoryImpl, ExitIntentRepositoryImpl
from vending_admin.infrastructure.repositories.site_repository import (
    BusinessInfoRepositoryImpl,
    EmailLogRepositoryImpl,
    SeoSettingRepositoryImpl,
)
from vending_admin.infrastructure.security.jwt import JWTService
from vending_admin.infrastructure.security.passwords import PasswordVerifier
from vending_admin.infrastructure.storage.images import ImageStorage, LocalImageStorage
from vending_admin.shared.auth_dependencies import get_jwt_service
from vending_admin.shared.email_notifications import EmailNotifier
from vending_admin.shared.rate_limit import NullAttemptRateLimiter, RedisAttemptRateLimiter
from vending_admin.shared.security_lock import NullSecurityLockManager, RedisSecurityLockManager

# --- Contexto da requisição ---


def client_ip(request: Request) -> str:
    forwarded = request.headers.get('x-forwarded-for', '')
    if forwarded:
        return forwarded.split(',')[0].strip()
    return request.client.host if request.client else ''


def build_request_context(request: Request, claims: Optional[SessionClaims] = None) -> RequestContext:
    return RequestContext(
        claims=claims,
        ip_address=client_ip(request),
        user_agent=request.headers.get('user-agent', ''),
    )


# --- Integrações externas ---


@lru_cache(maxsize=1)
def get_password_verifier() -> PasswordVerifier:
    return PasswordVerifier(rounds=get_settings().PASSWORD_BCRYPT_ROUNDS)


def get_email_notifier() -> EmailNotifier:
    return EmailNotifier(get_settings())


def get_image_storage() -> ImageStorage:
    settings = get_settings()
    return LocalImageStorage(settings.MEDIA_ROOT, settings.MEDIA_BASE_URL)


async def get_http_client() -> AsyncGenerator[httpx.AsyncClient, None]:
    async with httpx.AsyncClient(timeout=get_settings().GOOGLE_HTTP_TIMEOUT_SECONDS) as client:
        yield client


def get_google_oauth_client(http_client: httpx.AsyncClient = Depends(get_http_client)) -> GoogleOAuthClient:
    return GoogleOAuthClient(get_settings(), http_client)


# --- Serviços ---


def get_activity_recorder(session: AsyncSession = Depends(get_session)) -> ActivityRecorder:
    return ActivityRecorder(ActivityLogRepositoryImpl(session))


def get_auth_service(
    session: AsyncSession = Depends(get_session),
    redis_client=Depends(get_redis_client),
    activity: ActivityRecorder = Depends(get_activity_recorder),
    jwt_service: JWTService = Depends(get_jwt_service),
    password_verifier: PasswordVerifier = Depends(get_password_verifier),
) -> AuthService:
    settings = get_settings()
    if redis_client is None:
        security_lock = NullSecurityLockManager()
        login_rate_limiter = NullAttemptRateLimiter()
    else:
        security_lock = RedisSecurityLockManager(
            redis_client,
            block_duration_seconds=settings.SECURITY_BLOCK_DURATION_SECONDS,
            max_login_failures=settings.SECURITY_MAX_LOGIN_FAILURES,
        )
        login_rate_limiter = RedisAttemptRateLimiter(
            redis_client,
            interval_seconds=settings.LOGIN_ATTEMPT_INTERVAL_SECONDS,
            prefix='auth:login',
        )
    return AuthService(
        adapters=AuthAdapters(admins=AdminRepositoryImpl(session), activity=activity),
        settings=settings,
        jwt_service=jwt_service,
        password_verifier=password_verifier,
        security_lock=security_lock,
        login_rate_limiter=login_rate_limiter,
    )


def get_oauth_bridge(
    session: AsyncSession = Depends(get_session),
    client: GoogleOAuthClient = Depends(get_google_oauth_client),
    auth_service: AuthService = Depends(get_auth_service),
    activity: ActivityRecorder = Depends(get_activity_recorder),
) -> GoogleOAuthBridge:
    return GoogleOAuthBridge(
        client=client,
        admins=AdminRepositoryImpl(session),
        auth_service=auth_service,
        activity=activity,
    )


def get_contact_service(
    session: AsyncSession = Depends(get_session),
    activity: ActivityRecorder = Depends(get_activity_recorder),
    notifier: EmailNotifier = Depends(get_email_notifier),
) -> ContactService:
    return ContactService(ContactAdapters(contacts=ContactRepositoryImpl(session), activity=activity), notifier)


def _catalog_adapters(session: AsyncSession, activity: ActivityRecorder) -> CatalogAdapters:
    return CatalogAdapters(
        machines=MachineRepositoryImpl(session),
        images=MachineImageRepositoryImpl(session),
        products=ProductRepositoryImpl(session),
        activity=activity,
    )


def get_machine_service(
    session: AsyncSession = Depends(get_session),
    activity: ActivityRecorder = Depends(get_activity_recorder),
    storage: ImageStorage = Depends(get_image_storage),
) -> MachineService:
    return MachineService(_catalog_adapters(session, activity), get_settings(), storage)


def get_product_service(
    session: AsyncSession = Depends(get_session),
    activity: ActivityRecorder = Depends(get_activity_recorder),
) -> ProductService:
    return ProductService(_catalog_adapters(session, activity))


def _site_adapters(session: AsyncSession, activity: ActivityRecorder) -> SiteAdapters:
    return SiteAdapters(
        seo=SeoSettingRepositoryImpl(session),
        business=BusinessInfoRepositoryImpl(session),
        activity=activity,
    )


def get_seo_service(
    session: AsyncSession = Depends(get_session),
    activity: ActivityRecorder = Depends(get_activity_recorder),
) -> SeoService:
    return SeoService(_site_adapters(session, activity))


def get_business_service(
    session: AsyncSession = Depends(get_session),
    activity: ActivityRecorder = Depends(get_activity_recorder),
) -> BusinessInfoService:
    return BusinessInfoService(_site_adapters(session, activity))


def get_email_service(
    session: AsyncSession = Depends(get_session),
    activity: ActivityRecorder = Depends(get_activity_recorder),
    notifier: EmailNotifier = Depends(get_email_notifier),
) -> EmailService:
    return EmailService(EmailAdapters(logs=EmailLogRepositoryImpl(session), activity=activity), notifier)


def _marketing_adapters(session: AsyncSession, activity: ActivityRecorder) -> MarketingAdapters:
    return MarketingAdapters(
        templates=EmailTemplateRepositoryImpl(session),
        campaigns=ExitIntentRepositoryImpl(session),
        activity=activity,
    )


def get_email_template_service(
    session: AsyncSession = Depends(get_session),
    activity: ActivityRecorder = Depends(get_activity_recorder),
) -> EmailTemplateService:
    return EmailTemplateService(_marketing_adapters(session, activity))


def get_exit_intent_service(
    session: AsyncSession = Depends(get_session),
    activity: ActivityRecorder = Depends(get_activity_recorder),
) -> ExitIntentService:
    return ExitIntentService(_marketing_adapters(session, activity))


def get_activity_service(session: AsyncSession = Depends(get_session)) -> ActivityService:
    return ActivityService(ActivityLogRepositoryImpl(session))

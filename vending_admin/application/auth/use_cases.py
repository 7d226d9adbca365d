# caminho: vending_admin/application/auth/use_cases.py
# Funções:
# - AuthService: login por senha (bloqueio, rate limit, verificação), refresh e logout
# - Todas as falhas de credencial produzem o mesmo erro, exista ou não o e-mail

from __future__ import annotations

from dataclasses import dataclass

from jwt import InvalidTokenError

from vending_admin.application.activity.use_cases import ActivityRecorder
from vending_admin.application.auth.dto import IssuedSession, LoginRequest
from vending_admin.application.common.dto import RequestContext
from vending_admin.config.settings import Settings
from vending_admin.domain.admins.entities import AdminIdentity, SessionClaims
from vending_admin.domain.admins.repositories import AdminRepository
from vending_admin.infrastructure.db.utils import utcnow
from vending_admin.infrastructure.security.jwt import JWTService
from vending_admin.infrastructure.security.passwords import PasswordVerifier
from vending_admin.shared.errors import InvalidCredentials, Locked, TooManyRequests, Unauthenticated
from vending_admin.shared.logging import log_info, log_warning
from vending_admin.shared.rate_limit import AttemptRateLimiter, NullAttemptRateLimiter
from vending_admin.shared.security_lock import NullSecurityLockManager, SecurityLockManager

ADMIN_RESOURCE = 'admin_user'


@dataclass(slots=True)
class AuthAdapters:
    admins: AdminRepository
    activity: ActivityRecorder


class AuthService:
    def __init__(
        self,
        adapters: AuthAdapters,
        settings: Settings,
        jwt_service: JWTService,
        password_verifier: PasswordVerifier,
        security_lock: SecurityLockManager | None = None,
        login_rate_limiter: AttemptRateLimiter | None = None,
    ) -> None:
        self._admins = adapters.admins
        self._activity = adapters.activity
        self._settings = settings
        self._jwt = jwt_service
        self._verifier = password_verifier
        self._locks = security_lock or NullSecurityLockManager()
        self._login_rate_limiter = login_rate_limiter or NullAttemptRateLimiter()

    async def login(self, payload: LoginRequest, context: RequestContext) -> IssuedSession:
        email = payload.email.strip().lower()

        allowed, retry_in = await self._login_rate_limiter.acquire(email)
        if not allowed:
            log_warning('ADMIN_LOGIN_RATE_LIMITED', {'ip': context.ip_address})
            raise TooManyRequests(headers={'Retry-After': str(retry_in)})

        lock_state = await self._locks.get_block(email)
        if lock_state is not None:
            log_warning('ADMIN_LOGIN_BLOCKED_ATTEMPT', {'ip': context.ip_address, 'retry_in': lock_state.ttl_seconds})
            raise Locked(headers={'Retry-After': str(lock_state.ttl_seconds)})

        identity = await self._admins.get_by_email(email)
        usable = identity if identity is not None and identity.is_active else None
        # Sem identidade utilizável o verificador compara contra um hash fictício
        valid = self._verifier.verify(payload.password, usable.password_hash if usable else None)

        if usable is None or not valid:
            locked = await self._locks.register_failure(
                email,
                last_ip=context.ip_address[:64],
                user_agent=context.user_agent[:128],
            )
            if locked:
                log_warning('ADMIN_LOGIN_LOCKED', {'ip': context.ip_address})
            log_warning('ADMIN_INVALID_CREDENTIALS', {'ip': context.ip_address})
            raise InvalidCredentials()

        await self._locks.reset_failures(email)
        await self._admins.touch_last_login(usable.id, utcnow())

        claims = SessionClaims.from_identity(usable)
        issued = IssuedSession(
            claims=claims,
            access_token=self._jwt.create_access_token(
                claims, self._settings.TOKEN_PASSWORD_ACCESS_EXPIRE_SECONDS
            ),
            access_expires_in=self._settings.TOKEN_PASSWORD_ACCESS_EXPIRE_SECONDS,
        )
        await self._activity.record(
            context,
            action_type='login',
            resource_type=ADMIN_RESOURCE,
            resource_id=usable.id,
            admin_id=usable.id,
            new_values={'method': 'password'},
        )
        log_info('ADMIN_LOGIN_SUCCESS', {'admin_id': usable.id, 'method': 'password'})
        return issued

    async def refresh(self, refresh_token: str | None, context: RequestContext) -> IssuedSession:
        if not refresh_token:
            raise Unauthenticated()
        try:
            subject = self._jwt.decode_refresh_token(refresh_token)
        except InvalidTokenError as exc:
            log_warning('ADMIN_REFRESH_REJECTED', {'reason': exc.__class__.__name__, 'ip': context.ip_address})
            raise Unauthenticated() from exc

        identity = await self._admins.get_by_id(subject)
        if identity is None or not identity.is_active:
            log_warning('ADMIN_REFRESH_SUBJECT_INVALID', {'admin_id': subject})
            raise Unauthenticated()

        issued = self.issue_oauth_session(identity)
        log_info('ADMIN_TOKEN_REFRESHED', {'admin_id': identity.id})
        return issued

    async def logout(self, context: RequestContext) -> None:
        if context.claims is None:
            return
        await self._activity.record(
            context,
            action_type='logout',
            resource_type=ADMIN_RESOURCE,
            resource_id=context.claims.user_id,
        )
        log_info('ADMIN_LOGOUT', {'admin_id': context.claims.user_id})

    def issue_oauth_session(self, identity: AdminIdentity) -> IssuedSession:
        """Par access/refresh com as validades do fluxo OAuth (também usado no refresh)."""
        claims = SessionClaims.from_identity(identity)
        return IssuedSession(
            claims=claims,
            access_token=self._jwt.create_access_token(claims, self._settings.TOKEN_OAUTH_ACCESS_EXPIRE_SECONDS),
            access_expires_in=self._settings.TOKEN_OAUTH_ACCESS_EXPIRE_SECONDS,
            refresh_token=self._jwt.create_refresh_token(identity.id, self._settings.TOKEN_REFRESH_EXPIRE_SECONDS),
            refresh_expires_in=self._settings.TOKEN_REFRESH_EXPIRE_SECONDS,
        )

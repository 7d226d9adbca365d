# caminho: vending_admin/application/auth/oauth_bridge.py
# Funções:
# - GoogleOAuthBridge: conduz o callback do Google até Authorized ou Rejected
#   Init -> CodeReceived -> TokensExchanged -> IdentityAsserted -> {Authorized, Rejected}
# - OAuthOutcome: resultado final com motivo/mensagem para o redirecionamento
# - REJECTION_MESSAGES: texto exibido na tela de login para cada motivo

from __future__ import annotations

import secrets
from dataclasses import dataclass
from typing import Literal, Optional

from vending_admin.application.activity.use_cases import ActivityRecorder
from vending_admin.application.auth.dto import IssuedSession
from vending_admin.application.auth.use_cases import ADMIN_RESOURCE, AuthService
from vending_admin.application.common.dto import RequestContext
from vending_admin.domain.admins.entities import AdminIdentity
from vending_admin.domain.admins.repositories import AdminRepository
from vending_admin.infrastructure.db.utils import utcnow
from vending_admin.infrastructure.oauth.google import GoogleIdentity, GoogleOAuthClient, GoogleOAuthError
from vending_admin.shared.errors import Unauthorized
from vending_admin.shared.logging import log_info, log_warning

OAUTH_PROVIDER = 'google'

RejectionReason = Literal['oauth_denied', 'no_code', 'unauthorized', 'auth_failed', 'oauth_init_failed']

REJECTION_MESSAGES: dict[str, str] = {
    'oauth_denied': 'Google sign-in was cancelled or denied',
    'no_code': 'No authorization code received from Google',
    'unauthorized': Unauthorized.message,
    'auth_failed': 'Authentication failed. Please try again.',
    'oauth_init_failed': 'Failed to initialize Google sign-in',
}


@dataclass(slots=True, frozen=True)
class OAuthOutcome:
    reason: Optional[RejectionReason] = None
    session: Optional[IssuedSession] = None
    identity: Optional[AdminIdentity] = None

    @property
    def authorized(self) -> bool:
        return self.session is not None

    @property
    def message(self) -> str:
        return REJECTION_MESSAGES.get(self.reason or '', '')

    @classmethod
    def rejected(cls, reason: RejectionReason) -> 'OAuthOutcome':
        return cls(reason=reason)


@dataclass(slots=True, frozen=True)
class OAuthStart:
    state: Optional[str] = None
    redirect_url: Optional[str] = None
    rejection: Optional[OAuthOutcome] = None


class GoogleOAuthBridge:
    def __init__(
        self,
        client: GoogleOAuthClient,
        admins: AdminRepository,
        auth_service: AuthService,
        activity: ActivityRecorder,
    ) -> None:
        self._client = client
        self._admins = admins
        self._auth = auth_service
        self._activity = activity

    def start(self) -> OAuthStart:
        state = secrets.token_urlsafe(32)
        try:
            url = self._client.authorization_url(state)
        except GoogleOAuthError as exc:
            log_warning('OAUTH_INIT_FAILED', {'error': str(exc)})
            return OAuthStart(rejection=OAuthOutcome.rejected('oauth_init_failed'))
        return OAuthStart(state=state, redirect_url=url)

    async def complete(
        self,
        *,
        code: Optional[str],
        error: Optional[str],
        state: Optional[str],
        expected_state: Optional[str],
        context: RequestContext,
    ) -> OAuthOutcome:
        # Init -> CodeReceived
        if error:
            return self._reject('oauth_denied', {'google_error': error[:64]})
        if not code:
            return self._reject('no_code', {})
        if not state or not expected_state or not secrets.compare_digest(state, expected_state):
            return self._reject('auth_failed', {'step': 'state'})

        # CodeReceived -> TokensExchanged -> IdentityAsserted
        try:
            id_token = await self._client.exchange_code(code)
            google_identity = await self._client.verify_id_token(id_token)
        except GoogleOAuthError as exc:
            return self._reject('auth_failed', {'error': str(exc)})

        # IdentityAsserted -> Authorized
        try:
            identity = await self.authorize(google_identity)
        except Unauthorized:
            return OAuthOutcome.rejected('unauthorized')
        session = self._auth.issue_oauth_session(identity)
        await self._activity.record(
            context,
            action_type='login',
            resource_type=ADMIN_RESOURCE,
            resource_id=identity.id,
            admin_id=identity.id,
            new_values={'method': OAUTH_PROVIDER},
        )
        log_info('ADMIN_LOGIN_SUCCESS', {'admin_id': identity.id, 'method': OAUTH_PROVIDER})
        return OAuthOutcome(session=session, identity=identity)

    async def authorize(self, google_identity: GoogleIdentity) -> AdminIdentity:
        """Exige conta local ativa para o e-mail provado e o mesmo `sub` quando já vinculada."""
        identity = await self._admins.get_by_email(google_identity.email)
        if identity is None or not identity.is_active:
            log_warning('OAUTH_REJECTED', {'reason': 'unauthorized', 'email_domain': google_identity.email.rsplit('@', 1)[-1]})
            raise Unauthorized()
        if identity.oauth_id and (
            identity.oauth_provider != OAUTH_PROVIDER or identity.oauth_id != google_identity.subject
        ):
            log_warning('OAUTH_REJECTED', {'reason': 'unauthorized', 'admin_id': identity.id, 'step': 'subject_mismatch'})
            raise Unauthorized()

        return await self._admins.bind_oauth_identity(
            identity.id,
            provider=OAUTH_PROVIDER,
            subject=google_identity.subject,
            avatar_url=google_identity.picture,
            at=utcnow(),
        )

    @staticmethod
    def _reject(reason: RejectionReason, payload: dict) -> OAuthOutcome:
        log_warning('OAUTH_REJECTED', {'reason': reason, **payload})
        return OAuthOutcome.rejected(reason)

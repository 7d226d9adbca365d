# caminho: vending_admin/infrastructure/oauth/google.py
# Funções:
# - GoogleOAuthClient: monta a URL de autorização, troca o code por tokens
#   e valida o id_token no endpoint tokeninfo do Google
# - GoogleIdentity: identidade afirmada pelo Google (sub, email, nome, avatar)
# - GoogleOAuthError: qualquer falha de rede, resposta inválida ou claim rejeitada

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional
from urllib.parse import urlencode

import httpx

from vending_admin.config.settings import Settings

GOOGLE_SCOPES = (
    'openid',
    'https://www.googleapis.com/auth/userinfo.email',
    'https://www.googleapis.com/auth/userinfo.profile',
)
GOOGLE_ISSUERS = frozenset({'accounts.google.com', 'https://accounts.google.com'})


class GoogleOAuthError(Exception):
    pass


@dataclass(slots=True, frozen=True)
class GoogleIdentity:
    subject: str
    email: str
    name: Optional[str] = None
    picture: Optional[str] = None


class GoogleOAuthClient:
    def __init__(self, settings: Settings, http_client: httpx.AsyncClient) -> None:
        self._client_id = settings.GOOGLE_CLIENT_ID
        self._client_secret = settings.GOOGLE_CLIENT_SECRET.get_secret_value()
        self._redirect_uri = settings.GOOGLE_REDIRECT_URI
        self._auth_url = settings.GOOGLE_AUTH_URL
        self._token_url = settings.GOOGLE_TOKEN_URL
        self._tokeninfo_url = settings.GOOGLE_TOKENINFO_URL
        self._http = http_client

    @property
    def is_configured(self) -> bool:
        return bool(self._client_id and self._client_secret and self._redirect_uri)

    def authorization_url(self, state: str) -> str:
        if not self.is_configured:
            raise GoogleOAuthError('Google OAuth is not configured')
        query = urlencode(
            {
                'client_id': self._client_id,
                'redirect_uri': self._redirect_uri,
                'response_type': 'code',
                'scope': ' '.join(GOOGLE_SCOPES),
                'access_type': 'offline',
                'prompt': 'consent',
                'state': state,
            }
        )
        return f'{self._auth_url}?{query}'

    async def exchange_code(self, code: str) -> str:
        """Troca o authorization code e devolve o id_token."""
        payload = await self._request(
            'POST',
            self._token_url,
            data={
                'code': code,
                'client_id': self._client_id,
                'client_secret': self._client_secret,
                'redirect_uri': self._redirect_uri,
                'grant_type': 'authorization_code',
            },
        )
        id_token = payload.get('id_token')
        if not id_token:
            raise GoogleOAuthError('Token response without id_token')
        return str(id_token)

    async def verify_id_token(self, id_token: str) -> GoogleIdentity:
        claims = await self._request('GET', self._tokeninfo_url, params={'id_token': id_token})

        if claims.get('aud') != self._client_id:
            raise GoogleOAuthError('id_token audience mismatch')
        if claims.get('iss') not in GOOGLE_ISSUERS:
            raise GoogleOAuthError('id_token issuer not trusted')
        if str(claims.get('email_verified', '')).lower() != 'true':
            raise GoogleOAuthError('Google email not verified')

        subject = claims.get('sub')
        email = claims.get('email')
        if not subject or not email:
            raise GoogleOAuthError('id_token without subject or email')

        return GoogleIdentity(
            subject=str(subject),
            email=str(email).strip().lower(),
            name=claims.get('name'),
            picture=claims.get('picture'),
        )

    async def _request(self, method: str, url: str, **kwargs: Any) -> dict[str, Any]:
        try:
            response = await self._http.request(method, url, **kwargs)
            response.raise_for_status()
            payload = response.json()
        except (httpx.HTTPError, ValueError) as exc:
            raise GoogleOAuthError(f'Google request failed: {exc.__class__.__name__}') from exc
        if not isinstance(payload, dict):
            raise GoogleOAuthError('Unexpected Google response')
        return payload

# caminho: vending_admin/infrastructure/security/jwt.py
# Funções:
# - JWTService: gera e valida tokens JWT (access e refresh)
# - A validade é sempre informada por quem emite; não há duração fixa aqui

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any

from jwt import InvalidTokenError, decode, encode
from pydantic import SecretStr

from vending_admin.domain.admins.entities import SessionClaims

ACCESS_TOKEN_TYPE = 'access'
REFRESH_TOKEN_TYPE = 'refresh'


class JWTService:
    def __init__(
        self,
        secret_key: SecretStr | str,
        algorithm: str,
        *,
        issuer: str,
        audience: str,
        refresh_audience: str,
    ) -> None:
        secret = secret_key.get_secret_value() if isinstance(secret_key, SecretStr) else secret_key
        if not secret:
            raise ValueError('JWTService requires a signing secret.')
        self._secret = secret
        self._algorithm = algorithm
        self._issuer = issuer
        self._audience = audience
        self._refresh_audience = refresh_audience

    def create_access_token(self, claims: SessionClaims, expires_seconds: int) -> str:
        return self._encode(
            data={
                'sub': claims.user_id,
                'email': claims.email,
                'role': claims.role,
                'name': claims.name,
                'type': ACCESS_TOKEN_TYPE,
            },
            audience=self._audience,
            expires_seconds=expires_seconds,
        )

    def create_refresh_token(self, subject: str, expires_seconds: int) -> str:
        return self._encode(
            data={'sub': subject, 'type': REFRESH_TOKEN_TYPE},
            audience=self._refresh_audience,
            expires_seconds=expires_seconds,
        )

    def decode_access_token(self, token: str) -> SessionClaims:
        payload = self._decode(token, audience=self._audience, expected_type=ACCESS_TOKEN_TYPE)
        return SessionClaims(
            user_id=str(payload['sub']),
            email=str(payload.get('email', '')),
            role=str(payload.get('role', '')),
            name=str(payload.get('name', '')),
        )

    def decode_refresh_token(self, token: str) -> str:
        payload = self._decode(token, audience=self._refresh_audience, expected_type=REFRESH_TOKEN_TYPE)
        return str(payload['sub'])

    def _decode(self, token: str, *, audience: str, expected_type: str) -> dict[str, Any]:
        payload = decode(
            token,
            self._secret,
            algorithms=[self._algorithm],
            audience=audience,
            issuer=self._issuer,
            options={'require': ['exp', 'iat', 'sub']},
        )
        if payload.get('type') != expected_type:
            raise InvalidTokenError('Unexpected token type')
        return payload

    def _encode(self, data: dict[str, Any], *, audience: str, expires_seconds: int) -> str:
        now = datetime.now(timezone.utc)
        payload = {
            **data,
            'iss': self._issuer,
            'aud': audience,
            'iat': now,
            'exp': now + timedelta(seconds=expires_seconds),
        }
        return encode(payload, self._secret, algorithm=self._algorithm)

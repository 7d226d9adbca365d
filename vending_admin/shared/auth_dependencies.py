# caminho: vending_admin/shared/auth_dependencies.py
# Funções:
# - get_jwt_service(): JWTService configurado a partir das settings
# - require_authenticated_admin(): lê o cookie de sessão (ou Bearer) e devolve as claims
# - optional_admin_claims(): mesma leitura, mas sem exigir sessão (logout)
# - require_capability(): exige que o papel da sessão conceda a permissão

from __future__ import annotations

from functools import lru_cache
from typing import Callable, Coroutine, Optional

from fastapi import Depends, Request
from fastapi.security import OAuth2PasswordBearer
from jwt import InvalidTokenError

from vending_admin.config import get_settings
from vending_admin.config.constants import OAUTH2_SCHEME_TOKEN_URL
from vending_admin.domain.admins.entities import SessionClaims
from vending_admin.domain.admins.roles import Capability, has_capability
from vending_admin.infrastructure.security.jwt import JWTService
from vending_admin.shared.errors import Forbidden, Unauthenticated
from vending_admin.shared.logging import log_warning

oauth2_scheme = OAuth2PasswordBearer(
    tokenUrl=OAUTH2_SCHEME_TOKEN_URL,
    auto_error=False,
)


@lru_cache(maxsize=1)
def get_jwt_service() -> JWTService:
    settings = get_settings()
    return JWTService(
        settings.SECRET_KEY,
        settings.SECRET_ALGORITHM,
        issuer=settings.TOKEN_ISSUER,
        audience=settings.TOKEN_AUDIENCE,
        refresh_audience=settings.TOKEN_REFRESH_AUDIENCE,
    )


def _read_claims(request: Request, bearer: Optional[str], jwt_service: JWTService) -> Optional[SessionClaims]:
    token = request.cookies.get(get_settings().ADMIN_TOKEN_COOKIE) or bearer
    if not token:
        return None
    try:
        return jwt_service.decode_access_token(token)
    except InvalidTokenError as exc:
        log_warning('ADMIN_TOKEN_REJECTED', {'reason': exc.__class__.__name__, 'path': request.url.path})
        return None


async def require_authenticated_admin(
    request: Request,
    bearer: Optional[str] = Depends(oauth2_scheme),
    jwt_service: JWTService = Depends(get_jwt_service),
) -> SessionClaims:
    claims = _read_claims(request, bearer, jwt_service)
    if claims is None:
        # Ausente, malformado, forjado ou expirado: mesma resposta
        raise Unauthenticated()
    return claims


async def optional_admin_claims(
    request: Request,
    bearer: Optional[str] = Depends(oauth2_scheme),
    jwt_service: JWTService = Depends(get_jwt_service),
) -> Optional[SessionClaims]:
    return _read_claims(request, bearer, jwt_service)


def require_capability(capability: Capability) -> Callable[..., Coroutine[None, None, SessionClaims]]:
    async def dependency(claims: SessionClaims = Depends(require_authenticated_admin)) -> SessionClaims:
        if not has_capability(claims.role, capability):
            log_warning(
                'ADMIN_CAPABILITY_DENIED',
                {'admin_id': claims.user_id, 'role': claims.role, 'capability': capability.value},
            )
            raise Forbidden()
        return claims

    return dependency

# caminho: vending_admin/interfaces/api/routers/auth.py
# Funções:
# - Endpoints de sessão do painel (login, logout, verify, refresh)
# - Fluxo Google OAuth (início e callback com redirecionamento)

from __future__ import annotations

import json
from typing import Optional
from urllib.parse import urlencode

from fastapi import APIRouter, Depends, Query, Request, Response, status
from fastapi.responses import RedirectResponse

from vending_admin.application.auth.dto import IssuedSession, LoginRequest, SessionResponse, SuccessResponse
from vending_admin.application.auth.oauth_bridge import GoogleOAuthBridge, OAuthOutcome
from vending_admin.application.auth.use_cases import AuthService
from vending_admin.config import get_settings
from vending_admin.domain.admins.entities import AdminIdentity, SessionClaims
from vending_admin.interfaces.api.dependencies import build_request_context, get_auth_service, get_oauth_bridge
from vending_admin.shared.auth_dependencies import optional_admin_claims, require_authenticated_admin

router = APIRouter(prefix='/admin/auth', tags=['auth'])


# --- Cookies ---


def _set_cookie(response: Response, key: str, value: str, max_age: int, *, httponly: bool = True) -> None:
    settings = get_settings()
    response.set_cookie(
        key,
        value,
        max_age=max_age,
        path=settings.ADMIN_COOKIE_PATH,
        httponly=httponly,
        secure=settings.COOKIE_SECURE,
        samesite=settings.ADMIN_COOKIE_SAMESITE,
    )


def _delete_cookie(response: Response, key: str) -> None:
    settings = get_settings()
    response.delete_cookie(
        key,
        path=settings.ADMIN_COOKIE_PATH,
        secure=settings.COOKIE_SECURE,
        samesite=settings.ADMIN_COOKIE_SAMESITE,
    )


def _set_session_cookies(response: Response, issued: IssuedSession, identity: Optional[AdminIdentity] = None) -> None:
    settings = get_settings()
    _set_cookie(response, settings.ADMIN_TOKEN_COOKIE, issued.access_token, issued.access_expires_in)
    if issued.refresh_token and issued.refresh_expires_in:
        _set_cookie(response, settings.ADMIN_REFRESH_COOKIE, issued.refresh_token, issued.refresh_expires_in)
    if identity is not None:
        # Lido pelo frontend: não é httpOnly
        user = {
            'name': identity.name,
            'email': identity.email,
            'avatar': identity.avatar_url,
            'role': identity.role,
        }
        _set_cookie(
            response,
            settings.ADMIN_USER_COOKIE,
            json.dumps(user, separators=(',', ':')),
            settings.USER_COOKIE_EXPIRE_SECONDS,
            httponly=False,
        )


def _login_redirect(outcome: OAuthOutcome) -> RedirectResponse:
    query = urlencode({'error': outcome.reason, 'message': outcome.message})
    return RedirectResponse(f'{get_settings().ADMIN_LOGIN_URL}?{query}', status_code=status.HTTP_302_FOUND)


# --- Sessão por senha ---


@router.post(
    '/login',
    response_model=SessionResponse,
    status_code=status.HTTP_200_OK,
    summary='Login por e-mail e senha',
    description="""Valida as credenciais e grava o cookie de sessão `amp-admin-token`.

**Proteções**:
- Mesma resposta 401 para e-mail desconhecido, conta inativa e senha errada.
- Bloqueio temporário após falhas consecutivas e rate limit por e-mail (Redis).
""",
)
async def login(
    payload: LoginRequest,
    request: Request,
    response: Response,
    service: AuthService = Depends(get_auth_service),
) -> SessionResponse:
    issued = await service.login(payload, build_request_context(request))
    _set_session_cookies(response, issued)
    return SessionResponse(user=issued.user())


@router.post('/logout', response_model=SuccessResponse, summary='Encerrar sessão')
async def logout(
    request: Request,
    response: Response,
    claims: Optional[SessionClaims] = Depends(optional_admin_claims),
    service: AuthService = Depends(get_auth_service),
) -> SuccessResponse:
    await service.logout(build_request_context(request, claims))
    settings = get_settings()
    for key in (settings.ADMIN_TOKEN_COOKIE, settings.ADMIN_REFRESH_COOKIE, settings.ADMIN_USER_COOKIE):
        _delete_cookie(response, key)
    return SuccessResponse()


@router.get('/verify', response_model=SessionResponse, summary='Validar sessão atual')
async def verify(claims: SessionClaims = Depends(require_authenticated_admin)) -> SessionResponse:
    return SessionResponse(user=claims.as_user())


@router.post(
    '/refresh',
    response_model=SessionResponse,
    summary='Renovar sessão',
    description='Lê o cookie `amp-admin-refresh`, recarrega o administrador e regrava os cookies.',
)
async def refresh(
    request: Request,
    response: Response,
    service: AuthService = Depends(get_auth_service),
) -> SessionResponse:
    token = request.cookies.get(get_settings().ADMIN_REFRESH_COOKIE)
    issued = await service.refresh(token, build_request_context(request))
    _set_session_cookies(response, issued)
    return SessionResponse(user=issued.user())


# --- Google OAuth ---


@router.get('/google', summary='Iniciar login com Google')
async def google_start(bridge: GoogleOAuthBridge = Depends(get_oauth_bridge)) -> RedirectResponse:
    started = bridge.start()
    if started.rejection is not None:
        return _login_redirect(started.rejection)
    response = RedirectResponse(started.redirect_url, status_code=status.HTTP_302_FOUND)
    settings = get_settings()
    _set_cookie(response, settings.ADMIN_OAUTH_STATE_COOKIE, started.state, settings.OAUTH_STATE_EXPIRE_SECONDS)
    return response


@router.get('/google/callback', summary='Retorno do Google OAuth')
async def google_callback(
    request: Request,
    code: Optional[str] = Query(default=None),
    error: Optional[str] = Query(default=None),
    state: Optional[str] = Query(default=None),
    bridge: GoogleOAuthBridge = Depends(get_oauth_bridge),
) -> RedirectResponse:
    settings = get_settings()
    outcome = await bridge.complete(
        code=code,
        error=error,
        state=state,
        expected_state=request.cookies.get(settings.ADMIN_OAUTH_STATE_COOKIE),
        context=build_request_context(request),
    )
    if outcome.authorized:
        response = RedirectResponse(settings.ADMIN_HOME_URL, status_code=status.HTTP_302_FOUND)
        _set_session_cookies(response, outcome.session, outcome.identity)
    else:
        response = _login_redirect(outcome)
    _delete_cookie(response, settings.ADMIN_OAUTH_STATE_COOKIE)
    return response

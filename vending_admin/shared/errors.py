# caminho: vending_admin/shared/errors.py
# Funções:
# - AppError: HTTPException com código estável e detalhes opcionais
# - Unauthenticated/InvalidCredentials/Forbidden/Unauthorized/ValidationFailure/
#   NotFound/Conflict/Locked/TooManyRequests/UpstreamFailure: taxonomia de erros
# - error_body(): corpo padrão {success: false, error, code, details?}

from __future__ import annotations

from http import HTTPStatus
from typing import Any, Optional

from fastapi import HTTPException


class AppError(HTTPException):
    status_code: int = HTTPStatus.INTERNAL_SERVER_ERROR
    code: str = 'INTERNAL_ERROR'
    message: str = 'Internal server error'

    def __init__(
        self,
        message: Optional[str] = None,
        *,
        details: Optional[list[dict[str, Any]]] = None,
        headers: Optional[dict[str, str]] = None,
    ) -> None:
        self.message = message or self.message
        self.details = details
        super().__init__(
            status_code=self.status_code,
            detail={'code': self.code, 'message': self.message},
            headers=headers,
        )


class Unauthenticated(AppError):
    status_code = HTTPStatus.UNAUTHORIZED
    code = 'NOT_AUTHENTICATED'
    message = 'Not authenticated'


class InvalidCredentials(Unauthenticated):
    code = 'INVALID_CREDENTIALS'
    message = 'Invalid email or password'


class Forbidden(AppError):
    status_code = HTTPStatus.FORBIDDEN
    code = 'INSUFFICIENT_PERMISSIONS'
    message = 'Insufficient permissions'


class Unauthorized(AppError):
    # Identidade provada pelo provedor externo, mas ausente/inativa no cadastro local
    status_code = HTTPStatus.FORBIDDEN
    code = 'UNAUTHORIZED'
    message = 'Your Google account is not authorized for admin access'


class ValidationFailure(AppError):
    status_code = HTTPStatus.BAD_REQUEST
    code = 'VALIDATION_FAILED'
    message = 'Invalid request parameters'


class NotFound(AppError):
    status_code = HTTPStatus.NOT_FOUND
    code = 'NOT_FOUND'
    message = 'Resource not found'


class Conflict(AppError):
    status_code = HTTPStatus.CONFLICT
    code = 'CONFLICT'
    message = 'Resource already exists'


class Locked(AppError):
    status_code = HTTPStatus.LOCKED
    code = 'LOGIN_TEMPORARILY_LOCKED'
    message = 'Too many failed attempts. Try again later.'


class TooManyRequests(AppError):
    status_code = HTTPStatus.TOO_MANY_REQUESTS
    code = 'TOO_MANY_REQUESTS'
    message = 'Too many requests. Try again later.'


class UpstreamFailure(AppError):
    status_code = HTTPStatus.BAD_GATEWAY
    code = 'UPSTREAM_FAILURE'
    message = 'Upstream service failure'


def error_body(message: str, code: str, details: Optional[list[dict[str, Any]]] = None) -> dict[str, Any]:
    body: dict[str, Any] = {'success': False, 'error': message, 'code': code}
    if details:
        body['details'] = details
    return body


def pydantic_error_details(errors: list[dict[str, Any]], *, skip_locations: tuple[str, ...] = ()) -> list[dict[str, Any]]:
    """Converte erros do pydantic em [{field, message}] com o caminho pontuado."""
    details = []
    for error in errors:
        location = [str(part) for part in error.get('loc', ()) if str(part) not in skip_locations]
        details.append({'field': '.'.join(location), 'message': error.get('msg', 'Invalid value')})
    return details

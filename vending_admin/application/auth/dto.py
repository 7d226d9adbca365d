# caminho: vending_admin/application/auth/dto.py
# Funções:
# - DTOs de autenticação do painel (login, usuário da sessão, tokens emitidos)

from __future__ import annotations

from dataclasses import dataclass

from pydantic import BaseModel, ConfigDict, Field

from vending_admin.domain.admins.entities import SessionClaims


class LoginRequest(BaseModel):
    model_config = ConfigDict(extra='ignore')

    email: str = Field(min_length=1, max_length=254)
    password: str = Field(min_length=1, max_length=256, json_schema_extra={'format': 'password'})


class SessionUser(BaseModel):
    id: str
    email: str
    name: str
    role: str


class SessionResponse(BaseModel):
    success: bool = True
    user: SessionUser


class SuccessResponse(BaseModel):
    success: bool = True


@dataclass(slots=True, frozen=True)
class IssuedSession:
    claims: SessionClaims
    access_token: str
    access_expires_in: int
    refresh_token: str | None = None
    refresh_expires_in: int | None = None

    def user(self) -> SessionUser:
        return SessionUser(**self.claims.as_user())

# caminho: vending_admin/domain/admins/entities.py
# Funções:
# - AdminIdentity: entidade principal do contexto de administradores
# - SessionClaims: claims públicas carregadas no token de acesso
# - ActivityLogEntry: registro de auditoria (somente inserção)

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Optional


@dataclass(slots=True)
class AdminIdentity:
    id: str
    email: str
    name: str
    role: str
    is_active: bool = True
    password_hash: Optional[str] = None
    avatar_url: Optional[str] = None
    oauth_provider: Optional[str] = None
    oauth_id: Optional[str] = None
    last_login_at: Optional[datetime] = None


@dataclass(slots=True, frozen=True)
class SessionClaims:
    user_id: str
    email: str
    role: str
    name: str

    @classmethod
    def from_identity(cls, identity: AdminIdentity) -> 'SessionClaims':
        return cls(user_id=identity.id, email=identity.email, role=identity.role, name=identity.name)

    def as_user(self) -> dict[str, str]:
        return {'id': self.user_id, 'email': self.email, 'name': self.name, 'role': self.role}


@dataclass(slots=True)
class ActivityLogEntry:
    action_type: str
    resource_type: str
    admin_user_id: Optional[str] = None
    resource_id: Optional[str] = None
    old_values: Optional[dict[str, Any]] = None
    new_values: Optional[dict[str, Any]] = None
    ip_address: Optional[str] = None
    user_agent: Optional[str] = None
    id: Optional[str] = None
    created_at: Optional[datetime] = None

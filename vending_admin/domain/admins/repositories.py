# caminho: vending_admin/domain/admins/repositories.py
# Funções:
# - AdminRepository: contrato de acesso ao cadastro de administradores
# - ActivityLogRepository: contrato de escrita/leitura do log de atividades

from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol

from vending_admin.domain.admins.entities import ActivityLogEntry, AdminIdentity


class AdminRepository(Protocol):
    async def add(self, identity: AdminIdentity) -> AdminIdentity: ...

    async def get_by_id(self, admin_id: str) -> Optional[AdminIdentity]: ...

    async def get_by_email(self, email: str) -> Optional[AdminIdentity]: ...

    async def touch_last_login(self, admin_id: str, at: datetime) -> None: ...

    async def bind_oauth_identity(
        self,
        admin_id: str,
        *,
        provider: str,
        subject: str,
        avatar_url: Optional[str],
        at: datetime,
    ) -> AdminIdentity: ...


class ActivityLogRepository(Protocol):
    async def add(self, entry: ActivityLogEntry) -> ActivityLogEntry: ...

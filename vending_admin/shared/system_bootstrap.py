# caminho: vending_admin/shared/system_bootstrap.py
# Funções:
# - ensure_sqlite_schema(): cria as tabelas quando o banco é SQLite (dev/testes)
# - bootstrap_root_admin(): garante o super_admin inicial a partir de ROOT_ADMIN_*

from __future__ import annotations

from sqlalchemy import func, select

from vending_admin.config import get_settings
from vending_admin.domain.admins.enums import ADMIN_ROLE_SUPERUSER
from vending_admin.infrastructure.db.base import Base, get_engine, get_sessionmaker
from vending_admin.infrastructure.db.models import AdminUserModel
from vending_admin.infrastructure.security.passwords import PasswordVerifier
from vending_admin.shared.logging import log_info, log_warning


async def ensure_sqlite_schema() -> None:
    """No Postgres o schema é gerenciado fora da aplicação."""
    if not get_settings().IS_SQLITE:
        return
    async with get_engine().begin() as connection:
        await connection.run_sync(Base.metadata.create_all)
    log_info('SQLITE_SCHEMA_READY', {})


async def bootstrap_root_admin() -> None:
    """Cria o administrador inicial caso ainda não exista."""
    settings = get_settings()
    email = (settings.ROOT_ADMIN_EMAIL or '').strip().lower()
    name = (settings.ROOT_ADMIN_NAME or '').strip()
    password = settings.ROOT_ADMIN_PASSWORD.get_secret_value()

    if not email or not name or not password:
        log_warning('ROOT_ADMIN_BOOTSTRAP_SKIPPED', {'reason': 'missing_credentials'})
        return

    async with get_sessionmaker()() as session:
        stmt = select(AdminUserModel.id).where(func.lower(AdminUserModel.email) == email)
        existing = (await session.execute(stmt)).scalar_one_or_none()
        if existing is not None:
            log_info('ROOT_ADMIN_BOOTSTRAP_EXISTS', {'admin_id': str(existing)})
            return

        model = AdminUserModel(
            email=email,
            name=name,
            role=ADMIN_ROLE_SUPERUSER,
            is_active=True,
            password_hash=PasswordVerifier(settings.PASSWORD_BCRYPT_ROUNDS).hash(password),
        )
        session.add(model)
        await session.commit()
        log_info('ROOT_ADMIN_BOOTSTRAP_CREATED', {'admin_id': str(model.id)})

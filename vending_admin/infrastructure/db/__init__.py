# caminho: vending_admin/infrastructure/db/__init__.py
# Funções:
# - expõe Base para migrations

from __future__ import annotations

from vending_admin.infrastructure.db.base import Base
from vending_admin.infrastructure.db import models  # noqa: F401

__all__ = ['Base']

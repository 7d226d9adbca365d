# caminho: vending_admin/main.py
# Funções:
# - app: instância FastAPI do back-office (uvicorn vending_admin.main:app)

from __future__ import annotations

from vending_admin.interfaces.api.app import create_application

app = create_application()

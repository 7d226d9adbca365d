# caminho: vending_admin/interfaces/api/app.py
# Funções:
# - create_application(): configura FastAPI com handlers de erro, rotas e arquivos de mídia
# - lifespan(): schema SQLite (dev/testes) e administrador inicial na inicialização

from __future__ import annotations

from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

from vending_admin.config import get_settings
from vending_admin.interfaces.api.routers import activity, auth, contacts, emails, machines, marketing, products, public, site
from vending_admin.shared.errors import AppError, ValidationFailure, error_body, pydantic_error_details
from vending_admin.shared.logging import log_error, log_warning, setup_logging
from vending_admin.shared.system_bootstrap import bootstrap_root_admin, ensure_sqlite_schema


@asynccontextmanager
async def lifespan(app: FastAPI):
    await ensure_sqlite_schema()
    await bootstrap_root_admin()

    yield

    log_warning('APP_SHUTDOWN', {'reason': 'lifespan'})


# --- Handlers de erro ---


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(exc.message, exc.code, exc.details),
        headers=exc.headers,
    )


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    failure = ValidationFailure(
        details=pydantic_error_details(list(exc.errors()), skip_locations=('body', 'query', 'path')),
    )
    return await app_error_handler(request, failure)


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    log_error(
        'UNHANDLED_ERROR',
        {'path': request.url.path, 'method': request.method, 'error': exc.__class__.__name__, 'detail': str(exc)},
    )
    return JSONResponse(status_code=500, content=error_body('Internal server error', 'INTERNAL_ERROR'))


def create_application() -> FastAPI:
    settings = get_settings()
    setup_logging(level=settings.LOG_LEVEL)

    app = FastAPI(
        title='amp-vending-admin',
        version='1.0.0',
        lifespan=lifespan,
    )

    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)

    app.include_router(auth.router)
    app.include_router(contacts.router)
    app.include_router(machines.router)
    app.include_router(products.router)
    app.include_router(site.seo_router)
    app.include_router(site.business_router)
    app.include_router(emails.router)
    app.include_router(marketing.templates_router)
    app.include_router(marketing.exit_intent_router)
    app.include_router(activity.router)
    app.include_router(public.router)

    # Imagens enviadas pelo painel (armazenamento local)
    Path(settings.MEDIA_ROOT).mkdir(parents=True, exist_ok=True)
    app.mount(settings.MEDIA_BASE_URL, StaticFiles(directory=settings.MEDIA_ROOT), name='media')

    return app

"""
Name: Back Office ASGI Application

Responsibilities:
  - Build the FastAPI app (create_app): middleware, /v1 router, RFC7807 handlers
  - Lifespan: validate settings, open the DB pool (PostgreSQL storage only),
    load the module catalog once, seed the dev superadmin when enabled
  - Platform endpoints: /healthz and /metrics (outside /v1)

Collaborators:
  - interfaces.api.http.router: auth, agences, module-requests, users, access
  - crosscutting.middleware.RequestContextMiddleware: X-Request-Id + log context
  - identity.auth_users.require_metrics_permission: optional /metrics guard
  - infrastructure.db.pool: psycopg_pool lifecycle

Notes:
  - Run with: uvicorn backoffice.api.main:app
  - Settings errors surface in the lifespan, so a bad env fails the boot
"""

from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware

from ..application.dev_seed_superadmin import ensure_dev_superadmin
from ..container import (
    get_create_user_use_case,
    get_module_catalog,
    get_user_repository,
)
from ..crosscutting.config import get_settings
from ..crosscutting.logger import logger
from ..crosscutting.metrics import get_metrics_response
from ..crosscutting.middleware import REQUEST_ID_HEADER, RequestContextMiddleware
from ..identity.auth_users import require_metrics_permission
from ..infrastructure.db.pool import close_pool, get_pool, init_pool
from ..interfaces.api.http.router import router
from .exception_handlers import register_exception_handlers

API_VERSION = "0.1.0"

OPENAPI_TAGS = [
    {"name": "auth", "description": "Autenticación (JWT)"},
    {"name": "agences", "description": "Inscripción y ciclo de vida de agencias"},
    {"name": "module-requests", "description": "Workflow de activación de módulos"},
    {"name": "users", "description": "Directorio de usuarios y agentes"},
    {"name": "access", "description": "Catálogo y motor de autorización"},
]


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = get_settings()
    use_postgres = not settings.uses_in_memory_storage()

    if use_postgres:
        init_pool(
            database_url=settings.database_url,
            min_size=settings.db_pool_min_size,
            max_size=settings.db_pool_max_size,
        )
    try:
        catalog = get_module_catalog()
        ensure_dev_superadmin(
            settings,
            user_repo=get_user_repository(),
            create_user=get_create_user_use_case(),
        )
        logger.info(
            "Back office listo",
            extra={
                "app_env": settings.app_env,
                "storage": "postgres" if use_postgres else "memory",
                "catalog_version": catalog.version,
                "modules_count": len(catalog),
            },
        )
        yield
    finally:
        if use_postgres:
            close_pool()
        logger.info("Back office detenido")


def _storage_status() -> str:
    if get_settings().uses_in_memory_storage():
        return "memory"
    try:
        with get_pool().connection() as conn:
            conn.execute("SELECT 1")
    except Exception as exc:
        logger.warning("healthz: base de datos no disponible", extra={"error": str(exc)})
        return "disconnected"
    return "connected"


def healthz(request: Request) -> dict:
    """Liveness + estado del storage; request_id para correlación."""
    db = _storage_status()
    return {
        "ok": db != "disconnected",
        "db": db,
        "request_id": getattr(request.state, "request_id", None),
    }


def metrics(_guard: None = Depends(require_metrics_permission())) -> Response:
    body, content_type = get_metrics_response()
    return Response(content=body, media_type=content_type)


def create_app() -> FastAPI:
    settings = get_settings()
    application = FastAPI(
        title="Agences Back Office API",
        version=API_VERSION,
        lifespan=lifespan,
        openapi_tags=OPENAPI_TAGS,
    )

    # R: add_middleware apila: el último agregado es el más externo (CORS).
    application.add_middleware(RequestContextMiddleware)
    application.add_middleware(
        CORSMiddleware,
        allow_origins=settings.get_allowed_origins_list(),
        allow_credentials=False,
        allow_methods=["GET", "POST", "PUT", "PATCH", "OPTIONS"],
        allow_headers=["Authorization", "Content-Type", "X-Agence-Id", REQUEST_ID_HEADER],
        expose_headers=[REQUEST_ID_HEADER],
    )

    application.include_router(router, prefix="/v1")
    application.add_api_route("/healthz", healthz, methods=["GET"], tags=["platform"])
    application.add_api_route(
        "/metrics", metrics, methods=["GET"], tags=["platform"], include_in_schema=False
    )
    register_exception_handlers(application)
    return application


app = create_app()

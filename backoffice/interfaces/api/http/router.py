"""
Router v1 del back office.

Agrupa los routers por feature (auth, agences, module-requests, users, access)
y declara una sola vez las respuestas RFC7807 para OpenAPI. main.py lo monta
con prefix="/v1"; build_router() existe para poder armar uno nuevo en tests.
"""

from __future__ import annotations

from fastapi import APIRouter

from ....crosscutting.error_responses import OPENAPI_ERROR_RESPONSES
from .routers import (
    access_router,
    agences_router,
    auth_router,
    module_requests_router,
    users_router,
)


def build_router() -> APIRouter:
    v1 = APIRouter(responses=OPENAPI_ERROR_RESPONSES)
    # R: el orden define el orden de los tags en /docs.
    v1.include_router(auth_router)
    v1.include_router(agences_router)
    v1.include_router(module_requests_router)
    v1.include_router(users_router)
    v1.include_router(access_router)

    return v1


router = build_router()

__all__ = ["build_router", "router"]

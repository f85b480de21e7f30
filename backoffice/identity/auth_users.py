"""
===============================================================================
TARJETA CRC — identity/auth_users.py
===============================================================================

Módulo:
    Resolución del actor en el borde HTTP

Responsabilidades:
    - Leer el Bearer token (fastapi.security.HTTPBearer, sin auto_error).
    - Recargar el User del repositorio en CADA request: un agente suspendido
      queda afuera aunque su token siga vigente.
    - Dependencias FastAPI: require_user, require_superadmin,
      require_metrics_permission.

Colaboradores:
    - identity.tokens.AccessTokenCodec
    - container.get_user_repository
    - context.set_actor_context (correlación en logs)
    - crosscutting.error_responses (401 / 403)
===============================================================================
"""

from __future__ import annotations

from typing import Callable

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from ..container import get_user_repository
from ..context import set_actor_context
from ..crosscutting.config import get_settings
from ..crosscutting.error_responses import forbidden, unauthorized
from ..domain.entities import User, UserRole
from .tokens import AccessTokenCodec

_bearer = HTTPBearer(auto_error=False, description="Access token (JWT)")


def resolve_actor(
    request: Request,
    credentials: HTTPAuthorizationCredentials | None,
    *,
    allow_inactive: bool = False,
) -> User:
    """Token -> user_id -> snapshot vigente del repositorio."""
    if credentials is None or not credentials.credentials.strip():
        raise unauthorized("Falta token Bearer.")

    claims = AccessTokenCodec.from_settings().decode(credentials.credentials.strip())
    user = get_user_repository().get(claims.user_id)
    if user is None:
        raise unauthorized("Token inválido.")
    if not allow_inactive and not user.is_active:
        raise forbidden("El usuario no está activo.")

    request.state.user = user
    set_actor_context(
        actor_id=str(user.id),
        agence_id=str(user.agences[0]) if len(user.agences) == 1 else "",
    )
    return user


def require_user(*, allow_inactive: bool = False) -> Callable:
    """
    Requiere actor autenticado.

    allow_inactive=True deja pasar cuentas no activas: las rutas gobernadas
    por el motor las deniegan con su propio motivo (actor_inactive).
    """

    async def dependency(
        request: Request,
        credentials: HTTPAuthorizationCredentials | None = Depends(_bearer),
    ) -> User:
        return resolve_actor(request, credentials, allow_inactive=allow_inactive)

    return dependency


def require_superadmin() -> Callable:
    async def dependency(
        request: Request,
        credentials: HTTPAuthorizationCredentials | None = Depends(_bearer),
    ) -> User:
        user = resolve_actor(request, credentials)
        if user.role != UserRole.SUPERADMIN:
            raise forbidden("Rol insuficiente.")
        return user

    return dependency


def require_metrics_permission() -> Callable:
    """/metrics abierto salvo METRICS_REQUIRE_AUTH (entonces solo superadmin)."""
    superadmin = require_superadmin()

    async def dependency(
        request: Request,
        credentials: HTTPAuthorizationCredentials | None = Depends(_bearer),
    ) -> None:
        if get_settings().metrics_require_auth:
            await superadmin(request, credentials)

    return dependency

# =============================================================================
# FILE: application/dev_seed_superadmin.py
# =============================================================================
"""
===============================================================================
TASK: Dev Seed Superadmin (bootstrap local)
===============================================================================

Qué es:
    Asegura que exista un superadmin para desarrollo cuando está configurado.
    Sin él no hay forma de aprobar la primera agencia en un entorno vacío.

Seguridad:
    - Guard estricto: nunca corre con app_env == "production".
      (Settings ya rechaza DEV_SEED_SUPERADMIN en producción; esto es el
      segundo cerrojo.)

Patrones:
    - Task orchestration (seed)
    - Dependency Injection (CreateUserUseCase + repo)
    - Idempotencia (ensure-create)

CRC:
    Component: ensure_dev_superadmin
    Responsibilities:
      - Validar guard de ambiente
      - Crear el superadmin si el email no existe
    Collaborators:
      - UserRepository
      - CreateUserUseCase (alta interna, sin actor)
      - Settings
===============================================================================
"""

from __future__ import annotations

from typing import Optional

from ..crosscutting.config import Settings
from ..crosscutting.logger import logger
from ..domain.entities import User, UserProfile, UserRole
from ..domain.repositories import UserRepository
from .usecases.users.create_user import CreateUserUseCase


def _assert_allowed_environment(settings: Settings) -> None:
    if settings.is_production():
        raise RuntimeError(
            "FATAL: DEV_SEED_SUPERADMIN is enabled in production. "
            "Safety guard prevents accidental account creation."
        )


def ensure_dev_superadmin(
    settings: Settings,
    *,
    user_repo: UserRepository,
    create_user: CreateUserUseCase,
) -> Optional[User]:
    """
    Ensure a development superadmin exists if configured.

    Behavior:
      - If disabled: no-op (returns None)
      - If enabled: create when missing, otherwise skip
    """
    if not settings.dev_seed_superadmin:
        return None

    _assert_allowed_environment(settings)

    email = (settings.dev_seed_superadmin_email or "").strip().lower()
    password = settings.dev_seed_superadmin_password or ""
    if not email or not password:
        raise ValueError("Dev seed superadmin is enabled but email/password are empty")

    existing = user_repo.get_by_email(email)
    if existing is not None:
        logger.info("Dev seed superadmin: user exists; skipping", extra={"email": email})
        return existing

    user = create_user.execute(
        UserProfile(email=email, password=password, name="Superadmin"),
        role=UserRole.SUPERADMIN,
        tenant_bindings=[],
        grants=[],
    )
    logger.info(
        "Dev seed superadmin: user created",
        extra={"email": email, "user_id": str(user.id)},
    )
    return user

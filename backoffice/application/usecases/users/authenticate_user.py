"""
===============================================================================
USE CASE: Authenticate User
===============================================================================

Reglas:
    - Email desconocido, password incorrecto o estado != actif producen el
      MISMO AuthenticationError genérico (sin enumeración de cuentas).
    - La causa real se loguea server-side con un código interno.
    - Email desconocido también paga una verificación (contra un hash dummy):
      el tiempo de respuesta no revela si la cuenta existe.
===============================================================================
"""

from __future__ import annotations

import logging
from typing import Callable

from ....crosscutting.exceptions import AuthenticationError
from ....domain.entities import User
from ....domain.repositories import UserRepository

logger = logging.getLogger(__name__)


class AuthenticateUserUseCase:
    """Query/Command: valida credenciales y devuelve el usuario activo."""

    def __init__(
        self,
        user_repository: UserRepository,
        password_verifier: Callable[[str, str], bool],
        dummy_password_hash: str = "",
    ) -> None:
        self._users = user_repository
        self._verify_password = password_verifier
        self._dummy_hash = dummy_password_hash

    def execute(self, email: str, raw_password: str) -> User:
        normalized_email = (email or "").strip().lower()
        user = self._users.get_by_email(normalized_email) if normalized_email else None

        if user is None:
            # R: mismo trabajo de verificación que con un email existente.
            self._verify_password(raw_password or "", self._dummy_hash)
            return self._fail("unknown_email")
        if not self._verify_password(raw_password or "", user.password_hash):
            return self._fail("password_mismatch", user)
        if not user.is_active:
            return self._fail("inactive_account", user)

        return user

    @staticmethod
    def _fail(cause: str, user: User | None = None) -> User:
        logger.warning(
            "Auth falló",
            extra={
                "auth_failure": cause,
                "user_id": str(user.id) if user else None,
            },
        )
        raise AuthenticationError()

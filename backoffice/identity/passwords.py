"""
===============================================================================
TARJETA CRC — identity/passwords.py
===============================================================================

Módulo:
    Verificador de passwords (Argon2, salado, one-way)

Responsabilidades:
    - Hashear passwords nuevos.
    - Verificar password vs hash almacenado sin lanzar por mismatch.

Colaboradores:
    - argon2.PasswordHasher
    - application/usecases/users (CreateUser, AuthenticateUser)
    - application/usecases/tenants (RegisterAgency)

Notas:
    - La criptografía vive en el borde de identidad, NO en dominio.
===============================================================================
"""

from __future__ import annotations

from functools import lru_cache

from argon2 import PasswordHasher
from argon2.exceptions import InvalidHashError, VerificationError, VerifyMismatchError

_password_hasher = PasswordHasher()


def hash_password(password: str) -> str:
    """Hashea un password usando Argon2."""
    return _password_hasher.hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    """Verifica password vs hash almacenado."""
    try:
        return _password_hasher.verify(password_hash, password)
    except (VerifyMismatchError, VerificationError, InvalidHashError):
        return False


@lru_cache
def dummy_password_hash() -> str:
    """Hash descartable: login con email desconocido verifica contra él (mismo costo)."""
    return _password_hasher.hash("backoffice-unknown-account")

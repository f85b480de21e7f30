"""
===============================================================================
TARJETA CRC — identity/tokens.py
===============================================================================

Módulo:
    Codec de access tokens (PyJWT, HS256)

Responsabilidades:
    - Emitir un token firmado con sub/role/iat/exp/typ.
    - Validar firma, expiración y claims requeridos.
    - Traducir cualquier falla a 401 (AppHTTPException UNAUTHORIZED).

Colaboradores:
    - crosscutting.config.get_settings (jwt_secret, jwt_access_ttl_minutes)
    - identity/auth_users.py (resolución del actor)
    - routers/auth.py (login)

Notas:
    - El token solo identifica al actor: el rol que lleva es informativo.
    - Sin refresh ni revocación.
===============================================================================
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from uuid import UUID

import jwt

from ..crosscutting.config import get_settings
from ..crosscutting.error_responses import unauthorized
from ..domain.entities import User, UserRole

_ALGORITHM = "HS256"
_ACCESS = "access"
_REQUIRED_CLAIMS = ["sub", "role", "exp"]


@dataclass(frozen=True, slots=True)
class TokenClaims:
    user_id: UUID
    role: UserRole


@dataclass(frozen=True, slots=True)
class IssuedToken:
    token: str
    expires_in: int


@dataclass(frozen=True, slots=True)
class AccessTokenCodec:
    """Emite y valida access tokens con un secreto compartido."""

    secret: str
    ttl_minutes: int

    @classmethod
    def from_settings(cls) -> "AccessTokenCodec":
        settings = get_settings()
        return cls(
            secret=settings.jwt_secret,
            ttl_minutes=settings.jwt_access_ttl_minutes,
        )

    def issue(self, user: User, *, now: datetime | None = None) -> IssuedToken:
        issued_at = now or datetime.now(timezone.utc)
        ttl = timedelta(minutes=self.ttl_minutes)
        claims = {
            "sub": str(user.id),
            "role": user.role.value,
            "typ": _ACCESS,
            "iat": issued_at,
            "exp": issued_at + ttl,
        }
        return IssuedToken(
            token=jwt.encode(claims, self.secret, algorithm=_ALGORITHM),
            expires_in=int(ttl.total_seconds()),
        )

    def decode(self, token: str) -> TokenClaims:
        try:
            claims = jwt.decode(
                token,
                self.secret,
                algorithms=[_ALGORITHM],
                options={"require": _REQUIRED_CLAIMS},
            )
        except jwt.ExpiredSignatureError as exc:
            raise unauthorized("Token expirado.") from exc
        except jwt.PyJWTError as exc:
            raise unauthorized("Token inválido.") from exc

        if claims.get("typ", _ACCESS) != _ACCESS:
            raise unauthorized("Tipo de token inválido.")
        try:
            return TokenClaims(
                user_id=UUID(str(claims["sub"])),
                role=UserRole(str(claims["role"])),
            )
        except ValueError as exc:
            raise unauthorized("Token inválido.") from exc


__all__ = ["AccessTokenCodec", "IssuedToken", "TokenClaims"]

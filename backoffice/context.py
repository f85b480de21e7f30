"""
===============================================================================
TARJETA CRC — backoffice/context.py (Contexto por request)
===============================================================================

Responsabilidades:
  - Guardar en UNA ContextVar el snapshot del request en curso
    (request_id, método, path, actor, agencia activa).
  - Exponerlo como dict plano para los logs.

Colaboradores:
  - crosscutting.middleware: abre el contexto al entrar y lo restaura al salir.
  - identity.auth_users / interfaces.api.http.dependencies: completan actor
    y agencia cuando quedan resueltos.
  - crosscutting.logger: RequestContextFilter lee get_context_dict().

Restricciones:
  - El snapshot es inmutable: cada set_* reemplaza la instancia.
  - Fuera de un request el contexto está vacío.
===============================================================================
"""

from __future__ import annotations

from contextvars import ContextVar, Token
from dataclasses import asdict, dataclass, replace


@dataclass(frozen=True, slots=True)
class RequestContext:
    request_id: str = ""
    method: str = ""
    path: str = ""
    actor_id: str = ""
    agence_id: str = ""


_EMPTY = RequestContext()
_current: ContextVar[RequestContext] = ContextVar("backoffice_request", default=_EMPTY)


def set_request_context(
    *, request_id: str = "", method: str = "", path: str = ""
) -> Token[RequestContext]:
    """Abre un contexto nuevo; devolver el token a reset_request_context()."""
    return _current.set(RequestContext(request_id=request_id, method=method, path=path))


def reset_request_context(token: Token[RequestContext]) -> None:
    _current.reset(token)


def set_actor_context(*, actor_id: str = "", agence_id: str = "") -> None:
    """Completa actor (y agencia activa si se conoce) en el contexto actual."""
    ctx = _current.get()
    _current.set(replace(ctx, actor_id=actor_id, agence_id=agence_id or ctx.agence_id))


def get_context_dict() -> dict[str, str]:
    """Contexto actual sin claves vacías."""
    return {key: value for key, value in asdict(_current.get()).items() if value}

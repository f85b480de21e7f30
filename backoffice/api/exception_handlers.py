"""
===============================================================================
TARJETA CRC — backoffice/api/exception_handlers.py (Manejo Centralizado de Excepciones)
===============================================================================

Responsabilidades:
  - Traducir BackofficeError (y errores de request de FastAPI) a problem+json.
  - Loguear con error_id + request_id según severidad.
  - No filtrar internos en errores no controlados (solo fuera de producción).

Mapeo (primera clase que matchea en el MRO):
  ValidationError / RequestValidationError  -> VALIDATION_ERROR (422)
  AuthenticationError                       -> UNAUTHORIZED (401, WWW-Authenticate)
  PermissionDeniedError                     -> FORBIDDEN (403)
  NotFoundError                             -> NOT_FOUND (404)
  InvalidStateError                         -> INVALID_STATE (409)
  ConflictError                             -> CONFLICT (409, Retry-After: 0, métrica)
  AuthorizationInputError                   -> INTERNAL_ERROR (500, bug del caller)
  DatabaseError                             -> DATABASE_ERROR (503)
  BackofficeError (resto)                   -> INTERNAL_ERROR (500)

Colaboradores:
  - crosscutting.error_responses: AppHTTPException, ErrorCode, app_exception_handler
  - crosscutting.exceptions
  - crosscutting.metrics.record_concurrency_conflict
===============================================================================
"""

from __future__ import annotations

import logging

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from ..crosscutting.config import get_settings
from ..crosscutting.error_responses import (
    AppHTTPException,
    ErrorCode,
    app_exception_handler,
)
from ..crosscutting.exceptions import (
    AuthenticationError,
    AuthorizationInputError,
    BackofficeError,
    ConflictError,
    DatabaseError,
    InvalidStateError,
    NotFoundError,
    PermissionDeniedError,
    ValidationError,
)
from ..crosscutting.logger import logger
from ..crosscutting.metrics import record_concurrency_conflict

# R: (tipo, código, nivel de log). El orden importa: subclases primero.
_ERROR_TABLE: tuple[tuple[type[BackofficeError], ErrorCode, int], ...] = (
    (ValidationError, ErrorCode.VALIDATION_ERROR, logging.INFO),
    (AuthenticationError, ErrorCode.UNAUTHORIZED, logging.INFO),
    (PermissionDeniedError, ErrorCode.FORBIDDEN, logging.INFO),
    (NotFoundError, ErrorCode.NOT_FOUND, logging.DEBUG),
    (InvalidStateError, ErrorCode.INVALID_STATE, logging.INFO),
    (ConflictError, ErrorCode.CONFLICT, logging.WARNING),
    (AuthorizationInputError, ErrorCode.INTERNAL_ERROR, logging.ERROR),
    (DatabaseError, ErrorCode.DATABASE_ERROR, logging.ERROR),
)

_EXTRA_HEADERS: dict[ErrorCode, dict[str, str]] = {
    ErrorCode.UNAUTHORIZED: {"WWW-Authenticate": "Bearer"},
    # R: el cliente recarga el agregado y reintenta sin esperar.
    ErrorCode.CONFLICT: {"Retry-After": "0"},
}

_INTERNAL_DETAIL = "Error interno."


def _classify(exc: BackofficeError) -> tuple[ErrorCode, int]:
    for exc_type, code, level in _ERROR_TABLE:
        if isinstance(exc, exc_type):
            return code, level
    return ErrorCode.INTERNAL_ERROR, logging.ERROR


async def backoffice_error_handler(
    request: Request, exc: BackofficeError
) -> JSONResponse:
    code, level = _classify(exc)

    extra = {"error_id": exc.error_id, "code": code.value, "detail": exc.message}
    if isinstance(exc, ConflictError):
        record_concurrency_conflict(exc.aggregate or "unknown")
        extra.update(
            aggregate=exc.aggregate,
            aggregate_id=exc.aggregate_id,
            expected_version=exc.expected_version,
        )
    logger.log(level, "Error de aplicación", extra=extra)

    # R: errores 5xx nunca devuelven el mensaje interno.
    detail = exc.message if code.http_status < 500 else _INTERNAL_DETAIL
    if code is ErrorCode.DATABASE_ERROR:
        detail = "Base de datos no disponible."

    return await app_exception_handler(
        request,
        AppHTTPException(
            code,
            detail,
            errors=[{"error_id": exc.error_id}],
            headers=_EXTRA_HEADERS.get(code),
        ),
    )


async def request_validation_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    errors = [
        {
            "field": ".".join(str(loc) for loc in error.get("loc", ())),
            "message": error.get("msg", ""),
            "type": error.get("type", ""),
        }
        for error in exc.errors()
    ]
    logger.info(
        "Request inválido",
        extra={"path": request.url.path, "errors_count": len(errors)},
    )
    return await app_exception_handler(
        request,
        AppHTTPException(
            ErrorCode.VALIDATION_ERROR, "Datos de entrada inválidos.", errors=errors
        ),
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Fallback: stacktrace a logs, respuesta genérica en producción."""
    logger.error("Excepción no controlada", exc_info=True, extra={"error": str(exc)})

    detail = _INTERNAL_DETAIL if get_settings().is_production() else str(exc)
    return await app_exception_handler(
        request, AppHTTPException(ErrorCode.INTERNAL_ERROR, detail)
    )


def register_exception_handlers(app) -> None:
    """Registra handlers; Exception queda como último fallback."""
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(BackofficeError, backoffice_error_handler)
    app.add_exception_handler(AppHTTPException, app_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)


__all__ = ["register_exception_handlers"]

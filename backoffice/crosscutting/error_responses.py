# backoffice/crosscutting/error_responses.py
"""
===============================================================================
MÓDULO: Problem Details (RFC 7807) del back office
===============================================================================

Todo error HTTP sale con el mismo cuerpo application/problem+json:

    {type, title, status, detail, code, instance, errors?}

- El cliente reacciona por `code` (estable), nunca por el texto de `detail`.
- `errors` transporta detalle por campo y la correlación (error_id, request_id).
- Un 403 del motor de autorización dice solo "Acceso denegado."; el motivo
  queda en logs y auditoría.

-------------------------------------------------------------------------------
CRC (Component Card)
-------------------------------------------------------------------------------
Componente:
  ErrorCode + AppHTTPException + app_exception_handler

Responsabilidades:
  - Asociar cada ErrorCode a su status HTTP y título.
  - Construir el payload ProblemDetail y la JSONResponse.
  - Factories cortas para los errores que se levantan en el borde HTTP.

Colaboradores:
  - api/exception_handlers.py (traduce BackofficeError -> AppHTTPException)
  - identity/auth_users.py, interfaces/api/http/dependencies.py (factories)
===============================================================================
"""

from __future__ import annotations

from enum import Enum
from typing import Any

from fastapi import HTTPException, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel

PROBLEM_JSON_MEDIA_TYPE = "application/problem+json"


class ErrorCode(str, Enum):
    VALIDATION_ERROR = "VALIDATION_ERROR"
    UNAUTHORIZED = "UNAUTHORIZED"
    FORBIDDEN = "FORBIDDEN"
    NOT_FOUND = "NOT_FOUND"
    CONFLICT = "CONFLICT"
    INVALID_STATE = "INVALID_STATE"
    INTERNAL_ERROR = "INTERNAL_ERROR"
    DATABASE_ERROR = "DATABASE_ERROR"

    @property
    def http_status(self) -> int:
        return _HTTP_STATUS[self]

    @property
    def title(self) -> str:
        return self.value.replace("_", " ").capitalize()


_HTTP_STATUS: dict[ErrorCode, int] = {
    ErrorCode.VALIDATION_ERROR: 422,
    ErrorCode.UNAUTHORIZED: 401,
    ErrorCode.FORBIDDEN: 403,
    ErrorCode.NOT_FOUND: 404,
    ErrorCode.CONFLICT: 409,
    ErrorCode.INVALID_STATE: 409,
    ErrorCode.INTERNAL_ERROR: 500,
    ErrorCode.DATABASE_ERROR: 503,
}


class ProblemDetail(BaseModel):
    """Cuerpo RFC 7807 + `code` estable + `errors` opcional."""

    type: str = "about:blank"
    title: str
    status: int
    detail: str
    code: ErrorCode
    instance: str | None = None
    errors: list[dict[str, Any]] | None = None


def _openapi_problem(description: str) -> dict[str, Any]:
    return {
        "description": description,
        "model": ProblemDetail,
        "content": {
            PROBLEM_JSON_MEDIA_TYPE: {
                "schema": {"$ref": "#/components/schemas/ProblemDetail"}
            }
        },
    }


OPENAPI_ERROR_RESPONSES = {
    "401": _openapi_problem("Token ausente, inválido o expirado"),
    "403": _openapi_problem("Acceso denegado"),
    "404": _openapi_problem("Recurso inexistente o no visible"),
    "409": _openapi_problem("Versión desactualizada o transición inválida"),
    "422": _openapi_problem("Datos de entrada inválidos"),
}


class AppHTTPException(HTTPException):
    """HTTPException con ErrorCode; el status sale del código."""

    def __init__(
        self,
        code: ErrorCode,
        detail: str,
        *,
        errors: list[dict[str, Any]] | None = None,
        headers: dict[str, str] | None = None,
    ):
        super().__init__(status_code=code.http_status, detail=detail, headers=headers)
        self.code = code
        self.errors = errors


# ---------------------------------------------------------------------------
# Factories
# ---------------------------------------------------------------------------
def validation_error(
    detail: str, errors: list[dict[str, Any]] | None = None
) -> AppHTTPException:
    return AppHTTPException(ErrorCode.VALIDATION_ERROR, detail, errors=errors)


def not_found(resource: str, identifier: str) -> AppHTTPException:
    return AppHTTPException(
        ErrorCode.NOT_FOUND, f"{resource} '{identifier}' no encontrado"
    )


def unauthorized(detail: str = "Autenticación requerida") -> AppHTTPException:
    return AppHTTPException(
        ErrorCode.UNAUTHORIZED, detail, headers={"WWW-Authenticate": "Bearer"}
    )


def forbidden(detail: str = "Acceso denegado.") -> AppHTTPException:
    return AppHTTPException(ErrorCode.FORBIDDEN, detail)


# ---------------------------------------------------------------------------
# Handler FastAPI
# ---------------------------------------------------------------------------
async def app_exception_handler(
    request: Request, exc: AppHTTPException
) -> JSONResponse:
    """Serializa AppHTTPException como problem+json (agrega request_id)."""
    errors = list(exc.errors or [])
    request_id = getattr(getattr(request, "state", None), "request_id", None)
    if request_id:
        errors.append({"request_id": request_id})

    problem = ProblemDetail(
        type=f"about:blank/{exc.code.value.lower()}",
        title=exc.code.title,
        status=exc.status_code,
        detail=str(exc.detail),
        code=exc.code,
        instance=str(request.url),
        errors=errors or None,
    )
    return JSONResponse(
        status_code=exc.status_code,
        content=problem.model_dump(mode="json", exclude_none=True),
        headers=exc.headers,
        media_type=PROBLEM_JSON_MEDIA_TYPE,
    )

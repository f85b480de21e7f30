# backoffice/crosscutting/exceptions.py
"""
===============================================================================
MÓDULO: Excepciones tipadas del back office
===============================================================================

Objetivo
--------
Una sola jerarquía de errores para mutaciones, autenticación e infraestructura:
- error_code estable (el frontend/cliente decide por código, no por texto)
- error_id para correlación con logs
- message “humana” (sin filtrar detalles de entitlement ni secretos)

Taxonomía
---------
- ValidationError          input mal formado (módulo desconocido, email duplicado...)
- PermissionDeniedError    el actor no puede ejecutar la MUTACIÓN en sí
- InvalidStateError        workflow fuera de estado elegible (ej: ya decidido)
- ConflictError            colisión de concurrencia optimista (recargar y reintentar)
- AuthenticationError      credenciales inválidas (mensaje genérico siempre)
- NotFoundError            agregado inexistente
- AuthorizationInputError  input mal formado al motor de decisión (bug del caller)
- DatabaseError            falla de infraestructura (pool / SQL)

Nota:
  Un Deny del motor de autorización NO es una excepción: es un resultado
  tipado (domain.authorization.Decision).

-------------------------------------------------------------------------------
CRC (Component Card)
-------------------------------------------------------------------------------
Componente:
  BackofficeError + subclases

Responsabilidades:
  - Estandarizar errores internos que luego se mapean a HTTP (RFC 7807)
  - Generar error_id para rastreo

Colaboradores:
  - api/exception_handlers.py (mapea a AppHTTPException)
===============================================================================
"""

from __future__ import annotations

from uuid import uuid4


class BackofficeError(Exception):
    """Base de todos los errores del back office."""

    error_code: str = "BACKOFFICE_ERROR"

    def __init__(self, message: str, *, error_id: str | None = None):
        self.message = message
        # R: error_id viaja en la respuesta y en el log; mismo valor en ambos.
        self.error_id = error_id or uuid4().hex
        super().__init__(message)


class ValidationError(BackofficeError):
    """Input inválido para una mutación. Recuperable corrigiendo el input."""

    error_code: str = "VALIDATION_ERROR"


class PermissionDeniedError(BackofficeError):
    """El actor no tiene derecho a ejecutar la mutación."""

    error_code: str = "PERMISSION_DENIED"


class InvalidStateError(BackofficeError):
    """Transición de workflow desde un estado no elegible."""

    error_code: str = "INVALID_STATE"


class ConflictError(BackofficeError):
    """Otro escritor modificó el agregado: recargar y reintentar."""

    error_code: str = "CONFLICT"

    def __init__(
        self,
        message: str,
        *,
        aggregate: str = "",
        aggregate_id: str = "",
        expected_version: int | None = None,
        error_id: str | None = None,
    ):
        super().__init__(message, error_id=error_id)
        self.aggregate = aggregate
        self.aggregate_id = aggregate_id
        self.expected_version = expected_version


class AuthenticationError(BackofficeError):
    """Credenciales inválidas. Mismo mensaje para todos los casos."""

    error_code: str = "AUTHENTICATION_FAILED"

    def __init__(self, message: str = "Credenciales inválidas.", **kwargs):
        super().__init__(message, **kwargs)


class NotFoundError(BackofficeError):
    """Agregado inexistente (agencia, usuario, solicitud)."""

    error_code: str = "NOT_FOUND"

    def __init__(self, resource: str, identifier: object, **kwargs):
        self.resource = resource
        self.identifier = str(identifier)
        super().__init__(f"{resource} '{identifier}' no encontrado", **kwargs)


class AuthorizationInputError(BackofficeError):
    """Contexto de autorización mal formado (error de programación)."""

    error_code: str = "AUTHORIZATION_INPUT_ERROR"


class DatabaseError(BackofficeError):
    """Pool cerrado, conexión perdida o SQL rechazado por la base."""

    error_code: str = "DATABASE_ERROR"

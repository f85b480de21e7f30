"""
Name: RFC 7807 Error Mapping Tests

Responsibilities:
  - Each BackofficeError subclass maps to its status, code and extra headers
  - 5xx responses never echo the internal message
  - Request validation errors list offending fields
"""

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from pydantic import BaseModel

from backoffice.api.exception_handlers import register_exception_handlers
from backoffice.crosscutting.exceptions import (
    AuthenticationError,
    AuthorizationInputError,
    ConflictError,
    DatabaseError,
    InvalidStateError,
    NotFoundError,
    PermissionDeniedError,
    ValidationError,
)

pytestmark = pytest.mark.unit


class _Payload(BaseModel):
    name: str
    expected_version: int


_RAISERS = {
    "validation": lambda: ValidationError("Módulo desconocido: 'nope'"),
    "auth": lambda: AuthenticationError(),
    "permission": lambda: PermissionDeniedError("Sólo un superadmin puede aprobar."),
    "missing": lambda: NotFoundError("Agence", "a-1"),
    "state": lambda: InvalidStateError("La agencia ya fue decidida."),
    "conflict": lambda: ConflictError(
        "Versión desactualizada.", aggregate="tenant", aggregate_id="a-1", expected_version=3
    ),
    "engine": lambda: AuthorizationInputError("tenant snapshot requerido"),
    "db": lambda: DatabaseError("connection refused on 10.0.0.5"),
}


def _build_app() -> FastAPI:
    app = FastAPI()
    register_exception_handlers(app)

    @app.get("/raise/{kind}")
    def raise_kind(kind: str):
        raise _RAISERS[kind]()

    @app.post("/echo")
    def echo(payload: _Payload):
        return payload

    @app.get("/boom")
    def boom():
        raise RuntimeError("kaput")

    return app


@pytest.fixture
def error_client() -> TestClient:
    return TestClient(_build_app(), raise_server_exceptions=False)


@pytest.mark.parametrize(
    "kind, status, code",
    [
        ("validation", 422, "VALIDATION_ERROR"),
        ("auth", 401, "UNAUTHORIZED"),
        ("permission", 403, "FORBIDDEN"),
        ("missing", 404, "NOT_FOUND"),
        ("state", 409, "INVALID_STATE"),
        ("conflict", 409, "CONFLICT"),
        ("engine", 500, "INTERNAL_ERROR"),
        ("db", 503, "DATABASE_ERROR"),
    ],
)
def test_backoffice_errors_map_to_problem_json(error_client, kind, status, code):
    response = error_client.get(f"/raise/{kind}")

    assert response.status_code == status
    assert response.headers["content-type"].startswith("application/problem+json")
    body = response.json()
    assert body["status"] == status
    assert body["code"] == code
    assert body["type"].endswith("/" + code.lower())
    assert body["instance"].endswith(f"/raise/{kind}")
    assert any("error_id" in item for item in body["errors"])


def test_conflict_carries_retry_after(error_client):
    response = error_client.get("/raise/conflict")

    assert response.headers["Retry-After"] == "0"
    assert response.json()["detail"] == "Versión desactualizada."


def test_authentication_error_is_generic_with_bearer_challenge(error_client):
    response = error_client.get("/raise/auth")

    assert response.headers["WWW-Authenticate"] == "Bearer"
    assert response.json()["detail"] == "Credenciales inválidas."


def test_server_side_errors_hide_internal_message(error_client):
    engine = error_client.get("/raise/engine").json()
    db = error_client.get("/raise/db").json()

    assert engine["detail"] == "Error interno."
    assert "10.0.0.5" not in db["detail"]


def test_request_validation_lists_fields(error_client):
    response = error_client.post("/echo", json={"name": "x", "expected_version": "tres"})

    assert response.status_code == 422
    body = response.json()
    assert body["detail"] == "Datos de entrada inválidos."
    fields = [item["field"] for item in body["errors"] if "field" in item]
    assert "body.expected_version" in fields


def test_unhandled_exception_is_500_problem(error_client):
    response = error_client.get("/boom")

    assert response.status_code == 500
    assert response.json()["code"] == "INTERNAL_ERROR"

# backoffice/crosscutting/middleware.py
"""
===============================================================================
MÓDULO: Middleware ASGI de contexto de request
===============================================================================

CRC (Component Card)
-------------------------------------------------------------------------------
Componente:
  RequestContextMiddleware (ASGI puro)

Responsabilidades:
  - Aceptar X-Request-Id entrante (<= 128 chars) o generar uno nuevo.
  - Exponerlo en request.state.request_id y devolverlo en la respuesta.
  - Abrir el contexto de logs (context.py) y restaurarlo al salir, así el
    actor de un request nunca aparece en los logs del siguiente.
  - Medir latencia + status (crosscutting.metrics) y loguear el cierre.

Colaboradores:
  - backoffice/context.py
  - crosscutting/metrics.py
  - crosscutting/logger.py
===============================================================================
"""

from __future__ import annotations

import time
import uuid

from starlette.datastructures import MutableHeaders
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from ..context import reset_request_context, set_request_context
from .logger import logger
from .metrics import record_request_metrics

REQUEST_ID_HEADER = "X-Request-Id"
_MAX_REQUEST_ID_LEN = 128
_QUIET_PATHS = frozenset({"/healthz", "/metrics"})


def _incoming_request_id(scope: Scope) -> str:
    for name, value in scope.get("headers", []):
        if name == b"x-request-id":
            candidate = value.decode("latin-1").strip()
            if 0 < len(candidate) <= _MAX_REQUEST_ID_LEN:
                return candidate
    return str(uuid.uuid4())


class RequestContextMiddleware:
    def __init__(self, app: ASGIApp):
        self.app = app

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        request_id = _incoming_request_id(scope)
        method, path = scope["method"], scope["path"]
        scope.setdefault("state", {})["request_id"] = request_id
        token = set_request_context(request_id=request_id, method=method, path=path)

        status_code = 500
        started = time.perf_counter()

        async def send_with_request_id(message: Message) -> None:
            nonlocal status_code
            if message["type"] == "http.response.start":
                status_code = message["status"]
                MutableHeaders(scope=message)[REQUEST_ID_HEADER] = request_id
            await send(message)

        try:
            await self.app(scope, receive, send_with_request_id)
        except Exception:
            logger.exception("request falló")
            raise
        finally:
            elapsed = time.perf_counter() - started
            record_request_metrics(
                endpoint=path,
                method=method,
                status_code=status_code,
                latency_seconds=elapsed,
            )
            if path not in _QUIET_PATHS:
                logger.info(
                    "request completado",
                    extra={
                        "status_code": status_code,
                        "latency_ms": round(elapsed * 1000, 2),
                    },
                )
            reset_request_context(token)

"""
===============================================================================
ARCHIVO: crosscutting/metrics.py
===============================================================================

Nombre:
    Métricas Prometheus del back office

Series:
    backoffice_requests_total{endpoint,method,status}
    backoffice_request_latency_seconds{endpoint,method}
    backoffice_access_decisions_total{module,verdict,reason}
    backoffice_concurrency_conflicts_total{aggregate}
    backoffice_workflow_decisions_total{workflow,decision}

Reglas:
    - Registry propio (METRICS_REGISTRY): no se mezcla con el default del proceso.
    - Labels de conjunto cerrado: nunca user_id ni agence_id; los ids del
      path se reemplazan por su plantilla.

Colaboradores:
    - crosscutting.middleware (HTTP)
    - interfaces/api/http/dependencies (decisiones de acceso)
    - api/exception_handlers (conflictos de versión)
    - routers agences / module_requests (decisiones de workflow)
===============================================================================
"""

from __future__ import annotations

import re

from prometheus_client import (
    CONTENT_TYPE_LATEST,
    CollectorRegistry,
    Counter,
    Histogram,
    generate_latest,
)

METRICS_REGISTRY = CollectorRegistry()

_REQUESTS = Counter(
    "backoffice_requests_total",
    "Requests HTTP atendidos",
    ["endpoint", "method", "status"],
    registry=METRICS_REGISTRY,
)
_LATENCY = Histogram(
    "backoffice_request_latency_seconds",
    "Latencia de requests HTTP",
    ["endpoint", "method"],
    buckets=(0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5),
    registry=METRICS_REGISTRY,
)
# reason = "allow" o un código de Deny.
_ACCESS_DECISIONS = Counter(
    "backoffice_access_decisions_total",
    "Decisiones del motor de autorización",
    ["module", "verdict", "reason"],
    registry=METRICS_REGISTRY,
)
_CONFLICTS = Counter(
    "backoffice_concurrency_conflicts_total",
    "Escrituras rechazadas por versión desactualizada",
    ["aggregate"],
    registry=METRICS_REGISTRY,
)
_WORKFLOW_DECISIONS = Counter(
    "backoffice_workflow_decisions_total",
    "Decisiones de superadmin sobre workflows de aprobación",
    ["workflow", "decision"],
    registry=METRICS_REGISTRY,
)

_PATH_TEMPLATES: tuple[tuple[re.Pattern[str], str], ...] = (
    (re.compile(r"/agences/[^/]+"), "/agences/{agence_id}"),
    (re.compile(r"/users/[^/]+"), "/users/{user_id}"),
    (re.compile(r"/module-requests/[^/]+"), "/module-requests/{request_id}"),
    (re.compile(r"/access/check/[^/]+/[^/]+"), "/access/check/{module}/{action}"),
)


def endpoint_label(path: str) -> str:
    for pattern, template in _PATH_TEMPLATES:
        path = pattern.sub(template, path)
    return path


def status_label(code: int) -> str:
    return f"{code // 100}xx" if 100 <= code < 600 else "other"


def record_request_metrics(
    endpoint: str, method: str, status_code: int, latency_seconds: float
) -> None:
    label = endpoint_label(endpoint)
    _REQUESTS.labels(endpoint=label, method=method, status=status_label(status_code)).inc()
    _LATENCY.labels(endpoint=label, method=method).observe(latency_seconds)


def record_access_decision(module: str, verdict: str, reason: str | None) -> None:
    _ACCESS_DECISIONS.labels(
        module=module, verdict=verdict, reason=reason or "allow"
    ).inc()


def record_concurrency_conflict(aggregate: str) -> None:
    """aggregate: tenant | user | module_request."""
    _CONFLICTS.labels(aggregate=aggregate or "unknown").inc()


def record_workflow_decision(workflow: str, decision: str) -> None:
    """workflow: tenant | module_request; decision: approve | reject."""
    _WORKFLOW_DECISIONS.labels(workflow=workflow, decision=decision).inc()


def get_metrics_response() -> tuple[bytes, str]:
    """(body, content-type) para /metrics."""
    return generate_latest(METRICS_REGISTRY), CONTENT_TYPE_LATEST

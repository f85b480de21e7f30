# backoffice/crosscutting/logger.py
"""
===============================================================================
MÓDULO: Logging estructurado del back office
===============================================================================

Cada evento sale como UNA línea JSON con:
  ts, level, logger, msg, (request_id, method, path, actor_id, agence_id),
  los campos pasados en `extra=` y, si hubo excepción, `exc`.

-------------------------------------------------------------------------------
CRC (Component Card)
-------------------------------------------------------------------------------
Componentes:
  RequestContextFilter + JSONLineFormatter + configure_logging()

Responsabilidades:
  - Inyectar el contexto del request (context.py) en cada LogRecord.
  - Serializar a JSON redactando credenciales (password, hash, token, secret).
  - Configurar el árbol "backoffice" una sola vez (dictConfig).

Colaboradores:
  - backoffice/context.py (ContextVars)
  - crosscutting/config.py (log_level, log_json)

Notas:
  - Los módulos usan logging.getLogger(__name__) o el `logger` exportado;
    ambos cuelgan de "backoffice".
===============================================================================
"""

from __future__ import annotations

import json
import logging
import logging.config
from datetime import datetime, timezone
from typing import Any

from ..context import get_context_dict

_STANDARD_ATTRS = frozenset(vars(logging.makeLogRecord({}))) | {"message", "taskName"}
_CONTEXT_ATTRS = ("request_id", "method", "path", "actor_id", "agence_id")
_SECRET_MARKERS = ("password", "secret", "token", "authorization")
_MAX_VALUE_LEN = 2_000


def _is_secret(key: str) -> bool:
    lowered = key.lower()
    return any(marker in lowered for marker in _SECRET_MARKERS)


def _scrub(key: str, value: Any) -> Any:
    if _is_secret(key):
        return "[redacted]"
    if isinstance(value, dict):
        return {str(k): _scrub(str(k), v) for k, v in value.items()}
    if isinstance(value, (list, tuple, set, frozenset)):
        return [_scrub(key, v) for v in value]
    if isinstance(value, str) and len(value) > _MAX_VALUE_LEN:
        return value[:_MAX_VALUE_LEN] + "..."
    return value


class RequestContextFilter(logging.Filter):
    """Copia el contexto del request (si lo hay) al LogRecord."""

    def filter(self, record: logging.LogRecord) -> bool:
        for key, value in get_context_dict().items():
            if not hasattr(record, key):
                setattr(record, key, value)
        return True


class JSONLineFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }
        for key, value in vars(record).items():
            if key not in _STANDARD_ATTRS:
                entry[key] = _scrub(key, value)
        if record.exc_info:
            entry["exc"] = self.formatException(record.exc_info)
        return json.dumps(entry, ensure_ascii=False, default=str)


class _PlainFormatter(logging.Formatter):
    """Formato legible para desarrollo: contexto al final de la línea."""

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        context = " ".join(
            f"{key}={getattr(record, key)}"
            for key in _CONTEXT_ATTRS
            if getattr(record, key, None)
        )
        return f"{line} [{context}]" if context else line


def configure_logging(level: str = "INFO", *, json_lines: bool = True) -> logging.Logger:
    """Configura el árbol de loggers "backoffice" y lo devuelve."""
    logging.config.dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "filters": {"request_context": {"()": RequestContextFilter}},
            "formatters": {
                "json": {"()": JSONLineFormatter},
                "plain": {
                    "()": _PlainFormatter,
                    "format": "%(asctime)s %(levelname)-7s %(name)s: %(message)s",
                },
            },
            "handlers": {
                "stdout": {
                    "class": "logging.StreamHandler",
                    "stream": "ext://sys.stdout",
                    "filters": ["request_context"],
                    "formatter": "json" if json_lines else "plain",
                }
            },
            "loggers": {
                "backoffice": {
                    "level": level.upper(),
                    "handlers": ["stdout"],
                    "propagate": False,
                }
            },
        }
    )
    return logging.getLogger("backoffice")


def _configure_from_settings() -> logging.Logger:
    from .config import get_settings

    settings = get_settings()
    return configure_logging(settings.log_level, json_lines=settings.log_json)


logger = _configure_from_settings()

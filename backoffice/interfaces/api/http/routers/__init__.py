"""
===============================================================================
TARJETA CRC — backoffice/interfaces/api/http/routers/__init__.py
===============================================================================

Name:
    Routers Package (HTTP)

Responsibilities:
    - Exponer routers segmentados por bounded context para ser incluidos por el
      router principal.

Collaborators:
    - routers.auth
    - routers.agences
    - routers.module_requests
    - routers.users
    - routers.access

Notas:
    - Este archivo NO define endpoints. Solo re-exporta routers.
===============================================================================
"""

from .access import router as access_router
from .agences import router as agences_router
from .auth import router as auth_router
from .module_requests import router as module_requests_router
from .users import router as users_router

__all__ = [
    "access_router",
    "agences_router",
    "auth_router",
    "module_requests_router",
    "users_router",
]

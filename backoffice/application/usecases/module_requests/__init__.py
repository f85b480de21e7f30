"""
===============================================================================
MODULE ENTITLEMENT USE CASES PACKAGE (Public API / Exports)
===============================================================================

Workflow:
    requestModules (dueño) -> decideModuleRequest (superadmin)
===============================================================================
"""

from __future__ import annotations

from .decide_module_request import DecideModuleRequestUseCase
from .list_module_requests import ListModuleRequestsUseCase
from .request_modules import RequestModulesUseCase

__all__ = [
    "RequestModulesUseCase",
    "DecideModuleRequestUseCase",
    "ListModuleRequestsUseCase",
]

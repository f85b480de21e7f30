"""
===============================================================================
TENANT USE CASES PACKAGE (Public API / Exports)
===============================================================================

Ciclo de vida de agencias:
    registro (pending) -> approve/reject (superadmin) -> suspend/reinstate
===============================================================================
"""

from __future__ import annotations

from .change_tenant_status import ReinstateTenantUseCase, SuspendTenantUseCase
from .decide_tenant_approval import DecideTenantApprovalUseCase
from .get_tenant import GetTenantUseCase, ListTenantsUseCase
from .register_agency import RegisterAgencyResult, RegisterAgencyUseCase
from .register_tenant import RegisterTenantUseCase

__all__ = [
    "RegisterTenantUseCase",
    "RegisterAgencyUseCase",
    "RegisterAgencyResult",
    "DecideTenantApprovalUseCase",
    "SuspendTenantUseCase",
    "ReinstateTenantUseCase",
    "GetTenantUseCase",
    "ListTenantsUseCase",
]

"""
===============================================================================
TARJETA CRC — schemas/access.py
===============================================================================

Módulo:
    Schemas HTTP del catálogo y del diagnóstico del motor
===============================================================================
"""

from __future__ import annotations

from uuid import UUID

from backoffice.domain.module_catalog import ModuleDefinition
from pydantic import BaseModel, Field


class ModuleRes(BaseModel):
    id: str
    name: str
    actions: list[str]

    @classmethod
    def from_domain(cls, definition: ModuleDefinition) -> "ModuleRes":
        return cls(
            id=definition.id,
            name=definition.name,
            actions=sorted(definition.actions),
        )


class ModulesListRes(BaseModel):
    version: str
    modules: list[ModuleRes]


class EvaluateAccessReq(BaseModel):
    user_id: UUID
    agence_id: UUID
    module: str = Field(..., min_length=1, max_length=64)
    action: str = Field(..., min_length=1, max_length=64)


class DecisionRes(BaseModel):
    verdict: str
    reason: str | None = None


class ActionCheckRes(BaseModel):
    agence_id: UUID
    module: str
    action: str
    allowed: bool = True

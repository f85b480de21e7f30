"""
===============================================================================
ACCESS USE CASES PACKAGE (Public API / Exports)
===============================================================================
"""

from __future__ import annotations

from .evaluate_access import EvaluateAccessUseCase
from .list_accessible_modules import AccessibleModules, ListAccessibleModulesUseCase

__all__ = [
    "AccessibleModules",
    "EvaluateAccessUseCase",
    "ListAccessibleModulesUseCase",
]

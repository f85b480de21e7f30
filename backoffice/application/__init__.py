"""
===============================================================================
APPLICATION LAYER (Public API / Exports)
===============================================================================

Expone los puntos de entrada estables de la capa de aplicación:
  - ensure_dev_superadmin: seed del operador global en desarrollo

Nota:
  - Los casos de uso se importan desde `usecases/` subdirectories.
===============================================================================
"""

from .dev_seed_superadmin import ensure_dev_superadmin

__all__ = ["ensure_dev_superadmin"]

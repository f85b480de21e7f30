"""DTOs pydantic de la API v1, un módulo por router. Sin lógica: sólo forma y validación."""

__all__ = []

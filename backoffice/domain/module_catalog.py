"""
===============================================================================
TARJETA CRC — domain/module_catalog.py
===============================================================================

Módulo:
    Catálogo de módulos (configuración estática, versionada)

Responsabilidades:
    - Definir ModuleDefinition (id estable, nombre, acciones reconocidas).
    - Exponer list_modules() ordenado por id e is_valid_action().
    - Construir el catálogo desde un dict/JSON (override opcional por config).

Colaboradores:
    - domain.authorization: valida módulos y acciones antes de decidir.
    - application/usecases: valida grants y solicitudes de módulos.
    - container.get_module_catalog(): carga única al arrancar.

Reglas:
    - Inmutable en runtime: no hay API de escritura.
    - Módulo desconocido => is_valid_action() devuelve False (no es error).
===============================================================================
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable, Mapping, Optional

# Acciones conocidas por los módulos CRUD.
LIRE = "lire"
CREER = "creer"
MODIFIER = "modifier"
SUPPRIMER = "supprimer"
EXPORTER = "exporter"

CRUD_ACTIONS: frozenset[str] = frozenset({LIRE, CREER, MODIFIER, SUPPRIMER})


@dataclass(frozen=True)
class ModuleDefinition:
    """Entrada del catálogo."""

    id: str
    name: str
    actions: frozenset[str]

    def recognizes(self, action: str) -> bool:
        return action in self.actions


class ModuleCatalog:
    """
    ----------------------------------------------------------------------------
    CRC (Class Card)
    ----------------------------------------------------------------------------
    Clase:
      ModuleCatalog

    Responsabilidades:
      - Indexar definiciones por id
      - Responder consultas puras (sin I/O)

    Colaboradores:
      - ModuleDefinition
    ----------------------------------------------------------------------------
    """

    def __init__(self, definitions: Iterable[ModuleDefinition], *, version: str):
        by_id: dict[str, ModuleDefinition] = {}
        for definition in definitions:
            if not definition.id or not definition.actions:
                raise ValueError("module definitions need an id and actions")
            if definition.id in by_id:
                raise ValueError(f"duplicated module id: {definition.id}")
            by_id[definition.id] = definition
        self._by_id = by_id
        self._sorted = tuple(by_id[k] for k in sorted(by_id))
        self.version = version

    def list_modules(self) -> tuple[ModuleDefinition, ...]:
        """Todos los módulos, ordenados por id."""
        return self._sorted

    def get(self, module_id: str) -> Optional[ModuleDefinition]:
        return self._by_id.get(module_id)

    def has_module(self, module_id: str) -> bool:
        return module_id in self._by_id

    def is_valid_action(self, module_id: str, action: str) -> bool:
        definition = self._by_id.get(module_id)
        return definition is not None and definition.recognizes(action)

    def unknown_modules(self, module_ids: Iterable[str]) -> list[str]:
        """Ids que no existen en el catálogo (orden de entrada, sin repetir)."""
        return [m for m in dict.fromkeys(module_ids) if m not in self._by_id]

    def __contains__(self, module_id: object) -> bool:
        return module_id in self._by_id

    def __len__(self) -> int:
        return len(self._by_id)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ModuleCatalog":
        """
        Construye el catálogo desde:
          {"version": "...", "modules": [{"id", "name", "actions": [...]}, ...]}
        """
        modules = data.get("modules")
        if not isinstance(modules, list) or not modules:
            raise ValueError("module catalog needs a non-empty 'modules' list")
        definitions = [
            ModuleDefinition(
                id=str(item["id"]).strip(),
                name=str(item.get("name") or item["id"]),
                actions=frozenset(str(a).strip() for a in item["actions"]),
            )
            for item in modules
        ]
        return cls(definitions, version=str(data.get("version") or "custom"))


def _crud(module_id: str, name: str, *extra: str) -> ModuleDefinition:
    return ModuleDefinition(module_id, name, CRUD_ACTIONS | frozenset(extra))


BUILTIN_CATALOG_VERSION = "2024.1"

BUILTIN_MODULES: tuple[ModuleDefinition, ...] = (
    _crud("clients", "Clients", EXPORTER),
    _crud("factures", "Factures", EXPORTER),
    _crud("caisse", "Caisse", EXPORTER),
    _crud("billets", "Billets d'avion"),
    _crud("reservations", "Réservations"),
    _crud("packages", "Packages"),
    _crud("fournisseurs", "Fournisseurs"),
    _crud("bons-commande", "Bons de commande"),
    _crud("creances", "Créances", EXPORTER),
    _crud("documents", "Documents"),
    _crud("calendrier", "Calendrier"),
    _crud("todos", "Tâches"),
    _crud("crm", "CRM"),
    _crud("agents", "Agents"),
    ModuleDefinition("rapports", "Rapports", frozenset({LIRE, EXPORTER})),
    ModuleDefinition("situation", "Situation", frozenset({LIRE, EXPORTER})),
    ModuleDefinition("vitrine", "Vitrine", frozenset({LIRE, MODIFIER})),
)

BUILTIN_CATALOG = ModuleCatalog(BUILTIN_MODULES, version=BUILTIN_CATALOG_VERSION)

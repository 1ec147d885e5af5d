# src/cascade_deploy/core/units/__init__.py
"""
# Units: Cascade Deploy

Contratos e estruturas das units implantáveis.

## Componentes

- **unit**: protocolo `Unit`, `DeployOutcome` e `FunctionUnit`
- **registry**: `UnitRegistry` (ids válidos e únicos, ordem de registro)
- **catalog**: sequência de ascensão embutida (units 10, 11, 23, 24)

## Princípios

- Units não conhecem o orquestrador nem o planner
- Dependências são explícitas e declarativas
- Estado compartilhado é acessado apenas via `RunContext.state`
"""

from .unit import DeployOutcome, FunctionUnit, Unit, feature_name
from .registry import (
    CascadeGraphError,
    DuplicateUnitIdError,
    InvalidUnitIdError,
    UnitRegistry,
    validate_unit_id,
)
from .catalog import ascension_catalog, initial_state

__all__ = [
    "DeployOutcome",
    "FunctionUnit",
    "Unit",
    "feature_name",
    "CascadeGraphError",
    "DuplicateUnitIdError",
    "InvalidUnitIdError",
    "UnitRegistry",
    "validate_unit_id",
    "ascension_catalog",
    "initial_state",
]

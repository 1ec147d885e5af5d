"""
Registro estrutural de Units.

O `UnitRegistry` valida identidade das units antes do planejamento:
    - cada unit possui um id válido (str não vazia ou int)
    - não existem ids duplicados
    - a ordem de registro é preservada, pois é ela que desempata o planner

Limites explícitos:
    - Não resolve dependências (responsabilidade do planner)
    - Não executa units
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Hashable, Iterable, List

from .unit import Unit


class CascadeGraphError(ValueError):
    """Base dos erros estruturais do grafo de units."""


class InvalidUnitIdError(CascadeGraphError):
    """Unit sem id ou com id de tipo não suportado."""


class DuplicateUnitIdError(CascadeGraphError):
    """Dois ou mais units registrados com o mesmo id."""


def validate_unit_id(unit_id: object) -> Hashable:
    if isinstance(unit_id, bool):
        raise InvalidUnitIdError(f"unit.id não pode ser booleano: {unit_id!r}")
    if isinstance(unit_id, int):
        return unit_id
    if isinstance(unit_id, str) and unit_id.strip():
        return unit_id
    raise InvalidUnitIdError(f"unit.id deve ser str não vazia ou int, recebido: {unit_id!r}")


@dataclass
class UnitRegistry:
    _units: Dict[Hashable, Unit] = field(default_factory=dict, init=False, repr=False)
    _order: List[Hashable] = field(default_factory=list, init=False, repr=False)

    @classmethod
    def of(cls, units: Iterable[Unit]) -> "UnitRegistry":
        registry = cls()
        for unit in units:
            registry.add(unit)
        return registry

    def add(self, unit: Unit) -> None:
        unit_id = validate_unit_id(getattr(unit, "id", None))

        if unit_id in self._units:
            raise DuplicateUnitIdError(f"Duplicate unit id: {unit_id!r}")

        self._units[unit_id] = unit
        self._order.append(unit_id)

    def get(self, unit_id: Hashable) -> Unit:
        return self._units[unit_id]

    def __contains__(self, unit_id: object) -> bool:
        return unit_id in self._units

    def __len__(self) -> int:
        return len(self._order)

    def ids(self) -> List[Hashable]:
        return list(self._order)

    def list(self) -> List[Unit]:
        return [self._units[uid] for uid in self._order]

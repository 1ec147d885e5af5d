# src/cascade_deploy/core/engine/planner.py
"""
Planejador da cascata (DAG).

Este módulo valida a estrutura do conjunto de units e produz uma ordem
de execução topológica determinística.

O planner opera exclusivamente em nível estrutural, analisando:
    - identificadores de units
    - dependências declaradas
    - formação de ciclos

Decisões arquiteturais:
    - Ordenação topológica determinística (Kahn com fila de prioridade)
    - Empates são resolvidos pela **ordem de entrada**: a lista original só
      é reordenada onde uma dependência obriga
    - Erros estruturais são falhas fatais, detectadas antes de qualquer
      mutação de estado

Invariantes:
    - Nenhuma unit aparece antes de suas dependências
    - Todas as units aparecem exatamente uma vez
    - A mesma entrada sempre produz a mesma ordem

Limites explícitos:
    - Não executa units
    - Não interage com RunContext nem com o SystemState
"""

from __future__ import annotations

import heapq
from typing import Dict, Hashable, Iterable, List

from cascade_deploy.core.units.registry import CascadeGraphError, UnitRegistry
from cascade_deploy.core.units.unit import Unit


class UnknownDependencyError(CascadeGraphError):
    """
    Uma unit declarou em `dependencies` um id que não existe na cascata.

    Dependências inexistentes não são ignoradas nem inferidas.
    """


class CycleDetectedError(CascadeGraphError):
    """
    O grafo de dependências contém um ciclo.

    Ciclos não são quebrados automaticamente; nenhuma execução parcial
    é permitida.
    """


def plan_cascade(units: Iterable[Unit]) -> List[Unit]:
    """
    Valida e produz uma ordem de execução topológica estável.

    Sempre que múltiplas units estiverem prontas, a escolha recai sobre a
    que aparece primeiro na entrada.

    Args:
        units (Iterable[Unit]): Units da cascata, na ordem declarada.

    Returns:
        List[Unit]: Units em ordem topológica estável.

    Raises:
        InvalidUnitIdError: Se alguma unit possuir id inválido.
        DuplicateUnitIdError: Se houver ids duplicados.
        UnknownDependencyError: Se uma unit declarar dependência inexistente.
        CycleDetectedError: Se houver ciclo no grafo de dependências.
    """
    registry = UnitRegistry.of(units)
    ordered_ids = registry.ids()
    index: Dict[Hashable, int] = {uid: i for i, uid in enumerate(ordered_ids)}

    incoming_count: Dict[Hashable, int] = {}
    outgoing: Dict[Hashable, List[Hashable]] = {uid: [] for uid in ordered_ids}

    for uid in ordered_ids:
        deps = list(getattr(registry.get(uid), "dependencies", []) or [])
        for dep in deps:
            if dep not in registry:
                raise UnknownDependencyError(f"Unit {uid!r} depends on unknown unit {dep!r}")
        # dependência repetida conta uma vez
        unique = list(dict.fromkeys(deps))
        incoming_count[uid] = len(unique)
        for dep in unique:
            outgoing[dep].append(uid)

    ready: List[int] = [index[uid] for uid in ordered_ids if incoming_count[uid] == 0]
    heapq.heapify(ready)
    order: List[Hashable] = []

    while ready:
        uid = ordered_ids[heapq.heappop(ready)]
        order.append(uid)
        for child in outgoing[uid]:
            incoming_count[child] -= 1
            if incoming_count[child] == 0:
                heapq.heappush(ready, index[child])

    if len(order) != len(ordered_ids):
        blocked = [uid for uid in ordered_ids if incoming_count[uid] > 0]
        raise CycleDetectedError(f"Cycle detected in unit dependency graph: {blocked!r}")

    return [registry.get(uid) for uid in order]

# src/cascade_deploy/core/engine/health.py
"""
Health Validator: predicados puros sobre o SystemState.

Predicados (parametrizados pelo RunConfig):
    - integrity >= min_integrity
    - guard_count >= min_guards
    - broadcast_active is True

Pré-condições avaliam os três antes da run. Pós-condições, avaliadas após
cada deploy bem-sucedido, verificam apenas o piso de integridade;
`symmetric_postconditions` liga os três.

Nenhuma lógica específica de unit vive aqui.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List

from cascade_deploy.core.config.run_config import RunConfig
from cascade_deploy.core.state.system_state import SystemState


CHECK_INTEGRITY = "integrity"
CHECK_GUARDS = "guards"
CHECK_BROADCAST = "broadcast"


@dataclass(frozen=True)
class HealthReport:
    failures: List[str] = field(default_factory=list)
    messages: List[str] = field(default_factory=list)

    @property
    def passed(self) -> bool:
        return not self.failures


class HealthValidator:
    def __init__(self, config: RunConfig):
        self.config = config

    def integrity_ok(self, state: SystemState) -> bool:
        return state.integrity >= self.config.min_integrity

    def guards_ok(self, state: SystemState) -> bool:
        return state.guard_count >= self.config.min_guards

    @staticmethod
    def broadcast_ok(state: SystemState) -> bool:
        return state.broadcast_active is True

    def _evaluate(self, state: SystemState, checks: List[str]) -> HealthReport:
        failures: List[str] = []
        messages: List[str] = []
        if CHECK_INTEGRITY in checks and not self.integrity_ok(state):
            failures.append(CHECK_INTEGRITY)
            messages.append(
                f"Integridade {state.integrity} abaixo do piso {self.config.min_integrity}"
            )
        if CHECK_GUARDS in checks and not self.guards_ok(state):
            failures.append(CHECK_GUARDS)
            messages.append(f"Guards ativos {state.guard_count} < mínimo {self.config.min_guards}")
        if CHECK_BROADCAST in checks and not self.broadcast_ok(state):
            failures.append(CHECK_BROADCAST)
            messages.append("Broadcast inativo")
        return HealthReport(failures=failures, messages=messages)

    def check_preconditions(self, state: SystemState) -> HealthReport:
        return self._evaluate(state, [CHECK_INTEGRITY, CHECK_GUARDS, CHECK_BROADCAST])

    def check_postconditions(self, state: SystemState) -> HealthReport:
        if self.config.symmetric_postconditions:
            return self.check_preconditions(state)
        return self._evaluate(state, [CHECK_INTEGRITY])

# src/cascade_deploy/core/engine/context.py
"""
Contexto de execução compartilhado de uma run da cascata.

O RunContext é o único meio pelo qual units, orquestrador e rollback
manager compartilham:
    - o SystemState da run (`ctx.state`)
    - a configuração efetiva (`ctx.config`)
    - o log estruturado de execução (`ctx.events`)
    - warnings não fatais agrupados por unit (`ctx.warnings`)

Invariantes:
    - Cada run possui um RunContext próprio
    - Logs sempre incluem `run_id` e `unit_id` (None para eventos da run)
    - O contexto é mutável apenas durante a execução
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Hashable, List, Optional

from cascade_deploy.core.config.run_config import RunConfig
from cascade_deploy.core.state.system_state import SystemState


RUN_SCOPE = "run"


@dataclass
class RunContext:
    run_id: str
    created_at: datetime
    config: RunConfig
    state: SystemState
    meta: Dict[str, Any] = field(default_factory=dict)

    events: List[Dict[str, Any]] = field(default_factory=list, init=False)
    warnings: Dict[Hashable, List[str]] = field(default_factory=dict, init=False)

    # -----------------------------
    # Logging & warnings
    # -----------------------------
    def log(self, *, level: str, message: str, unit_id: Optional[Hashable] = None, **extra: Any) -> None:
        event = {
            "run_id": self.run_id,
            "unit_id": unit_id,
            "level": level,
            "message": message,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }
        event.update(extra)
        self.events.append(event)

    def add_warning(self, *, message: str, unit_id: Optional[Hashable] = None) -> None:
        key = RUN_SCOPE if unit_id is None else unit_id
        if key not in self.warnings:
            self.warnings[key] = []
        self.warnings[key].append(message)

# src/cascade_deploy/core/engine/run.py
"""
Agregado da run e resultado terminal.

`Run` é o estado efêmero de uma chamada a `run_cascade` (fila de units,
snapshot, ids publicados, status). Nasce na entrada do orquestrador e não
sobrevive à chamada.

`RunResult` é o que o chamador recebe: imutável, serializável e com o
payload da causa original da falha separado dos erros agregados de
rollback.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Hashable, List, Optional, Tuple

from cascade_deploy.core.errors import CascadeErrorPayload
from cascade_deploy.core.exceptions import CascadeRunFailed
from cascade_deploy.core.state.snapshot import Snapshot
from cascade_deploy.core.state.system_state import HistoryEntry
from cascade_deploy.core.traceability.manifest import CascadeManifest
from cascade_deploy.core.units.unit import Unit


class RunStatus(str, Enum):
    PENDING = "pending"
    RUNNING = "running"
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    ROLLED_BACK = "rolled-back"


@dataclass
class Run:
    run_id: str
    queue: List[Unit]
    snapshot: Optional[Snapshot] = None
    deployed_ids: List[Hashable] = field(default_factory=list)
    status: RunStatus = RunStatus.PENDING
    error: Optional[CascadeErrorPayload] = None
    rollback_errors: List[CascadeErrorPayload] = field(default_factory=list)
    rolled_back_ids: List[Hashable] = field(default_factory=list)
    rollback_performed: bool = False
    payloads: Dict[Hashable, Dict[str, Any]] = field(default_factory=dict)

    def fail(self, error: CascadeErrorPayload) -> None:
        # a primeira causa prevalece
        if self.error is None:
            self.error = error
        self.status = RunStatus.FAILED


@dataclass(frozen=True)
class RunResult:
    """
    Resultado terminal de uma run.

    Campos:
        - history: histórico do SystemState ao final da run (após restore,
          em caso de rollback, igual ao do snapshot)
        - deployed_ids: units publicadas durante a run, em ordem
        - rolled_back_ids: units cujo `rollback()` foi invocado, em ordem
        - error: payload da causa original (None em sucesso)
        - rollback_errors: falhas agregadas da varredura de rollback
        - payloads: payload de deploy por unit
        - logs / warnings: log estruturado do RunContext
    """

    run_id: str
    status: RunStatus
    history: Tuple[HistoryEntry, ...]
    deployed_ids: Tuple[Hashable, ...]
    rolled_back_ids: Tuple[Hashable, ...] = ()
    error: Optional[CascadeErrorPayload] = None
    rollback_errors: Tuple[CascadeErrorPayload, ...] = ()
    payloads: Dict[Hashable, Dict[str, Any]] = field(default_factory=dict)
    manifest: Optional[CascadeManifest] = None
    logs: Tuple[Dict[str, Any], ...] = ()
    warnings: Dict[Hashable, List[str]] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return self.status == RunStatus.SUCCEEDED

    def raise_for_status(self) -> "RunResult":
        """Levanta `CascadeRunFailed` se a run não terminou com sucesso."""
        if self.ok:
            return self
        cause = self.error
        message = cause.message if cause is not None else f"Run terminou com status {self.status.value}"
        raise CascadeRunFailed(
            message=message,
            details={
                "run_id": self.run_id,
                "status": self.status.value,
                "rollback_error_count": len(self.rollback_errors),
            },
            hint=cause.hint if cause is not None else None,
            cause=cause,
            rollback_errors=list(self.rollback_errors),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "run_id": self.run_id,
            "status": self.status.value,
            "history": [e.to_dict() for e in self.history],
            "deployed_ids": list(self.deployed_ids),
            "rolled_back_ids": list(self.rolled_back_ids),
            "error": self.error.to_dict() if self.error else None,
            "rollback_errors": [e.to_dict() for e in self.rollback_errors],
            "payloads": {str(k): dict(v) for k, v in self.payloads.items()},
        }

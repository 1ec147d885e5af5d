# src/cascade_deploy/core/state/system_state.py
"""
Estado compartilhado do sistema durante a cascata.

Este módulo define o `SystemState`, o registro mutável lido e escrito
pelas units (via RunContext) e pelo orquestrador (health checks,
snapshot e restore).

Campos:
    - integrity: score de saúde, sempre limitado a [0, 100]
    - mode: token de status livre do domínio (stable, ascension, ascended...)
    - guard_count: quantidade de subsistemas de guarda ativos
    - broadcast_active: sinal externo de prontidão
    - history: entradas ordenadas {unit_id, timestamp, status}
    - last_backup: instante do último snapshot

Invariantes:
    - `integrity` é limitada à faixa válida após toda mutação; NaN vira o piso (0)
    - `history` é append-only durante a run; apenas o restore do
      snapshot a trunca

Limites explícitos:
    - Não possui lock interno: o chamador serializa runs concorrentes
    - Não persiste dados
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Hashable, Iterable, List, Mapping, Optional, Tuple


INTEGRITY_MIN = 0.0
INTEGRITY_MAX = 100.0

MODE_STABLE = "stable"
MODE_UPGRADING = "upgrading"
MODE_ASCENSION = "ascension"
MODE_ASCENDED = "ascended"
MODE_ABORTED = "aborted"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class DeploymentStatus(str, Enum):
    """Status de uma entrada do histórico de deploy."""

    DEPLOYED = "deployed"
    ROLLED_BACK = "rolled-back"


@dataclass(frozen=True)
class HistoryEntry:
    """Entrada imutável do histórico de deploy."""

    unit_id: Hashable
    timestamp: datetime
    status: DeploymentStatus = DeploymentStatus.DEPLOYED

    def to_dict(self) -> Dict[str, Any]:
        return {
            "unit_id": self.unit_id,
            "timestamp": self.timestamp.isoformat(),
            "status": self.status.value,
        }


@dataclass(frozen=True)
class StatusView:
    """Visão somente-leitura do estado atual, para dashboards externos."""

    integrity: float
    mode: str
    guard_count: int
    broadcast_active: bool
    deployed_features: Tuple[str, ...]
    last_backup: Optional[datetime] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "integrity": self.integrity,
            "mode": self.mode,
            "guard_count": self.guard_count,
            "broadcast_active": self.broadcast_active,
            "deployed_features": list(self.deployed_features),
            "last_backup": self.last_backup.isoformat() if self.last_backup else None,
        }


def clamp_integrity(value: float) -> float:
    value = float(value)
    if math.isnan(value):
        return INTEGRITY_MIN
    return max(INTEGRITY_MIN, min(INTEGRITY_MAX, value))


class SystemState:
    """
    Registro mutável de saúde/status compartilhado por uma run.

    A escrita em `integrity` passa sempre pelo clamp, seja por atribuição
    direta (`state.integrity = 120`) ou por `adjust_integrity`.
    """

    def __init__(
        self,
        *,
        integrity: float = INTEGRITY_MAX,
        mode: str = MODE_STABLE,
        guard_count: int = 4,
        broadcast_active: bool = True,
        history: Optional[Iterable[HistoryEntry]] = None,
        last_backup: Optional[datetime] = None,
    ) -> None:
        self._integrity = clamp_integrity(integrity)
        self.mode = mode
        self.guard_count = guard_count
        self.broadcast_active = broadcast_active
        self.history: List[HistoryEntry] = list(history or [])
        self.last_backup = last_backup

    def __repr__(self) -> str:
        return (
            f"SystemState(integrity={self._integrity!r}, mode={self.mode!r}, "
            f"guard_count={self.guard_count!r}, broadcast_active={self.broadcast_active!r}, "
            f"history={len(self.history)} entries)"
        )

    # -----------------------------
    # Integridade
    # -----------------------------
    @property
    def integrity(self) -> float:
        return self._integrity

    @integrity.setter
    def integrity(self, value: float) -> None:
        self._integrity = clamp_integrity(value)

    def adjust_integrity(self, delta: float) -> float:
        """Aplica `delta` à integridade e retorna o valor limitado resultante."""
        self.integrity = self._integrity + delta
        return self._integrity

    # -----------------------------
    # Histórico
    # -----------------------------
    def record(
        self,
        unit_id: Hashable,
        status: DeploymentStatus = DeploymentStatus.DEPLOYED,
        *,
        timestamp: Optional[datetime] = None,
    ) -> HistoryEntry:
        entry = HistoryEntry(unit_id=unit_id, timestamp=timestamp or _utcnow(), status=status)
        self.history.append(entry)
        return entry

    def is_deployed(self, unit_id: Hashable) -> bool:
        return any(
            e.unit_id == unit_id and e.status == DeploymentStatus.DEPLOYED
            for e in self.history
        )

    def deployed_ids(self) -> List[Hashable]:
        seen: List[Hashable] = []
        for e in self.history:
            if e.status == DeploymentStatus.DEPLOYED and e.unit_id not in seen:
                seen.append(e.unit_id)
        return seen

    # -----------------------------
    # Leitura externa
    # -----------------------------
    def status_view(self, feature_names: Optional[Mapping[Hashable, str]] = None) -> StatusView:
        names = feature_names or {}
        return StatusView(
            integrity=self._integrity,
            mode=self.mode,
            guard_count=self.guard_count,
            broadcast_active=self.broadcast_active,
            deployed_features=tuple(names.get(uid, str(uid)) for uid in self.deployed_ids()),
            last_backup=self.last_backup,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "integrity": self._integrity,
            "mode": self.mode,
            "guard_count": self.guard_count,
            "broadcast_active": self.broadcast_active,
            "history": [e.to_dict() for e in self.history],
            "last_backup": self.last_backup.isoformat() if self.last_backup else None,
        }

# src/cascade_deploy/core/state/snapshot.py
"""
Snapshot e Snapshot Store do estado do sistema.

O snapshot é uma cópia profunda e imutável do `SystemState`, capturada uma
única vez no início da run e devolvida literalmente no rollback.

Invariantes:
    - No máximo um snapshot vivo por store
    - `restore` reescreve todos os campos do estado e trunca o histórico
      ao comprimento do snapshot
    - O snapshot nunca expõe referências mutáveis ao estado original

Limites explícitos:
    - Não persiste o snapshot fora da memória do processo
    - Não serializa runs concorrentes (apenas recusa um segundo snapshot vivo)
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional, Tuple

from .system_state import HistoryEntry, SystemState


class SnapshotAlreadyLiveError(RuntimeError):
    """Outro snapshot já está vivo neste store (run concorrente não serializada)."""


class NoLiveSnapshotError(RuntimeError):
    """Restore solicitado sem snapshot vivo."""


@dataclass(frozen=True)
class Snapshot:
    integrity: float
    mode: str
    guard_count: int
    broadcast_active: bool
    history: Tuple[HistoryEntry, ...]
    last_backup: Optional[datetime]
    taken_at: datetime = field(compare=False)

    @classmethod
    def of(cls, state: SystemState, *, taken_at: Optional[datetime] = None) -> "Snapshot":
        # HistoryEntry é frozen: copiar a sequência já desacopla do estado
        return cls(
            integrity=state.integrity,
            mode=state.mode,
            guard_count=state.guard_count,
            broadcast_active=state.broadcast_active,
            history=tuple(state.history),
            last_backup=state.last_backup,
            taken_at=taken_at or datetime.now(timezone.utc),
        )

    def matches(self, state: SystemState) -> bool:
        """Indica se o estado é idêntico ao snapshot em todos os campos."""
        return (
            state.integrity == self.integrity
            and state.mode == self.mode
            and state.guard_count == self.guard_count
            and state.broadcast_active == self.broadcast_active
            and tuple(state.history) == self.history
            and state.last_backup == self.last_backup
        )

    def apply_to(self, state: SystemState) -> None:
        state.integrity = self.integrity
        state.mode = self.mode
        state.guard_count = self.guard_count
        state.broadcast_active = self.broadcast_active
        state.history[:] = list(self.history)
        state.last_backup = self.last_backup


class SnapshotStore:
    """Guarda o snapshot vivo da run corrente."""

    def __init__(self) -> None:
        self._current: Optional[Snapshot] = None

    @property
    def live(self) -> bool:
        return self._current is not None

    @property
    def current(self) -> Optional[Snapshot]:
        return self._current

    def capture(self, state: SystemState) -> Snapshot:
        """
        Captura o estado e marca `last_backup` com o instante da captura.

        `last_backup` é atualizado antes da cópia, de modo que o restore
        devolve exatamente o estado observado após a captura.

        Raises:
            SnapshotAlreadyLiveError: Se já existir um snapshot vivo.
        """
        if self._current is not None:
            raise SnapshotAlreadyLiveError(
                "Snapshot já capturado; runs concorrentes devem ser serializadas pelo chamador"
            )
        taken_at = datetime.now(timezone.utc)
        state.last_backup = taken_at
        self._current = Snapshot.of(state, taken_at=taken_at)
        return self._current

    def restore(self, state: SystemState) -> Snapshot:
        if self._current is None:
            raise NoLiveSnapshotError("Nenhum snapshot vivo para restaurar")
        self._current.apply_to(state)
        return self._current

    def discard(self) -> None:
        self._current = None

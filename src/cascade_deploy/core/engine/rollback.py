# src/cascade_deploy/core/engine/rollback.py
"""
Rollback Manager: caminho único de recuperação de uma run falha.

Algoritmo:
    1. Restaura o SystemState a partir do snapshot da run, literalmente
       (integridade, modo, guards, broadcast, histórico e last_backup)
    2. Percorre os ids publicados na ordem **inversa** do deploy,
       invocando `rollback(ctx)` de cada unit, com uma pausa fixa entre
       chamadas
    3. Falhas de `rollback()` são registradas e agregadas; a varredura
       nunca é interrompida
    4. Marca a run como `rolled-back`

Invariantes:
    - Invocado no máximo uma vez por run (`RollbackAlreadyPerformedError`)
    - Apenas units presentes no histórico da run recebem `rollback()`
    - Cada uma recebe exatamente uma chamada; ids sem unit conhecida geram
      warning e são pulados
    - O snapshot é descartado mesmo se a varredura for interrompida

Limites explícitos:
    - Não decide quando fazer rollback (isso é do orquestrador)
    - Não desfaz mutações feitas pelos próprios rollbacks; se o estado
      divergir do snapshot ao final, um warning é registrado no RunContext
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Hashable, List, Mapping

from cascade_deploy.core.errors import CascadeErrorPayload, rollback_step_failed
from cascade_deploy.core.events.sink import EventType
from cascade_deploy.core.exceptions import RollbackAlreadyPerformedError
from cascade_deploy.core.state.snapshot import SnapshotStore
from cascade_deploy.core.state.system_state import SystemState
from cascade_deploy.core.traceability.manifest import unit_rolled_back
from cascade_deploy.core.units.unit import Unit

from .run import Run, RunStatus
from .trail import EventTrail


@dataclass(frozen=True)
class RollbackReport:
    rolled_back_ids: List[Hashable] = field(default_factory=list)
    errors: List[CascadeErrorPayload] = field(default_factory=list)
    state_matches_snapshot: bool = True


class RollbackManager:
    def __init__(self, units_by_id: Mapping[Hashable, Unit], *, step_delay_s: float = 0.5):
        self.units_by_id = dict(units_by_id)
        self.step_delay_s = step_delay_s

    async def rollback(
        self,
        run: Run,
        state: SystemState,
        store: SnapshotStore,
        trail: EventTrail,
    ) -> RollbackReport:
        """
        Executa o rollback completo da run.

        Raises:
            RollbackAlreadyPerformedError: Se a run já passou por rollback.
        """
        if run.rollback_performed:
            raise RollbackAlreadyPerformedError(
                message=f"Rollback já executado para a run {run.run_id}",
                details={"run_id": run.run_id},
            )
        run.rollback_performed = True
        ctx = trail.ctx

        sweep = list(reversed(run.deployed_ids))
        trail.emit(EventType.ROLLBACK_STARTED, units=list(sweep))

        snapshot = store.restore(state) if store.live else None

        rolled_back: List[Hashable] = []
        errors: List[CascadeErrorPayload] = []
        try:
            for i, unit_id in enumerate(sweep):
                if i > 0 and self.step_delay_s > 0:
                    await asyncio.sleep(self.step_delay_s)
                await self._undo(unit_id, trail, rolled_back, errors)
        finally:
            # uma varredura interrompida não pode deixar o snapshot vivo
            store.discard()

        matches = snapshot.matches(state) if snapshot is not None else True
        if not matches:
            ctx.add_warning(
                message="SystemState divergiu do snapshot após os rollbacks das units",
            )

        run.rolled_back_ids = list(rolled_back)
        run.rollback_errors = list(errors)
        run.status = RunStatus.ROLLED_BACK

        trail.emit(
            EventType.ROLLBACK_COMPLETED,
            units=list(rolled_back),
            errors=[e.to_dict() for e in errors],
        )
        return RollbackReport(rolled_back_ids=rolled_back, errors=errors, state_matches_snapshot=matches)

    async def _undo(
        self,
        unit_id: Hashable,
        trail: EventTrail,
        rolled_back: List[Hashable],
        errors: List[CascadeErrorPayload],
    ) -> None:
        unit = self.units_by_id.get(unit_id)
        if unit is None:
            trail.ctx.add_warning(
                message=f"Unit {unit_id!r} publicada sem definição conhecida; rollback não invocado",
                unit_id=unit_id,
            )
            return

        rolled_back.append(unit_id)
        try:
            await unit.rollback(trail.ctx)
        except Exception as exc:
            error = rollback_step_failed(
                unit_id=unit_id,
                exc_type=exc.__class__.__name__,
                exc_message=str(exc) or None,
            )
            errors.append(error)
            unit_rolled_back(
                trail.manifest,
                unit_id=unit_id,
                ts=datetime.now(timezone.utc),
                error=error.to_dict(),
            )
            trail.emit(EventType.ROLLBACK_STEP_FAILED, unit_id=unit_id, error=error.to_dict())
            return
        unit_rolled_back(trail.manifest, unit_id=unit_id, ts=datetime.now(timezone.utc))

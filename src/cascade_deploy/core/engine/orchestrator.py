# src/cascade_deploy/core/engine/orchestrator.py
"""
Orquestrador da cascata de deploy.

Responsável por:
    - validar o grafo de units (planner) antes de qualquer mutação
    - validar pré-condições de saúde
    - capturar o snapshot e executar as units sequencialmente
    - aplicar timeout, pós-condições e piso de integridade por unit
    - convergir qualquer falha do loop para o Rollback Manager
    - expor `get_status()` para dashboards externos

Decisões arquiteturais:
    - Erros de configuração e de pré-condição são levantados como exceção
      (nenhum estado mutado, nenhum rollback)
    - Falhas do loop principal NÃO são levantadas: a run termina com status
      `rolled-back` e o `RunResult` carrega a causa original e os erros de
      rollback; `RunResult.raise_for_status()` converte em exceção única
    - Execução estritamente sequencial; concorrência existe apenas dentro
      do Timeout Executor
    - Cancelamento via `cancel` é observado entre units, nunca no meio de um
      deploy; cancelar a própria task da run reverte e relança `CancelledError`
    - Falha de pós-condição é registrada à parte (`unit.postcondition_failed`),
      sem sobrescrever a conclusão da unit

Limites explícitos:
    - Não serializa runs concorrentes (responsabilidade do chamador)
    - Não persiste estado nem Manifest em disco
"""

from __future__ import annotations

import asyncio
import uuid
from datetime import datetime, timezone
from typing import Dict, Hashable, Iterable, Optional

from cascade_deploy import __version__
from cascade_deploy.core.config.hashing import compute_config_hash, compute_graph_hash
from cascade_deploy.core.config.run_config import RunConfig
from cascade_deploy.core.errors import precondition_failed, unit_deploy_failed
from cascade_deploy.core.events.sink import EventSink, EventType
from cascade_deploy.core.exceptions import (
    CascadeConfigurationError,
    CascadeException,
    IntegrityFloorError,
    InternalOrderingError,
    PostconditionFailedError,
    PreconditionFailedError,
    RunCancelledError,
    UnitDeployError,
    exception_to_error,
)
from cascade_deploy.core.state.snapshot import SnapshotStore
from cascade_deploy.core.state.system_state import StatusView, SystemState
from cascade_deploy.core.traceability.manifest import (
    create_manifest,
    set_run_status,
    unit_failed,
    unit_finished,
    unit_postcondition_failed,
    unit_started,
)
from cascade_deploy.core.units.registry import CascadeGraphError
from cascade_deploy.core.units.unit import DeployOutcome, Unit, feature_name

from .context import RunContext
from .health import HealthValidator
from .planner import plan_cascade
from .rollback import RollbackManager
from .run import Run, RunResult, RunStatus
from .timeout import run_with_timeout
from .trail import EventTrail


class CascadeOrchestrator:
    """Controla uma cascata contra um único SystemState."""

    def __init__(self, state: SystemState, *, sink: Optional[EventSink] = None):
        self.state = state
        self.sink = sink if sink is not None else EventSink()
        self.store = SnapshotStore()
        self._features: Dict[Hashable, str] = {}

    # ------------------------------------------------------------------
    # Leitura externa
    # ------------------------------------------------------------------
    def get_status(self) -> StatusView:
        return self.state.status_view(self._features)

    # ------------------------------------------------------------------
    # Execução
    # ------------------------------------------------------------------
    async def run_cascade(
        self,
        units: Iterable[Unit],
        config: Optional[RunConfig] = None,
        *,
        cancel: Optional[asyncio.Event] = None,
    ) -> RunResult:
        """
        Executa a cascata completa.

        Raises:
            CascadeConfigurationError: Grafo inválido (ciclo, dependência
                inexistente, id inválido ou duplicado).
            PreconditionFailedError: Estado inicial fora das condições de saúde.
        """
        config = config if config is not None else RunConfig()
        units = list(units)

        try:
            ordered = plan_cascade(units)
        except CascadeGraphError as exc:
            raise CascadeConfigurationError(
                message=str(exc),
                details={"error_class": exc.__class__.__name__},
                hint="Corrija as dependências declaradas nas units antes de reexecutar.",
            ) from exc

        for unit in ordered:
            self._features[unit.id] = feature_name(unit)

        started_at = datetime.now(timezone.utc)
        run = Run(run_id=uuid.uuid4().hex, queue=ordered)
        ctx = RunContext(run_id=run.run_id, created_at=started_at, config=config, state=self.state)
        manifest = create_manifest(
            run_id=run.run_id,
            started_at=started_at,
            version=__version__,
            config_hash=compute_config_hash(config.to_dict()),
            graph_hash=compute_graph_hash(units),
        )
        trail = EventTrail(sink=self.sink, manifest=manifest, ctx=ctx)
        health = HealthValidator(config)

        trail.emit(EventType.RUN_STARTED, units=[u.id for u in ordered])

        pre = health.check_preconditions(self.state)
        if not pre.passed:
            error = precondition_failed(failures=pre.failures, state=self.state.to_dict())
            run.fail(error)
            set_run_status(manifest, status=RunStatus.FAILED.value, ts=datetime.now(timezone.utc))
            trail.emit(EventType.RUN_FAILED, error=error.to_dict())
            raise PreconditionFailedError(
                message="; ".join(pre.messages),
                details=dict(error.details),
                hint=error.hint,
            )

        run.snapshot = self.store.capture(self.state)
        run.status = RunStatus.RUNNING
        set_run_status(manifest, status=RunStatus.RUNNING.value, ts=datetime.now(timezone.utc))

        in_flight: Optional[Hashable] = None
        try:
            for i, unit in enumerate(ordered):
                if i > 0 and config.inter_unit_delay_s > 0:
                    await asyncio.sleep(config.inter_unit_delay_s)

                if cancel is not None and cancel.is_set():
                    raise RunCancelledError(
                        message="Run cancelada pelo chamador",
                        details={"next_unit": unit.id, "deployed": list(run.deployed_ids)},
                    )

                missing = [d for d in unit.dependencies if d not in run.deployed_ids]
                if missing:
                    raise InternalOrderingError(
                        message=f"Unit {unit.id!r} alcançou a execução sem dependências publicadas",
                        details={"unit_id": unit.id, "missing": missing},
                        hint="Ordem topológica inconsistente; reporte como bug do planner.",
                    )

                if not health.integrity_ok(self.state):
                    raise IntegrityFloorError(
                        message=f"Integridade {self.state.integrity} abaixo do piso antes da unit {unit.id!r}",
                        details={
                            "unit_id": unit.id,
                            "integrity": self.state.integrity,
                            "min_integrity": config.min_integrity,
                        },
                    )

                in_flight = unit.id
                unit_started(manifest, unit_id=unit.id, name=unit.name, ts=datetime.now(timezone.utc))
                trail.emit(EventType.UNIT_STARTED, unit_id=unit.id)

                outcome = await self._deploy(unit, ctx, config)

                self.state.record(unit.id)
                run.deployed_ids.append(unit.id)
                run.payloads[unit.id] = dict(outcome.payload)
                unit_finished(
                    manifest,
                    unit_id=unit.id,
                    ts=datetime.now(timezone.utc),
                    payload=outcome.payload,
                )
                trail.emit(EventType.UNIT_COMPLETED, unit_id=unit.id)
                in_flight = None

                post = health.check_postconditions(self.state)
                if not post.passed:
                    raise PostconditionFailedError(
                        message=f"Pós-condições falharam após a unit {unit.id!r}: " + "; ".join(post.messages),
                        details={"unit_id": unit.id, "failures": list(post.failures)},
                        hint="A unit deixou o sistema fora das condições de saúde.",
                    )
        except asyncio.CancelledError:
            cancelled = RunCancelledError(
                message="Task da run cancelada durante a execução",
                details={"unit_id": in_flight, "deployed": list(run.deployed_ids)},
            )
            await self._fail(run, ctx, trail, cancelled, in_flight)
            raise
        except Exception as exc:
            await self._fail(run, ctx, trail, exc, in_flight)
        else:
            self.store.discard()
            run.status = RunStatus.SUCCEEDED
            set_run_status(manifest, status=run.status.value, ts=datetime.now(timezone.utc))
            trail.emit(EventType.RUN_COMPLETED, history=[e.to_dict() for e in self.state.history])

        return RunResult(
            run_id=run.run_id,
            status=run.status,
            history=tuple(self.state.history),
            deployed_ids=tuple(run.deployed_ids),
            rolled_back_ids=tuple(run.rolled_back_ids),
            error=run.error,
            rollback_errors=tuple(run.rollback_errors),
            payloads=dict(run.payloads),
            manifest=manifest,
            logs=tuple(ctx.events),
            warnings={k: list(v) for k, v in ctx.warnings.items()},
        )

    async def _deploy(self, unit: Unit, ctx: RunContext, config: RunConfig) -> DeployOutcome:
        try:
            outcome = await run_with_timeout(unit.deploy(ctx), config.unit_timeout_s)
        except CascadeException as exc:
            exc.details.setdefault("unit_id", unit.id)
            raise
        except Exception as exc:
            error = unit_deploy_failed(unit_id=unit.id, reason=str(exc) or None, exc_type=exc.__class__.__name__)
            raise UnitDeployError(message=error.message, details=error.details, hint=error.hint) from exc

        if not isinstance(outcome, DeployOutcome):
            raise UnitDeployError(
                message=f"Deploy da unit {unit.id!r} não retornou DeployOutcome",
                details={"unit_id": unit.id, "returned": type(outcome).__name__},
            )
        if not outcome.success:
            error = unit_deploy_failed(unit_id=unit.id, reason=outcome.error)
            raise UnitDeployError(message=error.message, details=error.details, hint=error.hint)
        return outcome

    async def _fail(
        self,
        run: Run,
        ctx: RunContext,
        trail: EventTrail,
        exc: Exception,
        in_flight: Optional[Hashable],
    ) -> None:
        error = exception_to_error(exc, unit_id=in_flight)
        run.fail(error)
        now = datetime.now(timezone.utc)
        if in_flight is not None:
            unit_failed(trail.manifest, unit_id=in_flight, ts=now, error=error.to_dict())
            trail.emit(EventType.UNIT_FAILED, unit_id=in_flight, error=error.to_dict())
        elif isinstance(exc, PostconditionFailedError):
            unit_id = exc.details.get("unit_id")
            unit_postcondition_failed(trail.manifest, unit_id=unit_id, ts=now, error=error.to_dict())
            trail.emit(EventType.UNIT_POSTCONDITION_FAILED, unit_id=unit_id, error=error.to_dict())
        trail.emit(EventType.RUN_FAILED, error=error.to_dict())

        units_by_id: Dict[Hashable, Unit] = {u.id: u for u in run.queue}
        manager = RollbackManager(units_by_id, step_delay_s=ctx.config.rollback_step_delay_s)
        await manager.rollback(run, self.state, self.store, trail)
        set_run_status(trail.manifest, status=run.status.value, ts=datetime.now(timezone.utc))

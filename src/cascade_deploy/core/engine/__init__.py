# src/cascade_deploy/core/engine/__init__.py
"""
Engine do Cascade Deploy.

Este pacote contém a implementação responsável por **planejar**,
**executar** e, quando necessário, **desfazer** uma cascata de units.

Componentes principais:
    - planner      → ordenação topológica estável e validações estruturais
    - timeout      → corrida entre o deploy de uma unit e seu prazo
    - health       → predicados de saúde (pré e pós-condições)
    - rollback     → restauração do snapshot e varredura reversa
    - orchestrator → loop de controle da run e `get_status()`
    - context      → RunContext (estado, config e log estruturado da run)
    - trail        → registro único de eventos (Sink + Manifest + log)

Invariantes:
    - Units só são executadas após suas dependências
    - Cada unit é executada no máximo uma vez por run
    - Toda falha do loop principal converge para um único rollback

Limites explícitos:
    - Não define units de domínio (ver core.units.catalog)
    - Não persiste resultados automaticamente
"""

from .context import RunContext
from .health import HealthReport, HealthValidator
from .orchestrator import CascadeOrchestrator
from .planner import CycleDetectedError, UnknownDependencyError, plan_cascade
from .rollback import RollbackManager, RollbackReport
from .run import Run, RunResult, RunStatus
from .timeout import run_with_timeout
from .trail import EventTrail

__all__ = [
    "RunContext",
    "HealthReport",
    "HealthValidator",
    "CascadeOrchestrator",
    "CycleDetectedError",
    "UnknownDependencyError",
    "plan_cascade",
    "RollbackManager",
    "RollbackReport",
    "Run",
    "RunResult",
    "RunStatus",
    "run_with_timeout",
    "EventTrail",
]

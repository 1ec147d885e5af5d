# src/cascade_deploy/__init__.py
"""
Cascade Deploy: orquestrador de deploy em cascata de unidades interdependentes.

Este pacote raiz define o namespace público do Cascade Deploy, um loop de
controle que publica uma sequência de unidades (features) contra um estado
de sistema compartilhado e mutável.

Princípios centrais:
    - A cascata é um DAG explícito de Units
    - A ordem de execução é determinística (ordem de entrada nos empates)
    - Toda falha converge para um único caminho de rollback
    - Eventos e histórico formam a trilha de auditoria da run

Arquitetura em alto nível:
    - core.config       → carregamento, merge, hashing e RunConfig
    - core.state        → SystemState, Snapshot e SnapshotStore
    - core.units        → protocolo Unit, registry e catálogo embutido
    - core.engine       → planner, timeout, health, rollback e orquestrador
    - core.events       → Event Sink tipado
    - core.traceability → Manifest da run

Limites explícitos:
    - Não persiste estado em armazenamento durável
    - Não distribui execução entre máquinas
    - Não renderiza eventos (UI e efeitos são consumidores externos)
"""

__version__ = "0.1.0"

from .core.engine import CascadeOrchestrator, RunResult, RunStatus
from .core.config import RunConfig, load_config
from .core.state import SystemState
from .core.units import DeployOutcome, FunctionUnit

__all__ = [
    "CascadeOrchestrator",
    "RunResult",
    "RunStatus",
    "RunConfig",
    "load_config",
    "SystemState",
    "DeployOutcome",
    "FunctionUnit",
]

"""
Contrato canônico de Unit do Cascade Deploy.

Uma Unit é a menor parte implantável da cascata: uma feature nomeada,
com dependências explícitas e um par de ações assíncronas
deploy/rollback.

Responsabilidades de uma Unit:
    - executar seu deploy, podendo mutar o SystemState via `ctx.state`
    - desfazer seus efeitos em `rollback`, inclusive após deploy parcial
      (timeout ou exceção no meio do caminho)
    - reportar sucesso/falha e um payload livre em `DeployOutcome`

Princípios fundamentais:
    - Units não conhecem o orquestrador nem o planner
    - Units não controlam a ordem de execução
    - Estado compartilhado é acessado apenas via RunContext
    - Conformidade é garantida por duck typing (@runtime_checkable)

Invariantes:
    - `id` é único e estável dentro de uma cascata
    - `deploy` é chamado no máximo uma vez por run
    - `rollback` só é chamado para units presentes no histórico da run
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import (
    TYPE_CHECKING,
    Any,
    Awaitable,
    Callable,
    Dict,
    Hashable,
    List,
    Optional,
    Protocol,
    runtime_checkable,
)

if TYPE_CHECKING:
    from cascade_deploy.core.engine.context import RunContext


@dataclass(frozen=True)
class DeployOutcome:
    """
    Resultado imutável do deploy de uma Unit.

    Campos:
        - success: a ação reportou sucesso
        - payload: dados livres (ex.: features habilitadas)
        - error: motivo textual quando `success` é False
    """

    success: bool
    payload: Dict[str, Any] = field(default_factory=dict)
    error: Optional[str] = None

    @classmethod
    def ok(cls, **payload: Any) -> "DeployOutcome":
        return cls(success=True, payload=dict(payload))

    @classmethod
    def failed(cls, error: str, **payload: Any) -> "DeployOutcome":
        return cls(success=False, payload=dict(payload), error=error)


@runtime_checkable
class Unit(Protocol):
    """
    Contrato mínimo que qualquer Unit deve satisfazer.

    Atributos obrigatórios:
        - id: identificador único (str ou int)
        - name, description: metadados de exibição, fora da lógica de controle
        - dependencies: ids que precisam estar publicados antes desta unit
        - feature: nome da feature exposta em `GetStatus`
    """

    id: Hashable
    name: str
    description: str
    dependencies: List[Hashable]
    feature: str

    async def deploy(self, ctx: "RunContext") -> DeployOutcome:
        ...

    async def rollback(self, ctx: "RunContext") -> None:
        ...


DeployAction = Callable[["RunContext"], Awaitable[DeployOutcome]]
RollbackAction = Callable[["RunContext"], Awaitable[Any]]


async def _noop_rollback(ctx: "RunContext") -> None:
    return None


@dataclass
class FunctionUnit:
    """
    Unit concreta que delega deploy/rollback a funções assíncronas.

    Substitui o despacho por id com closures presas a um objeto global:
    cada unit carrega suas próprias ações, e o orquestrador as trata de
    forma uniforme.
    """

    id: Hashable
    deploy_action: DeployAction
    rollback_action: RollbackAction = _noop_rollback
    dependencies: List[Hashable] = field(default_factory=list)
    name: str = ""
    description: str = ""
    feature: str = ""

    def __post_init__(self) -> None:
        self.dependencies = list(self.dependencies or [])
        if not self.name:
            self.name = str(self.id)
        if not self.feature:
            self.feature = str(self.id)

    async def deploy(self, ctx: "RunContext") -> DeployOutcome:
        return await self.deploy_action(ctx)

    async def rollback(self, ctx: "RunContext") -> None:
        await self.rollback_action(ctx)


def feature_name(unit: Any) -> str:
    """Nome de feature da unit, com fallback para `str(unit.id)`."""
    name = getattr(unit, "feature", None)
    return name if isinstance(name, str) and name else str(getattr(unit, "id", ""))

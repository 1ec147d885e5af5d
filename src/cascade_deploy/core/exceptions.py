"""
Cascade Deploy: Canonical Exceptions (v1)

Este módulo define as exceções tipadas internas do Cascade Deploy.

Objetivo:
- Permitir que Units/Engine levantem exceções semânticas tipadas
- Mapear cada exceção de forma determinística para CascadeErrorPayload
- Evitar ValueError/RuntimeError genéricos no loop da cascata

Regras:
- Exceções carregam apenas dados estruturados (serializáveis) em `details`.
- Cada classe declara o código estável (`error_type`) do catálogo em errors.py.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, ClassVar, Dict, List, Optional

from .errors import (
    CASCADE_CONFIGURATION_ERROR,
    CASCADE_INTEGRITY_FLOOR_BREACHED,
    CASCADE_INTERNAL_ORDERING_ERROR,
    CASCADE_PRECONDITION_FAILED,
    ENGINE_EXECUTION_ERROR,
    ROLLBACK_STEP_FAILED,
    RUN_CANCELLED,
    UNIT_DEPLOY_FAILED,
    UNIT_POSTCONDITION_FAILED,
    UNIT_TIMEOUT,
    CascadeErrorPayload,
    engine_execution_error,
)


@dataclass(eq=False)
class CascadeException(Exception):
    """Base class para exceções internas do Cascade Deploy.

    Importante:
    - Sempre carregar dados estruturados em `details`
    - Mensagem deve ser curta e humana
    """

    error_type: ClassVar[str] = ENGINE_EXECUTION_ERROR

    message: str
    details: Dict[str, Any] = field(default_factory=dict)
    hint: Optional[str] = None

    def __str__(self) -> str:
        return self.message

    def to_error(self) -> CascadeErrorPayload:
        return CascadeErrorPayload(
            type=self.error_type,
            message=self.message,
            details=dict(self.details),
            hint=self.hint,
        )


# ---------------------------------------------------------------------------
# Antes da execução
# ---------------------------------------------------------------------------

@dataclass(eq=False)
class CascadeConfigurationError(CascadeException):
    """Grafo de units inválido (ciclo, dependência ausente, id duplicado)."""

    error_type: ClassVar[str] = CASCADE_CONFIGURATION_ERROR


@dataclass(eq=False)
class PreconditionFailedError(CascadeException):
    """Estado do sistema não atende as pré-condições de saúde."""

    error_type: ClassVar[str] = CASCADE_PRECONDITION_FAILED


# ---------------------------------------------------------------------------
# Loop principal
# ---------------------------------------------------------------------------

@dataclass(eq=False)
class InternalOrderingError(CascadeException):
    """Unit chegou à execução com dependências não publicadas (bug do planner)."""

    error_type: ClassVar[str] = CASCADE_INTERNAL_ORDERING_ERROR


@dataclass(eq=False)
class IntegrityFloorError(CascadeException):
    """Integridade abaixo do piso antes de iniciar uma unit."""

    error_type: ClassVar[str] = CASCADE_INTEGRITY_FLOOR_BREACHED


@dataclass(eq=False)
class UnitTimeoutError(CascadeException):
    """O prazo venceu antes da ação de deploy terminar."""

    error_type: ClassVar[str] = UNIT_TIMEOUT


@dataclass(eq=False)
class UnitDeployError(CascadeException):
    """A ação de deploy reportou falha ou levantou exceção."""

    error_type: ClassVar[str] = UNIT_DEPLOY_FAILED


@dataclass(eq=False)
class PostconditionFailedError(CascadeException):
    """Deploy concluído, mas deixou o sistema fora das condições de saúde."""

    error_type: ClassVar[str] = UNIT_POSTCONDITION_FAILED


@dataclass(eq=False)
class RunCancelledError(CascadeException):
    """Sinal de cancelamento observado entre units."""

    error_type: ClassVar[str] = RUN_CANCELLED


# ---------------------------------------------------------------------------
# Rollback
# ---------------------------------------------------------------------------

@dataclass(eq=False)
class RollbackStepError(CascadeException):
    """Rollback de uma unit falhou (agregado, não interrompe a varredura)."""

    error_type: ClassVar[str] = ROLLBACK_STEP_FAILED


@dataclass(eq=False)
class RollbackAlreadyPerformedError(CascadeException):
    """Rollback invocado uma segunda vez para a mesma run."""


# ---------------------------------------------------------------------------
# Resultado terminal
# ---------------------------------------------------------------------------

@dataclass(eq=False)
class CascadeRunFailed(CascadeException):
    """Erro terminal único entregue ao chamador por `RunResult.raise_for_status`.

    Carrega o payload da causa original e os payloads agregados das
    falhas de rollback, se houver.
    """

    cause: Optional[CascadeErrorPayload] = None
    rollback_errors: List[CascadeErrorPayload] = field(default_factory=list)

    def to_error(self) -> CascadeErrorPayload:
        if self.cause is not None:
            return self.cause
        return super().to_error()


def exception_to_error(exc: BaseException, *, unit_id: Any = None) -> CascadeErrorPayload:
    """Converte exceções em CascadeErrorPayload (serializável, acionável).

    Regras:
    - CascadeException: já vem com message/details/hint e código estável.
    - Outras exceções: encapsular como ENGINE_EXECUTION_ERROR sem stack trace.
    """
    if isinstance(exc, CascadeException):
        return exc.to_error()

    return engine_execution_error(
        unit_id=unit_id,
        exc_type=exc.__class__.__name__,
        exc_message=str(exc) or None,
    )

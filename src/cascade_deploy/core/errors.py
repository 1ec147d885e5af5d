"""
Cascade Deploy: Canonical Error Structures (v1)

Este módulo define o padrão canônico de erros do Cascade Deploy.
Erros são artefatos de domínio e fazem parte do contrato operacional
do orquestrador, devendo ser:

- explícitos
- serializáveis
- rastreáveis

O `RunResult` carrega sempre o payload da causa original da falha e,
separadamente, os payloads agregados de falhas de rollback.
"""

from __future__ import annotations

from dataclasses import dataclass, asdict
from typing import Any, Dict, Optional


# ---------------------------------------------------------------------------
# Payload canônico
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class CascadeErrorPayload:
    """
    Payload canônico de erro do Cascade Deploy.

    Campos:
    - type: código estável do erro (não é texto livre)
    - message: mensagem curta, humana e objetiva
    - details: dados estruturados relevantes para diagnóstico
    - hint: ação sugerida ao operador (onde corrigir)
    """

    type: str
    message: str
    details: Dict[str, Any]
    hint: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Retorna representação serializável do erro."""
        return asdict(self)


# ---------------------------------------------------------------------------
# Catálogo canônico de tipos de erro (v1)
# ---------------------------------------------------------------------------

# Antes da execução (nenhum estado mutado)
CASCADE_CONFIGURATION_ERROR = "CASCADE_CONFIGURATION_ERROR"
CASCADE_PRECONDITION_FAILED = "CASCADE_PRECONDITION_FAILED"

# Loop principal (dispara rollback)
CASCADE_INTERNAL_ORDERING_ERROR = "CASCADE_INTERNAL_ORDERING_ERROR"
CASCADE_INTEGRITY_FLOOR_BREACHED = "CASCADE_INTEGRITY_FLOOR_BREACHED"
UNIT_TIMEOUT = "UNIT_TIMEOUT"
UNIT_DEPLOY_FAILED = "UNIT_DEPLOY_FAILED"
UNIT_POSTCONDITION_FAILED = "UNIT_POSTCONDITION_FAILED"
RUN_CANCELLED = "RUN_CANCELLED"

# Rollback (agregado, nunca interrompe a varredura)
ROLLBACK_STEP_FAILED = "ROLLBACK_STEP_FAILED"

# Fallback genérico
ENGINE_EXECUTION_ERROR = "ENGINE_EXECUTION_ERROR"


# ---------------------------------------------------------------------------
# Helpers de fábrica
# ---------------------------------------------------------------------------

def configuration_error(
    *,
    message: str = "Grafo de dependências inválido",
    details: Optional[Dict[str, Any]] = None,
    hint: str = "Corrija as dependências declaradas nas units (ids inexistentes ou ciclos) antes de reexecutar.",
) -> CascadeErrorPayload:
    return CascadeErrorPayload(
        type=CASCADE_CONFIGURATION_ERROR,
        message=message,
        details=details or {},
        hint=hint,
    )


def precondition_failed(
    *,
    failures: list,
    state: Dict[str, Any],
    hint: str = "Restaure a saúde do sistema (integridade, guards, broadcast) antes de iniciar a cascata.",
) -> CascadeErrorPayload:
    return CascadeErrorPayload(
        type=CASCADE_PRECONDITION_FAILED,
        message="Pré-condições de saúde não atendidas",
        details={"failures": list(failures), "state": state},
        hint=hint,
    )


def unit_timeout(
    *,
    unit_id: Any,
    limit_s: float,
    hint: str = "Aumente unit_timeout_s ou investigue a lentidão do deploy da unit.",
) -> CascadeErrorPayload:
    return CascadeErrorPayload(
        type=UNIT_TIMEOUT,
        message=f"Deploy da unit {unit_id} excedeu o tempo limite",
        details={"unit_id": unit_id, "limit_s": limit_s},
        hint=hint,
    )


def unit_deploy_failed(
    *,
    unit_id: Any,
    reason: Optional[str] = None,
    exc_type: Optional[str] = None,
) -> CascadeErrorPayload:
    return CascadeErrorPayload(
        type=UNIT_DEPLOY_FAILED,
        message=f"Deploy da unit {unit_id} falhou",
        details={"unit_id": unit_id, "reason": reason, "exc_type": exc_type},
        hint="Verifique o log da run para a unit indicada.",
    )


def rollback_step_failed(
    *,
    unit_id: Any,
    exc_type: Optional[str] = None,
    exc_message: Optional[str] = None,
) -> CascadeErrorPayload:
    return CascadeErrorPayload(
        type=ROLLBACK_STEP_FAILED,
        message=f"Rollback da unit {unit_id} falhou",
        details={"unit_id": unit_id, "exc_type": exc_type, "exc_message": exc_message},
        hint="A varredura de rollback continuou; revise manualmente os efeitos desta unit.",
    )


def engine_execution_error(
    *,
    unit_id: Any = None,
    exc_type: Optional[str] = None,
    exc_message: Optional[str] = None,
) -> CascadeErrorPayload:
    return CascadeErrorPayload(
        type=ENGINE_EXECUTION_ERROR,
        message="Falha inesperada durante a execução da cascata",
        details={"unit_id": unit_id, "exc_type": exc_type, "exc_message": exc_message},
        hint="Verifique o log da run. Nenhum fallback é aplicado automaticamente.",
    )

# tests/conftest.py
"""
Fixtures compartilhados para testes do Cascade Deploy.

Este módulo define fixtures reutilizáveis que fornecem:
- configurações mínimas e determinísticas (YAML e RunConfig)
- um SystemState saudável e isolado por teste
- contexto de execução controlado (RunContext)
- fábrica de units que registram chamadas de deploy/rollback

Decisões arquiteturais:
    - Delays do RunConfig são zerados para manter os testes rápidos
    - Units de teste utilizam FunctionUnit, sem herança
    - Imports do core são realizados de forma lazy para
      melhorar a clareza de erros durante falhas
    - Código assíncrono é dirigido por `asyncio.run` dentro de testes síncronos

Invariantes:
    - Nenhuma fixture executa uma cascata real
    - Nenhuma fixture realiza I/O
    - Cada teste recebe um SystemState novo

Limites explícitos:
    - Não substituir testes de integração
    - Não conter lógica condicional complexa
"""

import asyncio
from datetime import datetime, timezone

import pytest


# =====================================================
# Config fixtures
# =====================================================

@pytest.fixture
def cascade_defaults_yaml() -> str:
    """
    YAML de defaults semelhante ao `config/cascade.defaults.yaml` do projeto.

    Returns:
        str: Conteúdo YAML representando a configuração base.
    """
    return """\
cascade:
  min_integrity: 85
  min_guards: 3
  unit_timeout_s: 30.0
  inter_unit_delay_s: 1.0
  rollback_step_delay_s: 0.5
  symmetric_postconditions: false
"""


@pytest.fixture
def cascade_local_yaml() -> str:
    """YAML de override local: zera as pausas e encurta o timeout."""
    return """\
cascade:
  unit_timeout_s: 2
  inter_unit_delay_s: 0
  rollback_step_delay_s: 0
"""


@pytest.fixture
def fast_config():
    """
    RunConfig com as políticas padrão de saúde e sem pausas de estabilização.

    Returns:
        RunConfig: min_integrity=85, min_guards=3, timeout de 1s, delays zerados.
    """
    from cascade_deploy.core.config.run_config import RunConfig

    return RunConfig(
        min_integrity=85,
        min_guards=3,
        unit_timeout_s=1.0,
        inter_unit_delay_s=0,
        rollback_step_delay_s=0,
    )


# =====================================================
# State / context fixtures
# =====================================================

@pytest.fixture
def healthy_state():
    """SystemState saudável: integridade 100, 4 guards, broadcast ativo."""
    from cascade_deploy.core.state.system_state import SystemState

    return SystemState(integrity=100, mode="stable", guard_count=4, broadcast_active=True)


@pytest.fixture
def dummy_ctx(fast_config, healthy_state):
    """
    RunContext determinístico para testes de units e do rollback manager.

    `run_id` e `created_at` são fixos para garantir determinismo.
    """
    from cascade_deploy.core.engine.context import RunContext

    return RunContext(
        run_id="run-test-001",
        created_at=datetime(2026, 1, 16, 0, 0, 0, tzinfo=timezone.utc),
        config=fast_config,
        state=healthy_state,
        meta={"source": "pytest"},
    )


# =====================================================
# Unit fixtures
# =====================================================

@pytest.fixture
def calls():
    """Registro ordenado de chamadas: tuplas ("deploy" | "rollback", unit_id)."""
    return []


@pytest.fixture
def make_unit(calls):
    """
    Fábrica de units que registram suas chamadas em `calls`.

    Parâmetros da fábrica:
        - unit_id, deps: identidade e dependências
        - delta: ajuste de integridade aplicado pelo deploy
        - fail: deploy reporta falha (DeployOutcome.failed)
        - raises: exceção levantada pelo deploy
        - hang: deploy dorme `hang` segundos antes de concluir
        - rollback_raises: exceção levantada pelo rollback
        - state_effect: callable(state) aplicado pelo deploy

    Returns:
        Callable[..., FunctionUnit]
    """
    from cascade_deploy.core.units.unit import DeployOutcome, FunctionUnit

    def _make(
        unit_id,
        deps=None,
        *,
        delta=0.0,
        fail=False,
        raises=None,
        hang=None,
        rollback_raises=None,
        state_effect=None,
        feature=None,
    ):
        async def deploy(ctx):
            calls.append(("deploy", unit_id))
            if delta:
                ctx.state.adjust_integrity(delta)
            if state_effect is not None:
                state_effect(ctx.state)
            if hang is not None:
                await asyncio.sleep(hang)
            if raises is not None:
                raise raises
            if fail:
                return DeployOutcome.failed(f"unit {unit_id} reported failure")
            return DeployOutcome.ok(unit=unit_id)

        async def rollback(ctx):
            calls.append(("rollback", unit_id))
            if rollback_raises is not None:
                raise rollback_raises

        return FunctionUnit(
            id=unit_id,
            deploy_action=deploy,
            rollback_action=rollback,
            dependencies=list(deps or []),
            name=f"Unit {unit_id}",
            feature=feature or "",
        )

    return _make

# tests/core/engine/test_health_validator.py
"""
Testes do Health Validator.

Pré-condições verificam integridade, guards e broadcast. Pós-condições
verificam apenas o piso de integridade, a menos que
`symmetric_postconditions` esteja ligado.
"""

import pytest

try:
    from cascade_deploy.core.config.run_config import RunConfig
    from cascade_deploy.core.engine.health import HealthValidator
    from cascade_deploy.core.state.system_state import SystemState
except Exception as e:  # noqa: BLE001
    RunConfig = None
    HealthValidator = None
    SystemState = None
    _IMPORT_ERR = e
else:
    _IMPORT_ERR = None


def _require_imports():
    if _IMPORT_ERR is not None:
        pytest.fail(
            "Missing health validator. Implement:\n"
            "- src/cascade_deploy/core/engine/health.py (HealthValidator)\n"
            f"Import error: {_IMPORT_ERR}"
        )


def test_healthy_state_passes(healthy_state):
    _require_imports()
    report = HealthValidator(RunConfig()).check_preconditions(healthy_state)

    assert report.passed
    assert report.failures == []


def test_integrity_floor_is_inclusive():
    _require_imports()
    validator = HealthValidator(RunConfig(min_integrity=85))

    assert validator.integrity_ok(SystemState(integrity=85))
    assert not validator.integrity_ok(SystemState(integrity=84.9))


def test_preconditions_report_every_failure():
    _require_imports()
    state = SystemState(integrity=50, guard_count=1, broadcast_active=False)

    report = HealthValidator(RunConfig()).check_preconditions(state)

    assert not report.passed
    assert report.failures == ["integrity", "guards", "broadcast"]
    assert len(report.messages) == 3


def test_postconditions_check_integrity_only_by_default():
    _require_imports()
    state = SystemState(integrity=95, guard_count=0, broadcast_active=False)

    assert HealthValidator(RunConfig()).check_postconditions(state).passed


def test_symmetric_postconditions_check_all_predicates():
    _require_imports()
    state = SystemState(integrity=95, guard_count=0, broadcast_active=False)

    report = HealthValidator(RunConfig(symmetric_postconditions=True)).check_postconditions(state)

    assert report.failures == ["guards", "broadcast"]


def test_broadcast_must_be_exactly_true():
    _require_imports()
    state = SystemState(broadcast_active=1)

    assert HealthValidator(RunConfig()).check_preconditions(state).failures == ["broadcast"]

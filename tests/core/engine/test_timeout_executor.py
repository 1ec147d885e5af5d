# tests/core/engine/test_timeout_executor.py
"""
Testes do Timeout Executor (`run_with_timeout`).

Invariantes:
    - Ação concluída dentro do prazo devolve seu resultado inalterado
    - Exceções da ação propagam inalteradas (não viram timeout)
    - Prazo vencido produz UnitTimeoutError, nunca antes do limite
    - A task perdedora é cancelada e seu resultado tardio descartado
"""

import asyncio
import time

import pytest

try:
    from cascade_deploy.core.engine.timeout import run_with_timeout
    from cascade_deploy.core.exceptions import UnitTimeoutError
    from cascade_deploy.core.errors import UNIT_TIMEOUT
except Exception as e:  # noqa: BLE001
    run_with_timeout = None
    UnitTimeoutError = None
    UNIT_TIMEOUT = None
    _IMPORT_ERR = e
else:
    _IMPORT_ERR = None


def _require_imports():
    if _IMPORT_ERR is not None:
        pytest.fail(
            "Missing timeout executor. Implement:\n"
            "- src/cascade_deploy/core/engine/timeout.py (run_with_timeout)\n"
            f"Import error: {_IMPORT_ERR}"
        )


async def _value_after(delay, value):
    await asyncio.sleep(delay)
    return value


def test_action_wins_returns_result():
    _require_imports()
    assert asyncio.run(run_with_timeout(_value_after(0, "done"), 1.0)) == "done"


def test_action_exception_propagates_unchanged():
    _require_imports()

    async def boom():
        raise KeyError("missing")

    with pytest.raises(KeyError):
        asyncio.run(run_with_timeout(boom(), 1.0))


def test_timer_wins_raises_timeout_after_limit():
    """
    Uma ação que nunca resolve é reportada como timeout após o limite,
    não antes e não indefinidamente depois.
    """
    _require_imports()

    async def scenario():
        never = asyncio.get_running_loop().create_future()
        started = time.monotonic()
        with pytest.raises(UnitTimeoutError) as info:
            await run_with_timeout(never, 0.05)
        return time.monotonic() - started, info.value

    elapsed, exc = asyncio.run(scenario())

    assert elapsed >= 0.045
    assert elapsed < 1.0
    assert exc.to_error().type == UNIT_TIMEOUT
    assert exc.details["limit_s"] == 0.05


def test_loser_is_cancelled_and_late_result_ignored():
    _require_imports()
    observed = []

    async def slow():
        try:
            await asyncio.sleep(1.0)
        except asyncio.CancelledError:
            observed.append("cancelled")
            raise
        observed.append("finished")
        return "late"

    async def scenario():
        with pytest.raises(UnitTimeoutError):
            await run_with_timeout(slow(), 0.01)
        await asyncio.sleep(0.05)

    asyncio.run(scenario())

    assert observed == ["cancelled"]


def test_uncancellable_late_failure_is_consumed():
    """
    Se a ação ignora o cancelamento e depois falha, a exceção tardia é
    consumida sem afetar o chamador.
    """
    _require_imports()
    errors = []

    async def stubborn():
        try:
            await asyncio.sleep(1.0)
        except asyncio.CancelledError:
            pass
        raise RuntimeError("late failure")

    async def scenario():
        loop = asyncio.get_running_loop()
        loop.set_exception_handler(lambda _loop, context: errors.append(context))
        with pytest.raises(UnitTimeoutError):
            await run_with_timeout(stubborn(), 0.01)
        await asyncio.sleep(0.05)

    asyncio.run(scenario())

    assert errors == []


@pytest.mark.parametrize("limit", [None, 0, -1])
def test_non_positive_limit_disables_deadline(limit):
    _require_imports()
    assert asyncio.run(run_with_timeout(_value_after(0.02, 7), limit)) == 7

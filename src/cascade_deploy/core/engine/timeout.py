# src/cascade_deploy/core/engine/timeout.py
"""
Timeout Executor: corrida entre a ação de deploy e um prazo.

Quem termina primeiro decide o resultado:
    - a ação termina: seu resultado (ou exceção) é devolvido inalterado
    - o prazo vence: `UnitTimeoutError`, distinto de uma falha reportada

Quando o prazo vence, a task perdedora recebe `cancel()` (best-effort) e
seu resultado tardio é descartado. Efeitos colaterais já aplicados antes
do prazo NÃO são desfeitos aqui; isso cabe ao `rollback()` da unit.
"""

from __future__ import annotations

import asyncio
from typing import Awaitable, Optional, TypeVar

from cascade_deploy.core.exceptions import UnitTimeoutError


T = TypeVar("T")


def _discard_late_result(task: "asyncio.Task") -> None:
    # consome a exceção tardia para o loop não reportá-la como nunca recuperada
    if not task.cancelled():
        task.exception()


async def run_with_timeout(action: Awaitable[T], limit_s: Optional[float]) -> T:
    """
    Executa `action` limitada a `limit_s` segundos.

    `limit_s` nulo ou <= 0 desabilita o prazo.

    Raises:
        UnitTimeoutError: Se o prazo vencer antes da ação terminar.
        Exception: Qualquer exceção levantada pela própria ação.
    """
    task = asyncio.ensure_future(action)

    if not limit_s or limit_s <= 0:
        return await task

    try:
        done, _ = await asyncio.wait({task}, timeout=limit_s)
    except asyncio.CancelledError:
        task.cancel()
        raise

    if task in done:
        return task.result()

    task.add_done_callback(_discard_late_result)
    task.cancel()
    raise UnitTimeoutError(
        message=f"Ação não concluiu em {limit_s}s",
        details={"limit_s": limit_s},
        hint="Aumente unit_timeout_s ou investigue a lentidão do deploy.",
    )

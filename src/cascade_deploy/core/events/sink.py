# src/cascade_deploy/core/events/sink.py
"""
Event Sink: stream append-only de notificações de ciclo de vida.

O orquestrador emite eventos tipados; consumidores externos (UI, logging,
dashboards) assinam o stream. O core nunca examina nem ramifica sobre os
eventos emitidos.

Tipos de evento:
    - run.started / run.completed{history} / run.failed{error}
    - unit.started{id} / unit.completed{id} / unit.failed{id, error}
    - unit.postcondition_failed{id, error}: a unit concluiu, mas deixou o
      sistema fora das condições de saúde
    - rollback.started / rollback.step_failed{id, error} / rollback.completed

Decisões arquiteturais:
    - O emissor nunca bloqueia no processamento dos assinantes: com um
      event loop ativo, callbacks síncronos são agendados via `call_soon`
      e corrotinas viram tasks; sem loop, callbacks são chamados direto
    - Exceções de assinantes agendados seguem para o exception handler
      do loop; não interrompem a cascata
    - Cada evento recebe um `seq` monotônico, refletindo a ordem de emissão

Invariantes:
    - `events` é append-only e preserva a ordem de emissão
    - Eventos nunca são reordenados ou deduplicados

Limites explícitos:
    - Não persiste eventos
    - Não renderiza eventos
"""

from __future__ import annotations

import asyncio
import inspect
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Callable, Dict, FrozenSet, Iterable, List, Optional, Set


class EventType(str, Enum):
    RUN_STARTED = "run.started"
    RUN_COMPLETED = "run.completed"
    RUN_FAILED = "run.failed"
    UNIT_STARTED = "unit.started"
    UNIT_COMPLETED = "unit.completed"
    UNIT_FAILED = "unit.failed"
    UNIT_POSTCONDITION_FAILED = "unit.postcondition_failed"
    ROLLBACK_STARTED = "rollback.started"
    ROLLBACK_STEP_FAILED = "rollback.step_failed"
    ROLLBACK_COMPLETED = "rollback.completed"


@dataclass(frozen=True)
class CascadeEvent:
    seq: int
    type: EventType
    timestamp: datetime
    run_id: Optional[str] = None
    payload: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "seq": self.seq,
            "type": self.type.value,
            "timestamp": self.timestamp.isoformat(),
            "run_id": self.run_id,
            "payload": dict(self.payload),
        }


Subscriber = Callable[[CascadeEvent], Any]


@dataclass
class _Subscription:
    callback: Subscriber
    types: Optional[FrozenSet[EventType]]

    def wants(self, event: CascadeEvent) -> bool:
        return self.types is None or event.type in self.types


class EventSink:
    """Stream append-only de eventos tipados com assinantes não bloqueantes."""

    def __init__(self) -> None:
        self.events: List[CascadeEvent] = []
        self._subscriptions: List[_Subscription] = []
        self._pending: Set[asyncio.Task] = set()

    def subscribe(
        self,
        callback: Subscriber,
        types: Optional[Iterable[EventType]] = None,
    ) -> Subscriber:
        """Registra `callback`; `types` restringe os tipos entregues."""
        wanted = frozenset(EventType(t) for t in types) if types is not None else None
        self._subscriptions.append(_Subscription(callback=callback, types=wanted))
        return callback

    def unsubscribe(self, callback: Subscriber) -> None:
        self._subscriptions = [s for s in self._subscriptions if s.callback is not callback]

    def emit(
        self,
        event_type: EventType,
        *,
        run_id: Optional[str] = None,
        **payload: Any,
    ) -> CascadeEvent:
        event = CascadeEvent(
            seq=len(self.events),
            type=EventType(event_type),
            timestamp=datetime.now(timezone.utc),
            run_id=run_id,
            payload=payload,
        )
        self.events.append(event)
        self._dispatch(event)
        return event

    def of_type(self, event_type: EventType) -> List[CascadeEvent]:
        return [e for e in self.events if e.type == event_type]

    def _dispatch(self, event: CascadeEvent) -> None:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            loop = None

        for sub in list(self._subscriptions):
            if not sub.wants(event):
                continue
            if loop is None:
                result = sub.callback(event)
                if inspect.isawaitable(result):
                    asyncio.run(_await(result))
            elif inspect.iscoroutinefunction(sub.callback):
                task = loop.create_task(sub.callback(event))
                self._pending.add(task)
                task.add_done_callback(self._pending.discard)
            else:
                loop.call_soon(sub.callback, event)

    async def drain(self) -> None:
        """Aguarda os assinantes assíncronos ainda pendentes e os callbacks agendados."""
        await asyncio.sleep(0)
        while self._pending:
            await asyncio.wait(list(self._pending))
        await asyncio.sleep(0)


async def _await(awaitable: Any) -> Any:
    return await awaitable

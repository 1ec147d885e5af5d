# tests/core/events/test_event_sink.py
"""
Testes do Event Sink.

Invariantes:
    - `events` é append-only e preserva a ordem de emissão (`seq`)
    - assinantes recebem apenas os tipos filtrados
    - com um loop ativo, o emissor nunca executa assinantes de forma síncrona
"""

import asyncio

import pytest

try:
    from cascade_deploy.core.events.sink import EventSink, EventType
except Exception as e:  # noqa: BLE001
    EventSink = None
    EventType = None
    _IMPORT_ERR = e
else:
    _IMPORT_ERR = None


def _require_imports():
    if _IMPORT_ERR is not None:
        pytest.fail(
            "Missing event sink. Implement:\n"
            "- src/cascade_deploy/core/events/sink.py (EventSink, EventType)\n"
            f"Import error: {_IMPORT_ERR}"
        )


def test_emit_appends_in_order():
    _require_imports()
    sink = EventSink()

    sink.emit(EventType.RUN_STARTED, run_id="r1")
    sink.emit(EventType.UNIT_STARTED, run_id="r1", id=10)

    assert [e.seq for e in sink.events] == [0, 1]
    assert sink.events[1].payload == {"id": 10}
    assert sink.events[1].to_dict()["type"] == "unit.started"


def test_event_type_values():
    _require_imports()
    assert {t.value for t in EventType} == {
        "run.started",
        "run.completed",
        "run.failed",
        "unit.started",
        "unit.completed",
        "unit.failed",
        "unit.postcondition_failed",
        "rollback.started",
        "rollback.step_failed",
        "rollback.completed",
    }


def test_subscribers_without_loop_are_called_directly():
    _require_imports()
    sink = EventSink()
    received = []
    sink.subscribe(received.append)

    sink.emit(EventType.RUN_STARTED)

    assert [e.type for e in received] == [EventType.RUN_STARTED]


def test_type_filter_and_unsubscribe():
    _require_imports()
    sink = EventSink()
    received = []
    cb = sink.subscribe(received.append, types=["unit.completed"])

    sink.emit(EventType.UNIT_STARTED, id=1)
    sink.emit(EventType.UNIT_COMPLETED, id=1)
    sink.unsubscribe(cb)
    sink.emit(EventType.UNIT_COMPLETED, id=2)

    assert [e.payload["id"] for e in received] == [1]


def test_subscribers_do_not_block_emitter():
    """
    Dentro de um loop, callbacks síncronos são agendados e corrotinas viram
    tasks; `emit` retorna antes de qualquer assinante rodar.
    """
    _require_imports()
    sink = EventSink()
    received = []

    async def slow_consumer(event):
        await asyncio.sleep(0.01)
        received.append(("async", event.seq))

    sink.subscribe(lambda ev: received.append(("sync", ev.seq)))
    sink.subscribe(slow_consumer)

    async def scenario():
        sink.emit(EventType.RUN_STARTED)
        assert received == []
        await sink.drain()

    asyncio.run(scenario())

    assert ("sync", 0) in received
    assert ("async", 0) in received


def test_of_type():
    _require_imports()
    sink = EventSink()
    sink.emit(EventType.UNIT_STARTED, id=1)
    sink.emit(EventType.UNIT_FAILED, id=1, error={"type": "UNIT_TIMEOUT"})

    assert [e.payload["error"]["type"] for e in sink.of_type(EventType.UNIT_FAILED)] == ["UNIT_TIMEOUT"]

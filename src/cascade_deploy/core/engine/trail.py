# src/cascade_deploy/core/engine/trail.py
"""
Trilha de auditoria de uma run: Event Sink + Manifest + log do RunContext.

Cada transição é registrada uma única vez por `EventTrail.emit`, que
grava na mesma ordem:
    1. Event Log do Manifest
    2. log estruturado do RunContext
    3. Event Sink (assinantes externos)

O chamador só invoca `emit` depois que a transição correspondente foi
aplicada ao SystemState.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Hashable, Optional

from cascade_deploy.core.events.sink import CascadeEvent, EventSink, EventType
from cascade_deploy.core.traceability.manifest import CascadeManifest, add_event

from .context import RunContext


_LEVELS = {
    EventType.RUN_FAILED: "ERROR",
    EventType.UNIT_FAILED: "ERROR",
    EventType.UNIT_POSTCONDITION_FAILED: "ERROR",
    EventType.ROLLBACK_STARTED: "WARNING",
    EventType.ROLLBACK_STEP_FAILED: "ERROR",
}


class EventTrail:
    def __init__(self, *, sink: EventSink, manifest: CascadeManifest, ctx: RunContext):
        self.sink = sink
        self.manifest = manifest
        self.ctx = ctx

    def emit(
        self,
        event_type: EventType,
        *,
        unit_id: Optional[Hashable] = None,
        **payload: Any,
    ) -> CascadeEvent:
        if unit_id is not None:
            payload["id"] = unit_id
        add_event(
            self.manifest,
            event_type=EventType(event_type).value,
            ts=datetime.now(timezone.utc),
            unit_id=unit_id,
            payload=dict(payload) or None,
        )
        self.ctx.log(
            unit_id=unit_id,
            level=_LEVELS.get(EventType(event_type), "INFO"),
            message=EventType(event_type).value,
        )
        return self.sink.emit(event_type, run_id=self.ctx.run_id, **payload)

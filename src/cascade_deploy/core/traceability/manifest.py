# src/cascade_deploy/core/traceability/manifest.py
"""
Manifest da run: trilha de auditoria de uma cascata.

O Manifest consolida, de forma determinística e auditável:
    - metadados da run (run_id, started_at, versão)
    - hashes das entradas (RunConfig efetivo e grafo de units)
    - estado incremental de cada unit (running, deployed, failed, rolled-back)
    - Event Log ordenado, espelhando o Event Sink

Princípios fundamentais:
    - Nenhum evento é registrado implicitamente
    - A ordem do Event Log reflete a ordem real das transições
    - O Manifest é serializável e reconstruível (round-trip JSON)

Decisões arquiteturais:
    - UTC é o timezone canônico para todos os timestamps
    - Persistir em disco é uma ação explícita do chamador (`save_manifest`);
      o orquestrador apenas devolve o Manifest em memória

Limites explícitos:
    - Não executa a cascata
    - Não decide políticas de execução
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Hashable, List, Optional


def _ensure_tzaware_utc(dt: datetime) -> datetime:
    """Timestamps timezone-naive são assumidos como UTC."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def _iso(dt: datetime) -> str:
    return _ensure_tzaware_utc(dt).isoformat()


def _ms_between(start: datetime, end: datetime) -> int:
    s = _ensure_tzaware_utc(start)
    e = _ensure_tzaware_utc(end)
    return max(0, int((e - s).total_seconds() * 1000))


def _key(unit_id: Hashable) -> str:
    # chaves JSON são sempre strings; ids inteiros viram "10", "11"...
    return str(unit_id)


@dataclass
class CascadeManifest:
    """
    Registro forense de uma run da cascata.

    Campos principais:
        - run: metadados da execução (run_id, started_at, version, status)
        - inputs: hashes do RunConfig e do grafo de units
        - units: estado incremental de cada unit, indexado por `str(unit_id)`
        - events: Event Log ordenado
    """

    run: Dict[str, Any]
    inputs: Dict[str, Any]
    units: Dict[str, Dict[str, Any]] = field(default_factory=dict)
    events: List[Dict[str, Any]] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        """Cópia serializável, independente do estado interno."""
        return {
            "run": dict(self.run),
            "inputs": dict(self.inputs),
            "units": {k: dict(v) for k, v in self.units.items()},
            "events": [dict(e) for e in self.events],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CascadeManifest":
        return cls(
            run=dict(data.get("run", {})),
            inputs=dict(data.get("inputs", {})),
            units={k: dict(v) for k, v in (data.get("units", {}) or {}).items()},
            events=[dict(e) for e in (data.get("events", []) or [])],
        )


def create_manifest(
    *,
    run_id: str,
    started_at: datetime,
    version: str,
    config_hash: str,
    graph_hash: str,
) -> CascadeManifest:
    """
    Cria o Manifest inicial de uma run.

    Importante: esta função **não emite eventos implicitamente**; `units`
    e `events` iniciam vazios.
    """
    started_at = _ensure_tzaware_utc(started_at)
    return CascadeManifest(
        run={
            "run_id": run_id,
            "started_at": _iso(started_at),
            "version": version,
            "status": "pending",
        },
        inputs={
            "config_hash": config_hash,
            "graph_hash": graph_hash,
        },
    )


def add_event(
    manifest: CascadeManifest,
    *,
    event_type: str,
    ts: datetime,
    unit_id: Optional[Hashable] = None,
    payload: Optional[Dict[str, Any]] = None,
) -> None:
    """
    Adiciona um evento explícito ao Event Log do Manifest.

    Invariantes:
        - Cada chamada adiciona exatamente um evento
        - Eventos não são reordenados ou deduplicados
    """
    ev: Dict[str, Any] = {"event_type": event_type, "timestamp": _iso(ts)}
    if unit_id is not None:
        ev["unit_id"] = unit_id
    if payload is not None:
        ev["payload"] = payload
    manifest.events.append(ev)


def set_run_status(manifest: CascadeManifest, *, status: str, ts: datetime) -> None:
    manifest.run["status"] = status
    manifest.run["finished_at"] = _iso(ts)


def unit_started(manifest: CascadeManifest, *, unit_id: Hashable, name: str, ts: datetime) -> None:
    """Marca a unit como `running` e registra o início."""
    u = manifest.units.setdefault(_key(unit_id), {})
    u.update(
        {
            "unit_id": unit_id,
            "name": name,
            "status": "running",
            "started_at": _iso(ts),
        }
    )


def unit_finished(
    manifest: CascadeManifest,
    *,
    unit_id: Hashable,
    ts: datetime,
    payload: Optional[Dict[str, Any]] = None,
) -> None:
    """Marca a unit como `deployed`, com duração calculada a partir de `started_at`."""
    u = manifest.units.setdefault(_key(unit_id), {"unit_id": unit_id})
    started_iso = u.get("started_at")
    started_dt = datetime.fromisoformat(started_iso) if started_iso else ts
    u.update(
        {
            "status": "deployed",
            "finished_at": _iso(ts),
            "duration_ms": _ms_between(started_dt, ts),
            "payload": dict(payload or {}),
        }
    )


def unit_failed(manifest: CascadeManifest, *, unit_id: Hashable, ts: datetime, error: Dict[str, Any]) -> None:
    u = manifest.units.setdefault(_key(unit_id), {"unit_id": unit_id})
    u.update(
        {
            "status": "failed",
            "finished_at": _iso(ts),
            "error": error,
        }
    )


def unit_postcondition_failed(
    manifest: CascadeManifest, *, unit_id: Hashable, ts: datetime, error: Dict[str, Any]
) -> None:
    """Anexa a falha de pós-condição ao registro da unit, preservando o de conclusão."""
    u = manifest.units.setdefault(_key(unit_id), {"unit_id": unit_id})
    u["postcondition_failed_at"] = _iso(ts)
    u["postcondition_error"] = error


def unit_rolled_back(
    manifest: CascadeManifest,
    *,
    unit_id: Hashable,
    ts: datetime,
    error: Optional[Dict[str, Any]] = None,
) -> None:
    """Registra o resultado do rollback da unit (com `rollback_error` quando falhou)."""
    u = manifest.units.setdefault(_key(unit_id), {"unit_id": unit_id})
    u["rolled_back_at"] = _iso(ts)
    if error is None:
        u["status"] = "rolled-back"
    else:
        u["rollback_error"] = error


def save_manifest(manifest: CascadeManifest, path: Path) -> None:
    """
    Persiste o Manifest em JSON determinístico (chaves ordenadas, indentado).

    Raises:
        OSError: Em caso de falha ao criar diretórios ou escrever o arquivo.
        TypeError: Se o conteúdo não for serializável em JSON.
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(
        json.dumps(manifest.to_dict(), ensure_ascii=False, indent=2, sort_keys=True),
        encoding="utf-8",
    )


def load_manifest(path: Path) -> CascadeManifest:
    data = json.loads(Path(path).read_text(encoding="utf-8"))
    return CascadeManifest.from_dict(data)

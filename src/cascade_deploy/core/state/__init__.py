# src/cascade_deploy/core/state/__init__.py
"""
Estado do sistema e snapshots.

Componentes:
    - system_state → SystemState, HistoryEntry, DeploymentStatus, StatusView
    - snapshot     → Snapshot imutável e SnapshotStore (um snapshot vivo por vez)
"""

from .system_state import (
    INTEGRITY_MAX,
    INTEGRITY_MIN,
    MODE_ABORTED,
    MODE_ASCENDED,
    MODE_ASCENSION,
    MODE_STABLE,
    MODE_UPGRADING,
    DeploymentStatus,
    HistoryEntry,
    StatusView,
    SystemState,
    clamp_integrity,
)
from .snapshot import NoLiveSnapshotError, Snapshot, SnapshotAlreadyLiveError, SnapshotStore

__all__ = [
    "INTEGRITY_MAX",
    "INTEGRITY_MIN",
    "MODE_ABORTED",
    "MODE_ASCENDED",
    "MODE_ASCENSION",
    "MODE_STABLE",
    "MODE_UPGRADING",
    "DeploymentStatus",
    "HistoryEntry",
    "StatusView",
    "SystemState",
    "clamp_integrity",
    "NoLiveSnapshotError",
    "Snapshot",
    "SnapshotAlreadyLiveError",
    "SnapshotStore",
]

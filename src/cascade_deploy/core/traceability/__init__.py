# src/cascade_deploy/core/traceability/__init__.py
"""
Rastreabilidade do Cascade Deploy: Manifest da run.

API pública exposta:
    - CascadeManifest   → estrutura canônica do Manifest
    - create_manifest   → criação explícita do Manifest
    - add_event         → registro explícito de eventos no Event Log
    - set_run_status    → status terminal da run
    - unit_started / unit_finished / unit_failed / unit_postcondition_failed
      / unit_rolled_back
    - save_manifest / load_manifest → persistência JSON explícita
"""

from .manifest import (
    CascadeManifest,
    create_manifest,
    add_event,
    set_run_status,
    unit_started,
    unit_finished,
    unit_failed,
    unit_postcondition_failed,
    unit_rolled_back,
    save_manifest,
    load_manifest,
)

__all__ = [
    "CascadeManifest",
    "create_manifest",
    "add_event",
    "set_run_status",
    "unit_started",
    "unit_finished",
    "unit_failed",
    "unit_postcondition_failed",
    "unit_rolled_back",
    "save_manifest",
    "load_manifest",
]

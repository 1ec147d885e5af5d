"""
Catálogo embutido: a sequência de ascensão do cofre.

Quatro units encadeadas, com os efeitos colaterais sobre a integridade e
o modo do sistema aplicados por cada etapa:

    10 Ascension Edition Core   deps: nenhuma      integridade -3 e depois +5, modo ascension
    11 Mood Sync Integration    deps: 10           integridade +2
    23 Spectral Decode HUD      deps: 10, 11       integridade -1
    24 Relic Evolution Trigger  deps: 10, 11, 23   integridade +3, modo ascended

As pausas simulam latência de inicialização; `delay_scale=0` as elimina
(útil em testes). Os rollbacks não tocam o SystemState, que já foi
restaurado do snapshot quando eles rodam.
"""

from __future__ import annotations

import asyncio
from typing import List, Tuple

from cascade_deploy.core.state.system_state import (
    MODE_ASCENDED,
    MODE_ASCENSION,
    MODE_STABLE,
    SystemState,
)

from .unit import DeployOutcome, FunctionUnit


def initial_state() -> SystemState:
    """Estado de partida do cofre: íntegro, estável, 4 sentinelas, broadcast ativo."""
    return SystemState(integrity=100, mode=MODE_STABLE, guard_count=4, broadcast_active=True)


def _stage(
    unit_id: int,
    messages: List[Tuple[str, float]],
    *,
    integrity_steps: List[float],
    features: List[str],
    delay_scale: float,
    mode: str | None = None,
    final_mode: str | None = None,
):
    """Monta a ação de deploy: pausa, aplica deltas e registra cada mensagem."""

    async def deploy(ctx) -> DeployOutcome:
        state = ctx.state
        if mode is not None:
            state.mode = mode
        for (message, pause), delta in zip(messages, integrity_steps):
            await asyncio.sleep(pause * delay_scale)
            if delta:
                state.adjust_integrity(delta)
            ctx.log(unit_id=unit_id, level="INFO", message=message)
        if final_mode is not None:
            state.mode = final_mode
        return DeployOutcome.ok(features=list(features))

    return deploy


def _undo(unit_id: int, message: str, pause: float, delay_scale: float):
    async def rollback(ctx) -> None:
        ctx.log(unit_id=unit_id, level="WARNING", message=message)
        await asyncio.sleep(pause * delay_scale)

    return rollback


def ascension_catalog(*, delay_scale: float = 1.0) -> List[FunctionUnit]:
    """Retorna as quatro units da sequência de ascensão, na ordem canônica."""
    return [
        FunctionUnit(
            id=10,
            name="Ascension Edition Core",
            description="Base terminal interface & vault sync",
            feature="ascension_core",
            dependencies=[],
            deploy_action=_stage(
                10,
                [
                    ("Deploying Ascension Edition Core", 2.0),
                    ("Quantum entanglement protocols established", 1.0),
                    ("Sentinel consciousness matrices calibrated", 1.0),
                ],
                # queda temporária durante o upgrade, recuperada ao final
                integrity_steps=[-3.0, 0.0, 5.0],
                features=["quantum_sync", "sentinel_matrix", "cosmic_frequency"],
                delay_scale=delay_scale,
                mode=MODE_ASCENSION,
            ),
            rollback_action=_undo(10, "Rolling back Ascension Core", 1.0, delay_scale),
        ),
        FunctionUnit(
            id=11,
            name="Mood Sync Integration",
            description="Real-time emotional resonance tracking",
            feature="mood_sync",
            dependencies=[10],
            deploy_action=_stage(
                11,
                [
                    ("Deploying Mood Sync Integration", 1.5),
                    ("Emotional resonance sensors activated", 1.0),
                    ("Neural pathway synchronization complete", 0.0),
                ],
                integrity_steps=[0.0, 0.0, 2.0],
                features=["emotion_tracking", "mood_harmonics", "neural_sync"],
                delay_scale=delay_scale,
            ),
            rollback_action=_undo(11, "Rolling back Mood Sync", 0.8, delay_scale),
        ),
        FunctionUnit(
            id=23,
            name="Spectral Decode HUD",
            description="Enhanced visualization overlays",
            feature="spectral_hud",
            dependencies=[10, 11],
            deploy_action=_stage(
                23,
                [
                    ("Deploying Spectral Decode HUD", 2.5),
                    ("Holographic overlay systems online", 1.0),
                    ("Dimensional visualization matrices calibrated", 0.0),
                ],
                integrity_steps=[0.0, 0.0, -1.0],
                features=["spectral_decode", "holo_overlay", "dimension_viz"],
                delay_scale=delay_scale,
            ),
            rollback_action=_undo(23, "Rolling back Spectral HUD", 1.2, delay_scale),
        ),
        FunctionUnit(
            id=24,
            name="Relic Evolution Trigger",
            description="Dynamic NFT transformation system",
            feature="relic_evolution",
            dependencies=[10, 11, 23],
            deploy_action=_stage(
                24,
                [
                    ("Deploying Relic Evolution Trigger", 3.0),
                    ("NFT metamorphosis engines initialized", 1.5),
                    ("Transformation trigger mechanisms linked", 0.0),
                ],
                integrity_steps=[0.0, 0.0, 3.0],
                features=["nft_evolution", "transformation_matrix", "cosmic_triggers"],
                delay_scale=delay_scale,
                final_mode=MODE_ASCENDED,
            ),
            rollback_action=_undo(24, "Rolling back Relic Evolution", 1.5, delay_scale),
        ),
    ]

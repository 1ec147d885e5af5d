# src/cascade_deploy/core/__init__.py
"""
Core do Cascade Deploy.

Este pacote reúne a implementação canônica do orquestrador, independente
de qualquer consumidor (UI, efeitos visuais, integrações HTTP).

Componentes principais:
    - config       → resolução de configuração e RunConfig
    - state        → estado do sistema e snapshots
    - units        → contrato de Unit e catálogo
    - engine       → planejamento e execução da cascata com rollback
    - events       → stream append-only de notificações de ciclo de vida
    - traceability → Manifest da run para auditoria

Limites explícitos:
    - Não depende de UI, notebooks ou serviços externos
    - Não serializa runs concorrentes (responsabilidade do chamador)
"""

# src/cascade_deploy/core/config/__init__.py
"""
Camada de configuração do Cascade Deploy.

Responsabilidades do pacote:
    - Carregamento de arquivos de configuração (defaults + overrides locais)
    - Resolução da configuração final via deep-merge determinístico
    - Hash canônico para rastreabilidade no Manifest
    - Materialização e validação do `RunConfig`

Limites explícitos:
    - Não executa a cascata
    - Não interage com units diretamente
"""

from .errors import (
    ConfigError,
    ConfigTypeConflictError,
    DefaultsNotFoundError,
    InvalidConfigRootTypeError,
    InvalidRunConfigError,
    UnsupportedConfigFormatError,
)
from .hashing import compute_config_hash, compute_graph_hash
from .loader import load_config, load_run_config
from .merge import deep_merge
from .run_config import RunConfig

__all__ = [
    "ConfigError",
    "ConfigTypeConflictError",
    "DefaultsNotFoundError",
    "InvalidConfigRootTypeError",
    "InvalidRunConfigError",
    "UnsupportedConfigFormatError",
    "compute_config_hash",
    "compute_graph_hash",
    "load_config",
    "load_run_config",
    "deep_merge",
    "RunConfig",
]

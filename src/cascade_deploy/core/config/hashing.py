"""
Hashing canônico de estruturas de configuração.

Usado para registrar no Manifest a identidade da configuração efetiva
da run e do grafo de units (ids + dependências), de modo que duas runs
com a mesma entrada sejam identificáveis como equivalentes.

Política (v1): JSON canônico (chaves ordenadas, separadores compactos,
UTF-8) → SHA-256 hexadecimal de 64 caracteres.
"""

import hashlib
import json
from typing import Any, Dict, Iterable


def compute_config_hash(config: Dict[str, Any]) -> str:
    """
    Gera um hash determinístico de um dicionário de configuração.

    Raises:
        TypeError: Se o objeto fornecido não for um dicionário.
    """
    if not isinstance(config, dict):
        raise TypeError(
            f"Config para hashing deve ser dict, recebido: {type(config).__name__}"
        )

    canonical_json = json.dumps(
        config,
        sort_keys=True,
        separators=(",", ":"),
        ensure_ascii=False,
        default=str,
    )

    return hashlib.sha256(canonical_json.encode("utf-8")).hexdigest()


def compute_graph_hash(units: Iterable[Any]) -> str:
    """Hash da estrutura da cascata: ids e dependências, na ordem de entrada."""
    graph = {
        "units": [
            {
                "id": str(getattr(u, "id", None)),
                "dependencies": [str(d) for d in (getattr(u, "dependencies", []) or [])],
            }
            for u in units
        ]
    }
    return compute_config_hash(graph)

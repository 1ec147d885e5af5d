"""
RunConfig: políticas de execução fornecidas pelo chamador.

Campos (seção `cascade` da configuração):
    - min_integrity: piso de integridade (0–100)
    - min_guards: quantidade mínima de guards ativos
    - unit_timeout_s: prazo de cada deploy, em segundos (0 desabilita)
    - inter_unit_delay_s: pausa de estabilização entre units
    - rollback_step_delay_s: pausa entre rollbacks de units
    - symmetric_postconditions: pós-condições verificam os três predicados
      (por padrão apenas o piso de integridade é verificado após cada unit)

Os defaults são os fail-safes de produção da sequência de ascensão.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, fields
from numbers import Real
from typing import Any, Dict, Mapping

from .errors import InvalidRunConfigError


CONFIG_SECTION = "cascade"


@dataclass(frozen=True)
class RunConfig:
    min_integrity: float = 85
    min_guards: int = 3
    unit_timeout_s: float = 30.0
    inter_unit_delay_s: float = 1.0
    rollback_step_delay_s: float = 0.5
    symmetric_postconditions: bool = False

    def __post_init__(self) -> None:
        for name in ("min_integrity", "unit_timeout_s", "inter_unit_delay_s", "rollback_step_delay_s"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, Real):
                raise InvalidRunConfigError(f"'{name}' deve ser numérico, recebido: {type(value).__name__}")
            if value < 0:
                raise InvalidRunConfigError(f"'{name}' não pode ser negativo: {value}")

        if not 0 <= self.min_integrity <= 100:
            raise InvalidRunConfigError(f"'min_integrity' fora de [0, 100]: {self.min_integrity}")

        if isinstance(self.min_guards, bool) or not isinstance(self.min_guards, int) or self.min_guards < 0:
            raise InvalidRunConfigError(f"'min_guards' deve ser inteiro >= 0: {self.min_guards!r}")

        if not isinstance(self.symmetric_postconditions, bool):
            raise InvalidRunConfigError("'symmetric_postconditions' deve ser booleano")

    @classmethod
    def from_mapping(cls, config: Mapping[str, Any]) -> "RunConfig":
        """
        Constrói um RunConfig a partir da configuração resolvida.

        Aceita tanto a configuração completa (lendo a seção `cascade`)
        quanto a própria seção. Chaves desconhecidas são rejeitadas.

        Raises:
            InvalidRunConfigError: Se a seção tiver chaves desconhecidas ou
                valores inválidos.
        """
        if not isinstance(config, Mapping):
            raise InvalidRunConfigError(
                f"Configuração deve ser mapping, recebido: {type(config).__name__}"
            )

        section = config.get(CONFIG_SECTION, config)
        if section is None:
            section = {}
        if not isinstance(section, Mapping):
            raise InvalidRunConfigError(
                f"Seção '{CONFIG_SECTION}' deve ser mapping, recebido: {type(section).__name__}"
            )

        known = {f.name for f in fields(cls)}
        unknown = sorted(str(k) for k in section if k not in known)
        if unknown:
            raise InvalidRunConfigError(f"Chaves desconhecidas em '{CONFIG_SECTION}': {unknown}")

        return cls(**{k: v for k, v in section.items() if k in known})

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

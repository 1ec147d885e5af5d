"""
Exceções canônicas da camada de configuração do Cascade Deploy.

As exceções aqui definidas representam violações estruturais de
configuração (arquivo ausente, formato desconhecido, tipos conflitantes,
valores fora de faixa), e não falhas da cascata em si.

Invariantes:
    - Todas as exceções de configuração herdam de `ConfigError`
    - Nenhuma exceção representa falha de deploy ou de rollback
"""


class ConfigError(Exception):
    """
    Exceção base para erros relacionados à configuração do Cascade Deploy.

    Permite captura genérica de erros de configuração, distinta das
    falhas de execução da cascata.
    """


class DefaultsNotFoundError(ConfigError):
    """
    Exceção levantada quando o arquivo de configuração base (defaults)
    não é encontrado no caminho especificado.

    Limites explícitos:
        - Não tenta inferir ou criar defaults automaticamente
    """


class UnsupportedConfigFormatError(ConfigError):
    """
    Exceção levantada quando o formato do arquivo de configuração
    não é suportado pelo loader.

    Formatos suportados (v1):
        - YAML (.yaml, .yml)
        - JSON (.json)
    """


class InvalidConfigRootTypeError(ConfigError):
    """Conteúdo raiz da configuração não é um dicionário (`dict`)."""


class ConfigTypeConflictError(ConfigError):
    """
    Exceção levantada quando ocorre conflito de tipos durante o deep-merge.

    Exemplo de conflito:
        - base:     {"cascade": {"min_integrity": 85}}
        - override: {"cascade": "strict"}
    """


class InvalidRunConfigError(ConfigError):
    """
    Exceção levantada quando a seção `cascade` não produz um RunConfig válido.

    Exemplos:
        - `min_integrity` fora de [0, 100]
        - `unit_timeout_s` negativo
        - tipo não numérico para delays
    """

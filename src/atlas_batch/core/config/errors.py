# src/atlas_batch/core/config/errors.py
"""
Exceções da camada de configuração do Atlas Batch.

Todas herdam de `ConfigError` e representam falhas estruturais fatais:
nenhuma partição é criada quando a configuração não pode ser resolvida.

Limites explícitos:
    - Não realiza fallback ou recovery
    - Não representa erro de leitura, transformação ou escrita de registros
"""


class ConfigError(Exception):
    """Exceção base para erros de configuração do batch."""


class DefaultsNotFoundError(ConfigError):
    """
    O arquivo de configuração base (defaults) não existe.

    Decisões arquiteturais:
        - O arquivo de defaults é obrigatório
        - O loader não tenta criar defaults automaticamente
    """


class UnsupportedConfigFormatError(ConfigError):
    """
    Extensão de arquivo não suportada.

    Formatos suportados (v1):
        - YAML (.yaml, .yml)
        - JSON (.json)
    """


class InvalidConfigRootTypeError(ConfigError):
    """O conteúdo raiz do arquivo não é um dicionário."""


class ConfigTypeConflictError(ConfigError):
    """
    Conflito de tipos durante o deep-merge.

    Exemplo:
        - base:     {"batch": {"gridSize": 4}}
        - override: {"batch": "local"}
    """


class InvalidSettingError(ConfigError):
    """Valor de `batch.*` com tipo ou faixa inválida (ex.: gridSize <= 0)."""


class UnknownSourceSystemError(ConfigError):
    """Sistema de origem não declarado em `batch.sources`."""


class UnknownJobError(ConfigError):
    """Job não declarado para o sistema de origem."""

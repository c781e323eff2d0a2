# src/atlas_batch/core/config/__init__.py

"""
Camada de configuração do Atlas Batch.

A configuração de um batch é declarativa (YAML ou JSON) e resolvida a partir
de um arquivo de defaults obrigatório mais um override local opcional.

Responsabilidades do pacote:
    - Carregamento de arquivos de configuração (defaults + overrides locais)
    - Deep-merge determinístico
    - Hash canônico da configuração efetiva (rastreabilidade do job)
    - Visão tipada do bloco `batch:` (BatchSettings)

Invariantes:
    - A configuração final é um dicionário puro (dict)
    - Conflitos estruturais são tratados como erro

Limites explícitos:
    - Não resolve variáveis de ambiente ou propriedades externas
    - Não persiste configuração
"""

from .errors import (
    ConfigError,
    ConfigTypeConflictError,
    DefaultsNotFoundError,
    InvalidConfigRootTypeError,
    InvalidSettingError,
    UnknownJobError,
    UnknownSourceSystemError,
    UnsupportedConfigFormatError,
)
from .hashing import compute_config_hash
from .loader import load_config
from .merge import deep_merge
from .settings import BatchSettings

__all__ = [
    "BatchSettings",
    "ConfigError",
    "ConfigTypeConflictError",
    "DefaultsNotFoundError",
    "InvalidConfigRootTypeError",
    "InvalidSettingError",
    "UnknownJobError",
    "UnknownSourceSystemError",
    "UnsupportedConfigFormatError",
    "compute_config_hash",
    "deep_merge",
    "load_config",
]

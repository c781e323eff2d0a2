# src/atlas_batch/core/config/loader.py
"""
Loader de configuração do Atlas Batch.

A configuração efetiva é resolvida a partir de:
    - um arquivo de defaults (obrigatório)
    - um arquivo local de overrides (opcional, ignorado se ausente)

Invariantes:
    - O resultado é sempre um dicionário puro (`dict`)
    - Overrides nunca mutam os defaults

Limites explícitos:
    - Não valida semântica de jobs ou mapeamentos (ver BatchSettings)
"""

import json
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml  # PyYAML

from .errors import (
    DefaultsNotFoundError,
    InvalidConfigRootTypeError,
    UnsupportedConfigFormatError,
)
from .merge import deep_merge


PathLike = Union[str, Path]


def _read_document(path: Path) -> Dict[str, Any]:
    """
    Lê um arquivo YAML/JSON e valida que a raiz é um dicionário.

    Arquivos vazios são interpretados como `{}`.

    Raises:
        DefaultsNotFoundError: Se o arquivo não existir.
        UnsupportedConfigFormatError: Se a extensão não for suportada.
        InvalidConfigRootTypeError: Se a raiz não for um dicionário.
    """
    if not path.exists():
        raise DefaultsNotFoundError(f"Arquivo de configuração não encontrado: {path}")

    suffix = path.suffix.lower()
    with path.open("r", encoding="utf-8") as fh:
        if suffix in {".yaml", ".yml"}:
            data = yaml.safe_load(fh)
        elif suffix == ".json":
            data = json.load(fh)
        else:
            raise UnsupportedConfigFormatError(f"Formato não suportado: {path.suffix}")

    if data is None:
        return {}

    if not isinstance(data, dict):
        raise InvalidConfigRootTypeError(
            f"Config root deve ser dict, recebido: {type(data).__name__}"
        )

    return data


def load_config(
    *,
    defaults_path: PathLike,
    local_path: Optional[PathLike] = None,
) -> Dict[str, Any]:
    """
    Carrega e resolve a configuração efetiva do batch.

    Política de resolução:
        - defaults é obrigatório
        - local é opcional; quando existe, tem prioridade via `deep_merge`

    Args:
        defaults_path: Caminho do arquivo base.
        local_path: Caminho opcional de overrides.

    Returns:
        Dict[str, Any]: Configuração resolvida.

    Raises:
        DefaultsNotFoundError, UnsupportedConfigFormatError,
        InvalidConfigRootTypeError, ConfigTypeConflictError
    """
    effective = _read_document(Path(defaults_path))

    if local_path is not None:
        local_file = Path(local_path)
        if local_file.exists():
            effective = deep_merge(effective, _read_document(local_file))

    return effective

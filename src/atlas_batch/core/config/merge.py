# src/atlas_batch/core/config/merge.py
"""
Deep-merge determinístico de configuração.

Política de merge (v1):
    - dict → merge recursivo por chave
    - list → sobrescrita total (a lista `files` de um job nunca é concatenada)
    - escalar → sobrescrita direta
    - conflito de tipos → ConfigTypeConflictError

Invariantes:
    - Nenhum input é mutado
    - A mesma entrada sempre produz a mesma saída
"""

from copy import deepcopy
from typing import Any, Dict

from .errors import ConfigTypeConflictError


def deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """
    Combina `override` sobre `base`, retornando um novo dicionário.

    `None` no override é tratado como escalar e sobrescreve o valor base;
    valores `None` na base aceitam qualquer tipo no override.

    Raises:
        ConfigTypeConflictError: Se uma chave tiver tipos incompatíveis.
    """
    if not isinstance(base, dict) or not isinstance(override, dict):
        raise ConfigTypeConflictError(
            f"Deep-merge requer dicts no nível raiz, recebido: "
            f"{type(base).__name__} vs {type(override).__name__}"
        )

    merged: Dict[str, Any] = deepcopy(base)

    for key, incoming in override.items():
        if key not in merged or merged[key] is None or incoming is None:
            merged[key] = deepcopy(incoming)
            continue

        current = merged[key]

        if isinstance(current, dict) and isinstance(incoming, dict):
            merged[key] = deep_merge(current, incoming)
        elif isinstance(current, list) and isinstance(incoming, list):
            merged[key] = deepcopy(incoming)
        elif type(current) is type(incoming):
            merged[key] = deepcopy(incoming)
        else:
            raise ConfigTypeConflictError(
                f"Conflito de tipo na chave '{key}': "
                f"{type(current).__name__} vs {type(incoming).__name__}"
            )

    return merged

# src/atlas_batch/core/config/hashing.py
"""
Hash canônico da configuração efetiva do batch.

O hash acompanha cada `JobResult`, permitindo associar uma execução à
configuração exata que a produziu.

Política de hashing (v1):
    - JSON canônico (chaves ordenadas, separadores compactos, UTF-8)
    - SHA-256 hexadecimal (64 caracteres)
"""

import hashlib
import json
from typing import Any, Dict


def compute_config_hash(config: Dict[str, Any]) -> str:
    """
    Calcula o hash SHA-256 da configuração.

    Args:
        config (Dict[str, Any]): Configuração efetiva.

    Returns:
        str: Hash hexadecimal.

    Raises:
        TypeError: Se `config` não for um dicionário.
    """
    if not isinstance(config, dict):
        raise TypeError(
            f"Config para hashing deve ser dict, recebido: {type(config).__name__}"
        )

    payload = json.dumps(
        config,
        sort_keys=True,
        separators=(",", ":"),
        ensure_ascii=False,
        default=str,
    )
    return hashlib.sha256(payload.encode("utf-8")).hexdigest()

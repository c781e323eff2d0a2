# src/atlas_batch/mapping/loader.py
"""Leitura de documentos YAML de mapeamento (single e multi-document)."""

from __future__ import annotations

from pathlib import Path
from typing import Any, List, Union

import yaml

from atlas_batch.core.exceptions import MappingValidationError


def _parse_error(path: Path, exc: Exception) -> MappingValidationError:
    return MappingValidationError(
        f"Failed to parse YAML: {path}",
        details={"path": str(path), "error": str(exc)},
    )


def load_documents(path: Union[str, Path]) -> List[Any]:
    """
    Carrega todos os documentos de um arquivo YAML (separados por `---`).

    Documentos vazios são descartados.

    Raises:
        FileNotFoundError: Se o arquivo não existir.
        MappingValidationError: Se o YAML for inválido.
    """
    p = Path(path)
    if not p.exists():
        raise FileNotFoundError(str(p))

    with p.open("r", encoding="utf-8") as fh:
        try:
            return [doc for doc in yaml.safe_load_all(fh) if doc is not None]
        except yaml.YAMLError as e:
            raise _parse_error(p, e) from e


def load_document(path: Union[str, Path]) -> Any:
    """Carrega um único documento YAML; arquivo vazio retorna None."""
    p = Path(path)
    if not p.exists():
        raise FileNotFoundError(str(p))

    with p.open("r", encoding="utf-8") as fh:
        try:
            return yaml.safe_load(fh)
        except yaml.YAMLError as e:
            raise _parse_error(p, e) from e

# src/atlas_batch/adapters/base.py
"""
Contrato de adapter e helpers de validação de params.

Adapters sinalizam configuração inválida com ConfigurationError; o
registry acrescenta o contexto de formato/adapter ao reempacotar.
"""

from __future__ import annotations

from typing import Any, FrozenSet, Optional, Protocol, runtime_checkable

from atlas_batch.core.exceptions import ConfigurationError
from atlas_batch.core.protocols import ItemReader
from atlas_batch.partition.model import FileConfig


@runtime_checkable
class SourceAdapter(Protocol):
    name: str
    priority: int

    def supports(self, format: str) -> bool:
        ...

    def validate(self, file_config: FileConfig) -> None:
        ...

    def create_reader(self, file_config: FileConfig) -> ItemReader:
        ...


class BaseAdapter:
    """Implementação comum: suporte por conjunto fixo de tokens, sem validação."""

    name: str = "base"
    priority: int = 0
    formats: FrozenSet[str] = frozenset()

    def supports(self, format: str) -> bool:
        return bool(format) and format.strip().lower() in self.formats

    def validate(self, file_config: FileConfig) -> None:
        return None

    def create_reader(self, file_config: FileConfig) -> ItemReader:  # pragma: no cover
        raise NotImplementedError

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r}, priority={self.priority})"


# ---------------------------------------------------------------------------
# Helpers de params
# ---------------------------------------------------------------------------

def require_param(file_config: FileConfig, key: str, message: Optional[str] = None) -> str:
    value = file_config.params.get(key)
    if value is None or not str(value).strip():
        raise ConfigurationError(
            message or f"Missing required parameter '{key}'",
            details={"param": key},
        )
    return str(value)


def positive_int_param(file_config: FileConfig, key: str, default: int) -> int:
    """
    Lê um parâmetro inteiro positivo.

    Raises:
        ConfigurationError: Valor não inteiro ou <= 0.
    """
    raw: Any = file_config.params.get(key)
    if raw is None or (isinstance(raw, str) and not raw.strip()):
        return default
    if isinstance(raw, bool):
        raise ConfigurationError(f"{key} must be a valid integer, got: {raw}", details={"param": key})
    try:
        value = int(str(raw).strip())
    except ValueError as e:
        raise ConfigurationError(
            f"{key} must be a valid integer, got: {raw}", details={"param": key}
        ) from e
    if value <= 0:
        raise ConfigurationError(f"{key} must be positive, got: {value}", details={"param": key})
    return value


def split_list_param(raw: Any) -> list:
    """`"A, B,C"` ou lista YAML → `["A", "B", "C"]`."""
    if raw is None:
        return []
    if isinstance(raw, (list, tuple)):
        return [str(v).strip() for v in raw]
    return [part.strip() for part in str(raw).split(",")]

"""
Atlas Batch: Canonical Exceptions (v1)

Este módulo define as exceções tipadas internas do Atlas Batch.

Objetivo:
- Permitir que adapters, readers, processors e o coordinator levantem
  exceções semânticas tipadas
- Facilitar o mapeamento determinístico para BatchErrorPayload
- Separar erros de configuração (fatais, sem retry) de erros por registro
  (candidatos a retry/skip)

Regras:
- Exceções carregam apenas dados estruturados (serializáveis) em `details`.
- Mensagens são curtas e humanas.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional


@dataclass(frozen=True)
class AtlasBatchException(Exception):
    """Base class para exceções internas do Atlas Batch.

    Importante:
    - Sempre carregar dados estruturados em `details`
    - Não embedar stack trace em payloads de erro
    """

    message: str
    details: Dict[str, Any] = field(default_factory=dict)
    hint: Optional[str] = None

    def __str__(self) -> str:  # pragma: no cover
        return self.message


# ---------------------------------------------------------------------------
# Configuração (fail-fast, nunca reexecutadas)
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ConfigurationError(AtlasBatchException):
    """Parâmetro obrigatório ausente ou inválido."""


@dataclass(frozen=True)
class NoAdapterFound(ConfigurationError):
    """Nenhum adapter registrado suporta o formato solicitado."""


@dataclass(frozen=True)
class InvalidAdapterConfiguration(ConfigurationError):
    """FileConfig rejeitado pelas regras do adapter resolvido."""


@dataclass(frozen=True)
class MappingNotFound(ConfigurationError):
    """Documento de mapeamento ausente para template/transaction type."""


@dataclass(frozen=True)
class MappingValidationError(ConfigurationError):
    """Documento de mapeamento estruturalmente inválido."""


@dataclass(frozen=True)
class TargetDefinitionError(ConfigurationError):
    """Definição de target ausente ou inválida."""


@dataclass(frozen=True)
class PartitioningError(ConfigurationError):
    """Falha ao expandir o job em partições."""


# ---------------------------------------------------------------------------
# I/O
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class StreamOpenError(AtlasBatchException):
    """Fonte ou destino inacessível no momento da abertura do stream."""


@dataclass(frozen=True)
class StreamReadError(AtlasBatchException):
    """Fonte falhou no meio da leitura; o restante do stream é irrecuperável."""


@dataclass(frozen=True)
class StreamWriteError(AtlasBatchException):
    """Destino em estado desconhecido após uma escrita com falha."""


# ---------------------------------------------------------------------------
# Registro / transformação
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class TransformationError(AtlasBatchException):
    """Falha de transformação de campo sob política estrita."""


@dataclass(frozen=True)
class ItemProcessingError(AtlasBatchException):
    """Falha ao processar um registro completo (sem emissão parcial)."""


@dataclass(frozen=True)
class ItemWriteError(AtlasBatchException):
    """Falha ao gravar um chunk de registros."""


@dataclass(frozen=True)
class TransientProcessingError(AtlasBatchException):
    """Condição transitória; elegível para retry pelo coordinator."""


# ---------------------------------------------------------------------------
# Coordinator
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class SkipLimitExceeded(AtlasBatchException):
    """Limite de registros pulados excedido; a partição falha."""

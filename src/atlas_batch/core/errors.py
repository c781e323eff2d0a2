"""
Atlas Batch: Canonical Error Structures (v1)

Este módulo define o padrão canônico de erros reportados pelo Atlas Batch.
Falhas de partição nunca expõem stack traces ao operador: são convertidas em
payloads explícitos, serializáveis e acionáveis.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Dict, List, Optional

from .exceptions import (
    AtlasBatchException,
    ConfigurationError,
    MappingNotFound,
    NoAdapterFound,
    SkipLimitExceeded,
    StreamOpenError,
)


# ---------------------------------------------------------------------------
# Payload canônico
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class BatchErrorPayload:
    """
    Payload canônico de erro do Atlas Batch.

    Campos:
    - type: código estável do erro (não é texto livre)
    - message: mensagem curta, humana e objetiva
    - details: dados estruturados relevantes para diagnóstico
    - hint: ação sugerida ao operador (onde corrigir)
    """

    type: str
    message: str
    details: Dict[str, Any]
    hint: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Retorna representação serializável do erro."""
        return asdict(self)


# ---------------------------------------------------------------------------
# Catálogo canônico de tipos de erro (v1)
# ---------------------------------------------------------------------------

ADAPTER_NOT_FOUND = "ADAPTER_NOT_FOUND"
MAPPING_NOT_FOUND = "MAPPING_NOT_FOUND"
STREAM_OPEN_ERROR = "STREAM_OPEN_ERROR"
SKIP_LIMIT_EXCEEDED = "SKIP_LIMIT_EXCEEDED"
PARTITION_CONFIGURATION_ERROR = "PARTITION_CONFIGURATION_ERROR"
PARTITION_EXECUTION_ERROR = "PARTITION_EXECUTION_ERROR"


# ---------------------------------------------------------------------------
# Helpers de fábrica
# ---------------------------------------------------------------------------

def adapter_not_found(
    *,
    format: str,
    supported_formats: List[str],
    hint: str = "Declare params.format com um dos formatos suportados ou registre um adapter para o formato.",
) -> BatchErrorPayload:
    return BatchErrorPayload(
        type=ADAPTER_NOT_FOUND,
        message=f"No adapter found for format '{format}'",
        details={
            "format": format,
            "supported_formats": list(supported_formats),
        },
        hint=hint,
    )


def mapping_not_found(
    *,
    template: str,
    transaction_type: Optional[str],
    hint: str = "Crie o documento de mapeamento para o transaction type ou um documento 'default'.",
) -> BatchErrorPayload:
    return BatchErrorPayload(
        type=MAPPING_NOT_FOUND,
        message=f"No mapping for {template}/{transaction_type}",
        details={
            "template": template,
            "transaction_type": transaction_type,
        },
        hint=hint,
    )


def skip_limit_exceeded(
    *,
    partition_key: str,
    skip_limit: int,
    exc_type: Optional[str] = None,
    exc_message: Optional[str] = None,
    hint: str = "Corrija os registros rejeitados na origem ou aumente batch.skipLimit conscientemente.",
) -> BatchErrorPayload:
    return BatchErrorPayload(
        type=SKIP_LIMIT_EXCEEDED,
        message="Skip limit exceeded",
        details={
            "partition_key": partition_key,
            "skip_limit": skip_limit,
            "exc_type": exc_type,
            "exc_message": exc_message,
        },
        hint=hint,
    )


def partition_execution_error(
    *,
    partition_key: Optional[str] = None,
    exc_type: Optional[str] = None,
    exc_message: Optional[str] = None,
    hint: str = "Verifique os eventos da partição para diagnosticar a falha. Nenhum fallback é aplicado automaticamente.",
) -> BatchErrorPayload:
    return BatchErrorPayload(
        type=PARTITION_EXECUTION_ERROR,
        message="Falha inesperada durante a execução da partição",
        details={
            "partition_key": partition_key,
            "exc_type": exc_type,
            "exc_message": exc_message,
        },
        hint=hint,
    )


_STABLE_CODES = (
    (NoAdapterFound, ADAPTER_NOT_FOUND),
    (MappingNotFound, MAPPING_NOT_FOUND),
    (StreamOpenError, STREAM_OPEN_ERROR),
    (SkipLimitExceeded, SKIP_LIMIT_EXCEEDED),
)


def _stable_code(exc: BaseException) -> Optional[str]:
    for cls, code in _STABLE_CODES:
        if isinstance(exc, cls):
            return code
    return None


def exception_to_error(exc: BaseException, *, partition_key: Optional[str] = None) -> BatchErrorPayload:
    """Converte exceções em BatchErrorPayload (serializável, acionável).

    Regras:
    - Exceções com código estável (adapter, mapping, stream, skip limit): o código.
    - ConfigurationError: PARTITION_CONFIGURATION_ERROR com os detalhes da exceção.
    - AtlasBatchException: o nome da classe é o código estável.
    - Outras exceções: PARTITION_EXECUTION_ERROR sem expor stack trace.
    """
    code = _stable_code(exc)

    if isinstance(exc, ConfigurationError):
        details = dict(exc.details or {})
        details.setdefault("exception_class", exc.__class__.__name__)
        if partition_key is not None:
            details.setdefault("partition_key", partition_key)
        return BatchErrorPayload(
            type=code or PARTITION_CONFIGURATION_ERROR,
            message=str(exc) or "Configuração inválida",
            details=details,
            hint=exc.hint,
        )

    if isinstance(exc, AtlasBatchException):
        details = dict(exc.details or {})
        if partition_key is not None:
            details.setdefault("partition_key", partition_key)
        return BatchErrorPayload(
            type=code or exc.__class__.__name__,
            message=str(exc) or "Erro de execução",
            details=details,
            hint=exc.hint,
        )

    return partition_execution_error(
        partition_key=partition_key,
        exc_type=exc.__class__.__name__,
        exc_message=str(exc) or None,
    )

# src/atlas_batch/engine/policy.py
"""
Classificação de falhas por registro.

    - RetryPolicy: exceções transitórias, reexecutadas até `limit` vezes
    - SkipPolicy:  exceções toleráveis, puladas até `limit` registros

Erros de configuração nunca são reexecutados nem pulados, mesmo que
alguém os inclua nas classes aceitas.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple, Type

import requests
from sqlalchemy.exc import DBAPIError, IntegrityError, OperationalError

from atlas_batch.core.exceptions import (
    ConfigurationError,
    ItemProcessingError,
    ItemWriteError,
    TransientProcessingError,
)


ExceptionTypes = Tuple[Type[BaseException], ...]

DEFAULT_RETRYABLE: ExceptionTypes = (
    TransientProcessingError,
    OperationalError,
    requests.ConnectionError,
    requests.Timeout,
)

DEFAULT_SKIPPABLE: ExceptionTypes = (
    ItemProcessingError,
    ItemWriteError,
    TransientProcessingError,
    IntegrityError,
    DBAPIError,
)


def _matches(exc: BaseException, types: ExceptionTypes) -> bool:
    if isinstance(exc, ConfigurationError):
        return False
    return isinstance(exc, types)


@dataclass(frozen=True)
class RetryPolicy:
    limit: int = 3
    retryable: ExceptionTypes = DEFAULT_RETRYABLE

    def can_retry(self, exc: BaseException, attempt: int) -> bool:
        """`attempt` é o número de tentativas já falhas (1 após a primeira falha)."""
        return attempt <= self.limit and _matches(exc, self.retryable)


@dataclass(frozen=True)
class SkipPolicy:
    limit: int = 10
    skippable: ExceptionTypes = DEFAULT_SKIPPABLE

    def is_skippable(self, exc: BaseException) -> bool:
        return _matches(exc, self.skippable)

# src/atlas_batch/core/protocols.py
"""
Contratos de stream e processamento de uma partição.

O coordinator conhece apenas estes protocolos; implementações concretas
(readers por formato, processors, writers) são construídas por partição
e descartadas ao final dela.

A validação ocorre por duck typing (`@runtime_checkable`), sem exigir herança.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Protocol, runtime_checkable

from .context import ExecutionContext


Record = Dict[str, Any]


@runtime_checkable
class ItemReader(Protocol):
    """
    Stream de registros de entrada.

    Invariantes:
        - `read()` retorna None ao esgotar a fonte, sem levantar exceção
        - `update(context)` grava apenas estado de checkpoint
    """

    def open(self, context: ExecutionContext) -> None:
        ...

    def read(self) -> Optional[Record]:
        ...

    def update(self, context: ExecutionContext) -> None:
        ...

    def close(self) -> None:
        ...


@runtime_checkable
class ItemProcessor(Protocol):
    """Transforma um registro de entrada em um registro de saída ordenado."""

    def process(self, record: Record) -> Record:
        ...


@runtime_checkable
class ItemWriter(Protocol):
    """Destino de chunks de registros processados."""

    def open(self, context: ExecutionContext) -> None:
        ...

    def write(self, items: List[Record]) -> None:
        ...

    def update(self, context: ExecutionContext) -> None:
        ...

    def close(self) -> None:
        ...

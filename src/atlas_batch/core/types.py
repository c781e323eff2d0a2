# src/atlas_batch/core/types.py
"""
Tipos de resultado do coordinator.

    - PartitionStatus → estado final de uma partição
    - PartitionResult → resultado imutável de uma partição
    - JobResult       → agregação dos resultados de um job

Os valores dos enums são strings estáveis, adequadas para serialização.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional


class PartitionStatus(str, Enum):
    """Estados finais de uma partição."""

    COMPLETED = "completed"
    FAILED = "failed"


@dataclass(frozen=True)
class PartitionResult:
    """
    Resultado imutável da execução de uma partição.

    Campos:
        - partition_key: chave gerada pelo partitioner
        - status: estado final
        - read_count / write_count / skip_count / retry_count: contadores
        - output_path: arquivo produzido (None se a partição falhou antes do open)
        - error: payload serializável (BatchErrorPayload.to_dict) em caso de falha
        - events / warnings: trilha estruturada da execução
    """

    partition_key: str
    status: PartitionStatus
    read_count: int = 0
    write_count: int = 0
    skip_count: int = 0
    retry_count: int = 0
    output_path: Optional[str] = None
    error: Optional[Dict[str, Any]] = None
    events: List[Dict[str, Any]] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    checkpoint: Dict[str, Any] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return self.status == PartitionStatus.COMPLETED


@dataclass(frozen=True)
class JobResult:
    """Resultado agregado de um job; falha de uma partição não cancela as demais."""

    run_id: str
    source_system: str
    job_name: str
    config_hash: str
    partitions: Dict[str, PartitionResult] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return all(p.ok for p in self.partitions.values())

    @property
    def failed(self) -> List[str]:
        return sorted(k for k, p in self.partitions.items() if not p.ok)

    def totals(self) -> Dict[str, int]:
        return {
            "read": sum(p.read_count for p in self.partitions.values()),
            "written": sum(p.write_count for p in self.partitions.values()),
            "skipped": sum(p.skip_count for p in self.partitions.values()),
        }

# src/atlas_batch/core/config/settings.py
"""
Visão tipada do bloco `batch:` da configuração efetiva.

Formato esperado (YAML):

    batch:
      gridSize: 4
      chunkSize: 100
      retryLimit: 3
      skipLimit: 10
      debug: false
      mappingRoot: ./mappings-root
      processor: generic        # generic | enhanced
      explicitReferences: false
      transformPolicy: degrade  # degrade | strict
      sources:
        LEGACY:
          jobs:
            DELINQ:
              files:
                - transactionType: "200"
                  params: {format: csv, ...}

Invariantes:
    - gridSize e chunkSize são inteiros positivos
    - retryLimit e skipLimit são inteiros >= 0
    - gridSize == 1 implica execução síncrona (igual a debug)
    - processor e transformPolicy aceitam apenas os valores listados acima
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict

from .errors import InvalidSettingError, UnknownJobError, UnknownSourceSystemError


PROCESSORS = ("generic", "enhanced")
TRANSFORM_POLICIES = ("degrade", "strict")


def _int_setting(block: Dict[str, Any], key: str, default: int, *, minimum: int) -> int:
    raw = block.get(key, default)
    if isinstance(raw, bool) or not isinstance(raw, int):
        raise InvalidSettingError(f"batch.{key} deve ser inteiro, recebido: {raw!r}")
    if raw < minimum:
        raise InvalidSettingError(f"batch.{key} deve ser >= {minimum}, recebido: {raw}")
    return raw


@dataclass(frozen=True)
class BatchSettings:
    """Parâmetros de execução do coordinator e catálogo de jobs."""

    grid_size: int = 4
    chunk_size: int = 100
    retry_limit: int = 3
    skip_limit: int = 10
    debug: bool = False
    mapping_root: Path = Path(".")
    processor: str = "generic"
    explicit_references: bool = False
    transform_policy: str = "degrade"
    sources: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_config(cls, config: Dict[str, Any]) -> "BatchSettings":
        """
        Constrói as settings a partir da configuração resolvida.

        Raises:
            InvalidSettingError: Se algum valor tiver tipo ou faixa inválida.
        """
        block = config.get("batch") or {}
        if not isinstance(block, dict):
            raise InvalidSettingError("batch deve ser um mapa")

        debug = block.get("debug", False)
        if not isinstance(debug, bool):
            raise InvalidSettingError(f"batch.debug deve ser bool, recebido: {debug!r}")

        explicit = block.get("explicitReferences", False)
        if not isinstance(explicit, bool):
            raise InvalidSettingError(f"batch.explicitReferences deve ser bool, recebido: {explicit!r}")

        processor = str(block.get("processor") or "generic").lower()
        if processor not in PROCESSORS:
            raise InvalidSettingError(f"batch.processor deve ser um de {PROCESSORS}, recebido: {processor!r}")

        policy = str(block.get("transformPolicy") or "degrade").lower()
        if policy not in TRANSFORM_POLICIES:
            raise InvalidSettingError(f"batch.transformPolicy deve ser um de {TRANSFORM_POLICIES}, recebido: {policy!r}")

        sources = block.get("sources") or {}
        if not isinstance(sources, dict):
            raise InvalidSettingError("batch.sources deve ser um mapa")

        return cls(
            grid_size=_int_setting(block, "gridSize", 4, minimum=1),
            chunk_size=_int_setting(block, "chunkSize", 100, minimum=1),
            retry_limit=_int_setting(block, "retryLimit", 3, minimum=0),
            skip_limit=_int_setting(block, "skipLimit", 10, minimum=0),
            debug=debug,
            mapping_root=Path(block.get("mappingRoot") or "."),
            processor=processor,
            explicit_references=explicit,
            transform_policy=policy,
            sources=sources,
        )

    @property
    def sequential(self) -> bool:
        return self.debug or self.grid_size == 1

    def job_config(self, source_system: str, job_name: str) -> Dict[str, Any]:
        """
        Retorna o bloco `batch.sources.<system>.jobs.<job>`.

        Raises:
            UnknownSourceSystemError: Sistema não declarado.
            UnknownJobError: Job não declarado para o sistema.
        """
        system = self.sources.get(source_system)
        if not isinstance(system, dict):
            raise UnknownSourceSystemError(
                f"Sistema de origem não configurado: {source_system}"
            )

        jobs = system.get("jobs") or {}
        job = jobs.get(job_name)
        if not isinstance(job, dict):
            raise UnknownJobError(
                f"Job '{job_name}' não configurado para o sistema '{source_system}'"
            )
        return job

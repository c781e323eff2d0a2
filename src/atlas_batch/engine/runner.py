# src/atlas_batch/engine/runner.py
"""
Ponto de entrada de execução de um job.

Fluxo:
    config → BatchSettings → bloco do job → partições → coordinator → JobResult

Erros de configuração global (settings, sistema/job desconhecido, lista de
arquivos inválida) são levantados antes de qualquer partição executar.
Falhas de partição nunca são levantadas: ficam no JobResult.
"""

from __future__ import annotations

import uuid
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Union

from atlas_batch.adapters.registry import AdapterRegistry, default_registry
from atlas_batch.core.config import BatchSettings, compute_config_hash, load_config
from atlas_batch.core.types import JobResult
from atlas_batch.partition.partitioner import partition

from .coordinator import ComponentFactory, PartitionCoordinator


def run_job(
    config: Dict[str, Any],
    *,
    source_system: str,
    job_name: str,
    registry: Optional[AdapterRegistry] = None,
    factory: Optional[ComponentFactory] = None,
    run_id: Optional[str] = None,
    now: Optional[datetime] = None,
    checkpoints: Optional[Mapping[str, Dict[str, Any]]] = None,
) -> JobResult:
    """
    Executa um job configurado em `batch.sources.<system>.jobs.<job>`.

    Args:
        config: Configuração efetiva (defaults + overrides).
        registry: Registry de adapters; default_registry() se omitido.
        factory: Fábrica de componentes; construída a partir das settings se omitida.
        checkpoints: Estado de checkpoint por chave de partição (restart).

    Raises:
        ConfigError: Settings inválidas ou sistema/job desconhecido.
        PartitioningError: Lista de arquivos ausente, vazia ou inválida.
    """
    settings = BatchSettings.from_config(config)
    job_config = settings.job_config(source_system, job_name)
    units = partition(job_config, source_system=source_system, job_name=job_name)

    if factory is None:
        factory = ComponentFactory.from_settings(
            settings,
            registry=registry if registry is not None else default_registry(),
            now=now,
        )

    run_id = run_id or uuid.uuid4().hex
    coordinator = PartitionCoordinator(settings=settings, factory=factory, run_id=run_id)
    results = coordinator.run(units, checkpoints)

    return JobResult(
        run_id=run_id,
        source_system=source_system,
        job_name=job_name,
        config_hash=compute_config_hash(config),
        partitions=results,
    )


def run_job_from_files(
    *,
    defaults_path: Union[str, Path],
    local_path: Optional[Union[str, Path]] = None,
    source_system: str,
    job_name: str,
    **kwargs: Any,
) -> JobResult:
    """Carrega defaults + override local e delega para `run_job`."""
    config = load_config(defaults_path=defaults_path, local_path=local_path)
    return run_job(config, source_system=source_system, job_name=job_name, **kwargs)

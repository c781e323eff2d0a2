# src/atlas_batch/partition/partitioner.py
"""
Partitioner de jobs.

Expande o bloco de configuração de um job em partições independentes, uma
por entrada da lista `files`.

Invariantes:
    - Cada partição recebe seu próprio FileConfig (nenhum compartilhamento)
    - transactionType ausente ou vazio vira "default"
    - Chave: `partition_{index}_{jobName}_{transactionType}`
    - A ordem de inserção do resultado segue a ordem de `files`

Limites explícitos:
    - Não inspeciona documentos de mapeamento
    - Não valida params de adapter (ver AdapterRegistry.create_reader)
"""

from __future__ import annotations

from typing import Any, Dict

from atlas_batch.core.exceptions import PartitioningError

from .model import FileConfig, PartitionUnit


DEFAULT_TRANSACTION_TYPE = "default"


def partition_key(index: int, job_name: str, transaction_type: str) -> str:
    return f"partition_{index}_{job_name}_{transaction_type}"


def partition(
    job_config: Dict[str, Any],
    *,
    source_system: str,
    job_name: str,
) -> Dict[str, PartitionUnit]:
    """
    Gera as partições de um job.

    Args:
        job_config: Bloco `batch.sources.<system>.jobs.<job>`.
        source_system: Sistema de origem do job.
        job_name: Nome do job.

    Returns:
        Dict[str, PartitionUnit]: Partições indexadas pela chave.

    Raises:
        PartitioningError: Lista de arquivos ausente, vazia ou inválida.
    """
    files = (job_config or {}).get("files")
    if not isinstance(files, list) or not files:
        raise PartitioningError(
            f"No files configured for job: {job_name}",
            details={"source_system": source_system, "job_name": job_name},
            hint="Declare ao menos uma entrada em files para o job.",
        )

    units: Dict[str, PartitionUnit] = {}
    for index, entry in enumerate(files):
        if not isinstance(entry, dict):
            raise PartitioningError(
                f"files[{index}] must be a mapping",
                details={"source_system": source_system, "job_name": job_name, "index": index},
            )

        raw_txn = entry.get("transactionType")
        transaction_type = str(raw_txn).strip() if raw_txn is not None else ""
        if not transaction_type:
            transaction_type = DEFAULT_TRANSACTION_TYPE

        file_config = FileConfig.from_dict(
            entry,
            source_system=source_system,
            job_name=job_name,
            transaction_type=transaction_type,
        )
        key = partition_key(index, job_name, transaction_type)
        units[key] = PartitionUnit(
            partition_key=key,
            file_config=file_config,
            source_system=source_system,
            job_name=job_name,
            transaction_type=transaction_type,
        )

    return units

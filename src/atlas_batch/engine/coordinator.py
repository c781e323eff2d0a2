# src/atlas_batch/engine/coordinator.py
"""
Coordinator de partições do Atlas Batch.

Executa cada PartitionUnit com seu próprio reader/processor/writer,
construídos por um ComponentFactory e descartados ao final da partição.

Modelo de execução:
    - ThreadPoolExecutor com `grid_size` workers
    - modo sequencial na thread chamadora quando `debug` ou `grid_size == 1`
    - nenhuma partição cancela outra; falhas viram PartitionResult FAILED

Tolerância a falhas por chunk (`chunk_size` registros):
    - processamento: exceções retryable são reexecutadas até `retry_limit`,
      depois puladas se skippable
    - escrita: o chunk é reexecutado; esgotadas as tentativas, é regravado
      item a item e apenas os registros com falha são pulados
    - leitura: registros ilegíveis (ItemProcessingError) são pulados; qualquer
      outra falha do reader encerra a partição
    - mais de `skip_limit` registros pulados → SkipLimitExceeded

Invariantes:
    - A ordem dos registros dentro da partição é preservada
    - `update(context)` de reader e writer roda após cada chunk gravado
    - O arquivo de saída só é publicado quando a partição completa
"""

from __future__ import annotations

import uuid
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Mapping, Optional

from atlas_batch.adapters.registry import AdapterRegistry
from atlas_batch.core.config.settings import BatchSettings
from atlas_batch.core.context import ExecutionContext
from atlas_batch.core.errors import exception_to_error
from atlas_batch.core.exceptions import ItemProcessingError, SkipLimitExceeded
from atlas_batch.core.protocols import ItemProcessor, ItemReader, ItemWriter, Record
from atlas_batch.core.types import PartitionResult, PartitionStatus
from atlas_batch.mapping.service import MappingDocumentService, SourceMappingService, TargetDefinitionService
from atlas_batch.partition.model import PartitionUnit
from atlas_batch.processor.enhanced import EnhancedProcessor
from atlas_batch.processor.generic import GenericProcessor
from atlas_batch.transform.engine import DegradePolicy, TransformationEngine
from atlas_batch.writer.fixed_width import FixedWidthWriter

from .policy import RetryPolicy, SkipPolicy


# ---------------------------------------------------------------------------
# Construção de componentes por partição
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class PartitionComponents:
    reader: ItemReader
    processor: ItemProcessor
    writer: ItemWriter


class ComponentFactory:
    """
    Constrói o grafo reader/processor/writer de uma partição.

    Registry, engine e serviços de mapeamento são compartilhados (somente
    leitura ou com cache thread-safe); reader, processor e writer são
    sempre instâncias novas.
    """

    def __init__(
        self,
        *,
        registry: AdapterRegistry,
        engine: TransformationEngine,
        mapping_service: MappingDocumentService,
        source_mappings: SourceMappingService,
        targets: TargetDefinitionService,
        processor: str = "generic",
        now: Optional[datetime] = None,
    ) -> None:
        self.registry = registry
        self.engine = engine
        self.mapping_service = mapping_service
        self.source_mappings = source_mappings
        self.targets = targets
        self.processor = processor
        self.now = now

    @classmethod
    def from_settings(
        cls,
        settings: BatchSettings,
        *,
        registry: AdapterRegistry,
        now: Optional[datetime] = None,
    ) -> "ComponentFactory":
        engine = TransformationEngine(
            explicit_references=settings.explicit_references,
            policy=DegradePolicy(settings.transform_policy),
        )
        return cls(
            registry=registry,
            engine=engine,
            mapping_service=MappingDocumentService(settings.mapping_root),
            source_mappings=SourceMappingService(settings.mapping_root),
            targets=TargetDefinitionService(settings.mapping_root),
            processor=settings.processor,
            now=now,
        )

    def processor_for(self, unit: PartitionUnit) -> ItemProcessor:
        kind = str(unit.file_config.param("processor", self.processor)).lower()
        if kind == "enhanced":
            return EnhancedProcessor(unit, self.source_mappings, self.targets, self.engine)
        return GenericProcessor(unit, self.mapping_service, self.engine)

    def build(self, unit: PartitionUnit) -> PartitionComponents:
        """
        Raises:
            ConfigurationError: Formato ausente, sem adapter ou params inválidos.
        """
        return PartitionComponents(
            reader=self.registry.create_reader(unit.file_config),
            processor=self.processor_for(unit),
            writer=FixedWidthWriter(unit.file_config, now=self.now),
        )


# ---------------------------------------------------------------------------
# Execução
# ---------------------------------------------------------------------------

@dataclass
class _Counters:
    read: int = 0
    written: int = 0
    skipped: int = 0
    retried: int = 0
    chunks: int = 0
    skipped_errors: List[str] = field(default_factory=list)


class _PartitionRun:
    """Estado de uma única execução de partição (não compartilhado)."""

    def __init__(
        self,
        *,
        unit: PartitionUnit,
        components: PartitionComponents,
        context: ExecutionContext,
        chunk_size: int,
        retry: RetryPolicy,
        skip: SkipPolicy,
    ) -> None:
        self.unit = unit
        self.reader = components.reader
        self.processor = components.processor
        self.writer = components.writer
        self.context = context
        self.chunk_size = chunk_size
        self.retry = retry
        self.skip = skip
        self.counters = _Counters()
        self._exhausted = False

    def execute(self) -> None:
        self.reader.open(self.context)
        self.writer.open(self.context)

        while True:
            records = self._read_chunk()
            if not records:
                break

            items = []
            for record in records:
                item = self._process(record)
                if item is not None:
                    items.append(item)

            self._write(items)
            self.reader.update(self.context)
            self.writer.update(self.context)
            self.counters.chunks += 1
            self.context.log(
                level="debug",
                message="chunk committed",
                chunk=self.counters.chunks,
                read=self.counters.read,
                written=self.counters.written,
                skipped=self.counters.skipped,
            )

            if self._exhausted:
                break

        self.reader.close()
        self.writer.close()

    # -----------------------------
    # Leitura
    # -----------------------------
    def _read_chunk(self) -> List[Record]:
        records: List[Record] = []
        while not self._exhausted and len(records) < self.chunk_size:
            try:
                record = self.reader.read()
            except Exception as e:
                # só erros de registro; falha do stream encerra a partição
                if not (isinstance(e, ItemProcessingError) and self.skip.is_skippable(e)):
                    raise
                self._skip(e, phase="read")
                continue
            if record is None:
                self._exhausted = True
                break
            self.counters.read += 1
            records.append(record)
        return records

    # -----------------------------
    # Processamento
    # -----------------------------
    def _process(self, record: Record) -> Optional[Record]:
        attempt = 0
        while True:
            try:
                return self.processor.process(record)
            except Exception as e:
                attempt += 1
                if self.retry.can_retry(e, attempt):
                    self._retried(e, phase="process", attempt=attempt)
                    continue
                if self.skip.is_skippable(e):
                    self._skip(e, phase="process")
                    return None
                raise

    # -----------------------------
    # Escrita
    # -----------------------------
    def _write(self, items: List[Record]) -> None:
        if not items:
            return

        attempt = 0
        while True:
            try:
                self.writer.write(items)
                self.counters.written += len(items)
                return
            except Exception as e:
                attempt += 1
                if self.retry.can_retry(e, attempt):
                    self._retried(e, phase="write", attempt=attempt)
                    continue
                if not self.skip.is_skippable(e):
                    raise
                self.context.log(
                    level="warning",
                    message="chunk write failed, scanning items",
                    items=len(items),
                    error=str(e),
                )
                break

        for item in items:
            try:
                self.writer.write([item])
                self.counters.written += 1
            except Exception as e:
                if not self.skip.is_skippable(e):
                    raise
                self._skip(e, phase="write")

    # -----------------------------
    # Contabilidade
    # -----------------------------
    def _retried(self, exc: BaseException, *, phase: str, attempt: int) -> None:
        self.counters.retried += 1
        self.context.log(
            level="warning",
            message="retrying after transient failure",
            phase=phase,
            attempt=attempt,
            error_type=exc.__class__.__name__,
            error=str(exc),
        )

    def _skip(self, exc: BaseException, *, phase: str) -> None:
        self.counters.skipped += 1
        self.counters.skipped_errors.append(f"{phase}: {exc}")
        self.context.log(
            level="warning",
            message="record skipped",
            phase=phase,
            skip_count=self.counters.skipped,
            error_type=exc.__class__.__name__,
            error=str(exc),
        )
        if self.counters.skipped > self.skip.limit:
            raise SkipLimitExceeded(
                f"Skip limit of {self.skip.limit} exceeded in {self.unit.partition_key}",
                details={
                    "partition_key": self.unit.partition_key,
                    "skip_limit": self.skip.limit,
                    "exc_type": exc.__class__.__name__,
                    "exc_message": str(exc),
                },
                hint="Corrija os registros rejeitados na origem ou aumente batch.skipLimit conscientemente.",
            ) from exc


class PartitionCoordinator:
    """Executa partições em paralelo (ou em sequência) e coleta os resultados."""

    def __init__(
        self,
        *,
        settings: BatchSettings,
        factory: ComponentFactory,
        run_id: Optional[str] = None,
        retry: Optional[RetryPolicy] = None,
        skip: Optional[SkipPolicy] = None,
    ) -> None:
        self.settings = settings
        self.factory = factory
        self.run_id = run_id or uuid.uuid4().hex
        self.retry = retry or RetryPolicy(limit=settings.retry_limit)
        self.skip = skip or SkipPolicy(limit=settings.skip_limit)

    def run(
        self,
        units: Mapping[str, PartitionUnit],
        checkpoints: Optional[Mapping[str, Dict[str, Any]]] = None,
    ) -> Dict[str, PartitionResult]:
        """
        Executa todas as partições.

        Returns:
            Dict[str, PartitionResult]: Resultados na ordem de `units`.
        """
        checkpoints = checkpoints or {}

        if self.settings.sequential:
            return {
                key: self.run_partition(unit, checkpoints.get(key))
                for key, unit in units.items()
            }

        with ThreadPoolExecutor(
            max_workers=self.settings.grid_size,
            thread_name_prefix="atlas-batch",
        ) as pool:
            futures = {
                key: pool.submit(self.run_partition, unit, checkpoints.get(key))
                for key, unit in units.items()
            }
            return {key: future.result() for key, future in futures.items()}

    def run_partition(
        self,
        unit: PartitionUnit,
        checkpoint: Optional[Dict[str, Any]] = None,
    ) -> PartitionResult:
        """Executa uma partição; falhas nunca escapam, viram PartitionResult FAILED."""
        context = ExecutionContext(
            run_id=self.run_id,
            partition_key=unit.partition_key,
            meta={
                "source_system": unit.source_system,
                "job_name": unit.job_name,
                "transaction_type": unit.transaction_type,
            },
        )
        for key, value in (checkpoint or {}).items():
            context.put(key, value)

        context.log(level="info", message="partition started", format=unit.file_config.format)

        run: Optional[_PartitionRun] = None
        try:
            components = self.factory.build(unit)
            run = _PartitionRun(
                unit=unit,
                components=components,
                context=context,
                chunk_size=self.settings.chunk_size,
                retry=self.retry,
                skip=self.skip,
            )
            run.execute()
        except Exception as e:
            if run is not None:
                self._release(run, context)
            error = exception_to_error(e, partition_key=unit.partition_key)
            context.log(
                level="error",
                message="partition failed",
                error_type=error.type,
                error=error.message,
            )
            return self._result(unit, context, run, PartitionStatus.FAILED, error.to_dict())

        for message in run.counters.skipped_errors:
            context.add_warning(message)
        context.log(
            level="info",
            message="partition completed",
            read=run.counters.read,
            written=run.counters.written,
            skipped=run.counters.skipped,
        )
        return self._result(unit, context, run, PartitionStatus.COMPLETED, None)

    @staticmethod
    def _release(run: _PartitionRun, context: ExecutionContext) -> None:
        try:
            run.reader.close()
        except Exception as e:
            context.log(level="warning", message="reader close failed", error=str(e))
        discard = getattr(run.writer, "discard", None)
        if callable(discard):
            discard()

    @staticmethod
    def _result(
        unit: PartitionUnit,
        context: ExecutionContext,
        run: Optional[_PartitionRun],
        status: PartitionStatus,
        error: Optional[Dict[str, Any]],
    ) -> PartitionResult:
        counters = run.counters if run is not None else _Counters()
        output_path = getattr(run.writer, "output_path", None) if run is not None else None
        return PartitionResult(
            partition_key=unit.partition_key,
            status=status,
            read_count=counters.read,
            write_count=counters.written,
            skip_count=counters.skipped,
            retry_count=counters.retried,
            output_path=str(output_path) if output_path is not None and status == PartitionStatus.COMPLETED else None,
            error=error,
            events=list(context.events),
            warnings=list(context.warnings),
            checkpoint=context.snapshot(),
        )

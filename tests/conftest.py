# tests/conftest.py
"""
Fixtures compartilhados para testes do Atlas Batch.

Este módulo define fixtures reutilizáveis que fornecem:
- YAMLs de configuração de batch (defaults + override local)
- uma árvore de mapeamentos em disco (`mappingRoot`) com documento
  posicional, mapeamento de origem e definição de target
- fábricas de FileConfig / PartitionUnit / ExecutionContext
- readers e writers em memória para testes do coordinator

Decisões arquiteturais:
    - Arquivos são criados sob `tmp_path` (isolamento por teste)
    - Imports do core são realizados de forma lazy dentro das fixtures
    - Componentes fake usam duck typing em vez de herança

Invariantes:
    - Nenhuma fixture acessa rede ou banco real
    - Todas as fixtures são seguras para execução em paralelo
"""

from pathlib import Path
from typing import Any, Dict, List, Optional

import pytest


# =====================================================
# Config fixtures
# =====================================================

@pytest.fixture
def batch_defaults_yaml() -> str:
    """YAML de defaults típico (`config.defaults.yaml`)."""
    return """\
batch:
  gridSize: 4
  chunkSize: 100
  retryLimit: 3
  skipLimit: 10
  debug: false
  sources:
    LEGACY:
      jobs:
        DELINQ:
          files:
            - transactionType: "200"
              params: {format: csv}
"""


@pytest.fixture
def batch_local_yaml() -> str:
    """YAML de override local (`config.local.yaml`)."""
    return """\
batch:
  gridSize: 1
  debug: true
"""


# =====================================================
# Mapping tree fixtures
# =====================================================

POSITIONAL_MAPPING_YAML = """\
fileType: DELINQ
transactionType: default
fields:
  LOCATION-CODE:
    targetField: LOCATION-CODE
    targetPosition: 1
    length: 6
    transformationType: constant
    value: "100020"
  TOTAL-DELINQ-AMT:
    targetField: TOTAL-DELINQ-AMT
    targetPosition: 2
    length: 19
    transformationType: source
    sourceField: TOTAL-DELINQ-AMT
---
fileType: DELINQ
transactionType: "200"
fields:
  ACCT-STATUS:
    targetField: ACCT-STATUS
    targetPosition: 2
    length: 8
    transformationType: conditional
    defaultValue: NONE
    conditions:
      - ifExpr: "STATUS='A'"
        then: Active
        elseIfExprs:
          - ifExpr: "STATUS='B'"
            then: Blocked
        elseExpr: Other
  ACCT-NUM:
    targetField: ACCT-NUM
    targetPosition: 1
    length: 5
    pad: left
    padChar: "0"
    transformationType: source
    sourceField: ACCT_NUM
"""

SOURCE_MAPPING_YAML = """\
sourceSystem: LEGACY
targetName: DELINQ-200
defaults:
  RECORD-TYPE:
    type: constant
    value: D
mappings:
  default:
    ACCOUNT:
      type: source_field
      sourceField: ACCT_NUM
    BALANCE:
      type: composite
      operation: sum
      sourceFields: [PRINCIPAL, INTEREST]
transactionMappings:
  "300":
    RECORD-TYPE:
      type: constant
      value: X
"""

TARGET_DEFINITION_YAML = """\
targetName: DELINQ-200
fileType: DELINQ
recordLength: 22
fields:
  - name: RECORD-TYPE
    position: 1
    length: 1
  - name: ACCOUNT
    position: 2
    length: 6
    padding: {side: left, character: "0"}
  - name: BALANCE
    position: 3
    length: 9
    dataType: numeric
    format: "9(7)V9(2)"
  - name: FILLER
    position: 4
    length: 6
"""


@pytest.fixture
def mapping_root(tmp_path: Path) -> Path:
    """
    Árvore de mapeamentos mínima:

        DELINQ/LEGACY/DELINQ.yml          (posicional, docs default + 200)
        mappings/LEGACY/DELINQ-200-mapping.yml
        targets/DELINQ-200.yml
    """
    root = tmp_path / "mapping-root"
    (root / "DELINQ" / "LEGACY").mkdir(parents=True)
    (root / "DELINQ" / "LEGACY" / "DELINQ.yml").write_text(POSITIONAL_MAPPING_YAML, encoding="utf-8")
    (root / "mappings" / "LEGACY").mkdir(parents=True)
    (root / "mappings" / "LEGACY" / "DELINQ-200-mapping.yml").write_text(SOURCE_MAPPING_YAML, encoding="utf-8")
    (root / "targets").mkdir(parents=True)
    (root / "targets" / "DELINQ-200.yml").write_text(TARGET_DEFINITION_YAML, encoding="utf-8")
    return root


# =====================================================
# Work-unit fixtures
# =====================================================

@pytest.fixture
def make_file_config():
    """Fábrica de FileConfig com job/sistema LEGACY/DELINQ."""
    from atlas_batch.partition.model import FileConfig

    def _make(params: Optional[Dict[str, Any]] = None, **kwargs: Any) -> FileConfig:
        values: Dict[str, Any] = {
            "source_system": "LEGACY",
            "job_name": "DELINQ",
            "transaction_type": "default",
            "params": dict(params or {}),
        }
        values.update(kwargs)
        return FileConfig(**values)

    return _make


@pytest.fixture
def make_unit(make_file_config):
    """Fábrica de PartitionUnit coerente com o FileConfig gerado."""
    from atlas_batch.partition.model import PartitionUnit

    def _make(params: Optional[Dict[str, Any]] = None, *, transaction_type: str = "default", key: str = "p0", **kwargs: Any):
        fc = make_file_config(params, transaction_type=transaction_type, **kwargs)
        return PartitionUnit(
            partition_key=key,
            file_config=fc,
            source_system="LEGACY",
            job_name="DELINQ",
            transaction_type=transaction_type,
        )

    return _make


@pytest.fixture
def context():
    """ExecutionContext determinístico."""
    from atlas_batch.core.context import ExecutionContext

    return ExecutionContext(run_id="run-test-001", partition_key="partition_0_DELINQ_default", meta={"source": "pytest"})


# =====================================================
# Fake streams
# =====================================================

class ListReader:
    """Reader em memória; `failures` mapeia índice → exceção levantada na leitura."""

    def __init__(self, records: List[Dict[str, Any]], failures: Optional[Dict[int, Exception]] = None) -> None:
        self.records = list(records)
        self.failures = dict(failures or {})
        self.position = 0
        self.opened = False
        self.closed = False

    def open(self, context) -> None:
        self.opened = True
        self.position = int(context.get("list.read.count", 0) or 0)

    def read(self):
        if self.position >= len(self.records):
            return None
        index = self.position
        self.position += 1
        if index in self.failures:
            raise self.failures[index]
        return self.records[index]

    def update(self, context) -> None:
        context.put("list.read.count", self.position)

    def close(self) -> None:
        self.closed = True


class ListWriter:
    """Writer em memória; `fail_on` recebe os itens e decide se falha."""

    def __init__(self, fail_on=None) -> None:
        self.items: List[Dict[str, Any]] = []
        self.fail_on = fail_on
        self.calls = 0
        self.closed = False
        self.discarded = False
        self.output_path = None

    def open(self, context) -> None:
        pass

    def write(self, items) -> None:
        self.calls += 1
        if self.fail_on is not None:
            self.fail_on(items, self.calls)
        self.items.extend(items)

    def update(self, context) -> None:
        context.put("list.write.count", len(self.items))

    def close(self) -> None:
        self.closed = True

    def discard(self) -> None:
        self.discarded = True


@pytest.fixture
def list_reader():
    return ListReader


@pytest.fixture
def list_writer():
    return ListWriter

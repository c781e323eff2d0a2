# src/atlas_batch/writer/fixed_width.py
"""
Writer de registros de largura fixa.

Cada registro processado (dict ordenado) vira uma linha com os valores
concatenados na ordem dos campos. Com `params.outputDelimiter`, os valores
são unidos pelo delimitador (saída delimitada).

Ciclo de vida:
    - open: resolve `params.outputPath` (placeholders ${DATE}/${TIMESTAMP}),
      cria diretórios pai e abre `<output>.part` em modo de escrita
    - write: grava um chunk de registros
    - update: grava o contador de linhas no contexto
    - close: renomeia `.part` para o caminho final
    - discard: remove `.part` (partição com falha)

Invariantes:
    - Nunca faz append: cada partição produz um arquivo novo
    - O arquivo final só aparece após `close()`
    - Um chunk com falha não deixa linhas no `.part` (truncado de volta)
"""

from __future__ import annotations

import os
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional, TextIO

from atlas_batch.core.context import ExecutionContext
from atlas_batch.core.exceptions import ItemWriteError, StreamOpenError, StreamWriteError
from atlas_batch.partition.model import FileConfig
from atlas_batch.transform.formatting import to_text


WRITE_COUNT_KEY = "writer.write.count"
PART_SUFFIX = ".part"


class FixedWidthWriter:
    def __init__(self, file_config: FileConfig, *, now: Optional[datetime] = None) -> None:
        self.file_config = file_config
        self.now = now
        self.delimiter = str(file_config.param("outputDelimiter", ""))
        self.encoding = str(file_config.param("outputEncoding", "utf-8"))

        self.output_path: Optional[Path] = None
        self._part_path: Optional[Path] = None
        self._handle: Optional[TextIO] = None
        self._write_count = 0

    def open(self, context: ExecutionContext) -> None:
        """
        Raises:
            ConfigurationError: Sem `params.outputPath`.
            StreamOpenError: Diretório/arquivo não pode ser criado.
        """
        self.output_path = Path(self.file_config.resolved_output_path(self.now))
        self._part_path = self.output_path.with_name(self.output_path.name + PART_SUFFIX)
        try:
            self.output_path.parent.mkdir(parents=True, exist_ok=True)
            self._handle = self._part_path.open("w", encoding=self.encoding, newline="")
        except OSError as e:
            raise StreamOpenError(
                f"Failed to open output file: {self.output_path}",
                details={"path": str(self.output_path), "error": str(e)},
            ) from e

        context.log(level="info", message="writer opened", output_path=str(self.output_path))

    def format_line(self, item: Dict[str, Any]) -> str:
        return self.delimiter.join(to_text(v) for v in item.values())

    def write(self, items: List[Dict[str, Any]]) -> None:
        """
        Raises:
            ItemWriteError: Falha ao gravar o chunk; o arquivo volta ao estado anterior.
            StreamWriteError: Falha e o arquivo não pôde ser truncado de volta.
        """
        if self._handle is None:
            raise ItemWriteError("Writer is not open", details={"target": self.file_config.target})

        lines = [self.format_line(item) + "\n" for item in items]
        mark = self._handle.tell()
        try:
            self._handle.writelines(lines)
            self._handle.flush()
        except OSError as e:
            self._rollback(mark, e)
            raise ItemWriteError(
                f"Failed to write {len(lines)} records",
                details={"path": str(self.output_path), "error": str(e)},
            ) from e
        self._write_count += len(lines)

    def _rollback(self, mark: int, cause: OSError) -> None:
        assert self._handle is not None
        try:
            self._handle.seek(mark)
            self._handle.truncate()
        except OSError as e:
            raise StreamWriteError(
                f"Failed to roll back partial write: {self.output_path}",
                details={"path": str(self.output_path), "error": str(cause), "rollback_error": str(e)},
            ) from e

    def update(self, context: ExecutionContext) -> None:
        context.put(WRITE_COUNT_KEY, self._write_count)

    @property
    def write_count(self) -> int:
        return self._write_count

    def close(self) -> None:
        if self._handle is None:
            return
        self._handle.close()
        self._handle = None
        assert self._part_path is not None and self.output_path is not None
        os.replace(self._part_path, self.output_path)

    def discard(self) -> None:
        if self._handle is not None:
            self._handle.close()
            self._handle = None
        if self._part_path is not None and self._part_path.exists():
            self._part_path.unlink()

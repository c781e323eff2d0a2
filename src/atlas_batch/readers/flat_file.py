# src/atlas_batch/readers/flat_file.py
"""
Reader de arquivos texto: delimitado ou largura fixa.

    - delimited / csv: `delimiter` (default ","), aspas duplas respeitadas
    - pipe: delimitado por "|"
    - fixed: `columnRanges` no formato "1-10,11-20" (1-based, inclusivo)

`columnNames` ("A,B,C") nomeia as colunas. Valores são strings sem
espaços nas bordas. Linhas vazias são ignoradas; `linesToSkip` descarta
cabeçalhos.

Linha delimitada com quantidade de colunas diferente de `columnNames`
levanta ItemProcessingError (candidata a skip pelo coordinator).
"""

from __future__ import annotations

import csv
from pathlib import Path
from typing import Dict, List, Optional, TextIO, Tuple

from atlas_batch.adapters.base import split_list_param
from atlas_batch.core.context import ExecutionContext
from atlas_batch.core.exceptions import ConfigurationError, ItemProcessingError, StreamOpenError
from atlas_batch.partition.model import FileConfig


READ_COUNT_KEY = "flat_file.read.count"


def parse_ranges(raw: str) -> List[Tuple[int, int]]:
    """
    `"1-10,11-20"` → `[(0, 10), (10, 20)]` (fatias Python).

    Raises:
        ConfigurationError: Intervalo malformado.
    """
    ranges: List[Tuple[int, int]] = []
    for part in split_list_param(raw):
        start, sep, end = part.partition("-")
        try:
            first = int(start)
            last = int(end) if sep else first
        except ValueError as e:
            raise ConfigurationError(f"Invalid column range: {part!r}", details={"columnRanges": raw}) from e
        if first < 1 or last < first:
            raise ConfigurationError(f"Invalid column range: {part!r}", details={"columnRanges": raw})
        ranges.append((first - 1, last))
    return ranges


class FlatFileReader:
    def __init__(self, file_config: FileConfig) -> None:
        self.file_config = file_config
        self.path = Path(file_config.input_path or "")
        self.mode = (file_config.format or "delimited").lower()
        self.names = split_list_param(file_config.param("columnNames"))
        if not self.names:
            raise ConfigurationError("columnNames is required", details={"inputPath": str(self.path)})

        self.delimiter = "|" if self.mode == "pipe" else str(file_config.param("delimiter", ","))
        self.ranges: List[Tuple[int, int]] = []
        if self.mode == "fixed":
            self.ranges = parse_ranges(file_config.param("columnRanges", ""))
            if len(self.ranges) != len(self.names):
                raise ConfigurationError(
                    "columnRanges and columnNames must have the same number of entries",
                    details={"ranges": len(self.ranges), "names": len(self.names)},
                )
        self.lines_to_skip = int(file_config.param("linesToSkip", 0))

        self._handle: Optional[TextIO] = None
        self._line_no = 0
        self._read_count = 0

    def open(self, context: ExecutionContext) -> None:
        try:
            self._handle = self.path.open("r", encoding=str(self.file_config.param("encoding", "utf-8")), newline="")
        except OSError as e:
            raise StreamOpenError(
                f"Failed to open input file: {self.path}",
                details={"path": str(self.path), "error": str(e)},
            ) from e

        for _ in range(self.lines_to_skip):
            self._next_line()

        for _ in range(int(context.get(READ_COUNT_KEY, 0) or 0)):
            if self._next_record_line() is None:
                break
            self._read_count += 1

    def _next_line(self) -> Optional[str]:
        assert self._handle is not None
        line = self._handle.readline()
        if not line:
            return None
        self._line_no += 1
        return line.rstrip("\r\n")

    def _next_record_line(self) -> Optional[str]:
        while True:
            line = self._next_line()
            if line is None or line.strip():
                return line

    def read(self) -> Optional[Dict[str, str]]:
        line = self._next_record_line()
        if line is None:
            return None
        self._read_count += 1
        if self.mode == "fixed":
            return self.tokenize_fixed(line)
        return self.tokenize_delimited(line)

    def tokenize_fixed(self, line: str) -> Dict[str, str]:
        return {name: line[start:end].strip() for name, (start, end) in zip(self.names, self.ranges)}

    def tokenize_delimited(self, line: str) -> Dict[str, str]:
        tokens = next(csv.reader([line], delimiter=self.delimiter))
        if len(tokens) != len(self.names):
            raise ItemProcessingError(
                f"Incorrect token count at line {self._line_no}: expected {len(self.names)}, got {len(tokens)}",
                details={"path": str(self.path), "line": self._line_no},
            )
        return {name: token.strip() for name, token in zip(self.names, tokens)}

    def update(self, context: ExecutionContext) -> None:
        context.put(READ_COUNT_KEY, self._read_count)

    def close(self) -> None:
        if self._handle is not None:
            self._handle.close()
            self._handle = None

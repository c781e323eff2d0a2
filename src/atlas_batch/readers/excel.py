# src/atlas_batch/readers/excel.py
"""
Reader de planilhas (pandas + openpyxl).

A primeira linha da planilha é o cabeçalho; cada linha seguinte vira um
registro indexado pelos rótulos do cabeçalho. Coerção por tipo de célula:

    - numérica  → float
    - booleana  → bool
    - texto     → str
    - vazia     → ""
    - data/hora → texto ISO
"""

from __future__ import annotations

import zipfile
from datetime import date, datetime
from typing import Any, Dict, List, Optional

import numpy as np
import pandas as pd
from openpyxl.utils.exceptions import InvalidFileException

from atlas_batch.core.context import ExecutionContext
from atlas_batch.core.exceptions import StreamOpenError
from atlas_batch.partition.model import FileConfig


READ_COUNT_KEY = "excel.read.count"


def coerce_cell(value: Any) -> Any:
    if value is None:
        return ""
    if isinstance(value, (bool, np.bool_)):
        return bool(value)
    if isinstance(value, (int, float, np.integer, np.floating)):
        return "" if pd.isna(value) else float(value)
    if isinstance(value, (datetime, date, pd.Timestamp)):
        return value.isoformat()
    if pd.isna(value):
        return ""
    return str(value)


class ExcelReader:
    def __init__(self, file_config: FileConfig) -> None:
        self.file_config = file_config
        self.path = file_config.input_path
        self.sheet = file_config.param("sheet", 0)

        self._rows: List[Dict[str, Any]] = []
        self._index = 0

    def open(self, context: ExecutionContext) -> None:
        try:
            frame = pd.read_excel(self.path, sheet_name=self.sheet, dtype=object, engine="openpyxl")
        except (OSError, ValueError, KeyError, zipfile.BadZipFile, InvalidFileException) as e:
            raise StreamOpenError(
                f"Failed opening Excel file: {self.path}",
                details={"path": str(self.path), "error": str(e)},
            ) from e

        headers = [str(h) for h in frame.columns]
        self._rows = [
            {header: coerce_cell(value) for header, value in zip(headers, row)}
            for row in frame.itertuples(index=False, name=None)
        ]
        self._index = min(int(context.get(READ_COUNT_KEY, 0) or 0), len(self._rows))

    def read(self) -> Optional[Dict[str, Any]]:
        if self._index >= len(self._rows):
            return None
        row = self._rows[self._index]
        self._index += 1
        return row

    def update(self, context: ExecutionContext) -> None:
        context.put(READ_COUNT_KEY, self._index)

    def close(self) -> None:
        self._rows = []

# src/atlas_batch/adapters/excel.py
"""Adapter de planilhas: `excel` (prioridade 10)."""

from __future__ import annotations

from atlas_batch.core.exceptions import ConfigurationError
from atlas_batch.partition.model import FileConfig
from atlas_batch.readers.excel import ExcelReader

from .base import BaseAdapter


class ExcelAdapter(BaseAdapter):
    name = "excel"
    priority = 10
    formats = frozenset({"excel"})

    def validate(self, file_config: FileConfig) -> None:
        if not (file_config.input_path or "").strip():
            raise ConfigurationError("Excel adapter requires 'inputPath'")

    def create_reader(self, file_config: FileConfig) -> ExcelReader:
        return ExcelReader(file_config)

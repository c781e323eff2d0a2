# src/atlas_batch/adapters/flat_file.py
"""Adapter de arquivo texto: `csv`, `delimited`, `fixed`, `pipe` (prioridade 10)."""

from __future__ import annotations

from atlas_batch.core.exceptions import ConfigurationError
from atlas_batch.partition.model import FileConfig
from atlas_batch.readers.flat_file import FlatFileReader, parse_ranges

from .base import BaseAdapter, require_param, split_list_param


class FlatFileAdapter(BaseAdapter):
    name = "flat_file"
    priority = 10
    formats = frozenset({"csv", "delimited", "fixed", "pipe"})

    def validate(self, file_config: FileConfig) -> None:
        if not (file_config.input_path or "").strip():
            raise ConfigurationError("File adapter requires 'inputPath'")

        names = split_list_param(require_param(file_config, "columnNames"))
        if any(not n for n in names):
            raise ConfigurationError("columnNames must not contain empty names")

        if (file_config.format or "").lower() == "fixed":
            ranges = parse_ranges(require_param(file_config, "columnRanges"))
            if len(ranges) != len(names):
                raise ConfigurationError("columnRanges and columnNames must have the same number of entries")
        else:
            delimiter = str(file_config.param("delimiter", ","))
            if len(delimiter) != 1:
                raise ConfigurationError(f"delimiter must be a single character, got: {delimiter!r}")

        skip = str(file_config.param("linesToSkip", 0))
        if not skip.isdigit():
            raise ConfigurationError(f"linesToSkip must be a non-negative integer, got: {skip}")

    def create_reader(self, file_config: FileConfig) -> FlatFileReader:
        return FlatFileReader(file_config)

# src/atlas_batch/adapters/jdbc.py
"""Adapter relacional: `jdbc`, `database`, `sql` (prioridade 100)."""

from __future__ import annotations

from typing import Callable, Optional

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine

from atlas_batch.core.exceptions import ConfigurationError
from atlas_batch.partition.model import FileConfig
from atlas_batch.readers.jdbc import DEFAULT_FETCH_SIZE, DEFAULT_PAGE_SIZE, JdbcReader

from .base import BaseAdapter, positive_int_param


class JdbcAdapter(BaseAdapter):
    """
    Cria JdbcReader sobre um Engine SQLAlchemy.

    O Engine vem do construtor (compartilhado entre partições) ou é criado
    por partição a partir de `params.url`.
    """

    name = "jdbc"
    priority = 100
    formats = frozenset({"jdbc", "database", "sql"})

    def __init__(
        self,
        engine: Optional[Engine] = None,
        engine_factory: Callable[[str], Engine] = create_engine,
    ) -> None:
        self.engine = engine
        self.engine_factory = engine_factory

    def validate(self, file_config: FileConfig) -> None:
        if not (file_config.target or "").strip():
            raise ConfigurationError("JDBC adapter requires 'target' (table name) to be specified")
        if self.engine is None and not file_config.param("url"):
            raise ConfigurationError("JDBC adapter requires a connection: set params.url")
        positive_int_param(file_config, "fetchSize", DEFAULT_FETCH_SIZE)
        positive_int_param(file_config, "pageSize", DEFAULT_PAGE_SIZE)

    def create_reader(self, file_config: FileConfig) -> JdbcReader:
        engine = self.engine or self.engine_factory(str(file_config.param("url")))
        return JdbcReader(file_config, engine)

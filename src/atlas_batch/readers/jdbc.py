# src/atlas_batch/readers/jdbc.py
"""
Reader relacional (SQLAlchemy).

Dois modos:
    - query customizada (`params.query`): cursor forward-only com
      `stream_results`, lido em blocos de `fetchSize`
    - paginação por tabela (`target`): keyset paging ordenado por `sortKey`
      (default ACCT_NUM), páginas de `pageSize`, com predicado opcional
      `{batchDateParam} = :batchDate` (valor em `batchDateValue`)

A paginação por keyset pressupõe `sortKey` único.
"""

from __future__ import annotations

import re
from typing import Any, Dict, Iterator, List, Optional

from sqlalchemy import bindparam, column, literal_column, quoted_name, select, table, text
from sqlalchemy.engine import Connection, Engine, MappingResult
from sqlalchemy.exc import SQLAlchemyError

from atlas_batch.adapters.base import positive_int_param
from atlas_batch.core.context import ExecutionContext
from atlas_batch.core.exceptions import ConfigurationError, StreamOpenError, StreamReadError
from atlas_batch.partition.model import FileConfig


DEFAULT_SORT_KEY = "ACCT_NUM"
DEFAULT_FETCH_SIZE = 500
DEFAULT_PAGE_SIZE = 1000
READ_COUNT_KEY = "jdbc.read.count"

_IDENTIFIER = re.compile(r"^[A-Za-z_][A-Za-z0-9_$#]*$")


def _identifier(value: str, what: str) -> quoted_name:
    if not _IDENTIFIER.match(value or ""):
        raise ConfigurationError(f"Invalid SQL identifier for {what}: {value!r}", details={what: value})
    return quoted_name(value, quote=False)


def _row_value(row: Dict[str, Any], key: str) -> Any:
    if key in row:
        return row[key]
    lowered = key.lower()
    for name, value in row.items():
        if name.lower() == lowered:
            return value
    raise KeyError(key)


class JdbcReader:
    def __init__(self, file_config: FileConfig, engine: Engine) -> None:
        self.file_config = file_config
        self.engine = engine
        self.query: Optional[str] = file_config.param("query")
        self.fetch_size = positive_int_param(file_config, "fetchSize", DEFAULT_FETCH_SIZE)
        self.page_size = positive_int_param(file_config, "pageSize", DEFAULT_PAGE_SIZE)
        self.sort_key = str(file_config.param("sortKey") or DEFAULT_SORT_KEY)

        self._connection: Optional[Connection] = None
        self._rows: Iterator[Dict[str, Any]] = iter(())
        self._read_count = 0
        self._failure: Optional[StreamReadError] = None

    # ------------------------------------------------------------------
    # Stream
    # ------------------------------------------------------------------

    def open(self, context: ExecutionContext) -> None:
        restart_at = int(context.get(READ_COUNT_KEY, 0) or 0)
        cursor_mode = bool(self.query and self.query.strip())
        if not cursor_mode:
            self.page_statement(after_key=False)

        try:
            self._connection = self.engine.connect()
            if cursor_mode:
                self._rows = self._cursor_rows()
            else:
                self._rows = self._paged_rows()
        except SQLAlchemyError as e:
            self.close()
            raise StreamOpenError(
                "Failed to open JDBC reader",
                details={"target": self.file_config.target, "error": str(e)},
            ) from e

        for _ in range(restart_at):
            if self._next_row() is None:
                break
            self._read_count += 1

    def read(self) -> Optional[Dict[str, Any]]:
        """
        Raises:
            StreamReadError: Falha do banco após o open (página seguinte, cursor).
        """
        row = self._next_row()
        if row is not None:
            self._read_count += 1
        return row

    def _next_row(self) -> Optional[Dict[str, Any]]:
        # um generator que levantou está encerrado; a falha não pode virar EOF
        if self._failure is not None:
            raise self._failure
        try:
            return next(self._rows, None)
        except SQLAlchemyError as e:
            self._failure = StreamReadError(
                "JDBC read failed mid-stream",
                details={
                    "target": self.file_config.target,
                    "read_count": self._read_count,
                    "error": str(e),
                },
            )
            raise self._failure from e

    def update(self, context: ExecutionContext) -> None:
        context.put(READ_COUNT_KEY, self._read_count)

    def close(self) -> None:
        if self._connection is not None:
            self._connection.close()
            self._connection = None

    # ------------------------------------------------------------------
    # Modos de leitura
    # ------------------------------------------------------------------

    def _cursor_rows(self) -> Iterator[Dict[str, Any]]:
        assert self._connection is not None
        result = self._connection.execution_options(stream_results=True).execute(text(self.query))
        return self._drain(result.mappings())

    def _drain(self, mappings: MappingResult) -> Iterator[Dict[str, Any]]:
        while True:
            batch = mappings.fetchmany(self.fetch_size)
            if not batch:
                return
            for row in batch:
                yield dict(row)

    def page_statement(self, after_key: bool):
        """SELECT * paginado por `sortKey`, com predicado de data opcional."""
        target = self.file_config.target
        if not target:
            raise ConfigurationError("JDBC adapter requires 'target' (table name) to be specified")

        schema, _, name = target.rpartition(".")
        source = table(_identifier(name, "target"), schema=_identifier(schema, "schema") if schema else None)
        sort_column = column(_identifier(self.sort_key, "sortKey"))

        stmt = select(literal_column("*")).select_from(source)

        date_param = self.file_config.param("batchDateParam")
        if date_param:
            stmt = stmt.where(column(_identifier(str(date_param), "batchDateParam")) == bindparam("batchDate"))
        if after_key:
            stmt = stmt.where(sort_column > bindparam("lastKey"))

        return stmt.order_by(sort_column).limit(self.page_size)

    def _paged_rows(self) -> Iterator[Dict[str, Any]]:
        assert self._connection is not None
        params: Dict[str, Any] = {}
        if self.file_config.param("batchDateParam"):
            params["batchDate"] = self.file_config.param("batchDateValue")

        first_page = self._fetch_page(params, after_key=False)
        return self._pages(first_page, params)

    def _fetch_page(self, params: Dict[str, Any], *, after_key: bool) -> List[Dict[str, Any]]:
        assert self._connection is not None
        result = self._connection.execute(self.page_statement(after_key), params)
        return [dict(row) for row in result.mappings()]

    def _pages(self, page: List[Dict[str, Any]], params: Dict[str, Any]) -> Iterator[Dict[str, Any]]:
        while page:
            yield from page
            if len(page) < self.page_size:
                return
            params = dict(params, lastKey=_row_value(page[-1], self.sort_key))
            page = self._fetch_page(params, after_key=True)

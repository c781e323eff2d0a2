# src/atlas_batch/adapters/registry.py
"""
Registry de adapters de fonte.

Na inscrição, cada adapter é sondado contra um catálogo fixo de tokens de
formato. Para cada token suportado, o adapter de maior prioridade vence;
em empate o primeiro inscrito permanece.

Invariantes:
    - Busca case-insensitive
    - Formato desconhecido → NoAdapterFound com a lista de formatos suportados
    - `create_reader` valida o FileConfig antes de construir o reader

Concorrência:
    - O registry é montado na inicialização e apenas lido pelas partições
"""

from __future__ import annotations

from typing import Any, Dict, Iterable, List, Optional, Sequence

import requests
from sqlalchemy.engine import Engine

from atlas_batch.core.context import EventLog
from atlas_batch.core.exceptions import ConfigurationError, InvalidAdapterConfiguration, NoAdapterFound
from atlas_batch.core.protocols import ItemReader
from atlas_batch.partition.model import FileConfig

from .base import SourceAdapter
from .excel import ExcelAdapter
from .flat_file import FlatFileAdapter
from .jdbc import JdbcAdapter
from .rest import RestAdapter


FORMAT_CATALOG = (
    "jdbc", "database", "sql",
    "rest", "api", "http", "https",
    "kafka", "stream",
    "s3", "aws",
    "csv", "excel", "json", "xml",
    "delimited", "fixed", "pipe",
)


class AdapterRegistry:
    def __init__(
        self,
        adapters: Iterable[SourceAdapter] = (),
        *,
        catalog: Sequence[str] = FORMAT_CATALOG,
    ) -> None:
        self._catalog = tuple(token.lower() for token in catalog)
        self._by_format: Dict[str, SourceAdapter] = {}
        self._adapters: List[SourceAdapter] = []
        self.log = EventLog("adapters.registry")

        for adapter in adapters:
            self.register(adapter)

    def register(self, adapter: SourceAdapter) -> None:
        """
        Inscreve um adapter para todos os tokens do catálogo que ele suporta.

        Raises:
            TypeError: Objeto não conforme ao contrato SourceAdapter.
        """
        if not isinstance(adapter, SourceAdapter):
            raise TypeError(f"not a source adapter: {adapter!r}")

        self._adapters.append(adapter)
        self.log.record(level="info", message="adapter discovered", adapter=adapter.name, priority=adapter.priority)

        for token in self._catalog:
            if not adapter.supports(token):
                continue

            existing = self._by_format.get(token)
            if existing is None:
                self._by_format[token] = adapter
                self.log.record(level="debug", message="format registered", format=token, adapter=adapter.name)
            elif adapter.priority > existing.priority:
                self._by_format[token] = adapter
                self.log.record(
                    level="info",
                    message="format superseded",
                    format=token,
                    adapter=adapter.name,
                    previous=existing.name,
                    priority=adapter.priority,
                    previous_priority=existing.priority,
                )
            else:
                self.log.record(
                    level="debug",
                    message="format kept by higher priority adapter",
                    format=token,
                    adapter=adapter.name,
                    kept=existing.name,
                )

    def get_adapter(self, format: str) -> SourceAdapter:
        """
        Raises:
            ConfigurationError: Formato vazio.
            NoAdapterFound: Nenhum adapter para o formato.
        """
        if format is None or not str(format).strip():
            raise ConfigurationError("Format cannot be null or empty")

        adapter = self._by_format.get(str(format).strip().lower())
        if adapter is None:
            supported = self.supported_formats()
            raise NoAdapterFound(
                f"No adapter found for format '{format}'. Supported formats: [{', '.join(supported)}]",
                details={"format": format, "supported_formats": supported},
                hint="Declare params.format com um dos formatos suportados.",
            )
        return adapter

    def create_reader(self, file_config: FileConfig) -> ItemReader:
        """
        Resolve o adapter por `params.format`, valida e cria o reader.

        Raises:
            ConfigurationError: FileConfig sem `format`.
            NoAdapterFound: Formato desconhecido.
            InvalidAdapterConfiguration: Regras do adapter violadas.
        """
        format = file_config.format
        if format is None:
            raise ConfigurationError(
                "FileConfig must specify 'format' parameter",
                details={"target": file_config.target, "transaction_type": file_config.transaction_type},
            )

        adapter = self.get_adapter(format)
        try:
            adapter.validate(file_config)
        except (ConfigurationError, ValueError) as e:
            raise InvalidAdapterConfiguration(
                f"Invalid configuration for format '{format}': {e}",
                details={"format": format, "adapter": adapter.name, "error": str(e)},
            ) from e

        return adapter.create_reader(file_config)

    def supported_formats(self) -> List[str]:
        return sorted(self._by_format)

    def adapters(self) -> List[SourceAdapter]:
        return list(self._adapters)

    @property
    def events(self) -> List[Dict[str, Any]]:
        return self.log.events


def default_registry(*, engine: Optional[Engine] = None, session: Optional[requests.Session] = None) -> AdapterRegistry:
    """Registry com os adapters embutidos (JDBC, REST, arquivo texto, Excel)."""
    return AdapterRegistry(
        [
            JdbcAdapter(engine=engine),
            RestAdapter(session=session),
            FlatFileAdapter(),
            ExcelAdapter(),
        ]
    )

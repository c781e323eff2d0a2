# src/atlas_batch/partition/model.py
"""
Descritores de unidade de trabalho.

    - FileConfig    → um arquivo de saída declarado no job (fonte, template, params)
    - PartitionUnit → FileConfig + chave de partição + contexto do job

Ambos são imutáveis. A única exceção é o caminho de template derivado
(`{job}/{system}/{job}.yml`), memoizado no primeiro acesso.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from functools import cached_property
from typing import Any, Dict, Optional, Tuple

from atlas_batch.core.exceptions import ConfigurationError


DATE_PLACEHOLDER = "${DATE}"
TIMESTAMP_PLACEHOLDER = "${TIMESTAMP}"


@dataclass(frozen=True)
class FileConfig:
    input_path: Optional[str] = None
    target: Optional[str] = None
    template: Optional[str] = None
    transaction_type: Optional[str] = None
    transaction_types: Tuple[str, ...] = ()
    params: Dict[str, Any] = field(default_factory=dict)
    source_system: Optional[str] = None
    job_name: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any], **overrides: Any) -> "FileConfig":
        """Constrói a partir de uma entrada `files[]` do job (chaves camelCase)."""
        if not isinstance(data, dict):
            raise ConfigurationError(
                "file entry must be a mapping",
                details={"received": type(data).__name__},
            )

        params = data.get("params") or {}
        if not isinstance(params, dict):
            raise ConfigurationError("params must be a mapping", details={"params": repr(params)})

        values: Dict[str, Any] = {
            "input_path": data.get("inputPath"),
            "target": data.get("target"),
            "template": data.get("template"),
            "transaction_type": data.get("transactionType"),
            "transaction_types": tuple(str(t) for t in data.get("transactionTypes") or []),
            "params": dict(params),
            "source_system": data.get("sourceSystem"),
            "job_name": data.get("jobName"),
        }
        if values["transaction_type"] is not None:
            values["transaction_type"] = str(values["transaction_type"])
        values.update(overrides)
        return cls(**values)

    def param(self, key: str, default: Any = None) -> Any:
        value = self.params.get(key)
        return default if value is None else value

    @property
    def format(self) -> Optional[str]:
        value = self.params.get("format")
        return None if value is None else str(value)

    @cached_property
    def mapping_template(self) -> str:
        """
        Template explícito ou `{job}/{system}/{job}.yml`.

        Raises:
            ConfigurationError: Sem template e sem job/sistema.
        """
        if self.template:
            return self.template
        if self.job_name and self.source_system:
            return f"{self.job_name}/{self.source_system}/{self.job_name}.yml"
        raise ConfigurationError(
            f"Cannot construct template path: jobName={self.job_name}, sourceSystem={self.source_system}",
            details={"job_name": self.job_name, "source_system": self.source_system},
        )

    @property
    def template_name(self) -> str:
        """Nome do template sem diretório nem extensão `.yml`."""
        return self.mapping_template.rsplit("/", 1)[-1].replace(".yml", "")

    def resolved_output_path(self, now: Optional[datetime] = None) -> str:
        """
        `params.outputPath` com `${DATE}` (yyyyMMdd) e `${TIMESTAMP}`
        (yyyyMMddHHmmss) substituídos.

        Raises:
            ConfigurationError: Sem `outputPath`.
        """
        output_path = self.params.get("outputPath")
        if not output_path:
            raise ConfigurationError(
                "No outputPath configured",
                details={"target": self.target, "transaction_type": self.transaction_type},
                hint="Declare params.outputPath no arquivo do job.",
            )

        now = now or datetime.now()
        return (
            str(output_path)
            .replace(DATE_PLACEHOLDER, now.strftime("%Y%m%d"))
            .replace(TIMESTAMP_PLACEHOLDER, now.strftime("%Y%m%d%H%M%S"))
        )


@dataclass(frozen=True)
class PartitionUnit:
    partition_key: str
    file_config: FileConfig
    source_system: str
    job_name: str
    transaction_type: str

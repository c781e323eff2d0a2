# src/atlas_batch/processor/generic.py
"""
Processor posicional.

Para cada registro:
    1) resolve o YamlMapping de (template, transaction type) da partição
    2) ordena os campos por `targetPosition`
    3) chama `TransformationEngine.transform_field` uma vez por campo

O resultado é um dict na ordem dos campos (o writer depende dessa ordem).

Invariantes:
    - Falha em qualquer campo falha o registro inteiro (sem emissão parcial)
    - Falhas viram ItemProcessingError (candidato a skip); erros transitórios
      e de configuração são propagados sem reempacotamento
"""

from __future__ import annotations

from typing import Any, Dict, Mapping

from atlas_batch.core.exceptions import ConfigurationError, ItemProcessingError, TransientProcessingError
from atlas_batch.mapping.service import MappingDocumentService
from atlas_batch.partition.model import PartitionUnit
from atlas_batch.transform.engine import TransformationEngine


class GenericProcessor:
    def __init__(
        self,
        unit: PartitionUnit,
        mapping_service: MappingDocumentService,
        engine: TransformationEngine,
    ) -> None:
        self.unit = unit
        self.mapping_service = mapping_service
        self.engine = engine

    def process(self, record: Mapping[str, Any]) -> Dict[str, str]:
        """
        Raises:
            MappingNotFound: Template sem documento para o transaction type.
            ItemProcessingError: Falha de transformação em algum campo.
        """
        mapping = self.mapping_service.get_mapping(
            self.unit.file_config.mapping_template,
            self.unit.transaction_type,
        )

        output: Dict[str, str] = {}
        for name, field_mapping in mapping.ordered_fields():
            try:
                output[field_mapping.target_field or name] = self.engine.transform_field(record, field_mapping)
            except (ConfigurationError, TransientProcessingError):
                raise
            except Exception as e:
                raise ItemProcessingError(
                    f"Failed to transform field '{name}': {e}",
                    details={
                        "field": name,
                        "partition_key": self.unit.partition_key,
                        "transaction_type": self.unit.transaction_type,
                        "error_type": e.__class__.__name__,
                    },
                ) from e
        return output

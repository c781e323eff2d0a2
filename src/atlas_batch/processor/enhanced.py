# src/atlas_batch/processor/enhanced.py
"""
Processor source → target.

O layout de saída vem de uma definição canônica de target (TargetDefinition)
e as regras de cada campo vêm do mapeamento do sistema de origem
(SourceMappingService). Campos sem regra caem no blank constant " ".

Resolução do target:
    - `params.targetName`, se informado
    - senão `{jobName}-{transactionType}`

Um registro com a coluna `transactionType` sobrepõe o transaction type da
partição, tanto na escolha do target quanto na busca das regras.
"""

from __future__ import annotations

from typing import Any, Dict, Mapping, Optional

from atlas_batch.core.exceptions import ConfigurationError, ItemProcessingError, TransientProcessingError
from atlas_batch.mapping.service import SourceMappingService, TargetDefinitionService
from atlas_batch.partition.model import PartitionUnit
from atlas_batch.transform.engine import TransformationEngine
from atlas_batch.transform.expressions import field_value
from atlas_batch.transform.formatting import format_value, to_text


RECORD_TRANSACTION_TYPE_FIELD = "transactionType"


class EnhancedProcessor:
    def __init__(
        self,
        unit: PartitionUnit,
        source_mappings: SourceMappingService,
        targets: TargetDefinitionService,
        engine: TransformationEngine,
    ) -> None:
        self.unit = unit
        self.source_mappings = source_mappings
        self.targets = targets
        self.engine = engine

    def transaction_type_for(self, record: Mapping[str, Any]) -> str:
        override: Optional[Any] = field_value(record, RECORD_TRANSACTION_TYPE_FIELD)
        if override is not None and to_text(override).strip():
            return to_text(override).strip()
        return self.unit.transaction_type

    def target_name_for(self, record: Mapping[str, Any]) -> str:
        explicit = self.unit.file_config.param("targetName")
        if explicit:
            return str(explicit)
        return f"{self.unit.job_name}-{self.transaction_type_for(record)}"

    def process(self, record: Mapping[str, Any]) -> Dict[str, str]:
        """
        Raises:
            TargetDefinitionError: Definição de target ausente ou inválida.
            ItemProcessingError: Falha de transformação ou formatação em algum campo.
        """
        transaction_type = self.transaction_type_for(record)
        target_name = self.target_name_for(record)
        definition = self.targets.get_target_definition(target_name)

        output: Dict[str, str] = {}
        for target_field in definition.fields:
            rule = self.source_mappings.get_field_mapping(
                self.unit.source_system,
                target_name,
                target_field.name,
                transaction_type,
            )
            try:
                raw = self.engine.transform_enhanced(record, rule, target_field.default_value)
                output[target_field.name] = format_value(raw, target_field, rule.source_format)
            except (ConfigurationError, TransientProcessingError):
                raise
            except Exception as e:
                raise ItemProcessingError(
                    f"Failed to transform field '{target_field.name}': {e}",
                    details={
                        "field": target_field.name,
                        "target": target_name,
                        "partition_key": self.unit.partition_key,
                        "transaction_type": transaction_type,
                        "error_type": e.__class__.__name__,
                    },
                ) from e
        return output

# src/atlas_batch/mapping/service.py
"""
Serviços de busca de mapeamentos.

Três serviços, todos seguros para uso concorrente e com cache injetável:

    - MappingDocumentService  → documentos posicionais `{template}` (multi-doc)
    - SourceMappingService    → overrides `mappings/{system}/{target}-mapping.yml`
    - TargetDefinitionService → schemas canônicos `targets/{target}.yml`

Todos os caminhos são relativos a `root` (BatchSettings.mapping_root).

Decisões arquiteturais:
    - Caches são instâncias de MemoCache pertencentes ao serviço, não globais
    - Mapeamento de origem ausente não é erro: resulta em mapeamento vazio
      (todos os campos caem no blank constant " ")
    - Definição de target ausente é erro de configuração
"""

from __future__ import annotations

from pathlib import Path
from typing import List, Optional, Tuple, Union

from atlas_batch.core.context import EventLog
from atlas_batch.core.exceptions import MappingNotFound, TargetDefinitionError

from .cache import MemoCache
from .loader import load_document, load_documents
from .schema import EnhancedFieldMapping, SourceTargetMapping, TargetDefinition, TargetField, YamlMapping


DEFAULT_TRANSACTION_TYPE = "default"
BLANK_VALUE = " "


class MappingDocumentService:
    """Resolve o YamlMapping de um par (template, transaction type)."""

    def __init__(
        self,
        root: Union[str, Path] = ".",
        *,
        documents: Optional[MemoCache[str, List[YamlMapping]]] = None,
        resolved: Optional[MemoCache[Tuple[str, str], YamlMapping]] = None,
    ) -> None:
        self.root = Path(root)
        self._documents = documents if documents is not None else MemoCache()
        self._resolved = resolved if resolved is not None else MemoCache()
        self.log = EventLog("mapping.documents")

    def load_mappings(self, template: str) -> List[YamlMapping]:
        """
        Carrega (uma vez) todos os documentos do template.

        Raises:
            MappingNotFound: Arquivo inexistente.
            MappingValidationError: Documento inválido.
        """
        return self._documents.get_or_compute(template, self._load)

    def _load(self, template: str) -> List[YamlMapping]:
        path = self.root / template
        try:
            raw = load_documents(path)
        except FileNotFoundError as e:
            raise MappingNotFound(
                f"Mapping template not found: {template}",
                details={"template": template, "path": str(path)},
                hint="Verifique o campo template do arquivo ou o diretório batch.mappingRoot.",
            ) from e

        mappings = [YamlMapping.from_dict(doc) for doc in raw]
        self.log.record(level="info", message="mapping template loaded", template=template, documents=len(mappings))
        return mappings

    def get_mapping(self, template: str, transaction_type: Optional[str]) -> YamlMapping:
        """
        Seleciona o documento do transaction type (case-insensitive).

        Sem documento específico, usa o documento `default`.

        Raises:
            MappingNotFound: Nenhum documento específico nem `default`.
        """
        key = (template, (transaction_type or DEFAULT_TRANSACTION_TYPE).lower())
        return self._resolved.get_or_compute(key, self._select)

    def _select(self, key: Tuple[str, str]) -> YamlMapping:
        template, txn = key
        documents = self.load_mappings(template)

        for wanted in (txn, DEFAULT_TRANSACTION_TYPE):
            for doc in documents:
                if (doc.transaction_type or "").lower() == wanted:
                    return doc

        raise MappingNotFound(
            f"No mapping for {template}/{txn}",
            details={"template": template, "transaction_type": txn},
            hint="Crie o documento do transaction type ou um documento 'default'.",
        )

    def clear_cache(self) -> None:
        self._documents.clear()
        self._resolved.clear()


class SourceMappingService:
    """Busca de regras de campo por sistema de origem e target."""

    def __init__(
        self,
        root: Union[str, Path] = ".",
        *,
        cache: Optional[MemoCache[Tuple[str, str], SourceTargetMapping]] = None,
    ) -> None:
        self.root = Path(root)
        self._cache = cache if cache is not None else MemoCache()
        self.log = EventLog("mapping.source")

    def mapping_path(self, source_system: str, target_name: str) -> Path:
        return self.root / "mappings" / source_system / f"{target_name}-mapping.yml"

    def get_source_mapping(self, source_system: str, target_name: str) -> SourceTargetMapping:
        return self._cache.get_or_compute((source_system, target_name), self._load)

    def _load(self, key: Tuple[str, str]) -> SourceTargetMapping:
        source_system, target_name = key
        path = self.mapping_path(source_system, target_name)
        try:
            raw = load_document(path)
        except FileNotFoundError:
            self.log.record(
                level="warning",
                message="source mapping not found, using blank defaults",
                path=str(path),
            )
            return SourceTargetMapping.empty(source_system, target_name)

        mapping = SourceTargetMapping.from_dict(raw, source_system=source_system, target_name=target_name)
        self.log.record(
            level="info",
            message="source mapping loaded",
            source_system=source_system,
            target_name=target_name,
            rules=mapping.count(),
        )
        return mapping

    def get_field_mapping(
        self,
        source_system: str,
        target_name: str,
        field_name: str,
        transaction_type: Optional[str] = None,
    ) -> EnhancedFieldMapping:
        """
        Resolve a regra de um campo.

        Precedência: transaction type → grupo `default` → defaults → blank constant.
        """
        mapping = self.get_source_mapping(source_system, target_name)

        if transaction_type is not None:
            rule = mapping.transaction_mappings.get(transaction_type, {}).get(field_name)
            if rule is not None:
                return rule

        rule = mapping.mappings.get(DEFAULT_TRANSACTION_TYPE, {}).get(field_name)
        if rule is not None:
            return rule

        rule = mapping.defaults.get(field_name)
        if rule is not None:
            return rule

        return EnhancedFieldMapping(type="constant", value=BLANK_VALUE, fallback=BLANK_VALUE)

    def count_mappings(self, source_system: str, target_name: str) -> int:
        return self.get_source_mapping(source_system, target_name).count()

    def clear_cache(self) -> None:
        self._cache.clear()
        self.log.record(level="info", message="source mapping cache cleared")


class TargetDefinitionService:
    """Carrega e valida schemas canônicos de saída."""

    def __init__(
        self,
        root: Union[str, Path] = ".",
        *,
        cache: Optional[MemoCache[str, TargetDefinition]] = None,
    ) -> None:
        self.root = Path(root)
        self._cache = cache if cache is not None else MemoCache()
        self.log = EventLog("mapping.targets")

    def definition_path(self, target_name: str) -> Path:
        return self.root / "targets" / f"{target_name}.yml"

    def get_target_definition(self, target_name: str) -> TargetDefinition:
        """
        Raises:
            TargetDefinitionError: Arquivo ausente ou definição inválida.
        """
        return self._cache.get_or_compute(target_name, self._load)

    def _load(self, target_name: str) -> TargetDefinition:
        path = self.definition_path(target_name)
        try:
            raw = load_document(path)
        except FileNotFoundError as e:
            raise TargetDefinitionError(
                f"Target definition not found: {path}",
                details={"target": target_name, "path": str(path)},
            ) from e

        definition = TargetDefinition.from_dict(raw, target_name=target_name)
        self.log.record(
            level="info",
            message="target definition loaded",
            target_name=target_name,
            fields=len(definition.fields),
        )
        return definition

    def get_field(self, target_name: str, field_name: str) -> Optional[TargetField]:
        return self.get_target_definition(target_name).get_field(field_name)

    def clear_cache(self) -> None:
        self._cache.clear()
        self.log.record(level="info", message="target definition cache cleared")

# src/atlas_batch/mapping/schema.py
"""
Modelo de mapeamento do Atlas Batch.

Este módulo materializa, a partir de dicionários YAML já carregados, as
estruturas imutáveis consumidas pelo engine de transformação:

    - FieldMapping / Condition / YamlMapping       → caminho posicional
    - EnhancedFieldMapping / ConditionalRule /
      SourceTargetMapping                          → caminho source → target
    - TargetDefinition / TargetField               → schema canônico de saída

As chaves dos documentos seguem camelCase (`targetField`, `ifExpr`, ...);
os atributos Python seguem snake_case.

Invariantes:
    - Cada FieldMapping declara exatamente um payload para o seu tipo
    - `target_position` é único dentro de um YamlMapping
    - Posições de um TargetDefinition formam a sequência densa 1..N

Limites explícitos:
    - Não lê arquivos (ver `mapping.loader`)
    - Não avalia condições nem aplica transformações
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

from atlas_batch.core.exceptions import MappingValidationError, TargetDefinitionError


TRANSFORMATION_TYPES = {"constant", "source", "composite", "conditional", "blank"}
ENHANCED_TYPES = {"constant", "source_field", "composite", "conditional", "blank"}
COMPOSITE_OPERATIONS = {"sum", "concat"}
DATA_TYPES = {"string", "numeric", "date"}
PAD_SIDES = {"left", "right"}


def _is_non_empty_str(x: Any) -> bool:
    return isinstance(x, str) and bool(x.strip())


def _expect(cond: bool, msg: str, **details: Any) -> None:
    if not cond:
        raise MappingValidationError(msg, details=details)


def _opt_str(value: Any) -> Optional[str]:
    if value is None:
        return None
    return value if isinstance(value, str) else str(value)


def _int(value: Any, default: int = 0) -> int:
    if value is None or value == "":
        return default
    if isinstance(value, bool):
        raise ValueError(f"expected integer, got {value!r}")
    return int(value)


# ---------------------------------------------------------------------------
# Caminho posicional
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Condition:
    """Cadeia if / else-if / else de um campo condicional."""

    if_expr: Optional[str] = None
    then: Optional[str] = None
    else_expr: Optional[str] = None
    else_if_exprs: Tuple["Condition", ...] = ()

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Condition":
        _expect(isinstance(data, dict), "condition must be a mapping")
        else_ifs = data.get("elseIfExprs") or []
        _expect(isinstance(else_ifs, list), "elseIfExprs must be a list")
        return cls(
            if_expr=_opt_str(data.get("ifExpr")),
            then=_opt_str(data.get("then")),
            else_expr=_opt_str(data.get("elseExpr")),
            else_if_exprs=tuple(cls.from_dict(c) for c in else_ifs),
        )


@dataclass(frozen=True)
class FieldMapping:
    """
    Regra de produção de um campo de saída posicional.

    Campos por tipo:
        - constant:    value (vazio cai em default_value)
        - source:      source_field + default_value
        - composite:   sources + transform (sum|concat) + delimiter
        - conditional: conditions
        - blank:       default_value
    """

    target_field: str
    target_position: int = 0
    length: int = 0
    pad: str = "right"
    pad_char: str = " "
    transformation_type: Optional[str] = None
    value: Optional[str] = None
    source_field: Optional[str] = None
    default_value: Optional[str] = None
    sources: Tuple[str, ...] = ()
    transform: Optional[str] = None
    delimiter: Optional[str] = None
    conditions: Tuple[Condition, ...] = ()
    format: Optional[str] = None
    target_format: Optional[str] = None
    data_type: Optional[str] = None

    @property
    def kind(self) -> str:
        return (self.transformation_type or "").strip().lower()

    @classmethod
    def from_dict(cls, name: str, data: Dict[str, Any]) -> "FieldMapping":
        """
        Materializa e valida um FieldMapping a partir do bloco YAML do campo.

        Raises:
            MappingValidationError: Estrutura inválida ou payload inconsistente.
        """
        _expect(isinstance(data, dict), f"field '{name}' must be a mapping", field=name)

        sources: List[str] = []
        for i, src in enumerate(data.get("sources") or []):
            if isinstance(src, dict):
                src = src.get("sourceField") or src.get("field")
            _expect(_is_non_empty_str(src), f"field '{name}': sources[{i}] must name a source field", field=name)
            sources.append(src.strip())

        conditions = data.get("conditions") or []
        if isinstance(conditions, dict):
            conditions = [conditions]
        _expect(isinstance(conditions, list), f"field '{name}': conditions must be a list", field=name)

        pad_side = (_opt_str(data.get("pad")) or "right").strip().lower()
        _expect(pad_side in PAD_SIDES, f"field '{name}': pad must be one of {sorted(PAD_SIDES)}", field=name)

        try:
            position = _int(data.get("targetPosition"))
            length = _int(data.get("length"))
        except (TypeError, ValueError) as e:
            raise MappingValidationError(
                f"field '{name}': targetPosition/length must be integers",
                details={"field": name, "error": str(e)},
            ) from e

        mapping = cls(
            target_field=_opt_str(data.get("targetField")) or name,
            target_position=position,
            length=length,
            pad=pad_side,
            pad_char=_opt_str(data.get("padChar")) or " ",
            transformation_type=_opt_str(data.get("transformationType")),
            value=_opt_str(data.get("value")),
            source_field=_opt_str(data.get("sourceField")),
            default_value=_opt_str(data.get("defaultValue")),
            sources=tuple(sources),
            transform=_opt_str(data.get("transform")),
            delimiter=_opt_str(data.get("delimiter")),
            conditions=tuple(Condition.from_dict(c) for c in conditions),
            format=_opt_str(data.get("format")),
            target_format=_opt_str(data.get("targetFormat")),
            data_type=_opt_str(data.get("dataType")),
        )
        mapping.validate()
        return mapping

    def validate(self) -> None:
        """Garante exatamente um payload coerente com o tipo declarado."""
        kind = self.kind
        name = self.target_field
        if not kind or kind not in TRANSFORMATION_TYPES:
            # tipo desconhecido: resolvido como default_value pelo engine
            return

        has_value = self.value is not None
        has_source = self.source_field is not None
        has_sources = bool(self.sources)
        has_conditions = bool(self.conditions)

        if kind == "constant":
            _expect(not (has_source or has_sources or has_conditions),
                    f"field '{name}': constant must only declare value", field=name)
        elif kind == "source":
            _expect(_is_non_empty_str(self.source_field),
                    f"field '{name}': source requires sourceField", field=name)
            _expect(not (has_value or has_sources or has_conditions),
                    f"field '{name}': source must only declare sourceField", field=name)
        elif kind == "composite":
            _expect(has_sources, f"field '{name}': composite requires sources", field=name)
            _expect(not (has_value or has_source or has_conditions),
                    f"field '{name}': composite must only declare sources", field=name)
        elif kind == "conditional":
            _expect(has_conditions, f"field '{name}': conditional requires conditions", field=name)
            _expect(not (has_value or has_source or has_sources),
                    f"field '{name}': conditional must only declare conditions", field=name)


@dataclass(frozen=True)
class YamlMapping:
    """Documento de mapeamento de um transaction type."""

    file_type: Optional[str]
    transaction_type: Optional[str]
    fields: Dict[str, FieldMapping] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Any) -> "YamlMapping":
        _expect(isinstance(data, dict), "mapping document must be a mapping/dict")
        raw_fields = data.get("fields")
        _expect(isinstance(raw_fields, dict) and bool(raw_fields),
                "mapping document must declare a non-empty 'fields' map")

        fields = {name: FieldMapping.from_dict(name, block) for name, block in raw_fields.items()}

        seen: Dict[int, str] = {}
        for name, fm in fields.items():
            _expect(fm.target_position not in seen,
                    f"duplicate targetPosition {fm.target_position}: '{seen.get(fm.target_position)}' and '{name}'",
                    position=fm.target_position)
            seen[fm.target_position] = name

        return cls(
            file_type=_opt_str(data.get("fileType")),
            transaction_type=_opt_str(data.get("transactionType")),
            fields=fields,
        )

    def ordered_fields(self) -> List[Tuple[str, FieldMapping]]:
        """Campos em ordem crescente de `target_position`."""
        return sorted(self.fields.items(), key=lambda item: item[1].target_position)


# ---------------------------------------------------------------------------
# Caminho source → target
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ConditionalRule:
    condition: Optional[str] = None
    then_value: Optional[str] = None
    else_value: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ConditionalRule":
        _expect(isinstance(data, dict), "conditional rule must be a mapping")
        return cls(
            condition=_opt_str(data.get("condition")),
            then_value=_opt_str(data.get("thenValue")),
            else_value=_opt_str(data.get("elseValue")),
        )


@dataclass(frozen=True)
class EnhancedFieldMapping:
    """Regra de um campo no mapeamento source → target."""

    type: str = "blank"
    source_field: Optional[str] = None
    value: Optional[str] = None
    fallback: Optional[str] = None
    operation: Optional[str] = None
    source_fields: Tuple[str, ...] = ()
    delimiter: Optional[str] = None
    conditions: Tuple[ConditionalRule, ...] = ()
    source_format: Optional[str] = None

    @classmethod
    def constant(cls, value: str) -> "EnhancedFieldMapping":
        return cls(type="constant", value=value)

    @classmethod
    def from_dict(cls, name: str, data: Dict[str, Any]) -> "EnhancedFieldMapping":
        _expect(isinstance(data, dict), f"field '{name}' must be a mapping", field=name)
        kind = (_opt_str(data.get("type")) or "").strip().lower()
        _expect(kind in ENHANCED_TYPES, f"field '{name}': type must be one of {sorted(ENHANCED_TYPES)}", field=name)

        operation = _opt_str(data.get("operation"))
        if kind == "composite":
            _expect((operation or "").lower() in COMPOSITE_OPERATIONS,
                    f"field '{name}': composite operation must be sum or concat", field=name)

        source_fields = data.get("sourceFields") or []
        _expect(isinstance(source_fields, list), f"field '{name}': sourceFields must be a list", field=name)

        return cls(
            type=kind,
            source_field=_opt_str(data.get("sourceField")),
            value=_opt_str(data.get("value")),
            fallback=_opt_str(data.get("fallback")),
            operation=operation,
            source_fields=tuple(str(s).strip() for s in source_fields),
            delimiter=_opt_str(data.get("delimiter")),
            conditions=tuple(ConditionalRule.from_dict(c) for c in data.get("conditions") or []),
            source_format=_opt_str(data.get("sourceFormat")),
        )


def _enhanced_group(group: Any, where: str) -> Dict[str, EnhancedFieldMapping]:
    _expect(isinstance(group, dict), f"{where} must be a mapping")
    return {name: EnhancedFieldMapping.from_dict(name, block) for name, block in group.items()}


@dataclass(frozen=True)
class SourceTargetMapping:
    """
    Overrides de um sistema de origem para um target canônico.

    Precedência de busca de um campo:
        transactionMappings[txn] → mappings["default"] → defaults → blank constant
    """

    source_system: str
    target_name: str
    description: Optional[str] = None
    defaults: Dict[str, EnhancedFieldMapping] = field(default_factory=dict)
    mappings: Dict[str, Dict[str, EnhancedFieldMapping]] = field(default_factory=dict)
    transaction_mappings: Dict[str, Dict[str, EnhancedFieldMapping]] = field(default_factory=dict)

    @classmethod
    def empty(cls, source_system: str, target_name: str) -> "SourceTargetMapping":
        return cls(source_system=source_system, target_name=target_name)

    @classmethod
    def from_dict(cls, data: Any, *, source_system: str, target_name: str) -> "SourceTargetMapping":
        if data is None:
            return cls.empty(source_system, target_name)
        _expect(isinstance(data, dict), "source mapping must be a mapping/dict")

        return cls(
            source_system=_opt_str(data.get("sourceSystem")) or source_system,
            target_name=_opt_str(data.get("targetName")) or target_name,
            description=_opt_str(data.get("description")),
            defaults=_enhanced_group(data.get("defaults") or {}, "defaults"),
            mappings={
                group: _enhanced_group(block or {}, f"mappings.{group}")
                for group, block in (data.get("mappings") or {}).items()
            },
            transaction_mappings={
                str(txn): _enhanced_group(block or {}, f"transactionMappings.{txn}")
                for txn, block in (data.get("transactionMappings") or {}).items()
            },
        )

    def count(self) -> int:
        """Total de regras declaradas (defaults + grupos + transaction types)."""
        total = len(self.defaults)
        total += sum(len(g) for g in self.mappings.values())
        total += sum(len(g) for g in self.transaction_mappings.values())
        return total


# ---------------------------------------------------------------------------
# Target canônico
# ---------------------------------------------------------------------------

def _target_expect(cond: bool, msg: str, **details: Any) -> None:
    if not cond:
        raise TargetDefinitionError(msg, details=details)


@dataclass(frozen=True)
class Padding:
    side: str = "right"
    character: str = " "


@dataclass(frozen=True)
class FieldValidation:
    required: bool = False
    pattern: Optional[str] = None
    max_length: Optional[int] = None
    allowed_values: Tuple[str, ...] = ()


@dataclass(frozen=True)
class TargetField:
    name: str
    position: int
    length: int
    data_type: str = "string"
    format: Optional[str] = None
    padding: Padding = field(default_factory=Padding)
    default_value: Optional[str] = None
    validation: Optional[FieldValidation] = None
    description: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Any, index: int) -> "TargetField":
        _target_expect(isinstance(data, dict), f"fields[{index}] must be a mapping")
        name = data.get("name")
        _target_expect(_is_non_empty_str(name), f"fields[{index}].name is required")

        try:
            position = _int(data.get("position"), -1)
            length = _int(data.get("length"), -1)
        except (TypeError, ValueError) as e:
            raise TargetDefinitionError(
                f"field '{name}': position/length must be integers", details={"field": name}
            ) from e
        _target_expect(position >= 1, f"Invalid position for field: {name}", field=name, position=position)
        _target_expect(length >= 1, f"Invalid length for field: {name}", field=name, length=length)

        data_type = (_opt_str(data.get("dataType")) or "string").lower()
        _target_expect(data_type in DATA_TYPES, f"field '{name}': dataType must be one of {sorted(DATA_TYPES)}")
        fmt = _opt_str(data.get("format"))
        _target_expect(data_type != "date" or _is_non_empty_str(fmt),
                       f"Date format required for field: {name}", field=name)

        raw_padding = data.get("padding") or {}
        side = (_opt_str(raw_padding.get("side")) or "right").lower()
        _target_expect(side in PAD_SIDES, f"field '{name}': padding.side must be left or right")
        padding = Padding(side=side, character=_opt_str(raw_padding.get("character")) or " ")

        validation = None
        raw_validation = data.get("validation")
        if isinstance(raw_validation, dict):
            max_length = raw_validation.get("maxLength")
            validation = FieldValidation(
                required=bool(raw_validation.get("required", False)),
                pattern=_opt_str(raw_validation.get("pattern")),
                max_length=int(max_length) if max_length is not None else None,
                allowed_values=tuple(str(v) for v in raw_validation.get("allowedValues") or []),
            )

        return cls(
            name=name,
            position=position,
            length=length,
            data_type=data_type,
            format=fmt,
            padding=padding,
            default_value=_opt_str(data.get("defaultValue")),
            validation=validation,
            description=_opt_str(data.get("description")),
        )


@dataclass(frozen=True)
class TargetDefinition:
    """Schema canônico de saída compartilhado entre sistemas de origem."""

    target_name: str
    fields: Tuple[TargetField, ...]
    file_type: Optional[str] = None
    record_length: Optional[int] = None
    transaction_types: Tuple[str, ...] = ()
    description: Optional[str] = None
    version: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Any, *, target_name: str) -> "TargetDefinition":
        """
        Valida e materializa uma definição de target.

        Raises:
            TargetDefinitionError: fields vazio, posição/length inválidos
                ou posições fora da sequência densa 1..N.
        """
        _target_expect(isinstance(data, dict), f"Target definition '{target_name}' must be a mapping")
        raw_fields = data.get("fields")
        _target_expect(isinstance(raw_fields, list) and bool(raw_fields),
                       f"Target definition must have fields: {target_name}", target=target_name)

        fields = sorted(
            (TargetField.from_dict(f, i) for i, f in enumerate(raw_fields)),
            key=lambda f: f.position,
        )
        positions = [f.position for f in fields]
        _target_expect(positions == list(range(1, len(fields) + 1)),
                       f"Target definition '{target_name}' positions must form 1..{len(fields)}",
                       target=target_name, positions=positions)

        record_length = data.get("recordLength")
        return cls(
            target_name=_opt_str(data.get("targetName")) or target_name,
            fields=tuple(fields),
            file_type=_opt_str(data.get("fileType")),
            record_length=int(record_length) if record_length is not None else None,
            transaction_types=tuple(str(t) for t in data.get("transactionTypes") or []),
            description=_opt_str(data.get("description")),
            version=_opt_str(data.get("version")),
        )

    def get_field(self, name: str) -> Optional[TargetField]:
        for f in self.fields:
            if f.name == name:
                return f
        return None

# src/atlas_batch/transform/engine.py
"""
Engine de transformação de campos.

Produz o valor textual de um campo de saída a partir de um registro de
entrada e de uma regra declarativa. Dois caminhos compartilham a mesma
resolução de valores:

    - posicional: `transform_field(record, FieldMapping)`, com padding/truncamento
      e condições na gramática simples
    - source → target: `transform_enhanced(record, EnhancedFieldMapping, fallback)`,
      sem padding (o processor formata pelo TargetField) e condições na
      gramática estendida

Resolução de valores:
    - busca de campo exata, depois case-insensitive
    - valores `then`/`else` com prefixo `$` são referências explícitas a campo
    - valores sem prefixo: em modo compatível, se existir um campo com esse
      nome o valor do campo vence, senão é literal; com
      `explicit_references=True` são sempre literais

Política de degradação:
    - `resolve*` retorna TransformResult(value, error); `value` já é o valor
      degradado (0 para parcela não numérica, default para tipo desconhecido)
    - DegradePolicy.DEGRADE (padrão) usa `value` e ignora `error`
    - DegradePolicy.STRICT levanta TransformationError quando há `error`

Limites explícitos:
    - Não carrega documentos de mapeamento
    - Não conhece a ordem dos campos (responsabilidade do processor)
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Iterator, List, Mapping, Optional, Sequence, Tuple

from atlas_batch.core.exceptions import TransformationError
from atlas_batch.mapping.schema import Condition, EnhancedFieldMapping, FieldMapping

from .expressions import (
    ExpressionEvaluator,
    ExtendedExpressionEvaluator,
    SimpleExpressionEvaluator,
    field_value,
    parse_number,
)
from .formatting import pad_field, to_text


REFERENCE_PREFIX = "$"
BLANK = " "


class DegradePolicy(str, Enum):
    DEGRADE = "degrade"
    STRICT = "strict"


@dataclass(frozen=True)
class TransformResult:
    """Valor resolvido de um campo e, opcionalmente, o motivo de degradação."""

    value: Optional[str]
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def or_else(self, fallback: Optional[str]) -> str:
        if self.value is not None:
            return self.value
        return fallback if fallback is not None else ""


class TransformationEngine:
    def __init__(
        self,
        *,
        simple_evaluator: Optional[ExpressionEvaluator] = None,
        extended_evaluator: Optional[ExpressionEvaluator] = None,
        explicit_references: bool = False,
        policy: DegradePolicy = DegradePolicy.DEGRADE,
    ) -> None:
        self.simple_evaluator = simple_evaluator or SimpleExpressionEvaluator()
        self.extended_evaluator = extended_evaluator or ExtendedExpressionEvaluator()
        self.explicit_references = explicit_references
        self.policy = DegradePolicy(policy)

    # ------------------------------------------------------------------
    # Caminho posicional
    # ------------------------------------------------------------------

    def transform_field(self, record: Mapping[str, Any], mapping: FieldMapping) -> str:
        """
        Valor final do campo, com padding/truncamento para `mapping.length`.

        Raises:
            TransformationError: Sob política estrita, quando a resolução degrada.
            ValueError: Campo numeric/date sem `format`.
        """
        result = self.resolve(record, mapping)
        self._apply_policy(result, mapping.target_field)
        return pad_field(result.or_else(""), mapping)

    def resolve(self, record: Mapping[str, Any], mapping: FieldMapping) -> TransformResult:
        """Resolve o valor bruto (sem padding) de um FieldMapping."""
        kind = mapping.kind
        default = mapping.default_value

        if kind == "constant":
            value = mapping.value
            if (value is None or not value.strip()) and default is not None:
                value = default
            return TransformResult(value)

        if kind == "source":
            found = field_value(record, mapping.source_field)
            return TransformResult(default if found is None else to_text(found))

        if kind == "composite":
            return self._composite(record, mapping.sources, mapping.transform, mapping.delimiter, default)

        if kind == "conditional":
            return self._conditional(record, mapping.conditions, default)

        if kind == "blank" or not kind:
            return TransformResult(default)

        return TransformResult(default, f"unknown transformation type '{mapping.transformation_type}'")

    def _conditional(
        self,
        record: Mapping[str, Any],
        conditions: Sequence[Condition],
        default: Optional[str],
    ) -> TransformResult:
        for expr, then in self._branches(conditions):
            if expr and self.simple_evaluator.evaluate(expr, record):
                return self.reference(then, record)

        else_value = self._else_value(conditions)
        if else_value:
            return self.reference(else_value, record)

        return TransformResult(default if default is not None else "")

    def _branches(self, conditions: Sequence[Condition]) -> Iterator[Tuple[Optional[str], Optional[str]]]:
        for condition in conditions:
            yield condition.if_expr, condition.then
            yield from self._branches(condition.else_if_exprs)

    def _else_value(self, conditions: Sequence[Condition]) -> Optional[str]:
        for condition in conditions:
            if condition.else_expr:
                return condition.else_expr
            nested = self._else_value(condition.else_if_exprs)
            if nested:
                return nested
        return None

    # ------------------------------------------------------------------
    # Caminho source → target
    # ------------------------------------------------------------------

    def transform_enhanced(
        self,
        record: Mapping[str, Any],
        mapping: Optional[EnhancedFieldMapping],
        fallback_value: Optional[str] = None,
    ) -> str:
        """
        Valor do campo no caminho source → target (sem padding).

        Sem regra, retorna `fallback_value` (ou um espaço).

        Raises:
            TransformationError: Sob política estrita, quando a resolução degrada.
        """
        if mapping is None:
            return fallback_value if fallback_value is not None else BLANK

        result = self.resolve_enhanced(record, mapping)
        self._apply_policy(result, mapping.source_field or mapping.type)
        return result.or_else(fallback_value)

    def resolve_enhanced(self, record: Mapping[str, Any], mapping: EnhancedFieldMapping) -> TransformResult:
        kind = (mapping.type or "").lower()

        if kind == "constant":
            return TransformResult(mapping.value)

        if kind == "source_field":
            found = field_value(record, mapping.source_field)
            return TransformResult(mapping.fallback if found is None else to_text(found))

        if kind == "composite":
            return self._composite(
                record, mapping.source_fields, mapping.operation, mapping.delimiter, mapping.fallback
            )

        if kind == "conditional":
            for rule in mapping.conditions:
                if rule.condition and self.extended_evaluator.evaluate(rule.condition, record):
                    return self.reference(rule.then_value, record)
            for rule in mapping.conditions:
                if rule.else_value:
                    return self.reference(rule.else_value, record)
            return TransformResult(mapping.fallback)

        if kind == "blank":
            return TransformResult(BLANK)

        return TransformResult(mapping.fallback, f"unknown mapping type '{mapping.type}'")

    # ------------------------------------------------------------------
    # Resolução compartilhada
    # ------------------------------------------------------------------

    def reference(self, token: Optional[str], record: Mapping[str, Any]) -> TransformResult:
        """
        Resolve um valor `then`/`else`.

        `$CAMPO` é sempre referência; sem prefixo, depende de `explicit_references`.
        """
        if token is None:
            return TransformResult(None)

        if token.startswith(REFERENCE_PREFIX) and len(token) > 1:
            name = token[len(REFERENCE_PREFIX):]
            found = field_value(record, name)
            if found is None:
                return TransformResult("", f"unresolved field reference '{name}'")
            return TransformResult(to_text(found))

        if self.explicit_references:
            return TransformResult(token)

        found = field_value(record, token)
        return TransformResult(token if found is None else to_text(found))

    def _composite(
        self,
        record: Mapping[str, Any],
        sources: Sequence[str],
        operation: Optional[str],
        delimiter: Optional[str],
        default: Optional[str],
    ) -> TransformResult:
        if not sources:
            return TransformResult(default)

        op = (operation or "").lower()

        if op == "sum":
            total = 0.0
            problems: List[str] = []
            for name in sources:
                raw = field_value(record, name)
                if raw is None:
                    continue
                try:
                    total += parse_number(to_text(raw))
                except ValueError:
                    problems.append(f"non-numeric value for '{name}': {raw!r}")
            return TransformResult(str(total), "; ".join(problems) or None)

        if op == "concat":
            parts = [to_text(field_value(record, name)) for name in sources]
            return TransformResult((delimiter or "").join(parts))

        return TransformResult(default, f"unsupported composite operation '{operation}'")

    def _apply_policy(self, result: TransformResult, field_name: str) -> None:
        if result.error is not None and self.policy == DegradePolicy.STRICT:
            raise TransformationError(
                f"Transformation failed for field '{field_name}': {result.error}",
                details={"field": field_name, "error": result.error},
            )

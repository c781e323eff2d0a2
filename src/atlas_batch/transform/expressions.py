# src/atlas_batch/transform/expressions.py
"""
Avaliadores de expressões condicionais.

Duas gramáticas distintas coexistem e não são unificadas:

    SimpleExpressionEvaluator (Condition.if_expr)
        - exatamente um operador `=`, `<` ou `>` na expressão
        - `=` compara strings; `<`/`>` comparam como float
        - aspas simples/duplas do literal são removidas

    ExtendedExpressionEvaluator (ConditionalRule.condition)
        - `||` de cláusulas unidas por `&&`; `!` nega uma cláusula
        - operadores `=`, `==`, `!=`, `<`, `>`, `<=`, `>=`
        - literais sem aspas, com aspas simples ou duplas
        - `null` testa presença/ausência do campo em `=`/`!=`
        - comparação numérica trata campo ausente como 0

Invariantes:
    - Avaliação não tem efeitos colaterais
    - Falha de parsing ou de conversão numérica resulta em False
"""

from __future__ import annotations

import re
from typing import Any, Mapping, Optional, Protocol, runtime_checkable


@runtime_checkable
class ExpressionEvaluator(Protocol):
    def evaluate(self, expression: Optional[str], record: Mapping[str, Any]) -> bool:
        ...


def field_value(record: Mapping[str, Any], name: Optional[str]) -> Any:
    """Busca exata por `name`; se ausente, busca case-insensitive nas chaves."""
    if not name:
        return None
    if name in record:
        return record[name]
    lowered = name.lower()
    for key, value in record.items():
        if isinstance(key, str) and key.lower() == lowered:
            return value
    return None


def _field_text(record: Mapping[str, Any], name: str) -> Optional[str]:
    value = field_value(record, name)
    return None if value is None else str(value)


_DECIMAL = re.compile(r"[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?", re.ASCII)


def parse_number(text: Optional[str]) -> float:
    """Número decimal ASCII estrito (sem `_`, dígitos Unicode, `inf` ou `nan`); senão ValueError."""
    cleaned = (text or "").strip()
    if not _DECIMAL.fullmatch(cleaned):
        raise ValueError(f"not a decimal number: {text!r}")
    return float(cleaned)


class SimpleExpressionEvaluator:
    """Gramática de operador único: `FIELD=value`, `FIELD<10`, `FIELD>10`."""

    _OPERATORS = ("=", "<", ">")

    def evaluate(self, expression: Optional[str], record: Mapping[str, Any]) -> bool:
        if not expression or not expression.strip():
            return False

        counts = {op: expression.count(op) for op in self._OPERATORS}
        if sum(counts.values()) != 1:
            return False

        op = next(op for op, n in counts.items() if n)
        name, _, literal = expression.partition(op)
        name = name.strip()
        literal = literal.strip()
        if len(literal) >= 2 and literal[0] == literal[-1] and literal[0] in "'\"":
            literal = literal[1:-1]

        actual = _field_text(record, name)
        if actual is None:
            return False

        if op == "=":
            return actual == literal

        try:
            left, right = parse_number(actual), parse_number(literal)
        except ValueError:
            return False
        return left < right if op == "<" else left > right


class ExtendedExpressionEvaluator:
    """Gramática booleana `A=='x' && !B=null || C>=10`."""

    _CLAUSE = re.compile(
        r"""([^!=<>()\s]+)\s*(==|=|!=|>=|<=|<|>)\s*('([^']*)'|"([^"]*)"|[^\s]+)"""
    )

    def evaluate(self, expression: Optional[str], record: Mapping[str, Any]) -> bool:
        if not expression or not expression.strip():
            return False

        for disjunct in expression.split("||"):
            if all(self._clause(c, record) for c in disjunct.split("&&")):
                return True
        return False

    def _clause(self, clause: str, record: Mapping[str, Any]) -> bool:
        clause = clause.strip()
        negate = clause.startswith("!")
        if negate:
            clause = clause[1:].strip()

        match = self._CLAUSE.fullmatch(clause)
        if match is None:
            return False

        name, op = match.group(1), match.group(2)
        if match.group(4) is not None:
            literal = match.group(4)
        elif match.group(5) is not None:
            literal = match.group(5)
        else:
            literal = match.group(3)

        result = self._compare(_field_text(record, name), op, literal)
        return not result if negate else result

    @staticmethod
    def _compare(actual: Optional[str], op: str, literal: str) -> bool:
        if op in ("=", "=="):
            if literal == "null":
                return actual is None
            return actual is not None and actual == literal

        if op == "!=":
            if literal == "null":
                return actual is not None
            return actual is None or actual != literal

        try:
            left = parse_number(actual) if actual is not None else 0.0
            right = parse_number(literal)
        except ValueError:
            return False

        if op == "<":
            return left < right
        if op == ">":
            return left > right
        if op == "<=":
            return left <= right
        return left >= right

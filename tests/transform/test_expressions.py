# tests/transform/test_expressions.py
"""
Testes dos dois avaliadores de expressão.

As gramáticas são distintas e não devem ser unificadas:
    - simples: um único operador `=`, `<` ou `>`
    - estendida: `&&`, `||`, `!`, `==`, `!=`, `<=`, `>=`, `null`

Em ambas, falha de parsing ou de conversão resulta em False.
"""

import pytest

from atlas_batch.transform.expressions import (
    ExpressionEvaluator,
    ExtendedExpressionEvaluator,
    SimpleExpressionEvaluator,
    field_value,
    parse_number,
)


def test_field_value_is_exact_then_case_insensitive():
    record = {"Status": "A", "status": "b"}

    assert field_value(record, "status") == "b"
    assert field_value({"Status": "A"}, "STATUS") == "A"
    assert field_value(record, "missing") is None
    assert field_value(record, None) is None


def test_evaluators_share_the_protocol():
    assert isinstance(SimpleExpressionEvaluator(), ExpressionEvaluator)
    assert isinstance(ExtendedExpressionEvaluator(), ExpressionEvaluator)


@pytest.mark.parametrize(
    "expr,record,expected",
    [
        ("STATUS='A'", {"STATUS": "A"}, True),
        ('STATUS="A"', {"STATUS": "A"}, True),
        ("STATUS = A", {"STATUS": "A"}, True),
        ("status='A'", {"STATUS": "A"}, True),
        ("STATUS='A'", {"STATUS": "B"}, False),
        ("STATUS='A'", {}, False),
        ("AMT>10", {"AMT": "10.5"}, True),
        ("AMT<10", {"AMT": 3}, True),
        ("AMT<10", {"AMT": "x"}, False),
        ("AMT>10", {"AMT": "1_000"}, False),
        ("AMT<10", {"AMT": "nan"}, False),
        ("AMT>=10", {"AMT": "11"}, False),
        ("A=B=C", {"A": "B=C"}, False),
        ("STATUS", {"STATUS": "A"}, False),
        ("", {"STATUS": "A"}, False),
        (None, {}, False),
    ],
)
def test_simple_grammar(expr, record, expected):
    assert SimpleExpressionEvaluator().evaluate(expr, record) is expected


@pytest.mark.parametrize(
    "expr,record,expected",
    [
        ("A=='x' && !B=null", {"A": "x", "B": "1"}, True),
        ("A=='x' && !B=null", {"A": "x"}, False),
        ("A==y || C>=10", {"A": "x", "C": "10"}, True),
        ("A==y || C>10", {"A": "x", "C": "10"}, False),
        ("B=null", {}, True),
        ("B!=null", {}, False),
        ("B!='1'", {}, True),
        ("B!='1'", {"B": "1"}, False),
        ("AMT>5", {}, False),
        ("AMT<5", {}, True),
        ("AMT<=5", {"AMT": "5"}, True),
        ("AMT>abc", {"AMT": "7"}, False),
        ("AMT>5", {"AMT": "\u0669"}, False),
        ("AMT>=1e2", {"AMT": "100"}, True),
        ('NAME="John Smith"', {"NAME": "John Smith"}, True),
        ("!STATUS='C'", {"STATUS": "A"}, True),
        ("garbage", {"garbage": "1"}, False),
        ("", {}, False),
    ],
)
def test_extended_grammar(expr, record, expected):
    assert ExtendedExpressionEvaluator().evaluate(expr, record) is expected


@pytest.mark.parametrize("text,expected", [("10", 10.0), (" -1.5 ", -1.5), (".5", 0.5), ("3.", 3.0), ("1E3", 1000.0)])
def test_parse_number_accepts_plain_decimals(text, expected):
    assert parse_number(text) == expected


@pytest.mark.parametrize("text", ["1_000", "١٢", "inf", "NaN", "0x10", "", None, "1,5"])
def test_parse_number_rejects_non_decimal_text(text):
    with pytest.raises(ValueError):
        parse_number(text)

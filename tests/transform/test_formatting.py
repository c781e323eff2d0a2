# tests/transform/test_formatting.py
"""
Testes dos utilitários de formatação (padding, picture numérico, datas).

Propriedades verificadas:
    - padding produz exatamente `length` caracteres quando `length > 0`
    - `length <= 0` retorna o valor inalterado
    - valores maiores que `length` são truncados, sem padding
    - picture `[+|-]9(i)[V9(f)]` é interpretado de forma geral
"""

import pytest

from atlas_batch.mapping.schema import FieldMapping, Padding, TargetField
from atlas_batch.transform.formatting import (
    convert_date,
    format_date,
    format_numeric_picture,
    format_value,
    is_picture,
    pad,
    pad_field,
    to_strftime,
)


@pytest.mark.parametrize(
    "value,length,side,char,expected",
    [
        ("ab", 5, "right", " ", "ab   "),
        ("ab", 5, "LEFT", "0", "000ab"),
        ("ab", 4, "right", "", "ab  "),
        (None, 3, "right", " ", "   "),
        ("abcdef", 3, "left", "0", "abc"),
        ("abc", 3, "right", "*", "abc"),
        ("keep", 0, "right", " ", "keep"),
        ("keep", -4, "right", " ", "keep"),
    ],
)
def test_pad(value, length, side, char, expected):
    assert pad(value, length, side, char) == expected


@pytest.mark.parametrize("value", ["", "x", "exactly-ten", "a much longer value than the field"])
def test_pad_then_truncate_has_exact_length(value):
    out = pad(value, 10)
    assert len(out) == 10
    if len(value) >= 10:
        assert out == value[:10]


@pytest.mark.parametrize(
    "value,pattern,expected",
    [
        ("123.4", "+9(5)V9(2)", "+0012340"),
        ("-123.4", "+9(5)V9(2)", "-0012340"),
        ("-5", "-9(3)", "-005"),
        ("5", "-9(3)", " 005"),
        ("-5", "9(3)", "005"),
        ("1.005", "9(1)V9(2)", "101"),
        ("123456", "9(3)", "456"),
        ("1,234.50", "9(6)V9(2)", "00123450"),
        ("abc", "9(3)", "000"),
        ("-0.001", "+9(2)V9(1)", "+000"),
        ("", "9(3)", ""),
        ("42", "X(10)", "42"),
    ],
)
def test_format_numeric_picture(value, pattern, expected):
    assert format_numeric_picture(value, pattern) == expected


def test_is_picture():
    assert is_picture("+9(12)V9(6)")
    assert is_picture("9(3)")
    assert not is_picture("X(3)")
    assert not is_picture(None)


def test_to_strftime():
    assert to_strftime("yyyy-MM-dd HH:mm:ss") == "%Y-%m-%d %H:%M:%S"
    assert to_strftime("MMddyy") == "%m%d%y"


@pytest.mark.parametrize(
    "value,expected",
    [
        ("2024-01-15", "20240115"),
        ("01/15/2024", "20240115"),
        ("15-01-2024", "20240115"),
        ("20240115", "20240115"),
        ("not a date", "not a date"),
        ("", ""),
    ],
)
def test_format_date_known_formats(value, expected):
    assert format_date(value, "yyyyMMdd") == expected


def test_convert_date():
    assert convert_date("15.01.2024", "dd.MM.yyyy", "yyyy-MM-dd") == "2024-01-15"
    assert convert_date("2024-01-15", "dd.MM.yyyy", "MM/dd/yyyy") == "01/15/2024"


def test_pad_field_applies_picture_and_date():
    numeric = FieldMapping(target_field="AMT", length=8, target_format="numeric", format="9(6)V9(2)")
    date = FieldMapping(target_field="DT", length=10, data_type="date", format="yyyyMMdd")

    assert pad_field("12.5", numeric) == "00001250"
    assert pad_field("2024-01-15", date) == "20240115  "


def test_pad_field_requires_format_for_typed_fields():
    with pytest.raises(ValueError):
        pad_field("1", FieldMapping(target_field="AMT", length=3, target_format="numeric"))
    with pytest.raises(ValueError):
        pad_field("1", FieldMapping(target_field="DT", length=3, data_type="date"))


def test_format_value_uses_target_field():
    balance = TargetField(name="BALANCE", position=1, length=9, data_type="numeric", format="9(7)V9(2)")
    account = TargetField(name="ACCOUNT", position=2, length=6, padding=Padding(side="left", character="0"))
    opened = TargetField(name="OPENED", position=3, length=8, data_type="date", format="yyyyMMdd")

    assert format_value("150.25", balance) == "000015025"
    assert format_value("123", account) == "000123"
    assert format_value("2024-03-01", opened) == "20240301"
    assert format_value("01.03.2024", opened, source_format="dd.MM.yyyy") == "20240301"
    assert format_value(None, account) == "000000"

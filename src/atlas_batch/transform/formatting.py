# src/atlas_batch/transform/formatting.py
"""
Utilitários de formatação de valores de saída.

Funções puras usadas pelo engine de transformação e pelo processor:

    - pad / pad_field        → padding à esquerda/direita e truncamento
    - format_numeric_picture → formatação COBOL-like (`+9(12)V9(6)`)
    - format_date            → normalização de datas a partir de formatos conhecidos
    - format_value           → formatação completa guiada por um TargetField

Decisões arquiteturais:
    - `length <= 0` significa "sem padding nem truncamento"
    - Valores None são tratados como string vazia
    - A gramática de picture é interpretada de forma geral (qualquer
      `[+|-]9(n)[V9(m)]`), não como uma lista fixa de padrões
    - Padrões de data usam a notação `yyyy/MM/dd/HH/mm/ss` dos arquivos de
      mapeamento e são convertidos para `strftime`

Limites explícitos:
    - Não conhece registros nem regras de mapeamento
    - Não levanta erro para valores malformados (degrada para o valor original ou zero)
"""

from __future__ import annotations

import re
from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import TYPE_CHECKING, Any, Optional

if TYPE_CHECKING:  # pragma: no cover
    from atlas_batch.mapping.schema import FieldMapping, TargetField


LEFT = "left"
RIGHT = "right"

KNOWN_DATE_FORMATS = ("yyyy-MM-dd", "MM/dd/yyyy", "dd-MM-yyyy", "yyyyMMdd", "MMddyyyy")

_PICTURE = re.compile(r"^([+-]?)9\((\d+)\)(?:V9\((\d+)\))?$")
_DATE_TOKENS = re.compile(r"yyyy|yy|MM|dd|HH|mm|ss|SSS")
_STRFTIME = {
    "yyyy": "%Y",
    "yy": "%y",
    "MM": "%m",
    "dd": "%d",
    "HH": "%H",
    "mm": "%M",
    "ss": "%S",
    "SSS": "%f",
}


def to_text(value: Any) -> str:
    """Converte um valor de registro em texto (None → "")."""
    if value is None:
        return ""
    return value if isinstance(value, str) else str(value)


# ---------------------------------------------------------------------------
# Padding
# ---------------------------------------------------------------------------

def pad(value: Optional[str], length: int, side: str = RIGHT, pad_char: str = " ") -> str:
    """
    Ajusta `value` para exatamente `length` caracteres.

    - Valor maior ou igual a `length` é truncado (nenhum padding aplicado)
    - `side` é case-insensitive; qualquer valor diferente de "left" é "right"
    - `pad_char` vazio ou None vira espaço; apenas o primeiro caractere é usado
    - `length <= 0` retorna o valor inalterado
    """
    text = to_text(value)
    if length is None or length <= 0:
        return text
    if len(text) >= length:
        return text[:length]

    fill = (pad_char or " ")[0] * (length - len(text))
    if (side or RIGHT).lower() == LEFT:
        return fill + text
    return text + fill


def pad_field(value: Optional[str], mapping: "FieldMapping") -> str:
    """
    Formata o valor conforme um FieldMapping posicional.

    `target_format` (ou `data_type`) igual a "numeric" aplica o picture de
    `format`; igual a "date" aplica `format_date`. Em seguida o valor é
    ajustado ao `length` do mapping.

    Raises:
        ValueError: Se o tipo exigir `format` e ele estiver ausente.
    """
    text = to_text(value)
    kind = (mapping.target_format or mapping.data_type or "").lower()

    if kind == "date":
        if not (mapping.format or "").strip():
            raise ValueError(f"Date format required for field: {mapping.target_field}")
        text = format_date(text, mapping.format)
    elif kind == "numeric":
        if not (mapping.format or "").strip():
            raise ValueError(f"Numeric format required for field: {mapping.target_field}")
        text = format_numeric_picture(text, mapping.format)

    return pad(text, mapping.length, mapping.pad, mapping.pad_char)


# ---------------------------------------------------------------------------
# Picture numérico
# ---------------------------------------------------------------------------

def is_picture(pattern: Optional[str]) -> bool:
    return bool(pattern) and _PICTURE.match(pattern.strip()) is not None


def format_numeric_picture(value: Optional[str], pattern: str) -> str:
    """
    Formata um número segundo um picture `[+|-]9(i)[V9(f)]`.

    Regras:
        - `i` dígitos inteiros e `f` dígitos decimais, sem ponto (V implícito)
        - arredondamento HALF_UP na escala `f`
        - zeros à esquerda até `i + f` dígitos; excesso mantém os dígitos
          menos significativos
        - prefixo `+` emite sempre o sinal (`+` ou `-`); prefixo `-` emite
          `-` para negativos e espaço para positivos; sem prefixo o sinal é
          descartado
        - valor vazio → ""; valor não numérico → zero
        - pattern que não é picture → valor inalterado

    Exemplo:
        >>> format_numeric_picture("123.4", "+9(5)V9(2)")
        '+0012340'
    """
    text = to_text(value).strip()
    match = _PICTURE.match((pattern or "").strip())
    if match is None:
        return to_text(value)
    if not text:
        return ""

    sign_mode, int_digits, frac_digits = match.group(1), int(match.group(2)), int(match.group(3) or 0)

    cleaned = re.sub(r"[^0-9.\-]", "", text)
    try:
        number = Decimal(cleaned)
    except InvalidOperation:
        number = Decimal(0)

    scaled = (abs(number) * (Decimal(10) ** frac_digits)).quantize(Decimal(1), rounding=ROUND_HALF_UP)
    width = int_digits + frac_digits
    digits = str(int(scaled)).rjust(width, "0")[-width:]

    negative = number < 0 and int(scaled) != 0
    if sign_mode == "+":
        return ("-" if negative else "+") + digits
    if sign_mode == "-":
        return ("-" if negative else " ") + digits
    return digits


# ---------------------------------------------------------------------------
# Datas
# ---------------------------------------------------------------------------

def to_strftime(pattern: str) -> str:
    """Converte `yyyyMMdd`-style em diretivas `strftime` (`%Y%m%d`)."""
    return _DATE_TOKENS.sub(lambda m: _STRFTIME[m.group(0)], pattern)


def _parse_date(value: str, pattern: str) -> Optional[datetime]:
    try:
        return datetime.strptime(value, to_strftime(pattern))
    except ValueError:
        return None


def format_date(value: Optional[str], output_format: str) -> str:
    """
    Normaliza uma data para `output_format`.

    A entrada é interpretada com os formatos conhecidos, em ordem:
    `yyyy-MM-dd`, `MM/dd/yyyy`, `dd-MM-yyyy`, `yyyyMMdd`, `MMddyyyy`.
    Se nenhum casar, o valor original é retornado inalterado.
    """
    text = to_text(value).strip()
    if not text:
        return ""

    for known in KNOWN_DATE_FORMATS:
        parsed = _parse_date(text, known)
        if parsed is not None:
            return parsed.strftime(to_strftime(output_format))
    return to_text(value)


def convert_date(value: Optional[str], source_format: str, target_format: str) -> str:
    """Converte de `source_format` para `target_format`; falha cai em `format_date`."""
    text = to_text(value).strip()
    if not text:
        return ""
    parsed = _parse_date(text, source_format)
    if parsed is None:
        return format_date(text, target_format)
    return parsed.strftime(to_strftime(target_format))


# ---------------------------------------------------------------------------
# TargetField
# ---------------------------------------------------------------------------

def format_value(value: Optional[str], field: "TargetField", source_format: Optional[str] = None) -> str:
    """
    Formata um valor conforme a definição canônica do target.

    - date: converte de `source_format` (se informado e diferente) ou
      normaliza via formatos conhecidos; exige `field.format`
    - numeric: aplica picture quando `field.format` é informado
    - string: apenas padding

    O padding usa `field.padding` (default: direita, espaço).

    Raises:
        ValueError: Campo date sem `format`.
    """
    text = to_text(value)
    data_type = (field.data_type or "string").lower()

    if data_type == "date":
        if not (field.format or "").strip():
            raise ValueError(f"Date format required for field: {field.name}")
        if source_format and source_format != field.format:
            text = convert_date(text, source_format, field.format)
        else:
            text = format_date(text, field.format)
    elif data_type == "numeric" and (field.format or "").strip():
        text = format_numeric_picture(text, field.format)

    return pad(text, field.length, field.padding.side, field.padding.character)

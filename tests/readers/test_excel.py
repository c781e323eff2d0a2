# tests/readers/test_excel.py
"""
Testes do ExcelReader (pandas + openpyxl).
"""

from datetime import datetime

import pandas as pd
import pytest

from atlas_batch.core.exceptions import StreamOpenError
from atlas_batch.readers.excel import READ_COUNT_KEY, ExcelReader, coerce_cell


@pytest.fixture
def workbook(tmp_path):
    path = tmp_path / "accounts.xlsx"
    frame = pd.DataFrame(
        {
            "ACCT": ["00123", "00456"],
            "AMT": [10, 2.5],
            "ACTIVE": [True, False],
            "NOTE": ["x", None],
        }
    )
    frame.to_excel(path, index=False, engine="openpyxl")
    return path


def test_rows_keyed_by_header_with_coercion(workbook, make_file_config, context):
    reader = ExcelReader(make_file_config({"format": "excel"}, input_path=str(workbook)))

    reader.open(context)
    first, second, end = reader.read(), reader.read(), reader.read()

    assert first == {"ACCT": "00123", "AMT": 10.0, "ACTIVE": True, "NOTE": "x"}
    assert second == {"ACCT": "00456", "AMT": 2.5, "ACTIVE": False, "NOTE": ""}
    assert end is None


def test_restart_from_checkpoint(workbook, make_file_config, context):
    reader = ExcelReader(make_file_config({"format": "excel"}, input_path=str(workbook)))
    context.put(READ_COUNT_KEY, 1)

    reader.open(context)

    assert reader.read()["ACCT"] == "00456"
    reader.update(context)
    assert context.get(READ_COUNT_KEY) == 2


@pytest.mark.parametrize("name,content", [("missing.xlsx", None), ("broken.xlsx", b"not a zip")])
def test_unreadable_workbook_is_stream_open_error(tmp_path, make_file_config, context, name, content):
    path = tmp_path / name
    if content is not None:
        path.write_bytes(content)

    with pytest.raises(StreamOpenError):
        ExcelReader(make_file_config({}, input_path=str(path))).open(context)


@pytest.mark.parametrize(
    "value,expected",
    [
        (None, ""),
        (float("nan"), ""),
        (3, 3.0),
        (True, True),
        ("abc", "abc"),
        (datetime(2024, 1, 31, 12, 0), "2024-01-31T12:00:00"),
    ],
)
def test_coerce_cell(value, expected):
    assert coerce_cell(value) == expected

# tests/readers/test_flat_file.py
"""
Testes do FlatFileReader (delimitado, pipe e largura fixa).
"""

import pytest

from atlas_batch.core.exceptions import ItemProcessingError, StreamOpenError
from atlas_batch.readers.flat_file import READ_COUNT_KEY, FlatFileReader, parse_ranges


def _drain(reader):
    rows = []
    while True:
        row = reader.read()
        if row is None:
            return rows
        rows.append(row)


def test_parse_ranges_is_one_based_inclusive():
    assert parse_ranges("1-5, 6-6,7") == [(0, 5), (5, 6), (6, 7)]


def test_delimited_with_header_and_quotes(tmp_path, make_file_config, context):
    path = tmp_path / "accounts.csv"
    path.write_text('ACCT,NAME,AMT\n00123,"Doe, John",10.5\n\n00456,Roe,7\n', encoding="utf-8")
    fc = make_file_config({"format": "csv", "columnNames": "ACCT,NAME,AMT", "linesToSkip": 1}, input_path=str(path))

    reader = FlatFileReader(fc)
    reader.open(context)
    rows = _drain(reader)
    reader.update(context)
    reader.close()

    assert rows[1] == {"ACCT": "00456", "NAME": "Roe", "AMT": "7"}
    assert rows[0]["ACCT"] == "00123"
    assert rows[0]["NAME"] == "Doe, John"
    assert rows[0]["AMT"] == "10.5"
    assert context.get(READ_COUNT_KEY) == 2


def test_pipe_format_ignores_delimiter_param(tmp_path, make_file_config, context):
    path = tmp_path / "accounts.txt"
    path.write_text("A|B\nC|D\n", encoding="utf-8")
    fc = make_file_config({"format": "pipe", "columnNames": ["X", "Y"], "delimiter": ";"}, input_path=str(path))

    reader = FlatFileReader(fc)
    reader.open(context)

    assert _drain(reader) == [{"X": "A", "Y": "B"}, {"X": "C", "Y": "D"}]


def test_fixed_width_slices_and_trims(tmp_path, make_file_config, context):
    path = tmp_path / "fixed.txt"
    path.write_text("00123ACTIVE  \n00456BLOCKED \n", encoding="utf-8")
    fc = make_file_config({"format": "fixed", "columnNames": "ACCT,STATUS", "columnRanges": "1-5,6-13"}, input_path=str(path))

    reader = FlatFileReader(fc)
    reader.open(context)

    assert _drain(reader) == [
        {"ACCT": "00123", "STATUS": "ACTIVE"},
        {"ACCT": "00456", "STATUS": "BLOCKED"},
    ]


def test_token_count_mismatch_is_item_error_and_reading_continues(tmp_path, make_file_config, context):
    path = tmp_path / "bad.csv"
    path.write_text("1,2\n3\n4,5\n", encoding="utf-8")
    fc = make_file_config({"format": "csv", "columnNames": "A,B"}, input_path=str(path))

    reader = FlatFileReader(fc)
    reader.open(context)

    assert reader.read() == {"A": "1", "B": "2"}
    with pytest.raises(ItemProcessingError) as exc:
        reader.read()
    assert exc.value.details["line"] == 2
    assert reader.read() == {"A": "4", "B": "5"}


def test_missing_file_is_stream_open_error(tmp_path, make_file_config, context):
    fc = make_file_config({"format": "csv", "columnNames": "A"}, input_path=str(tmp_path / "missing.csv"))

    with pytest.raises(StreamOpenError):
        FlatFileReader(fc).open(context)


def test_restart_skips_already_read_records(tmp_path, make_file_config, context):
    path = tmp_path / "restart.csv"
    path.write_text("H\n1\n2\n3\n", encoding="utf-8")
    fc = make_file_config({"format": "csv", "columnNames": "N", "linesToSkip": "1"}, input_path=str(path))
    context.put(READ_COUNT_KEY, 2)

    reader = FlatFileReader(fc)
    reader.open(context)

    assert _drain(reader) == [{"N": "3"}]
    reader.update(context)
    assert context.get(READ_COUNT_KEY) == 3

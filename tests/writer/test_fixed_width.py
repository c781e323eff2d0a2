# tests/writer/test_fixed_width.py
"""
Testes do FixedWidthWriter.

Invariantes verificadas:
    - o arquivo final só aparece após `close()` (escrita em `.part`)
    - cada registro vira uma linha com os valores na ordem dos campos
    - `discard()` remove o arquivo parcial e não publica saída
    - chunk com falha no meio é truncado de volta (sem linhas duplicadas)
"""

from datetime import datetime

import pytest

from atlas_batch.core.exceptions import ConfigurationError, ItemWriteError, StreamOpenError, StreamWriteError
from atlas_batch.writer.fixed_width import PART_SUFFIX, WRITE_COUNT_KEY, FixedWidthWriter


class ShortWriteHandle:
    """Grava só a primeira linha do chunk e falha, como um disco cheio."""

    def __init__(self, handle, *, fail_truncate=False):
        self.handle = handle
        self.fail_truncate = fail_truncate

    def writelines(self, lines):
        self.handle.write(lines[0])
        self.handle.flush()
        raise OSError(28, "No space left on device")

    def truncate(self):
        if self.fail_truncate:
            raise OSError(5, "Input/output error")
        return self.handle.truncate()

    def __getattr__(self, name):
        return getattr(self.handle, name)


NOW = datetime(2024, 1, 31, 23, 59, 58)


def test_lines_are_published_on_close(tmp_path, make_file_config, context):
    out = tmp_path / "out" / "DELINQ_${DATE}.dat"
    writer = FixedWidthWriter(make_file_config({"outputPath": str(out)}), now=NOW)

    writer.open(context)
    writer.write([{"A": "D", "B": "000123"}, {"A": "X", "B": "000456"}])
    writer.update(context)

    final = tmp_path / "out" / "DELINQ_20240131.dat"
    assert not final.exists()
    assert (tmp_path / "out" / ("DELINQ_20240131.dat" + PART_SUFFIX)).exists()

    writer.close()

    assert final.read_text(encoding="utf-8") == "D000123\nX000456\n"
    assert not (tmp_path / "out" / ("DELINQ_20240131.dat" + PART_SUFFIX)).exists()
    assert context.get(WRITE_COUNT_KEY) == 2
    assert writer.write_count == 2
    assert writer.output_path == final


def test_output_delimiter_and_non_text_values(tmp_path, make_file_config, context):
    out = tmp_path / "out.txt"
    writer = FixedWidthWriter(make_file_config({"outputPath": str(out), "outputDelimiter": "|"}))

    writer.open(context)
    writer.write([{"A": "x", "B": 1.5, "C": None}])
    writer.close()

    assert out.read_text(encoding="utf-8") == "x|1.5|\n"


def test_existing_output_is_replaced_not_appended(tmp_path, make_file_config, context):
    out = tmp_path / "out.txt"
    out.write_text("stale\n", encoding="utf-8")
    writer = FixedWidthWriter(make_file_config({"outputPath": str(out)}))

    writer.open(context)
    writer.write([{"A": "fresh"}])
    writer.close()

    assert out.read_text(encoding="utf-8") == "fresh\n"


def test_discard_removes_partial_output(tmp_path, make_file_config, context):
    out = tmp_path / "out.txt"
    writer = FixedWidthWriter(make_file_config({"outputPath": str(out)}))

    writer.open(context)
    writer.write([{"A": "1"}])
    writer.discard()

    assert list(tmp_path.iterdir()) == []


def test_write_before_open_is_item_write_error(make_file_config):
    with pytest.raises(ItemWriteError):
        FixedWidthWriter(make_file_config({"outputPath": "x"})).write([{"A": "1"}])


def test_missing_output_path_is_configuration_error(make_file_config, context):
    with pytest.raises(ConfigurationError):
        FixedWidthWriter(make_file_config({})).open(context)


def test_unwritable_location_is_stream_open_error(tmp_path, make_file_config, context):
    blocker = tmp_path / "file"
    blocker.write_text("", encoding="utf-8")

    writer = FixedWidthWriter(make_file_config({"outputPath": str(blocker / "out.txt")}))

    with pytest.raises(StreamOpenError):
        writer.open(context)


def test_open_is_logged(tmp_path, make_file_config, context):
    writer = FixedWidthWriter(make_file_config({"outputPath": str(tmp_path / "o.txt")}))
    writer.open(context)
    writer.close()

    assert [e["message"] for e in context.events] == ["writer opened"]


def test_failed_chunk_is_truncated_before_rewrite(tmp_path, make_file_config, context, monkeypatch):
    out = tmp_path / "out.txt"
    writer = FixedWidthWriter(make_file_config({"outputPath": str(out)}))
    writer.open(context)
    writer.write([{"A": "1"}])

    real = writer._handle
    monkeypatch.setattr(writer, "_handle", ShortWriteHandle(real))
    with pytest.raises(ItemWriteError):
        writer.write([{"A": "2"}, {"A": "3"}])
    monkeypatch.setattr(writer, "_handle", real)

    writer.write([{"A": "2"}])
    writer.write([{"A": "3"}])
    writer.close()

    assert out.read_text(encoding="utf-8") == "1\n2\n3\n"
    assert writer.write_count == 3


def test_failed_rollback_is_stream_write_error(tmp_path, make_file_config, context, monkeypatch):
    writer = FixedWidthWriter(make_file_config({"outputPath": str(tmp_path / "out.txt")}))
    writer.open(context)
    real = writer._handle
    monkeypatch.setattr(writer, "_handle", ShortWriteHandle(real, fail_truncate=True))

    with pytest.raises(StreamWriteError) as exc:
        writer.write([{"A": "1"}, {"A": "2"}])

    assert "No space left" in exc.value.details["error"]
    monkeypatch.setattr(writer, "_handle", real)
    writer.discard()

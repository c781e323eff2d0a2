# tests/processor/test_generic.py
"""
Testes do GenericProcessor (caminho posicional).

Usa a árvore `mapping_root` do conftest:
    - documento default: LOCATION-CODE (constante) + TOTAL-DELINQ-AMT (source)
    - documento "200": ACCT-NUM (posição 1) e ACCT-STATUS (posição 2)
"""

import pytest

from atlas_batch.core.exceptions import ItemProcessingError, MappingNotFound
from atlas_batch.mapping.service import MappingDocumentService
from atlas_batch.processor.generic import GenericProcessor
from atlas_batch.transform.engine import TransformationEngine


@pytest.fixture
def make_processor(mapping_root, make_unit):
    service = MappingDocumentService(mapping_root)

    def _make(transaction_type="default", **kwargs):
        unit = make_unit({"format": "csv"}, transaction_type=transaction_type, **kwargs)
        return GenericProcessor(unit, service, TransformationEngine())

    return _make


def test_default_document_end_to_end(make_processor):
    output = make_processor().process({"TOTAL-DELINQ-AMT": "123456"})

    assert output == {
        "LOCATION-CODE": "100020",
        "TOTAL-DELINQ-AMT": "123456" + " " * 13,
    }


def test_fields_follow_target_position_order(make_processor):
    output = make_processor("200").process({"ACCT_NUM": "12", "STATUS": "B"})

    assert list(output) == ["ACCT-NUM", "ACCT-STATUS"]
    assert output["ACCT-NUM"] == "00012"
    assert output["ACCT-STATUS"] == "Blocked "


@pytest.mark.parametrize("status,expected", [("A", "Active  "), ("Z", "Other   ")])
def test_conditional_chain(make_processor, status, expected):
    assert make_processor("200").process({"ACCT_NUM": "1", "STATUS": status})["ACCT-STATUS"] == expected


def test_unknown_transaction_type_uses_default_document(make_processor):
    output = make_processor("999").process({"TOTAL-DELINQ-AMT": "5"})

    assert list(output) == ["LOCATION-CODE", "TOTAL-DELINQ-AMT"]


def test_missing_template_propagates(make_processor):
    processor = make_processor(template="NOPE/missing.yml")

    with pytest.raises(MappingNotFound):
        processor.process({})


def test_field_failure_is_wrapped_as_item_error(mapping_root, make_unit):
    (mapping_root / "broken.yml").write_text(
        "transactionType: default\n"
        "fields:\n"
        "  AMOUNT:\n"
        "    targetPosition: 1\n"
        "    length: 5\n"
        "    dataType: numeric\n"
        "    transformationType: source\n"
        "    sourceField: AMT\n",
        encoding="utf-8",
    )
    unit = make_unit({}, template="broken.yml", key="partition_0_DELINQ_default")
    processor = GenericProcessor(unit, MappingDocumentService(mapping_root), TransformationEngine())

    with pytest.raises(ItemProcessingError) as exc:
        processor.process({"AMT": "1"})

    assert exc.value.details["field"] == "AMOUNT"
    assert exc.value.details["partition_key"] == "partition_0_DELINQ_default"
    assert exc.value.details["error_type"] == "ValueError"

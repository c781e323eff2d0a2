# tests/processor/test_enhanced.py
"""
Testes do EnhancedProcessor (caminho source → target).

Target DELINQ-200 (conftest):
    RECORD-TYPE(1) ACCOUNT(6, zeros à esquerda) BALANCE(9(7)V9(2)) FILLER(6)
"""

import pytest

from atlas_batch.core.exceptions import ItemProcessingError, TargetDefinitionError
from atlas_batch.mapping.service import SourceMappingService, TargetDefinitionService
from atlas_batch.processor.enhanced import EnhancedProcessor
from atlas_batch.transform.engine import DegradePolicy, TransformationEngine


@pytest.fixture
def make_processor(mapping_root, make_unit):
    sources = SourceMappingService(mapping_root)
    targets = TargetDefinitionService(mapping_root)

    def _make(params=None, *, transaction_type="200", policy=DegradePolicy.DEGRADE):
        unit = make_unit(params or {}, transaction_type=transaction_type)
        return EnhancedProcessor(unit, sources, targets, TransformationEngine(policy=policy))

    return _make


def test_record_is_formatted_by_target_definition(make_processor):
    output = make_processor().process({"ACCT_NUM": "123", "PRINCIPAL": "100.25", "INTEREST": 50})

    assert output == {
        "RECORD-TYPE": "D",
        "ACCOUNT": "000123",
        "BALANCE": "000015025",
        "FILLER": "      ",
    }
    assert len("".join(output.values())) == 22


def test_record_transaction_type_overrides_rules_of_explicit_target(make_processor):
    output = make_processor({"targetName": "DELINQ-200"}).process({"ACCT_NUM": "1", "transactionType": "300"})

    assert output["RECORD-TYPE"] == "X"
    assert output["ACCOUNT"] == "000001"


def test_target_name_defaults_to_job_and_transaction_type(make_processor):
    assert make_processor().target_name_for({"ACCT_NUM": "1"}) == "DELINQ-200"
    assert make_processor().target_name_for({"transactionType": " 300 "}) == "DELINQ-300"
    assert make_processor({"targetName": "OTHER"}).target_name_for({"transactionType": "300"}) == "OTHER"


def test_record_transaction_type_selects_target_layout(make_processor, mapping_root):
    (mapping_root / "targets" / "DELINQ-300.yml").write_text(
        "fields:\n"
        "  - {name: RECORD-TYPE, position: 1, length: 1}\n"
        "  - {name: ACCOUNT, position: 2, length: 4, padding: {side: left, character: \"0\"}}\n",
        encoding="utf-8",
    )
    (mapping_root / "mappings" / "LEGACY" / "DELINQ-300-mapping.yml").write_text(
        "defaults:\n"
        "  RECORD-TYPE: {type: constant, value: R}\n"
        "mappings:\n"
        "  default:\n"
        "    ACCOUNT: {type: source_field, sourceField: ACCT_NUM}\n",
        encoding="utf-8",
    )

    output = make_processor(transaction_type="default").process({"ACCT_NUM": "7", "transactionType": "300"})

    assert output == {"RECORD-TYPE": "R", "ACCOUNT": "0007"}


def test_missing_target_definition_propagates(make_processor):
    with pytest.raises(TargetDefinitionError):
        make_processor(transaction_type="100").process({"ACCT_NUM": "1"})


def test_strict_policy_failure_is_wrapped(make_processor):
    processor = make_processor(policy=DegradePolicy.STRICT)

    with pytest.raises(ItemProcessingError) as exc:
        processor.process({"ACCT_NUM": "1", "PRINCIPAL": "abc", "INTEREST": "1"})

    assert exc.value.details["field"] == "BALANCE"
    assert exc.value.details["target"] == "DELINQ-200"
    assert exc.value.details["error_type"] == "TransformationError"


def test_degrade_policy_treats_bad_amount_as_zero(make_processor):
    output = make_processor().process({"ACCT_NUM": "1", "PRINCIPAL": "abc", "INTEREST": "1"})

    assert output["BALANCE"] == "000000100"

import pytest

from design_api.services.rules import Module, RuleExplicit, RuleTyped
from design_api.services.validator import (
    ValidationError,
    parse_module,
    parse_modules,
    parse_rule,
    parse_rules,
)


def test_parse_module_defaults():
    module = parse_module({"name": "A"})
    assert module == Module("A")


def test_parse_module_round_trips_to_dict():
    record = {"name": "A", "dimensions": [1, 2, 3], "connector_types": ["a", "b", "c", "d", "e", "f"]}
    assert parse_module(record).to_dict() == {
        "name": "A",
        "dimensions": [1.0, 2.0, 3.0],
        "connector_types": ["a", "b", "c", "d", "e", "f"],
    }


@pytest.mark.parametrize(
    "record",
    [
        {"dimensions": [1, 1, 1]},
        {"name": ""},
        {"name": "A", "dimensions": [1, 0, 1]},
        {"name": "A", "dimensions": [1, 1]},
        {"name": "A", "connector_types": ["a"] * 5},
        {"name": "A", "connector_types": ["a", "b", "c", "d", "e", ""]},
        ["A"],
    ],
)
def test_parse_module_rejects_malformed_records(record):
    with pytest.raises(ValidationError):
        parse_module(record)


def test_parse_rule_variants():
    explicit = parse_rule(
        {"source_module": "A", "source_connector": 0, "target_module": "B", "target_connector": 3}
    )
    typed = parse_rule({"module": "A", "connector": 0, "connector_type": "t1"})
    assert explicit == RuleExplicit("A", 0, "B", 3)
    assert typed == RuleTyped("A", 0, "t1")


@pytest.mark.parametrize(
    "record",
    [
        {"source_module": "A", "source_connector": 0, "target_module": "B"},
        {"source_module": "A", "source_connector": 6, "target_module": "B", "target_connector": 3},
        {"source_module": "A", "source_connector": True, "target_module": "B", "target_connector": 3},
        {"module": "A", "connector": 0, "connector_type": ""},
        {"module": "A", "connector": "0", "connector_type": "t1"},
        {"source_module": "A", "connector_type": "t1"},
        {"module": "A", "connector": 0},
        None,
    ],
)
def test_parse_rule_rejects_malformed_records(record):
    with pytest.raises(ValidationError):
        parse_rule(record)


def test_parse_lists_pass_none_through():
    assert parse_modules(None) is None
    assert parse_rules(None) is None
    assert parse_rules([]) == []


def test_parse_modules_rejects_duplicate_names():
    with pytest.raises(ValidationError, match="Duplicate"):
        parse_modules([{"name": "A"}, {"name": "A"}])


def test_error_names_the_offending_record():
    with pytest.raises(ValidationError, match="Rule 1"):
        parse_rules([{"module": "A", "connector": 0, "connector_type": "t"}, {}])

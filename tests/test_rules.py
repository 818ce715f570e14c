import json

import pytest

from spend_analysis import CategoryRule, CategoryRuleSet, default_rule_set, load_rule_set
from spend_analysis.errors import RuleConfigError
from spend_analysis.rules import dump_rule_set, parse_rule_set


def test_default_rules_keep_declared_order_with_pinned_fallback():
    rules = default_rule_set()

    assert rules.fallback == "Uncategorised"
    assert rules.identifiers[:3] == ("Cars", "Gas", "RideShare")
    # The packaged table pins the fallback between Legal and Donations.
    assert rules.identifiers[-3:] == ("Legal", "Uncategorised", "Donations")


def test_default_rules_are_shared():
    assert default_rule_set() is default_rule_set()


def test_fallback_appended_when_not_declared():
    rules = CategoryRuleSet(rules=(CategoryRule(identifier="Gas", patterns=("SHELL",)),))

    assert rules.identifiers == ("Gas", "Uncategorised")


def test_duplicate_identifiers_rejected():
    with pytest.raises(RuleConfigError):
        CategoryRuleSet(
            rules=(
                CategoryRule(identifier="Gas", patterns=("SHELL",)),
                CategoryRule(identifier="Gas", patterns=("CHEVRON",)),
            )
        )


def test_fallback_with_patterns_rejected():
    with pytest.raises(RuleConfigError):
        CategoryRuleSet(
            rules=(CategoryRule(identifier="Other", patterns=("X",)),), fallback="Other"
        )


def test_blank_pattern_rejected():
    with pytest.raises(ValueError):
        CategoryRule(identifier="Gas", patterns=("SHELL", "  "))


def test_load_rule_set_from_file(tmp_path):
    path = tmp_path / "rules.json"
    path.write_text(
        json.dumps(
            {
                "schema_version": 1,
                "fallback": "Misc",
                "categories": [
                    {"identifier": "Coffee", "patterns": ["BLUE BOTTLE", "STARBUCKS"]},
                    {"identifier": "Fuel", "patterns": ["SHELL OIL"]},
                ],
            }
        ),
        encoding="utf-8",
    )

    rules = load_rule_set(path)

    assert rules.identifiers == ("Coffee", "Fuel", "Misc")
    assert rules.rules[0].patterns == ("BLUE BOTTLE", "STARBUCKS")


@pytest.mark.parametrize(
    "payload",
    [
        '{"schema_version": 2, "categories": []}',
        '{"schema_version": 1}',
        '{"schema_version": 1, "categories": [{"identifier": "", "patterns": []}]}',
        '{"schema_version": 1, "categories": [], "extra": true}',
        "not json",
    ],
)
def test_invalid_rule_files_raise_rule_config_error(payload):
    with pytest.raises(RuleConfigError):
        parse_rule_set(payload)


def test_missing_rule_file_propagates_os_error(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_rule_set(tmp_path / "nope.json")


def test_dump_then_parse_preserves_table():
    rules = default_rule_set()

    again = parse_rule_set(dump_rule_set(rules))

    assert again == rules

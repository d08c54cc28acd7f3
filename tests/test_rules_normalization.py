from __future__ import annotations

import pytest

from src.normalize.rules import (
    find_rule_value,
    parse_number,
    parse_rules,
    rule_items,
    rule_label,
    rules_from_form,
    split_rule_list,
)


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        (85, 85.0),
        ("85%", 85.0),
        ("₹5,00,000", 500000.0),
        ("$1,250.50", 1250.5),
        ("1.2.3", 1.2),
        ("n/a", None),
        ("", None),
        (None, None),
        (True, None),
        (float("nan"), None),
    ],
)
def test_parse_number_strips_non_numeric_characters(value: object, expected: float | None) -> None:
    assert parse_number(value) == expected


def test_find_rule_value_prefers_literal_keys_in_synonym_order() -> None:
    document = {"marks": 60, "minMarks": 75}

    assert find_rule_value(document, ("minMarks", "min_marks", "marks")) == 75


def test_find_rule_value_skips_blank_values() -> None:
    document = {"minMarks": "", "Min_Marks": None, "PERCENTAGE": "70%"}

    assert find_rule_value(document, ("minMarks", "min_marks", "marks", "percentage")) == "70%"
    assert find_rule_value(document, ("income",)) is None
    assert find_rule_value(["not", "a", "mapping"], ("minMarks",)) is None


def test_split_rule_list_accepts_arrays_and_comma_joined_strings() -> None:
    assert split_rule_list(["Delhi", " Goa ", ""]) == ("Delhi", "Goa")
    assert split_rule_list("Maharashtra, Delhi,") == ("Maharashtra", "Delhi")
    assert split_rule_list("Masters") == ("Masters",)
    assert split_rule_list([]) == ()
    assert split_rule_list(None) is None
    assert split_rule_list({"nested": True}) is None


def test_parse_rules_builds_typed_rules_once() -> None:
    rules = parse_rules(
        '{"min_marks": "80", "income": "₹3,00,000", "domicile": "Kerala, Goa",'
        ' "caste": ["SC"], "sex": "Any", "educationLevel": "Masters", "notes": "x"}'
    )

    assert rules.min_marks == 80.0
    assert rules.max_income == 300000.0
    assert rules.states == ("Kerala", "Goa")
    assert rules.categories == ("SC",)
    assert rules.any_gender is True
    assert rules.genders is None
    assert rules.education_levels == ("Masters",)
    assert rules.raw["notes"] == "x"
    assert parse_rules(rules) is rules


def test_parse_rules_treats_lowercase_any_as_specific_gender() -> None:
    rules = parse_rules({"gender": "any"})

    assert rules.any_gender is False
    assert rules.genders == ("any",)


@pytest.mark.parametrize("raw", [None, "", "{oops", "[]", "null", 7, b"\xff\xfe"])
def test_parse_rules_never_raises_and_yields_empty_rules(raw: object) -> None:
    assert parse_rules(raw).is_empty


def test_rules_from_form_serializes_admin_fields() -> None:
    rules = rules_from_form(
        min_marks="75",
        max_income="",
        states="Maharashtra, Delhi",
        categories="",
        education_levels="Bachelors,Masters",
    )

    assert rules == {
        "minMarks": 75.0,
        "maxIncome": 0,
        "states": ["Maharashtra", "Delhi"],
        "categories": [],
        "educationLevels": ["Bachelors", "Masters"],
    }
    assert parse_rules(rules).max_income is None
    assert rules_from_form(gender=" Female ")["gender"] == "Female"


def test_rule_label_known_keys_and_fallback() -> None:
    assert rule_label("minMarks") == "Minimum Marks"
    assert rule_label("domicile") == "Domicile"
    assert rule_label("disabilityStatus") == "Disability Status"
    assert rule_label("first_generation") == "First Generation"


def test_rule_items_lists_non_blank_criteria() -> None:
    items = rule_items({"states": ["Kerala", "Goa"], "categories": [], "maxIncome": 250000, "gender": ""})

    assert items == [("Eligible States", "Kerala, Goa"), ("Family Income Limit", "250000")]

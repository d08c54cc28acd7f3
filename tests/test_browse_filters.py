from __future__ import annotations

import pandas as pd

from src.browse.filters import filter_catalog
from src.rank.stage1_eligibility import StudentProfile


def _catalog() -> pd.DataFrame:
    return pd.DataFrame(
        [
            {
                "scholarship_id": "a",
                "title": "Women in Engineering",
                "description": "Supports engineering students.",
                "source": "State Government",
                "amount": 25000,
                "eligibility_rules": {"states": ["Delhi"], "gender": "Female"},
            },
            {
                "scholarship_id": "b",
                "title": "National Merit Award",
                "description": "Open to all high achievers.",
                "source": "Central Government",
                "amount": 50000,
                "eligibility_rules": {"minMarks": 90},
            },
            {
                "scholarship_id": "c",
                "title": "OBC Support Grant",
                "description": None,
                "source": "Private Trust",
                "amount": None,
                "eligibility_rules": '{"categories": "OBC, SC", "educationLevels": ["Masters"]}',
            },
        ]
    )


def test_filter_catalog_without_filters_returns_everything() -> None:
    assert filter_catalog(_catalog())["scholarship_id"].tolist() == ["a", "b", "c"]


def test_filter_catalog_search_matches_title_or_description_case_insensitively() -> None:
    assert filter_catalog(_catalog(), query="ENGINEERING")["scholarship_id"].tolist() == ["a"]
    assert filter_catalog(_catalog(), query="achievers")["scholarship_id"].tolist() == ["b"]


def test_rule_filters_pass_unrestricted_scholarships() -> None:
    by_state = filter_catalog(_catalog(), state="delhi")
    by_category = filter_catalog(_catalog(), category="SC")
    by_level = filter_catalog(_catalog(), education_level="Bachelors")

    assert by_state["scholarship_id"].tolist() == ["a", "b", "c"]
    assert by_category["scholarship_id"].tolist() == ["a", "b", "c"]
    assert by_level["scholarship_id"].tolist() == ["a", "b"]
    assert filter_catalog(_catalog(), state="Goa")["scholarship_id"].tolist() == ["b", "c"]


def test_all_option_disables_a_filter() -> None:
    assert len(filter_catalog(_catalog(), state="all", category="", source="all")) == 3


def test_source_and_amount_filters() -> None:
    assert filter_catalog(_catalog(), source="Private Trust")["scholarship_id"].tolist() == ["c"]
    assert filter_catalog(_catalog(), min_amount="30000")["scholarship_id"].tolist() == ["b"]
    assert filter_catalog(_catalog(), max_amount=30000)["scholarship_id"].tolist() == ["a"]


def test_eligible_only_uses_profile() -> None:
    profile = StudentProfile(state="Delhi", gender="Male", marks=95, category="General")

    filtered = filter_catalog(_catalog(), eligible_only=True, profile=profile)

    assert filtered["scholarship_id"].tolist() == ["b"]

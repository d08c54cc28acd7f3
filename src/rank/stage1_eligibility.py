from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Mapping

import pandas as pd

from src.normalize.rules import parse_number, parse_rules
from src.normalize.schema import EligibilityRules, ScholarshipRecord, StudentProfile

__all__ = [
    "StudentProfile",
    "apply_eligibility_filter",
    "check_inclusion",
    "failed_criteria",
    "is_eligible",
    "match_reasons",
    "resolve_rules",
]


def _get_profile_value(profile: Any, key: str) -> Any:
    if isinstance(profile, Mapping):
        return profile.get(key)
    return getattr(profile, key, None)


def _normalize_text(value: Any) -> str | None:
    if value is None:
        return None
    if isinstance(value, float) and pd.isna(value):
        return None
    normalized = str(value).strip().lower()
    return normalized or None


def _display_text(value: Any) -> str:
    return str(value).strip()


def _format_number(value: float) -> str:
    return format(value, "g")


def resolve_rules(scholarship: Any) -> EligibilityRules:
    """Parse the rules attached to a record, mapping, Series or rules object."""
    if isinstance(scholarship, EligibilityRules):
        return scholarship
    if isinstance(scholarship, ScholarshipRecord):
        return parse_rules(scholarship.eligibility_rules)
    if isinstance(scholarship, (Mapping, pd.Series)):
        return parse_rules(scholarship.get("eligibility_rules"))
    return parse_rules(getattr(scholarship, "eligibility_rules", None))


def check_inclusion(allowed: tuple[str, ...] | None, value: Any) -> bool | None:
    """Case-insensitive membership test.

    Returns ``None`` when the check does not apply: no allowed values, an empty
    list, or a missing candidate value.
    """
    if not allowed:
        return None
    candidate = _normalize_text(value)
    if candidate is None:
        return None
    return candidate in {_normalize_text(item) for item in allowed}


def _check_marks(rules: EligibilityRules, profile: Any) -> bool | None:
    if rules.min_marks is None:
        return None
    marks = parse_number(_get_profile_value(profile, "marks"))
    if marks is None:
        return None
    return marks >= rules.min_marks


def _check_income(rules: EligibilityRules, profile: Any) -> bool | None:
    if rules.max_income is None:
        return None
    income = parse_number(_get_profile_value(profile, "family_income"))
    if income is None:
        return None
    return income <= rules.max_income


def _check_state(rules: EligibilityRules, profile: Any) -> bool | None:
    return check_inclusion(rules.states, _get_profile_value(profile, "state"))


def _check_category(rules: EligibilityRules, profile: Any) -> bool | None:
    return check_inclusion(rules.categories, _get_profile_value(profile, "category"))


def _check_gender(rules: EligibilityRules, profile: Any) -> bool | None:
    if rules.any_gender:
        return None
    return check_inclusion(rules.genders, _get_profile_value(profile, "gender"))


def _check_education(rules: EligibilityRules, profile: Any) -> bool | None:
    return check_inclusion(rules.education_levels, _get_profile_value(profile, "education_level"))


def _describe_state(profile: Any) -> str:
    return f"State: {_display_text(_get_profile_value(profile, 'state'))}"


def _describe_category(profile: Any) -> str:
    return f"Category: {_display_text(_get_profile_value(profile, 'category'))}"


def _describe_income(profile: Any) -> str:
    income = parse_number(_get_profile_value(profile, "family_income")) or 0.0
    return f"Income: ₹{income:,.0f} (Within limit)"


def _describe_marks(profile: Any) -> str:
    marks = parse_number(_get_profile_value(profile, "marks")) or 0.0
    return f"Marks: {_format_number(marks)}% (Meets requirement)"


def _describe_gender(profile: Any) -> str:
    return f"Gender: {_display_text(_get_profile_value(profile, 'gender'))}"


def _describe_education(profile: Any) -> str:
    return f"Education: {_display_text(_get_profile_value(profile, 'education_level'))}"


@dataclass(frozen=True, slots=True)
class _Criterion:
    name: str
    failure_code: str
    check: Callable[[EligibilityRules, Any], bool | None]
    describe: Callable[[Any], str]


_MARKS = _Criterion("marks", "MARKS_BELOW_MIN", _check_marks, _describe_marks)
_INCOME = _Criterion("income", "INCOME_ABOVE_MAX", _check_income, _describe_income)
_STATE = _Criterion("state", "STATE_NOT_ALLOWED", _check_state, _describe_state)
_CATEGORY = _Criterion("category", "CATEGORY_NOT_ALLOWED", _check_category, _describe_category)
_GENDER = _Criterion("gender", "GENDER_MISMATCH", _check_gender, _describe_gender)
_EDUCATION = _Criterion(
    "education", "EDUCATION_LEVEL_MISMATCH", _check_education, _describe_education
)

# Gating order and display order differ.
ELIGIBILITY_ORDER: tuple[_Criterion, ...] = (_MARKS, _INCOME, _STATE, _CATEGORY, _GENDER, _EDUCATION)
REASON_ORDER: tuple[_Criterion, ...] = (_STATE, _CATEGORY, _INCOME, _MARKS, _GENDER, _EDUCATION)


def is_eligible(scholarship: Any, profile: Any) -> bool:
    rules = resolve_rules(scholarship)
    if rules.is_empty:
        return True
    for criterion in ELIGIBILITY_ORDER:
        if criterion.check(rules, profile) is False:
            return False
    return True


def failed_criteria(scholarship: Any, profile: Any) -> list[str]:
    rules = resolve_rules(scholarship)
    if rules.is_empty:
        return []
    return [
        criterion.failure_code
        for criterion in ELIGIBILITY_ORDER
        if criterion.check(rules, profile) is False
    ]


def match_reasons(scholarship: Any, profile: Any) -> list[str]:
    rules = resolve_rules(scholarship)
    if rules.is_empty:
        return []
    return [
        criterion.describe(profile)
        for criterion in REASON_ORDER
        if criterion.check(rules, profile) is True
    ]


def apply_eligibility_filter(
    df: pd.DataFrame, profile: Any
) -> tuple[pd.DataFrame, pd.DataFrame]:
    with_reasons_df = df.copy()
    rules_by_row = [resolve_rules(row) for _, row in df.iterrows()]
    with_reasons_df["reasons"] = pd.Series(
        [failed_criteria(rules, profile) for rules in rules_by_row],
        index=df.index,
        dtype=object,
    )
    with_reasons_df["match_reasons"] = pd.Series(
        [match_reasons(rules, profile) for rules in rules_by_row],
        index=df.index,
        dtype=object,
    )

    is_ineligible = with_reasons_df["reasons"].map(bool).astype(bool)
    ineligible_df = with_reasons_df[is_ineligible].copy()
    eligible_df = with_reasons_df[~is_ineligible].copy()

    return eligible_df, ineligible_df

from __future__ import annotations

import json
import logging
import math
import re
from typing import Any, Final, Iterable, Mapping

from src.normalize.schema import EligibilityRules

logger = logging.getLogger(__name__)

MIN_MARKS_KEYS: Final[tuple[str, ...]] = ("minMarks", "min_marks", "marks", "percentage")
MAX_INCOME_KEYS: Final[tuple[str, ...]] = ("maxIncome", "max_income", "familyIncome", "income")
EDUCATION_LEVEL_KEYS: Final[tuple[str, ...]] = ("educationLevels", "education_level", "educationLevel")
STATE_KEYS: Final[tuple[str, ...]] = ("states", "state", "domicile")
CATEGORY_KEYS: Final[tuple[str, ...]] = ("categories", "category", "caste")
GENDER_KEYS: Final[tuple[str, ...]] = ("gender", "sex")

ANY_GENDER: Final[str] = "Any"

RULE_LABELS: Final[dict[str, str]] = {
    "min_marks": "Minimum Marks",
    "minMarks": "Minimum Marks",
    "marks": "Minimum Marks",
    "percentage": "Percentage Required",
    "max_income": "Family Income Limit",
    "maxIncome": "Family Income Limit",
    "family_income_limit": "Family Income Limit",
    "familyIncome": "Family Income Limit",
    "income": "Family Income Limit",
    "education_level": "Education Level",
    "educationLevel": "Education Level",
    "educationLevels": "Education Level",
    "states": "Eligible States",
    "state": "Eligible States",
    "location": "Location",
    "domicile": "Domicile",
    "categories": "Categories",
    "category": "Category",
    "caste": "Caste",
    "gender": "Gender",
    "sex": "Gender",
}

_NON_NUMERIC_PATTERN = re.compile(r"[^0-9.]")
_LEADING_NUMBER_PATTERN = re.compile(r"\d+(?:\.\d*)?|\.\d+")
_CAMEL_BOUNDARY_PATTERN = re.compile(r"([A-Z])")
_WORD_START_PATTERN = re.compile(r"\b\w")


def is_blank(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return value == ""
    if isinstance(value, float):
        return math.isnan(value)
    return False


def find_rule_value(document: Any, synonyms: Iterable[str]) -> Any:
    """Return the first non-blank value stored under any of ``synonyms``.

    Each synonym is tried as a literal key first, then against the first of
    the document's own keys that matches it case-insensitively.
    """
    if not isinstance(document, Mapping):
        return None
    for synonym in synonyms:
        value = document.get(synonym)
        if not is_blank(value):
            return value
        lowered = synonym.lower()
        for key in document:
            if isinstance(key, str) and key.lower() == lowered:
                candidate = document[key]
                if not is_blank(candidate):
                    return candidate
                break
    return None


def parse_number(value: Any) -> float | None:
    """Parse numbers and currency/percent-decorated strings such as ``"₹5,00,000"``."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        numeric = float(value)
        return None if math.isnan(numeric) else numeric
    if isinstance(value, str):
        cleaned = _NON_NUMERIC_PATTERN.sub("", value)
        match = _LEADING_NUMBER_PATTERN.match(cleaned)
        if match is None:
            return None
        return float(match.group(0))
    try:
        numeric = float(value)
    except (TypeError, ValueError):
        return None
    return None if math.isnan(numeric) else numeric


def split_rule_list(value: Any) -> tuple[str, ...] | None:
    """Normalize an array-typed rule value; comma-joined strings become tuples."""
    if is_blank(value) or isinstance(value, (bool, Mapping)):
        return None
    if isinstance(value, str):
        return tuple(part.strip() for part in value.split(",") if part.strip())
    if isinstance(value, (set, frozenset)):
        value = sorted(str(item) for item in value)
    if hasattr(value, "tolist"):
        value = value.tolist()
    if isinstance(value, (list, tuple)):
        return tuple(str(item).strip() for item in value if not is_blank(item) and str(item).strip())
    return (str(value).strip(),)


def load_rules_document(raw: Any) -> dict[str, Any]:
    """Decode a stored rules value into a plain mapping.

    Unparseable strings and non-mapping payloads decode to an empty document,
    which every profile satisfies.
    """
    if isinstance(raw, EligibilityRules):
        return dict(raw.raw)
    if is_blank(raw):
        return {}
    if isinstance(raw, bytes):
        try:
            raw = raw.decode("utf-8")
        except UnicodeDecodeError:
            logger.debug("Ignoring eligibility rules that are not valid UTF-8.")
            return {}
    if isinstance(raw, str):
        try:
            raw = json.loads(raw)
        except json.JSONDecodeError:
            logger.debug("Ignoring unparseable eligibility rules: %.80r", raw)
            return {}
    if isinstance(raw, (list, tuple)):
        raw = raw[0] if raw else {}
    if not isinstance(raw, Mapping):
        return {}
    return dict(raw)


def _positive_limit(value: Any) -> float | None:
    numeric = parse_number(value)
    if numeric is None or numeric == 0:
        return None
    return numeric


def parse_rules(raw: Any) -> EligibilityRules:
    if isinstance(raw, EligibilityRules):
        return raw

    document = load_rules_document(raw)
    if not document:
        return EligibilityRules()

    genders = split_rule_list(find_rule_value(document, GENDER_KEYS))
    any_gender = genders is not None and ANY_GENDER in genders

    return EligibilityRules(
        min_marks=_positive_limit(find_rule_value(document, MIN_MARKS_KEYS)),
        max_income=_positive_limit(find_rule_value(document, MAX_INCOME_KEYS)),
        education_levels=split_rule_list(find_rule_value(document, EDUCATION_LEVEL_KEYS)),
        states=split_rule_list(find_rule_value(document, STATE_KEYS)),
        categories=split_rule_list(find_rule_value(document, CATEGORY_KEYS)),
        genders=None if any_gender else genders,
        any_gender=any_gender,
        raw=document,
    )


def rules_from_form(
    *,
    min_marks: str = "",
    max_income: str = "",
    states: str = "",
    categories: str = "",
    education_levels: str = "",
    gender: str = "",
) -> dict[str, Any]:
    """Serialize admin form text fields into a rules document."""
    rules: dict[str, Any] = {
        "minMarks": parse_number(min_marks) or 0,
        "maxIncome": parse_number(max_income) or 0,
        "states": list(split_rule_list(states) or ()),
        "categories": list(split_rule_list(categories) or ()),
        "educationLevels": list(split_rule_list(education_levels) or ()),
    }
    if gender.strip():
        rules["gender"] = gender.strip()
    return rules


def rule_label(key: str) -> str:
    if key in RULE_LABELS:
        return RULE_LABELS[key]
    spaced = _CAMEL_BOUNDARY_PATTERN.sub(r" \1", key.replace("_", " ")).strip()
    return _WORD_START_PATTERN.sub(lambda match: match.group(0).upper(), spaced)


def rule_items(raw: Any) -> list[tuple[str, str]]:
    """Label/value pairs for listing a scholarship's criteria."""
    items: list[tuple[str, str]] = []
    for key, value in load_rules_document(raw).items():
        if is_blank(value):
            continue
        if isinstance(value, (list, tuple)):
            if not value:
                continue
            display = ", ".join(str(item) for item in value)
        else:
            display = str(value)
        items.append((rule_label(str(key)), display))
    return items

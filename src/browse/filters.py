from __future__ import annotations

from typing import Any, Callable

import pandas as pd

from src.normalize.rules import parse_number
from src.rank.stage1_eligibility import check_inclusion, is_eligible, resolve_rules

ALL_OPTION = "all"


def _is_active(value: Any) -> bool:
    if value is None:
        return False
    if isinstance(value, str):
        return bool(value.strip()) and value.strip().lower() != ALL_OPTION
    return True


def _row_mask(df: pd.DataFrame, predicate: Callable[[pd.Series], bool]) -> pd.Series:
    return pd.Series([bool(predicate(row)) for _, row in df.iterrows()], index=df.index, dtype=bool)


def _text_contains(value: Any, needle: str) -> bool:
    if value is None or (isinstance(value, float) and pd.isna(value)):
        return False
    return needle in str(value).lower()


def filter_catalog(
    df: pd.DataFrame,
    *,
    query: str | None = None,
    state: str | None = None,
    category: str | None = None,
    education_level: str | None = None,
    source: str | None = None,
    min_amount: Any = None,
    max_amount: Any = None,
    eligible_only: bool = False,
    profile: Any | None = None,
) -> pd.DataFrame:
    """Narrow a scholarship listing the way the browse page does.

    Rule-based filters pass scholarships that place no restriction on the
    filtered dimension. ``"all"`` or a blank value disables a filter.
    """
    mask = pd.Series(True, index=df.index, dtype=bool)

    if eligible_only and profile is not None:
        mask &= _row_mask(df, lambda row: is_eligible(row, profile))

    if query and query.strip():
        needle = query.strip().lower()
        mask &= _row_mask(
            df,
            lambda row: _text_contains(row.get("title"), needle)
            or _text_contains(row.get("description"), needle),
        )

    rule_filters = (
        (state, "states"),
        (category, "categories"),
        (education_level, "education_levels"),
    )
    for selected, attribute in rule_filters:
        if not _is_active(selected):
            continue
        mask &= _row_mask(
            df,
            lambda row, attribute=attribute, selected=selected: check_inclusion(
                getattr(resolve_rules(row), attribute), selected
            )
            is not False,
        )

    if _is_active(source) and "source" in df.columns:
        mask &= df["source"].astype(str) == str(source)

    amounts = pd.to_numeric(df["amount"], errors="coerce") if "amount" in df.columns else None
    lower = parse_number(min_amount)
    if lower is not None and amounts is not None:
        mask &= amounts >= lower
    upper = parse_number(max_amount)
    if upper is not None and amounts is not None:
        mask &= amounts <= upper

    return df[mask].copy()

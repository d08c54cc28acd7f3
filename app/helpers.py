from __future__ import annotations

from datetime import date
from typing import Any

import pandas as pd

from src.normalize.schema import coerce_date
from src.rank.deadlines import days_to_deadline


def format_amount(amount: Any) -> str:
    value = _coerce_float(amount)
    if value is None or value <= 0.0:
        return "Amount not specified"
    return f"₹{value:,.0f}"


def format_deadline(deadline: Any, today: date) -> str:
    remaining = days_to_deadline(coerce_date(deadline), today)
    if remaining is None:
        return "Always open"
    if remaining < 0:
        return "Closed"
    if remaining == 0:
        return "Closes today"
    if remaining == 1:
        return "Closes tomorrow"
    return f"Closes in {remaining} days"


def format_match_score(score: Any) -> str:
    value = _coerce_float(score) or 0.0
    return f"{round(value * 100):d}% match"


def reasons_to_text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, list):
        return ", ".join(str(item) for item in value if str(item).strip())
    return str(value)


def summarize_match_row(row: pd.Series, today: date) -> str:
    parts = [
        str(row.get("title") or "Untitled scholarship"),
        format_amount(row.get("amount")),
        format_deadline(row.get("deadline"), today),
        format_match_score(row.get("match_score")),
    ]
    reasons = reasons_to_text(row.get("match_reasons"))
    if reasons:
        parts.append(reasons)
    return " | ".join(parts)


def _coerce_float(value: Any) -> float | None:
    if value is None:
        return None
    try:
        numeric = float(value)
    except (TypeError, ValueError):
        return None
    if pd.isna(numeric):
        return None
    return numeric

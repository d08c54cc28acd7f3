from __future__ import annotations

from datetime import date

import pandas as pd

from app.helpers import format_amount, format_deadline, format_match_score, summarize_match_row

TODAY = date(2026, 3, 1)


def test_format_amount_uses_rupees_and_handles_missing_values() -> None:
    assert format_amount(250000) == "₹250,000"
    assert format_amount("12000.4") == "₹12,000"
    assert format_amount(None) == "Amount not specified"
    assert format_amount(0) == "Amount not specified"


def test_format_deadline_describes_remaining_time() -> None:
    assert format_deadline(None, TODAY) == "Always open"
    assert format_deadline("2026-02-20", TODAY) == "Closed"
    assert format_deadline(date(2026, 3, 1), TODAY) == "Closes today"
    assert format_deadline("2026-03-02", TODAY) == "Closes tomorrow"
    assert format_deadline("2026-03-11", TODAY) == "Closes in 10 days"


def test_summarize_match_row_is_stable() -> None:
    row = pd.Series(
        {
            "title": "Merit Award",
            "amount": 50000,
            "deadline": None,
            "match_score": 0.666,
            "match_reasons": ["State: Kerala", "Education: Masters"],
        }
    )

    assert format_match_score(0.666) == "67% match"
    assert summarize_match_row(row, TODAY) == (
        "Merit Award | ₹50,000 | Always open | 67% match | State: Kerala, Education: Masters"
    )

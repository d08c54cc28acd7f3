from __future__ import annotations

from datetime import date

import pandas as pd

from src.rank.deadlines import days_to_deadline, filter_open, select_expired, select_nearing_deadline
from src.rank.weights import MatchingConfig

TODAY = date(2026, 3, 10)


def _listing() -> pd.DataFrame:
    return pd.DataFrame(
        [
            {"scholarship_id": "open-ended", "deadline": None},
            {"scholarship_id": "today", "deadline": "2026-03-10"},
            {"scholarship_id": "soon", "deadline": date(2026, 3, 15)},
            {"scholarship_id": "later", "deadline": "2026-05-01T00:00:00+00:00"},
            {"scholarship_id": "recently-closed", "deadline": "2026-03-05"},
            {"scholarship_id": "long-closed", "deadline": "2026-02-01"},
        ]
    )


def test_filter_open_keeps_future_today_and_missing_deadlines() -> None:
    open_df = filter_open(_listing(), TODAY)

    assert open_df["scholarship_id"].tolist() == ["open-ended", "today", "soon", "later"]


def test_select_expired_respects_grace_period() -> None:
    expired_df = select_expired(_listing(), TODAY, grace_days=7)

    assert expired_df["scholarship_id"].tolist() == ["long-closed"]


def test_select_nearing_deadline_uses_inclusive_window() -> None:
    nearing_df = select_nearing_deadline(_listing(), TODAY, window_days=5)

    assert nearing_df["scholarship_id"].tolist() == ["today", "soon"]


def test_deadline_windows_follow_matching_config() -> None:
    config = MatchingConfig(expiry_grace_days=3, reminder_window_days=60)

    assert select_expired(_listing(), TODAY)["scholarship_id"].tolist() == ["long-closed"]
    assert select_expired(_listing(), TODAY, config=config)["scholarship_id"].tolist() == [
        "recently-closed",
        "long-closed",
    ]
    assert select_nearing_deadline(_listing(), TODAY)["scholarship_id"].tolist() == ["today", "soon"]
    assert select_nearing_deadline(_listing(), TODAY, config=config)["scholarship_id"].tolist() == [
        "today",
        "soon",
        "later",
    ]


def test_deadline_helpers_tolerate_missing_column() -> None:
    df = pd.DataFrame([{"scholarship_id": "a"}])

    assert filter_open(df, TODAY)["scholarship_id"].tolist() == ["a"]
    assert select_expired(df, TODAY).empty


def test_days_to_deadline() -> None:
    assert days_to_deadline(None, TODAY) is None
    assert days_to_deadline(date(2026, 3, 12), TODAY) == 2

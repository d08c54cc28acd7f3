from __future__ import annotations

from datetime import date, timedelta

import pandas as pd

from src.normalize.schema import coerce_date
from src.rank.weights import MatchingConfig


def _deadline_dates(df: pd.DataFrame) -> pd.Series:
    if "deadline" not in df.columns:
        return pd.Series(pd.NaT, index=df.index, dtype="datetime64[ns]")
    return pd.to_datetime(df["deadline"].map(coerce_date), errors="coerce")


def filter_open(df: pd.DataFrame, today: date) -> pd.DataFrame:
    """Scholarships still accepting applications; a missing deadline means always open."""
    deadlines = _deadline_dates(df)
    is_open = deadlines.isna() | (deadlines >= pd.Timestamp(today))
    return df[is_open].copy()


def select_expired(
    df: pd.DataFrame,
    today: date,
    grace_days: int | None = None,
    *,
    config: MatchingConfig | None = None,
) -> pd.DataFrame:
    if grace_days is None:
        grace_days = (config or MatchingConfig.baseline()).expiry_grace_days
    cutoff = pd.Timestamp(today - timedelta(days=grace_days))
    deadlines = _deadline_dates(df)
    is_expired = deadlines.notna() & (deadlines < cutoff)
    return df[is_expired].copy()


def select_nearing_deadline(
    df: pd.DataFrame,
    today: date,
    window_days: int | None = None,
    *,
    config: MatchingConfig | None = None,
) -> pd.DataFrame:
    if window_days is None:
        window_days = (config or MatchingConfig.baseline()).reminder_window_days
    start = pd.Timestamp(today)
    end = pd.Timestamp(today + timedelta(days=window_days))
    deadlines = _deadline_dates(df)
    is_nearing = deadlines.notna() & (deadlines >= start) & (deadlines <= end)

    nearing_df = df[is_nearing].copy()
    nearing_df["_deadline_sort"] = deadlines[is_nearing]
    return nearing_df.sort_values(by="_deadline_sort", kind="mergesort").drop(columns=["_deadline_sort"])


def days_to_deadline(deadline: date | None, today: date) -> int | None:
    if deadline is None:
        return None
    return (deadline - today).days

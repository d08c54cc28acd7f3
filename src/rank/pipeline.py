from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from typing import Any, Iterable, Protocol

import pandas as pd

from src.rank.deadlines import filter_open
from src.rank.similarity import rank_by_similarity
from src.rank.stage1_eligibility import apply_eligibility_filter, is_eligible
from src.rank.stage2_scoring import score_relevance, sort_by_relevance
from src.rank.weights import MatchingConfig

logger = logging.getLogger(__name__)


class MatchSink(Protocol):
    def replace_matches(self, user_id: str, records: list[dict[str, Any]]) -> None:
        """Replace every stored match for ``user_id`` with ``records``."""


@dataclass(frozen=True, slots=True)
class MatchResult:
    ranked: pd.DataFrame
    total_eligible: int
    total_considered: int

    def top(self, limit: int) -> pd.DataFrame:
        return self.ranked.head(limit).reset_index(drop=True)


def _exclude_ids(df: pd.DataFrame, exclude_ids: Iterable[str]) -> pd.DataFrame:
    excluded = {str(value) for value in exclude_ids}
    if not excluded or "scholarship_id" not in df.columns:
        return df
    keep = ~df["scholarship_id"].astype(str).isin(excluded)
    return df[keep].copy()


def match_scholarships(
    profile: Any,
    scholarships_df: pd.DataFrame,
    *,
    today: date | None = None,
    exclude_ids: Iterable[str] = (),
    config: MatchingConfig | None = None,
) -> MatchResult:
    """Filter a scholarship batch down to a profile's eligible matches, most relevant first.

    Scholarships past their deadline and those listed in ``exclude_ids`` (for
    example ones with an active application) are dropped before evaluation.
    """
    effective_today = today or date.today()
    active_config = config or MatchingConfig.baseline()

    candidates_df = _exclude_ids(filter_open(scholarships_df, effective_today), exclude_ids)
    eligible_df, _ = apply_eligibility_filter(candidates_df, profile)
    logger.info(
        "Found %d eligible scholarships out of %d open listings",
        len(eligible_df),
        len(candidates_df),
    )

    scored_df = score_relevance(
        eligible_df.drop(columns=["reasons"]),
        profile,
        min_token_length=active_config.min_token_length,
    )
    return MatchResult(
        ranked=sort_by_relevance(scored_df),
        total_eligible=len(eligible_df),
        total_considered=len(candidates_df),
    )


def build_match_records(user_id: str, ranked_df: pd.DataFrame, limit: int = 20) -> list[dict[str, Any]]:
    records: list[dict[str, Any]] = []
    for _, row in ranked_df.head(limit).iterrows():
        records.append(
            {
                "user_id": user_id,
                "scholarship_id": row.get("scholarship_id"),
                "match_score": float(row.get("match_score", 0.0)),
                "is_eligible": True,
            }
        )
    return records


def persist_matches(
    result: MatchResult,
    user_id: str,
    sink: MatchSink,
    *,
    config: MatchingConfig | None = None,
) -> list[dict[str, Any]]:
    active_config = config or MatchingConfig.baseline()
    records = build_match_records(user_id, result.ranked, limit=active_config.stored_match_limit)
    sink.replace_matches(user_id, records)
    logger.info("Stored %d matches for user %s", len(records), user_id)
    return records


def reminder_recipients(scholarship: Any, profiles: Iterable[Any]) -> list[Any]:
    """Profiles that should hear about a scholarship nearing its deadline."""
    return [profile for profile in profiles if is_eligible(scholarship, profile)]


def similar_scholarships(
    scholarships_df: pd.DataFrame,
    scholarship_id: str,
    *,
    limit: int | None = None,
    config: MatchingConfig | None = None,
) -> pd.DataFrame:
    if "scholarship_id" not in scholarships_df.columns:
        raise ValueError("Similar-scholarship lookup requires a 'scholarship_id' column.")

    records = scholarships_df.to_dict(orient="records")
    target = next(
        (record for record in records if str(record.get("scholarship_id")) == str(scholarship_id)),
        None,
    )
    if target is None:
        raise ValueError(f"Unknown scholarship id '{scholarship_id}'.")

    similar = rank_by_similarity(target, records, limit=limit, config=config)
    rows = [{**item.scholarship, "similarity_score": item.score} for item in similar]
    return pd.DataFrame(rows, columns=[*scholarships_df.columns, "similarity_score"])

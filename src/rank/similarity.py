from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable, Mapping

import pandas as pd

from src.normalize.schema import EligibilityRules
from src.rank.stage1_eligibility import resolve_rules
from src.rank.weights import MatchingConfig


@dataclass(frozen=True, slots=True)
class SimilarScholarship:
    scholarship: Any
    score: int


def _scholarship_id(record: Any) -> str | None:
    if isinstance(record, (Mapping, pd.Series)):
        value = record.get("scholarship_id", record.get("id"))
    else:
        value = getattr(record, "scholarship_id", None)
    if value is None or (isinstance(value, float) and pd.isna(value)):
        return None
    return str(value)


def _folded(values: tuple[str, ...] | None) -> set[str]:
    return {value.strip().lower() for value in values or () if value.strip()}


def _overlaps(left: tuple[str, ...] | None, right: tuple[str, ...] | None) -> bool:
    return bool(_folded(left) & _folded(right))


def similarity_score(
    target_rules: EligibilityRules,
    candidate_rules: EligibilityRules,
    config: MatchingConfig | None = None,
) -> int:
    active_config = config or MatchingConfig.baseline()
    score = 0
    if _overlaps(target_rules.categories, candidate_rules.categories):
        score += active_config.category_overlap_weight
    if _overlaps(target_rules.states, candidate_rules.states):
        score += active_config.state_overlap_weight
    if _overlaps(target_rules.education_levels, candidate_rules.education_levels):
        score += active_config.education_overlap_weight
    return score


def _is_target(target: Any, target_id: str | None, candidate: Any) -> bool:
    if candidate is target:
        return True
    return target_id is not None and _scholarship_id(candidate) == target_id


def rank_by_similarity(
    target: Any,
    candidates: Iterable[Any],
    *,
    limit: int | None = None,
    config: MatchingConfig | None = None,
) -> list[SimilarScholarship]:
    """Order candidates by how many rule dimensions they share with ``target``.

    When nothing overlaps, the first ``limit`` candidates are returned in input
    order with a score of zero.
    """
    active_config = config or MatchingConfig.baseline()
    effective_limit = active_config.similar_limit if limit is None else limit
    target_id = _scholarship_id(target)
    target_rules = resolve_rules(target)

    pool = [candidate for candidate in candidates if not _is_target(target, target_id, candidate)]
    if not pool or effective_limit <= 0:
        return []

    scored = [
        SimilarScholarship(
            scholarship=candidate,
            score=similarity_score(target_rules, resolve_rules(candidate), active_config),
        )
        for candidate in pool
    ]
    similar = [item for item in scored if item.score > 0]
    if not similar:
        return [SimilarScholarship(scholarship=candidate, score=0) for candidate in pool[:effective_limit]]

    similar.sort(key=lambda item: item.score, reverse=True)
    return similar[:effective_limit]

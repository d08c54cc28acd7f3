from __future__ import annotations

import math
import re
from collections import Counter
from dataclasses import dataclass
from typing import Any, Iterable, Mapping

import numpy as np
import pandas as pd
from sklearn.feature_extraction.text import CountVectorizer
from sklearn.metrics.pairwise import cosine_similarity

MIN_TOKEN_LENGTH = 3

_NON_WORD_PATTERN = re.compile(r"[^\w\s]")


@dataclass(frozen=True, slots=True)
class RankedScholarship:
    scholarship: Any
    score: float


def _get_value(record: Any, key: str) -> Any:
    if isinstance(record, (Mapping, pd.Series)):
        return record.get(key)
    return getattr(record, key, None)


def _normalize_text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, str):
        return value.strip()
    if isinstance(value, float) and pd.isna(value):
        return ""
    return str(value).strip()


def tokenize(value: Any, min_length: int = MIN_TOKEN_LENGTH) -> list[str]:
    normalized = _NON_WORD_PATTERN.sub(" ", _normalize_text(value).lower())
    return [token for token in normalized.split() if len(token) >= min_length]


def term_frequency_vector(tokens: Iterable[str]) -> dict[str, float]:
    """Term counts scaled by the document's most frequent term."""
    counts = Counter(tokens)
    if not counts:
        return {}
    max_count = max(counts.values())
    return {term: count / max_count for term, count in counts.items()}


def cosine_similarity_maps(left: Mapping[str, float], right: Mapping[str, float]) -> float:
    dot_product = 0.0
    left_norm = 0.0
    right_norm = 0.0
    for term in set(left) | set(right):
        left_value = left.get(term, 0.0)
        right_value = right.get(term, 0.0)
        dot_product += left_value * right_value
        left_norm += left_value * left_value
        right_norm += right_value * right_value
    if left_norm == 0.0 or right_norm == 0.0:
        return 0.0
    return dot_product / (math.sqrt(left_norm) * math.sqrt(right_norm))


def build_profile_text(profile: Any) -> str:
    parts = [
        _normalize_text(_get_value(profile, "field_of_study")),
        _normalize_text(_get_value(profile, "education_level")),
    ]
    return " ".join(part for part in parts if part)


def build_scholarship_text(scholarship: Any) -> str:
    parts = [
        _normalize_text(_get_value(scholarship, "title")),
        _normalize_text(_get_value(scholarship, "description")),
    ]
    return " ".join(part for part in parts if part)


def relevance_score(profile: Any, scholarship: Any, *, min_token_length: int = MIN_TOKEN_LENGTH) -> float:
    profile_vector = term_frequency_vector(tokenize(build_profile_text(profile), min_token_length))
    scholarship_vector = term_frequency_vector(
        tokenize(build_scholarship_text(scholarship), min_token_length)
    )
    return min(max(cosine_similarity_maps(profile_vector, scholarship_vector), 0.0), 1.0)


def _pretokenized(tokens: list[str]) -> list[str]:
    return tokens


def compute_relevance_scores(
    query_text: str,
    texts: list[str],
    *,
    min_token_length: int = MIN_TOKEN_LENGTH,
) -> np.ndarray:
    if not texts:
        return np.array([], dtype=float)

    query_tokens = tokenize(query_text, min_token_length)
    text_tokens = [tokenize(text, min_token_length) for text in texts]
    if not query_tokens or not any(text_tokens):
        return np.zeros(len(texts), dtype=float)

    vectorizer = CountVectorizer(analyzer=_pretokenized)
    counts = vectorizer.fit_transform([query_tokens, *text_tokens]).toarray().astype(float)

    row_max = counts.max(axis=1, keepdims=True)
    term_frequencies = np.divide(
        counts,
        row_max,
        out=np.zeros_like(counts),
        where=row_max > 0.0,
    )

    similarities = cosine_similarity(term_frequencies[1:], term_frequencies[:1]).ravel()
    return np.clip(similarities, 0.0, 1.0)


def rank_by_relevance(
    profile: Any,
    scholarships: Iterable[Any],
    *,
    min_token_length: int = MIN_TOKEN_LENGTH,
) -> list[RankedScholarship]:
    candidates = list(scholarships)
    if not candidates:
        return []

    scores = compute_relevance_scores(
        build_profile_text(profile),
        [build_scholarship_text(candidate) for candidate in candidates],
        min_token_length=min_token_length,
    )
    ranked = [
        RankedScholarship(scholarship=candidate, score=float(score))
        for candidate, score in zip(candidates, scores)
    ]
    # list.sort is stable, so equal scores keep their input order
    ranked.sort(key=lambda item: item.score, reverse=True)
    return ranked


def score_relevance(
    df: pd.DataFrame,
    profile: Any,
    *,
    min_token_length: int = MIN_TOKEN_LENGTH,
) -> pd.DataFrame:
    scored_df = df.copy()
    scholarship_texts = [build_scholarship_text(row) for _, row in scored_df.iterrows()]
    scored_df["match_score"] = compute_relevance_scores(
        build_profile_text(profile),
        scholarship_texts,
        min_token_length=min_token_length,
    )
    return scored_df


def sort_by_relevance(scored_df: pd.DataFrame) -> pd.DataFrame:
    if "match_score" not in scored_df.columns:
        raise ValueError("Relevance sort requires a 'match_score' column.")
    return scored_df.sort_values(
        by="match_score",
        ascending=False,
        kind="mergesort",
    ).reset_index(drop=True)

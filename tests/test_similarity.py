from __future__ import annotations

from src.normalize.rules import parse_rules
from src.normalize.schema import ScholarshipRecord
from src.rank.similarity import rank_by_similarity, similarity_score
from src.rank.weights import MatchingConfig


def _scholarship(scholarship_id: str, rules: object) -> dict[str, object]:
    return {"scholarship_id": scholarship_id, "title": scholarship_id, "eligibility_rules": rules}


TARGET = _scholarship(
    "target",
    {"categories": ["OBC", "SC"], "states": ["Kerala"], "educationLevels": ["Bachelors"]},
)


def test_similarity_score_weights_category_state_and_education() -> None:
    target_rules = parse_rules(TARGET["eligibility_rules"])

    assert similarity_score(target_rules, parse_rules({"categories": ["sc"]})) == 2
    assert similarity_score(target_rules, parse_rules({"states": "Kerala, Goa"})) == 2
    assert similarity_score(target_rules, parse_rules({"education_level": "Bachelors"})) == 1
    assert similarity_score(target_rules, parse_rules(TARGET["eligibility_rules"])) == 5
    assert similarity_score(target_rules, parse_rules(None)) == 0


def test_rank_by_similarity_orders_by_score_and_excludes_target() -> None:
    candidates = [
        TARGET,
        _scholarship("edu-only", {"educationLevels": ["Bachelors"]}),
        _scholarship("all", {"categories": ["OBC"], "states": ["Kerala"], "educationLevels": ["Bachelors"]}),
        _scholarship("none", {"states": ["Goa"]}),
        _scholarship("state", {"states": ["Kerala"]}),
    ]

    similar = rank_by_similarity(TARGET, candidates, limit=5)

    assert [item.scholarship["scholarship_id"] for item in similar] == ["all", "state", "edu-only"]
    assert [item.score for item in similar] == [5, 2, 1]


def test_rank_by_similarity_keeps_input_order_for_equal_scores_and_truncates() -> None:
    candidates = [_scholarship(f"s{index}", {"states": ["Kerala"]}) for index in range(5)]

    similar = rank_by_similarity(TARGET, candidates)

    assert [item.scholarship["scholarship_id"] for item in similar] == ["s0", "s1", "s2"]


def test_rank_by_similarity_falls_back_to_first_candidates_without_overlap() -> None:
    candidates = [
        _scholarship("a", {"states": ["Goa"]}),
        _scholarship("b", None),
        _scholarship("c", "{broken"),
        _scholarship("d", {}),
    ]

    similar = rank_by_similarity(TARGET, candidates)

    assert [item.scholarship["scholarship_id"] for item in similar] == ["a", "b", "c"]
    assert all(item.score == 0 for item in similar)


def test_rank_by_similarity_empty_candidates_and_target_without_rules() -> None:
    assert rank_by_similarity(TARGET, []) == []
    assert rank_by_similarity(TARGET, [TARGET]) == []

    bare_target = ScholarshipRecord(scholarship_id="bare", title="Bare")
    similar = rank_by_similarity(bare_target, [TARGET], limit=2)

    assert [item.score for item in similar] == [0]


def test_rank_by_similarity_uses_configured_weights_and_limit() -> None:
    config = MatchingConfig(category_overlap_weight=0, state_overlap_weight=5, similar_limit=1)
    candidates = [
        _scholarship("category", {"categories": ["OBC"]}),
        _scholarship("state", {"states": ["Kerala"]}),
    ]

    similar = rank_by_similarity(TARGET, candidates, config=config)

    assert [(item.scholarship["scholarship_id"], item.score) for item in similar] == [("state", 5)]

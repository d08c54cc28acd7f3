from __future__ import annotations

import json
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Mapping


@dataclass(frozen=True, slots=True)
class MatchingConfig:
    """Tunables shared by the match workflow and the similarity ranking.

    ``stored_match_limit`` caps the rows handed to the persisted-match sink,
    ``response_match_limit`` caps what a caller shows.
    """

    min_token_length: int = 3
    stored_match_limit: int = 20
    response_match_limit: int = 10
    similar_limit: int = 3
    category_overlap_weight: int = 2
    state_overlap_weight: int = 2
    education_overlap_weight: int = 1
    expiry_grace_days: int = 7
    reminder_window_days: int = 7

    def __post_init__(self) -> None:
        for item in fields(self):
            value = getattr(self, item.name)
            if isinstance(value, bool) or not isinstance(value, int):
                raise ValueError(f"Matching config '{item.name}' must be an integer.")
            if value < 0:
                raise ValueError(f"Matching config '{item.name}' must be non-negative.")
        if self.min_token_length < 1:
            raise ValueError("Matching config 'min_token_length' must be at least 1.")

    @classmethod
    def baseline(cls) -> MatchingConfig:
        return cls()

    @classmethod
    def from_mapping(cls, payload: Mapping[str, Any] | None) -> MatchingConfig:
        values = payload or {}
        baseline = cls.baseline()
        kwargs: dict[str, int] = {}
        for item in fields(cls):
            raw = values.get(item.name, getattr(baseline, item.name))
            message = f"Matching config '{item.name}' must be an integer."
            if isinstance(raw, float) and not raw.is_integer():
                raise ValueError(message)
            try:
                kwargs[item.name] = int(raw)
            except (TypeError, ValueError) as exc:
                raise ValueError(message) from exc
        return cls(**kwargs)

    def to_dict(self) -> dict[str, int]:
        return {item.name: getattr(self, item.name) for item in fields(self)}


def load_matching_config(path: Path | None) -> MatchingConfig:
    if path is None:
        return MatchingConfig.baseline()
    if not path.exists():
        raise FileNotFoundError(f"Matching config '{path}' does not exist.")
    payload = json.loads(path.read_text(encoding="utf-8"))
    if not isinstance(payload, Mapping):
        raise ValueError(f"Matching config '{path}' must contain a JSON object.")
    return MatchingConfig.from_mapping(payload)

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from src.io.records import write_json_atomic


class JsonMatchSink:
    """Persisted-match store backed by one JSON file keyed by user id."""

    def __init__(self, path: Path) -> None:
        self.path = path

    def load(self) -> dict[str, list[dict[str, Any]]]:
        if not self.path.exists():
            return {}
        payload = json.loads(self.path.read_text(encoding="utf-8"))
        if not isinstance(payload, dict):
            raise ValueError(f"Match store '{self.path}' must contain a JSON object.")
        return payload

    def matches_for(self, user_id: str) -> list[dict[str, Any]]:
        return list(self.load().get(user_id, []))

    def replace_matches(self, user_id: str, records: list[dict[str, Any]]) -> None:
        payload = self.load()
        payload[user_id] = records
        write_json_atomic(payload, self.path)

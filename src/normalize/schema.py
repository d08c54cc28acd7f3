from __future__ import annotations

import json
from dataclasses import dataclass, field, fields
from datetime import date, datetime
from typing import Any, Mapping, Optional

import pandas as pd


@dataclass(slots=True)
class StudentProfile:
    name: str | None = None
    state: str | None = None
    category: str | None = None
    gender: str | None = None
    education_level: str | None = None
    field_of_study: str | None = None
    current_year: int | None = None
    marks: float | None = None
    family_income: float | None = None
    user_id: str | None = None

    @classmethod
    def from_mapping(cls, payload: Mapping[str, Any] | None) -> StudentProfile:
        values = payload or {}
        known = {item.name for item in fields(cls)}
        kwargs = {key: _none_if_missing(value) for key, value in values.items() if key in known}
        if "user_id" not in kwargs and values.get("id") is not None:
            kwargs["user_id"] = str(values["id"])
        return cls(**kwargs)

    def to_dict(self) -> dict[str, Any]:
        return {item.name: getattr(self, item.name) for item in fields(self)}


@dataclass(frozen=True, slots=True)
class EligibilityRules:
    """Typed view of a scholarship's eligibility document.

    Every criterion is optional; ``None`` means the document places no
    restriction on it. List criteria hold the admin-authored spellings, and
    comparisons against them are case-insensitive.
    """

    min_marks: Optional[float] = None
    max_income: Optional[float] = None
    education_levels: Optional[tuple[str, ...]] = None
    states: Optional[tuple[str, ...]] = None
    categories: Optional[tuple[str, ...]] = None
    genders: Optional[tuple[str, ...]] = None
    any_gender: bool = False
    raw: Mapping[str, Any] = field(default_factory=dict)

    @property
    def is_empty(self) -> bool:
        criteria = (
            self.min_marks,
            self.max_income,
            self.education_levels,
            self.states,
            self.categories,
            self.genders,
        )
        return not self.raw and not self.any_gender and all(value is None for value in criteria)


@dataclass(slots=True)
class ScholarshipRecord:
    """Scholarship listing as supplied by the scholarship source."""

    scholarship_id: str
    title: str
    description: Optional[str] = None
    amount: Optional[float] = None
    deadline: Optional[date] = None
    source: Optional[str] = None
    application_url: Optional[str] = None
    application_steps: list[str] = field(default_factory=list)
    required_documents: list[str] = field(default_factory=list)
    eligibility_rules: Any = None
    created_at: Optional[datetime] = None

    @classmethod
    def from_mapping(cls, payload: Mapping[str, Any]) -> ScholarshipRecord:
        scholarship_id = payload.get("scholarship_id", payload.get("id"))
        return cls(
            scholarship_id="" if scholarship_id is None else str(scholarship_id),
            title=str(_none_if_missing(payload.get("title")) or ""),
            description=_none_if_missing(payload.get("description")),
            amount=_coerce_amount(payload.get("amount")),
            deadline=coerce_date(payload.get("deadline")),
            source=_none_if_missing(payload.get("source")),
            application_url=_none_if_missing(payload.get("application_url")),
            application_steps=_coerce_text_list(payload.get("application_steps")),
            required_documents=_coerce_text_list(payload.get("required_documents")),
            eligibility_rules=payload.get("eligibility_rules"),
            created_at=_coerce_datetime(payload.get("created_at")),
        )

    def to_dict(self) -> dict[str, Any]:
        return {item.name: getattr(self, item.name) for item in fields(self)}


def _is_missing(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, float) and pd.isna(value):
        return True
    return value is pd.NaT


def _none_if_missing(value: Any) -> Any:
    return None if _is_missing(value) else value


def _coerce_amount(value: Any) -> float | None:
    if _is_missing(value):
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def coerce_date(value: Any) -> date | None:
    if _is_missing(value) or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        timestamp = pd.Timestamp(value)
    except (TypeError, ValueError):
        return None
    if pd.isna(timestamp):
        return None
    return timestamp.date()


def _coerce_datetime(value: Any) -> datetime | None:
    if _is_missing(value) or value == "":
        return None
    if isinstance(value, datetime):
        return value
    try:
        timestamp = pd.Timestamp(value)
    except (TypeError, ValueError):
        return None
    if pd.isna(timestamp):
        return None
    return timestamp.to_pydatetime()


def _coerce_text_list(value: Any) -> list[str]:
    if _is_missing(value):
        return []
    if isinstance(value, str):
        stripped = value.strip()
        if stripped.startswith("["):
            try:
                decoded = json.loads(stripped)
            except json.JSONDecodeError:
                decoded = None
            if isinstance(decoded, list):
                return [str(item).strip() for item in decoded if str(item).strip()]
        return [stripped] if stripped else []
    if isinstance(value, (list, tuple)) or hasattr(value, "tolist"):
        items = value.tolist() if hasattr(value, "tolist") else value
        return [str(item).strip() for item in items if item is not None and str(item).strip()]
    return []

from __future__ import annotations

import json
from datetime import date, datetime
from pathlib import Path
from typing import Any, Mapping
from uuid import uuid4

import numpy as np
import pandas as pd

from src.normalize.schema import ScholarshipRecord, StudentProfile

SUPPORTED_SCHOLARSHIP_SUFFIXES = (".json", ".jsonl", ".csv", ".parquet")

SCHOLARSHIP_COLUMNS = [
    "scholarship_id",
    "title",
    "description",
    "amount",
    "deadline",
    "source",
    "application_url",
    "application_steps",
    "required_documents",
    "eligibility_rules",
]


def _jsonable(value: Any) -> Any:
    if value is None:
        return None
    if isinstance(value, (list, tuple)):
        return [_jsonable(item) for item in value]
    if isinstance(value, np.ndarray):
        return [_jsonable(item) for item in value.tolist()]
    if isinstance(value, Mapping):
        return {str(k): _jsonable(v) for k, v in value.items()}
    if isinstance(value, np.generic):
        return _jsonable(value.item())
    if isinstance(value, float) and pd.isna(value):
        return None
    if value is pd.NaT:
        return None
    if isinstance(value, pd.Timestamp):
        if value.tzinfo is not None:
            return value.tz_convert("UTC").isoformat()
        return value.isoformat()
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    return value


def _read_json_records(path: Path) -> list[dict[str, Any]]:
    if path.suffix == ".jsonl":
        lines = path.read_text(encoding="utf-8").splitlines()
        return [json.loads(line) for line in lines if line.strip()]

    payload = json.loads(path.read_text(encoding="utf-8"))
    if isinstance(payload, Mapping):
        payload = payload.get("scholarships")
    if not isinstance(payload, list):
        raise ValueError(
            f"Scholarship file '{path}' must contain a JSON array or an object with a 'scholarships' array."
        )
    return payload


def load_scholarships_df(path: Path) -> pd.DataFrame:
    if not path.exists():
        raise FileNotFoundError(f"Scholarship file '{path}' does not exist.")
    suffix = path.suffix.lower()
    if suffix not in SUPPORTED_SCHOLARSHIP_SUFFIXES:
        raise ValueError(
            f"Unsupported scholarship file type '{suffix}'. "
            f"Expected one of: {', '.join(SUPPORTED_SCHOLARSHIP_SUFFIXES)}."
        )

    if suffix == ".csv":
        df = pd.read_csv(path, dtype={"scholarship_id": str, "id": str})
    elif suffix == ".parquet":
        df = pd.read_parquet(path, engine="pyarrow")
    else:
        df = pd.DataFrame.from_records(_read_json_records(path))
    return prepare_scholarships_df(df)


def prepare_scholarships_df(records: pd.DataFrame) -> pd.DataFrame:
    df = records.copy()
    if "scholarship_id" not in df.columns and "id" in df.columns:
        df = df.rename(columns={"id": "scholarship_id"})
    for column in SCHOLARSHIP_COLUMNS:
        if column not in df.columns:
            df[column] = None
    df["scholarship_id"] = df["scholarship_id"].map(lambda value: None if pd.isna(value) else str(value))
    return df.reset_index(drop=True)


def scholarships_from_df(df: pd.DataFrame) -> list[ScholarshipRecord]:
    return [ScholarshipRecord.from_mapping(row.to_dict()) for _, row in df.iterrows()]


def load_profile(path: Path) -> StudentProfile:
    if not path.exists():
        raise FileNotFoundError(f"Profile file '{path}' does not exist.")
    payload = json.loads(path.read_text(encoding="utf-8"))
    if not isinstance(payload, Mapping):
        raise ValueError(f"Profile file '{path}' must contain a JSON object.")
    return StudentProfile.from_mapping(payload)


def records_to_jsonable(df: pd.DataFrame, columns: list[str] | None = None) -> list[dict[str, Any]]:
    selected = df if columns is None else df[[column for column in columns if column in df.columns]]
    return [_jsonable(record) for record in selected.to_dict(orient="records")]


def write_json_atomic(payload: Any, output_path: Path) -> None:
    output_path.parent.mkdir(parents=True, exist_ok=True)
    temp_path = output_path.parent / f"{output_path.name}.{uuid4().hex}.tmp"
    try:
        temp_path.write_text(
            json.dumps(_jsonable(payload), indent=2, sort_keys=True, ensure_ascii=False),
            encoding="utf-8",
        )
        temp_path.replace(output_path)
    finally:
        if temp_path.exists():
            temp_path.unlink()

from __future__ import annotations

import argparse
import logging
import sys
from datetime import date, datetime
from pathlib import Path
from typing import Any

ROOT_DIR = Path(__file__).resolve().parents[1]
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

from app.helpers import summarize_match_row
from src.io.match_sink import JsonMatchSink
from src.io.records import load_profile, load_scholarships_df, records_to_jsonable, write_json_atomic
from src.rank.pipeline import match_scholarships, persist_matches
from src.rank.weights import load_matching_config

logger = logging.getLogger("run_matching")

RESPONSE_COLUMNS = [
    "scholarship_id",
    "title",
    "description",
    "source",
    "amount",
    "deadline",
    "application_url",
    "match_score",
    "match_reasons",
]


def _parse_run_date(value: str) -> date:
    try:
        return datetime.strptime(value, "%Y-%m-%d").date()
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"expected YYYY-MM-DD, got '{value}'") from exc


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Match a student profile against a scholarship batch.")
    parser.add_argument("--profile", type=Path, required=True, help="Profile JSON file.")
    parser.add_argument(
        "--scholarships",
        type=Path,
        required=True,
        help="Scholarship batch (.json, .jsonl, .csv or .parquet).",
    )
    parser.add_argument("--output", type=Path, default=ROOT_DIR / "data" / "matches" / "matches.json")
    parser.add_argument(
        "--match-store",
        type=Path,
        default=None,
        help="JSON match store; the user's prior matches are replaced.",
    )
    parser.add_argument("--user-id", type=str, default=None, help="Overrides the profile's user id.")
    parser.add_argument(
        "--exclude",
        action="append",
        default=[],
        help="Scholarship id with an active application; repeatable.",
    )
    parser.add_argument("--config", type=Path, default=None, help="Matching config JSON file.")
    parser.add_argument(
        "--date",
        type=_parse_run_date,
        default=None,
        help="Evaluation date in YYYY-MM-DD format. Defaults to today.",
    )
    return parser.parse_args(argv)


def run_matching(
    *,
    profile_path: Path,
    scholarships_path: Path,
    output_path: Path,
    match_store_path: Path | None = None,
    user_id: str | None = None,
    exclude_ids: list[str] | None = None,
    config_path: Path | None = None,
    today: date | None = None,
) -> dict[str, Any]:
    effective_today = today or date.today()
    config = load_matching_config(config_path)
    profile = load_profile(profile_path)
    scholarships_df = load_scholarships_df(scholarships_path)

    result = match_scholarships(
        profile,
        scholarships_df,
        today=effective_today,
        exclude_ids=exclude_ids or [],
        config=config,
    )

    stored_records: list[dict[str, Any]] = []
    resolved_user_id = user_id or profile.user_id
    if match_store_path is not None:
        if not resolved_user_id:
            raise ValueError("Persisting matches requires a user id (profile 'id' or --user-id).")
        stored_records = persist_matches(
            result,
            resolved_user_id,
            JsonMatchSink(match_store_path),
            config=config,
        )

    top_df = result.top(config.response_match_limit)
    payload = {
        "run_date": effective_today.isoformat(),
        "user_id": resolved_user_id,
        "total_considered": result.total_considered,
        "total_eligible": result.total_eligible,
        "matches": records_to_jsonable(top_df, RESPONSE_COLUMNS),
        "stored_match_count": len(stored_records),
        "config": config.to_dict(),
    }
    write_json_atomic(payload, output_path)

    for _, row in top_df.iterrows():
        logger.info("%s", summarize_match_row(row, effective_today))
    return payload


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    try:
        payload = run_matching(
            profile_path=args.profile,
            scholarships_path=args.scholarships,
            output_path=args.output,
            match_store_path=args.match_store,
            user_id=args.user_id,
            exclude_ids=args.exclude,
            config_path=args.config,
            today=args.date,
        )
    except (FileNotFoundError, ValueError) as exc:
        logger.error("Matching failed: %s", exc)
        return 1

    print(f"Eligible scholarships: {payload['total_eligible']} of {payload['total_considered']}")
    print(f"Wrote matches: {args.output}")
    if args.match_store is not None:
        print(f"Stored {payload['stored_match_count']} matches in {args.match_store}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

ROOT_DIR = Path(__file__).resolve().parents[1]
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

from src.io.records import load_scholarships_df
from src.normalize.rules import rule_items
from src.rank.pipeline import similar_scholarships
from src.rank.weights import load_matching_config

logger = logging.getLogger("find_similar")


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="List scholarships similar to a given one.")
    parser.add_argument("scholarship_id", type=str)
    parser.add_argument(
        "--scholarships",
        type=Path,
        required=True,
        help="Scholarship batch (.json, .jsonl, .csv or .parquet).",
    )
    parser.add_argument("--limit", type=int, default=None)
    parser.add_argument("--config", type=Path, default=None, help="Matching config JSON file.")
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    try:
        config = load_matching_config(args.config)
        scholarships_df = load_scholarships_df(args.scholarships)
        similar_df = similar_scholarships(
            scholarships_df,
            args.scholarship_id,
            limit=args.limit,
            config=config,
        )
    except (FileNotFoundError, ValueError) as exc:
        logger.error("Similar-scholarship lookup failed: %s", exc)
        return 1

    if similar_df.empty:
        print("No other scholarships listed.")
        return 0

    for _, row in similar_df.iterrows():
        print(f"[{row['similarity_score']}] {row['scholarship_id']}: {row['title']}")
        for label, value in rule_items(row.get("eligibility_rules")):
            print(f"    {label}: {value}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())

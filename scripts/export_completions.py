#!/usr/bin/env python3
"""
export_completions.py - Export module completion records to CSV.

Reads module completions (and badges) from the learner database and writes
a flat CSV plus a per-module summary.

Usage:
  python scripts/export_completions.py
  python scripts/export_completions.py --db data/vark.db --output data/completions.csv
  python scripts/export_completions.py --module mod-photosynthesis
"""

import argparse
import logging
import sys
from pathlib import Path

PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

import pandas as pd

from varkmodules.classroom import SQLiteStore
from varkmodules.config import DEFAULT_DB_PATH, PASSING_SCORE
from varkmodules.schemas import BADGES_TABLE, COMPLETIONS_TABLE

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


COMPLETION_COLUMNS = [
    "student_id",
    "module_id",
    "completion_date",
    "final_score",
    "time_spent_minutes",
    "pre_test_score",
    "post_test_score",
    "sections_completed",
    "perfect_sections",
]


# -----------------------------------------------------------------------------
# Loading
# -----------------------------------------------------------------------------

def load_completions(store: SQLiteStore, module_id: str | None = None) -> pd.DataFrame:
    """Load completion records as a DataFrame, one row per learner and module."""
    match = {"module_id": module_id} if module_id else None
    records = store.select(COMPLETIONS_TABLE, match)
    df = pd.DataFrame(records, columns=COMPLETION_COLUMNS)
    return df.sort_values(["module_id", "completion_date"]).reset_index(drop=True)


def load_badges(store: SQLiteStore, module_id: str | None = None) -> pd.DataFrame:
    match = {"module_id": module_id} if module_id else None
    records = store.select(BADGES_TABLE, match)
    return pd.DataFrame(
        records, columns=["student_id", "module_id", "badge_type", "badge_name", "badge_rarity"]
    )


def attach_badges(completions: pd.DataFrame, badges: pd.DataFrame) -> pd.DataFrame:
    """Add the badge earned for each completion."""
    latest = badges.drop_duplicates(["student_id", "module_id"], keep="last")
    return completions.merge(
        latest[["student_id", "module_id", "badge_name", "badge_rarity"]],
        on=["student_id", "module_id"],
        how="left",
    )


# -----------------------------------------------------------------------------
# Summary
# -----------------------------------------------------------------------------

def summarize(completions: pd.DataFrame, passing_score: float = PASSING_SCORE) -> pd.DataFrame:
    """
    Per-module summary of completions.

    Returns:
        DataFrame indexed by module_id with learner count, average and best
        score, pass rate and average time
    """
    if completions.empty:
        return pd.DataFrame(
            columns=["learners", "average_score", "best_score", "pass_rate", "average_minutes"]
        )

    scores = pd.to_numeric(completions["final_score"], errors="coerce").fillna(0)
    minutes = pd.to_numeric(completions["time_spent_minutes"], errors="coerce").fillna(0)
    frame = completions.assign(
        final_score=scores,
        time_spent_minutes=minutes,
        passed=scores >= passing_score,
    )

    grouped = frame.groupby("module_id")
    summary = pd.DataFrame({
        "learners": grouped["student_id"].nunique(),
        "average_score": grouped["final_score"].mean().round(1),
        "best_score": grouped["final_score"].max(),
        "pass_rate": (grouped["passed"].mean() * 100).round(1),
        "average_minutes": grouped["time_spent_minutes"].mean().round(1),
    })
    return summary


# -----------------------------------------------------------------------------
# Main
# -----------------------------------------------------------------------------

def main():
    parser = argparse.ArgumentParser(
        description="Export module completion records to CSV",
        formatter_class=argparse.RawDescriptionHelpFormatter
    )
    parser.add_argument(
        "--db",
        type=Path,
        default=DEFAULT_DB_PATH,
        help="Path to learner database"
    )
    parser.add_argument(
        "--output",
        type=Path,
        default=PROJECT_ROOT / "data" / "completions.csv",
        help="Output CSV path"
    )
    parser.add_argument(
        "--module",
        default=None,
        help="Only export completions for this module id"
    )
    parser.add_argument(
        "--passing-score",
        type=float,
        default=PASSING_SCORE,
        help="Score counted as passing in the summary"
    )

    args = parser.parse_args()

    if not args.db.exists():
        logger.error(f"Database not found: {args.db}")
        sys.exit(1)

    store = SQLiteStore(args.db)

    logger.info("Loading completions...")
    completions = load_completions(store, args.module)
    logger.info(f"  Loaded {len(completions)} completions")

    badges = load_badges(store, args.module)
    logger.info(f"  Loaded {len(badges)} badges")

    export = attach_badges(completions, badges)

    args.output.parent.mkdir(parents=True, exist_ok=True)
    export.to_csv(args.output, index=False)
    logger.info(f"Saved completions to: {args.output}")

    summary = summarize(completions, args.passing_score)
    summary_path = args.output.with_name(args.output.stem + "_summary.csv")
    summary.to_csv(summary_path)
    logger.info(f"Saved summary to: {summary_path}")

    logger.info("\n" + "=" * 50)
    logger.info("EXPORT COMPLETE")
    logger.info("=" * 50)
    for module_id, row in summary.iterrows():
        logger.info(
            f"{module_id}: {row['learners']} learners, avg {row['average_score']}%, "
            f"pass rate {row['pass_rate']}%"
        )


if __name__ == "__main__":
    main()

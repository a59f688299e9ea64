"""
Learner and module statistics computed from persisted records.
"""

from typing import Any

from varkmodules.config import PASSING_SCORE
from varkmodules.schemas import BADGES_TABLE, COMPLETIONS_TABLE

from .store import PersistenceService


RECENT_LIMIT = 5


def _newest_first(records: list[dict], date_field: str) -> list[dict]:
    return sorted(records, key=lambda r: r.get(date_field) or "", reverse=True)


def get_learner_stats(store: PersistenceService, learner_id: str) -> dict[str, Any]:
    """
    Summary of one learner's completed modules and badges.

    Returns:
        Dictionary with totals, average score and the most recent
        completions and badges
    """
    completions = _newest_first(
        store.select(COMPLETIONS_TABLE, {"student_id": learner_id}), "completion_date"
    )
    badges = _newest_first(
        store.select(BADGES_TABLE, {"student_id": learner_id}), "earned_date"
    )

    scores = [c.get("final_score") or 0 for c in completions]
    average = round(sum(scores) / len(scores)) if scores else 0

    return {
        "total_modules_completed": len(completions),
        "average_score": average,
        "total_time_spent": sum(c.get("time_spent_minutes") or 0 for c in completions),
        "total_badges": len(badges),
        "recent_completions": completions[:RECENT_LIMIT],
        "recent_badges": badges[:RECENT_LIMIT],
    }


def get_module_stats(
    store: PersistenceService,
    module_id: str,
    passing_score: float = PASSING_SCORE,
) -> dict[str, Any]:
    """Completion count, average score and pass rate for one module."""
    completions = store.select(COMPLETIONS_TABLE, {"module_id": module_id})
    scores = [c.get("final_score") or 0 for c in completions]
    passed = sum(1 for s in scores if s >= passing_score)

    return {
        "module_id": module_id,
        "completions": len(completions),
        "average_score": round(sum(scores) / len(scores)) if scores else 0,
        "pass_rate": round(passed / len(scores) * 100, 1) if scores else 0,
        "average_time_minutes": (
            round(sum(c.get("time_spent_minutes") or 0 for c in completions) / len(completions))
            if completions else 0
        ),
    }

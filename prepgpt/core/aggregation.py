"""Rolls per-answer results up into an interview report and practice plan."""
from typing import Iterable, List, Optional, Sequence

from prepgpt.core.evaluator import STRONG_SCORE
from prepgpt.core.models import CalibratedResult, HistoryEntry, InterviewReport, round_half_up

PLAN_SIZE = 3

OVERALL_STRONG = "Solid overall performance. Keep answers concise and evidence-backed."
OVERALL_WEAK = "Your interview needs stronger structure and measurable impact in each response."
OVERALL_MODEL_DEFAULT = "Interview analysis generated successfully."
PLAN_DEFAULT = "Continue regular practice with timed simulations and concise STAR answers."


def overall_score(results: Sequence[CalibratedResult]) -> int:
    if not results:
        return 0
    return round_half_up(sum(result.score for result in results) / len(results))


def local_overall_feedback(score: int) -> str:
    return OVERALL_STRONG if score >= STRONG_SCORE else OVERALL_WEAK


def next_step_plan(results: Iterable[CalibratedResult]) -> str:
    """Name the categories of the weakest answers as drill targets.

    Strong answers are not weaknesses, so they never appear in the plan.
    """
    weakest = sorted(
        (result for result in results if result.score < STRONG_SCORE),
        key=lambda result: result.score,
    )[:PLAN_SIZE]
    categories: List[str] = []
    for result in weakest:
        if result.category not in categories:
            categories.append(result.category)
    if not categories:
        return PLAN_DEFAULT
    return (
        f"Next-step plan: run 2 focused drills on {', '.join(categories)} "
        "and include one metric + one trade-off in every answer."
    )


def build_report(
    results: Sequence[CalibratedResult],
    overall_feedback: Optional[str] = None,
    source: str = "fallback",
    warning: Optional[str] = None,
) -> InterviewReport:
    score = overall_score(results)
    if source == "fallback":
        feedback = local_overall_feedback(score)
    else:
        feedback = overall_feedback or OVERALL_MODEL_DEFAULT
    return InterviewReport(
        overall_score=score,
        overall_feedback=feedback,
        next_step_plan=next_step_plan(results),
        results=tuple(results),
        source=source,
        warning=warning,
    )


def push_history(history: Sequence[HistoryEntry], entry: HistoryEntry, limit: int) -> List[HistoryEntry]:
    """Prepend ``entry`` and keep only the ``limit`` most recent entries."""
    return [entry, *history][:limit]

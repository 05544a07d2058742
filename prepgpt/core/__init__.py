"""Deterministic interview scoring core: no I/O, no model calls."""
from prepgpt.core.aggregation import build_report, next_step_plan, overall_score, push_history
from prepgpt.core.calibration import CalibrationWeights, calibrate, from_local
from prepgpt.core.coaching import coaching_hints
from prepgpt.core.evaluator import evaluate_transcript
from prepgpt.core.followups import FOLLOW_UP_LIMIT, FollowUpOutcome, FollowUpPolicy, FollowUpResult
from prepgpt.core.language import NormalizationOutcome, NormalizationResult, normalize_questions, resolve_language
from prepgpt.core.models import (
    CATEGORIES,
    Answer,
    CalibratedResult,
    EvaluationResult,
    Highlights,
    HistoryEntry,
    InterviewReport,
    Question,
)
from prepgpt.core.patterns import PatternLibrary
from prepgpt.core.session import InterviewSession

__all__ = [
    "CATEGORIES",
    "Answer",
    "CalibratedResult",
    "CalibrationWeights",
    "EvaluationResult",
    "FOLLOW_UP_LIMIT",
    "FollowUpOutcome",
    "FollowUpPolicy",
    "FollowUpResult",
    "Highlights",
    "HistoryEntry",
    "InterviewReport",
    "InterviewSession",
    "NormalizationOutcome",
    "NormalizationResult",
    "PatternLibrary",
    "Question",
    "build_report",
    "calibrate",
    "coaching_hints",
    "evaluate_transcript",
    "from_local",
    "next_step_plan",
    "normalize_questions",
    "overall_score",
    "push_history",
    "resolve_language",
]

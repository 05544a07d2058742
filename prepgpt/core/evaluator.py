"""Local rubric evaluator for interview answer transcripts.

The evaluator never calls a model. It scores a transcript against five
STAR-oriented dimensions, clamps the total, and explains the result so the
score can stand on its own or be blended with a model score.
"""
from typing import List, Optional

from prepgpt.core.models import (
    RUBRIC_CAPS,
    EvaluationResult,
    clamp_score,
    round_half_up,
)
from prepgpt.core.patterns import PatternLibrary, default_patterns, word_count

SHORT_ANSWER_WORDS = 35
LONG_ANSWER_WORDS = 260
DETAIL_TIP_WORDS = 50
FILLER_TIP_THRESHOLD = 3

STRONG_SCORE = 75
WEAK_SCORE = 50

TIP_CONTEXT = "Open with situation + goal so the interviewer has context."
TIP_ACTION = "Emphasize specific actions you personally took, not just team outcomes."
TIP_RESULT = "Close with outcomes and what changed because of your work."
TIP_METRIC = "Add concrete metrics (%, time saved, quality improvements) to strengthen credibility."
TIP_DETAIL = "Expand your answer with more detail and structure (STAR format)."
TIP_FILLER = "Reduce filler words to improve confidence and executive presence."
TIP_POSITIVE = "Strong baseline. Tighten pacing and keep impact statements crisp."

FEEDBACK_STRONG = "Strong answer with good structure and clear impact. Tighten phrasing for maximum confidence."
FEEDBACK_WEAK = "Answer needs more structure and specificity. Use STAR and add measurable outcomes."
FEEDBACK_BASELINE = "Good baseline answer, but there is room to improve structure and impact clarity."


def feedback_for_score(score: int) -> str:
    if score >= STRONG_SCORE:
        return FEEDBACK_STRONG
    if score < WEAK_SCORE:
        return FEEDBACK_WEAK
    return FEEDBACK_BASELINE


def explain_breakdown(breakdown: dict) -> str:
    return (
        f"Score reflects STAR structure ({breakdown['StructureSTAR']}/{RUBRIC_CAPS['StructureSTAR']}), "
        f"ownership/actions ({breakdown['OwnershipAndAction']}/{RUBRIC_CAPS['OwnershipAndAction']}), "
        f"outcomes ({breakdown['ResultsAndImpact']}/{RUBRIC_CAPS['ResultsAndImpact']}), "
        f"metrics ({breakdown['MetricsSpecificity']}/{RUBRIC_CAPS['MetricsSpecificity']}), "
        f"and clarity ({breakdown['ClarityAndConciseness']}/{RUBRIC_CAPS['ClarityAndConciseness']})."
    )


def evaluate_transcript(transcript: Optional[str], patterns: PatternLibrary = default_patterns) -> EvaluationResult:
    """Score one transcript against the rubric.

    Args:
        transcript: Answer text. ``None`` and blank strings are scored as empty.
        patterns: Detector implementation to use.

    Returns:
        An immutable :class:`EvaluationResult` with a score in [18, 94].
    """
    text = (transcript or "").strip()
    words = word_count(text)

    has_situation = patterns.has_situation(text)
    has_task = patterns.has_task(text)
    has_action = patterns.has_action(text)
    has_result = patterns.has_result(text)
    has_metric = patterns.has_metric(text)
    fillers = patterns.filler_count(text)

    clarity = max(6, 20 - min(10, fillers * 2))
    if words < SHORT_ANSWER_WORDS:
        clarity -= 6
    if words > LONG_ANSWER_WORDS:
        clarity -= 4

    if words == 0:
        # Nothing was said, so no dimension earns its baseline points.
        breakdown = {name: 0 for name in RUBRIC_CAPS}
    else:
        breakdown = {
            "StructureSTAR": (12 if has_situation else 4) + (8 if has_task else 2),
            "OwnershipAndAction": 22 if has_action else 8,
            "ResultsAndImpact": 22 if has_result else 8,
            "MetricsSpecificity": 18 if has_metric else 4,
            "ClarityAndConciseness": clarity,
        }
    score = clamp_score(round_half_up(sum(breakdown.values())))

    tips: List[str] = []
    if not has_situation or not has_task:
        tips.append(TIP_CONTEXT)
    if not has_action:
        tips.append(TIP_ACTION)
    if not has_result:
        tips.append(TIP_RESULT)
    if not has_metric:
        tips.append(TIP_METRIC)
    if words < DETAIL_TIP_WORDS:
        tips.append(TIP_DETAIL)
    if fillers > FILLER_TIP_THRESHOLD:
        tips.append(TIP_FILLER)
    if not tips:
        tips.append(TIP_POSITIVE)

    return EvaluationResult(
        score=score,
        feedback=feedback_for_score(score),
        improvement_tips=tuple(tips),
        rubric_breakdown=breakdown,
        score_explanation=explain_breakdown(breakdown),
        highlights=patterns.highlights(text),
    )
